# third parties
from fastapi import APIRouter

# relative
from .example import router as example_router
from .people import router as people_router

router = APIRouter()
router.include_router(example_router)
router.include_router(people_router)
