# standard library
import logging

# third parties
from fastapi import APIRouter, Depends

# Academy
from academy.domain import PersonDto, PersonNotFound

# relative
from ..dependencies import Dependencies, dependenciesFactory
from ..exceptions import HttpResponseException

router = APIRouter(prefix="/people", tags=["people"])
logger = logging.getLogger(__name__)


@router.get("/{name}", summary="retrieve a person from its name")
async def get_people_by_name(
    name: str, deps: Dependencies = Depends(dependenciesFactory)
) -> PersonDto:
    try:
        return await deps.people_service.get_people_by_name(name)
    except PersonNotFound as e:
        raise HttpResponseException(
            status_code=404, title="Person not found", detail=str(e)
        ) from e
    except Exception as e:
        logger.error("Error in GetPeopleByName", exc_info=e)
        raise HttpResponseException(
            status_code=500,
            title="Failed get",
            detail="Getting details for the specified user has failed",
        ) from e
