# standard library
import logging

# third parties
from fastapi import APIRouter, Depends, Query
from starlette.responses import Response

# Academy
from academy.domain import ExampleDto, InvalidOperationError

# relative
from ..dependencies import Dependencies, dependenciesFactory
from ..exceptions import HttpResponseException

router = APIRouter(prefix="/example", tags=["example"])
logger = logging.getLogger(__name__)


@router.get("/get_method/{example_id}", summary="retrieve an example")
async def get_example(
    example_id: int, deps: Dependencies = Depends(dependenciesFactory)
) -> ExampleDto:
    """
    Retrieve an example from its id.

    Parameters:
        example_id: ID of the example, strictly positive.
        deps: Dependencies of the application.

    Return:
        The example.
    """
    if example_id <= 0:
        raise HttpResponseException(
            status_code=400,
            title="Bad example id",
            detail="exampleId should be a positive integer",
        )
    try:
        example = await deps.example_service.get_example(example_id)
    except Exception as e:
        logger.error("Error in get example", exc_info=e)
        raise HttpResponseException(
            status_code=500, title="Failed get", detail="Error message for users"
        ) from e

    if example is None:
        raise HttpResponseException(
            status_code=404,
            title="Example not found",
            detail=f"No example with id {example_id}",
        )
    return example


@router.get("/by_name", summary="retrieve the examples whose name starts with a prefix")
async def get_examples_by_name(
    name: str = Query(...), deps: Dependencies = Depends(dependenciesFactory)
) -> list[ExampleDto]:
    try:
        return await deps.example_service.get_examples_by_name(name)
    except Exception as e:
        logger.error("Error in get examples by name", exc_info=e)
        raise HttpResponseException(
            status_code=500, title="Failed get", detail="Error message for users"
        ) from e


@router.delete("/del_method", status_code=204, summary="delete an example")
async def delete_example(
    example: ExampleDto, deps: Dependencies = Depends(dependenciesFactory)
) -> Response:
    """
    Delete an example, nothing happens if it does not exist.

    Parameters:
        example: The example, only its id is used.
        deps: Dependencies of the application.
    """
    try:
        await deps.example_service.delete_example(example)
    except InvalidOperationError as e:
        logger.error("Invalid Operation Exception", exc_info=e)
        raise HttpResponseException(
            status_code=400,
            title="Example can not be deleted",
            detail="Is not possible to delete example",
        ) from e
    return Response(status_code=204)
