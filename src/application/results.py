from typing import Awaitable

from pydantic import BaseModel

from src.application.schemas import FailureEnvelope, StageResponse, SuccessEnvelope
from src.domain.errors import OperationalError


GENERIC_FAILURE_MESSAGE = "Something went wrong! Please try again later."


def assemble_success(result: BaseModel) -> StageResponse:
    data = result.model_dump(mode="json", by_alias=True)
    return StageResponse(status_code=200, body=SuccessEnvelope(data=data))


def assemble_failure(error: Exception, debug: bool = False) -> StageResponse:
    """Build the failure response for an error raised by a stage.

    Operational errors keep their message and status code. Anything else
    becomes a generic 500 so internals never reach the caller, unless
    ``debug`` is set.
    """
    if isinstance(error, OperationalError):
        return StageResponse(status_code=error.status_code, body=FailureEnvelope(**error.to_response(debug=debug)))

    body = FailureEnvelope(status="error", message=GENERIC_FAILURE_MESSAGE)
    if debug:
        body.code = 500
        body.errorCode = "E_UNEXPECTED_ERROR"
        body.details = {"type": type(error).__name__, "error": str(error)}
    return StageResponse(status_code=500, body=body)


async def run_stage(stage: Awaitable[BaseModel], debug: bool = False) -> StageResponse:
    # Only operational errors are packaged; anything else is left to the caller.
    try:
        result = await stage
    except OperationalError as e:
        return assemble_failure(e, debug=debug)
    return assemble_success(result)
