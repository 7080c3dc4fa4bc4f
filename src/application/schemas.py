from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel


class SuccessEnvelope(BaseModel):
    status: Literal["success"] = "success"
    data: Dict[str, Any]


class FailureEnvelope(BaseModel):
    status: Literal["fail", "error"]
    message: str
    code: Optional[int] = None
    errorCode: Optional[str] = None
    timestamp: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class StageResponse(BaseModel):
    """A response body and the HTTP-style status code that goes with it."""

    status_code: int
    body: SuccessEnvelope | FailureEnvelope

    @property
    def ok(self) -> bool:
        return isinstance(self.body, SuccessEnvelope)

    def to_json(self) -> Dict[str, Any]:
        # Success data is passed through as-is, nulls included.
        if self.ok:
            return self.body.model_dump()
        return self.body.model_dump(exclude_none=True)
