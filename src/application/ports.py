from typing import List, Optional, Protocol

from pydantic import BaseModel

from src.domain.models import MedicalRecord, Profile


class GenerationRequest(BaseModel):
    """Everything the generation service needs for a single call."""

    messages: List[dict]
    model: Optional[str] = None
    temperature: float
    max_tokens: int
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    json_output: bool = True


class LLMPort(Protocol):
    async def generate(self, request: GenerationRequest) -> str:
        """
        Sends the request and returns the raw text of the reply. Raises
        UpstreamServiceError when the service fails or cannot be reached.
        """
        ...


class MedicalRecordStorePort(Protocol):
    async def find_medical_record(self, subject_id: str) -> Optional[MedicalRecord]:
        ...


class ProfileStorePort(Protocol):
    async def find_profile(self, subject_id: str) -> Optional[Profile]:
        ...
