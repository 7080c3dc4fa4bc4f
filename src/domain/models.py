import math
from datetime import date
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


BloodType = Literal["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


class NamedEntry(BaseModel):
    """A condition, allergy or medication. Only the name reaches the prompt."""

    model_config = ConfigDict(extra="allow")

    name: str


class MedicalRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    height: Optional[float] = Field(None, ge=50, le=250, description="Centimetres")
    weight: Optional[float] = Field(None, ge=2, le=300, description="Kilograms")
    blood_type: Optional[BloodType] = None
    conditions: List[NamedEntry] = []
    allergies: List[NamedEntry] = []
    medications: List[NamedEntry] = []

    @property
    def bmi(self) -> Optional[float]:
        if self.height and self.weight:
            h = self.height / 100
            return round(self.weight / (h * h), 1)
        return None


class Profile(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    gender: Optional[Literal["male", "female"]] = None

    def age_on(self, today: date) -> Optional[int]:
        if not self.date_of_birth:
            return None
        return math.floor((today - self.date_of_birth).days / 365.25)


class MedicalContextSnapshot(BaseModel):
    """Read-only view of a subject's data, assembled fresh for each request."""

    model_config = ConfigDict(frozen=True)

    age: Optional[int] = None
    gender: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    bmi: Optional[float] = None
    blood_type: Optional[str] = None
    conditions: List[str] = []
    allergies: List[str] = []
    medications: List[str] = []


class Option(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class Question(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    options: List[Option] = Field(..., min_length=4, max_length=4)


class Questionnaire(BaseModel):
    model_config = ConfigDict(extra="allow")

    questions: List[Question] = Field(..., min_length=10, max_length=10)


class Answer(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question_id: str
    answer_id: str


class UrgencyLevel(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class DiseaseCandidate(BaseModel):
    """Only the probability is constrained; name, rationale and anything else
    the service returns are carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    probability: Union[int, float] = Field(..., ge=1, le=100)


class DiagnosisReport(BaseModel):
    """Generated content is carried as produced; only the probabilities and
    the urgency level are constrained.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    summary: Any
    probable_diseases: List[DiseaseCandidate] = Field(..., min_length=2, max_length=2)
    recommended_specialists: Any
    medical_recommendations: Any
    urgency_level: UrgencyLevel
    details: Any
