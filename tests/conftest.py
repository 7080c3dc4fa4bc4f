import json
from datetime import date

import pytest

from src.domain.models import MedicalRecord, NamedEntry, Profile
from src.infrastructure.storage.memory_store import InMemoryMedicalStore


class DummyLLM:
    """Returns fixed text and records every request it receives."""

    def __init__(self, raw: str):
        self.raw = raw
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        return self.raw


def build_questionnaire(questions: int = 10, options: int = 4) -> dict:
    return {
        "questions": [
            {
                "id": f"q{i}",
                "text": f"Question {i}?",
                "options": [{"id": letter, "text": f"Option {letter}"} for letter in "abcdefgh"[:options]],
            }
            for i in range(1, questions + 1)
        ]
    }


def build_diagnosis(p1=70, p2=30, urgency="high", **overrides) -> dict:
    data = {
        "summary": "Likely upper respiratory infection.",
        "probableDiseases": [
            {"name": "Acute bronchitis", "probability": p1, "rationale": "Productive cough after a cold"},
            {"name": "Community-acquired pneumonia", "probability": p2, "rationale": "Fever with cough"},
        ],
        "recommendedSpecialists": ["Pulmonologist"],
        "medicalRecommendations": ["Chest X-ray", "CBC blood test"],
        "urgencyLevel": urgency,
        "details": "Symptoms began three days ago.",
    }
    data.update(overrides)
    return data


@pytest.fixture
def questionnaire_payload():
    return build_questionnaire


@pytest.fixture
def diagnosis_payload():
    return build_diagnosis


@pytest.fixture
def dummy_llm():
    def factory(data) -> DummyLLM:
        return DummyLLM(data if isinstance(data, str) else json.dumps(data))
    return factory


@pytest.fixture
def answers():
    return [{"questionId": f"q{i}", "answerId": "a"} for i in range(1, 11)]


@pytest.fixture
def store():
    return InMemoryMedicalStore(
        records={
            "alice": MedicalRecord(
                height=165,
                weight=60,
                blood_type="A+",
                conditions=[NamedEntry(name="Hypertension", severity="mild")],
                allergies=[NamedEntry(name="Peanuts")],
                medications=[NamedEntry(name="Lisinopril", dosage="10mg")],
            ),
            "bob": MedicalRecord(height=180, weight=90, blood_type="B-"),
        },
        profiles={
            "alice": Profile(gender="female", date_of_birth=date(1990, 1, 1)),
            "bob": Profile(gender="male", date_of_birth=date(1970, 6, 15)),
        },
    )
