import json
from typing import Optional, Sequence

from src.application.context import render_context
from src.application.ports import GenerationRequest
from src.domain.models import Answer, MedicalContextSnapshot
from src.domain.rules import DISEASE_COUNT, OPTION_COUNT, QUESTION_COUNT


QUESTIONNAIRE_SYSTEM_PROMPT = "You output JSON only. Any explanatory text is forbidden."

DIAGNOSIS_SYSTEM_PROMPT = (
    "You output JSON only. Any explanatory text is forbidden. "
    "The output structure must match the example exactly. "
    "The probabilities of the two diseases must add up to exactly 100."
)

QUESTIONNAIRE_EXAMPLE = {
    "questions": [
        {
            "id": "q1",
            "text": "Text of the first question, fully detailed",
            "options": [
                {"id": "a", "text": "Option A (precise and specific)"},
                {"id": "b", "text": "Option B (precise and specific)"},
                {"id": "c", "text": "Option C (precise and specific)"},
                {"id": "d", "text": "Option D (precise and specific)"},
            ],
        }
    ]
}

DIAGNOSIS_EXAMPLE = {
    "summary": "Summary of the patient's condition for a physician",
    "probableDiseases": [
        {"name": "First disease", "probability": 75, "rationale": "Why this disease is likely for this patient"},
        {"name": "Second disease", "probability": 25, "rationale": "Why this disease is likely for this patient"},
    ],
    "recommendedSpecialists": ["Cardiologist", "Gastroenterologist"],
    "medicalRecommendations": ["CBC blood test", "Abdominal ultrasound"],
    "urgencyLevel": "high/moderate/low",
    "details": "Detailed clinical explanation of the assessment",
}


def _questionnaire_rules() -> str:
    rules = [
        "Questions must be fully relevant to the symptoms and the patient's medical conditions",
        f"Every question must have exactly {OPTION_COUNT} precise, specialised options",
        "Use precise medical terminology",
        "Questions must help narrow down the diagnosis",
        "Questions must be specific and sufficiently detailed",
        "Options must cover the full range of possibilities",
        f"Return exactly {QUESTION_COUNT} questions",
        "The output must be a single JSON object only",
    ]
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, 1))


def _diagnosis_rules() -> str:
    rules = [
        f"Name exactly {DISEASE_COUNT} probable diseases with a probability percentage (the probabilities must add up to exactly 100)",
        "Justify each disease with scientific reasoning tied to the patient's information",
        "List the medical specialties needed for follow-up",
        "Write a professional summary to hand to a physician",
        "Give precise diagnostic and treatment recommendations",
        "Set the urgency of the situation to one of: high, moderate, low",
        "The output must be a single JSON object only",
        "Use the patient's medical information and questionnaire answers carefully",
        "Use precise, specialised medical terminology",
        "Every field of the example is required: summary, probableDiseases, recommendedSpecialists, "
        "medicalRecommendations, urgencyLevel, details",
    ]
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, 1))


def render_answers(answers: Sequence[Answer]) -> str:
    return "\n".join(f"- Question {a.question_id}: {a.answer_id}" for a in answers)


def build_questionnaire_prompt(symptoms: str, snapshot: MedicalContextSnapshot) -> str:
    return (
        "You are an intelligent medical assistant. Based on the patient's medical information and "
        f"reported symptoms, create a detailed {QUESTION_COUNT}-question multiple-choice questionnaire "
        f"with {OPTION_COUNT} options per question.\n\n"
        "### Important instructions:\n"
        f"{_questionnaire_rules()}\n\n"
        "### Required output structure "
        f"(the example shows one question; return {QUESTION_COUNT}):\n"
        f"{json.dumps(QUESTIONNAIRE_EXAMPLE, indent=2)}\n\n"
        f"{render_context(snapshot)}\n\n"
        "### Symptoms reported by the patient:\n"
        f"{symptoms}"
    )


def build_diagnosis_prompt(symptoms: str, answers: Sequence[Answer], snapshot: MedicalContextSnapshot) -> str:
    return (
        "You are a specialist physician with 20 years of experience. Based on the patient's medical "
        "information, reported symptoms and questionnaire answers, provide a thorough and precise "
        "medical analysis.\n\n"
        "### Analysis instructions (mandatory):\n"
        f"{_diagnosis_rules()}\n\n"
        "### Required output structure (mandatory):\n"
        f"{json.dumps(DIAGNOSIS_EXAMPLE, indent=2)}\n\n"
        f"{render_context(snapshot)}\n\n"
        "### Main symptoms reported by the patient:\n"
        f"{symptoms}\n\n"
        "### Patient answers to the questionnaire:\n"
        f"{render_answers(answers)}"
    )


def compose_questionnaire_request(
    symptoms: str,
    snapshot: MedicalContextSnapshot,
    model: Optional[str] = None,
    temperature: float = 0.2,
    max_tokens: int = 2500,
) -> GenerationRequest:
    return GenerationRequest(
        model=model,
        messages=[
            {"role": "system", "content": QUESTIONNAIRE_SYSTEM_PROMPT},
            {"role": "user", "content": build_questionnaire_prompt(symptoms, snapshot)},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
    )


def compose_diagnosis_request(
    symptoms: str,
    answers: Sequence[Answer],
    snapshot: MedicalContextSnapshot,
    model: Optional[str] = None,
    temperature: float = 0.1,
    max_tokens: int = 3500,
    top_p: float = 0.3,
    frequency_penalty: float = 0.5,
    presence_penalty: float = 0.5,
) -> GenerationRequest:
    return GenerationRequest(
        model=model,
        messages=[
            {"role": "system", "content": DIAGNOSIS_SYSTEM_PROMPT},
            {"role": "user", "content": build_diagnosis_prompt(symptoms, answers, snapshot)},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
        top_p=top_p,
        frequency_penalty=frequency_penalty,
        presence_penalty=presence_penalty,
    )
