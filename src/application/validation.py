"""Turn raw generation output into guaranteed-shape results.

Parsing, shape checks and the numeric/enum repairs are kept as separate
steps so each one can be exercised without a generation service.
"""
import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from src.domain.errors import UpstreamMalformedOutput, UpstreamSchemaViolation
from src.domain.models import DiagnosisReport, Questionnaire
from src.domain.rules import (
    DIAGNOSIS_REQUIRED_FIELDS,
    DISEASE_COUNT,
    OPTION_COUNT,
    QUESTION_COUNT,
    repair_diagnosis,
)


logger = logging.getLogger(__name__)


def parse_output(raw: Any) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("AI output is not valid JSON: %s. Raw: %s", e, str(raw)[:200])
        raise UpstreamMalformedOutput() from e
    if not isinstance(data, dict):
        logger.warning("AI output is JSON but not an object. Raw: %s", str(raw)[:200])
        raise UpstreamMalformedOutput()
    return data


def _has_id_and_text(entry: Any) -> bool:
    return isinstance(entry, dict) and bool(entry.get("id")) and bool(entry.get("text"))


def validate_questionnaire(data: Dict[str, Any]) -> Questionnaire:
    questions = data.get("questions")
    if not isinstance(questions, list) or len(questions) != QUESTION_COUNT:
        raise UpstreamSchemaViolation("The AI response is invalid.")

    for question in questions:
        options = question.get("options") if isinstance(question, dict) else None
        if (
            not _has_id_and_text(question)
            or not isinstance(options, list)
            or len(options) != OPTION_COUNT
            or not all(_has_id_and_text(o) for o in options)
        ):
            raise UpstreamSchemaViolation("The questionnaire structure is invalid.")

    try:
        return Questionnaire.model_validate({"questions": questions})
    except ValidationError as e:
        logger.warning("Questionnaire failed model validation: %s", e)
        raise UpstreamSchemaViolation("The questionnaire structure is invalid.") from e


def validate_diagnosis(data: Dict[str, Any]) -> DiagnosisReport:
    missing = [field for field in DIAGNOSIS_REQUIRED_FIELDS if field not in data]
    if missing:
        raise UpstreamSchemaViolation(
            "The AI response structure is invalid. Required fields are missing.",
            details={"missing": missing},
        )

    diseases = data["probableDiseases"]
    if not isinstance(diseases, list) or len(diseases) != DISEASE_COUNT:
        raise UpstreamSchemaViolation(
            f"The probable diseases are invalid. There must be exactly {DISEASE_COUNT} diseases."
        )

    repaired = repair_diagnosis(data)
    if repaired != data:
        logger.info(
            "Repaired diagnosis output: probabilities %s -> %s, urgency %r -> %r",
            [d.get("probability") for d in diseases],
            [d["probability"] for d in repaired["probableDiseases"]],
            data.get("urgencyLevel"),
            repaired["urgencyLevel"],
        )

    try:
        return DiagnosisReport.model_validate(repaired)
    except ValidationError as e:
        logger.warning("Diagnosis failed model validation: %s", e)
        raise UpstreamSchemaViolation("The AI response structure is invalid.") from e
