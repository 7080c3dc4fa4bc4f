import copy
import math
from numbers import Real
from typing import Any, Dict, List, Sequence

from .errors import InputValidationError, UpstreamSchemaViolation
from .models import Answer, UrgencyLevel


MIN_SYMPTOMS_LENGTH = 10
QUESTION_COUNT = 10
OPTION_COUNT = 4
ANSWER_COUNT = QUESTION_COUNT
DISEASE_COUNT = 2
PROBABILITY_MIN = 1
PROBABILITY_MAX = 100
PROBABILITY_TOTAL = 100
# Sums within this distance of the total are left as the model produced them.
PROBABILITY_TOLERANCE = 5
DEFAULT_URGENCY = UrgencyLevel.MODERATE

DIAGNOSIS_REQUIRED_FIELDS = (
    "summary",
    "probableDiseases",
    "recommendedSpecialists",
    "medicalRecommendations",
    "urgencyLevel",
    "details",
)


def validate_symptoms(symptoms: Any, message: str = "Please describe your symptoms accurately and completely (at least 10 characters).") -> str:
    # Character count of the trimmed text, not a word count.
    if not isinstance(symptoms, str) or len(symptoms.strip()) < MIN_SYMPTOMS_LENGTH:
        raise InputValidationError(message)
    return symptoms


def _is_scalar_id(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def validate_answers(answers: Any) -> List[Answer]:
    if not isinstance(answers, (list, tuple)) or len(answers) != ANSWER_COUNT:
        raise InputValidationError(f"Submitted answers are invalid: exactly {ANSWER_COUNT} answers are required.")
    parsed: List[Answer] = []
    for item in answers:
        if isinstance(item, Answer):
            parsed.append(item)
            continue
        if not isinstance(item, dict) or not _is_scalar_id(item.get("questionId")) or not _is_scalar_id(item.get("answerId")):
            raise InputValidationError("Submitted answers are invalid: each answer needs a questionId and an answerId.")
        parsed.append(Answer(question_id=str(item["questionId"]), answer_id=str(item["answerId"])))
    return parsed


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def rescale_probabilities(probabilities: Sequence[Any]) -> List[Any]:
    """Check a pair of disease probabilities and bring their sum back to 100.

    Non-numeric or out-of-range values are rejected. A pair whose sum is
    more than ``PROBABILITY_TOLERANCE`` away from 100 is rescaled so the
    first value is rounded and the second takes the remainder; otherwise
    the pair is returned unchanged.
    """
    values = list(probabilities)
    if len(values) != DISEASE_COUNT:
        raise UpstreamSchemaViolation(f"Exactly {DISEASE_COUNT} probable diseases are required.")
    if not all(_is_number(v) for v in values):
        raise UpstreamSchemaViolation("Probability values must be numbers.")
    if any(v < PROBABILITY_MIN or v > PROBABILITY_MAX for v in values):
        raise UpstreamSchemaViolation(f"Probability values must be between {PROBABILITY_MIN} and {PROBABILITY_MAX}.")

    total = sum(values)
    if abs(total - PROBABILITY_TOTAL) <= PROBABILITY_TOLERANCE:
        return values
    first = _round_half_up(values[0] / total * PROBABILITY_TOTAL)
    return [first, PROBABILITY_TOTAL - first]


def normalize_urgency(value: Any) -> str:
    if isinstance(value, str) and value in {level.value for level in UrgencyLevel}:
        return value
    return DEFAULT_URGENCY.value


def repair_diagnosis(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a corrected copy of a parsed diagnosis object.

    Only the probabilities and the urgency level are ever changed; the
    input is left untouched.
    """
    repaired = copy.deepcopy(data)
    diseases = repaired["probableDiseases"]
    if not all(isinstance(d, dict) for d in diseases):
        raise UpstreamSchemaViolation("Each probable disease must be an object.")

    probabilities = rescale_probabilities([d.get("probability") for d in diseases])
    for disease, probability in zip(diseases, probabilities):
        disease["probability"] = probability

    repaired["urgencyLevel"] = normalize_urgency(repaired.get("urgencyLevel"))
    return repaired
