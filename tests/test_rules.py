"""Unit tests for input checks and the diagnosis repairs."""
import pytest

from src.domain.errors import InputValidationError, UpstreamSchemaViolation
from src.domain.models import Answer
from src.domain.rules import (
    normalize_urgency,
    repair_diagnosis,
    rescale_probabilities,
    validate_answers,
    validate_symptoms,
)


class TestValidateSymptoms:
    """Symptom text is checked by trimmed character length."""

    @pytest.mark.parametrize("symptoms", [None, "", "         ", "headache", "  short   ", 42])
    def test_too_short_rejected(self, symptoms):
        with pytest.raises(InputValidationError) as exc:
            validate_symptoms(symptoms)
        assert exc.value.status_code == 400
        assert exc.value.status == "fail"

    def test_ten_characters_single_word_accepted(self):
        """Ten characters pass even though they are a single word."""
        assert validate_symptoms("  dizziness!  ") == "  dizziness!  "

    def test_custom_message(self):
        with pytest.raises(InputValidationError, match="start the process again"):
            validate_symptoms("cough", "Please start the process again.")


class TestValidateAnswers:
    def test_ten_answers_parsed(self, answers):
        parsed = validate_answers(answers)
        assert len(parsed) == 10
        assert parsed[0] == Answer(question_id="q1", answer_id="a")

    @pytest.mark.parametrize("count", [0, 9, 11])
    def test_wrong_count_rejected(self, answers, count):
        submitted = (answers * 2)[:count]
        with pytest.raises(InputValidationError):
            validate_answers(submitted)

    def test_not_a_list_rejected(self):
        with pytest.raises(InputValidationError):
            validate_answers({"q1": "a"})

    def test_malformed_entry_rejected(self, answers):
        answers[3] = {"questionId": "q4"}
        with pytest.raises(InputValidationError, match="questionId and an answerId"):
            validate_answers(answers)

    def test_numeric_ids_converted(self, answers):
        answers[0] = {"questionId": 1, "answerId": "a"}
        answers[1] = {"questionId": "q2", "answerId": 3}
        parsed = validate_answers(answers)
        assert parsed[0] == Answer(question_id="1", answer_id="a")
        assert parsed[1] == Answer(question_id="q2", answer_id="3")

    @pytest.mark.parametrize("bad_id", [None, ["q1"], {"id": "q1"}, True])
    def test_non_scalar_id_rejected(self, answers, bad_id):
        answers[0] = {"questionId": bad_id, "answerId": "a"}
        with pytest.raises(InputValidationError):
            validate_answers(answers)

    def test_ids_are_not_cross_checked(self):
        """Any ten well-formed answers are accepted; no questionnaire is stored."""
        answers = [{"questionId": "unknown", "answerId": "z"}] * 10
        assert len(validate_answers(answers)) == 10


class TestRescaleProbabilities:
    def test_large_deviation_rescaled(self):
        assert rescale_probabilities([60, 50]) == [55, 45]

    def test_small_deviation_left_unchanged(self):
        assert rescale_probabilities([53, 50]) == [53, 50]

    def test_exact_sum_unchanged(self):
        assert rescale_probabilities([70, 30]) == [70, 30]

    def test_boundary_deviation_unchanged(self):
        assert rescale_probabilities([55, 50]) == [55, 50]
        assert rescale_probabilities([45, 50]) == [45, 50]

    def test_low_sum_rescaled(self):
        assert rescale_probabilities([30, 20]) == [60, 40]

    def test_half_rounds_up(self):
        # 45 / 90 * 100 = 50 exactly, 1 / 8 * 100 = 12.5 -> 13
        assert rescale_probabilities([45, 45]) == [50, 50]
        assert rescale_probabilities([1, 7]) == [13, 87]

    @pytest.mark.parametrize("pair", [["60", 40], [60, None], [True, 50], [float("nan"), 50]])
    def test_non_numeric_rejected(self, pair):
        with pytest.raises(UpstreamSchemaViolation, match="must be numbers"):
            rescale_probabilities(pair)

    @pytest.mark.parametrize("pair", [[0, 100], [101, 1], [-5, 50]])
    def test_out_of_range_rejected(self, pair):
        with pytest.raises(UpstreamSchemaViolation, match="between 1 and 100"):
            rescale_probabilities(pair)


class TestNormalizeUrgency:
    @pytest.mark.parametrize("value", ["high", "moderate", "low"])
    def test_valid_passes_through(self, value):
        assert normalize_urgency(value) == value

    @pytest.mark.parametrize("value", ["severe", "HIGH", "", None, 3, ["high"]])
    def test_invalid_defaults_to_moderate(self, value):
        assert normalize_urgency(value) == "moderate"


class TestRepairDiagnosis:
    def test_returns_corrected_copy(self, diagnosis_payload):
        original = diagnosis_payload(p1=60, p2=50, urgency="severe")
        repaired = repair_diagnosis(original)

        assert [d["probability"] for d in repaired["probableDiseases"]] == [55, 45]
        assert repaired["urgencyLevel"] == "moderate"
        # Input is not mutated
        assert [d["probability"] for d in original["probableDiseases"]] == [60, 50]
        assert original["urgencyLevel"] == "severe"

    def test_other_fields_untouched(self, diagnosis_payload):
        original = diagnosis_payload()
        assert repair_diagnosis(original) == original

    def test_non_object_disease_rejected(self, diagnosis_payload):
        data = diagnosis_payload(probableDiseases=["Flu", "Cold"])
        with pytest.raises(UpstreamSchemaViolation):
            repair_diagnosis(data)
