import logging
from typing import Any, Dict, List, Optional

from src.application.context import fetch_context
from src.application.ports import LLMPort, MedicalRecordStorePort, ProfileStorePort
from src.application.prompts import compose_diagnosis_request, compose_questionnaire_request
from src.application.validation import parse_output, validate_diagnosis, validate_questionnaire
from src.domain.errors import UpstreamSchemaViolation
from src.domain.models import DiagnosisReport, Questionnaire
from src.domain.rules import validate_answers, validate_symptoms


logger = logging.getLogger(__name__)


class QuestionnaireUseCase:
    """Stage 1: symptoms in, a 10-question multiple-choice questionnaire out."""

    def __init__(
        self,
        llm: LLMPort,
        records: MedicalRecordStorePort,
        profiles: ProfileStorePort,
        generation_options: Optional[Dict[str, Any]] = None,
    ):
        self.llm = llm
        self.records = records
        self.profiles = profiles
        self.generation_options = generation_options or {}

    async def generate(self, subject_id: str, symptoms: Any) -> Questionnaire:
        symptoms = validate_symptoms(symptoms)
        logger.info("Generating questionnaire for subject %s", subject_id)

        snapshot = await fetch_context(subject_id, self.records, self.profiles)
        request = compose_questionnaire_request(symptoms, snapshot, **self.generation_options)
        raw = await self.llm.generate(request)

        try:
            return validate_questionnaire(parse_output(raw))
        except UpstreamSchemaViolation as e:
            logger.warning("Questionnaire for subject %s rejected: %s", subject_id, e.message)
            raise


class DiagnosisUseCase:
    """Stage 2: symptoms plus questionnaire answers in, a diagnosis report out.

    No questionnaire is stored between the stages, so the answers are only
    checked for count and shape, not against the questions that were asked.
    """

    def __init__(
        self,
        llm: LLMPort,
        records: MedicalRecordStorePort,
        profiles: ProfileStorePort,
        generation_options: Optional[Dict[str, Any]] = None,
    ):
        self.llm = llm
        self.records = records
        self.profiles = profiles
        self.generation_options = generation_options or {}

    async def analyze(self, subject_id: str, symptoms: Any, answers: List[Any]) -> DiagnosisReport:
        symptoms = validate_symptoms(
            symptoms, "The symptom information is invalid. Please start the process again."
        )
        parsed_answers = validate_answers(answers)
        logger.info("Analyzing questionnaire answers for subject %s", subject_id)

        snapshot = await fetch_context(subject_id, self.records, self.profiles)
        request = compose_diagnosis_request(symptoms, parsed_answers, snapshot, **self.generation_options)
        raw = await self.llm.generate(request)

        try:
            return validate_diagnosis(parse_output(raw))
        except UpstreamSchemaViolation as e:
            logger.warning("Diagnosis for subject %s rejected: %s", subject_id, e.message)
            raise
