import asyncio
import logging

import streamlit as st

from src.application.results import assemble_failure, run_stage
from src.application.schemas import StageResponse
from src.application.use_cases import DiagnosisUseCase, QuestionnaireUseCase
from src.infrastructure.config import Settings
from src.infrastructure.llm.mistral_client import MistralLLMAdapter
from src.infrastructure.storage.json_store import JsonMedicalStore
from src.infrastructure.storage.memory_store import sample_store


logger = logging.getLogger(__name__)


DISCLAIMER = (
    "⚕️ **DISCLAIMER:** This is NOT medical advice and NOT a diagnosis. "
    "This assistant is for educational purposes only. "
    "If you experience emergency symptoms, seek immediate care (call local emergency number)."
)

URGENCY_BANNERS = {
    "high": ("error", "## ⚠️ High urgency\n**Seek medical care as soon as possible.**"),
    "moderate": ("warning", "## ⏰ Moderate urgency\nSchedule an appointment with a healthcare professional soon."),
    "low": ("success", "## ✅ Low urgency\nMonitor your symptoms and follow the recommendations."),
}


def _init_session_state():
    if "questionnaire" not in st.session_state:
        st.session_state.questionnaire = None
    if "symptoms" not in st.session_state:
        st.session_state.symptoms = ""
    if "report" not in st.session_state:
        st.session_state.report = None


def _reset():
    st.session_state.questionnaire = None
    st.session_state.symptoms = ""
    st.session_state.report = None


def _require_mistral_key(settings: Settings) -> bool:
    if not settings.mistral_api_key:
        st.error(
            "❌ **Mistral API Key Missing**\n\n"
            "Add `MISTRAL_API_KEY` to `.streamlit/secrets.toml` or as an environment variable.\n\n"
            "See README for setup instructions."
        )
        return False
    return True


def _build_store(settings: Settings):
    if settings.medical_store_path:
        return JsonMedicalStore(storage_path=settings.medical_store_path)
    return sample_store()


def _render_sidebar(settings: Settings) -> str:
    st.sidebar.title("⚙️ Settings")

    st.sidebar.markdown("### Model")
    st.sidebar.caption(f"**Model:** {settings.mistral_model}")

    st.sidebar.markdown("### Patient")
    subject_id = st.sidebar.text_input("Subject ID", value="demo")
    if settings.medical_store_path:
        st.sidebar.success("✓ Using medical records store")
    else:
        st.sidebar.warning("⚠️ Using demo medical records")

    st.sidebar.divider()

    if st.sidebar.button("🔄 Start Over", use_container_width=True):
        _reset()
        st.rerun()
    return subject_id


def _run(stage, settings: Settings) -> StageResponse:
    try:
        return asyncio.run(run_stage(stage, debug=settings.debug))
    except Exception as e:
        logger.exception("Stage failed unexpectedly: %s", e)
        return assemble_failure(e, debug=settings.debug)


def _show_failure(response: StageResponse):
    st.error(f"❌ **{response.body.message}**\n\nPlease try again.")


def _render_symptoms_step(questionnaire_usecase: QuestionnaireUseCase, subject_id: str, settings: Settings):
    st.markdown("### 1. Describe your symptoms")
    symptoms = st.text_area(
        "What brings you in today?",
        placeholder="e.g. Dry cough and mild fever for three days, worse at night",
    )
    if st.button("Continue", type="primary"):
        with st.spinner("⏳ Preparing your questionnaire..."):
            response = _run(questionnaire_usecase.generate(subject_id, symptoms), settings)
        if not response.ok:
            _show_failure(response)
            return
        st.session_state.symptoms = symptoms
        st.session_state.questionnaire = response.body.data["questions"]
        st.rerun()


def _render_questionnaire_step(diagnosis_usecase: DiagnosisUseCase, subject_id: str, settings: Settings):
    st.markdown("### 2. Answer a few questions")
    answers = []
    with st.form("questionnaire"):
        for i, question in enumerate(st.session_state.questionnaire, 1):
            options = {o["id"]: o["text"] for o in question["options"]}
            choice = st.radio(
                f"**{i}. {question['text']}**",
                options=list(options),
                format_func=options.get,
                key=f"answer_{i}",
            )
            answers.append({"questionId": question["id"], "answerId": choice})
        submitted = st.form_submit_button("Analyze", type="primary")

    if submitted:
        with st.spinner("🔬 Analyzing your answers..."):
            response = _run(
                diagnosis_usecase.analyze(subject_id, st.session_state.symptoms, answers), settings
            )
        if not response.ok:
            _show_failure(response)
            return
        st.session_state.report = response.body.data
        st.rerun()


def _as_items(value) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _render_report(report: dict):
    st.markdown("# 📋 Assessment Summary")
    st.markdown(f"**Summary:** {report.get('summary') or 'Not provided'}")

    kind, banner = URGENCY_BANNERS[report["urgencyLevel"]]
    getattr(st, kind)(banner)

    st.markdown("## 🏥 Possible Conditions (NOT a diagnosis)")
    for disease in report["probableDiseases"]:
        st.markdown(f"**{disease.get('name') or 'Unnamed condition'}** ({disease['probability']}%)")
        st.progress(min(int(disease["probability"]), 100))
        if disease.get("rationale"):
            st.caption(str(disease["rationale"]))

    st.markdown("## 👨‍⚕️ Recommended Specialist(s)")
    st.markdown(", ".join(_as_items(report.get("recommendedSpecialists"))) or "No specific specialist recommended")

    st.markdown("## 📝 Recommendations")
    for i, item in enumerate(_as_items(report.get("medicalRecommendations")), 1):
        st.markdown(f"{i}. {item}")

    with st.expander("Details"):
        st.markdown(str(report.get("details") or "No details provided"))

    st.markdown("---")
    st.markdown("⚠️ **Reminder:** This is NOT medical advice. Always consult a licensed healthcare professional.")


def main():
    settings = Settings()
    logging.basicConfig(level=settings.log_level)

    st.set_page_config(
        page_title="Virtual Health Assistant",
        page_icon="⚕️",
        layout="centered",
        initial_sidebar_state="expanded",
    )

    if not _require_mistral_key(settings):
        st.stop()

    llm = MistralLLMAdapter(settings=settings)
    store = _build_store(settings)
    _init_session_state()
    subject_id = _render_sidebar(settings)

    st.markdown("# 🏥 Virtual Health Assistant")
    st.info(DISCLAIMER)

    if st.session_state.report is not None:
        _render_report(st.session_state.report)
    elif st.session_state.questionnaire is not None:
        usecase = DiagnosisUseCase(llm, store, store, settings.diagnosis_options())
        _render_questionnaire_step(usecase, subject_id, settings)
    else:
        usecase = QuestionnaireUseCase(llm, store, store, settings.questionnaire_options())
        _render_symptoms_step(usecase, subject_id, settings)


if __name__ == "__main__":
    main()
