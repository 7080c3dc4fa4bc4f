import os
import logging
from typing import Any, Dict

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    _HAS_STREAMLIT = False

logger = logging.getLogger(__name__)


def get_secret(name: str, default: str | None = None) -> str | None:
    # Prefer Streamlit secrets if available
    if _HAS_STREAMLIT:
        try:
            if name in st.secrets:
                return str(st.secrets.get(name))
        except Exception:
            # No secrets.toml; fall through to the environment.
            logger.debug("Streamlit secrets unavailable for %s", name)
    # Fallback to environment variables
    return os.environ.get(name, default)


def _get_number(name: str, default: float, cast=float):
    raw = get_secret(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Invalid value %r for %s; using default %s", raw, name, default)
        return default


class Settings:
    @property
    def mistral_api_key(self) -> str | None:
        return get_secret("MISTRAL_API_KEY")

    @property
    def mistral_model(self) -> str:
        return get_secret("MISTRAL_MODEL", "mistral-large-latest") or "mistral-large-latest"

    @property
    def medical_store_path(self) -> str | None:
        return get_secret("MEDICAL_STORE_PATH")

    @property
    def app_env(self) -> str:
        return (get_secret("APP_ENV", "production") or "production").lower()

    @property
    def debug(self) -> bool:
        return self.app_env == "development"

    @property
    def log_level(self) -> str:
        return get_secret("LOG_LEVEL", "INFO") or "INFO"

    def questionnaire_options(self) -> Dict[str, Any]:
        return {
            "model": self.mistral_model,
            "temperature": _get_number("QUESTIONNAIRE_TEMPERATURE", 0.2),
            "max_tokens": _get_number("QUESTIONNAIRE_MAX_TOKENS", 2500, int),
        }

    def diagnosis_options(self) -> Dict[str, Any]:
        return {
            "model": self.mistral_model,
            "temperature": _get_number("DIAGNOSIS_TEMPERATURE", 0.1),
            "max_tokens": _get_number("DIAGNOSIS_MAX_TOKENS", 3500, int),
            "top_p": _get_number("DIAGNOSIS_TOP_P", 0.3),
            "frequency_penalty": _get_number("DIAGNOSIS_FREQUENCY_PENALTY", 0.5),
            "presence_penalty": _get_number("DIAGNOSIS_PRESENCE_PENALTY", 0.5),
        }
