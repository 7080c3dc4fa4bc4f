"""JSON-file storage of subjects' medical records and profiles."""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from src.application.ports import MedicalRecordStorePort, ProfileStorePort
from src.domain.models import MedicalRecord, Profile


logger = logging.getLogger(__name__)


class JsonMedicalStore(MedicalRecordStorePort, ProfileStorePort):
    """Reads and writes subjects keyed by id.

    File layout::

        {"<subject id>": {"medical_record": {...}, "profile": {...}}}
    """

    def __init__(self, storage_path: Optional[str] = None):
        """
        Args:
            storage_path: Path to the JSON file. Defaults to
                          .streamlit/medical_store.json
        """
        if storage_path is None:
            project_root = Path(__file__).parent.parent.parent.parent
            storage_path = str(project_root / ".streamlit" / "medical_store.json")

        self.storage_path = storage_path
        self._ensure_storage_exists()

    def _ensure_storage_exists(self) -> None:
        storage_dir = os.path.dirname(self.storage_path)
        if storage_dir and not os.path.exists(storage_dir):
            os.makedirs(storage_dir, exist_ok=True)

        if not os.path.exists(self.storage_path) or os.path.getsize(self.storage_path) == 0:
            self._save_subjects({})

    def _load_subjects(self) -> Dict[str, Any]:
        # A corrupt file is a store fault and propagates to the caller.
        with open(self.storage_path, "r") as f:
            return json.load(f)

    def _save_subjects(self, subjects: Dict[str, Any]) -> None:
        with open(self.storage_path, "w") as f:
            json.dump(subjects, f, indent=2)

    def _load_entry(self, subject_id: str, key: str) -> Optional[Dict[str, Any]]:
        subject = self._load_subjects().get(subject_id) or {}
        return subject.get(key)

    async def find_medical_record(self, subject_id: str) -> Optional[MedicalRecord]:
        data = await asyncio.to_thread(self._load_entry, subject_id, "medical_record")
        if data is None:
            logger.debug("No medical record for subject %s", subject_id)
            return None
        return MedicalRecord.model_validate(data)

    async def find_profile(self, subject_id: str) -> Optional[Profile]:
        data = await asyncio.to_thread(self._load_entry, subject_id, "profile")
        if data is None:
            logger.debug("No profile for subject %s", subject_id)
            return None
        return Profile.model_validate(data)

    def save_subject(
        self,
        subject_id: str,
        medical_record: Optional[MedicalRecord] = None,
        profile: Optional[Profile] = None,
    ) -> None:
        """Create or replace the stored data for one subject."""
        subjects = self._load_subjects()
        entry = subjects.get(subject_id, {})
        if medical_record is not None:
            entry["medical_record"] = medical_record.model_dump(mode="json", by_alias=True)
        if profile is not None:
            entry["profile"] = profile.model_dump(mode="json", by_alias=True)
        subjects[subject_id] = entry
        self._save_subjects(subjects)
