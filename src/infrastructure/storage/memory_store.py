from typing import Dict, Optional

from src.application.ports import MedicalRecordStorePort, ProfileStorePort
from src.domain.models import MedicalRecord, NamedEntry, Profile


class InMemoryMedicalStore(MedicalRecordStorePort, ProfileStorePort):
    def __init__(
        self,
        records: Optional[Dict[str, MedicalRecord]] = None,
        profiles: Optional[Dict[str, Profile]] = None,
    ):
        self.records = dict(records or {})
        self.profiles = dict(profiles or {})

    async def find_medical_record(self, subject_id: str) -> Optional[MedicalRecord]:
        return self.records.get(subject_id)

    async def find_profile(self, subject_id: str) -> Optional[Profile]:
        return self.profiles.get(subject_id)


def sample_store() -> InMemoryMedicalStore:
    """A store holding one demo subject, ``demo``."""
    return InMemoryMedicalStore(
        records={
            "demo": MedicalRecord(
                height=172,
                weight=68,
                blood_type="O+",
                conditions=[NamedEntry(name="Asthma")],
                allergies=[NamedEntry(name="Penicillin")],
                medications=[NamedEntry(name="Salbutamol inhaler")],
            )
        },
        profiles={"demo": Profile(first_name="Demo", gender="female")},
    )
