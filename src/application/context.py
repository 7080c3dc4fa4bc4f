import asyncio
import logging
from datetime import date
from typing import Iterable, Optional

from src.application.ports import MedicalRecordStorePort, ProfileStorePort
from src.domain.models import MedicalContextSnapshot, MedicalRecord, Profile


logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
NONE = "none"


async def fetch_context(
    subject_id: str,
    records: MedicalRecordStorePort,
    profiles: ProfileStorePort,
    today: Optional[date] = None,
) -> MedicalContextSnapshot:
    """Fetch the medical record and the profile concurrently and merge them.

    The first store failure cancels the other fetch and is re-raised as-is.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            record_task = tg.create_task(records.find_medical_record(subject_id))
            profile_task = tg.create_task(profiles.find_profile(subject_id))
    except ExceptionGroup as group:
        logger.error("Context fetch failed for subject %s: %s", subject_id, group.exceptions[0])
        raise group.exceptions[0] from None

    return build_snapshot(record_task.result(), profile_task.result(), today=today)


def build_snapshot(
    record: Optional[MedicalRecord],
    profile: Optional[Profile],
    today: Optional[date] = None,
) -> MedicalContextSnapshot:
    record = record or MedicalRecord()
    profile = profile or Profile()
    return MedicalContextSnapshot(
        age=profile.age_on(today or date.today()),
        gender=profile.gender,
        height=record.height,
        weight=record.weight,
        bmi=record.bmi,
        blood_type=record.blood_type,
        conditions=[c.name for c in record.conditions],
        allergies=[a.name for a in record.allergies],
        medications=[m.name for m in record.medications],
    )


def _value(value, unit: str = "") -> str:
    if value is None:
        return UNKNOWN
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value} {unit}".strip()


def _names(names: Iterable[str]) -> str:
    return ", ".join(names) or NONE


def render_context(snapshot: MedicalContextSnapshot) -> str:
    lines = [
        "### Patient medical information:",
        "- Age: " + _value(snapshot.age),
        "- Gender: " + _value(snapshot.gender),
        "- Height: " + _value(snapshot.height, "cm"),
        "- Weight: " + _value(snapshot.weight, "kg"),
        "- BMI: " + _value(snapshot.bmi),
        "- Blood type: " + _value(snapshot.blood_type),
        "- Medical history: " + _names(snapshot.conditions),
        "- Allergies: " + _names(snapshot.allergies),
        "- Current medications: " + _names(snapshot.medications),
    ]
    return "\n".join(lines)
