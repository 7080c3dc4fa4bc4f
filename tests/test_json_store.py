"""Unit tests for the JSON-file medical store."""
import json
import os
import tempfile
from datetime import date

import pytest

from src.application.context import fetch_context
from src.domain.models import MedicalRecord, NamedEntry, Profile
from src.infrastructure.storage.json_store import JsonMedicalStore


@pytest.fixture
def temp_storage():
    """Create a temporary storage file for testing."""
    with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.json') as f:
        temp_path = f.name

    yield temp_path

    # Cleanup
    if os.path.exists(temp_path):
        os.unlink(temp_path)


class TestJsonMedicalStore:
    def test_initialization(self, temp_storage):
        """Empty file is initialised to an empty mapping."""
        JsonMedicalStore(storage_path=temp_storage)
        with open(temp_storage, 'r') as f:
            assert json.load(f) == {}

    def test_creates_missing_directory(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        JsonMedicalStore(storage_path=str(path))
        assert path.exists()

    @pytest.mark.asyncio
    async def test_save_and_find(self, temp_storage):
        store = JsonMedicalStore(storage_path=temp_storage)
        store.save_subject(
            "alice",
            medical_record=MedicalRecord(height=165, weight=60, blood_type="A+", allergies=[NamedEntry(name="Peanuts")]),
            profile=Profile(first_name="Alice", gender="female", date_of_birth=date(1990, 1, 1)),
        )

        record = await store.find_medical_record("alice")
        profile = await store.find_profile("alice")
        assert record.blood_type == "A+"
        assert record.allergies[0].name == "Peanuts"
        assert profile.date_of_birth == date(1990, 1, 1)

        with open(temp_storage, 'r') as f:
            stored = json.load(f)["alice"]
        assert stored["medical_record"]["bloodType"] == "A+"
        assert stored["profile"]["dateOfBirth"] == "1990-01-01"

    @pytest.mark.asyncio
    async def test_partial_subject(self, temp_storage):
        store = JsonMedicalStore(storage_path=temp_storage)
        store.save_subject("bob", profile=Profile(gender="male"))
        assert await store.find_medical_record("bob") is None
        assert (await store.find_profile("bob")).gender == "male"

    @pytest.mark.asyncio
    async def test_unknown_subject(self, temp_storage):
        store = JsonMedicalStore(storage_path=temp_storage)
        assert await store.find_medical_record("nobody") is None
        assert await store.find_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_corrupt_file_is_store_fault(self, temp_storage):
        store = JsonMedicalStore(storage_path=temp_storage)
        with open(temp_storage, 'w') as f:
            f.write("{not json")
        with pytest.raises(json.JSONDecodeError):
            await fetch_context("alice", store, store)

    @pytest.mark.asyncio
    async def test_invalid_entry_is_store_fault(self, temp_storage):
        with open(temp_storage, 'w') as f:
            json.dump({"carol": {"medical_record": {"height": 10}}}, f)
        store = JsonMedicalStore(storage_path=temp_storage)
        with pytest.raises(ValueError):
            await store.find_medical_record("carol")
