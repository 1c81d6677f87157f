# backend/telehealth/services/follow_up_store.py
"""Storage seams for follow-ups and the profile lookups reminders need.

The hosted database owns the real records; the in-memory versions here back
the API in development and in tests.
"""

import logging
from typing import Dict, List, Optional, Protocol, runtime_checkable

from telehealth.exceptions import FollowUpStoreError
from telehealth.models.follow_up import FollowUp, PatientContact

log = logging.getLogger(__name__)


@runtime_checkable
class FollowUpStore(Protocol):
    def add(self, follow_up: FollowUp) -> FollowUp:
        """Persist a new follow-up."""
        ...

    def get(self, follow_up_id: str) -> FollowUp:
        """Load a follow-up by id. Raises FollowUpStoreError if missing."""
        ...

    def update(self, follow_up: FollowUp) -> FollowUp:
        """Replace an existing follow-up."""
        ...

    def list_all(self) -> List[FollowUp]:
        """Every stored follow-up."""
        ...


@runtime_checkable
class ProfileDirectory(Protocol):
    def patient_contact(self, patient_id: str) -> Optional[PatientContact]:
        ...

    def doctor_name(self, doctor_id: str) -> Optional[str]:
        ...


class MemoryFollowUpStore:
    """Dict-backed follow-up store."""

    def __init__(self) -> None:
        self._follow_ups: Dict[str, FollowUp] = {}

    def add(self, follow_up: FollowUp) -> FollowUp:
        if follow_up.id in self._follow_ups:
            raise FollowUpStoreError(f"Follow-up already exists: {follow_up.id}")
        self._follow_ups[follow_up.id] = follow_up
        log.debug(f"Stored follow-up {follow_up.id} for patient {follow_up.patient_id}")
        return follow_up

    def get(self, follow_up_id: str) -> FollowUp:
        if follow_up_id not in self._follow_ups:
            raise FollowUpStoreError(f"Follow-up not found: {follow_up_id}")
        return self._follow_ups[follow_up_id]

    def update(self, follow_up: FollowUp) -> FollowUp:
        if follow_up.id not in self._follow_ups:
            raise FollowUpStoreError(f"Follow-up not found: {follow_up.id}")
        self._follow_ups[follow_up.id] = follow_up
        return follow_up

    def list_all(self) -> List[FollowUp]:
        return list(self._follow_ups.values())


class MemoryProfileDirectory:
    def __init__(
        self,
        patients: Optional[Dict[str, PatientContact]] = None,
        doctors: Optional[Dict[str, str]] = None,
    ) -> None:
        self._patients = dict(patients or {})
        self._doctors = dict(doctors or {})

    def add_patient(self, patient_id: str, full_name: str, email: str = "") -> None:
        self._patients[patient_id] = PatientContact(full_name=full_name, email=email)

    def add_doctor(self, doctor_id: str, full_name: str) -> None:
        self._doctors[doctor_id] = full_name

    def patient_contact(self, patient_id: str) -> Optional[PatientContact]:
        return self._patients.get(patient_id)

    def doctor_name(self, doctor_id: str) -> Optional[str]:
        return self._doctors.get(doctor_id)
