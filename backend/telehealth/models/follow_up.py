# backend/telehealth/models/follow_up.py

from datetime import date, datetime, time
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .consultation import StructuredSummary

Priority = Literal["routine", "urgent", "emergency"]
FollowUpStatus = Literal["scheduled", "completed", "cancelled"]


class FollowUp(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    appointment_id: Optional[str] = None
    doctor_id: Optional[str] = None
    patient_id: str
    follow_up_date: date
    follow_up_time: Optional[time] = None
    reason: str = "Follow-up consultation"
    priority: Priority = "routine"
    notes: str = ""
    status: FollowUpStatus = "scheduled"
    reminder_sent: bool = False
    reminder_sent_at: Optional[datetime] = None


class FollowUpReminder(BaseModel):
    """What a patient gets told about an upcoming follow-up."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    follow_up_id: str
    patient_name: str = "Patient"
    patient_email: str = ""
    doctor_name: str = "Doctor"
    follow_up_date: date
    follow_up_time: Optional[time] = None
    reason: str
    priority: Priority


class PatientContact(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class ScheduleFollowUpRequest(BaseModel):
    """A saved summary plus the slot the doctor picked for the follow-up."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    summary: StructuredSummary
    patient_id: str
    appointment_id: Optional[str] = None
    doctor_id: Optional[str] = None
    follow_up_date: Optional[date] = None
    follow_up_time: Optional[time] = None
    priority: Priority = "routine"
