"""Pydantic models for the telehealth backend."""

from .consultation import (
    ConditionFlags,
    ConsultationInput,
    ErrorResponse,
    StructuredSummary,
    SummaryResponse,
)
from .follow_up import FollowUp, FollowUpReminder, PatientContact, ScheduleFollowUpRequest

__all__ = [
    "ConditionFlags",
    "ConsultationInput",
    "ErrorResponse",
    "FollowUp",
    "FollowUpReminder",
    "PatientContact",
    "ScheduleFollowUpRequest",
    "StructuredSummary",
    "SummaryResponse",
]
