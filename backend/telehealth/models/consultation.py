# backend/telehealth/models/consultation.py

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ConsultationInput(BaseModel):
    """Doctor notes plus the pre-consultation context the portal sends along.

    Accepts the camelCase keys the frontend posts (``doctorNotes``,
    ``chiefComplaint``...) as well as the snake_case field names. Only
    ``doctor_notes`` drives condition detection; the rest seed defaults.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    doctor_notes: str
    patient_name: str = ""
    patient_age: str = ""
    patient_gender: str = ""
    chief_complaint: str = ""
    current_symptoms: str = ""
    current_medications: str = ""
    allergies: str = ""
    medical_history: str = ""
    consultation_type: Literal["video", "audio"] = "video"

    @field_validator("doctor_notes")
    @classmethod
    def notes_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Doctor notes are required")
        return v

    @field_validator(
        "patient_name",
        "patient_age",
        "patient_gender",
        "chief_complaint",
        "current_symptoms",
        "current_medications",
        "allergies",
        "medical_history",
        mode="before",
    )
    @classmethod
    def missing_text_is_empty(cls, v):
        # The portal sends null or a bare number (age) for some of these
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("consultation_type", mode="before")
    @classmethod
    def default_consultation_type(cls, v):
        return v or "video"


class ConditionFlags(BaseModel):
    """Clinical themes detected in the doctor notes. Not mutually exclusive."""

    model_config = ConfigDict(frozen=True)

    headache: bool = False
    bp: bool = False
    diabetes: bool = False
    respiratory: bool = False
    skin: bool = False
    mental: bool = False
    gastro: bool = False
    musculo: bool = False
    infection: bool = False

    def active(self) -> List[str]:
        return [name for name, flagged in self if flagged]

    def has_any(self) -> bool:
        return any(flagged for _, flagged in self)


class StructuredSummary(BaseModel):
    diagnosis: str
    symptoms_presented: str
    examination_findings: str
    treatment_plan: str
    medications_prescribed: str
    lifestyle_recommendations: str
    patient_education: str
    follow_up_required: bool = True
    follow_up_notes: str
    follow_up_timeframe: str = "2 weeks"
    referral_required: bool = False
    referral_specialty: str = ""
    referral_notes: str = ""
    red_flags: str = ""
    additional_notes: str = ""


class SummaryResponse(BaseModel):
    summary: StructuredSummary


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
