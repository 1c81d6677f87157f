"""Exception hierarchy for the telehealth backend."""


class TelehealthError(Exception):
    """Base exception for all telehealth backend errors."""


class InvalidConsultationInput(TelehealthError, ValueError):
    """Raised when a consultation payload cannot be summarised (e.g. no doctor notes)."""


class FollowUpStoreError(TelehealthError):
    """Raised when the follow-up store cannot read or write a record."""
