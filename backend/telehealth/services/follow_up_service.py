# backend/telehealth/services/follow_up_service.py

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from telehealth.models.consultation import StructuredSummary
from telehealth.models.follow_up import FollowUp, FollowUpReminder
from telehealth.services.follow_up_store import FollowUpStore, ProfileDirectory

log = logging.getLogger(__name__)


class FollowUpService:
    """Schedules follow-ups from saved summaries and runs the reminder scan."""

    def __init__(
        self,
        store: FollowUpStore,
        directory: ProfileDirectory,
        reminder_window_days: int = 1,
    ) -> None:
        self.store = store
        self.directory = directory
        self.reminder_window_days = reminder_window_days

    def schedule_from_summary(
        self,
        summary: StructuredSummary,
        *,
        patient_id: str,
        follow_up_date: Optional[date],
        appointment_id: Optional[str] = None,
        doctor_id: Optional[str] = None,
        follow_up_time: Optional[time] = None,
        priority: str = "routine",
    ) -> Optional[FollowUp]:
        """
        Book the follow-up a summary asks for.
        Nothing is stored unless the summary requires a follow-up and the
        doctor picked a date.
        """
        if not summary.follow_up_required or follow_up_date is None:
            return None

        follow_up = FollowUp(
            appointment_id=appointment_id,
            doctor_id=doctor_id,
            patient_id=patient_id,
            follow_up_date=follow_up_date,
            follow_up_time=follow_up_time,
            reason=summary.follow_up_notes or summary.diagnosis or "Follow-up consultation",
            priority=priority,
            notes=summary.follow_up_notes,
            status="scheduled",
        )
        log.info(f"Scheduling {priority} follow-up for patient {patient_id} on {follow_up_date}")
        return self.store.add(follow_up)

    def upcoming(self, patient_id: str, today: date) -> List[FollowUp]:
        due = [
            f
            for f in self.store.list_all()
            if f.patient_id == patient_id and f.status == "scheduled" and f.follow_up_date >= today
        ]
        return sorted(due, key=lambda f: f.follow_up_date)

    def check_reminders(self, now: datetime) -> List[FollowUpReminder]:
        """
        Find scheduled follow-ups due between today and the end of the
        reminder window that have not been reminded yet, build a reminder
        for each and mark them as sent.
        """
        today = now.date()
        window_end = today + timedelta(days=self.reminder_window_days)
        due = [
            f
            for f in self.store.list_all()
            if f.status == "scheduled" and not f.reminder_sent and today <= f.follow_up_date <= window_end
        ]

        reminders: List[FollowUpReminder] = []
        for follow_up in sorted(due, key=lambda f: f.follow_up_date):
            reminders.append(self._build_reminder(follow_up))
            self.store.update(follow_up.model_copy(update={"reminder_sent": True, "reminder_sent_at": now}))

        # No delivery channel yet; reminders are only logged
        if reminders:
            log.info(
                "Follow-up reminders to send: %s",
                [r.model_dump(by_alias=True, mode="json") for r in reminders],
            )
        return reminders

    def _build_reminder(self, follow_up: FollowUp) -> FollowUpReminder:
        contact = self.directory.patient_contact(follow_up.patient_id)
        doctor_name = self.directory.doctor_name(follow_up.doctor_id) if follow_up.doctor_id else None
        return FollowUpReminder(
            follow_up_id=follow_up.id,
            patient_name=(contact.full_name if contact else None) or "Patient",
            patient_email=(contact.email if contact else None) or "",
            doctor_name=doctor_name or "Doctor",
            follow_up_date=follow_up.follow_up_date,
            follow_up_time=follow_up.follow_up_time,
            reason=follow_up.reason,
            priority=follow_up.priority,
        )
