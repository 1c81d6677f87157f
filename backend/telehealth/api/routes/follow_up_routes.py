# backend/telehealth/api/routes/follow_up_routes.py

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from telehealth.api.dependencies import get_follow_up_service
from telehealth.models.follow_up import ScheduleFollowUpRequest
from telehealth.services.follow_up_service import FollowUpService

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/follow-ups", tags=["follow-ups"])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@router.post("")
async def schedule_follow_up(
    payload: ScheduleFollowUpRequest,
    service: FollowUpService = Depends(get_follow_up_service),
):
    """
    Book the follow-up a saved summary asks for. Nothing is booked unless
    the summary requires a follow-up and a date was picked.
    """
    try:
        follow_up = service.schedule_from_summary(
            payload.summary,
            patient_id=payload.patient_id,
            follow_up_date=payload.follow_up_date,
            appointment_id=payload.appointment_id,
            doctor_id=payload.doctor_id,
            follow_up_time=payload.follow_up_time,
            priority=payload.priority,
        )
    except Exception as e:
        log.exception("Follow-up creation failed")
        return JSONResponse({"error": "Failed to schedule follow-up", "details": str(e)}, status_code=500)

    if follow_up is None:
        return {"message": "No follow-up scheduled", "followUp": None}

    return JSONResponse(
        {"message": "Follow-up scheduled", "followUp": follow_up.model_dump(mode="json")},
        status_code=201,
    )


@router.get("/check-reminders")
async def check_reminders(service: FollowUpService = Depends(get_follow_up_service)):
    """
    Process reminders for scheduled follow-ups due today or tomorrow.
    Each processed follow-up is marked as reminded so it is not picked up again.
    """
    try:
        reminders = service.check_reminders(_utcnow())
    except Exception as e:
        log.exception("Reminder check failed")
        return JSONResponse({"error": "Failed to check reminders", "details": str(e)}, status_code=500)

    if not reminders:
        return {"message": "No reminders to send", "count": 0}

    return {
        "message": f"{len(reminders)} reminder(s) processed",
        "count": len(reminders),
        "reminders": [r.model_dump(by_alias=True, mode="json") for r in reminders],
    }


@router.get("/upcoming/{patient_id}")
async def upcoming_follow_ups(
    patient_id: str,
    service: FollowUpService = Depends(get_follow_up_service),
):
    try:
        follow_ups = service.upcoming(patient_id, _utcnow().date())
    except Exception:
        log.exception("Error fetching follow-ups")
        return JSONResponse({"error": "Failed to fetch follow-ups"}, status_code=500)

    return {"followUps": [f.model_dump(mode="json") for f in follow_ups]}
