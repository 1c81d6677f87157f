# backend/telehealth/api/routes/summary_routes.py

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from telehealth.api.dependencies import get_settings
from telehealth.core.config import Settings
from telehealth.exceptions import InvalidConsultationInput
from telehealth.models.consultation import ConsultationInput, ErrorResponse, SummaryResponse
from telehealth.services.summary_synthesizer import synthesize

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post(
    "/generate-summary",
    response_model=SummaryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_summary(
    consultation: ConsultationInput,
    settings: Settings = Depends(get_settings),
):
    """
    Expand the doctor's free-text notes into a structured consultation
    summary the doctor can review, edit and save.
    """
    # Simulated model latency
    if settings.SUMMARY_DELAY_SECONDS > 0:
        await asyncio.sleep(settings.SUMMARY_DELAY_SECONDS)

    try:
        summary = synthesize(consultation)
    except InvalidConsultationInput as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception as e:
        log.exception("AI summary generation failed")
        return JSONResponse({"error": "Failed to generate summary", "details": str(e)}, status_code=500)

    return {"summary": summary}
