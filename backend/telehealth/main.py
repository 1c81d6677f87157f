import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from telehealth.api.routes.follow_up_routes import router as follow_up_routes
from telehealth.api.routes.summary_routes import router as summary_routes
from telehealth.core.config import Settings, settings as default_settings
from telehealth.core.logging_config import configure_logging
from telehealth.services.follow_up_service import FollowUpService
from telehealth.services.follow_up_store import MemoryFollowUpStore, MemoryProfileDirectory

log = logging.getLogger(__name__)

_NOTES_FIELDS = {"doctorNotes", "doctor_notes"}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return "Invalid JSON body"
    # An absent body means absent notes too
    if any(
        err.get("loc") and (err["loc"][-1] in _NOTES_FIELDS or tuple(err["loc"]) == ("body",))
        for err in errors
    ):
        return "Doctor notes are required"
    if not errors:
        return "Invalid request body"
    first = errors[0]
    where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def create_app(
    app_settings: Optional[Settings] = None,
    follow_up_service: Optional[FollowUpService] = None,
) -> FastAPI:
    app_settings = app_settings or default_settings
    configure_logging(app_settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        app.state.settings = app_settings
        app.state.follow_up_service = follow_up_service or FollowUpService(
            MemoryFollowUpStore(),
            MemoryProfileDirectory(),
            reminder_window_days=app_settings.REMINDER_WINDOW_DAYS,
        )
        log.info(f"{app_settings.APP_TITLE} ready")
        yield

    app = FastAPI(
        title=app_settings.APP_TITLE,
        description="Consultation summaries and follow-up reminders for the telehealth clinic portals",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Enable CORS so the portal frontend can talk to the backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": _validation_message(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse({"error": "Something went wrong!"}, status_code=500)

    @app.get("/")
    def root():
        return {"message": "Healthcare Platform API is running"}

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(summary_routes)
    app.include_router(follow_up_routes)
    return app


app = create_app()


def run() -> None:
    uvicorn.run("telehealth.main:app", host="0.0.0.0", port=default_settings.PORT)


if __name__ == "__main__":
    run()
