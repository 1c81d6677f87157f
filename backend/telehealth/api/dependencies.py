from fastapi import Request

from telehealth.core.config import Settings
from telehealth.services.follow_up_service import FollowUpService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_follow_up_service(request: Request) -> FollowUpService:
    return request.app.state.follow_up_service
