"""
Application-info router.

Endpoints:
    GET /appinfo   active profiles and bound service names
"""

from __future__ import annotations

from fastapi import APIRouter

from music_spine.api.deps import Env
from music_spine.api.schemas import AppInfoSchema

router = APIRouter()


@router.get("/appinfo", response_model=AppInfoSchema)
def get_app_info(env: Env) -> AppInfoSchema:
    """Active profiles (including the resolved store profile) and bound services.

    Example:
        GET /appinfo

        Response:
        {"profiles": ["mongodb"], "services": ["my-db"]}
    """
    return AppInfoSchema(
        profiles=list(env.active_profiles),
        services=[binding.name for binding in env.service_bindings],
    )
