"""
Credentials router — read one credential of a user-provided service.

Endpoints:
    GET /cups/{service_instance}/{name}
        200 with the plain-text value of
        ``vcap.services.{service_instance}.credentials.{name}``,
        404 with an empty body when the property is absent.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

from music_spine.api.deps import Env
from music_spine.core.config.bindings import VCAP_PROPERTY_PREFIX
from music_spine.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


def credential_property(service_instance: str, name: str) -> str:
    """Property key under which a bound service's credential is exposed."""
    return f"{VCAP_PROPERTY_PREFIX}.{service_instance}.credentials.{name}"


@router.get(
    "/cups/{service_instance}/{name}",
    response_class=PlainTextResponse,
    responses={404: {"description": "Credential not found"}},
)
def get_credential(service_instance: str, name: str, env: Env) -> Response:
    """Return a credential value; the value itself is never logged."""
    key = credential_property(service_instance, name)
    logger.info("credential_requested", service_instance=service_instance, name=name, property=key)

    value = env.get_property(key)
    if value is None:
        logger.info("credential_not_found", property=key)
        return Response(status_code=404)

    logger.info("credential_found", property=key)
    return PlainTextResponse(str(value), status_code=200)
