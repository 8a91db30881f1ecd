"""
API schemas — the application-info payload and RFC 7807 errors.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Example:
        {
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": "http://testserver/appinfo"
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")


class AppInfoSchema(BaseModel):
    """Active profiles and bound services of the running process."""

    profiles: list[str] = Field(description="Active profiles, including the resolved store profile")
    services: list[str] = Field(description="Names of the bound services")
