"""
Route configuration and shared OpenAPI error documentation.

Routers take their prefix and tag from Routes and document error statuses
with CommonResponses, so every error in the schema carries the
{"type", "message"} body the exception handlers produce.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for all API endpoints."""

    AUTH = RouteConfig(prefix="/auth", tag="auth")
    USER = RouteConfig(prefix="/users", tag="users")
    SIGNUP_REQUESTS = RouteConfig(prefix="/admin/signup-requests", tag="admin")
    HEALTH = RouteConfig(prefix="/health", tag="health")


# SQLAdmin UI lives outside /admin so it does not shadow the admin API
ADMIN_PANEL_BASE_URL = "/admin-panel"


class ErrorResponse(BaseModel):
    """Body of every error response."""

    type: str
    message: str


def _error(status_code: int, description: str) -> dict[int, dict[str, Any]]:
    return {status_code: {"model": ErrorResponse, "description": description}}


class CommonResponses:
    """Error responses to merge into a router's or endpoint's `responses`."""

    BAD_REQUEST = _error(400, "Invalid request or business rule violated")
    UNAUTHORIZED = _error(401, "Missing, invalid or expired credentials")
    FORBIDDEN = _error(403, "Role is not allowed to access this resource")
    NOT_FOUND = _error(404, "Resource not found")
    CONFLICT = _error(409, "Resource already exists")


# Email templates: sources are compiled by scripts/compile_emails.py and
# only the compiled output is rendered at runtime
EmailTemplatesDir = Path(__file__).parent.parent / "templates" / "emails"
CompiledEmailTemplatesDir = EmailTemplatesDir / "compiled"

JinjaCompiledEmailTemplatesEnv = Environment(
    loader=FileSystemLoader(str(CompiledEmailTemplatesDir)),
    autoescape=select_autoescape(["html", "xml"]),
)
