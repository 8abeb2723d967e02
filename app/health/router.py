"""Health domain router.

Liveness plus a database round trip, for load balancers and uptime checks.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.constants import Routes
from app.core.deps import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.HEALTH.prefix, tags=[Routes.HEALTH.tag])


class HealthRead(BaseModel):
    status: str
    database: str


@router.get(
    "",
    response_model=HealthRead,
    responses={503: {"model": HealthRead, "description": "Database unreachable"}},
)
async def health(session: SessionDep):
    try:
        session.exec(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database ping failed")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "error"},
        )
    return HealthRead(status="ok", database="ok")
