"""Shared dependency aliases for FastAPI routes.

    from app.core.deps import SessionDep, SettingsDep

Auth-related aliases (CurrentUserDep, AdminUserDep, service factories)
live in app.auth.dependencies.
"""

from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from app.core.settings import Settings, get_settings
from app.db.engine import get_session

SessionDep = Annotated[Session, Depends(get_session)]

SettingsDep = Annotated[Settings, Depends(get_settings)]
