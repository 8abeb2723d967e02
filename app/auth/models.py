"""Auth domain models.

Persisted refresh tokens. A row exists for every refresh token that can
still be redeemed; redemption deletes it.
"""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.mixins import CreatedAtMixin


class RefreshToken(CreatedAtMixin, SQLModel, table=True):
    __tablename__: str = "refresh_tokens"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    token: str = Field(index=True, unique=True, max_length=1024)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    expires_at: datetime
