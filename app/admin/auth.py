import uuid

from sqladmin.authentication import AuthenticationBackend
from sqlmodel import Session
from starlette.requests import Request

from app.core.security import verify_password
from app.core.settings import get_settings
from app.db.engine import engine
from app.user.models import User, UserRole
from app.user.service import get_user_by_email


def is_panel_admin(user: User) -> bool:
    return user.role == UserRole.admin and user.email_verified


def authenticate_admin(session: Session, email: str, password: str) -> User | None:
    """Return the admin account for these credentials, or None.

    Only verified accounts with the admin role may use the panel.
    """
    user = get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user if is_panel_admin(user) else None


class AdminAuth(AuthenticationBackend):
    """SQLAdmin auth backed by admin users, using Starlette sessions."""

    def __init__(self) -> None:
        # SQLAdmin uses this secret internally (e.g. login form protection).
        # It must be stable and should match the session middleware secret.
        settings = get_settings()
        super().__init__(secret_key=settings.session_secret_key)

    def _session(self) -> Session:
        return Session(engine)

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = str(form.get("username", form.get("email", ""))).strip()
        password = str(form.get("password", ""))

        with self._session() as session:
            user = authenticate_admin(session, email, password)
            if user is None:
                return False
            request.session["admin_user_id"] = str(user.id)
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        """Re-check the account on every request so demotion ends panel access."""
        raw_id = request.session.get("admin_user_id")
        if not raw_id:
            return False

        try:
            user_id = uuid.UUID(raw_id)
        except ValueError:
            request.session.clear()
            return False

        with self._session() as session:
            user = session.get(User, user_id)
            if user is None or not is_panel_admin(user):
                request.session.clear()
                return False
        return True
