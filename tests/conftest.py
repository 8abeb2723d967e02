import inspect
import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

# Settings are read at import time by the engine and admin backend
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402, F401
from app.auth.otp import OtpVerifier  # noqa: E402
from app.auth.service import AuthService  # noqa: E402
from app.auth.tokens import TokenIssuer, get_token_issuer  # noqa: E402
from app.core.email import EmailResult, EmailService, get_email_service  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.db.engine import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.signup.service import SignupReviewService  # noqa: E402
from app.user.models import User, UserRole  # noqa: E402

TEST_PASSWORD = "password123"
TEST_OTP = "123456"


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="password_hash", scope="session")
def password_hash_fixture() -> str:
    """bcrypt hash of TEST_PASSWORD, computed once per run."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session, password_hash: str) -> Callable[..., User]:
    """Factory for persisted users with TEST_PASSWORD."""

    def _make_user(
        email: str,
        role: UserRole = UserRole.user,
        email_verified: bool = True,
        phone: str | None = None,
        full_name: str = "Test User",
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            phone=phone,
            email_verified=email_verified,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture(name="test_user")
def test_user_fixture(make_user) -> User:
    """A verified job seeker with a phone number."""
    return make_user("test@example.com", phone="+963911000001")


@pytest.fixture(name="admin_user")
def admin_user_fixture(make_user) -> User:
    return make_user("admin@example.com", role=UserRole.admin, full_name="Admin")


@pytest.fixture(name="company_user")
def company_user_fixture(make_user) -> User:
    return make_user("company@example.com", role=UserRole.company)


@pytest.fixture(name="unverified_user")
def unverified_user_fixture(session: Session, make_user) -> User:
    """An unverified user holding TEST_OTP, valid for another 10 minutes."""
    user = make_user("unverified@example.com", email_verified=False)
    user.email_verification_otp = TEST_OTP
    user.otp_expires_at = datetime.now(UTC) + timedelta(minutes=10)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="mock_email_service")
def mock_email_service_fixture():
    """EmailService double that records sends instead of calling Resend."""
    mock_service = MagicMock(spec=EmailService)
    mock_service.configured = True
    mock_service.send_otp.return_value = EmailResult(sent=True, message_id="msg_1")
    mock_service.send.return_value = EmailResult(sent=True, message_id="msg_1")
    return mock_service


@pytest.fixture(name="token_issuer")
def token_issuer_fixture() -> TokenIssuer:
    return TokenIssuer(
        secret=os.environ["JWT_SECRET"],
        refresh_secret=os.environ["JWT_REFRESH_SECRET"],
    )


@pytest.fixture(name="otp_verifier")
def otp_verifier_fixture(mock_email_service: MagicMock) -> OtpVerifier:
    return OtpVerifier(mock_email_service)


@pytest.fixture(name="auth_service")
def auth_service_fixture(
    token_issuer: TokenIssuer, otp_verifier: OtpVerifier
) -> AuthService:
    return AuthService(token_issuer, otp_verifier)


@pytest.fixture(name="review_service")
def review_service_fixture(otp_verifier: OtpVerifier) -> SignupReviewService:
    return SignupReviewService(otp_verifier)


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(
    session: Session, token_issuer: TokenIssuer
) -> Callable[[User], dict[str, str]]:
    """Build a bearer Authorization header for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        pair = token_issuer.issue_token_pair(session, user.id, user.email, user.role)
        return {"Authorization": f"Bearer {pair.access_token}"}

    return _auth_headers


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    token_issuer: TokenIssuer,
    mock_email_service: MagicMock,
):
    """Create a test client with overridden dependencies.

    Authentication is real: send a header from auth_headers to act as a user.
    """

    def get_session_override():
        return session

    def get_token_issuer_override():
        return token_issuer

    def get_email_service_override():
        return mock_email_service

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_token_issuer] = get_token_issuer_override
    app.dependency_overrides[get_email_service] = get_email_service_override

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="user_client")
def user_client_fixture(client: TestClient, test_user: User, auth_headers):
    """Client authenticated as test_user."""
    client.headers.update(auth_headers(test_user))
    return client


@pytest.fixture(name="admin_client")
def admin_client_fixture(client: TestClient, admin_user: User, auth_headers):
    """Client authenticated as admin_user."""
    client.headers.update(auth_headers(admin_user))
    return client
