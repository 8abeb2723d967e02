"""Registry of every table model.

Importing this package fills SQLModel.metadata with the users,
signup_requests and refresh_tokens tables. app/alembic/env.py imports it
before autogenerating, and the test suite imports it before create_all.
"""

from app.auth.models import RefreshToken  # noqa: F401
from app.signup.models import SignupRequest  # noqa: F401
from app.user.models import User  # noqa: F401
