from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from sqladmin import Admin

from app.admin.auth import AdminAuth
from app.admin.views import RefreshTokenAdmin, SignupRequestAdmin, UserAdmin
from app.auth.router import router as auth_router
from app.auth.tokens import get_token_issuer
from app.core.constants import ADMIN_PANEL_BASE_URL
from app.core.cors import add_cors_middleware
from app.core.email import get_email_service
from app.core.exception_handlers import register_exception_handlers
from app.core.logging import configure_logging
from app.core.request_logging import add_request_logging_middleware
from app.db.engine import engine
from app.health.router import router as health_router
from app.signup.router import router as signup_router
from app.user.router import router as user_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Missing JWT secrets abort startup here
    get_token_issuer()
    get_email_service()
    yield


app = FastAPI(title="RT-SYR", version="0.1.0", lifespan=lifespan)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(signup_router)
api_router.include_router(user_router)

app.include_router(api_router)

add_request_logging_middleware(app)
add_cors_middleware(app)
register_exception_handlers(app)

# SQLAdmin UI; the auth backend's secret enables its session middleware
admin = Admin(
    app=app,
    engine=engine,
    authentication_backend=AdminAuth(),
    base_url=ADMIN_PANEL_BASE_URL,
    title="RT-SYR Admin",
)
admin.add_view(UserAdmin)
admin.add_view(SignupRequestAdmin)
admin.add_view(RefreshTokenAdmin)
