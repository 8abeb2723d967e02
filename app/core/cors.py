from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.request_logging import REQUEST_ID_HEADER
from app.core.settings import get_settings


def add_cors_middleware(app: FastAPI):
    settings = get_settings()

    # Auth is bearer-only; no cookies cross origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
