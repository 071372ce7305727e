"""
Auth service — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from auth.routes import router as auth_router
from config.settings import config
from database.models import Base
from database.session import engine

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "google.auth"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Auth Service",
        version="1.0.0",
        description="Registration, password / Google login and JWT session lifecycle.",
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix=config.api_prefix)

    @app.on_event("startup")
    async def on_startup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        if not config.google_client_id:
            logger.warning("GOOGLE_CLIENT_ID not set, /auth/google accepts any client id")
        logger.info("Auth API ready at %s/auth", config.api_prefix)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
