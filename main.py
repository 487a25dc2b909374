"""
Enterprise auth backend — application entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_error_handlers, register_middleware
from auth.jwt import TokenIssuer
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService
from config.logging_config import configure_logging
from config.settings import Settings, config
from database.session import build_database
from database.store import UserStore

configure_logging(config)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine, session_factory = build_database(
            settings.database_url, connect_timeout=settings.store_timeout_seconds
        )
        if settings.auto_create_schema:
            await UserStore.create_schema(engine)

        tokens = TokenIssuer(settings.jwt_secret, settings.token_expiry_seconds)
        if not tokens.configured:
            logger.warning("JWT_SECRET not set; register and login will fail until it is configured")

        app.state.auth_service = AuthService(
            store=UserStore(session_factory, timeout=settings.store_timeout_seconds),
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            tokens=tokens,
        )
        logger.info("Application ready to accept requests.")
        try:
            yield
        finally:
            app.state.auth_service = None
            await engine.dispose()
            logger.info("Database engine disposed")

    app = FastAPI(
        title="Enterprise Auth",
        version="1.0.0",
        description="Register / login with signed bearer tokens.",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Origin", "X-Requested-With", "Accept"],
    )

    register_middleware(app, expose_stack_traces=settings.expose_stack_traces)
    register_error_handlers(app, expose_stack_traces=settings.expose_stack_traces)

    # Routes
    app.include_router(auth_router, prefix="/api/auth")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )
