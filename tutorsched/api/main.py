from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars
from tutorsched.api.routes import register_routes
from tutorsched.core.config import get_settings
from tutorsched.core.errors import (
    AuthorizationError,
    InvalidCredentials,
    NotFound,
    SchedulingError,
    StateConflict,
)
from tutorsched.core.logging import setup_logging
from tutorsched.domain.engine import SchedulingEngine
from tutorsched.infrastructure.db.session import dispose_engine, get_session_factory, init_models
from tutorsched.infrastructure.repositories import StateRepository, WriteBehindPersister
from tutorsched.workers.maintenance import maintenance_loop, run_weekly_reset

logger = structlog.get_logger()


def error_status(exc: SchedulingError) -> int:
    """HTTP status code for an engine failure category."""
    if isinstance(exc, InvalidCredentials):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, AuthorizationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, StateConflict):
        return status.HTTP_409_CONFLICT
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def create_app(clock: Callable[[], datetime] = datetime.now) -> FastAPI:
    """Application factory for the scheduler API."""
    settings = get_settings()
    setup_logging(json_logs=settings.environment not in ("local", "development"))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await init_models()
        repository = StateRepository(get_session_factory())
        document = await repository.load()

        engine = SchedulingEngine.from_document(document, settings)
        persister = WriteBehindPersister(
            repository,
            engine.to_document,
            delay_seconds=settings.persist_debounce_seconds,
        )
        engine.subscribe(persister)
        if document is None or engine.to_document() != document:
            persister.schedule()

        app.state.engine = engine
        app.state.persister = persister
        app.state.clock = clock

        run_weekly_reset(engine, clock)
        maintenance = asyncio.create_task(
            maintenance_loop(
                engine,
                interval_seconds=settings.maintenance_interval_seconds,
                clock=clock,
            )
        )
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
            users=len(engine.store.users),
        )
        try:
            yield
        finally:
            maintenance.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await maintenance
            await persister.close()
            await dispose_engine()
            logger.info("service_shutdown", writes=persister.writes, failures=persister.failures)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    cors_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]
    if settings.environment in ["local", "development"]:
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
        status_code = error_status(exc)
        logger.info(
            "request_rejected",
            code=exc.code,
            status_code=status_code,
            detail=exc.message,
        )
        return JSONResponse(
            status_code=status_code,
            content={"code": exc.code, "detail": exc.message},
        )

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
