from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from hackboard.config import settings
from hackboard.db import SessionLocal
from hackboard.logging_setup import configure_logging
from hackboard.runtime import build_runtime
from hackboard.services.errors import ConflictError, ConsistencyViolation, NotFoundError
from hackboard.routes.system import router as system_router
from hackboard.routes.auth import router as auth_router
from hackboard.routes.participants import router as participants_router
from hackboard.routes.submissions import router as submissions_router, admin_router as admin_submissions_router
from hackboard.routes.leaderboard import router as leaderboard_router, admin_router as admin_leaderboard_router
from hackboard.routes.tasks import router as tasks_router, admin_router as admin_tasks_router
from hackboard.routes.realtime import router as realtime_router
import structlog

configure_logging()
log = structlog.get_logger()


def create_app(session_factory: async_sessionmaker[AsyncSession] = SessionLocal) -> FastAPI:
    runtime = build_runtime(session_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
        yield
        # Shutdown
        await runtime.shutdown()
        log.info("shutdown")

    app = FastAPI(
        title=f"{settings.app_display_name} API",
        version=settings.app_version,
        lifespan=lifespan,
        description=f"{settings.app_display_name} API for hackathon task submissions and the live leaderboard",
    )
    app.state.runtime = runtime
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(system_router)
    app.include_router(auth_router)
    app.include_router(participants_router)
    app.include_router(submissions_router)
    app.include_router(admin_submissions_router)
    app.include_router(leaderboard_router)
    app.include_router(admin_leaderboard_router)
    app.include_router(tasks_router)
    app.include_router(admin_tasks_router)
    app.include_router(realtime_router)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ConsistencyViolation)
    async def ledger_defect(request: Request, exc: ConsistencyViolation):
        log.error("ledger_consistency_violation", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"detail": "Ledger consistency check failed"})

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid
        structlog.contextvars.bind_contextvars(request_id=rid)
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        structlog.contextvars.clear_contextvars()
        return response

    return app


app = create_app()
