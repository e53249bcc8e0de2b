from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import schemas
from .errors import FolioError, StorageError
from .routers import admin, comments, posts, system
from .seed import ensure_seed_data
from .settings import FOLIO_RUN_MIGRATIONS, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

_STARTUP_COMPLETE = False


def _alembic_config() -> Config:
    base_dir = Path(__file__).resolve().parent.parent
    cfg = Config(str(base_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(base_dir / "alembic"))
    return cfg


def run_migrations() -> None:
    logger.info("run_migrations: Starting...")
    try:
        from alembic.runtime.migration import MigrationContext
        from alembic.script import ScriptDirectory
        from .db import engine

        alembic_cfg = _alembic_config()
        try:
            with engine.connect() as connection:
                context = MigrationContext.configure(connection)
                current_rev = context.get_current_revision()
                head = ScriptDirectory.from_config(alembic_cfg).get_current_head()
                if current_rev == head:
                    logger.info(f"Database is up to date (revision: {current_rev}), skipping migrations.")
                    return
                logger.info(f"Current revision: {current_rev}, target revision: {head}. Running migrations...")
        finally:
            # Ensure connection is closed before calling command.upgrade
            engine.dispose()

        command.upgrade(alembic_cfg, "head")
        logger.info("run_migrations: Completed successfully.")
    except Exception as e:
        logger.error(f"run_migrations: Error occurred: {e}", exc_info=True)
        raise


def run_startup_tasks() -> None:
    global _STARTUP_COMPLETE
    if _STARTUP_COMPLETE:
        logger.info("run_startup_tasks: Already completed, skipping.")
        return
    try:
        if FOLIO_RUN_MIGRATIONS:
            run_migrations()
        else:
            logger.info("run_startup_tasks: FOLIO_RUN_MIGRATIONS is off, skipping migrations.")
        ensure_seed_data()
        _STARTUP_COMPLETE = True
        logger.info("Startup tasks completed.")
    except Exception as e:
        logger.error(f"Startup tasks failed: {e}", exc_info=True)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    # Server won't start until startup tasks complete
    run_startup_tasks()
    logger.info("Folio API server ready")
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    title="Folio API",
    version="1.0.0",
    description="Content lifecycle and moderation API for a blog CMS",
    lifespan=lifespan,
)

# CORS Configuration - restrict to specific origins
cors_origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost")
if cors_origins_str == "*":
    logger.warning(
        "CORS is configured to allow all origins. "
        "This is insecure for production. Set CORS_ORIGINS to specific domains."
    )
cors_origins = [origin.strip() for origin in cors_origins_str.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    max_age=600,  # Cache preflight requests for 10 minutes
)


# ============================================================================
# ERROR RESPONSES
# ============================================================================


def _problem(status_code: int, title: str, detail: str | None, code: str | None) -> JSONResponse:
    body = schemas.Problem(title=title, status=status_code, detail=detail, code=code)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    # Backend details were logged where the failure happened
    return _problem(exc.status_code, exc.title, "The operation could not be completed", exc.code)


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path}: storage failure: {exc}", exc_info=exc)
    return _problem(
        StorageError.status_code, StorageError.title, "The operation could not be completed", StorageError.code
    )


@app.exception_handler(FolioError)
async def folio_error_handler(request: Request, exc: FolioError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.code} {exc.detail}")
    return _problem(exc.status_code, exc.title, exc.detail, exc.code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return _problem(400, "Validation failed", "; ".join(messages), "VALIDATION")


# Include all routers
app.include_router(system.router)
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(admin.router)
