"""Main FastAPI application for TaskDesk."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskdesk import __version__
from taskdesk.db.init import init_db
from taskdesk.errors import TaskDeskError, Unauthorized, ValidationError
from taskdesk.logging_setup import configure_logging
from taskdesk.middleware.cors import add_cors_middleware
from taskdesk.routers import auth_router, tasks_router
from taskdesk.schemas.base import field_errors

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    try:
        init_db()
    except Exception:
        logger.exception("Database initialization failed; check DATABASE_URL")
        raise
    logger.info("Application startup complete.")
    yield


async def taskdesk_error_handler(request: Request, exc: TaskDeskError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(field_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="TaskDesk API",
        description="REST API for a personal task manager",
        version=__version__,
        lifespan=lifespan,
    )

    add_cors_middleware(app)

    app.add_exception_handler(TaskDeskError, taskdesk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    @app.get("/")
    async def root():
        """Root endpoint - API welcome message."""
        return {
            "message": "Welcome to the TaskDesk API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(auth_router, prefix="/api")  # /api/auth/register, /api/auth/login, ...
    app.include_router(tasks_router, prefix="/api")  # /api/tasks, /api/tasks/{task_id}, ...
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
