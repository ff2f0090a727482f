"""FastAPI application factory. No business logic; only wiring, error mapping and middleware."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import Settings, get_settings
from app.core.container import build_container
from app.core.errors import AppError
from app.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _error_body(settings: Settings, message: str, exc: Exception) -> dict[str, object]:
    body: dict[str, object] = {"success": False, "message": message}
    if settings.APP_ENV == "dev" and settings.DEBUG:
        body["detail"] = type(exc).__name__
    return body


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        status_code = exc.kind.status_code
        if status_code >= 500:
            logger.error(
                "Request failed: %s %s kind=%s cause=%s",
                request.method,
                request.url.path,
                exc.kind.value,
                type(exc.cause).__name__ if exc.cause else None,
            )
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content=_error_body(settings, exc.message, exc),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = sorted(
            {".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()} - {""}
        )
        message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = f"Route not found: {request.url.path}"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(settings, "Internal Server Error", exc),
        )


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the application: settings are validated here so a bad config fails at
    startup, and every service is constructed once and stored on app.state.
    """
    if settings is None:
        load_dotenv()
        settings = get_settings()
    configure_logging(settings)
    owns_engine = engine is None
    container = build_container(settings, engine=engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        container.repository.seed_default_roles()
        logger.info("Auth API started: env=%s", settings.APP_ENV)
        yield
        if owns_engine:
            container.engine.dispose()

    app = FastAPI(
        title="Haru Auth API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Welcome to Haru auth and user management"}

    return app


def run() -> None:
    """Console entrypoint: serve create_app() on PORT."""
    import uvicorn

    load_dotenv()
    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
