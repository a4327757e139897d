"""Form Service - FastAPI server for contact form submissions."""

import logging
import mimetypes
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.config import ServiceConfig, load_config
from src.shared.database import create_db_engine, create_session_factory, init_db
from src.shared.submissions.routes import router as submissions_router
from src.shared.upload_files.size_limit import UploadSizeLimitMiddleware
from src.shared.upload_files.upload_files import ensure_upload_dir


def _cors_headers(request: Request) -> dict:
    """CORS headers for error responses built outside CORSMiddleware's reach."""
    origin = request.headers.get("origin")
    if origin and origin == request.app.state.config.allowed_origin:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": "GET, POST",
        }
    return {}


def _error_content(detail) -> dict:
    if isinstance(detail, str):
        return {"error": detail}
    return {"error": str(detail)}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Renders FastAPI and Starlette HTTP exceptions as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.detail),
        headers={**(exc.headers or {}), **_cors_headers(request)}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logging.info(f"Request validation failed: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request."},
        headers=_cors_headers(request)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Last resort: log the failure, never leak it."""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
        headers=_cors_headers(request)
    )


async def root():
    return PlainTextResponse("Server running")


async def get_upload(filename: str, request: Request):
    """Serves a stored attachment. No access control: anyone with the name can fetch it."""
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid filename")

    file_path = request.app.state.config.upload_dir / filename
    if not file_path.exists() or not file_path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return FileResponse(path=str(file_path), media_type=media_type)


def create_app(config: Optional[ServiceConfig] = None) -> FastAPI:
    """
    Builds the service. The engine, session factory and upload directory are
    created here once and handed to request handlers through app.state.
    """
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Form Service",
        description="Accepts contact form submissions with optional attachments",
        version="0.1.0"
    )

    engine = create_db_engine(config.database_url)
    init_db(engine)
    ensure_upload_dir(config.upload_dir)

    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Size guard first so CORSMiddleware wraps its early 413 responses too
    app.add_middleware(UploadSizeLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.allowed_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_api_route("/", root, methods=["GET"], response_class=PlainTextResponse)
    app.add_api_route("/uploads/{filename}", get_upload, methods=["GET"])
    app.include_router(submissions_router)

    logging.info(
        f"Form service configured: database={engine.url.render_as_string(hide_password=True)}, "
        f"uploads={config.upload_dir}, origin={config.allowed_origin}"
    )
    return app
