"""Service configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Request


DEFAULT_DATABASE_URL = "sqlite:///./submissions.db"
DEFAULT_ALLOWED_ORIGIN = "http://localhost:3000"  # React dev server


@dataclass(frozen=True)
class ServiceConfig:
    """Settings consumed by create_app(). Built once at startup."""
    database_url: str = DEFAULT_DATABASE_URL
    upload_dir: Path = Path("uploads")
    allowed_origin: str = DEFAULT_ALLOWED_ORIGIN
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"


def normalize_database_url(url: str) -> str:
    # Heroku uses postgres:// but SQLAlchemy 2.0+ requires postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def load_config() -> ServiceConfig:
    """Read configuration from the environment (and a local .env file, if any)."""
    load_dotenv()

    return ServiceConfig(
        database_url=normalize_database_url(os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)),
        upload_dir=Path(os.environ.get("UPLOAD_DIR", "uploads")),
        allowed_origin=os.environ.get("ALLOWED_ORIGIN", DEFAULT_ALLOWED_ORIGIN),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3001")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )


def get_config(request: Request) -> ServiceConfig:
    """Dependency returning the config the app was built with."""
    return request.app.state.config
