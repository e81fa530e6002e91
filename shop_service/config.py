# shop_service/config.py
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from shop_service.exceptions import ConfigError


def _bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24
    db_echo: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return (
        f"postgresql+asyncpg://{os.getenv('DB_USER', 'postgres')}:{os.getenv('DB_PASSWORD', 'postgres')}"
        f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}/{os.getenv('DB_NAME', 'ecommerce')}"
    )


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present).

    Called once at startup; the result is handed to the application factory.
    """
    load_dotenv()

    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise ConfigError("JWT_SECRET must be set")

    try:
        expiration = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
        port = int(os.getenv("PORT", "8080"))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e

    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    return Settings(
        database_url=_database_url(),
        jwt_secret=secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expiration_hours=expiration,
        db_echo=_bool(os.getenv("DB_ECHO", "false")),
        cors_origins=origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
    )
