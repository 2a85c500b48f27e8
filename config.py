import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the service.

    Defaults match a local MongoDB with the ``gestionGruposUsuarios`` database,
    so the service behaves the same when no environment is provided.
    """

    database_url: str = "mongodb://localhost:27017"
    database_name: str = "gestionGruposUsuarios"
    users_collection: str = "usuarios"
    groups_collection: str = "grupos"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    server_selection_timeout_ms: int = 5000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


def load_settings() -> Settings:
    """Build Settings from the environment (and .env file, if any)."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid LOG_LEVEL '{log_level}'. Must be one of: {', '.join(LOG_LEVELS)}"
        )

    port = _get_int("PORT", 3000)
    if not 0 < port < 65536:
        raise ConfigurationError(f"PORT out of range: {port}")

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        database_url=os.getenv("DATABASE_URL", "mongodb://localhost:27017"),
        database_name=os.getenv("DATABASE_NAME", "gestionGruposUsuarios"),
        users_collection=os.getenv("USERS_COLLECTION", "usuarios"),
        groups_collection=os.getenv("GROUPS_COLLECTION", "grupos"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=log_level,
        server_selection_timeout_ms=_get_int("SERVER_SELECTION_TIMEOUT_MS", 5000),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )
