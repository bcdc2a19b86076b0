"""
config.py — Centralized Application Configuration Loader

Purpose:
- Define a single source of truth for application settings.
- Load and validate environment variables from `.env` or OS environment.
- Cover database location, relationship side file, cache TTLs and the
  hierarchy defaults used by the company endpoints.

This module does NOT:
- Execute any DB connections.
- Read the relationship CSV (see app/services/companies/relationships.py).
- Modify runtime settings.
"""

from pathlib import Path
from typing import Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/app/core/config.py
# .env should be at: backend/.env
_CONFIG_DIR = Path(__file__).parent  # backend/app/core
BACKEND_DIR = _CONFIG_DIR.parent.parent  # backend
_ENV_FILE = BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    _ENV_FILE_PATH = str(_ENV_FILE.resolve())
else:
    # Fallback: use relative path (pydantic will look in CWD)
    _ENV_FILE_PATH = ".env"


class Settings(BaseSettings):
    """
    Settings container for the company backend.
    """

    # Database
    DATABASE_URL: str = Field(
        "sqlite:///./companies.db",
        description="SQLAlchemy connection URL (sqlite, postgresql or mysql)",
    )

    # Side files
    RELATIONSHIPS_CSV_PATH: str = Field(
        "data/relationships.csv",
        description="CSV of company_code,parent_company pairs (relative paths resolve against backend/)",
    )
    COMPANIES_CSV_PATH: str = Field(
        "data/companies.csv",
        description="CSV used by scripts/import_companies.py",
    )

    # Cache TTLs
    CACHE_TTL_ALL_SECONDS: int = Field(300, description="TTL for the all-companies list")
    CACHE_TTL_ENTITY_SECONDS: int = Field(600, description="TTL for a single company")
    CACHE_TTL_QUERY_SECONDS: int = Field(300, description="TTL for dimension queries")
    CACHE_TTL_HIERARCHY_SECONDS: int = Field(300, description="TTL for hierarchy trees")

    # Hierarchy
    HIERARCHY_DEFAULT_ROOT: str = Field("C0", description="Root company code when none is given")
    HIERARCHY_DEFAULT_MAX_DEPTH: int = Field(3, ge=0, description="Depth bound when none is given")
    HIERARCHY_PREFIX_FALLBACK: bool = Field(
        True,
        description="Treat longer codes sharing a node's code as its children when no relationship entry matches",
    )

    # Runtime
    LOG_LEVEL: str = Field("INFO", description="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("DATABASE_URL", "LOG_LEVEL", mode="before")
    @classmethod
    def strip_value(cls, v: Any) -> str:
        """Strip surrounding whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v or ""

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return (v or "INFO").upper()

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


def resolve_backend_path(raw: str) -> Path:
    """
    Resolve a configured path. Relative paths are anchored at backend/ so
    scripts and the server find the same files regardless of CWD.
    """
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = BACKEND_DIR / path
    return path


# Singleton: every import of `settings` references the same object.
settings = Settings()
