"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

_CLOUD_LIKE_ENVIRONMENTS = {"prod", "production", "staging", "cloud"}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's psycopg driver form.

    Supabase hands out `postgres://` / `postgresql://` connection strings.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def find_database_url() -> str | None:
    """
    Return the configured database URL, or None when nothing is set.

    Priority:
    1) DATABASE_URL
    2) SUPABASE_DB_URL
    3) CLOUD_DATABASE_URL when ENVIRONMENT is cloud-like
    4) LOCAL_DATABASE_URL
    """

    load_env_files()

    for name in ("DATABASE_URL", "SUPABASE_DB_URL"):
        value = (os.getenv(name) or "").strip()
        if value:
            return normalize_postgres_url(value)

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    cloud_url = (os.getenv("CLOUD_DATABASE_URL") or "").strip()
    if environment in _CLOUD_LIKE_ENVIRONMENTS and cloud_url:
        return normalize_postgres_url(cloud_url)

    local_url = (os.getenv("LOCAL_DATABASE_URL") or "").strip()
    if local_url:
        return normalize_postgres_url(local_url)

    return None


def resolve_database_url() -> str:
    """
    Return the configured database URL or raise when none is set.
    """

    url = find_database_url()
    if url is None:
        raise RuntimeError(
            "No database URL configured. Set DATABASE_URL or SUPABASE_DB_URL, or configure "
            "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
        )
    return url
