"""Centralized environment-driven settings.

Keep this module lightweight: no app imports, to avoid circular deps. It loads
`.env` on import, so every module reading the environment imports it first.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Pagination for admin and public listings.
# Configured via .env: FOLIO_DEFAULT_PAGE_SIZE=10, FOLIO_MAX_PAGE_SIZE=100
FOLIO_DEFAULT_PAGE_SIZE: int = _int_env("FOLIO_DEFAULT_PAGE_SIZE", 10)
FOLIO_MAX_PAGE_SIZE: int = _int_env("FOLIO_MAX_PAGE_SIZE", 100)

# Deepest allowed reply level (0 = top-level comment).
FOLIO_COMMENT_MAX_DEPTH: int = _int_env("FOLIO_COMMENT_MAX_DEPTH", 5)

# Run `alembic upgrade head` during application startup.
FOLIO_RUN_MIGRATIONS: bool = _bool_env("FOLIO_RUN_MIGRATIONS", True)

# Optional bootstrap admin created by ensure_seed_data().
FOLIO_SEED_ADMIN_EMAIL: str | None = os.getenv("FOLIO_SEED_ADMIN_EMAIL") or None
FOLIO_SEED_ADMIN_NAME: str = os.getenv("FOLIO_SEED_ADMIN_NAME", "Admin User")

# Average reading speed used for Post.read_time.
WORDS_PER_MINUTE: int = 200

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
