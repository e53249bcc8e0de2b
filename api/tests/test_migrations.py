"""Alembic revisions that fold the legacy is_admin and is_published columns."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text

API_DIR = Path(__file__).resolve().parent.parent

LEGACY_REVISION = "20260301000000"


@pytest.fixture()
def alembic_cfg(tmp_path) -> Config:
    cfg = Config(str(API_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{tmp_path / 'migrations.db'}")
    return cfg


@pytest.fixture()
def migration_engine(alembic_cfg):
    engine = create_engine(alembic_cfg.get_main_option("sqlalchemy.url"))
    yield engine
    engine.dispose()


def _columns(engine, table: str) -> set[str]:
    return {column["name"] for column in inspect(engine).get_columns(table)}


def test_upgrade_backfills_role_and_status(alembic_cfg, migration_engine):
    command.upgrade(alembic_cfg, LEGACY_REVISION)

    with migration_engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO users (id, name, email, is_admin) VALUES "
                "(1, 'Root', 'root@example.com', 1), "
                "(2, 'Reader', 'reader@example.com', 0)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO posts (id, slug, title, content, category, author, is_published, status) VALUES "
                "(1, 'flag-wins', 'Flag wins', 'x', 'Misc', 'A', 1, 'draft'), "
                "(2, 'flag-unset', 'Flag unset', 'x', 'Misc', 'A', 0, 'published'), "
                "(3, 'binned', 'Binned', 'x', 'Misc', 'A', 1, 'trash')"
            )
        )

    command.upgrade(alembic_cfg, "head")

    with migration_engine.connect() as conn:
        roles = dict(conn.execute(text("SELECT id, role FROM users")).all())
        statuses = dict(conn.execute(text("SELECT id, status FROM posts")).all())

    assert roles == {1: "admin", 2: "viewer"}
    assert statuses == {1: "published", 2: "draft", 3: "trash"}
    assert "is_admin" not in _columns(migration_engine, "users")
    assert "is_published" not in _columns(migration_engine, "posts")


def test_downgrade_restores_legacy_flags(alembic_cfg, migration_engine):
    command.upgrade(alembic_cfg, "head")

    with migration_engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO users (id, name, email, role) VALUES "
                "(1, 'Root', 'root@example.com', 'admin'), "
                "(2, 'Desk', 'desk@example.com', 'editor')"
            )
        )
        conn.execute(
            text(
                "INSERT INTO posts (id, slug, title, content, category, author, status) VALUES "
                "(1, 'live', 'Live', 'x', 'Misc', 'A', 'published'), "
                "(2, 'wip', 'Wip', 'x', 'Misc', 'A', 'draft')"
            )
        )

    command.downgrade(alembic_cfg, LEGACY_REVISION)

    with migration_engine.connect() as conn:
        flags = dict(conn.execute(text("SELECT id, is_admin FROM users")).all())
        published = dict(conn.execute(text("SELECT id, is_published FROM posts")).all())

    assert {k: bool(v) for k, v in flags.items()} == {1: True, 2: False}
    assert {k: bool(v) for k, v in published.items()} == {1: True, 2: False}
    assert "role" not in _columns(migration_engine, "users")

    command.downgrade(alembic_cfg, "base")
    assert "posts" not in inspect(migration_engine).get_table_names()
