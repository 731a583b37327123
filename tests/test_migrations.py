# tests/test_migrations.py
from __future__ import annotations

from alembic import command
from sqlalchemy import create_engine, inspect

from quillpost.scripts.migrate import build_config

BLOG_TABLES = {"user_account", "post", "post_tag", "post_like", "comment"}


def _table_names(url: str) -> set[str]:
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_then_downgrade_fresh_sqlite(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("ALEMBIC_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = build_config(url)

    command.upgrade(cfg, "head")
    assert BLOG_TABLES | {"alembic_version"} <= _table_names(url)

    command.downgrade(cfg, "base")
    assert _table_names(url) == {"alembic_version"}
