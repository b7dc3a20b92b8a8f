"""The Alembic migration produces the same tables as the ORM metadata."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from notebridge.core.orm import NotebridgeBase

ROOT = Path(__file__).resolve().parents[2]


def _config(url: str) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


class TestMigrations:
    def test_upgrade_matches_metadata(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'migrated.db'}"
        monkeypatch.setenv("NOTEBRIDGE_DATABASE_URL", url)
        command.upgrade(_config(url), "head")

        engine = create_engine(url)
        try:
            inspector = inspect(engine)
            tables = set(inspector.get_table_names()) - {"alembic_version"}
            assert tables == set(NotebridgeBase.metadata.tables)
            for name, table in NotebridgeBase.metadata.tables.items():
                migrated = {c["name"] for c in inspector.get_columns(name)}
                assert migrated == set(table.columns.keys()), name
        finally:
            engine.dispose()

    def test_downgrade_drops_everything(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'migrated.db'}"
        monkeypatch.setenv("NOTEBRIDGE_DATABASE_URL", url)
        cfg = _config(url)
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        engine = create_engine(url)
        try:
            assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
        finally:
            engine.dispose()
