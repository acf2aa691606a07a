"""Bring the database schema to the latest alembic revision.

Databases created by the app's ``create_all`` before migrations existed are
stamped at head first, so the initial revision is not replayed over them.
"""
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from gs_portfolio.core.database import DATABASE_URL

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"
CORE_TABLES = ("gs_files", "admin_users", "admin_sessions")


def alembic_config(ini_path: Path = ALEMBIC_INI) -> Config:
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(ini_path.parent / "alembic"))
    return config


def schema_state(url: str = DATABASE_URL) -> tuple:
    engine = create_engine(url.replace("+aiosqlite", ""))
    try:
        insp = inspect(engine)
        has_alembic = insp.has_table("alembic_version")
        existing_tables = [t for t in CORE_TABLES if insp.has_table(t)]
    finally:
        engine.dispose()
    return has_alembic, existing_tables


def main() -> None:
    config = alembic_config()
    has_alembic, existing_tables = schema_state()

    if existing_tables and not has_alembic:
        print(f"[db-migrate] Unversioned tables found ({', '.join(existing_tables)}), stamping head")
        command.stamp(config, "head")
    else:
        print(f"[db-migrate] has_alembic={has_alembic}, existing_tables={len(existing_tables)}")

    command.upgrade(config, "head")
    print("[db-migrate] Schema is at head")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"[db-migrate] Migration failed: {e}", file=sys.stderr)
        sys.exit(1)
