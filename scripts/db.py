#!/usr/bin/env python3
import argparse
import sys

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, text

sys.path.append(".")

from src.config import build_database_url
from src.db.database import BookRepository, DatabaseManager


def get_db(use_sqlite: bool) -> DatabaseManager:
    return DatabaseManager(build_database_url(use_sqlite or None))


def migrate(db: DatabaseManager):
    cfg = Config("alembic.ini")
    # configparser interpolation treats % specially
    cfg.set_main_option("sqlalchemy.url", db.engine.url.render_as_string(hide_password=False).replace("%", "%%"))
    tables = inspect(db.engine).get_table_names()
    if "books" in tables and "alembic_version" not in tables:
        # Schema was created by the API at start-up; record it as current
        command.stamp(cfg, "head")
        print("Existing schema stamped at head")
        return
    command.upgrade(cfg, "head")
    print("Migration complete")


def test(db: DatabaseManager):
    try:
        with db.engine.connect() as conn:
            row = conn.execute(text("SELECT 1 AS ok")).fetchone()
            assert row[0] == 1

        tables = inspect(db.engine).get_table_names()
        print(f"Connection: OK")
        print(f"Tables: {tables}")
        if "books" in tables:
            print(f"  books: {BookRepository(db).count()} rows")

    except Exception as e:
        print(f"Connection FAILED: {e}")
        sys.exit(1)


def clear_all(db: DatabaseManager):
    removed = BookRepository(db).delete_all()
    print(f"All data cleared ({removed} books)")


def drop(db: DatabaseManager):
    db.drop_all()
    print("All tables dropped")


def main():
    parser = argparse.ArgumentParser(description="Database management")
    parser.add_argument("command", choices=["migrate", "test", "clear-all", "drop"])
    parser.add_argument("--sqlite", action="store_true", help="Use SQLite database")
    args = parser.parse_args()

    commands = {
        "migrate": migrate,
        "test": test,
        "clear-all": clear_all,
        "drop": drop,
    }
    db = get_db(args.sqlite)
    try:
        commands[args.command](db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
