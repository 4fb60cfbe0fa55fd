"""Developer commands, exposed as console scripts and via ``python -m medibot.cli``.

Usage (from project root):
  medibot-runserver --host=0.0.0.0 --port=8000 --no-reload
  medibot-tests -k locator
  medibot-migrate                     # defaults to `alembic upgrade head`
  medibot-init-env                    # copies .env.example -> .env if missing
  medibot-migrate-schema database_schema.sql

  python -m medibot.cli <command> [args]   # same commands, see COMMANDS
"""
from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

logger = logging.getLogger("medibot.cli")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SCHEMA_FILE = "database_schema.sql"


def _args() -> List[str]:
    return sys.argv[1:]


def _flag(args: List[str], name: str) -> Optional[str]:
    """Value of ``--name=value`` in ``args``, if present."""
    prefix = f"--{name}="
    for arg in args:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return None


def runserver(argv: List[str] | None = None) -> None:
    """Serve the API with uvicorn.

    Flags: ``--host=`` (127.0.0.1), ``--port=`` (8000), ``--reload`` / ``--no-reload``.
    Reload is on by default outside production.
    """
    import uvicorn

    from medibot.core.config import settings

    args = _args() if argv is None else argv
    host = _flag(args, "host") or "127.0.0.1"
    port = 8000
    raw_port = _flag(args, "port")
    if raw_port is not None:
        try:
            port = int(raw_port)
        except ValueError:
            print(f"Ignoring invalid port: {raw_port}")
    reload = settings.ENV != "production"
    if "--no-reload" in args:
        reload = False
    elif "--reload" in args:
        reload = True

    print(f"Starting {settings.APP_NAME} on {host}:{port} (reload={reload})")
    uvicorn.run("medibot.main:app", host=host, port=port, reload=reload)


def run_tests(argv: List[str] | None = None) -> int:
    """Run pytest, forwarding any arguments; returns pytest's exit code."""
    args = _args() if argv is None else argv
    return subprocess.run(["pytest", *args], cwd=PROJECT_ROOT).returncode


def run_migrations(argv: List[str] | None = None) -> int:
    """Run alembic with the given arguments, or ``upgrade head``."""
    args = (_args() if argv is None else argv) or ["upgrade", "head"]
    return subprocess.run(["alembic", *args], cwd=PROJECT_ROOT).returncode


def init_env(argv: List[str] | None = None) -> int:
    """Copy ``.env.example`` to ``.env`` unless ``.env`` already exists."""
    src = PROJECT_ROOT / ".env.example"
    dst = PROJECT_ROOT / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return 0
    if not src.exists():
        print(f".env.example not found at {src}")
        return 1
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")
    return 0


def migrate_schema(argv: List[str] | None = None) -> int:
    """Apply a raw SQL schema file statement by statement.

    Returns the process exit code: 1 when DATABASE_URL is missing, the file
    cannot be read or the run fails outright, else 0. Individual statement
    failures are reported in the summary and do not change the exit code.
    """
    from sqlalchemy import create_engine
    from sqlalchemy.exc import SQLAlchemyError

    from medibot.core.config import settings
    from medibot.core.logger import setup_logging
    from medibot.services.migration_service import run_schema_migration, verify_profile_tables

    setup_logging()
    argv = _args() if argv is None else argv
    schema_path = Path(argv[0] if argv else DEFAULT_SCHEMA_FILE)

    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL is not set; configure it in the environment or .env")
        return 1

    try:
        sql = schema_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Could not read %s: %s", schema_path, e)
        return 1

    logger.info("Starting %s database migration from %s", settings.APP_NAME, schema_path)
    try:
        engine = create_engine(settings.DATABASE_URL)
        try:
            summary = run_schema_migration(engine, sql)
            tables = verify_profile_tables(engine)
        finally:
            engine.dispose()
    except SQLAlchemyError as e:
        logger.error("Migration failed: %s", e)
        return 1

    print(
        f"Migration completed: {summary.executed} executed, "
        f"{len(summary.skipped)} skipped, {len(summary.failed)} failed"
    )
    for number, message in summary.failed:
        print(f"  statement {number}: {message}")
    for table, ok in tables.items():
        print(f"  {table}: {'accessible' if ok else 'NOT accessible'}")
    return 0


COMMANDS: Dict[str, Callable[[List[str]], Optional[int]]] = {
    "runserver": runserver,
    "run-tests": run_tests,
    "migrate": run_migrations,
    "init-env": init_env,
    "migrate-schema": migrate_schema,
}


def _exit(code: Optional[int]) -> None:
    sys.exit(code or 0)


# Console script entry points
def run_tests_entry() -> None:
    _exit(run_tests())


def run_migrations_entry() -> None:
    _exit(run_migrations())


def init_env_entry() -> None:
    _exit(init_env())


def migrate_schema_entry() -> None:
    _exit(migrate_schema())


def main(argv: List[str] | None = None) -> int:
    argv = _args() if argv is None else argv
    if not argv:
        print(__doc__)
        return 0
    command = COMMANDS.get(argv[0])
    if command is None:
        print(f"Unknown command: {argv[0]}. Available: {', '.join(COMMANDS)}")
        return 2
    return command(argv[1:]) or 0


if __name__ == "__main__":
    sys.exit(main())
