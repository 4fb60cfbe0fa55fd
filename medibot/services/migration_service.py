"""One-shot schema migration from a raw SQL file.

Used to bootstrap a database outside Alembic: the file is split into
statements, each runs in its own transaction, and "already applied" style
errors are skipped so the script can be re-run safely.
"""
import logging
import re
from dataclasses import dataclass, field

from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

logger = logging.getLogger(__name__)

SKIPPABLE_ERRORS = (
    "already exists",
    "does not exist",
    "multiple primary keys",
    "policy",
    "trigger",
    "function",
    "index",
)

PROFILE_TABLES = (
    "patient_profiles",
    "pharmacy_admin_profiles",
    "super_admin_profiles",
    "healthcare_provider_profiles",
)

_DOLLAR_TAG = re.compile(r"\$[A-Za-z_][A-Za-z0-9_]*\$|\$\$")


@dataclass
class MigrationSummary:
    total: int = 0
    executed: int = 0
    skipped: list = field(default_factory=list)
    failed: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "executed": self.executed,
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }


def _is_escape_string(sql: str, quote: int) -> bool:
    """True when the quote at ``quote`` opens an E'...' string (backslash escapes)."""
    if quote == 0 or sql[quote - 1] not in "Ee":
        return False
    before = sql[quote - 2] if quote >= 2 else ""
    return not (before.isalnum() or before == "_")


def _escape_string_end(sql: str, start: int) -> int:
    i, n = start, len(sql)
    while i < n:
        if sql[i] == "\\":
            i += 2
        elif sql[i] == "'":
            if i + 1 < n and sql[i + 1] == "'":
                i += 2
            else:
                return i + 1
        else:
            i += 1
    return n


def split_sql_statements(sql: str) -> list[str]:
    """Split on top-level semicolons.

    Semicolons inside quoted strings, quoted identifiers, comments and
    dollar-quoted bodies do not end a statement. E'...' strings honour
    backslash escapes. Statements that hold only
    comments or whitespace are dropped.
    """
    statements = []
    buf = []
    has_code = False
    i, n = 0, len(sql)

    while i < n:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ""

        if ch == "-" and nxt == "-":
            end = sql.find("\n", i)
            end = n if end == -1 else end
            buf.append(sql[i:end])
            i = end
            continue

        if ch == "/" and nxt == "*":
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
            buf.append(sql[i:end])
            i = end
            continue

        if ch == "'" and _is_escape_string(sql, i):
            end = _escape_string_end(sql, i + 1)
            buf.append(sql[i:end])
            has_code = True
            i = end
            continue

        if ch in ("'", '"'):
            # a doubled quote is an escaped quote and simply reopens the literal
            end = sql.find(ch, i + 1)
            end = n if end == -1 else end + 1
            buf.append(sql[i:end])
            has_code = True
            i = end
            continue

        if ch == "$":
            match = _DOLLAR_TAG.match(sql, i)
            if match:
                tag = match.group(0)
                end = sql.find(tag, match.end())
                end = n if end == -1 else end + len(tag)
                buf.append(sql[i:end])
                has_code = True
                i = end
                continue

        if ch == ";":
            if has_code:
                statements.append("".join(buf).strip())
            buf, has_code = [], False
            i += 1
            continue

        if not ch.isspace():
            has_code = True
        buf.append(ch)
        i += 1

    if has_code:
        statements.append("".join(buf).strip())
    return statements


def classify_error(message: str) -> str:
    """``skipped`` for errors that mean the object is already in place, else ``failed``."""
    lowered = (message or "").lower()
    return "skipped" if any(token in lowered for token in SKIPPABLE_ERRORS) else "failed"


def _error_message(exc: Exception) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def run_schema_migration(engine: Engine, sql: str) -> MigrationSummary:
    statements = split_sql_statements(sql)
    summary = MigrationSummary(total=len(statements))
    logger.info("Found %d SQL statements to execute", len(statements))

    # an unreachable database is a failed run, not a list of failed statements
    with engine.connect():
        pass

    for number, statement in enumerate(statements, start=1):
        try:
            with engine.begin() as conn:
                conn.exec_driver_sql(statement)
        except SQLAlchemyError as e:
            message = _error_message(e)
            if classify_error(message) == "skipped":
                summary.skipped.append((number, message))
                logger.warning("Statement %d skipped (%s)", number, message.split(":")[0])
            else:
                summary.failed.append((number, message))
                logger.error("Error in statement %d: %s", number, message)
            continue
        summary.executed += 1
        logger.debug("Statement %d executed", number)

    logger.info(
        "Migration finished: %(executed)d executed, %(skipped)d skipped, %(failed)d failed",
        summary.as_dict(),
    )
    return summary


def verify_profile_tables(engine: Engine) -> dict[str, bool]:
    results = {}
    for table in PROFILE_TABLES:
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql(f"SELECT 1 FROM {table} LIMIT 1")
            results[table] = True
            logger.info("Table %s is accessible", table)
        except SQLAlchemyError as e:
            results[table] = False
            logger.error("Table %s has issues: %s", table, _error_message(e))
    return results
