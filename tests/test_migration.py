"""Raw SQL schema migration: statement splitting, error triage and the CLI."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from medibot import cli
from medibot.core.config import settings
from medibot.services.migration_service import (
    classify_error, run_schema_migration, split_sql_statements, verify_profile_tables,
)


def test_split_simple_statements():
    sql = "CREATE TABLE a (id int);\nCREATE TABLE b (id int);\n"
    assert split_sql_statements(sql) == ["CREATE TABLE a (id int)", "CREATE TABLE b (id int)"]


def test_split_keeps_semicolons_in_strings_and_comments():
    sql = (
        "-- header; not a statement\n"
        "INSERT INTO notes VALUES ('a;b', \"odd;name\");\n"
        "/* block; comment */\n"
        "SELECT 1"
    )
    statements = split_sql_statements(sql)
    assert len(statements) == 2
    assert "'a;b'" in statements[0]
    assert statements[1].endswith("SELECT 1")


def test_split_dollar_quoted_function_body():
    sql = (
        "CREATE FUNCTION touch() RETURNS trigger AS $$\n"
        "BEGIN NEW.updated_at = now(); RETURN NEW; END;\n"
        "$$ LANGUAGE plpgsql;\n"
        "CREATE FUNCTION other() RETURNS void AS $body$ SELECT 1; $body$ LANGUAGE sql;"
    )
    statements = split_sql_statements(sql)
    assert len(statements) == 2
    assert statements[0].endswith("LANGUAGE plpgsql")
    assert "$body$ SELECT 1; $body$" in statements[1]


def test_split_drops_comment_only_chunks():
    assert split_sql_statements("-- nothing here;\n;;  /* still nothing */ ;") == []


@pytest.mark.parametrize("message, outcome", [
    ('relation "users" already exists', "skipped"),
    ('policy "own rows" for table "vitals" already exists', "skipped"),
    ('Trigger "touch" does not exist', "skipped"),
    ("multiple primary keys for table \"x\" are not allowed", "skipped"),
    ("syntax error at or near \"CREAT\"", "failed"),
    ("no such table: missing", "failed"),
    ("", "failed"),
])
def test_classify_error(message, outcome):
    assert classify_error(message) == outcome


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'schema.db'}")
    yield engine
    engine.dispose()


def test_rerun_skips_existing_objects(engine):
    sql = "CREATE TABLE patient_profiles (id integer primary key, name text);"

    first = run_schema_migration(engine, sql)
    assert first.as_dict() == {"total": 1, "executed": 1, "skipped": 0, "failed": 0}

    second = run_schema_migration(engine, sql)
    assert second.executed == 0
    assert len(second.skipped) == 1
    assert second.ok


def test_failures_do_not_stop_the_run(engine):
    sql = (
        "INSERT INTO missing VALUES (1);\n"
        "CREATE TABLE super_admin_profiles (id integer primary key);"
    )
    summary = run_schema_migration(engine, sql)
    assert summary.executed == 1
    assert [number for number, _ in summary.failed] == [1]
    assert not summary.ok


def test_verify_profile_tables(engine):
    run_schema_migration(engine, "CREATE TABLE patient_profiles (id integer);")
    tables = verify_profile_tables(engine)
    assert tables["patient_profiles"] is True
    assert tables["pharmacy_admin_profiles"] is False


def test_cli_requires_database_url(monkeypatch, tmp_path):
    schema = tmp_path / "schema.sql"
    schema.write_text("SELECT 1;")
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    assert cli.migrate_schema([str(schema)]) == 1


def test_cli_missing_file(tmp_path):
    assert cli.migrate_schema([str(tmp_path / "nope.sql")]) == 1


def test_cli_reports_summary(monkeypatch, tmp_path, capsys):
    schema = tmp_path / "schema.sql"
    schema.write_text(
        "CREATE TABLE patient_profiles (id integer);\n"
        "CREATE TABLE pharmacy_admin_profiles (id integer);\n"
        "CREATE TABLE patient_profiles (id integer);\n"
    )
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")

    assert cli.migrate_schema([str(schema)]) == 0
    out = capsys.readouterr().out
    assert "2 executed, 1 skipped, 0 failed" in out
    assert "patient_profiles: accessible" in out
    assert "super_admin_profiles: NOT accessible" in out


def test_cli_dispatches_commands(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    assert cli.main(["migrate-schema", str(tmp_path / "schema.sql")]) == 1
    assert cli.main(["launch"]) == 2
    assert cli.main([]) == 0


def test_split_escape_strings_with_backslash_quotes():
    sql = "INSERT INTO t VALUES (E'it\\'s; fine');SELECT 1;INSERT INTO t VALUES (e'a\\\\');SELECT 2"
    statements = split_sql_statements(sql)
    assert statements == [
        "INSERT INTO t VALUES (E'it\\'s; fine')",
        "SELECT 1",
        "INSERT INTO t VALUES (e'a\\\\')",
        "SELECT 2",
    ]


def test_plain_strings_still_treat_backslash_literally():
    # the trailing E belongs to the identifier, so this is an ordinary literal
    sql = "SELECT name FROM tablE'x\\';SELECT 1"
    assert len(split_sql_statements(sql)) == 2


def test_unreachable_database_raises(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'schema.db'}")
    with pytest.raises(OperationalError):
        run_schema_migration(engine, "CREATE TABLE patient_profiles (id integer);")
    engine.dispose()


def test_cli_unreachable_database_exits_1(monkeypatch, tmp_path, capsys):
    schema = tmp_path / "schema.sql"
    schema.write_text("CREATE TABLE patient_profiles (id integer);")
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'missing' / 'cli.db'}")

    assert cli.migrate_schema([str(schema)]) == 1
    assert "Migration completed" not in capsys.readouterr().out
