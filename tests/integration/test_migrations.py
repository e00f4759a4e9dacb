import sqlite3

import pytest

from contentlab.adapters.sqlite.migrator import SQLiteMigrator


def test_migrations_apply_once(tmp_path, migrations_dir):
    db_path = str(tmp_path / "test.db")
    migrator = SQLiteMigrator(db_path, migrations_dir)

    assert migrator.run_migrations() == ["0001_initial.sql"]
    assert migrator.run_migrations() == []

    conn = sqlite3.connect(db_path)
    try:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    finally:
        conn.close()

    assert {"contents", "scheduled_publications", "_migrations"} <= tables


def test_down_section_is_not_applied(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_t.sql").write_text(
        "-- Up\nCREATE TABLE t (id TEXT);\n-- Down\nDROP TABLE t;\n"
    )
    db_path = str(tmp_path / "test.db")

    SQLiteMigrator(db_path, str(migrations)).run_migrations()

    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute("SELECT count(*) FROM t").fetchone()[0] == 0
    finally:
        conn.close()


def test_pending_lists_unapplied_in_version_order(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0002_second.sql").write_text("CREATE TABLE b (id TEXT);")
    (migrations / "0001_first.sql").write_text("CREATE TABLE a (id TEXT);")
    migrator = SQLiteMigrator(str(tmp_path / "test.db"), migrations)

    assert [m.version for m in migrator.pending()] == [1, 2]
    migrator.run_migrations()
    assert migrator.pending() == []
    assert migrator.applied() == {"0001_first.sql", "0002_second.sql"}


def test_failed_migration_leaves_no_partial_schema(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_broken.sql").write_text(
        "CREATE TABLE a (id TEXT);\nINSERT INTO missing_table VALUES (1);\n"
    )
    db_path = str(tmp_path / "test.db")
    migrator = SQLiteMigrator(db_path, migrations)

    with pytest.raises(RuntimeError, match="0001_broken.sql"):
        migrator.run_migrations()

    conn = sqlite3.connect(db_path)
    try:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    finally:
        conn.close()
    assert "a" not in tables
    assert migrator.applied() == set()


@pytest.mark.parametrize(
    "names,message",
    [
        (["0001_a.sql", "0001_b.sql"], "Duplicate migration version"),
        (["initial.sql"], "must look like"),
    ],
)
def test_invalid_migration_files(tmp_path, names, message):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    for name in names:
        (migrations / name).write_text("SELECT 1;")

    with pytest.raises(ValueError, match=message):
        SQLiteMigrator(str(tmp_path / "test.db"), migrations).available()


def test_missing_migrations_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        SQLiteMigrator(str(tmp_path / "test.db"), tmp_path / "nope").run_migrations()
