import pytest

from contentlab.adapters.sqlite.migrator import SQLiteMigrator


@pytest.fixture
def db_path(tmp_path, migrations_dir) -> str:
    path = str(tmp_path / "contentlab.db")
    SQLiteMigrator(path, migrations_dir).run_migrations()
    return path
