"""
SQL migrations for the content and schedule stores.

Migrations live in ``migrations/`` as ``NNNN_name.sql`` files with an
``-- Up`` section and an optional ``-- Down`` section. Only the Up section is
applied. Each file runs in its own transaction together with its row in
``_migrations``, so a failing file leaves no partial schema behind.
"""

import logging
import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATION_NAME = re.compile(r"^(\d{4})_[a-z0-9_]+\.sql$")


@dataclass(frozen=True)
class Migration:
    version: int
    filename: str
    up_sql: str


def parse_up_section(text: str) -> str:
    """Return the SQL between ``-- Up`` (optional) and ``-- Down``."""
    up, _, _ = text.partition("-- Down")
    return up.replace("-- Up", "", 1).strip()


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def available(self) -> list[Migration]:
        """All migration files, ordered by version."""
        if not self.migrations_dir.is_dir():
            raise FileNotFoundError(f"Migrations directory not found: {self.migrations_dir}")

        migrations: dict[int, Migration] = {}
        for path in sorted(self.migrations_dir.glob("*.sql")):
            match = MIGRATION_NAME.match(path.name)
            if match is None:
                raise ValueError(f"Migration file name must look like 0001_name.sql: {path.name}")
            version = int(match.group(1))
            if version in migrations:
                raise ValueError(
                    f"Duplicate migration version {version}: "
                    f"{migrations[version].filename} and {path.name}"
                )
            migrations[version] = Migration(version, path.name, parse_up_section(path.read_text()))
        return [migrations[v] for v in sorted(migrations)]

    def applied(self) -> set[str]:
        conn = sqlite3.connect(self.db_path)
        try:
            self._ensure_migration_table(conn)
            return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        finally:
            conn.close()

    def pending(self) -> list[Migration]:
        done = self.applied()
        return [m for m in self.available() if m.filename not in done]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        todo = self.pending()
        if not todo:
            return []

        conn = sqlite3.connect(self.db_path)
        try:
            for migration in todo:
                logger.info("Applying migration %s", migration.filename)
                self._apply(conn, migration)
        finally:
            conn.close()
        return [m.filename for m in todo]

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        conn.commit()

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            # Script and bookkeeping row commit or roll back together.
            conn.executescript(f"BEGIN;\n{migration.up_sql}\n")
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (migration.filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {migration.filename} failed: {e}") from e
