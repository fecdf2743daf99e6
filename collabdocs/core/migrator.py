"""Database migration runner.

Two situations are handled:
- Fresh database: tables come from the SQLAlchemy models and every
  migration file is recorded as already applied (baselined).
- Existing database: migrations missing from ``schema_migrations`` are
  applied in order, except those whose effect is already visible in the
  schema, which are only recorded.

Migration files live in ``migrations/NNN_name.sql``. A first line of
``-- dialect: postgresql`` (or ``sqlite``) restricts a file to that backend.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

from sqlalchemy import Engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class MigrationError(Exception):
    """A migration file could not be applied."""


@dataclass
class Migration:
    version: str
    name: str
    file_path: Path
    dialect: Optional[str] = None

    def __lt__(self, other: "Migration") -> bool:
        return int(self.version) < int(other.version)


@dataclass
class MigrationResult:
    applied: int = 0
    skipped: int = 0
    baselined: int = 0


_FILE_PATTERN = re.compile(r"^(\d{3})_(.+)\.sql$")
_DIALECT_PATTERN = re.compile(r"^--\s*dialect:\s*(sqlite|postgresql)\s*$")


def _migrations_dir() -> Path:
    return Path(__file__).parent.parent.parent / "migrations"


def discover_migrations(directory: Optional[Path] = None, dialect: Optional[str] = None) -> list[Migration]:
    """List migration files in version order.

    Files marked for another dialect than *dialect* are left out.
    """
    directory = directory or _migrations_dir()
    if not directory.exists():
        logger.warning(f"Migrations directory not found: {directory}")
        return []

    found = []
    for path in directory.glob("*.sql"):
        match = _FILE_PATTERN.match(path.name)
        if not match:
            logger.debug(f"Skipping non-migration file: {path.name}")
            continue
        first_line = path.read_text().split("\n", 1)[0]
        marker = _DIALECT_PATTERN.match(first_line)
        file_dialect = marker.group(1) if marker else None
        if dialect and file_dialect and file_dialect != dialect:
            continue
        found.append(Migration(version=match.group(1), name=match.group(2), file_path=path, dialect=file_dialect))
    return sorted(found)


def _index_names(engine: Engine, table: str) -> set[str]:
    inspector = inspect(engine)
    if table not in inspector.get_table_names():
        return set()
    return {idx["name"] for idx in inspector.get_indexes(table)}


# Schema probes for migrations whose effect may predate tracking.
_ALREADY_APPLIED: Dict[str, Callable[[Engine], bool]] = {
    "001": lambda e: "ix_notification_events_document" in _index_names(e, "notification_events"),
    "002": lambda e: "ix_comments_document_field" in _index_names(e, "comments"),
}


def _is_fresh_install(engine: Engine) -> bool:
    return "documents" not in inspect(engine).get_table_names()


def _ensure_migrations_table(engine: Engine) -> None:
    if "schema_migrations" in inspect(engine).get_table_names():
        return
    logger.info("Creating schema_migrations table")
    with engine.connect() as conn:
        conn.execute(text("""
            CREATE TABLE schema_migrations (
                version VARCHAR(10) PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """))
        conn.commit()


def _tracked_versions(engine: Engine) -> set[str]:
    with engine.connect() as conn:
        return {row[0] for row in conn.execute(text("SELECT version FROM schema_migrations"))}


def _record(engine: Engine, migration: Migration) -> None:
    with engine.connect() as conn:
        conn.execute(
            text("INSERT INTO schema_migrations (version, name) VALUES (:version, :name)"),
            {"version": migration.version, "name": migration.name},
        )
        conn.commit()


def _apply(engine: Engine, migration: Migration) -> None:
    sql = migration.file_path.read_text()
    with engine.connect() as conn:
        try:
            for statement in (s.strip() for s in sql.split(";")):
                if statement and not all(line.strip().startswith("--") for line in statement.splitlines()):
                    conn.execute(text(statement))
            conn.commit()
        except SQLAlchemyError as e:
            raise MigrationError(f"Failed to apply {migration.version}_{migration.name}: {e}") from e
    _record(engine, migration)


def run_migrations(engine: Engine, base: type, directory: Optional[Path] = None) -> MigrationResult:
    """Bring the schema up to date. Safe to call on every startup.

    Raises:
        MigrationError: a pending migration failed
    """
    migrations = discover_migrations(directory, dialect=engine.dialect.name)

    if _is_fresh_install(engine):
        logger.info("Fresh install detected - creating tables from models")
        base.metadata.create_all(bind=engine)
        _ensure_migrations_table(engine)
        for migration in migrations:
            _record(engine, migration)
        return MigrationResult(baselined=len(migrations))

    # Tables added after the last migration file ship through the models.
    base.metadata.create_all(bind=engine)
    _ensure_migrations_table(engine)
    tracked = _tracked_versions(engine)

    baselined = 0
    applied = 0
    for migration in migrations:
        if migration.version in tracked:
            continue
        probe = _ALREADY_APPLIED.get(migration.version)
        if probe and probe(engine):
            _record(engine, migration)
            baselined += 1
            logger.debug(f"Baselined migration {migration.version}: {migration.name}")
            continue
        logger.info(f"Applying migration {migration.version}: {migration.name}")
        _apply(engine, migration)
        applied += 1

    if applied:
        logger.info(f"Applied {applied} migration(s)")
    return MigrationResult(
        applied=applied,
        baselined=baselined,
        skipped=len(migrations) - applied - baselined,
    )
