"""Engine and session factory for refgraph storage.

One engine per RefGraph. SQLite connections are configured on connect,
and ``init_db`` creates the tables and guards the schema version.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine, event, select
from sqlalchemy.orm import Session, sessionmaker

from refgraph.storage.schema import Base, RefGraphMetaRow

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"

# Run on every new SQLite connection. commit_parents rows rely on
# foreign_keys being on.
_SQLITE_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
    "PRAGMA synchronous=NORMAL",
)


def _sqlite_url(db_path: str) -> str:
    if db_path == ":memory:":
        return "sqlite://"
    return f"sqlite:///{db_path}"


def create_refgraph_engine(
    db_path: str = ":memory:",
    *,
    url: str | None = None,
) -> Engine:
    """Create the engine behind a RefGraph.

    Args:
        db_path: SQLite file path, or ``":memory:"``.  Ignored when *url*
            is given.
        url: Any SQLAlchemy database URL.

    File-backed SQLite databases are switched to WAL so a CLI reader and a
    writer can share one file.
    """
    engine = create_engine(url or _sqlite_url(db_path))
    logger.debug("Opened %s database %s", engine.dialect.name, engine.url)
    if engine.dialect.name != "sqlite":
        return engine

    file_backed = engine.url.database not in (None, "", ":memory:")

    @event.listens_for(engine, "connect")
    def _configure_connection(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_conn.cursor()
        try:
            for pragma in _SQLITE_PRAGMAS:
                cursor.execute(pragma)
            if file_backed:
                cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory whose rows stay loaded after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables and record the schema version.

    Idempotent. Refuses to open a database written by a newer schema.
    """
    Base.metadata.create_all(engine)

    with create_session_factory(engine)() as session:
        existing = session.execute(
            select(RefGraphMetaRow).where(RefGraphMetaRow.key == "schema_version")
        ).scalar_one_or_none()

        if existing is None:
            session.add(RefGraphMetaRow(key="schema_version", value=SCHEMA_VERSION))
            session.commit()
            logger.debug("Initialized refgraph schema version %s", SCHEMA_VERSION)
        elif int(existing.value) > int(SCHEMA_VERSION):
            raise RuntimeError(
                f"Database schema version {existing.value} is newer than "
                f"supported version {SCHEMA_VERSION}"
            )
