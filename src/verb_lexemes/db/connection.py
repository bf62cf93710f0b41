"""Connections to the SQLite database of accepted verb forms."""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Connection, Engine, create_engine

from verb_lexemes.db.schema import init_db

DEFAULT_DB_PATH = Path("verbs.db")

# Seconds to wait on a lock held by another process, such as a crawl
# committing records while `stats` reads
SQLITE_BUSY_TIMEOUT = 30

_engines: dict[Path, Engine] = {}


def get_engine(db_path: Path | str = DEFAULT_DB_PATH) -> Engine:
    """Return the engine for `db_path`, creating it on first use."""
    path = Path(db_path)
    engine = _engines.get(path)
    if engine is None:
        engine = create_engine(
            f"sqlite:///{path}", connect_args={"timeout": SQLITE_BUSY_TIMEOUT}
        )
        _engines[path] = engine
    return engine


@contextmanager
def get_connection(
    db_path: Path | str = DEFAULT_DB_PATH,
    *,
    create_schema: bool = False,
) -> Generator[Connection]:
    """Open a connection that commits when the block exits cleanly.

    Callers may commit inside the block; that work is kept if the block later
    fails, and only the open transaction is rolled back. With `create_schema`
    missing tables are created first.
    """
    engine = get_engine(db_path)
    if create_schema:
        init_db(engine)
    with engine.connect() as conn:
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()
