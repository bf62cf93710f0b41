"""Database schema and queries for accepted verb forms, using SQLAlchemy Core."""

from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    Connection,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from verb_lexemes.inference import InflectionSet

metadata = MetaData()

# One row per accepted lemma, holding its five forms
inflections = Table(
    "inflections",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lemma", Text, nullable=False, unique=True),
    Column("infinitive", Text, nullable=False),
    Column("third_person_singular", Text, nullable=False),
    Column("simple_past", Text, nullable=False),
    Column("present_participle", Text, nullable=False),
    Column("past_participle", Text, nullable=False),
    Column("source", String(20), nullable=False),  # where the forms came from, e.g. "en-verb"
    Column("created_at", DateTime, nullable=False),
)

Index("idx_inflections_source", inflections.c.source)

FORM_COLUMNS = (
    "infinitive",
    "third_person_singular",
    "simple_past",
    "present_participle",
    "past_participle",
)


def init_db(engine: Engine) -> None:
    """Initialize the database schema.

    Safe to call multiple times (uses checkfirst=True by default).
    """
    metadata.create_all(engine)


def store_inflections(
    conn: Connection, forms: Iterable[InflectionSet], source: str = "en-verb"
) -> int:
    """Insert accepted forms, ignoring lemmas already stored.

    Returns the number of rows inserted.
    """
    now = datetime.now(UTC)
    rows = [
        {
            "lemma": item.infinitive,
            **{name: getattr(item, name) for name in FORM_COLUMNS},
            "source": source,
            "created_at": now,
        }
        for item in forms
    ]
    if not rows:
        return 0
    stmt = sqlite_insert(inflections).on_conflict_do_nothing(index_elements=["lemma"])
    inserted = 0
    for row in rows:
        inserted += conn.execute(stmt, row).rowcount
    return inserted
