"""Database modules for stored verb forms."""

from verb_lexemes.db.connection import get_connection, get_engine
from verb_lexemes.db.schema import (
    inflections,
    init_db,
    metadata,
    store_inflections,
)

__all__ = [
    "get_connection",
    "get_engine",
    "inflections",
    "init_db",
    "metadata",
    "store_inflections",
]
