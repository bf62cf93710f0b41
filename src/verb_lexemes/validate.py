"""Cheap spelling checks that run before any network or inference work."""

import re
from collections.abc import Collection

from verb_lexemes.enums import RejectionReason

LEMMA_PATTERN = re.compile(r"^[A-Za-z]*$")

# Shorter entries are noise in the word lists (stray letters, blank lines)
MIN_LEMMA_LENGTH = 2

# Irregular verbs that the {{en-verb}} rules get wrong
DEFAULT_IRREGULARS = frozenset(
    {
        "ceebs",
        "cleave",
        "frain",
        "giue",
        "resing",
        "shend",
        "shew",
        "shrive",
        "talebear",
        "toshend",
        "toshake",
        "toshear",
    }
)


def is_valid_lemma(lemma: str, irregulars: Collection[str] = DEFAULT_IRREGULARS) -> bool:
    """Return True if the lemma is plain ASCII letters and not a known irregular.

    The empty string matches the pattern; callers drop it with the
    minimum-length filter.
    """
    return bool(LEMMA_PATTERN.fullmatch(lemma)) and lemma not in irregulars


def check_lemma(
    lemma: str,
    irregulars: Collection[str] = DEFAULT_IRREGULARS,
    *,
    min_length: int = MIN_LEMMA_LENGTH,
) -> RejectionReason | None:
    """Return the rejection reason for a lemma, or None if it may proceed."""
    if len(lemma) < min_length or not is_valid_lemma(lemma, ()):
        return RejectionReason.INVALID_SPELLING
    if not is_valid_lemma(lemma, irregulars):
        return RejectionReason.KNOWN_IRREGULAR
    return None
