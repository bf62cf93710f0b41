"""Enumeration types for crawl and review outcomes.

StrEnum values serialize as plain strings, so they can be written to logs
and the exclusion list without conversion.
"""

from enum import StrEnum


class RejectionReason(StrEnum):
    """Why a pipeline stage declined to produce forms for a lemma."""

    INVALID_SPELLING = "InvalidSpelling"
    KNOWN_IRREGULAR = "KnownIrregular"
    ALREADY_EXISTS = "AlreadyExists"
    AMBIGUOUS_TEMPLATE = "AmbiguousTemplate"
    LEGACY_SYNTAX = "LegacySyntax"
    UNKNOWN_STEM_MARKER = "UnknownStemMarker"
    UNCONJUGATABLE = "Unconjugatable"
    REVIEWER_REJECTED = "ReviewerRejected"


class Decision(StrEnum):
    """Answers a reviewer can give to a tile."""

    YES = "yes"
    SKIP = "skip"
    NO = "no"
