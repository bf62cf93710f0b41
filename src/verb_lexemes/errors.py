"""Exception types shared by the crawl and review pipelines."""

from verb_lexemes.enums import RejectionReason


class VerbLexemeError(Exception):
    """Base class for all errors raised by this package."""


class InferenceError(VerbLexemeError, ValueError):
    """The inference engine declined to produce forms for a lemma.

    These are recoverable: the caller turns them into a rejection record and
    moves on to the next lemma.
    """

    reason: RejectionReason

    def __init__(self, lemma: str, detail: str = "") -> None:
        self.lemma = lemma
        self.detail = detail
        msg = f"{self.reason}: {lemma!r}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class AmbiguousTemplateError(InferenceError):
    """Zero or several conjugation templates were found for the lemma."""

    reason = RejectionReason.AMBIGUOUS_TEMPLATE


class LegacySyntaxError(InferenceError):
    """The template uses the obsolete lemma-first argument convention."""

    reason = RejectionReason.LEGACY_SYNTAX


class UnknownStemMarkerError(InferenceError):
    """A stem + ending template ends in a suffix with no known rule."""

    reason = RejectionReason.UNKNOWN_STEM_MARKER


class TransientServiceError(VerbLexemeError):
    """An external service is overloaded or unreachable; the call can be retried."""


class MalformedResponseError(VerbLexemeError):
    """An external service answered with something that breaks its contract.

    Not retried: this usually means the upstream API changed.
    """
