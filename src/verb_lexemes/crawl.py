"""Crawl a Wiktionary category for verbs that Wikidata has no lexeme for."""

import logging
from collections import Counter
from collections.abc import Callable, Collection, Iterator
from dataclasses import dataclass, field
from typing import Protocol, TextIO

from verb_lexemes.clients import DEFAULT_CATEGORY, CategoryPage
from verb_lexemes.enums import RejectionReason
from verb_lexemes.errors import InferenceError
from verb_lexemes.exclusions import ExclusionList, RejectionRecord
from verb_lexemes.inference import InflectionSet, infer_forms_from_wikitext
from verb_lexemes.validate import DEFAULT_IRREGULARS, MIN_LEMMA_LENGTH, check_lemma

logger = logging.getLogger(__name__)

CrawlResult = InflectionSet | RejectionRecord


class CategoryListing(Protocol):
    def iter_category(self, category: str = ...) -> Iterator[CategoryPage]: ...


class ExistenceIndex(Protocol):
    def exists(self, term: str, language: str = ...) -> bool: ...


class DictionarySource(Protocol):
    def fetch_wikitext(self, title: str) -> str: ...


@dataclass
class CrawlStats:
    """Counters for one crawl run."""

    pages: int = 0
    checked: int = 0
    accepted: int = 0
    excluded: int = 0
    rejected: Counter[RejectionReason] = field(default_factory=Counter)

    def as_dict(self) -> dict[str, int]:
        stats = {
            "pages": self.pages,
            "checked": self.checked,
            "accepted": self.accepted,
            "excluded": self.excluded,
        }
        for reason in RejectionReason:
            stats[str(reason)] = self.rejected[reason]
        return stats


class CrawlOrchestrator:
    """Runs validation, the existence check and inference over a category.

    Lemmas are handled one at a time, in listing order. Every lemma ends up
    either as an InflectionSet or as a RejectionRecord (which is also added to
    the exclusion list); lemmas excluded by an earlier run are skipped.
    MalformedResponseError from a collaborator is not caught and ends the run.
    """

    def __init__(
        self,
        listing: CategoryListing,
        index: ExistenceIndex,
        dictionary: DictionarySource,
        exclusions: ExclusionList,
        *,
        irregulars: Collection[str] = DEFAULT_IRREGULARS,
        min_length: int = MIN_LEMMA_LENGTH,
        language: str = "en",
    ) -> None:
        self.listing = listing
        self.index = index
        self.dictionary = dictionary
        self.exclusions = exclusions
        self.irregulars = irregulars
        self.min_length = min_length
        self.language = language

    def _reject(self, lemma: str, reason: RejectionReason) -> RejectionRecord:
        record = RejectionRecord(lemma, reason)
        self.exclusions.add(record)
        logger.info("Rejected %s", record)
        return record

    def process_lemma(self, lemma: str) -> CrawlResult | None:
        """Handle one candidate. Returns None if it was excluded by an earlier run."""
        if lemma in self.exclusions:
            logger.debug("Skipping excluded lemma %r", lemma)
            return None

        reason = check_lemma(lemma, self.irregulars, min_length=self.min_length)
        if reason is not None:
            return self._reject(lemma, reason)

        if self.index.exists(lemma, self.language):
            return self._reject(lemma, RejectionReason.ALREADY_EXISTS)

        wikitext = self.dictionary.fetch_wikitext(lemma)
        try:
            forms = infer_forms_from_wikitext(lemma, wikitext)
        except InferenceError as e:
            logger.debug("Inference failed: %s", e)
            return self._reject(lemma, e.reason)

        logger.debug("Inferred %s", forms.to_record())
        return forms

    def iter_results(
        self, category: str = DEFAULT_CATEGORY, stats: CrawlStats | None = None
    ) -> Iterator[CrawlResult]:
        """Yield a result for every non-excluded lemma of every category page."""
        stats = stats if stats is not None else CrawlStats()
        for page in self.listing.iter_category(category):
            stats.pages += 1
            for title in page.items:
                result = self.process_lemma(title)
                if result is None:
                    stats.excluded += 1
                    continue
                stats.checked += 1
                if isinstance(result, RejectionRecord):
                    stats.rejected[result.reason] += 1
                else:
                    stats.accepted += 1
                yield result
            logger.info(
                "Checked page %d: %d accepted, %d rejected so far",
                stats.pages,
                stats.accepted,
                sum(stats.rejected.values()),
            )

    def run(
        self,
        out: TextIO,
        category: str = DEFAULT_CATEGORY,
        on_accept: Callable[[InflectionSet], None] | None = None,
    ) -> CrawlStats:
        """Crawl the whole category, writing one record line per accepted lemma.

        `on_accept` is called with each accepted set right after its record is
        written.
        """
        stats = CrawlStats()
        for result in self.iter_results(category, stats):
            if isinstance(result, InflectionSet):
                out.write(result.to_record() + "\n")
                out.flush()
                if on_accept is not None:
                    on_accept(result)
        return stats
