"""Build review tiles for verbs that can be added to Wikidata.

A tile shows a reviewer five example sentences built from the conjugated
forms and offers three buttons: create the lexeme, skip, or reject the verb.
Rejected and unusable verbs go to the exclusion list so they are not shown
again.
"""

import json
import logging
import random
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from verb_lexemes.conjugate import Conjugator
from verb_lexemes.crawl import ExistenceIndex
from verb_lexemes.enums import Decision, RejectionReason
from verb_lexemes.exclusions import ExclusionList, RejectionRecord
from verb_lexemes.inference import RECORD_SEPARATOR, InflectionSet
from verb_lexemes.validate import MIN_LEMMA_LENGTH

logger = logging.getLogger(__name__)

MAX_TILES = 50
TILE_PREFIX = "v1"

ENGLISH_LANGUAGE_QID = "Q1860"
VERB_CATEGORY_QID = "Q24905"

# Grammatical features of each form, in InflectionSet field order
FORM_FEATURES: dict[str, list[str]] = {
    "infinitive": ["Q3910936"],
    "third_person_singular": ["Q110786", "Q3910936", "Q51929074"],
    "simple_past": ["Q1392475"],
    "present_participle": ["Q10345583"],
    "past_participle": ["Q1230649"],
}

GAME_DESCRIPTION = {
    "label": {"en": "Add verbs from Wiktionary"},
    "description": {
        "en": (
            "Import verbs without a {{en-verb}} template from Wiktionary. "
            "(verbs with the template will be able to be imported automatically) "
            "Conjugation is done automatically, please verify it."
        )
    },
    "icon": (
        "https://upload.wikimedia.org/wikipedia/commons/thumb/0/04/"
        "Labiodental_flap_%28Gentium%29.svg/120px-Labiodental_flap_%28Gentium%29.svg.png"
    ),
}


def load_pending(path: Path | str) -> list[str]:
    """Read the pending queue: one lemma per line, or crawl records.

    Raises ValueError for a record line without all five forms.
    """
    lemmas: list[str] = []
    with Path(path).open(encoding="utf-8") as f:
        for line in f:
            lemma = line.strip()
            if RECORD_SEPARATOR in lemma:
                lemma = InflectionSet.from_record(lemma).infinitive
            if len(lemma) >= MIN_LEMMA_LENGTH:
                lemmas.append(lemma)
    return lemmas


def example_sentences(forms: InflectionSet) -> str:
    return (
        f"They {forms.infinitive} every day.\n"
        f"He {forms.third_person_singular} every day.\n"
        f"He {forms.simple_past} every day last week.\n"
        f"They are {forms.present_participle} right now.\n"
        f"We have {forms.past_participle} for hours.\n"
    )


def lexeme_payload(lemma: str, forms: InflectionSet) -> dict[str, Any]:
    """Build the wbeditentity data for a new English verb lexeme."""
    return {
        "type": "lexeme",
        "language": ENGLISH_LANGUAGE_QID,
        "lexicalCategory": VERB_CATEGORY_QID,
        "senses": [],
        "lemmas": {"en": {"language": "en", "value": lemma}},
        "forms": [
            {
                "claims": {},
                "add": "",
                "grammaticalFeatures": features,
                "representations": {"en": {"language": "en", "value": getattr(forms, name)}},
            }
            for name, features in FORM_FEATURES.items()
        ],
        "claims": {},
    }


def build_tile(lemma: str, forms: InflectionSet) -> dict[str, Any]:
    """Build the tile for one verb."""
    controls = [
        {
            "type": "green",
            "decision": str(Decision.YES),
            "label": "Create",
            "api_action": {
                "action": "wbeditentity",
                "new": "lexeme",
                "data": json.dumps(lexeme_payload(lemma, forms)),
            },
        },
        {"type": "white", "decision": str(Decision.SKIP), "label": "Skip"},
        {
            "type": "blue",
            "decision": str(Decision.NO),
            "label": "Incorrect conjugations or not a verb",
        },
    ]
    return {
        "id": f"{TILE_PREFIX}-{lemma}",
        "sections": [
            {
                "type": "text",
                "title": "do these sentences make sense?",
                "text": example_sentences(forms),
            }
        ],
        "controls": [{"type": "buttons", "entries": controls}],
    }


class ReviewTaskBuilder:
    """Draws verbs from a pending queue and turns them into tiles."""

    def __init__(
        self,
        pending: Iterable[str],
        exclusions: ExclusionList,
        index: ExistenceIndex,
        conjugator: Conjugator,
        *,
        rng: random.Random | None = None,
        language: str = "en",
    ) -> None:
        self.exclusions = exclusions
        self.index = index
        self.conjugator = conjugator
        self.rng = rng or random.Random()
        self.language = language
        self.pending = [
            lemma
            for lemma in pending
            if len(lemma) >= MIN_LEMMA_LENGTH and lemma not in exclusions
        ]
        logger.info("%d pending verbs", len(self.pending))

    def _reject(self, lemma: str, reason: RejectionReason) -> None:
        record = RejectionRecord(lemma, reason)
        self.exclusions.add(record)
        logger.info("Rejected %s", record)

    def next_tile(self) -> dict[str, Any] | None:
        """Build a tile for a random pending verb, or None once the queue is empty."""
        while self.pending:
            lemma = self.pending.pop(self.rng.randrange(len(self.pending)))

            forms = self.conjugator.conjugate(lemma)
            if forms is None or forms.infinitive != lemma:
                self._reject(lemma, RejectionReason.UNCONJUGATABLE)
                continue

            if self.index.exists(lemma, self.language):
                self._reject(lemma, RejectionReason.ALREADY_EXISTS)
                continue

            return build_tile(lemma, forms)
        return None

    def tiles(self, num: int) -> list[dict[str, Any]]:
        """Build up to `num` tiles (never more than MAX_TILES)."""
        result: list[dict[str, Any]] = []
        for _ in range(min(num, MAX_TILES)):
            tile = self.next_tile()
            if tile is None:
                break
            result.append(tile)
        return result

    def describe(self) -> dict[str, Any]:
        return GAME_DESCRIPTION

    def log_action(self, tile_id: str, decision: str) -> RejectionRecord | None:
        """Handle a reviewer's answer; a "no" excludes the verb for good."""
        if decision != Decision.NO:
            return None
        _, _, lemma = tile_id.partition("-")
        if not lemma:
            logger.warning("Cannot find a lemma in tile id %r", tile_id)
            return None
        record = RejectionRecord(lemma, RejectionReason.REVIEWER_REJECTED)
        self.exclusions.add(record)
        logger.info("Reviewer rejected %s", lemma)
        return record
