"""Template-free conjugation for the review pipeline."""

import logging
from typing import Protocol

import pyinflect

from verb_lexemes.inference import InflectionSet

logger = logging.getLogger(__name__)

# Penn Treebank tags for the five forms we need
INFINITIVE_TAG = "VB"
THIRD_PERSON_TAG = "VBZ"
PAST_TAG = "VBD"
GERUND_TAG = "VBG"
PARTICIPLE_TAG = "VBN"


class Conjugator(Protocol):
    def conjugate(self, lemma: str) -> InflectionSet | None: ...


def _first(forms: tuple[str, ...] | list[str] | None) -> str | None:
    if not forms:
        return None
    return forms[0] or None


class PyinflectConjugator:
    """Conjugates regular and common irregular verbs with pyinflect.

    Returns None when any form is unknown. The past participle falls back to
    the simple past, which is what regular verbs use.
    """

    def _inflect(self, lemma: str, tag: str) -> str | None:
        return _first(pyinflect.getInflection(lemma, tag=tag))

    def conjugate(self, lemma: str) -> InflectionSet | None:
        infinitive = self._inflect(lemma, INFINITIVE_TAG) or lemma
        third = self._inflect(lemma, THIRD_PERSON_TAG)
        past = self._inflect(lemma, PAST_TAG)
        gerund = self._inflect(lemma, GERUND_TAG)
        participle = self._inflect(lemma, PARTICIPLE_TAG) or past

        if not (third and past and gerund and participle):
            logger.debug("pyinflect has no full conjugation for %r", lemma)
            return None
        return InflectionSet(
            infinitive=infinitive,
            third_person_singular=third,
            simple_past=past,
            present_participle=gerund,
            past_participle=participle,
        )
