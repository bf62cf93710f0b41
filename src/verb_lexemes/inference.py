"""Infer the five English verb forms from an {{en-verb}} template.

The template has accumulated several shorthand encodings over the years.
Positional arguments are resolved first and give a baseline set of forms;
named parameters are explicit corrections and are applied last, so they
always win:

    {{en-verb}}                    walk   -> walks, walked, walking, walked
    {{en-verb|admir}}              admire -> admires, admired, admiring, admired
    {{en-verb|es}}                 pass   -> passes, passed, passing, passed
    {{en-verb|tr|ies}}             try    -> tries, tried, trying, tried
    {{en-verb|bus|s|es}}           bus    -> busses, bussed, bussing, bussed
    {{en-verb|sets|setting|set}}   set    -> sets, set, setting, set
    {{en-verb|...|past=went}}      named overrides replace whatever came before

Every branch builds a new InflectionSet; nothing is mutated in place.
"""

from dataclasses import dataclass, fields, replace

from verb_lexemes.errors import (
    AmbiguousTemplateError,
    LegacySyntaxError,
    UnknownStemMarkerError,
)
from verb_lexemes.templates import ConjugationTemplate, parse_templates, select_template

RECORD_SEPARATOR = "~"

# Markers that stand for an ending rather than a stem fragment
STEM_MARKERS = frozenset({"d", "ed", "es", "ing", "s"})

# Markers accepted as the single override of the stem shorthand
SINGLE_OVERRIDE_MARKERS = STEM_MARKERS | {"ies"}

# Anything that looks like an ending in the third slot of a stem + ending
# template; only STEM_MARKERS have a rule there
SUFFIX_TOKENS = SINGLE_OVERRIDE_MARKERS | {"ied"}


@dataclass(frozen=True)
class InflectionSet:
    """The five forms of an English verb, all non-empty."""

    infinitive: str
    third_person_singular: str
    simple_past: str
    present_participle: str
    past_participle: str

    def to_record(self, separator: str = RECORD_SEPARATOR) -> str:
        """Join the forms into one output line (without newline)."""
        return separator.join(getattr(self, f.name) for f in fields(self))

    @classmethod
    def from_record(cls, line: str, separator: str = RECORD_SEPARATOR) -> "InflectionSet":
        """Parse a line produced by to_record."""
        parts = line.rstrip("\n").split(separator)
        if len(parts) != len(fields(cls)):
            msg = f"Expected {len(fields(cls))} fields, got {len(parts)}: {line!r}"
            raise ValueError(msg)
        return cls(*parts)

    def with_overrides(self, template: ConjugationTemplate) -> "InflectionSet":
        """Return a copy with the template's named parameters applied.

        `past_form` sets both past forms; `past_participle` is applied after it
        and takes precedence for the participle.
        """
        changes: dict[str, str] = {}
        if template.present_third_person:
            changes["third_person_singular"] = template.present_third_person
        if template.present_participle:
            changes["present_participle"] = template.present_participle
        if template.past_form:
            changes["simple_past"] = template.past_form
            changes["past_participle"] = template.past_form
        if template.past_participle:
            changes["past_participle"] = template.past_participle
        return replace(self, **changes) if changes else self


def regular_forms(lemma: str, stem: str | None = None) -> InflectionSet:
    """Forms of a fully regular verb: +s, +ed, +ing, +ed.

    The third person always builds on the lemma; the other endings build on
    `stem`, which defaults to the lemma.
    """
    stem = lemma if stem is None else stem
    return InflectionSet(
        infinitive=lemma,
        third_person_singular=lemma + "s",
        simple_past=stem + "ed",
        present_participle=stem + "ing",
        past_participle=stem + "ed",
    )


def _stem_with_ending(lemma: str, args: tuple[str, ...]) -> InflectionSet:
    """Resolve `{{en-verb|stem|fragment|marker}}`.

    Only the form the marker names uses the marker itself; the other
    stem-based forms take their usual ending after stem + fragment.
    """
    stem = args[0] + args[1]
    marker = args[2]

    if marker in ("d", "ed"):
        return InflectionSet(
            infinitive=lemma,
            third_person_singular=lemma + "s",
            simple_past=stem + marker,
            present_participle=stem + "ing",
            past_participle=stem + marker,
        )
    if marker == "ing":
        # Past forms come from the lemma here, not from the stem
        return InflectionSet(
            infinitive=lemma,
            third_person_singular=lemma + "s",
            simple_past=lemma + "d",
            present_participle=stem + marker,
            past_participle=lemma + "d",
        )
    if marker in ("es", "s"):
        return InflectionSet(
            infinitive=lemma,
            third_person_singular=stem + marker,
            simple_past=stem + "ed",
            present_participle=stem + "ing",
            past_participle=stem + "ed",
        )
    raise UnknownStemMarkerError(lemma, f"no stem rule for ending {marker!r}")


def _stem_shorthand(lemma: str, args: tuple[str, ...]) -> InflectionSet:
    """Resolve the 0, 1, 2 and 5+ argument forms.

    The first argument is a replacement stem unless it is itself a marker.
    The argument after the stem (if any) may adjust a single form.
    """
    remaining = list(args)
    stem = lemma
    if remaining and remaining[0] not in SINGLE_OVERRIDE_MARKERS:
        stem = remaining.pop(0) or lemma

    forms = regular_forms(lemma, stem)
    override = remaining[0] if remaining else None

    if override == "es":
        return replace(forms, third_person_singular=stem + "es")
    if override == "d":
        return replace(forms, simple_past=stem + "d", past_participle=stem + "d")
    if override == "ies":
        return replace(
            forms,
            third_person_singular=stem + "ies",
            simple_past=stem + "ied",
            present_participle=lemma + "ing",
            past_participle=stem + "ied",
        )
    return forms


def _explicit_forms(lemma: str, args: tuple[str, ...]) -> InflectionSet:
    """Resolve `{{en-verb|third|participle|past}}` and the four-argument form.

    Empty slots fall back to the regular form; an empty or missing past
    participle falls back to the past.
    """
    base = regular_forms(lemma)
    third, participle, past = args[:3]
    past = past or base.simple_past
    past_participle = args[3] if len(args) > 3 else ""
    return InflectionSet(
        infinitive=lemma,
        third_person_singular=third or base.third_person_singular,
        simple_past=past,
        present_participle=participle or base.present_participle,
        past_participle=past_participle or past,
    )


def _positional_forms(lemma: str, args: tuple[str, ...]) -> InflectionSet:
    if args and args[0] == lemma and len(args) > 3:
        raise LegacySyntaxError(lemma, f"{len(args)} arguments starting with the lemma")

    if len(args) == 3 and args[2] in SUFFIX_TOKENS:
        return _stem_with_ending(lemma, args)
    if len(args) in (3, 4):
        return _explicit_forms(lemma, args)

    return _stem_shorthand(lemma, args)


def infer_forms(lemma: str, template: ConjugationTemplate | None) -> InflectionSet:
    """Infer all five forms of `lemma` from its conjugation template.

    Args:
        lemma: The page title / base form of the verb.
        template: The page's single {{en-verb}} template, or None if the page
            has none.

    Returns:
        A fully populated InflectionSet.

    Raises:
        AmbiguousTemplateError: No template was given.
        LegacySyntaxError: The template repeats the lemma as its first of more
            than three arguments, an obsolete convention we do not parse.
        UnknownStemMarkerError: A stem + ending template ends in an
            ending-like token that has no rule.

    Example:
        >>> infer_forms("bus", ConjugationTemplate(("bus", "s", "es"))).to_record()
        'bus~busses~bussed~bussing~bussed'
    """
    if template is None:
        raise AmbiguousTemplateError(lemma, "no template")

    forms = _positional_forms(lemma, template.positional)
    return forms.with_overrides(template)


def infer_forms_from_wikitext(lemma: str, wikitext: str) -> InflectionSet:
    """Extract the page's single {{en-verb}} template and infer forms from it."""
    template = select_template(parse_templates(wikitext), lemma)
    return infer_forms(lemma, template)
