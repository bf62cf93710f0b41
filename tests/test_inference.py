"""Tests for the {{en-verb}} form inference engine."""

import pytest

from verb_lexemes.enums import RejectionReason
from verb_lexemes.errors import (
    AmbiguousTemplateError,
    InferenceError,
    LegacySyntaxError,
    UnknownStemMarkerError,
)
from verb_lexemes.inference import (
    InflectionSet,
    infer_forms,
    infer_forms_from_wikitext,
    regular_forms,
)
from verb_lexemes.templates import ConjugationTemplate


def _args(*positional: str, **named: str) -> ConjugationTemplate:
    return ConjugationTemplate(positional=positional, **named)


class TestDefaults:
    """Templates with no arguments at all."""

    def test_bare_template_is_regular(self) -> None:
        forms = infer_forms("walk", _args())
        assert forms == InflectionSet("walk", "walks", "walked", "walking", "walked")

    def test_regular_forms_helper(self) -> None:
        assert regular_forms("jump") == InflectionSet(
            "jump", "jumps", "jumped", "jumping", "jumped"
        )

    def test_all_fields_populated(self) -> None:
        forms = infer_forms("go", _args())
        assert all([forms.infinitive, forms.third_person_singular, forms.simple_past])
        assert all([forms.present_participle, forms.past_participle])


class TestFailures:
    """Shapes the engine refuses to parse."""

    def test_no_template(self) -> None:
        with pytest.raises(AmbiguousTemplateError) as exc_info:
            infer_forms("walk", None)
        assert exc_info.value.reason == RejectionReason.AMBIGUOUS_TEMPLATE
        assert exc_info.value.lemma == "walk"

    def test_legacy_syntax_four_args(self) -> None:
        with pytest.raises(LegacySyntaxError):
            infer_forms("set", _args("set", "sets", "setting", "set"))

    def test_legacy_syntax_five_args(self) -> None:
        with pytest.raises(LegacySyntaxError):
            infer_forms("run", _args("run", "runs", "running", "ran", "run"))

    def test_lemma_first_with_three_args_is_not_legacy(self) -> None:
        """Three arguments starting with the lemma are the stem + ending shorthand."""
        forms = infer_forms("bus", _args("bus", "s", "es"))
        assert forms.third_person_singular == "busses"

    def test_unknown_stem_marker(self) -> None:
        with pytest.raises(UnknownStemMarkerError) as exc_info:
            infer_forms("cry", _args("cr", "y", "ies"))
        assert exc_info.value.reason == RejectionReason.UNKNOWN_STEM_MARKER

    def test_errors_are_inference_errors(self) -> None:
        with pytest.raises(InferenceError):
            infer_forms("walk", None)
        with pytest.raises(ValueError):
            infer_forms("walk", None)


class TestStemWithEnding:
    """Three arguments whose last one is a stem marker."""

    def test_es_marker(self) -> None:
        forms = infer_forms("bus", _args("bus", "s", "es"))
        assert forms == InflectionSet("bus", "busses", "bussed", "bussing", "bussed")

    def test_s_marker(self) -> None:
        forms = infer_forms("quiz", _args("qui", "z", "s"))
        assert forms.third_person_singular == "quizs"
        assert forms.simple_past == "quized"
        assert forms.present_participle == "quizing"

    def test_ed_marker(self) -> None:
        forms = infer_forms("stop", _args("stop", "p", "ed"))
        assert forms == InflectionSet("stop", "stops", "stopped", "stopping", "stopped")

    def test_d_marker(self) -> None:
        forms = infer_forms("free", _args("fre", "e", "d"))
        assert forms.simple_past == "freed"
        assert forms.past_participle == "freed"
        assert forms.present_participle == "freeing"
        assert forms.third_person_singular == "frees"

    def test_ing_marker_uses_lemma_for_past(self) -> None:
        """The ing marker builds the past forms from the lemma plus "d"."""
        forms = infer_forms("singe", _args("singe", "", "ing"))
        assert forms.present_participle == "singeing"
        assert forms.simple_past == "singed"
        assert forms.past_participle == "singed"
        assert forms.third_person_singular == "singes"

    def test_ing_marker_ignores_stem_for_past(self) -> None:
        forms = infer_forms("stop", _args("stop", "p", "ing"))
        assert forms.present_participle == "stopping"
        assert forms.simple_past == "stopd"


class TestExplicitForms:
    """Three or four arguments giving the forms directly."""

    def test_three_explicit_forms(self) -> None:
        forms = infer_forms("set", _args("sets", "setting", "set"))
        assert forms == InflectionSet("set", "sets", "set", "setting", "set")

    def test_three_explicit_past_participle_equals_past(self) -> None:
        forms = infer_forms("dive", _args("dives", "diving", "dove"))
        assert forms.simple_past == forms.past_participle == "dove"

    def test_four_explicit_forms_are_independent(self) -> None:
        forms = infer_forms("go", _args("goes", "going", "went", "gone"))
        assert forms == InflectionSet("go", "goes", "went", "going", "gone")

    def test_four_forms_not_derived_from_each_other(self) -> None:
        forms = infer_forms("xyz", _args("a", "b", "c", "d"))
        assert forms == InflectionSet("xyz", "a", "c", "b", "d")

    def test_three_forms_empty_participle_is_regular(self) -> None:
        forms = infer_forms_from_wikitext("try", "{{en-verb|tries||tried}}")
        assert forms == InflectionSet("try", "tries", "tried", "trying", "tried")

    def test_three_forms_empty_slots_are_regular(self) -> None:
        forms = infer_forms("walk", _args("", "", ""))
        assert forms == regular_forms("walk")

    def test_four_forms_empty_past_participle_uses_past(self) -> None:
        forms = infer_forms_from_wikitext("go", "{{en-verb|goes|going|went|}}")
        assert forms == InflectionSet("go", "goes", "went", "going", "went")

    def test_four_forms_empty_third_person_is_regular(self) -> None:
        forms = infer_forms("go", _args("", "going", "went", "gone"))
        assert forms.third_person_singular == "gos"
        assert "" not in forms.to_record().split("~")


class TestStemShorthand:
    """Zero, one, two or five-plus arguments."""

    def test_stem_only(self) -> None:
        forms = infer_forms("admir", _args("admir"))
        assert forms.simple_past == "admired"
        assert forms.present_participle == "admiring"
        assert forms.past_participle == "admired"
        assert forms.third_person_singular == "admirs"

    def test_stem_replaces_lemma_for_endings(self) -> None:
        forms = infer_forms("admire", _args("admir"))
        assert forms == InflectionSet("admire", "admires", "admired", "admiring", "admired")

    def test_stem_with_unhandled_ending_is_noop(self) -> None:
        forms = infer_forms("admire", _args("admir", "ing"))
        assert forms == InflectionSet("admire", "admires", "admired", "admiring", "admired")

    def test_es_alone(self) -> None:
        forms = infer_forms("pass", _args("es"))
        assert forms == InflectionSet("pass", "passes", "passed", "passing", "passed")

    def test_d_alone(self) -> None:
        forms = infer_forms("bake", _args("d"))
        assert forms.simple_past == "baked"
        assert forms.past_participle == "baked"
        assert forms.third_person_singular == "bakes"

    def test_stem_with_d(self) -> None:
        forms = infer_forms("bake", _args("bak", "d"))
        assert forms.simple_past == "bakd"
        assert forms.present_participle == "baking"

    def test_stem_with_es(self) -> None:
        forms = infer_forms("buzz", _args("buzz", "es"))
        assert forms.third_person_singular == "buzzes"

    def test_stem_with_ies(self) -> None:
        forms = infer_forms("try", _args("tr", "ies"))
        assert forms == InflectionSet("try", "tries", "tried", "trying", "tried")

    def test_five_args_not_starting_with_lemma(self) -> None:
        forms = infer_forms("walk", _args("walk2", "es", "x", "y", "z"))
        assert forms.third_person_singular == "walk2es"
        assert forms.simple_past == "walk2ed"

    def test_empty_stem_falls_back_to_lemma(self) -> None:
        forms = infer_forms("pass", _args("", "es"))
        assert forms.third_person_singular == "passes"


class TestNamedOverrides:
    """Named parameters are applied after every positional branch."""

    def test_past_overrides_both_past_forms(self) -> None:
        forms = infer_forms("go", _args("goes", "going", "went", "gone", past_form="wended"))
        assert forms.simple_past == "wended"
        assert forms.past_participle == "wended"

    def test_past_participle_beats_past(self) -> None:
        forms = infer_forms("go", _args(past_form="went", past_participle="gone"))
        assert forms.simple_past == "went"
        assert forms.past_participle == "gone"

    def test_past_overrides_stem_with_ending(self) -> None:
        forms = infer_forms("bus", _args("bus", "s", "es", past_form="bused"))
        assert forms.simple_past == "bused"
        assert forms.past_participle == "bused"
        assert forms.third_person_singular == "busses"

    def test_present_overrides(self) -> None:
        forms = infer_forms(
            "have", _args(present_third_person="has", present_participle="having")
        )
        assert forms.third_person_singular == "has"
        assert forms.present_participle == "having"

    def test_overrides_return_new_instance(self) -> None:
        base = regular_forms("walk")
        updated = base.with_overrides(_args(past_form="walkt"))
        assert base.simple_past == "walked"
        assert updated.simple_past == "walkt"

    def test_no_overrides_returns_same_value(self) -> None:
        base = regular_forms("walk")
        assert base.with_overrides(_args()) == base


class TestRecords:
    """Output record formatting."""

    def test_to_record(self) -> None:
        forms = infer_forms("bus", _args("bus", "s", "es"))
        assert forms.to_record() == "bus~busses~bussed~bussing~bussed"

    def test_from_record(self) -> None:
        forms = InflectionSet.from_record("go~goes~went~going~gone\n")
        assert forms == InflectionSet("go", "goes", "went", "going", "gone")

    def test_from_record_wrong_field_count(self) -> None:
        with pytest.raises(ValueError):
            InflectionSet.from_record("go~goes")

    def test_idempotent(self) -> None:
        template = _args("tr", "ies", past_participle="tried")
        first = infer_forms("try", template).to_record()
        second = infer_forms("try", template).to_record()
        assert first == second


class TestFromWikitext:
    """Running the engine on whole pages."""

    def test_single_template(self) -> None:
        wikitext = "==English==\n===Verb===\n{{en-verb|tr|ies}}\n# To attempt."
        assert infer_forms_from_wikitext("try", wikitext).to_record() == (
            "try~tries~tried~trying~tried"
        )

    def test_no_template(self) -> None:
        with pytest.raises(AmbiguousTemplateError):
            infer_forms_from_wikitext("walk", "==English==\n===Noun===\n{{en-noun}}")

    def test_multiple_templates(self) -> None:
        wikitext = "===Verb===\n{{en-verb}}\n===Verb===\n{{en-verb|es}}"
        with pytest.raises(AmbiguousTemplateError):
            infer_forms_from_wikitext("pass", wikitext)
