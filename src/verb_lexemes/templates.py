"""Extract {{en-verb}} conjugation templates from Wiktionary wikitext."""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from verb_lexemes.errors import AmbiguousTemplateError

TEMPLATE_NAME = "en-verb"

# Wiktionary parameter name -> ConjugationTemplate field
NAMED_PARAMS = {
    "pres_3sg": "present_third_person",
    "pres_ptc": "present_participle",
    "past": "past_form",
    "past_ptc": "past_participle",
}

_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TEMPLATE_START_RE = re.compile(r"\{\{\s*" + re.escape(TEMPLATE_NAME) + r"\s*(?=[|}])")
_PARAM_NAME_RE = re.compile(r"^\s*([\w-]+)\s*=(.*)$", re.DOTALL)


@dataclass(frozen=True)
class ConjugationTemplate:
    """Arguments of one {{en-verb}} template.

    Positional arguments keep their order (and empty slots, since position
    carries meaning). Named overrides are None when absent or empty.
    """

    positional: tuple[str, ...] = ()
    present_third_person: str | None = None
    present_participle: str | None = None
    past_form: str | None = None
    past_participle: str | None = None


def _split_params(wikitext: str, start: int) -> list[str] | None:
    """Split the template body starting at `start` on top-level pipes.

    `start` points just past the template name. Nested templates and links
    are kept intact. Returns None if the template is never closed.
    """
    chunks: list[str] = []
    current: list[str] = []
    depth = 0
    i = start
    while i < len(wikitext):
        pair = wikitext[i : i + 2]
        if pair in ("{{", "[["):
            depth += 1
            current.append(pair)
            i += 2
            continue
        if pair in ("}}", "]]"):
            if depth == 0 and pair == "}}":
                chunks.append("".join(current))
                # First chunk is the (empty) text between the name and the first pipe
                return chunks[1:]
            depth = max(0, depth - 1)
            current.append(pair)
            i += 2
            continue
        char = wikitext[i]
        if char == "|" and depth == 0:
            chunks.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    return None


def _build_template(params: list[str]) -> ConjugationTemplate:
    positional: dict[int, str] = {}
    named: dict[str, str | None] = {}
    next_index = 1

    for raw in params:
        match = _PARAM_NAME_RE.match(raw)
        if match is None:
            positional[next_index] = raw.strip()
            next_index += 1
            continue
        name, value = match.group(1), match.group(2).strip()
        if name.isdigit():
            # Explicit positions ({{en-verb|1=bus}}) fill the same slots
            positional[int(name)] = value
        elif name in NAMED_PARAMS:
            named[NAMED_PARAMS[name]] = value or None

    size = max(positional, default=0)
    args = tuple(positional.get(index, "") for index in range(1, size + 1))
    return ConjugationTemplate(positional=args, **named)


def parse_templates(wikitext: str) -> list[ConjugationTemplate]:
    """Return every {{en-verb}} template found in a page, in page order."""
    text = _COMMENT_RE.sub("", wikitext)
    templates: list[ConjugationTemplate] = []
    for match in _TEMPLATE_START_RE.finditer(text):
        params = _split_params(text, match.end())
        if params is None:
            continue
        templates.append(_build_template(params))
    return templates


def select_template(
    templates: Sequence[ConjugationTemplate], lemma: str = ""
) -> ConjugationTemplate:
    """Return the single template of a page.

    Raises AmbiguousTemplateError when there are none or several.
    """
    if len(templates) != 1:
        raise AmbiguousTemplateError(lemma, f"found {len(templates)} {TEMPLATE_NAME} templates")
    return templates[0]
