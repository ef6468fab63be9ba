"""
Rendering of changelog templates.

A template is plain text (usually Markdown) containing:

- ``{{date}}`` and ``{{versionName}}``, replaced by the release date and
  the version name;
- a pair of ``{{.SECTION}}`` markers around the fragment rendered once
  per category, where ``$title`` stands for the category name;
- a pair of ``{{.COMMITS}}`` markers around the fragment rendered once
  per commit, where ``$commit`` stands for the commit line.

Example::

    ## {{versionName}} ({{date}})

    {{.SECTION}}### $title{{.SECTION}}
    {{.COMMITS}}- $commit{{.COMMITS}}

Everything from the first ``{{.SECTION}}`` through the last
``{{.COMMITS}}`` is replaced by the rendered categories.

Templates are parsed in two passes. :func:`tokenize` splits the text into
literal and marker tokens, then :func:`parse_template` pairs the markers
and extracts the fragments, raising :class:`TemplateMarkerError` when a
marker is missing, unpaired or out of place.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from changelog_generator.changelog.errors import (
    ChangelogError,
    TemplateMarkerError,
    TemplateTokenMissingError,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DATE_TOKEN = "{{date}}"
VERSION_TOKEN = "{{versionName}}"
SECTION_MARKER = "{{.SECTION}}"
LINE_MARKER = "{{.COMMITS}}"
TITLE_PLACEHOLDER = "$title"
COMMIT_PLACEHOLDER = "$commit"

TEXT = "text"

_MARKER_PATTERN = re.compile("|".join(re.escape(m) for m in (SECTION_MARKER, LINE_MARKER)))


@dataclass(frozen=True)
class Token:
    """A slice of the template: either literal text or one marker occurrence."""

    kind: str  # TEXT, SECTION_MARKER or LINE_MARKER
    start: int
    end: int


@dataclass(frozen=True)
class ParsedTemplate:
    """A template whose marker pairs have been located.

    Attributes
    ----------
    text : str
        The original template text.
    section_fragment : str
        Text between the two ``{{.SECTION}}`` markers.
    line_fragment : str
        Text between the two ``{{.COMMITS}}`` markers.
    span_start : int
        Offset of the first ``{{.SECTION}}`` marker.
    span_end : int
        Offset just past the last ``{{.COMMITS}}`` marker.
    """

    text: str
    section_fragment: str
    line_fragment: str
    span_start: int
    span_end: int

    @property
    def head(self) -> str:
        return self.text[: self.span_start]

    @property
    def tail(self) -> str:
        return self.text[self.span_end :]


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into literal and marker tokens, in order of appearance."""
    tokens: List[Token] = []
    position = 0
    for match in _MARKER_PATTERN.finditer(text):
        if match.start() > position:
            tokens.append(Token(TEXT, position, match.start()))
        tokens.append(Token(match.group(0), match.start(), match.end()))
        position = match.end()
    if position < len(text):
        tokens.append(Token(TEXT, position, len(text)))
    return tokens


def _pair(tokens: Sequence[Token], marker: str) -> Sequence[Token]:
    occurrences = [token for token in tokens if token.kind == marker]
    if len(occurrences) != 2:
        raise TemplateMarkerError(
            f"Template must contain exactly two {marker} markers, found {len(occurrences)}"
        )
    return occurrences


def parse_template(text: str) -> ParsedTemplate:
    """Locate the section and line fragments of a template.

    Raises
    ------
    TemplateMarkerError
        If either marker does not occur exactly twice, or if the
        ``{{.SECTION}}`` pair does not close before the ``{{.COMMITS}}``
        pair opens.
    """
    tokens = tokenize(text)
    section_open, section_close = _pair(tokens, SECTION_MARKER)
    line_open, line_close = _pair(tokens, LINE_MARKER)

    if section_close.end > line_open.start:
        raise TemplateMarkerError(
            f"The {SECTION_MARKER} fragment must be closed before the {LINE_MARKER} fragment opens"
        )

    parsed = ParsedTemplate(
        text=text,
        section_fragment=text[section_open.end : section_close.start],
        line_fragment=text[line_open.end : line_close.start],
        span_start=section_open.start,
        span_end=line_close.end,
    )
    if TITLE_PLACEHOLDER not in parsed.section_fragment:
        logger.warning("Section fragment %r has no %s placeholder", parsed.section_fragment, TITLE_PLACEHOLDER)
    if COMMIT_PLACEHOLDER not in parsed.line_fragment:
        logger.warning("Line fragment %r has no %s placeholder", parsed.line_fragment, COMMIT_PLACEHOLDER)
    return parsed


def format_date(day: datetime.date) -> str:
    """Format a date as ``M/D/YYYY`` without zero padding."""
    return f"{day.month}/{day.day}/{day.year}"


def render_sections(
    section_fragment: str,
    line_fragment: str,
    category_group: Mapping[str, Sequence[str]],
    categories: Mapping[str, str],
) -> str:
    """Render one section fragment per category followed by its commit lines.

    Categories are separated by a blank line and the result is stripped
    of surrounding whitespace. An empty ``category_group`` renders as an
    empty string.
    """
    parts: List[str] = []
    for type_code, messages in category_group.items():
        try:
            title = categories[type_code]
        except KeyError:
            raise ChangelogError(f"No category is configured for commit type {type_code!r}") from None
        parts.append(section_fragment.replace(TITLE_PLACEHOLDER, title, 1) + "\n")
        for message in messages:
            parts.append(line_fragment.replace(COMMIT_PLACEHOLDER, message, 1) + "\n")
        parts.append("\n")
    return "".join(parts).strip()


class TemplateRenderer:
    """Render changelog sections from a template.

    The template is validated once, on construction, and can then be
    rendered for any number of versions.

    Parameters
    ----------
    template_text : str
        The raw template.

    Raises
    ------
    TemplateTokenMissingError
        If ``{{date}}`` or ``{{versionName}}`` is absent.
    TemplateMarkerError
        If the marker pairs are malformed.
    """

    def __init__(self, template_text: str) -> None:
        missing = [token for token in (DATE_TOKEN, VERSION_TOKEN) if token not in template_text]
        if missing:
            raise TemplateTokenMissingError(f"Template is missing required token(s): {', '.join(missing)}")
        self.template = parse_template(template_text)

    @staticmethod
    def _substitute(text: str, values: Dict[str, str]) -> str:
        for token, value in values.items():
            text = text.replace(token, value)
        return text

    def render(
        self,
        version: str,
        category_group: Mapping[str, Sequence[str]],
        categories: Mapping[str, str],
        today: Optional[datetime.date] = None,
    ) -> str:
        """Render the changelog section for ``version``.

        Parameters
        ----------
        version : str
            Replaces ``{{versionName}}``.
        category_group : Mapping[str, Sequence[str]]
            Formatted commit lines per commit type, in section order.
        categories : Mapping[str, str]
            Commit types mapped to display names.
        today : datetime.date, optional
            Replaces ``{{date}}``. Defaults to the current local date.
        """
        values = {
            DATE_TOKEN: format_date(today or datetime.date.today()),
            VERSION_TOKEN: version,
        }
        template = self.template
        rendered = render_sections(
            self._substitute(template.section_fragment, values),
            self._substitute(template.line_fragment, values),
            category_group,
            categories,
        )
        return self._substitute(template.head, values) + rendered + self._substitute(template.tail, values)


def render_template(
    template: str,
    version: str,
    category_group: Mapping[str, Sequence[str]],
    categories: Mapping[str, str],
    today: Optional[datetime.date] = None,
) -> str:
    """Render ``template`` for ``version`` in a single call.

    See :class:`TemplateRenderer` for the errors raised on malformed
    templates.
    """
    return TemplateRenderer(template).render(version, category_group, categories, today=today)
