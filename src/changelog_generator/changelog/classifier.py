"""
Classification of commit messages against the conventional commit grammar.

Only the first line of a message is considered. It must look like
``<type>[(<scope>)]: <description>`` and the type must be one of the
configured commit types, otherwise the commit does not belong in the
changelog and :func:`classify_commit` returns ``None``.
"""

from __future__ import annotations

import re
from typing import Container, Optional

from changelog_generator.changelog.model import ParsedCommit


COMMIT_PATTERN = re.compile(r"^(\w+)(\(\w+\))?:\s(.+)$", re.ASCII)
LINE_BREAK = re.compile("\r\n|[\n\r\u2028\u2029]")


def first_line(message: str) -> str:
    """Return ``message`` up to its first line break.

    ``\\n``, ``\\r\\n``, a lone ``\\r`` and the Unicode line and paragraph
    separators all end the first line.
    """
    return LINE_BREAK.split(message, maxsplit=1)[0]


def capitalize_first(text: str) -> str:
    """Upper-case the first character of ``text`` and leave the rest untouched."""
    return text[:1].upper() + text[1:]


def classify_commit(raw_message: str, known_types: Container[str]) -> Optional[ParsedCommit]:
    """Parse a raw commit message into a :class:`ParsedCommit`.

    Parameters
    ----------
    raw_message : str
        The full commit message. Anything after the first line is ignored.
    known_types : Container[str]
        Commit type codes that have a changelog category.

    Returns
    -------
    Optional[ParsedCommit]
        The parsed commit, or ``None`` if the first line does not match
        the grammar or its type is not a known type.

    Examples
    --------
    >>> classify_commit("feat(api): add endpoint", {"feat", "fix"})
    ParsedCommit(type='feat', scope='api', description='Add endpoint')
    >>> classify_commit("chore: bump deps", {"feat", "fix"}) is None
    True
    """
    match = COMMIT_PATTERN.match(first_line(raw_message))
    if not match:
        return None

    commit_type, scope, description = match.groups()
    if commit_type not in known_types:
        return None

    return ParsedCommit(
        type=commit_type,
        scope=scope[1:-1] if scope else None,
        description=capitalize_first(description),
    )
