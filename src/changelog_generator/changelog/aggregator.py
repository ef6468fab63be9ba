"""
Grouping of parsed commits into changelog categories.

The resulting dictionary is keyed by commit type. By default a type's
position is fixed the first time one of its commits is seen, so the
order of the commit list decides the order of the changelog sections.
Passing ``order=DECLARATION`` orders the sections as the mapping
declares them instead.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from changelog_generator.changelog.model import ParsedCommit


FIRST_SEEN = "first-seen"
DECLARATION = "declaration"
SECTION_ORDERS = (FIRST_SEEN, DECLARATION)


def format_message(commit: ParsedCommit) -> str:
    """Render a parsed commit as a changelog line (``**scope:** Description``)."""
    if commit.scope:
        return f"**{commit.scope}:** {commit.description}"
    return commit.description


def aggregate_commits(
    parsed_commits: Iterable[ParsedCommit],
    categories: Mapping[str, str],
    order: str = FIRST_SEEN,
) -> Dict[str, List[str]]:
    """Group formatted commit messages by commit type.

    Parameters
    ----------
    parsed_commits : Iterable[ParsedCommit]
        Commits in the order supplied by the caller.
    categories : Mapping[str, str]
        Known commit types mapped to display names. Commits of other
        types are ignored.
    order : str, optional
        ``FIRST_SEEN`` (default) or ``DECLARATION``.

    Returns
    -------
    Dict[str, List[str]]
        Formatted messages per commit type. Types without commits are
        absent. Messages keep the order of ``parsed_commits``.
    """
    if order not in SECTION_ORDERS:
        raise ValueError(f"Unknown section order {order!r}; expected one of {SECTION_ORDERS}")

    groups: Dict[str, List[str]] = {}
    for commit in parsed_commits:
        if commit.type not in categories:
            continue
        groups.setdefault(commit.type, []).append(format_message(commit))

    if order == DECLARATION:
        return {type_code: groups[type_code] for type_code in categories if type_code in groups}
    return groups
