"""
End-to-end changelog section generation.

:func:`generate_changelog` ties the pieces together: the commit type
mapping is parsed into categories, every commit is classified, matching
commits are grouped per category and the groups are rendered through
the template. The function performs no I/O; reading the template and
fetching commits is left to the caller.
"""

from __future__ import annotations

import datetime
import logging
from typing import Iterable, List, Optional

from changelog_generator.changelog.aggregator import FIRST_SEEN, aggregate_commits
from changelog_generator.changelog.categories import parse_categories
from changelog_generator.changelog.classifier import classify_commit, first_line
from changelog_generator.changelog.model import ParsedCommit, RawCommit
from changelog_generator.changelog.template import TemplateRenderer


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def generate_changelog(
    version: str,
    commits: Iterable[RawCommit],
    mapping: str,
    template_text: str,
    today: Optional[datetime.date] = None,
    order: str = FIRST_SEEN,
) -> str:
    """Render the changelog section for a release.

    Parameters
    ----------
    version : str
        Version name substituted for ``{{versionName}}``.
    commits : Iterable[RawCommit]
        Commits of the release. Their order decides the order of the
        sections (unless ``order`` is ``DECLARATION``) and of the lines
        within each section.
    mapping : str
        Commit type mapping such as ``"feat:Features,fix:Bug Fixes"``.
    template_text : str
        The changelog template.
    today : datetime.date, optional
        Release date; defaults to the current local date.
    order : str, optional
        Section ordering, see :mod:`changelog_generator.changelog.aggregator`.

    Returns
    -------
    str
        The rendered changelog section.

    Raises
    ------
    MalformedMappingError
        If the mapping cannot be parsed.
    TemplateError
        If the template is missing a token or has malformed markers.
    """
    logger.info("Retrieving changelog mapping")
    categories = parse_categories(mapping)
    renderer = TemplateRenderer(template_text)

    logger.info("Creating changelog for version %s", version)
    parsed: List[ParsedCommit] = []
    skipped = 0
    for commit in commits:
        result = classify_commit(commit.message, categories)
        if result is None:
            skipped += 1
            logger.debug("Skipping commit: %r", first_line(commit.message))
            continue
        parsed.append(result)
    logger.debug("Classified %d commit(s), skipped %d", len(parsed), skipped)

    groups = aggregate_commits(parsed, categories, order=order)
    return renderer.render(version, groups, categories, today=today)
