"""
Changelog rendering.

Parses the commit type mapping (:mod:`.categories`), classifies commit
messages (:mod:`.classifier`), groups them per category
(:mod:`.aggregator`) and renders the groups through a template
(:mod:`.template`). :func:`generate_changelog` runs the whole pipeline.
"""

from .errors import (  # noqa: F401
    ChangelogError,
    DuplicateCategoryError,
    MalformedMappingError,
    TemplateError,
    TemplateMarkerError,
    TemplateTokenMissingError,
)
from .generator import generate_changelog  # noqa: F401
from .model import ParsedCommit, RawCommit  # noqa: F401
