"""
Exceptions raised while building a changelog section.

Every error in this module is a configuration error: a malformed commit
type mapping or a malformed template fails the whole render. Commits
that do not match the commit grammar are never errors, they are simply
left out of the changelog.
"""


class ChangelogError(Exception):
    """Base class for all changelog rendering errors."""

    pass


class MalformedMappingError(ChangelogError):
    """Raised when the commit type mapping string cannot be parsed."""

    pass


class DuplicateCategoryError(MalformedMappingError):
    """Raised when a commit type is declared more than once in the mapping."""

    pass


class TemplateError(ChangelogError):
    """Raised when the changelog template is malformed."""

    pass


class TemplateTokenMissingError(TemplateError):
    """Raised when ``{{date}}`` or ``{{versionName}}`` is absent from the template."""

    pass


class TemplateMarkerError(TemplateError):
    """Raised when a section or line marker is missing, unpaired or misplaced."""

    pass
