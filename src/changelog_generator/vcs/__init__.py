"""
Commit sources.

This package contains clients that collect the commits of a release,
either from a local Git repository or from the GitHub REST API. Both
return :class:`~changelog_generator.changelog.model.RawCommit` lists
oldest first.
"""

from .git_client import GitClient, GitError  # noqa: F401
from .github_client import GitHubClient, GitHubError  # noqa: F401
