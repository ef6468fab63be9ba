"""
Command line interface for the changelog_generator tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``changelog-gen`` command. It orchestrates
configuration loading, commit collection (from a local Git repository or
the GitHub API), changelog rendering and writing the result into the
changelog file. Exit codes are listed below.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import click

from changelog_generator import __version__
from changelog_generator.changelog.aggregator import FIRST_SEEN, SECTION_ORDERS
from changelog_generator.changelog.errors import MalformedMappingError, TemplateError
from changelog_generator.changelog.generator import generate_changelog
from changelog_generator.changelog.model import RawCommit
from changelog_generator.changelog.writer import prepend_changelog
from changelog_generator.config.loader import ChangelogConfig, ConfigError, load_config, load_template
from changelog_generator.vcs.git_client import GitClient, GitError
from changelog_generator.vcs.github_client import GitHubClient, GitHubError

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests).
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_TEMPLATE_ERROR = 9
EXIT_WRITE_FAILURE = 10


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"→ {self.message}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            elapsed = time.time() - self.start_time
            click.echo(f"  ✓ Done ({elapsed:.1f}s)")
        return False


def print_step(step_num: int, total_steps: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'='*60}")
    click.echo(f"Step {step_num}/{total_steps}: {message}")
    click.echo(f"{'='*60}")


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def enable_package_logging() -> Callable[[], None]:
    """Let the package loggers propagate to the handlers configured on the root.

    Returns a callable that restores the previous propagation settings.
    """
    changed = []
    for name, candidate in list(logging.root.manager.loggerDict.items()):
        if name.split(".")[0] == "changelog_generator" and isinstance(candidate, logging.Logger):
            changed.append((candidate, candidate.propagate))
            candidate.propagate = True

    def restore() -> None:
        for package_logger, propagate in changed:
            package_logger.propagate = propagate

    return restore


def release_tag_names(version_name: str) -> Tuple[str, ...]:
    """Return the tag names a release called ``version_name`` may be tagged under."""
    if version_name.startswith("v"):
        return (version_name,)
    return (version_name, f"v{version_name}")


def collect_git_commits(
    config: ChangelogConfig, version_name: str, from_ref: Optional[str], to_ref: str
) -> List[RawCommit]:
    """Collect the release commits from the local Git repository.

    Without ``from_ref`` the range starts at the latest tag reachable
    from ``to_ref`` (skipping the tags the release itself may carry,
    see :func:`release_tag_names`); without any tag, the whole history
    up to ``to_ref`` is used.

    Raises
    ------
    click.exceptions.Exit
        With code EXIT_NO_REPO if the workspace is not inside a Git repository.
    GitError
        If a Git command fails.
    """
    repo_root = GitClient.find_repo_root(config.workspace)
    if repo_root is None:
        print_error(f"No Git repository found at {config.workspace} or its parent directories.")
        raise click.exceptions.Exit(EXIT_NO_REPO)
    print_success(f"Found Git repository at: {repo_root}")

    client = GitClient(repo_root)
    base = from_ref or client.get_latest_tag(to_ref, exclude=release_tag_names(version_name))
    rev_range = f"{base}..{to_ref}" if base else to_ref
    print_info(f"Revision range: {rev_range}", indent=1)
    with ProgressIndicator("Reading commit history"):
        return client.get_commits(rev_range)


def collect_github_commits(
    config: ChangelogConfig, version_name: str, from_ref: Optional[str], to_ref: str
) -> List[RawCommit]:
    """Collect the release commits through the GitHub API.

    Raises
    ------
    ConfigError
        If no GitHub repository is configured.
    GitHubError
        If an API request fails.
    """
    if not config.github_repository:
        raise ConfigError("The GitHub source requires GITHUB_REPOSITORY or 'github_repository' to be set")
    client = GitHubClient(
        repository=config.github_repository,
        token=config.github_token,
        api_url=config.github_api_url,
        request_timeout=config.request_timeout,
    )
    print_success(f"Using GitHub repository: {config.github_repository}")

    with ProgressIndicator("Fetching commits from GitHub"):
        base = from_ref or client.get_latest_tag(to_ref, exclude=release_tag_names(version_name))
        if base:
            print_info(f"Comparing {base}...{to_ref}", indent=1)
            return client.compare_commits(base, to_ref)
        print_info(f"No previous tag, listing all commits up to {to_ref}", indent=1)
        return client.list_commits(to_ref)


@click.command()
@click.option("--version-name", "version_name", required=True, help="Version name of the release, e.g. 1.2.0.")
@click.option("--from", "from_ref", default=None, help="Start of the commit range (exclusive). Defaults to the latest tag.")
@click.option("--to", "to_ref", default="HEAD", show_default=True, help="End of the commit range (inclusive).")
@click.option("--source", type=click.Choice(["git", "github"]), default="git", show_default=True, help="Where to read commits from.")
@click.option("--mapping", default=None, help="Commit type mapping, e.g. 'feat:Features,fix:Bug Fixes'.")
@click.option("--template", "template_path", default=None, help="Path to the changelog template.")
@click.option("--output", "changelog_path", default=None, help="Changelog file to prepend the new section to.")
@click.option("--workspace", type=click.Path(file_okay=False, path_type=Path), default=None, help="Workspace root (defaults to GITHUB_WORKSPACE or the current directory).")
@click.option("--section-order", type=click.Choice(list(SECTION_ORDERS)), default=FIRST_SEEN, show_default=True, help="Order of the changelog sections.")
@click.option("--dry-run", is_flag=True, help="Print the rendered section instead of writing it.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="changelog-gen")
def main(
    version_name: str,
    from_ref: Optional[str],
    to_ref: str,
    source: str,
    mapping: Optional[str],
    template_path: Optional[str],
    changelog_path: Optional[str],
    workspace: Optional[Path],
    section_order: str,
    dry_run: bool,
    verbose: bool,
) -> None:
    """📝 Generate a changelog section from conventional commit messages."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    restore_logging = enable_package_logging()

    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        ctx.call_on_close(restore_logging)
    total_steps = 4

    try:
        # Step 1: Load configuration
        print_step(1, total_steps, "Loading Configuration")
        try:
            config = load_config(
                workspace,
                overrides={
                    "commit_types": mapping,
                    "template_path": template_path,
                    "changelog_path": changelog_path,
                },
            )
            template_text = load_template(config)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        print_success("Configuration loaded successfully")
        print_info(f"Commit types: {config.commit_types}", indent=1)
        print_info(f"Template: {config.template_path or 'built-in'}", indent=1)

        # Step 2: Collect commits
        print_step(2, total_steps, "Collecting Commits")
        try:
            if source == "github":
                commits = collect_github_commits(config, version_name, from_ref, to_ref)
            else:
                commits = collect_git_commits(config, version_name, from_ref, to_ref)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        except (GitError, GitHubError) as exc:
            print_error(f"Failed to collect commits: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        if commits:
            print_success(f"Found {len(commits)} commit{'s' if len(commits) != 1 else ''}")
        else:
            print_warning("No commits found in range; the section will have no entries.")

        # Step 3: Render
        print_step(3, total_steps, "Rendering Changelog")
        try:
            section = generate_changelog(
                version_name,
                commits,
                config.commit_types,
                template_text,
                order=section_order,
            )
        except MalformedMappingError as exc:
            print_error(f"Invalid commit type mapping: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        except TemplateError as exc:
            print_error(f"Invalid template: {exc}")
            raise click.exceptions.Exit(EXIT_TEMPLATE_ERROR)
        print_success(f"Rendered changelog for version {version_name}")

        # Step 4: Write
        print_step(4, total_steps, "Writing Changelog")
        if dry_run:
            print_info("Dry run - changelog file left untouched")
            click.echo("")
            click.echo(section)
        else:
            try:
                prepend_changelog(config.changelog_path, section)
            except OSError as exc:
                print_error(f"Failed to write {config.changelog_path}: {exc}")
                raise click.exceptions.Exit(EXIT_WRITE_FAILURE)
            print_success(f"Updated {config.changelog_path}")

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)
