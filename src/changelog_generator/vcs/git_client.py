"""
Git client implementation for changelog_generator.

This module wraps the few Git operations needed to collect the commits
of a release: locating the repository, finding the latest tag and
reading commit messages for a revision range. All subprocess calls are
executed with proper error handling so that unit tests can mock them
easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Collection, List, Optional

from changelog_generator.changelog.model import RawCommit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ASCII record separator placed after every commit body by ``git log``.
RECORD_SEPARATOR = "\x1e"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for reading commit history from a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If Git cannot be executed, or the command exits with a
            non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Failed to execute Git: %s", exc)
            raise GitError(f"Failed to execute git: {exc}") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def get_latest_tag(self, rev: str = "HEAD", exclude: Collection[str] = ()) -> Optional[str]:
        """Return the most recent tag reachable from ``rev``.

        Parameters
        ----------
        rev : str
            Revision to start from.
        exclude : Collection[str], optional
            Tag names to skip, typically the names the release being
            generated may already be tagged under. The search then
            continues from the parent of a skipped tag.

        Returns
        -------
        Optional[str]
            The tag name, or ``None`` if no tag is reachable.
        """
        result = self._run(["describe", "--tags", "--abbrev=0", rev], check=False)
        if result.returncode != 0:
            logger.debug("No tag reachable from %s: %s", rev, result.stderr.strip())
            return None
        tag = result.stdout.strip() or None
        if tag is not None and tag in exclude:
            return self.get_latest_tag(f"{tag}^", exclude)
        return tag

    def get_commits(self, rev_range: str = "HEAD", chronological: bool = True) -> List[RawCommit]:
        """Read the commit messages in ``rev_range``.

        Parameters
        ----------
        rev_range : str
            Any revision range accepted by ``git log``, e.g. ``v1.0.0..HEAD``.
        chronological : bool, optional
            If True (default) commits are returned oldest first, the order
            the GitHub compare API uses. Otherwise newest first.

        Returns
        -------
        List[RawCommit]
            One entry per commit, merge commits included.

        Raises
        ------
        GitError
            If ``git log`` fails, e.g. because a revision does not exist.
        """
        args = ["log", f"--format=%B{RECORD_SEPARATOR}"]
        if chronological:
            args.append("--reverse")
        args.append(rev_range)
        result = self._run(args, check=True)

        commits = []
        for record in result.stdout.split(RECORD_SEPARATOR):
            message = record.strip("\n")
            if not message.strip():
                continue
            commits.append(RawCommit(message=message))
        logger.debug("Read %d commit(s) from %s", len(commits), rev_range)
        return commits
