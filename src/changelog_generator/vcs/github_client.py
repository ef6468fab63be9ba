"""
Client for reading commit history from the GitHub REST API.

This client wraps HTTP requests to the ``compare``, ``commits`` and
``tags`` endpoints of a repository. On error conditions (connection
errors, timeouts, non-200 responses, unparsable bodies), a
:class:`GitHubError` is raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Collection, Dict, Iterator, List, Optional

import requests

from changelog_generator.changelog.model import RawCommit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PER_PAGE = 100


class GitHubError(Exception):
    """Raised when communication with the GitHub API fails."""

    pass


@dataclass
class GitHubClient:
    """Client for the GitHub REST API.

    Parameters
    ----------
    repository : str
        Repository in ``owner/name`` form.
    token : str, optional
        Token sent as a bearer token. Anonymous requests are heavily rate
        limited but work for public repositories.
    api_url : str, optional
        Base URL of the API, e.g. a GitHub Enterprise endpoint.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 30 seconds.
    """

    repository: str
    token: Optional[str] = None
    api_url: str = "https://api.github.com"
    request_timeout: float = 30.0

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue a GET request against the repository and decode the JSON body."""
        url = f"{self.api_url.rstrip('/')}/repos/{self.repository}/{path}"
        logger.debug("Requesting %s with params %s", url, params)
        try:
            response = requests.get(
                url,
                headers=self._headers(),
                params=params,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to GitHub: %s", exc)
            raise GitHubError(str(exc)) from exc
        if response.status_code != 200:
            logger.error(
                "GitHub returned non-200 status %s: %s", response.status_code, response.text
            )
            raise GitHubError(f"GitHub returned status {response.status_code}: {response.text}")
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse GitHub response: %s", exc)
            raise GitHubError("Failed to parse GitHub response") from exc

    @staticmethod
    def _to_commit(entry: Any) -> RawCommit:
        try:
            return RawCommit(message=entry["commit"]["message"])
        except (KeyError, TypeError) as exc:
            raise GitHubError(f"Unexpected commit entry in GitHub response: {entry!r}") from exc

    def compare_commits(self, base: str, head: str) -> List[RawCommit]:
        """Return the commits reachable from ``head`` but not from ``base``.

        Commits are returned oldest first, as GitHub lists them.

        Raises
        ------
        GitHubError
            If a request fails or the response is malformed.
        """
        commits: List[RawCommit] = []
        page = 1
        while True:
            data = self._get(f"compare/{base}...{head}", params={"per_page": PER_PAGE, "page": page})
            if not isinstance(data, dict) or not isinstance(data.get("commits"), list):
                raise GitHubError("Unexpected compare response from GitHub")
            entries = data["commits"]
            commits.extend(self._to_commit(entry) for entry in entries)
            total = data.get("total_commits", len(commits))
            if not entries or len(entries) < PER_PAGE or len(commits) >= total:
                break
            page += 1
        logger.debug("Fetched %d commit(s) between %s and %s", len(commits), base, head)
        return commits

    def list_commits(self, head: str) -> List[RawCommit]:
        """Return every commit reachable from ``head``, oldest first."""
        commits: List[RawCommit] = []
        page = 1
        while True:
            data = self._get("commits", params={"sha": head, "per_page": PER_PAGE, "page": page})
            if not isinstance(data, list):
                raise GitHubError("Unexpected commits response from GitHub")
            commits.extend(self._to_commit(entry) for entry in data)
            if len(data) < PER_PAGE:
                break
            page += 1
        commits.reverse()
        logger.debug("Fetched %d commit(s) up to %s", len(commits), head)
        return commits

    def _iter_tags(self) -> Iterator[str]:
        """Yield tag names in the order GitHub lists them (by name, not history)."""
        page = 1
        while True:
            data = self._get("tags", params={"per_page": PER_PAGE, "page": page})
            if not isinstance(data, list):
                raise GitHubError("Unexpected tags response from GitHub")
            for entry in data:
                try:
                    name = entry["name"]
                except (KeyError, TypeError) as exc:
                    raise GitHubError(f"Unexpected tag entry in GitHub response: {entry!r}") from exc
                yield name
            if len(data) < PER_PAGE:
                break
            page += 1

    def _distance(self, tag: str, head: str) -> Optional[int]:
        """Return how many commits ``head`` is ahead of ``tag``.

        ``None`` means ``tag`` is not an ancestor of ``head``.
        """
        data = self._get(f"compare/{tag}...{head}", params={"per_page": 1})
        if not isinstance(data, dict):
            raise GitHubError("Unexpected compare response from GitHub")
        if data.get("status") not in ("ahead", "identical"):
            return None
        ahead_by = data.get("ahead_by", 0)
        if isinstance(ahead_by, bool) or not isinstance(ahead_by, int):
            raise GitHubError("Unexpected compare response from GitHub")
        return ahead_by

    def get_latest_tag(self, head: str = "HEAD", exclude: Collection[str] = ()) -> Optional[str]:
        """Return the tag nearest to ``head`` among the tags it can reach.

        GitHub sorts tags by name, so every tag is compared against
        ``head`` and the reachable one with the fewest commits in between
        wins. A tag pointing at ``head`` itself ends the search.

        Parameters
        ----------
        head : str
            Ref the release is generated for.
        exclude : Collection[str], optional
            Tag names to skip, typically the names the release being
            generated may already be tagged under.

        Returns
        -------
        Optional[str]
            The tag name, or ``None`` if no tag is reachable from ``head``.

        Raises
        ------
        GitHubError
            If a request fails or a response is malformed.
        """
        nearest: Optional[str] = None
        nearest_distance: Optional[int] = None
        for name in self._iter_tags():
            if name in exclude:
                continue
            distance = self._distance(name, head)
            if distance is None:
                logger.debug("Tag %s is not reachable from %s", name, head)
                continue
            if nearest_distance is None or distance < nearest_distance:
                nearest, nearest_distance = name, distance
            if distance == 0:
                break
        logger.debug("Latest tag reachable from %s: %s", head, nearest)
        return nearest
