"""
Data models for changelog generation.

A :class:`RawCommit` is what a commit source (``git log`` or the GitHub
API) hands over. A :class:`ParsedCommit` is the result of matching its
first line against the conventional commit grammar.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RawCommit:
    """A commit as supplied by a commit source.

    Attributes
    ----------
    message : str
        Full commit message, possibly spanning several lines.
    """

    message: str


@dataclass(frozen=True)
class ParsedCommit:
    """A commit message that matched ``<type>[(<scope>)]: <description>``.

    Attributes
    ----------
    type : str
        The commit type code (feat, fix, docs, etc.).
    scope : Optional[str]
        Subsystem named in parentheses, without the parentheses.
    description : str
        Remainder of the first line with its first letter capitalised.
    """

    type: str
    scope: Optional[str]
    description: str
