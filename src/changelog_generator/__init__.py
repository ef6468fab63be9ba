"""
Top-level package for changelog_generator.

Renders changelog sections from conventional commit messages. The CLI
entry point lives in ``changelog_generator.cli``; the rendering engine
in ``changelog_generator.changelog``.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
