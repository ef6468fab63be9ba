"""
Configuration loading for changelog_generator.

Resolves settings from defaults, an optional ``.changelog_config.json``
file, the environment and CLI overrides. See
:mod:`changelog_generator.config.loader` for implementation details.
"""

from .loader import ChangelogConfig, ConfigError, load_config, load_template  # noqa: F401
