"""
Writing rendered sections into a changelog file.
"""

from __future__ import annotations

import logging
from pathlib import Path


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def prepend_changelog(path: Path, section: str) -> None:
    """Insert ``section`` at the top of the changelog at ``path``.

    The new section is separated from the existing content by a blank
    line. If the file does not exist it is created. ``OSError`` from
    reading or writing the file is propagated to the caller.
    """
    section = section.strip()
    if path.exists():
        existing = path.read_text(encoding="utf-8").lstrip("\n")
        content = f"{section}\n\n{existing}" if existing else f"{section}\n"
        logger.debug("Prepending %d characters to %s", len(section), path)
    else:
        content = f"{section}\n"
        logger.debug("Creating changelog %s", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
