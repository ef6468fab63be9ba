"""
Parsing of the commit type mapping.

The mapping is a comma separated list of ``type:Display Name`` entries,
for example ``"feat:Features,fix:Bug Fixes"``. It is turned into a
dictionary from type code to display name which keeps the order in which
the entries were declared.
"""

from __future__ import annotations

import logging
from typing import Dict

from changelog_generator.changelog.errors import DuplicateCategoryError, MalformedMappingError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


ENTRY_SEPARATOR = ","
NAME_SEPARATOR = ":"


def parse_categories(mapping: str) -> Dict[str, str]:
    """Parse a commit type mapping into an ordered ``{type: name}`` dictionary.

    Parameters
    ----------
    mapping : str
        Comma separated ``type:Display Name`` entries. Whitespace around
        entries, type codes and names is ignored.

    Returns
    -------
    Dict[str, str]
        Type codes mapped to display names, in declaration order.

    Raises
    ------
    MalformedMappingError
        If the mapping is empty or an entry does not consist of exactly
        one non-empty type code and one non-empty name.
    DuplicateCategoryError
        If a type code is declared more than once.
    """
    if not mapping or not mapping.strip():
        raise MalformedMappingError("Commit type mapping is empty")

    categories: Dict[str, str] = {}
    for position, entry in enumerate(mapping.split(ENTRY_SEPARATOR), start=1):
        parts = [part.strip() for part in entry.split(NAME_SEPARATOR)]
        if len(parts) != 2 or not all(parts):
            raise MalformedMappingError(
                f"Invalid commit type mapping entry #{position}: {entry.strip()!r} "
                f"(expected 'type{NAME_SEPARATOR}Display Name')"
            )
        type_code, name = parts
        if type_code in categories:
            raise DuplicateCategoryError(
                f"Commit type {type_code!r} is mapped more than once "
                f"({categories[type_code]!r} and {name!r})"
            )
        categories[type_code] = name

    logger.debug("Parsed %d commit categories: %s", len(categories), categories)
    return categories
