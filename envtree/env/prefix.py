"""
Namespace prefix rules shared by both codec directions.
"""

from __future__ import annotations

import re

from envtree.errors.errors import InvalidPrefixError

# Default prefix for environment variable names.
DEFAULT_NAME_PREFIX = "TRAEFIK_"

PREFIX_PATTERN = r"^[a-zA-Z0-9][a-zA-Z0-9_]*_$"


def check_prefix(prefix: str) -> None:
    """
    Raise ``InvalidPrefixError`` unless ``prefix`` is an alphanumeric character,
    then alphanumerics or underscores, ending with an underscore.
    """
    # fullmatch: "$" alone would also accept a trailing newline
    if not isinstance(prefix, str) or re.fullmatch(PREFIX_PATTERN, prefix) is None:
        raise InvalidPrefixError(prefix, PREFIX_PATTERN)


def root_name(prefix: str) -> str:
    """Prefix without its trailing underscore, lowercased: ``"TRAEFIK_"`` -> ``"traefik"``."""
    return prefix[:-1].lower()
