"""
Exceptions raised by the environment codec and the tree engine.

Exception hierarchy:
- EnvTreeError (base)
  - InvalidPrefixError: namespace prefix does not match the prefix pattern
  - ParserError: tree engine failures
    - LabelError: malformed or foreign key paths
    - MetadataError: tree does not fit the model's shape
    - FieldValueError: a raw string cannot be coerced to the field type
    - EncodingError: a value cannot be represented as a node
"""

from __future__ import annotations

from typing import Any, Optional


class EnvTreeError(Exception):
    """Base exception for all envtree errors."""

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidPrefixError(EnvTreeError, ValueError):
    """Raised when a namespace prefix does not match the required pattern."""

    def __init__(self, prefix: str, pattern: str) -> None:
        self.prefix = prefix
        self.pattern = pattern
        super().__init__(
            f"invalid prefix {prefix!r}, the prefix pattern must match the following "
            f"pattern: {pattern}",
            details={"prefix": prefix, "pattern": pattern},
        )


class ParserError(EnvTreeError):
    """Base exception for the tree engine."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.path = path
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details=details)

    def __str__(self) -> str:
        message = super().__str__()
        if self.path:
            return f"{message} [path={self.path}]"
        return message


class LabelError(ParserError):
    """Raised when a key path cannot be turned into a node."""


class MetadataError(ParserError):
    """Raised when a node tree does not match the model it describes."""


class FieldValueError(ParserError):
    """Raised when a raw value cannot be coerced into its field type."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        raw_value: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        # the raw value is kept on the instance but not in details, it may be a secret
        self.raw_value = raw_value
        super().__init__(message, path=path, details=details)


class EncodingError(ParserError):
    """Raised when a typed value cannot be encoded into a node."""
