"""
Configuration of the environment codec.

Naming conventions are passed explicitly to the codec rather than read from
module globals, so several namespaces can be handled side by side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from envtree.env.prefix import DEFAULT_NAME_PREFIX, check_prefix
from envtree.errors.errors import EnvTreeError
from envtree.parser.types import TAG_LABEL


@dataclass(frozen=True)
class EnvCodecConfig:
    """
    Immutable settings for an ``EnvCodec``.

    Example:
        config = EnvCodecConfig(prefix="MYAPP_")
        codec = EnvCodec(config)
    """

    prefix: str = DEFAULT_NAME_PREFIX
    # json_schema_extra entry holding field labels ("-", "allowEmpty")
    tag_name: str = TAG_LABEL
    allow_slice_as_struct: bool = True
    omit_empty: bool = False
    case: Literal["upper", "lower"] = "upper"

    def __post_init__(self) -> None:
        check_prefix(self.prefix)
        if self.case not in ("upper", "lower"):
            raise EnvTreeError(
                "case must be 'upper' or 'lower'",
                details={"field": "case", "value": str(self.case)},
            )
        if not self.tag_name:
            raise EnvTreeError(
                "tag_name must be a non-empty string",
                details={"field": "tag_name"},
            )
