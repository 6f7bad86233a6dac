"""
Types shared by the tree engine.

A ``Node`` tree is the untyped intermediate form between flat key/value
pairs and a typed pydantic model. ``add_metadata`` annotates the tree with
a ``Kind`` per node, which the filler and the flat encoder rely on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional

# Name of the json_schema_extra entry holding field labels.
TAG_LABEL = "label"
# Label value allowing an optional nested model to be toggled by a bare value.
TAG_LABEL_ALLOW_EMPTY = "allowEmpty"
# Label value hiding a field from the engine.
TAG_LABEL_SKIP = "-"


class Kind(str, Enum):
    """Shape of the value behind a node."""

    STRUCT = "struct"
    POINTER = "ptr"
    MAP = "map"
    SLICE = "slice"
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    VALUE = "value"


@dataclass
class Node:
    """One element of the untyped configuration tree."""

    name: str
    description: str = ""
    field_name: str = ""
    value: str = ""
    raw_value: Any = None
    disabled: bool = False
    kind: Optional[Kind] = None
    tag: str = ""
    children: list[Node] = field(default_factory=list)

    def child(self, name: str) -> Optional[Node]:
        """Return the child called *name* (case-insensitive), if any."""
        for candidate in self.children:
            if candidate.name.lower() == name.lower():
                return candidate
        return None


@dataclass(frozen=True)
class Flat:
    """A flat key/value projection of a leaf of the tree."""

    name: str
    default: str = ""
    description: str = ""

    def as_env(self) -> str:
        return f"{self.name}={self.default}"


@dataclass(frozen=True)
class EncoderToNodeOpts:
    omit_empty: bool = False
    tag_name: str = TAG_LABEL
    allow_slice_as_struct: bool = False


@dataclass(frozen=True)
class MetadataOpts:
    tag_name: str = TAG_LABEL
    allow_slice_as_struct: bool = False


@dataclass(frozen=True)
class FlatOpts:
    case: Literal["upper", "lower", ""] = ""
    separator: str = "."
    tag_name: str = TAG_LABEL
