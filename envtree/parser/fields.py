"""
Introspection helpers mapping pydantic model fields to node names and kinds.
"""

from __future__ import annotations

import datetime as dt
import types
from collections.abc import Mapping, MutableSequence, Sequence, Set
from enum import Enum
from typing import Annotated, Any, Optional, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from envtree.parser.types import TAG_LABEL_SKIP, Kind

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, Sequence, MutableSequence, Set)


def is_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """
    Strip ``Optional``/``X | None`` and ``Annotated`` wrappers.

    Returns the inner type and whether ``None`` was allowed. Unions of more than
    one non-None member are returned unchanged.
    """
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]

    if get_origin(annotation) in (Union, types.UnionType):
        members = get_args(annotation)
        non_none = [member for member in members if member is not type(None)]
        optional = len(non_none) < len(members)
        if len(non_none) == 1:
            inner, _ = unwrap_optional(non_none[0])
            return inner, optional
        return annotation, optional

    return annotation, False


def kind_of(annotation: Any) -> Kind:
    inner, optional = unwrap_optional(annotation)
    if is_model(inner):
        return Kind.POINTER if optional else Kind.STRUCT

    origin = get_origin(inner) or inner
    if origin in (dict, Mapping) or (isinstance(origin, type) and issubclass(origin, dict)):
        return Kind.MAP
    if origin in _SEQUENCE_ORIGINS:
        return Kind.SLICE

    # Enum first: str-based enums would otherwise be treated as plain strings
    if isinstance(inner, type) and issubclass(inner, Enum):
        return Kind.VALUE
    if inner is bool:
        return Kind.BOOL
    if inner is int:
        return Kind.INT
    if inner is float:
        return Kind.FLOAT
    if inner is str or inner is Any:
        return Kind.STRING
    return Kind.VALUE


def item_type(annotation: Any) -> Any:
    """Element type of a list-like annotation, or value type of a mapping."""
    inner, _ = unwrap_optional(annotation)
    args = [arg for arg in get_args(inner) if arg is not Ellipsis]
    if not args:
        return Any
    if kind_of(inner) == Kind.MAP:
        return args[1] if len(args) > 1 else Any
    return args[0]


def field_label(info: FieldInfo, tag_name: str) -> str:
    extra = info.json_schema_extra
    if isinstance(extra, dict):
        value = extra.get(tag_name)
        if value is not None:
            return str(value)
    return ""


def node_name(attr_name: str, info: FieldInfo) -> str:
    """Name of the node addressing a field: alias or attribute name, without underscores."""
    return (info.alias or attr_name).replace("_", "")


def visible_fields(model: type[BaseModel], tag_name: str) -> list[tuple[str, FieldInfo]]:
    return [
        (attr_name, info)
        for attr_name, info in model.model_fields.items()
        if field_label(info, tag_name) != TAG_LABEL_SKIP
    ]


def find_field(
    model: type[BaseModel], name: str, tag_name: str
) -> Optional[tuple[str, FieldInfo]]:
    wanted = name.replace("_", "").lower()
    for attr_name, info in visible_fields(model, tag_name):
        if node_name(attr_name, info).lower() == wanted:
            return attr_name, info
    return None


def new_instance(model: type[BaseModel]) -> BaseModel:
    """
    Build an instance holding only the model's declared defaults.

    Required fields stay unset. Models may define ``set_defaults()`` to compute
    defaults that cannot be declared statically.
    """
    instance = model.model_construct()
    hook = getattr(instance, "set_defaults", None)
    if callable(hook):
        hook()
    return instance


def format_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_scalar(value.value)
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    return str(value)
