"""
Annotated node tree -> typed pydantic model (populated in place).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from envtree.errors.errors import FieldValueError, MetadataError
from envtree.parser.fields import is_model, item_type, new_instance, unwrap_optional
from envtree.parser.types import Kind, Node

LIST_SEPARATOR = ","


def fill(element: BaseModel, node: Node | None) -> None:
    """Write the values of an annotated tree into ``element``."""
    if node is None:
        return
    if node.kind is None:
        raise MetadataError("node has no metadata, call add_metadata first", path=node.name)
    _fill_model(element, node, node.name)


def _fill_model(instance: BaseModel, node: Node, path: str) -> None:
    fields = type(instance).model_fields
    for child in node.children:
        info = fields[child.field_name]
        current = getattr(instance, child.field_name, None)
        value = _build(current, info.annotation, child, f"{path}.{child.name}")
        setattr(instance, child.field_name, value)


def _build(current: Any, annotation: Any, node: Node, path: str) -> Any:
    kind = node.kind
    inner, optional = unwrap_optional(annotation)

    if kind == Kind.POINTER:
        if node.disabled:
            return None
        instance = current if isinstance(current, inner) else new_instance(inner)
        _fill_model(instance, node, path)
        return instance

    if kind == Kind.STRUCT:
        instance = current if isinstance(current, inner) else new_instance(inner)
        _fill_model(instance, node, path)
        return instance

    if kind == Kind.MAP:
        return _build_map(current, annotation, node, path)

    if kind == Kind.SLICE:
        return _build_slice(current, annotation, node, path)

    if optional and node.value == "":
        return None
    return _coerce(annotation, node.value, path)


def _build_map(current: Any, annotation: Any, node: Node, path: str) -> Any:
    value_type = item_type(annotation)
    items: dict[Any, Any] = dict(current) if current else {}
    for child in node.children:
        items[child.name] = _build(
            items.get(child.name), value_type, child, f"{path}.{child.name}"
        )
    return _coerce(annotation, items, path)


def _build_slice(current: Any, annotation: Any, node: Node, path: str) -> Any:
    element_type = item_type(annotation)
    model, _ = unwrap_optional(element_type)

    if is_model(model):
        if not node.children:
            # a bare value on a list of models can only empty it
            return _coerce(annotation, [], path)
        items = list(current) if current else []
        # gaps are padded with defaults, so the highest index is bounded by what
        # the list already holds plus the items being set
        limit = len(items) + len(node.children)
        size = max(int(child.name) for child in node.children) + 1
        if size - 1 > limit:
            raise MetadataError(
                f"list index {size - 1} out of range, at most {limit} allowed here",
                path=path,
            )
        while len(items) < size:
            items.append(new_instance(model))
        for child in node.children:
            index = int(child.name)
            existing = items[index] if isinstance(items[index], model) else None
            items[index] = _build(existing, element_type, child, f"{path}.{child.name}")
        return _coerce(annotation, items, path)

    if node.value == "":
        return _coerce(annotation, [], path)
    raw_items = [item.strip() for item in node.value.split(LIST_SEPARATOR)]
    return _coerce(annotation, raw_items, path)


def _coerce(annotation: Any, raw: Any, path: str) -> Any:
    adapter = TypeAdapter(annotation)
    try:
        return adapter.validate_python(raw)
    except (ValidationError, TypeError, ValueError) as exc:
        raise FieldValueError(
            f"invalid value for {path}: {exc}",
            path=path,
            raw_value=raw if isinstance(raw, str) else None,
        ) from exc
