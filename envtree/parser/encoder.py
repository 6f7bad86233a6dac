"""
Typed pydantic model -> tree of untyped nodes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from envtree.errors.errors import EncodingError
from envtree.parser.fields import (
    field_label,
    format_scalar,
    is_model,
    item_type,
    kind_of,
    new_instance,
    node_name,
    unwrap_optional,
    visible_fields,
)
from envtree.parser.filler import LIST_SEPARATOR
from envtree.parser.types import TAG_LABEL_ALLOW_EMPTY, EncoderToNodeOpts, Kind, Node

# Stand-in key documenting the shape of an empty map.
MAP_PLACEHOLDER = "<name>"


def encode_to_node(element: Any, root_name: str, opts: EncoderToNodeOpts) -> Node:
    if not isinstance(element, BaseModel):
        raise EncodingError(
            f"unsupported element type {type(element).__name__}, expected a pydantic model"
        )
    root = Node(name=root_name, raw_value=element)
    _NodeEncoder(opts).encode_model(root, element)
    return root


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and value == 0:
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False


class _NodeEncoder:
    def __init__(self, opts: EncoderToNodeOpts) -> None:
        self._opts = opts

    def encode_model(self, node: Node, instance: BaseModel) -> None:
        for attr_name, info in visible_fields(type(instance), self._opts.tag_name):
            value = getattr(instance, attr_name, None)
            child = Node(
                name=node_name(attr_name, info),
                field_name=attr_name,
                description=info.description or "",
                tag=field_label(info, self._opts.tag_name),
            )
            if self.encode_value(child, info.annotation, value):
                node.children.append(child)

    def encode_value(self, node: Node, annotation: Any, value: Any) -> bool:
        """Fill *node* from *value*; returns False when the node is omitted."""
        node.raw_value = value
        kind = kind_of(annotation)
        inner, _ = unwrap_optional(annotation)

        if kind in (Kind.STRUCT, Kind.POINTER):
            if value is None:
                if self._opts.omit_empty:
                    return False
                value = new_instance(inner)
                if node.tag == TAG_LABEL_ALLOW_EMPTY:
                    node.value = "false"
            elif node.tag == TAG_LABEL_ALLOW_EMPTY:
                node.value = "true"
            self.encode_model(node, value)
            if self._opts.omit_empty and not node.children and not node.value:
                return False
            return True

        if kind == Kind.MAP:
            return self._encode_map(node, annotation, value)

        if kind == Kind.SLICE:
            return self._encode_slice(node, annotation, value)

        if self._opts.omit_empty and _is_empty(value):
            return False
        node.value = format_scalar(value)
        return True

    def _encode_map(self, node: Node, annotation: Any, value: Any) -> bool:
        value_type = item_type(annotation)
        if not value:
            if self._opts.omit_empty:
                return False
            placeholder = Node(name=MAP_PLACEHOLDER)
            self.encode_value(placeholder, value_type, None)
            node.children.append(placeholder)
            return True

        for key in sorted(value, key=format_scalar):
            child = Node(name=format_scalar(key))
            if self.encode_value(child, value_type, value[key]):
                node.children.append(child)
        return bool(node.children) or not self._opts.omit_empty

    def _encode_slice(self, node: Node, annotation: Any, value: Any) -> bool:
        if _is_empty(value):
            if self._opts.omit_empty:
                return False
            node.value = ""
            return True

        element_type = item_type(annotation)
        if is_model(unwrap_optional(element_type)[0]):
            if not self._opts.allow_slice_as_struct:
                raise EncodingError(
                    f"{node.name}: lists of models need allow_slice_as_struct",
                    path=node.name,
                )
            for index, item in enumerate(value):
                child = Node(name=str(index))
                # an omitted item leaves a gap, filled with a default instance on decode
                if self.encode_value(child, element_type, item):
                    node.children.append(child)
            return bool(node.children) or not self._opts.omit_empty

        if kind_of(element_type) in (Kind.STRUCT, Kind.POINTER, Kind.MAP, Kind.SLICE):
            raise EncodingError(
                f"{node.name}: lists of {kind_of(element_type).value} are not supported",
                path=node.name,
            )
        node.value = LIST_SEPARATOR.join(format_scalar(item) for item in value)
        return True
