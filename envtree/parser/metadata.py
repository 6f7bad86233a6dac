"""
Annotate an untyped node tree with the kinds inferred from a pydantic model.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from envtree.errors.errors import MetadataError
from envtree.parser.fields import (
    field_label,
    find_field,
    is_model,
    item_type,
    kind_of,
    unwrap_optional,
)
from envtree.parser.types import TAG_LABEL_ALLOW_EMPTY, Kind, MetadataOpts, Node


def add_metadata(element: Any, node: Node | None, opts: MetadataOpts) -> None:
    """Set kind, field name, tag and description on every node of the tree, in place."""
    if node is None:
        return
    model = element if isinstance(element, type) else type(element)
    if not is_model(model):
        raise MetadataError(f"unsupported element type {model.__name__}, expected a pydantic model")

    node.kind = Kind.STRUCT
    _MetadataBuilder(opts).browse_children(model, node, node.name)


class _MetadataBuilder:
    def __init__(self, opts: MetadataOpts) -> None:
        self._opts = opts

    def browse_children(self, model: type[BaseModel], node: Node, path: str) -> None:
        for child in node.children:
            child_path = f"{path}.{child.name}"
            found = find_field(model, child.name, self._opts.tag_name)
            if found is None:
                raise MetadataError(
                    f"field not found, node: {child.name}",
                    path=child_path,
                    details={"model": model.__name__},
                )
            attr_name, info = found
            child.field_name = attr_name
            child.description = info.description or ""
            child.tag = field_label(info, self._opts.tag_name)
            self.fill_node(child, info.annotation, child_path)

    def fill_node(self, node: Node, annotation: Any, path: str) -> None:
        kind = kind_of(annotation)
        node.kind = kind

        if kind in (Kind.STRUCT, Kind.POINTER):
            model, _ = unwrap_optional(annotation)
            if not node.children and node.tag != TAG_LABEL_ALLOW_EMPTY:
                raise MetadataError(
                    f"{node.name} cannot be a standalone element (type {model.__name__})",
                    path=path,
                )
            node.disabled = bool(node.value) and node.value.lower() != "true"
            self.browse_children(model, node, path)
            return

        if kind == Kind.MAP:
            value_type = item_type(annotation)
            for child in node.children:
                child.field_name = child.name
                child.tag = ""
                self._fill_item(child, value_type, f"{path}.{child.name}")
            return

        if kind == Kind.SLICE:
            element_type = item_type(annotation)
            if not is_model(unwrap_optional(element_type)[0]):
                self._check_leaf(node, path)
                return
            if not self._opts.allow_slice_as_struct:
                if node.children:
                    raise MetadataError(
                        f"{node.name}: lists of models are not allowed", path=path
                    )
                return
            for child in node.children:
                if not (child.name.isascii() and child.name.isdigit()):
                    raise MetadataError(
                        f"{child.name} is not a valid list index", path=f"{path}.{child.name}"
                    )
                child.field_name = child.name
                self._fill_item(child, element_type, f"{path}.{child.name}")
            return

        self._check_leaf(node, path)

    def _fill_item(self, node: Node, annotation: Any, path: str) -> None:
        # items of maps and lists have no label of their own; a bare value on a
        # model item is never a toggle
        if is_model(unwrap_optional(annotation)[0]) and not node.children:
            raise MetadataError(f"{node.name} cannot be a standalone element", path=path)
        self.fill_node(node, annotation, path)

    @staticmethod
    def _check_leaf(node: Node, path: str) -> None:
        if node.children:
            raise MetadataError(
                f"{node.name} is a {node.kind.value if node.kind else 'leaf'} and cannot have "
                "children",
                path=path,
            )
