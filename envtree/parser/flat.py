"""
Annotated node tree -> sorted flat key/value pairs.
"""

from __future__ import annotations

from typing import Any

from envtree.errors.errors import EncodingError
from envtree.parser.types import TAG_LABEL_ALLOW_EMPTY, Flat, FlatOpts, Kind, Node


def encode_to_flat(element: Any, node: Node | None, opts: FlatOpts) -> list[Flat]:
    """
    Project the tree built from ``element`` onto flat entries.

    The tree must have been annotated with ``add_metadata``. Entry names join the
    node names from the root with ``opts.separator`` and follow ``opts.case``.
    """
    if element is None or node is None:
        return []
    if node.kind is None:
        raise EncodingError("node has no metadata, call add_metadata first", path=node.name)

    flats: list[Flat] = []
    for child in node.children:
        _collect(child, [node.name], opts, flats)
    return sorted(flats, key=lambda entry: entry.name)


def _collect(node: Node, parents: list[str], opts: FlatOpts, flats: list[Flat]) -> None:
    path = parents + [node.name]

    if node.kind in (Kind.STRUCT, Kind.POINTER):
        if node.tag == TAG_LABEL_ALLOW_EMPTY and node.value:
            flats.append(_flat(path, node, opts))
        for child in node.children:
            _collect(child, path, opts, flats)
        return

    if node.children:
        for child in node.children:
            _collect(child, path, opts, flats)
        return

    flats.append(_flat(path, node, opts))


def _flat(path: list[str], node: Node, opts: FlatOpts) -> Flat:
    name = opts.separator.join(path)
    if opts.case == "upper":
        name = name.upper()
    elif opts.case == "lower":
        name = name.lower()
    return Flat(name=name, default=node.value, description=node.description)
