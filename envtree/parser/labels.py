"""
Flat dotted key paths -> tree of untyped nodes.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, Optional

from envtree.errors.errors import LabelError
from envtree.parser.types import Node

_LOGGER = logging.getLogger(__name__)

PATH_SEPARATOR = "."


def _root_segments(root_name: str) -> list[str]:
    # root names derived from prefixes keep their inner underscores ("my_app"),
    # whereas the keys they head have been split on them ("my.app.x"); a doubled
    # underscore ("a_" from "A__") heads keys with an empty segment ("a..x")
    return re.split(r"[._]", root_name.lower())


def decode_to_node(
    labels: Mapping[str, str], root_name: str, *filters: str
) -> Optional[Node]:
    """
    Build a node tree from dotted key paths.

    Every key must start with ``root_name``. When ``filters`` are given, only keys
    whose first segment below the root is listed are kept. Returns ``None`` when no
    key contributes to the tree.
    """
    root_segments = _root_segments(root_name)
    if not root_segments[0]:
        raise LabelError(f"invalid root name {root_name!r}")
    wanted = {f.lower() for f in filters}

    root = Node(name=root_name)
    used = 0
    # sorted for a deterministic child order
    for key in sorted(labels):
        segments = key.split(PATH_SEPARATOR)
        head = [segment.lower() for segment in segments[: len(root_segments)]]
        if head != root_segments:
            raise LabelError(f"invalid label root {key!r}", path=key)

        path = segments[len(root_segments) :]
        if not path or path == [""]:
            _LOGGER.debug(
                "label_without_path_skipped",
                extra={"event": "label_without_path_skipped", "key": key},
            )
            continue
        if any(segment == "" for segment in path):
            raise LabelError(f"invalid label {key!r}: empty path segment", path=key)
        if wanted and path[0].lower() not in wanted:
            continue

        _insert(root, path, labels[key])
        used += 1

    if used == 0:
        return None
    return root


def _insert(root: Node, path: list[str], value: str) -> None:
    cursor = root
    for segment in path:
        child = cursor.child(segment)
        if child is None:
            child = Node(name=segment)
            cursor.children.append(child)
        cursor = child
    cursor.value = value
