"""
Generic tree engine.

Converts between flat dotted key paths, an untyped ``Node`` tree, and typed
pydantic models. The shape of the target model drives kind inference, so the
same tree can be decoded from labels and encoded back to flat entries.

Decoding:
    labels -> decode_to_node -> add_metadata -> fill

Encoding:
    model -> encode_to_node -> add_metadata -> encode_to_flat
"""

from __future__ import annotations

from typing import Mapping

from pydantic import BaseModel

from envtree.parser.encoder import encode_to_node
from envtree.parser.filler import fill
from envtree.parser.flat import encode_to_flat
from envtree.parser.labels import decode_to_node
from envtree.parser.metadata import add_metadata
from envtree.parser.types import (
    TAG_LABEL,
    TAG_LABEL_ALLOW_EMPTY,
    EncoderToNodeOpts,
    Flat,
    FlatOpts,
    Kind,
    MetadataOpts,
    Node,
)


def decode(
    labels: Mapping[str, str],
    element: BaseModel,
    root_name: str,
    *filters: str,
    tag_name: str = TAG_LABEL,
    allow_slice_as_struct: bool = True,
) -> None:
    """
    Populate ``element`` from dotted key paths rooted at ``root_name``.

    The values are filled into a deep copy first and written back only once every
    field has been decoded, so a failing call leaves ``element`` untouched.
    """
    node = decode_to_node(labels, root_name, *filters)
    if node is None:
        return

    meta_opts = MetadataOpts(tag_name=tag_name, allow_slice_as_struct=allow_slice_as_struct)
    add_metadata(element, node, meta_opts)

    staged = element.model_copy(deep=True)
    fill(staged, node)
    for child in node.children:
        setattr(element, child.field_name, getattr(staged, child.field_name))


__all__ = [
    "decode",
    "decode_to_node",
    "add_metadata",
    "fill",
    "encode_to_node",
    "encode_to_flat",
    "EncoderToNodeOpts",
    "Flat",
    "FlatOpts",
    "Kind",
    "MetadataOpts",
    "Node",
    "TAG_LABEL",
    "TAG_LABEL_ALLOW_EMPTY",
]
