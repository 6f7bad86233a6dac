from __future__ import annotations

from typing import Any, Iterable

from envtree.env.codec import ENV_SEPARATOR, split_env_entry
from envtree.parser.fields import is_model, node_name, visible_fields
from envtree.parser.types import TAG_LABEL


def find_prefixed_env_vars(
    environ: Iterable[str], prefix: str, element: Any, tag_name: str = TAG_LABEL
) -> list[str]:
    """
    Return the entries that address a root field of ``element``.

    An entry is kept when its key is ``prefix`` followed by the upper-cased name of
    one of the model's visible fields, alone or followed by ``_`` and a sub-path:
    ``TRAEFIK_LOG_LEVEL=DEBUG`` is kept for a model with a ``log`` field,
    ``TRAEFIK_LOGS=x`` is not. Entries keep their original order.
    """
    field_prefixes = _root_prefixes(element, prefix, tag_name)
    if not field_prefixes:
        return []

    values: list[str] = []
    for entry in environ:
        key, _ = split_env_entry(entry)
        if any(key == fp or key.startswith(fp + ENV_SEPARATOR) for fp in field_prefixes):
            values.append(entry)
    return values


def _root_prefixes(element: Any, prefix: str, tag_name: str) -> list[str]:
    if element is None:
        return []
    model = element if isinstance(element, type) else type(element)
    if not is_model(model):
        return []
    return [
        prefix + node_name(attr_name, info).upper()
        for attr_name, info in visible_fields(model, tag_name)
    ]
