"""
Encoding and decoding between environment variables and a typed configuration.

Decoding goes through four stages:
    - env vars -> map of dotted lowercase paths
    - map -> tree of untyped nodes
    - untyped nodes -> nodes augmented with metadata such as kind (inferred from element)
    - "typed" nodes -> typed element

Encoding goes through three stages:
    - typed configuration in element -> tree of untyped nodes
    - untyped nodes -> nodes augmented with metadata such as kind (inferred from element)
    - "typed" nodes -> environment variables with default values (determined by type/kind)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from envtree import parser
from envtree.config.configs import EnvCodecConfig
from envtree.env.prefix import check_prefix, root_name
from envtree.parser.labels import PATH_SEPARATOR
from envtree.parser.types import EncoderToNodeOpts, Flat, FlatOpts, MetadataOpts

_LOGGER = logging.getLogger(__name__)

ENV_SEPARATOR = "_"


def split_env_entry(entry: str) -> tuple[str, str]:
    """Cut ``KEY=VALUE`` at the first ``=``; without one, the value is empty."""
    key, _, value = entry.partition("=")
    return key, value


def select_env_vars(environ: Iterable[str], prefix: str) -> dict[str, str]:
    """
    Keep the entries whose key starts with ``prefix`` (case-insensitive) and map
    their dotted lowercase path to the raw value. Later duplicates win.
    """
    check_prefix(prefix)
    wanted = prefix.upper()

    variables: dict[str, str] = {}
    for entry in environ:
        key, value = split_env_entry(entry)
        if key.upper().startswith(wanted):
            path = key.lower().replace(ENV_SEPARATOR, PATH_SEPARATOR)
            variables[path] = value

    _LOGGER.debug(
        "env_vars_selected",
        extra={"event": "env_vars_selected", "prefix": prefix, "count": len(variables)},
    )
    return variables


class EnvCodec:
    """Environment codec bound to one namespace and set of naming options."""

    def __init__(self, config: Optional[EnvCodecConfig] = None) -> None:
        self._config = config or EnvCodecConfig()

    @property
    def config(self) -> EnvCodecConfig:
        return self._config

    @property
    def root_name(self) -> str:
        return root_name(self._config.prefix)

    def decode(self, environ: Iterable[str], element: BaseModel) -> None:
        """Populate ``element`` in place from ``KEY=VALUE`` entries."""
        variables = select_env_vars(environ, self._config.prefix)
        parser.decode(
            variables,
            element,
            self.root_name,
            tag_name=self._config.tag_name,
            allow_slice_as_struct=self._config.allow_slice_as_struct,
        )
        _LOGGER.debug(
            "env_decoded",
            extra={
                "event": "env_decoded",
                "prefix": self._config.prefix,
                "element": type(element).__name__,
                "count": len(variables),
            },
        )

    def encode(self, element: Optional[BaseModel]) -> list[Flat]:
        """Project ``element`` onto environment variables, sorted by name."""
        if element is None:
            return []

        cfg = self._config
        etn_opts = EncoderToNodeOpts(
            omit_empty=cfg.omit_empty,
            tag_name=cfg.tag_name,
            allow_slice_as_struct=cfg.allow_slice_as_struct,
        )
        node = parser.encode_to_node(element, self.root_name, etn_opts)

        meta_opts = MetadataOpts(
            tag_name=cfg.tag_name, allow_slice_as_struct=cfg.allow_slice_as_struct
        )
        parser.add_metadata(element, node, meta_opts)

        flat_opts = FlatOpts(case=cfg.case, separator=ENV_SEPARATOR, tag_name=cfg.tag_name)
        flats = parser.encode_to_flat(element, node, flat_opts)
        _LOGGER.debug(
            "env_encoded",
            extra={
                "event": "env_encoded",
                "prefix": cfg.prefix,
                "element": type(element).__name__,
                "count": len(flats),
            },
        )
        return flats


def decode(environ: Iterable[str], prefix: str, element: BaseModel) -> None:
    """Decode the given environment variables into the given element."""
    EnvCodec(EnvCodecConfig(prefix=prefix)).decode(environ, element)


def encode(prefix: str, element: Any) -> list[Flat]:
    """Encode the configuration in element into environment variables."""
    return EnvCodec(EnvCodecConfig(prefix=prefix)).encode(element)
