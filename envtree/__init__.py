"""
envtree: environment variables <-> typed, nested configuration models.

Usage:
    from envtree import decode, encode

    config = AppConfig()
    environ = [f"{key}={value}" for key, value in os.environ.items()]
    decode(environ, "MYAPP_", config)  # MYAPP_LOG_LEVEL=debug -> config.log.level
    for flat in encode("MYAPP_", config):
        print(flat.as_env())
"""

from envtree.config.configs import EnvCodecConfig
from envtree.env.codec import EnvCodec, decode, encode, select_env_vars
from envtree.env.filter import find_prefixed_env_vars
from envtree.env.prefix import DEFAULT_NAME_PREFIX, PREFIX_PATTERN, check_prefix, root_name
from envtree.errors.errors import (
    EncodingError,
    EnvTreeError,
    FieldValueError,
    InvalidPrefixError,
    LabelError,
    MetadataError,
    ParserError,
)
from envtree.parser.types import Flat

__all__ = [
    # Entry points
    "decode",
    "encode",
    "EnvCodec",
    "EnvCodecConfig",
    "find_prefixed_env_vars",
    "select_env_vars",
    "check_prefix",
    "root_name",
    "DEFAULT_NAME_PREFIX",
    "PREFIX_PATTERN",
    # Types
    "Flat",
    # Errors
    "EnvTreeError",
    "InvalidPrefixError",
    "ParserError",
    "LabelError",
    "MetadataError",
    "FieldValueError",
    "EncodingError",
]
