"""envtree CLI entrypoint.

Subcommands:
    encode: print the environment variables a model understands, with their defaults.
    decode: decode the process environment (or an env file) into a model, print it as JSON.

Models are referenced as ``package.module:ClassName`` and must be pydantic models
that can be built without arguments.
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO

from pydantic import BaseModel, ValidationError

from envtree.config.configs import EnvCodecConfig
from envtree.env.codec import EnvCodec
from envtree.env.filter import find_prefixed_env_vars
from envtree.env.prefix import DEFAULT_NAME_PREFIX
from envtree.errors.errors import EnvTreeError

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """
    Return the top-level CLI argument parser.
    """
    p = argparse.ArgumentParser(prog="envtree")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    sub = p.add_subparsers(dest="command", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        """Add arguments shared across all subcommands."""
        sp.add_argument(
            "--model", required=True, metavar="MODULE:CLASS", help="Pydantic model to use"
        )
        sp.add_argument(
            "--prefix", default=DEFAULT_NAME_PREFIX, help="Environment variable prefix"
        )

    enc = sub.add_parser("encode", help="List environment variables with their defaults")
    add_common(enc)
    enc.add_argument("--format", choices=["env", "json"], default="env", help="Output format")

    dec = sub.add_parser("decode", help="Decode environment variables into the model")
    add_common(dec)
    dec.add_argument(
        "--env-file", type=Path, required=False, help="Read KEY=VALUE lines instead of os.environ"
    )
    dec.add_argument(
        "--only-known",
        action="store_true",
        help="Ignore prefixed variables that match no root field of the model",
    )
    return p


def load_model(reference: str) -> type[BaseModel]:
    """Import ``package.module:ClassName`` and check it is a pydantic model."""
    module_name, sep, class_name = reference.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"--model requires MODULE:CLASS format (got {reference!r})")

    module = importlib.import_module(module_name)
    model = getattr(module, class_name, None)
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise ValueError(f"{reference} is not a pydantic model")
    return model


def read_env_file(path: Path) -> list[str]:
    """Return the ``KEY=VALUE`` lines of *path*, skipping blanks and ``#`` comments."""
    entries: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        entries.append(stripped)
    return entries


def run_encode(model: type[BaseModel], prefix: str, fmt: str, out: TextIO) -> int:
    codec = EnvCodec(EnvCodecConfig(prefix=prefix))
    flats = codec.encode(model())

    if fmt == "json":
        payload = [
            {"name": f.name, "default": f.default, "description": f.description} for f in flats
        ]
        out.write(json.dumps(payload, indent=2) + "\n")
    else:
        for flat in flats:
            out.write(flat.as_env() + "\n")
    return 0


def run_decode(
    model: type[BaseModel],
    prefix: str,
    environ: list[str],
    out: TextIO,
    *,
    only_known: bool = False,
) -> int:
    element = model()
    if only_known:
        environ = find_prefixed_env_vars(environ, prefix, element)

    EnvCodec(EnvCodecConfig(prefix=prefix)).decode(environ, element)
    out.write(json.dumps(element.model_dump(mode="json"), indent=2, sort_keys=True) + "\n")
    return 0


def main(argv: Optional[list[str]] = None, out: Optional[TextIO] = None) -> int:
    """CLI entrypoint wrapper compatible with setuptools scripts."""
    out = out or sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        model = load_model(args.model)
    except (ImportError, ValueError) as exc:
        print(f"envtree: {exc}", file=sys.stderr)
        return 2

    try:
        if args.command == "encode":
            return run_encode(model, args.prefix, args.format, out)

        environ = _environ(args.env_file)
        return run_decode(model, args.prefix, environ, out, only_known=args.only_known)
    except (EnvTreeError, ValidationError) as exc:
        _LOGGER.debug(
            "cli_failed",
            extra={
                "event": "cli_failed",
                "command": args.command,
                "error_type": exc.__class__.__name__,
            },
        )
        print(f"envtree: {exc}", file=sys.stderr)
        return 1


def _environ(env_file: Optional[Path]) -> list[str]:
    if env_file is not None:
        return read_env_file(env_file)
    return [f"{key}={value}" for key, value in os.environ.items()]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
