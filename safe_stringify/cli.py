"""Command-line front end: sanitize a JSON/YAML document and print it as JSON.

YAML anchors and aliases can produce shared and self-referencing nodes, which
this tool renders with the same markers as the library.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, TextIO

import yaml
from pydantic import ValidationError

from .config import SanitizerOptions, StringifyConfig, load_config
from .encoding import stringify
from .logging_utils import setup_logging

LOG = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="safe-stringify",
        description="Serialize a JSON/YAML document safely, with redaction and size limits",
    )
    parser.add_argument("input", nargs="?", default="-", help="Input file (default: stdin)")
    parser.add_argument("--config", default=None, help="Path to config YAML")
    parser.add_argument("--indent", default=None, help="Indentation (number of spaces or a string)")
    parser.add_argument("--redact-key", action="append", default=[], help="Key to redact (case-insensitive)")
    parser.add_argument("--redact-key-pattern", action="append", default=[], help="Regex for keys to redact")
    parser.add_argument("--redact-path", action="append", default=[], help="Path prefix, e.g. events.[].metaData")
    parser.add_argument("--max-depth", type=int, default=None)
    parser.add_argument("--max-edges", type=int, default=None)
    parser.add_argument("--min-preserved-depth", type=int, default=None)
    return parser


def _parse_indent(raw: str | int | None) -> int | str | None:
    if raw is None or isinstance(raw, int):
        return raw
    return int(raw) if raw.strip().isdigit() else raw


def _merge_cli_options(cfg: StringifyConfig, args: argparse.Namespace) -> SanitizerOptions:
    """Layer command-line flags on top of the configured sanitizer options."""
    base = cfg.sanitizer
    merged: dict[str, Any] = {
        "max_depth": base.max_depth,
        "max_edges": base.max_edges,
        "min_preserved_depth": base.min_preserved_depth,
        "redacted_keys": [*base.redacted_keys, *args.redact_key],
        "redacted_key_patterns": [*base.redacted_key_patterns, *args.redact_key_pattern],
        "redacted_paths": [*base.redacted_paths, *args.redact_path],
    }
    for name in ("max_depth", "max_edges", "min_preserved_depth"):
        value = getattr(args, name)
        if value is not None:
            merged[name] = value
    return SanitizerOptions.model_validate(merged)


def _read_document(stream: TextIO) -> Any:
    return yaml.safe_load(stream)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""

    def fail(message: str, exit_code: int = 2) -> None:
        """Print error and terminate process."""
        print(f"ERROR: {message}", file=sys.stderr)
        raise SystemExit(exit_code)

    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
        options = _merge_cli_options(cfg, args)
    except ValidationError as exc:
        fail(f"Invalid configuration: {exc}")
    except Exception as exc:
        fail(f"Failed to load configuration: {exc}")

    setup_logging(cfg.logging, options)

    try:
        if args.input == "-":
            document = _read_document(sys.stdin)
        else:
            with open(args.input, "r", encoding="utf-8") as handle:
                document = _read_document(handle)
    except OSError as exc:
        fail(f"Cannot read {args.input}: {exc}")
    except yaml.YAMLError as exc:
        fail(f"Cannot parse {args.input}: {exc}")

    indent = _parse_indent(args.indent if args.indent is not None else cfg.indent)
    LOG.debug("Serializing %s with max_depth=%s max_edges=%s", args.input, options.max_depth, options.max_edges)
    sys.stdout.write(stringify(document, None, indent, options))
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
