from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from .config import ConversionConfig
from .entities import collect_mention_texts, format_entity_table
from .errors import XmiFormatError
from .pipeline import convert_document
from .settings import SETTINGS, coerce_setting, get_config_file, read_config, write_config
from .xmi import registry as xmi_registry

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_ALIGNMENT = 2
EXIT_FAILURE = 3

TASK_CHOICES = ["convert", "formats", "config"]


class _ArgumentParser(argparse.ArgumentParser):
    # Usage errors exit with 1; 2 is reserved for alignment failures.
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def _configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "debug", False):
        level = logging.DEBUG
    elif getattr(args, "verbose", False):
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level)


def _parse_key_value(item: str) -> tuple[str, str]:
    if "=" not in item:
        raise SystemExit(f"Invalid setting '{item}'. Expected KEY=VALUE.")
    key, value = item.split("=", 1)
    key = key.strip()
    if not key:
        raise SystemExit(f"Invalid setting '{item}'. Key cannot be empty.")
    return key, value.strip()


def build_parser() -> argparse.ArgumentParser:
    from . import __version__

    parser = _ArgumentParser(
        prog="python -m xmi2conll",
        description="Convert XMI coreference/entity annotations to CoNLL-2012 using an existing tokenization",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {__version__}")

    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    parent_parser.add_argument("--verbose", action="store_true", help="Print high-level progress messages")

    subparsers = parser.add_subparsers(dest="task", parser_class=_ArgumentParser)

    # convert -----------------------------------------------------------------
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert one XMI file and its tokenization to CoNLL-2012 plus an entity report",
        parents=[parent_parser],
    )
    convert_parser.add_argument(
        "--format",
        "-f",
        dest="xmi_format",
        default=None,
        help=f"XMI format: {', '.join(xmi_registry.names())} (default: 'default_format' setting)",
    )
    convert_parser.add_argument("xmi", help="XMI input file")
    convert_parser.add_argument("tokens", help="Tokenization input file (one token per line, empty line between sentences)")
    convert_parser.add_argument("conll", help="CoNLL-2012 output file")
    convert_parser.add_argument("entities", help="Entities output file")
    convert_parser.add_argument(
        "--document-name",
        default=None,
        help="Document ID for the first column (default: CoNLL output file name without extension)",
    )
    convert_parser.add_argument(
        "--context-chars",
        type=int,
        default=None,
        help="Characters of context shown around a tokenization mismatch (default: 'context_chars' setting or 30)",
    )
    convert_parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not replace the output with the document text when the tokenization does not match",
    )
    convert_parser.add_argument(
        "--stats",
        action="store_true",
        help="Print a table of the entities and their mention counts after converting",
    )

    # formats -----------------------------------------------------------------
    formats_parser = subparsers.add_parser(
        "formats",
        help="List supported XMI formats",
        parents=[parent_parser],
    )
    formats_parser.add_argument("--output-format", choices=["table", "json"], default="table")

    # config ------------------------------------------------------------------
    config_parser = subparsers.add_parser("config", help="Show or change xmi2conll settings", parents=[parent_parser])
    config_parser.add_argument("--show", action="store_true", help="Show current settings")
    config_parser.add_argument(
        "--set",
        dest="set_values",
        action="append",
        metavar="KEY=VALUE",
        help=f"Change a setting ({', '.join(sorted(SETTINGS))}); may be repeated",
    )
    return parser


def run_convert(args: argparse.Namespace) -> int:
    format_name = args.xmi_format or read_config().get("default_format")
    if not format_name:
        print("No XMI format given. Use --format with one of: " + ", ".join(xmi_registry.names()), file=sys.stderr)
        return EXIT_USAGE
    try:
        xmi_format = xmi_registry.require(format_name)
    except XmiFormatError as exc:
        print(f"{exc}", file=sys.stderr)
        return EXIT_USAGE
    try:
        document = xmi_format.read(args.xmi)
    except XmiFormatError as exc:
        print(f"{exc}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as exc:
        print(f"IO error ({type(exc).__name__}): {exc}", file=sys.stderr)
        return EXIT_FAILURE

    if document.text is None:
        print("No document text found in the XMI file.", file=sys.stderr)
        return EXIT_ALIGNMENT

    config = ConversionConfig.from_settings(
        document_name=args.document_name,
        context_chars=args.context_chars,
    )
    config.write_fallback_text = not args.no_fallback
    try:
        result = convert_document(
            document.text,
            document.mentions,
            document.entities,
            args.tokens,
            args.conll,
            args.entities,
            config=config,
        )
    except (OSError, UnicodeDecodeError) as exc:
        print(f"IO error ({type(exc).__name__}): {exc}", file=sys.stderr)
        return EXIT_FAILURE

    if not result.ok:
        if config.write_fallback_text:
            print(f"Document text written to {Path(args.conll).resolve()}")
        return EXIT_ALIGNMENT

    if args.stats:
        references = collect_mention_texts(document.mentions, document.text)
        print(format_entity_table(document.entities, references))
    return EXIT_OK


def run_formats(args: argparse.Namespace) -> int:
    entries = xmi_registry.formats()
    if args.output_format == "json":
        payload = [
            {"name": entry.name, "aliases": list(entry.aliases), "description": entry.description}
            for entry in entries
        ]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return EXIT_OK
    rows = [[entry.name, ", ".join(entry.aliases), entry.description] for entry in entries]
    print(tabulate(rows, headers=["Format", "Aliases", "Description"]))
    return EXIT_OK


def run_config(args: argparse.Namespace) -> int:
    if args.set_values:
        updates = {}
        for item in args.set_values:
            key, value = _parse_key_value(item)
            try:
                updates[key] = coerce_setting(key, value)
            except ValueError as exc:
                raise SystemExit(str(exc)) from exc
        if "default_format" in updates and xmi_registry.get(updates["default_format"]) is None:
            raise SystemExit(
                f"Unknown XMI format '{updates['default_format']}'. Supported: {', '.join(xmi_registry.names())}"
            )
        write_config(updates)
        for key, value in updates.items():
            print(f"Set {key} = {value}")
        return EXIT_OK

    config = read_config()
    rows = [[key, config.get(key, "")] for key in sorted(SETTINGS)]
    print(f"Configuration file: {get_config_file(create_dir=False)}")
    print(tabulate(rows, headers=["Setting", "Value"]))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    else:
        argv = list(argv)

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    if not args.task:
        parser.error("No task specified. Use one of: " + ", ".join(TASK_CHOICES))

    if args.task == "convert":
        return run_convert(args)
    if args.task == "formats":
        return run_formats(args)
    if args.task == "config":
        return run_config(args)

    parser.error(f"Unknown task '{args.task}'. Supported tasks: {', '.join(TASK_CHOICES)}")
    return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
