"""Main CLI entry point for the iio-xml-info command-line tool.

Loads XML context descriptions and prints the resulting device tree, or checks
a batch of descriptions and reports which of them build cleanly.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from iio_xml_context import __version__
from iio_xml_context.api import XMLContextLoader
from iio_xml_context.model import Context
from iio_xml_context.shared import BuildResult, LoaderConfig


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="iio-xml-info",
        description="Inspect IIO context descriptions stored as XML"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    show_parser = subparsers.add_parser("show", help="Print the devices of a context")
    show_parser.add_argument(
        "path",
        type=Path,
        help="XML context description"
    )
    show_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    validate_parser = subparsers.add_parser(
        "validate", help="Check that context descriptions build"
    )
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML context descriptions to check"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    # Global options
    dtd_group = parser.add_mutually_exclusive_group()
    dtd_group.add_argument(
        "--no-dtd",
        action="store_true",
        help="Skip validation against a declared DTD"
    )
    dtd_group.add_argument(
        "--strict",
        action="store_true",
        help="Fail on DTD validity errors and cap the input size"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_context(context: Context) -> str:
    """Render a context as an indented device/channel listing."""
    lines = [f"IIO context '{context.name}' has {len(context.devices)} devices:"]
    for device in context.devices:
        label = f"{device.id}: {device.name}" if device.name else device.id
        lines.append(f"\t{label}")
        lines.append(f"\t\t{len(device.channels)} channels found:")
        for channel in device.channels:
            kind = "output" if channel.is_output else "input"
            chn_label = f"{channel.id}: {channel.name}" if channel.name else channel.id
            lines.append(f"\t\t\t{chn_label} ({kind})")
            if channel.attributes:
                lines.append(f"\t\t\t{len(channel.attributes)} channel-specific attributes found:")
                for index, attr in enumerate(channel.attributes):
                    lines.append(f"\t\t\t\tattr {index}: {attr}")
        if device.attributes:
            lines.append(f"\t\t{len(device.attributes)} device-specific attributes found:")
            for index, attr in enumerate(device.attributes):
                lines.append(f"\t\t\t\tattr {index}: {attr}")
    return "\n".join(lines)


def summarize_result(result: BuildResult) -> Dict[str, Any]:
    """Convert a build result into a JSON-friendly dictionary."""
    summary = result.summary
    summary["diagnostics"] = [
        {
            "severity": diag.severity.name,
            "issue": diag.issue.name if diag.issue else None,
            "message": diag.message,
            "component": diag.component,
        }
        for diag in result.diagnostics
    ]
    return summary


def _loader_from_args(args: argparse.Namespace) -> XMLContextLoader:
    if args.no_dtd:
        config = LoaderConfig.lenient()
    elif args.strict:
        config = LoaderConfig.strict()
    else:
        config = LoaderConfig()
    return XMLContextLoader(config=config)


def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    result = _loader_from_args(args).load_file(args.path)
    if not result.success or result.context is None:
        message = result.error.message if result.error else "unknown error"
        print(f"Unable to create context from {args.path}: {message}", file=sys.stderr)
        return 1

    with result.context as context:
        if args.format == "json":
            print(json.dumps(context.to_dict(), indent=2))
        else:
            print(format_context(context))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    loader = _loader_from_args(args)
    results: List[BuildResult] = [loader.load_file(path) for path in args.paths]

    if args.format == "json":
        print(json.dumps([summarize_result(r) for r in results], indent=2))
    else:
        valid_count = sum(1 for r in results if r.success)
        print(f"Validated {len(results)} files, {valid_count} valid")
        print("-" * 50)

        for result in results:
            status = "OK" if result.success else "FAIL"
            print(f"{status} {result.source}")
            if result.error:
                print(f"   Error: {result.error.message}")
            for warning in result.warnings[:3]:
                print(f"   Warning: {warning.message}")

    for result in results:
        if result.context is not None:
            result.context.destroy()

    return 0 if all(r.success for r in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "show":
            return cmd_show(args)
        if args.command == "validate":
            return cmd_validate(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
