"""Command-line interface for rendering and checking Sankey documents."""

import argparse
import dataclasses
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .diagnostics import Severity, validate_text
from .export import ExportError
from .generator import SankeyGenerator
from .layout import LayoutError
from .parser import ParseError

logger = logging.getLogger(__name__)


class CliError(Exception):
    """An error reported to the user with a specific exit code."""

    def __init__(self, message: str, exit_code: int = 1, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.hint = hint


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", nargs="?", help="Input .sankey file ('-' for stdin)")
    parser.add_argument("--text", help="Raw Sankey source")


def _add_size_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--height", type=int, default=600)
    parser.add_argument("--node-width", type=float, default=20)
    parser.add_argument("--node-padding", type=float, default=30)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="sankeyflow",
        description="Render Sankey diagrams from a simple text format.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser("render", help="Render to SVG or PNG")
    _add_input_arguments(render_parser)
    _add_size_arguments(render_parser)
    render_parser.add_argument(
        "-o", "--output", help="Output .svg or .png path (default: SVG to stdout)"
    )
    render_parser.add_argument("--scale", type=int, default=2, help="PNG scale")
    render_parser.add_argument("--font", help="TrueType font for PNG labels")

    check_parser = subparsers.add_parser("check", help="Report parse diagnostics")
    _add_input_arguments(check_parser)

    layout_parser = subparsers.add_parser("layout", help="Print the layout as JSON")
    _add_input_arguments(layout_parser)
    _add_size_arguments(layout_parser)
    layout_parser.add_argument("--indent", type=int, default=2)

    return parser


def _read_input(path: Optional[str], text: Optional[str]) -> Tuple[str, str]:
    if path and text is not None:
        raise CliError("--text cannot be combined with file input", exit_code=2)
    if text is not None:
        return text, "<text>"
    if path and path != "-":
        input_path = Path(path)
        if not input_path.exists():
            raise CliError(f"input file not found: {input_path}", exit_code=2)
        try:
            return input_path.read_text(encoding="utf-8"), str(input_path)
        except OSError as exc:
            raise CliError(
                f"failed to read input file: {input_path}", exit_code=2, hint=str(exc)
            )
    if path is None and sys.stdin.isatty():
        raise CliError(
            "no input provided",
            exit_code=2,
            hint="Pass a FILE, use --text, or pipe the document into stdin.",
        )
    return sys.stdin.read(), "<stdin>"


def _generator_from_args(args: argparse.Namespace) -> SankeyGenerator:
    try:
        return SankeyGenerator(
            width=args.width,
            height=args.height,
            node_width=args.node_width,
            node_padding=args.node_padding,
            scale=getattr(args, "scale", 2),
            font=getattr(args, "font", None),
        )
    except ValueError as exc:
        raise CliError(str(exc), exit_code=2)


def _handle_render(args: argparse.Namespace) -> int:
    if args.scale <= 0:
        raise CliError("--scale must be > 0", exit_code=2)
    source, _ = _read_input(args.input, args.text)
    generator = _generator_from_args(args)

    if not args.output:
        svg = generator.generate_svg(source)
        sys.stdout.write(svg + "\n")
        return 0

    try:
        path = generator.save(source, args.output)
    except OSError as exc:
        raise CliError(
            f"failed to write output file: {args.output}", exit_code=2, hint=str(exc)
        )
    print(f"Wrote {path}")
    return 0


def _handle_check(args: argparse.Namespace) -> int:
    source, name = _read_input(args.input, args.text)
    diagnostics = validate_text(source)
    for diagnostic in diagnostics:
        severity = diagnostic.severity.value
        print(f"{name}:{diagnostic.line}: {severity}: {diagnostic.message}")
    if any(d.severity is Severity.ERROR for d in diagnostics):
        return 1
    if not diagnostics:
        print(f"{name}: ok")
    return 0


def _handle_layout(args: argparse.Namespace) -> int:
    source, _ = _read_input(args.input, args.text)
    positioned = _generator_from_args(args).layout(source)
    print(json.dumps(dataclasses.asdict(positioned), indent=args.indent))
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()
    debug_enabled = "--debug" in raw_argv

    try:
        args = parser.parse_args(raw_argv)
        if args.debug:
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(asctime)s %(levelname)s %(name)s %(message)s",
            )
        logger.debug("Running command %s", args.command)

        if args.command == "render":
            return _handle_render(args)
        if args.command == "check":
            return _handle_check(args)
        if args.command == "layout":
            return _handle_layout(args)

        raise CliError(
            "missing subcommand", exit_code=2, hint="Use one of: render, check, layout."
        )
    except UsageError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except (CliError, ParseError, LayoutError, ExportError) as exc:
        err = exc if isinstance(exc, CliError) else CliError(str(exc))
        sys.stderr.write(f"error: {err.message}\n")
        if err.hint:
            sys.stderr.write(f"hint: {err.hint}\n")
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
