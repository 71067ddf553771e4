"""Command-line interface for the Pikchr document filter."""
from __future__ import annotations

import argparse
import json
import os
import sys
import traceback
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Optional

from . import __version__
from .accumulator import AccumulatorGrowthError
from .config import DEFAULT_SUMMARY_TEXT, DEFAULT_SVG_ATTRS, RenderFlags, RunConfig
from .filter import DocumentFilter, InputReadError, OutputWriteError
from .matching import DEFAULT_TAG
from .renderer import PIKCHR_ENV, PikchrCommandRenderer, Renderer, RendererUnavailableError, RenderResult
from .resources import load_modifier_help

DEBUG_ENV = "PIKCHR_FILTER_DEBUG"


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="pikchr-filter",
        description="Render Pikchr diagrams embedded in Markdown or troff documents to SVG.",
        epilog=load_modifier_help(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", help="Input document (default: stdin)")
    parser.add_argument("-o", "--output", help="Output path (default: stdout)")
    parser.add_argument("-c", dest="svg_class", metavar="CLASS", help='Add class="CLASS" to <svg> tags')
    parser.add_argument(
        "-a",
        dest="svg_attrs",
        metavar="ATTRS",
        default=DEFAULT_SVG_ATTRS,
        help=f"Add ATTRS to <svg> tags (default: {DEFAULT_SVG_ATTRS})",
    )
    parser.add_argument(
        "-s",
        dest="summary",
        metavar="SUMMARY",
        default=DEFAULT_SUMMARY_TEXT,
        help=f"Summary text for <details> (default: {DEFAULT_SUMMARY_TEXT})",
    )
    parser.add_argument("--summary-attrs", default="", metavar="ATTRS", help="Attributes for <summary> tags")
    parser.add_argument("-b", dest="bare", action="store_true", help="Bare mode, don't wrap <svg> in a max-width <div>")
    parser.add_argument("-p", dest="plaintext", action="store_true", help="Plaintext error messages instead of HTML")
    parser.add_argument("-d", dest="dark", action="store_true", help="Dark mode")
    parser.add_argument("-q", dest="quiet", action="store_true", help="Don't copy non-diagram input to output")
    parser.add_argument("-Q", dest="no_diagrams", action="store_true", help="Remove all diagrams")
    parser.add_argument("--requote", action="store_true", help="Requote every diagram's source")
    parser.add_argument("--details", action="store_true", help="Put every requote in a <details> element")
    parser.add_argument("--current-color", action="store_true", help='Paint black as "currentColor" in every diagram')
    only = parser.add_mutually_exclusive_group()
    only.add_argument("-n", dest="only_number", type=int, metavar="N", help="Only translate diagram number N (from 1)")
    only.add_argument("-N", dest="only_modifier", metavar="MOD", help="Only translate diagrams that have modifier MOD")
    parser.add_argument("--tag", default=DEFAULT_TAG, help=f"Fence info word that opens a block (default: {DEFAULT_TAG})")
    parser.add_argument("--pikchr", metavar="PATH", help="pikchr executable (default: $PIKCHR or pikchr on PATH)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")
    return parser


def _config_from_args(args: argparse.Namespace) -> RunConfig:
    if args.only_number is not None and args.only_number < 1:
        raise CliError(
            "E_ARGS",
            "-n must be >= 1",
            hint="Diagrams are numbered from 1 in input order.",
            exit_code=2,
        )
    if not args.tag.strip() or any(ch.isspace() for ch in args.tag):
        raise CliError("E_ARGS", "--tag must be a single non-empty word", exit_code=2)
    return RunConfig(
        svg_class=args.svg_class,
        svg_attrs=args.svg_attrs,
        summary_text=args.summary,
        summary_attrs=args.summary_attrs,
        bare=args.bare,
        requote_all=args.requote,
        details_all=args.details,
        plaintext_errors=args.plaintext,
        dark_mode=args.dark,
        current_color=args.current_color,
        include_document=not args.quiet,
        include_diagrams=not args.no_diagrams,
        only_modifier=args.only_modifier,
        only_number=args.only_number,
        tag=args.tag,
    )


def _diagrams_removed(source: str, class_name: Optional[str], flags: RenderFlags) -> RenderResult:
    raise RuntimeError("renderer invoked while diagrams are removed")


def _build_renderer(args: argparse.Namespace, config: RunConfig) -> Renderer:
    if not config.include_diagrams:
        return _diagrams_removed
    return PikchrCommandRenderer(args.pikchr)


def _open_input(stack: ExitStack, path: Optional[str]) -> BinaryIO:
    if not path:
        return sys.stdin.buffer
    input_path = Path(path)
    if not input_path.exists():
        raise CliError(
            "E_IO_READ",
            f"input file not found: {input_path}",
            exit_code=2,
            file=str(input_path),
        )
    try:
        return stack.enter_context(input_path.open("rb"))
    except OSError as exc:
        raise CliError(
            "E_IO_READ",
            f"failed to read input file: {input_path}",
            hint=str(exc),
            exit_code=2,
            file=str(input_path),
        )


def _open_output(stack: ExitStack, path: Optional[str]) -> BinaryIO:
    if not path:
        return sys.stdout.buffer
    output_path = Path(path)
    try:
        return stack.enter_context(output_path.open("wb"))
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {output_path}",
            hint=str(exc),
            exit_code=4,
            file=str(output_path),
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, InputReadError):
        return CliError("E_IO_READ", str(exc), exit_code=2, retryable=False)
    if isinstance(exc, OutputWriteError):
        return CliError(
            "E_IO_WRITE",
            str(exc),
            hint="Check that the output pipe or file is still writable.",
            exit_code=4,
            retryable=False,
        )
    if isinstance(exc, AccumulatorGrowthError):
        return CliError(
            "E_NOMEM",
            str(exc),
            hint="A diagram block is too large to buffer; check for a missing end delimiter.",
            exit_code=1,
            retryable=False,
        )
    if isinstance(exc, RendererUnavailableError):
        return CliError(
            "E_RENDERER",
            str(exc),
            hint=f"Install pikchr, set ${PIKCHR_ENV}, or pass --pikchr PATH.",
            exit_code=3,
            retryable=False,
        )
    if isinstance(exc, ValueError):
        return CliError("E_ARGS", str(exc), exit_code=2)
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _handle_filter(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    renderer = _build_renderer(args, config)
    with ExitStack() as stack:
        source = _open_input(stack, args.input)
        sink = _open_output(stack, args.output)
        result = DocumentFilter(config, renderer).run(source, sink)
        try:
            sink.flush()
        except OSError as exc:
            raise OutputWriteError(f"writing output: {exc}") from exc
    return result.exit_code


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    debug_enabled = "--debug" in raw_argv or os.getenv(DEBUG_ENV) == "1"
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format
        return _handle_filter(args)
    except UsageError as exc:
        err = CliError(
            "E_ARGS",
            str(exc),
            hint="Run pikchr-filter -h for usage.",
            exit_code=2,
        )
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in integration tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
