"""Single forward pass over a document, rendering embedded Pikchr blocks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional

from .accumulator import BlockAccumulator
from .assembler import assemble
from .config import RunConfig
from .matching import is_block_end, is_block_start
from .modifiers import DiagramDecision, resolve_modifiers
from .renderer import Renderer


class InputReadError(OSError):
    """Reading the next input line failed."""


class OutputWriteError(OSError):
    """Writing to the output stream failed."""


@dataclass
class FilterResult:
    diagrams: int = 0
    rendered: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class DocumentFilter:
    """Copies document text through and replaces diagram blocks with rendered SVG.

    Outside a block every line is either a start delimiter or document
    text. Inside a block every line is body text until an end delimiter or
    end of input closes it; start delimiters are not nested.
    """

    def __init__(self, config: RunConfig, renderer: Renderer) -> None:
        self.config = config
        self.renderer = renderer
        self.accumulator = BlockAccumulator()

    def run(self, source: BinaryIO, sink: BinaryIO) -> FilterResult:
        result = FilterResult()
        decision: Optional[DiagramDecision] = None
        self.accumulator.clear()

        while True:
            line = self._read(source)

            if decision is None:
                if not line:
                    break
                if is_block_start(line, self.config.tag):
                    result.diagrams += 1
                    decision = resolve_modifiers(line, self.config, result.diagrams)
                    if decision.include_delimiters:
                        self.accumulator.append(line)
                    self.accumulator.mark_offset()
                elif self.config.include_document:
                    self._write(sink, line)
                continue

            if line and not is_block_end(line):
                self.accumulator.append(line)
                continue

            self._close_block(decision, line or None, sink, result)
            decision = None
            if not line:
                break

        return result

    def _close_block(
        self,
        decision: DiagramDecision,
        end_line: Optional[bytes],
        sink: BinaryIO,
        result: FilterResult,
    ) -> None:
        try:
            # renderer input is the terminated view minus its NUL
            with self.accumulator.terminated() as view:
                submission = view.tobytes()[:-1]
            if not decision.included or (end_line is None and not submission):
                result.skipped += 1
                return
            rendered = self.renderer(
                submission.decode("utf-8", "surrogateescape"),
                self.config.svg_class,
                decision.render_flags,
            )
            if rendered.failed:
                result.failed += 1
            else:
                result.rendered += 1
            output = assemble(
                rendered,
                decision,
                self.config,
                self.accumulator.contents(),
                end_line,
            )
            self._write(sink, output)
        finally:
            self.accumulator.clear()

    @staticmethod
    def _read(source: BinaryIO) -> bytes:
        try:
            return source.readline()
        except OSError as exc:
            raise InputReadError(f"reading input: {exc}") from exc

    @staticmethod
    def _write(sink: BinaryIO, data: bytes) -> None:
        try:
            sink.write(data)
        except OSError as exc:
            raise OutputWriteError(f"writing output: {exc}") from exc


def filter_stream(
    source: BinaryIO,
    sink: BinaryIO,
    renderer: Renderer,
    config: Optional[RunConfig] = None,
) -> FilterResult:
    """Filter ``source`` into ``sink`` with a fresh ``DocumentFilter``."""
    return DocumentFilter(config or RunConfig(), renderer).run(source, sink)
