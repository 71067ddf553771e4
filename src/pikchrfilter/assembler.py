"""Turns a render result and its block decision into output bytes."""
from __future__ import annotations

from typing import Optional

from .config import RunConfig
from .modifiers import DiagramDecision
from .renderer import RenderResult

INDENT = b"    "
ENCODING = "utf-8"


def inject_svg_attrs(markup: str, attrs: str) -> str:
    """Insert ``attrs`` just before the ``>`` closing the first ``<svg`` tag.

    Markup without an ``<svg`` element is returned unchanged.
    """
    start = markup.find("<svg")
    if start < 0:
        return markup
    close = markup.find(">", start)
    if close < 0:
        return markup
    return f"{markup[:close]} {attrs}>{markup[close + 1:]}"


def indent_source(source: bytes) -> bytes:
    """Prefix every line of ``source`` with four spaces."""
    if not source:
        return b""
    indented = INDENT + source.replace(b"\n", b"\n" + INDENT)
    if source.endswith(b"\n"):
        indented = indented[: -len(INDENT)]
    return indented


def _encode(text: str) -> bytes:
    return text.encode(ENCODING, "surrogateescape")


def _wrapped_markup(result: RenderResult, decision: DiagramDecision, config: RunConfig) -> bytes:
    parts = []
    if not decision.layout_bare:
        parts.append(f'<div style="max-width:{result.width}px">\n')
    parts.append(inject_svg_attrs(result.markup, config.svg_attrs))
    if not decision.layout_bare:
        parts.append("</div>\n")
    parts.append("\n")
    return _encode("".join(parts))


def _requoted_source(
    decision: DiagramDecision,
    config: RunConfig,
    source: bytes,
    end_line: Optional[bytes],
) -> bytes:
    out = bytearray()
    if decision.wrap_in_details:
        open_attr = " open" if decision.details_open else ""
        summary_attrs = f" {config.summary_attrs}" if config.summary_attrs else ""
        out += _encode(
            f"<details{open_attr}>\n\n<summary{summary_attrs}>{config.summary_text}</summary>\n\n"
        )
    out += indent_source(source)
    if decision.include_delimiters and end_line:
        out += INDENT + end_line
    if decision.wrap_in_details:
        out += b"\n</details>\n\n"
    return bytes(out)


def assemble(
    result: RenderResult,
    decision: DiagramDecision,
    config: RunConfig,
    source: bytes,
    end_line: Optional[bytes] = None,
) -> bytes:
    """Bytes emitted for one rendered block.

    ``source`` is the whole accumulated block (echoed start delimiter
    included) and ``end_line`` the closing delimiter, or None when the
    block ran to end of input. A failed render emits only its error text.
    """
    if result.failed:
        return _encode(result.markup) + b"\n\n"
    output = _wrapped_markup(result, decision, config)
    if decision.requote and config.include_document:
        output += _requoted_source(decision, config, source, end_line)
    return output
