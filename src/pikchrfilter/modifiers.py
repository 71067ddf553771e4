"""Per-block decisions derived from the modifier words on a start line."""
from __future__ import annotations

from dataclasses import dataclass

from .config import RenderFlags, RunConfig
from .matching import contains_word

BARE_WORDS = ("bare-svg", "svg-only")
REQUOTE_WORD = "requote"
DELIMITERS_WORD = "delimiters"
DETAILS_WORD = "details"
OPEN_WORD = "open"
CURRENT_COLOR_WORD = "x-current-color"


@dataclass(frozen=True)
class DiagramDecision:
    number: int
    layout_bare: bool
    requote: bool
    include_delimiters: bool
    wrap_in_details: bool
    details_open: bool
    render_flags: RenderFlags
    included: bool


def _line_text(line: str | bytes) -> str:
    if isinstance(line, bytes):
        return line.decode("utf-8", "surrogateescape")
    return line


def _is_included(text: str, config: RunConfig, number: int) -> bool:
    if not config.include_diagrams:
        return False
    if config.only_modifier is not None:
        return contains_word(text, config.only_modifier)
    if config.only_number is not None:
        return number == config.only_number
    return True


def resolve_modifiers(line: str | bytes, config: RunConfig, number: int = 1) -> DiagramDecision:
    """Build the decision for the block opened by ``line``.

    ``requote`` gates ``delimiters`` and ``details``; ``open`` only applies
    inside ``details``. ``number`` is the block's 1-based position in the
    stream, used by the numeric filter.
    """
    text = _line_text(line)

    def has(word: str) -> bool:
        return contains_word(text, word)

    layout_bare = config.bare or any(has(word) for word in BARE_WORDS)
    requote = config.requote_all or has(REQUOTE_WORD)
    include_delimiters = requote and has(DELIMITERS_WORD)
    wrap_in_details = requote and (config.details_all or has(DETAILS_WORD))
    details_open = wrap_in_details and has(OPEN_WORD)

    flags = config.base_flags()
    if has(CURRENT_COLOR_WORD):
        flags |= RenderFlags.CURRENTCOLOR_FOR_BLACK

    return DiagramDecision(
        number=number,
        layout_bare=layout_bare,
        requote=requote,
        include_delimiters=include_delimiters,
        wrap_in_details=wrap_in_details,
        details_open=details_open,
        render_flags=flags,
        included=_is_included(text, config, number),
    )
