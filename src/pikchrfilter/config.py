"""Run-wide settings shared by the stream filter and the output assembler."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .matching import DEFAULT_TAG

DEFAULT_SVG_ATTRS = "style='font-size:initial;'"
DEFAULT_SUMMARY_TEXT = "Pikchr Source"


class RenderFlags(enum.IntFlag):
    """Bits understood by the Pikchr renderer."""

    NONE = 0
    PLAINTEXT_ERRORS = 0x0001
    DARK_MODE = 0x0002
    CURRENTCOLOR_FOR_BLACK = 0x0004


@dataclass(frozen=True)
class RunConfig:
    svg_class: Optional[str] = None
    svg_attrs: str = DEFAULT_SVG_ATTRS
    summary_text: str = DEFAULT_SUMMARY_TEXT
    summary_attrs: str = ""
    bare: bool = False
    requote_all: bool = False
    details_all: bool = False
    plaintext_errors: bool = False
    dark_mode: bool = False
    current_color: bool = False
    include_document: bool = True
    include_diagrams: bool = True
    only_modifier: Optional[str] = None
    only_number: Optional[int] = None
    tag: str = DEFAULT_TAG

    def __post_init__(self) -> None:
        if self.only_modifier is not None and self.only_number is not None:
            raise ValueError("only_modifier and only_number cannot both be set")
        if self.only_number is not None and self.only_number < 1:
            raise ValueError("only_number counts diagrams from 1")
        if not self.tag:
            raise ValueError("tag must not be empty")

    def base_flags(self) -> RenderFlags:
        flags = RenderFlags.NONE
        if self.plaintext_errors:
            flags |= RenderFlags.PLAINTEXT_ERRORS
        if self.dark_mode:
            flags |= RenderFlags.DARK_MODE
        if self.current_color:
            flags |= RenderFlags.CURRENTCOLOR_FOR_BLACK
        return flags
