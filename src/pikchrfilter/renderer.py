"""Seam to the external Pikchr renderer."""
from __future__ import annotations

import html
import math
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional

from .config import RenderFlags

PIKCHR_ENV = "PIKCHR"
DEFAULT_TIMEOUT = 10.0

_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>")
_CLASS_ATTR_RE = re.compile(r"""\sclass\s*=\s*(?:"[^"]*"|'[^']*')""")
_VIEWBOX_RE = re.compile(
    r"""viewBox\s*=\s*["']\s*([-+.\deE]+)[\s,]+([-+.\deE]+)[\s,]+([-+.\deE]+)[\s,]+([-+.\deE]+)\s*["']"""
)
_BLACK_RE = re.compile(r"rgb\(\s*0\s*,\s*0\s*,\s*0\s*\)")


@dataclass
class RenderResult:
    """Renderer output. A negative ``width`` means ``markup`` holds an error message."""

    markup: str
    width: int
    height: int

    @property
    def failed(self) -> bool:
        return self.width < 0


Renderer = Callable[[str, Optional[str], RenderFlags], RenderResult]


class RendererUnavailableError(RuntimeError):
    """Raised when no pikchr executable can be located."""


def error_result(message: str, flags: RenderFlags) -> RenderResult:
    if flags & RenderFlags.PLAINTEXT_ERRORS:
        return RenderResult(message, -1, -1)
    return RenderResult(f"<div><pre>{html.escape(message)}</pre></div>", -1, -1)


def svg_dimensions(svg: str) -> tuple[int, int]:
    match = _VIEWBOX_RE.search(svg)
    if not match:
        return 0, 0
    try:
        width = float(match.group(3))
        height = float(match.group(4))
    except ValueError:
        return 0, 0
    if not (math.isfinite(width) and math.isfinite(height)):
        return 0, 0
    return int(round(width)), int(round(height))


def apply_svg_class(svg: str, class_name: Optional[str]) -> str:
    """Replace the class attribute of the first ``<svg>`` tag, or drop it when ``class_name`` is None."""
    match = _SVG_OPEN_RE.search(svg)
    if not match:
        return svg
    tag = _CLASS_ATTR_RE.sub("", match.group(0), count=1)
    if class_name:
        tag = f'<svg class="{html.escape(class_name)}"' + tag[len("<svg") :]
    return svg[: match.start()] + tag + svg[match.end() :]


class PikchrCommandRenderer:
    """Renders diagrams by piping each block through the ``pikchr`` command."""

    def __init__(self, executable: Optional[str] = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        candidate = executable or os.getenv(PIKCHR_ENV) or "pikchr"
        path = shutil.which(candidate)
        if not path:
            raise RendererUnavailableError(f"pikchr executable not found: {candidate}")
        self.executable = path
        self.timeout = timeout

    def command(self, flags: RenderFlags) -> List[str]:
        argv = [self.executable, "--svg-only"]
        if flags & RenderFlags.DARK_MODE:
            argv.append("--dark-mode")
        if flags & RenderFlags.PLAINTEXT_ERRORS:
            argv.append("--text")
        argv.append("-")
        return argv

    def __call__(self, source: str, class_name: Optional[str], flags: RenderFlags) -> RenderResult:
        try:
            proc = subprocess.run(
                self.command(flags),
                input=source.encode("utf-8", "surrogateescape"),
                capture_output=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return error_result(f"pikchr timed out after {self.timeout:g}s", flags)
        except OSError as exc:
            return error_result(f"failed to execute pikchr: {exc}", flags)

        stdout = proc.stdout.decode("utf-8", "surrogateescape")
        if proc.returncode != 0:
            # pikchr writes its error report to stdout
            if stdout.strip():
                return RenderResult(stdout.rstrip("\n"), -1, -1)
            detail = proc.stderr.decode("utf-8", "surrogateescape").strip()
            return error_result(detail or f"pikchr exited with status {proc.returncode}", flags)

        svg = apply_svg_class(stdout, class_name)
        if flags & RenderFlags.CURRENTCOLOR_FOR_BLACK:
            svg = _BLACK_RE.sub("currentColor", svg)
        width, height = svg_dimensions(svg)
        return RenderResult(svg, width, height)
