"""Public API for pikchrfilter."""
from .config import RenderFlags, RunConfig
from .filter import DocumentFilter, FilterResult, InputReadError, OutputWriteError, filter_stream
from .renderer import PikchrCommandRenderer, RenderResult, RendererUnavailableError

__version__ = "1.0.0"

__all__ = [
    "DocumentFilter",
    "FilterResult",
    "InputReadError",
    "OutputWriteError",
    "PikchrCommandRenderer",
    "RenderFlags",
    "RenderResult",
    "RendererUnavailableError",
    "RunConfig",
    "filter_stream",
]
