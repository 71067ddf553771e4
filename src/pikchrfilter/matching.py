"""Line recognizers for diagram block delimiters and modifier words."""
from __future__ import annotations

import re
from typing import AnyStr, Pattern

DEFAULT_TAG = "pikchr"

# A line is matched whole, trailing newline included.
_START_TEMPLATE = r"(?:\.PS|(?:`{{3,}}|~{{3,}})\s*{tag})(?:\s.*)?"
_END_PATTERN = re.compile(rb"(?:\.PE|`{3,}|~{3,})\s*")

# ASCII whitespace, the set `\s` covers in the bytes patterns above.
_SPACE_CHARS = " \t\n\r\f\v"
_SPACE_BYTES = _SPACE_CHARS.encode("ascii")

_start_patterns: dict[str, Pattern[bytes]] = {}


def _start_pattern(tag: str) -> Pattern[bytes]:
    pattern = _start_patterns.get(tag)
    if pattern is None:
        source = _START_TEMPLATE.format(tag=re.escape(tag))
        pattern = re.compile(source.encode("utf-8"), re.DOTALL)
        _start_patterns[tag] = pattern
    return pattern


def _as_bytes(line: str | bytes) -> bytes:
    if isinstance(line, str):
        return line.encode("utf-8", "surrogateescape")
    return line


def is_block_start(line: str | bytes, tag: str = DEFAULT_TAG) -> bool:
    """Return True for ``.PS`` lines and ```` ```pikchr ```` / ``~~~pikchr`` fences."""
    return _start_pattern(tag).fullmatch(_as_bytes(line)) is not None


def is_block_end(line: str | bytes) -> bool:
    """Return True for ``.PE`` lines and bare backtick or tilde fences."""
    return _END_PATTERN.fullmatch(_as_bytes(line)) is not None


def _is_space(char: str | bytes) -> bool:
    spaces = _SPACE_BYTES if isinstance(char, bytes) else _SPACE_CHARS
    return len(char) == 1 and char in spaces


def contains_word(haystack: AnyStr, needle: AnyStr) -> bool:
    """Whether ``needle`` occurs in ``haystack`` as a whole whitespace-delimited word.

    Substring hits such as ``requote`` inside ``requoted`` do not count.
    """
    if not needle:
        return False
    size = len(needle)
    start = 0
    while True:
        index = haystack.find(needle, start)
        if index < 0:
            return False
        before_ok = index == 0 or _is_space(haystack[index - 1 : index])
        after = haystack[index + size : index + size + 1]
        if before_ok and (not after or _is_space(after)):
            return True
        start = index + 1
