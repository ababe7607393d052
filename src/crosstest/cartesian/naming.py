"""Display names for Cartesian test invocations."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from crosstest.errors import FormattingError


DEFAULT_NAME_PATTERN = "[{index}] {arguments}"

DISPLAY_NAME = "displayName"
INDEX = "index"
ARGUMENTS = "arguments"
_NAMED = {DISPLAY_NAME, INDEX, ARGUMENTS}


@dataclass(frozen=True)
class _Placeholder:
    key: str


def render_value(value: Any) -> str:
    """String form of one argument in a display name."""
    if isinstance(value, Enum):
        return value.name
    return str(value)


def render_arguments(arguments: Sequence[Any]) -> str:
    return ", ".join(render_value(v) for v in arguments)


class DisplayNameFormatter:
    """Parsed display name pattern.

    Recognized placeholders are ``{displayName}``, ``{index}``,
    ``{arguments}`` and positional ``{0}``, ``{1}``, ... Anything else in
    braces, including positions past the last argument, is kept verbatim.
    ``''`` renders a single quote; text between lone quotes is literal, so
    ``'{index}'`` renders as ``{index}``.

    Raises:
        FormattingError: If a quoted region is never closed.

    Examples:
    --------
    >>> DisplayNameFormatter("{index} => first bit: {0} second bit: {1}").format(3, ("0", "1"), "bits")
    '3 => first bit: 0 second bit: 1'
    """

    def __init__(self, pattern: str = DEFAULT_NAME_PATTERN) -> None:
        self.pattern = pattern
        self._segments = self._parse(pattern)

    @staticmethod
    def _parse(pattern: str) -> tuple[str | _Placeholder, ...]:
        segments: list[str | _Placeholder] = []
        literal: list[str] = []
        quoted = False
        quote_start = 0
        i = 0
        n = len(pattern)

        while i < n:
            char = pattern[i]
            if char == "'":
                if i + 1 < n and pattern[i + 1] == "'":
                    literal.append("'")
                    i += 2
                    continue
                quoted = not quoted
                quote_start = i
                i += 1
                continue
            if quoted or char != "{":
                literal.append(char)
                i += 1
                continue

            close = pattern.find("}", i + 1)
            if close == -1:
                literal.append(char)
                i += 1
                continue
            key = pattern[i + 1 : close].strip()
            if key in _NAMED or key.isdecimal():
                if literal:
                    segments.append("".join(literal))
                    literal = []
                segments.append(_Placeholder(key))
            else:
                literal.append(pattern[i : close + 1])
            i = close + 1

        if quoted:
            msg = f"Unterminated quote at position {quote_start} in display name pattern {pattern!r}"
            raise FormattingError(msg)
        if literal:
            segments.append("".join(literal))
        return tuple(segments)

    def format(self, index: int, arguments: Sequence[Any], display_name: str) -> str:
        """Render the name of invocation ``index`` (1-based)."""
        parts: list[str] = []
        for segment in self._segments:
            if isinstance(segment, str):
                parts.append(segment)
            elif segment.key == DISPLAY_NAME:
                parts.append(display_name)
            elif segment.key == INDEX:
                parts.append(str(index))
            elif segment.key == ARGUMENTS:
                parts.append(render_arguments(arguments))
            else:
                position = int(segment.key)
                if position < len(arguments):
                    parts.append(render_value(arguments[position]))
                else:
                    parts.append("{" + segment.key + "}")
        return "".join(parts)
