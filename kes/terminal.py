"""Terminal output helpers: styling, string building and error exits."""

from __future__ import annotations

import enum
import functools
import os
import sys
from dataclasses import dataclass
from typing import Any, Optional, Tuple


class ColorProfile(enum.Enum):
    """How much color the output supports."""

    ASCII = "ascii"
    ANSI256 = "ansi256"
    TRUECOLOR = "truecolor"


_profile: Optional[ColorProfile] = None


def _detect_profile() -> ColorProfile:
    stream = sys.stdout
    if stream is None or not stream.isatty():
        return ColorProfile.ASCII
    if os.environ.get("COLORTERM", "").lower() in ("truecolor", "24bit"):
        return ColorProfile.TRUECOLOR
    return ColorProfile.ANSI256


def color_profile() -> ColorProfile:
    """Return the active color profile."""
    global _profile
    if _profile is None:
        _profile = _detect_profile()
    return _profile


def set_color_profile(profile: ColorProfile) -> None:
    """Set the active color profile for all styles."""
    global _profile
    _profile = profile


@functools.lru_cache(maxsize=None)
def is_terminal() -> bool:
    """Report whether stdout or stderr is a terminal."""
    return any(
        stream is not None and stream.isatty() for stream in (sys.stdout, sys.stderr)
    )


def _parse_hex(color: str) -> Tuple[int, int, int]:
    digits = color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"invalid color '{color}'")
    try:
        value = int(digits, 16)
    except ValueError:
        raise ValueError(f"invalid color '{color}'") from None
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


_CUBE = (0x00, 0x5F, 0x87, 0xAF, 0xD7, 0xFF)


def _to_ansi256(r: int, g: int, b: int) -> int:
    def cube_index(v: int) -> int:
        if v < 48:
            return 0
        if v < 115:
            return 1
        return (v - 35) // 40

    ri, gi, bi = cube_index(r), cube_index(g), cube_index(b)
    cr, cg, cb = _CUBE[ri], _CUBE[gi], _CUBE[bi]
    average = (r + g + b) // 3
    gray_index = 23 if average > 238 else max(0, (average - 3) // 10)
    gv = 8 + 10 * gray_index

    cube_dist = (cr - r) ** 2 + (cg - g) ** 2 + (cb - b) ** 2
    gray_dist = (gv - r) ** 2 + (gv - g) ** 2 + (gv - b) ** 2
    if cube_dist <= gray_dist:
        return 16 + 36 * ri + 6 * gi + bi
    return 232 + gray_index


@dataclass(frozen=True)
class Style:
    """A text style rendered as ANSI escape sequences.

    Under the ASCII profile text is rendered unchanged.
    """

    foreground: Optional[str] = None
    bold: bool = False
    faint: bool = False
    underline: bool = False
    value: str = ""

    def _codes(self, profile: ColorProfile) -> list:
        codes = []
        if self.bold:
            codes.append("1")
        if self.faint:
            codes.append("2")
        if self.underline:
            codes.append("4")
        if self.foreground:
            r, g, b = _parse_hex(self.foreground)
            if profile is ColorProfile.TRUECOLOR:
                codes.append(f"38;2;{r};{g};{b}")
            else:
                codes.append(f"38;5;{_to_ansi256(r, g, b)}")
        return codes

    def render(self, text: str = "") -> str:
        """Render text, preceded by the style's own value if it has one."""
        if self.value and text:
            text = f"{self.value} {text}"
        elif self.value:
            text = self.value
        profile = color_profile()
        if profile is ColorProfile.ASCII:
            return text
        codes = self._codes(profile)
        if not codes:
            return text
        return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"

    def __str__(self) -> str:
        return self.render()


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sprint(args: Tuple[Any, ...]) -> str:
    """Join operands, adding a space only between two non-strings."""
    parts = []
    previous_is_str = True
    for i, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if i > 0 and not is_str and not previous_is_str:
            parts.append(" ")
        parts.append(_format_value(arg))
        previous_is_str = is_str
    return "".join(parts)


def _sprintln(args: Tuple[Any, ...]) -> str:
    return " ".join(_format_value(arg) for arg in args) + "\n"


def _sprintf(template: str, args: Tuple[Any, ...]) -> str:
    return template % args if args else template


class Buffer:
    """Builds a string to display on a terminal. Methods chain."""

    def __init__(self) -> None:
        self._parts: list = []

    def sprint(self, *args: Any) -> "Buffer":
        self._parts.append(_sprint(args))
        return self

    def sprintf(self, template: str, *args: Any) -> "Buffer":
        self._parts.append(_sprintf(template, args))
        return self

    def sprintln(self, *args: Any) -> "Buffer":
        self._parts.append(_sprintln(args))
        return self

    def stylef(self, style: Style, template: str, *args: Any) -> "Buffer":
        self._parts.append(style.render(_sprintf(template, args)))
        return self

    def styleln(self, style: Style, *args: Any) -> "Buffer":
        self._parts.append(style.render(_sprint(args)))
        self._parts.append("\n")
        return self

    def write(self, text: str) -> int:
        """Append text and return its length."""
        self._parts.append(text)
        return len(text)

    def __str__(self) -> str:
        return "".join(self._parts)


_ERROR_STYLE = Style(foreground="#ac0000")


def _exit_with(message: str) -> None:
    print(_ERROR_STYLE.render("Error: ") + message, file=sys.stderr)
    raise SystemExit(1)


def fatal(*args: Any) -> None:
    """Print args as an error message and exit with status 1."""
    _exit_with(_sprint(args))


def fatalf(template: str, *args: Any) -> None:
    """Format an error message, print it and exit with status 1."""
    _exit_with(_sprintf(template, args))


def check(statement: bool, *args: Any) -> None:
    """Call fatal with args if statement is false."""
    if not statement:
        fatal(*args)


def checkf(statement: bool, template: str, *args: Any) -> None:
    """Call fatalf if statement is false."""
    if not statement:
        fatalf(template, *args)


def fg(color: str, *args: str) -> Style:
    """Return a style with the given foreground color holding args."""
    return Style(foreground=color, value=" ".join(args))