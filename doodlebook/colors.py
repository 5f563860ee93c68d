"""
RGBA color helpers.

Colors are 4-tuples of bytes `(r, g, b, a)`. Hex strings are `#RGB` or
`#RRGGBB`; alpha is always 255 when parsing, fills are never translucent.
"""

import re
from typing import Final

from .errors import InvalidColorFormat

Color = tuple[int, int, int, int]

TRANSPARENT: Final[Color] = (0, 0, 0, 0)
BLACK: Final[Color] = (0, 0, 0, 255)
WHITE: Final[Color] = (255, 255, 255, 255)

DEFAULT_TOLERANCE: Final = 10

PALETTE: Final[dict[str, str]] = {
    "red": "#FF0000",
    "blue": "#0000FF",
    "green": "#00FF00",
    "yellow": "#FFFF00",
    "orange": "#FF7F00",
    "purple": "#BF00BF",
    "cyan": "#00FFFF",
    "pink": "#FFC0CB",
    "brown": "#8B4513",
    "gray": "#808080",
    "white": "#FFFFFF",
}

DEFAULT_COLOR: Final = PALETTE["red"]

_HEX_RE: Final = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


def to_rgba(hex_color: str) -> Color:
    """Parse `#RGB` or `#RRGGBB` into an opaque RGBA tuple."""
    if not isinstance(hex_color, str) or not _HEX_RE.fullmatch(hex_color):
        raise InvalidColorFormat(str(hex_color))
    digits = hex_color[1:]
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    value = int(digits, 16)
    return (value >> 16 & 0xFF, value >> 8 & 0xFF, value & 0xFF, 255)


def to_hex(color: Color) -> str:
    r, g, b, _ = color
    return f"#{r:02X}{g:02X}{b:02X}"


def colors_match(a: Color, b: Color, tolerance: int = DEFAULT_TOLERANCE) -> bool:
    """True if every channel differs by at most `tolerance`.

    The slack absorbs anti-aliased gray pixels along line-art edges.
    """
    return all(abs(ca - cb) <= tolerance for ca, cb in zip(a, b))


def resolve_color(name_or_hex: str) -> str:
    """Map a palette name (case-insensitive) to its hex value.

    Anything that is not a palette name is validated as a hex string and
    returned unchanged.
    """
    hex_color = PALETTE.get(name_or_hex.lower())
    if hex_color is not None:
        return hex_color
    _ = to_rgba(name_or_hex)
    return name_or_hex
