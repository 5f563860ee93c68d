"""
RGBA drawing utilities using a flat pixel buffer.

`RGBACanvas` treats `array` as a flat, mutable 1D buffer representing a
`width` by `height` RGBA bitmap in row-major order. Pixel (x, y) occupies the
four bytes starting at `(y * width + x) * 4`.
"""

import array
from collections.abc import MutableSequence, Sequence
from typing import Final

from PIL import Image

from .colors import TRANSPARENT, Color

PixelBuffer = array.array


def get_pixel(buffer: Sequence[int], x: int, y: int, width: int) -> Color:
    """Read the RGBA value at (x, y). No bounds checking is done."""
    i = (y * width + x) * 4
    return (buffer[i], buffer[i + 1], buffer[i + 2], buffer[i + 3])


def set_pixel(
    buffer: MutableSequence[int], x: int, y: int, width: int, color: Color
) -> None:
    """Write the RGBA value at (x, y). No bounds checking is done."""
    i = (y * width + x) * 4
    buffer[i] = color[0]
    buffer[i + 1] = color[1]
    buffer[i + 2] = color[2]
    buffer[i + 3] = color[3]


def new_buffer(width: int, height: int) -> PixelBuffer:
    return array.array("B", bytes(width * height * 4))


class RGBACanvas:
    """A minimal RGBA canvas backed by a 1D pixel buffer.

    - `array` is modified in-place and never shared with another canvas.
    - Coordinates are 0-based, with origin at top-left.
    """

    def __init__(self, w: int, h: int) -> None:
        if w < 0 or h < 0:
            raise ValueError(f"Invalid canvas size {w}x{h}")
        self.array: Final = new_buffer(w, h)
        self.width: int = w
        self.height: int = h

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> Color:
        return get_pixel(self.array, x, y, self.width)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        set_pixel(self.array, x, y, self.width, color)

    def clear(self, color: Color = TRANSPARENT) -> None:
        self.array[:] = array.array("B", bytes(color) * (self.width * self.height))

    def is_blank(self) -> bool:
        """True if every byte is zero, ie nothing has been drawn."""
        return not any(self.array)

    def stamp_brush(self, x: int, y: int, width: int, col: Color) -> None:
        """Stamp a round brush exactly `width` pixels across at (x, y).

        Even widths have no centre pixel; the brush centre sits on the
        corner up and to the left of (x, y).
        """
        lo = -(width // 2)
        hi = lo + width
        centre = -0.5 if width % 2 == 0 else 0.0
        r2 = (width / 2) ** 2
        for dy in range(lo, hi):
            py = y + dy
            if py < 0 or py >= self.height:
                continue
            for dx in range(lo, hi):
                px = x + dx
                inside = (dx - centre) ** 2 + (dy - centre) ** 2 <= r2
                if inside and 0 <= px < self.width:
                    self.set_pixel(px, py, col)

    def draw_line(
        self, x0: int, y0: int, x1: int, y1: int, col: Color, width: int = 1
    ) -> None:
        """Draw a line from (x0, y0) to (x1, y1) using Bresenham's algorithm.

        - Writes only to in-bounds pixels.
        - With `width` > 1 a round brush `width` pixels across is stamped at
          every step, which gives round caps and joins.
        """

        dx = abs(x1 - x0)
        sx = 1 if x0 < x1 else -1
        dy = -abs(y1 - y0)
        sy = 1 if y0 < y1 else -1
        err = dx + dy  # error term

        while True:
            if width > 1:
                self.stamp_brush(x0, y0, width, col)
            elif self.in_bounds(x0, y0):
                self.set_pixel(x0, y0, col)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def set_image(self, image: Image.Image) -> None:
        """Replace the contents with `image`, scaled to the canvas size."""
        img = image.convert("RGBA")
        if img.size != (self.width, self.height):
            img = img.resize((self.width, self.height), Image.Resampling.BILINEAR)
        self.array[:] = array.array("B", img.tobytes())

    def to_image(self) -> Image.Image:
        """Return an RGBA copy of the canvas contents."""
        return Image.frombytes("RGBA", (self.width, self.height), self.array.tobytes())

    @classmethod
    def from_image(cls, image: Image.Image) -> "RGBACanvas":
        canvas = cls(*image.size)
        canvas.set_image(image)
        return canvas
