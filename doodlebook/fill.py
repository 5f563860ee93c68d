from logging import getLogger

from .colors import DEFAULT_TOLERANCE, colors_match, to_hex, to_rgba
from .draw import RGBACanvas

logger = getLogger(__name__)


def flood_fill(
    canvas: RGBACanvas,
    x: int,
    y: int,
    fill_color: str,
    tolerance: int = DEFAULT_TOLERANCE,
) -> None:
    """Flood-fill the 4-connected region containing (x, y) with `fill_color`.

    - Pixels are part of the region if they match the original color at the
      seed within `tolerance` per channel.
    - A seed outside the canvas is ignored.
    - Nothing is written if the seed already matches the fill color.
    - At most `width * height` pixels are written.
    """

    replacement = to_rgba(fill_color)

    if not canvas.in_bounds(x, y):
        logger.debug(f"Fill seed ({x}, {y}) outside {canvas.width}x{canvas.height}")
        return

    target = canvas.get_pixel(x, y)
    if colors_match(target, replacement, tolerance):
        return

    width, height = canvas.width, canvas.height
    limit = width * height
    count = 0
    stack: list[tuple[int, int]] = [(x, y)]

    while stack and count < limit:
        cx, cy = stack.pop()

        if cx < 0 or cx >= width or cy < 0 or cy >= height:
            continue

        # Repainted pixels never match, since target differs from replacement
        if not colors_match(canvas.get_pixel(cx, cy), target, tolerance):
            continue

        canvas.set_pixel(cx, cy, replacement)
        count += 1

        stack.append((cx + 1, cy))
        stack.append((cx - 1, cy))
        stack.append((cx, cy + 1))
        stack.append((cx, cy - 1))

    logger.debug(
        f"Filled {count} pixels from ({x}, {y}): {to_hex(target)} -> {fill_color}"
    )
