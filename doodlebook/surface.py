"""
Drawing surfaces: a freehand sketch pad and a flood-fill coloring page.

Each surface owns its own `RGBACanvas`. Pictures move between surfaces only
as encoded images. Event handling is a small state machine, see
`SurfaceState`.
"""

import base64
import io
from enum import Enum
from logging import getLogger
from pathlib import Path
from typing import Final

from PIL import Image

from .colors import BLACK, DEFAULT_TOLERANCE, WHITE, Color
from .coords import InputEvent, Point, Rect, buffer_scale, map_event, to_pixel
from .draw import RGBACanvas
from .errors import EmptyCanvas, NoImageLoaded, SurfaceBusy
from .fill import flood_fill

logger = getLogger(__name__)

ImageSource = Image.Image | bytes | Path | str


class SurfaceState(Enum):
    IDLE = "idle"
    STROKE_IN_PROGRESS = "stroke"
    FILL_IN_PROGRESS = "fill"


def encode_png(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def open_image(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, bytes):
        img = Image.open(io.BytesIO(source))
    else:
        img = Image.open(source)
    img.load()
    return img


class Surface:
    """Common behaviour of sketch and coloring surfaces.

    `bounds` is where the surface is displayed; the canvas is its backing
    buffer. Unless an explicit backing size is given the two are the same
    size, so display coordinates map 1:1 onto buffer pixels.
    """

    def __init__(
        self, bounds: Rect, width: int | None = None, height: int | None = None
    ):
        self.bounds: Rect = bounds
        self.canvas: RGBACanvas = self._allocate(bounds, width, height)
        self.state: SurfaceState = SurfaceState.IDLE

    @staticmethod
    def _allocate(bounds: Rect, width: int | None, height: int | None) -> RGBACanvas:
        w = width if width is not None else int(bounds.width)
        h = height if height is not None else int(bounds.height)
        return RGBACanvas(w, h)

    @property
    def size(self) -> tuple[int, int]:
        return self.canvas.width, self.canvas.height

    @property
    def scale(self) -> tuple[float, float]:
        return buffer_scale(self.bounds, self.size)

    def map(self, event: InputEvent) -> Point:
        return map_event(self.bounds, event, self.size)

    def resize(
        self, bounds: Rect, width: int | None = None, height: int | None = None
    ):
        """Reallocate the buffer for new dimensions. Previous contents are lost.

        Anything in progress is abandoned; a running fill keeps writing to
        the detached old buffer.
        """
        self.bounds = bounds
        self.canvas = self._allocate(bounds, width, height)
        self.state = SurfaceState.IDLE
        logger.debug(f"{type(self).__name__} resized to {self.size}")

    def clear(self):
        self.canvas.clear()
        self.state = SurfaceState.IDLE

    def _composite(self) -> Image.Image:
        background = Image.new("RGBA", self.size, WHITE)
        return Image.alpha_composite(background, self.canvas.to_image()).convert("RGB")

    def export_as_image(self) -> bytes:
        """PNG of a copy of the buffer composited onto opaque white."""
        return encode_png(self._composite())

    def export_as_base64(self) -> str:
        return base64.b64encode(self.export_as_image()).decode("ascii")


class SketchSurface(Surface):
    def __init__(
        self,
        bounds: Rect,
        width: int | None = None,
        height: int | None = None,
        stroke_width: int = 4,
        stroke_color: Color = BLACK,
    ):
        super().__init__(bounds, width, height)
        self.stroke_width: Final = stroke_width
        self.stroke_color: Final = stroke_color
        self.last_point: Point | None = None

    def begin_stroke(self, point: Point):
        self.state = SurfaceState.STROKE_IN_PROGRESS
        self.last_point = point

    def extend_stroke(self, point: Point):
        if self.state != SurfaceState.STROKE_IN_PROGRESS or self.last_point is None:
            return
        x0, y0 = to_pixel(self.last_point)
        x1, y1 = to_pixel(point)
        self.canvas.draw_line(x0, y0, x1, y1, self.stroke_color, self.stroke_width)
        self.last_point = point

    def end_stroke(self):
        if self.state == SurfaceState.STROKE_IN_PROGRESS:
            self.state = SurfaceState.IDLE
        self.last_point = None

    def pointer_down(self, event: InputEvent):
        self.begin_stroke(self.map(event))

    def pointer_move(self, event: InputEvent):
        if self.state == SurfaceState.STROKE_IN_PROGRESS:
            self.extend_stroke(self.map(event))

    def pointer_up(self, event: InputEvent | None = None):
        self.end_stroke()

    def is_empty(self) -> bool:
        return self.canvas.is_blank()

    def resize(
        self, bounds: Rect, width: int | None = None, height: int | None = None
    ):
        super().resize(bounds, width, height)
        self.last_point = None

    def clear(self):
        super().clear()
        self.last_point = None

    def export_as_image(self) -> bytes:
        if self.is_empty():
            raise EmptyCanvas()
        return super().export_as_image()


class ColoringSurface(Surface):
    def __init__(
        self,
        bounds: Rect,
        width: int | None = None,
        height: int | None = None,
        tolerance: int = DEFAULT_TOLERANCE,
    ):
        super().__init__(bounds, width, height)
        self.tolerance: int = tolerance
        self.loaded: bool = False

    def load_image(self, image: ImageSource):
        """Draw `image` scaled to the current buffer size, replacing contents."""
        self.canvas.set_image(open_image(image))
        self.loaded = True
        self.state = SurfaceState.IDLE

    def handle_tap(self, point: Point, fill_color: str):
        if not self.loaded:
            raise NoImageLoaded()
        if self.state == SurfaceState.FILL_IN_PROGRESS:
            raise SurfaceBusy()
        x, y = to_pixel(point)
        canvas = self.canvas
        self.state = SurfaceState.FILL_IN_PROGRESS
        try:
            flood_fill(canvas, x, y, fill_color, self.tolerance)
        finally:
            # A resize during the fill has already reset the state
            if canvas is self.canvas:
                self.state = SurfaceState.IDLE

    def tap(self, event: InputEvent, fill_color: str):
        if not self.loaded:
            raise NoImageLoaded()
        self.handle_tap(self.map(event), fill_color)

    def resize(
        self, bounds: Rect, width: int | None = None, height: int | None = None
    ):
        super().resize(bounds, width, height)
        self.loaded = False

    def clear(self):
        super().clear()
        self.loaded = False
