import io
import logging
from dataclasses import dataclass
from typing import Final

from PIL import Image

from .ai import IdeaGen, LineArtGen
from .colors import DEFAULT_COLOR, to_rgba
from .config import DoodleConfig
from .coords import InputEvent
from .errors import EmptyCanvas
from .surface import ColoringSurface, SketchSurface, encode_png, open_image

logger = logging.getLogger(__name__)


@dataclass
class HistoryItem:
    sketch: bytes
    generated: bytes
    recognized: str
    prompt: str
    thumbnail: bytes = b""


def make_thumbnail(png_data: bytes, size: int = 200) -> bytes:
    """Center-crop an image to a square and scale it onto a white `size` square."""
    img = open_image(png_data).convert("RGBA")
    w, h = img.size
    side = min(w, h)
    left, top = (w - side) // 2, (h - side) // 2
    img = img.crop((left, top, left + side, top + side))
    img = img.resize((size, size), Image.Resampling.LANCZOS)
    thumb = Image.new("RGBA", (size, size), (255, 255, 255, 255))
    thumb.alpha_composite(img)
    out = io.BytesIO()
    thumb.convert("RGB").save(out, format="PNG")
    return out.getvalue()


class DrawingSession:
    """Ties the sketch pad, the coloring page and the remote generators together."""

    def __init__(
        self,
        sketch: SketchSurface,
        coloring: ColoringSurface,
        ideas: IdeaGen,
        line_art: LineArtGen,
        config: DoodleConfig,
    ):
        self.sketch: Final = sketch
        self.coloring: Final = coloring
        self.ideas: Final = ideas
        self.line_art: Final = line_art
        self.line_art_prompt: str = config.prompts["line_art_prompt"]

        self.current_prompt: str = ""
        self.recognized: str = ""
        self.selected_color: str = DEFAULT_COLOR
        self.history: list[HistoryItem] = []
        self.selected_index: int | None = None

    def get_idea(self) -> str:
        self.current_prompt = self.ideas.get_idea()
        return self.current_prompt

    def select_color(self, hex_color: str):
        _ = to_rgba(hex_color)
        self.selected_color = hex_color

    def generate(self, description: str) -> bytes:
        """Generate line art for `description` and load it for coloring."""
        prompt = self.line_art_prompt.format(description=description)
        data = self.line_art.generate(prompt)
        self.coloring.load_image(data)
        return data

    def enhance(self) -> HistoryItem:
        """Turn the current sketch into coloring-book line art."""
        if self.sketch.is_empty():
            raise EmptyCanvas()
        sketch_png = self.sketch.export_as_image()
        self.recognized = self.ideas.describe_sketch(sketch_png)
        logger.info(f"Sketch recognized as '{self.recognized}'")

        generated = self.generate(self.recognized)
        item = HistoryItem(
            sketch=sketch_png,
            generated=generated,
            recognized=self.recognized,
            prompt=self.current_prompt,
            thumbnail=make_thumbnail(sketch_png),
        )
        self.history.append(item)
        self.selected_index = len(self.history) - 1
        return item

    def select_history(self, index: int) -> HistoryItem:
        item = self.history[index]
        self.coloring.load_image(item.generated)
        self.recognized = item.recognized
        self.current_prompt = item.prompt
        self.selected_index = index
        return item

    def delete_history(self, index: int):
        del self.history[index]
        if self.selected_index is None:
            return
        if self.selected_index == index:
            self.selected_index = None
        elif self.selected_index > index:
            self.selected_index -= 1

    def tap(self, event: InputEvent):
        self.coloring.tap(event, self.selected_color)

    def colored_image(self) -> bytes:
        return encode_png(self.coloring.canvas.to_image())

    def clear_all(self):
        self.sketch.clear()
        self.coloring.clear()
        self.current_prompt = ""
        self.recognized = ""
