from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class DoodleConfig:
    line_art: Path | None = None
    """Line-art image to color. Not needed when generating with --prompt"""

    output: Path = Path("colored.png")
    """Where to write the colored picture"""

    fills: list[str] = field(default_factory=list[str])
    """Fills to apply in order, each 'x,y,color' with a hex color or palette name"""

    canvas_width: int = 600
    """Width of generated line art and of the sketch surface"""

    canvas_height: int = 800
    """Height of generated line art and of the sketch surface.
    A --line_art file is colored at its own size"""

    tolerance: int = 10
    """Per-channel color difference still treated as the same color"""

    stroke_width: int = 4
    """Brush width in pixels for sketch strokes"""

    prompt: str | None = None
    """Describe a picture to generate line art for instead of loading one"""

    idea: bool = False
    """Ask the AI for a drawing idea and generate line art for it"""

    prompt_file: Path | None = None
    """yaml file with AI prompt data"""

    prompts: dict[str, str] = field(default_factory=dict[str, str])

    cache_dir: Path = Path.home() / ".cache" / "doodlebook"
    """Where generated line art is cached"""

    openai_key_file: Path = Path.home() / ".openai.key"
    model: str = "gpt-4o-mini"
