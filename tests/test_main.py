import io
from pathlib import Path
from unittest.mock import Mock

import jsonargparse
import pytest
from openai import OpenAIError
from PIL import Image

from doodlebook.ai import IdeaGen, LineArtGen
from doodlebook.colors import BLACK
from doodlebook.config import DoodleConfig
from doodlebook.coords import Point, Rect
from doodlebook.draw import RGBACanvas
from doodlebook.errors import InvalidColorFormat, NoImageLoaded
from doodlebook.main import load_prompts, make_container, parse_fill, run
from doodlebook.session import DrawingSession
from doodlebook.surface import ColoringSurface, SketchSurface

WHITE = (255, 255, 255, 255)


def write_line_art(path: Path, width: int = 10, height: int = 10) -> Path:
    canvas = RGBACanvas(width, height)
    canvas.clear(WHITE)
    canvas.draw_line(2, 2, 7, 2, BLACK)
    canvas.draw_line(2, 7, 7, 7, BLACK)
    canvas.draw_line(2, 2, 2, 7, BLACK)
    canvas.draw_line(7, 2, 7, 7, BLACK)
    canvas.to_image().save(path)
    return path


@pytest.fixture
def config(tmp_path: Path) -> DoodleConfig:
    cfg = DoodleConfig(
        output=tmp_path / "out.png",
        canvas_width=10,
        canvas_height=10,
        cache_dir=tmp_path / "cache",
        openai_key_file=tmp_path / "missing.key",
    )
    cfg.prompts = load_prompts(cfg)
    return cfg


def test_parse_fill():
    assert parse_fill("4,5,#00FF00") == (Point(4, 5), "#00FF00")
    assert parse_fill(" 1.5 , 2 , blue ") == (Point(1.5, 2), "#0000FF")
    with pytest.raises(ValueError):
        parse_fill("4,5")
    with pytest.raises(InvalidColorFormat):
        parse_fill("4,5,chartreuse")


def test_default_prompts():
    prompts = load_prompts(DoodleConfig())
    assert {"idea_prompt", "describe_prompt", "line_art_prompt"} <= set(prompts)
    assert "{description}" in prompts["line_art_prompt"]


def test_prompt_file_override(tmp_path: Path):
    path = tmp_path / "prompts.yaml"
    _ = path.write_text("line_art_prompt: 'Outline of {description}'\n")
    prompts = load_prompts(DoodleConfig(prompt_file=path))
    assert prompts == {"line_art_prompt": "Outline of {description}"}


def test_container_builds_session(config: DoodleConfig):
    container = make_container(config)
    session = container[DrawingSession]
    assert session.coloring.size == (10, 10)
    assert session.coloring.tolerance == 10
    assert session.sketch.stroke_width == 4
    assert isinstance(session.ideas, IdeaGen)
    assert isinstance(session.line_art, LineArtGen)


def test_run_colors_line_art(config: DoodleConfig, tmp_path: Path):
    config.line_art = write_line_art(tmp_path / "art.png")
    config.fills = ["4,4,red", "0,0,#00F"]
    session = make_container(config)[DrawingSession]

    run(config, session)

    img = Image.open(config.output).convert("RGBA")
    assert img.getpixel((4, 4)) == (255, 0, 0, 255)
    assert img.getpixel((0, 0)) == (0, 0, 255, 255)
    assert img.getpixel((2, 2)) == BLACK


def test_run_without_image(config: DoodleConfig):
    config.fills = ["4,4,red"]
    session = make_container(config)[DrawingSession]
    with pytest.raises(NoImageLoaded):
        run(config, session)
    assert not config.output.exists()


def test_run_generates_from_prompt(config: DoodleConfig, tmp_path: Path):
    art = write_line_art(tmp_path / "art.png").read_bytes()
    line_art = Mock(spec_set=LineArtGen)
    line_art.generate.return_value = art
    ideas = Mock(spec_set=IdeaGen)
    ideas.get_idea.return_value = "a box"
    config.idea = True
    config.fills = ["5,5,green"]

    bounds = Rect(0, 0, 10, 10)
    session = DrawingSession(
        SketchSurface(bounds), ColoringSurface(bounds), ideas, line_art, config
    )
    run(config, session)

    prompt = line_art.generate.call_args.args[0]
    assert "a box" in prompt
    img = Image.open(io.BytesIO(config.output.read_bytes())).convert("RGBA")
    assert img.getpixel((5, 5)) == (0, 255, 0, 255)


def test_run_keeps_line_art_size(config: DoodleConfig, tmp_path: Path):
    config.line_art = write_line_art(tmp_path / "art.png", 30, 20)
    config.fills = ["4,4,red", "25,15,blue"]
    session = make_container(config)[DrawingSession]

    run(config, session)

    img = Image.open(config.output).convert("RGBA")
    assert img.size == (30, 20)
    assert img.getpixel((4, 4)) == (255, 0, 0, 255)
    assert img.getpixel((25, 15)) == (0, 0, 255, 255)
    assert img.getpixel((2, 2)) == BLACK
    assert img.getpixel((7, 5)) == BLACK


def test_coloring_needs_no_api_key(
    config: DoodleConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config.line_art = write_line_art(tmp_path / "art.png")
    config.fills = ["4,4,red"]

    session = make_container(config)[DrawingSession]
    run(config, session)

    assert Image.open(config.output).convert("RGBA").getpixel((4, 4)) == (
        255,
        0,
        0,
        255,
    )
    assert not config.cache_dir.exists()


def test_idea_without_api_key_fails_cleanly(
    config: DoodleConfig, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config.idea = True
    session = make_container(config)[DrawingSession]

    with pytest.raises(RuntimeError) as info:
        run(config, session)
    assert isinstance(info.value.__cause__, OpenAIError)
    assert not config.output.exists()


def test_help_documents_canvas_size(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("COLUMNS", "300")
    jsonargparse.set_parsing_settings(docstring_parse_attribute_docstrings=True)
    with pytest.raises(SystemExit):
        jsonargparse.auto_cli(DoodleConfig, args=["--help"], as_positional=True)  # pyright: ignore[reportUnknownMemberType]

    out = capsys.readouterr().out
    assert "Width of generated line art" in out
    assert "Height of generated line art" in out
