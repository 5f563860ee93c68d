#!/usr/bin/env python
import logging
import os
import sys
from importlib import resources
from typing import cast

import jsonargparse
import yaml
from lagom import Container
from openai import OpenAI

from .ai import IdeaGen, LineArtGen
from .cache import FileCache
from .colors import resolve_color
from .config import DoodleConfig
from .coords import Point, Rect
from .errors import DrawingError, NoImageLoaded
from .session import DrawingSession
from .surface import ColoringSurface, SketchSurface, open_image

logger = logging.getLogger()


def parse_fill(spec: str) -> tuple[Point, str]:
    """Parse an 'x,y,color' fill argument."""
    parts = [p.strip() for p in spec.split(",", 2)]
    if len(parts) != 3:
        raise ValueError(f"Fill must be 'x,y,color', got '{spec}'")
    x, y, color = parts
    return Point(float(x), float(y)), resolve_color(color)


def load_prompts(config: DoodleConfig) -> dict[str, str]:
    if config.prompt_file is not None:
        with config.prompt_file.open() as f:
            return yaml.safe_load(f)
    data = resources.files("doodlebook.data")
    with (data / "prompts.yaml").open() as f:
        return yaml.safe_load(f)


def make_container(config: DoodleConfig) -> Container:
    container = Container()
    container[DoodleConfig] = config

    api_key = os.environ.get("OPENAI_API_KEY") or None
    if config.openai_key_file.exists():
        api_key = config.openai_key_file.read_text().strip()
    container[OpenAI] = lambda c: OpenAI(api_key=api_key)

    container[FileCache] = lambda c: FileCache(config.cache_dir)
    container[IdeaGen] = lambda c: IdeaGen(
        lambda: c[OpenAI],
        idea_prompt=config.prompts["idea_prompt"],
        describe_prompt=config.prompts["describe_prompt"],
        model=config.model,
    )
    container[LineArtGen] = lambda c: LineArtGen(
        c[FileCache], width=config.canvas_width, height=config.canvas_height
    )

    bounds = Rect(0, 0, config.canvas_width, config.canvas_height)
    container[SketchSurface] = lambda c: SketchSurface(
        bounds, stroke_width=config.stroke_width
    )
    container[ColoringSurface] = lambda c: ColoringSurface(
        bounds, tolerance=config.tolerance
    )
    return container


def run(config: DoodleConfig, session: DrawingSession) -> None:
    prompt = config.prompt
    if config.idea:
        prompt = session.get_idea()
        logger.info(f"Drawing idea: {prompt}")
        print(prompt)

    if prompt:
        _ = session.generate(prompt)
    elif config.line_art is not None:
        img = open_image(config.line_art)
        session.coloring.resize(Rect(0, 0, *img.size))
        session.coloring.load_image(img)

    if not session.coloring.loaded:
        raise NoImageLoaded()

    for spec in config.fills:
        point, color = parse_fill(spec)
        session.select_color(color)
        session.coloring.handle_tap(point, session.selected_color)

    _ = config.output.write_bytes(session.colored_image())
    logger.info(f"Wrote {config.output}")


def main():
    jsonargparse.set_parsing_settings(docstring_parse_attribute_docstrings=True)

    config = cast(
        "DoodleConfig",
        jsonargparse.auto_cli(DoodleConfig, as_positional=True, parser_mode="toml"),  # pyright: ignore[reportUnknownMemberType]
    )
    config.prompts = load_prompts(config)

    container = make_container(config)

    try:
        run(config, container[DrawingSession])
    except (DrawingError, ValueError, RuntimeError, OSError) as e:
        logger.error(f"Failed: {e}")
        print(e, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
