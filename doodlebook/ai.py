"""Remote collaborators: drawing ideas, sketch descriptions and line art."""

import base64
import logging
from collections.abc import Callable
from typing import Final
from urllib.parse import quote

import requests
from openai import OpenAI

from .cache import FileCache

logger = logging.getLogger(__name__)

POLLINATIONS_URL: Final = "https://image.pollinations.ai/prompt/"


def _message_text(response) -> str:
    if not response.choices:
        raise RuntimeError("No choices returned from OpenAI API")
    content = response.choices[0].message.content
    if not content:
        raise RuntimeError("Empty response from OpenAI API")
    return content.strip()


class IdeaGen:
    """Text side of the drawing studio, backed by an OpenAI chat model."""

    def __init__(
        self,
        open_ai: Callable[[], OpenAI],
        idea_prompt: str,
        describe_prompt: str,
        model: str = "gpt-4o-mini",
    ):
        self.make_client: Final = open_ai
        self._client: OpenAI | None = None
        self.idea_prompt: str = idea_prompt
        self.describe_prompt: str = describe_prompt
        self.model: str = model

    @property
    def client(self) -> OpenAI:
        """The OpenAI client, created on first use so offline coloring needs no key."""
        if self._client is None:
            self._client = self.make_client()
        return self._client

    def get_idea(self) -> str:
        logger.info("Asking for a drawing idea")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": self.idea_prompt}],
            )
        except Exception as e:
            raise RuntimeError("Could not get a drawing idea") from e
        return _message_text(response)

    def describe_sketch(self, png_data: bytes) -> str:
        """Describe a sketch in a few keywords suitable for image generation."""
        logger.info("Describing sketch")
        data_url = "data:image/png;base64," + base64.b64encode(png_data).decode("ascii")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": self.describe_prompt},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
            )
        except Exception as e:
            raise RuntimeError("Failed to describe sketch") from e
        return _message_text(response)


class LineArtGen:
    """Fetches coloring-book line art from the Pollinations image endpoint."""

    def __init__(
        self,
        cache: FileCache,
        width: int = 600,
        height: int = 800,
        seed: int = 42,
        timeout: float = 120.0,
    ):
        self.width: int = width
        self.height: int = height
        self.seed: int = seed
        self.timeout: float = timeout
        self.cache: Final = cache
        cache.set_meta(
            {"width": str(width), "height": str(height), "seed": str(seed)}
        )

    def generate(self, prompt: str) -> bytes:
        cached = self.cache.get(prompt)
        if cached:
            logger.info("Line art found in cache")
            return cached

        logger.info("Generating line art")
        try:
            response = requests.get(
                POLLINATIONS_URL + quote(prompt, safe=""),
                params={
                    "width": self.width,
                    "height": self.height,
                    "seed": self.seed,
                    "nologo": "True",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise RuntimeError("Failed to generate line art") from e

        data = response.content
        if not data:
            raise RuntimeError("No image data returned")
        logger.info("Generating done")
        self.cache.add(prompt, data)
        return data
