"""Mapping of pointer and touch positions into buffer pixel space."""

import math
from dataclasses import dataclass, field
from typing import NamedTuple


@dataclass
class Rect:
    """On-screen bounding rectangle of a drawing surface"""

    left: float
    top: float
    width: float
    height: float


class Point(NamedTuple):
    x: float
    y: float


@dataclass
class PointerEvent:
    client_x: float
    client_y: float


@dataclass
class TouchPoint:
    client_x: float
    client_y: float


@dataclass
class TouchEvent:
    touches: list[TouchPoint] = field(default_factory=list[TouchPoint])


InputEvent = PointerEvent | TouchEvent


def event_position(event: InputEvent) -> tuple[float, float]:
    """Viewport position of an event. Only the first touch point is used."""
    if isinstance(event, TouchEvent):
        if not event.touches:
            raise ValueError("Touch event has no touch points")
        touch = event.touches[0]
        return touch.client_x, touch.client_y
    return event.client_x, event.client_y


def to_buffer_coords(
    bounds: Rect,
    client_x: float,
    client_y: float,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> Point:
    """Convert viewport coordinates to coordinates relative to `bounds`.

    With the default scale the backing buffer is assumed to be the same size
    as the displayed rectangle. Pass `buffer / display` ratios when they
    differ, eg on high-DPI displays.
    """
    return Point((client_x - bounds.left) * scale_x, (client_y - bounds.top) * scale_y)


def buffer_scale(bounds: Rect, buffer_size: tuple[int, int]) -> tuple[float, float]:
    """Scale factors from display size to backing size."""
    w, h = buffer_size
    sx = w / bounds.width if bounds.width else 1.0
    sy = h / bounds.height if bounds.height else 1.0
    return sx, sy


def map_event(
    bounds: Rect, event: InputEvent, buffer_size: tuple[int, int] | None = None
) -> Point:
    x, y = event_position(event)
    if buffer_size is None:
        return to_buffer_coords(bounds, x, y)
    return to_buffer_coords(bounds, x, y, *buffer_scale(bounds, buffer_size))


def to_pixel(point: Point) -> tuple[int, int]:
    return math.floor(point.x), math.floor(point.y)
