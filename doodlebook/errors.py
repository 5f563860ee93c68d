class DrawingError(Exception):
    """Base class for user-facing drawing errors."""


class InvalidColorFormat(DrawingError, ValueError):
    def __init__(self, value: str):
        super().__init__(f"Invalid hex color format: {value!r}")
        self.value: str = value


class EmptyCanvas(DrawingError):
    def __init__(self, message: str = "Please draw something on the canvas first!"):
        super().__init__(message)


class NoImageLoaded(DrawingError):
    def __init__(self, message: str = "Please generate a drawing first to color!"):
        super().__init__(message)


class SurfaceBusy(DrawingError):
    def __init__(self, message: str = "A fill is already in progress"):
        super().__init__(message)
