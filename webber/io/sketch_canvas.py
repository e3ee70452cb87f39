"""
Drawing surface that turns pointer and touch input into a sketch bitmap.
"""

import base64
import binascii
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw

from webber.errors import MissingImageError
from webber.models import CanvasConfig, StrokeColor


Point = Tuple[float, float]

DATA_URI_PREFIX = "data:image/png;base64,"


def strip_data_uri_prefix(image: str) -> str:
    """
    Return the raw base64 payload of an image string.

    Args:
        image: Either a data URI (``data:image/png;base64,...``) or bare base64.

    Returns:
        Everything after the first comma, or the input when there is none.
    """
    if "," in image:
        return image.split(",", 1)[1]
    return image


def decode_image_payload(image: str) -> bytes:
    """
    Decode a (possibly data-URI prefixed) base64 image string.

    Args:
        image: Base64 image payload.

    Returns:
        Raw image bytes.
    """
    if not image:
        raise MissingImageError()
    try:
        return base64.b64decode(strip_data_uri_prefix(image), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Image payload is not valid base64: {e}") from e


def _coerce_color(value: Union[str, StrokeColor]) -> StrokeColor:
    if isinstance(value, StrokeColor):
        return value
    try:
        return StrokeColor(value)
    except ValueError:
        pass
    try:
        return StrokeColor[str(value).upper()]
    except KeyError:
        raise ValueError(f"Unsupported stroke color: {value}")


class SketchCanvas:
    """
    Fixed-size RGB drawing surface with a white background.

    Strokes are painted segment by segment as the pointer moves, using the
    selected color, a fixed line width and round caps/joins. The surface is
    never resized after creation.
    """

    def __init__(self, config: Optional[CanvasConfig] = None):
        """
        Initialize the drawing surface.

        Args:
            config: Canvas dimensions and stroke settings.
        """
        self.config = config or CanvasConfig()
        self._image = Image.new(
            "RGB",
            (self.config.width, self.config.height),
            color=self.config.background,
        )
        self._draw = ImageDraw.Draw(self._image)
        self._color = StrokeColor.PEN
        self._last_point: Optional[Point] = None
        self._drawing = False

    @property
    def color(self) -> StrokeColor:
        return self._color

    def set_color(self, color: Union[str, StrokeColor]):
        """Select the pen or marker color for subsequent strokes."""
        self._color = _coerce_color(color)

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    @property
    def size(self) -> Tuple[int, int]:
        return self._image.size

    @property
    def image(self) -> Image.Image:
        """A copy of the current sketch bitmap."""
        return self._image.copy()

    def _cap(self, point: Point):
        radius = self.config.line_width / 2
        x, y = point
        self._draw.ellipse(
            [x - radius, y - radius, x + radius, y + radius],
            fill=self._color.value,
        )

    def _paint_segment(self, start: Point, end: Point):
        self._draw.line(
            [start, end],
            fill=self._color.value,
            width=self.config.line_width,
            joint="curve",
        )
        # Round caps at both ends keep consecutive segments joined smoothly
        self._cap(start)
        self._cap(end)

    # Pointer events

    def pointer_down(self, x: float, y: float):
        """Begin a new path at the pointer position."""
        self._drawing = True
        self._last_point = (x, y)

    def pointer_move(self, x: float, y: float):
        """Extend the active path to the pointer position and paint it."""
        if not self._drawing or self._last_point is None:
            return
        point = (x, y)
        self._paint_segment(self._last_point, point)
        self._last_point = point

    def pointer_up(self):
        """End the active path."""
        self._drawing = False
        self._last_point = None

    def pointer_leave(self):
        """Leaving the surface ends the path like a pointer release."""
        self.pointer_up()

    # Touch events use the first touch point

    @staticmethod
    def _first_touch(touches: Sequence[Any]) -> Optional[Point]:
        if not touches:
            return None
        touch = touches[0]
        if isinstance(touch, dict):
            return float(touch["x"]), float(touch["y"])
        return float(touch[0]), float(touch[1])

    def touch_start(self, touches: Sequence[Any]):
        point = self._first_touch(touches)
        if point is not None:
            self.pointer_down(*point)

    def touch_move(self, touches: Sequence[Any]):
        point = self._first_touch(touches)
        if point is not None:
            self.pointer_move(*point)

    def touch_end(self):
        self.pointer_up()

    def replay(self, strokes: Iterable[Dict[str, Any]]):
        """
        Replay recorded strokes through the pointer events.

        Args:
            strokes: Items of the form ``{"color": "pen", "points": [[x, y], ...]}``.
                ``color`` may be a stroke color name or its hex value.
        """
        for stroke in strokes:
            points: List[Sequence[float]] = stroke.get("points") or []
            if not points:
                continue
            if stroke.get("color"):
                self.set_color(stroke["color"])

            self.pointer_down(*points[0])
            for x, y in points[1:]:
                self.pointer_move(x, y)
            self.pointer_up()

    # Serialization

    def to_png_bytes(self) -> bytes:
        buffer = BytesIO()
        self._image.save(buffer, format="PNG")
        return buffer.getvalue()

    def to_base64(self) -> str:
        """Base64-encoded PNG of the sketch."""
        return base64.b64encode(self.to_png_bytes()).decode("utf-8")

    def to_data_url(self) -> str:
        """PNG data URI of the sketch, as a browser canvas would export it."""
        return DATA_URI_PREFIX + self.to_base64()

    def save(self, path: Union[str, Path]) -> Path:
        """
        Save the sketch exactly as it will be sent to the model.

        Args:
            path: Output PNG path.

        Returns:
            Path to the saved image.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._image.save(path, "PNG")
        return path

    @classmethod
    def from_image(
        cls,
        source: Union[str, Path, bytes, Image.Image],
        config: Optional[CanvasConfig] = None,
        maintain_aspect: bool = True
    ) -> "SketchCanvas":
        """
        Create a drawing surface from an existing sketch.

        Transparent regions are flattened onto the white background.

        Args:
            source: Image path, encoded image bytes or PIL Image.
            config: Target canvas configuration. Defaults to the image size.
            maintain_aspect: Fit within the canvas instead of stretching to it.

        Returns:
            SketchCanvas holding the sketch.
        """
        if isinstance(source, Image.Image):
            image = source
        elif isinstance(source, bytes):
            image = Image.open(BytesIO(source))
        else:
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Image not found: {path}")
            image = Image.open(path)

        image = image.convert("RGBA")
        if config is None:
            config = CanvasConfig(width=image.width, height=image.height)

        canvas = cls(config)
        if image.size != canvas.size:
            if maintain_aspect:
                image.thumbnail(canvas.size, Image.Resampling.LANCZOS)
            else:
                image = image.resize(canvas.size, Image.Resampling.LANCZOS)

        canvas._image.paste(image, (0, 0), mask=image)
        return canvas
