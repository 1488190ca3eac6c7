"""Notepad with an optional drawing layer.

Pointer events arrive in screen pixels relative to the canvas element and
are divided by the zoom factor before they are stored, so strokes always
live in canvas coordinates. Rendering clears the surface and replays every
committed stroke plus the one in progress, scaled by the current zoom.
"""

import base64
import io
import logging
import math
import uuid
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from PIL import Image, ImageColor, ImageDraw, UnidentifiedImageError

from training_tracker.notepad.storage import NotepadStore
from training_tracker.utils.resources import ResourceLine, render_resource_lines

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 280

MIN_ZOOM = 0.5
MAX_ZOOM = 2.0
ZOOM_STEP = 0.1

TOOLS = ("arrow", "marker", "square")
ARROW_HEAD_LENGTH = 15
MARKER_ALPHA = 128 # 50% opacity
MIN_MARKER_POINTS = 3
MIN_SHAPE_DELTA = 3

def short_id() -> str:
    return uuid.uuid4().hex[:9]

@dataclass
class Point:
    x: float
    y: float

@dataclass
class Stroke:
    type: str
    color: str
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    thickness: float = 2
    points: List[Point] = field(default_factory=list)
    id: str = field(default_factory=short_id)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "color": self.color,
            "startX": self.start_x,
            "startY": self.start_y,
            "endX": self.end_x,
            "endY": self.end_y,
            "thickness": self.thickness,
        }
        if self.type == "marker":
            data["points"] = [asdict(p) for p in self.points]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Stroke":
        return cls(
            id=data.get("id") or short_id(),
            type=data["type"],
            color=data.get("color", "black"),
            start_x=data["startX"],
            start_y=data["startY"],
            end_x=data["endX"],
            end_y=data["endY"],
            thickness=data.get("thickness", 2),
            points=[Point(p["x"], p["y"]) for p in data.get("points") or []],
        )

@dataclass
class CanvasImage:
    src: str # data URL
    x: float = 10
    y: float = 10
    width: float = 120
    height: float = 120
    id: str = field(default_factory=short_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CanvasImage":
        return cls(**{k: data[k] for k in ("id", "src", "x", "y", "width", "height") if k in data})

@dataclass
class NotepadSubmission:
    text: str
    drawing_url: Optional[str] = None

def decode_data_url(data_url: str) -> bytes:
    _, _, payload = data_url.partition(",")
    return base64.b64decode(payload)

def encode_png_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")

class Notepad:
    """Text notes plus drawing layer for one title, autosaved on every change.

    ``mode`` is ``"write"`` for note taking or ``"read"`` for showing
    resource notes (``content``) line by line.
    """

    def __init__(self, title: str, store: Optional[NotepadStore] = None, mode: str = "write", content: str = ""):
        self.title = title
        self.store = store
        self.mode = mode
        self.content = content

        self.text = ""
        self.strokes: List[Stroke] = []
        self.images: List[CanvasImage] = []

        self.draw_mode: Optional[str] = None
        self.draw_color = "black"
        self.draw_thickness = 3
        self.zoom = 1.0

        self.is_drawing = False
        self._start = Point(0, 0)
        self._marker_points: List[Point] = []
        self._dragged_image_id: Optional[str] = None
        self._drag_offset = Point(0, 0)

        self.load()

    # --- Persistence ---

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "drawings": [s.to_dict() for s in self.strokes],
            "images": [i.to_dict() for i in self.images],
        }

    def load(self) -> None:
        if self.store is None:
            return
        saved = self.store.load(self.title)
        if not saved:
            return
        try:
            text = saved.get("text", "")
            strokes = [Stroke.from_dict(s) for s in saved.get("drawings", [])]
            images = [CanvasImage.from_dict(i) for i in saved.get("images", [])]
        except (KeyError, TypeError, AttributeError):
            logger.warning("Could not load saved data for notepad %r", self.title)
            return
        self.text, self.strokes, self.images = text, strokes, images

    def autosave(self) -> None:
        if self.store is not None:
            self.store.save(self.title, self.to_dict())

    # --- Text ---

    def set_text(self, text: str) -> None:
        self.text = text
        self.autosave()

    def read_lines(self) -> List[ResourceLine]:
        return render_resource_lines(self.content)

    # --- Tools & zoom ---

    def set_tool(self, tool: Optional[str], color: Optional[str] = None, thickness: Optional[float] = None) -> None:
        if tool is not None and tool not in TOOLS:
            raise ValueError(f"Unknown drawing tool: {tool}")
        self.draw_mode = tool
        if color is not None:
            self.draw_color = color
        if thickness is not None:
            self.draw_thickness = thickness

    def wheel(self, delta_y: float) -> float:
        """One wheel notch: scrolling down zooms out, up zooms in."""
        if delta_y > 0:
            self.zoom = max(MIN_ZOOM, round(self.zoom - ZOOM_STEP, 1))
        else:
            self.zoom = min(MAX_ZOOM, round(self.zoom + ZOOM_STEP, 1))
        return self.zoom

    def to_canvas(self, x: float, y: float) -> Point:
        return Point(x / self.zoom, y / self.zoom)

    # --- Pointer handling ---

    def pointer_down(self, x: float, y: float) -> None:
        if not self.draw_mode:
            return
        point = self.to_canvas(x, y)
        if self.draw_mode == "marker":
            self._marker_points = [point]
        else:
            self._start = point
        self.is_drawing = True

    def _preview(self, point: Point) -> Stroke:
        if self.draw_mode == "marker":
            first = self._marker_points[0]
            return Stroke(
                type="marker",
                color=self.draw_color,
                start_x=first.x,
                start_y=first.y,
                end_x=point.x,
                end_y=point.y,
                thickness=self.draw_thickness,
                points=list(self._marker_points),
            )
        return Stroke(
            type=self.draw_mode,
            color=self.draw_color,
            start_x=self._start.x,
            start_y=self._start.y,
            end_x=point.x,
            end_y=point.y,
            thickness=self.draw_thickness,
        )

    def pointer_move(self, x: float, y: float) -> Optional[Image.Image]:
        """Extend the stroke in progress and return the redrawn frame."""
        if not self.is_drawing or not self.draw_mode:
            return None
        point = self.to_canvas(x, y)
        if self.draw_mode == "marker":
            self._marker_points.append(point)
        return self.render(self._preview(point))

    def pointer_up(self, x: float, y: float) -> Optional[Stroke]:
        """Commit the stroke in progress when it is large enough, else discard it."""
        if not self.is_drawing or not self.draw_mode:
            return None
        point = self.to_canvas(x, y)
        committed = None

        if self.draw_mode == "marker":
            if len(self._marker_points) >= MIN_MARKER_POINTS:
                last = self._marker_points[-1]
                committed = self._preview(last)
            self._marker_points = []
        elif abs(point.x - self._start.x) > MIN_SHAPE_DELTA or abs(point.y - self._start.y) > MIN_SHAPE_DELTA:
            committed = self._preview(point)

        self.is_drawing = False
        if committed is not None:
            self.strokes.append(committed)
            self.autosave()
        return committed

    # --- Images ---

    def add_image(self, src: str) -> CanvasImage:
        image = CanvasImage(src=src)
        self.images.append(image)
        self.autosave()
        return image

    def start_image_drag(self, image_id: str, x: float, y: float) -> None:
        image = self._find_image(image_id)
        if image is None:
            return
        self._dragged_image_id = image_id
        self._drag_offset = Point(x - image.x, y - image.y)

    def drag_image(self, x: float, y: float) -> Optional[CanvasImage]:
        image = self._find_image(self._dragged_image_id)
        if image is None:
            return None
        # Keep the whole image inside the canvas
        image.x = max(0, min(x - self._drag_offset.x, CANVAS_WIDTH - image.width))
        image.y = max(0, min(y - self._drag_offset.y, CANVAS_HEIGHT - image.height))
        self.autosave()
        return image

    def end_image_drag(self) -> None:
        self._dragged_image_id = None

    def _find_image(self, image_id: Optional[str]) -> Optional[CanvasImage]:
        if image_id is None:
            return None
        return next((i for i in self.images if i.id == image_id), None)

    # --- Rendering ---

    def render(self, preview: Optional[Stroke] = None, include_images: bool = False) -> Image.Image:
        """Full clear and replay of committed strokes plus ``preview``, scaled by zoom."""
        surface = Image.new("RGBA", (CANVAS_WIDTH, CANVAS_HEIGHT), (255, 255, 255, 0))
        if include_images:
            for image in self.images:
                self._paste_image(surface, image)
        for stroke in self.strokes + ([preview] if preview is not None else []):
            surface = self._draw_stroke(surface, stroke)
        return surface

    def _scale(self, x: float, y: float):
        return (x * self.zoom, y * self.zoom)

    def _draw_stroke(self, surface: Image.Image, stroke: Stroke) -> Image.Image:
        try:
            rgb = ImageColor.getrgb(stroke.color)[:3]
        except ValueError:
            rgb = (0, 0, 0)
        # On-screen width is independent of zoom
        width = max(1, int(round(stroke.thickness)))

        if stroke.type == "marker":
            if len(stroke.points) < 2:
                return surface
            layer = Image.new("RGBA", surface.size, (0, 0, 0, 0))
            ImageDraw.Draw(layer).line(
                [self._scale(p.x, p.y) for p in stroke.points],
                fill=rgb + (MARKER_ALPHA,),
                width=width,
                joint="curve",
            )
            return Image.alpha_composite(surface, layer)

        draw = ImageDraw.Draw(surface)
        fill = rgb + (255,)
        start = self._scale(stroke.start_x, stroke.start_y)
        end = self._scale(stroke.end_x, stroke.end_y)

        if stroke.type == "arrow":
            draw.line([start, end], fill=fill, width=width)
            angle = math.atan2(stroke.end_y - stroke.start_y, stroke.end_x - stroke.start_x)
            for offset in (-math.pi / 6, math.pi / 6):
                head = self._scale(
                    stroke.end_x - ARROW_HEAD_LENGTH * math.cos(angle + offset),
                    stroke.end_y - ARROW_HEAD_LENGTH * math.sin(angle + offset),
                )
                draw.line([end, head], fill=fill, width=width)
        elif stroke.type == "square":
            box = [
                min(start[0], end[0]), min(start[1], end[1]),
                max(start[0], end[0]), max(start[1], end[1]),
            ]
            draw.rectangle(box, outline=fill, width=width)
        return surface

    def _paste_image(self, surface: Image.Image, image: CanvasImage) -> None:
        try:
            with Image.open(io.BytesIO(decode_data_url(image.src))) as source:
                size = (max(1, int(image.width * self.zoom)), max(1, int(image.height * self.zoom)))
                picture = source.convert("RGBA").resize(size)
        except (ValueError, UnidentifiedImageError, OSError):
            logger.warning("Skipping undecodable image %s on notepad %r", image.id, self.title)
            return
        position = (int(image.x * self.zoom), int(image.y * self.zoom))
        surface.paste(picture, position, picture)

    def drawing_data_url(self) -> Optional[str]:
        if not self.strokes:
            return None
        return encode_png_data_url(self.render(include_images=True))

    # --- Submit ---

    def clear(self) -> None:
        self.text = ""
        self.strokes = []
        self.images = []

    def submit(self) -> Optional[NotepadSubmission]:
        """Hand over the notes and discard the saved state. Empty text submits nothing."""
        if not self.text.strip():
            return None
        submission = NotepadSubmission(text=self.text, drawing_url=self.drawing_data_url())
        self.clear()
        if self.store is not None:
            self.store.clear(self.title)
        return submission
