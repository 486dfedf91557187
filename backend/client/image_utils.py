import base64
import binascii
import io
import logging
import time
import uuid
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError

from models.history import Asset, AssetType, BrushStroke

logger = logging.getLogger(__name__)

DEFAULT_MIME = "image/png"
DEFAULT_SIZE = (1024, 1024)
CHECKSUM_LENGTH = 32
DATA_URL_MARKER = "base64,"


def generate_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def to_data_url(data: str, mime: str = DEFAULT_MIME) -> str:
    return f"data:{mime};base64,{data}"


def strip_data_url(value: str) -> str:
    """Return the base64 payload of a data URI; plain base64 is returned unchanged"""
    if DATA_URL_MARKER in value:
        return value.split(DATA_URL_MARKER, 1)[1]
    return value


def is_data_url(value: str) -> bool:
    return DATA_URL_MARKER in value


def checksum(data: str) -> str:
    return data[:CHECKSUM_LENGTH]


def image_size(data: str) -> Tuple[int, int]:
    """
    Read width and height from a base64 image.

    Falls back to DEFAULT_SIZE when the payload cannot be decoded.
    """
    try:
        with Image.open(io.BytesIO(base64.b64decode(data))) as image:
            return image.size
    except (binascii.Error, ValueError, UnidentifiedImageError, OSError):
        logger.debug("Could not read image size, using %sx%s", *DEFAULT_SIZE)
        return DEFAULT_SIZE


def make_asset(data: str, asset_type: AssetType, mime: str = DEFAULT_MIME) -> Asset:
    """Wrap a base64 payload into an Asset with its real dimensions"""
    width, height = image_size(data)
    return Asset(
        id=generate_id(),
        type=asset_type,
        url=to_data_url(data, mime),
        mime=mime,
        width=width,
        height=height,
        checksum=checksum(data)
    )


def encode_png(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def render_mask(strokes: Iterable[BrushStroke], width: int, height: int) -> Optional[str]:
    """
    Rasterize brush strokes into a binary mask.

    Black background, white round-capped strokes of each stroke's brush size.
    Strokes with fewer than two points are skipped.

    Args:
        strokes: Brush strokes in image pixel coordinates
        width: Mask width (the edited image's width)
        height: Mask height

    Returns:
        Base64 PNG, or None when there are no strokes at all
    """
    strokes = list(strokes)
    if not strokes:
        return None

    mask = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(mask)

    for stroke in strokes:
        points = stroke.points
        # A single point draws nothing; if every stroke is like this the mask stays black
        if len(points) < 4:
            continue
        coords = [(points[i], points[i + 1]) for i in range(0, len(points) - 1, 2)]
        line_width = max(1, int(round(stroke.brush_size)))
        draw.line(coords, fill=255, width=line_width, joint="curve")

        # Round caps
        radius = line_width / 2
        for x, y in (coords[0], coords[-1]):
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=255)

    return encode_png(mask)
