"""Local image loading for the command line.

Turns a photo or screenshot of a math problem into the same data URI a
browser upload produces. Phone photos are turned upright from their EXIF
orientation, transparent canvases are flattened onto white paper, and
everything is sent as JPEG.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Longest side in pixels for each --quality choice; None keeps the original
MAX_SIDE = {
    "quick": 768,
    "normal": 1280,
    "detailed": 1600,
    "full": None,
}

JPEG_QUALITY = 90
PAPER_WHITE = (255, 255, 255)
SUPPORTED_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"}


class ImageProcessor:
    """Encodes a worksheet photo or screenshot as a JPEG data URI."""

    def __init__(self, quality: str = "normal", max_side: Optional[int] = None):
        self.quality = quality
        self.max_side = max_side or MAX_SIDE.get(quality, MAX_SIDE["normal"])

    def to_data_uri(self, file_path: Path) -> str:
        """Load an image file and encode it as ``data:image/jpeg;base64,``.

        Args:
            file_path: Path to image file

        Returns:
            Data URI string

        Raises:
            FileNotFoundError: File does not exist
            ValueError: Not a file, unsupported suffix, or unreadable image
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            raise FileNotFoundError(f"Image not found: {file_path}")
        if not path.is_file() or path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ValueError(f"Not a supported image file: {file_path}")

        raw = path.read_bytes()
        try:
            page = self._prepare(Image.open(io.BytesIO(raw)))
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Cannot read image: {file_path}") from e

        buffer = io.BytesIO()
        page.save(buffer, format="JPEG", quality=JPEG_QUALITY)
        encoded = base64.standard_b64encode(buffer.getvalue()).decode("ascii")

        logger.info(f"Loaded {path.name}: {page.size[0]}x{page.size[1]}, {len(raw):,} -> {buffer.tell():,} bytes")
        return f"data:image/jpeg;base64,{encoded}"

    def _prepare(self, img: Image.Image) -> Image.Image:
        """Upright, flattened, RGB image no larger than ``max_side``."""
        img = ImageOps.exif_transpose(img)

        if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
            rgba = img.convert("RGBA")
            page = Image.new("RGB", rgba.size, PAPER_WHITE)
            page.paste(rgba, mask=rgba.getchannel("A"))
            img = page
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if self.max_side:
            img.thumbnail((self.max_side, self.max_side), Image.Resampling.LANCZOS)

        return img
