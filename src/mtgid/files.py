"""Image discovery and encoding helpers."""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PIL import Image, ImageOps

from .models import DirectoryScan

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def list_image_files(directory: Path, extensions: Iterable[str] = IMAGE_EXTENSIONS) -> DirectoryScan:
    """Return the image files directly inside ``directory``, sorted by name.

    A missing or unreadable directory is reported as ``found=False`` instead
    of raising.
    """

    allowed = {ext.lower() for ext in extensions}
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        LOGGER.warning("Cannot read image directory %s: %s", directory, exc)
        return DirectoryScan(directory=directory, found=False)
    files = sorted(
        (path for path in entries if path.is_file() and path.suffix.lower() in allowed),
        key=lambda path: path.name,
    )
    LOGGER.info("Discovered %d image files in %s", len(files), directory)
    return DirectoryScan(directory=directory, files=tuple(files))


def _mime_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "image/jpeg"


EXIF_ORIENTATION = 0x0112


def _downscale(path: Path, max_edge: int) -> Optional[bytes]:
    with Image.open(path) as img:
        rotated = img.getexif().get(EXIF_ORIENTATION, 1) != 1
        if rotated:
            img = ImageOps.exif_transpose(img)
        width, height = img.size
        scale = max(width, height)
        if scale <= max_edge and not rotated:
            return None
        ratio = min(1.0, max_edge / float(scale))
        new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
        img = img.convert("RGB") if img.mode != "RGB" else img
        img = img.resize(new_size, Image.LANCZOS)
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def encode_image(path: Path, max_edge: Optional[int] = None) -> Tuple[str, str]:
    """Read ``path`` and return ``(mime_type, base64_payload)``.

    Images larger than ``max_edge`` on their longest side, or carrying an EXIF
    rotation, are turned upright, downscaled and re-encoded as JPEG. Other
    images are sent byte-for-byte.
    """

    if max_edge:
        resized = _downscale(path, max_edge)
        if resized is not None:
            LOGGER.debug("Re-encoded %s within a %dpx edge", path.name, max_edge)
            return "image/jpeg", base64.b64encode(resized).decode("ascii")
    with path.open("rb") as handle:
        payload = base64.b64encode(handle.read()).decode("ascii")
    return _mime_type(path), payload


def image_segment(path: Path, max_edge: Optional[int] = None) -> Dict[str, str]:
    mime_type, payload = encode_image(path, max_edge)
    return {
        "type": "input_image",
        "image_url": f"data:{mime_type};base64,{payload}",
    }
