"""Raw frame loading for dry-run sessions."""

from __future__ import annotations

from pathlib import Path

from PIL import Image

from .logging_utils import get_logger

RAW_SUFFIXES = {".raw", ".bgra"}

_log = get_logger("frames")


def image_to_bgra(image: Image.Image, size: tuple[int, int]) -> bytes:
    """Convert ``image`` to a tightly packed BGRA buffer of ``size``."""

    rgba = image.convert("RGBA")
    if rgba.size != size:
        rgba = rgba.resize(size, Image.Resampling.BILINEAR)
    red, green, blue, alpha = rgba.split()
    return Image.merge("RGBA", (blue, green, red, alpha)).tobytes()


def load_frame(path: Path | str, size: tuple[int, int]) -> bytes:
    """Read a frame buffer; raw files are taken verbatim, images are converted."""

    frame_path = Path(path)
    if frame_path.suffix.lower() in RAW_SUFFIXES:
        data = frame_path.read_bytes()
        _log.debug("Loaded raw frame {} ({} bytes)", frame_path, len(data))
        return data
    with Image.open(frame_path) as image:
        data = image_to_bgra(image, size)
    _log.debug("Converted {} to {}x{} BGRA", frame_path, size[0], size[1])
    return data
