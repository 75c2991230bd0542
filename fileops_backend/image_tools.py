from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .config import ALLOWED_IMAGE_EXTS, DEFAULT_IMAGE_QUALITY
from .errors import ConversionError, NotFoundError, UnsupportedFormatError
from .models import OperationResult

logger = logging.getLogger(__name__)


def default_output_path(image_path: Path) -> Path:
    return image_path.with_name(f"{image_path.stem}_compressed{image_path.suffix}")


def _save_options(suffix: str, quality: int) -> tuple[str | None, dict]:
    if suffix in (".jpg", ".jpeg"):
        return "JPEG", {"quality": quality, "optimize": True}
    if suffix == ".png":
        return "PNG", {"optimize": True, "compress_level": (100 - quality) // 10}
    if suffix == ".webp":
        return "WEBP", {"quality": quality}
    # .tiff / .gif keep their own encoder.
    return None, {"optimize": True}


def compress_image(
    image_path: str | Path,
    quality: int = DEFAULT_IMAGE_QUALITY,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    output_path: str | Path | None = None,
) -> OperationResult:
    """Recompress (and optionally shrink) an image.

    The image is scaled to fit inside max_width x max_height, never enlarged.
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise NotFoundError(f"Image file {image_path} does not exist")

    suffix = image_path.suffix.lower()
    if suffix not in ALLOWED_IMAGE_EXTS:
        raise UnsupportedFormatError(f"Unsupported image format {suffix or image_path.name}")

    out = Path(output_path) if output_path else default_output_path(image_path)
    original_size = image_path.stat().st_size

    fmt, options = _save_options(suffix, quality)
    try:
        with Image.open(image_path) as img:
            img.load()
            if max_width or max_height:
                # thumbnail() keeps the aspect ratio and never upsizes.
                img.thumbnail((max_width or img.width, max_height or img.height))
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out.parent.mkdir(parents=True, exist_ok=True)
            img.save(out, format=fmt, **options)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ConversionError(f"Failed to compress {image_path}: {exc}") from exc

    compressed_size = out.stat().st_size
    logger.info("Compressed %s -> %s (%d -> %d bytes)", image_path, out, original_size, compressed_size)
    return OperationResult(
        items_processed=1,
        total_bytes_in=original_size,
        total_bytes_out=compressed_size,
        output_paths=(out,),
    )
