"""Merge, split and rasterise PDFs.

Page selection for split-pdf (ranges mode) and pdf-to-image goes through
ranges.parse_range, bounded by the document's page count.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Sequence

from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from .config import (
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_PDF_DPI,
    PDF_MERGER_CREATOR,
    PDF_PRODUCER,
    PDF_SPLITTER_CREATOR,
)
from .errors import ConversionError, InvalidArgumentError, NotFoundError, UnsupportedFormatError
from .models import OperationResult
from .ranges import describe_pages, parse_range
from .security import is_safe_basename

logger = logging.getLogger(__name__)

_RASTER_ERRORS = (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, OSError, ValueError)


def _check_pdf(path: Path) -> None:
    if not path.exists():
        raise NotFoundError(f"Input file does not exist: {path}")
    if path.suffix.lower() != ".pdf":
        raise UnsupportedFormatError(f"Input file is not a PDF: {path}")


def _base_name(input_path: Path, prefix: Optional[str]) -> str:
    if prefix is None or prefix == "":
        return input_path.stem
    if not is_safe_basename(prefix):
        raise InvalidArgumentError(f"Prefix must be a plain file name, got {prefix!r}")
    return prefix


def _read(path: Path) -> PdfReader:
    try:
        return PdfReader(path)
    except (PyPdfError, OSError) as exc:
        raise ConversionError(f"Cannot read PDF {path}: {exc}") from exc


def _write(writer: PdfWriter, out: Path, title: str, creator: str) -> int:
    writer.add_metadata(
        {
            "/Title": title,
            "/Producer": PDF_PRODUCER,
            "/Creator": creator,
            "/CreationDate": time.strftime("D:%Y%m%d%H%M%S"),
        }
    )
    with open(out, "wb") as fh:
        writer.write(fh)
    return out.stat().st_size


def merge_pdf(
    input_paths: Sequence[str | Path],
    output_path: str | Path,
    title: Optional[str] = None,
) -> tuple[OperationResult, list[tuple[Path, int, int]]]:
    """Concatenate PDFs in the given order.

    Returns (result, details) with details as (path, pages, size_bytes) per
    input; result.items_processed is the total page count.
    """
    if not input_paths:
        raise InvalidArgumentError("At least one PDF file path is required")
    if len(input_paths) == 1:
        raise InvalidArgumentError("Only one PDF file given; copy it instead of merging")

    paths = [Path(p) for p in input_paths]
    for path in paths:
        _check_pdf(path)

    out = Path(output_path)
    if out.suffix.lower() != ".pdf":
        out = out.with_name(out.name + ".pdf")
    out.parent.mkdir(parents=True, exist_ok=True)

    writer = PdfWriter()
    details: list[tuple[Path, int, int]] = []
    total_pages = 0
    total_in = 0
    for path in paths:
        reader = _read(path)
        try:
            for page in reader.pages:
                writer.add_page(page)
        except PyPdfError as exc:
            raise ConversionError(f"Cannot process PDF {path}: {exc}") from exc
        pages = len(reader.pages)
        size = path.stat().st_size
        total_pages += pages
        total_in += size
        details.append((path, pages, size))

    size_out = _write(writer, out, title or out.stem, PDF_MERGER_CREATOR)
    logger.info("Merged %d PDFs into %s (%d pages)", len(paths), out, total_pages)
    result = OperationResult(
        items_processed=total_pages,
        total_bytes_in=total_in,
        total_bytes_out=size_out,
        output_paths=(out,),
    )
    return result, details


def split_pdf(
    input_path: str | Path,
    output_dir: str | Path,
    split_mode: str = "pages",
    ranges: Optional[Sequence[str]] = None,
    prefix: Optional[str] = None,
) -> tuple[OperationResult, int]:
    """Split a PDF into one file per page ("pages") or per range ("ranges").

    Returns (result, source page count).
    """
    input_path, output_dir = Path(input_path), Path(output_dir)
    _check_pdf(input_path)
    base = _base_name(input_path, prefix)
    if split_mode not in ("pages", "ranges"):
        raise InvalidArgumentError(f"Unknown split mode {split_mode!r}")

    reader = _read(input_path)
    total = len(reader.pages)
    if total == 0:
        raise InvalidArgumentError("PDF file has no pages")

    if split_mode == "pages":
        groups = [(f"{base}_page_{n:03d}.pdf", f"{base} - Page {n}", [n]) for n in range(1, total + 1)]
    else:
        if not ranges:
            raise InvalidArgumentError('ranges mode needs a list of page ranges, e.g. ["1-3", "4-6"]')
        # Parse everything before writing anything.
        groups = []
        for spec in ranges:
            pages = parse_range(spec, total)
            label = describe_pages(pages)
            groups.append((f"{base}_pages_{label}.pdf", f"{base} - Pages {label}", pages))

    output_dir.mkdir(parents=True, exist_ok=True)
    outputs: list[Path] = []
    size_out = 0
    for filename, title, pages in groups:
        writer = PdfWriter()
        for n in pages:
            writer.add_page(reader.pages[n - 1])
        out = output_dir / filename
        size_out += _write(writer, out, title, PDF_SPLITTER_CREATOR)
        outputs.append(out)

    logger.info("Split %s into %d files (%s mode)", input_path, len(outputs), split_mode)
    result = OperationResult(
        items_processed=len(outputs),
        total_bytes_in=input_path.stat().st_size,
        total_bytes_out=size_out,
        output_paths=tuple(outputs),
    )
    return result, total


def pdf_to_image(
    input_path: str | Path,
    output_dir: str | Path,
    format: str = "jpeg",
    quality: int = DEFAULT_IMAGE_QUALITY,
    dpi: int = DEFAULT_PDF_DPI,
    pages: Optional[str] = None,
    prefix: Optional[str] = None,
) -> tuple[OperationResult, dict[Path, int]]:
    """Render PDF pages to JPEG or PNG files named <prefix>.<page>.<format>.

    Returns (result, sizes) where sizes maps each image to its size in bytes.
    """
    input_path, output_dir = Path(input_path), Path(output_dir)
    _check_pdf(input_path)
    base = _base_name(input_path, prefix)
    fmt = format.lower()
    if fmt not in ("jpeg", "png"):
        raise UnsupportedFormatError(f"Unsupported image format {format!r}, use jpeg or png")

    total = len(_read(input_path).pages)
    if total == 0:
        raise InvalidArgumentError("PDF file has no pages")
    page_numbers = parse_range(pages, total) if pages else list(range(1, total + 1))
    # "1,1" names the same output file twice; render it once.
    page_numbers = list(dict.fromkeys(page_numbers))

    output_dir.mkdir(parents=True, exist_ok=True)
    outputs: list[Path] = []
    sizes: dict[Path, int] = {}
    for n in page_numbers:
        try:
            images = convert_from_path(str(input_path), dpi=dpi, first_page=n, last_page=n)
        except _RASTER_ERRORS as exc:
            raise ConversionError(f"Failed to convert page {n}: {exc}") from exc
        if not images:
            raise ConversionError(f"Failed to convert page {n}: no image produced")

        out = output_dir / f"{base}.{n}.{fmt}"
        image = images[0]
        if fmt == "jpeg":
            image.convert("RGB").save(out, format="JPEG", quality=quality)
        else:
            image.save(out, format="PNG")
        outputs.append(out)
        sizes[out] = out.stat().st_size

    logger.info("Rendered %d pages of %s to %s", len(outputs), input_path, output_dir)
    result = OperationResult(
        items_processed=len(outputs),
        total_bytes_in=input_path.stat().st_size,
        total_bytes_out=sum(sizes.values()),
        output_paths=tuple(outputs),
    )
    return result, sizes
