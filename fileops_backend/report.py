"""Human-readable summaries of OperationResults.

Everything here is pure and total: given a result and some metadata it
always returns text, never raises.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Sequence

from .models import OperationResult

Field = tuple[str, Any]


def format_kb(size_bytes: int) -> str:
    return f"{round(max(size_bytes, 0) / 1024)}KB"


def render_report(
    title: str,
    result: OperationResult,
    fields: Sequence[Field] = (),
    list_outputs: bool = False,
) -> str:
    lines = [title]
    for label, value in fields:
        if value is None or value == "":
            continue
        lines.append(f"{label}: {value}")
    if list_outputs and result.output_paths:
        lines.append("Files:")
        lines.extend(_numbered(result.output_paths))
    return "\n".join(lines)


def _numbered(paths: Iterable[Path], sizes: dict[Path, int] | None = None) -> list[str]:
    out = []
    for index, path in enumerate(paths, start=1):
        line = f"  {index}. {Path(path).name}"
        if sizes is not None and path in sizes:
            line += f" ({format_kb(sizes[path])})"
        out.append(line)
    return out


def archive_created(result: OperationResult, archive_format: str, inputs: int) -> str:
    return render_report(
        "Archive created!",
        result,
        [
            ("Archive", result.output_paths[0] if result.output_paths else None),
            ("Format", archive_format.upper()),
            ("Original size", format_kb(result.total_bytes_in)),
            ("Compressed size", format_kb(result.total_bytes_out)),
            ("Compression ratio", f"{result.compression_ratio}%"),
            ("Inputs", f"{inputs}"),
            ("Files stored", f"{result.items_processed}"),
        ],
    )


def archive_extracted(result: OperationResult, archive_path: Path, archive_format: str, target: Path) -> str:
    return render_report(
        "Extraction complete!",
        result,
        [
            ("Archive", archive_path),
            ("Format", archive_format.upper()),
            ("Extracted to", target),
            ("Files extracted", f"{result.items_processed}"),
            ("Total size", format_kb(result.total_bytes_out)),
        ],
    )


def files_counted(result: OperationResult, folder: Path, top_level: int) -> str:
    return (
        f"Folder {folder} contains {top_level} files/folders\n"
        f"Files (recursive): {result.items_processed}\n"
        f"Total size: {format_kb(result.total_bytes_out)}"
    )


def files_listed(folder: Path, rows: Sequence[tuple[str, bool, int]]) -> str:
    """rows are (name, is_directory, size_bytes)."""
    if not rows:
        return f"Folder {folder} is empty"
    lines = [f"Contents of folder {folder}:"]
    for name, is_dir, size in rows:
        kind = "folder" if is_dir else "file"
        shown = "-" if is_dir else format_kb(size)
        lines.append(f"- {name} ({kind}, {shown})")
    return "\n".join(lines)


def files_copied(result: OperationResult, source: Path, target: Path, is_dir: bool, preserve_timestamps: bool) -> str:
    return render_report(
        "Copy complete!",
        result,
        [
            ("Source", source),
            ("Target", target),
            ("Type", "folder" if is_dir else "file"),
            ("Size", format_kb(result.total_bytes_in)),
            ("Files", f"{result.items_processed}" if is_dir else None),
            ("Preserve timestamps", "yes" if preserve_timestamps else "no"),
        ],
    )


def files_moved(result: OperationResult, source: Path, target: Path, is_dir: bool, replaced: bool) -> str:
    return render_report(
        "Move complete!",
        result,
        [
            ("Source", source),
            ("Target", target),
            ("Type", "folder" if is_dir else "file"),
            ("Size", format_kb(result.total_bytes_in)),
            ("Files", f"{result.items_processed}" if is_dir else None),
            ("Operation", "overwrite move" if replaced else "new move"),
        ],
    )


def image_compressed(result: OperationResult) -> str:
    return render_report(
        "Image compressed!",
        result,
        [
            ("Original size", format_kb(result.total_bytes_in)),
            ("Compressed size", format_kb(result.total_bytes_out)),
            ("Compression ratio", f"{result.compression_ratio}%"),
            ("Output", result.output_paths[0] if result.output_paths else None),
        ],
    )


def pdf_merged(result: OperationResult, inputs: Sequence[tuple[Path, int, int]]) -> str:
    """inputs are (path, pages, size_bytes)."""
    lines = [
        render_report(
            "PDF merge complete!",
            result,
            [
                ("Output", result.output_paths[0] if result.output_paths else None),
                ("Input files", f"{len(inputs)}"),
                ("Total pages", f"{result.items_processed}"),
                ("Output size", format_kb(result.total_bytes_out)),
            ],
        ),
        "Files:",
    ]
    for index, (path, pages, size) in enumerate(inputs, start=1):
        lines.append(f"  {index}. {Path(path).name} ({pages} pages, {format_kb(size)})")
    return "\n".join(lines)


def pdf_split(result: OperationResult, input_path: Path, output_dir: Path, mode: str, total_pages: int) -> str:
    return render_report(
        f"PDF split complete ({mode})!",
        result,
        [
            ("Input", input_path),
            ("Output directory", output_dir),
            ("Source pages", f"{total_pages}"),
            ("Files created", f"{result.items_processed}"),
        ],
        list_outputs=True,
    )


def pdf_rasterised(
    result: OperationResult,
    input_path: Path,
    output_dir: Path,
    image_format: str,
    quality: int,
    dpi: int,
    pages: str | None,
    sizes: dict[Path, int],
) -> str:
    lines = [
        render_report(
            "PDF converted to images!",
            result,
            [
                ("Input", input_path),
                ("Output directory", output_dir),
                ("Format", image_format.upper()),
                ("Quality", f"{quality}%"),
                ("Resolution", f"{dpi} DPI"),
                ("Pages", pages or "all"),
                ("Images created", f"{result.items_processed}"),
                ("Total size", format_kb(result.total_bytes_out)),
            ],
        ),
        "Files:",
    ]
    lines.extend(_numbered(result.output_paths, sizes))
    return "\n".join(lines)
