"""Tool registry and the error boundary around every operation.

Each tool has a pydantic argument model (camelCase keys, as callers send
them) and a handler that runs one operation and renders its report. Handlers
raise; call_tool is the only place exceptions turn into error results.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from . import report
from .archive_reader import extract_archive
from .archive_writer import create_archive
from .config import DEFAULT_COMPRESSION_LEVEL, DEFAULT_IMAGE_QUALITY, DEFAULT_PDF_DPI
from .errors import FileOpsError
from .file_tools import copy_files, count_files, list_files, move_files
from .formats import ArchiveFormat, classify_archive
from .image_tools import compress_image
from .models import ArchiveSpec, ExtractionSpec
from .pdf_tools import merge_pdf, pdf_to_image, split_pdf

logger = logging.getLogger(__name__)


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    is_error: bool = Field(False, alias="isError")

    @classmethod
    def ok(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(c.text for c in self.content)


class ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CountFilesArgs(ToolArgs):
    folder_path: Optional[str] = Field(None, alias="folderPath")


class ListFilesArgs(ToolArgs):
    folder_path: Optional[str] = Field(None, alias="folderPath")
    include_hidden: bool = Field(False, alias="includeHidden")


class CopyFilesArgs(ToolArgs):
    source_path: str = Field(alias="sourcePath")
    target_path: str = Field(alias="targetPath")
    overwrite: bool = False
    preserve_timestamps: bool = Field(True, alias="preserveTimestamps")


class MoveFilesArgs(ToolArgs):
    source_path: str = Field(alias="sourcePath")
    target_path: str = Field(alias="targetPath")
    overwrite: bool = False


class CompressImageArgs(ToolArgs):
    image_path: str = Field(alias="imagePath")
    quality: int = Field(DEFAULT_IMAGE_QUALITY, ge=1, le=100)
    max_width: Optional[int] = Field(None, alias="maxWidth", gt=0)
    max_height: Optional[int] = Field(None, alias="maxHeight", gt=0)
    output_path: Optional[str] = Field(None, alias="outputPath")


class CreateArchiveArgs(ToolArgs):
    files: list[str] = Field(min_length=1)
    output_path: str = Field(alias="outputPath")
    format: Literal["zip", "tar", "tar.gz"] = "zip"
    compression_level: int = Field(DEFAULT_COMPRESSION_LEVEL, alias="compressionLevel", ge=0, le=9)


class ExtractArchiveArgs(ToolArgs):
    archive_path: str = Field(alias="archivePath")
    extract_to: str = Field(alias="extractTo")
    overwrite: bool = False


class MergePdfArgs(ToolArgs):
    input_paths: list[str] = Field(alias="inputPaths")
    output_path: str = Field(alias="outputPath")
    title: Optional[str] = None


class SplitPdfArgs(ToolArgs):
    input_path: str = Field(alias="inputPath")
    output_dir: str = Field(alias="outputDir")
    split_mode: Literal["pages", "ranges"] = Field("pages", alias="splitMode")
    ranges: Optional[list[str]] = None
    prefix: Optional[str] = None


class PdfToImageArgs(ToolArgs):
    input_path: str = Field(alias="inputPath")
    output_dir: str = Field(alias="outputDir")
    format: Literal["jpeg", "png"] = "jpeg"
    quality: int = Field(DEFAULT_IMAGE_QUALITY, ge=1, le=100)
    dpi: int = Field(DEFAULT_PDF_DPI, ge=50, le=600)
    pages: Optional[str] = None
    prefix: Optional[str] = None


@dataclass(frozen=True)
class Tool:
    name: str
    title: str
    description: str
    args_model: type[ToolArgs]
    handler: Callable[[Any], str]


TOOLS: dict[str, Tool] = {}


def tool(name: str, args_model: type[ToolArgs], title: str, description: str):
    def register(handler: Callable[[Any], str]) -> Callable[[Any], str]:
        TOOLS[name] = Tool(name, title, description, args_model, handler)
        return handler

    return register


@tool(
    "count-files",
    CountFilesArgs,
    title="Count files",
    description="Count the files in a folder. folderPath (optional) - folder path, defaults to the Desktop",
)
def _count_files(args: CountFilesArgs) -> str:
    folder, top_level, result = count_files(args.folder_path)
    return report.files_counted(result, folder, top_level)


@tool(
    "list-files",
    ListFilesArgs,
    title="List files",
    description=(
        "List the names of all files in a folder. folderPath (optional) - folder path, "
        "defaults to the Desktop; includeHidden (optional) - include hidden files, default false"
    ),
)
def _list_files(args: ListFilesArgs) -> str:
    folder, rows = list_files(args.folder_path, args.include_hidden)
    return report.files_listed(folder, [(r.name, r.is_directory, r.size_bytes) for r in rows])


@tool(
    "copy-files",
    CopyFilesArgs,
    title="Copy files",
    description=(
        "Copy a file or folder to a target location. sourcePath (required); targetPath (required); "
        "overwrite (optional, default false); preserveTimestamps (optional, default true)"
    ),
)
def _copy_files(args: CopyFilesArgs) -> str:
    source, target = Path(args.source_path), Path(args.target_path)
    is_dir = source.is_dir()
    result = copy_files(source, target, args.overwrite, args.preserve_timestamps)
    return report.files_copied(result, source, target, is_dir, args.preserve_timestamps)


@tool(
    "move-files",
    MoveFilesArgs,
    title="Move files",
    description=(
        "Move a file or folder to a target location. sourcePath (required); targetPath (required); "
        "overwrite (optional, default false)"
    ),
)
def _move_files(args: MoveFilesArgs) -> str:
    source, target = Path(args.source_path), Path(args.target_path)
    is_dir = source.is_dir()
    result, replaced = move_files(source, target, args.overwrite)
    return report.files_moved(result, source, target, is_dir, replaced)


@tool(
    "compress-image",
    CompressImageArgs,
    title="Compress image",
    description=(
        "Compress an image file. imagePath (required); quality 1-100 (optional, default 80); "
        "maxWidth / maxHeight (optional); outputPath (optional, default <name>_compressed<ext>)"
    ),
)
def _compress_image(args: CompressImageArgs) -> str:
    result = compress_image(
        args.image_path,
        quality=args.quality,
        max_width=args.max_width,
        max_height=args.max_height,
        output_path=args.output_path,
    )
    return report.image_compressed(result)


@tool(
    "create-archive",
    CreateArchiveArgs,
    title="Create archive",
    description=(
        "Compress files or folders into a ZIP or TAR archive. files (required) - paths to compress; "
        "outputPath (required); format zip|tar|tar.gz (optional, default zip); "
        "compressionLevel 0-9 (optional, default 6)"
    ),
)
def _create_archive(args: CreateArchiveArgs) -> str:
    spec = ArchiveSpec(
        inputs=tuple(Path(f) for f in args.files),
        output_path=Path(args.output_path),
        format=ArchiveFormat.from_name(args.format),
        compression_level=args.compression_level,
    )
    result = create_archive(spec)
    return report.archive_created(result, spec.format.value, len(spec.inputs))


@tool(
    "extract-archive",
    ExtractArchiveArgs,
    title="Extract archive",
    description=(
        "Extract a ZIP, TAR or TAR.GZ file into a folder. archivePath (required); extractTo (required); "
        "overwrite (optional, default false)"
    ),
)
def _extract_archive(args: ExtractArchiveArgs) -> str:
    spec = ExtractionSpec(
        archive_path=Path(args.archive_path),
        target_dir=Path(args.extract_to),
        overwrite=args.overwrite,
    )
    result = extract_archive(spec)
    fmt = classify_archive(spec.archive_path)
    return report.archive_extracted(result, spec.archive_path, fmt.value, spec.target_dir)


@tool(
    "merge-pdf",
    MergePdfArgs,
    title="Merge PDF",
    description="Merge several PDF files into one. inputPaths (required); outputPath (required); title (optional)",
)
def _merge_pdf(args: MergePdfArgs) -> str:
    result, details = merge_pdf(args.input_paths, args.output_path, args.title)
    return report.pdf_merged(result, details)


@tool(
    "split-pdf",
    SplitPdfArgs,
    title="Split PDF",
    description=(
        "Split a PDF into several files. inputPath (required); outputDir (required); "
        'splitMode pages|ranges (optional, default pages); ranges, e.g. ["1-3", "4-6"] '
        "(required for ranges mode); prefix (optional)"
    ),
)
def _split_pdf(args: SplitPdfArgs) -> str:
    result, total = split_pdf(args.input_path, args.output_dir, args.split_mode, args.ranges, args.prefix)
    return report.pdf_split(result, Path(args.input_path), Path(args.output_dir), args.split_mode, total)


@tool(
    "pdf-to-image",
    PdfToImageArgs,
    title="PDF to image",
    description=(
        "Convert PDF pages to images. inputPath (required); outputDir (required); format jpeg|png "
        '(optional, default jpeg); quality 1-100; dpi 50-600; pages, e.g. "1-3" or "1,3,5" '
        "(optional, default all); prefix (optional)"
    ),
)
def _pdf_to_image(args: PdfToImageArgs) -> str:
    result, sizes = pdf_to_image(
        args.input_path,
        args.output_dir,
        format=args.format,
        quality=args.quality,
        dpi=args.dpi,
        pages=args.pages,
        prefix=args.prefix,
    )
    return report.pdf_rasterised(
        result,
        Path(args.input_path),
        Path(args.output_dir),
        args.format,
        args.quality,
        args.dpi,
        args.pages,
        sizes,
    )


def _describe_validation(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def call_tool(name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
    """Run a tool and return its tagged result. Never raises."""
    registered = TOOLS.get(name)
    if registered is None:
        return ToolResult.error(f"Error: unknown tool {name!r}")

    try:
        args = registered.args_model.model_validate(arguments or {})
    except ValidationError as exc:
        return ToolResult.error(f"Error: invalid arguments for {name}: {_describe_validation(exc)}")

    try:
        text = registered.handler(args)
    except FileOpsError as exc:
        logger.info("%s failed: %s", name, exc)
        return ToolResult.error(f"Error: {exc}")
    except OSError as exc:
        logger.warning("%s failed: %s", name, exc)
        return ToolResult.error(f"Error during {registered.title.lower()}: {exc}")
    except Exception as exc:
        logger.exception("Unexpected failure in %s", name)
        return ToolResult.error(f"Unexpected error during {registered.title.lower()}: {exc}")
    return ToolResult.ok(text)
