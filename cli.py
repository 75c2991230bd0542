from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

import typer

from fileops_backend.config import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_PDF_DPI,
    LOG_LEVEL,
)
from fileops_backend.tools import TOOLS, call_tool

app = typer.Typer(help="File operation tools: archives, folders, images and PDFs", no_args_is_help=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log operation details to stderr"),
) -> None:
    level = logging.INFO if verbose else getattr(logging, LOG_LEVEL, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _run(name: str, arguments: dict[str, Any]) -> None:
    # Leave out unset options so the tool's own defaults apply.
    payload = {k: v for k, v in arguments.items() if v is not None}
    result = call_tool(name, payload)
    typer.echo(result.text, err=result.is_error)
    if result.is_error:
        raise typer.Exit(code=1)


@app.command("tools")
def list_tools() -> None:
    """List the available tools."""
    for registered in TOOLS.values():
        typer.echo(f"{registered.name}: {registered.description}")


@app.command("call")
def call(
    name: str = typer.Argument(..., help="Tool name, e.g. create-archive"),
    args: str = typer.Option("{}", "--args", help="Tool arguments as a JSON object"),
) -> None:
    """Call a tool with JSON arguments."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: --args is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=2)
    if not isinstance(arguments, dict):
        typer.echo("Error: --args must be a JSON object", err=True)
        raise typer.Exit(code=2)
    _run(name, arguments)


@app.command("count-files")
def count_files_cmd(folder_path: Optional[str] = typer.Argument(None, help="Folder (default: Desktop)")) -> None:
    """Count the files in a folder."""
    _run("count-files", {"folderPath": folder_path})


@app.command("list-files")
def list_files_cmd(
    folder_path: Optional[str] = typer.Argument(None, help="Folder (default: Desktop)"),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Include dot files"),
) -> None:
    """List the files in a folder."""
    _run("list-files", {"folderPath": folder_path, "includeHidden": include_hidden})


@app.command("copy-files")
def copy_files_cmd(
    source_path: str,
    target_path: str,
    overwrite: bool = typer.Option(False, "--overwrite"),
    preserve_timestamps: bool = typer.Option(True, "--preserve-timestamps/--no-preserve-timestamps"),
) -> None:
    """Copy a file or folder."""
    _run(
        "copy-files",
        {
            "sourcePath": source_path,
            "targetPath": target_path,
            "overwrite": overwrite,
            "preserveTimestamps": preserve_timestamps,
        },
    )


@app.command("move-files")
def move_files_cmd(
    source_path: str,
    target_path: str,
    overwrite: bool = typer.Option(False, "--overwrite"),
) -> None:
    """Move a file or folder."""
    _run("move-files", {"sourcePath": source_path, "targetPath": target_path, "overwrite": overwrite})


@app.command("compress-image")
def compress_image_cmd(
    image_path: str,
    quality: int = typer.Option(DEFAULT_IMAGE_QUALITY, min=1, max=100),
    max_width: Optional[int] = typer.Option(None, "--max-width"),
    max_height: Optional[int] = typer.Option(None, "--max-height"),
    output_path: Optional[str] = typer.Option(None, "--output", "-o"),
) -> None:
    """Recompress an image, optionally shrinking it."""
    _run(
        "compress-image",
        {
            "imagePath": image_path,
            "quality": quality,
            "maxWidth": max_width,
            "maxHeight": max_height,
            "outputPath": output_path,
        },
    )


@app.command("create-archive")
def create_archive_cmd(
    output_path: str = typer.Argument(..., help="Archive to write"),
    files: List[str] = typer.Argument(..., help="Files and folders to pack"),
    format: str = typer.Option("zip", "--format", "-f", help="zip, tar or tar.gz"),
    compression_level: int = typer.Option(DEFAULT_COMPRESSION_LEVEL, "--level", min=0, max=9),
) -> None:
    """Pack files and folders into a ZIP / TAR / TAR.GZ archive."""
    _run(
        "create-archive",
        {
            "files": files,
            "outputPath": output_path,
            "format": format,
            "compressionLevel": compression_level,
        },
    )


@app.command("extract-archive")
def extract_archive_cmd(
    archive_path: str,
    extract_to: str,
    overwrite: bool = typer.Option(False, "--overwrite"),
) -> None:
    """Extract an archive into a folder."""
    _run("extract-archive", {"archivePath": archive_path, "extractTo": extract_to, "overwrite": overwrite})


@app.command("merge-pdf")
def merge_pdf_cmd(
    output_path: str = typer.Argument(..., help="Merged PDF to write"),
    input_paths: List[str] = typer.Argument(..., help="PDFs to merge, in order"),
    title: Optional[str] = typer.Option(None, "--title"),
) -> None:
    """Merge PDFs into one file."""
    _run("merge-pdf", {"inputPaths": input_paths, "outputPath": output_path, "title": title})


@app.command("split-pdf")
def split_pdf_cmd(
    input_path: str,
    output_dir: str,
    ranges: Optional[List[str]] = typer.Option(None, "--range", "-r", help='Page range, e.g. "1-3"; repeatable'),
    prefix: Optional[str] = typer.Option(None, "--prefix"),
) -> None:
    """Split a PDF per page, or per --range when given."""
    _run(
        "split-pdf",
        {
            "inputPath": input_path,
            "outputDir": output_dir,
            "splitMode": "ranges" if ranges else "pages",
            "ranges": ranges or None,
            "prefix": prefix,
        },
    )


@app.command("pdf-to-image")
def pdf_to_image_cmd(
    input_path: str,
    output_dir: str,
    format: str = typer.Option("jpeg", "--format", "-f", help="jpeg or png"),
    quality: int = typer.Option(DEFAULT_IMAGE_QUALITY, min=1, max=100),
    dpi: int = typer.Option(DEFAULT_PDF_DPI, min=50, max=600),
    pages: Optional[str] = typer.Option(None, "--pages", "-p", help='"1-3", "1,3,5" or "3"'),
    prefix: Optional[str] = typer.Option(None, "--prefix"),
) -> None:
    """Render PDF pages to images."""
    _run(
        "pdf-to-image",
        {
            "inputPath": input_path,
            "outputDir": output_dir,
            "format": format,
            "quality": quality,
            "dpi": dpi,
            "pages": pages,
            "prefix": prefix,
        },
    )


if __name__ == "__main__":
    app()
