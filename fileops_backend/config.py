from __future__ import annotations

import os
from pathlib import Path


# Default folder for count-files / list-files when no folderPath is given.
# Override with env var FILEOPS_DEFAULT_FOLDER.
_folder_raw = os.environ.get("FILEOPS_DEFAULT_FOLDER")
if _folder_raw and _folder_raw.strip():
    DEFAULT_FOLDER = Path(_folder_raw).expanduser()
else:
    DEFAULT_FOLDER = Path.home() / "Desktop"

# Deflate level for ZIP, gzip hint for tar.gz (0-9).
DEFAULT_COMPRESSION_LEVEL = int(os.environ.get("FILEOPS_COMPRESSION_LEVEL", "6"))

# Image / PDF rendering defaults.
DEFAULT_IMAGE_QUALITY = int(os.environ.get("FILEOPS_IMAGE_QUALITY", "80"))
DEFAULT_PDF_DPI = int(os.environ.get("FILEOPS_PDF_DPI", "150"))

LOG_LEVEL = os.environ.get("FILEOPS_LOG_LEVEL", "WARNING").upper()

# Images accepted by compress-image.
ALLOWED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".tiff", ".gif"}

# Written into the metadata of generated PDFs.
PDF_PRODUCER = "File Operation Tools"
PDF_MERGER_CREATOR = "PDF Merger Tool"
PDF_SPLITTER_CREATOR = "PDF Splitter Tool"
