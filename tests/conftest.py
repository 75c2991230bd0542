"""Shared fixtures for file operation tests."""

from pathlib import Path

import pytest
from PIL import Image
from pypdf import PdfWriter


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a small source tree.

    Layout:
        src/docs/guide.md
        src/docs/img/logo.bin
        src/docs/img/empty.txt   (0 bytes)
        src/docs/notes/          (empty folder)
        src/readme.txt

    Returns:
        The src directory.
    """
    src = tmp_path / "src"
    (src / "docs" / "img").mkdir(parents=True)
    (src / "docs" / "notes").mkdir()
    (src / "docs" / "guide.md").write_text("# Guide\n" + "lorem ipsum " * 200, encoding="utf-8")
    (src / "docs" / "img" / "logo.bin").write_bytes(bytes(range(256)) * 8)
    (src / "docs" / "img" / "empty.txt").write_bytes(b"")
    (src / "readme.txt").write_text("read me\n", encoding="utf-8")
    return src


@pytest.fixture
def make_pdf(tmp_path: Path):
    """Factory writing a PDF with the given number of blank pages."""

    def _make(name: str = "doc.pdf", pages: int = 3) -> Path:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=200, height=200)
        path = tmp_path / name
        with open(path, "wb") as fh:
            writer.write(fh)
        return path

    return _make


@pytest.fixture
def make_image(tmp_path: Path):
    """Factory writing a noisy RGB image so compression has work to do."""

    def _make(name: str = "photo.png", size: tuple[int, int] = (320, 240)) -> Path:
        img = Image.effect_noise(size, 64).convert("RGB")
        path = tmp_path / name
        img.save(path)
        return path

    return _make


@pytest.fixture
def read_tree():
    """Return a function mapping relative POSIX path -> bytes for every file under a root."""

    def _read(root: Path) -> dict[str, bytes]:
        return {
            p.relative_to(root).as_posix(): p.read_bytes()
            for p in sorted(root.rglob("*"))
            if p.is_file()
        }

    return _read
