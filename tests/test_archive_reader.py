"""Tests for archive extraction, including create/extract round trips."""

import gzip
import io
import os
import tarfile
import warnings
import zipfile

import pytest

from fileops_backend.archive_reader import TarExtractor, ZipExtractor, extract_archive, get_extractor
from fileops_backend.archive_writer import create_archive
from fileops_backend.errors import (
    AlreadyExistsError,
    ArchiveReadError,
    NotFoundError,
    TargetNotEmptyError,
    UnsupportedFormatError,
)
from fileops_backend.formats import ArchiveFormat
from fileops_backend.models import ArchiveSpec, ExtractionSpec


def _pack(inputs, output, fmt):
    return create_archive(ArchiveSpec(inputs=tuple(inputs), output_path=output, format=fmt))


@pytest.mark.parametrize(
    ("fmt", "name"),
    [
        (ArchiveFormat.ZIP, "out.zip"),
        (ArchiveFormat.TAR, "out.tar"),
        (ArchiveFormat.TAR_GZ, "out.tar.gz"),
    ],
)
def test_round_trip_preserves_names_and_bytes(sample_tree, tmp_path, read_tree, fmt, name):
    """Test create then extract yields byte-identical files for every format."""
    archive = tmp_path / name
    _pack([sample_tree / "docs", sample_tree / "readme.txt"], archive, fmt)
    target = tmp_path / "restored"

    result = extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))

    assert read_tree(target) == read_tree(sample_tree)
    assert result.items_processed == 4
    assert result.total_bytes_out == sum(len(b) for b in read_tree(sample_tree).values())
    assert result.total_bytes_in == archive.stat().st_size
    assert sorted(p.relative_to(target).as_posix() for p in result.output_paths) == sorted(read_tree(target))


def test_zip_scenario_docs_and_readme(sample_tree, tmp_path):
    """Test the documented scenario: ['docs/', 'readme.txt'] -> out.zip -> fresh dir."""
    archive = tmp_path / "out.zip"
    _pack([sample_tree / "docs", sample_tree / "readme.txt"], archive, ArchiveFormat.ZIP)
    target = tmp_path / "fresh"
    target.mkdir()

    extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))

    for src in (sample_tree / "docs").rglob("*"):
        restored = target / "docs" / src.relative_to(sample_tree / "docs")
        assert restored.exists()
        if src.is_file():
            assert restored.stat().st_size == src.stat().st_size
    assert (target / "docs" / "notes").is_dir()
    assert (target / "readme.txt").stat().st_size == (sample_tree / "readme.txt").stat().st_size


def test_tgz_suffix_is_tar_gzip(sample_tree, tmp_path, read_tree):
    """Test that a .tgz name dispatches to the gzip TAR extractor."""
    archive = tmp_path / "a.b.tar.gz"
    _pack([sample_tree / "readme.txt"], archive, ArchiveFormat.TAR_GZ)
    renamed = archive.rename(tmp_path / "bundle.tgz")

    extract_archive(ExtractionSpec(archive_path=renamed, target_dir=tmp_path / "t"))

    assert read_tree(tmp_path / "t") == {"readme.txt": b"read me\n"}


def test_non_empty_target_without_overwrite_fails_and_writes_nothing(sample_tree, tmp_path):
    """Test the whole-directory emptiness precondition."""
    archive = tmp_path / "out.zip"
    _pack([sample_tree / "readme.txt"], archive, ArchiveFormat.ZIP)
    target = tmp_path / "busy"
    target.mkdir()
    (target / "keep.txt").write_text("mine")

    with pytest.raises(TargetNotEmptyError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))

    assert [p.name for p in target.iterdir()] == ["keep.txt"]


def test_target_not_empty_is_an_already_exists_error():
    """Test the error hierarchy."""
    assert issubclass(TargetNotEmptyError, AlreadyExistsError)


def test_overwrite_counts_only_archive_files(sample_tree, tmp_path):
    """Test that pre-existing files are not reported as extracted."""
    archive = tmp_path / "out.zip"
    _pack([sample_tree / "docs"], archive, ArchiveFormat.ZIP)
    target = tmp_path / "busy"
    target.mkdir()
    (target / "keep.txt").write_text("mine")
    (target / "docs").mkdir()
    (target / "docs" / "guide.md").write_text("old")

    result = extract_archive(ExtractionSpec(archive_path=archive, target_dir=target, overwrite=True))

    assert result.items_processed == 3
    assert (target / "keep.txt").read_text() == "mine"
    assert (target / "docs" / "guide.md").read_bytes() == (sample_tree / "docs" / "guide.md").read_bytes()


def test_target_dir_is_created(sample_tree, tmp_path):
    """Test that a missing target directory is created."""
    archive = tmp_path / "out.tar"
    _pack([sample_tree / "readme.txt"], archive, ArchiveFormat.TAR)
    target = tmp_path / "deep" / "new" / "dir"

    result = extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))

    assert (target / "readme.txt").is_file()
    assert result.items_processed == 1


def test_target_that_is_a_file_is_rejected(sample_tree, tmp_path):
    """Test extracting onto an existing regular file."""
    archive = tmp_path / "out.zip"
    _pack([sample_tree / "readme.txt"], archive, ArchiveFormat.ZIP)
    target = tmp_path / "file"
    target.write_text("x")

    with pytest.raises(AlreadyExistsError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=target, overwrite=True))


def test_missing_archive(tmp_path):
    """Test a missing archive path."""
    with pytest.raises(NotFoundError):
        extract_archive(ExtractionSpec(archive_path=tmp_path / "gone.zip", target_dir=tmp_path / "t"))


def test_unsupported_suffix(tmp_path):
    """Test that format detection is by suffix only."""
    archive = tmp_path / "data.rar"
    archive.write_bytes(b"Rar!")

    with pytest.raises(UnsupportedFormatError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=tmp_path / "t"))
    assert not (tmp_path / "t").exists()


@pytest.mark.parametrize("name", ["broken.zip", "broken.tar", "broken.tar.gz"])
def test_corrupt_archive_raises_read_error(tmp_path, name):
    """Test corrupt streams for every format."""
    archive = tmp_path / name
    archive.write_bytes(b"this is not an archive at all" * 20)

    with pytest.raises(ArchiveReadError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=tmp_path / "t"))


def test_plain_gzip_that_is_not_tar_raises_read_error(tmp_path):
    """Test a .gz suffix on a gzip stream without a TAR inside."""
    archive = tmp_path / "notes.gz"
    archive.write_bytes(gzip.compress(b"just text, no tar header" * 50))

    with pytest.raises(ArchiveReadError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=tmp_path / "t"))


def test_zip_slip_member_is_rejected(tmp_path):
    """Test that a ZIP member escaping the target is refused before writing."""
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("ok.txt", "fine")
        zf.writestr("../escape.txt", "bad")
    target = tmp_path / "t"

    with pytest.raises(ArchiveReadError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))

    assert not (tmp_path / "escape.txt").exists()
    assert list(target.iterdir()) == []


def test_tar_traversal_member_is_rejected(tmp_path):
    """Test that the TAR data filter refuses members outside the target."""
    archive = tmp_path / "evil.tar"
    payload = b"bad"
    with tarfile.open(archive, "w") as tf:
        info = tarfile.TarInfo("../escape.txt")
        info.size = len(payload)
        tf.addfile(info, io.BytesIO(payload))

    with pytest.raises(ArchiveReadError):
        extract_archive(ExtractionSpec(archive_path=archive, target_dir=tmp_path / "t"))
    assert not (tmp_path / "escape.txt").exists()


def test_extractors_share_one_interface(sample_tree, tmp_path):
    """Test that each format maps to an extractor returning file paths."""
    assert isinstance(get_extractor(ArchiveFormat.ZIP), ZipExtractor)
    assert isinstance(get_extractor(ArchiveFormat.TAR), TarExtractor)
    assert isinstance(get_extractor(ArchiveFormat.TAR_GZ), TarExtractor)

    archive = tmp_path / "x.tar.gz"
    _pack([sample_tree / "docs"], archive, ArchiveFormat.TAR_GZ)
    target = tmp_path / "t"
    target.mkdir()

    files = get_extractor(ArchiveFormat.TAR_GZ).extract(archive, target)

    assert sorted(p.relative_to(target).as_posix() for p in files) == [
        "docs/guide.md",
        "docs/img/empty.txt",
        "docs/img/logo.bin",
    ]


def test_vanished_file_is_skipped_in_size_total(sample_tree, tmp_path, monkeypatch):
    """Test that a file disappearing before it is measured does not fail the call."""
    archive = tmp_path / "out.tar"
    _pack([sample_tree / "docs"], archive, ArchiveFormat.TAR)
    original = TarExtractor.extract

    def extract_then_delete(self, archive_path, target_dir):
        files = original(self, archive_path, target_dir)
        files[0].unlink()
        return files

    monkeypatch.setattr(TarExtractor, "extract", extract_then_delete)

    result = extract_archive(ExtractionSpec(archive_path=archive, target_dir=tmp_path / "t"))

    assert result.items_processed == 3
    assert result.total_bytes_out < sum(
        p.stat().st_size for p in (sample_tree / "docs").rglob("*") if p.is_file()
    )


@pytest.mark.parametrize(
    ("fmt", "name"),
    [
        (ArchiveFormat.ZIP, "out.zip"),
        (ArchiveFormat.TAR, "out.tar"),
        (ArchiveFormat.TAR_GZ, "out.tar.gz"),
    ],
)
def test_round_trip_with_colon_in_filename(tmp_path, read_tree, fmt, name):
    """Test that POSIX names containing a colon survive create then extract."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "10:30 notes.txt").write_text("meeting notes")
    archive = tmp_path / name
    _pack([src], archive, fmt)
    target = tmp_path / "restored"

    result = extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))

    assert read_tree(target) == {"src/10:30 notes.txt": b"meeting notes"}
    assert result.items_processed == 1


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs not supported")
@pytest.mark.parametrize(
    ("fmt", "name"),
    [
        (ArchiveFormat.ZIP, "out.zip"),
        (ArchiveFormat.TAR, "out.tar"),
        (ArchiveFormat.TAR_GZ, "out.tar.gz"),
    ],
)
def test_special_files_are_left_out_of_the_round_trip(tmp_path, read_tree, caplog, fmt, name):
    """Test that a FIFO inside an input folder is skipped, not read or stored."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "f.txt").write_text("data")
    os.mkfifo(src / "pipe")
    archive = tmp_path / name

    created = _pack([src], archive, fmt)
    extracted = extract_archive(ExtractionSpec(archive_path=archive, target_dir=tmp_path / "t"))

    assert created.items_processed == 1
    assert extracted.items_processed == 1
    assert read_tree(tmp_path / "t") == {"src/f.txt": b"data"}
    assert "not a regular file" in caplog.text


def test_duplicate_member_names_count_once_for_every_format(tmp_path):
    """Test that ZIP and TAR report the same counts for colliding inputs."""
    first = tmp_path / "a" / "data"
    second = tmp_path / "b" / "data"
    first.mkdir(parents=True)
    second.mkdir(parents=True)
    (first / "x.txt").write_bytes(b"1234")
    (second / "x.txt").write_bytes(b"12")

    results = {}
    for fmt, name in ((ArchiveFormat.ZIP, "dup.zip"), (ArchiveFormat.TAR, "dup.tar")):
        archive = tmp_path / name
        with warnings.catch_warnings():
            # zipfile warns about the repeated name.
            warnings.simplefilter("ignore", UserWarning)
            _pack([first, second], archive, fmt)
        target = tmp_path / f"out-{fmt.name}"
        results[fmt] = extract_archive(ExtractionSpec(archive_path=archive, target_dir=target))
        assert (target / "data" / "x.txt").read_bytes() == b"12"

    zip_result, tar_result = results[ArchiveFormat.ZIP], results[ArchiveFormat.TAR]
    assert tar_result.items_processed == zip_result.items_processed == 1
    assert tar_result.total_bytes_out == zip_result.total_bytes_out == 2
