import os
from itertools import islice

import pytest

from app.services.filename_resolver import iter_candidates, resolve_filename, split_filename


def touch(directory, *names):
    for name in names:
        (directory / name).write_bytes(b"")


def test_unused_name_is_returned_unchanged(tmp_path):
    touch(tmp_path, "other.pdf")
    assert resolve_filename(tmp_path, "report.pdf") == "report.pdf"


def test_smallest_unused_suffix(tmp_path):
    touch(tmp_path, "report.pdf")
    assert resolve_filename(tmp_path, "report.pdf") == "report-1.pdf"

    touch(tmp_path, "report-1.pdf", "report-2.pdf")
    assert resolve_filename(tmp_path, "report.pdf") == "report-3.pdf"


def test_gap_in_suffixes_is_filled(tmp_path):
    touch(tmp_path, "report.pdf", "report-1.pdf", "report-3.pdf")
    assert resolve_filename(tmp_path, "report.pdf") == "report-2.pdf"


def test_resolution_does_not_create_anything(tmp_path):
    """Resolving twice without a write gives the same name."""
    touch(tmp_path, "report.pdf")
    first = resolve_filename(tmp_path, "report.pdf")
    second = resolve_filename(tmp_path, "report.pdf")
    assert first == second == "report-1.pdf"
    assert os.listdir(tmp_path) == ["report.pdf"]


def test_name_without_extension(tmp_path):
    touch(tmp_path, "README")
    assert resolve_filename(tmp_path, "README") == "README-1"


def test_suffix_goes_before_last_extension(tmp_path):
    touch(tmp_path, "archive.tar.gz")
    assert resolve_filename(tmp_path, "archive.tar.gz") == "archive.tar-1.gz"


def test_directories_and_dangling_links_count_as_taken(tmp_path):
    (tmp_path / "report.pdf").mkdir()
    os.symlink(tmp_path / "missing-target", tmp_path / "report-1.pdf")
    assert resolve_filename(tmp_path, "report.pdf") == "report-2.pdf"


def test_empty_filename_rejected(tmp_path):
    with pytest.raises(ValueError):
        resolve_filename(tmp_path, "")


@pytest.mark.parametrize("filename, expected", [
    ("report.pdf", ("report", ".pdf")),
    ("report", ("report", "")),
    ("my.report.docx", ("my.report", ".docx")),
    (".profile", (".profile", "")),
])
def test_split_filename(filename, expected):
    assert split_filename(filename) == expected


def test_candidate_sequence():
    assert list(islice(iter_candidates("cv.docx"), 4)) == ["cv.docx", "cv-1.docx", "cv-2.docx", "cv-3.docx"]
