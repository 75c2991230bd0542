"""Tests for the page range mini-language."""

import pytest

from fileops_backend.errors import FileOpsError, InvalidRangeSyntax
from fileops_backend.ranges import describe_pages, parse_range


@pytest.mark.parametrize(
    ("spec", "expected"),
    [
        ("2-5", [2, 3, 4, 5]),
        ("7", [7]),
        ("1,3,5", [1, 3, 5]),
        ("5,1,3", [5, 1, 3]),
        ("3,3", [3, 3]),
        ("4-4", [4]),
        (" 2 - 3 ", [2, 3]),
        ("1, 2 ,10", [1, 2, 10]),
        ("10", [10]),
    ],
)
def test_parse_range_valid(spec, expected):
    """Test the three accepted forms."""
    assert parse_range(spec, 10) == expected


@pytest.mark.parametrize(
    "spec",
    [
        "5-2",  # descending
        "11",  # out of bound
        "0",  # pages are 1-based
        "1-11",
        "1,11",
        "a",
        "1-b",
        "1-2-3",  # more than one separator
        "-3",
        "3-",
        "1,,2",
        "1,",
        "",
        "   ",
        "1.5",
        "1-3,5",
    ],
)
def test_parse_range_invalid(spec):
    """Test that malformed or out-of-bound specs fail instead of clamping."""
    with pytest.raises(InvalidRangeSyntax):
        parse_range(spec, 10)


def test_invalid_range_is_value_error_and_fileops_error():
    """Test the exception hierarchy callers rely on."""
    with pytest.raises(ValueError):
        parse_range("x", 3)
    with pytest.raises(FileOpsError):
        parse_range("x", 3)


def test_error_message_names_spec_and_bound():
    """Test that the message is descriptive."""
    with pytest.raises(InvalidRangeSyntax) as exc_info:
        parse_range("12", 10)

    assert "12" in str(exc_info.value)
    assert "1-10" in str(exc_info.value)


def test_zero_upper_bound_rejects_everything():
    """Test parsing against an empty document."""
    with pytest.raises(InvalidRangeSyntax):
        parse_range("1", 0)


@pytest.mark.parametrize(
    ("pages", "label"),
    [
        ([3], "3"),
        ([2, 3, 4, 5], "2-5"),
        ([1, 3, 5], "1_3_5"),
        ([3, 2], "3_2"),
        ([], ""),
    ],
)
def test_describe_pages(pages, label):
    """Test filename labels for page selections."""
    assert describe_pages(pages) == label
