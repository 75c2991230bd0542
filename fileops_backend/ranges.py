"""Page range mini-language shared by split-pdf and pdf-to-image.

Three forms, all 1-based:

    "7"      -> [7]
    "1,3,5"  -> [1, 3, 5]      (order kept as given, no sort, no dedup)
    "2-5"    -> [2, 3, 4, 5]   (start must not exceed end)

Every value must fall in [1, upper_bound]; nothing is clamped.
"""
from __future__ import annotations

import re

from .errors import InvalidRangeSyntax

_NUMBER_RE = re.compile(r"^[0-9]+$")

SUPPORTED_FORMS = '"1-5", "1,3,5" or "3"'


def _parse_number(token: str, spec: str, upper_bound: int) -> int:
    token = token.strip()
    if not _NUMBER_RE.match(token):
        raise InvalidRangeSyntax(
            f'Invalid page range "{spec}": "{token}" is not a page number (supported: {SUPPORTED_FORMS})'
        )
    value = int(token)
    if value < 1 or value > upper_bound:
        raise InvalidRangeSyntax(
            f'Invalid page range "{spec}": page {value} is outside 1-{upper_bound}'
        )
    return value


def parse_range(spec: str, upper_bound: int) -> list[int]:
    """Parse a range specification into an ordered list of page numbers."""
    if not isinstance(spec, str) or not spec.strip():
        raise InvalidRangeSyntax(f"Empty page range (supported: {SUPPORTED_FORMS})")
    if upper_bound < 1:
        raise InvalidRangeSyntax(f'Invalid page range "{spec}": document has no pages')

    text = spec.strip()
    if "-" in text:
        parts = text.split("-")
        if len(parts) != 2:
            raise InvalidRangeSyntax(
                f'Invalid page range "{spec}": expected "start-end" (supported: {SUPPORTED_FORMS})'
            )
        start = _parse_number(parts[0], spec, upper_bound)
        end = _parse_number(parts[1], spec, upper_bound)
        if start > end:
            raise InvalidRangeSyntax(
                f'Invalid page range "{spec}": start {start} is after end {end}'
            )
        return list(range(start, end + 1))

    if "," in text:
        return [_parse_number(token, spec, upper_bound) for token in text.split(",")]

    return [_parse_number(text, spec, upper_bound)]


def describe_pages(pages: list[int]) -> str:
    """Short filename-safe label: "2-5" for a contiguous run, "1_3_5" otherwise."""
    if not pages:
        return ""
    if len(pages) == 1:
        return str(pages[0])
    if pages == list(range(pages[0], pages[0] + len(pages))):
        return f"{pages[0]}-{pages[-1]}"
    return "_".join(str(p) for p in pages)
