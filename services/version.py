"""Dotted version strings as comparable integers."""
from __future__ import annotations

import re
from enum import Enum

from nvidia_update_checker.errors import VersionParseError

SEPARATOR = "."
DEFAULT_SEGMENT_WIDTH = 2

_VERSION_PREFIX = re.compile(r"^\s*(\d+(?:\.\d+)+)")


class Comparison(Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def normalize(raw: str, *, width: int = DEFAULT_SEGMENT_WIDTH) -> int:
    """Turn ``"27.21"`` into ``2721``.

    Segments after the first are left-padded to ``width`` digits, so ``"30.0"``
    becomes ``3000`` and integer order follows dotted order. Anything other than
    digits separated by single dots is rejected.
    """
    text = (raw or "").strip()
    if not text:
        raise VersionParseError(f"Empty version string: {raw!r}")
    head, *tail = text.split(SEPARATOR)
    for segment in (head, *tail):
        if not segment.isdigit() or not segment.isascii():
            raise VersionParseError(f"Malformed version string: {raw!r}")
    for segment in tail:
        if len(segment) > width:
            raise VersionParseError(f"Version segment '{segment}' wider than {width} digits in {raw!r}")
    return int(head + "".join(segment.zfill(width) for segment in tail))


def align_segments(left: str, right: str) -> tuple[str, str]:
    """Pad the shorter of two dotted versions with ``.0`` so both normalize to the same shape."""
    left, right = left.strip(), right.strip()
    missing = left.count(SEPARATOR) - right.count(SEPARATOR)
    if missing > 0:
        right += ".0" * missing
    elif missing < 0:
        left += ".0" * -missing
    return left, right


def compare(left: int, right: int) -> Comparison:
    if left < right:
        return Comparison.LESS
    if left > right:
        return Comparison.GREATER
    return Comparison.EQUAL


def extract_version_prefix(text: str) -> str:
    """Leading dotted version of a label such as ``"372.90  WHQL"``."""
    match = _VERSION_PREFIX.match(text or "")
    if not match:
        raise VersionParseError(f"No version number found in {text!r}")
    return match.group(1)
