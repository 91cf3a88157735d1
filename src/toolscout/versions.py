"""Version string parsing and ordering."""

from __future__ import annotations

import re
from enum import IntEnum
from itertools import zip_longest
from typing import Tuple

from .errors import VersionParseError

# digits.digits.digits, optionally followed by pre-release and build metadata
VERSION_PATTERN = re.compile(
    r"(\d+\.\d+\.\d+(?:-[a-zA-Z0-9.-]+)?(?:\+[a-zA-Z0-9.-]+)?)"
)

_LEADING_DIGITS = re.compile(r"[0-9]*")


class Ordering(IntEnum):
    """Result of a three-way comparison."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def _segment_value(segment: str) -> int:
    digits = _LEADING_DIGITS.match(segment).group(0)
    return int(digits) if digits else 0


def version_segments(version: str) -> Tuple[int, ...]:
    """Numeric value of each dot-separated segment of ``version``.

    Trailing non-digit text in a segment is dropped ("0-beta" -> 0) and a
    segment without leading digits counts as 0.

    Examples:
        >>> version_segments("1.0.17-beta")
        (1, 0, 17)
        >>> version_segments("v20.1")
        (0, 1)
    """
    return tuple(_segment_value(segment) for segment in version.split("."))


def compare_versions(a: str, b: str) -> Ordering:
    """Compare two version strings field by field.

    Missing fields count as zero, so "1.2" equals "1.2.0". Pre-release
    suffixes are ignored: "2.0.0-beta" equals "2.0.0". This is deliberately
    not semver precedence.
    """
    for left, right in zip_longest(version_segments(a), version_segments(b), fillvalue=0):
        if left != right:
            return Ordering.GREATER if left > right else Ordering.LESS
    return Ordering.EQUAL


def extract_version(output: str) -> str:
    """Return the first semantic version found in command output.

    Raises:
        VersionParseError: If the output contains no x.y.z version
    """
    match = VERSION_PATTERN.search(output)
    if not match:
        raise VersionParseError(f"No version found in output: {output.strip()[:80]!r}")
    return match.group(1)


def normalize_runtime_version(output: str) -> str:
    """Normalize ``node --version`` output ("v20.11.0\\n" -> "20.11.0")."""
    version = output.strip()
    if version.startswith("v"):
        version = version[1:]
    if not version:
        raise VersionParseError("Empty runtime version output")
    return version
