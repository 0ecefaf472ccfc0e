"""Parse pasted GPS mark listings into GeoPoints.

One mark per line, e.g.::

    Reef Marker - S38.06.123 | E144.48.456
    Buoy 7 – 38 06 123 | 144 48 456

Each coordinate is degrees, minutes and thousandths of a minute. A line that
matches none of the grammars is skipped, never reported as an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, NamedTuple, Optional

from loguru import logger

from topmarks.layers.layer import GeoPoint

_NAME = r"^(?P<name>.+?)\s*[-–]\s*"
_SPLIT = r"\s*\|\s*"

# Optional hemisphere, space or dot separators.
_LOOSE = re.compile(
    _NAME
    + r"(?P<lat_hemi>[SN]?)(?P<lat_deg>\d{2,3})[ .](?P<lat_min>\d{2})[ .](?P<lat_frac>\d{3})"
    + _SPLIT
    + r"(?P<lng_hemi>[EW]?)(?P<lng_deg>\d{3})[ .](?P<lng_min>\d{2})[ .](?P<lng_frac>\d{3})$",
    re.IGNORECASE | re.ASCII,
)

# Hemisphere required, three-digit degrees, dots only.
_DOTTED = re.compile(
    _NAME
    + r"(?P<lat_hemi>[SN])(?P<lat_deg>\d{3})\.(?P<lat_min>\d{2})\.(?P<lat_frac>\d{3})"
    + _SPLIT
    + r"(?P<lng_hemi>[EW])(?P<lng_deg>\d{3})\.(?P<lng_min>\d{2})\.(?P<lng_frac>\d{3})$",
    re.IGNORECASE | re.ASCII,
)

# As _DOTTED, but latitude degrees may be two digits.
_DOTTED_SHORT = re.compile(
    _NAME
    + r"(?P<lat_hemi>[SN])(?P<lat_deg>\d{2,3})\.(?P<lat_min>\d{2})\.(?P<lat_frac>\d{3})"
    + _SPLIT
    + r"(?P<lng_hemi>[EW])(?P<lng_deg>\d{3})\.(?P<lng_min>\d{2})\.(?P<lng_frac>\d{3})$",
    re.IGNORECASE | re.ASCII,
)


class Capture(NamedTuple):
    """Raw components of one matched line, before numeric conversion."""

    name: str
    lat_hemi: str
    lat_deg: int
    lat_min: int
    lat_frac: int
    lng_hemi: str
    lng_deg: int
    lng_min: int
    lng_frac: int


Matcher = Callable[[str], Optional[Capture]]


def _regex_matcher(pattern: re.Pattern) -> Matcher:
    def match(line: str) -> Capture | None:
        m = pattern.match(line)
        if m is None:
            return None
        g = m.groupdict()
        return Capture(
            name=g["name"],
            lat_hemi=g["lat_hemi"].upper(),
            lat_deg=int(g["lat_deg"]),
            lat_min=int(g["lat_min"]),
            lat_frac=int(g["lat_frac"]),
            lng_hemi=g["lng_hemi"].upper(),
            lng_deg=int(g["lng_deg"]),
            lng_min=int(g["lng_min"]),
            lng_frac=int(g["lng_frac"]),
        )

    return match


# Tried in order; the first capture wins.
MATCHERS: tuple[Matcher, ...] = (
    _regex_matcher(_LOOSE),
    _regex_matcher(_DOTTED),
    _regex_matcher(_DOTTED_SHORT),
)


def to_decimal(hemisphere: str, degrees: int, minutes: int, fraction: int) -> float:
    """Convert degrees, minutes and thousandths of a minute to decimal degrees.

    ``S`` and ``W`` are negative. Any other letter, or none, is positive.
    """
    sign = -1 if hemisphere.upper() in ("S", "W") else 1
    return sign * (degrees + minutes / 60 + fraction / 60000)


def _in_range(point: GeoPoint) -> bool:
    return abs(point.lat) <= 90 and abs(point.lng) <= 180


def parse_line(line: str, strict: bool = False) -> GeoPoint | None:
    """Parse a single trimmed line into a GeoPoint.

    Args:
        line: One line of pasted text.
        strict: Also reject points outside +/-90 latitude or +/-180
            longitude. Off by default; out-of-range values pass through.

    Returns:
        The parsed GeoPoint, or None when no grammar matches.
    """
    for matcher in MATCHERS:
        capture = matcher(line)
        if capture is not None:
            break
    else:
        return None

    name = capture.name.strip()
    if not name:
        return None

    point = GeoPoint(
        name=name,
        lat=to_decimal(capture.lat_hemi, capture.lat_deg, capture.lat_min, capture.lat_frac),
        lng=to_decimal(capture.lng_hemi, capture.lng_deg, capture.lng_min, capture.lng_frac),
    )
    if strict and not _in_range(point):
        logger.debug(f"Out of range: {line!r}")
        return None
    return point


def candidate_lines(text: str) -> list[str]:
    """Split text into trimmed, non-blank lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_batch(text: str, strict: bool = False) -> list[GeoPoint]:
    """Parse every line of a paste, keeping matches in input order."""
    return parse_report(text, strict=strict).marks


@dataclass
class ParseReport:
    """Outcome of parsing a paste.

    Attributes:
        marks: Parsed points in input order.
        line_count: Number of non-blank lines considered.
        rejected: Lines that matched no grammar, in input order.
    """

    marks: list[GeoPoint] = field(default_factory=list)
    line_count: int = 0
    rejected: list[str] = field(default_factory=list)

    @property
    def parsed_count(self) -> int:
        return len(self.marks)


def parse_report(text: str, strict: bool = False) -> ParseReport:
    """Parse a paste and keep track of what was rejected."""
    report = ParseReport()
    for line in candidate_lines(text):
        report.line_count += 1
        point = parse_line(line, strict=strict)
        if point is None:
            logger.debug(f"Skipping unparsed line: {line!r}")
            report.rejected.append(line)
        else:
            report.marks.append(point)
    return report


def format_coordinate(value: float, axis: str) -> str:
    """Render decimal degrees as hemisphere + DDD.MM.FFF.

    Args:
        value: Decimal degrees.
        axis: "lat" or "lng".

    Returns:
        e.g. "S038.06.123" for -38.10205 on the "lat" axis.
    """
    if axis == "lat":
        hemisphere = "S" if value < 0 else "N"
    elif axis == "lng":
        hemisphere = "W" if value < 0 else "E"
    else:
        raise ValueError(f"Unknown axis: {axis}")

    total = round(abs(value) * 60000)
    degrees, rest = divmod(total, 60000)
    minutes, fraction = divmod(rest, 1000)
    return f"{hemisphere}{degrees:03d}.{minutes:02d}.{fraction:03d}"


def format_line(point: GeoPoint) -> str:
    """Render a GeoPoint as a line that parse_line accepts."""
    return (
        f"{point.name} - {format_coordinate(point.lat, 'lat')}"
        f" | {format_coordinate(point.lng, 'lng')}"
    )
