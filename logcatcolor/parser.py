"""Logcat threadtime line parser: field offsets + frozen dataclass."""

import re
from dataclasses import dataclass
from datetime import datetime

# 04-19 19:34:18.813  5587  5708 I artd    : GetBestInfo no usable artifacts
FIELD_COUNT = 6
DATE_FIELD, TIME_FIELD, PID_FIELD, TID_FIELD, LEVEL_FIELD, TAG_FIELD = range(FIELD_COUNT)

LEVELS = ("V", "D", "I", "W", "E", "F")

TIMESTAMP_PATTERN = re.compile(r"^\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}$")

# Logcat omits the year. A leap year keeps 02-29 parseable.
TIMESTAMP_YEAR = 2000
TIMESTAMP_FORMAT = "%Y %m-%d %H:%M:%S.%f"


@dataclass(frozen=True)
class LogLine:
    raw: str
    timestamp: datetime
    level: str
    tag: str
    tag_padding: str
    message: str
    metadata: str
    other: str

    @property
    def level_index(self) -> int:
        return len(self.metadata)


def find_field_indices(line: str, max_fields: int) -> list[int]:
    """Return the start offset of each space-delimited field, up to max_fields."""
    indices = []
    in_field = False

    for i, char in enumerate(line):
        if char == " ":
            in_field = False
        elif not in_field:
            indices.append(i)
            in_field = True
            if len(indices) >= max_fields:
                break

    return indices


def parse_timestamp(line: str) -> datetime:
    """Parse the leading ``MM-DD HH:MM:SS.mmm`` of a line.

    Raises ValueError if the first two tokens don't have that exact shape.
    """
    parts = line.split(maxsplit=2)
    if len(parts) < 2:
        raise ValueError("invalid timestamp format")
    timestamp_str = f"{parts[0]} {parts[1]}"
    if not TIMESTAMP_PATTERN.match(timestamp_str):
        raise ValueError(f"invalid timestamp: {timestamp_str!r}")
    return datetime.strptime(f"{TIMESTAMP_YEAR} {timestamp_str}", TIMESTAMP_FORMAT)


def parse_line(line: str) -> LogLine | None:
    """Parse one threadtime line into a LogLine. Returns None for anything else."""
    stripped = line.rstrip("\r\n")
    parts = find_field_indices(stripped, FIELD_COUNT)
    if len(parts) < FIELD_COUNT:
        return None

    level_index = parts[LEVEL_FIELD]
    level = stripped[level_index]
    if level not in LEVELS:
        return None

    tag_index = parts[TAG_FIELD]
    colon_index = stripped.find(":", tag_index)
    if colon_index == -1:
        return None

    tag = stripped[tag_index:colon_index].rstrip()
    tag_padding = stripped[tag_index + len(tag):colon_index]

    try:
        timestamp = parse_timestamp(stripped)
    except ValueError:
        return None

    other = stripped[:parts[TIME_FIELD]] + stripped[parts[PID_FIELD]:level_index]

    return LogLine(
        raw=stripped,
        timestamp=timestamp,
        level=level,
        tag=tag,
        tag_padding=tag_padding,
        # Colon plus one space; the format always puts exactly one there.
        message=stripped[colon_index + 2:],
        metadata=stripped[:level_index],
        other=other,
    )
