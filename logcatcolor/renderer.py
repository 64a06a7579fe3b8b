"""Stateful renderer: collapses repeated metadata into time deltas and colorizes.

Each input line is rendered against the state left by the previous one. When a
line has the same tag as the line before it and arrived within ``max_delta``,
its date/time/pid/tid column is replaced by ``+<delta>``, padded to the same
width so the level and tag columns stay aligned. Lines that aren't threadtime
records are returned unchanged and leave the state alone.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from logcatcolor.colors import Palette
from logcatcolor.parser import parse_line

DEFAULT_MAX_DELTA = timedelta(seconds=10)

_MICROSECOND = timedelta(microseconds=1)
_US_PER_MS = 1_000
_US_PER_SECOND = 1_000_000
_US_PER_MINUTE = 60 * _US_PER_SECOND
_US_PER_HOUR = 60 * _US_PER_MINUTE


@dataclass(frozen=True)
class RenderState:
    last_tag: str = ""
    last_timestamp: datetime | None = None
    last_other: str = ""


def _trim_fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_delta(delta: timedelta) -> str:
    """Render a duration compactly: 0s, 1ms, 1.5s, 2m3.25s, 1h0m5s."""
    us = delta // _MICROSECOND
    if us == 0:
        return "0s"
    sign = "-" if us < 0 else ""
    us = abs(us)

    if us < _US_PER_MS:
        return f"{sign}{us}µs"
    if us < _US_PER_SECOND:
        return f"{sign}{_trim_fraction(us, _US_PER_MS)}ms"

    hours, rest = divmod(us, _US_PER_HOUR)
    minutes, rest = divmod(rest, _US_PER_MINUTE)
    seconds = _trim_fraction(rest, _US_PER_SECOND) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


def render_line(
    line: str,
    state: RenderState,
    max_delta: timedelta,
    palette: Palette,
) -> tuple[str, RenderState]:
    """Render one raw line. Returns the output text and the state for the next line."""
    entry = parse_line(line)
    if entry is None or not palette.has_level(entry.level):
        return line.rstrip("\r\n"), state

    new_state = state
    delta = None
    if state.last_timestamp is not None:
        delta = entry.timestamp - state.last_timestamp

    if (
        delta is not None
        and entry.tag == state.last_tag
        and delta.total_seconds() < max_delta.total_seconds()
    ):
        metadata = ("+" + format_delta(delta)).ljust(entry.level_index)
    else:
        metadata = entry.metadata
        new_state = replace(new_state, last_timestamp=entry.timestamp, last_other=entry.other)

    output = (
        f"{metadata}{palette.level_text(entry.level, entry.level)} "
        f"{palette.tag_text(entry.tag)}{entry.tag_padding} : "
        f"{palette.level_text(entry.level, entry.message)}"
    )
    return output, replace(new_state, last_tag=entry.tag)


class Renderer:
    """Owns the render state for one stream session."""

    def __init__(self, palette: Palette, max_delta: timedelta = DEFAULT_MAX_DELTA):
        self.palette = palette
        self.max_delta = max_delta
        self.state = RenderState()

    def render(self, line: str) -> str:
        output, self.state = render_line(line, self.state, self.max_delta, self.palette)
        return output

    def reset(self) -> None:
        self.state = RenderState()
