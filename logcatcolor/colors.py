"""ANSI palettes for log levels and tags."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

RESET = "\033[0m"

# ANSI color codes
LEVEL_COLORS = {
    "V": "\033[37m",  # white
    "D": "\033[34m",  # blue
    "I": "\033[32m",  # green
    "W": "\033[33m",  # yellow
    "E": "\033[31m",  # red
    "F": "\033[35m",  # magenta
}
TAG_COLOR = "\033[30;46m"  # black on cyan


@dataclass(frozen=True)
class Palette:
    levels: Mapping[str, str] = field(default_factory=lambda: dict(LEVEL_COLORS))
    tag: str = TAG_COLOR

    def __post_init__(self):
        # levels is read-only
        object.__setattr__(self, "levels", MappingProxyType(dict(self.levels)))

    def has_level(self, level: str) -> bool:
        return level in self.levels

    def level_text(self, level: str, text: str) -> str:
        return paint(text, self.levels.get(level, ""))

    def tag_text(self, text: str) -> str:
        return paint(text, self.tag)


def paint(text: str, color: str) -> str:
    """Wrap text in an SGR sequence. An empty color leaves the text alone."""
    if not color:
        return text
    return f"{color}{text}{RESET}"


def plain_palette() -> Palette:
    """Palette that knows every level but emits no escape sequences."""
    return Palette(levels={level: "" for level in LEVEL_COLORS}, tag="")


def get_palette(color: bool = True) -> Palette:
    """Factory that returns the right palette for the output."""
    if color:
        return Palette()
    return plain_palette()
