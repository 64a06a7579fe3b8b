"""Configuration loading from CLI args, env vars, and optional YAML file."""

import os
import re
import logging
from dataclasses import dataclass, field
from datetime import timedelta

import yaml

from logcatcolor.parser import LEVELS
from logcatcolor.renderer import DEFAULT_MAX_DELTA

logger = logging.getLogger(__name__)

USB_DEVICE = "-d"
EMULATOR = "-e"

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Options:
    filters: list[str] = field(default_factory=list)
    tag: str = ""
    level: str = ""
    device: str = ""           # serial, "-d" (USB device), "-e" (emulator) or ""
    max_delta: timedelta = DEFAULT_MAX_DELTA
    keep_going: bool = False
    adb_path: str = "adb"
    restart_delay: float = 1.0
    color: bool = True
    input_path: str | None = None  # "-" reads stdin instead of running adb


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``10s``, ``500ms``, ``1m30s`` or ``1.5h``.

    Raises ValueError for anything else. A bare ``0`` is accepted.
    """
    s = text.strip()
    sign = 1
    if s[:1] in ("-", "+"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration: {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        match = _DURATION_PART.match(s, pos)
        if not match:
            raise ValueError(f"invalid duration: {text!r}")
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        pos = match.end()
    try:
        return timedelta(seconds=sign * total)
    except OverflowError:
        raise ValueError(f"invalid duration: {text!r}") from None


def parse_level(value: str) -> str:
    """Normalize a level filter to one of V/D/I/W/E/F."""
    level = str(value).strip().upper()
    if level not in LEVELS:
        raise ValueError(f"invalid level {value!r}, expected one of {'/'.join(LEVELS)}")
    return level


def load_yaml_config(path: str | None) -> dict:
    """Load option defaults from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    logger.info("Loaded YAML config from %s", path)
    return data


def _yaml_options(yaml_data: dict) -> dict:
    """Validate YAML values and convert them to Options field values."""
    values = {}
    try:
        if "filters" in yaml_data:
            filters = yaml_data["filters"] or []
            if isinstance(filters, str):
                filters = [filters]
            values["filters"] = [str(f) for f in filters]
        if yaml_data.get("tag"):
            values["tag"] = str(yaml_data["tag"])
        if yaml_data.get("level"):
            values["level"] = parse_level(yaml_data["level"])
        if yaml_data.get("device"):
            values["device"] = str(yaml_data["device"])
        if "delta" in yaml_data:
            values["max_delta"] = parse_duration(str(yaml_data["delta"]))
        if "keep_going" in yaml_data:
            values["keep_going"] = _parse_bool(yaml_data["keep_going"])
        if "restart_delay" in yaml_data:
            values["restart_delay"] = float(yaml_data["restart_delay"])
        if yaml_data.get("adb_path"):
            values["adb_path"] = str(yaml_data["adb_path"])
        if "color" in yaml_data:
            values["color"] = _parse_bool(yaml_data["color"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid config value: {e}") from e
    return values


def _env_options() -> dict:
    values = {}
    try:
        if os.environ.get("ADB_PATH"):
            values["adb_path"] = os.environ["ADB_PATH"]
        if os.environ.get("LOGCAT_MAX_DELTA"):
            values["max_delta"] = parse_duration(os.environ["LOGCAT_MAX_DELTA"])
        if os.environ.get("LOGCAT_RESTART_DELAY"):
            values["restart_delay"] = float(os.environ["LOGCAT_RESTART_DELAY"])
    except ValueError as e:
        raise ConfigError(f"invalid environment value: {e}") from e
    return values


def _cli_options(cli_args) -> dict:
    values = {}
    if getattr(cli_args, "filters", None):
        values["filters"] = list(cli_args.filters)
    if getattr(cli_args, "tag", None):
        values["tag"] = cli_args.tag
    if getattr(cli_args, "level", None):
        values["level"] = cli_args.level

    # -e wins over -d
    if getattr(cli_args, "emulator", False):
        values["device"] = EMULATOR
    elif getattr(cli_args, "device", None):
        values["device"] = cli_args.device

    if getattr(cli_args, "delta", None) is not None:
        values["max_delta"] = cli_args.delta
    if getattr(cli_args, "keep_going", False):
        values["keep_going"] = True
    if getattr(cli_args, "no_color", False):
        values["color"] = False
    if getattr(cli_args, "input", None):
        values["input_path"] = cli_args.input
    return values


def load_options(cli_args, yaml_data: dict) -> Options:
    """Build Options from CLI args, env vars, and parsed YAML data.

    Precedence: CLI > environment > YAML > defaults.
    """
    values = {}
    values.update(_yaml_options(yaml_data))
    values.update(_env_options())
    values.update(_cli_options(cli_args))
    return Options(**values)
