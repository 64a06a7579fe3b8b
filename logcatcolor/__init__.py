"""logcatcolor: colorized, deduplicated adb logcat output."""

__version__ = "0.1.0"
