"""Tests for logcatcolor/renderer.py: dedup policy, state updates, colors."""

from datetime import datetime, timedelta

import pytest

from logcatcolor.colors import LEVEL_COLORS, RESET, TAG_COLOR, Palette, plain_palette
from logcatcolor.renderer import (
    DEFAULT_MAX_DELTA,
    RenderState,
    Renderer,
    format_delta,
    render_line,
)

METADATA_WIDTH = len("04-19 19:34:18.813  5587  5708 ")


def _line(time="19:34:18.813", level="I", tag="artd    ", message="GetBestInfo no usable artifacts"):
    return f"04-19 {time}  5587  5708 {level} {tag}: {message}"


def _render(line, state=None, max_delta=DEFAULT_MAX_DELTA, palette=None):
    return render_line(line, state or RenderState(), max_delta, palette or plain_palette())


# ── format_delta ─────────────────────────────────────────────────────

class TestFormatDelta:
    @pytest.mark.parametrize("delta, expected", [
        (timedelta(0), "0s"),
        (timedelta(microseconds=500), "500µs"),
        (timedelta(milliseconds=1), "1ms"),
        (timedelta(microseconds=1500), "1.5ms"),
        (timedelta(milliseconds=999), "999ms"),
        (timedelta(seconds=1), "1s"),
        (timedelta(milliseconds=1500), "1.5s"),
        (timedelta(seconds=10), "10s"),
        (timedelta(seconds=60), "1m0s"),
        (timedelta(minutes=2, seconds=3.25), "2m3.25s"),
        (timedelta(hours=1, seconds=5), "1h0m5s"),
        (timedelta(milliseconds=-5), "-5ms"),
    ])
    def test_format(self, delta, expected):
        assert format_delta(delta) == expected


# ── first line of a session ──────────────────────────────────────────

class TestFirstLine:
    def test_keeps_original_metadata(self):
        output, state = _render(_line())
        assert output == "04-19 19:34:18.813  5587  5708 I artd     : GetBestInfo no usable artifacts"
        assert state.last_tag == "artd"

    def test_records_timestamp_and_other(self):
        _, state = _render(_line())
        assert state.last_timestamp == datetime(2000, 4, 19, 19, 34, 18, 813000)
        assert state.last_other == "04-19 5587  5708 "


# ── deduplication ────────────────────────────────────────────────────

class TestDedup:
    def test_same_tag_within_threshold_shows_delta(self):
        _, state = _render(_line())
        output, _ = _render(_line(time="19:34:18.814"), state)
        assert output[:METADATA_WIDTH] == "+1ms".ljust(METADATA_WIDTH)
        assert output[METADATA_WIDTH] == "I"

    def test_delta_keeps_state_timestamp(self):
        _, first = _render(_line())
        _, second = _render(_line(time="19:34:18.814"), first)
        assert second.last_timestamp == first.last_timestamp
        assert second.last_other == first.last_other
        assert second.last_tag == "artd"

    def test_deltas_measure_from_last_full_line(self):
        _, state = _render(_line())
        _, state = _render(_line(time="19:34:18.814"), state)
        output, _ = _render(_line(time="19:34:18.816"), state)
        assert output.startswith("+3ms ")

    def test_delta_at_threshold_shows_full_metadata(self):
        _, state = _render(_line())
        line = _line(time="19:34:28.813")
        output, new_state = _render(line, state)
        assert output.startswith("04-19 19:34:28.813  5587  5708 I")
        assert new_state.last_timestamp == datetime(2000, 4, 19, 19, 34, 28, 813000)

    def test_custom_threshold(self):
        _, state = _render(_line(), max_delta=timedelta(milliseconds=1))
        output, _ = _render(_line(time="19:34:18.814"), state, max_delta=timedelta(milliseconds=1))
        assert output.startswith("04-19 19:34:18.814")

    def test_tag_change_shows_full_metadata(self):
        _, state = _render(_line())
        output, new_state = _render(_line(time="19:34:18.814", tag="dex2oat "), state)
        assert output.startswith("04-19 19:34:18.814")
        assert new_state.last_tag == "dex2oat"

    def test_backwards_time_gives_negative_delta(self):
        _, state = _render(_line())
        output, _ = _render(_line(time="19:34:18.808"), state)
        assert output.startswith("+-5ms")

    def test_padding_follows_each_lines_own_column(self):
        state = RenderState(last_tag="t", last_timestamp=datetime(2000, 4, 19, 19, 34, 18, 813000))
        line = "04-19 19:34:18.814 1 2 I t: x"
        output, _ = _render(line, state)
        assert output[:23] == "+1ms".ljust(23)
        assert output[23:] == "I t : x"


# ── pass-through ─────────────────────────────────────────────────────

class TestPassThrough:
    @pytest.mark.parametrize("line", [
        "--------- beginning of main",
        "",
        "04-19 19:34:18.813  5587  5708 X artd    : unknown level",
        "04-19 19:34:18.813  5587  5708 I artd without colon",
        "99-99 19:34:18.813  5587  5708 I artd    : bad date",
    ])
    def test_output_equals_input(self, line):
        state = RenderState(last_tag="artd")
        output, new_state = _render(line, state)
        assert output == line
        assert new_state is state

    def test_level_missing_from_palette(self):
        palette = Palette(levels={"I": ""}, tag="")
        line = _line(level="E")
        output, _ = _render(line, palette=palette)
        assert output == line

    def test_trailing_newline_removed(self):
        output, _ = _render("not a log line\n")
        assert output == "not a log line"


# ── colors ───────────────────────────────────────────────────────────

class TestColors:
    def test_level_and_message_share_color(self):
        output, _ = _render(_line(level="E"), palette=Palette())
        assert f"{LEVEL_COLORS['E']}E{RESET}" in output
        assert output.endswith(f"{LEVEL_COLORS['E']}GetBestInfo no usable artifacts{RESET}")

    def test_tag_color_independent_of_level(self):
        for level in ("V", "W", "F"):
            output, _ = _render(_line(level=level), palette=Palette())
            assert f"{TAG_COLOR}artd{RESET}     : " in output

    def test_plain_palette_has_no_escapes(self):
        output, _ = _render(_line())
        assert "\033[" not in output


# ── Renderer ─────────────────────────────────────────────────────────

class TestRenderer:
    def test_tracks_state_across_lines(self):
        renderer = Renderer(plain_palette())
        renderer.render(_line())
        output = renderer.render(_line(time="19:34:18.814"))
        assert output.startswith("+1ms")
        assert renderer.state.last_tag == "artd"

    def test_independent_renderers_do_not_share_state(self):
        a = Renderer(plain_palette())
        b = Renderer(plain_palette())
        a.render(_line())
        output = b.render(_line(time="19:34:18.814"))
        assert output.startswith("04-19")

    def test_reset_clears_state(self):
        renderer = Renderer(plain_palette())
        renderer.render(_line())
        renderer.reset()
        assert renderer.state == RenderState()
        assert renderer.render(_line(time="19:34:18.814")).startswith("04-19")
