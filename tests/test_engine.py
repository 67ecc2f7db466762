"""Tests for the stream pool: rebuilds, ticking and lane recycling."""

import random

import numpy as np
import pytest

from conftest import RecordingSink
from runefall import (
    MAX_FRAME_MS,
    MIN_FRAME_MS,
    Config,
    Direction,
    RuneRain,
    Stream,
)


def kill_on_next_tick(stream: Stream, max_pos: int) -> None:
    stream.speed = 1
    stream.tick_counter = 0
    stream.pos = max_pos + stream.trail_len


def keep_alive(stream: Stream) -> None:
    stream.speed = 4
    stream.tick_counter = 0
    stream.pos = 0


def lanes(rain: RuneRain) -> list[int]:
    return [s.lane for s in rain.streams]


class TestResize:
    def test_scenario_80x24(self, make_rain):
        rain = make_rain(80, 24, density=0.4)
        assert len(rain.streams) == 32
        assert len(set(lanes(rain))) == 32
        assert all(0 <= lane < 80 for lane in lanes(rain))

    @pytest.mark.parametrize("density", [0.1, 0.25, 0.5, 0.75, 1.0])
    def test_count_and_distinct_lanes(self, make_rain, density):
        rain = make_rain(120, 40, density=density)
        expected = max(1, int(120 * density))
        assert len(rain.streams) == expected
        assert len(set(lanes(rain))) == expected

    def test_at_least_one_stream(self, make_rain):
        rain = make_rain(3, 10, density=0.1)
        assert len(rain.streams) == 1

    def test_repeat_resize_keeps_count(self, make_rain):
        rain = make_rain(80, 24, density=0.4)
        rain.resize(80, 24)
        first = len(rain.streams)
        rain.resize(80, 24)
        assert len(rain.streams) == first == 32
        assert len(set(lanes(rain))) == 32

    def test_new_grid(self, make_rain):
        rain = make_rain(80, 24, density=0.5)
        rain.resize(40, 10)
        assert (rain.cols, rain.rows) == (40, 10)
        assert len(rain.streams) == 20
        assert max(lanes(rain)) < 40
        assert all(s.trail_len <= max(6, 10 - 2) for s in rain.streams)

    def test_empty_grid(self, make_rain):
        rain = make_rain(0, 24)
        assert rain.streams == []
        rain.tick()
        assert rain.streams == []

    def test_occupied_matches_lanes(self, make_rain):
        rain = make_rain(50, 20, density=0.3)
        np.testing.assert_array_equal(np.flatnonzero(rain.occupied), sorted(lanes(rain)))


class TestDensity:
    def test_change_rebuilds_with_new_count(self, make_rain):
        rain = make_rain(80, 24, density=0.4)
        rain.change_density(0.3)
        assert len(rain.streams) == max(1, int(80 * rain.density))
        assert len(set(lanes(rain))) == len(rain.streams)

    def test_clamped_low(self, make_rain):
        rain = make_rain(80, 24, density=0.4)
        rain.change_density(-5.0)
        assert rain.density == 0.05
        assert len(rain.streams) == 4

    def test_clamped_high(self, make_rain):
        rain = make_rain(80, 24, density=0.4)
        rain.change_density(5.0)
        assert rain.density == 1.0
        assert sorted(lanes(rain)) == list(range(80))


class TestDirection:
    @pytest.mark.parametrize("direction", [Direction.LEFT, Direction.RIGHT])
    def test_horizontal_uses_rows_as_lanes(self, make_rain, direction):
        rain = make_rain(80, 24, density=0.4)
        rain.change_direction(direction)
        assert rain.direction is direction
        assert len(rain.streams) == int(24 * 0.4)
        assert all(0 <= lane < 24 for lane in lanes(rain))

    def test_same_direction_is_noop(self, make_rain):
        rain = make_rain(80, 24)
        before = rain.streams
        rain.status.clear_needed = False
        rain.change_direction(Direction.DOWN)
        assert rain.streams is before
        assert not rain.status.clear_needed

    def test_change_flags_overlay_clear(self, make_rain):
        rain = make_rain(80, 24)
        rain.change_direction(Direction.UP)
        assert rain.status.clear_needed


class TestTick:
    def test_global_tick_advances(self, make_rain):
        rain = make_rain()
        for _ in range(5):
            rain.tick()
        assert rain.global_tick == 5

    def test_pool_size_is_fixed(self, make_rain):
        rain = make_rain(60, 12, density=0.5)
        n = len(rain.streams)
        for _ in range(300):
            rain.tick()
            assert len(rain.streams) == n
            assert all(s.active for s in rain.streams)

    @pytest.mark.parametrize("seed", range(10))
    def test_simultaneous_deaths_get_distinct_lanes(self, seed):
        rain = RuneRain(Config(density=0.5), 20, 10, rng=random.Random(seed))
        for s in rain.streams:
            kill_on_next_tick(s, rain.max_pos)
        rain.tick()
        assert all(s.active for s in rain.streams)
        assert len(set(lanes(rain))) == len(rain.streams) == 10

    @pytest.mark.parametrize("seed", range(10))
    def test_recycled_lanes_avoid_living_streams(self, seed):
        rain = RuneRain(Config(density=0.6), 30, 10, rng=random.Random(seed))
        dying = rain.streams[::2]
        living = rain.streams[1::2]
        for s in dying:
            kill_on_next_tick(s, rain.max_pos)
        for s in living:
            keep_alive(s)
        living_lanes = {s.lane for s in living}

        rain.tick()

        recycled = [s.lane for s in dying]
        assert len(set(recycled)) == len(recycled)
        assert not living_lanes & set(recycled)

    def test_full_grid_stays_one_stream_per_lane(self):
        rain = RuneRain(Config(density=1.0), 10, 6, rng=random.Random(7))
        for s in rain.streams[:3]:
            kill_on_next_tick(s, rain.max_pos)
        for s in rain.streams[3:]:
            keep_alive(s)
        rain.tick()
        assert sorted(lanes(rain)) == list(range(10))

    def test_falls_back_to_any_lane_when_none_free(self):
        rain = RuneRain(Config(density=1.0), 10, 6, rng=random.Random(3))
        for s in rain.streams:
            keep_alive(s)
        extra = Stream(lane=0, pos=0, speed=1, trail_len=4, color_seed=0, glyphs=["ᚠ"] * 4)
        kill_on_next_tick(extra, rain.max_pos)
        rain.streams.append(extra)

        rain.tick()

        assert extra.active
        assert 0 <= extra.lane < 10

    def test_occupied_tracks_active_lanes(self, make_rain):
        rain = make_rain(40, 10, density=0.5)
        for _ in range(50):
            rain.tick()
        np.testing.assert_array_equal(
            np.flatnonzero(rain.occupied), sorted(set(lanes(rain)))
        )


class TestStatusCountdown:
    def test_initial_timer_is_three_seconds(self, make_rain):
        rain = make_rain(fps=20)
        assert rain.status.timer == 60

    def test_expiry_requests_one_clear(self, make_rain):
        rain = make_rain()
        rain.status.timer = 2
        rain.status.clear_needed = False
        rain.tick()
        assert (rain.status.timer, rain.status.clear_needed) == (1, False)
        rain.tick()
        assert (rain.status.timer, rain.status.clear_needed) == (0, True)
        rain.status.clear_needed = False
        rain.tick()
        assert (rain.status.timer, rain.status.clear_needed) == (0, False)


class TestFramePacing:
    def test_initial_frame_duration(self, make_rain):
        assert make_rain(fps=20).frame_ms == 50
        assert make_rain(fps=60).frame_ms == 16
        assert make_rain(fps=5).frame_ms == 200

    def test_configured_fps_shown_until_adjusted(self, make_rain):
        rain = make_rain(fps=60)
        assert rain.frame_ms == 16
        assert rain.fps == 60
        assert rain.status.timer == 180
        assert "60 FPS" in rain.status_text()
        rain.adjust_frame_ms(0)
        assert rain.fps == 62

    def test_fps_follows_frame_duration(self, make_rain):
        rain = make_rain(fps=20)
        assert rain.fps == 20
        rain.adjust_frame_ms(-25)
        assert rain.fps == 40

    def test_clamped(self, make_rain):
        rain = make_rain(fps=20)
        for _ in range(50):
            rain.adjust_frame_ms(-5)
        assert rain.frame_ms == MIN_FRAME_MS
        assert rain.fps == 100
        for _ in range(50):
            rain.adjust_frame_ms(5)
        assert rain.frame_ms == MAX_FRAME_MS
        assert rain.fps == 5


class TestFromSink:
    def test_reads_grid_size(self):
        rain = RuneRain.from_sink(Config(), RecordingSink(100, 30), rng=random.Random(1))
        assert (rain.cols, rain.rows) == (100, 30)
        assert len(rain.streams) == 40

    @pytest.mark.parametrize("cols,rows", [(0, 24), (80, 0), (-1, -1)])
    def test_unusable_size_is_fatal(self, cols, rows):
        with pytest.raises(OSError):
            RuneRain.from_sink(Config(), RecordingSink(cols, rows))
