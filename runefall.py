#!/usr/bin/env python3
"""
  ᚱ  R U N E F A L L  ᚱ
  Falling runic trails for pretty terminals.

  Streams of Elder Futhark, Ogham and stranger glyphs pour across the
  screen in any of four directions. Each stream owns a lane (a column, or a
  row when scrolling sideways), fades from a glowing head to a dim tail,
  and is recycled onto a free lane once it has scrolled out of sight.

  Only the cells a trail touches are redrawn each frame: the cell just
  behind each tail is blanked instead of clearing the screen.

  Controls:
    q / Esc   quit               i         toggle status overlay
    + / -     faster / slower    [ / ]     density down / up
    1-5, 0    palette (arcane, emerald, frost, ember, rainbow, blink)
    a e y s o m   runes (all, elder, younger, anglo-saxon, ogham, mystic)
    arrows    scroll direction
"""

from __future__ import annotations

import argparse
import curses
import locale
import math
import random
import sys
import time
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, ClassVar, Protocol

import numpy as np
from numpy.typing import NDArray

from runefall_palette import (
    RGB,
    Palette,
    head_color,
    palette_color,
    rgb_to_ansi8,
    rgb_to_xterm,
)

# ── Runes ───────────────────────────────────────────────────────────────
ELDER_FUTHARK = "ᚠᚢᚦᚨᚱᚲᚷᚹᚺᚾᛁᛃᛇᛈᛉᛊᛋᛏᛒᛖᛗᛚᛜᛝᛞᛟ"
YOUNGER_FUTHARK = "ᚠᚢᚦᚬᚱᚴᚼᚾᛁᛅᛋᛏᛒᛘᛚᛦ"
ANGLO_SAXON = "ᚠᚢᚦᚩᚱᚳᚷᚹᚻᚾᛁᛄᛇᛈᛉᛋᛏᛒᛖᛗᛚᛝᛟᛡᛣᛥ"
OGHAM = "ᚁᚂᚃᚄᚅᚆᚇᚈᚉᚊᚋᚌᚍᚎᚏᚐᚑᚒᚓᚔᚕᚖᚗᚘᚙᚚ"
MYSTIC = "☽☾✧✦◈◇⁂⊕⊗⊛⌘⍟♅♆♇⚝✡⬡⬢⏣⏥◉◎⦿"


class RuneSet(Enum):
    ALL = "All"
    ELDER = "Elder Futhark"
    YOUNGER = "Younger Futhark"
    ANGLO = "Anglo-Saxon"
    OGHAM = "Ogham"
    MYSTIC = "Mystic"


RUNE_SETS: dict[RuneSet, str] = {
    RuneSet.ELDER: ELDER_FUTHARK,
    RuneSet.YOUNGER: YOUNGER_FUTHARK,
    RuneSet.ANGLO: ANGLO_SAXON,
    RuneSet.OGHAM: OGHAM,
    RuneSet.MYSTIC: MYSTIC,
}
NAMED_SETS: tuple[str, ...] = tuple(RUNE_SETS.values())


def random_rune(rng: random.Random, rune_set: RuneSet) -> str:
    """Pick one glyph. ALL weights each named set equally, not each glyph."""
    if rune_set is RuneSet.ALL:
        glyphs = NAMED_SETS[rng.randrange(len(NAMED_SETS))]
    else:
        glyphs = RUNE_SETS[rune_set]
    return glyphs[rng.randrange(len(glyphs))]


# ── Tuning ──────────────────────────────────────────────────────────────
MIN_TRAIL = 4
MIN_TRAIL_CAP = 6          # upper trail bound never drops below this
MAX_SPEED = 4              # ticks per cell; 1 is fastest
SHIMMER_ODDS = 5           # 1 in N chance to swap a glyph on each step
MIN_DENSITY = 0.05
MAX_DENSITY = 1.0
DENSITY_STEP = 0.05
MIN_FRAME_MS = 10
MAX_FRAME_MS = 200
FRAME_STEP_MS = 5
STATUS_SECONDS = 3

DEFAULT_FPS = 20
DEFAULT_DENSITY = 0.4


# ═══════════════════════════════════════════════════════════════════════
#  Direction
# ═══════════════════════════════════════════════════════════════════════

class Direction(Enum):
    """Scroll direction.

    Streams live in (lane, pos) space where pos only ever grows. The
    direction decides which screen axis is the lane and whether growing
    pos moves toward larger or smaller screen indices.
    """

    DOWN = "down"
    UP = "up"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vertical(self) -> bool:
        return self in (Direction.DOWN, Direction.UP)

    def max_lanes(self, cols: int, rows: int) -> int:
        return cols if self.vertical else rows

    def max_pos(self, cols: int, rows: int) -> int:
        return rows if self.vertical else cols

    def to_screen(
        self, lane: int, pos: int, cols: int, rows: int
    ) -> tuple[int, int] | None:
        """Map (lane, pos) to screen (col, row), or None when off-grid."""
        bound = self.max_pos(cols, rows)
        if pos < 0 or pos >= bound:
            return None
        if self is Direction.DOWN:
            return lane, pos
        if self is Direction.UP:
            return lane, rows - 1 - pos
        if self is Direction.RIGHT:
            return pos, lane
        return cols - 1 - pos, lane


# ═══════════════════════════════════════════════════════════════════════
#  Streams
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Stream:
    """One falling trail. Dead streams are reset in place, never freed."""

    lane: int
    pos: int                  # head position along the travel axis
    speed: int               # ticks per one-cell advance
    trail_len: int
    color_seed: int
    glyphs: list[str] = field(default_factory=list)
    tick_counter: int = 0
    active: bool = True

    @classmethod
    def spawn(
        cls, lane: int, max_pos: int, rng: random.Random, rune_set: RuneSet
    ) -> Stream:
        stream = cls(lane=lane, pos=0, speed=1, trail_len=MIN_TRAIL, color_seed=0)
        stream.reset(lane, max_pos, rng, rune_set)
        return stream

    def reset(
        self, lane: int, max_pos: int, rng: random.Random, rune_set: RuneSet
    ) -> None:
        self.lane = lane
        # Start behind the leading edge by a random offset
        self.pos = -rng.randrange(max(max_pos, 1))
        self.speed = rng.randint(1, MAX_SPEED)
        self.tick_counter = 0
        self.trail_len = rng.randint(MIN_TRAIL, max(max_pos - 2, MIN_TRAIL_CAP))
        self.color_seed = rng.randrange(256)
        self.glyphs = [random_rune(rng, rune_set) for _ in range(self.trail_len)]
        self.active = True

    def tick(self, max_pos: int, rng: random.Random, rune_set: RuneSet) -> None:
        self.tick_counter += 1
        if self.tick_counter < self.speed:
            return
        self.tick_counter = 0
        self.pos += 1

        if self.glyphs and rng.randrange(SHIMMER_ODDS) == 0:
            idx = rng.randrange(len(self.glyphs))
            self.glyphs[idx] = random_rune(rng, rune_set)

        # Tail has fully left the far edge
        if self.pos - self.trail_len > max_pos:
            self.active = False


# ═══════════════════════════════════════════════════════════════════════
#  Output sink
# ═══════════════════════════════════════════════════════════════════════

class Sink(Protocol):
    """Where paint operations go. Implemented by CursesSink and test fakes."""

    def size(self) -> tuple[int, int]: ...
    def move_to(self, col: int, row: int) -> None: ...
    def set_color(self, rgb: RGB) -> None: ...
    def write(self, text: str) -> None: ...
    def flush(self) -> None: ...
    def clear(self) -> None: ...


def display_width(text: str) -> int:
    """Terminal cells occupied by `text` (wide glyphs count twice)."""
    return sum(
        2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text
    )


@dataclass
class ColorMap:
    """Lazily allocates curses colour pairs for quantised RGB colours."""

    enabled: bool = False
    has_256: bool = False
    background: int = -1
    _pairs: dict[int, int] = field(default_factory=dict)
    _next_pair: int = 1

    def setup(self) -> None:
        if not curses.has_colors():
            return
        curses.start_color()
        try:
            curses.use_default_colors()
        except curses.error:
            self.background = curses.COLOR_BLACK
        self.has_256 = curses.COLORS >= 256
        self.enabled = True

    def pair(self, rgb: RGB) -> int:
        if not self.enabled:
            return 0
        color = rgb_to_xterm(rgb) if self.has_256 else rgb_to_ansi8(rgb)
        pair_id = self._pairs.get(color)
        if pair_id is not None:
            return pair_id
        if self._next_pair >= curses.COLOR_PAIRS:
            return 0
        pair_id = self._next_pair
        curses.init_pair(pair_id, color, self.background)
        self._pairs[color] = pair_id
        self._next_pair += 1
        return pair_id


class CursesSink:
    """Cursor-and-colour drawing on a curses window."""

    def __init__(self, stdscr: curses.window, cmap: ColorMap) -> None:
        self.stdscr = stdscr
        self.cmap = cmap
        self._col = 0
        self._row = 0
        self._attr = 0

    def size(self) -> tuple[int, int]:
        rows, cols = self.stdscr.getmaxyx()
        return cols, rows

    def move_to(self, col: int, row: int) -> None:
        self._col = col
        self._row = row

    def set_color(self, rgb: RGB) -> None:
        self._attr = curses.color_pair(self.cmap.pair(rgb))

    def write(self, text: str) -> None:
        try:
            self.stdscr.addstr(self._row, self._col, text, self._attr)
        except curses.error:
            # Bottom-right cell and off-screen writes
            pass
        self._col += display_width(text)

    def flush(self) -> None:
        self.stdscr.refresh()

    def clear(self) -> None:
        self.stdscr.erase()


# ═══════════════════════════════════════════════════════════════════════
#  Status overlay
# ═══════════════════════════════════════════════════════════════════════

STATUS_DIM = 50
STATUS_BRIGHT = 150


@dataclass
class StatusOverlay:
    """A bottom-right status strip that fades out over its final second."""

    timer: int = 0             # ticks left to show
    visible: bool = True
    clear_needed: bool = False

    def poke(self, fps: int) -> None:
        self.timer = fps * STATUS_SECONDS
        self.clear_needed = False

    def toggle(self, fps: int) -> None:
        self.visible = not self.visible
        if self.visible:
            self.poke(fps)
        else:
            self.clear_needed = True

    def request_clear(self) -> None:
        self.clear_needed = True

    def tick(self) -> None:
        if self.timer > 0:
            self.timer -= 1
            if self.timer == 0:
                self.clear_needed = True

    def brightness(self, fps: int) -> int:
        if self.timer < fps:
            return STATUS_DIM + 100 * self.timer // fps
        return STATUS_BRIGHT

    def render(self, sink: Sink, text: str, cols: int, rows: int, fps: int) -> None:
        if rows <= 0:
            return
        width = display_width(text)
        x = max(cols - width, 0)
        y = rows - 1

        if self.visible and self.timer > 0:
            level = self.brightness(fps)
            sink.move_to(x, y)
            sink.set_color((level, level, level))
            sink.write(text)
        elif self.clear_needed:
            sink.move_to(x, y)
            sink.write(" " * width)
            self.clear_needed = False


# ═══════════════════════════════════════════════════════════════════════
#  Configuration
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Config:
    palette: Palette = Palette.ARCANE
    fps: int = DEFAULT_FPS
    density: float = DEFAULT_DENSITY
    stats_log: Path | None = None


def _lenient_int(text: str | None, default: int, lo: int, hi: int) -> int:
    try:
        value = int(text) if text is not None else default
    except ValueError:
        value = default
    return min(max(value, lo), hi)


def _lenient_float(text: str | None, default: float, lo: float, hi: float) -> float:
    try:
        value = float(text) if text is not None else default
    except ValueError:
        value = default
    if not math.isfinite(value):
        value = default
    return min(max(value, lo), hi)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runefall",
        description="runefall: ultra-light runic terminal screensaver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "keys:\n"
            "  q / Esc        quit\n"
            "  + / -          faster / slower\n"
            "  [ / ]          density down / up\n"
            "  1-5, 0         arcane, emerald, frost, ember, rainbow, blink\n"
            "  a e y s o m    all, elder, younger, anglo-saxon, ogham, mystic runes\n"
            "  arrows         scroll direction\n"
            "  i              toggle status overlay"
        ),
    )
    parser.add_argument("-p", "--palette", nargs="?", const=None, default=None,
                        metavar="NAME",
                        help="Colour palette: arcane, emerald, frost, ember, "
                             "rainbow, blink (default: arcane)")
    parser.add_argument("-f", "--fps", nargs="?", const=None, default=None,
                        metavar="N",
                        help=f"Target frames per second, 5-60 (default: {DEFAULT_FPS})")
    parser.add_argument("-d", "--density", nargs="?", const=None, default=None,
                        metavar="X",
                        help=f"Lane density 0.1-1.0 (default: {DEFAULT_DENSITY})")
    parser.add_argument("--stats-log", type=Path, nargs="?", const=None, default=None,
                        metavar="PATH",
                        help="Write per-tick telemetry CSV to PATH")
    return parser


def parse_args(argv: list[str] | None = None) -> Config:
    """Parse CLI arguments. Bad values are clamped or defaulted, never fatal.

    A flag given without its value falls back to the default.
    """
    args, _unknown = build_parser().parse_known_args(argv)
    return Config(
        palette=Palette.from_name(args.palette or "arcane"),
        fps=_lenient_int(args.fps, DEFAULT_FPS, 5, 60),
        density=_lenient_float(args.density, DEFAULT_DENSITY, 0.1, 1.0),
        stats_log=args.stats_log,
    )


# ═══════════════════════════════════════════════════════════════════════
#  The rain
# ═══════════════════════════════════════════════════════════════════════

class RuneRain:
    """
    Owns every stream and the session state around them.

    The stream pool has a fixed size (density × lanes) between rebuilds.
    Streams that finish are recycled onto lanes nobody else occupies, so
    trails stay spread across the grid instead of clumping.
    """

    def __init__(
        self,
        config: Config,
        cols: int,
        rows: int,
        rng: random.Random | None = None,
    ) -> None:
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.cols: int = cols
        self.rows: int = rows
        self.direction: Direction = Direction.DOWN
        self.palette: Palette = config.palette
        self.rune_set: RuneSet = RuneSet.ALL
        self.density: float = config.density
        self.frame_ms: int = min(max(1000 // config.fps, MIN_FRAME_MS), MAX_FRAME_MS)
        # Configured rate is shown until the frame duration is first adjusted
        self._nominal_fps: int | None = config.fps
        self.global_tick: int = 0

        self.status: StatusOverlay = StatusOverlay()
        self.status.poke(self.fps)

        self.streams: list[Stream] = []
        self.occupied: NDArray[np.bool_] = np.zeros(0, dtype=bool)
        self.resize(cols, rows)

    @classmethod
    def from_sink(
        cls, config: Config, sink: Sink, rng: random.Random | None = None
    ) -> RuneRain:
        """Build against a live display. Fails if it cannot report a size."""
        cols, rows = sink.size()
        if cols <= 0 or rows <= 0:
            raise OSError(f"terminal reported an unusable size: {cols}x{rows}")
        return cls(config, cols, rows, rng)

    # ── Derived bounds ──────────────────────────────────────────────

    @property
    def max_lanes(self) -> int:
        return self.direction.max_lanes(self.cols, self.rows)

    @property
    def max_pos(self) -> int:
        return self.direction.max_pos(self.cols, self.rows)

    @property
    def fps(self) -> int:
        if self._nominal_fps is not None:
            return self._nominal_fps
        return 1000 // self.frame_ms

    # ── Pool management ─────────────────────────────────────────────

    def resize(self, cols: int, rows: int) -> None:
        """Rebuild the whole pool on distinct lanes for the new grid."""
        self.cols = cols
        self.rows = rows
        max_lanes = self.max_lanes
        max_pos = self.max_pos
        target = max(1, int(max_lanes * self.density))

        lanes = self.rng.sample(range(max_lanes), min(target, max_lanes))
        self.streams = [
            Stream.spawn(lane, max_pos, self.rng, self.rune_set) for lane in lanes
        ]
        self.occupied = np.zeros(max_lanes, dtype=bool)
        self.occupied[lanes] = True

    def tick(self) -> None:
        """Advance one simulation step and recycle finished streams."""
        self.global_tick += 1
        self.status.tick()

        max_lanes = self.max_lanes
        max_pos = self.max_pos

        occupied = np.zeros(max_lanes, dtype=bool)
        for stream in self.streams:
            stream.tick(max_pos, self.rng, self.rune_set)
            if stream.active and stream.lane < max_lanes:
                occupied[stream.lane] = True

        free_lanes: list[int] = np.flatnonzero(~occupied).tolist()
        for stream in self.streams:
            if stream.active:
                continue
            if free_lanes:
                lane = free_lanes.pop(self.rng.randrange(len(free_lanes)))
            else:
                lane = self.rng.randrange(max(max_lanes, 1))
            stream.reset(lane, max_pos, self.rng, self.rune_set)
            if lane < max_lanes:
                occupied[lane] = True

        self.occupied = occupied

    def change_density(self, delta: float) -> None:
        self.density = min(max(self.density + delta, MIN_DENSITY), MAX_DENSITY)
        self.resize(self.cols, self.rows)

    def change_direction(self, direction: Direction) -> None:
        if direction is self.direction:
            return
        self.direction = direction
        # Overlay region must be blanked in the new orientation
        self.status.request_clear()
        self.resize(self.cols, self.rows)

    def adjust_frame_ms(self, delta_ms: int) -> None:
        self._nominal_fps = None
        self.frame_ms = min(max(self.frame_ms + delta_ms, MIN_FRAME_MS), MAX_FRAME_MS)

    # ── Rendering ───────────────────────────────────────────────────

    def status_text(self) -> str:
        return (
            f" 🔮 {self.rune_set.value} | 🎨 {self.palette.value} | "
            f"⚡ {self.fps} FPS | Density: {self.density:.2f} "
        )

    def render(self, sink: Sink) -> None:
        """Paint every active trail, blank the cell behind each tail, flush.

        Nothing is cleared wholesale: a trail's previous-frame tail cell is
        exactly one step behind its current tail, so erasing that cell is
        enough to keep the screen clean.
        """
        cols, rows = self.cols, self.rows
        to_screen = self.direction.to_screen
        palette = self.palette
        tick = self.global_tick

        for stream in self.streams:
            if not stream.active:
                continue
            lane, pos, n = stream.lane, stream.pos, stream.trail_len

            for i in range(n):
                cell = to_screen(lane, pos - i, cols, rows)
                if cell is None:
                    continue
                intensity = 1.0 - i / n
                sink.move_to(*cell)
                sink.set_color(palette_color(palette, intensity, stream.color_seed, tick, pos))
                sink.write(stream.glyphs[i])

            tail = to_screen(lane, pos - n, cols, rows)
            if tail is not None:
                sink.move_to(*tail)
                sink.write(" ")

            head = to_screen(lane, pos, cols, rows)
            if head is not None:
                sink.move_to(*head)
                sink.set_color(head_color(palette, stream.color_seed, tick, pos))
                sink.write(stream.glyphs[0])

        self.status.render(sink, self.status_text(), cols, rows, self.fps)
        sink.flush()


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes engine telemetry to CSV for post-hoc tuning. Off without a path."""

    HEADER: ClassVar[str] = (
        "tick,time_s,streams,active,density,direction,palette,runes,frame_ms,event\n"
    )
    EVERY: ClassVar[int] = 30
    FLUSH_EVERY: ClassVar[int] = 300

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    def open(self) -> None:
        if self._path is None:
            return
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None

    def log(self, rain: RuneRain, event: str = "") -> None:
        if self._fh is None:
            return
        if not event and rain.global_tick % self.EVERY != 0:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(
                f"{rain.global_tick},{t:.1f},{len(rain.streams)},"
                f"{int(rain.occupied.sum())},{rain.density:.2f},"
                f"{rain.direction.value},{rain.palette.value},"
                f"{rain.rune_set.value},{rain.frame_ms},{event}\n"
            )
            if event or rain.global_tick % self.FLUSH_EVERY == 0:
                self._fh.flush()
        except OSError:
            self.close()

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Input
# ═══════════════════════════════════════════════════════════════════════

ESC = 27

PALETTE_KEYS: dict[int, Palette] = {
    ord("1"): Palette.ARCANE,
    ord("2"): Palette.EMERALD,
    ord("3"): Palette.FROST,
    ord("4"): Palette.EMBER,
    ord("5"): Palette.RAINBOW,
    ord("0"): Palette.BLINK,
}

RUNE_KEYS: dict[int, RuneSet] = {
    ord("a"): RuneSet.ALL,
    ord("e"): RuneSet.ELDER,
    ord("y"): RuneSet.YOUNGER,
    ord("s"): RuneSet.ANGLO,
    ord("o"): RuneSet.OGHAM,
    ord("m"): RuneSet.MYSTIC,
}

DIRECTION_KEYS: dict[int, Direction] = {
    curses.KEY_UP: Direction.UP,
    curses.KEY_DOWN: Direction.DOWN,
    curses.KEY_LEFT: Direction.LEFT,
    curses.KEY_RIGHT: Direction.RIGHT,
}


def handle_key(rain: RuneRain, key: int) -> str:
    """Apply one key press. Returns the event name ("" if the key is unbound).

    "quit" ends the loop; "direction" means the caller must wipe the screen.
    """
    if key in (ord("q"), ord("Q"), ESC):
        return "quit"

    if key == ord("i"):
        rain.status.toggle(rain.fps)
        return "status"

    event = ""
    if key in (ord("+"), ord("=")):
        rain.adjust_frame_ms(-FRAME_STEP_MS)
        event = "speed"
    elif key == ord("-"):
        rain.adjust_frame_ms(FRAME_STEP_MS)
        event = "speed"
    elif key == ord("["):
        rain.change_density(-DENSITY_STEP)
        event = "density"
    elif key == ord("]"):
        rain.change_density(DENSITY_STEP)
        event = "density"
    elif key in PALETTE_KEYS:
        rain.palette = PALETTE_KEYS[key]
        event = "palette"
    elif key in RUNE_KEYS:
        rain.rune_set = RUNE_KEYS[key]
        event = "runes"
    elif key in DIRECTION_KEYS:
        rain.change_direction(DIRECTION_KEYS[key])
        event = "direction"

    # Any key wakes the status overlay
    rain.status.poke(rain.fps)
    return event


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def run_loop(
    stdscr: curses.window, rain: RuneRain, sink: Sink, logger: StatsLogger
) -> None:
    while True:
        frame_start = time.monotonic()

        # ── Input (non-blocking) ───────────────────────────────────
        try:
            key = stdscr.getch()
        except curses.error:
            key = -1

        if key == curses.KEY_RESIZE:
            sink.clear()
            rain.resize(*sink.size())
            logger.log(rain, "resize")
        elif key != -1:
            event = handle_key(rain, key)
            if event == "quit":
                return
            if event == "direction":
                sink.clear()
            if event:
                logger.log(rain, event)

        # ── Simulate + render ──────────────────────────────────────
        rain.tick()
        rain.render(sink)
        logger.log(rain)

        # ── Pace ───────────────────────────────────────────────────
        remaining = rain.frame_ms / 1000.0 - (time.monotonic() - frame_start)
        if remaining > 0:
            time.sleep(remaining)


def main(stdscr: curses.window, config: Config) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    stdscr.nodelay(True)
    stdscr.timeout(0)

    cmap = ColorMap()
    cmap.setup()
    sink = CursesSink(stdscr, cmap)
    sink.clear()

    rain = RuneRain.from_sink(config, sink)

    logger = StatsLogger(config.stats_log)
    logger.open()
    try:
        run_loop(stdscr, rain, sink, logger)
    finally:
        logger.close()


def cli(argv: list[str] | None = None) -> int:
    config = parse_args(argv)
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        pass
    try:
        curses.wrapper(main, config)
    except KeyboardInterrupt:
        pass
    except (OSError, curses.error) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli())
