"""Pytest configuration and shared fixtures."""

import random

import pytest

from runefall import Config, RuneRain

# Seed for reproducible stream layouts
TEST_SEED = 1234


class RecordingSink:
    """In-memory display: records every paint operation and the last glyph per cell."""

    def __init__(self, cols: int = 80, rows: int = 24) -> None:
        self.cols = cols
        self.rows = rows
        self.ops: list[tuple] = []
        self.cells: dict[tuple[int, int], tuple[str, tuple[int, int, int] | None]] = {}
        self.flushes = 0
        self.clears = 0
        self._pos = (0, 0)
        self._color = None

    def size(self) -> tuple[int, int]:
        return self.cols, self.rows

    def move_to(self, col: int, row: int) -> None:
        self._pos = (col, row)
        self.ops.append(("move", col, row))

    def set_color(self, rgb) -> None:
        self._color = rgb
        self.ops.append(("color", rgb))

    def write(self, text: str) -> None:
        self.ops.append(("write", text))
        self.cells[self._pos] = (text, self._color)

    def flush(self) -> None:
        self.flushes += 1

    def clear(self) -> None:
        self.clears += 1
        self.cells.clear()

    def writes_at(self, col: int, row: int) -> list[str]:
        """Every text written starting at (col, row), in order."""
        out = []
        pos = None
        for op in self.ops:
            if op[0] == "move":
                pos = (op[1], op[2])
            elif op[0] == "write" and pos == (col, row):
                out.append(op[1])
        return out


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(TEST_SEED)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_rain(rng):
    """Factory for a rain on an arbitrary grid with a seeded random source."""

    def _make(cols: int = 80, rows: int = 24, density: float = 0.4, **kwargs) -> RuneRain:
        return RuneRain(Config(density=density, **kwargs), cols, rows, rng=rng)

    return _make
