"""
Colour model for the runefall screensaver.

Maps a trail intensity (1.0 at the head, 0.0 at the tail) plus a per-stream
seed to a concrete RGB triple. Four palettes are fixed two-colour ramps; two
are hue rotations driven by the stream's colour seed (Rainbow) or by a cheap
deterministic hash of tick, position and seed (Blink).

Curses cannot draw arbitrary RGB, so the module also quantises colours onto
the xterm-256 palette (or the 8 ANSI colours on small terminals).
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray

RGB = tuple[int, int, int]


# ═══════════════════════════════════════════════════════════════════════
#  Palettes
# ═══════════════════════════════════════════════════════════════════════

class Palette(Enum):
    ARCANE = "Arcane"
    EMERALD = "Emerald"
    FROST = "Frost"
    EMBER = "Ember"
    RAINBOW = "Rainbow"
    BLINK = "Blink"

    @classmethod
    def from_name(cls, name: str) -> Palette:
        """Resolve a CLI palette name. Unknown names fall back to Arcane."""
        return PALETTE_ALIASES.get(name.strip().lower(), cls.ARCANE)


PALETTE_ALIASES: dict[str, Palette] = {
    "arcane": Palette.ARCANE,
    "emerald": Palette.EMERALD,
    "green": Palette.EMERALD,
    "frost": Palette.FROST,
    "blue": Palette.FROST,
    "cyan": Palette.FROST,
    "ember": Palette.EMBER,
    "red": Palette.EMBER,
    "fire": Palette.EMBER,
    "rainbow": Palette.RAINBOW,
    "multi": Palette.RAINBOW,
    "blinking": Palette.BLINK,
    "blink": Palette.BLINK,
    "cmatrix": Palette.BLINK,
}

# (tail, head) endpoints of the fixed ramps. Ember's green channel is
# quadratic, so only its endpoints are listed here.
GRADIENTS: dict[Palette, tuple[RGB, RGB]] = {
    Palette.ARCANE: ((40, 10, 80), (180, 60, 255)),     # deep indigo → magenta
    Palette.EMERALD: ((0, 30, 10), (50, 255, 80)),
    Palette.FROST: ((0, 40, 60), (100, 200, 255)),
    Palette.EMBER: ((60, 0, 0), (255, 120, 30)),
}

HEAD_COLORS: dict[Palette, RGB] = {
    Palette.ARCANE: (230, 180, 255),
    Palette.EMERALD: (180, 255, 200),
    Palette.FROST: (200, 240, 255),
    Palette.EMBER: (255, 220, 150),
    Palette.RAINBOW: (255, 255, 255),
}

# Multiplier of the classic C library rand() LCG
BLINK_MULTIPLIER: int = 1103515245
_U64_MASK: int = (1 << 64) - 1


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Standard chroma / hue-segment HSL conversion. `h` in degrees."""
    c = (1.0 - abs(2.0 * l - 1.0)) * s
    hp = h / 60.0
    x = c * (1.0 - abs(hp % 2.0 - 1.0))
    segment = int(hp)
    if segment == 0:
        r1, g1, b1 = c, x, 0.0
    elif segment == 1:
        r1, g1, b1 = x, c, 0.0
    elif segment == 2:
        r1, g1, b1 = 0.0, c, x
    elif segment == 3:
        r1, g1, b1 = 0.0, x, c
    elif segment == 4:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x
    m = l - c / 2.0
    return (
        _channel((r1 + m) * 255.0),
        _channel((g1 + m) * 255.0),
        _channel((b1 + m) * 255.0),
    )


def _channel(v: float) -> int:
    # Truncate toward zero and saturate into a byte
    return max(0, min(255, int(v)))


def blink_hue(global_tick: int, coordinate: int, column_seed: int) -> int:
    """Pseudo-random hue in [0, 360), identical for identical inputs.

    Arithmetic wraps at 64 bits, so negative coordinates behave like their
    two's-complement reinterpretation.
    """
    mixed = (global_tick + coordinate + column_seed) & _U64_MASK
    return ((mixed * BLINK_MULTIPLIER) & _U64_MASK) % 360


def palette_color(
    palette: Palette,
    intensity: float,
    column_seed: int,
    global_tick: int,
    coordinate: int,
) -> RGB:
    """Colour of one trail cell. `intensity` runs 1.0 (head) → 0.0 (tail)."""
    i = min(max(intensity, 0.0), 1.0)

    if palette is Palette.RAINBOW:
        # Uses the raw intensity for the hue offset, clamped one for lightness
        hue = ((column_seed / 255.0) * 360.0 + intensity * 60.0) % 360.0
        return hsl_to_rgb(hue, 0.9, 0.25 + 0.45 * i)

    if palette is Palette.BLINK:
        hue = blink_hue(global_tick, coordinate, column_seed)
        return hsl_to_rgb(float(hue), 1.0, 0.4 + 0.3 * i)

    (tr, tg, tb), (hr, hg, hb) = GRADIENTS[palette]
    if palette is Palette.EMBER:
        return (
            _channel(hr * i + tr * (1.0 - i)),
            _channel(hg * i * i),
            _channel(hb * i),
        )
    return (
        _channel(hr * i + tr * (1.0 - i)),
        _channel(hg * i + tg * (1.0 - i)),
        _channel(hb * i + tb * (1.0 - i)),
    )


def head_color(
    palette: Palette, column_seed: int, global_tick: int, coordinate: int
) -> RGB:
    """The distinguished glow drawn over every stream's head cell."""
    if palette is Palette.BLINK:
        hue = blink_hue(global_tick, coordinate, column_seed)
        return hsl_to_rgb(float(hue), 1.0, 0.8)
    return HEAD_COLORS[palette]


# ═══════════════════════════════════════════════════════════════════════
#  Terminal quantisation
# ═══════════════════════════════════════════════════════════════════════

_CUBE_LEVELS: tuple[int, ...] = (0, 95, 135, 175, 215, 255)

ANSI8_RGB: NDArray[np.int32] = np.array(
    [
        (0, 0, 0),        # black
        (128, 0, 0),      # red
        (0, 128, 0),      # green
        (128, 128, 0),    # yellow
        (0, 0, 128),      # blue
        (128, 0, 128),    # magenta
        (0, 128, 128),    # cyan
        (192, 192, 192),  # white
    ],
    dtype=np.int32,
)


def _build_xterm_table() -> NDArray[np.int32]:
    """RGB of xterm colours 16..255: the 6x6x6 cube, then the grey ramp."""
    levels = np.array(_CUBE_LEVELS, dtype=np.int32)
    r, g, b = np.meshgrid(levels, levels, levels, indexing="ij")
    cube = np.stack([r.ravel(), g.ravel(), b.ravel()], axis=1)
    grey_values = 8 + 10 * np.arange(24, dtype=np.int32)
    greys = np.repeat(grey_values[:, None], 3, axis=1)
    return np.concatenate([cube, greys]).astype(np.int32)


XTERM_RGB: NDArray[np.int32] = _build_xterm_table()
XTERM_OFFSET: int = 16


def _nearest(table: NDArray[np.int32], rgb: RGB) -> int:
    diff = table - np.asarray(rgb, dtype=np.int32)
    return int(np.argmin((diff * diff).sum(axis=1)))


@lru_cache(maxsize=4096)
def rgb_to_xterm(rgb: RGB) -> int:
    """Nearest xterm-256 colour index (16..255) for an RGB triple."""
    return XTERM_OFFSET + _nearest(XTERM_RGB, rgb)


@lru_cache(maxsize=512)
def rgb_to_ansi8(rgb: RGB) -> int:
    """Nearest basic ANSI colour index (0..7) for 8-colour terminals."""
    return _nearest(ANSI8_RGB, rgb)
