"""Status colours and readable text colour selection (WCAG 2.x contrast)."""

from __future__ import annotations

import colorsys
import logging
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "online": "#22c55e",
    "remote": "#10b981",
    "meeting": "#f59e0b",
    "training": "#3b82f6",
    "break": "#f97316",
    "off": "#ef4444",
    "unplanned": "#dc2626",
    "night duty": "#4f46e5",
}
AVAILABLE_STATUSES = tuple(STATUS_COLORS)

DEFAULT_STATUS_COLOR = "#9ca3af"
WHITE = "#ffffff"
NEAR_BLACK = "#1a1a1a"

MIN_CONTRAST = 4.5
# Luminance at which white and black text give the same contrast.
DARK_LUMINANCE_THRESHOLD = 0.179

_LIGHT_LEVELS = (0.95, 0.9, 0.85)
_DARK_LEVELS = (0.1, 0.15, 0.2)


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def parse_hex(color: str) -> tuple[int, int, int]:
    value = (color or "").strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex colour: {color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def to_hex(rgb: Sequence[float]) -> str:
    r, g, b = (max(0, min(255, int(round(c)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def relative_luminance(color: str) -> float:
    def channel(c: int) -> float:
        s = c / 255
        return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4

    r, g, b = parse_hex(color)
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(a: str, b: str) -> float:
    la, lb = relative_luminance(a), relative_luminance(b)
    lighter, darker = max(la, lb), min(la, lb)
    return (lighter + 0.05) / (darker + 0.05)


def is_dark(color: str) -> bool:
    return relative_luminance(color) <= DARK_LUMINANCE_THRESHOLD


def _hls(color: str) -> tuple[float, float, float]:
    r, g, b = parse_hex(color)
    return colorsys.rgb_to_hls(r / 255, g / 255, b / 255)


def _from_hls(h: float, l: float, s: float) -> str:
    r, g, b = colorsys.hls_to_rgb(h % 1.0, l, s)
    return to_hex((r * 255, g * 255, b * 255))


def harmonious_candidates(background: str) -> list[str]:
    """Same hue as the background, lightness pushed to the opposite end."""

    h, _, s = _hls(background)
    levels = _LIGHT_LEVELS if is_dark(background) else _DARK_LEVELS
    return [_from_hls(h, level, s) for level in levels]


def complementary_candidates(background: str) -> list[str]:
    h, _, s = _hls(background)
    levels = _LIGHT_LEVELS if is_dark(background) else _DARK_LEVELS
    return [_from_hls(h + 0.5, level, s) for level in levels]


def _best(background: str, candidates: Iterable[str]) -> str:
    return max(candidates, key=lambda c: contrast_ratio(background, c))


def select_text_color(background: str) -> str:
    """Pick a readable foreground colour for `background`.

    Harmonious candidates that reach MIN_CONTRAST win, then complementary ones,
    then plain white / near-black. When nothing reaches MIN_CONTRAST the
    highest-contrast candidate is returned.
    """

    try:
        dark = is_dark(background)
    except ValueError:
        logger.debug("Unparseable background colour %r, using near-black text", background)
        return NEAR_BLACK

    fallback = WHITE if dark else NEAR_BLACK
    ordered = harmonious_candidates(background) + complementary_candidates(background) + [fallback]

    for candidate in ordered:
        if contrast_ratio(background, candidate) >= MIN_CONTRAST:
            return candidate
    return _best(background, ordered)


def status_text_color(status: str) -> str:
    return select_text_color(status_color(status))
