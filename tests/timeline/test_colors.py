from __future__ import annotations

import pytest

from src.shift_planner.shift_planner.timeline.colors import (
    DEFAULT_STATUS_COLOR,
    MIN_CONTRAST,
    NEAR_BLACK,
    STATUS_COLORS,
    contrast_ratio,
    is_dark,
    parse_hex,
    relative_luminance,
    select_text_color,
    status_color,
    status_text_color,
)


def test_luminance_and_contrast_extremes():
    assert relative_luminance("#ffffff") == pytest.approx(1.0)
    assert relative_luminance("#000000") == pytest.approx(0.0)
    assert contrast_ratio("#ffffff", "#000000") == pytest.approx(21.0)
    assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)


def test_short_hex_is_expanded():
    assert parse_hex("#fa0") == (255, 170, 0)
    with pytest.raises(ValueError):
        parse_hex("#12345")


def test_dark_threshold():
    assert is_dark("#000000")
    assert is_dark("#4f46e5")
    assert not is_dark("#ffffff")
    assert not is_dark("#f59e0b")


def test_white_background_gets_dark_grey_text():
    assert select_text_color("#ffffff") == "#1a1a1a"


def test_black_background_gets_light_grey_text():
    assert select_text_color("#000000") == "#f2f2f2"


def test_invalid_background_falls_back_to_near_black():
    assert select_text_color("not-a-colour") == NEAR_BLACK


def test_mid_grey_returns_best_candidate_even_below_threshold():
    # No grey reaches 4.5 against #777777; the darkest candidate is the best one.
    chosen = select_text_color("#777777")
    assert chosen == "#1a1a1a"
    assert contrast_ratio("#777777", chosen) < MIN_CONTRAST


@pytest.mark.parametrize("status", ["online", "remote", "meeting", "break", "night duty"])
def test_status_text_is_readable(status):
    assert contrast_ratio(STATUS_COLORS[status], status_text_color(status)) >= MIN_CONTRAST


def test_unknown_status_uses_default_colour():
    assert status_color("出社") == DEFAULT_STATUS_COLOR
