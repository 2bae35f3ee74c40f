from __future__ import annotations

import pytest

from flipbook import config
from flipbook.viewer import PROFILES, ViewerOptions, ViewportProfile, fit_page, get_profile

FULLSCREEN = PROFILES["fullscreen"]
EMBEDDED = PROFILES["embedded"]


def test_square_viewport_is_height_bound() -> None:
    page = fit_page(1000, 1000, FULLSCREEN)
    assert page.height == 980
    assert page.height <= 1000
    assert page.width == pytest.approx(page.height * 0.707, abs=1)


def test_narrow_viewport_pins_width() -> None:
    page = fit_page(500, 1000, FULLSCREEN)
    assert page.width == 490
    assert page.height == int(490 / 0.707)


def test_fit_is_idempotent() -> None:
    assert fit_page(1280, 720, EMBEDDED) == fit_page(1280, 720, EMBEDDED)


def test_embedded_caps_width() -> None:
    page = fit_page(3000, 3000, EMBEDDED)
    assert page.width == 800
    assert page.height == int(800 / 0.707)


def test_embedded_minimums_win_on_small_screens() -> None:
    page = fit_page(320, 480, EMBEDDED)
    assert page.width == 400
    assert page.height == 500


def test_custom_ratio() -> None:
    landscape = ViewportProfile(width_margin=1.0, height_margin=1.0, aspect_ratio=1.5)
    assert fit_page(600, 600, landscape) == fit_page(600, 400, landscape)


@pytest.mark.parametrize("width,height", [(0, 100), (100, 0), (-5, 10)])
def test_rejects_empty_viewport(width, height) -> None:
    with pytest.raises(ValueError):
        fit_page(width, height, FULLSCREEN)


def test_unknown_profile() -> None:
    with pytest.raises(ValueError):
        get_profile("poster")


def test_viewer_options_follow_settings() -> None:
    settings = config.Settings(VIEWER_HISTORY_ENABLED=False)
    options = ViewerOptions.from_settings(settings)
    assert options.history_enabled is False
    assert options.drag_and_drop_enabled is True
