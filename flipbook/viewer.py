from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from .config import Settings

A4_PORTRAIT_RATIO = 0.707


@dataclass(frozen=True)
class ViewportProfile:
    """
    Sizing rules for one viewer layout. Margins are the fraction of the
    viewport a page may occupy; minimums win over the viewport fit.
    """

    width_margin: float
    height_margin: float
    aspect_ratio: float = A4_PORTRAIT_RATIO
    max_width: Optional[float] = None
    min_width: float = 0
    min_height: float = 0


@dataclass(frozen=True)
class PageGeometry:
    width: int
    height: int


PROFILES: Dict[str, ViewportProfile] = {
    # iframe / fullscreen viewer: use nearly the whole viewport
    "fullscreen": ViewportProfile(width_margin=0.98, height_margin=0.98),
    # upload page viewer
    "embedded": ViewportProfile(
        width_margin=0.9,
        height_margin=0.8,
        max_width=800,
        min_width=400,
        min_height=500,
    ),
}


def get_profile(mode: str) -> ViewportProfile:
    try:
        return PROFILES[mode]
    except KeyError:
        raise ValueError(f"unknown viewer mode: {mode!r}") from None


def fit_page(viewport_width: float, viewport_height: float, profile: ViewportProfile) -> PageGeometry:
    """
    Largest page of the profile's aspect ratio that fits the viewport.

    Height-first: take the allowed height, derive the width, and if that is
    wider than allowed, pin the width and derive the height instead.
    Recompute on every resize and fullscreen toggle.
    """
    if viewport_width <= 0 or viewport_height <= 0:
        raise ValueError("viewport dimensions must be positive")

    ratio = profile.aspect_ratio
    max_width = viewport_width * profile.width_margin
    if profile.max_width is not None:
        max_width = min(max_width, profile.max_width)

    height = viewport_height * profile.height_margin
    width = height * ratio
    if width > max_width:
        width = max_width
        height = width / ratio

    width = max(width, profile.min_width)
    height = max(height, profile.min_height)
    return PageGeometry(width=math.floor(width), height=math.floor(height))


@dataclass(frozen=True)
class ViewerOptions:
    history_enabled: bool = True
    drag_and_drop_enabled: bool = True
    progress_bar_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "ViewerOptions":
        return cls(
            history_enabled=settings.VIEWER_HISTORY_ENABLED,
            drag_and_drop_enabled=settings.VIEWER_DRAG_AND_DROP_ENABLED,
            progress_bar_enabled=settings.VIEWER_PROGRESS_BAR_ENABLED,
        )
