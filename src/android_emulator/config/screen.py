"""Screen density and resolution presets accepted for an AVD."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

REGEX_SCREEN_DENSITY = re.compile(r"[0-9]{2,4}")
REGEX_SCREEN_RESOLUTION = re.compile(r"[0-9]{3,4}x[0-9]{3,4}")


@dataclass(frozen=True)
class ScreenDensity:
    dpi: int
    alias: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return self.alias is None

    @classmethod
    def value_of(cls, density: Optional[str]) -> Optional["ScreenDensity"]:
        text = (density or "").strip()
        if not text:
            return None

        for preset in DENSITY_PRESETS:
            if preset.alias is not None and text.lower() == preset.alias:
                return preset

        if not REGEX_SCREEN_DENSITY.fullmatch(text):
            return None
        dpi = int(text)
        for preset in DENSITY_PRESETS:
            if preset.dpi == dpi:
                return preset
        return cls(dpi=dpi)

    def __str__(self) -> str:
        return self.alias if self.alias is not None else str(self.dpi)


DENSITY_PRESETS: Tuple[ScreenDensity, ...] = (
    ScreenDensity(120, "ldpi"),
    ScreenDensity(160, "mdpi"),
    ScreenDensity(213, "tvdpi"),
    ScreenDensity(240, "hdpi"),
    ScreenDensity(280),
    ScreenDensity(320, "xhdpi"),
    ScreenDensity(360),
    ScreenDensity(400),
    ScreenDensity(420),
    ScreenDensity(480, "xxhdpi"),
    ScreenDensity(560),
    ScreenDensity(640, "xxxhdpi"),
)


@dataclass(frozen=True)
class ScreenResolution:
    width: int
    height: int
    alias: Optional[str] = None
    skin: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return self.alias is None

    @property
    def dimension_string(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def skin_name(self) -> str:
        if self.is_custom or self.skin is None:
            return self.dimension_string
        return self.skin

    @classmethod
    def value_of(cls, resolution: Optional[str]) -> Optional["ScreenResolution"]:
        text = (resolution or "").strip()
        if not text:
            return None

        for preset in RESOLUTION_PRESETS:
            if preset.alias is not None and text.lower() == preset.alias.lower():
                return preset

        text = text.lower()
        if not REGEX_SCREEN_RESOLUTION.fullmatch(text):
            return None
        width_s, _, height_s = text.partition("x")
        width, height = int(width_s), int(height_s)
        for preset in RESOLUTION_PRESETS:
            if preset.width == width and preset.height == height:
                return preset
        return cls(width=width, height=height)

    def __str__(self) -> str:
        return self.alias if self.alias is not None else self.dimension_string


RESOLUTION_PRESETS: Tuple[ScreenResolution, ...] = (
    ScreenResolution(240, 320, "QVGA", "QVGA"),
    ScreenResolution(240, 400, "WQVGA", "WQVGA400"),
    ScreenResolution(240, 432, "FWQVGA", "WQVGA432"),
    ScreenResolution(320, 480, "HVGA", "HVGA"),
    ScreenResolution(480, 800, "WVGA", "WVGA800"),
    ScreenResolution(480, 854, "FWVGA", "WVGA854"),
    ScreenResolution(1024, 654, "WSVGA", "WSVGA"),
    ScreenResolution(1280, 720, "WXGA720", "WXGA720"),
    ScreenResolution(1280, 800, "WXGA800", "WXGA800"),
    ScreenResolution(1280, 800, "WXGA", "WXGA"),
)
