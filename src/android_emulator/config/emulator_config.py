from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from android_emulator.config.screen import ScreenDensity, ScreenResolution
from android_emulator.errors import ConfigurationError

DEFAULT_TARGET_ABI = "x86"
DEFAULT_LOCALE = "en_US"

_UNSAFE_AVD_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _fix_empty_and_trim(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_os_version(os_version: Optional[str]) -> Optional[str]:
    """``29`` -> ``android-29``; anything else is kept as typed."""

    text = _fix_empty_and_trim(os_version)
    if text is not None and text.isdigit():
        return f"android-{text}"
    return text


def build_component(*parts: str) -> str:
    return ";".join(parts)


@dataclass(frozen=True)
class ValidationError:
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class EmulatorConfig:
    os_version: Optional[str] = None
    screen_density: Optional[str] = None
    screen_resolution: Optional[str] = None
    target_abi: Optional[str] = DEFAULT_TARGET_ABI
    avd_name: Optional[str] = None
    locale: Optional[str] = DEFAULT_LOCALE
    sdcard: Optional[str] = None
    device: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "os_version", normalize_os_version(self.os_version))
        for name in ("screen_density", "screen_resolution", "avd_name", "sdcard", "device"):
            object.__setattr__(self, name, _fix_empty_and_trim(getattr(self, name)))
        object.__setattr__(
            self, "target_abi", _fix_empty_and_trim(self.target_abi) or DEFAULT_TARGET_ABI
        )
        object.__setattr__(self, "locale", _fix_empty_and_trim(self.locale) or DEFAULT_LOCALE)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "EmulatorConfig":
        sdcard = raw.get("sdcard")
        return cls(
            os_version=raw.get("os_version"),
            screen_density=raw.get("screen_density"),
            screen_resolution=raw.get("screen_resolution"),
            target_abi=raw.get("target_abi"),
            avd_name=raw.get("avd_name"),
            locale=raw.get("locale"),
            sdcard=None if sdcard is None else str(sdcard),
            device=raw.get("device"),
        )

    @property
    def density(self) -> Optional[ScreenDensity]:
        return ScreenDensity.value_of(self.screen_density)

    @property
    def resolution(self) -> Optional[ScreenResolution]:
        return ScreenResolution.value_of(self.screen_resolution)

    @property
    def name(self) -> str:
        """AVD name: the configured one, or one derived from the hardware profile."""

        if self.avd_name is not None:
            return self.avd_name
        parts = [
            "hudson",
            self.locale or DEFAULT_LOCALE,
            str(self.density or self.screen_density or "default"),
            str(self.resolution or self.screen_resolution or "default"),
            self.os_version or "unknown",
            self.target_abi or DEFAULT_TARGET_ABI,
        ]
        return _UNSAFE_AVD_CHARS.sub("_", "_".join(parts))

    @property
    def platform_component(self) -> str:
        return build_component("platforms", self.os_version or "")

    @property
    def system_image_component(self) -> str:
        return build_component(
            "system-images", self.os_version or "", "default", self.target_abi or DEFAULT_TARGET_ABI
        )

    def validate(self) -> List[ValidationError]:
        errors: List[ValidationError] = []
        if self.os_version is None:
            errors.append(ValidationError("osVersion is required"))
        if self.density is None:
            errors.append(
                ValidationError(f"screen density '{self.screen_density or ''}' not valid")
            )
        if self.resolution is None:
            errors.append(
                ValidationError(f"screen resolution '{self.screen_resolution or ''}' not valid")
            )
        return errors

    def ensure_valid(self) -> "EmulatorConfig":
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(str(e) for e in errors))
        return self
