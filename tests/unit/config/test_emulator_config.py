from __future__ import annotations

import pytest

from android_emulator.config.emulator_config import EmulatorConfig, normalize_os_version
from android_emulator.errors import ConfigurationError


def test_defaults_and_trimming() -> None:
    config = EmulatorConfig(os_version=" 29 ", screen_density=" hdpi ", screen_resolution="WVGA", avd_name="  ")
    assert config.os_version == "android-29"
    assert config.screen_density == "hdpi"
    assert config.avd_name is None
    assert config.target_abi == "x86"
    assert config.locale == "en_US"


def test_normalize_os_version() -> None:
    assert normalize_os_version("29") == "android-29"
    assert normalize_os_version("android-R") == "android-R"
    assert normalize_os_version("  ") is None


def test_components() -> None:
    config = EmulatorConfig(os_version="android-30", target_abi="x86_64")
    assert config.platform_component == "platforms;android-30"
    assert config.system_image_component == "system-images;android-30;default;x86_64"


def test_derived_avd_name() -> None:
    config = EmulatorConfig(os_version="29", screen_density="240", screen_resolution="480x800")
    assert config.name == "hudson_en_US_hdpi_WVGA_android-29_x86"
    assert EmulatorConfig(os_version="29", avd_name="Pixel 4").name == "Pixel 4"


def test_validate_collects_all_errors() -> None:
    errors = EmulatorConfig(screen_density="huge").validate()
    assert [str(e) for e in errors] == [
        "osVersion is required",
        "screen density 'huge' not valid",
        "screen resolution '' not valid",
    ]


def test_ensure_valid() -> None:
    config = EmulatorConfig(os_version="29", screen_density="mdpi", screen_resolution="HVGA")
    assert config.ensure_valid() is config
    with pytest.raises(ConfigurationError, match="osVersion is required"):
        EmulatorConfig(screen_density="mdpi", screen_resolution="HVGA").ensure_valid()


def test_from_mapping_accepts_numbers() -> None:
    config = EmulatorConfig.from_mapping({"os_version": 29, "screen_density": 320, "sdcard": 512})
    assert config.os_version == "android-29"
    assert config.density is not None and config.density.alias == "xhdpi"
    assert config.sdcard == "512"
