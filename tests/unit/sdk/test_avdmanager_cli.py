from __future__ import annotations

import pytest

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.cli.avdmanager import AVDManagerCLIBuilder, parse_avd_names, parse_targets

LIST_TARGET_OUTPUT = """\
Available Android targets:
----------
id: 1 or "android-28"
     Name: Android API 28
     Type: Platform
     API level: 28
     Revision: 6
----------
id: 2 or "android-29"
     Name: Android API 29
     Type: Platform
     API level: 29
     Revision: x
     Skins: HVGA, QVGA
"""


def test_parse_targets() -> None:
    targets = parse_targets(LIST_TARGET_OUTPUT)
    assert [t.id for t in targets] == ["android-28", "android-29"]
    first = targets[0]
    assert first.name == "Android API 28"
    assert first.type == "platform"
    assert first.api_level == 28
    assert first.revision == 6
    # non numeric revision is tolerated
    assert targets[1].revision is None
    assert targets[1].as_dict()["api_level"] == 29


def test_parse_targets_tolerates_garbage() -> None:
    assert parse_targets(None) == []
    assert parse_targets("Name: orphan\nno separator here") == []
    (target,) = parse_targets("id: 3")
    assert target.id == "3"


def test_parse_avd_names() -> None:
    assert parse_avd_names("Pixel_API_29\n\nhudson_en_US_hdpi_HVGA_android-29_x86\n") == [
        "Pixel_API_29",
        "hudson_en_US_hdpi_HVGA_android-29_x86",
    ]


def test_list_targets_command() -> None:
    cmd = AVDManagerCLIBuilder.of("avdmanager").silent(True).list_targets()
    assert cmd.argv == ("avdmanager", "--silent", "--clear-cache", "list", "target")
    assert cmd.parse(LIST_TARGET_OUTPUT)[0].id == "android-28"


def test_create_command() -> None:
    cmd = (
        AVDManagerCLIBuilder.of("avdmanager")
        .verbose(True)
        .silent(True)
        .package_path("system-images;android-29;default;x86")
        .device("pixel")
        .abi("x86")
        .sdcard(512)
        .create("test")
    )
    assert cmd.arguments == (
        "--verbose",
        "--clear-cache",
        "create",
        "avd",
        "--name",
        "test",
        "--package",
        "system-images;android-29;default;x86",
        "--device",
        "pixel",
        "--abi",
        "x86",
        "--sdcard",
        "512",
        "--force",
    )


def test_negative_sdcard_is_ignored() -> None:
    cmd = AVDManagerCLIBuilder.of("avdmanager").sdcard(-1).create("test")
    assert "--sdcard" not in cmd.arguments


@pytest.mark.parametrize("name", [None, "", "  "])
def test_create_requires_name(name) -> None:
    with pytest.raises(ConfigurationError, match="Device name is required"):
        AVDManagerCLIBuilder.of("avdmanager").create(name)


def test_list_and_delete_avd() -> None:
    builder = AVDManagerCLIBuilder.of("avdmanager")
    assert builder.list_avds().arguments == ("--clear-cache", "list", "avd", "--compact")
    assert builder.delete_avd("test").arguments == ("--clear-cache", "delete", "avd", "--name", "test")
