from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pytest

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.channel import Channel
from android_emulator.sdk.cli.command import CLICommand
from android_emulator.sdk.packages import parse_sdk_packages
from android_emulator.tools.installation import Platform
from android_emulator.tools.installer import (
    DEFAULT_PACKAGES,
    install_base_packages,
    select_latest_packages,
    write_configurations,
)

LISTING = (Path(__file__).resolve().parents[1] / "sdk" / "data" / "sdkmanager_list.out").read_text(
    encoding="utf-8"
)


class _FakeProcessRunner:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    def execute_and_parse(self, command: CLICommand, **kwargs: Any) -> Any:
        self.calls.append({"argv": list(command.argv), **kwargs})
        return command.parse(LISTING)

    def execute(self, command: CLICommand, **kwargs: Any) -> None:
        self.calls.append({"argv": list(command.argv), **kwargs})


def test_write_configurations_keeps_existing_files(tmp_path: Path) -> None:
    home = write_configurations(tmp_path)
    assert home == tmp_path / ".android"
    assert (home / "ddms.cfg").read_text(encoding="utf-8") == "pingOptIn=false\npingId=0\n"
    assert (home / "repositories.cfg").read_text(encoding="utf-8") == "count=0"

    (home / "ddms.cfg").write_text("pingOptIn=true\n", encoding="utf-8")
    write_configurations(tmp_path)
    assert (home / "ddms.cfg").read_text(encoding="utf-8") == "pingOptIn=true\n"


def test_select_latest_packages_stable_skips_previews() -> None:
    catalog = parse_sdk_packages(LISTING)
    assert select_latest_packages(catalog, Channel.STABLE) == [
        "platform-tools",
        "build-tools;30.0.7",
        "emulator",
        "extras;android;m2repository",
        "extras;google;m2repository",
    ]
    assert select_latest_packages(catalog, Channel.BETA)[1] == "build-tools;31.0.0-rc1"


def test_select_latest_packages_missing_default() -> None:
    catalog = parse_sdk_packages(LISTING)
    with pytest.raises(ConfigurationError, match="ndk"):
        select_latest_packages(catalog, Channel.STABLE, packages=("ndk",))


def test_install_base_packages(tmp_path: Path) -> None:
    bin_dir = tmp_path / "tools" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "sdkmanager").write_text("", encoding="utf-8")
    fake = _FakeProcessRunner()

    installed = install_base_packages(tmp_path, runner=fake, platform=Platform.LINUX)  # type: ignore[arg-type]

    assert len(installed) == len(DEFAULT_PACKAGES)
    list_call, install_call = fake.calls
    assert list_call["argv"][1:] == [
        f"--sdk_root={tmp_path}",
        "--channel=0",
        "--include_obsolete",
        "--no_https",
        "--list",
    ]
    assert list_call["env"]["ANDROID_SDK_HOME"] == str(tmp_path)
    assert install_call["argv"][-len(installed) - 1 :] == ["--install", *installed]
    assert install_call["input_text"] == "y\r\ny\r\ny\r\ny\r\ny"
    assert (tmp_path / ".android" / "ddms.cfg").exists()


def test_install_base_packages_requires_sdkmanager(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="sdkmanager"):
        install_base_packages(tmp_path, runner=_FakeProcessRunner(), platform=Platform.LINUX)  # type: ignore[arg-type]
