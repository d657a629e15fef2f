from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

import pytest

from android_emulator.cli import provision
from android_emulator.errors import ProvisioningError
from android_emulator.runtime.runner import RunResult
from android_emulator.sdk.cli.command import CLICommand

LISTING = (Path(__file__).resolve().parents[1] / "sdk" / "data" / "sdkmanager_list.out").read_text(
    encoding="utf-8"
)

CONFIG = "emulator:\n  os_version: 29\n  screen_density: hdpi\n  screen_resolution: WVGA\n  avd_name: ci\n"


def _sdk(tmp_path: Path) -> Path:
    sdk = tmp_path / "sdk"
    for rel in ("cmdline-tools/latest/bin/sdkmanager", "cmdline-tools/latest/bin/avdmanager"):
        path = sdk / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
    return sdk


class _FakeProcessRunner:
    commands: List[CLICommand] = []

    def execute_and_parse(self, command: CLICommand, **kwargs: Any) -> Any:
        _FakeProcessRunner.commands.append(command)
        if "--list" in command.argv:
            return command.parse(LISTING)
        return command.parse('id: 1 or "android-29"\n  API level: 29\n')


@pytest.fixture
def fake_runner(monkeypatch: pytest.MonkeyPatch) -> type:
    _FakeProcessRunner.commands = []
    monkeypatch.setattr(provision, "ProcessRunner", _FakeProcessRunner)
    return _FakeProcessRunner


def test_validate_config_ok(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "run.yaml"
    cfg.write_text(CONFIG, encoding="utf-8")
    assert provision.main(["validate-config", "--config", str(cfg)]) == 0
    assert "avd ci" in capsys.readouterr().out


def test_validate_config_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "run.yaml"
    cfg.write_text(CONFIG.replace("hdpi", "huge"), encoding="utf-8")
    assert provision.main(["validate-config", "--config", str(cfg)]) == 2
    assert "screen density 'huge' not valid" in capsys.readouterr().err


def test_validate_config_missing_file(tmp_path: Path) -> None:
    assert provision.main(["validate-config", "--config", str(tmp_path / "nope.yaml")]) == 2


def test_list_packages_json(tmp_path: Path, fake_runner: type, capsys: pytest.CaptureFixture[str]) -> None:
    sdk = _sdk(tmp_path)
    assert provision.main(["list-packages", "--sdk-root", str(sdk), "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out["available"]) == 236
    (command,) = fake_runner.commands
    assert command.arguments == (f"--sdk_root={sdk}", "--channel=0", "--no_https", "--list")


def test_list_targets(tmp_path: Path, fake_runner: type, capsys: pytest.CaptureFixture[str]) -> None:
    assert provision.main(["list-targets", "--sdk-root", str(_sdk(tmp_path))]) == 0
    assert "android-29" in capsys.readouterr().out


def test_missing_sdk_root(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.delenv("ANDROID_SDK_ROOT", raising=False)
    monkeypatch.delenv("ANDROID_HOME", raising=False)
    assert provision.main(["list-targets"]) == 2
    assert "SDK root is required" in capsys.readouterr().err


def test_provision_uses_config_port(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "run.yaml"
    cfg.write_text(CONFIG + "  port: 5558\nsdk:\n  home: " + str(_sdk(tmp_path)) + "\n", encoding="utf-8")
    seen: dict = {}

    def _run(self, workspace, *, sink=None, env=None, port=5554) -> RunResult:
        seen["workspace"] = workspace
        seen["port"] = port
        return RunResult(steps=["resolve_executables"])

    monkeypatch.setattr(provision.EmulatorRunner, "run", _run)
    assert provision.main(["provision", "--config", str(cfg), "--workspace", str(tmp_path)]) == 0
    assert seen == {"workspace": tmp_path.resolve(), "port": 5558}


def test_provision_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    cfg = tmp_path / "run.json"
    cfg.write_text(
        json.dumps({"sdk": {"home": str(_sdk(tmp_path))}, "emulator": {"os_version": "29", "screen_density": "hdpi", "screen_resolution": "WVGA"}}),
        encoding="utf-8",
    )

    def _run(self, workspace, **kwargs) -> RunResult:
        raise ProvisioningError("start_adb", "adb did not complete within 5s and was killed")

    monkeypatch.setattr(provision.EmulatorRunner, "run", _run)
    assert provision.main(["provision", "--config", str(cfg), "--port", "5560"]) == 1
    assert "step start_adb failed" in capsys.readouterr().err
