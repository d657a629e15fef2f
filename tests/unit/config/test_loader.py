from __future__ import annotations

import json
from pathlib import Path

import pytest

from android_emulator.config.loader import load_run_config, load_yaml_or_json
from android_emulator.errors import ConfigurationError
from android_emulator.sdk.channel import Channel

CONFIG_YAML = """\
sdk:
  home: /opt/android-sdk
  channel: beta
emulator:
  os_version: 29
  screen_density: hdpi
  screen_resolution: WVGA
  locale: it_IT
  port: 5556
  no_window: true
adb:
  max_emulators: 2
  trace: true
proxy:
  host: proxy.acme.com
  port: 3128
  no_proxy_hosts:
    - "*.internal"
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_load_yaml_run_config(tmp_path: Path) -> None:
    config = load_run_config(_write(tmp_path, "run.yaml", CONFIG_YAML))
    assert config.sdk_home == "/opt/android-sdk"
    assert config.channel is Channel.BETA
    assert config.emulator.os_version == "android-29"
    assert config.emulator.locale == "it_IT"
    assert config.port == 5556
    assert config.no_window is True
    assert config.max_emulators == 2
    assert config.adb_trace is True
    assert config.adb_port == 5037
    assert config.proxy is not None
    assert config.proxy.no_proxy_hosts == ("*.internal",)


def test_load_json_run_config_defaults(tmp_path: Path) -> None:
    raw = {"emulator": {"os_version": "android-30", "screen_density": "mdpi", "screen_resolution": "HVGA"}}
    config = load_run_config(_write(tmp_path, "run.json", json.dumps(raw)))
    assert config.channel is Channel.STABLE
    assert config.proxy is None
    assert config.port == 5554
    assert config.adb_start_timeout_s == 5.0


def test_schema_rejects_unknown_channel(tmp_path: Path) -> None:
    text = CONFIG_YAML.replace("channel: beta", "channel: nightly")
    with pytest.raises(ConfigurationError, match="sdk/channel"):
        load_run_config(_write(tmp_path, "run.yaml", text))


def test_schema_rejects_unknown_keys_and_missing_os(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_run_config(_write(tmp_path, "run.yml", "emulator:\n  color: red\n"))
    message = str(excinfo.value)
    assert "os_version" in message
    assert "color" in message


def test_schema_rejects_odd_emulator_port(tmp_path: Path) -> None:
    text = CONFIG_YAML.replace("port: 5556", "port: 5555")
    with pytest.raises(ConfigurationError, match="emulator/port"):
        load_run_config(_write(tmp_path, "run.yaml", text))


def test_semantic_validation_after_schema(tmp_path: Path) -> None:
    text = "emulator:\n  os_version: 29\n  screen_density: huge\n  screen_resolution: WVGA\n"
    with pytest.raises(ConfigurationError, match="screen density 'huge' not valid"):
        load_run_config(_write(tmp_path, "run.yaml", text))


def test_load_yaml_or_json_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_yaml_or_json(tmp_path / "missing.yaml")
    with pytest.raises(ConfigurationError, match="Unsupported"):
        load_yaml_or_json(_write(tmp_path, "run.toml", "x = 1"))
    with pytest.raises(ConfigurationError, match="Top-level"):
        load_yaml_or_json(_write(tmp_path, "run.yaml", "- a\n- b\n"))
