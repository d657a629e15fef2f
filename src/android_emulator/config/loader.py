from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from jsonschema import Draft202012Validator

from android_emulator.config.emulator_config import EmulatorConfig
from android_emulator.errors import ConfigurationError
from android_emulator.sdk.channel import Channel
from android_emulator.sdk.constants import ADB_DEFAULT_PORT, EMULATOR_DEFAULT_PORT
from android_emulator.sdk.proxy import ProxySettings

_CHANNELS = [c.name.lower() for c in Channel]

RUN_CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "required": ["emulator"],
    "properties": {
        "sdk": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "home": {"type": "string"},
                "channel": {"type": "string", "enum": _CHANNELS},
            },
        },
        "emulator": {
            "type": "object",
            "additionalProperties": False,
            "required": ["os_version"],
            "properties": {
                "os_version": {"type": ["string", "integer"]},
                "screen_density": {"type": ["string", "integer"]},
                "screen_resolution": {"type": "string"},
                "target_abi": {"type": "string"},
                "avd_name": {"type": "string"},
                "locale": {"type": "string"},
                "sdcard": {"type": ["string", "integer"]},
                "device": {"type": "string"},
                "port": {"type": "integer", "minimum": 5554, "maximum": 5682, "multipleOf": 2},
                "no_window": {"type": "boolean"},
                "no_audio": {"type": "boolean"},
                "no_snapshot": {"type": "boolean"},
                "wipe_data": {"type": "boolean"},
            },
        },
        "adb": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "max_emulators": {"type": "integer", "minimum": 1},
                "port": {"type": "integer", "minimum": 1024, "maximum": 65535},
                "trace": {"type": "boolean"},
                "start_timeout_s": {"type": "number", "exclusiveMinimum": 0},
            },
        },
        "proxy": {
            "type": "object",
            "additionalProperties": False,
            "required": ["host"],
            "properties": {
                "host": {"type": "string", "minLength": 1},
                "port": {"type": "integer", "minimum": 0, "maximum": 65535},
                "username": {"type": "string"},
                "password": {"type": "string"},
                "no_proxy_hosts": {
                    "oneOf": [
                        {"type": "string"},
                        {"type": "array", "items": {"type": "string"}},
                    ]
                },
            },
        },
    },
}


def load_yaml_or_json(path: Path) -> Dict[str, Any]:
    """Load a YAML/JSON file into a dict.

    The top-level must be an object.
    """
    if not path.exists():
        raise FileNotFoundError(path)

    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    elif path.suffix.lower() == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    else:
        raise ConfigurationError(f"Unsupported config file extension: {path}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top-level config must be an object: {path}")
    return data


def validate_against_schema(
    instance: Dict[str, Any],
    schema: Dict[str, Any],
    *,
    where: str,
) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(map(str, e.path)))
    if errors:
        msgs = []
        for e in errors[:20]:
            loc = "/".join([str(p) for p in e.path])
            msgs.append(f"- {where}:{loc}: {e.message}")
        if len(errors) > 20:
            msgs.append(f"... ({len(errors)-20} more)")
        raise ConfigurationError("\n".join(msgs))


@dataclass(frozen=True)
class RunConfig:
    emulator: EmulatorConfig
    sdk_home: Optional[str] = None
    channel: Channel = Channel.STABLE
    proxy: Optional[ProxySettings] = None
    port: int = EMULATOR_DEFAULT_PORT
    max_emulators: int = 1
    adb_port: int = ADB_DEFAULT_PORT
    adb_trace: bool = False
    adb_start_timeout_s: float = 5.0
    no_window: bool = False
    no_audio: bool = False
    no_snapshot: bool = False
    wipe_data: bool = False


def run_config_from_dict(raw: Dict[str, Any], *, where: str = "<config>") -> RunConfig:
    validate_against_schema(raw, RUN_CONFIG_SCHEMA, where=where)

    sdk = raw.get("sdk") or {}
    emulator = raw.get("emulator") or {}
    adb = raw.get("adb") or {}

    config = EmulatorConfig.from_mapping(emulator)
    config.ensure_valid()

    return RunConfig(
        emulator=config,
        sdk_home=sdk.get("home"),
        channel=Channel.from_name(sdk.get("channel") or "stable"),
        proxy=ProxySettings.from_mapping(raw.get("proxy")),
        port=int(emulator.get("port", EMULATOR_DEFAULT_PORT)),
        max_emulators=int(adb.get("max_emulators", 1)),
        adb_port=int(adb.get("port", ADB_DEFAULT_PORT)),
        adb_trace=bool(adb.get("trace", False)),
        adb_start_timeout_s=float(adb.get("start_timeout_s", 5.0)),
        no_window=bool(emulator.get("no_window", False)),
        no_audio=bool(emulator.get("no_audio", False)),
        no_snapshot=bool(emulator.get("no_snapshot", False)),
        wipe_data=bool(emulator.get("wipe_data", False)),
    )


def load_run_config(path: Path) -> RunConfig:
    return run_config_from_dict(load_yaml_or_json(path), where=str(path))
