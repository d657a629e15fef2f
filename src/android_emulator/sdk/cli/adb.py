from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.cli.command import CLICommand, require_executable
from android_emulator.sdk.constants import (
    ADB_DEFAULT_PORT,
    ADB_TRACE_ALL,
    ADB_TRANSPORT_BASE_PORT,
    ENV_ADB_LOCAL_TRANSPORT_MAX_PORT,
    ENV_ADB_TRACE,
)

ARG_START_SERVER = "start-server"
ARG_KILL_SERVER = "kill-server"
ARG_DEVICES = "devices"


def local_transport_max_port(max_emulators: int) -> int:
    """Last port adb scans for emulators; each emulator uses a console/adb port pair."""

    return ADB_TRANSPORT_BASE_PORT + 2 * int(max_emulators)


def parse_devices(text: Optional[str]) -> List[Tuple[str, str]]:
    """Parse ``adb devices`` into ``(serial, state)`` pairs."""

    devices: List[Tuple[str, str]] = []
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line or line.startswith("*") or line.startswith("List of devices attached"):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        devices.append((parts[0], parts[1]))
    return devices


class ADBCLIBuilder:
    def __init__(self, executable: str) -> None:
        self._executable = require_executable(executable)
        self._serial: Optional[str] = None
        self._trace = False
        self._port = ADB_DEFAULT_PORT
        self._max_emulators = 16

    @classmethod
    def of(cls, executable: Optional[Union[str, Path]]) -> "ADBCLIBuilder":
        return cls("" if executable is None else str(executable))

    def serial(self, serial: Optional[str]) -> "ADBCLIBuilder":
        self._serial = serial or None
        return self

    def port(self, port: int) -> "ADBCLIBuilder":
        if int(port) <= 1023:
            # system ports
            raise ConfigurationError(f"Invalid port {port}")
        self._port = int(port)
        return self

    def max_emulators(self, max_emulators: int) -> "ADBCLIBuilder":
        if int(max_emulators) < 1:
            raise ConfigurationError(f"Invalid number of emulators {max_emulators}")
        self._max_emulators = int(max_emulators)
        return self

    def trace(self) -> "ADBCLIBuilder":
        self._trace = True
        return self

    def start(self) -> CLICommand[None]:
        return CLICommand.of(self._executable, self._global_options() + [ARG_START_SERVER], self._env())

    def stop(self) -> CLICommand[None]:
        return CLICommand.of(self._executable, self._global_options() + [ARG_KILL_SERVER], self._env())

    def devices(self) -> CLICommand[List[Tuple[str, str]]]:
        return CLICommand.of(
            self._executable,
            self._global_options() + [ARG_DEVICES],
            self._env(),
            parser=parse_devices,
        )

    def _global_options(self) -> List[str]:
        arguments: List[str] = []
        if self._serial is not None:
            arguments += ["-s", self._serial]
        arguments += ["-P", str(self._port)]
        return arguments

    def _env(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self._trace:
            env[ENV_ADB_TRACE] = ADB_TRACE_ALL
        env[ENV_ADB_LOCAL_TRANSPORT_MAX_PORT] = str(local_transport_max_port(self._max_emulators))
        return env
