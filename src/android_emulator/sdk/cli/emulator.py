from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.cli.command import CLICommand, require_executable
from android_emulator.sdk.constants import EMULATOR_MAX_PORT, EMULATOR_MIN_PORT
from android_emulator.sdk.proxy import ProxySettings

logger = logging.getLogger(__name__)

ARG_AVD = "-avd"
ARG_PORTS = "-ports"
ARG_DATA_DIR = "-datadir"
ARG_LOCALE = "-change-locale"
ARG_SKIN = "-skin"
ARG_HTTP_PROXY = "-http-proxy"
ARG_NO_WINDOW = "-no-window"
ARG_NO_AUDIO = "-no-audio"
ARG_NO_SNAPSHOT = "-no-snapshot"
ARG_WIPE_DATA = "-wipe-data"
ARG_NO_BOOT_ANIM = "-no-boot-anim"

# Emulator hosts its web requests itself, so exemptions are checked against this URL.
EMULATOR_PROXY_CHECK_URL = "http://www.google.com"


def validate_port(port: int) -> int:
    """Console port of an emulator: even, within the range adb scans."""

    port = int(port)
    if port % 2 != 0 or not EMULATOR_MIN_PORT <= port <= EMULATOR_MAX_PORT:
        raise ConfigurationError(
            f"Invalid emulator port {port}: must be even and between "
            f"{EMULATOR_MIN_PORT} and {EMULATOR_MAX_PORT}"
        )
    return port


class EmulatorCLIBuilder:
    def __init__(self, executable: str) -> None:
        self._executable = require_executable(executable)
        self._avd_name: Optional[str] = None
        self._data_dir: Optional[str] = None
        self._locale: Optional[str] = None
        self._skin: Optional[str] = None
        self._proxy: Optional[ProxySettings] = None
        self._flags: List[str] = []

    @classmethod
    def of(cls, executable: Optional[Union[str, Path]]) -> "EmulatorCLIBuilder":
        return cls("" if executable is None else str(executable))

    def avd_name(self, name: Optional[str]) -> "EmulatorCLIBuilder":
        self._avd_name = (name or "").strip() or None
        return self

    def data_dir(self, data_dir: Optional[Union[str, Path]]) -> "EmulatorCLIBuilder":
        self._data_dir = None if data_dir is None else str(data_dir)
        return self

    def locale(self, locale: Optional[str]) -> "EmulatorCLIBuilder":
        self._locale = locale or None
        return self

    def skin(self, skin: Optional[str]) -> "EmulatorCLIBuilder":
        self._skin = skin or None
        return self

    def proxy(self, proxy: Optional[ProxySettings]) -> "EmulatorCLIBuilder":
        self._proxy = proxy
        return self

    def no_window(self, enabled: bool = True) -> "EmulatorCLIBuilder":
        return self._flag(ARG_NO_WINDOW, enabled)

    def no_audio(self, enabled: bool = True) -> "EmulatorCLIBuilder":
        return self._flag(ARG_NO_AUDIO, enabled)

    def no_snapshot(self, enabled: bool = True) -> "EmulatorCLIBuilder":
        return self._flag(ARG_NO_SNAPSHOT, enabled)

    def wipe_data(self, enabled: bool = True) -> "EmulatorCLIBuilder":
        return self._flag(ARG_WIPE_DATA, enabled)

    def no_boot_anim(self, enabled: bool = True) -> "EmulatorCLIBuilder":
        return self._flag(ARG_NO_BOOT_ANIM, enabled)

    def _flag(self, flag: str, enabled: bool) -> "EmulatorCLIBuilder":
        if enabled and flag not in self._flags:
            self._flags.append(flag)
        elif not enabled and flag in self._flags:
            self._flags.remove(flag)
        return self

    def build(self, port: int) -> CLICommand[None]:
        """Command launching the AVD with console on `port` and adb on `port + 1`."""

        if self._avd_name is None:
            raise ConfigurationError("Device name is required")
        port = validate_port(port)

        arguments = [ARG_AVD, self._avd_name, ARG_PORTS, f"{port},{port + 1}"]
        if self._data_dir is not None:
            arguments += [ARG_DATA_DIR, self._data_dir]
        if self._locale is not None:
            arguments += [ARG_LOCALE, self._locale]
        if self._skin is not None:
            arguments += [ARG_SKIN, self._skin]
        arguments += self._proxy_arguments()
        arguments += self._flags
        return CLICommand.of(self._executable, arguments)

    def _proxy_arguments(self) -> List[str]:
        proxy = self._proxy
        if proxy is None or proxy.is_exempt(EMULATOR_PROXY_CHECK_URL):
            return []
        try:
            return [ARG_HTTP_PROXY, proxy.to_uri()]
        except ValueError as e:
            logger.debug("Proxy URI not usable (%s); passing host and port only", e)
            return [ARG_HTTP_PROXY, proxy.host_port()]
