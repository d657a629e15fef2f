from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.cli.command import CLICommand, require_executable

logger = logging.getLogger(__name__)

ARG_SILENT = "--silent"
ARG_VERBOSE = "--verbose"
ARG_CLEAR_CACHE = "--clear-cache"
ARG_LIST_TARGET = ("list", "target")
ARG_LIST_AVD = ("list", "avd")
ARG_COMPACT = "--compact"
ARG_CREATE = ("create", "avd")
ARG_DELETE = ("delete", "avd")
ARG_NAME = "--name"
ARG_PACKAGE = "--package"
ARG_FORCE = "--force"
ARG_DEVICE = "--device"
ARG_ABI = "--abi"
ARG_SDCARD = "--sdcard"


@dataclass
class Target:
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    api_level: Optional[int] = None
    revision: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "api_level": self.api_level,
            "revision": self.revision,
        }


def _safe_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


def _target_id(value: str) -> str:
    # id: 1 or "android-29"
    first = value.find('"')
    last = value.rfind('"')
    if first != -1 and last > first:
        return value[first + 1 : last]
    return value.split(" or ", 1)[0].strip()


def parse_targets(text: Optional[str]) -> List[Target]:
    """Parse ``avdmanager list target`` output.

    Every ``id:`` line opens a new target; other known keys fill the current
    one. Unknown keys, lines before the first id and numeric values that do
    not parse are ignored.
    """

    targets: List[Target] = []
    target: Optional[Target] = None
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        lc_line = line.lower()
        if lc_line.startswith("-") or lc_line.startswith("available android targets"):
            continue
        if ":" not in line:
            continue

        key, _, value = line.partition(":")
        key = key.strip().lower()
        value = value.strip()
        if not value:
            continue

        if key == "id":
            target = Target(id=_target_id(value))
            targets.append(target)
            continue
        if target is None:
            continue

        if key == "name":
            target.name = value
        elif key == "type":
            target.type = value.lower()
        elif key == "api level":
            target.api_level = _safe_int(value)
        elif key == "revision":
            target.revision = _safe_int(value)
        else:
            logger.debug("Ignoring target key %r", key)
    return targets


def parse_avd_names(text: Optional[str]) -> List[str]:
    """Parse ``avdmanager list avd --compact`` (one AVD name per line)."""

    names: List[str] = []
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line or " " in line or line.startswith("["):
            continue
        names.append(line)
    return names


def _require_name(name: Optional[str]) -> str:
    text = "" if name is None else str(name).strip()
    if not text:
        raise ConfigurationError("Device name is required")
    return text


class AVDManagerCLIBuilder:
    def __init__(self, executable: str) -> None:
        self._executable = require_executable(executable)
        self._verbose = False
        self._silent = False
        self._sdcard: Optional[str] = None
        self._package_path: Optional[str] = None
        self._abi: Optional[str] = None
        self._device: Optional[str] = None

    @classmethod
    def of(cls, executable: Optional[Union[str, Path]]) -> "AVDManagerCLIBuilder":
        return cls("" if executable is None else str(executable))

    def abi(self, abi: Optional[str]) -> "AVDManagerCLIBuilder":
        self._abi = abi or None
        return self

    def device(self, device: Optional[str]) -> "AVDManagerCLIBuilder":
        self._device = device or None
        return self

    def package_path(self, package_path: Optional[str]) -> "AVDManagerCLIBuilder":
        self._package_path = package_path or None
        return self

    def sdcard(self, size: Optional[Union[int, str]]) -> "AVDManagerCLIBuilder":
        if size is None or (isinstance(size, int) and size < 0):
            self._sdcard = None
        else:
            self._sdcard = str(size).strip() or None
        return self

    def verbose(self, verbose: bool) -> "AVDManagerCLIBuilder":
        self._verbose = bool(verbose)
        return self

    def silent(self, silent: bool) -> "AVDManagerCLIBuilder":
        self._silent = bool(silent)
        return self

    def _global_options(self) -> List[str]:
        arguments: List[str] = []
        if self._verbose:
            arguments.append(ARG_VERBOSE)
        elif self._silent:
            arguments.append(ARG_SILENT)
        arguments.append(ARG_CLEAR_CACHE)
        return arguments

    def create(self, name: Optional[str]) -> CLICommand[None]:
        """Command creating (or overwriting) the AVD `name`."""

        name = _require_name(name)
        arguments = self._global_options()
        arguments.extend(ARG_CREATE)
        arguments += [ARG_NAME, name]
        if self._package_path is not None:
            arguments += [ARG_PACKAGE, self._package_path]
        if self._device is not None:
            arguments += [ARG_DEVICE, self._device]
        if self._abi is not None:
            arguments += [ARG_ABI, self._abi]
        if self._sdcard is not None:
            arguments += [ARG_SDCARD, self._sdcard]
        arguments.append(ARG_FORCE)
        return CLICommand.of(self._executable, arguments)

    def list_targets(self) -> CLICommand[List[Target]]:
        arguments = self._global_options()
        arguments.extend(ARG_LIST_TARGET)
        return CLICommand.of(self._executable, arguments, parser=parse_targets)

    def list_avds(self) -> CLICommand[List[str]]:
        arguments = self._global_options()
        arguments.extend(ARG_LIST_AVD)
        arguments.append(ARG_COMPACT)
        return CLICommand.of(self._executable, arguments, parser=parse_avd_names)

    def delete_avd(self, name: Optional[str]) -> CLICommand[None]:
        name = _require_name(name)
        arguments = self._global_options()
        arguments.extend(ARG_DELETE)
        arguments += [ARG_NAME, name]
        return CLICommand.of(self._executable, arguments)
