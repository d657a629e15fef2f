"""Location of the SDK command line tools inside an SDK installation."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Protocol, Tuple, runtime_checkable

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.constants import ENV_ANDROID_SDK_ROOT, ENV_PATH

CMD_SDK_MANAGER = "sdkmanager"
CMD_AVD_MANAGER = "avdmanager"
CMD_ADB = "adb"
CMD_EMULATOR = "emulator"

# Searched in order; the legacy tools/bin layout is still shipped by older SDKs.
MANAGER_BIN_DIRS: Tuple[Tuple[str, ...], ...] = (
    ("cmdline-tools", "latest", "bin"),
    ("tools", "bin"),
)
PLATFORM_TOOLS_DIR = "platform-tools"
EMULATOR_DIR = "emulator"


class Platform(enum.Enum):
    LINUX = ("linux", "", "")
    OSX = ("osx", "", "")
    WINDOWS = ("windows", ".bat", ".exe")

    def __init__(self, os_name: str, script_extension: str, binary_extension: str) -> None:
        self.os_name = os_name
        self.script_extension = script_extension
        self.binary_extension = binary_extension

    @classmethod
    def current(cls) -> "Platform":
        if sys.platform.startswith("win"):
            return cls.WINDOWS
        if sys.platform == "darwin":
            return cls.OSX
        return cls.LINUX


@runtime_checkable
class ToolLocator(Protocol):
    def get_sdk_manager(self) -> Optional[str]: ...

    def get_avd_manager(self) -> Optional[str]: ...

    def get_adb(self) -> Optional[str]: ...

    def get_emulator(self) -> Optional[str]: ...


@dataclass(frozen=True)
class AndroidSDKInstallation:
    """An SDK rooted at `home`, as laid out by the Google installers."""

    home: Path
    platform: Optional[Platform] = None

    def __post_init__(self) -> None:
        if not str(self.home).strip():
            raise ConfigurationError("SDK root is required")
        object.__setattr__(self, "home", Path(self.home))
        if self.platform is None:
            object.__setattr__(self, "platform", Platform.current())

    @classmethod
    def for_environment(
        cls,
        home: str,
        env: Optional[MutableMapping[str, str]] = None,
        *,
        platform: Optional[Platform] = None,
    ) -> "AndroidSDKInstallation":
        """Build an installation whose `home` may reference ``$VAR``/``${VAR}``."""

        expanded = _expand(home or "", env if env is not None else os.environ).strip()
        if not expanded:
            raise ConfigurationError("SDK root is required")
        return cls(Path(expanded).expanduser(), platform)

    def _platform(self) -> Platform:
        return self.platform or Platform.current()

    @property
    def bin_dir(self) -> Path:
        """Directory holding the manager scripts (the first existing one)."""

        for parts in MANAGER_BIN_DIRS:
            candidate = self.home.joinpath(*parts)
            if candidate.is_dir():
                return candidate
        return self.home.joinpath(*MANAGER_BIN_DIRS[0])

    def _manager(self, command: str) -> Optional[str]:
        name = command + self._platform().script_extension
        for parts in MANAGER_BIN_DIRS:
            candidate = self.home.joinpath(*parts, name)
            if candidate.is_file():
                return str(candidate)
        return None

    def _binary(self, folder: str, command: str) -> Optional[str]:
        candidate = self.home / folder / (command + self._platform().binary_extension)
        return str(candidate) if candidate.is_file() else None

    def get_sdk_manager(self) -> Optional[str]:
        return self._manager(CMD_SDK_MANAGER)

    def get_avd_manager(self) -> Optional[str]:
        return self._manager(CMD_AVD_MANAGER)

    def get_adb(self) -> Optional[str]:
        return self._binary(PLATFORM_TOOLS_DIR, CMD_ADB)

    def get_emulator(self) -> Optional[str]:
        return self._binary(EMULATOR_DIR, CMD_EMULATOR)

    def build_env_vars(self, env: MutableMapping[str, str]) -> MutableMapping[str, str]:
        env[ENV_ANDROID_SDK_ROOT] = str(self.home)
        path = env.get(ENV_PATH)
        bin_dir = str(self.bin_dir)
        env[ENV_PATH] = bin_dir if not path else bin_dir + os.pathsep + path
        return env

    def env_vars(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        self.build_env_vars(env)
        return env


def _expand(text: str, env: MutableMapping[str, str]) -> str:
    out = str(text)
    # longest names first so $ANDROID_HOME does not eat $ANDROID_HOME_X
    for key in sorted(env, key=len, reverse=True):
        value = str(env[key])
        out = out.replace("${" + key + "}", value).replace("$" + key, value)
    return out
