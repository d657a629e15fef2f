"""Strategies deciding where the SDK tools keep their per-user state."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Protocol, Union, runtime_checkable

from android_emulator.sdk.constants import (
    ANDROID_CACHE,
    ENV_ANDROID_AVD_HOME,
    ENV_ANDROID_EMULATOR_HOME,
    ENV_ANDROID_SDK_HOME,
)

WORKSPACE_HOME_DIR = ".android-sdk-home"


@runtime_checkable
class HomeLocator(Protocol):
    def locate(self, workspace: Path) -> Optional[Path]:
        """Home for a run in `workspace`; None lets the tools use their defaults."""
        ...


class DefaultHomeLocator:
    def locate(self, workspace: Path) -> Optional[Path]:
        return None


class WorkspaceHomeLocator:
    """Keeps AVDs and tool caches inside the workspace, isolated per run."""

    def __init__(self, dirname: str = WORKSPACE_HOME_DIR) -> None:
        self.dirname = dirname

    def locate(self, workspace: Path) -> Optional[Path]:
        return Path(workspace) / self.dirname


class FixedHomeLocator:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def locate(self, workspace: Path) -> Optional[Path]:
        return self.path


def avd_home_for(home: Path) -> Path:
    return Path(home) / ANDROID_CACHE / "avd"


def home_env_vars(home: Optional[Path]) -> Dict[str, str]:
    if home is None:
        return {}
    home = Path(home)
    return {
        ENV_ANDROID_SDK_HOME: str(home),
        ENV_ANDROID_EMULATOR_HOME: str(home / ANDROID_CACHE),
        ENV_ANDROID_AVD_HOME: str(avd_home_for(home)),
    }
