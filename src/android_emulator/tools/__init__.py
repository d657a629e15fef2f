from android_emulator.tools.home import (
    DefaultHomeLocator,
    FixedHomeLocator,
    HomeLocator,
    WorkspaceHomeLocator,
)
from android_emulator.tools.installation import AndroidSDKInstallation, Platform, ToolLocator

__all__ = [
    "AndroidSDKInstallation",
    "DefaultHomeLocator",
    "FixedHomeLocator",
    "HomeLocator",
    "Platform",
    "ToolLocator",
    "WorkspaceHomeLocator",
]
