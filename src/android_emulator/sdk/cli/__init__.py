from android_emulator.sdk.cli.adb import ADBCLIBuilder
from android_emulator.sdk.cli.avdmanager import AVDManagerCLIBuilder, Target
from android_emulator.sdk.cli.command import CLICommand
from android_emulator.sdk.cli.emulator import EmulatorCLIBuilder
from android_emulator.sdk.cli.sdkmanager import SDKManagerCLIBuilder

__all__ = [
    "ADBCLIBuilder",
    "AVDManagerCLIBuilder",
    "CLICommand",
    "EmulatorCLIBuilder",
    "SDKManagerCLIBuilder",
    "Target",
]
