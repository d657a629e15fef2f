from android_emulator.config.emulator_config import EmulatorConfig, ValidationError
from android_emulator.config.loader import RunConfig, load_run_config
from android_emulator.config.screen import ScreenDensity, ScreenResolution

__all__ = [
    "EmulatorConfig",
    "RunConfig",
    "ScreenDensity",
    "ScreenResolution",
    "ValidationError",
    "load_run_config",
]
