"""Process execution and the provisioning orchestrator."""

from __future__ import annotations

from android_emulator.runtime.process import ProcessRunner
from android_emulator.runtime.runner import EmulatorRunner, RunResult, required_components

__all__ = [
    "EmulatorRunner",
    "ProcessRunner",
    "RunResult",
    "required_components",
]
