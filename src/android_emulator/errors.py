from __future__ import annotations

from typing import Optional


class AndroidEmulatorError(RuntimeError):
    """Base class for every failure raised by this package."""


class ConfigurationError(AndroidEmulatorError, ValueError):
    """Raised before any process is spawned when a required input is missing or invalid."""


class CommandExecutionError(AndroidEmulatorError):
    """Raised when an external tool exits with a non-zero code."""

    def __init__(self, executable: str, exit_code: int, *, output: Optional[str] = None) -> None:
        self.executable = executable
        self.exit_code = int(exit_code)
        self.output = output
        msg = f"{executable} failed. exit code: {self.exit_code}."
        if output:
            msg += f"\n{output[-2000:]}"
        super().__init__(msg)


class CommandTimeoutError(AndroidEmulatorError):
    """Raised when a bounded command does not exit in time (the process is killed)."""

    def __init__(self, executable: str, timeout_s: float) -> None:
        self.executable = executable
        self.timeout_s = float(timeout_s)
        super().__init__(f"{executable} did not complete within {self.timeout_s:g}s and was killed")


class ProvisioningError(AndroidEmulatorError):
    """Aggregated failure of an orchestration run.

    `step` names the step that failed; the underlying error is chained as
    `__cause__`.
    """

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"step {step} failed: {message}")
