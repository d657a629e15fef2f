"""Run built commands as child processes.

This is the only place that spawns processes. Output (stdout and stderr
merged) is streamed line by line to a sink while the child runs; the exit
code is returned or, for `execute`, turned into `CommandExecutionError`.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
import time
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from android_emulator.errors import CommandExecutionError, CommandTimeoutError, ConfigurationError
from android_emulator.sdk.cli.command import CLICommand
from android_emulator.sdk.proxy import mask_secrets

logger = logging.getLogger(__name__)

R = TypeVar("R")

Sink = Union[Callable[[str], Any], IO[str]]

# Daemons forked by a tool (adb start-server) may keep the output pipe open,
# so draining after exit stops once the output goes quiet.
_PUMP_DRAIN_TIMEOUT_S = 5.0
_PUMP_QUIET_S = 0.2


def _log_sink(line: str) -> None:
    logger.info("%s", mask_secrets(line))


def _as_writer(sink: Optional[Sink]) -> Callable[[str], Any]:
    if sink is None:
        return _log_sink
    write = getattr(sink, "write", None)
    if callable(write):
        def _write(line: str) -> None:
            write(line + "\n")

        return _write
    if callable(sink):
        return sink
    raise TypeError(f"unsupported output sink: {type(sink).__name__}")


class _Pump(threading.Thread):
    """Copies child output to the sink until end of file."""

    def __init__(self, stream: IO[str], write: Callable[[str], Any]) -> None:
        super().__init__(daemon=True)
        self._stream = stream
        self._write = write
        self.lines = 0

    def run(self) -> None:
        try:
            for line in iter(self._stream.readline, ""):
                self._write(line.rstrip("\r\n"))
                self.lines += 1
        except ValueError:
            # stream closed while the child was being killed
            pass
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def drain(self) -> None:
        """Wait for the remaining output, giving up once no line arrives for a while."""

        deadline = time.monotonic() + _PUMP_DRAIN_TIMEOUT_S
        while self.is_alive():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            seen = self.lines
            self.join(timeout=min(_PUMP_QUIET_S, remaining))
            if self.lines == seen:
                break


class ProcessRunner:
    """Spawns `CLICommand`s.

    The child environment is ``os.environ`` (when `inherit_environ`), then the
    caller's `env`, then the command's own entries, later ones winning.
    """

    def __init__(self, *, inherit_environ: bool = True) -> None:
        self._inherit_environ = inherit_environ

    def merged_env(
        self, command: CLICommand[Any], env: Optional[Mapping[str, str]] = None
    ) -> Dict[str, str]:
        merged: Dict[str, str] = dict(os.environ) if self._inherit_environ else {}
        merged.update({str(k): str(v) for k, v in (env or {}).items()})
        merged.update(command.env)
        return merged

    def run(
        self,
        command: CLICommand[Any],
        *,
        cwd: Optional[Union[str, os.PathLike]] = None,
        env: Optional[Mapping[str, str]] = None,
        sink: Optional[Sink] = None,
        timeout_s: Optional[float] = None,
        input_text: Optional[str] = None,
    ) -> int:
        """Run `command` to completion and return its exit code.

        With `timeout_s`, a child still running at the deadline is killed and
        `CommandTimeoutError` is raised.
        """

        write = _as_writer(sink)
        logger.info("CMD %s", command.to_display())
        if command.env:
            logger.debug("ENV %s", mask_secrets(" ".join(f"{k}={v}" for k, v in command.env.items())))

        try:
            proc = subprocess.Popen(
                list(command.argv),
                cwd=None if cwd is None else str(cwd),
                env=self.merged_env(command, env),
                stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise ConfigurationError(f"No executable found: {command.executable}") from e
        except PermissionError as e:
            raise ConfigurationError(f"Not executable: {command.executable}") from e

        pump = _Pump(proc.stdout, write)
        pump.start()

        try:
            if input_text is not None and proc.stdin is not None:
                try:
                    proc.stdin.write(input_text)
                    proc.stdin.close()
                except BrokenPipeError:
                    logger.debug("%s closed stdin before reading input", command.executable)
            exit_code = proc.wait(timeout=timeout_s)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
            pump.drain()
            raise CommandTimeoutError(command.executable, float(timeout_s or 0)) from None
        except BaseException:
            # KeyboardInterrupt while waiting on a long running emulator
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            raise

        pump.drain()
        logger.debug("%s exited with %d", command.executable, exit_code)
        return exit_code

    def execute(
        self,
        command: CLICommand[Any],
        *,
        cwd: Optional[Union[str, os.PathLike]] = None,
        env: Optional[Mapping[str, str]] = None,
        sink: Optional[Sink] = None,
        timeout_s: Optional[float] = None,
        input_text: Optional[str] = None,
    ) -> None:
        exit_code = self.run(
            command, cwd=cwd, env=env, sink=sink, timeout_s=timeout_s, input_text=input_text
        )
        if exit_code != 0:
            raise CommandExecutionError(command.executable, exit_code)

    def capture(
        self,
        command: CLICommand[Any],
        *,
        cwd: Optional[Union[str, os.PathLike]] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout_s: Optional[float] = None,
    ) -> str:
        lines: List[str] = []
        exit_code = self.run(command, cwd=cwd, env=env, sink=lines.append, timeout_s=timeout_s)
        output = "\n".join(lines)
        if exit_code != 0:
            raise CommandExecutionError(command.executable, exit_code, output=output)
        return output

    def execute_and_parse(
        self,
        command: CLICommand[R],
        *,
        cwd: Optional[Union[str, os.PathLike]] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout_s: Optional[float] = None,
    ) -> R:
        if not command.has_parser():
            raise RuntimeError(f"{command.executable} command does not have an output parser")
        return command.parse(self.capture(command, cwd=cwd, env=env, timeout_s=timeout_s))
