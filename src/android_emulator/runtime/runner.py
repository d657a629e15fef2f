"""Provision and launch an Android emulator.

`EmulatorRunner.run` executes a fixed sequence of steps: resolve the SDK
executables, prepare the AVD ini file, list targets, install missing
components, apply available updates, start adb, create the AVD and finally
launch the emulator (which blocks for the emulator lifetime). The first
failing step aborts the run with `ProvisioningError`; nothing is rolled back.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from android_emulator.config.emulator_config import EmulatorConfig
from android_emulator.config.loader import RunConfig
from android_emulator.errors import AndroidEmulatorError, ConfigurationError, ProvisioningError
from android_emulator.runtime.process import ProcessRunner, Sink
from android_emulator.sdk.channel import Channel
from android_emulator.sdk.cli.adb import ADBCLIBuilder
from android_emulator.sdk.cli.avdmanager import AVDManagerCLIBuilder, Target
from android_emulator.sdk.cli.emulator import EmulatorCLIBuilder, validate_port
from android_emulator.sdk.cli.sdkmanager import SDKManagerCLIBuilder
from android_emulator.sdk.constants import (
    ADB_DEFAULT_PORT,
    ANDROID_CACHE,
    EMULATOR_DEFAULT_PORT,
    ENV_ANDROID_AVD_HOME,
    ENV_ANDROID_SDK_ROOT,
)
from android_emulator.sdk.packages import SDKPackages, merge_ids
from android_emulator.sdk.proxy import ProxySettings
from android_emulator.tools.home import DefaultHomeLocator, HomeLocator, avd_home_for, home_env_vars
from android_emulator.tools.installation import ToolLocator

logger = logging.getLogger(__name__)

STEP_RESOLVE_EXECUTABLES = "resolve_executables"
STEP_PREPARE_AVD_INI = "prepare_avd_ini"
STEP_LIST_TARGETS = "list_targets"
STEP_DIFF_COMPONENTS = "diff_components"
STEP_INSTALL = "install"
STEP_UPDATE = "update"
STEP_START_ADB = "start_adb"
STEP_CREATE_AVD = "create_avd"
STEP_LAUNCH_EMULATOR = "launch_emulator"

STEPS = (
    STEP_RESOLVE_EXECUTABLES,
    STEP_PREPARE_AVD_INI,
    STEP_LIST_TARGETS,
    STEP_DIFF_COMPONENTS,
    STEP_INSTALL,
    STEP_UPDATE,
    STEP_START_ADB,
    STEP_CREATE_AVD,
    STEP_LAUNCH_EMULATOR,
)

ADB_START_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class Executables:
    avd_manager: str
    sdk_manager: str
    adb: str
    emulator: str


@dataclass
class RunResult:
    steps: List[str] = field(default_factory=list)
    required_components: List[str] = field(default_factory=list)
    installed_components: List[str] = field(default_factory=list)
    updated_components: List[str] = field(default_factory=list)
    targets: List[Target] = field(default_factory=list)
    avd_ini: Optional[Path] = None


def required_components(config: EmulatorConfig) -> List[str]:
    """SDK components an AVD for `config` needs: platform first, then system image."""

    return merge_ids([config.platform_component, config.system_image_component])


def read_ini(path: Path) -> Dict[str, str]:
    """Flat ``key=value`` file; blank lines and ``#``/``!`` comments are ignored."""

    values: Dict[str, str] = {}
    if not path.exists():
        return values
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        sep = min((i for i in (line.find("="), line.find(":")) if i >= 0), default=-1)
        if sep < 0:
            values[line] = ""
            continue
        values[line[:sep].strip()] = line[sep + 1 :].strip()
    return values


def write_ini(path: Path, values: Mapping[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = "".join(f"{k}={v}\n" for k, v in values.items())
    path.write_text(text, encoding="utf-8")


def _require(name: str, path: Optional[str]) -> str:
    if not path:
        raise ConfigurationError(f"No executable found: {name}")
    return path


class EmulatorRunner:
    def __init__(
        self,
        config: EmulatorConfig,
        locator: ToolLocator,
        *,
        proxy: Optional[ProxySettings] = None,
        environment: Optional[Mapping[str, str]] = None,
        process_runner: Optional[ProcessRunner] = None,
        channel: Channel = Channel.STABLE,
        max_emulators: int = 1,
        adb_port: int = ADB_DEFAULT_PORT,
        adb_trace: bool = False,
        adb_start_timeout_s: float = ADB_START_TIMEOUT_S,
        home_locator: Optional[HomeLocator] = None,
        no_window: bool = False,
        no_audio: bool = False,
        no_snapshot: bool = False,
        wipe_data: bool = False,
    ) -> None:
        self.config = config
        self.locator = locator
        self.proxy = proxy
        self.environment: Dict[str, str] = dict(environment or {})
        self.process_runner = process_runner or ProcessRunner()
        self.channel = channel
        self.max_emulators = max_emulators
        self.adb_port = adb_port
        self.adb_trace = adb_trace
        self.adb_start_timeout_s = adb_start_timeout_s
        self.home_locator: HomeLocator = home_locator or DefaultHomeLocator()
        self.no_window = no_window
        self.no_audio = no_audio
        self.no_snapshot = no_snapshot
        self.wipe_data = wipe_data

    @classmethod
    def from_run_config(cls, run_config: RunConfig, locator: ToolLocator, **kwargs: Any) -> "EmulatorRunner":
        """Runner configured from a loaded `RunConfig`; `kwargs` override its values."""

        options: Dict[str, Any] = {
            "proxy": run_config.proxy,
            "channel": run_config.channel,
            "max_emulators": run_config.max_emulators,
            "adb_port": run_config.adb_port,
            "adb_trace": run_config.adb_trace,
            "adb_start_timeout_s": run_config.adb_start_timeout_s,
            "no_window": run_config.no_window,
            "no_audio": run_config.no_audio,
            "no_snapshot": run_config.no_snapshot,
            "wipe_data": run_config.wipe_data,
        }
        options.update(kwargs)
        return cls(run_config.emulator, locator, **options)

    @contextmanager
    def _step(self, result: RunResult, step: str) -> Iterator[None]:
        logger.info("[%s] starting", step)
        try:
            yield
        except ProvisioningError:
            raise
        except (AndroidEmulatorError, OSError, ValueError) as exc:
            logger.error("[%s] failed: %s", step, exc)
            raise ProvisioningError(step, str(exc)) from exc
        result.steps.append(step)

    def build_environment(
        self, workspace: Path, env: Optional[Mapping[str, str]] = None
    ) -> Dict[str, str]:
        """Environment handed to every tool; the process environment is never modified."""

        local: Dict[str, str] = dict(self.environment)
        local.update({str(k): str(v) for k, v in (env or {}).items()})

        build_env_vars = getattr(self.locator, "build_env_vars", None)
        if callable(build_env_vars):
            build_env_vars(local)

        home = self.home_locator.locate(workspace)
        for key, value in home_env_vars(home).items():
            local.setdefault(key, value)
        return local

    def resolve_avd_home(self, workspace: Path, env: Mapping[str, str]) -> Path:
        avd_home = env.get(ENV_ANDROID_AVD_HOME)
        if avd_home:
            return Path(avd_home)
        home = self.home_locator.locate(workspace)
        if home is not None:
            return avd_home_for(home)
        avd_home = os.environ.get(ENV_ANDROID_AVD_HOME)
        if avd_home:
            return Path(avd_home)
        return Path.home() / ANDROID_CACHE / "avd"

    def run(
        self,
        workspace: Optional[Union[str, Path]],
        *,
        sink: Optional[Sink] = None,
        env: Optional[Mapping[str, str]] = None,
        port: int = EMULATOR_DEFAULT_PORT,
    ) -> RunResult:
        result = RunResult()
        runner = self.process_runner
        config = self.config

        with self._step(result, STEP_RESOLVE_EXECUTABLES):
            if workspace is None or not str(workspace).strip():
                raise ConfigurationError("Workspace is required")
            workspace = Path(workspace)
            config.ensure_valid()
            port = validate_port(port)
            exe = Executables(
                avd_manager=_require("avdmanager", self.locator.get_avd_manager()),
                sdk_manager=_require("sdkmanager", self.locator.get_sdk_manager()),
                adb=_require("adb", self.locator.get_adb()),
                emulator=_require("emulator", self.locator.get_emulator()),
            )
            run_env = self.build_environment(workspace, env)
            sdk_root = run_env.get(ENV_ANDROID_SDK_ROOT)
            avd_home = self.resolve_avd_home(workspace, run_env)

        with self._step(result, STEP_PREPARE_AVD_INI):
            ini_path = avd_home / f"{config.name}.ini"
            values = read_ini(ini_path)
            write_ini(ini_path, values)
            result.avd_ini = ini_path

        with self._step(result, STEP_LIST_TARGETS):
            list_targets = AVDManagerCLIBuilder.of(exe.avd_manager).silent(True).list_targets()
            try:
                result.targets = runner.execute_and_parse(list_targets, cwd=workspace, env=run_env)
            except AndroidEmulatorError as e:
                logger.warning("Unable to list targets: %s", e)
            else:
                logger.info("%d target(s) available", len(result.targets))

        def _sdkmanager() -> SDKManagerCLIBuilder:
            return (
                SDKManagerCLIBuilder.of(exe.sdk_manager)
                .channel(self.channel)
                .sdk_root(sdk_root)
                .proxy(self.proxy)
            )

        with self._step(result, STEP_DIFF_COMPONENTS):
            packages: SDKPackages = runner.execute_and_parse(
                _sdkmanager().list(), cwd=workspace, env=run_env
            )
            result.required_components = required_components(config)
            installed = set(packages.installed_ids())
            missing = [c for c in result.required_components if c not in installed]
            logger.info("missing components: %s", ", ".join(missing) or "none")

        with self._step(result, STEP_INSTALL):
            if missing:
                runner.execute(_sdkmanager().install(missing), cwd=workspace, env=run_env, sink=sink)
                result.installed_components = list(missing)

        with self._step(result, STEP_UPDATE):
            updates = packages.update_ids()
            if updates:
                runner.execute(_sdkmanager().update(updates), cwd=workspace, env=run_env, sink=sink)
                result.updated_components = list(updates)

        with self._step(result, STEP_START_ADB):
            adb = ADBCLIBuilder.of(exe.adb).port(self.adb_port).max_emulators(self.max_emulators)
            if self.adb_trace:
                adb.trace()
            runner.execute(
                adb.start(),
                cwd=workspace,
                env=run_env,
                sink=sink,
                timeout_s=self.adb_start_timeout_s,
            )

        with self._step(result, STEP_CREATE_AVD):
            create = (
                AVDManagerCLIBuilder.of(exe.avd_manager)
                .silent(True)
                .package_path(config.system_image_component)
                .abi(config.target_abi)
                .device(config.device)
                .sdcard(config.sdcard)
                .create(config.name)
            )
            # avdmanager asks whether to create a custom hardware profile
            runner.execute(create, cwd=workspace, env=run_env, sink=sink, input_text="no\n")

        with self._step(result, STEP_LAUNCH_EMULATOR):
            resolution = config.resolution
            emulator = (
                EmulatorCLIBuilder.of(exe.emulator)
                .avd_name(config.name)
                .data_dir(avd_home)
                .locale(config.locale)
                .skin(resolution.skin_name if resolution is not None else None)
                .proxy(self.proxy)
                .no_window(self.no_window)
                .no_audio(self.no_audio)
                .no_snapshot(self.no_snapshot)
                .wipe_data(self.wipe_data)
            )
            runner.execute(emulator.build(port), cwd=workspace, env=run_env, sink=sink)

        return result
