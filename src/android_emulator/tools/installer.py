"""Bootstrap of a freshly unpacked SDK: tool configuration and base packages."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from android_emulator.errors import ConfigurationError
from android_emulator.runtime.process import ProcessRunner, Sink
from android_emulator.sdk.channel import Channel
from android_emulator.sdk.cli.sdkmanager import SDKManagerCLIBuilder
from android_emulator.sdk.constants import (
    ANDROID_CACHE,
    DDMS_CONFIG,
    ENV_ANDROID_SDK_HOME,
    LOCAL_REPO_CONFIG,
)
from android_emulator.sdk.packages import SDKPackages
from android_emulator.sdk.proxy import ProxySettings
from android_emulator.tools.installation import AndroidSDKInstallation, Platform

logger = logging.getLogger(__name__)

DEFAULT_PACKAGES: Sequence[str] = (
    "platform-tools",
    "build-tools",
    "emulator",
    "extras;android;m2repository",
    "extras;google;m2repository",
)

DDMS_SETTINGS = "pingOptIn=false\npingId=0\n"
LOCAL_REPO_SETTINGS = "count=0"


def write_configurations(sdk_root: Union[str, Path]) -> Path:
    """Write the tool settings that keep sdkmanager from prompting; existing files are kept."""

    sdk_home = Path(sdk_root) / ANDROID_CACHE
    sdk_home.mkdir(parents=True, exist_ok=True)

    ddms = sdk_home / DDMS_CONFIG
    if not ddms.exists():
        ddms.write_text(DDMS_SETTINGS, encoding="utf-8")

    repos = sdk_home / LOCAL_REPO_CONFIG
    if not repos.exists():
        repos.write_text(LOCAL_REPO_SETTINGS, encoding="utf-8")
    return sdk_home


def select_latest_packages(
    catalog: SDKPackages,
    channel: Channel = Channel.STABLE,
    packages: Sequence[str] = DEFAULT_PACKAGES,
) -> List[str]:
    """Id of the newest available package for each of `packages`.

    The stable channel never picks a preview release.
    """

    include_previews = channel is not Channel.STABLE
    selected: List[str] = []
    for prefix in packages:
        latest = catalog.latest(prefix, include_previews=include_previews)
        if latest is None:
            raise ConfigurationError(f"No package available for {prefix} on channel {channel.label}")
        logger.debug("selected %s %s for %s", latest.id, latest.version, prefix)
        selected.append(latest.id)
    return selected


def license_answers(count: int) -> str:
    return "\r\n".join(["y"] * count)


def install_base_packages(
    sdk_root: Union[str, Path],
    *,
    channel: Channel = Channel.STABLE,
    proxy: Optional[ProxySettings] = None,
    runner: Optional[ProcessRunner] = None,
    platform: Optional[Platform] = None,
    env: Optional[Mapping[str, str]] = None,
    sink: Optional[Sink] = None,
) -> List[str]:
    """Install the newest base packages into `sdk_root` and return their ids."""

    installation = AndroidSDKInstallation(Path(sdk_root), platform)
    sdkmanager = installation.get_sdk_manager()
    if sdkmanager is None:
        raise ConfigurationError(f"No executable found: sdkmanager under {installation.home}")

    runner = runner or ProcessRunner()
    write_configurations(installation.home)

    run_env: Dict[str, str] = dict(env or {})
    run_env[ENV_ANDROID_SDK_HOME] = str(installation.home)

    def _builder() -> SDKManagerCLIBuilder:
        return (
            SDKManagerCLIBuilder.of(sdkmanager)
            .obsolete(True)
            .proxy(proxy)
            .sdk_root(installation.home)
            .channel(channel)
        )

    catalog = runner.execute_and_parse(_builder().list(), cwd=installation.home, env=run_env)
    components = select_latest_packages(catalog, channel)
    logger.info("Installing %s", ", ".join(components))

    runner.execute(
        _builder().install(components),
        cwd=installation.home,
        env=run_env,
        sink=sink,
        input_text=license_answers(len(components)),
    )
    return components
