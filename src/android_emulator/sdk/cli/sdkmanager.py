"""Command lines for ``sdkmanager``.

The builder only stages options; `list()`, `install()` and `update()` emit a
finished `CLICommand`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.channel import Channel
from android_emulator.sdk.cli.command import CLICommand, require_executable
from android_emulator.sdk.constants import ENV_HTTP_PROXY, ENV_HTTPS_PROXY
from android_emulator.sdk.packages import SDKPackages, merge_ids, parse_sdk_packages
from android_emulator.sdk.proxy import SDK_REPOSITORY_URL, ProxySettings

logger = logging.getLogger(__name__)

ARG_OBSOLETE = "--include_obsolete"
ARG_VERBOSE = "--verbose"
ARG_CHANNEL = "--channel"
ARG_SDK_ROOT = "--sdk_root"
ARG_LIST = "--list"
ARG_INSTALL = "--install"
ARG_UPDATE = "--update"
ARG_PROXY_HOST = "--proxy_host"
ARG_PROXY_PORT = "--proxy_port"
ARG_PROXY_PROTOCOL = "--proxy"
ARG_FORCE_HTTP = "--no_https"


def _key_value(key: str, value: object) -> str:
    return f"{key}={value}"


class SDKManagerCLIBuilder:
    def __init__(self, executable: str) -> None:
        self._executable = require_executable(executable)
        self._proxy: Optional[ProxySettings] = None
        self._sdk_root: Optional[str] = None
        self._channel: Optional[Channel] = None
        self._verbose = False
        self._obsolete = False

    @classmethod
    def of(cls, executable: Optional[Union[str, Path]]) -> "SDKManagerCLIBuilder":
        return cls("" if executable is None else str(executable))

    def proxy(self, proxy: Optional[ProxySettings]) -> "SDKManagerCLIBuilder":
        self._proxy = proxy
        return self

    def sdk_root(self, sdk_root: Optional[Union[str, Path]]) -> "SDKManagerCLIBuilder":
        self._sdk_root = None if sdk_root is None else str(sdk_root)
        return self

    def channel(self, channel: Optional[Channel]) -> "SDKManagerCLIBuilder":
        self._channel = channel
        return self

    def verbose(self, verbose: bool) -> "SDKManagerCLIBuilder":
        self._verbose = bool(verbose)
        return self

    def obsolete(self, obsolete: bool) -> "SDKManagerCLIBuilder":
        self._obsolete = bool(obsolete)
        return self

    def list(self) -> CLICommand[SDKPackages]:
        """Command listing installed, available and updatable packages."""

        arguments, env = self._common()
        arguments.append(ARG_LIST)
        return CLICommand.of(self._executable, arguments, env, parser=parse_sdk_packages)

    def install(self, packages: Optional[Iterable[str]]) -> CLICommand[None]:
        return self._with_packages(ARG_INSTALL, packages)

    def update(self, packages: Optional[Iterable[str]]) -> CLICommand[None]:
        return self._with_packages(ARG_UPDATE, packages)

    def _with_packages(self, action: str, packages: Optional[Iterable[str]]) -> CLICommand[None]:
        ids = merge_ids(str(p).strip() for p in (packages or ()) if str(p).strip())
        if not ids:
            raise ConfigurationError("At least a package must be specified")

        arguments, env = self._common()
        arguments.append(action)
        arguments.extend(ids)
        return CLICommand.of(self._executable, arguments, env)

    def _common(self) -> tuple[List[str], Dict[str, str]]:
        arguments: List[str] = []
        if self._sdk_root:
            arguments.append(_key_value(ARG_SDK_ROOT, self._sdk_root))
        if self._channel is not None:
            arguments.append(_key_value(ARG_CHANNEL, self._channel.value_id))
        if self._verbose:
            arguments.append(ARG_VERBOSE)
        if self._obsolete:
            arguments.append(ARG_OBSOLETE)
        arguments.append(ARG_FORCE_HTTP)

        env: Dict[str, str] = {}
        proxy = self._proxy
        if proxy is not None and not proxy.is_exempt(SDK_REPOSITORY_URL):
            try:
                # sdkmanager reads HTTP(S)_PROXY; authentication is not honoured by every release
                uri = proxy.to_uri()
            except ValueError as e:
                logger.debug("Proxy URI not usable (%s); passing proxy as arguments", e)
                arguments.extend(self._proxy_arguments(proxy))
            else:
                env[ENV_HTTP_PROXY] = uri
                env[ENV_HTTPS_PROXY] = uri
        return arguments, env

    @staticmethod
    def _proxy_arguments(proxy: ProxySettings) -> List[str]:
        arguments = [
            _key_value(ARG_PROXY_PROTOCOL, "http"),
            _key_value(ARG_PROXY_HOST, proxy.host),
        ]
        if proxy.port != -1:
            arguments.append(_key_value(ARG_PROXY_PORT, proxy.port))
        return arguments
