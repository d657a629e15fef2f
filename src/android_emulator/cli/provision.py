from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from android_emulator.config.loader import load_run_config
from android_emulator.errors import AndroidEmulatorError, ConfigurationError, ProvisioningError
from android_emulator.runtime.process import ProcessRunner
from android_emulator.runtime.runner import EmulatorRunner
from android_emulator.sdk.channel import Channel
from android_emulator.sdk.cli.avdmanager import AVDManagerCLIBuilder
from android_emulator.sdk.cli.sdkmanager import SDKManagerCLIBuilder
from android_emulator.sdk.constants import ENV_ANDROID_HOME, ENV_ANDROID_SDK_ROOT
from android_emulator.tools.home import DefaultHomeLocator, HomeLocator, WorkspaceHomeLocator
from android_emulator.tools.installation import AndroidSDKInstallation
from android_emulator.tools.installer import install_base_packages

_SDK_ROOT_HELP = "Android SDK root (default: $ANDROID_SDK_ROOT, then $ANDROID_HOME)."


def _default_sdk_root() -> Optional[str]:
    return os.environ.get(ENV_ANDROID_SDK_ROOT) or os.environ.get(ENV_ANDROID_HOME) or None


def _installation(sdk_root: Optional[str]) -> AndroidSDKInstallation:
    if not sdk_root:
        raise ConfigurationError(
            f"SDK root is required (--sdk-root, ${ENV_ANDROID_SDK_ROOT} or ${ENV_ANDROID_HOME})"
        )
    return AndroidSDKInstallation.for_environment(sdk_root)


def _require_tool(name: str, path: Optional[str], installation: AndroidSDKInstallation) -> str:
    if path is None:
        raise ConfigurationError(f"No executable found: {name} under {installation.home}")
    return path


def _cmd_provision(args: argparse.Namespace) -> int:
    run_config = load_run_config(args.config)
    installation = _installation(args.sdk_root or run_config.sdk_home or _default_sdk_root())
    home_locator: HomeLocator = (
        WorkspaceHomeLocator() if args.isolated_home else DefaultHomeLocator()
    )
    runner = EmulatorRunner.from_run_config(run_config, installation, home_locator=home_locator)

    workspace = (args.workspace or Path.cwd()).resolve()
    port = args.port if args.port is not None else run_config.port
    result = runner.run(workspace, port=port)
    print(f"OK: completed steps {', '.join(result.steps)}")
    return 0


def _cmd_list_packages(args: argparse.Namespace) -> int:
    installation = _installation(args.sdk_root)
    sdkmanager = _require_tool("sdkmanager", installation.get_sdk_manager(), installation)
    command = (
        SDKManagerCLIBuilder.of(sdkmanager)
        .sdk_root(installation.home)
        .channel(Channel.from_name(args.channel))
        .obsolete(args.obsolete)
        .list()
    )
    packages = ProcessRunner().execute_and_parse(command, env=installation.env_vars())

    if args.json:
        print(json.dumps(packages.as_dict(), indent=2, sort_keys=True))
        return 0
    for section, rows in packages.as_dict().items():
        print(f"{section}:")
        for row in rows:
            print(f"  {row['id']}  {row['version']}")
    return 0


def _cmd_list_targets(args: argparse.Namespace) -> int:
    installation = _installation(args.sdk_root)
    avdmanager = _require_tool("avdmanager", installation.get_avd_manager(), installation)
    command = AVDManagerCLIBuilder.of(avdmanager).silent(True).list_targets()
    targets = ProcessRunner().execute_and_parse(command, env=installation.env_vars())

    if args.json:
        print(json.dumps([t.as_dict() for t in targets], indent=2))
        return 0
    if not targets:
        print("(no targets installed)")
    for t in targets:
        print(f"{t.id}  {t.name or ''}  api={t.api_level}  rev={t.revision}")
    return 0


def _cmd_install_base(args: argparse.Namespace) -> int:
    installation = _installation(args.sdk_root)
    installed = install_base_packages(
        installation.home,
        channel=Channel.from_name(args.channel),
        platform=installation.platform,
    )
    print(f"OK: installed {', '.join(installed)}")
    return 0


def _cmd_validate_config(args: argparse.Namespace) -> int:
    run_config = load_run_config(args.config)
    print(f"OK: {args.config} is valid (avd {run_config.emulator.name})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="android-emulator",
        description="Provision Android SDK components and launch an emulator.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    prov_p = sub.add_parser("provision", help="Install missing components, create the AVD and launch it.")
    prov_p.add_argument("--config", type=Path, required=True, help="Run configuration (YAML or JSON).")
    prov_p.add_argument("--workspace", type=Path, default=None, help="Working directory (default: cwd).")
    prov_p.add_argument("--port", type=int, default=None, help="Emulator console port (even, 5554-5682).")
    prov_p.add_argument("--sdk-root", default=None, help="Override sdk.home of the run configuration.")
    prov_p.add_argument(
        "--isolated-home",
        action="store_true",
        help="Keep AVDs and tool state under <workspace>/.android-sdk-home.",
    )
    prov_p.set_defaults(func=_cmd_provision)

    pkg_p = sub.add_parser("list-packages", help="List installed, available and updatable packages.")
    pkg_p.add_argument("--sdk-root", default=_default_sdk_root(), help=_SDK_ROOT_HELP)
    pkg_p.add_argument("--channel", default="stable", choices=[c.name.lower() for c in Channel])
    pkg_p.add_argument("--obsolete", action="store_true", help="Include obsolete packages.")
    pkg_p.add_argument("--json", action="store_true", help="Print the catalog as JSON.")
    pkg_p.set_defaults(func=_cmd_list_packages)

    tgt_p = sub.add_parser("list-targets", help="List the targets known to avdmanager.")
    tgt_p.add_argument("--sdk-root", default=_default_sdk_root(), help=_SDK_ROOT_HELP)
    tgt_p.add_argument("--json", action="store_true", help="Print the targets as JSON.")
    tgt_p.set_defaults(func=_cmd_list_targets)

    base_p = sub.add_parser("install-base", help="Install the newest base SDK packages.")
    base_p.add_argument("--sdk-root", default=_default_sdk_root(), help=_SDK_ROOT_HELP)
    base_p.add_argument("--channel", default="stable", choices=[c.name.lower() for c in Channel])
    base_p.set_defaults(func=_cmd_install_base)

    val_p = sub.add_parser("validate-config", help="Validate a run configuration without running it.")
    val_p.add_argument("--config", type=Path, required=True, help="Run configuration (YAML or JSON).")
    val_p.set_defaults(func=_cmd_validate_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        return int(args.func(args))
    except FileNotFoundError as e:
        print(f"ERROR: file not found: {e}", file=sys.stderr)
        return 2
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except ProvisioningError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except AndroidEmulatorError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
