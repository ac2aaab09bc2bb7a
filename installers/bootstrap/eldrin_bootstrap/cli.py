"""CLI that provisions the Eldrin Server binary for the current host."""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace
from pathlib import Path

from eldrin_core import build_doctor_payload, configure_logging, get_logger, load_settings
from eldrin_core.config import InstallerSettings, normalize_version

from .errors import InstallFailedError, UnsupportedPlatformError
from .resolver import detect_host, resolve_artifact
from .service import binary_path, install_binary, installed_version, release_url


_LOGGER = get_logger("cli")


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _error(msg: str = "") -> None:
    print(msg, file=sys.stderr)


def _settings_from_args(args: argparse.Namespace) -> InstallerSettings:
    settings = load_settings()
    if args.install_root:
        settings = replace(settings, install_root=Path(args.install_root).expanduser().resolve())
    if args.version:
        settings = replace(settings, version=normalize_version(args.version))
    return settings


def cmd_install(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    version = settings.version or installed_version()

    try:
        install_binary(version, settings=settings, progress=print)
    except UnsupportedPlatformError as exc:
        _LOGGER.error("unsupported platform %s", exc.platform_key, extra={"event": "unsupported_platform"})
        _error(f"Unsupported platform: {exc.platform_key}")
        _error(f"Supported platforms: {', '.join(exc.supported)}")
        return 1
    except InstallFailedError as exc:
        _error(f"Failed to download Eldrin Server binary: {exc.reason}")
        _error()
        _error("You can manually download the binary from:")
        _error(f"  {exc.manual_url}")
        _error()
        _error("And place it at:")
        _error(f"  {exc.binary_path}")
        return 1
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    version = settings.version or installed_version()
    host = detect_host()
    target = binary_path(host, settings.install_root)

    try:
        artifact: str | None = resolve_artifact(host)
    except UnsupportedPlatformError:
        artifact = None

    install = {
        "host": host.key,
        "version": version,
        "artifact": artifact,
        "release_url": release_url(version, artifact) if artifact else None,
        "binary_path": target,
        "installed": target.exists(),
        "executable": target.exists() and (host.is_windows or os.access(target, os.X_OK)),
    }
    _print_json(build_doctor_payload(settings, install))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eldrin-server-install",
        description="Download the Eldrin Server binary for this platform",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def _common(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("--version", default=None, help="Release version (defaults to the installed package version)")
        cmd.add_argument("--install-root", default=None, help="Directory that receives bin/")
        cmd.add_argument("--verbose", action="store_true", help="Echo log records to the console")

    install_cmd = sub.add_parser("install", help="Download and install the binary if missing")
    _common(install_cmd)
    install_cmd.set_defaults(func=cmd_install)

    doctor_cmd = sub.add_parser("doctor", help="Print platform and install diagnostics")
    _common(doctor_cmd)
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(console=args.verbose, directory=load_settings().log_dir)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
