"""Installer pipeline shared by the CLI and runtime wrappers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Callable

from eldrin_core.config import InstallerSettings
from eldrin_core.logging_setup import get_logger

from .errors import FetchError, InstallFailedError
from .fetcher import build_ssl_context, download_file
from .resolver import HostPlatform, binary_filename, detect_host, resolve_artifact


GITHUB_REPO = "eldrin-project/eldrin-server"
GITHUB_BASE_URL = "https://github.com"
DISTRIBUTION_NAME = "eldrin-server"
DEFAULT_INSTALL_ROOT = Path(__file__).resolve().parent
EXECUTABLE_MODE = 0o755

STATUS_INSTALLED = "installed"
STATUS_ALREADY_INSTALLED = "already_installed"

ProgressCallback = Callable[[str], None]
FetchCallable = Callable[..., Path]

_LOGGER = get_logger("installer")


@dataclass(frozen=True)
class InstallResult:
    host: HostPlatform
    binary_path: Path
    status: str
    url: str | None = None


def installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        from . import __version__

        return __version__


def release_url(version: str, artifact: str, repo: str = GITHUB_REPO) -> str:
    return f"{GITHUB_BASE_URL}/{repo}/releases/download/v{version}/{artifact}"


def release_tag_url(version: str, repo: str = GITHUB_REPO) -> str:
    return f"{GITHUB_BASE_URL}/{repo}/releases/tag/v{version}"


def binary_path(host: HostPlatform, install_root: Path | None = None) -> Path:
    root = install_root or DEFAULT_INSTALL_ROOT
    return root / "bin" / binary_filename(host)


def make_executable(path: Path, host: HostPlatform) -> bool:
    """Apply 0755 on POSIX hosts. Windows relies on the ``.exe`` suffix."""
    if host.is_windows:
        return False
    os.chmod(path, EXECUTABLE_MODE)
    return True


def install_binary(
    version: str,
    *,
    install_root: Path | None = None,
    host: HostPlatform | None = None,
    settings: InstallerSettings | None = None,
    fetch: FetchCallable | None = None,
    progress: ProgressCallback | None = None,
) -> InstallResult:
    progress = progress or (lambda _msg: None)
    fetch = fetch or download_file
    settings = settings or InstallerSettings()
    host = host or detect_host()
    target = binary_path(host, install_root or settings.install_root)

    if target.exists():
        _LOGGER.info("binary already present at %s", target, extra={"event": "already_installed"})
        progress("Eldrin Server binary already installed.")
        return InstallResult(host=host, binary_path=target, status=STATUS_ALREADY_INSTALLED)

    artifact = resolve_artifact(host)
    url = release_url(version, artifact)
    manual_url = release_tag_url(version)

    progress(f"Downloading Eldrin Server for {host.key}...")
    progress(f"URL: {url}")
    _LOGGER.info("installing %s %s to %s", artifact, version, target, extra={"event": "install_started"})

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fetch(
            url,
            target,
            timeout_s=settings.timeout_s,
            ssl_context=build_ssl_context(settings),
        )
    except FetchError as exc:
        _LOGGER.error("download failed: %s", exc, extra={"event": "install_failed"})
        raise InstallFailedError(str(exc), manual_url, target) from exc
    except OSError as exc:
        _LOGGER.error("could not prepare %s: %s", target.parent, exc, extra={"event": "install_failed"})
        raise InstallFailedError(str(exc), manual_url, target) from exc

    try:
        if not make_executable(target, host):
            _LOGGER.info("permission step skipped on %s", host.key, extra={"event": "chmod_skipped", "path": target})
    except OSError as exc:
        _LOGGER.error("chmod failed for %s: %s", target, exc, extra={"event": "install_failed"})
        raise InstallFailedError(str(exc), manual_url, target) from exc

    _LOGGER.info("installed %s", target, extra={"event": "install_complete"})
    progress("Eldrin Server installed successfully!")
    return InstallResult(host=host, binary_path=target, status=STATUS_INSTALLED, url=url)


def ensure_binary(
    version: str | None = None,
    *,
    install_root: Path | None = None,
    settings: InstallerSettings | None = None,
    progress: ProgressCallback | None = None,
) -> Path:
    """Return the installed binary path, downloading it first when missing."""
    settings = settings or InstallerSettings()
    result = install_binary(
        version or settings.version or installed_version(),
        install_root=install_root,
        settings=settings,
        progress=progress,
    )
    return result.binary_path
