"""Host platform detection and release artifact resolution."""

from __future__ import annotations

import platform
from dataclasses import dataclass

from .errors import UnsupportedPlatformError


BINARY_BASE_NAME = "eldrin-core-binary"

PLATFORM_ARTIFACTS: dict[tuple[str, str], str] = {
    ("darwin", "arm64"): "eldrin-core-darwin-arm64",
    ("darwin", "x64"): "eldrin-core-darwin-x64",
    ("linux", "x64"): "eldrin-core-linux-x64",
    ("linux", "arm64"): "eldrin-core-linux-arm64",
    ("win32", "x64"): "eldrin-core-win-x64.exe",
}


@dataclass(frozen=True)
class HostPlatform:
    os_name: str
    arch: str

    @property
    def key(self) -> str:
        return f"{self.os_name}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.os_name == "win32"


def _normalize_os(system: str) -> str:
    s = system.lower()
    if s.startswith("win"):
        return "win32"
    if s == "darwin":
        return "darwin"
    if s == "linux":
        return "linux"
    return s


def _normalize_arch(machine: str) -> str:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "x64"
    if m in ("aarch64", "arm64"):
        return "arm64"
    return m


def detect_host(system: str | None = None, machine: str | None = None) -> HostPlatform:
    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine
    return HostPlatform(os_name=_normalize_os(system), arch=_normalize_arch(machine))


def supported_platforms() -> list[str]:
    return sorted(f"{os_name}-{arch}" for os_name, arch in PLATFORM_ARTIFACTS)


def resolve_artifact(host: HostPlatform) -> str:
    """Return the release artifact name built for ``host``.

    Lookup is exact on the (os, arch) pair; there is no fallback to another
    architecture of the same OS.
    """
    artifact = PLATFORM_ARTIFACTS.get((host.os_name, host.arch))
    if artifact is None:
        raise UnsupportedPlatformError(host.key, supported_platforms())
    return artifact


def binary_filename(host: HostPlatform) -> str:
    if host.is_windows:
        return BINARY_BASE_NAME + ".exe"
    return BINARY_BASE_NAME
