"""Failure types raised by the provisioning pipeline."""

from __future__ import annotations

from pathlib import Path


class ProvisionError(RuntimeError):
    """Base class for every fatal provisioning failure."""


class UnsupportedPlatformError(ProvisionError):
    def __init__(self, platform_key: str, supported: list[str]) -> None:
        self.platform_key = platform_key
        self.supported = list(supported)
        super().__init__(f"Unsupported platform: {platform_key}")


class FetchError(ProvisionError):
    """Raised by the artifact fetcher."""


class TooManyRedirectsError(FetchError):
    def __init__(self, url: str, limit: int) -> None:
        self.url = url
        self.limit = limit
        super().__init__("Too many redirects")


class HttpStatusError(FetchError):
    def __init__(self, status: int, reason: str, url: str) -> None:
        self.status = status
        self.reason = reason
        self.url = url
        super().__init__(f"Failed to download: {status} {reason}".rstrip())


class TransportError(FetchError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class WriteError(FetchError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(reason)


class InstallFailedError(ProvisionError):
    """Download or permission failure, with the manual fallback attached."""

    def __init__(self, reason: str, manual_url: str, binary_path: Path) -> None:
        self.reason = reason
        self.manual_url = manual_url
        self.binary_path = binary_path
        super().__init__(reason)
