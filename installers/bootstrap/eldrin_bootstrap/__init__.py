"""Eldrin Server binary provisioning: platform resolution, download, install."""

__version__ = "0.1.0"

from .errors import (
    FetchError,
    HttpStatusError,
    InstallFailedError,
    ProvisionError,
    TooManyRedirectsError,
    TransportError,
    UnsupportedPlatformError,
    WriteError,
)
from .fetcher import MAX_REDIRECTS, download_file
from .resolver import HostPlatform, PLATFORM_ARTIFACTS, detect_host, resolve_artifact, supported_platforms
from .service import InstallResult, binary_path, ensure_binary, install_binary, release_tag_url, release_url

__all__ = [
    "FetchError",
    "HostPlatform",
    "HttpStatusError",
    "InstallFailedError",
    "InstallResult",
    "MAX_REDIRECTS",
    "PLATFORM_ARTIFACTS",
    "ProvisionError",
    "TooManyRedirectsError",
    "TransportError",
    "UnsupportedPlatformError",
    "WriteError",
    "binary_path",
    "detect_host",
    "download_file",
    "ensure_binary",
    "install_binary",
    "release_tag_url",
    "release_url",
    "resolve_artifact",
    "supported_platforms",
]
