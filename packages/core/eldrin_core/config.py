"""Installer settings schema loaded from ``ELDRIN_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


DEFAULT_TIMEOUT_S = 180
MIN_TIMEOUT_S = 5
MAX_TIMEOUT_S = 3600

ENV_VERSION = "ELDRIN_VERSION"
ENV_INSTALL_ROOT = "ELDRIN_INSTALL_ROOT"
ENV_TIMEOUT = "ELDRIN_DOWNLOAD_TIMEOUT"
ENV_CA_BUNDLE = "ELDRIN_CA_BUNDLE"
ENV_ALLOW_INSECURE_TLS = "ELDRIN_ALLOW_INSECURE_TLS"
ENV_LOG_DIR = "ELDRIN_LOG_DIR"


@dataclass
class InstallerSettings:
    version: str | None = None
    install_root: Path | None = None
    timeout_s: int = DEFAULT_TIMEOUT_S
    ca_bundle: str | None = None
    allow_insecure_tls: bool = False
    log_dir: Path | None = None


def _text(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name, "").strip()
    return value or None


def _path(environ: Mapping[str, str], name: str) -> Path | None:
    value = _text(environ, name)
    return Path(value).expanduser() if value else None


def _normalize_timeout(raw: str | None) -> int:
    if raw is None:
        return DEFAULT_TIMEOUT_S
    try:
        value = int(float(raw))
    except (ValueError, OverflowError):
        return DEFAULT_TIMEOUT_S
    return max(MIN_TIMEOUT_S, min(MAX_TIMEOUT_S, value))


def normalize_version(raw: str | None) -> str | None:
    # Release tags carry the "v" prefix themselves.
    if raw and raw[0] in ("v", "V") and raw[1:2].isdigit():
        return raw[1:]
    return raw


def load_settings(environ: Mapping[str, str] | None = None) -> InstallerSettings:
    env = os.environ if environ is None else environ
    return InstallerSettings(
        version=normalize_version(_text(env, ENV_VERSION)),
        install_root=_path(env, ENV_INSTALL_ROOT),
        timeout_s=_normalize_timeout(_text(env, ENV_TIMEOUT)),
        ca_bundle=_text(env, ENV_CA_BUNDLE),
        allow_insecure_tls=_text(env, ENV_ALLOW_INSECURE_TLS) == "1",
        log_dir=_path(env, ENV_LOG_DIR),
    )
