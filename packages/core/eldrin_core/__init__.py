"""Core services for installer settings, logging, and diagnostics."""

from .config import InstallerSettings, load_settings
from .diagnostics import build_doctor_payload, redact
from .logging_setup import configure_logging, get_logger, log_dir

__all__ = [
    "InstallerSettings",
    "build_doctor_payload",
    "configure_logging",
    "get_logger",
    "load_settings",
    "log_dir",
    "redact",
]
