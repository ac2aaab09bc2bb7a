"""Release artifact download with bounded redirect following."""

from __future__ import annotations

import os
import ssl
import tempfile
import urllib.error
import urllib.request
from http.client import HTTPException
from pathlib import Path
from typing import BinaryIO, Iterator
from urllib.parse import urljoin, urlparse

import certifi

from eldrin_core.config import DEFAULT_TIMEOUT_S, InstallerSettings
from eldrin_core.logging_setup import get_logger

from .errors import HttpStatusError, TooManyRedirectsError, TransportError, WriteError


MAX_REDIRECTS = 5
CHUNK_SIZE = 1024 * 1024
USER_AGENT = "eldrin-server-postinstall"

_LOGGER = get_logger("fetcher")


def build_ssl_context(settings: InstallerSettings | None = None) -> ssl.SSLContext:
    """Create TLS context for release downloads with explicit CA handling."""
    settings = settings or InstallerSettings()
    if settings.allow_insecure_tls:
        return ssl._create_unverified_context()

    if settings.ca_bundle:
        return ssl.create_default_context(cafile=settings.ca_bundle)

    return ssl.create_default_context(cafile=certifi.where())


class _NoRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Surface every 3xx response to the caller as an ``HTTPError``."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


def _build_opener(context: ssl.SSLContext) -> urllib.request.OpenerDirector:
    return urllib.request.build_opener(
        _NoRedirectHandler(),
        urllib.request.HTTPSHandler(context=context),
    )


def _redirect_target(current: str, location: str) -> str | None:
    target = urljoin(current, location)
    if urlparse(target).scheme not in ("http", "https"):
        return None
    return target


def _iter_chunks(response: BinaryIO) -> Iterator[bytes]:
    while True:
        try:
            chunk = response.read(CHUNK_SIZE)
        except (OSError, HTTPException) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        if not chunk:
            return
        yield chunk


def _expected_length(response: BinaryIO) -> int | None:
    headers = getattr(response, "headers", None)
    raw = headers.get("Content-Length") if headers is not None else None
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        _LOGGER.debug("could not remove partial download %s: %s", path, exc)


def _stream_to_file(response: BinaryIO, dest: Path) -> int:
    """Copy ``response`` into ``dest`` through a sibling temp file.

    ``dest`` only ever appears complete: the body lands in a temporary file in
    the same directory which is renamed over ``dest`` once fully written. A
    body shorter than its declared ``Content-Length`` is a ``TransportError``;
    http.client reports an early close as a normal end of stream.
    """
    expected = _expected_length(response)
    try:
        handle = tempfile.NamedTemporaryFile(
            dir=dest.parent, prefix=f".{dest.name}.", suffix=".part", delete=False
        )
    except OSError as exc:
        raise WriteError(dest, str(exc)) from exc

    tmp_path = Path(handle.name)
    written = 0
    try:
        try:
            with handle:
                for chunk in _iter_chunks(response):
                    handle.write(chunk)
                    written += len(chunk)
            if expected is not None and written != expected:
                raise TransportError(
                    f"Connection closed after {written} of {expected} bytes"
                )
            os.replace(tmp_path, dest)
        except OSError as exc:
            raise WriteError(dest, str(exc)) from exc
    except BaseException:
        _discard(tmp_path)
        raise
    return written


def download_file(
    url: str,
    dest: Path,
    *,
    timeout_s: int = DEFAULT_TIMEOUT_S,
    ssl_context: ssl.SSLContext | None = None,
    user_agent: str = USER_AGENT,
) -> Path:
    """Stream ``url`` into ``dest``, following at most ``MAX_REDIRECTS`` hops.

    Raises ``HttpStatusError`` for any final status other than 200,
    ``TooManyRedirectsError`` when the redirect chain is longer than the bound,
    ``TransportError`` for connection, DNS, TLS and read failures, and
    ``WriteError`` for local filesystem failures. No partial file is left at
    ``dest`` on any failure.
    """
    dest = Path(dest)
    opener = _build_opener(ssl_context or build_ssl_context())
    current = url

    for hop in range(MAX_REDIRECTS + 1):
        _LOGGER.debug("GET %s (hop %d)", current, hop)
        request = urllib.request.Request(
            current,
            headers={"User-Agent": user_agent, "Accept": "*/*"},
        )
        try:
            response = opener.open(request, timeout=timeout_s)
        except urllib.error.HTTPError as exc:
            location = exc.headers.get("Location") if exc.headers is not None else None
            exc.close()
            if 300 <= exc.code < 400 and location:
                target = _redirect_target(current, location)
                if target is not None:
                    _LOGGER.debug("redirect %d -> %s", exc.code, target)
                    current = target
                    continue
            raise HttpStatusError(exc.code, str(exc.reason or ""), current) from exc
        except urllib.error.URLError as exc:
            raise TransportError(str(exc.reason)) from exc
        except (OSError, HTTPException) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        with response:
            if response.status != 200:
                raise HttpStatusError(response.status, response.reason or "", current)
            written = _stream_to_file(response, dest)

        _LOGGER.info(
            "downloaded %s (%d bytes) to %s",
            current,
            written,
            dest,
            extra={"event": "download_complete", "url": current, "path": dest, "bytes": written},
        )
        return dest

    raise TooManyRedirectsError(url, MAX_REDIRECTS)
