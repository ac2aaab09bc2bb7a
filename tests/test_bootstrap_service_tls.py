from __future__ import annotations

import eldrin_bootstrap.fetcher as fetcher
from eldrin_core.config import InstallerSettings, load_settings


def test_build_ssl_context_prefers_configured_bundle(monkeypatch) -> None:
    calls: dict[str, str | None] = {}

    def fake_create_default_context(*, cafile=None):
        calls["cafile"] = cafile
        return object()

    monkeypatch.setattr(fetcher.ssl, "create_default_context", fake_create_default_context)

    ctx = fetcher.build_ssl_context(InstallerSettings(ca_bundle="/tmp/custom-ca.pem"))
    assert ctx is not None
    assert calls["cafile"] == "/tmp/custom-ca.pem"


def test_build_ssl_context_uses_unverified_flag(monkeypatch) -> None:
    sentinel = object()
    monkeypatch.setattr(fetcher.ssl, "_create_unverified_context", lambda: sentinel)

    settings = load_settings({"ELDRIN_ALLOW_INSECURE_TLS": "1", "ELDRIN_CA_BUNDLE": "/tmp/ignored.pem"})
    ctx = fetcher.build_ssl_context(settings)
    assert ctx is sentinel


def test_build_ssl_context_uses_certifi_bundle(monkeypatch) -> None:
    calls: dict[str, str | None] = {}

    def fake_create_default_context(*, cafile=None):
        calls["cafile"] = cafile
        return object()

    class FakeCertifi:
        @staticmethod
        def where() -> str:
            return "/tmp/certifi.pem"

    monkeypatch.setattr(fetcher.ssl, "create_default_context", fake_create_default_context)
    monkeypatch.setattr(fetcher, "certifi", FakeCertifi)

    ctx = fetcher.build_ssl_context()
    assert ctx is not None
    assert calls["cafile"] == "/tmp/certifi.pem"


def test_install_passes_tls_context_to_fetch(monkeypatch, tmp_path) -> None:
    import eldrin_bootstrap.service as service
    from eldrin_bootstrap.resolver import HostPlatform

    sentinel = object()
    seen: dict[str, object] = {}
    monkeypatch.setattr(service, "build_ssl_context", lambda settings: sentinel)

    def fake_fetch(url, dest, *, timeout_s, ssl_context):
        seen["ssl_context"] = ssl_context
        dest.write_bytes(b"payload")
        return dest

    service.install_binary(
        "1.2.3",
        install_root=tmp_path,
        host=HostPlatform("linux", "arm64"),
        fetch=fake_fetch,
    )
    assert seen["ssl_context"] is sentinel
