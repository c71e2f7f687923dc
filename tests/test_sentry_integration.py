from __future__ import annotations

from storefront.core import sentry_integration


def test_disabled_without_dsn(monkeypatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(sentry_integration.sentry_sdk, "init", lambda **kwargs: calls.append(kwargs))

    assert sentry_integration.init_sentry(None) is False
    assert calls == []


def test_init_forwards_settings(monkeypatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(sentry_integration.sentry_sdk, "init", lambda **kwargs: calls.append(kwargs))

    assert sentry_integration.init_sentry("https://key@sentry.example/1", environment="staging") is True
    assert calls[0]["environment"] == "staging"
    assert calls[0]["send_default_pii"] is False
    assert len(calls[0]["integrations"]) == 1
