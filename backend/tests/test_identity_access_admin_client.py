"""
Supabase admin client factory (service role).

Guards:
- Missing URL or service-role key → ConfigurationError, no client returned.
- Session persistence and token auto-refresh are disabled.
- Only an issued AdminCapability unlocks the factory.
"""
from __future__ import annotations

import pickle
import threading

import pytest

from backend.identity_access import admin_client
from backend.identity_access.admin_client import AdminCapability, create_admin_client
from backend.identity_access.config import ConfigurationError, ServiceRoleConfig


def _capability(url: str, key: str) -> AdminCapability:
    return AdminCapability.issue(ServiceRoleConfig(url=url, service_role_key=key))


@pytest.mark.parametrize(
    "url,key,missing",
    [
        ("", "s3cr3t", "SUPABASE_URL"),
        ("https://abc.supabase.co", "", "SUPABASE_SERVICE_ROLE_KEY"),
        ("", "", "SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY"),
    ],
)
def test_missing_config_raises_configuration_error(monkeypatch: pytest.MonkeyPatch, url: str, key: str, missing: str):
    def _deny(*args, **kwargs):  # pragma: no cover - should not be reached
        raise AssertionError("client must not be built with missing config")

    monkeypatch.setattr(admin_client, "create_client", _deny)
    with pytest.raises(ConfigurationError) as ei:
        create_admin_client(_capability(url, key))
    assert missing in str(ei.value)


def test_error_message_never_contains_the_key():
    with pytest.raises(ConfigurationError) as ei:
        create_admin_client(_capability("", "s3cr3t"))
    assert "s3cr3t" not in str(ei.value)


def test_factory_passes_service_key_and_disabled_session_options(monkeypatch: pytest.MonkeyPatch):
    captured = {}

    def _fake_create_client(url, key, options=None):
        captured.update(url=url, key=key, options=options)
        return object()

    monkeypatch.setattr(admin_client, "create_client", _fake_create_client)
    create_admin_client(_capability("https://abc.supabase.co", "s3cr3t"))
    assert captured["url"] == "https://abc.supabase.co"
    assert captured["key"] == "s3cr3t"
    assert captured["options"].auto_refresh_token is False
    assert captured["options"].persist_session is False


def test_real_client_exposes_disabled_session_options(fake_service_role_key: str):
    client = create_admin_client(_capability("https://abc.supabase.co", fake_service_role_key))
    assert client.options.auto_refresh_token is False
    assert client.options.persist_session is False


def test_each_call_builds_a_fresh_client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(admin_client, "create_client", lambda url, key, options=None: object())
    cap = _capability("https://abc.supabase.co", "s3cr3t")
    assert create_admin_client(cap) is not create_admin_client(cap)


def test_factory_rejects_anything_but_a_capability():
    raw = ServiceRoleConfig(url="https://abc.supabase.co", service_role_key="s3cr3t")
    with pytest.raises(TypeError):
        create_admin_client(raw)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        create_admin_client(None)  # type: ignore[arg-type]


def test_capability_cannot_be_constructed_directly():
    raw = ServiceRoleConfig(url="https://abc.supabase.co", service_role_key="s3cr3t")
    with pytest.raises(TypeError):
        AdminCapability(raw)
    with pytest.raises(TypeError):
        AdminCapability.issue({"url": "x"})  # type: ignore[arg-type]


def test_capability_hides_key_and_refuses_serialization():
    cap = _capability("https://abc.supabase.co", "s3cr3t")
    assert "s3cr3t" not in repr(cap)
    assert cap.url == "https://abc.supabase.co"
    with pytest.raises(TypeError):
        pickle.dumps(cap)


def test_concurrent_calls_do_not_interfere(monkeypatch: pytest.MonkeyPatch):
    built = []
    lock = threading.Lock()

    def _fake_create_client(url, key, options=None):
        with lock:
            built.append((url, key, options.persist_session, options.auto_refresh_token))
        return object()

    monkeypatch.setattr(admin_client, "create_client", _fake_create_client)
    caps = [_capability(f"https://p{i}.supabase.co", f"key-{i}") for i in range(4)]

    def worker(i: int) -> None:
        for _ in range(10):
            create_admin_client(caps[i % 4])

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(built) == 80
    for url, key, persist, refresh in built:
        assert url.replace("https://p", "").split(".")[0] == key.replace("key-", "")
        assert persist is False and refresh is False
