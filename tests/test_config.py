"""
Configuration Tests
===================
Environment parsing for the write-access allowlist.
"""
from webcompat_triage.core.config import load_write_access_allowlist


def test_allowlist_split_and_lowercased(monkeypatch):
    monkeypatch.setenv("WRITE_ACCESS_ALLOWLIST", " Triager@Example.com, ,lead@example.com ")
    monkeypatch.delenv("MOZLDAP_STATE_ACCESS", raising=False)
    assert load_write_access_allowlist() == ["triager@example.com", "lead@example.com"]


def test_allowlist_falls_back_to_legacy_variable(monkeypatch):
    monkeypatch.delenv("WRITE_ACCESS_ALLOWLIST", raising=False)
    monkeypatch.setenv("MOZLDAP_STATE_ACCESS", "triager@example.com,lead@example.com")
    assert load_write_access_allowlist() == ["triager@example.com", "lead@example.com"]


def test_new_variable_takes_precedence(monkeypatch):
    monkeypatch.setenv("WRITE_ACCESS_ALLOWLIST", "new@example.com")
    monkeypatch.setenv("MOZLDAP_STATE_ACCESS", "old@example.com")
    assert load_write_access_allowlist() == ["new@example.com"]


def test_allowlist_empty_when_unset(monkeypatch):
    monkeypatch.delenv("WRITE_ACCESS_ALLOWLIST", raising=False)
    monkeypatch.delenv("MOZLDAP_STATE_ACCESS", raising=False)
    assert load_write_access_allowlist() == []
