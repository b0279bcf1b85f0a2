"""
Tests for configuration loading.
"""

import pytest

from wallet_ledger.config import _flag, get_settings


@pytest.mark.parametrize("raw, expected", [
    ("true", True),
    ("TRUE", True),
    (" yes ", True),
    ("1", True),
    ("false", False),
    ("0", False),
    ("", False),
])
def test_flag_parsing(monkeypatch, raw, expected):
    monkeypatch.setenv("WALLET_TEST_FLAG", raw)
    assert _flag("WALLET_TEST_FLAG") is expected


def test_flag_default_when_unset(monkeypatch):
    monkeypatch.delenv("WALLET_TEST_FLAG", raising=False)
    assert _flag("WALLET_TEST_FLAG") is False
    assert _flag("WALLET_TEST_FLAG", "true") is True


def test_settings_are_cached():
    assert get_settings() is get_settings()
    assert get_settings().APP_NAME == "Wallet Ledger"
