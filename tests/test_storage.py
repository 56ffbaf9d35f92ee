"""Tests for preference storage and encryption fallback."""

from __future__ import annotations

from typing import Any

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import async_fire_time_changed

from custom_components.period_tracker.storage import (
    EncryptedStorePrefs,
    MemoryPrefs,
    PrefsKeyError,
    async_open_prefs,
    generate_key,
)

ENTRY_ID = "abc123"
ENCRYPTED_KEY = f"period_tracker.{ENTRY_ID}.prefs"
PLAIN_KEY = f"period_tracker.{ENTRY_ID}.prefs_plain"


class TestEditor:
    def test_writes_are_invisible_until_applied(self) -> None:
        prefs = MemoryPrefs()
        editor = prefs.edit().put_string("a", "1").put_int("b", 2)
        assert not prefs.contains("a")
        editor.apply()
        assert prefs.get_string("a") == "1"
        assert prefs.get_int("b") == 2

    def test_defaults_and_type_mismatch(self) -> None:
        prefs = MemoryPrefs({"a": "text", "b": 5})
        assert prefs.get_string("missing", "x") == "x"
        assert prefs.get_int("missing", 28) == 28
        assert prefs.get_int("a", 28) == 28
        assert prefs.get_string("b", "") == ""

    def test_clear_then_put_in_one_batch(self) -> None:
        prefs = MemoryPrefs({"a": "1", "b": "2"})
        prefs.edit().clear().put_string("c", "3").apply()
        assert prefs.snapshot() == {"c": "3"}

    def test_remove(self) -> None:
        prefs = MemoryPrefs({"a": "1", "b": "2"})
        prefs.edit().remove("a").apply()
        assert prefs.snapshot() == {"b": "2"}


async def test_plain_prefs_persist(hass: HomeAssistant, hass_storage: dict[str, Any]) -> None:
    prefs = await async_open_prefs(hass, ENTRY_ID, encrypt=False, secret=None)
    assert not prefs.encrypted
    prefs.edit().put_string("period_entries", "2026-01-15").apply()
    await prefs.async_save()
    assert hass_storage[PLAIN_KEY]["data"] == {"values": {"period_entries": "2026-01-15"}}

    reopened = await async_open_prefs(hass, ENTRY_ID, encrypt=False, secret=None)
    assert reopened.get_string("period_entries") == "2026-01-15"


async def test_batches_share_one_delayed_write(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    prefs = await async_open_prefs(hass, ENTRY_ID, encrypt=False, secret=None)
    prefs.edit().put_string("period_entries", "2026-01-15").apply()
    prefs.edit().put_int("average_cycle", 28).apply()
    assert PLAIN_KEY not in hass_storage

    async_fire_time_changed(hass)
    await hass.async_block_till_done()
    assert hass_storage[PLAIN_KEY]["data"] == {
        "values": {"period_entries": "2026-01-15", "average_cycle": 28}
    }


async def test_encrypted_prefs_round_trip(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    secret = generate_key()
    prefs = await async_open_prefs(hass, ENTRY_ID, encrypt=True, secret=secret)
    assert prefs.encrypted
    prefs.edit().put_string("period_entries", "2026-01-15").put_int("average_cycle", 28).apply()
    await prefs.async_save()

    stored = hass_storage[ENCRYPTED_KEY]["data"]
    assert set(stored) == {"token"}
    assert "2026-01-15" not in stored["token"]

    reopened = await async_open_prefs(hass, ENTRY_ID, encrypt=True, secret=secret)
    assert reopened.get_string("period_entries") == "2026-01-15"
    assert reopened.get_int("average_cycle") == 28


@pytest.mark.parametrize("secret", [None, "", "not-a-fernet-key"])
async def test_unusable_key_falls_back_to_plain(
    hass: HomeAssistant, caplog: pytest.LogCaptureFixture, secret: str | None
) -> None:
    prefs = await async_open_prefs(hass, ENTRY_ID, encrypt=True, secret=secret)
    assert not prefs.encrypted
    assert "falling back to unencrypted storage" in caplog.text

    prefs.edit().put_string("period_entries", "2026-01-15").apply()
    assert prefs.get_string("period_entries") == "2026-01-15"
    await hass.async_block_till_done()


async def test_wrong_key_for_stored_data_falls_back(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    prefs = await async_open_prefs(hass, ENTRY_ID, encrypt=True, secret=generate_key())
    prefs.edit().put_string("period_entries", "2026-01-15").apply()
    await prefs.async_save()

    other = await async_open_prefs(hass, ENTRY_ID, encrypt=True, secret=generate_key())
    assert not other.encrypted
    assert other.get_string("period_entries") == ""
    # The encrypted blob is left untouched
    assert "token" in hass_storage[ENCRYPTED_KEY]["data"]


def test_invalid_key_rejected() -> None:
    with pytest.raises(PrefsKeyError):
        EncryptedStorePrefs(None, ENCRYPTED_KEY, "short")
