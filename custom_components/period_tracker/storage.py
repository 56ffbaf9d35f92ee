"""Key-value preference storage for period_tracker.

Preferences hold a handful of string and integer values. Reads come from an
in-memory snapshot; writes are batched through an editor and land together
on ``apply()``. Store-backed preferences then schedule one delayed write of
the whole snapshot, so several batches in a row reach disk together.

None of these classes lock: a single owner must serialize all writes.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from .const import DOMAIN, LOGGER, STORAGE_VERSION

SAVE_DELAY = 0


class PrefsKeyError(Exception):
    """Encryption key material is missing or unusable."""


class PrefsEditor:
    """A batch of preference writes, committed together by ``apply()``."""

    def __init__(self, commit: Callable[[dict[str, Any], set[str], bool], None]) -> None:
        self._commit = commit
        self._puts: dict[str, Any] = {}
        self._removals: set[str] = set()
        self._clear = False

    def put_string(self, key: str, value: str) -> PrefsEditor:
        self._puts[key] = str(value)
        self._removals.discard(key)
        return self

    def put_int(self, key: str, value: int) -> PrefsEditor:
        self._puts[key] = int(value)
        self._removals.discard(key)
        return self

    def remove(self, key: str) -> PrefsEditor:
        self._puts.pop(key, None)
        self._removals.add(key)
        return self

    def clear(self) -> PrefsEditor:
        """Drop every existing key before the batched puts are applied."""
        self._clear = True
        return self

    def apply(self) -> None:
        self._commit(dict(self._puts), set(self._removals), self._clear)
        self._puts.clear()
        self._removals.clear()
        self._clear = False


class MemoryPrefs:
    """Preferences kept only in memory."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    @property
    def encrypted(self) -> bool:
        return False

    def get_string(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        return value if isinstance(value, str) else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        return value if isinstance(value, int) else default

    def contains(self, key: str) -> bool:
        return key in self._values

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def edit(self) -> PrefsEditor:
        return PrefsEditor(self._commit)

    def _commit(self, puts: dict[str, Any], removals: set[str], clear: bool) -> None:
        values = {} if clear else dict(self._values)
        for key in removals:
            values.pop(key, None)
        values.update(puts)
        self._values = values
        self._on_commit()

    def _on_commit(self) -> None:
        """Hook run after every applied batch."""


class StorePrefs(MemoryPrefs):
    """Preferences persisted through a Home Assistant ``Store``."""

    def __init__(self, hass: HomeAssistant, key: str) -> None:
        super().__init__()
        self.hass = hass
        self._store: Store[dict[str, Any]] = Store(hass, version=STORAGE_VERSION, key=key)

    async def async_load(self) -> None:
        data = await self._store.async_load()
        self._values = self._decode(data) if data else {}

    async def async_save(self) -> None:
        """Write the current snapshot now, replacing any pending delayed write."""
        await self._store.async_save(self._data_to_save())

    def _on_commit(self) -> None:
        self._store.async_delay_save(self._data_to_save, SAVE_DELAY)

    def _data_to_save(self) -> dict[str, Any]:
        return self._encode(self.snapshot())

    def _encode(self, values: dict[str, Any]) -> dict[str, Any]:
        return {"values": values}

    def _decode(self, data: dict[str, Any]) -> dict[str, Any]:
        return dict(data.get("values", {}))


class EncryptedStorePrefs(StorePrefs):
    """Store-backed preferences whose values are saved as one Fernet token."""

    def __init__(self, hass: HomeAssistant, key: str, secret: str | None) -> None:
        if not secret:
            raise PrefsKeyError("No encryption key configured")
        try:
            self._fernet = Fernet(secret)
        except (TypeError, ValueError) as err:
            raise PrefsKeyError(f"Invalid encryption key: {err}") from err
        super().__init__(hass, key)

    @property
    def encrypted(self) -> bool:
        return True

    def _encode(self, values: dict[str, Any]) -> dict[str, Any]:
        token = self._fernet.encrypt(json.dumps(values).encode("utf-8"))
        return {"token": token.decode("ascii")}

    def _decode(self, data: dict[str, Any]) -> dict[str, Any]:
        token = data.get("token")
        if not token:
            return {}
        try:
            raw = self._fernet.decrypt(token.encode("ascii"))
        except InvalidToken as err:
            raise PrefsKeyError("Stored preferences cannot be decrypted") from err
        return json.loads(raw)


def generate_key() -> str:
    """Return a new encryption key for ``EncryptedStorePrefs``."""
    return Fernet.generate_key().decode("ascii")


async def async_open_prefs(
    hass: HomeAssistant, entry_id: str, *, encrypt: bool, secret: str | None
) -> StorePrefs:
    """Open the preference store for a config entry.

    If encryption was requested but cannot be used, fall back to plain
    preferences under a separate key. Data stays available and setup goes
    on; callers can check ``prefs.encrypted`` to see the degraded mode.
    """
    key = f"{DOMAIN}.{entry_id}.prefs"
    if encrypt:
        try:
            prefs: StorePrefs = EncryptedStorePrefs(hass, key, secret)
            await prefs.async_load()
        except PrefsKeyError as err:
            LOGGER.warning(
                "Encrypted history unavailable (%s); falling back to unencrypted storage",
                err,
            )
        else:
            return prefs

    prefs = StorePrefs(hass, f"{key}_plain")
    await prefs.async_load()
    return prefs
