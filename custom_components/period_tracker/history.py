"""Recorded period history for period_tracker.

The whole history lives in a single preference string: one record per
period, joined with ``|``. A record is an ISO date, or an ISO interval
``start/end`` when the end of the period is known. Records written by older
versions used ``start-end``; those are still read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from .calculator import calculate_period_length
from .const import (
    CSV_HEADER,
    DEFAULT_CYCLE_LENGTH,
    ENTRY_SEPARATOR,
    KEY_AVERAGE_CYCLE,
    KEY_CYCLE_LENGTH,
    KEY_LAST_PERIOD_START,
    KEY_PERIOD_ENTRIES,
    LEGACY_RANGE_SEPARATOR,
    LOGGER,
    RANGE_SEPARATOR,
)
from .cycle_stats import (
    CycleAnalytics,
    CycleStatistics,
    calculate_cycle_analytics,
    calculate_cycle_statistics,
)

if TYPE_CHECKING:
    from .storage import MemoryPrefs

_ISO_DATE_LEN = 10


@dataclass(frozen=True)
class PeriodEntry:
    """A recorded menstruation period."""

    start: date
    end: date | None = None

    @property
    def duration(self) -> int:
        """Inclusive length in days; a period without an end lasts one day."""
        return calculate_period_length(self.start, self.end or self.start)


def encode_entry(entry: PeriodEntry) -> str:
    """Return the stored text form of an entry."""
    if entry.end is None:
        return entry.start.isoformat()
    return f"{entry.start.isoformat()}{RANGE_SEPARATOR}{entry.end.isoformat()}"


def decode_entry(raw: str) -> PeriodEntry:
    """Parse one stored record. Raises ValueError if it is malformed."""
    raw = raw.strip()
    if RANGE_SEPARATOR in raw:
        start_raw, _, end_raw = raw.partition(RANGE_SEPARATOR)
    elif (
        len(raw) == 2 * _ISO_DATE_LEN + 1
        and raw[_ISO_DATE_LEN] == LEGACY_RANGE_SEPARATOR
    ):
        start_raw, end_raw = raw[:_ISO_DATE_LEN], raw[_ISO_DATE_LEN + 1 :]
    else:
        start_raw, end_raw = raw, ""
    start = date.fromisoformat(start_raw)
    end = date.fromisoformat(end_raw) if end_raw else None
    return PeriodEntry(start=start, end=end)


def split_records(blob: str) -> list[str]:
    """Return the raw records of a history blob."""
    if not blob:
        return []
    return blob.split(ENTRY_SEPARATOR)


def decode_history(blob: str) -> list[PeriodEntry]:
    """Decode a history blob in storage order, skipping malformed records."""
    entries: list[PeriodEntry] = []
    for raw in split_records(blob):
        try:
            entries.append(decode_entry(raw))
        except ValueError:
            LOGGER.warning("Skipping malformed period record: %r", raw)
    return entries


def encode_history(entries: list[PeriodEntry]) -> str:
    return ENTRY_SEPARATOR.join(encode_entry(e) for e in entries)


class HistoryStore:
    """Manage the recorded period history and derived cycle preferences.

    Every write reads the full blob, builds a new one and writes it back, so
    only one caller may write at a time.
    """

    def __init__(self, prefs: MemoryPrefs) -> None:
        self._prefs = prefs

    @property
    def encrypted(self) -> bool:
        return self._prefs.encrypted

    def _raw_history(self) -> str:
        return self._prefs.get_string(KEY_PERIOD_ENTRIES, "")

    def save_entry(self, start: date | None, end: date | None = None) -> None:
        """Append a period and refresh the derived average cycle length."""
        if start is None:
            return
        record = encode_entry(PeriodEntry(start, end))
        blob = self._raw_history()
        blob = f"{blob}{ENTRY_SEPARATOR}{record}" if blob else record
        (
            self._prefs.edit()
            .put_string(KEY_PERIOD_ENTRIES, blob)
            .put_string(KEY_LAST_PERIOD_START, start.isoformat())
            .apply()
        )
        LOGGER.debug("Recorded period %s", record)
        self.refresh_statistics()

    def get_entries(self) -> list[PeriodEntry]:
        """Return the decoded entries in the order they were recorded."""
        return decode_history(self._raw_history())

    def get_history(self) -> list[date]:
        """Return recorded period starts, most recent first."""
        return sorted((e.start for e in self.get_entries()), reverse=True)

    def get_last_period_start(self) -> date | None:
        raw = self._prefs.get_string(KEY_LAST_PERIOD_START, "")
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            LOGGER.warning("Ignoring malformed last period start: %r", raw)
            return None

    def delete_entry(self, start: date | None) -> int:
        """Remove every record starting with ``start``; return how many."""
        if start is None:
            return 0
        records = split_records(self._raw_history())
        if not records:
            return 0
        prefix = start.isoformat()
        kept = [r for r in records if not r.startswith(prefix)]
        removed = len(records) - len(kept)
        if not removed:
            return 0
        self._prefs.edit().put_string(KEY_PERIOD_ENTRIES, ENTRY_SEPARATOR.join(kept)).apply()
        LOGGER.debug("Deleted %s period record(s) starting %s", removed, prefix)
        self.refresh_statistics()
        return removed

    def export_csv(self) -> str:
        lines = [CSV_HEADER]
        for entry in self.get_entries():
            end = entry.end or entry.start
            lines.append(f"{entry.start},{end},{calculate_period_length(entry.start, end)}")
        return "\n".join(lines) + "\n"

    def get_statistics(self) -> CycleStatistics:
        return calculate_cycle_statistics(sorted(self.get_history()))

    def get_analytics(self) -> CycleAnalytics:
        """Regularity, accuracy and period length from the recorded history."""
        entries = self.get_entries()
        durations = [e.duration for e in entries if e.end is not None]
        return calculate_cycle_analytics(sorted(e.start for e in entries), durations)

    def refresh_statistics(self) -> CycleStatistics:
        """Recompute and persist the average cycle length."""
        stats = self.get_statistics()
        self._prefs.edit().put_int(KEY_AVERAGE_CYCLE, stats.average).apply()
        return stats

    def get_average_cycle_length(self) -> int:
        return self._prefs.get_int(KEY_AVERAGE_CYCLE, DEFAULT_CYCLE_LENGTH)

    def set_manual_cycle_length(self, cycle_length: int) -> None:
        if cycle_length > 0:
            self._prefs.edit().put_int(KEY_CYCLE_LENGTH, cycle_length).apply()

    def get_manual_cycle_length(self) -> int:
        return self._prefs.get_int(KEY_CYCLE_LENGTH, DEFAULT_CYCLE_LENGTH)

    def get_effective_cycle_length(self) -> int:
        """Cycle length predictions should use.

        The measured average wins once two periods are recorded; before that
        a manually set length, else the default.
        """
        if len(self.get_entries()) >= 2:
            return self.get_average_cycle_length()
        if self._prefs.contains(KEY_CYCLE_LENGTH):
            return self.get_manual_cycle_length()
        return DEFAULT_CYCLE_LENGTH

    def clear_all(self) -> None:
        self._prefs.edit().clear().apply()
        LOGGER.debug("Cleared period history")
