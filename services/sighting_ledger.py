import bisect
import math
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from core.interfaces import LedgerStore
from core.models import SightingRecord
from utils.registration_links import normalize_hex

Timestamp = Union[int, float]


def _is_valid_timestamp(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def normalize_ledger_data(data: Any) -> List[Dict[str, Any]]:
    """
    Canonicalize persisted ledger data.

    Accepts a list of records or the legacy ``{"sightings": [...]}`` document
    (other top-level fields are dropped). Output records carry only ``hex`` and
    ``timestamps``, records sharing a hex are merged, timestamps are sorted and
    deduplicated and records are ordered by hex. Running it twice is a no-op.
    """
    if isinstance(data, dict):
        data = data.get("sightings")
    if not isinstance(data, list):
        return []

    merged: Dict[str, set] = {}
    for entry in data:
        if not isinstance(entry, dict):
            continue
        hex_code = normalize_hex(entry.get("hex"))
        if not hex_code:
            continue
        raw_timestamps = entry.get("timestamps")
        if not isinstance(raw_timestamps, list):
            raw_timestamps = []
        bucket = merged.setdefault(hex_code, set())
        bucket.update(value for value in raw_timestamps if _is_valid_timestamp(value))

    return [
        {"hex": hex_code, "timestamps": sorted(merged[hex_code])}
        for hex_code in sorted(merged)
    ]


class SightingLedger:
    """In-memory map of aircraft hex to ascending, unique notification timestamps."""

    def __init__(self, store: Optional[LedgerStore] = None):
        self.store = store
        self._sightings: Dict[str, List[Timestamp]] = {}
        self._dirty = False

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def tracking_count(self) -> int:
        return len(self._sightings)

    def timestamps(self, hex_code: Any) -> List[Timestamp]:
        key = normalize_hex(hex_code)
        if not key:
            return []
        return list(self._sightings.get(key, []))

    def last_timestamp(self, hex_code: Any) -> Optional[Timestamp]:
        history = self._sightings.get(normalize_hex(hex_code) or "")
        return history[-1] if history else None

    def should_notify(self, hex_code: Any, now: Timestamp, cooldown_ms: Timestamp) -> bool:
        key = normalize_hex(hex_code)
        if not key:
            return False
        last_seen = self.last_timestamp(key)
        if last_seen is None:
            return True
        return now - last_seen >= cooldown_ms

    def record(self, hex_code: Any, timestamp: Timestamp) -> bool:
        key = normalize_hex(hex_code)
        if not key:
            logger.warning(f"Refusing to record sighting with invalid hex {hex_code!r}")
            return False
        if not _is_valid_timestamp(timestamp):
            logger.warning(f"Refusing to record sighting for {key} with invalid timestamp {timestamp!r}")
            return False

        history = self._sightings.setdefault(key, [])
        index = bisect.bisect_left(history, timestamp)
        if index < len(history) and history[index] == timestamp:
            return True
        history.insert(index, timestamp)
        self._dirty = True
        return True

    def to_records(self) -> List[Dict[str, Any]]:
        return [
            SightingRecord(hex=hex_code, timestamps=list(self._sightings[hex_code])).model_dump()
            for hex_code in sorted(self._sightings)
        ]

    def load_records(self, data: Any) -> int:
        self._sightings = {
            record["hex"]: list(record["timestamps"])
            for record in normalize_ledger_data(data)
        }
        self._dirty = False
        return len(self._sightings)

    async def load(self) -> int:
        if self.store is None:
            return 0
        try:
            data = await self.store.read()
        except Exception as e:
            logger.error(f"Failed to read sighting ledger, starting empty: {e}")
            data = []
        count = self.load_records(data)
        logger.info(f"Loaded sighting history for {count} aircraft")
        return count

    async def persist(self) -> bool:
        """Write the ledger through the store. On failure the ledger stays dirty for the next attempt."""
        if self.store is None or not self._dirty:
            return True
        try:
            written = await self.store.write(self.to_records())
        except Exception as e:
            logger.error(f"Failed to persist sighting ledger: {e}")
            return False
        if not written:
            logger.warning("Sighting ledger store reported a failed write, will retry next cycle")
            return False
        self._dirty = False
        return True
