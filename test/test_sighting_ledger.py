import json

from core.interfaces import LedgerStore
from services.sighting_ledger import SightingLedger, normalize_ledger_data

COOLDOWN_MS = 10 * 60 * 1000
T = 1_700_000_000_000


class FakeStore(LedgerStore):
    def __init__(self, data=None, write_results=None, read_error=None):
        self.data = data
        self.write_results = list(write_results or [])
        self.read_error = read_error
        self.writes = []

    async def read(self):
        if self.read_error:
            raise self.read_error
        return self.data

    async def write(self, records):
        self.writes.append(records)
        if self.write_results:
            return self.write_results.pop(0)
        return True


def test_cooldown_sequence():
    ledger = SightingLedger()

    assert ledger.should_notify("abc123", T, COOLDOWN_MS) is True
    assert ledger.record("abc123", T) is True
    assert ledger.should_notify("abc123", T + 1, COOLDOWN_MS) is False
    assert ledger.should_notify("abc123", T + COOLDOWN_MS, COOLDOWN_MS) is True
    assert ledger.should_notify("abc123", T + COOLDOWN_MS + 1, COOLDOWN_MS) is True


def test_hex_lookup_is_case_insensitive():
    ledger = SightingLedger()
    ledger.record("ABC123", T)

    assert ledger.should_notify("abc123", T + 1, COOLDOWN_MS) is False
    assert ledger.timestamps(" AbC123 ") == [T]


def test_should_notify_has_no_side_effects():
    ledger = SightingLedger()

    ledger.should_notify("abc123", T, COOLDOWN_MS)

    assert ledger.tracking_count == 0
    assert ledger.dirty is False


def test_record_keeps_timestamps_sorted_and_unique():
    ledger = SightingLedger()

    for timestamp in (300, 100, 200, 200, 300):
        ledger.record("abc123", timestamp)

    assert ledger.timestamps("abc123") == [100, 200, 300]
    assert ledger.last_timestamp("abc123") == 300


def test_record_rejects_invalid_input():
    ledger = SightingLedger()

    assert ledger.record("", T) is False
    assert ledger.record(None, T) is False
    assert ledger.record("abc123", float("nan")) is False
    assert ledger.record("abc123", True) is False
    assert ledger.tracking_count == 0


def test_should_notify_with_invalid_hex_is_false():
    assert SightingLedger().should_notify("  ", T, COOLDOWN_MS) is False


def test_normalize_accepts_legacy_document_and_merges_records():
    data = {
        "version": 2,
        "sightings": [
            {"hex": "ABC123", "timestamps": [3, 1, "x", True, float("inf"), 1], "extra": "drop me"},
            {"hex": "abc123", "timestamps": [2]},
            {"hex": "0a0a0a", "timestamps": "not a list"},
            {"hex": None, "timestamps": [5]},
            {"timestamps": [7]},
            "junk",
        ],
    }

    assert normalize_ledger_data(data) == [
        {"hex": "0a0a0a", "timestamps": []},
        {"hex": "abc123", "timestamps": [1, 2, 3]},
    ]


def test_normalize_rejects_unusable_shapes():
    assert normalize_ledger_data(None) == []
    assert normalize_ledger_data("sightings") == []
    assert normalize_ledger_data({"other": []}) == []


def test_normalize_is_idempotent():
    data = [
        {"hex": "ffeedd", "timestamps": [9, 3, 3]},
        {"hex": "AABBCC", "timestamps": [5.5, 1]},
        {"hex": "aabbcc", "timestamps": [2]},
    ]

    once = normalize_ledger_data(data)
    twice = normalize_ledger_data(once)

    assert json.dumps(twice) == json.dumps(once)
    assert [record["hex"] for record in once] == ["aabbcc", "ffeedd"]


async def test_load_normalizes_store_data():
    store = FakeStore(data={"sightings": [{"hex": "ABC123", "timestamps": [2, 1]}]})
    ledger = SightingLedger(store)

    assert await ledger.load() == 1
    assert ledger.timestamps("abc123") == [1, 2]
    assert ledger.dirty is False


async def test_load_failure_starts_empty():
    ledger = SightingLedger(FakeStore(read_error=OSError("disk gone")))

    assert await ledger.load() == 0
    assert ledger.tracking_count == 0


async def test_persist_failure_keeps_ledger_dirty_until_write_succeeds():
    store = FakeStore(write_results=[False, True])
    ledger = SightingLedger(store)
    ledger.record("abc123", T)

    assert await ledger.persist() is False
    assert ledger.dirty is True
    assert ledger.timestamps("abc123") == [T]

    assert await ledger.persist() is True
    assert ledger.dirty is False
    assert store.writes[-1] == [{"hex": "abc123", "timestamps": [T]}]


async def test_persist_skips_write_when_clean():
    store = FakeStore()
    ledger = SightingLedger(store)

    assert await ledger.persist() is True
    assert store.writes == []
