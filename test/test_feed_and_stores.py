import json

import pytest

from core.clock import Clock
from core.interfaces import FeedUnavailableError
from infrastructure.api.airplanes_live_client import AirplanesLiveClient
from infrastructure.database.json_ledger_store import JsonLedgerStore
from monitoring.healthchecks import HealthcheckPinger


class FixedClock(Clock):
    def __init__(self, now: int):
        self.current = now

    def now(self) -> int:
        return self.current


class FakeResponse:
    def __init__(self, status, payload):
        self.status = status
        self.payload = payload

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def text(self):
        return str(self.payload)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url, headers=None):
        self.urls.append(url)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def make_client(response) -> tuple[AirplanesLiveClient, FakeSession]:
    session = FakeSession(response)
    client = AirplanesLiveClient(
        latitude=38.0375,
        longitude=-78.4863,
        radius=5,
        clock=FixedClock(1_000),
        session_factory=lambda **kwargs: session,
    )
    return client, session


async def test_feed_client_builds_snapshots():
    payload = {"ac": [{"hex": "ABC123", "flight": "UAL1 ", "alt_baro": 3000}, {"hex": "zz"}, "junk"], "total": 2}
    client, session = make_client(FakeResponse(200, payload))

    snapshots = await client.fetch_aircraft()

    assert session.urls == ["https://api.airplanes.live/v2/point/38.0375/-78.4863/5"]
    assert [snapshot.hex for snapshot in snapshots] == ["abc123", "zz"]
    assert snapshots[0].observed_at == 1_000
    assert snapshots[0].flight == "UAL1"


async def test_feed_client_raises_on_http_error():
    client, _ = make_client(FakeResponse(503, "unavailable"))

    with pytest.raises(FeedUnavailableError):
        await client.fetch_aircraft()


async def test_feed_client_raises_on_payload_without_aircraft_list():
    client, _ = make_client(FakeResponse(200, {"msg": "No error", "ac": None}))

    with pytest.raises(FeedUnavailableError):
        await client.fetch_aircraft()


async def test_feed_client_wraps_network_errors():
    client, _ = make_client(OSError("connection reset"))

    with pytest.raises(FeedUnavailableError):
        await client.fetch_aircraft()


def test_feed_client_from_config():
    config = {"feed": {"latitude": 1.5, "longitude": 2.5, "radius": 3, "base_url": "https://example.test/v2/"}}

    client = AirplanesLiveClient.from_config(config)

    assert client.url == "https://example.test/v2/point/1.5/2.5/3"


async def test_json_store_round_trip(tmp_path):
    path = tmp_path / "data" / "db.json"
    store = JsonLedgerStore(path)
    records = [{"hex": "abc123", "timestamps": [1, 2]}]

    assert await store.write(records) is True
    assert await store.read() == {"sightings": records}
    assert json.loads(path.read_text()) == {"sightings": records}
    assert not (tmp_path / "data" / "db.json.tmp").exists()


async def test_json_store_missing_file_reads_empty(tmp_path):
    store = JsonLedgerStore(tmp_path / "db.json")

    assert await store.read() == []


async def test_json_store_moves_corrupt_file_aside(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{not json")
    store = JsonLedgerStore(path)

    assert await store.read() == []
    assert not path.exists()
    assert (tmp_path / "db.json.corrupt").read_text() == "{not json"

    assert await store.write([{"hex": "abc123", "timestamps": [1]}]) is True
    assert (tmp_path / "db.json.corrupt").read_text() == "{not json"


def test_healthcheck_urls():
    pinger = HealthcheckPinger("https://hc-ping.com/uuid/")

    assert pinger.build_url("start") == "https://hc-ping.com/uuid/start"
    assert pinger.build_url("fail") == "https://hc-ping.com/uuid/fail"
    assert pinger.build_url("success") == "https://hc-ping.com/uuid"


async def test_disabled_healthcheck_never_pings():
    pinger = HealthcheckPinger("  ")

    assert pinger.enabled is False
    assert await pinger.ping_start() is False
    assert await pinger.ping_success({"notified": 1}) is False
    assert await pinger.ping_failure() is False
