from core.models import AircraftSnapshot
from services.filter_service import FilterService

NOW = 1_700_000_000_000


def make_snapshot(**raw) -> AircraftSnapshot:
    return AircraftSnapshot.from_feed(raw, observed_at=NOW)


def test_accepts_ordinary_traffic():
    service = FilterService(max_altitude_ft=25000, ignored_carriers=["ual"])

    decision = service.check(make_snapshot(hex="abc123", flight="DAL12", alt_baro=3000))

    assert decision.accepted is True
    assert decision.reason is None


def test_rejects_snapshot_without_usable_hex():
    decision = FilterService().check(make_snapshot(hex="", alt_baro="ground"))

    assert decision.accepted is False
    assert decision.reason == "invalid_hex"


def test_rejects_ignored_carrier_case_insensitively():
    service = FilterService(ignored_carriers=[" ual ", "dal"])

    decision = service.check(make_snapshot(hex="abc123", flight="ual123 "))

    assert decision.reason == "ignored_carrier"
    assert decision.details == {"carrier": "UAL"}


def test_rejects_grounded_aircraft():
    decision = FilterService().check(make_snapshot(hex="abc123", alt_baro="ground", alt_geom=50))

    assert decision.reason == "grounded"


def test_rejects_aircraft_above_ceiling():
    service = FilterService(max_altitude_ft=25000)

    decision = service.check(make_snapshot(hex="abc123", alt_baro=30000))

    assert decision.reason == "above_ceiling"
    assert decision.details == {"altitude_ft": 30000.0, "max_altitude_ft": 25000.0}


def test_zero_ceiling_disables_altitude_check():
    service = FilterService(max_altitude_ft=0)

    assert service.check(make_snapshot(hex="abc123", alt_baro=40000)).accepted is True


def test_unknown_altitude_is_not_above_ceiling():
    assert FilterService(max_altitude_ft=25000).check(make_snapshot(hex="abc123")).accepted is True


def test_from_config_and_filter_list():
    service = FilterService.from_config({"filters": {"max_altitude_ft": 10000, "ignored_carriers": ["SWA"]}})
    snapshots = [
        make_snapshot(hex="abc123", alt_baro=5000),
        make_snapshot(hex="abc124", flight="SWA1", alt_baro=5000),
        make_snapshot(hex="abc125", alt_baro=15000),
    ]

    assert [snapshot.hex for snapshot in service.filter(snapshots)] == ["abc123"]
