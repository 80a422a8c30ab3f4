import math

from services.history_analyzer import DAY_MS, HOUR_MS, WEEK_MS, summarize

NOW = 100 * DAY_MS


def test_summarize_empty_history_returns_zero_struct():
    stats = summarize([], NOW)

    assert stats.model_dump() == {
        "total": 0,
        "last_hour": 0,
        "last_day": 0,
        "last_week": 0,
        "first_seen": None,
        "last_seen": None,
        "average_interval_ms": None,
    }


def test_summarize_non_sequence_input_returns_zero_struct():
    for value in (None, "12345", 42, {"timestamps": [1, 2]}):
        assert summarize(value, NOW).total == 0


def test_summarize_counts_trailing_windows():
    timestamps = [
        NOW - 10 * DAY_MS,
        NOW - 2 * DAY_MS,
        NOW - 2 * HOUR_MS,
        NOW - 30 * 60 * 1000,
    ]

    stats = summarize(timestamps, NOW)

    assert stats.total == 4
    assert stats.last_hour == 1
    assert stats.last_day == 2
    assert stats.last_week == 3
    assert stats.first_seen == NOW - 10 * DAY_MS
    assert stats.last_seen == NOW - 30 * 60 * 1000
    assert stats.average_interval_ms == (timestamps[-1] - timestamps[0]) / 3


def test_summarize_window_edges_are_inclusive():
    stats = summarize([NOW - HOUR_MS, NOW - DAY_MS, NOW - WEEK_MS], NOW)

    assert stats.last_hour == 1
    assert stats.last_day == 2
    assert stats.last_week == 3


def test_summarize_sorts_and_drops_invalid_values():
    stats = summarize([3000, True, float("nan"), "2000", float("inf"), None, 1000], NOW)

    assert stats.total == 2
    assert stats.first_seen == 1000
    assert stats.last_seen == 3000
    assert stats.average_interval_ms == 2000


def test_summarize_single_point_has_no_average_interval():
    stats = summarize([NOW], NOW)

    assert stats.total == 1
    assert stats.average_interval_ms is None
    assert stats.first_seen == stats.last_seen == NOW


def test_summarize_window_counts_are_nested():
    histories = [
        [],
        [NOW],
        [NOW - 3 * WEEK_MS, NOW - 5 * DAY_MS, NOW - 5 * HOUR_MS, NOW - 1],
        [NOW + 5000, NOW - 1, -math.inf, 0],
        list(range(0, NOW, DAY_MS // 3)),
    ]

    for timestamps in histories:
        stats = summarize(timestamps, NOW)
        assert stats.last_hour <= stats.last_day <= stats.last_week <= stats.total
