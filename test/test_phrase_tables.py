import math

from socials.phrase_tables import (
    ALTITUDE_TABLES,
    SPEED_TABLES,
    AircraftCategory,
    create_approx_word_picker,
    describe_altitude,
    describe_speed,
    normalize_category,
)

SAMPLE_VALUES = [0.01, 1, 59.9, 60, 80, 119, 120, 130, 199, 200, 280, 300, 1200, 1201, 5000, 10000, 20000, 30000, 1e6]


def test_normalize_category_maps_emitter_codes_and_labels():
    assert normalize_category("A1") is AircraftCategory.LIGHT
    assert normalize_category("a2") is AircraftCategory.SMALL
    assert normalize_category("A3") is AircraftCategory.LARGE
    assert normalize_category("A5") is AircraftCategory.HEAVY
    assert normalize_category("A6") is AircraftCategory.HIGH_PERF
    assert normalize_category("a7") is AircraftCategory.ROTORCRAFT
    assert normalize_category(" Heavy ") is AircraftCategory.HEAVY
    assert normalize_category("HighPerf") is AircraftCategory.HIGH_PERF


def test_normalize_category_falls_back_to_default():
    assert normalize_category(None) is AircraftCategory.DEFAULT
    assert normalize_category("B1") is AircraftCategory.DEFAULT
    assert normalize_category(7) is AircraftCategory.DEFAULT


def test_every_category_has_both_tables():
    for category in AircraftCategory:
        assert SPEED_TABLES[category]
        assert ALTITUDE_TABLES[category]


def test_tables_cover_every_positive_value():
    for category in AircraftCategory:
        for value in SAMPLE_VALUES:
            speed = describe_speed(value, category)
            altitude = describe_altitude(value, category)
            assert speed is not None and speed.endswith(" mph.")
            assert altitude is not None and altitude.endswith(" ft.")


def test_tables_end_with_catch_all_rule():
    for tables in (SPEED_TABLES, ALTITUDE_TABLES):
        for rules in tables.values():
            assert rules[-1].test(0.001)
            assert rules[-1].test(1e9)


def test_missing_or_non_positive_values_have_no_phrase():
    for value in (None, 0, -5, float("nan"), math.inf, -math.inf):
        assert describe_speed(value, "heavy") is None
        assert describe_altitude(value, "heavy") is None


def test_heavy_speed_uses_fastest_rule_first():
    assert describe_speed(350, "heavy") == "Hauling near 350 mph."
    assert describe_speed(250, "A5") == "Rolling near 250 mph."
    assert describe_speed(150, "heavy") == "Keeping the widebody moving around 150 mph."


def test_category_thresholds_differ():
    assert describe_speed(250, "small") == "Pacing at 250 mph."
    assert describe_speed(250, "default") == "Cruising near 250 mph."
    assert describe_altitude(1200, "rotorcraft") == "Skimming the skyline near 1,200 ft."
    assert describe_altitude(1201, "rotorcraft") == "Holding above town around 1,201 ft."
    assert describe_altitude(35000, "unknown") == "Way up around 35,000 ft."


def test_approx_word_picker_is_deterministic():
    options = ("around", "near", "about")
    first = create_approx_word_picker("abc123")
    second = create_approx_word_picker("abc123")

    assert first(options) == second(options)
    assert first(options) in options
    assert create_approx_word_picker("")(()) == ""


def test_custom_picker_is_used_for_approximation_word():
    phrase = describe_altitude(12000, "large", lambda options: options[-1])

    assert phrase == "Keeping a stately perch near 12,000 ft."
