"""
Category-specific phrase tables for speed and altitude.

Each table is an ordered tuple of rules. The first rule whose test accepts the
value builds the phrase, and every table ends with a catch-all rule, so any
positive finite value always gets a phrase.
"""

from __future__ import annotations

import math
import zlib
from enum import Enum
from typing import Callable, NamedTuple, Sequence

from utils.data_processing import format_feet


ApproxWordPicker = Callable[[Sequence[str]], str]


class AircraftCategory(str, Enum):
    ROTORCRAFT = "rotorcraft"
    HIGH_PERF = "high-perf"
    HEAVY = "heavy"
    LARGE = "large"
    LIGHT = "light"
    SMALL = "small"
    DEFAULT = "default"


class PhraseRule(NamedTuple):
    test: Callable[[float], bool]
    build: Callable[[float, ApproxWordPicker], str]


# ADS-B emitter categories plus the plain labels used in config and tests.
_CATEGORY_LABELS = {
    "a1": AircraftCategory.LIGHT,
    "a2": AircraftCategory.SMALL,
    "a3": AircraftCategory.LARGE,
    "a4": AircraftCategory.HEAVY,
    "a5": AircraftCategory.HEAVY,
    "a6": AircraftCategory.HIGH_PERF,
    "a7": AircraftCategory.ROTORCRAFT,
    "rotorcraft": AircraftCategory.ROTORCRAFT,
    "helicopter": AircraftCategory.ROTORCRAFT,
    "high-perf": AircraftCategory.HIGH_PERF,
    "highperf": AircraftCategory.HIGH_PERF,
    "high_perf": AircraftCategory.HIGH_PERF,
    "heavy": AircraftCategory.HEAVY,
    "large": AircraftCategory.LARGE,
    "light": AircraftCategory.LIGHT,
    "small": AircraftCategory.SMALL,
    "default": AircraftCategory.DEFAULT,
}


def normalize_category(value: object) -> AircraftCategory:
    if isinstance(value, AircraftCategory):
        return value
    if not isinstance(value, str):
        return AircraftCategory.DEFAULT
    return _CATEGORY_LABELS.get(value.strip().lower(), AircraftCategory.DEFAULT)


def _first_word(options: Sequence[str]) -> str:
    return options[0]


def create_approx_word_picker(seed: str) -> ApproxWordPicker:
    """Deterministic picker so the same aircraft always reads the same way."""
    encoded_seed = (seed or "").encode("utf-8")

    def pick(options: Sequence[str]) -> str:
        if not options:
            return ""
        digest = zlib.crc32(encoded_seed + b"|" + "|".join(options).encode("utf-8"))
        return options[digest % len(options)]

    return pick


def _always(_value: float) -> bool:
    return True


def _at_least(threshold: float) -> Callable[[float], bool]:
    return lambda value: value >= threshold


def _at_most(threshold: float) -> Callable[[float], bool]:
    return lambda value: value <= threshold


def _mph(lead: str, words: Sequence[str]) -> Callable[[float, ApproxWordPicker], str]:
    return lambda mph, pick: f"{lead} {pick(words)} {round(mph)} mph."


def _feet(lead: str, words: Sequence[str]) -> Callable[[float, ApproxWordPicker], str]:
    return lambda feet, pick: f"{lead} {pick(words)} {format_feet(feet)} ft."


NEAR_AROUND = ("near", "around")
AROUND_NEAR = ("around", "near")
AROUND_NEAR_ABOUT = ("around", "near", "about")
NEAR_AROUND_ABOUT = ("near", "around", "about")


SPEED_TABLES: dict[AircraftCategory, tuple[PhraseRule, ...]] = {
    AircraftCategory.ROTORCRAFT: (
        PhraseRule(_at_least(130), _mph("Chopping through", AROUND_NEAR)),
        PhraseRule(_at_least(80), _mph("Cruising the pattern", AROUND_NEAR)),
        PhraseRule(_always, _mph("Hovering", AROUND_NEAR)),
    ),
    AircraftCategory.HIGH_PERF: (
        PhraseRule(_at_least(300), _mph("Ripping along", NEAR_AROUND)),
        PhraseRule(_at_least(200), _mph("Keeping the throttle up", AROUND_NEAR)),
        PhraseRule(_always, _mph("Loosening the reins", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.HEAVY: (
        PhraseRule(_at_least(300), _mph("Hauling", NEAR_AROUND)),
        PhraseRule(_at_least(200), _mph("Rolling", NEAR_AROUND)),
        PhraseRule(_always, _mph("Keeping the widebody moving", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.LARGE: (
        PhraseRule(_at_least(280), _mph("Making a brisk pass", AROUND_NEAR)),
        PhraseRule(_at_least(200), _mph("Keeping the cadence", NEAR_AROUND)),
        PhraseRule(_always, _mph("Rolling by", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.LIGHT: (
        PhraseRule(_at_least(200), _mph("Scooting", NEAR_AROUND)),
        PhraseRule(_at_least(120), _mph("Skipping", NEAR_AROUND_ABOUT)),
        PhraseRule(_at_least(60), _mph("Gliding", AROUND_NEAR)),
        PhraseRule(_always, _mph("Loitering", NEAR_AROUND_ABOUT)),
    ),
    AircraftCategory.SMALL: (
        PhraseRule(_at_least(200), lambda mph, _pick: f"Pacing at {round(mph)} mph."),
        PhraseRule(_at_least(120), _mph("Scooting", NEAR_AROUND)),
        PhraseRule(_at_least(60), _mph("Easy pass", AROUND_NEAR_ABOUT)),
        PhraseRule(_always, _mph("Loitering", NEAR_AROUND_ABOUT)),
    ),
    AircraftCategory.DEFAULT: (
        PhraseRule(_at_least(300), _mph("Bolting along", NEAR_AROUND)),
        PhraseRule(_at_least(200), _mph("Cruising", NEAR_AROUND)),
        PhraseRule(_at_least(120), _mph("Making good time", AROUND_NEAR_ABOUT)),
        PhraseRule(_at_least(60), _mph("Taking a leisurely pass", AROUND_NEAR)),
        PhraseRule(_always, _mph("Drifting by", AROUND_NEAR_ABOUT)),
    ),
}

ALTITUDE_TABLES: dict[AircraftCategory, tuple[PhraseRule, ...]] = {
    AircraftCategory.ROTORCRAFT: (
        PhraseRule(_at_most(1200), _feet("Skimming the skyline", NEAR_AROUND)),
        PhraseRule(_always, _feet("Holding above town", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.HIGH_PERF: (
        PhraseRule(_at_least(20000), _feet("Knifing through", AROUND_NEAR)),
        PhraseRule(_at_least(10000), _feet("Slicing the sky", NEAR_AROUND)),
        PhraseRule(_always, _feet("Darting by", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.HEAVY: (
        PhraseRule(_at_least(30000), _feet("Stacked way up", NEAR_AROUND)),
        PhraseRule(_at_least(20000), _feet("Cruising that big frame", NEAR_AROUND)),
        PhraseRule(_at_least(10000), _feet("Looming overhead", AROUND_NEAR_ABOUT)),
        PhraseRule(_always, _feet("Low", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.LARGE: (
        PhraseRule(_at_least(20000), _feet("Cruising solid", NEAR_AROUND)),
        PhraseRule(_at_least(10000), _feet("Keeping a stately perch", AROUND_NEAR)),
        PhraseRule(_always, _feet("Rolling through", AROUND_NEAR_ABOUT)),
    ),
    AircraftCategory.LIGHT: (
        PhraseRule(_at_least(10000), _feet("High", NEAR_AROUND)),
        PhraseRule(_at_least(5000), _feet("Mid", AROUND_NEAR_ABOUT)),
        PhraseRule(_always, _feet("Low", NEAR_AROUND_ABOUT)),
    ),
    AircraftCategory.SMALL: (
        PhraseRule(_at_least(10000), _feet("Steady", NEAR_AROUND)),
        PhraseRule(_at_least(5000), _feet("Level", AROUND_NEAR_ABOUT)),
        PhraseRule(_always, _feet("Low", NEAR_AROUND_ABOUT)),
    ),
    AircraftCategory.DEFAULT: (
        PhraseRule(_at_least(30000), _feet("Way up", AROUND_NEAR)),
        PhraseRule(_at_least(20000), _feet("Cruising high", NEAR_AROUND)),
        PhraseRule(_at_least(10000), _feet("Gliding along", AROUND_NEAR_ABOUT)),
        PhraseRule(_at_least(5000), _feet("Keeping a comfy perch", AROUND_NEAR)),
        PhraseRule(_always, _feet("Keeping it low", NEAR_AROUND_ABOUT)),
    ),
}


def match_phrase(
    rules: Sequence[PhraseRule],
    value: float | None,
    pick_word: ApproxWordPicker | None = None,
) -> str | None:
    if value is None or isinstance(value, bool) or not math.isfinite(value) or value <= 0:
        return None
    picker = pick_word or _first_word
    for rule in rules:
        if rule.test(value):
            return rule.build(value, picker)
    return None


def describe_speed(mph: float | None, category: object, pick_word: ApproxWordPicker | None = None) -> str | None:
    return match_phrase(SPEED_TABLES[normalize_category(category)], mph, pick_word)


def describe_altitude(feet: float | None, category: object, pick_word: ApproxWordPicker | None = None) -> str | None:
    return match_phrase(ALTITUDE_TABLES[normalize_category(category)], feet, pick_word)
