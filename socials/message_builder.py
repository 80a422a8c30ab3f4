from __future__ import annotations

import zlib
from typing import Any, Mapping, Sequence

from loguru import logger

from core.models import AircraftSnapshot, Attachment, HistoryStats, NotificationMessage, PhotoResult
from services.history_analyzer import DAY_MS, summarize
from socials.phrase_tables import create_approx_word_picker, describe_altitude, describe_speed
from utils.data_processing import bearing_to_compass, format_display_name, knots_to_mph
from utils.registration_links import build_details_url


DEFAULT_MAX_CHARS = 280
DEFAULT_DETAILS_LINK_BASE = "https://globe.airplanes.live/?icao="
UNKNOWN_IDENTITY = "Unknown aircraft"

IDENTITY_MAX_CHARS = 24
LOCATION_MAX_CHARS = 40

INTRO_VARIANTS = (
    "Look up!",
    "Can you see it?",
    "There it goes!",
    "Up above!",
)

OVERHEAD_FALLBACK = "It's overhead right now."
MILITARY_SENTENCE = "Military traffic spotted."
INTERESTING_SENTENCE = "Interesting traffic, keep an eye out."

LINK_PREFIX = "📡 "
SECTION_SEPARATOR = "\n\n"
ELLIPSIS = "…"

# Minimum count inside a window before that window drives the frequency sentence.
BUSY_WINDOW_THRESHOLD = 3

PHOTO_CREDITS = {
    "flightaware": "Photo courtesy of FlightAware.",
    "planespotters": "Photo courtesy of Planespotters.net.",
}


def _truncate(value: str, max_chars: int) -> str:
    if max_chars <= 0:
        return ""
    if len(value) <= max_chars:
        return value
    return value[:max_chars].rstrip()


def _truncate_at_word(value: str, max_chars: int) -> str:
    """Cut ``value`` to ``max_chars`` on a word boundary, marking the cut with an ellipsis."""
    if len(value) <= max_chars:
        return value
    if max_chars <= len(ELLIPSIS):
        return ""

    cut = value[: max_chars - len(ELLIPSIS)]
    boundary = cut.rfind(" ")
    if boundary > 0:
        cut = cut[:boundary]
    cut = cut.rstrip(" ,;:")
    if not cut:
        return ""
    return cut + ELLIPSIS


def _strip_terminal_period(phrase: str) -> str:
    return phrase[:-1] if phrase.endswith(".") else phrase


def _lower_first(value: str) -> str:
    return value[:1].lower() + value[1:]


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _article_for(word: str) -> str:
    return "an" if word[:1].lower() in "aeiou" else "a"


def resolve_identity(snapshot: AircraftSnapshot) -> str:
    for candidate in (snapshot.flight, snapshot.registration, (snapshot.hex or "").upper()):
        if candidate and candidate.strip():
            return _truncate(candidate.strip(), IDENTITY_MAX_CHARS)
    return UNKNOWN_IDENTITY


def join_clauses(clauses: Sequence[str]) -> str:
    """Join movement clauses into one sentence ("a", "a and b", "a, b, and c")."""
    parts = [_lower_first(_strip_terminal_period(clause.strip())) for clause in clauses if clause and clause.strip()]
    if not parts:
        return OVERHEAD_FALLBACK
    if len(parts) == 1:
        sentence = parts[0]
    elif len(parts) == 2:
        sentence = f"{parts[0]} and {parts[1]}"
    else:
        sentence = f"{', '.join(parts[:-1])}, and {parts[-1]}"
    return f"{_upper_first(sentence)}."


def frequency_sentence(stats: HistoryStats) -> str:
    if stats.total <= 1:
        return "First time we've spotted this one. 👋"
    if stats.last_hour >= BUSY_WINDOW_THRESHOLD:
        return f"They're doing laps: {stats.last_hour} pings this hour!"
    if stats.last_day >= BUSY_WINDOW_THRESHOLD:
        return f"Busy day: {stats.last_day} flybys today."
    if stats.last_week >= BUSY_WINDOW_THRESHOLD:
        return f"Regular visitor with {stats.last_week} sightings this week."

    span_ms = None
    if stats.first_seen is not None and stats.last_seen is not None:
        span_ms = stats.last_seen - stats.first_seen
    if (
        stats.average_interval_ms is not None
        and stats.average_interval_ms < DAY_MS
        and span_ms is not None
        and span_ms >= 2 * DAY_MS
    ):
        return "We catch them almost every day."

    return f"Seen {stats.total} times so far."


def pick_intro(identity: str, total: int) -> str:
    digest = zlib.crc32(f"{identity}|{total}".encode("utf-8"))
    return INTRO_VARIANTS[digest % len(INTRO_VARIANTS)]


class MessageComposer:
    """
    Turns one aircraft snapshot plus its sighting history into a notification body.

    The body never exceeds ``max_chars``: the intro line is kept whole, the
    details link is reserved next, and the informational sentences get whatever
    room is left.
    """

    def __init__(
        self,
        location_name: str | None = None,
        details_link_base: str | None = DEFAULT_DETAILS_LINK_BASE,
        show_details_link: bool = True,
        max_chars: int = DEFAULT_MAX_CHARS,
    ):
        location = (location_name or "").strip()
        self.location_name = _truncate(location, LOCATION_MAX_CHARS) or None
        self.details_link_base = details_link_base
        self.show_details_link = show_details_link
        self.max_chars = min(max_chars, DEFAULT_MAX_CHARS) if max_chars and max_chars > 0 else DEFAULT_MAX_CHARS

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "MessageComposer":
        messages = config.get("messages", {}) or {}
        return cls(
            location_name=messages.get("location_name"),
            details_link_base=messages.get("details_link_base", DEFAULT_DETAILS_LINK_BASE),
            show_details_link=bool(messages.get("show_details_link", True)),
            max_chars=int(messages.get("max_chars", DEFAULT_MAX_CHARS)),
        )

    def _intro_line(self, identity: str, stats: HistoryStats) -> str:
        phrase = pick_intro(identity, stats.total)
        if self.location_name:
            return f"{phrase} {identity} just popped up near {self.location_name}."
        return f"{phrase} {identity} just popped up nearby."

    def _movement_clauses(self, snapshot: AircraftSnapshot, identity: str) -> list[str]:
        pick_word = create_approx_word_picker(snapshot.hex or identity)
        clauses = []

        speed_phrase = describe_speed(knots_to_mph(snapshot.ground_speed_kt), snapshot.category, pick_word)
        if speed_phrase:
            clauses.append(speed_phrase)

        altitude_phrase = describe_altitude(snapshot.altitude_ft, snapshot.category, pick_word)
        if altitude_phrase:
            clauses.append(altitude_phrase)

        compass = bearing_to_compass(snapshot.track)
        if compass:
            clauses.append(f"heading {compass}")

        return clauses

    def _info_sentences(self, snapshot: AircraftSnapshot, identity: str, stats: HistoryStats) -> list[str]:
        sentences = []

        description = format_display_name(snapshot.description)
        if description:
            sentences.append(f"It's {_article_for(description)} {description}.")

        sentences.append(join_clauses(self._movement_clauses(snapshot, identity)))
        sentences.append(frequency_sentence(stats))

        if snapshot.is_military:
            sentences.append(MILITARY_SENTENCE)
        if snapshot.is_interesting:
            sentences.append(INTERESTING_SENTENCE)

        operator = format_display_name(snapshot.operator)
        if operator:
            sentences.append(f"Operated by {operator}.")

        return sentences

    def _link_line(self, snapshot: AircraftSnapshot) -> str | None:
        if not self.show_details_link:
            return None
        url = build_details_url(self.details_link_base, snapshot.hex)
        if not url:
            return None
        return f"{LINK_PREFIX}{url}"

    def compose(self, snapshot: AircraftSnapshot, timestamps: Any, now: float) -> NotificationMessage:
        identity = resolve_identity(snapshot)
        stats = summarize(timestamps, now)

        intro = _truncate(self._intro_line(identity, stats), self.max_chars)

        link_line = self._link_line(snapshot)
        reserved = 0
        if link_line:
            reserved = len(SECTION_SEPARATOR) + len(link_line)
            if len(intro) + reserved > self.max_chars:
                logger.debug(f"Dropping details link for {identity}: no room left after the intro")
                link_line = None
                reserved = 0

        info_text = " ".join(self._info_sentences(snapshot, identity, stats))
        info_budget = self.max_chars - len(intro) - reserved - len(SECTION_SEPARATOR)
        info_text = _truncate_at_word(info_text, info_budget) if info_budget > 0 else ""

        sections = [intro]
        if info_text:
            sections.append(info_text)
        if link_line:
            sections.append(link_line)
        body = SECTION_SEPARATOR.join(sections)

        return NotificationMessage(body=body)


def build_photo_attachment(snapshot: AircraftSnapshot, photo: PhotoResult | None) -> Attachment | None:
    if photo is None:
        return None

    identity = resolve_identity(snapshot)
    description = format_display_name(snapshot.description)
    alt_text = f"Recent photo of {identity} ({description})." if description else f"Recent photo of {identity}."

    if photo.photographer:
        alt_text = f"{alt_text} © {photo.photographer}"
    else:
        credit = PHOTO_CREDITS.get(photo.source)
        if credit:
            alt_text = f"{alt_text} {credit}"

    return Attachment(
        url=photo.image_url,
        alt_text=alt_text,
        page_url=photo.page_url,
        source=photo.source,
    )
