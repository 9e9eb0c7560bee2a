"""Scene heading (slug line) parser with English, German, French and Spanish support.

Parses strings like:
    INT. OFFICE - DAY            -> (INT, "OFFICE", DAY)
    AUSSEN. WALD - NACHT         -> (EXT, "WALD", NIGHT)
    INTÉRIEUR. CAFÉ - JOUR       -> (INT, "CAFÉ", DAY)
    INT./EXT. CAR - DAWN         -> (INT/EXT, "CAR", DAWN)
"""

import re
from dataclasses import dataclass

from core.models import LocationType, TimeOfDay


# ---------------------------------------------------------------------------
# Time-of-day mapping
# ---------------------------------------------------------------------------

_TIME_MAP: dict[str, TimeOfDay] = {
    # English
    "DAY": TimeOfDay.DAY,
    "NIGHT": TimeOfDay.NIGHT,
    "DAWN": TimeOfDay.DAWN,
    "DUSK": TimeOfDay.DUSK,
    "MORNING": TimeOfDay.MORNING,
    "EVENING": TimeOfDay.EVENING,
    "CONTINUOUS": TimeOfDay.CONTINUOUS,
    "CONT": TimeOfDay.CONTINUOUS,
    "LATER": TimeOfDay.CONTINUOUS,
    "MOMENTS LATER": TimeOfDay.CONTINUOUS,
    # German
    "TAG": TimeOfDay.DAY,
    "NACHT": TimeOfDay.NIGHT,
    "MORGEN": TimeOfDay.MORNING,
    "ABEND": TimeOfDay.EVENING,
    "DÄMMERUNG": TimeOfDay.DUSK,
    # French
    "JOUR": TimeOfDay.DAY,
    "NUIT": TimeOfDay.NIGHT,
    "AUBE": TimeOfDay.DAWN,
    "CRÉPUSCULE": TimeOfDay.DUSK,
    "MATIN": TimeOfDay.MORNING,
    "SOIR": TimeOfDay.EVENING,
    # Spanish
    "DÍA": TimeOfDay.DAY,
    "DIA": TimeOfDay.DAY,
    "NOCHE": TimeOfDay.NIGHT,
    "AMANECER": TimeOfDay.DAWN,
    "ATARDECER": TimeOfDay.DUSK,
    "MAÑANA": TimeOfDay.MORNING,
    "TARDE": TimeOfDay.EVENING,
}

# ---------------------------------------------------------------------------
# Location-type prefixes (longer matches first)
# ---------------------------------------------------------------------------

_LOC_PREFIXES: list[tuple[str, LocationType]] = [
    ("INT./EXT.", LocationType.INT_EXT),
    ("INT/EXT.", LocationType.INT_EXT),
    ("EXT./INT.", LocationType.INT_EXT),
    ("EXT/INT.", LocationType.INT_EXT),
    ("I/E.", LocationType.INT_EXT),
    ("INNEN/AUSSEN", LocationType.INT_EXT),
    ("AUSSEN/INNEN", LocationType.INT_EXT),
    ("INTÉRIEUR", LocationType.INT),
    ("EXTÉRIEUR", LocationType.EXT),
    ("INTERIOR", LocationType.INT),
    ("EXTERIOR", LocationType.EXT),
    ("INT.", LocationType.INT),
    ("EXT.", LocationType.EXT),
    ("INNEN", LocationType.INT),
    ("AUSSEN", LocationType.EXT),
]

# Separator between location and time-of-day (dash variants)
_SEP_RE = re.compile(r"\s*[-–—]\s*")

_SCENE_COUNTER_RE = re.compile(r"^SCENE\s+\d+", re.IGNORECASE)
_CAPS_SLUG_RE = re.compile(r"^[A-Z\s]{10,}$")


@dataclass(frozen=True, slots=True)
class HeadingComponents:
    """Parsed components of a scene heading."""

    location_type: LocationType
    location: str
    time_of_day: TimeOfDay


def parse_scene_heading(heading: str) -> HeadingComponents:
    """Parse a scene heading string into its constituent parts.

    Returns ``HeadingComponents`` with best-effort extraction.  Unknown
    location types or times default to ``UNKNOWN``.
    """
    text = heading.strip()
    upper = text.upper()

    loc_type = LocationType.UNKNOWN
    remainder = text
    for prefix, lt in _LOC_PREFIXES:
        if upper.startswith(prefix):
            # INNEN must not match INNENSTADT
            if prefix[-1].isalpha() and upper[len(prefix) : len(prefix) + 1].isalpha():
                continue
            loc_type = lt
            remainder = text[len(prefix) :].strip()
            break

    parts = _SEP_RE.split(remainder)
    if len(parts) >= 2:
        location = " - ".join(parts[:-1]).strip()
        raw_time = parts[-1].strip().upper()
    else:
        location = remainder.strip()
        raw_time = ""

    location = location.strip(". ")
    tod = _TIME_MAP.get(raw_time, TimeOfDay.UNKNOWN)

    return HeadingComponents(
        location_type=loc_type,
        location=location if location else text,
        time_of_day=tod,
    )


def is_slug_line(line: str) -> bool:
    """Return True if *line* starts with a known interior/exterior prefix."""
    return parse_scene_heading(line).location_type is not LocationType.UNKNOWN


def extract_scene_header(scene_text: str) -> str:
    """Return the slug line of a scene, or a short preview if it has none.

    Only the first three lines are inspected.
    """
    for line in scene_text.split("\n")[:3]:
        trimmed = line.strip()
        if trimmed and (
            is_slug_line(trimmed)
            or _SCENE_COUNTER_RE.match(trimmed)
            or _CAPS_SLUG_RE.match(trimmed)
        ):
            return trimmed
    return f"Scene {scene_text[:50]}..."
