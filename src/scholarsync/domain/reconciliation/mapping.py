"""Fixed lookup tables and field mapping rules for imported scholarships."""

from __future__ import annotations

from datetime import UTC, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from scholarsync.domain.model import RawScholarship

FIRST_INCOMING: Final = "first_incoming"
FIRST_CURRENT: Final = "first_current"
SECOND: Final = "second"
THIRD: Final = "third"
FOURTH: Final = "fourth"

_UNDERGRADUATE: Final = (FIRST_CURRENT, SECOND, THIRD, FOURTH)

CLASS_LEVELS_BY_CODE: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "UG": _UNDERGRADUATE,
        "UGGR": _UNDERGRADUATE,
        "GR": (),
        "High School/Incoming Freshman": (FIRST_INCOMING,),
        "Incoming First-Year Students": (FIRST_INCOMING,),
        "1": (FIRST_CURRENT,),
        "2": (SECOND,),
        "3": (THIRD,),
        "4": (FOURTH,),
    }
)

COLLEGE_CODE_ALIASES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "AH": "AHSS",
        "SS": "AHSS",
        "TX": "LW",
    }
)

STATE_NAMES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "AL": "Alabama",
        "AK": "Alaska",
        "AZ": "Arizona",
        "AR": "Arkansas",
        "CA": "California",
        "CO": "Colorado",
        "CT": "Connecticut",
        "DE": "Delaware",
        "DC": "Washington DC",
        "FL": "Florida",
        "GA": "Georgia",
        "HI": "Hawaii",
        "ID": "Idaho",
        "IL": "Illinois",
        "IN": "Indiana",
        "IA": "Iowa",
        "KS": "Kansas",
        "KY": "Kentucky",
        "LA": "Louisiana",
        "ME": "Maine",
        "MD": "Maryland",
        "MA": "Massachusetts",
        "MI": "Michigan",
        "MN": "Minnesota",
        "MS": "Mississippi",
        "MO": "Missouri",
        "MT": "Montana",
        "NE": "Nebraska",
        "NV": "Nevada",
        "NH": "New Hampshire",
        "NJ": "New Jersey",
        "NM": "New Mexico",
        "NY": "New York",
        "NC": "North Carolina",
        "ND": "North Dakota",
        "OH": "Ohio",
        "OK": "Oklahoma",
        "OR": "Oregon",
        "PA": "Pennsylvania",
        "PR": "Puerto Rico",
        "RI": "Rhode Island",
        "SC": "South Carolina",
        "SD": "South Dakota",
        "TN": "Tennessee",
        "TX": "Texas",
        "UT": "Utah",
        "VT": "Vermont",
        "VI": "Virgin Islands",
        "VA": "Virginia",
        "WA": "Washington",
        "WV": "West Virginia",
        "WI": "Wisconsin",
        "WY": "Wyoming",
    }
)

STUDENTS_OF_COLOR: Final = "students_color"
WOMEN: Final = "women"
VETERANS: Final = "veterans"
INTERNATIONAL_YES: Final = "yes"


def class_levels_for(levels: Iterable[str]) -> list[str]:
    """Expand API level codes into class-level tags; unknown codes are ignored."""

    result: list[str] = []
    for level in levels:
        for tag in CLASS_LEVELS_BY_CODE.get(level, ()):
            if tag not in result:
                result.append(tag)
    return result


def normalize_college_code(code: str) -> str:
    return COLLEGE_CODE_ALIASES.get(code, code)


def home_state_names(states: Iterable[str]) -> dict[str, str]:
    """Map state abbreviations to full names.

    Abbreviations are trimmed and upper-cased; blanks are dropped and unknown ones
    map to ``"<ABBR> Unknown"``.
    """

    names: dict[str, str] = {}
    for state in states:
        abbreviation = state.strip().upper()
        if not abbreviation:
            continue
        names[abbreviation] = STATE_NAMES.get(abbreviation, f"{abbreviation} Unknown")
    return names


def population_for(record: RawScholarship) -> list[str]:
    population: list[str] = []
    if record.students_of_color:
        population.append(STUDENTS_OF_COLOR)
    if record.gender == "F":
        population.append(WOMEN)
    if record.veterans:
        population.append(VETERANS)
    return population


def parse_timestamp(value: str | None) -> int | None:
    """Parse an API timestamp into epoch seconds (naive values are taken as UTC)."""

    if value is None:
        return None
    normalized = value.strip()
    if not normalized:
        return None
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp())


def needs_update(stored_last_update: int | None, incoming_last_update: int | None) -> bool:
    """Return whether an incoming record is at least as recent as the stored one.

    Equal timestamps count as an update.
    """

    if incoming_last_update is None:
        return False
    if stored_last_update is None:
        return True
    return stored_last_update <= incoming_last_update
