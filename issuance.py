#!/usr/bin/env python3
"""
Issuance timestamp of a forecast page

The page header states when the forecast was generated, e.g.

    Surf forecast issued at 2 PM local time: 15 May 2021 MYT

Only the token positions matter. The trailing abbreviation is resolved to an
IANA zone through pytz; abbreviations are ambiguous, so candidates are tried in
order and the first one that goes by the abbreviation on the issue date wins.
"""

import logging
from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Optional

import pytz
from bs4.element import PageElement

from cell_scrapers import (
    parse_clock_period,
    parse_month_day,
    parse_twelve_clock_hour,
    to_twenty_four_clock_hour,
)
from forecast_errors import ElementNotFoundError, MalformedValueError, TimezoneLookupError
from markup import class_equals, find_first, text_content

logger = logging.getLogger(__name__)

CLASS_BREAK_HEADER_ISSUED = 'break-header__issued'

ISSUANCE_TOKEN_COUNT = 12
TOKEN_HOUR = 4
TOKEN_CLOCK_PERIOD = 5
TOKEN_DAY = 8
TOKEN_MONTH = 9
TOKEN_YEAR = 10
TOKEN_TIMEZONE = 11

SHORT_MONTHS = MappingProxyType({
    'Jan': 1, 'Feb': 2, 'Mar': 3, 'Apr': 4, 'May': 5, 'Jun': 6,
    'Jul': 7, 'Aug': 8, 'Sep': 9, 'Oct': 10, 'Nov': 11, 'Dec': 12,
})

# Abbreviations the site still prints but tzdata replaced with numeric offsets
LEGACY_ABBREVIATIONS = MappingProxyType({
    'MYT': ('Asia/Kuala_Lumpur', 'Asia/Kuching'),
    'SGT': ('Asia/Singapore',),
    'WIB': ('Asia/Jakarta', 'Asia/Pontianak'),
    'WITA': ('Asia/Makassar',),
    'WIT': ('Asia/Jayapura',),
    'ICT': ('Asia/Bangkok', 'Asia/Ho_Chi_Minh', 'Asia/Phnom_Penh', 'Asia/Vientiane'),
    'PHT': ('Asia/Manila',),
    'BRT': ('America/Sao_Paulo', 'America/Bahia', 'America/Fortaleza', 'America/Recife'),
    'ART': ('America/Argentina/Buenos_Aires',),
    'CLT': ('America/Santiago',),
    'PET': ('America/Lima',),
    'COT': ('America/Bogota',),
    'UYT': ('America/Montevideo',),
    'GST': ('Asia/Dubai',),
    'AZOT': ('Atlantic/Azores',),
    'CVT': ('Atlantic/Cape_Verde',),
    'FJT': ('Pacific/Fiji',),
    'TAHT': ('Pacific/Tahiti',),
    'MVT': ('Indian/Maldives',),
    'LKT': ('Asia/Colombo',),
    'MUT': ('Indian/Mauritius',),
    'RET': ('Indian/Reunion',),
})

# Abbreviations shared by several regions, intended zone first
PREFERRED_ZONES = MappingProxyType({
    'HST': ('Pacific/Honolulu',),
    'IST': ('Asia/Kolkata', 'Europe/Dublin', 'Asia/Jerusalem'),
    'AST': ('America/Puerto_Rico', 'America/Halifax'),
    'CST': ('America/Chicago', 'America/Costa_Rica', 'Asia/Shanghai'),
    'BST': ('Europe/London',),
})

# Mid-winter and mid-summer probes pick up both standard and daylight names
PROBE_MONTHS = (1, 7)


class TimezoneAbbreviations:
    """Resolve timezone abbreviations such as 'HST' or 'MYT' to IANA zone names.

    Candidates from LEGACY_ABBREVIATIONS and PREFERRED_ZONES come first,
    followed by every pytz common zone that reports the abbreviation in January
    or July of reference_year, sorted by name. The index is built on first use.
    """

    def __init__(self, reference_year: Optional[int] = None):
        self.reference_year = reference_year or datetime.now(pytz.utc).year
        self._index = None

    def _build_index(self) -> Dict[str, List[str]]:
        index = {}
        for zone in pytz.common_timezones:
            tz = pytz.timezone(zone)
            for month in PROBE_MONTHS:
                probe = datetime(self.reference_year, month, 15, 12, tzinfo=pytz.utc)
                abbreviation = probe.astimezone(tz).tzname()
                if not abbreviation or abbreviation[0] in '+-':
                    continue
                zones = index.setdefault(abbreviation, [])
                if zone not in zones:
                    zones.append(zone)
        for zones in index.values():
            zones.sort()
        logger.debug(f"Indexed {len(index)} timezone abbreviations from pytz")
        return index

    def get_timezones(self, abbreviation: str) -> List[str]:
        if self._index is None:
            self._index = self._build_index()

        candidates = list(LEGACY_ABBREVIATIONS.get(abbreviation, ()))
        candidates.extend(PREFERRED_ZONES.get(abbreviation, ()))
        for zone in self._index.get(abbreviation, []):
            if zone not in candidates:
                candidates.append(zone)
        return candidates


def parse_short_month(s: str) -> int:
    month = SHORT_MONTHS.get(s.strip())
    if month is None:
        raise MalformedValueError(f"invalid short month: {s!r}")
    return month


def localize(tz, local: datetime) -> datetime:
    """Wall-clock time in tz; times inside a spring-forward gap move past it"""
    return tz.normalize(tz.localize(local, is_dst=False))


def resolve_timezone(abbreviation: str, timezones, local: Optional[datetime] = None) -> pytz.BaseTzInfo:
    """First zone the resolver offers for abbreviation, loaded through pytz.

    Given the local wall-clock time, candidates that go by abbreviation at that
    time are moved ahead of the rest (keeping their order), so 'HST' in July
    passes over zones that are on daylight time (HDT) then.
    """
    candidates = list(timezones.get_timezones(abbreviation))
    if not candidates:
        raise TimezoneLookupError(f"0 timezones found for {abbreviation!r} abbreviation")

    loaded = []
    for zone in candidates:
        try:
            loaded.append(pytz.timezone(zone))
        except pytz.UnknownTimeZoneError:
            raise TimezoneLookupError(f"could not find time location for {zone!r}")

    if local is not None:
        loaded.sort(key=lambda tz: tz.localize(local, is_dst=False).tzname() != abbreviation)

    tz = loaded[0]
    logger.debug(f"Resolved {abbreviation!r} to {tz.zone} ({len(candidates)} candidates)")
    return tz


def parse_issuance_text(text: str, timezones) -> datetime:
    """Issuance instant described by the header sentence, localized to its zone"""
    parts = ' '.join(text.split()).split(' ')
    if len(parts) != ISSUANCE_TOKEN_COUNT:
        raise MalformedValueError(f"unexpected issue text: {text!r}")

    try:
        hour = to_twenty_four_clock_hour(
            parse_twelve_clock_hour(parts[TOKEN_HOUR]),
            parse_clock_period(parts[TOKEN_CLOCK_PERIOD]),
        )
        day = parse_month_day(parts[TOKEN_DAY])
        month = parse_short_month(parts[TOKEN_MONTH])
    except MalformedValueError as e:
        raise MalformedValueError(f"could not parse issue text {text!r}: {e}") from e

    year_text = parts[TOKEN_YEAR]
    if len(year_text) != 4 or not year_text.isdigit():
        raise MalformedValueError(f"issue year not 4 digits: {year_text!r}")
    year = int(year_text)

    try:
        local = datetime(year, month, day, hour)
    except ValueError as e:
        raise MalformedValueError(f"invalid issue date in {text!r}: {e}")

    tz = resolve_timezone(parts[TOKEN_TIMEZONE], timezones, local)
    return localize(tz, local)


def scrape_issuance(root: PageElement, timezones) -> datetime:
    container = find_first(root, class_equals(CLASS_BREAK_HEADER_ISSUED))
    if container is None:
        raise ElementNotFoundError("could not find issue container node")

    text = text_content(container).strip()
    if not text:
        raise ElementNotFoundError("could not find issue text node")

    return parse_issuance_text(text, timezones)
