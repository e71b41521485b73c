#!/usr/bin/env python3
"""
Scrapers for the rows of the surf-forecast.com forecast table

Each row of the table holds one kind of measurement with one cell per forecast
hour. The last cell of every calendar day carries the is-day-end class, which is
how the flat run of cells is cut back into days. Any cell that cannot be read
fails the whole row; there are no partial results.
"""

import json
import logging
import math
import re
from typing import Callable, List, Optional, TypeVar

from bs4.element import PageElement

from forecast_errors import (
    ElementNotFoundError,
    ForecastError,
    MalformedValueError,
    with_context,
)
from forecast_models import Swell, Wind
from markup import (
    Condition,
    attribute_equals,
    attribute_value,
    class_contains,
    class_equals,
    element_children,
    find_all,
    find_first,
    has_attribute,
    text_content,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

CLASS_FORECAST_TABLE_ROW = 'forecast-table__row'
CLASS_FORECAST_TABLE_CELL = 'forecast-table__cell'
CLASS_FORECAST_TABLE_DAYS = 'forecast-table-days'
CLASS_FORECAST_TABLE_TIME = 'forecast-table-time'
CLASS_FORECAST_TABLE_RATING = 'forecast-table-rating'
CLASS_IS_DAY_END = 'is-day-end'

ATTRIBUTE_DATA_ROW_NAME = 'data-row-name'
ATTRIBUTE_DATA_SWELL_STATE = 'data-swell-state'
ATTRIBUTE_DATA_SPEED = 'data-speed'
ATTRIBUTE_ALT = 'alt'
ATTRIBUTE_TRANSFORM = 'transform'

ROW_DAYS = 'days'
ROW_TIME = 'time'
ROW_RATING = 'rating'
ROW_WAVE_HEIGHT = 'wave-height'
ROW_ENERGY = 'energy'
ROW_WIND = 'wind'
ROW_WIND_STATE = 'wind-state'

CLOCK_PERIOD_AM = 'AM'
CLOCK_PERIOD_PM = 'PM'
CLOCK_PERIODS = frozenset([CLOCK_PERIOD_AM, CLOCK_PERIOD_PM])

SWELL_FIELDS = ('period', 'angle', 'letters', 'height')

ROTATE_PATTERN = re.compile(r'^rotate\(([^()]*)\)$')
INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')

is_data_cell = class_contains(CLASS_FORECAST_TABLE_CELL)
is_day_end = class_contains(CLASS_IS_DAY_END)


# Value parsers

def parse_integer(s: str) -> int:
    text = s.strip()
    if not INTEGER_PATTERN.match(text):
        raise MalformedValueError(f"not integer: {s!r}")
    return int(text)


def parse_number(s: str) -> float:
    try:
        value = float(s)
    except (TypeError, ValueError):
        raise MalformedValueError(f"not float: {s!r}")
    if not math.isfinite(value):
        raise MalformedValueError(f"not finite: {s!r}")
    return value


def parse_twelve_clock_hour(s: str) -> int:
    hour = parse_integer(s)
    if hour < 1 or hour > 12:
        raise MalformedValueError(f"not 12 clock hour: {s!r}")
    return hour


def parse_clock_period(s: str) -> str:
    period = s.strip()
    if period not in CLOCK_PERIODS:
        raise MalformedValueError(f"invalid clock period: {s!r}")
    return period


def to_twenty_four_clock_hour(hour: int, period: str) -> int:
    """12 AM is midnight, 12 PM is noon"""
    if period == CLOCK_PERIOD_AM:
        return 0 if hour == 12 else hour
    return 12 if hour == 12 else hour + 12


def parse_month_day(s: str) -> int:
    day = parse_integer(s)
    if day < 1 or day > 31:
        raise MalformedValueError(f"not month day: {s!r}")
    return day


def parse_rating(s: str) -> int:
    rating = parse_integer(s)
    if rating < 0 or rating > 10:
        raise MalformedValueError(f"invalid rating: {s!r}")
    return rating


def parse_wave_energy(s: str) -> float:
    energy = parse_number(s)
    if energy < 0:
        raise MalformedValueError(f"invalid wave energy: {s!r}")
    return energy


def parse_wind_speed(s: str) -> float:
    speed = parse_number(s)
    if speed < 0:
        raise MalformedValueError(f"invalid wind speed: {s!r}")
    return speed


def parse_degrees(s: str) -> float:
    degrees = parse_number(s)
    if degrees < 0 or degrees > 360:
        raise MalformedValueError(f"invalid direction degrees: {s!r}")
    return degrees


def parse_rotation_degrees(transform: str) -> float:
    """Degrees out of an SVG transform of the form rotate(<number>)"""
    match = ROTATE_PATTERN.match(transform.strip())
    if not match:
        raise MalformedValueError(f"unexpected transform: {transform!r}")
    return parse_degrees(match.group(1))


def _swell_number(value, name: str) -> float:
    # Numbers show up both bare and quoted
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise MalformedValueError(f"swell {name} not a number: {value!r}")
    return parse_number(value)


def _parse_swell(entry) -> Swell:
    if isinstance(entry, dict):
        missing = [f for f in SWELL_FIELDS if f not in entry]
        if missing:
            raise MalformedValueError(f"swell missing {', '.join(missing)}: {entry!r}")
        period, angle, letters, height = (entry[f] for f in SWELL_FIELDS)
    elif isinstance(entry, list) and len(entry) == len(SWELL_FIELDS):
        period, angle, letters, height = entry
    else:
        raise MalformedValueError(f"unexpected swell entry: {entry!r}")

    period = _swell_number(period, 'period')
    if period <= 0:
        raise MalformedValueError(f"invalid swell period: {period!r}")

    angle = _swell_number(angle, 'angle')
    if angle < 0 or angle > 360:
        raise MalformedValueError(f"invalid swell angle: {angle!r}")

    height = _swell_number(height, 'height')
    if height < 0:
        raise MalformedValueError(f"invalid swell height: {height!r}")

    if not isinstance(letters, str) or not letters.strip():
        raise MalformedValueError(f"invalid swell letters: {letters!r}")

    return Swell(
        period_seconds=period,
        direction_to_degrees=angle,
        direction_from_compass=letters.strip(),
        wave_height_meters=height,
    )


def parse_swells(raw: str) -> List[Swell]:
    """Decode a data-swell-state payload.

    The site writes JSON with single quotes, e.g.
    [{'period':12,'angle':45,'letters':'SW','height':1.2},null]
    so quotes are swapped before decoding. null entries mean "no swell" for
    that slot and are skipped.
    """
    try:
        payload = json.loads(raw.replace("'", '"'))
    except json.JSONDecodeError as e:
        raise MalformedValueError(f"could not decode swells {raw!r}: {e}")

    if not isinstance(payload, list):
        raise MalformedValueError(f"swells not an array: {raw!r}")

    return [_parse_swell(entry) for entry in payload if entry is not None]


# Cell readers

def _required_text(node: Optional[PageElement], what: str) -> str:
    if node is None:
        raise ElementNotFoundError(f"could not find {what} node")
    text = text_content(node).strip()
    if not text:
        raise ElementNotFoundError(f"could not find {what} text")
    return text


def _required_attribute(node: Optional[PageElement], key: str, what: str) -> str:
    value = attribute_value(node, key) if node is not None else None
    if value is None:
        raise ElementNotFoundError(f"could not find {what} attribute")
    return value


def _first_child(node: PageElement) -> Optional[PageElement]:
    children = element_children(node)
    return children[0] if children else None


def _last_child(node: PageElement) -> Optional[PageElement]:
    children = element_children(node)
    return children[-1] if children else None


def read_day(cell: PageElement) -> int:
    container = _last_child(cell)
    if container is None:
        raise ElementNotFoundError("could not find day container node")
    return parse_month_day(_required_text(_last_child(container), 'month day'))


def read_hour(cell: PageElement) -> int:
    children = element_children(cell)
    if len(children) < 2:
        raise ElementNotFoundError("could not find hour and clock period nodes")
    hour = parse_twelve_clock_hour(_required_text(children[0], 'hour'))
    period = parse_clock_period(_required_text(children[-1], 'clock period'))
    return to_twenty_four_clock_hour(hour, period)


def read_rating(cell: PageElement) -> int:
    return parse_rating(_required_attribute(_first_child(cell), ATTRIBUTE_ALT, 'rating'))


def read_swells(cell: PageElement) -> List[Swell]:
    return parse_swells(_required_attribute(cell, ATTRIBUTE_DATA_SWELL_STATE, 'swells'))


def read_wave_energy(cell: PageElement) -> float:
    return parse_wave_energy(_required_text(_first_child(cell), 'wave energy'))


def read_wind(cell: PageElement) -> Wind:
    container = _first_child(cell)
    if container is None:
        raise ElementNotFoundError("could not find wind container node")

    speed = parse_wind_speed(_required_attribute(container, ATTRIBUTE_DATA_SPEED, 'wind speed'))

    degrees = None
    arrow = find_first(container, has_attribute(ATTRIBUTE_TRANSFORM))
    if arrow is not None:
        degrees = parse_rotation_degrees(attribute_value(arrow, ATTRIBUTE_TRANSFORM))

    compass = _required_text(_last_child(container), 'wind direction compass')

    return Wind(
        speed_kmh=speed,
        direction_to_degrees=degrees,
        direction_from_compass=compass,
    )


def read_wind_state(cell: PageElement) -> str:
    state = text_content(cell).strip()
    if not state:
        raise MalformedValueError("invalid wind state")
    return state


# Row scrapers

def _find_row(table: PageElement, row_name: str, *conditions: Condition) -> PageElement:
    row = find_first(table, *conditions, attribute_equals(ATTRIBUTE_DATA_ROW_NAME, row_name))
    if row is None:
        raise ElementNotFoundError(f"could not find {row_name} row")
    return row


def _read_cell(cell: PageElement, read: Callable[[PageElement], T], row_name: str, index: int) -> T:
    try:
        return read(cell)
    except ForecastError as e:
        raise with_context(e, f"{row_name} row, cell {index}") from e


def scrape_day_blocks(table: PageElement, row_name: str, read: Callable[[PageElement], T],
                      *conditions: Condition) -> List[List[T]]:
    """Read every data cell of a row and cut the values into days.

    A day ends at a cell marked is-day-end. Cells left over after the last
    marker are an error, never silently dropped.
    """
    row = _find_row(table, row_name, *conditions)

    blocks = []
    block = []
    for index, cell in enumerate(find_all(row, is_data_cell)):
        block.append(_read_cell(cell, read, row_name, index))
        if is_day_end(cell):
            blocks.append(block)
            block = []

    if block:
        raise MalformedValueError(f"{row_name} row ends with an incomplete day of {len(block)} cells")

    logger.debug(f"Scraped {row_name} row: {len(blocks)} days, {[len(b) for b in blocks]} cells per day")
    return blocks


def scrape_days(table: PageElement) -> List[int]:
    """Day of month for every day column of the table"""
    row = _find_row(
        table, ROW_DAYS,
        class_contains(CLASS_FORECAST_TABLE_ROW, CLASS_FORECAST_TABLE_DAYS),
    )
    days = [
        _read_cell(cell, read_day, ROW_DAYS, index)
        for index, cell in enumerate(find_all(row, is_data_cell))
    ]
    logger.debug(f"Scraped days row: {days}")
    return days


def scrape_hours(table: PageElement) -> List[List[int]]:
    return scrape_day_blocks(
        table, ROW_TIME, read_hour,
        class_contains(CLASS_FORECAST_TABLE_ROW, CLASS_FORECAST_TABLE_TIME),
    )


def scrape_ratings(table: PageElement) -> List[List[int]]:
    return scrape_day_blocks(
        table, ROW_RATING, read_rating,
        class_contains(CLASS_FORECAST_TABLE_ROW, CLASS_FORECAST_TABLE_RATING),
    )


def scrape_swells(table: PageElement) -> List[List[List[Swell]]]:
    return scrape_day_blocks(table, ROW_WAVE_HEIGHT, read_swells, class_equals(CLASS_FORECAST_TABLE_ROW))


def scrape_wave_energies(table: PageElement) -> List[List[float]]:
    return scrape_day_blocks(table, ROW_ENERGY, read_wave_energy, class_equals(CLASS_FORECAST_TABLE_ROW))


def scrape_winds(table: PageElement) -> List[List[Wind]]:
    return scrape_day_blocks(table, ROW_WIND, read_wind, class_equals(CLASS_FORECAST_TABLE_ROW))


def scrape_wind_states(table: PageElement) -> List[List[str]]:
    return scrape_day_blocks(table, ROW_WIND_STATE, read_wind_state, class_equals(CLASS_FORECAST_TABLE_ROW))
