#!/usr/bin/env python3
"""
Assemble a Forecast out of a surf-forecast.com forecast page

Flow: markup -> BeautifulSoup tree -> forecast table -> one sequence of day
blocks per row -> dates from the issuance header -> zipped, typed forecast.
Rows are scraped independently, so every day block of every row must line up
with the others; any disagreement fails the extraction instead of truncating.
"""

import dataclasses
import logging
from datetime import datetime
from typing import List, Sequence

import pytz
from bs4 import BeautifulSoup
from bs4.element import PageElement

from calendar_reconstruction import localize_hour, reconstruct_dates
from cell_scrapers import (
    scrape_days,
    scrape_hours,
    scrape_ratings,
    scrape_swells,
    scrape_wave_energies,
    scrape_wind_states,
    scrape_winds,
)
from forecast_errors import (
    ElementNotFoundError,
    ForecastError,
    MalformedValueError,
    SequenceMismatchError,
    with_context,
)
from forecast_models import DailyForecast, Forecast, HourlyForecast, Swell, Wind
from issuance import scrape_issuance
from markup import class_equals, find_first

logger = logging.getLogger(__name__)

CLASS_FORECAST_TABLE_BASIC = 'forecast-table__basic'

HTML_PARSER = 'html.parser'


def _check_equal_lengths(reference_name: str, reference: Sequence, others, context: str = ''):
    for name, sequence in others:
        if len(sequence) != len(reference):
            prefix = f"{context}: " if context else ''
            raise SequenceMismatchError(
                f"{prefix}{reference_name} and {name} must have equal number of elements "
                f"({len(reference)} != {len(sequence)})"
            )


def assemble_forecast(
        issued_at: datetime,
        days: List[int],
        hours: List[List[int]],
        ratings: List[List[int]],
        swells: List[List[List[Swell]]],
        wave_energies: List[List[float]],
        winds: List[List[Wind]],
        wind_states: List[List[str]]) -> Forecast:
    """Zip per-row day blocks into daily and hourly forecasts"""
    _check_equal_lengths('days', days, [
        ('hours', hours),
        ('ratings', ratings),
        ('swells', swells),
        ('wave energies', wave_energies),
        ('winds', winds),
        ('wind states', wind_states),
    ])

    zone = getattr(issued_at.tzinfo, 'zone', None)
    if zone is None:
        raise MalformedValueError(f"issuance timestamp must carry a pytz zone: {issued_at.isoformat()}")
    tz = pytz.timezone(zone)
    dates = reconstruct_dates(issued_at, days)

    daily = []
    for i, day in enumerate(dates):
        _check_equal_lengths('hours', hours[i], [
            ('ratings', ratings[i]),
            ('swells', swells[i]),
            ('wave energies', wave_energies[i]),
            ('winds', winds[i]),
            ('wind states', wind_states[i]),
        ], context=f"day {i} ({day.isoformat()})")

        hourly = tuple(
            HourlyForecast(
                timestamp=localize_hour(tz, day, hour),
                rating=rating,
                swells=tuple(hour_swells),
                wave_energy_kj=energy,
                wind=dataclasses.replace(wind, state=state),
            )
            for hour, rating, hour_swells, energy, wind, state in zip(
                hours[i], ratings[i], swells[i], wave_energies[i], winds[i], wind_states[i])
        )
        daily.append(DailyForecast(timestamp=localize_hour(tz, day, 0), hourly=hourly))

    return Forecast(issued_at=issued_at, daily=tuple(daily))


def _scrape(what: str, scrape, node: PageElement):
    try:
        return scrape(node)
    except ForecastError as e:
        raise with_context(e, f"could not scrape {what}") from e


def scrape_forecast(root: PageElement, timezones) -> Forecast:
    """Extract the forecast from a parsed page.

    timezones resolves the issuance header's zone abbreviation; anything with a
    get_timezones(abbreviation) method returning IANA names will do, normally
    issuance.TimezoneAbbreviations.
    """
    issued_at = _scrape('issue date', lambda n: scrape_issuance(n, timezones), root)

    table = find_first(root, class_equals(CLASS_FORECAST_TABLE_BASIC))
    if table is None:
        raise ElementNotFoundError("could not find table node")

    days = _scrape('days', scrape_days, table)
    hours = _scrape('hours', scrape_hours, table)
    ratings = _scrape('ratings', scrape_ratings, table)
    swells = _scrape('swells', scrape_swells, table)
    wave_energies = _scrape('wave energies', scrape_wave_energies, table)
    winds = _scrape('winds', scrape_winds, table)
    wind_states = _scrape('wind states', scrape_wind_states, table)

    forecast = assemble_forecast(issued_at, days, hours, ratings, swells, wave_energies, winds, wind_states)
    logger.info(f"Scraped {len(forecast.daily)} days, {len(forecast.hourly())} hours "
                f"issued at {issued_at.isoformat()}")
    return forecast


def parse_forecast_page(markup, timezones) -> Forecast:
    """Parse raw page markup (str or bytes) and extract its forecast"""
    return scrape_forecast(BeautifulSoup(markup, HTML_PARSER), timezones)
