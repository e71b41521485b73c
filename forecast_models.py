#!/usr/bin/env python3
"""
Immutable value types produced by forecast extraction
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Swell:
    """One swell train within an hourly forecast"""
    period_seconds: float
    direction_to_degrees: float
    direction_from_compass: str
    wave_height_meters: float


@dataclass(frozen=True)
class Wind:
    """Wind conditions for one hour

    direction_to_degrees is None when the page does not draw a wind arrow.
    """
    speed_kmh: float
    direction_to_degrees: Optional[float]
    direction_from_compass: str
    state: str = ''


@dataclass(frozen=True)
class HourlyForecast:
    timestamp: datetime
    rating: int
    swells: Tuple[Swell, ...]
    wave_energy_kj: float
    wind: Wind

    @property
    def hour(self) -> int:
        return self.timestamp.hour


@dataclass(frozen=True)
class DailyForecast:
    """All hourly forecasts for one local calendar day"""
    timestamp: datetime
    hourly: Tuple[HourlyForecast, ...] = field(default_factory=tuple)

    @property
    def date(self) -> date:
        return self.timestamp.date()


@dataclass(frozen=True)
class Forecast:
    """A full forecast table together with the time it was issued"""
    issued_at: datetime
    daily: Tuple[DailyForecast, ...] = field(default_factory=tuple)

    def hourly(self) -> Tuple[HourlyForecast, ...]:
        return tuple(h for day in self.daily for h in day.hourly)


@dataclass(frozen=True)
class Break:
    """A surf break as listed by the site"""
    name: str
    country_name: str
