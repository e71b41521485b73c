#!/usr/bin/env python3
"""
Error types raised while extracting surf forecasts

Every failure of an extraction call is fatal for that call; the class tells the
caller which kind of problem it was, the message tells it where.
"""


class ForecastError(Exception):
    """Base class for all forecast extraction failures"""


class ElementNotFoundError(ForecastError):
    """An expected row, cell, attribute or text node is missing"""


class MalformedValueError(ForecastError):
    """A value was found but could not be parsed or is out of range"""


class SequenceMismatchError(ForecastError):
    """Parallel row sequences disagree in length"""


class TimezoneLookupError(ForecastError):
    """A timezone abbreviation could not be resolved to a usable zone"""


class BreakNotFoundError(ForecastError):
    """The requested surf break does not exist on the site"""


class SourceError(ForecastError):
    """The site answered with something we cannot use"""


def with_context(err: ForecastError, context: str) -> ForecastError:
    """Return a new error of the same class with context prefixed to the message"""
    return type(err)(f"{context}: {err}")
