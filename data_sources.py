#!/usr/bin/env python3
"""
surf-forecast.com data source
Fetches forecast, break and search pages and hands them to the forecast scrapers
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from forecast_assembler import HTML_PARSER, scrape_forecast
from forecast_errors import BreakNotFoundError, ElementNotFoundError, SourceError
from forecast_models import Break, Forecast
from issuance import TimezoneAbbreviations
from markup import find_first, has_attribute, id_equals, text_content

logger = logging.getLogger(__name__)

BASE_URL = "https://www.surf-forecast.com"

PATH_FORMAT_FORECAST_EIGHT_DAYS = "/breaks/{}/forecasts/latest"
PATH_FORMAT_FORECAST_TWELVE_DAYS = "/breaks/{}/forecasts/latest/six_days"
PATH_FORMAT_BREAK = "/breaks/{}"
PATH_SEARCH_BREAKS = "/breaks/ac_location_name"

QUERY_PARAM_SEARCH = "query"

ID_DROP_FORM_CONTROL_NAV = "dropformcont-nav"
ID_COUNTRY = "country_id"
ID_LOCATION_FILENAME_PART = "location_filename_part"
ATTRIBUTE_SELECTED = "selected"

DEFAULT_TIMEOUT = 10
DEFAULT_MAX_RETRIES = 3
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)
USER_AGENT = "surfcast/1.0 (surf forecast scraper)"


def retry_request(session: requests.Session, url: str, params: Optional[Dict] = None,
                  max_retries: int = DEFAULT_MAX_RETRIES, timeout: int = DEFAULT_TIMEOUT) -> requests.Response:
    """GET with exponential backoff on timeouts, connection errors and 429/5xx.

    Any other status is returned to the caller as is.
    """
    for attempt in range(max_retries):
        try:
            response = session.get(url, params=params, timeout=timeout)
            if response.status_code in RETRYABLE_STATUS_CODES and attempt < max_retries - 1:
                wait_time = 2 ** attempt
                logger.warning(f"HTTP {response.status_code} error, retrying in {wait_time}s (attempt {attempt + 1}/{max_retries})")
                time.sleep(wait_time)
                continue
            return response
        except requests.exceptions.RequestException as e:
            if attempt < max_retries - 1:
                wait_time = 2 ** attempt
                logger.warning(f"Request error: {e}, retrying in {wait_time}s (attempt {attempt + 1}/{max_retries})")
                time.sleep(wait_time)
                continue
            logger.error(f"Request failed after all retries: {e}")
            raise

    raise requests.exceptions.RequestException(f"All {max_retries} attempts failed")


class ForecastSource(ABC):
    """Abstract base class for forecast sources"""

    @abstractmethod
    def fetch_forecast(self, break_name: str, twelve_days: bool = False) -> Forecast:
        pass

    @abstractmethod
    def is_available(self) -> bool:
        pass


class SurfForecastSource(ForecastSource):
    """surf-forecast.com break pages"""

    def __init__(self, base_url: str = BASE_URL, timeout: int = DEFAULT_TIMEOUT,
                 max_retries: int = DEFAULT_MAX_RETRIES, timezones=None,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.timezones = timezones or TimezoneAbbreviations()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _get(self, path: str, params: Optional[Dict] = None) -> requests.Response:
        url = self.base_url + path
        logger.debug(f"GET {url} {params or ''}")
        return retry_request(self.session, url, params=params,
                             max_retries=self.max_retries, timeout=self.timeout)

    def _get_break_page(self, path: str, break_name: str) -> BeautifulSoup:
        response = self._get(path)
        if response.status_code == 404:
            raise BreakNotFoundError(f"break not found: {break_name!r}")
        if response.status_code != 200:
            raise SourceError(f"received response with {response.status_code} status code")
        return BeautifulSoup(response.content, HTML_PARSER)

    def fetch_forecast(self, break_name: str, twelve_days: bool = False) -> Forecast:
        """Fetch and scrape the latest forecast table of a break.

        The default page covers eight days, twelve_days asks for the longer one.
        """
        path_format = PATH_FORMAT_FORECAST_TWELVE_DAYS if twelve_days else PATH_FORMAT_FORECAST_EIGHT_DAYS
        page = self._get_break_page(path_format.format(break_name), break_name)

        forecast = scrape_forecast(page, self.timezones)
        logger.info(f"Fetched {len(forecast.daily)} forecast days for {break_name}")
        return forecast

    def search_breaks(self, query: str) -> List[Break]:
        """Search breaks by free text"""
        response = self._get(PATH_SEARCH_BREAKS, params={QUERY_PARAM_SEARCH: query})
        if response.status_code != 200:
            raise SourceError(f"received response with {response.status_code} status code")

        # The payload is a 2D array written with single quotes: [['id','name','country'],...]
        body = response.text.replace("'", '"')
        try:
            results = json.loads(body)
        except json.JSONDecodeError as e:
            raise SourceError(f"could not decode search results: {e}")

        if not isinstance(results, list):
            raise SourceError(f"unexpected search results: {response.text[:200]!r}")

        breaks = []
        for result in results:
            # First element is an opaque site identifier
            if not isinstance(result, list) or len(result) != 3:
                raise SourceError(f"unexpected search result: {result!r}")
            breaks.append(Break(name=result[1], country_name=result[2]))

        logger.info(f"Found {len(breaks)} breaks matching {query!r}")
        return breaks

    def get_break(self, break_name: str) -> Break:
        """Canonical break and country name as shown in the page navigation"""
        page = self._get_break_page(PATH_FORMAT_BREAK.format(break_name), break_name)
        return scrape_break(page)

    def is_available(self) -> bool:
        """Check if surf-forecast.com is responding"""
        try:
            response = self.session.get(self.base_url, timeout=self.timeout)
            return response.status_code == 200
        except requests.exceptions.RequestException as e:
            logger.warning(f"surf-forecast.com not available: {e}")
            return False


def _selected_text(nav, select_id: str, what: str) -> str:
    select = find_first(nav, id_equals(select_id))
    if select is None:
        raise ElementNotFoundError(f"could not find {what} node")

    selected = find_first(select, has_attribute(ATTRIBUTE_SELECTED))
    if selected is None:
        raise ElementNotFoundError(f"could not find {what} name node")

    name = text_content(selected).strip()
    if not name:
        raise ElementNotFoundError(f"could not find {what} name text node")
    return name


def scrape_break(root) -> Break:
    nav = find_first(root, id_equals(ID_DROP_FORM_CONTROL_NAV))
    if nav is None:
        raise ElementNotFoundError("could not find navigation node")

    return Break(
        name=_selected_text(nav, ID_LOCATION_FILENAME_PART, 'break'),
        country_name=_selected_text(nav, ID_COUNTRY, 'country'),
    )
