"""Pytest fixtures and configuration."""

import os
import sys

import pytest
from bs4 import BeautifulSoup

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from forecast_pages import StaticTimezones, forecast_page  # noqa: E402


@pytest.fixture
def timezones():
    """Resolver that knows MYT and HST only."""
    return StaticTimezones({
        'MYT': ['Asia/Kuala_Lumpur', 'Asia/Kuching'],
        'HST': ['Pacific/Honolulu'],
    })


@pytest.fixture
def page_soup():
    """Two-day forecast page, parsed."""
    return BeautifulSoup(forecast_page(), 'html.parser')


@pytest.fixture
def table(page_soup):
    return page_soup.find(class_='forecast-table__basic')
