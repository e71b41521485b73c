"""
Tests for issuance timestamp parsing and timezone abbreviation lookup.
"""

from datetime import datetime

import pytest
from bs4 import BeautifulSoup

from forecast_errors import ElementNotFoundError, MalformedValueError, TimezoneLookupError
from forecast_pages import StaticTimezones
from issuance import (
    TimezoneAbbreviations,
    parse_issuance_text,
    parse_short_month,
    resolve_timezone,
    scrape_issuance,
)


class TestParseIssuanceText:
    """Header sentence parsing."""

    def test_parses_all_fields(self, timezones):
        issued = parse_issuance_text("Surf forecast issued at 2 PM local time: 15 May 2021 MYT", timezones)
        assert issued.replace(tzinfo=None) == datetime(2021, 5, 15, 14)
        assert issued.tzinfo.zone == 'Asia/Kuala_Lumpur'
        assert issued.utcoffset().total_seconds() == 8 * 3600

    def test_midnight_and_noon(self, timezones):
        midnight = parse_issuance_text("Surf forecast issued at 12 AM local time: 1 Jan 2022 HST", timezones)
        noon = parse_issuance_text("Surf forecast issued at 12 PM local time: 1 Jan 2022 HST", timezones)
        assert midnight.hour == 0
        assert noon.hour == 12
        assert midnight.tzinfo.zone == 'Pacific/Honolulu'

    def test_extra_whitespace_is_ignored(self, timezones):
        issued = parse_issuance_text("  Surf forecast issued at 2 PM\nlocal time:  15 May 2021 MYT ", timezones)
        assert issued.day == 15

    @pytest.mark.parametrize("text", [
        "Surf forecast issued at 2 PM local time: 15 May 2021",
        "Surf forecast issued at 2 PM local time on: 15 May 2021 MYT",
        "",
    ])
    def test_token_count_mismatch(self, text, timezones):
        with pytest.raises(MalformedValueError, match="unexpected issue text"):
            parse_issuance_text(text, timezones)

    @pytest.mark.parametrize("text", [
        "Surf forecast issued at 13 PM local time: 15 May 2021 MYT",
        "Surf forecast issued at 2 XM local time: 15 May 2021 MYT",
        "Surf forecast issued at 2 PM local time: 32 May 2021 MYT",
        "Surf forecast issued at 2 PM local time: 15 Mai 2021 MYT",
        "Surf forecast issued at 2 PM local time: 15 May 21 MYT",
        "Surf forecast issued at 2 PM local time: 31 Jun 2021 MYT",
    ])
    def test_malformed_fields(self, text, timezones):
        with pytest.raises(MalformedValueError):
            parse_issuance_text(text, timezones)

    def test_unknown_abbreviation(self, timezones):
        with pytest.raises(TimezoneLookupError, match="0 timezones"):
            parse_issuance_text("Surf forecast issued at 2 PM local time: 15 May 2021 XYZ", timezones)


class TestResolveTimezone:

    def test_first_candidate_wins(self):
        tz = resolve_timezone('MYT', StaticTimezones({'MYT': ['Asia/Kuching', 'Asia/Kuala_Lumpur']}))
        assert tz.zone == 'Asia/Kuching'

    def test_unloadable_candidate(self):
        with pytest.raises(TimezoneLookupError, match="Mars/Olympus_Mons"):
            resolve_timezone('MST', StaticTimezones({'MST': ['Mars/Olympus_Mons']}))

    def test_candidate_on_daylight_time_is_passed_over(self):
        zones = StaticTimezones({'HST': ['America/Adak', 'Pacific/Honolulu']})
        assert resolve_timezone('HST', zones, datetime(2021, 7, 15, 14)).zone == 'Pacific/Honolulu'
        assert resolve_timezone('HST', zones, datetime(2021, 1, 15, 14)).zone == 'America/Adak'

    def test_falls_back_to_first_candidate(self):
        zones = StaticTimezones({'MYT': ['Asia/Kuala_Lumpur', 'Asia/Kuching']})
        assert resolve_timezone('MYT', zones, datetime(2021, 5, 15, 14)).zone == 'Asia/Kuala_Lumpur'


class TestIssuanceOffsets:
    """Header sentences resolved through the pytz backed index."""

    @pytest.fixture(scope='class')
    def abbreviations(self):
        return TimezoneAbbreviations(reference_year=2021)

    @pytest.mark.parametrize("date_text,abbreviation,zone,offset_hours", [
        ('15 Jul 2021', 'HST', 'Pacific/Honolulu', -10),
        ('15 Jan 2021', 'HST', 'Pacific/Honolulu', -10),
        ('15 Jan 2021', 'IST', 'Asia/Kolkata', 5.5),
        ('15 Jul 2021', 'PDT', 'America/Los_Angeles', -7),
        ('15 Jan 2021', 'PST', 'America/Los_Angeles', -8),
        ('15 Jul 2021', 'CST', 'America/Costa_Rica', -6),
        ('15 Jan 2021', 'AST', 'America/Puerto_Rico', -4),
        ('15 Jul 2021', 'BST', 'Europe/London', 1),
        ('15 May 2021', 'MYT', 'Asia/Kuala_Lumpur', 8),
    ])
    def test_offset(self, abbreviations, date_text, abbreviation, zone, offset_hours):
        text = f"Surf forecast issued at 2 PM local time: {date_text} {abbreviation}"
        issued = parse_issuance_text(text, abbreviations)
        assert issued.tzinfo.zone == zone
        assert issued.hour == 14
        assert issued.utcoffset().total_seconds() == offset_hours * 3600

    def test_spring_forward_gap(self, abbreviations):
        issued = parse_issuance_text("Surf forecast issued at 2 AM local time: 14 Mar 2021 PST", abbreviations)
        assert issued.replace(tzinfo=None) == datetime(2021, 3, 14, 3)
        assert issued.utcoffset().total_seconds() == -7 * 3600


class TestTimezoneAbbreviations:
    """pytz backed abbreviation index."""

    def test_legacy_abbreviation_comes_first(self):
        zones = TimezoneAbbreviations(reference_year=2021).get_timezones('MYT')
        assert zones[0] == 'Asia/Kuala_Lumpur'

    def test_abbreviation_from_pytz(self):
        zones = TimezoneAbbreviations(reference_year=2021).get_timezones('HST')
        assert 'Pacific/Honolulu' in zones

    def test_daylight_abbreviation_found(self):
        zones = TimezoneAbbreviations(reference_year=2021).get_timezones('PDT')
        assert 'America/Los_Angeles' in zones

    def test_unknown_abbreviation_has_no_candidates(self):
        assert TimezoneAbbreviations(reference_year=2021).get_timezones('XYZ') == []


class TestMonths:

    def test_short_months(self):
        assert parse_short_month('Jan') == 1
        assert parse_short_month('Dec') == 12
        with pytest.raises(MalformedValueError):
            parse_short_month('jan')


class TestScrapeIssuance:

    def test_from_page(self, page_soup, timezones):
        issued = scrape_issuance(page_soup, timezones)
        assert issued.replace(tzinfo=None) == datetime(2021, 5, 15, 14)

    def test_missing_header(self, timezones):
        soup = BeautifulSoup('<div class="break-header"></div>', 'html.parser')
        with pytest.raises(ElementNotFoundError):
            scrape_issuance(soup, timezones)

    def test_empty_header(self, timezones):
        soup = BeautifulSoup('<div class="break-header__issued"> </div>', 'html.parser')
        with pytest.raises(ElementNotFoundError):
            scrape_issuance(soup, timezones)
