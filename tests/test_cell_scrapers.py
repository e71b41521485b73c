"""
Tests for the forecast table row scrapers and value parsers.
"""

import pytest
from bs4 import BeautifulSoup

from cell_scrapers import (
    parse_clock_period,
    parse_rating,
    parse_rotation_degrees,
    parse_swells,
    parse_twelve_clock_hour,
    parse_wave_energy,
    parse_wind_speed,
    read_wind,
    read_wind_state,
    scrape_days,
    scrape_hours,
    scrape_ratings,
    scrape_swells,
    scrape_wave_energies,
    scrape_wind_states,
    scrape_winds,
    to_twenty_four_clock_hour,
)
from forecast_errors import ElementNotFoundError, MalformedValueError
from forecast_models import Swell
from forecast_pages import (
    TWO_DAYS,
    cell,
    energy_row,
    forecast_page,
    rating_row,
    row,
    swell_row,
    time_row,
    wind_cell_content,
    wind_row,
)


def parse_table(markup):
    return BeautifulSoup(f'<table class="forecast-table__basic">{markup}</table>', 'html.parser').table


def parse_cell(markup):
    return BeautifulSoup(markup, 'html.parser').td


class TestClockParsing:
    """12-hour clock values."""

    @pytest.mark.parametrize("hour,period,expected", [
        (12, 'AM', 0),
        (12, 'PM', 12),
        (1, 'AM', 1),
        (1, 'PM', 13),
        (11, 'PM', 23),
        (11, 'AM', 11),
    ])
    def test_to_twenty_four_clock_hour(self, hour, period, expected):
        assert to_twenty_four_clock_hour(hour, period) == expected

    @pytest.mark.parametrize("text", ['0', '13', 'x', '', '1.5'])
    def test_invalid_twelve_clock_hour(self, text):
        with pytest.raises(MalformedValueError):
            parse_twelve_clock_hour(text)

    def test_clock_period_must_be_known(self):
        assert parse_clock_period('PM') == 'PM'
        with pytest.raises(MalformedValueError):
            parse_clock_period('XM')


class TestValueParsing:

    @pytest.mark.parametrize("text,expected", [('0', 0), ('10', 10), ('7', 7)])
    def test_rating_bounds_accepted(self, text, expected):
        assert parse_rating(text) == expected

    @pytest.mark.parametrize("text", ['-1', '11', 'great', '5.5'])
    def test_rating_bounds_rejected(self, text):
        with pytest.raises(MalformedValueError):
            parse_rating(text)

    def test_wave_energy(self):
        assert parse_wave_energy('245.5') == 245.5
        assert parse_wave_energy('0') == 0.0
        with pytest.raises(MalformedValueError):
            parse_wave_energy('-1')
        with pytest.raises(MalformedValueError):
            parse_wave_energy('lots')
        with pytest.raises(MalformedValueError):
            parse_wave_energy('nan')

    def test_wind_speed(self):
        assert parse_wind_speed('15') == 15.0
        with pytest.raises(MalformedValueError):
            parse_wind_speed('-3')

    def test_rotation_degrees(self):
        assert parse_rotation_degrees('rotate(181.5)') == 181.5
        assert parse_rotation_degrees('rotate(0)') == 0.0
        assert parse_rotation_degrees('rotate(360)') == 360.0

    @pytest.mark.parametrize("transform", ['rotate(361)', 'rotate(-1)', 'rotate()', 'scale(2)', 'rotate(90deg)'])
    def test_rotation_degrees_rejected(self, transform):
        with pytest.raises(MalformedValueError):
            parse_rotation_degrees(transform)


class TestSwellParsing:
    """data-swell-state payloads."""

    def test_single_quoted_array_of_arrays(self):
        swells = parse_swells("[['1.2','90','N','0.5']]")
        assert swells == [Swell(period_seconds=1.2, direction_to_degrees=90.0,
                                direction_from_compass='N', wave_height_meters=0.5)]

    def test_single_quoted_array_of_objects(self):
        swells = parse_swells("[{'period':12,'angle':45.5,'letters':'SW','height':1.5}]")
        assert swells == [Swell(12.0, 45.5, 'SW', 1.5)]

    def test_null_entries_are_skipped(self):
        assert parse_swells("[null]") == []
        assert len(parse_swells("[null,['8','10','NE','1']]")) == 1

    def test_empty_array(self):
        assert parse_swells("[]") == []

    @pytest.mark.parametrize("raw", [
        "[{'period':12",
        "{'period':12}",
        "[{'period':12,'angle':45}]",
        "[['1','2','N']]",
        "[['0','90','N','1']]",
        "[['5','400','N','1']]",
        "[['5','90','N','-1']]",
        "[['5','90','','1']]",
        "[[true,'90','N','1']]",
    ])
    def test_malformed_swells(self, raw):
        with pytest.raises(MalformedValueError):
            parse_swells(raw)


class TestRowScrapers:
    """Row scrapers against the two-day fixture."""

    def test_days(self, table):
        assert scrape_days(table) == [15, 16]

    def test_hours_are_split_into_days(self, table):
        assert scrape_hours(table) == [[14, 17, 20], [2, 5, 8, 11]]

    def test_ratings(self, table):
        assert scrape_ratings(table) == [[0, 1, 2], [1, 2, 3, 4]]

    def test_swells(self, table):
        swells = scrape_swells(table)
        assert [len(day) for day in swells] == [3, 4]
        first = swells[0][0]
        assert first == [Swell(12.5, 45.0, 'SW', 1.2), Swell(7.0, 270.0, 'E', 0.4)]

    def test_wave_energies(self, table):
        assert scrape_wave_energies(table) == [[100.0, 101.0, 102.0], [200.0, 201.0, 202.0, 203.0]]

    def test_winds(self, table):
        winds = scrape_winds(table)
        assert [len(day) for day in winds] == [3, 4]
        wind = winds[1][3]
        assert wind.speed_kmh == 15.0
        assert wind.direction_to_degrees == 181.5
        assert wind.direction_from_compass == 'SW'

    def test_wind_states(self, table):
        assert scrape_wind_states(table) == [['off'] * 3, ['off'] * 4]

    def test_missing_row(self):
        table = parse_table(time_row())
        with pytest.raises(ElementNotFoundError, match="could not find rating row"):
            scrape_ratings(table)

    def test_row_needs_matching_class(self):
        # Right data-row-name but wrong row class
        table = parse_table(row('time', [], row_class='some-other-row'))
        with pytest.raises(ElementNotFoundError):
            scrape_hours(table)

    def test_bad_cell_fails_whole_row(self):
        table = parse_table(rating_row(rating=lambda d, h: '11' if (d, h) == (1, 2) else '5'))
        with pytest.raises(MalformedValueError, match=r"rating row, cell 5: invalid rating"):
            scrape_ratings(table)

    def test_trailing_partial_day_is_rejected(self):
        cells = [
            cell('<strong>10</strong>', day_end=True),
            cell('<strong>11</strong>'),
        ]
        table = parse_table(row('energy', cells))
        with pytest.raises(MalformedValueError, match="incomplete day"):
            scrape_wave_energies(table)

    def test_rows_are_found_inside_page(self):
        soup = BeautifulSoup(forecast_page(days=TWO_DAYS[:1]), 'html.parser')
        assert scrape_hours(soup) == [[14, 17, 20]]

    def test_missing_swell_attribute(self):
        table = parse_table(row('wave-height', [cell('<div></div>', day_end=True)]))
        with pytest.raises(ElementNotFoundError, match="swells attribute"):
            scrape_swells(table)

    def test_malformed_swell_cell(self):
        table = parse_table(swell_row(swell_state=lambda d, h: "[{'period':"))
        with pytest.raises(MalformedValueError, match="wave-height row, cell 0"):
            scrape_swells(table)

    def test_energy_row_requires_numbers(self):
        table = parse_table(energy_row(energy=lambda d, h: 'n/a'))
        with pytest.raises(MalformedValueError):
            scrape_wave_energies(table)

    def test_wind_row_rejects_bad_rotation(self):
        table = parse_table(wind_row(wind=lambda d, h: wind_cell_content(transform='rotate(361)')))
        with pytest.raises(MalformedValueError, match="wind row, cell 0"):
            scrape_winds(table)


class TestCellReaders:

    def test_wind_without_arrow_has_no_degrees(self):
        wind = read_wind(parse_cell(cell(wind_cell_content(transform=None))))
        assert wind.direction_to_degrees is None
        assert wind.direction_from_compass == 'SW'

    def test_wind_without_speed(self):
        markup = cell('<div class="wind-icon"><div>SW</div></div>')
        with pytest.raises(ElementNotFoundError, match="wind speed"):
            read_wind(parse_cell(markup))

    def test_wind_state_joins_descendant_text(self):
        markup = cell('<div><span>cross</span>-<b>off</b></div>')
        assert read_wind_state(parse_cell(markup)) == 'cross-off'

    def test_empty_wind_state(self):
        markup = cell('<div>  <!-- nothing --> </div>')
        with pytest.raises(MalformedValueError, match="invalid wind state"):
            read_wind_state(parse_cell(markup))
