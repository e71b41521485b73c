#!/usr/bin/env python3
"""
SURFCAST - surf-forecast.com forecast scraper
Fetches a break's hourly wave, wind and swell forecast and reports the best sessions

Usage:
    python surfcast.py Cherating --time-range 6-19 --min-rating 4
"""

import argparse
import logging
import sys
from pathlib import Path

import requests

from analysis import ForecastAnalyzer, ReportGenerator, forecast_to_dataframe
from data_sources import DEFAULT_TIMEOUT, SurfForecastSource
from forecast_errors import BreakNotFoundError, ForecastError


def setup_logging(verbose: bool = False):
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('surfcast.log'),
            logging.StreamHandler(sys.stdout)
        ]
    )
    return logging.getLogger(__name__)


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Scrape hourly surf forecasts from surf-forecast.com',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python surfcast.py Cherating                      # 8-day forecast report
  python surfcast.py Cherating --twelve-days        # 12-day forecast
  python surfcast.py Cherating --time-range 8-18    # 8 AM to 6 PM window
  python surfcast.py --search pipeline              # Find break names
  python surfcast.py Cherating --save-csv --verbose # Save hourly data, detailed logging
        """
    )

    parser.add_argument(
        'break_name',
        nargs='?',
        default=None,
        help='Break name as used in surf-forecast.com URLs (e.g. Cherating)'
    )

    parser.add_argument(
        '--search',
        type=str,
        default=None,
        help='Search breaks by name and exit'
    )

    parser.add_argument(
        '--twelve-days',
        action='store_true',
        help='Fetch the 12-day forecast instead of the 8-day one'
    )

    parser.add_argument(
        '--time-range',
        type=str,
        default='6-19',
        help='Local time range in hours (default: 6-19 for 6AM-7PM)'
    )

    parser.add_argument(
        '--min-rating',
        type=int,
        default=3,
        help='Minimum 0-10 rating for a best session (default: 3)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default='data',
        help='Output directory for data files (default: data)'
    )

    parser.add_argument(
        '--save-report',
        action='store_true',
        help='Save the report to a file'
    )

    parser.add_argument(
        '--save-csv',
        action='store_true',
        help='Save hourly forecast data as CSV'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f'HTTP request timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def parse_time_range(time_range: str):
    start_hour, end_hour = map(int, time_range.split('-'))
    if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23 and start_hour < end_hour):
        raise ValueError("Invalid time range")
    return start_hour, end_hour


def run_search(source: SurfForecastSource, query: str) -> int:
    breaks = source.search_breaks(query)
    if not breaks:
        print(f"No breaks found for '{query}'")
        return 0
    for brk in breaks:
        print(f"{brk.name} ({brk.country_name})")
    return 0


def main(argv=None):
    """Main application entry point"""
    args = parse_arguments(argv)
    logger = setup_logging(args.verbose)

    source = SurfForecastSource(timeout=args.timeout)

    if args.search:
        try:
            return run_search(source, args.search)
        except (ForecastError, requests.exceptions.RequestException) as e:
            logger.error(f"Search failed: {e}")
            return 1

    if not args.break_name:
        logger.error("A break name is required unless --search is given")
        return 1

    try:
        start_hour, end_hour = parse_time_range(args.time_range)
    except ValueError:
        logger.error(f"Invalid time range: {args.time_range}. Use format: START-END (e.g., 6-19)")
        return 1

    analyzer = ForecastAnalyzer(min_rating=args.min_rating)
    reporter = ReportGenerator()

    try:
        logger.info(f"Fetching {'12' if args.twelve_days else '8'}-day forecast for {args.break_name}")
        forecast = source.fetch_forecast(args.break_name, twelve_days=args.twelve_days)

        data = forecast_to_dataframe(forecast)
        filtered = analyzer.filter_time_window(data, start_hour, end_hour)
        logger.info(f"Time window: {start_hour:02d}:00 - {end_hour:02d}:00 local, {len(filtered)} hours")

        analysis = analyzer.analyze(filtered)
        report = reporter.generate_summary_report(args.break_name, forecast.issued_at, analysis)
        print(report)

        if args.save_report or args.save_csv:
            Path(args.output_dir).mkdir(parents=True, exist_ok=True)
        stamp = forecast.issued_at.strftime('%Y%m%d')

        if args.save_report:
            report_file = f"{args.output_dir}/surfcast_{args.break_name}_{stamp}.txt"
            saved_file = reporter.save_report(report, report_file)
            if saved_file:
                print(f"\n📄 Report saved to: {saved_file}")

        if args.save_csv:
            data_file = f"{args.output_dir}/forecast_{args.break_name}_{stamp}.csv"
            data.to_csv(data_file, index=False)
            logger.info(f"Data saved to {data_file}")

        return 0

    except BreakNotFoundError:
        logger.error(f"Break '{args.break_name}' not found. Use --search to find its name.")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except ForecastError as e:
        logger.error(f"Forecast extraction failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Forecast failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
