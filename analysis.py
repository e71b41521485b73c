#!/usr/bin/env python3
"""
Analysis of scraped surf forecasts
Flattens forecasts into pandas frames, picks the best sessions and renders reports
"""

import pandas as pd
import numpy as np
from datetime import datetime
from typing import Dict, List, Optional
import logging

from forecast_models import Forecast

logger = logging.getLogger(__name__)

FORECAST_COLUMNS = [
    'datetime', 'date', 'hour', 'rating', 'wave_energy_kj',
    'wind_speed_kmh', 'wind_dir_deg', 'wind_dir_compass', 'wind_state',
    'swell_count', 'swell_period_s', 'swell_dir_deg', 'swell_dir_compass', 'swell_height_m',
]


def forecast_to_dataframe(forecast: Forecast) -> pd.DataFrame:
    """One row per forecast hour; swell_* columns describe the first (primary) swell"""
    rows = []
    for hourly in forecast.hourly():
        primary = hourly.swells[0] if hourly.swells else None
        rows.append({
            'datetime': hourly.timestamp,
            'date': hourly.timestamp.date(),
            'hour': hourly.hour,
            'rating': hourly.rating,
            'wave_energy_kj': hourly.wave_energy_kj,
            'wind_speed_kmh': hourly.wind.speed_kmh,
            'wind_dir_deg': hourly.wind.direction_to_degrees if hourly.wind.direction_to_degrees is not None else np.nan,
            'wind_dir_compass': hourly.wind.direction_from_compass,
            'wind_state': hourly.wind.state,
            'swell_count': len(hourly.swells),
            'swell_period_s': primary.period_seconds if primary else np.nan,
            'swell_dir_deg': primary.direction_to_degrees if primary else np.nan,
            'swell_dir_compass': primary.direction_from_compass if primary else '',
            'swell_height_m': primary.wave_height_meters if primary else np.nan,
        })
    return pd.DataFrame(rows, columns=FORECAST_COLUMNS)


def circular_mean_degrees(degrees) -> float:
    """Mean of compass bearings, NaN if there is nothing to average"""
    values = np.asarray(degrees, dtype=float)
    values = values[~np.isnan(values)]
    if values.size == 0:
        return float('nan')
    radians = np.deg2rad(values)
    mean = np.rad2deg(np.arctan2(np.sin(radians).mean(), np.cos(radians).mean()))
    return float(mean % 360)


class ForecastAnalyzer:
    """Scores forecast hours and summarises days"""

    def __init__(self, min_rating: int = 3):
        self.min_rating = min_rating

    def classify_conditions(self, rating: int, wind_state: str = '') -> Dict:
        """Quality label for an hour, from the site's 0-10 rating"""
        if rating >= 8:
            quality = "epic"
        elif rating >= 6:
            quality = "excellent"
        elif rating >= 4:
            quality = "good"
        elif rating >= 2:
            quality = "fair"
        else:
            quality = "poor"

        # Offshore wind cleans up the faces
        clean = wind_state.lower() == 'off'
        return {
            'quality': quality,
            'clean': clean,
            'recommendation': self._get_recommendation(quality, clean),
        }

    def _get_recommendation(self, quality: str, clean: bool) -> str:
        clean_text = " - offshore wind" if clean else ""
        recommendations = {
            'epic': f"🔥 EPIC - drop everything{clean_text}",
            'excellent': f"⭐ EXCELLENT - worth the drive{clean_text}",
            'good': f"✅ GOOD - solid session{clean_text}",
            'fair': f"🌀 FAIR - fun if you're close{clean_text}",
            'poor': f"😐 POOR - flat or blown out{clean_text}",
        }
        return recommendations.get(quality, "Conditions analyzed")

    def filter_time_window(self, data: pd.DataFrame, start_hour: int = 6,
                          end_hour: int = 19) -> pd.DataFrame:
        """Filter data to specified local time window (default 6 AM - 7 PM)"""
        if data.empty:
            return data

        mask = (data['hour'] >= start_hour) & (data['hour'] <= end_hour)
        return data[mask]

    def best_sessions(self, data: pd.DataFrame, min_rating: Optional[int] = None) -> pd.DataFrame:
        """Hours rated at least min_rating, best first (ties broken by wave energy)"""
        threshold = self.min_rating if min_rating is None else min_rating
        if data.empty:
            return data

        sessions = data[data['rating'] >= threshold]
        return sessions.sort_values(['rating', 'wave_energy_kj'], ascending=[False, False])

    def daily_summary(self, data: pd.DataFrame) -> Dict[str, Dict]:
        """Per-day peak rating, energy and average wind"""
        summary = {}
        if data.empty:
            return summary

        for day, day_group in data.groupby('date'):
            best_idx = day_group['rating'].idxmax()
            summary[str(day)] = {
                'hours': len(day_group),
                'peak_rating': int(day_group['rating'].max()),
                'peak_hour': int(day_group.loc[best_idx, 'hour']),
                'max_energy_kj': float(day_group['wave_energy_kj'].max()),
                'avg_wind_kmh': float(day_group['wind_speed_kmh'].mean()),
                'avg_wind_dir_deg': circular_mean_degrees(day_group['wind_dir_deg']),
                'max_swell_height_m': float(day_group['swell_height_m'].max()),
            }
        return summary

    def analyze(self, data: pd.DataFrame) -> Dict:
        """Summarise a forecast frame for reporting"""
        if data.empty:
            return {
                'total_hours': 0,
                'by_quality': {},
                'best_sessions': [],
                'daily_summary': {},
            }

        qualities = [self.classify_conditions(r, s)['quality']
                     for r, s in zip(data['rating'], data['wind_state'])]
        quality_counts = pd.Series(qualities).value_counts().to_dict()

        best = self.best_sessions(data).head(5)
        best_sessions = []
        for _, row in best.iterrows():
            classification = self.classify_conditions(row['rating'], row['wind_state'])
            best_sessions.append({**row.to_dict(), **classification})

        return {
            'total_hours': len(data),
            'by_quality': quality_counts,
            'best_sessions': best_sessions,
            'daily_summary': self.daily_summary(data),
        }


class ReportGenerator:
    """Generates formatted text reports for a forecast"""

    def __init__(self):
        self.quality_emojis = {
            'epic': '🔥',
            'excellent': '⭐',
            'good': '✅',
            'fair': '🌀',
            'poor': '😐'
        }

    def generate_summary_report(self, break_name: str, issued_at: datetime, analysis: Dict) -> str:
        """Generate a summary report"""
        report_lines = []

        report_lines.append("=" * 80)
        report_lines.append(f"🌊 SURF FORECAST - {break_name}")
        report_lines.append(f"Issued: {issued_at.strftime('%A, %B %d, %Y %I:%M %p %Z')}")
        report_lines.append("=" * 80)

        if analysis['total_hours'] == 0:
            report_lines.append("\n❌ No forecast hours in the selected window")
            return "\n".join(report_lines)

        for day, summary in analysis['daily_summary'].items():
            wind_dir = summary['avg_wind_dir_deg']
            wind_dir_text = f"@{wind_dir:03.0f}°" if not np.isnan(wind_dir) else ""
            report_lines.append(f"\n📅 {datetime.strptime(day, '%Y-%m-%d').strftime('%A, %B %d, %Y')}")
            report_lines.append("-" * 60)
            report_lines.append(
                f"Peak rating: {summary['peak_rating']}/10 at {summary['peak_hour']:02d}:00 | "
                f"Max energy: {summary['max_energy_kj']:.0f}kJ | "
                f"Wind: {summary['avg_wind_kmh']:.1f}km/h{wind_dir_text}"
            )

        report_lines.append(f"\n{'=' * 80}")
        report_lines.append("📊 SUMMARY STATISTICS")
        report_lines.append("=" * 80)
        report_lines.append(f"Forecast hours: {analysis['total_hours']}")
        for quality, count in analysis['by_quality'].items():
            emoji = self.quality_emojis.get(quality, '❓')
            report_lines.append(f"{emoji} {quality.capitalize()}: {count}")

        if analysis['best_sessions']:
            report_lines.append("\n🎯 BEST SESSIONS:")
            for i, session in enumerate(analysis['best_sessions'][:3], 1):
                dt = session['datetime']
                report_lines.append(
                    f"   {i}. {dt.strftime('%a %m/%d at %I:%M %p')} - "
                    f"rating {session['rating']}/10, {session['wave_energy_kj']:.0f}kJ, "
                    f"{session['recommendation']}"
                )

        report_lines.append("=" * 80)
        return "\n".join(report_lines)

    def save_report(self, report: str, filename: str = "surfcast_report.txt") -> Optional[str]:
        """Save report to file"""
        try:
            with open(filename, 'w') as f:
                f.write(report)
            logger.info(f"Report saved to {filename}")
            return filename
        except OSError as e:
            logger.error(f"Error saving report: {e}")
            return None
