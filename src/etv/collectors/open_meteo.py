"""Open-Meteo HDD collector.

Fetches historical hourly outside temperature from the Open-Meteo Archive
API and derives daily Heating Degree Days, for sites with no
degreedays.net station data to hand.
"""

import logging
from collections import defaultdict
from datetime import date, datetime
from pathlib import Path

import httpx

from ..days import day_key, get_zone
from ..models import HDDSeries
from .hdd_csv import format_hdd_csv

logger = logging.getLogger(__name__)

API_BASE_URL = "https://archive-api.open-meteo.com/v1/archive"
SOURCE = "Open-Meteo"

# Default location: central London (configurable via CLI)
DEFAULT_LATITUDE = 51.507
DEFAULT_LONGITUDE = -0.128
DEFAULT_TIMEZONE = "Europe/London"
DEFAULT_BASE_TEMPERATURE_C = 15.5
# Local days with fewer hourly readings than this are left out.
MIN_READINGS_PER_DAY = 20


def fetch_hourly_temperatures(
    start_date: date,
    end_date: date,
    latitude: float = DEFAULT_LATITUDE,
    longitude: float = DEFAULT_LONGITUDE,
    tz: str = DEFAULT_TIMEZONE,
) -> list[tuple[datetime, float]]:
    """Fetch hourly temperature_2m readings as local (timestamp, C) pairs.

    Note:
        The Archive API has a 5-7 day delay, so very recent days are
        typically missing.
    """
    if end_date < start_date:
        raise ValueError(f"end date {end_date} is before start date {start_date}")
    zone = get_zone(tz)

    params = {
        "latitude": latitude,
        "longitude": longitude,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "hourly": "temperature_2m",
        "timezone": tz,
    }

    response = httpx.get(API_BASE_URL, params=params, timeout=30.0)
    response.raise_for_status()
    data = response.json()

    readings = []
    hourly = data.get("hourly", {})
    times = hourly.get("time", [])
    temps = hourly.get("temperature_2m", [])

    for time_str, temp in zip(times, temps):
        if temp is None:  # Skip missing values
            continue
        timestamp = datetime.fromisoformat(time_str)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=zone)
        readings.append((timestamp, float(temp)))

    logger.debug("Fetched %d hourly readings from %s to %s", len(readings), start_date, end_date)
    return readings


def daily_hdd(
    readings: list[tuple[datetime, float]],
    base_temperature_c: float = DEFAULT_BASE_TEMPERATURE_C,
    min_readings: int = MIN_READINGS_PER_DAY,
) -> HDDSeries:
    """Daily HDD as the mean hourly shortfall below the base temperature."""
    shortfalls = defaultdict(list)
    for timestamp, temperature_c in readings:
        shortfalls[day_key(timestamp.date())].append(max(0.0, base_temperature_c - temperature_c))

    by_day = {}
    for key in sorted(shortfalls):
        values = shortfalls[key]
        if len(values) < min_readings:
            logger.warning("Skipping %d: only %d hourly readings", key, len(values))
            continue
        by_day[key] = sum(values) / len(values)

    return HDDSeries(by_day=by_day, base_temperature_c=base_temperature_c)


def fetch_hdd(
    start_date: date,
    end_date: date,
    latitude: float = DEFAULT_LATITUDE,
    longitude: float = DEFAULT_LONGITUDE,
    tz: str = DEFAULT_TIMEZONE,
    base_temperature_c: float = DEFAULT_BASE_TEMPERATURE_C,
) -> HDDSeries:
    """Fetch temperatures for a date range and reduce them to daily HDD."""
    readings = fetch_hourly_temperatures(start_date, end_date, latitude, longitude, tz)
    return daily_hdd(readings, base_temperature_c)


def write_hdd_csv(hdd: HDDSeries, path: Path) -> int:
    """Write an HDD series as a degreedays-style CSV; returns days written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_hdd_csv(hdd, SOURCE))
    return len(hdd.by_day)
