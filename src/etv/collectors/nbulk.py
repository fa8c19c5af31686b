"""Bulk ('N' format) secondary-meter data importer.

Extracts daily heating fuel use (kWh) per household, by whole local days
(local midnight to local midnight). Days may not be contiguous.

CSV format, eg:

    house_id,received_timestamp,device_timestamp,energy,temperature
    1002,1456790560,1456790400,306.48,-3
    1002,1456791348,1456791300,306.48,-3

- energy is cumulative kWh
- device_timestamp is UTC seconds, rising for any one house
- rows for different houses may be interleaved
- repeated header rows are skipped, so files can be concatenated
"""

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

from ..days import day_key_from_instant, get_zone
from ..errors import ParseError
from ..models import HDDSeries, HouseholdInput

logger = logging.getLogger(__name__)

HEADER_FIRST_FIELD = "house_id"
DEFAULT_TIMEZONE = "Europe/London"
# Max minutes after local midnight to accept a reading as the day boundary.
DEFAULT_MIDNIGHT_TOLERANCE_MINUTES = 30


def _data_rows(lines: Iterable[str]) -> Iterator[tuple[int, list[str]]]:
    """Validate the header and yield (line number, fields) for data rows."""
    reader = csv.reader(lines)
    header = next(reader, None)
    if header is None:
        raise ParseError("missing header row", 1)
    if len(header) < 5:
        raise ParseError("too few fields in header row", 1)
    if header[0][:1].isdigit():
        raise ParseError("leading numeric not text in header row", 1)

    for fields in reader:
        if not fields:
            continue
        if fields[0] == HEADER_FIRST_FIELD:
            continue
        if len(fields) < 4:
            raise ParseError("too few fields in row", reader.line_num)
        yield reader.line_num, fields


def extract_ids(lines: Iterable[str]) -> set[int]:
    """All distinct (non-negative integer) house IDs in the data."""
    ids = set()
    for line_number, fields in _data_rows(lines):
        try:
            ids.add(int(fields[0]))
        except ValueError as e:
            raise ParseError(f"bad house ID {fields[0]!r}", line_number) from e
    return ids


def parse_kwh_by_local_day(
    lines: Iterable[str],
    meter_id: int,
    tz: str = DEFAULT_TIMEZONE,
    tolerance_minutes: int = DEFAULT_MIDNIGHT_TOLERANCE_MINUTES,
) -> dict[int, float]:
    """Daily kWh for one house, keyed by local day.

    A day's use is the cumulative reading at (or shortly after) the next
    local midnight minus the one at (or shortly after) its own. Days whose
    boundary readings are missing or too late are omitted. DST days are
    23 or 25 hours long.
    """
    if meter_id < 0:
        raise ValueError(f"meter ID must be non-negative, got {meter_id}")
    zone = get_zone(tz)
    wanted = str(meter_id)

    result: dict[int, float] = {}
    current_day = None
    kwh_at_start_of_day = None
    latest_timestamp = None

    for line_number, fields in _data_rows(lines):
        if fields[0] != wanted:
            continue
        try:
            device_timestamp = int(fields[2])
            energy = float(fields[3])
        except ValueError as e:
            raise ParseError(f"bad timestamp or energy value: {fields}", line_number) from e

        if latest_timestamp is not None and device_timestamp <= latest_timestamp:
            if device_timestamp == latest_timestamp:
                logger.warning("Duplicate device timestamp at line %d: %s", line_number, ",".join(fields))
                continue
            raise ParseError(
                f"device time gone backwards: {device_timestamp} after {latest_timestamp}",
                line_number,
            )
        latest_timestamp = device_timestamp

        today = day_key_from_instant(device_timestamp * 1000, zone)
        if today == current_day:
            continue

        local = datetime.fromtimestamp(device_timestamp, tz=timezone.utc).astimezone(zone)
        close_to_midnight = local.hour == 0 and local.minute <= tolerance_minutes
        if not close_to_midnight:
            kwh_at_start_of_day = None
        else:
            if kwh_at_start_of_day is not None:
                result[current_day] = energy - kwh_at_start_of_day
            kwh_at_start_of_day = energy
        current_day = today

    return result


def read_lines(path: Path) -> list[str]:
    with open(path, newline="") as f:
        return f.readlines()


def gather_data(
    meter_id: int,
    nbulk_path: Path,
    hdd: HDDSeries,
    tz: str = DEFAULT_TIMEZONE,
    tolerance_minutes: int = DEFAULT_MIDNIGHT_TOLERANCE_MINUTES,
) -> HouseholdInput:
    """Load one household's energy data alongside the shared HDD series."""
    kwh = parse_kwh_by_local_day(read_lines(nbulk_path), meter_id, tz, tolerance_minutes)
    return HouseholdInput(house_id=str(meter_id), kwh_by_day=kwh, hdd=hdd, timezone=tz)


def gather_data_for_all_households(
    nbulk_path: Path,
    hdd: HDDSeries,
    tz: str = DEFAULT_TIMEZONE,
    tolerance_minutes: int = DEFAULT_MIDNIGHT_TOLERANCE_MINUTES,
) -> dict[str, HouseholdInput]:
    """Load every household in a bulk file, keyed by house ID string."""
    lines = read_lines(nbulk_path)
    households = {}
    for meter_id in sorted(extract_ids(lines)):
        kwh = parse_kwh_by_local_day(lines, meter_id, tz, tolerance_minutes)
        logger.debug("House %d: %d days of energy data", meter_id, len(kwh))
        households[str(meter_id)] = HouseholdInput(
            house_id=str(meter_id), kwh_by_day=kwh, hdd=hdd, timezone=tz
        )
    return households
