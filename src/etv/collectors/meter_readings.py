"""Manual or exported energy meter readings importer.

Reads CSV where the first column is (or starts with) a YYYY-MM-DD or
YYYY/MM/DD date and the second is a meter reading. Everything else is
ignored, including header lines and any time after the date, eg:

    Time,Gas (kWh)
    2016/03/01 00:00:00,18.88
    2016/03/02 00:00:00,16.99

Rows may be in any date order and need not cover every day. Units are
passed through unchanged.
"""

import csv
import logging
import math
from datetime import date
from pathlib import Path
from typing import Iterable

from ..days import day_key
from ..errors import ParseError

logger = logging.getLogger(__name__)

DATE_SEPARATORS = "-/"


def _parse_date(text: str) -> date | None:
    if len(text) < 10 or text[4] not in DATE_SEPARATORS or text[7] not in DATE_SEPARATORS:
        return None
    try:
        return date(int(text[0:4]), int(text[5:7]), int(text[8:10]))
    except ValueError:
        return None


def extract_meter_readings(lines: Iterable[str], non_cumulative: bool = False) -> dict[int, float]:
    """Meter readings by day key, in day order, as cumulative values.

    Cumulative input (the default) skips unparseable, negative or non-finite
    readings. With `non_cumulative` each value is a per-interval use, any bad
    value raises ParseError, and a running total is returned. Either way a
    total that goes down over time raises ParseError.
    """
    raw: dict[int, float] = {}
    reader = csv.reader(lines)
    for fields in reader:
        if len(fields) < 2:
            continue
        d = _parse_date(fields[0].strip())
        if d is None:
            continue
        key = day_key(d)
        try:
            reading = float(fields[1])
        except ValueError:
            continue

        if not math.isfinite(reading) or reading < 0:
            if non_cumulative:
                raise ParseError(f"bad meter reading at {key}", reader.line_num)
            logger.warning("Skipping bad meter reading at %d: %s", key, fields[1])
            continue
        raw[key] = reading

    readings = {}
    total = 0.0
    for key in sorted(raw):
        if non_cumulative:
            total += raw[key]
            readings[key] = total
        else:
            readings[key] = raw[key]

    previous = None
    for key, value in readings.items():
        if previous is not None and value < previous:
            raise ParseError(f"meter reading goes backwards at {key}: {value} after {previous}")
        previous = value
    return readings


def load_meter_readings(path: Path, non_cumulative: bool = False) -> dict[int, float]:
    with open(path, newline="") as f:
        return extract_meter_readings(f, non_cumulative)
