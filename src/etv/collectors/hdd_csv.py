"""Daily HDD importer for degreedays.net-style CSV files.

Format sample:

    Date,HDD,% Estimated,"EGLL 15.5C base, source www.degreedays.net (...)"
    2016-01-01,10.2,0
    2016-01-02,5.6,0

Rows not starting with a YYYY-MM-DD date (preamble, headers) are skipped.
"""

import csv
import math
import re
from datetime import date
from pathlib import Path
from typing import Iterable

from ..days import date_from_day_key, day_key
from ..errors import ParseError
from ..models import HDDSeries

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
BASE_TEMP_PATTERN = re.compile(r"(-?\d+(?:\.\d+)?)\s*C base")


def parse_hdd(lines: Iterable[str], default_base_temperature_c: float = float("nan")) -> HDDSeries:
    """Parse daily HDD values; the base temperature comes from the header text if stated."""
    by_day = {}
    base_temperature_c = None

    reader = csv.reader(lines)
    for fields in reader:
        if not fields:
            continue
        first = fields[0].strip()
        if not DATE_PATTERN.match(first):
            if base_temperature_c is None:
                for text in fields:
                    match = BASE_TEMP_PATTERN.search(text)
                    if match:
                        base_temperature_c = float(match.group(1))
                        break
            continue

        if len(fields) < 2:
            raise ParseError(f"missing HDD value for {first}", reader.line_num)
        try:
            d = date.fromisoformat(first)
            hdd = float(fields[1])
        except ValueError as e:
            raise ParseError(f"bad HDD row: {fields}", reader.line_num) from e
        if not math.isfinite(hdd) or hdd < 0:
            raise ParseError(f"HDD must be finite and non-negative, got {hdd}", reader.line_num)

        key = day_key(d)
        if key in by_day:
            raise ParseError(f"duplicate HDD row for {first}", reader.line_num)
        by_day[key] = hdd

    if base_temperature_c is None:
        base_temperature_c = default_base_temperature_c
    return HDDSeries(by_day=dict(sorted(by_day.items())), base_temperature_c=base_temperature_c)


def load_hdd(path: Path, default_base_temperature_c: float = float("nan")) -> HDDSeries:
    """Load an HDD CSV file."""
    with open(path, newline="") as f:
        return parse_hdd(f, default_base_temperature_c)


def format_hdd_csv(hdd: HDDSeries, source: str) -> str:
    """Render an HDD series in the same CSV layout the parser reads."""
    lines = [f'Date,HDD,% Estimated,"{source} {hdd.base_temperature_c}C base"']
    for key in sorted(hdd.by_day):
        lines.append(f"{date_from_day_key(key).isoformat()},{hdd.by_day[key]:.1f},0")
    return "\n".join(lines) + "\n"
