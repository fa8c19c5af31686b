"""Pre-computed per-day segmentation, as an alternative to valve logs.

Format sample (header optional):

    house_id,day,status
    5013,20160101,Disabled
    5013,20160102,Enabled
"""

import csv
from pathlib import Path
from typing import Iterable

from ..days import date_from_day_key
from ..errors import ParseError
from ..models import DayStatus, HouseholdStatus

STATUS_CSV = "status.csv"


def parse_status(lines: Iterable[str]) -> dict[str, HouseholdStatus]:
    """Parse day statuses, grouped into a HouseholdStatus per house ID."""
    by_house: dict[str, dict[int, DayStatus]] = {}
    reader = csv.reader(lines)
    for fields in reader:
        fields = [field.strip() for field in fields]
        if not fields or not fields[0]:
            continue
        if reader.line_num == 1 and len(fields) > 1 and not fields[1][:1].isdigit():
            continue  # header
        if len(fields) < 3:
            raise ParseError("expected house_id,day,status", reader.line_num)

        house_id, day_text, status_text = fields[0], fields[1], fields[2]
        try:
            day = int(day_text)
            date_from_day_key(day)
        except ValueError as e:
            raise ParseError(f"bad day {day_text!r}", reader.line_num) from e
        try:
            status = DayStatus(status_text)
        except ValueError as e:
            raise ParseError(f"unknown status {status_text!r}", reader.line_num) from e

        days = by_house.setdefault(house_id, {})
        if days.get(day, status) is not status:
            raise ParseError(f"conflicting status for house {house_id} on {day}", reader.line_num)
        days[day] = status

    return {
        house_id: HouseholdStatus(house_id=house_id, status_by_day=dict(sorted(days.items())))
        for house_id, days in sorted(by_house.items())
    }


def load_status(path: Path) -> dict[str, HouseholdStatus]:
    with open(path, newline="") as f:
        return parse_status(f)
