"""OpenTRV valve log importer for heating activity and energy-saving status.

Summarises each device's log to local days on which it was:

- sending any data
- calling for heat (valve open, "v|%" > 0)
- reporting energy-saving status (has "tS|C", the setback in C)
- actively saving energy ("tS|C" > 0)

Two line formats are accepted:

- canonical, starting with '[':
  [ "2016-03-31T05:18:45Z", "", {"@":"3015","+":1,"v|%":0,"tT|C":14,"tS|C":4} ]
- partially decrypted, starting with a quote; the timestamp is UTC, the
  third field is the frame as hex bytes (leading ID at bytes 2-5) and the
  JSON stats fragment may be truncated:
  '2016-05-12-11:21:45','1.2.3.4','cf 74 aa ab ac ad 20 ...','7F 10 {"tS|C":1

Devices are grouped into households by a grouping CSV, one row per
device: house ID, device ID and, for devices only present in the shared
partially decrypted log, the device's hex leading ID.
"""

import csv
import gzip
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, TextIO

from ..analysis.segmentation import segment_activity
from ..days import day_key_from_datetime
from ..models import DeviceActivity, HouseholdStatus

logger = logging.getLogger(__name__)

LOG_DIR_NAME = "valveLogs"
GROUPING_CSV = "grouping.csv"
# Shared partially-decrypted log for devices identified by leading ID.
SHARED_DLOG_NAMES = ("dlog.gz", "dlog")

VALVE_OPEN_KEY = "v|%"
SETBACK_KEY = "tS|C"

DLOG_PREFIX = re.compile(r"^'([^']*)','([^']*)','([^']*)'")
STAT_PAIR = re.compile(r'"([^"]+)"\s*:\s*(-?\d+(?:\.\d+)?)')


def _parse_canonical(line: str) -> tuple[datetime, dict] | None:
    try:
        record = json.loads(line)
        timestamp = datetime.fromisoformat(record[0].replace("Z", "+00:00"))
        stats = record[2]
    except (ValueError, IndexError, TypeError, AttributeError):
        return None
    if not isinstance(stats, dict):
        return None
    return timestamp, stats


def _parse_partially_decrypted(line: str, leading_id: list[str] | None) -> tuple[datetime, dict] | None:
    match = DLOG_PREFIX.match(line)
    if not match:
        return None
    try:
        timestamp = datetime.strptime(match.group(1), "%Y-%m-%d-%H:%M:%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None

    if leading_id is not None:
        frame = match.group(3).lower().split()
        if frame[2:6] != leading_id:
            return None

    brace = line.rfind("{")
    if brace < 0:
        return None
    stats = {key: float(value) for key, value in STAT_PAIR.findall(line[brace:])}
    return timestamp, stats


def parse_valve_log(
    lines: Iterable[str],
    tz: str,
    device_id: str = "",
    leading_id: str | None = None,
) -> DeviceActivity:
    """Summarise one device's log lines by local day.

    If `leading_id` is given (eg "aa ab ac ad") only partially decrypted
    records from that device are used. Unparseable lines are skipped.
    """
    wanted = leading_id.lower().split() if leading_id else None
    present = set()
    calling = set()
    reported = set()
    active = set()

    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if line.startswith("["):
            parsed = None if wanted else _parse_canonical(line)
        elif line.startswith("'"):
            parsed = _parse_partially_decrypted(line, wanted)
        else:
            parsed = None
        if parsed is None:
            if line:
                logger.debug("Skipping line %d of %s log", line_number, device_id or "device")
            continue

        timestamp, stats = parsed
        day = day_key_from_datetime(timestamp, tz)
        present.add(day)
        valve_open = stats.get(VALVE_OPEN_KEY)
        if isinstance(valve_open, (int, float)) and valve_open > 0:
            calling.add(day)
        setback = stats.get(SETBACK_KEY)
        if isinstance(setback, (int, float)):
            reported.add(day)
            if setback > 0:
                active.add(day)

    return DeviceActivity(
        device_id=device_id,
        days_data_present=frozenset(present),
        days_calling_for_heat=frozenset(calling),
        days_saving_reported=frozenset(reported),
        days_saving_active=frozenset(active),
    )


def open_log(path: Path) -> TextIO:
    """Open a (possibly gzipped) log as text."""
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="ascii", errors="replace")
    return open(path, encoding="ascii", errors="replace")


def find_log(log_dir: Path, device_id: str, leading_id: str | None = None) -> Path | None:
    """Locate the log file holding a device's records."""
    if leading_id:
        names = SHARED_DLOG_NAMES
    else:
        names = (f"{device_id}.json.gz", f"{device_id}.json", f"{device_id}.dlog.gz", f"{device_id}.dlog")
    for name in names:
        path = log_dir / name
        if path.is_file():
            return path
    return None


def find_and_analyse_log(
    log_dir: Path, tz: str, device_id: str, leading_id: str | None = None
) -> DeviceActivity | None:
    """Find and summarise a device's log; None if there is no log for it."""
    path = find_log(log_dir, device_id, leading_id)
    if path is None:
        logger.warning("No log found for device %s in %s", device_id, log_dir)
        return None
    with open_log(path) as f:
        return parse_valve_log(f, tz, device_id, leading_id)


def load_grouping(log_dir: Path) -> dict[str, set[tuple[str, str | None]]]:
    """Devices by house ID, as (device ID, leading ID or None) pairs."""
    grouping: dict[str, set[tuple[str, str | None]]] = {}
    with open(log_dir / GROUPING_CSV, newline="") as f:
        for fields in csv.reader(f):
            fields = [field.strip() for field in fields]
            if len(fields) < 2 or fields[0].startswith("#"):
                continue
            if fields[0].lower() in ("house_id", "houseid"):
                continue
            house_id, device_id = fields[0], fields[1]
            leading_id = fields[2] if len(fields) > 2 and fields[2] else None
            grouping.setdefault(house_id, set()).add((device_id, leading_id))
    return grouping


def load_and_parse_all_logs(
    log_dir: Path, tz: str, house_ids: Iterable[str] | None = None
) -> dict[str, HouseholdStatus]:
    """Segment every household in the grouping file (or just `house_ids`)."""
    selected = set(house_ids) if house_ids is not None else None
    statuses = {}
    for house_id, devices in sorted(load_grouping(log_dir).items()):
        if selected is not None and house_id not in selected:
            continue
        activity = []
        for device_id, leading_id in sorted(devices, key=lambda d: d[0]):
            device = find_and_analyse_log(log_dir, tz, device_id, leading_id)
            # A device with no log still counts towards the quorum.
            activity.append(device or DeviceActivity(device_id=device_id))
        statuses[house_id] = segment_activity(house_id, activity)
    return statuses
