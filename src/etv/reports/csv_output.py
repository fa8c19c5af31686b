"""CSV rendering of per-household results, group summaries and segmentation.

Floats are written at single (float32) precision, as the shortest decimal
that reads back as the same float32, so reports stay compact and stable.
"""

import math
import struct
from pathlib import Path
from typing import Iterable

from ..models import DayStatus, HouseholdResult, HouseholdStatus, SummaryStats

RESULT_HEADER = '"house ID","slope energy/HDD","baseload energy","R^2","n","efficiency gain if computed"'
SUMMARY_HEADER = (
    "allHouseholdsCount,finalHouseholdsCount,normalDayCount,"
    "RsqMean,RsqSD,SlopeMean,SlopeSD,EfficacyMean,EfficacySD"
)
STATUS_SUMMARY_HEADER = "houseID,controlDays,normalDays"


def _to_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def float_str(value: float) -> str:
    """Format a float at float32 precision, eg 1.5532478, 2.0, 1.0E-4, NaN, -Infinity.

    Magnitudes outside [1e-3, 1e7) use scientific notation with a capital E
    and at least one fraction digit, eg 1.2345679E8.
    """
    if math.isnan(value):
        return "NaN"
    try:
        single = _to_float32(value)
    except OverflowError:
        single = math.copysign(math.inf, value)
    if math.isinf(single):
        return "Infinity" if single > 0 else "-Infinity"

    # float32 needs at most 9 significant digits to round trip.
    for digits in range(1, 10):
        if _to_float32(float(f"{single:.{digits}g}")) == single:
            break

    if single == 0 or 1e-3 <= abs(single) < 1e7:
        text = repr(float(f"{single:.{digits}g}"))
        return text if "." in text else text + ".0"

    mantissa, _, exponent = f"{single:.{digits - 1}e}".partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return f"{mantissa}E{int(exponent)}"


def result_row(result: HouseholdResult) -> str:
    """One result as CSV; just the quoted house ID if it had no metrics."""
    row = f'"{result.house_id}"'
    metrics = result.metrics
    if metrics is None:
        return row
    efficacy = "" if result.efficacy is None else float_str(result.efficacy)
    return ",".join([
        row,
        float_str(metrics.slope),
        float_str(metrics.intercept),
        float_str(metrics.rsquared),
        str(metrics.n),
        efficacy,
    ])


def results_csv(results: Iterable[HouseholdResult]) -> str:
    """Header plus one row per result, in the order given."""
    lines = [RESULT_HEADER]
    lines.extend(result_row(r) for r in results)
    return "\n".join(lines) + "\n"


def summary_csv(summary: SummaryStats) -> str:
    row = ",".join([
        str(summary.all_households_count),
        str(summary.final_households_count),
        str(summary.normal_day_count),
        float_str(summary.rsquared.mean),
        float_str(summary.rsquared.sd),
        float_str(summary.slope.mean),
        float_str(summary.slope.sd),
        float_str(summary.efficacy.mean),
        float_str(summary.efficacy.sd),
    ])
    return f"{SUMMARY_HEADER}\n{row}\n"


def status_summary_csv(statuses: Iterable[HouseholdStatus]) -> str:
    """Control and normal day counts per household, sorted by house ID."""
    lines = [STATUS_SUMMARY_HEADER]
    for status in sorted(statuses, key=lambda s: s.house_id):
        control = status.count(DayStatus.DISABLED)
        normal = status.count(DayStatus.ENABLED)
        lines.append(f"{status.house_id},{control},{normal}")
    return "\n".join(lines) + "\n"


def write_csv(path: Path, text: str) -> Path:
    """Write a rendered CSV, creating the parent directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        f.write(text)
    return path
