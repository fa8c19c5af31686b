"""End-to-end analysis run from an input directory to CSV reports.

Input directory:

- NkWh.csv: N-format bulk energy data
- HDD.csv: daily HDD for the same period
- status.csv (optional): pre-computed per-day segmentation
- valveLogs/ (optional): valve logs plus grouping.csv, used for
  segmentation when there is no status.csv

Outputs, written in order as the run progresses:

- 10_basicStatsOut.csv: per-household kWh/HDD fits, no efficacy
- 20_basicFilteredStatsOut.csv: the above, less poor or sparse data
- 30_presegmentedStatsOut.csv: control/normal day counts per household
- 31_segmentedStatsOut.csv: per-household fits with efficacy
- 90_multihouseholdSummaryStatsOut.csv: group summary

Input and output may be the same directory.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .analysis.cohort import summarize
from .analysis.filters import enough_control_and_normal, good_daily_data
from .analysis.household import compute, compute_all
from .analysis.segmentation import inject_status
from .collectors import valve_logs
from .collectors.hdd_csv import load_hdd
from .collectors.nbulk import gather_data_for_all_households
from .collectors.status_csv import STATUS_CSV, load_status
from .config import Settings
from .errors import DriverError
from .models import HouseholdStatus, SummaryStats
from .reports.csv_output import results_csv, status_summary_csv, summary_csv, write_csv

logger = logging.getLogger(__name__)

INPUT_FILE_HDD = "HDD.csv"
INPUT_FILE_NKWH = "NkWh.csv"

OUTPUT_STATS_FILE_BASIC = "10_basicStatsOut.csv"
OUTPUT_STATS_FILE_FILTERED_BASIC = "20_basicFilteredStatsOut.csv"
OUTPUT_STATS_FILE_PRESEGMENTED = "30_presegmentedStatsOut.csv"
OUTPUT_STATS_FILE_SEGMENTED = "31_segmentedStatsOut.csv"
OUTPUT_STATS_FILE_MULTIHOUSEHOLD_SUMMARY = "90_multihouseholdSummaryStatsOut.csv"


@dataclass
class RunReport:
    """What an analysis run did."""

    households: int = 0
    filtered_households: int = 0
    segmentation_source: str | None = None  # None if segmentation was not attempted
    segmented_households: int = 0
    summary: SummaryStats | None = None
    files_written: list[Path] = field(default_factory=list)


def _load_segmentation(
    in_dir: Path, settings: Settings, house_ids: set[str]
) -> tuple[str, dict[str, HouseholdStatus]] | None:
    """Status by house for `house_ids`, from status.csv or valve logs, if either exists."""
    status_path = in_dir / STATUS_CSV
    if status_path.is_file():
        statuses = load_status(status_path)
        return STATUS_CSV, {k: v for k, v in statuses.items() if k in house_ids}

    log_dir = in_dir / valve_logs.LOG_DIR_NAME
    if (log_dir / valve_logs.GROUPING_CSV).is_file():
        source = f"{valve_logs.LOG_DIR_NAME}/{valve_logs.GROUPING_CSV}"
        return source, valve_logs.load_and_parse_all_logs(log_dir, settings.timezone, house_ids)

    return None


def do_computation(in_dir: Path, out_dir: Path, settings: Settings | None = None) -> RunReport:
    """Run the analysis from `in_dir`, writing reports to `out_dir`.

    Efficacy is computed only if segmentation data is present. Raises
    DriverError, having written what outputs it could, if no households
    are left after filtering or segmentation.
    """
    if in_dir is None or out_dir is None:
        raise ValueError("input and output directories are required")
    if not in_dir.is_dir():
        raise NotADirectoryError(f"Cannot open input directory {in_dir}")
    if not out_dir.is_dir():
        raise NotADirectoryError(f"Cannot open output directory {out_dir}")
    settings = settings or Settings()
    report = RunReport()

    hdd = load_hdd(in_dir / INPUT_FILE_HDD, settings.base_temperature_c)
    households = gather_data_for_all_households(
        in_dir / INPUT_FILE_NKWH, hdd, settings.timezone, settings.midnight_tolerance_minutes
    )
    report.households = len(households)
    logger.info("Loaded %d households and %d days of HDD", len(households), len(hdd.by_day))

    # Basic results, no efficacy.
    basic = compute_all(households.values())
    report.files_written.append(write_csv(out_dir / OUTPUT_STATS_FILE_BASIC, results_csv(basic)))

    filtered = [
        r for r in basic
        if good_daily_data(r, settings.min_rsquared_daily, settings.min_days_per_segment)
    ]
    report.filtered_households = len(filtered)
    report.files_written.append(
        write_csv(out_dir / OUTPUT_STATS_FILE_FILTERED_BASIC, results_csv(filtered))
    )
    if not filtered:
        raise DriverError("No candidate households left after filtering.")
    logger.info("%d of %d households have good daily data", len(filtered), len(basic))

    segmentation = _load_segmentation(in_dir, settings, {r.house_id for r in filtered})
    if segmentation is None:
        logger.info("No status or valve log grouping file in %s, so no segmentation attempted", in_dir)
        return report
    report.segmentation_source, statuses = segmentation

    report.files_written.append(
        write_csv(out_dir / OUTPUT_STATS_FILE_PRESEGMENTED, status_summary_csv(statuses.values()))
    )
    usable = [
        s for _, s in sorted(statuses.items())
        if enough_control_and_normal(s, settings.min_days_per_segment)
    ]
    if not usable:
        raise DriverError("No candidate households left after attempting to segment.")

    segmented = sorted(
        (compute(inject_status(households[s.house_id], s)) for s in usable),
        key=lambda r: r.house_id,
    )
    report.segmented_households = len(segmented)
    report.files_written.append(
        write_csv(out_dir / OUTPUT_STATS_FILE_SEGMENTED, results_csv(segmented))
    )

    report.summary = summarize(len(households), segmented)
    report.files_written.append(
        write_csv(out_dir / OUTPUT_STATS_FILE_MULTIHOUSEHOLD_SUMMARY, summary_csv(report.summary))
    )
    logger.info("Segmented %d households using %s", len(segmented), report.segmentation_source)
    return report
