"""Summary statistics for a group of households.

Typically a group in one timezone, within reach of a single weather
station for HDD, over one heating season. Reports:

- all households count: households before any filtering
- final households count: households in the final computation
- normal day count: total non-control days behind the efficacy figures
- population mean and SD of R^2, slope (kWh/HDD) and efficacy
"""

import math
from typing import Collection, Sequence

from ..models import HouseholdResult, MeanAndPopSD, SummaryStats

NAN = float("nan")


def mean_and_pop_sd(values: Sequence[float]) -> MeanAndPopSD:
    """Population (divide by N) statistics; NaN for an empty sequence."""
    n = len(values)
    if n == 0:
        return MeanAndPopSD(mean=NAN, variance=NAN, sd=NAN)
    mean = sum(values) / n
    variance = sum((v - mean) * (v - mean) for v in values) / n
    return MeanAndPopSD(mean=mean, variance=variance, sd=math.sqrt(variance))


def _value(v: float | None) -> float:
    return NAN if v is None else v


def summarize(all_households_count: int, results: Collection[HouseholdResult]) -> SummaryStats:
    """Compute the group summary over the final (filtered) results.

    Results with no metrics contribute NaN to each statistic and nothing to
    the normal day count.
    """
    if results is None:
        raise ValueError("results are required")
    if all_households_count < 0:
        raise ValueError(f"negative household count: {all_households_count}")
    if all_households_count < len(results):
        raise ValueError(
            f"more results ({len(results)}) than households ({all_households_count})"
        )

    results = list(results)
    normal_day_count = sum(r.metrics.n for r in results if r.metrics is not None)
    rsq = [_value(r.metrics.rsquared if r.metrics else None) for r in results]
    slopes = [_value(r.metrics.slope if r.metrics else None) for r in results]
    efficacies = [_value(r.efficacy) for r in results]

    return SummaryStats(
        all_households_count=all_households_count,
        final_households_count=len(results),
        normal_day_count=normal_day_count,
        rsquared=mean_and_pop_sd(rsq),
        slope=mean_and_pop_sd(slopes),
        efficacy=mean_and_pop_sd(efficacies),
    )
