"""Combine daily energy with HDD and fit energy = slope * HDD + baseload."""

import math
from typing import Iterable, Mapping

from ..models import ConsumptionHDDSample, HDDSeries, RegressionMetrics

NAN = float("nan")


def combine(
    kwh_by_day: Mapping[int, float], hdd: HDDSeries
) -> set[ConsumptionHDDSample]:
    """Pair each day's energy use with that day's HDD.

    Days missing (or non-finite) in either series are silently skipped,
    as day-level availability of both is expected to be patchy.
    """
    samples = set()
    for day, kwh in kwh_by_day.items():
        hdd_value = hdd.by_day.get(day)
        if hdd_value is None or not math.isfinite(hdd_value) or not math.isfinite(kwh):
            continue
        samples.add(ConsumptionHDDSample(day=day, hdd=hdd_value, energy_kwh=kwh))
    return samples


def fit(samples: Iterable[ConsumptionHDDSample]) -> RegressionMetrics:
    """Ordinary least squares fit of energy against HDD.

    Computed from the running sums rather than residuals. Degenerate input
    (no samples, or all HDD values identical) gives NaN slope, intercept and
    R^2 but always the true sample count.
    """
    xs = []
    ys = []
    for sample in samples:
        xs.append(sample.hdd)
        ys.append(sample.energy_kwh)
    n = len(xs)

    # Zero variance in x: slope undefined (also covers n == 1).
    if n == 0 or len(set(xs)) < 2:
        return RegressionMetrics(slope=NAN, intercept=NAN, rsquared=NAN, n=n)

    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_xx = sum(x * x for x in xs)
    sum_yy = sum(y * y for y in ys)

    sxx = sum_xx - sum_x * sum_x / n
    sxy = sum_xy - sum_x * sum_y / n
    syy = sum_yy - sum_y * sum_y / n
    if sxx <= 0:
        # Rounding can swamp a vanishingly small spread in x.
        return RegressionMetrics(slope=NAN, intercept=NAN, rsquared=NAN, n=n)

    slope = sxy / sxx
    intercept = (sum_y - slope * sum_x) / n

    # R^2 = 1 - SSE/SST; undefined when y is constant.
    if syy <= 0:
        rsquared = NAN
    else:
        sse = max(0.0, syy - slope * sxy)
        rsquared = 1.0 - sse / syy

    return RegressionMetrics(slope=slope, intercept=intercept, rsquared=rsquared, n=n)
