"""Result filters for rejecting households with poor or insufficient data."""

from ..models import DayStatus, HouseholdResult, HouseholdStatus

# Minimum acceptable R^2 for daily-sampled data; lower than for weekly data.
MIN_RSQUARED_DAILY = 0.15
# Minimum days in one data subset (control or normal).
MIN_DAYS_PER_SEGMENT = 7


def has_metrics(result: HouseholdResult) -> bool:
    return result.metrics is not None


def is_ok_daily_rsquared(result: HouseholdResult, min_rsquared: float = MIN_RSQUARED_DAILY) -> bool:
    """R^2 is non-NaN and reasonable for daily data."""
    # NaN compares False.
    return result.metrics is not None and result.metrics.rsquared >= min_rsquared


def has_enough_points_subset(result: HouseholdResult, min_days: int = MIN_DAYS_PER_SEGMENT) -> bool:
    return result.metrics is not None and result.metrics.n >= min_days


def has_enough_points_control_and_normal(
    result: HouseholdResult, min_days: int = MIN_DAYS_PER_SEGMENT
) -> bool:
    """Enough days in total to later split into control and normal."""
    return result.metrics is not None and result.metrics.n >= 2 * min_days


def good_daily_data(
    result: HouseholdResult,
    min_rsquared: float = MIN_RSQUARED_DAILY,
    min_days: int = MIN_DAYS_PER_SEGMENT,
) -> bool:
    """Common pre-segmentation filter for daily data.

    Rejects results with no metrics, too few points, or poor/NaN R^2.
    """
    return (
        has_metrics(result)
        and has_enough_points_control_and_normal(result, min_days)
        and is_ok_daily_rsquared(result, min_rsquared)
    )


def enough_control_and_normal(status: HouseholdStatus, min_days: int = MIN_DAYS_PER_SEGMENT) -> bool:
    """At least `min_days` control and `min_days` normal days."""
    return (
        status.count(DayStatus.DISABLED) >= min_days
        and status.count(DayStatus.ENABLED) >= min_days
    )
