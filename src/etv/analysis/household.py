"""Per-household kWh/HDD analysis and efficacy per the ETV protocol.

Reports the slope of a linear regression of daily space-heating fuel use
against HDD. With a control/normal segmentation available, the ratio of
the control slope to the normal slope is the efficacy (above 1.0 means
the energy-saving features reduced fuel use per HDD).

Assumes no significant secondary heating; the fuel may also be used for
cooking and hot water, which shows up as baseload.
"""

import math

from ..models import DayStatus, HouseholdInput, HouseholdResult, RegressionMetrics
from .regression import combine, fit
from .segmentation import filter_by_status


def result_sort_key(result: HouseholdResult) -> str:
    """Sort key giving a stable report order by house ID."""
    return result.house_id


def ratio(numerator: float, denominator: float) -> float:
    """IEEE-754 division: x/0 gives +/-inf, 0/0 and NaN operands give NaN."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return float("nan")
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _fit_unsegmented(household: HouseholdInput) -> RegressionMetrics | None:
    if not household.kwh_by_day:
        return None
    return fit(combine(household.kwh_by_day, household.hdd))


def compute(household: HouseholdInput) -> HouseholdResult:
    """Analyse one household.

    Without a status mapping this is the plain kWh/HDD fit over all days
    with no efficacy. With one, Disabled (control) and Enabled (normal)
    days are fitted separately; the normal-day metrics are reported with
    the control/normal slope ratio.
    """
    if household is None:
        raise ValueError("household input is required")

    if not household.kwh_by_day:
        return HouseholdResult(house_id=household.house_id)

    if household.status_by_day is None:
        return HouseholdResult(
            house_id=household.house_id, metrics=_fit_unsegmented(household)
        )

    control = _fit_unsegmented(filter_by_status(household, DayStatus.DISABLED))
    normal = _fit_unsegmented(filter_by_status(household, DayStatus.ENABLED))

    efficacy = None
    if control is not None and normal is not None:
        efficacy = ratio(control.slope, normal.slope)

    return HouseholdResult(house_id=household.house_id, metrics=normal, efficacy=efficacy)


def compute_all(households) -> list[HouseholdResult]:
    """Analyse each household independently; results sorted by house ID."""
    return sorted((compute(h) for h in households), key=result_sort_key)
