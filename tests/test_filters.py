import math

from etv.analysis.filters import (
    enough_control_and_normal,
    good_daily_data,
    has_enough_points_subset,
    is_ok_daily_rsquared,
)
from etv.models import DayStatus, HouseholdResult, HouseholdStatus, RegressionMetrics


def result(rsquared=0.5, n=30):
    return HouseholdResult(house_id="1", metrics=RegressionMetrics(slope=1.0, intercept=0.0, rsquared=rsquared, n=n))


def test_good_daily_data():
    assert good_daily_data(result())
    assert not good_daily_data(HouseholdResult(house_id="1"))
    assert not good_daily_data(result(rsquared=0.1))
    assert not good_daily_data(result(rsquared=math.nan))
    assert not good_daily_data(result(n=13))
    assert good_daily_data(result(n=14))


def test_thresholds_can_be_overridden():
    assert not good_daily_data(result(rsquared=0.5), min_rsquared=0.6)
    assert good_daily_data(result(n=6), min_days=3)


def test_single_predicates():
    assert is_ok_daily_rsquared(result(rsquared=0.15))
    assert not is_ok_daily_rsquared(HouseholdResult(house_id="1"))
    assert has_enough_points_subset(result(n=7))
    assert not has_enough_points_subset(result(n=6))


def test_enough_control_and_normal():
    days = {20160101 + i: DayStatus.DISABLED for i in range(7)}
    days.update({20160201 + i: DayStatus.ENABLED for i in range(7)})
    assert enough_control_and_normal(HouseholdStatus("1", days))

    days[20160101] = DayStatus.DONT_USE
    assert not enough_control_and_normal(HouseholdStatus("1", days))
