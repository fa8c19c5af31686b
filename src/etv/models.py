"""Data models for household energy, HDD and segmentation results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class DayStatus(Enum):
    """Energy-saving state asserted for one household-day."""

    ENABLED = "Enabled"  # normal day
    DISABLED = "Disabled"  # control day
    DONT_USE = "DontUse"


@dataclass(frozen=True)
class HDDSeries:
    """Heating Degree Days by local day key, with the base temperature used."""

    by_day: Mapping[int, float]
    base_temperature_c: float = float("nan")  # NaN if unknown or not constant


@dataclass(frozen=True, order=True)
class ConsumptionHDDSample:
    """One day's (HDD, energy) pair; ordered by day, then HDD, then energy."""

    day: int
    hdd: float
    energy_kwh: float


@dataclass(frozen=True)
class RegressionMetrics:
    """Linear fit of daily energy against HDD."""

    slope: float  # kWh per HDD
    intercept: float  # baseload kWh per day
    rsquared: float
    n: int


@dataclass(frozen=True)
class HouseholdInput:
    """Everything needed to analyse one household."""

    house_id: str
    kwh_by_day: Mapping[int, float]
    hdd: HDDSeries
    timezone: str = "Europe/London"
    status_by_day: Mapping[int, DayStatus] | None = None


@dataclass(frozen=True)
class HouseholdResult:
    """Result of the computation for one household."""

    house_id: str
    metrics: RegressionMetrics | None = None  # None if not computable
    efficacy: float | None = None  # control slope / normal slope


@dataclass(frozen=True)
class HouseholdStatus:
    """Per-day segmentation for one household."""

    house_id: str
    status_by_day: Mapping[int, DayStatus] = field(default_factory=dict)

    def count(self, status: DayStatus) -> int:
        return sum(1 for s in self.status_by_day.values() if s is status)


@dataclass(frozen=True)
class DeviceActivity:
    """Days on which one device (eg a radiator valve) showed key activity."""

    device_id: str
    days_data_present: frozenset[int] = frozenset()
    days_calling_for_heat: frozenset[int] = frozenset()
    days_saving_reported: frozenset[int] = frozenset()
    days_saving_active: frozenset[int] = frozenset()  # subset of reported


@dataclass(frozen=True)
class MeanAndPopSD:
    """Population mean, variance and standard deviation."""

    mean: float
    variance: float
    sd: float


@dataclass(frozen=True)
class SummaryStats:
    """Summary statistics over a group of households."""

    all_households_count: int
    final_households_count: int
    normal_day_count: int
    rsquared: MeanAndPopSD
    slope: MeanAndPopSD
    efficacy: MeanAndPopSD
