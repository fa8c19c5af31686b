"""Segment household-days into control / normal / unusable periods.

These rules matter for the robustness of the efficacy analysis: a day only
counts as control or normal when a strict majority of all the household's
devices agree on the energy-saving state.
"""

import dataclasses
from typing import Iterable

from ..models import DayStatus, DeviceActivity, HouseholdInput, HouseholdStatus


def segment_activity(house_id: str, devices: Iterable[DeviceActivity]) -> HouseholdStatus:
    """Decide how each day should be analysed from the household's devices.

    Candidate days are those on which any device is both calling for heat
    and reporting its energy-saving status. A candidate is Enabled (normal)
    or Disabled (control) when at least a quorum of the full device roster
    reports that state and outnumbers the opposite state; anything else is
    DontUse.
    """
    if house_id is None:
        raise ValueError("house_id is required")
    if devices is None:
        raise ValueError("devices is required")
    devices = list(devices)

    candidate_days = set()
    for device in devices:
        candidate_days |= device.days_calling_for_heat & device.days_saving_reported

    quorum = len(devices) // 2 + 1
    result = {}
    for day in sorted(candidate_days):
        enabled = 0
        disabled = 0
        for device in devices:
            if day not in device.days_saving_reported:
                continue
            if day in device.days_saving_active:
                enabled += 1
            else:
                disabled += 1

        if enabled >= quorum and enabled > disabled:
            result[day] = DayStatus.ENABLED
        elif disabled >= quorum and disabled > enabled:
            result[day] = DayStatus.DISABLED
        else:
            result[day] = DayStatus.DONT_USE

    return HouseholdStatus(house_id=house_id, status_by_day=result)


def inject_status(household: HouseholdInput, status: HouseholdStatus) -> HouseholdInput:
    """Return a copy of an input that has no status yet, carrying `status`."""
    if household is None or status is None:
        raise ValueError("household and status are required")
    if household.status_by_day is not None:
        raise ValueError(f"house {household.house_id} already has status")
    if household.house_id != status.house_id:
        raise ValueError(
            f"mismatched house IDs: {household.house_id} vs {status.house_id}"
        )
    return dataclasses.replace(household, status_by_day=dict(status.status_by_day))


def filter_by_status(household: HouseholdInput, for_status: DayStatus) -> HouseholdInput:
    """Keep only energy data for days with exactly `for_status`.

    Everything other than the energy series passes through as-is.
    """
    if household is None or for_status is None:
        raise ValueError("household and for_status are required")
    statuses = household.status_by_day
    if statuses is None:
        raise ValueError(f"house {household.house_id} has no status")

    filtered = {
        day: household.kwh_by_day[day]
        for day in sorted(statuses)
        if statuses[day] is for_status and day in household.kwh_by_day
    }
    return dataclasses.replace(household, kwh_by_day=filtered)
