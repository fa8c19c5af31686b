import pytest

# Daily HDD for EGLL, 2016-01-01 to 2016-01-18.
HDD_VALUES = [10.2, 5.6, 7.8, 8, 7.8, 9.1, 8.3, 9.8, 6.8, 9.4, 9.6, 9.9, 10.8, 11.7, 12.7, 13.3, 13.1, 12.5]
# 2016-01-01 00:00 UTC, also local midnight in London in winter.
JAN_1_2016 = 1451606400
DAY_SECONDS = 86400

BASELOAD = 1.2
NORMAL_SLOPE = 2.0
EFFICACY = 1.2
CONTROL_DAYS = 9


def bulk_rows(house_id, daily_kwh):
    """Midnight cumulative readings giving exactly `daily_kwh` from 1 January."""
    rows = []
    total = 100.0
    for i in range(len(daily_kwh) + 1):
        timestamp = JAN_1_2016 + i * DAY_SECONDS
        rows.append(f"{house_id},{timestamp + 60},{timestamp},{total:.4f},2")
        if i < len(daily_kwh):
            total += daily_kwh[i]
    return rows


@pytest.fixture
def in_dir(tmp_path):
    """Input directory with HDD.csv and NkWh.csv for two houses.

    House 5013 has 18 good days, control days first; house 1002 only 3 days.
    """
    in_dir = tmp_path / "in"
    in_dir.mkdir()

    hdd_lines = ['Date,HDD,% Estimated,"EGLL 15.5C base"']
    hdd_lines += [f"2016-01-{i + 1:02d},{v},0" for i, v in enumerate(HDD_VALUES)]
    (in_dir / "HDD.csv").write_text("\n".join(hdd_lines) + "\n")

    kwh_5013 = [
        BASELOAD + (NORMAL_SLOPE * EFFICACY if i < CONTROL_DAYS else NORMAL_SLOPE) * v
        for i, v in enumerate(HDD_VALUES)
    ]
    kwh_1002 = [10.0, 12.0, 11.0]
    rows = ["house_id,received_timestamp,device_timestamp,energy,temperature"]
    rows += bulk_rows("1002", kwh_1002) + bulk_rows("5013", kwh_5013)
    (in_dir / "NkWh.csv").write_text("\n".join(rows) + "\n")
    return in_dir


@pytest.fixture
def status_csv(in_dir):
    """Control (Disabled) then normal (Enabled) days for house 5013."""
    rows = ["house_id,day,status"]
    for i in range(len(HDD_VALUES)):
        status = "Disabled" if i < CONTROL_DAYS else "Enabled"
        rows.append(f"5013,{20160101 + i},{status}")
    path = in_dir / "status.csv"
    path.write_text("\n".join(rows) + "\n")
    return path


@pytest.fixture
def out_dir(tmp_path):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return out_dir
