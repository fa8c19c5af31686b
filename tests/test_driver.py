import pytest
from etv import driver
from etv.config import Settings
from etv.errors import DriverError

# Matching the in_dir fixture: 18 days, the first 9 control days.
CONTROL_DAYS = 9
NORMAL_DAYS = 9
EFFICACY = 1.2


def read_rows(path):
    return path.read_text().splitlines()


def test_full_run_with_status_file(in_dir, out_dir, status_csv):
    report = driver.do_computation(in_dir, out_dir, Settings())

    assert report.households == 2
    assert report.filtered_households == 1
    assert report.segmentation_source == "status.csv"
    assert report.segmented_households == 1
    assert [p.name for p in report.files_written] == [
        "10_basicStatsOut.csv",
        "20_basicFilteredStatsOut.csv",
        "30_presegmentedStatsOut.csv",
        "31_segmentedStatsOut.csv",
        "90_multihouseholdSummaryStatsOut.csv",
    ]

    basic = read_rows(out_dir / driver.OUTPUT_STATS_FILE_BASIC)
    assert len(basic) == 3
    assert basic[1].startswith('"1002",')
    assert basic[2].startswith('"5013",')
    assert basic[2].endswith(",18,")

    filtered = read_rows(out_dir / driver.OUTPUT_STATS_FILE_FILTERED_BASIC)
    assert len(filtered) == 2
    assert filtered[1].startswith('"5013",')

    assert read_rows(out_dir / driver.OUTPUT_STATS_FILE_PRESEGMENTED) == [
        "houseID,controlDays,normalDays",
        f"5013,{CONTROL_DAYS},{NORMAL_DAYS}",
    ]

    segmented = read_rows(out_dir / driver.OUTPUT_STATS_FILE_SEGMENTED)
    fields = segmented[1].split(",")
    assert fields[0] == '"5013"'
    assert int(fields[4]) == NORMAL_DAYS
    assert float(fields[5]) == pytest.approx(EFFICACY, abs=0.01)

    summary = read_rows(out_dir / driver.OUTPUT_STATS_FILE_MULTIHOUSEHOLD_SUMMARY)
    assert summary[1].startswith(f"2,1,{NORMAL_DAYS},")
    assert report.summary.efficacy.mean == pytest.approx(EFFICACY, abs=0.01)
    assert report.summary.efficacy.sd == 0


def test_no_segmentation_data_stops_quietly(in_dir, out_dir):
    report = driver.do_computation(in_dir, out_dir)

    assert report.segmentation_source is None
    assert report.summary is None
    assert len(report.files_written) == 2
    assert not (out_dir / driver.OUTPUT_STATS_FILE_SEGMENTED).exists()


def test_nothing_left_after_filtering(in_dir, out_dir):
    with pytest.raises(DriverError, match="filtering"):
        driver.do_computation(in_dir, out_dir, Settings(min_days_per_segment=10))
    # Outputs up to the failure are still written.
    assert len(read_rows(out_dir / driver.OUTPUT_STATS_FILE_FILTERED_BASIC)) == 1


def test_not_enough_control_days(in_dir, out_dir):
    (in_dir / "status.csv").write_text("5013,20160101,Disabled\n5013,20160110,Enabled\n")
    with pytest.raises(DriverError, match="segment"):
        driver.do_computation(in_dir, out_dir)
    assert read_rows(out_dir / driver.OUTPUT_STATS_FILE_PRESEGMENTED)[1] == "5013,1,1"


def test_segmentation_from_valve_logs(in_dir, out_dir):
    log_dir = in_dir / "valveLogs"
    log_dir.mkdir()
    (log_dir / "grouping.csv").write_text("5013,dev1\n1002,dev2\n")
    (log_dir / "dev1.json").write_text(
        '[ "2016-01-05T12:00:00Z", "", {"@":"dev1","v|%":40,"tS|C":0} ]\n'
    )

    with pytest.raises(DriverError):
        driver.do_computation(in_dir, out_dir)

    # Only households passing the first filter are segmented.
    assert read_rows(out_dir / driver.OUTPUT_STATS_FILE_PRESEGMENTED) == [
        "houseID,controlDays,normalDays",
        "5013,1,0",
    ]


def test_missing_input_directory(tmp_path, out_dir):
    with pytest.raises(NotADirectoryError):
        driver.do_computation(tmp_path / "missing", out_dir)
