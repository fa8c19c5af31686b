from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from etv.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "etv.yaml"
    path.write_text("timezone: Europe/London\n")
    return path


def test_run(runner, config, in_dir, out_dir, status_csv):
    result = runner.invoke(cli, ["--config", str(config), "run", str(in_dir), str(out_dir)])

    assert result.exit_code == 0, result.output
    assert "Group Summary" in result.output
    assert "Efficacy" in result.output
    assert (out_dir / "90_multihouseholdSummaryStatsOut.csv").exists()


def test_run_without_segmentation(runner, config, in_dir, out_dir):
    result = runner.invoke(cli, ["--config", str(config), "run", str(in_dir), str(out_dir)])

    assert result.exit_code == 0, result.output
    assert "no efficacy computed" in result.output


def test_run_fails_when_everything_filtered(runner, tmp_path, in_dir, out_dir):
    strict = tmp_path / "strict.yaml"
    strict.write_text("min_rsquared_daily: 0.999\n")

    result = runner.invoke(cli, ["--config", str(strict), "run", str(in_dir), str(out_dir)])

    assert result.exit_code == 1
    assert "No candidate households left" in result.output


def test_bad_config(runner, tmp_path, in_dir, out_dir):
    bad = tmp_path / "bad.yaml"
    bad.write_text("colour: blue\n")
    result = runner.invoke(cli, ["--config", str(bad), "run", str(in_dir), str(out_dir)])
    assert result.exit_code == 1
    assert "Bad configuration" in result.output


def test_ids(runner, config, in_dir):
    result = runner.invoke(cli, ["--config", str(config), "ids", str(in_dir / "NkWh.csv")])
    assert result.exit_code == 0
    assert result.output.split() == ["1002", "5013"]


def test_household(runner, config, in_dir):
    result = runner.invoke(
        cli, ["--config", str(config), "household", str(in_dir / "NkWh.csv"), str(in_dir / "HDD.csv"), "5013"]
    )
    assert result.exit_code == 0, result.output
    assert "House 5013" in result.output
    assert "18" in result.output


def test_household_without_data(runner, config, in_dir):
    result = runner.invoke(
        cli, ["--config", str(config), "household", str(in_dir / "NkWh.csv"), str(in_dir / "HDD.csv"), "42"]
    )
    assert result.exit_code == 0
    assert "No energy data for house 42" in result.output


def test_segment(runner, config, tmp_path):
    log_dir = tmp_path / "valveLogs"
    log_dir.mkdir()
    (log_dir / "grouping.csv").write_text("h1,dev1\nh2,dev2\n")
    (log_dir / "dev1.json").write_text(
        '[ "2016-01-05T12:00:00Z", "", {"@":"dev1","v|%":40,"tS|C":0} ]\n'
        '[ "2016-01-06T12:00:00Z", "", {"@":"dev1","v|%":40,"tS|C":3} ]\n'
    )
    (log_dir / "dev2.json").write_text("")

    result = runner.invoke(cli, ["--config", str(config), "segment", str(log_dir), "--house", "h1"])

    assert result.exit_code == 0, result.output
    assert "h1" in result.output
    assert "h2" not in result.output


def test_fetch_hdd(runner, config, tmp_path):
    response = MagicMock()
    response.json.return_value = {
        "hourly": {
            "time": [f"2016-01-01T{h:02d}:00" for h in range(24)],
            "temperature_2m": [5.5] * 24,
        }
    }
    output = tmp_path / "HDD.csv"

    with patch("httpx.get", return_value=response):
        result = runner.invoke(
            cli,
            ["--config", str(config), "fetch-hdd", str(output), "--from-date", "2016-01-01", "--to-date", "2016-01-01"],
        )

    assert result.exit_code == 0, result.output
    assert "Wrote 1 days of HDD" in result.output
    assert output.read_text().splitlines()[1] == "2016-01-01,10.0,0"
