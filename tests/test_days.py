from datetime import date, datetime, timezone

import pytest
from etv.days import date_from_day_key, day_key, day_key_from_datetime, day_key_from_instant


def millis(dt):
    return int(dt.timestamp() * 1000)


def test_day_key_round_trip():
    assert day_key(date(2016, 3, 1)) == 20160301
    assert date_from_day_key(20160229) == date(2016, 2, 29)


def test_impossible_day_key():
    with pytest.raises(ValueError):
        date_from_day_key(20160230)


def test_winter_instant_is_utc_day():
    assert day_key_from_instant(millis(datetime(2016, 1, 10, 23, 30, tzinfo=timezone.utc)), "Europe/London") == 20160110


def test_summer_instant_rolls_to_next_local_day():
    # 23:30 UTC is 00:30 BST
    assert day_key_from_instant(millis(datetime(2016, 3, 27, 23, 30, tzinfo=timezone.utc)), "Europe/London") == 20160328


def test_naive_datetime_taken_as_utc():
    assert day_key_from_datetime(datetime(2016, 7, 1, 23, 30), "Europe/London") == 20160702
    assert day_key_from_datetime(datetime(2016, 7, 1, 23, 30), "UTC") == 20160701
