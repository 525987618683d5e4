from datetime import datetime, timedelta

import pytest

from model_expires.core.ttl import expires_at_from_ttl, seconds_from_ttl
from tests.conftest import NOW


@pytest.mark.parametrize("ttl", [None, 0, -5, 0.4, timedelta(0), timedelta(seconds=-30)])
def test_non_positive_ttl_never_expires(ttl):
    assert seconds_from_ttl(ttl, NOW) == 0
    assert expires_at_from_ttl(ttl, NOW) is None


@pytest.mark.parametrize("ttl, seconds", [
    (1, 1),
    (3600, 3600),
    (1.9, 1),
    (timedelta(minutes=2), 120),
    (timedelta(seconds=1, milliseconds=700), 1),
    (timedelta(days=1), 86400),
])
def test_durations_are_whole_seconds(ttl, seconds):
    assert seconds_from_ttl(ttl, NOW) == seconds


def test_positive_seconds_are_added_to_now():
    assert expires_at_from_ttl(60, NOW) == NOW + timedelta(seconds=60)


def test_absolute_time_truncates_toward_zero():
    assert seconds_from_ttl(NOW + timedelta(seconds=90, milliseconds=500), NOW) == 90
    assert expires_at_from_ttl(NOW + timedelta(seconds=90, milliseconds=500), NOW) == NOW + timedelta(seconds=90)


def test_absolute_time_in_the_past_never_expires():
    assert seconds_from_ttl(NOW - timedelta(minutes=5), NOW) == 0
    assert seconds_from_ttl(NOW, NOW) == 0
    # less than one whole second ahead
    assert seconds_from_ttl(NOW + timedelta(milliseconds=999), NOW) == 0


def test_naive_absolute_time_is_taken_as_utc():
    naive = datetime(2024, 5, 1, 12, 10)
    assert seconds_from_ttl(naive, NOW) == 600


@pytest.mark.parametrize("ttl", ["60", True, float("nan"), float("inf"), [60]])
def test_unsupported_ttl_never_expires(ttl):
    assert seconds_from_ttl(ttl, NOW) == 0
    assert expires_at_from_ttl(ttl, NOW) is None


@pytest.mark.parametrize("ttl", [10**12, 1e300, timedelta.max])
def test_ttl_beyond_datetime_range_never_expires(ttl):
    assert expires_at_from_ttl(ttl, NOW) is None
