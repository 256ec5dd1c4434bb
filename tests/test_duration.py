from datetime import datetime, timedelta, timezone

import pytest

from vigia.application.duration import (
    clamp_duration,
    compute_duration_minutes,
    effective_max,
    require_plausible_duration,
)
from vigia.domain import ImplausibleDuration

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_compute_duration_returns_whole_minutes():
    assert compute_duration_minutes("2024-01-01T10:00:00Z", "2024-01-01T11:30:00Z") == 90


def test_compute_duration_accepts_datetimes_and_offsets():
    start = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert compute_duration_minutes(start, "2024-01-01T12:15:00+01:00") == 75


def test_compute_duration_above_maximum_is_unknown():
    # 10080 minutos entre as duas datas
    assert compute_duration_minutes("2024-01-01T00:00:00Z", "2024-01-08T00:00:00Z") is None


@pytest.mark.parametrize(
    ("start", "end"),
    [
        (None, "2024-01-01T11:00:00Z"),
        ("2024-01-01T10:00:00Z", None),
        ("ontem à tarde", "2024-01-01T11:00:00Z"),
        ("2024-01-01T11:00:00Z", "2024-01-01T10:00:00Z"),
        ("2024-01-01T11:00:00Z", "2024-01-01T11:00:00Z"),
    ],
)
def test_compute_duration_unknown_for_missing_or_inverted_instants(start, end):
    assert compute_duration_minutes(start, end) is None


def test_compute_duration_uses_fallback_start():
    minutes = compute_duration_minutes(
        None,
        "2024-01-01T11:00:00Z",
        fallback_start=datetime(2024, 1, 1, 10, 20, tzinfo=timezone.utc),
    )
    assert minutes == 40


def test_compute_duration_rejects_end_far_in_the_future():
    start = NOW - timedelta(hours=1)
    assert compute_duration_minutes(start, NOW + timedelta(minutes=10), now=NOW) is None
    assert compute_duration_minutes(start, NOW + timedelta(minutes=3), now=NOW) == 63


def test_compute_duration_respects_custom_maximum():
    assert compute_duration_minutes("2024-01-01T10:00:00Z", "2024-01-01T12:00:00Z", 90) is None
    assert compute_duration_minutes("2024-01-01T10:00:00Z", "2024-01-01T11:00:00Z", 90) == 60


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (89.5, 90),
        (89.49, 89),
        (0.5, 1),
        (0.4, None),
        (0, None),
        (-5, None),
        (4320, 4320),
        (4321, None),
        (10000, None),
        (float("nan"), None),
        (float("inf"), None),
        (True, None),
        ("90", None),
        (None, None),
    ],
)
def test_clamp_duration(value, expected):
    assert clamp_duration(value) == expected


def test_configured_maximum_never_drops_below_one_hour():
    assert effective_max(30) == 60
    assert effective_max(None) == 4320
    assert clamp_duration(60, 30) == 60
    assert clamp_duration(61, 30) is None


def test_require_plausible_duration_raises():
    with pytest.raises(ImplausibleDuration):
        require_plausible_duration(10000)
    with pytest.raises(ValueError):
        require_plausible_duration(-1)
    assert require_plausible_duration(12.2) == 12
