from datetime import datetime, timedelta, timezone

from app.utils.periods import month_bounds, previous_month, to_naive_utc, trend_start, week_of_year


def test_month_bounds_are_half_open() -> None:
    assert month_bounds(2026, 2) == (datetime(2026, 2, 1), datetime(2026, 3, 1))
    assert month_bounds(2025, 12) == (datetime(2025, 12, 1), datetime(2026, 1, 1))


def test_previous_month_wraps_year() -> None:
    assert previous_month(2026, 1) == (2025, 12)
    assert previous_month(2026, 7) == (2026, 6)


def test_aware_datetimes_become_naive_utc() -> None:
    aware = datetime(2026, 3, 1, 2, 30, tzinfo=timezone(timedelta(hours=5)))
    assert to_naive_utc(aware) == datetime(2026, 2, 28, 21, 30)
    naive = datetime(2026, 3, 1, 2, 30)
    assert to_naive_utc(naive) is naive
    assert to_naive_utc(None) is None


def test_trend_start() -> None:
    now = datetime(2026, 10, 18, 9, 0)
    assert trend_start("7days", now) == now - timedelta(days=7)
    assert trend_start("30days", now) == now - timedelta(days=30)
    assert trend_start("90days", now) == now - timedelta(days=90)
    assert trend_start("1year", now) == datetime(2025, 10, 18, 9, 0)
    assert trend_start("1year", datetime(2028, 2, 29)) == datetime(2027, 2, 28)


def test_week_of_year_starts_on_sunday() -> None:
    # 2026-01-01 is a Thursday; the first Sunday is 2026-01-04
    assert week_of_year(datetime(2026, 1, 1)) == 0
    assert week_of_year(datetime(2026, 1, 3)) == 0
    assert week_of_year(datetime(2026, 1, 4)) == 1
