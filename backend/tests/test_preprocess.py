import random
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from forecasting.preprocess import (
    build_monthly_series,
    denormalize,
    monthly_income_expense,
    normalize,
)

from conftest import make_txn


def test_monthly_series_sums_per_month_in_order():
    txns = [
        make_txn("2024-03", 40.0),
        make_txn("2024-01", 60.0, day=2),
        make_txn("2024-01", 40.0, day=20),
        make_txn("2024-03", 50.0, day=28),
    ]
    series = build_monthly_series(txns)

    assert [p.period for p in series] == ["2024-01", "2024-03"]
    assert [p.amount for p in series] == [100.0, 90.0]


def test_monthly_series_ignores_input_order():
    txns = [make_txn(f"2024-{m:02d}", 10.1 * m + d, day=d) for m in range(1, 7) for d in (3, 9, 21)]
    expected = build_monthly_series(txns)

    shuffled = list(txns)
    random.Random(7).shuffle(shuffled)
    assert build_monthly_series(shuffled) == expected


def test_monthly_series_crosses_year_boundary():
    series = build_monthly_series([make_txn("2024-01", 5.0), make_txn("2023-12", 7.0)])
    assert [p.period for p in series] == ["2023-12", "2024-01"]


def test_monthly_series_empty():
    assert build_monthly_series([]) == []


def test_monthly_income_expense():
    txns = [
        make_txn("2024-01", 1000.0, type="income"),
        make_txn("2024-01", 300.0),
        make_txn("2024-02", 200.0),
    ]
    monthly = monthly_income_expense(txns)

    assert list(monthly.index) == ["2024-01", "2024-02"]
    assert monthly.loc["2024-01", "income"] == 1000.0
    assert monthly.loc["2024-02", "income"] == 0.0
    assert monthly.loc["2024-02", "expense"] == 200.0


def test_monthly_income_expense_empty():
    monthly = monthly_income_expense([])
    assert len(monthly) == 0
    assert list(monthly.columns) == ["income", "expense"]


def test_normalize_range_and_round_trip():
    values = [120.0, 80.0, 200.0, 95.5]
    series = normalize(values)

    assert series.min == 80.0
    assert series.max == 200.0
    assert series.values.min() == pytest.approx(0.0)
    assert series.values.max() == pytest.approx(1.0)
    restored = [series.denormalize(v) for v in series.values]
    assert restored == pytest.approx(values)


def test_normalize_constant_series():
    series = normalize([50.0, 50.0, 50.0])

    assert np.all(series.values == 0.0)
    assert series.scale == 1.0
    assert series.denormalize(series.values[0]) == pytest.approx(50.0)


def test_denormalize_zero_range_guard():
    assert denormalize(0.5, 10.0, 10.0) == 10.5
    assert denormalize(0.5, 0.0, 100.0) == 50.0


def test_normalize_empty_raises():
    with pytest.raises(ValueError):
        normalize([])


def test_monthly_series_buckets_offset_dates_by_utc_month():
    late_evening = timezone(timedelta(hours=-5))
    txns = [
        make_txn("2024-01", 10.0).model_copy(update={"date": datetime(2024, 1, 31, 22, 0, tzinfo=late_evening)}),
        make_txn("2024-02", 20.0, day=10),
    ]
    series = build_monthly_series(txns)

    assert [p.period for p in series] == ["2024-02"]
    assert [p.amount for p in series] == [30.0]
