"""Tests for derived analytics."""

from datetime import date

import pytest
from wealth_snapshot.services.analytics import (
    MaturityBucket,
    allocation,
    benchmark_series,
    current_net_worth,
    goal_progress,
    highest_unlock,
    maturity_map,
    moving_average,
    passive_income,
    trend,
)
from wealth_snapshot.services.currency import CurrencyNormalizer
from wealth_snapshot.services.state import (
    FixedDeposit,
    HistoricalDataPoint,
    make_cash,
    make_stock,
)
from wealth_snapshot.services.valuation import HoldingsValuator, NetWorthAggregator

RATES = {"HKD": 1.0, "USD": 7.8, "AUD": 5.0}


@pytest.fixture
def valuator():
    return HoldingsValuator(CurrencyNormalizer(RATES))


def _history(*values):
    return [
        HistoricalDataPoint(date=f"2024-{i + 1:02d}", total_value_hkd=v)
        for i, v in enumerate(values)
    ]


def _fd(fd_id, principal, maturity, currency="HKD", rate=4.0):
    return FixedDeposit(
        id=fd_id,
        principal=principal,
        currency=currency,
        interest_rate=rate,
        maturity_date=maturity,
    )


class TestMovingAverage:
    def test_empty(self):
        assert moving_average([]) == []

    def test_short_series_uses_available_points(self):
        assert moving_average(_history(100, 200, 300)) == pytest.approx([100, 150, 200])

    def test_window_of_six(self):
        values = [100 * (i + 1) for i in range(10)]
        result = moving_average(_history(*values))
        assert len(result) == 10
        assert result[5] == pytest.approx(350)  # mean(100..600)
        assert result[9] == pytest.approx(750)  # mean(500..1000)

    def test_trend_rounds_average(self):
        points = trend(_history(100, 101))
        assert points == [
            {"date": "2024-01", "total_value_hkd": 100, "ma": 100},
            {"date": "2024-02", "total_value_hkd": 101, "ma": 101},  # 100.5 rounds up
        ]


class TestGoalProgress:
    def test_current_is_latest_snapshot(self):
        assert current_net_worth(_history(100, 300, 200)) == 200
        assert current_net_worth([]) == 0

    def test_percentage_rounded(self):
        progress = goal_progress(_history(157_800), 2_000_000)
        assert progress.percentage == 8  # 7.89%
        assert progress.remaining == 1_842_200

    def test_clamped_at_hundred(self):
        progress = goal_progress(_history(4_000_000), 2_000_000)
        assert progress.percentage == 100
        assert progress.remaining == -2_000_000

    def test_zero_goal(self):
        assert goal_progress(_history(1_000), 0).percentage == 0

    def test_empty_history(self):
        progress = goal_progress([], 2_000_000)
        assert progress.current == 0
        assert progress.percentage == 0


class TestMaturityMap:
    def test_twelve_buckets_from_current_month(self, valuator):
        buckets = maturity_map([], today=date(2024, 6, 15), valuator=valuator)
        assert len(buckets) == 12
        assert buckets[0].key == "2024-06"
        assert buckets[0].label == "Jun 24"
        assert buckets[-1].key == "2025-05"
        assert all(b.amount == 0 for b in buckets)

    def test_principal_grouped_by_month_in_base_currency(self, valuator):
        fds = [
            _fd("a", 50_000, date(2024, 6, 20)),
            _fd("b", 10_000, date(2024, 6, 1)),
            _fd("c", 1_000, date(2024, 8, 1), currency="USD"),
            _fd("d", 5_000, date(2025, 5, 31)),
            _fd("out", 9_999, date(2025, 6, 1)),  # 13th month
            _fd("past", 9_999, date(2024, 5, 31)),
        ]
        buckets = {b.key: b.amount for b in maturity_map(fds, date(2024, 6, 15), valuator)}
        assert buckets["2024-06"] == 60_000
        assert buckets["2024-08"] == 7_800
        assert buckets["2025-05"] == 5_000
        assert "2025-06" not in buckets
        assert sum(buckets.values()) == 72_800

    def test_highest_unlock(self):
        buckets = [
            MaturityBucket("2024-06", "Jun 24", 100),
            MaturityBucket("2024-07", "Jul 24", 500),
            MaturityBucket("2024-08", "Aug 24", 200),
        ]
        assert highest_unlock(buckets).key == "2024-07"

    def test_highest_unlock_tie_prefers_later_month(self):
        buckets = [
            MaturityBucket("2024-06", "Jun 24", 500),
            MaturityBucket("2024-07", "Jul 24", 500),
        ]
        assert highest_unlock(buckets).key == "2024-07"

    def test_highest_unlock_none_when_nothing_matures(self):
        assert highest_unlock([MaturityBucket("2024-06", "Jun 24", 0)]) is None
        assert highest_unlock([]) is None


class TestPassiveIncome:
    def test_fd_interest_and_dividends(self, valuator):
        fds = [_fd("a", 120_000, date(2025, 1, 1), rate=4.0)]
        accounts = [
            make_stock("0700.HK", 100, 100.0, "HKD"),
            make_stock("AAPL", 10, 100.0, "USD"),
            make_cash("HSBC", 1_000_000, "HKD"),
        ]
        income = passive_income(
            accounts, fds, valuator=valuator, yields={"HK": 0.06, "US": 0.012, "AU": 0.0}
        )
        assert income.fd_monthly == pytest.approx(400)
        # 10000 * 6% / 12 + 7800 * 1.2% / 12
        assert income.dividend_monthly == pytest.approx(50 + 7.8)
        assert income.monthly == pytest.approx(457.8)
        assert income.annual == pytest.approx(457.8 * 12)

    def test_nothing_held(self, valuator):
        income = passive_income([], [], valuator=valuator)
        assert income.monthly == 0


class TestBenchmark:
    def test_compounds_from_first_snapshot(self):
        assert benchmark_series(_history(1000, 5, 9), 0.005) == pytest.approx(
            [1000, 1005, 1010.025]
        )

    def test_empty(self):
        assert benchmark_series([]) == []


class TestAllocation:
    def test_slices_skip_empty_categories(self, valuator):
        accounts = [
            make_cash("HSBC", 100_000, "HKD"),
            make_stock("0700.HK", 100, 300.0, "HKD"),
            make_stock("CBA.AX", 10, 100.0, "AUD"),
        ]
        fds = [_fd("a", 50_000, date(2025, 1, 1))]
        slices = allocation(accounts, fds, aggregator=NetWorthAggregator(valuator))
        assert [(s.name, s.value) for s in slices] == [
            ("Cash", 100_000),
            ("Fixed Dep.", 50_000),
            ("HK Stocks", 30_000),
            ("AU Stocks", 5_000),
        ]

    def test_empty_portfolio(self, valuator):
        assert allocation([], [], aggregator=NetWorthAggregator(valuator)) == []
