"""Tests for portfolio metrics, sector allocation and risk scores."""

import math

import pytest

from portfolio_lens.analytics.metrics import (
    calculate_portfolio_metrics,
    calculate_sector_allocation,
)
from portfolio_lens.analytics.risk import calculate_risk_metrics, clamp_score
from portfolio_lens.domain.models import Holding


def _holding(symbol: str, value: float, gain_pct: float, sector: str = "Technology") -> Holding:
    cost = value / (1 + gain_pct / 100)
    return Holding(
        symbol=symbol,
        shares_held=1,
        avg_cost_basis=cost,
        current_price=value,
        unrealized_gain_loss=value - cost,
        unrealized_gain_loss_percent=gain_pct,
        current_value=value,
        sector=sector,
    )


class TestPortfolioMetrics:
    def test_empty_holdings(self):
        metrics = calculate_portfolio_metrics([])
        assert metrics.total_value == 0
        assert metrics.total_gain_loss == 0
        assert metrics.total_gain_loss_percent == 0
        assert metrics.top_performer is None
        assert metrics.worst_performer is None
        assert metrics.unique_symbols == 0

    def test_totals_and_performers(self):
        holdings = [_holding("AAA", 1100, 10), _holding("BBB", 900, -10), _holding("CCC", 500, 25)]
        metrics = calculate_portfolio_metrics(holdings)

        total_gl = sum(h.unrealized_gain_loss for h in holdings)
        assert metrics.total_value == pytest.approx(2500)
        assert metrics.total_gain_loss == pytest.approx(total_gl)
        assert metrics.total_gain_loss_percent == pytest.approx(total_gl / (2500 - total_gl) * 100)
        assert metrics.top_performer.symbol == "CCC"
        assert metrics.worst_performer.symbol == "BBB"
        assert metrics.unique_symbols == 3

    def test_ties_keep_first_holding(self):
        metrics = calculate_portfolio_metrics([_holding("AAA", 100, 5), _holding("BBB", 50, 5)])
        assert metrics.top_performer.symbol == "AAA"
        assert metrics.worst_performer.symbol == "AAA"


class TestSectorAllocation:
    def test_groups_and_sorts_by_value(self):
        allocation = calculate_sector_allocation(
            [
                _holding("AAA", 300, 0, "Technology"),
                _holding("BBB", 600, 0, "Energy"),
                _holding("CCC", 100, 0, "Technology"),
            ]
        )
        assert [a.sector for a in allocation] == ["Energy", "Technology"]
        assert allocation[0].percentage == pytest.approx(60)
        assert allocation[1].value == pytest.approx(400)
        assert allocation[1].percentage == pytest.approx(40)

    def test_empty(self):
        assert calculate_sector_allocation([]) == []


class TestRiskMetrics:
    def test_empty_holdings_are_all_zero(self):
        risk = calculate_risk_metrics([])
        assert risk.concentration == 0
        assert risk.diversification_score == 0
        assert risk.volatility_score == 0

    def test_single_holding_is_fully_concentrated(self):
        risk = calculate_risk_metrics([_holding("AAA", 1000, 12)])
        assert risk.concentration == pytest.approx(100)
        assert risk.diversification_score == pytest.approx(0)
        assert risk.volatility_score == pytest.approx(0)

    def test_equal_weights(self):
        holdings = [_holding(s, 250, 0) for s in ("A", "B", "C", "D")]
        risk = calculate_risk_metrics(holdings)
        assert risk.concentration == pytest.approx(25)
        assert risk.diversification_score == pytest.approx(75)

    def test_volatility_is_population_std_dev(self):
        risk = calculate_risk_metrics([_holding("A", 100, 10), _holding("B", 100, -10)])
        # Sample std dev would be sqrt(200) ~ 14.14
        assert risk.volatility_score == pytest.approx(10)

    def test_unequal_weights(self):
        risk = calculate_risk_metrics([_holding("A", 750, 0), _holding("B", 250, 0)])
        herfindahl = 0.75**2 + 0.25**2
        assert risk.concentration == pytest.approx(herfindahl * 100)
        assert risk.diversification_score == pytest.approx((1 - herfindahl) * 100)

    def test_zero_total_value_does_not_produce_nan(self):
        risk = calculate_risk_metrics([_holding("A", 0, 0)])
        assert not math.isnan(risk.concentration)
        assert risk.concentration == 0


class TestClampScore:
    @pytest.mark.parametrize(("score", "expected"), [(-5, 0), (42.5, 42.5), (130, 100)])
    def test_clamp(self, score, expected):
        assert clamp_score(score) == expected
