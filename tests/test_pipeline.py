"""Tests for the orchestrator and snapshot serialisation."""

import json
from datetime import date

import pytest

from portfolio_lens.domain.models import PortfolioData
from portfolio_lens.errors import CSVParseError
from portfolio_lens.pipeline import process_csv, process_portfolio_data

TODAY = date(2024, 1, 10)


class TestProcessPortfolioData:
    def test_builds_complete_snapshot(self, trade, market):
        trades = [trade("AAPL", 10, 100, "2024-01-01"), trade("MSFT", 1, 350, "2024-01-05")]
        data = process_portfolio_data(trades, market, today=TODAY)

        assert data.trades == trades
        assert [h.symbol for h in data.holdings] == ["AAPL", "MSFT"]
        assert data.metrics.total_value == pytest.approx(1500)
        assert data.metrics.unique_symbols == 2
        assert data.risk.concentration == pytest.approx(((1100 / 1500) ** 2 + (400 / 1500) ** 2) * 100)
        assert data.portfolio_history[0].date == date(2024, 1, 1)
        assert data.portfolio_history[-1].value == pytest.approx(1500)

    def test_defaults_to_static_market_tables(self, trade):
        data = process_portfolio_data([trade("AAPL", 1, 100, "2024-01-01")], today=TODAY)
        assert data.holdings[0].current_price == 185.5
        assert data.holdings[0].sector == "Technology"

    def test_trades_are_kept_as_submitted(self, trade, market):
        trades = [trade("AAPL", 10, 100), trade("AAPL", -10, 100)]
        data = process_portfolio_data(trades, market, today=TODAY)
        assert data.trades == trades
        assert data.holdings == []
        assert data.portfolio_history == []


class TestProcessCSV:
    def test_parse_and_process(self, market):
        content = "symbol,shares,price,date\naapl,10,100,2024-01-01\n"
        data = process_csv(content, market, today=TODAY)
        assert data.holdings[0].symbol == "AAPL"
        assert len(data.portfolio_history) == 10

    def test_parse_failure_produces_no_snapshot(self, market):
        with pytest.raises(CSVParseError):
            process_csv("symbol,shares,price,date\nAAPL,1,0,2024-01-01\n", market, today=TODAY)


class TestSerialization:
    def test_json_round_trip(self, trade, market):
        data = process_portfolio_data(
            [trade("AAPL", 10, 100, "2024-01-01"), trade("ZZZ", 3, 12.5, "2024-01-02")],
            market,
            today=TODAY,
        )
        restored = PortfolioData.model_validate_json(data.model_dump_json(by_alias=True))
        assert restored == data
        assert restored.trades == data.trades
        assert restored.holdings == data.holdings

    def test_json_uses_camel_case_keys(self, trade, market):
        data = process_portfolio_data([trade("AAPL", 1, 100, "2024-01-01")], market, today=TODAY)
        payload = json.loads(data.model_dump_json(by_alias=True))

        assert set(payload) == {"trades", "holdings", "metrics", "risk", "portfolioHistory"}
        assert payload["trades"][0] == {
            "symbol": "AAPL",
            "shares": 1.0,
            "price": 100.0,
            "date": "2024-01-01",
        }
        assert "avgCostBasis" in payload["holdings"][0]
        assert "topPerformer" in payload["metrics"]
        assert "diversificationScore" in payload["risk"]

    def test_snapshot_without_risk_still_loads(self):
        payload = {"trades": [], "holdings": [], "metrics": {}, "portfolioHistory": []}
        data = PortfolioData.model_validate(payload)
        assert data.risk.concentration == 0
