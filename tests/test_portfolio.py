"""Tests for portfolio holdings and the valuation summary."""
from __future__ import annotations

import numpy as np
import pytest

from src.exceptions import InvalidArgumentError, SymbolNotFoundError
from src.market import Market
from src.portfolio import (
    DEFAULT_HOLDINGS,
    REFERENCE_CAPITAL,
    Portfolio,
    get_portfolio_summary,
)


class TestPortfolio:
    def test_holdings_copied(self) -> None:
        source = {"AAPL": 50}
        portfolio = Portfolio(source)
        source["AAPL"] = 999
        source["GOOG"] = 1
        assert dict(portfolio.holdings) == {"AAPL": 50}

    def test_holdings_read_only(self) -> None:
        portfolio = Portfolio(DEFAULT_HOLDINGS)
        with pytest.raises(TypeError):
            portfolio.holdings["AAPL"] = 1  # type: ignore[index]

    def test_reference_capital(self) -> None:
        assert Portfolio({}).reference_capital == REFERENCE_CAPITAL == 100_000.0

    def test_zero_quantity_allowed(self) -> None:
        assert Portfolio({"AAPL": 0}).holdings["AAPL"] == 0

    def test_numpy_integers_accepted(self) -> None:
        portfolio = Portfolio({"AAPL": np.int64(7)})
        assert portfolio.holdings["AAPL"] == 7
        assert type(portfolio.holdings["AAPL"]) is int

    def test_integral_float_coerced_with_warning(self) -> None:
        with pytest.warns(UserWarning, match="coercing"):
            portfolio = Portfolio({"AAPL": 50.0})
        assert portfolio.holdings["AAPL"] == 50

    @pytest.mark.parametrize("quantity", [-1, 1.5, True, "10", None])
    def test_rejects_bad_quantity(self, quantity) -> None:
        with pytest.raises(InvalidArgumentError):
            Portfolio({"AAPL": quantity})

    def test_rejects_empty_symbol(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Portfolio({"": 1})


class TestPortfolioSummary:
    def test_values_and_weights(self) -> None:
        summary = get_portfolio_summary(Portfolio(DEFAULT_HOLDINGS), Market())
        assert list(summary.index) == ["AAPL", "GOOG", "TSLA"]
        assert summary.loc["AAPL", "market_value"] == pytest.approx(9250.0)
        assert summary.loc["GOOG", "market_value"] == pytest.approx(1350.0)
        assert summary.loc["TSLA", "market_value"] == pytest.approx(4800.0)
        assert summary["market_value"].sum() == pytest.approx(15400.0)
        assert summary["weight"].sum() == pytest.approx(1.0)

    def test_zero_value_portfolio_has_zero_weights(self) -> None:
        summary = get_portfolio_summary(Portfolio({"AAPL": 0}), Market())
        assert summary.loc["AAPL", "weight"] == 0.0

    def test_missing_symbol_propagates(self) -> None:
        with pytest.raises(SymbolNotFoundError):
            get_portfolio_summary(Portfolio({"MSFT": 5}), Market())
