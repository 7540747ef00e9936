"""Tests for portfolio valuation and the Monte Carlo drawdown engine."""
from __future__ import annotations

import numpy as np
import pytest

from src.events import MemorySink
from src.exceptions import (
    InvalidArgumentError,
    InvalidPortfolioValueError,
    SymbolNotFoundError,
)
from src.market import DEFAULT_PRICES, Market
from src.monte_carlo import (
    monte_carlo,
    portfolio_value,
    run_monte_carlo_engine,
    run_trial,
    simulate_trial_losses,
)
from src.portfolio import Portfolio


# ---------------------------------------------------------------------------
# Valuation
# ---------------------------------------------------------------------------


class TestPortfolioValue:
    def test_concrete_scenario(self, three_stock_market, default_portfolio) -> None:
        # 50*185 + 10*135 + 20*240
        assert portfolio_value(default_portfolio, three_stock_market) == 15400.0

    def test_unheld_instruments_ignored(self, default_portfolio) -> None:
        assert portfolio_value(default_portfolio, Market()) == 15400.0

    def test_empty_portfolio(self) -> None:
        assert portfolio_value(Portfolio({}), Market()) == 0.0

    @pytest.mark.parametrize(
        "holdings",
        [{"MSFT": 1}, {"AAPL": 5, "NFLX": 2}, {"AMZN": 0, "IBM": 0}],
    )
    def test_missing_symbol_fails(self, holdings) -> None:
        with pytest.raises(SymbolNotFoundError):
            portfolio_value(Portfolio(holdings), Market())

    def test_no_side_effects(self, default_portfolio) -> None:
        market = Market()
        portfolio_value(default_portfolio, market)
        assert market.prices().to_dict() == DEFAULT_PRICES


# ---------------------------------------------------------------------------
# Single trial
# ---------------------------------------------------------------------------


class TestRunTrial:
    def test_tracks_worst_loss(self, constant_rng) -> None:
        market = Market({"AAPL": 100.0})
        portfolio = Portfolio({"AAPL": 1})
        # 100 -> 90 -> 81 -> 72.9 with a constant -10% shock
        worst = run_trial(portfolio, market, 100.0, 1.0, 3, constant_rng(-0.1))
        assert worst == pytest.approx(27.1)

    def test_gains_never_count_as_loss(self, constant_rng) -> None:
        market = Market({"AAPL": 100.0})
        portfolio = Portfolio({"AAPL": 1})
        worst = run_trial(portfolio, market, 100.0, 1.0, 5, constant_rng(0.1))
        assert worst == 0.0

    def test_base_market_untouched(self, constant_rng, default_portfolio) -> None:
        market = Market()
        run_trial(default_portfolio, market, 15400.0, 0.5, 10, constant_rng(-1.0))
        assert market.prices().to_dict() == DEFAULT_PRICES

    def test_loss_bounded_by_floor(self, constant_rng) -> None:
        market = Market({"AAPL": 100.0})
        portfolio = Portfolio({"AAPL": 10})
        worst = run_trial(portfolio, market, 1000.0, 1.0, 3, constant_rng(-5.0))
        # everything floors at 0.01 -> value 0.10
        assert worst == pytest.approx(999.9)


# ---------------------------------------------------------------------------
# Full simulation
# ---------------------------------------------------------------------------


class TestMonteCarlo:
    @pytest.mark.parametrize("sims,steps", [(1, 1), (50, 10), (10, 25)])
    def test_zero_volatility_fixed_point(
        self, three_stock_market, default_portfolio, sims: int, steps: int
    ) -> None:
        dd = monte_carlo(default_portfolio, three_stock_market, sims, 0.0, steps=steps)
        assert dd == 0.0

    def test_drawdown_grows_with_volatility(self, default_portfolio) -> None:
        market = Market()
        normal = run_monte_carlo_engine(default_portfolio, market, 500, 0.02, seed=123)
        stress = run_monte_carlo_engine(default_portfolio, market, 500, 0.05, seed=123)
        assert stress["max_drawdown_pct"] > normal["max_drawdown_pct"]
        assert stress["trial_drawdowns_pct"].mean() > normal["trial_drawdowns_pct"].mean()

    def test_normal_drawdown_in_plausible_range(self, default_portfolio) -> None:
        dd = monte_carlo(default_portfolio, Market(), 1000, 0.02, seed=42)
        assert 0.0 < dd < 100.0

    def test_drawdown_never_exceeds_total_loss(self, default_portfolio) -> None:
        dd = monte_carlo(default_portfolio, Market(), 50, 5.0, seed=1)
        assert 0.0 <= dd < 100.0

    def test_seed_reproducible(self, default_portfolio) -> None:
        market = Market()
        a = simulate_trial_losses(default_portfolio, market, 100, 0.05, seed=7)
        b = simulate_trial_losses(default_portfolio, market, 100, 0.05, seed=7)
        np.testing.assert_array_equal(a, b)

    def test_workers_do_not_change_results(self, default_portfolio) -> None:
        market = Market()
        serial = simulate_trial_losses(default_portfolio, market, 64, 0.05, seed=7)
        threaded = simulate_trial_losses(
            default_portfolio, market, 64, 0.05, seed=7, workers=4
        )
        np.testing.assert_array_equal(serial, threaded)

    def test_different_seeds_differ(self, default_portfolio) -> None:
        market = Market()
        a = simulate_trial_losses(default_portfolio, market, 100, 0.05, seed=1)
        b = simulate_trial_losses(default_portfolio, market, 100, 0.05, seed=2)
        assert not np.array_equal(a, b)

    def test_trials_start_from_base_prices(self, default_portfolio) -> None:
        market = Market(seed=5)
        simulate_trial_losses(default_portfolio, market, 20, 0.05, seed=5, workers=2)
        assert market.prices().to_dict() == DEFAULT_PRICES

    def test_engine_result_shape(self, default_portfolio) -> None:
        results = run_monte_carlo_engine(
            default_portfolio, Market(), 40, 0.05, steps=5, seed=3
        )
        assert results["initial_value"] == 15400.0
        assert results["num_simulations"] == 40
        assert results["steps"] == 5
        assert results["trial_losses"].shape == (40,)
        assert (results["trial_losses"] >= 0).all()
        assert results["max_drawdown_pct"] == pytest.approx(
            results["trial_drawdowns_pct"].max()
        )
        assert results["max_drawdown_pct"] == pytest.approx(
            results["trial_losses"].max() / 15400.0 * 100
        )

    def test_monte_carlo_matches_engine(self, default_portfolio) -> None:
        market = Market()
        dd = monte_carlo(default_portfolio, market, 30, 0.05, seed=9)
        results = run_monte_carlo_engine(default_portfolio, market, 30, 0.05, seed=9)
        assert dd == results["max_drawdown_pct"]

    def test_sink_receives_lifecycle_events(self, default_portfolio) -> None:
        sink = MemorySink()
        simulate_trial_losses(default_portfolio, Market(), 10, 0.02, seed=0, sink=sink)
        assert sink.names() == ["simulation_started", "simulation_completed"]
        started = sink.events[0].fields
        assert started["simulations"] == 10
        assert started["initial_value"] == 15400.0


class TestMonteCarloErrors:
    @pytest.mark.parametrize("sims", [0, -5, 2.5, True])
    def test_bad_simulation_count(self, default_portfolio, sims) -> None:
        with pytest.raises(InvalidArgumentError):
            monte_carlo(default_portfolio, Market(), sims, 0.02)

    @pytest.mark.parametrize("steps", [0, -1, 1.0])
    def test_bad_steps(self, default_portfolio, steps) -> None:
        with pytest.raises(InvalidArgumentError):
            monte_carlo(default_portfolio, Market(), 10, 0.02, steps=steps)

    @pytest.mark.parametrize("vol", [-0.01, float("nan"), float("inf"), "0.02"])
    def test_bad_volatility(self, default_portfolio, vol) -> None:
        with pytest.raises(InvalidArgumentError):
            monte_carlo(default_portfolio, Market(), 10, vol)

    def test_bad_workers(self, default_portfolio) -> None:
        with pytest.raises(InvalidArgumentError):
            monte_carlo(default_portfolio, Market(), 10, 0.02, workers=0)

    def test_invalid_argument_is_value_error(self, default_portfolio) -> None:
        with pytest.raises(ValueError):
            monte_carlo(default_portfolio, Market(), 0, 0.02)

    @pytest.mark.parametrize("holdings", [{}, {"AAPL": 0}, {"AAPL": 0, "GOOG": 0}])
    def test_zero_initial_value(self, holdings) -> None:
        with pytest.raises(InvalidPortfolioValueError):
            monte_carlo(Portfolio(holdings), Market(), 10, 0.02)

    def test_zero_initial_value_is_arithmetic_error(self) -> None:
        with pytest.raises(ArithmeticError):
            monte_carlo(Portfolio({}), Market(), 10, 0.02)

    def test_missing_symbol(self) -> None:
        with pytest.raises(SymbolNotFoundError):
            monte_carlo(Portfolio({"AAPL": 1, "MSFT": 1}), Market(), 10, 0.02)

    def test_no_events_on_failure(self) -> None:
        sink = MemorySink()
        with pytest.raises(InvalidPortfolioValueError):
            monte_carlo(Portfolio({}), Market(), 10, 0.02, sink=sink)
        assert sink.events == []
