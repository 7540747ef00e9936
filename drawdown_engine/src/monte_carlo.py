"""
Monte Carlo Simulation Engine (Flagship Module)
================================================
Simulates short sequences of daily price stress over independent market
copies and aggregates the worst drawdown seen across all trials.

Mathematical Foundation:
    Portfolio value:   V(m) = Σ_i P_i(m) · q_i
    Trial loss:        L_k  = max(0, max_d [V_0 - V(m_k,d)])
    Max drawdown:      DD   = max_k L_k / V_0 · 100

    V_0 is always valued on the unmutated base market, never per trial.
    Every trial k starts from a fresh clone of the base market with its
    own random stream spawned from a single SeedSequence, so results are
    reproducible for a given seed whatever the number of workers.
"""

import numbers
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Dict, List, Optional

import numpy as np

from src.events import EventSink, NullSink
from src.exceptions import InvalidArgumentError, InvalidPortfolioValueError
from src.instrument import validate_volatility
from src.logging_utils import get_logger
from src.market import Market
from src.portfolio import Portfolio


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
DEFAULT_NUM_SIMULATIONS: int = 1_000
DEFAULT_STEPS: int = 10
DEFAULT_SEED: int = 42

logger = get_logger("monte_carlo")


def portfolio_value(portfolio: Portfolio, market: Market) -> float:
    """
    Value a portfolio against a market snapshot.

    Mathematical Definition:
        V = Σ_i P_i · q_i

    Parameters
    ----------
    portfolio : Portfolio
        Holdings to value.
    market : Market
        Market supplying current prices.

    Returns
    -------
    float
        Total market value (0.0 for an empty portfolio).

    Raises
    ------
    SymbolNotFoundError
        If a held symbol is missing from the market.
    """
    return float(
        sum(
            market.get(symbol).price * quantity
            for symbol, quantity in portfolio.holdings.items()
        )
    )


# ─────────────────────────────────────────────────────────────
# Argument validation
# ─────────────────────────────────────────────────────────────

def _require_positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def _require_positive_value(initial: float) -> None:
    if initial <= 0:
        raise InvalidPortfolioValueError(
            f"Initial portfolio value must be positive to normalize drawdown, got {initial}"
        )


# ─────────────────────────────────────────────────────────────
# Trial loop
# ─────────────────────────────────────────────────────────────

def run_trial(
    portfolio: Portfolio,
    base_market: Market,
    initial: float,
    volatility: float,
    steps: int,
    rng: np.random.Generator,
) -> float:
    """
    Run one independent stress trial.

    Algorithm:
        1. Clone the base market with the trial's own generator
        2. For each simulated day: stress every instrument, revalue
        3. Track the largest drop below ``initial`` (gains count as 0)

    Parameters
    ----------
    portfolio : Portfolio
        Holdings to revalue each day.
    base_market : Market
        Unmutated starting market; only read.
    initial : float
        Portfolio value on the base market.
    volatility : float
        Daily shock scale.
    steps : int
        Number of simulated days.
    rng : np.random.Generator
        Random stream owned by this trial.

    Returns
    -------
    float
        Worst loss in currency units (≥ 0).
    """
    market = base_market.clone(rng=rng)
    worst = 0.0

    for _ in range(steps):
        market.apply_stress(volatility)
        current = portfolio_value(portfolio, market)
        worst = max(worst, initial - current)

    return worst


def simulate_trial_losses(
    portfolio: Portfolio,
    base_market: Market,
    simulations: int,
    volatility: float,
    steps: int = DEFAULT_STEPS,
    seed: Optional[int] = None,
    workers: int = 1,
    sink: Optional[EventSink] = None,
) -> np.ndarray:
    """
    Run ``simulations`` independent trials and collect their worst losses.

    Parameters
    ----------
    portfolio : Portfolio
        Holdings under test.
    base_market : Market
        Starting market shared read-only by every trial.
    simulations : int
        Number of trials (positive).
    volatility : float
        Daily shock scale (≥ 0).
    steps : int
        Simulated days per trial (positive, default: 10).
    seed : int, optional
        Root seed. ``None`` draws fresh OS entropy.
    workers : int
        Threads used to run trials. 1 runs them inline.
    sink : EventSink, optional
        Receives ``simulation_started`` / ``simulation_completed``.

    Returns
    -------
    np.ndarray
        Worst loss per trial (simulations,), in trial order.

    Raises
    ------
    InvalidArgumentError
        On non-positive simulations/steps/workers or negative volatility.
    InvalidPortfolioValueError
        If the initial portfolio value is not positive.
    SymbolNotFoundError
        If a held symbol is missing from the market.
    """
    simulations = _require_positive_int("simulations", simulations)
    steps = _require_positive_int("steps", steps)
    workers = _require_positive_int("workers", workers)
    volatility = validate_volatility(volatility)
    sink = sink if sink is not None else NullSink()

    initial = portfolio_value(portfolio, base_market)
    _require_positive_value(initial)

    sink.record(
        "simulation_started",
        simulations=simulations,
        steps=steps,
        volatility=volatility,
        initial_value=initial,
    )
    logger.debug(
        "Running %d trials x %d steps at volatility %.4f on %d worker(s)",
        simulations, steps, volatility, workers,
    )

    trial_seeds = np.random.SeedSequence(seed).spawn(simulations)
    trial = partial(run_trial, portfolio, base_market, initial, volatility, steps)
    generators = (np.random.default_rng(s) for s in trial_seeds)

    if workers == 1:
        losses: List[float] = [trial(rng) for rng in generators]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            losses = list(pool.map(trial, generators))

    trial_losses = np.asarray(losses, dtype=float)

    sink.record(
        "simulation_completed",
        simulations=simulations,
        volatility=volatility,
        max_loss=float(trial_losses.max()),
    )

    return trial_losses


def monte_carlo(
    portfolio: Portfolio,
    base_market: Market,
    simulations: int,
    volatility: float,
    steps: int = DEFAULT_STEPS,
    seed: Optional[int] = None,
    workers: int = 1,
    sink: Optional[EventSink] = None,
) -> float:
    """
    Maximum drawdown percentage across all simulated trials.

    Mathematical Definition:
        DD = max_k L_k / V_0 · 100

    Parameters are as for ``simulate_trial_losses``.

    Returns
    -------
    float
        Max drawdown as a percentage of the initial portfolio value.
    """
    results = run_monte_carlo_engine(
        portfolio, base_market, simulations, volatility,
        steps=steps, seed=seed, workers=workers, sink=sink,
    )
    return results["max_drawdown_pct"]


def run_monte_carlo_engine(
    portfolio: Portfolio,
    base_market: Market,
    simulations: int = DEFAULT_NUM_SIMULATIONS,
    volatility: float = 0.02,
    steps: int = DEFAULT_STEPS,
    seed: Optional[int] = None,
    workers: int = 1,
    sink: Optional[EventSink] = None,
) -> Dict[str, object]:
    """
    Full Monte Carlo drawdown engine execution.

    Returns
    -------
    dict
        Contains: initial_value, max_drawdown_pct, trial_losses,
        trial_drawdowns_pct, num_simulations, steps, volatility, seed.
    """
    trial_losses = simulate_trial_losses(
        portfolio, base_market, simulations, volatility,
        steps=steps, seed=seed, workers=workers, sink=sink,
    )

    initial = portfolio_value(portfolio, base_market)
    trial_drawdowns_pct = trial_losses / initial * 100
    max_drawdown_pct = float(trial_losses.max() / initial * 100)

    logger.info(
        "volatility=%.4f simulations=%d max_drawdown=%.4f%%",
        volatility, simulations, max_drawdown_pct,
    )

    return {
        "initial_value": initial,
        "max_drawdown_pct": max_drawdown_pct,
        "trial_losses": trial_losses,
        "trial_drawdowns_pct": trial_drawdowns_pct,
        "num_simulations": simulations,
        "steps": steps,
        "volatility": volatility,
        "seed": seed,
    }
