"""
Stress Testing Module
=====================
Runs the drawdown engine under named volatility scenarios, compares them
and classifies the portfolio's risk from the stressed outcome.

Stress Scenarios:
    1. Normal:  σ = 0.02 per simulated day
    2. Stress:  σ = 0.05 per simulated day

Risk classification:
    "High Risk" if stress max drawdown > 15.0%, else "Risk Acceptable"
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from src.events import EventSink
from src.exceptions import InvalidArgumentError
from src.market import Market
from src.monte_carlo import (
    DEFAULT_NUM_SIMULATIONS,
    DEFAULT_STEPS,
    run_monte_carlo_engine,
)
from src.portfolio import Portfolio
from src.risk_metrics import drawdown_risk_metrics
from src.statistics import summarize_drawdowns


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
HIGH_RISK_THRESHOLD_PCT: float = 15.0
HIGH_RISK_LABEL: str = "High Risk"
ACCEPTABLE_LABEL: str = "Risk Acceptable"


@dataclass(frozen=True)
class VolatilityScenario:
    """A named daily volatility assumption."""

    name: str
    volatility: float


NORMAL_SCENARIO = VolatilityScenario(name="normal", volatility=0.02)
STRESS_SCENARIO = VolatilityScenario(name="stress", volatility=0.05)


def classify_risk(
    stress_drawdown_pct: float,
    threshold: float = HIGH_RISK_THRESHOLD_PCT,
) -> str:
    """
    Binary risk label for a stressed max drawdown.

    A drawdown exactly at the threshold is still acceptable.
    """
    return HIGH_RISK_LABEL if stress_drawdown_pct > threshold else ACCEPTABLE_LABEL


def run_stress_scenario(
    portfolio: Portfolio,
    market: Market,
    scenario: VolatilityScenario,
    num_simulations: int = DEFAULT_NUM_SIMULATIONS,
    steps: int = DEFAULT_STEPS,
    seed: Optional[int] = None,
    workers: int = 1,
    sink: Optional[EventSink] = None,
) -> Dict[str, object]:
    """
    Run the Monte Carlo engine under one volatility scenario.

    Parameters
    ----------
    portfolio : Portfolio
        Holdings under test.
    market : Market
        Base market; left unmodified.
    scenario : VolatilityScenario
        Volatility assumption to simulate.
    num_simulations : int
        Number of trials.
    steps : int
        Simulated days per trial.
    seed : int, optional
        Root random seed.
    workers : int
        Threads used to run trials.
    sink : EventSink, optional
        Progress event destination.

    Returns
    -------
    dict
        Engine results plus ``scenario``, ``statistics`` and ``tail``
        (drawdown-at-risk metrics).
    """
    results = run_monte_carlo_engine(
        portfolio, market, num_simulations, scenario.volatility,
        steps=steps, seed=seed, workers=workers, sink=sink,
    )
    results["scenario"] = scenario.name
    results["statistics"] = summarize_drawdowns(results["trial_drawdowns_pct"])
    results["tail"] = drawdown_risk_metrics(results["trial_drawdowns_pct"])
    return results


def compute_stress_impact(
    base_results: Dict[str, object],
    stressed_results: Dict[str, object],
) -> Dict[str, float]:
    """
    Compare base and stressed drawdown metrics.

    Parameters
    ----------
    base_results : dict
        Results of ``run_stress_scenario`` for the base scenario.
    stressed_results : dict
        Results of ``run_stress_scenario`` for the stressed scenario.

    Returns
    -------
    dict
        ``<metric>_base``, ``<metric>_stressed`` and ``<metric>_pct_change``
        for max drawdown, mean drawdown and DaR/ES.
    """
    def flatten(results: Dict[str, object]) -> Dict[str, float]:
        return {
            "max_drawdown": results["max_drawdown_pct"],
            "mean_drawdown": results["statistics"]["mean"],
            **results["tail"],
        }

    base = flatten(base_results)
    stressed = flatten(stressed_results)
    impact = {}

    for m in base:
        base_val = base[m]
        stress_val = stressed[m]
        pct_change = ((stress_val - base_val) / base_val) * 100 if base_val != 0 else 0.0
        impact[f"{m}_base"] = base_val
        impact[f"{m}_stressed"] = stress_val
        impact[f"{m}_pct_change"] = pct_change

    return impact


def full_stress_analysis(
    portfolio: Portfolio,
    market: Market,
    num_simulations: int = DEFAULT_NUM_SIMULATIONS,
    steps: int = DEFAULT_STEPS,
    seed: Optional[int] = None,
    workers: int = 1,
    sink: Optional[EventSink] = None,
    scenarios: Optional[List[VolatilityScenario]] = None,
    threshold: float = HIGH_RISK_THRESHOLD_PCT,
) -> Dict[str, object]:
    """
    Execute the normal and stress scenarios and classify the result.

    Parameters
    ----------
    scenarios : list of VolatilityScenario, optional
        ``[base, stressed]``. Defaults to the normal and stress scenarios.
    threshold : float
        Stress drawdown (%) above which the portfolio is "High Risk".

    Other parameters are passed through to ``run_stress_scenario``.

    Returns
    -------
    dict
        Contains 'normal' and 'stress' results, 'impact' and
        'classification'.

    Raises
    ------
    InvalidArgumentError
        If ``scenarios`` does not hold exactly two scenarios.
    """
    if scenarios is None:
        scenarios = [NORMAL_SCENARIO, STRESS_SCENARIO]
    scenarios = list(scenarios)
    if len(scenarios) != 2:
        raise InvalidArgumentError(
            f"scenarios must be exactly [base, stressed], got {len(scenarios)} scenario(s)"
        )
    base_scenario, stressed_scenario = scenarios

    kwargs = dict(
        num_simulations=num_simulations, steps=steps,
        seed=seed, workers=workers, sink=sink,
    )
    normal_results = run_stress_scenario(portfolio, market, base_scenario, **kwargs)
    stress_results = run_stress_scenario(portfolio, market, stressed_scenario, **kwargs)

    return {
        "normal": normal_results,
        "stress": stress_results,
        "impact": compute_stress_impact(normal_results, stress_results),
        "classification": classify_risk(stress_results["max_drawdown_pct"], threshold),
    }
