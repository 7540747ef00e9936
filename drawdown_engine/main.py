"""
Monte Carlo Drawdown Risk Engine — Main Orchestrator
=====================================================
Entry point for the stress drawdown analysis.

Execution Flow:
    1. Load configuration (YAML or built-in defaults)
    2. Build the market fixture and the portfolio
    3. Value the portfolio on the base market
    4. Monte Carlo max drawdown under normal volatility
    5. Monte Carlo max drawdown under stress volatility
    6. Drawdown distribution statistics and tail metrics
    7. Risk classification against the 15% threshold
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd
import yaml
from pydantic import ValidationError

# ─────────────────────────────────────────────────────────────
# Add project root to path
# ─────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.config import EngineConfig, load_config_from_yaml
from src.events import LoggingSink
from src.exceptions import RiskEngineError
from src.logging_utils import get_logger, setup_logging
from src.market import Market
from src.monte_carlo import portfolio_value
from src.portfolio import Portfolio, get_portfolio_summary
from src.stress_testing import full_stress_analysis

# ─────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────
NUM_SIMULATIONS = 1_000
STEPS = 10
RANDOM_SEED = 42
NORMAL_VOLATILITY = 0.02
STRESS_VOLATILITY = 0.05
RISK_THRESHOLD_PCT = 15.0

logger = get_logger("main")


def print_header(text: str) -> None:
    """Print formatted section header."""
    width = 60
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width)


def print_metrics(metrics: dict, indent: int = 4) -> None:
    """Print dictionary of metrics with formatting."""
    prefix = " " * indent
    for key, val in metrics.items():
        if isinstance(val, float):
            print(f"{prefix}{key:.<35} {val:>12.6f}")
        else:
            print(f"{prefix}{key:.<35} {str(val):>12}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monte Carlo stress drawdown analysis.")
    parser.add_argument("--config", default=None, help="Path to YAML config.")
    return parser.parse_args(argv)


def default_config() -> EngineConfig:
    return EngineConfig.model_validate(
        {
            "simulation": {
                "num_simulations": NUM_SIMULATIONS,
                "steps": STEPS,
                "seed": RANDOM_SEED,
            },
            "normal": {"name": "normal", "volatility": NORMAL_VOLATILITY},
            "stress": {"name": "stress", "volatility": STRESS_VOLATILITY},
            "risk_threshold_pct": RISK_THRESHOLD_PCT,
        }
    )


def run(cfg: EngineConfig) -> dict:
    """Execute the complete drawdown pipeline for a configuration."""

    print("\n" + "╔" + "═" * 58 + "╗")
    print("║   MONTE CARLO DRAWDOWN RISK ENGINE                      ║")
    print("║   Daily Price Stress Drawdown Model                     ║")
    print("╚" + "═" * 58 + "╝")

    # ── PHASE 1: Market & Portfolio ───────────────────────────
    print_header("PHASE 1 — MARKET & PORTFOLIO")

    market = Market(cfg.prices, seed=cfg.simulation.seed)
    portfolio = Portfolio(cfg.holdings)

    print(f"\n  Instruments:   {market.symbols}")
    print(f"  Holdings:      {dict(portfolio.holdings)}")

    summary = get_portfolio_summary(portfolio, market)
    print("\n" + summary.to_string(float_format=lambda x: f"{x:.4f}"))

    initial = portfolio_value(portfolio, market)
    print(f"\n  Initial Value: ${initial:,.2f}")

    # ── PHASE 2: Monte Carlo Scenarios ────────────────────────
    print_header("PHASE 2 — MONTE CARLO STRESS SCENARIOS")

    sim = cfg.simulation
    print(
        f"  Running {sim.num_simulations:,} trials x {sim.steps} days "
        f"per scenario ({sim.workers} worker(s))..."
    )
    analysis = full_stress_analysis(
        portfolio,
        market,
        num_simulations=sim.num_simulations,
        steps=sim.steps,
        seed=sim.seed,
        workers=sim.workers,
        sink=LoggingSink(),
        scenarios=[cfg.normal.to_scenario(), cfg.stress.to_scenario()],
        threshold=cfg.risk_threshold_pct,
    )
    normal = analysis["normal"]
    stress = analysis["stress"]

    print(f"\n  Normal Max Drawdown: {normal['max_drawdown_pct']:.4f}%")
    print(f"  Stress Max Drawdown: {stress['max_drawdown_pct']:.4f}%")

    # ── PHASE 3: Drawdown Distribution ────────────────────────
    print_header("PHASE 3 — DRAWDOWN DISTRIBUTION")

    print(f"\n  ┌─ Normal (σ = {normal['volatility']}) ──────────────────────┐")
    print_metrics(normal["statistics"])
    print_metrics(normal["tail"])

    print(f"\n  ┌─ Stress (σ = {stress['volatility']}) ──────────────────────┐")
    print_metrics(stress["statistics"])
    print_metrics(stress["tail"])

    print("\n  ┌─ Stress Impact ─────────────────────────────┐")
    print_metrics(analysis["impact"])

    # ── Results Summary Table ─────────────────────────────────
    print_header("RESULTS COMPARISON TABLE")

    comparison = pd.DataFrame({
        "Scenario": [normal["scenario"], stress["scenario"]],
        "Volatility": [normal["volatility"], stress["volatility"]],
        "Max DD %": [normal["max_drawdown_pct"], stress["max_drawdown_pct"]],
        "Mean DD %": [normal["statistics"]["mean"], stress["statistics"]["mean"]],
        "95% DaR": [normal["tail"]["dar_95"], stress["tail"]["dar_95"]],
        "99% DaR": [normal["tail"]["dar_99"], stress["tail"]["dar_99"]],
        "99% ES": [normal["tail"]["es_99"], stress["tail"]["es_99"]],
    })
    print("\n" + comparison.to_string(index=False, float_format=lambda x: f"{x:.4f}"))

    # ── Risk Classification ───────────────────────────────────
    print_header("RISK CLASSIFICATION")
    print(f"\n  {analysis['classification']}")

    return {
        "initial_value": initial,
        "normal_max_drawdown_pct": normal["max_drawdown_pct"],
        "stress_max_drawdown_pct": stress["max_drawdown_pct"],
        "classification": analysis["classification"],
    }


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, run the pipeline and map failures to exit codes.

    Returns 0 on success and 1 when the config cannot be loaded or the
    engine raises a ``RiskEngineError``.
    """
    args = parse_args(argv)
    setup_logging()

    try:
        cfg = load_config_from_yaml(args.config) if args.config else default_config()
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        logger.error("Could not load config %s: %s", args.config, exc)
        return 1

    setup_logging(cfg.log_level, json_output=cfg.json_logs)

    try:
        run(cfg)
    except RiskEngineError as exc:
        logger.error("Risk analysis failed: %s", exc)
        return 1

    print("\n" + "╔" + "═" * 58 + "╗")
    print("║   RISK ENGINE EXECUTION COMPLETE                        ║")
    print("╚" + "═" * 58 + "╝\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
