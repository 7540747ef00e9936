"""
Drawdown Risk Metrics Module
============================
Tail measures over the simulated per-trial drawdown distribution.

Mathematical Foundation:
    Drawdown-at-Risk:   DaR_α = Quantile_α(D)
    Expected Shortfall: ES_α  = E[D | D ≥ DaR_α]
"""

import numpy as np
from typing import Dict

from src.exceptions import InvalidArgumentError


def _check_confidence(confidence_level: float) -> None:
    if not 0 < confidence_level < 1:
        raise InvalidArgumentError(
            f"confidence_level must lie in (0, 1), got {confidence_level}"
        )


def compute_drawdown_at_risk(
    drawdowns_pct: np.ndarray,
    confidence_level: float = 0.99,
) -> float:
    """
    Drawdown exceeded by only ``1 - confidence_level`` of the trials.

    Parameters
    ----------
    drawdowns_pct : np.ndarray
        Per-trial drawdowns in percent (positive = loss).
    confidence_level : float
        Confidence level (default: 0.99).

    Returns
    -------
    float
        Drawdown-at-Risk in percent.
    """
    _check_confidence(confidence_level)
    values = np.asarray(drawdowns_pct, dtype=float)
    if values.size == 0:
        raise InvalidArgumentError("Cannot compute DaR on an empty sample")
    return float(np.percentile(values, confidence_level * 100))


def compute_drawdown_expected_shortfall(
    drawdowns_pct: np.ndarray,
    confidence_level: float = 0.99,
) -> float:
    """
    Mean drawdown of the trials at or beyond the DaR threshold.

    Parameters
    ----------
    drawdowns_pct : np.ndarray
        Per-trial drawdowns in percent.
    confidence_level : float
        Confidence level (default: 0.99).

    Returns
    -------
    float
        Expected Shortfall in percent.
    """
    values = np.asarray(drawdowns_pct, dtype=float)
    dar = compute_drawdown_at_risk(values, confidence_level)
    tail = values[values >= dar]
    return float(np.mean(tail))


def drawdown_risk_metrics(drawdowns_pct: np.ndarray) -> Dict[str, float]:
    """
    DaR and ES at 95% and 99% confidence levels.

    Returns
    -------
    dict
        dar_95, dar_99, es_95, es_99.
    """
    return {
        "dar_95": compute_drawdown_at_risk(drawdowns_pct, 0.95),
        "dar_99": compute_drawdown_at_risk(drawdowns_pct, 0.99),
        "es_95": compute_drawdown_expected_shortfall(drawdowns_pct, 0.95),
        "es_99": compute_drawdown_expected_shortfall(drawdowns_pct, 0.99),
    }
