"""
Drawdown Statistics Module
==========================
Summarizes the distribution of per-trial drawdowns produced by the
Monte Carlo engine.

Mathematical Foundation:
    Mean:        d̄ = (1/n) Σ d_k
    Std dev:     s = sqrt(Σ (d_k - d̄)² / (n - 1))
    Mean CI:     d̄ ± t_{(1+c)/2, n-1} · s / √n
"""

import numpy as np
from scipy import stats
from typing import Dict, Tuple

from src.exceptions import InvalidArgumentError


def _as_array(drawdowns_pct) -> np.ndarray:
    values = np.asarray(drawdowns_pct, dtype=float)
    if values.size == 0:
        raise InvalidArgumentError("Cannot summarize an empty drawdown sample")
    return values


def mean_confidence_interval(
    drawdowns_pct: np.ndarray,
    confidence: float = 0.95,
) -> Tuple[float, float]:
    """
    Student-t confidence interval for the mean trial drawdown.

    Parameters
    ----------
    drawdowns_pct : np.ndarray
        Per-trial drawdowns in percent.
    confidence : float
        Two-sided confidence level (default: 0.95).

    Returns
    -------
    tuple[float, float]
        (lower, upper). Collapses to the mean when the sample has a
        single trial or no dispersion.
    """
    if not 0 < confidence < 1:
        raise InvalidArgumentError(f"confidence must lie in (0, 1), got {confidence}")

    values = _as_array(drawdowns_pct)
    mean = float(values.mean())
    n = values.size
    if n < 2:
        return mean, mean

    sem = float(stats.sem(values))
    if sem == 0:
        return mean, mean

    lower, upper = stats.t.interval(confidence, df=n - 1, loc=mean, scale=sem)
    return float(lower), float(upper)


def summarize_drawdowns(
    drawdowns_pct: np.ndarray,
    confidence: float = 0.95,
) -> Dict[str, float]:
    """
    Compute summary statistics of the trial drawdown distribution.

    Skewness > 0 is expected here: most trials lose little, a few lose a
    lot, and drawdowns are bounded below by zero.

    Parameters
    ----------
    drawdowns_pct : np.ndarray
        Per-trial drawdowns in percent.
    confidence : float
        Confidence level for the interval on the mean.

    Returns
    -------
    dict
        mean, median, std, min, max, skewness, excess_kurtosis,
        mean_ci_lower, mean_ci_upper, loss_probability, num_trials.
    """
    values = _as_array(drawdowns_pct)
    n = values.size

    std = float(values.std(ddof=1)) if n > 1 else 0.0
    if n > 2 and std > 0:
        skewness = float(stats.skew(values))
        excess_kurtosis = float(stats.kurtosis(values))
    else:
        skewness = 0.0
        excess_kurtosis = 0.0

    ci_lower, ci_upper = mean_confidence_interval(values, confidence)

    return {
        "mean": float(values.mean()),
        "median": float(np.median(values)),
        "std": std,
        "min": float(values.min()),
        "max": float(values.max()),
        "skewness": skewness,
        "excess_kurtosis": excess_kurtosis,
        "mean_ci_lower": ci_lower,
        "mean_ci_upper": ci_upper,
        "loss_probability": float(np.mean(values > 0)),
        "num_trials": n,
    }
