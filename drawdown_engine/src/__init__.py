"""
Monte Carlo Drawdown Risk Engine
================================
Portfolio stress model implementing:
- Per-instrument Gaussian daily price shocks with a price floor
- Independent market clones per simulation trial
- Maximum drawdown aggregation across trials
- Drawdown distribution statistics and Drawdown-at-Risk
- Normal vs. stress volatility scenarios with risk classification
"""

__version__ = "1.0.0"
