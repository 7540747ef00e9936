"""
Portfolio Construction Module
=============================
Immutable record of share holdings and its valuation summary against a
market snapshot.

Mathematical Foundation:
    Position value:   V_i = P_i · q_i
    Portfolio value:  V   = Σ_i P_i · q_i
    Weight:           w_i = V_i / V
"""

import numbers
import warnings
from types import MappingProxyType
from typing import Dict, Mapping

import numpy as np
import pandas as pd

from src.exceptions import InvalidArgumentError
from src.market import Market


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
DEFAULT_HOLDINGS: Dict[str, int] = {
    "AAPL": 50,
    "GOOG": 10,
    "TSLA": 20,
}

REFERENCE_CAPITAL: float = 100_000.0


def _validate_quantity(symbol: str, quantity: object) -> int:
    """
    Coerce a holding quantity to a non-negative ``int``.

    Integral floats (e.g. ``50.0`` read from a config file) are accepted
    with a warning; fractional, negative or boolean quantities are rejected.
    """
    if isinstance(quantity, bool):
        raise InvalidArgumentError(
            f"Quantity for {symbol} must be an integer, got {quantity!r}"
        )
    if isinstance(quantity, numbers.Integral):
        value = int(quantity)
    elif isinstance(quantity, numbers.Real) and float(quantity).is_integer():
        warnings.warn(
            f"Quantity for {symbol} given as {quantity!r}; coercing to int.",
            UserWarning,
            stacklevel=3,
        )
        value = int(quantity)
    else:
        raise InvalidArgumentError(
            f"Quantity for {symbol} must be an integer, got {quantity!r}"
        )

    if value < 0:
        raise InvalidArgumentError(
            f"Quantity for {symbol} must be non-negative, got {value}"
        )
    return value


class Portfolio:
    """
    Read-only mapping of symbol -> share quantity.

    Parameters
    ----------
    holdings : mapping
        Symbol -> non-negative integer quantity. The mapping is copied, so
        later changes to the caller's dict do not leak in.

    Raises
    ------
    InvalidArgumentError
        If a symbol is empty or a quantity is negative or fractional.
    """

    __slots__ = ("_holdings",)

    def __init__(self, holdings: Mapping[str, int]):
        validated: Dict[str, int] = {}
        for symbol, quantity in holdings.items():
            if not symbol:
                raise InvalidArgumentError("Holding symbol must be a non-empty string")
            validated[symbol] = _validate_quantity(symbol, quantity)
        self._holdings = MappingProxyType(validated)

    @property
    def holdings(self) -> Mapping[str, int]:
        return self._holdings

    @property
    def reference_capital(self) -> float:
        # Not used by the drawdown computation.
        return REFERENCE_CAPITAL

    def __len__(self) -> int:
        return len(self._holdings)

    def __repr__(self) -> str:
        return f"Portfolio({dict(self._holdings)!r})"


def get_portfolio_summary(portfolio: Portfolio, market: Market) -> pd.DataFrame:
    """
    Value each position against the current market prices.

    Parameters
    ----------
    portfolio : Portfolio
        Holdings to value.
    market : Market
        Market supplying prices. Every held symbol must be present.

    Returns
    -------
    pd.DataFrame
        Indexed by symbol with columns: quantity, price, market_value,
        weight. Weights are 0 when the portfolio is worth nothing.

    Raises
    ------
    SymbolNotFoundError
        If a held symbol is missing from the market.
    """
    rows = []
    for symbol, quantity in portfolio.holdings.items():
        price = market.get(symbol).price
        rows.append(
            {
                "symbol": symbol,
                "quantity": quantity,
                "price": price,
                "market_value": price * quantity,
            }
        )

    summary = pd.DataFrame(
        rows, columns=["symbol", "quantity", "price", "market_value"]
    ).set_index("symbol")

    total = summary["market_value"].sum()
    summary["weight"] = (
        summary["market_value"] / total if total > 0 else np.zeros(len(summary))
    )

    return summary
