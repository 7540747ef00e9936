"""
Price Model
===========
A single tradable instrument and its one-step stochastic price update.

Mathematical Foundation:
    Shock:     z ~ N(0, 1)
    Update:    P' = P · (1 + z · σ)
    Floor:     P' = max(P', 0.01)
    Rounding:  P' rounded half-up to 2 decimals (once per update)
"""

import math
import numbers
from typing import Optional, Protocol

from src.exceptions import InvalidArgumentError


# ─────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────
PRICE_FLOOR: float = 0.01
PRICE_DECIMALS: int = 2


class NormalSource(Protocol):
    """Anything that can draw one standard normal sample."""

    def standard_normal(self) -> float:
        ...


def validate_volatility(volatility: object) -> float:
    """Return ``volatility`` as a float, rejecting negative or non-finite values."""
    if isinstance(volatility, bool) or not isinstance(volatility, numbers.Real):
        raise InvalidArgumentError(f"volatility must be a number, got {volatility!r}")
    volatility = float(volatility)
    if not math.isfinite(volatility) or volatility < 0:
        raise InvalidArgumentError(
            f"volatility must be finite and non-negative, got {volatility!r}"
        )
    return volatility


def round_price(price: float) -> float:
    """
    Round a price half-up to two decimal places.

    Python's built-in ``round`` uses banker's rounding, which would bias
    prices that land exactly on a half cent downward half of the time.

    Parameters
    ----------
    price : float
        Unrounded price.

    Returns
    -------
    float
        Price with at most two decimal digits.
    """
    scale = 10 ** PRICE_DECIMALS
    return math.floor(price * scale + 0.5) / scale


class Instrument:
    """
    A tradable instrument identified by its symbol.

    Parameters
    ----------
    symbol : str
        Ticker symbol (unique key within a market).
    price : float
        Current price, must be positive and finite. Stored rounded to
        cents and no lower than the price floor.
    category : str, optional
        Free-form tag such as ``"tech"``. Carries no behaviour.
    """

    __slots__ = ("_symbol", "_price", "_category")

    def __init__(self, symbol: str, price: float, category: Optional[str] = None):
        if not symbol:
            raise InvalidArgumentError("Instrument symbol must be a non-empty string")
        price = float(price)
        if not math.isfinite(price) or price <= 0:
            raise InvalidArgumentError(
                f"Instrument price must be positive and finite, got {price!r} for {symbol}"
            )
        self._symbol = symbol
        # Prices are held in whole cents from the start.
        self._price = max(PRICE_FLOOR, round_price(price))
        self._category = category

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def price(self) -> float:
        return self._price

    @property
    def category(self) -> Optional[str]:
        return self._category

    def apply_stress(self, volatility: float, rng: NormalSource) -> None:
        """
        Apply one stochastic price update in place.

        Parameters
        ----------
        volatility : float
            Scale applied to the standard normal shock.
        rng : NormalSource
            Random source; one sample is drawn per call.
        """
        shock = float(rng.standard_normal())
        new_price = self._price * (1 + shock * volatility)
        new_price = max(PRICE_FLOOR, new_price)
        self._price = round_price(new_price)

    def copy(self) -> "Instrument":
        """Return an independent instrument with the same state."""
        return Instrument(self._symbol, self._price, self._category)

    def __repr__(self) -> str:
        tag = f", category={self._category!r}" if self._category else ""
        return f"Instrument({self._symbol!r}, {self._price}{tag})"
