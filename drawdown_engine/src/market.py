"""
Market Module
=============
Holds the tradable instruments keyed by symbol and applies one simulated
day of price stress to all of them at once.

Each market carries its own random source so that cloned markets used by
independent simulation trials never share a random stream.
"""

import numpy as np
import pandas as pd
from typing import Dict, Iterator, List, Mapping, Optional

from src.exceptions import SymbolNotFoundError
from src.instrument import Instrument, validate_volatility


# ─────────────────────────────────────────────────────────────
# Default Fixture
# ─────────────────────────────────────────────────────────────
DEFAULT_PRICES: Dict[str, float] = {
    "AAPL": 185.0,
    "GOOG": 135.0,
    "TSLA": 240.0,
    "AMZN": 145.0,
}

DEFAULT_CATEGORIES: Dict[str, str] = {
    "AAPL": "tech",
    "GOOG": "tech",
    "TSLA": "tech",
    "AMZN": "tech",
}


class Market:
    """
    Collection of instruments with a market-local random source.

    Parameters
    ----------
    prices : mapping, optional
        Symbol -> starting price. Defaults to ``DEFAULT_PRICES``.
    rng : np.random.Generator, optional
        Random source used by ``apply_stress``.
    seed : int, optional
        Seed for a fresh generator when ``rng`` is not given.
    categories : mapping, optional
        Symbol -> category tag. Defaults to ``DEFAULT_CATEGORIES`` when the
        default fixture is used.
    """

    def __init__(
        self,
        prices: Optional[Mapping[str, float]] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        categories: Optional[Mapping[str, str]] = None,
    ):
        if prices is None:
            prices = DEFAULT_PRICES
            if categories is None:
                categories = DEFAULT_CATEGORIES
        categories = categories or {}

        self._instruments: Dict[str, Instrument] = {
            symbol: Instrument(symbol, price, categories.get(symbol))
            for symbol, price in prices.items()
        }
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    @classmethod
    def _from_instruments(
        cls, instruments: Dict[str, Instrument], rng: np.random.Generator
    ) -> "Market":
        market = cls.__new__(cls)
        market._instruments = instruments
        market._rng = rng
        return market

    # ── Read access ───────────────────────────────────────────

    def get(self, symbol: str) -> Instrument:
        """
        Look up an instrument by symbol.

        Raises
        ------
        SymbolNotFoundError
            If the market holds no instrument for ``symbol``.
        """
        try:
            return self._instruments[symbol]
        except KeyError:
            raise SymbolNotFoundError(symbol) from None

    @property
    def symbols(self) -> List[str]:
        return list(self._instruments)

    def prices(self) -> pd.Series:
        """Snapshot of current prices indexed by symbol."""
        return pd.Series(
            {s: inst.price for s, inst in self._instruments.items()},
            name="price",
            dtype=float,
        )

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._instruments

    def __iter__(self) -> Iterator[Instrument]:
        return iter(self._instruments.values())

    def __len__(self) -> int:
        return len(self._instruments)

    # ── Mutation ──────────────────────────────────────────────

    def apply_stress(self, volatility: float) -> None:
        """
        Apply one simulated day of stress to every instrument.

        Each instrument receives an independent standard normal shock
        drawn from the market's own generator.

        Parameters
        ----------
        volatility : float
            Shock scale (e.g. 0.02 for a normal day, 0.05 for stress).

        Raises
        ------
        InvalidArgumentError
            If ``volatility`` is negative or not finite. No instrument
            is touched in that case.
        """
        volatility = validate_volatility(volatility)
        for instrument in self._instruments.values():
            instrument.apply_stress(volatility, self._rng)

    def clone(self, rng: Optional[np.random.Generator] = None) -> "Market":
        """
        Deep copy of the market with an independent random source.

        Parameters
        ----------
        rng : np.random.Generator, optional
            Generator for the clone. When omitted, a child stream is
            spawned from this market's generator.

        Returns
        -------
        Market
            Market with identical prices and no shared mutable state.
        """
        if rng is None:
            rng = self._rng.spawn(1)[0]
        instruments = {s: inst.copy() for s, inst in self._instruments.items()}
        return Market._from_instruments(instruments, rng)

    def __repr__(self) -> str:
        body = ", ".join(f"{s}={i.price}" for s, i in self._instruments.items())
        return f"Market({body})"
