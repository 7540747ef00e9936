from __future__ import annotations

import pytest

from src.market import Market
from src.portfolio import DEFAULT_HOLDINGS, Portfolio


class ConstantNormal:
    """Random source that always returns the same sample."""

    def __init__(self, value: float = 0.0) -> None:
        self.value = value
        self.calls = 0

    def standard_normal(self) -> float:
        self.calls += 1
        return self.value


@pytest.fixture
def constant_rng():
    return ConstantNormal


@pytest.fixture
def three_stock_market() -> Market:
    return Market({"AAPL": 185.0, "GOOG": 135.0, "TSLA": 240.0}, seed=0)


@pytest.fixture
def default_portfolio() -> Portfolio:
    return Portfolio(DEFAULT_HOLDINGS)
