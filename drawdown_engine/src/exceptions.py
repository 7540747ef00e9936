"""
Error Kinds
===========
Structured errors raised by the risk engine. All of them derive from
``RiskEngineError`` so a driver can report any engine failure in one place,
while each also inherits the closest built-in exception for callers that
only care about the generic kind.
"""


class RiskEngineError(Exception):
    """Base class for every error raised by the risk engine."""


class SymbolNotFoundError(RiskEngineError, KeyError):
    """A symbol was requested from a market that does not hold it."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(symbol)

    def __str__(self) -> str:
        return f"Symbol not found in market: {self.symbol!r}"


class InvalidArgumentError(RiskEngineError, ValueError):
    """A simulation parameter or model input is out of range."""


class InvalidPortfolioValueError(RiskEngineError, ArithmeticError):
    """The initial portfolio value cannot be used to normalize drawdown."""
