"""
Configuration
=============
Validated run configuration for the driver, loadable from YAML.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, PositiveInt, model_validator

from src.market import DEFAULT_PRICES
from src.monte_carlo import DEFAULT_NUM_SIMULATIONS, DEFAULT_SEED, DEFAULT_STEPS
from src.portfolio import DEFAULT_HOLDINGS
from src.stress_testing import (
    HIGH_RISK_THRESHOLD_PCT,
    NORMAL_SCENARIO,
    STRESS_SCENARIO,
    VolatilityScenario,
)


class SimulationConfig(BaseModel):
    num_simulations: PositiveInt = DEFAULT_NUM_SIMULATIONS
    steps: PositiveInt = DEFAULT_STEPS
    seed: Optional[int] = Field(default=DEFAULT_SEED, ge=0)
    workers: PositiveInt = 1


class ScenarioConfig(BaseModel):
    name: str
    volatility: float = Field(ge=0.0, allow_inf_nan=False)

    def to_scenario(self) -> VolatilityScenario:
        return VolatilityScenario(name=self.name, volatility=self.volatility)


class EngineConfig(BaseModel):
    prices: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_PRICES))
    holdings: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_HOLDINGS))
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    normal: ScenarioConfig = Field(
        default_factory=lambda: ScenarioConfig(
            name=NORMAL_SCENARIO.name, volatility=NORMAL_SCENARIO.volatility
        )
    )
    stress: ScenarioConfig = Field(
        default_factory=lambda: ScenarioConfig(
            name=STRESS_SCENARIO.name, volatility=STRESS_SCENARIO.volatility
        )
    )
    risk_threshold_pct: float = HIGH_RISK_THRESHOLD_PCT
    log_level: str = "INFO"
    json_logs: bool = False

    @model_validator(mode="after")
    def check_market_inputs(self) -> "EngineConfig":
        bad_prices = [s for s, p in self.prices.items() if p <= 0]
        if bad_prices:
            raise ValueError(f"prices must be positive: {bad_prices}")
        negative = [s for s, q in self.holdings.items() if q < 0]
        if negative:
            raise ValueError(f"holdings must be non-negative: {negative}")
        unpriced = sorted(set(self.holdings) - set(self.prices))
        if unpriced:
            raise ValueError(f"holdings reference unpriced symbols: {unpriced}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return json.loads(self.model_dump_json())


def load_config_from_yaml(path: Union[str, Path]) -> EngineConfig:
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return EngineConfig.model_validate(raw)
