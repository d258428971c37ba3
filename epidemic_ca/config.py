"""Configuration dataclasses and YAML loader for the epidemic CA simulation."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from pathlib import Path
import yaml

from epidemic_ca.model.policy import (
    MAX_STRATEGIES,
    MovementScenario,
    PolicyConfig,
    Strategy,
)


@dataclass
class GridConfig:
    width: int
    height: int


@dataclass
class PopulationConfig:
    susceptible: int
    infected: int


@dataclass
class EpidemicConfig:
    prob_inf: float           # mean infection probability
    prob_rec: float           # mean recovery probability
    prob_healthy: float = 1.0   # 1 - probability of being at risk
    prob_elderly: float = 0.0   # probability of an age in [65, 120)
    prob_docility: float = 1.0  # probability of obeying a mask mandate


@dataclass
class PolicySettings:
    movement_scenario: MovementScenario = MovementScenario.RANDOM_MOVEMENT
    strategies: List[Strategy] = field(default_factory=list)


@dataclass
class SimulationConfig:
    grid: GridConfig
    population: PopulationConfig
    epidemic: EpidemicConfig
    policy: PolicySettings = field(default_factory=PolicySettings)
    max_steps: int = 720

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    curve_enabled: bool = True
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))

    def build_policy(self) -> PolicyConfig:
        """Freeze the intervention toggles and probabilities for one run."""
        return PolicyConfig.from_strategies(
            self.policy.strategies,
            mean_infection_prob=self.epidemic.prob_inf,
            mean_recovery_prob=self.epidemic.prob_rec,
            prob_healthy=self.epidemic.prob_healthy,
            prob_elderly=self.epidemic.prob_elderly,
            prob_docility=self.epidemic.prob_docility,
            movement_scenario=self.policy.movement_scenario
        )


def _parse_strategies(strategies_raw: Optional[List[str]]) -> List[Strategy]:
    """Parse up to three strategy names from raw YAML data."""
    strategies = []
    for name in strategies_raw or []:
        try:
            strategy = Strategy(str(name).lower())
        except ValueError:
            known = ", ".join(s.value for s in Strategy)
            raise ValueError(
                f"Unknown strategy: {name} (expected one of {known})") from None
        strategies.append(strategy)
    if len(strategies) > MAX_STRATEGIES:
        raise ValueError(
            f"At most {MAX_STRATEGIES} strategies allowed, got {len(strategies)}")
    return strategies


def _parse_scenario(name: Optional[str]) -> MovementScenario:
    if name is None:
        return MovementScenario.RANDOM_MOVEMENT
    try:
        return MovementScenario(str(name).lower())
    except ValueError:
        raise ValueError(f"Unknown movement scenario: {name}") from None


def parse_config(raw: Dict[str, Any]) -> SimulationConfig:
    """Build a SimulationConfig from an already parsed mapping."""
    grid = GridConfig(
        width=raw['grid']['width'],
        height=raw['grid']['height']
    )

    pop_raw = raw['population']
    population = PopulationConfig(
        susceptible=pop_raw.get('susceptible', 0),
        infected=pop_raw.get('infected', 0)
    )

    epi_raw = raw['epidemic']
    epidemic = EpidemicConfig(
        prob_inf=epi_raw['prob_inf'],
        prob_rec=epi_raw['prob_rec'],
        prob_healthy=epi_raw.get('prob_healthy', 1.0),
        prob_elderly=epi_raw.get('prob_elderly', 0.0),
        prob_docility=epi_raw.get('prob_docility', 1.0)
    )

    # Parse policy (optional)
    policy_raw = raw.get('policy') or {}
    policy = PolicySettings(
        movement_scenario=_parse_scenario(policy_raw.get('movement_scenario')),
        strategies=_parse_strategies(policy_raw.get('strategies'))
    )

    sim_raw = raw.get('simulation') or {}
    export_raw = raw.get('export') or {}

    return SimulationConfig(
        grid=grid,
        population=population,
        epidemic=epidemic,
        policy=policy,
        max_steps=sim_raw.get('max_steps', 720),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False),
        curve_enabled=export_raw.get('curve', True),
        seed=sim_raw.get('seed')
    )


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    return parse_config(raw)
