"""Intervention strategies and per-run epidemiological parameters."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class Strategy(Enum):
    """Limitation strategies that can be selected for a run."""
    NONE = "none"
    MASK = "mask"
    DISTANCING = "distancing"
    CURFEW = "curfew"
    LOCKDOWN = "lockdown"
    ISOLATE_INFECTED = "isolate_infected"


class MovementScenario(Enum):
    RANDOM_MOVEMENT = "random"
    ATTRACTIVE_PLACES = "attractive_places"


MAX_STRATEGIES = 3


@dataclass(frozen=True)
class PolicyConfig:
    """
    Everything the agents read about the current run.

    Built once when the run starts and shared by every component; frozen so
    that no tick can change the rules half-way through.
    """
    mask_mandate: bool = False
    distancing: bool = False
    lockdown: bool = False
    curfew: bool = False
    isolate_infected: bool = False

    mean_infection_prob: float = 0.0
    mean_recovery_prob: float = 1.0
    prob_healthy: float = 1.0
    prob_elderly: float = 0.0
    prob_docility: float = 1.0

    movement_scenario: MovementScenario = MovementScenario.RANDOM_MOVEMENT

    @classmethod
    def from_strategies(cls, strategies: Iterable[Strategy],
                        **params) -> "PolicyConfig":
        """OR-combine up to three strategy selections into the toggles."""
        selected = list(strategies)
        if len(selected) > MAX_STRATEGIES:
            raise ValueError(
                f"At most {MAX_STRATEGIES} strategies can be combined, "
                f"got {len(selected)}")
        return cls(
            mask_mandate=Strategy.MASK in selected,
            distancing=Strategy.DISTANCING in selected,
            lockdown=Strategy.LOCKDOWN in selected,
            curfew=Strategy.CURFEW in selected,
            isolate_infected=Strategy.ISOLATE_INFECTED in selected,
            **params
        )
