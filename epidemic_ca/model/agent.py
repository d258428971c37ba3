"""Agent state machine for the epidemic CA simulation."""

from typing import Dict, List, Optional, Tuple, TYPE_CHECKING
import numpy as np

from .status import Status, Goal
from .contamination import (
    classify_neighbors,
    contamination_probability,
    recovery_probability,
    symptomatic_probability,
)

if TYPE_CHECKING:
    from .policy import PolicyConfig


# Ticks from infection to recovery (or death)
INFECTION_DURATION: Dict[Status, int] = {
    Status.INFECTED_WITH_SYMPTOMS: 14,
    Status.INFECTED_WITHOUT_SYMPTOMS: 7,
}

# Ticks a deceased agent stays on the grid before it disappears
DECEASED_DISPLAY_TICKS = 3


class Agent:
    """
    One person on the grid.

    The status is a plain tag. An agent never changes its own status: when
    ``next_status`` differs from ``status`` the engine discards this agent and
    puts ``successor()`` in its place, so a new identity starts with every
    transition.

    Lifecycle:
        SUSCEPTIBLE -> INFECTED_WITH_SYMPTOMS    -> RECOVERED | DECEASED
                    -> INFECTED_WITHOUT_SYMPTOMS -> RECOVERED
    """

    def __init__(self, agent_id: int,
                 status: Status,
                 goal: Goal = Goal.RANDOM,
                 age: int = 0,
                 at_risk: bool = False,
                 has_mask: bool = False):
        self.id = agent_id
        self.status = status
        self.goal = goal
        self.age = age
        self.at_risk = at_risk
        self.has_mask = has_mask

        # Maintained by GridWorld
        self.position: Optional[Tuple[int, int]] = None

        # Scratch fields, valid between the two phases of a tick
        self.next_status = status
        self.next_position: Optional[Tuple[int, int]] = None

        # Infected agents only
        self.infection_ticks = 0
        self.contamination_count = 0

        # Deceased agents only
        self.ticks_remaining = (DECEASED_DISPLAY_TICKS
                                if status is Status.DECEASED else 0)

    @property
    def is_infected(self) -> bool:
        return self.status.is_infected

    @property
    def changes_status(self) -> bool:
        return self.next_status is not self.status

    @property
    def is_expired(self) -> bool:
        """A deceased agent whose display time is over."""
        return self.status is Status.DECEASED and self.ticks_remaining <= 0

    def record_contamination(self) -> None:
        self.contamination_count += 1

    def compute_next_status(self, neighbors: List["Agent"],
                            policy: "PolicyConfig",
                            rng: np.random.Generator) -> Status:
        """Phase 1: decide the status for the next tick from the neighbours."""
        if self.status is Status.SUSCEPTIBLE:
            self.next_status = self._next_status_susceptible(
                neighbors, policy, rng)
        elif self.status is Status.INFECTED_WITH_SYMPTOMS:
            self.next_status = self._next_status_symptomatic(policy, rng)
        elif self.status is Status.INFECTED_WITHOUT_SYMPTOMS:
            self.next_status = self._next_status_asymptomatic()
        elif self.status is Status.RECOVERED:
            self.next_status = Status.RECOVERED
        elif self.status is Status.DECEASED:
            self.ticks_remaining -= 1
            self.next_status = Status.DECEASED
        else:
            raise ValueError(f"Unknown status: {self.status}")
        return self.next_status

    def _next_status_susceptible(self, neighbors: List["Agent"],
                                 policy: "PolicyConfig",
                                 rng: np.random.Generator) -> Status:
        hood = classify_neighbors(neighbors)
        if hood.count == 0:
            return Status.SUSCEPTIBLE

        prob = contamination_probability(self, hood, policy)
        if rng.random() >= prob:
            return Status.SUSCEPTIBLE

        hood.source().record_contamination()

        if rng.random() < symptomatic_probability(self.age, self.at_risk):
            return Status.INFECTED_WITH_SYMPTOMS
        return Status.INFECTED_WITHOUT_SYMPTOMS

    def _next_status_symptomatic(self, policy: "PolicyConfig",
                                 rng: np.random.Generator) -> Status:
        self.infection_ticks += 1
        if self.infection_ticks != INFECTION_DURATION[self.status]:
            return self.status

        prob = recovery_probability(self.age, self.at_risk,
                                    policy.mean_recovery_prob)
        if rng.random() < prob:
            return Status.RECOVERED
        return Status.DECEASED

    def _next_status_asymptomatic(self) -> Status:
        self.infection_ticks += 1
        if self.infection_ticks == INFECTION_DURATION[self.status]:
            return Status.RECOVERED
        return self.status

    def successor(self, agent_id: int, policy: "PolicyConfig") -> "Agent":
        """Build the agent that replaces this one once it changes status."""
        status = self.next_status
        if status.is_infected:
            goal = Goal.HOSPITAL if policy.isolate_infected else self.goal
        else:
            # Recovered and deceased agents have nowhere in particular to go
            goal = Goal.RANDOM
        return Agent(agent_id, status, goal=goal, age=self.age,
                     at_risk=self.at_risk, has_mask=self.has_mask)

    def __repr__(self) -> str:
        return (f"Agent(id={self.id}, pos={self.position}, "
                f"status={self.status.value})")
