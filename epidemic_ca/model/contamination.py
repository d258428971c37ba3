"""
Contamination, symptom and recovery probabilities.

A susceptible agent's risk for one tick is built from its infected
neighbours:

    p_i = probInf * symptom_factor_i * (mask_factor if i is masked)
    P   = mean(p_i) * (1 + 0.05 * (k - 1)) * (mask_factor if self is masked)

clamped to [0, 1], where k is the number of infected neighbours.
"""

from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .agent import Agent
    from .policy import PolicyConfig


FACTOR_WITH_MASK = 0.3
FACTOR_WITH_SYMPTOMS = 1.1
FACTOR_WITHOUT_SYMPTOMS = 0.9
CROWD_FACTOR = 0.05

PROB_WITH_SYMPTOMS = 0.5


@dataclass
class InfectedNeighbourhood:
    """Infected neighbours of one cell, split by symptoms and mask."""
    symptomatic_unmasked: List["Agent"] = field(default_factory=list)
    asymptomatic_unmasked: List["Agent"] = field(default_factory=list)
    symptomatic_masked: List["Agent"] = field(default_factory=list)
    asymptomatic_masked: List["Agent"] = field(default_factory=list)
    # All infected neighbours in enumeration order
    infected: List["Agent"] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.infected)

    def source(self) -> Optional["Agent"]:
        """
        Neighbour held responsible for an infection.

        Unmasked carriers are blamed before masked ones, and within each
        group symptomatic before asymptomatic.
        """
        for bucket in (self.symptomatic_unmasked,
                       self.asymptomatic_unmasked,
                       self.symptomatic_masked,
                       self.asymptomatic_masked):
            if bucket:
                return bucket[0]
        return None


def classify_neighbors(neighbors: List["Agent"]) -> InfectedNeighbourhood:
    hood = InfectedNeighbourhood()
    for other in neighbors:
        if other.status is Status.INFECTED_WITH_SYMPTOMS:
            bucket = (hood.symptomatic_masked if other.has_mask
                      else hood.symptomatic_unmasked)
        elif other.status is Status.INFECTED_WITHOUT_SYMPTOMS:
            bucket = (hood.asymptomatic_masked if other.has_mask
                      else hood.asymptomatic_unmasked)
        else:
            continue
        bucket.append(other)
        hood.infected.append(other)
    return hood


def neighbor_contamination_prob(carrier: "Agent",
                                mean_infection_prob: float) -> float:
    """Probability that one infected carrier passes the virus on."""
    if carrier.status is Status.INFECTED_WITH_SYMPTOMS:
        prob = mean_infection_prob * FACTOR_WITH_SYMPTOMS
    else:
        prob = mean_infection_prob * FACTOR_WITHOUT_SYMPTOMS
    if carrier.has_mask:
        prob *= FACTOR_WITH_MASK
    return prob


def contamination_probability(agent: "Agent",
                              hood: InfectedNeighbourhood,
                              policy: "PolicyConfig") -> float:
    """Probability that ``agent`` gets infected this tick, in [0, 1]."""
    k = hood.count
    if k == 0:
        return 0.0

    total = sum(neighbor_contamination_prob(c, policy.mean_infection_prob)
                for c in hood.infected)
    prob = total / k
    prob *= 1 + CROWD_FACTOR * (k - 1)

    if agent.has_mask:
        prob *= FACTOR_WITH_MASK

    return min(max(prob, 0.0), 1.0)


def symptomatic_probability(age: int, at_risk: bool) -> float:
    """Probability that a fresh infection shows symptoms."""
    prob = PROB_WITH_SYMPTOMS
    if age > 65:
        prob *= 1.2 if age < 75 else 1.4
    if at_risk:
        prob *= 1.2
    return min(prob, 1.0)


def recovery_probability(age: int, at_risk: bool,
                         mean_recovery_prob: float) -> float:
    """Probability that a symptomatic agent recovers rather than dies."""
    prob = mean_recovery_prob
    if age > 65:
        prob *= 0.8 if age < 75 else 0.7
    if at_risk:
        prob *= 0.8
    return prob
