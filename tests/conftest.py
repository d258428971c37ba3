"""
Shared fixtures for the epidemic CA tests.

Most tests build an engine with an empty population and place agents by
hand, so that every neighbour relation is known in advance.
"""

import numpy as np
import pytest

from epidemic_ca.config import (
    EpidemicConfig,
    GridConfig,
    PolicySettings,
    PopulationConfig,
    SimulationConfig,
)
from epidemic_ca.model.policy import MovementScenario, PolicyConfig


class ScriptedRNG:
    """
    Generator stand-in whose ``random()`` returns queued values first.

    Everything else (and ``random()`` once the queue is empty) is served by
    a seeded numpy generator.
    """

    def __init__(self, values=(), seed=0):
        self.values = list(values)
        self._rng = np.random.default_rng(seed)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self._rng.random()

    def integers(self, *args, **kwargs):
        return self._rng.integers(*args, **kwargs)

    def shuffle(self, x):
        self._rng.shuffle(x)


@pytest.fixture
def scripted_rng():
    return ScriptedRNG


@pytest.fixture
def make_config():
    """Factory for SimulationConfig with small-test defaults."""
    def _make(width=10, height=10, susceptible=0, infected=0,
              prob_inf=0.0, prob_rec=1.0, prob_healthy=1.0,
              prob_elderly=0.0, prob_docility=1.0,
              strategies=(), scenario=MovementScenario.RANDOM_MOVEMENT,
              max_steps=100, seed=0):
        return SimulationConfig(
            grid=GridConfig(width=width, height=height),
            population=PopulationConfig(susceptible=susceptible,
                                        infected=infected),
            epidemic=EpidemicConfig(
                prob_inf=prob_inf,
                prob_rec=prob_rec,
                prob_healthy=prob_healthy,
                prob_elderly=prob_elderly,
                prob_docility=prob_docility
            ),
            policy=PolicySettings(movement_scenario=scenario,
                                  strategies=list(strategies)),
            max_steps=max_steps,
            seed=seed
        )
    return _make


@pytest.fixture
def policy():
    """Default run rules: no intervention, certain infection and recovery."""
    return PolicyConfig(mean_infection_prob=1.0, mean_recovery_prob=1.0)
