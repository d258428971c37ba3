"""Model package for the epidemic CA simulation."""

from .state import AgentSnapshot, SimulationState
from .grid import GridWorld, GridError, CellOccupiedError, GridFullError
from .status import Status, Goal, status_color
from .policy import PolicyConfig, Strategy, MovementScenario
from .agent import Agent
from .statistics import StatisticsCollector
from .engine import SimulationEngine

__all__ = [
    'AgentSnapshot',
    'SimulationState',
    'GridWorld',
    'GridError',
    'CellOccupiedError',
    'GridFullError',
    'Status',
    'Goal',
    'status_color',
    'PolicyConfig',
    'Strategy',
    'MovementScenario',
    'Agent',
    'StatisticsCollector',
    'SimulationEngine',
]
