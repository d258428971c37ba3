"""State snapshot dataclasses for the epidemic CA simulation."""

from dataclasses import dataclass
from typing import List, Dict
import numpy as np


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent's state at a given tick."""
    agent_id: int
    x: int
    y: int
    status: str  # Status.value
    goal: str    # Goal.value
    has_mask: bool


@dataclass
class SimulationState:
    """Complete snapshot of simulation state at a given tick."""
    step: int
    agents: List[AgentSnapshot]
    grid_occupancy: np.ndarray  # Copy of occupancy grid
    metrics: Dict[str, float]   # status counts, deaths, infections, r0

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "step": self.step,
                "agent_id": a.agent_id,
                "x": a.x,
                "y": a.y,
                "status": a.status,
                "goal": a.goal,
                "has_mask": int(a.has_mask)
            }
            for a in self.agents
        ]
