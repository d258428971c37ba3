"""Toroidal occupancy grid for the epidemic CA simulation."""

import numpy as np
from typing import Dict, List, Optional, Set, Tuple, TYPE_CHECKING
from scipy.ndimage import convolve

if TYPE_CHECKING:
    from .agent import Agent


Position = Tuple[int, int]

# Moore neighbourhood, in enumeration order (x+1 column, x-1 column, then x)
MOORE_OFFSETS: List[Tuple[int, int]] = [
    (1, 0), (1, 1), (1, -1),
    (-1, 0), (-1, 1), (-1, -1),
    (0, 1), (0, -1),
]

_NEIGHBOR_KERNEL = np.array([
    [1, 1, 1],
    [1, 0, 1],
    [1, 1, 1],
], dtype=np.int32)


class GridError(Exception):
    """Base class for grid occupancy errors."""


class CellOccupiedError(GridError):
    """Raised when an agent is moved or placed onto a cell held by another."""


class GridFullError(GridError):
    """Raised when no free cell is left for a new agent."""


class GridWorld:
    """
    Fixed-size torus holding at most one agent per cell.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Both axes wrap, so every cell has exactly 8 distinct neighbours.
    """

    def __init__(self, width: int, height: int):
        if width < 3 or height < 3:
            raise ValueError(
                f"Grid must be at least 3x3, got {width}x{height}")
        self.width = width
        self.height = height

        # Occupancy: 0 = empty, positive int = agent_id
        self.occupancy = np.zeros((height, width), dtype=np.int32)

        self._agents: Dict[int, "Agent"] = {}
        self._positions: Dict[int, Position] = {}
        self._neighbor_counts: Optional[np.ndarray] = None

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    def wrap(self, x: int, y: int) -> Position:
        """Map any integer coordinate onto the torus."""
        return x % self.width, y % self.height

    def neighbors(self, x: int, y: int) -> List[Position]:
        """The 8 toroidal neighbours of (x, y)."""
        return [self.wrap(x + dx, y + dy) for dx, dy in MOORE_OFFSETS]

    def is_free(self, x: int, y: int) -> bool:
        x, y = self.wrap(x, y)
        return self.occupancy[y, x] == 0

    def free_neighbors(self, x: int, y: int) -> List[Position]:
        return [p for p in self.neighbors(x, y) if self.is_free(*p)]

    def occupant_at(self, x: int, y: int) -> Optional["Agent"]:
        x, y = self.wrap(x, y)
        agent_id = int(self.occupancy[y, x])
        if agent_id == 0:
            return None
        return self._agents[agent_id]

    def neighbor_agents(self, x: int, y: int) -> List["Agent"]:
        """Agents on the 8 neighbouring cells, in enumeration order."""
        found = []
        for nx, ny in self.neighbors(x, y):
            occupant = self.occupant_at(nx, ny)
            if occupant is not None:
                found.append(occupant)
        return found

    def location_of(self, agent: "Agent") -> Position:
        try:
            return self._positions[agent.id]
        except KeyError:
            raise GridError(f"Agent {agent.id} is not on the grid") from None

    def contains(self, agent: "Agent") -> bool:
        return agent.id in self._positions

    def place_agent(self, agent: "Agent", x: int, y: int) -> None:
        """Put an agent that is not yet on the grid onto a free cell."""
        x, y = self.wrap(x, y)
        if agent.id in self._positions:
            raise GridError(f"Agent {agent.id} is already on the grid")
        if self.occupancy[y, x] != 0:
            raise CellOccupiedError(
                f"Cell ({x}, {y}) already holds agent {self.occupancy[y, x]}")
        self.occupancy[y, x] = agent.id
        self._agents[agent.id] = agent
        self._positions[agent.id] = (x, y)
        agent.position = (x, y)
        self._neighbor_counts = None

    def remove_agent(self, agent: "Agent") -> None:
        x, y = self.location_of(agent)
        self.occupancy[y, x] = 0
        del self._agents[agent.id]
        del self._positions[agent.id]
        agent.position = None
        self._neighbor_counts = None

    def move_to(self, agent: "Agent", x: int, y: int) -> None:
        """Move an agent already on the grid; staying put is allowed."""
        x, y = self.wrap(x, y)
        old_x, old_y = self.location_of(agent)
        if (x, y) == (old_x, old_y):
            return
        if self.occupancy[y, x] != 0:
            raise CellOccupiedError(
                f"Cell ({x}, {y}) already holds agent {self.occupancy[y, x]}")
        self.occupancy[old_y, old_x] = 0
        self.occupancy[y, x] = agent.id
        self._positions[agent.id] = (x, y)
        agent.position = (x, y)
        self._neighbor_counts = None

    def neighbor_count_map(self) -> np.ndarray:
        """
        Number of occupied neighbours for every cell, wrapping at the edges.

        Cached until the next grid mutation, so a whole phase of read-only
        queries shares one convolution.
        """
        if self._neighbor_counts is None:
            occupied = (self.occupancy != 0).astype(np.int32)
            self._neighbor_counts = convolve(occupied, _NEIGHBOR_KERNEL,
                                             mode='wrap')
        return self._neighbor_counts

    def neighbor_count(self, x: int, y: int) -> int:
        x, y = self.wrap(x, y)
        return int(self.neighbor_count_map()[y, x])

    def random_empty_cell(self, rng: np.random.Generator,
                          attempts: int = 100) -> Position:
        """
        Pick a uniformly random free cell.

        Tries rejection sampling first and falls back to scanning the grid,
        raising GridFullError when every cell is taken.
        """
        for _ in range(attempts):
            x = int(rng.integers(0, self.width))
            y = int(rng.integers(0, self.height))
            if self.occupancy[y, x] == 0:
                return x, y

        ys, xs = np.nonzero(self.occupancy == 0)
        if len(xs) == 0:
            raise GridFullError(
                f"No free cell left on {self.width}x{self.height} grid")
        idx = int(rng.integers(0, len(xs)))
        return int(xs[idx]), int(ys[idx])

    def get_occupied_positions(self) -> Set[Position]:
        """Return set of all occupied cell positions."""
        ys, xs = np.where(self.occupancy != 0)
        return {(int(x), int(y)) for x, y in zip(xs, ys)}

    def agent_count(self) -> int:
        return len(self._positions)
