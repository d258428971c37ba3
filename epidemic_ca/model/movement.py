"""Goal-directed, policy-gated movement on the torus."""

from typing import List, Tuple, TYPE_CHECKING
import numpy as np

from .status import Goal

if TYPE_CHECKING:
    from .agent import Agent
    from .grid import GridWorld
    from .policy import PolicyConfig


Position = Tuple[int, int]

# Hours of the day (tick mod 24) during which a curfew keeps agents home
CURFEW_START = 22
CURFEW_END = 8


def in_curfew(tick: int) -> bool:
    hour = tick % 24
    return hour >= CURFEW_START or hour < CURFEW_END


def movement_allowed(policy: "PolicyConfig", tick: int) -> bool:
    if policy.lockdown:
        return False
    if policy.curfew and in_curfew(tick):
        return False
    return True


def goal_anchor(goal: Goal, width: int, height: int) -> Position:
    """Fixed cell an agent with ``goal`` heads for."""
    if goal == Goal.SCHOOL:
        return (0, 0)
    elif goal == Goal.SHOPPING:
        return (width - 1, height - 1)
    elif goal == Goal.HOSPITAL:
        return (width // 2, height // 2)
    raise ValueError(f"Goal {goal} has no anchor")


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def candidate_cells(position: Position, goal: Goal,
                    grid: "GridWorld") -> List[Position]:
    """
    Free neighbouring cells an agent may step to.

    A random walker may take any free neighbour. A goal-directed agent only
    takes steps whose change on each axis is either zero or towards its
    anchor, so it never moves away on either axis.
    """
    x, y = position
    if goal == Goal.RANDOM:
        return grid.free_neighbors(x, y)

    ax, ay = goal_anchor(goal, grid.width, grid.height)
    step_x, step_y = _sign(ax - x), _sign(ay - y)
    if step_x == 0 and step_y == 0:
        return []

    x_steps = (step_x, 0) if step_x else (0,)
    y_steps = (step_y, 0) if step_y else (0,)

    candidates = []
    for dx in x_steps:
        for dy in y_steps:
            if dx == 0 and dy == 0:
                continue
            target = grid.wrap(x + dx, y + dy)
            if grid.is_free(*target):
                candidates.append(target)
    return candidates


def choose_destination(candidates: List[Position],
                       grid: "GridWorld",
                       distancing: bool,
                       rng: np.random.Generator) -> Position:
    """
    Pick one cell among non-empty ``candidates``.

    With distancing, only the candidates with the fewest occupied neighbours
    stay in the draw.
    """
    if distancing:
        counts = [grid.neighbor_count(*c) for c in candidates]
        fewest = min(counts)
        candidates = [c for c, n in zip(candidates, counts) if n == fewest]

    # Shuffle to avoid always taking the same direction
    candidates = list(candidates)
    rng.shuffle(candidates)
    return candidates[0]


def compute_next_position(agent: "Agent", grid: "GridWorld",
                          policy: "PolicyConfig", tick: int,
                          rng: np.random.Generator) -> Position:
    """Where ``agent`` wants to be after this tick; its own cell if nowhere."""
    current = grid.location_of(agent)
    if not movement_allowed(policy, tick):
        return current

    candidates = candidate_cells(current, agent.goal, grid)
    if not candidates:
        return current
    return choose_destination(candidates, grid, policy.distancing, rng)
