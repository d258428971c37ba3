"""Simulation engine for the epidemic CA."""

import logging
import numpy as np
from typing import List, Dict, Tuple, Optional, TYPE_CHECKING

from .grid import GridWorld, GridError
from .agent import Agent
from .status import Status, Goal
from .policy import MovementScenario
from .movement import compute_next_position
from .statistics import StatisticsCollector
from .state import SimulationState, AgentSnapshot

if TYPE_CHECKING:
    from ..config import SimulationConfig


logger = logging.getLogger(__name__)

MAX_AGE = 120
ELDERLY_AGE = 65


class SimulationEngine:
    """
    Orchestrates the discrete-time simulation loop.

    One tick is one simulated hour. An orchestrator drives it as:
    1. begin_tick: advance the clock
    2. compute_next_status over every agent: next status and desired cell,
       read-only
    3. compute_next_position_and_apply over the same agents: move, and swap
       in the successor agent when the status changed
    4. end_tick: commit successors and removals to ``agents``

    Phase 2 only starts once phase 1 has run for the whole population, so no
    agent sees another agent's update from the same tick. step() runs all
    four in order.
    """

    def __init__(self, config: "SimulationConfig",
                 statistics: Optional[StatisticsCollector] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config
        self.current_step = 0
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.policy = config.build_policy()
        self.statistics = (statistics if statistics is not None
                           else StatisticsCollector())

        self.grid = GridWorld(config.grid.width, config.grid.height)

        self.agents: List[Agent] = []
        # agent id -> successor (or None) recorded during phase 2
        self._replacements: Dict[int, Optional[Agent]] = {}
        self._next_id = 1
        self._seed_population()

    def _new_id(self) -> int:
        agent_id = self._next_id
        self._next_id += 1
        return agent_id

    def _draw_age(self) -> int:
        if self.rng.random() < self.policy.prob_elderly:
            return int(self.rng.integers(ELDERLY_AGE, MAX_AGE))
        return int(self.rng.integers(0, ELDERLY_AGE))

    def _draw_mask(self) -> bool:
        """Only agents docile enough wear a mandated mask."""
        if not self.policy.mask_mandate:
            return False
        return bool(self.rng.random() < self.policy.prob_docility)

    def _draw_goal(self) -> Goal:
        if self.policy.movement_scenario == MovementScenario.ATTRACTIVE_PLACES:
            return Goal.SCHOOL if self.rng.random() < 0.5 else Goal.SHOPPING
        return Goal.RANDOM

    def _seed_population(self) -> None:
        """Create and place the initial susceptible and infected agents."""
        population = self.config.population

        for nb in range(population.susceptible):
            age = self._draw_age()
            at_risk = bool(self.rng.random() > self.policy.prob_healthy)
            goal = self._draw_goal()
            has_mask = self._draw_mask()
            agent = Agent(self._new_id(), Status.SUSCEPTIBLE, goal=goal,
                          age=age, at_risk=at_risk, has_mask=has_mask)
            # Counters are reset along with the first susceptible agent
            if nb == 0:
                self.statistics.reset()
            try:
                self.add_agent(agent)
            except GridError as e:
                logger.warning("Could not place susceptible agent %d: %s",
                               agent.id, e)

        for nb in range(population.infected):
            age = self._draw_age()
            at_risk = bool(self.rng.random() > self.policy.prob_healthy)
            goal = Goal.HOSPITAL if self.policy.isolate_infected else Goal.RANDOM
            has_mask = self._draw_mask()
            agent = Agent(self._new_id(), Status.INFECTED_WITH_SYMPTOMS,
                          goal=goal, age=age, at_risk=at_risk,
                          has_mask=has_mask)
            try:
                self.add_agent(agent)
            except GridError as e:
                logger.warning("Could not place infected agent %d: %s",
                               agent.id, e)

        logger.info("Seeded %d agents on a %dx%d grid",
                    len(self.agents), self.grid.width, self.grid.height)

    def add_agent(self, agent: Agent,
                  position: Optional[Tuple[int, int]] = None) -> Agent:
        """Place an agent on the grid (randomly if no position given)."""
        if position is None:
            position = self.grid.random_empty_cell(self.rng)
        self.grid.place_agent(agent, *position)
        self.agents.append(agent)
        return agent

    def create_agent(self, status: Status,
                     position: Optional[Tuple[int, int]] = None,
                     **attributes) -> Agent:
        """Build an agent with a fresh id and add it to the run."""
        agent = Agent(self._new_id(), status, **attributes)
        return self.add_agent(agent, position)

    def compute_next_status(self, agent: Agent) -> None:
        """Phase 1: decide next status and desired cell without mutating the grid."""
        position = self.grid.location_of(agent)
        neighbors = (self.grid.neighbor_agents(*position)
                     if agent.status is Status.SUSCEPTIBLE else [])
        agent.compute_next_status(neighbors, self.policy, self.rng)

        if agent.status is Status.DECEASED:
            agent.next_position = position
        else:
            agent.next_position = compute_next_position(
                agent, self.grid, self.policy, self.current_step, self.rng)

    def compute_next_position_and_apply(self, agent: Agent) -> Optional[Agent]:
        """
        Phase 2: move the agent and apply its status change.

        Returns the agent now standing for it (``agent`` itself, its
        successor, or None when a deceased agent disappears). A desired cell
        taken earlier in this phase leaves the agent where it is. The grid is
        updated at once; ``agents`` follows at end_tick().
        """
        if agent.is_expired:
            self.grid.remove_agent(agent)
            self._replacements[agent.id] = None
            return None

        current = self.grid.location_of(agent)
        target = agent.next_position or current
        if target != current and not self.grid.is_free(*target):
            target = current
        agent.next_position = None

        if not agent.changes_status:
            self.grid.move_to(agent, *target)
            return agent

        successor = agent.successor(self._new_id(), self.policy)
        self.grid.remove_agent(agent)
        self.grid.place_agent(successor, *target)
        self._replacements[agent.id] = successor
        self.statistics.record_transition(agent, successor)
        logger.debug("Tick %d: agent %d %s -> agent %d %s",
                     self.current_step, agent.id, agent.status.value,
                     successor.id, successor.status.value)
        return successor

    def begin_tick(self) -> int:
        """Advance the clock by one hour and return the new tick number."""
        self.current_step += 1
        self._replacements = {}
        return self.current_step

    def end_tick(self) -> None:
        """Rebuild the agent list from the successors recorded in phase 2."""
        if not self._replacements:
            return
        agents = []
        for agent in self.agents:
            replacement = self._replacements.get(agent.id, agent)
            if replacement is not None:
                agents.append(replacement)
        self.agents = agents
        self._replacements = {}

    def step(self) -> SimulationState:
        """
        Execute one tick.

        1. Advance the clock
        2. Phase 1 over every agent
        3. Phase 2 over the same agents, in the same order
        4. Commit the new population and return a state snapshot
        """
        self.begin_tick()
        population = list(self.agents)

        for agent in population:
            self.compute_next_status(agent)

        for agent in population:
            self.compute_next_position_and_apply(agent)

        self.end_tick()
        return self._create_state_snapshot()

    def status_counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in Status}
        for agent in self.agents:
            counts[agent.status.value] += 1
        return counts

    def _create_state_snapshot(self) -> SimulationState:
        """Create immutable snapshot of current simulation state."""
        agent_snapshots = [
            AgentSnapshot(
                agent_id=a.id,
                x=a.position[0],
                y=a.position[1],
                status=a.status.value,
                goal=a.goal.value,
                has_mask=a.has_mask
            )
            for a in self.agents
        ]

        counts = self.status_counts()
        metrics = dict(counts)
        metrics.update({
            'infected': (counts[Status.INFECTED_WITH_SYMPTOMS.value] +
                         counts[Status.INFECTED_WITHOUT_SYMPTOMS.value]),
            'total_agents': len(self.agents),
            'total_deaths': self.statistics.total_deaths,
            'total_infections': self.statistics.total_infections,
            'r0': self.statistics.reproduction_number(),
        })

        return SimulationState(
            step=self.current_step,
            agents=agent_snapshots,
            grid_occupancy=self.grid.occupancy.copy(),
            metrics=metrics
        )

    def snapshot(self) -> SimulationState:
        return self._create_state_snapshot()

    def is_finished(self) -> bool:
        """Stop at max_steps, or once nobody is infected any more."""
        return (self.current_step >= self.config.max_steps or
                not any(a.is_infected for a in self.agents))

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        counts = self.status_counts()
        return {
            'total_steps': self.current_step,
            'total_infections': self.statistics.total_infections,
            'total_deaths': self.statistics.total_deaths,
            'r0': self.statistics.reproduction_number(),
            'status_counts': counts,
        }
