"""Run-level epidemic counters."""

from typing import Iterable, List, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .agent import Agent


class StatisticsCollector:
    """
    Counts deaths and infections and keeps the data for an R0 estimate.

    Each infected agent counts the susceptible agents it infected. When the
    infected agent is discarded (it recovered or died) its count is moved
    here, and R0 is the mean over those finished infections.
    """

    def __init__(self):
        self.total_deaths = 0
        self.total_infections = 0
        self.finished_contaminations: List[int] = []

    def reset(self) -> None:
        self.total_deaths = 0
        self.total_infections = 0
        self.finished_contaminations = []

    def record_transition(self, old: "Agent", new: "Agent") -> None:
        """Book a status change where ``new`` replaces ``old``."""
        if old.is_infected:
            self.finished_contaminations.append(old.contamination_count)
        if new.is_infected and not old.is_infected:
            self.total_infections += 1
        if new.status is Status.DECEASED:
            self.total_deaths += 1

    def reproduction_number(self) -> float:
        """Mean number of infections caused per finished infection."""
        if not self.finished_contaminations:
            return 0.0
        return sum(self.finished_contaminations) / len(self.finished_contaminations)

    def total_contaminations(self, agents: Iterable["Agent"]) -> int:
        """Infections attributed so far, to finished and live carriers."""
        live = sum(a.contamination_count for a in agents if a.is_infected)
        return sum(self.finished_contaminations) + live
