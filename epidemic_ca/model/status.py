"""Epidemiological status and movement goal enums, plus display colours."""

from enum import Enum
from typing import Dict


class Status(Enum):
    """Possible epidemiological states for an agent."""
    SUSCEPTIBLE = "susceptible"
    INFECTED_WITH_SYMPTOMS = "infected_with_symptoms"
    INFECTED_WITHOUT_SYMPTOMS = "infected_without_symptoms"
    RECOVERED = "recovered"
    DECEASED = "deceased"

    @property
    def is_infected(self) -> bool:
        return self in (Status.INFECTED_WITH_SYMPTOMS,
                        Status.INFECTED_WITHOUT_SYMPTOMS)


class Goal(Enum):
    """Where an agent is heading."""
    RANDOM = "random"
    SCHOOL = "school"
    SHOPPING = "shopping"
    HOSPITAL = "hospital"


STATUS_COLORS: Dict[Status, str] = {
    Status.SUSCEPTIBLE: '#00FFFF',                # Cyan
    Status.INFECTED_WITH_SYMPTOMS: '#FF0000',     # Red
    Status.INFECTED_WITHOUT_SYMPTOMS: '#FFAFAF',  # Pink
    Status.RECOVERED: '#00FF00',                  # Green
    Status.DECEASED: '#000000',                   # Black
}


def status_color(status: Status) -> str:
    """Display colour of an agent with the given status."""
    return STATUS_COLORS[status]
