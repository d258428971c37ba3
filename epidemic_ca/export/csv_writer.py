"""CSV export functionality for the epidemic CA simulation."""

import csv
from pathlib import Path
from typing import Dict, List, Optional, TextIO, TYPE_CHECKING

from ..model.status import Status

if TYPE_CHECKING:
    from ..model.state import SimulationState


class CSVWriter:
    """
    Exports simulation data to CSV format incrementally, one tick at a time.

    Subclasses choose the columns and turn a state into rows.
    """

    fieldnames: List[str] = []

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.file: Optional[TextIO] = None
        self.writer: Optional[csv.DictWriter] = None

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def rows(self, state: "SimulationState") -> List[Dict]:
        raise NotImplementedError

    def open(self) -> None:
        """Initialize file and write header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.fieldnames)
        self.writer.writeheader()

    def append(self, state: "SimulationState") -> None:
        if not self.is_open:
            self.open()
        self.writer.writerows(self.rows(state))
        self.file.flush()

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class AgentLogWriter(CSVWriter):
    """
    One row per agent per tick.

    Output format:
        step,agent_id,x,y,status,goal,has_mask
        1,1,5,10,susceptible,random,0
        ...
    """

    fieldnames = ['step', 'agent_id', 'x', 'y', 'status', 'goal', 'has_mask']

    def rows(self, state: "SimulationState") -> List[Dict]:
        return state.to_csv_rows()


class TimeSeriesWriter(CSVWriter):
    """One row per tick with the population count of every status."""

    fieldnames = (['step'] + [s.value for s in Status] +
                  ['total_deaths', 'total_infections', 'r0'])

    def rows(self, state: "SimulationState") -> List[Dict]:
        row = {'step': state.step}
        for name in self.fieldnames[1:]:
            row[name] = state.metrics.get(name, 0)
        return [row]
