"""I/O package for the epidemic CA simulation."""

from .csv_writer import CSVWriter, AgentLogWriter, TimeSeriesWriter
from .visualizer import Visualizer
from .reporter import Reporter

__all__ = ['CSVWriter', 'AgentLogWriter', 'TimeSeriesWriter',
           'Visualizer', 'Reporter']
