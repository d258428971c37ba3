"""Summary report generation for the epidemic CA simulation."""

from typing import List, Dict, Optional, TYPE_CHECKING
from pathlib import Path

from ..model.status import Status

if TYPE_CHECKING:
    from ..model.state import SimulationState
    from ..model.policy import PolicyConfig


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: str, seed: Optional[int],
                 policy: Optional["PolicyConfig"] = None):
        self.config_path = config_path
        self.seed = seed
        self.policy = policy
        self.step_metrics: List[Dict] = []
        self.peak_infected = 0
        self.peak_step = 0
        self.initial_population = 0

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        metrics = state.metrics.copy()
        metrics['step'] = state.step
        self.step_metrics.append(metrics)

        if not self.initial_population:
            self.initial_population = int(metrics.get('total_agents', 0))

        infected = int(metrics.get('infected', 0))
        if infected > self.peak_infected:
            self.peak_infected = infected
            self.peak_step = state.step

    def series(self, key: str) -> List[float]:
        """Values of one metric over all recorded steps."""
        return [m.get(key, 0) for m in self.step_metrics]

    def _active_strategies(self) -> str:
        if self.policy is None:
            return "unknown"
        active = [name for name, on in (
            ('mask', self.policy.mask_mandate),
            ('distancing', self.policy.distancing),
            ('curfew', self.policy.curfew),
            ('lockdown', self.policy.lockdown),
            ('isolate_infected', self.policy.isolate_infected),
        ) if on]
        return ", ".join(active) if active else "none"

    def generate_summary(self, final_state: "SimulationState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool,
                         curve_enabled: bool = False) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        infections = int(metrics.get('total_infections', 0))
        deaths = int(metrics.get('total_deaths', 0))
        r0 = metrics.get('r0', 0.0)

        population = self.initial_population or int(metrics.get('total_agents', 0))
        attack_rate = (infections / population * 100) if population > 0 else 0

        lines = [
            "",
            "=" * 80,
            "                    EPIDEMIC CA SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            f"Strategies:  {self._active_strategies()}",
            "",
            "EPIDEMIC METRICS",
            "-" * 40,
            f"Total Ticks:           {final_state.step}",
            f"New Infections:        {infections} ({attack_rate:.1f}% of initial population)",
            f"Deaths:                {deaths}",
            f"Peak Infected:         {self.peak_infected} at tick {self.peak_step}",
            f"R0 Estimate:           {r0:.2f}",
            "",
            "FINAL POPULATION",
            "-" * 40,
        ]
        for status in Status:
            lines.append(f"{status.value:<27}{int(metrics.get(status.value, 0))}")

        lines += [
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
            lines.append(f"Timeline:   {output_dir / 'timeline.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if curve_enabled:
            lines.append(f"Curve:      {output_dir / 'epidemic_curve.png'}")
        else:
            lines.append("Curve:      (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
