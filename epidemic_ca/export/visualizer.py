"""Visualization and export for the epidemic CA simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb
from pathlib import Path
from typing import Dict, List, TYPE_CHECKING
from PIL import Image
import io

from ..model.status import Status, status_color

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Visualizer:
    """
    Generates visual outputs using matplotlib.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    - Epidemic curve (status counts over time)

    Agent colours come from status_color only.
    """

    BACKGROUND_COLOR = '#7F8C8D'  # Mid gray

    def __init__(self, grid_width: int, grid_height: int):
        self.width = grid_width
        self.height = grid_height
        self.frames: List[Image.Image] = []

    def _render_grid(self, state: "SimulationState") -> np.ndarray:
        """RGB image with one pixel per cell."""
        image = np.ones((self.height, self.width, 3))
        image[:, :] = to_rgb(self.BACKGROUND_COLOR)
        for agent in state.agents:
            image[agent.y, agent.x] = to_rgb(status_color(Status(agent.status)))
        return image

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(8, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        ax.imshow(self._render_grid(state), origin='lower', aspect='equal',
                  interpolation='nearest',
                  extent=[-0.5, self.width - 0.5, -0.5, self.height - 0.5])

        infected = int(state.metrics.get('infected', 0))
        deaths = int(state.metrics.get('total_deaths', 0))
        ax.set_title(f'Tick {state.step} (day {state.step // 24}) | '
                     f'Infected: {infected} | Deaths: {deaths}')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_xlim(-0.5, self.width - 0.5)
        ax.set_ylim(-0.5, self.height - 0.5)

        legend_elements = [
            plt.Line2D([0], [0], marker='s', color='w',
                       label=status.value.replace('_', ' ').capitalize(),
                       markerfacecolor=status_color(status),
                       markeredgecolor='black', markersize=8)
            for status in Status
        ]
        ax.legend(handles=legend_elements, loc='upper left',
                  bbox_to_anchor=(1.01, 1.0), fontsize=8)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def save_epidemic_curve(self, step_metrics: List[Dict],
                            output_path: Path) -> None:
        """Plot the number of agents in each status against time."""
        if not step_metrics:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        steps = [m['step'] for m in step_metrics]

        fig, ax = plt.subplots(figsize=(10, 5))
        for status in Status:
            counts = [m.get(status.value, 0) for m in step_metrics]
            ax.plot(steps, counts, label=status.value.replace('_', ' '),
                    color=status_color(status), linewidth=2)
        ax.set_xlabel('Tick (hours)')
        ax.set_ylabel('Agents')
        ax.set_facecolor(self.BACKGROUND_COLOR)
        ax.legend(loc='upper right', fontsize=8)
        ax.set_title('Epidemic curve')

        plt.tight_layout()
        fig.savefig(output_path, dpi=150)
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )

    def clear_frames(self) -> None:
        """Clear buffered frames."""
        self.frames.clear()
