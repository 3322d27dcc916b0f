"""Image export for the pursuit simulation."""

import io
from pathlib import Path
from typing import List, TYPE_CHECKING

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.patches import Patch
from PIL import Image

from ..model.grid import CellType

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Visualizer:
    """
    Draws grid states with matplotlib.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation of buffered turns
    """

    # Indexed by CellType value
    COLORS = {
        CellType.EMPTY: '#ECF0F1',     # Light gray
        CellType.OBSTACLE: '#2C3E50',  # Dark blue-gray
        CellType.SEEKER: '#3498DB',    # Blue
        CellType.CHASER: '#E74C3C',    # Red
        CellType.GOAL: '#F39C12',      # Orange
    }
    LABELS = {
        CellType.OBSTACLE: 'Obstacle',
        CellType.SEEKER: 'Seeker',
        CellType.CHASER: 'Chaser',
        CellType.GOAL: 'Goal',
    }

    def __init__(self):
        self.cmap = ListedColormap([self.COLORS[t] for t in CellType])
        self.frames: List[Image.Image] = []

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        size = state.grid.shape[0]
        fig, ax = plt.subplots(figsize=(6, 6))
        ax.imshow(state.grid, cmap=self.cmap, vmin=0, vmax=len(CellType) - 1,
                  origin='upper', interpolation='nearest')

        # Seeker drawn on top of the goal once it arrives
        ax.plot(state.seeker.col, state.seeker.row, 'o',
                color=self.COLORS[CellType.SEEKER], markersize=10,
                markeredgecolor='white', markeredgewidth=1.0)
        for i, chaser in enumerate(state.chasers):
            ax.annotate(str(i + 1), (chaser.col, chaser.row), ha='center',
                        va='center', color='white', fontsize=8)

        ax.set_xticks(range(size))
        ax.set_yticks(range(size))
        ax.set_xticks([x - 0.5 for x in range(1, size)], minor=True)
        ax.set_yticks([y - 0.5 for y in range(1, size)], minor=True)
        ax.grid(which='minor', color='white', linewidth=0.5)
        ax.tick_params(which='minor', length=0)

        ax.set_title(f'Turn {state.turn} | {state.status.value} | '
                     f'Distance to goal: {state.distance_to_goal}')

        legend_elements = [
            Patch(facecolor=self.COLORS[t], label=label)
            for t, label in self.LABELS.items()
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
        """Save single PNG image of a state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 2) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
