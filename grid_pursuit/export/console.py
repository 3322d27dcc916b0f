"""Console rendering for the pursuit simulation."""

import sys
from typing import TextIO, TYPE_CHECKING

from ..model.grid import CellType

if TYPE_CHECKING:
    from ..model.state import SimulationState


class ConsoleRenderer:
    """
    Prints the grid with row/column headers, a legend and live stats.

    Coloured mode wraps symbols in ANSI escapes; plain mode suits
    terminals without colour support and log files.
    """

    ANSI = {
        CellType.SEEKER: '\033[34m',    # Blue
        CellType.CHASER: '\033[31m',    # Red
        CellType.GOAL: '\033[33m',      # Yellow
        CellType.OBSTACLE: '\033[90m',  # Gray
    }
    RESET = '\033[0m'
    LEGEND = "N=Seeker, A=Chaser, T=Goal, #=Obstacle, .=Empty"

    def __init__(self, color: bool = True, stream: TextIO = None):
        self.color = color
        self.stream = stream or sys.stdout

    def _symbol(self, value: int) -> str:
        cell_type = CellType(int(value))
        symbol = cell_type.symbol
        if self.color and cell_type in self.ANSI:
            return f"{self.ANSI[cell_type]}{symbol}{self.RESET}"
        return symbol

    def format(self, state: "SimulationState") -> str:
        """Returns the rendered grid and stats as text."""
        size = state.grid.shape[0]
        lines = [
            "=" * 50,
            f"         PURSUIT GRID {size}x{size} - TURN {state.turn}",
            "=" * 50,
            "   " + "".join(f"{c:2d} " for c in range(size)),
        ]
        for r in range(size):
            cells = " ".join(self._symbol(v) for v in state.grid[r])
            lines.append(f"{r:2d}  {cells}")

        nearest = state.nearest_chaser_distance
        lines.extend([
            "",
            self.LEGEND,
            "=" * 50,
            f"Time: {state.elapsed:.0f}s | Distance to goal: {state.distance_to_goal}"
            f" | Chasers: {len(state.chasers)}",
            f"Seeker at {state.seeker} | Goal at {state.goal}"
            f" | Nearest chaser: {nearest if nearest is not None else '-'}",
        ])
        return "\n".join(lines)

    def __call__(self, state: "SimulationState") -> None:
        """Render sink used by the turn coordinator."""
        print(self.format(state), file=self.stream)
        self.stream.flush()
