"""Summary report generation for the pursuit simulation."""

from typing import Optional, TYPE_CHECKING
from pathlib import Path

from ..model.state import EngineStatus

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Reporter:
    """Tracks per-turn distances and formats the end-of-run report."""

    def __init__(self, config_path: Optional[str], seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.turns_observed = 0
        self.closest_chaser: Optional[int] = None

    def update(self, state: "SimulationState") -> None:
        """Accumulate distances for one turn."""
        self.turns_observed += 1

        nearest = state.nearest_chaser_distance
        if nearest is not None and (self.closest_chaser is None
                                    or nearest < self.closest_chaser):
            self.closest_chaser = nearest

    @staticmethod
    def describe_outcome(status: EngineStatus, winner: Optional[int]) -> str:
        if status is EngineStatus.SEEKER_WON:
            return "Seeker reached the goal"
        if status is EngineStatus.CHASER_WON:
            return f"Chaser {winner + 1} captured the seeker"
        if status is EngineStatus.STOPPED:
            return "Stopped before a winner"
        return "Still running"

    def generate_summary(self, final_state: "SimulationState",
                         outcome: Optional[EngineStatus],
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        outcome = outcome or final_state.status
        reachable = metrics.get('goal_reachable', 1.0) > 0

        lines = [
            "",
            "=" * 60,
            "              GRID PURSUIT SIMULATION REPORT",
            "=" * 60,
            f"Configuration: {self.config_path or '(defaults)'}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "OUTCOME",
            "-" * 40,
            f"Result:                {self.describe_outcome(outcome, final_state.winner)}",
            f"Turns Played:          {final_state.turn}",
            f"Elapsed:               {final_state.elapsed:.1f}s",
            "",
            "MOVEMENT",
            "-" * 40,
            f"Seeker Steps:          {int(metrics.get('seeker_steps', 0))}",
            f"Chaser Steps (total):  {int(metrics.get('chaser_steps', 0))}",
            f"Final Goal Distance:   {final_state.distance_to_goal}",
            f"Closest To Goal:       {int(metrics.get('min_goal_distance', final_state.distance_to_goal))}",
            f"Closest Chaser Seen:   "
            f"{self.closest_chaser if self.closest_chaser is not None else '-'}",
            f"[{' ' if reachable else 'X'}] Goal walled off by obstacles",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'pursuit_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'pursuit.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 60)

        return "\n".join(lines)
