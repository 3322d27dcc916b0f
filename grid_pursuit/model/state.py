"""State snapshot dataclasses for the pursuit simulation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from .grid import Position


class EngineStatus(Enum):
    """Lifecycle of a simulation engine. All but the first two are terminal."""
    INITIALIZING = "initializing"
    RUNNING = "running"
    SEEKER_WON = "seeker_won"
    CHASER_WON = "chaser_won"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self not in (EngineStatus.INITIALIZING, EngineStatus.RUNNING)


class EventType(str, Enum):
    """Textual tags delivered to engine observers."""
    INITIALIZED = "initialized"
    SEEKER_WON = "seeker_won"
    CHASER_WON = "chaser_won"
    STOPPED = "stopped"


@dataclass(frozen=True)
class SimulationEvent:
    """Notification sent to observers; ``chaser`` is set for captures."""
    type: EventType
    chaser: Optional[int] = None

    @property
    def message(self) -> str:
        if self.type is EventType.INITIALIZED:
            return "Grid initialized"
        if self.type is EventType.SEEKER_WON:
            return "Seeker reached the goal"
        if self.type is EventType.CHASER_WON:
            return f"Chaser {self.chaser + 1} captured the seeker"
        return "Simulation stopped"


@dataclass
class SimulationState:
    """Complete snapshot of the simulation at a stable point."""
    turn: int
    status: EngineStatus
    seeker: Position
    goal: Position
    chasers: List[Position]
    grid: np.ndarray  # Copy of the cell-type array
    elapsed: float = 0.0
    winner: Optional[int] = None
    metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def distance_to_goal(self) -> int:
        return self.seeker.manhattan_distance(self.goal)

    @property
    def nearest_chaser_distance(self) -> Optional[int]:
        if not self.chasers:
            return None
        return min(self.seeker.manhattan_distance(c) for c in self.chasers)

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format, one row per entity."""
        rows = [{
            "turn": self.turn,
            "entity": "seeker",
            "index": 0,
            "row": self.seeker.row,
            "col": self.seeker.col,
            "status": self.status.value,
        }]
        rows.extend(
            {
                "turn": self.turn,
                "entity": "chaser",
                "index": i,
                "row": c.row,
                "col": c.col,
                "status": self.status.value,
            }
            for i, c in enumerate(self.chasers)
        )
        return rows
