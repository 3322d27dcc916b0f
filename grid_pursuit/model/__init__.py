"""Model package for the pursuit simulation."""

from .grid import CellType, Position, GridMap
from .state import EngineStatus, EventType, SimulationEvent, SimulationState
from .strategy import (
    MovementStrategy,
    ShortestPathStrategy,
    HeuristicDirectStrategy,
)
from .engine import SimulationEngine
from .coordinator import TurnCoordinator

__all__ = [
    'CellType',
    'Position',
    'GridMap',
    'EngineStatus',
    'EventType',
    'SimulationEvent',
    'SimulationState',
    'MovementStrategy',
    'ShortestPathStrategy',
    'HeuristicDirectStrategy',
    'SimulationEngine',
    'TurnCoordinator',
]
