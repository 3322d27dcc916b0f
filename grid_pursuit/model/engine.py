"""Simulation engine for the pursuit simulation."""

import itertools
import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Union

import numpy as np

from ..config import EngineConfig
from .grid import CellType, GridMap, Position
from .state import EngineStatus, EventType, SimulationEvent, SimulationState
from .strategy import (
    DEFAULT_ADJACENCY_PENALTY, HeuristicDirectStrategy, MovementStrategy,
    ShortestPathStrategy,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[SimulationEvent], None]


class SimulationEngine:
    """
    Owns the grid and every entity position.

    Implements:
    1. Randomized or scripted layout
    2. Seeker and chaser moves, each an atomic read-decide-write
    3. Win detection and the terminal state machine
    4. Observer notification and locked snapshots

    One re-entrant lock guards the grid and the position bookkeeping, so
    a move never observes or produces a half-applied state. Observer
    callbacks always run after the lock is released.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 seeker_strategy: Optional[MovementStrategy] = None,
                 chaser_strategy: Optional[MovementStrategy] = None,
                 observers: Iterable[EventHandler] = ()):
        self.config = config or EngineConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.seeker_strategy = seeker_strategy or ShortestPathStrategy(
            self.config.adjacency_penalty)
        self.chaser_strategy = chaser_strategy or HeuristicDirectStrategy(
            self.config.adjacency_penalty)

        self._lock = threading.RLock()
        self._observers: Dict[int, EventHandler] = {}
        self._tokens = itertools.count(1)
        for handler in observers:
            self.subscribe(handler)

        self.status = EngineStatus.INITIALIZING
        self.outcome: Optional[EngineStatus] = None
        self.winner: Optional[int] = None
        self._stop_requested = False
        self.start_time = time.monotonic()

        self.grid = GridMap(self.config.grid_size)
        self._seeker = Position(*self.config.seeker_start)
        self._goal = self._seeker
        self._chasers: List[Position] = []

        if self.config.layout is not None:
            self._load_layout(self.config.layout)
        else:
            self._setup_layout()

        # Metrics tracking
        self.seeker_steps = 0
        self.chaser_steps = [0] * len(self._chasers)
        self.min_goal_distance = self._seeker.manhattan_distance(self._goal)
        self.goal_reachable = self.grid.connected(self._seeker, self._goal)
        if not self.goal_reachable:
            logger.warning("Goal %s is walled off from seeker at %s",
                           self._goal, self._seeker)

        self.status = EngineStatus.RUNNING
        logger.debug("Simulation initialized with %dx%d grid, %d chasers",
                     self.grid.size, self.grid.size, len(self._chasers))
        self._notify(SimulationEvent(EventType.INITIALIZED))

    @classmethod
    def from_layout(cls, rows: List[str], **kwargs) -> "SimulationEngine":
        """Build an engine from symbol rows (see ``GridMap.from_rows``)."""
        adjacency_penalty = kwargs.pop('adjacency_penalty',
                                       DEFAULT_ADJACENCY_PENALTY)
        config = EngineConfig(layout=list(rows),
                              adjacency_penalty=adjacency_penalty)
        return cls(config, **kwargs)

    def _setup_layout(self) -> None:
        """Place goal, seeker, obstacles and chasers at random."""
        size = self.grid.size
        seeker = Position(*self.config.seeker_start)
        corners = [
            Position(0, 0),
            Position(0, size - 1),
            Position(size - 1, 0),
            Position(size - 1, size - 1),
        ]
        corners = [c for c in corners if c != seeker]
        self._goal = corners[self.rng.integers(len(corners))]
        self._seeker = seeker
        self.grid.set(self._goal, CellType.GOAL)
        self.grid.set(self._seeker, CellType.SEEKER)

        obstacle_count = (size * size) // self.config.obstacle_divisor
        for pos in self._random_empty_positions(obstacle_count):
            self.grid.set(pos, CellType.OBSTACLE)

        for pos in self._random_empty_positions(self.config.chaser_count):
            self._chasers.append(pos)
            self.grid.set(pos, CellType.CHASER)

    def _random_empty_positions(self, count: int) -> List[Position]:
        """Draw up to ``count`` distinct empty cells."""
        empty = np.flatnonzero(self.grid.cells == CellType.EMPTY)
        count = min(count, len(empty))
        if count == 0:
            return []
        picks = self.rng.choice(empty, size=count, replace=False)
        return [Position(*map(int, divmod(int(p), self.grid.size)))
                for p in picks]

    def _load_layout(self, rows: List[str]) -> None:
        """Adopt a scripted layout. Chasers are indexed in row-major order."""
        self.grid = GridMap.from_rows(rows)
        seekers = self.grid.positions_of(CellType.SEEKER)
        goals = self.grid.positions_of(CellType.GOAL)
        if len(seekers) != 1 or len(goals) != 1:
            raise ValueError("Layout needs exactly one seeker and one goal")
        self._seeker = seekers[0]
        self._goal = goals[0]
        self._chasers = self.grid.positions_of(CellType.CHASER)

    # Observer pattern

    def subscribe(self, handler: EventHandler) -> int:
        """Register a handler; returns a token usable with ``unsubscribe``."""
        with self._lock:
            token = next(self._tokens)
            self._observers[token] = handler
        return token

    def unsubscribe(self, handler: Union[int, EventHandler]) -> None:
        with self._lock:
            if isinstance(handler, int):
                self._observers.pop(handler, None)
                return
            for token, registered in list(self._observers.items()):
                if registered == handler:
                    del self._observers[token]

    def _notify(self, event: SimulationEvent) -> None:
        with self._lock:
            handlers = list(self._observers.values())
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Observer %r failed on %s", handler, event.type.value)

    # Moves

    def move_seeker(self) -> bool:
        """
        Advance the seeker one step towards the goal.

        Returns True if the seeker moved. Reaching the goal ends the run
        without writing the seeker onto the goal cell.
        """
        event = None
        with self._lock:
            if self.status is not EngineStatus.RUNNING:
                return False

            current = self._seeker
            step = self.seeker_strategy.next_step(
                current, self._goal, self.grid, list(self._chasers))

            if (step == current or not self.grid.in_bounds(step)
                    or self.grid.get(step) == CellType.CHASER):
                return False

            self.grid.set(current, CellType.EMPTY)
            self._seeker = step
            self.seeker_steps += 1
            self.min_goal_distance = min(self.min_goal_distance,
                                         step.manhattan_distance(self._goal))

            if step == self._goal:
                logger.info("Seeker reached the goal at %s", step)
                self._finish(EngineStatus.SEEKER_WON)
                event = SimulationEvent(EventType.SEEKER_WON)
            else:
                self.grid.set(step, CellType.SEEKER)
                if current == self._goal:
                    self.grid.set(self._goal, CellType.GOAL)

        if event is not None:
            self._notify(event)
        return True

    def move_chaser(self, index: int) -> bool:
        """
        Advance chaser ``index`` one step towards the seeker.

        Out-of-range indices and moves into another chaser are silent
        no-ops. Returns True if the chaser moved or captured.
        """
        event = None
        with self._lock:
            if self.status is not EngineStatus.RUNNING:
                return False
            if not 0 <= index < len(self._chasers):
                return False

            current = self._chasers[index]
            step = self.chaser_strategy.next_step(
                current, self._seeker, self.grid, list(self._chasers))

            if (step == current or not self.grid.in_bounds(step)
                    or self.grid.get(step) == CellType.OBSTACLE):
                return False

            if step == self._seeker:
                logger.info("Chaser %d captured the seeker at %s", index + 1, step)
                self.winner = index
                self._finish(EngineStatus.CHASER_WON)
                event = SimulationEvent(EventType.CHASER_WON, chaser=index)
            elif self.grid.get(step) in (CellType.EMPTY, CellType.GOAL):
                vacated = CellType.GOAL if current == self._goal else CellType.EMPTY
                self.grid.set(current, vacated)
                self.grid.set(step, CellType.CHASER)
                self._chasers[index] = step
                self.chaser_steps[index] += 1
            else:
                return False

        if event is not None:
            self._notify(event)
        return True

    def _finish(self, status: EngineStatus) -> None:
        self.status = status
        if self.outcome is None:
            self.outcome = status

    def stop(self) -> None:
        """Stop the run from any state. Only the first call notifies."""
        with self._lock:
            first = not self._stop_requested
            self._stop_requested = True
            self._finish(EngineStatus.STOPPED)
        if first:
            logger.debug("Simulation stopped externally")
            self._notify(SimulationEvent(EventType.STOPPED))

    def is_running(self) -> bool:
        with self._lock:
            return self.status is EngineStatus.RUNNING

    # Read accessors

    @property
    def seeker_position(self) -> Position:
        with self._lock:
            return self._seeker

    @property
    def goal_position(self) -> Position:
        return self._goal

    @property
    def chaser_positions(self) -> List[Position]:
        with self._lock:
            return list(self._chasers)

    @property
    def chaser_count(self) -> int:
        with self._lock:
            return len(self._chasers)

    @property
    def grid_size(self) -> int:
        return self.grid.size

    def grid_snapshot(self) -> np.ndarray:
        with self._lock:
            return self.grid.cells.copy()

    def snapshot(self, turn: int = 0) -> SimulationState:
        """Create a consistent snapshot of the current simulation state."""
        with self._lock:
            state = SimulationState(
                turn=turn,
                status=self.status,
                seeker=self._seeker,
                goal=self._goal,
                chasers=list(self._chasers),
                grid=self.grid.cells.copy(),
                elapsed=time.monotonic() - self.start_time,
                winner=self.winner,
            )
            state.metrics = {
                'distance_to_goal': state.distance_to_goal,
                'nearest_chaser': (state.nearest_chaser_distance
                                   if state.chasers else -1),
                'min_goal_distance': self.min_goal_distance,
                'seeker_steps': self.seeker_steps,
                'chaser_steps': sum(self.chaser_steps),
                'goal_reachable': float(self.goal_reachable),
            }
        return state

    def check_invariants(self) -> None:
        """Raise AssertionError if the grid disagrees with tracked positions."""
        with self._lock:
            entities = [self._seeker] + self._chasers
            for pos in entities:
                if not self.grid.in_bounds(pos):
                    raise AssertionError(f"Entity out of bounds at {pos}")
            if len(set(entities)) != len(entities):
                raise AssertionError(f"Entities share a cell: {entities}")

            chaser_cells = set(self.grid.positions_of(CellType.CHASER))
            if chaser_cells != set(self._chasers):
                raise AssertionError(
                    f"Chaser cells {chaser_cells} != tracked {self._chasers}")

            seeker_cells = self.grid.positions_of(CellType.SEEKER)
            if self.outcome is EngineStatus.SEEKER_WON:
                expected = []
            else:
                expected = [self._seeker]
            if seeker_cells != expected:
                raise AssertionError(
                    f"Seeker cells {seeker_cells} != tracked {expected}")

            if (self._goal not in self._chasers
                    and self._goal != self._seeker
                    and self.grid.get(self._goal) != CellType.GOAL):
                raise AssertionError(f"Goal cell {self._goal} not restored")
            if (self.outcome is EngineStatus.SEEKER_WON
                    and self.grid.get(self._goal) != CellType.GOAL):
                raise AssertionError("Goal cell overwritten on arrival")
