"""Turn sequencing for the pursuit simulation."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from .engine import SimulationEngine
from .state import EventType, SimulationEvent, SimulationState

logger = logging.getLogger(__name__)

RenderSink = Callable[[SimulationState], None]


class TurnCoordinator:
    """
    Drives the engine one turn at a time.

    Each turn: seeker move, then every chaser in ascending index order,
    then the render sink. A capture ends the chaser loop at once, so the
    lowest index wins when several chasers could reach the seeker.
    """

    def __init__(self, engine: SimulationEngine,
                 render: Optional[RenderSink] = None,
                 turn_delay: float = 0.0):
        self.engine = engine
        self.render = render
        self.turn_delay = turn_delay
        self.turn = 0
        self._halted = threading.Event()
        engine.subscribe(self._on_event)

    def _on_event(self, event: SimulationEvent) -> None:
        if event.type is not EventType.INITIALIZED:
            self._halted.set()

    def play_turn(self) -> bool:
        """Play a single turn. Returns True while the run continues."""
        if not self.engine.is_running():
            return False

        self.turn += 1
        self.engine.move_seeker()
        if not self.engine.is_running():
            logger.debug("Turn %d: seeker finished the run", self.turn)
            return False

        for index in range(self.engine.chaser_count):
            self.engine.move_chaser(index)
            if not self.engine.is_running():
                logger.debug("Turn %d: chaser %d finished the run",
                             self.turn, index + 1)
                return False

        if self.render is not None:
            self.render(self.engine.snapshot(self.turn))
        return True

    def run(self, max_turns: Optional[int] = None) -> SimulationState:
        """Play turns until the run ends; returns the final snapshot."""
        while self.play_turn():
            if max_turns is not None and self.turn >= max_turns:
                logger.info("Turn limit %d reached", max_turns)
                self.engine.stop()
                break
            if self.turn_delay > 0 and self._halted.wait(self.turn_delay):
                break

        logger.info("Simulation ended after %d turns (%s)", self.turn,
                    self.engine.status.value)
        return self.engine.snapshot(self.turn)

    def run_concurrent_chasers(self, indices: Optional[Iterable[int]] = None,
                               max_workers: Optional[int] = None) -> List[bool]:
        """
        Move several chasers from worker threads at once.

        The engine lock serializes the moves; the order they apply in is
        up to the scheduler.
        """
        if indices is None:
            indices = range(self.engine.chaser_count)
        indices = list(indices)
        if not indices:
            return []
        with ThreadPoolExecutor(max_workers=max_workers or len(indices)) as pool:
            return list(pool.map(self.engine.move_chaser, indices))
