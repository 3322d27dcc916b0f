import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from grid_pursuit.config import EngineConfig
from grid_pursuit.model.coordinator import TurnCoordinator
from grid_pursuit.model.engine import SimulationEngine
from grid_pursuit.model.grid import Position
from grid_pursuit.model.state import EngineStatus, EventType


def test_play_turn_renders_after_all_moves(make_engine):
    engine = make_engine([
        "N.....",
        "......",
        "......",
        "......",
        "......",
        ".....T",
    ])
    rendered = []
    coordinator = TurnCoordinator(engine, render=rendered.append)
    assert coordinator.play_turn()
    assert coordinator.turn == 1
    assert len(rendered) == 1
    assert rendered[0].turn == 1
    assert rendered[0].seeker == engine.seeker_position


def test_capture_stops_remaining_chasers_that_turn(make_engine, events, monkeypatch):
    engine = make_engine([
        "N#..",
        "AA..",
        "....",
        "...T",
    ])
    calls = []
    original = engine.move_chaser

    def recording(index):
        calls.append(index)
        return original(index)

    monkeypatch.setattr(engine, "move_chaser", recording)
    rendered = []
    coordinator = TurnCoordinator(engine, render=rendered.append)

    assert not coordinator.play_turn()
    assert calls == [0]
    assert engine.status is EngineStatus.CHASER_WON
    assert engine.winner == 0
    assert events[-1].type is EventType.CHASER_WON and events[-1].chaser == 0
    # A finished turn is not rendered
    assert rendered == []
    engine.check_invariants()


def test_arrival_skips_chaser_moves(make_engine, monkeypatch):
    engine = make_engine([
        "....",
        ".NT.",
        "....",
        "A...",
    ])
    calls = []
    monkeypatch.setattr(engine, "move_chaser", calls.append)
    coordinator = TurnCoordinator(engine)
    assert not coordinator.play_turn()
    assert calls == []
    assert engine.status is EngineStatus.SEEKER_WON


def test_small_open_scenario_terminates(make_engine, events):
    engine = make_engine([
        "N....",
        ".....",
        ".....",
        ".....",
        "A...T",
    ])
    engine.move_seeker()
    assert engine.seeker_position in (Position(1, 0), Position(0, 1))
    engine.check_invariants()

    for _ in range(50):
        if not engine.is_running():
            break
        engine.move_chaser(0)
        engine.check_invariants()
        engine.move_seeker()
        engine.check_invariants()

    assert not engine.is_running()
    assert engine.status in (EngineStatus.SEEKER_WON, EngineStatus.CHASER_WON)
    terminal = [e for e in events if e.type is not EventType.INITIALIZED]
    assert len(terminal) == 1


@pytest.mark.parametrize("seed", range(8))
def test_random_runs_keep_invariants_and_end(seed):
    engine = SimulationEngine(EngineConfig(seed=seed, chaser_count=4))

    def check(state):
        engine.check_invariants()
        entities = [state.seeker] + state.chasers
        assert len(set(entities)) == len(entities)
        assert all(0 <= p.row < 12 and 0 <= p.col < 12 for p in entities)

    coordinator = TurnCoordinator(engine, render=check)
    final = coordinator.run(max_turns=300)
    assert not engine.is_running()
    assert final.status.is_terminal
    assert coordinator.turn <= 300
    engine.check_invariants()


def test_max_turns_stops_the_engine(make_engine, events):
    # Seeker boxed in by obstacles, so neither side can ever win
    engine = make_engine([
        "N#...",
        "##...",
        ".....",
        ".....",
        "A#..T",
    ])
    coordinator = TurnCoordinator(engine)
    final = coordinator.run(max_turns=5)
    assert coordinator.turn == 5
    assert final.status is EngineStatus.STOPPED
    assert events[-1].type is EventType.STOPPED


def test_external_stop_wakes_a_sleeping_run(make_engine):
    engine = make_engine([
        "N#...",
        "##...",
        ".....",
        ".....",
        "A#..T",
    ])
    coordinator = TurnCoordinator(engine, turn_delay=30.0)
    timer = threading.Timer(0.2, engine.stop)
    timer.start()
    try:
        final = coordinator.run()
    finally:
        timer.cancel()
    assert final.status is EngineStatus.STOPPED
    assert coordinator.turn == 1


def test_concurrent_chaser_moves_keep_invariants():
    engine = SimulationEngine(EngineConfig(seed=11, chaser_count=7))
    coordinator = TurnCoordinator(engine)
    for _ in range(40):
        if not engine.is_running():
            break
        results = coordinator.run_concurrent_chasers()
        assert len(results) == 7
        assert all(isinstance(r, bool) for r in results)
        engine.check_invariants()
        engine.move_seeker()
        engine.check_invariants()


def test_concurrent_moves_and_snapshots_never_see_torn_state():
    engine = SimulationEngine(EngineConfig(seed=3, chaser_count=7))
    errors = []

    def mover(index):
        for _ in range(30):
            engine.move_chaser(index)

    def reader():
        for _ in range(60):
            state = engine.snapshot()
            entities = [state.seeker] + state.chasers
            if len(set(entities)) != len(entities):
                errors.append(entities)
            chaser_cells = int((state.grid == 3).sum())
            if chaser_cells != len(state.chasers):
                errors.append(chaser_cells)

    with ThreadPoolExecutor(max_workers=9) as pool:
        futures = [pool.submit(mover, i) for i in range(7)]
        futures += [pool.submit(reader), pool.submit(reader)]
        for f in futures:
            f.result()

    assert errors == []
    engine.check_invariants()
