#!/usr/bin/env python3
"""
Grid Pursuit Simulation

A seeker (N) races across a grid to the goal (T) while chasers (A) try to
intercept it. The seeker plans shortest paths; chasers close in greedily.

Usage:
    grid-pursuit [--config CONFIG] [options]

Examples:
    grid-pursuit
    grid-pursuit --chasers 5 --seed 42 --delay 1
    grid-pursuit --config configs/default.yaml --gif --out-dir results/
    grid-pursuit --no-color --no-input --max-turns 200 --quiet
"""

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from .config import SimulationConfig, EngineConfig, load_config
from .model.engine import SimulationEngine
from .model.coordinator import TurnCoordinator
from .model.state import EventType, SimulationEvent, SimulationState
from .export.console import ConsoleRenderer
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Grid Pursuit Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    grid-pursuit --chasers 5 --seed 42 --delay 1
    grid-pursuit --config configs/default.yaml --gif --out-dir results/
    grid-pursuit --no-color --no-input --max-turns 200 --quiet
        """
    )

    parser.add_argument('--config', type=Path, default=None,
                        help='Path to YAML configuration file')

    # Engine overrides
    parser.add_argument('--size', type=int, default=None,
                        help='Grid size (default: 12)')
    parser.add_argument('--chasers', type=int, default=None,
                        help='Number of chasers, clamped to 1..7 (default: 3)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    # Run overrides
    parser.add_argument('--max-turns', type=int, default=None,
                        help='Stop after this many turns')
    parser.add_argument('--delay', type=float, default=None,
                        help='Seconds to pause between turns')
    parser.add_argument('--color', dest='color', action='store_true', default=None,
                        help='Colour the console grid (default)')
    parser.add_argument('--no-color', dest='color', action='store_false',
                        help='Plain console grid')
    parser.add_argument('--no-input', action='store_true', default=False,
                        help='Do not listen for ENTER to stop the run')

    # Export toggles
    parser.add_argument('--csv', action='store_true', default=False,
                        help='Enable per-turn CSV export')
    parser.add_argument('--snapshot', action='store_true', default=False,
                        help='Save a PNG of the final state')
    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')
    parser.add_argument('--out-dir', type=Path, default=None,
                        help='Output directory for exports (default: ./output)')
    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress the per-turn grid output')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Load the YAML file if given and apply CLI overrides."""
    config = load_config(args.config) if args.config else SimulationConfig()

    engine = config.engine
    if args.size is not None or args.chasers is not None or args.seed is not None:
        config.engine = EngineConfig(
            grid_size=args.size if args.size is not None else engine.grid_size,
            chaser_count=(args.chasers if args.chasers is not None
                          else engine.chaser_count),
            seeker_start=engine.seeker_start if args.size is None else None,
            obstacle_divisor=engine.obstacle_divisor,
            adjacency_penalty=engine.adjacency_penalty,
            seed=args.seed if args.seed is not None else engine.seed,
            layout=engine.layout,
        )

    if args.max_turns is not None:
        config.run.max_turns = args.max_turns
    if args.delay is not None:
        config.run.turn_delay = args.delay
    if args.color is not None:
        config.run.color = args.color
    if args.no_input:
        config.run.listen_for_stop = False

    if args.csv:
        config.export.csv_enabled = True
    if args.snapshot:
        config.export.snapshot_enabled = True
    if args.gif:
        config.export.gif_enabled = True
    if args.out_dir is not None:
        config.export.out_dir = args.out_dir
    config.export.quiet = args.quiet
    return config


def start_stop_listener(engine: SimulationEngine) -> threading.Thread:
    """Stop the engine when a line arrives on stdin."""
    def wait_for_enter():
        line = sys.stdin.readline()
        logger.debug("Stop requested from input (%r)", line.strip())
        engine.stop()

    thread = threading.Thread(target=wait_for_enter, name='stop-listener',
                              daemon=True)
    thread.start()
    return thread


def announce(event: SimulationEvent) -> None:
    """Print terminal events for the user."""
    logger.debug("Simulation event: %s", event.type.value)
    if event.type in (EventType.SEEKER_WON, EventType.CHASER_WON,
                      EventType.STOPPED):
        print(f"\n*** {event.message} ***")


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = build_config(args)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (ValueError, TypeError, KeyError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    export = config.export
    try:
        engine = SimulationEngine(config.engine, observers=[announce])
    except ValueError as e:
        print(f"Error building simulation: {e}", file=sys.stderr)
        return 1

    renderer = ConsoleRenderer(color=config.run.color)
    csv_writer: Optional[CSVWriter] = None
    if export.csv_enabled:
        csv_writer = CSVWriter(export.out_dir / 'pursuit_log.csv')
        csv_writer.open()
    visualizer = Visualizer()
    reporter = Reporter(str(args.config) if args.config else None,
                        config.engine.seed)

    def on_turn(state: SimulationState) -> None:
        if not export.quiet:
            renderer(state)
        if csv_writer:
            csv_writer.append(state)
        if export.gif_enabled:
            visualizer.buffer_frame(state)
        reporter.update(state)

    if not export.quiet:
        print("Seeker (N) tries to reach the goal (T); chasers (A) try to catch it.")
        print("Initial state:")
        renderer(engine.snapshot())
        if config.run.listen_for_stop:
            print("Press ENTER to stop the simulation")

    if config.run.listen_for_stop:
        start_stop_listener(engine)

    coordinator = TurnCoordinator(engine, render=on_turn,
                                  turn_delay=config.run.turn_delay)
    try:
        final_state = coordinator.run(max_turns=config.run.max_turns)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user.")
        engine.stop()
        final_state = engine.snapshot(coordinator.turn)

    # The last turn ends before the render sink runs
    reporter.update(final_state)
    if csv_writer:
        csv_writer.append(final_state)
        csv_writer.close()
    if export.gif_enabled:
        visualizer.buffer_frame(final_state)
        visualizer.generate_gif(export.out_dir / 'pursuit.gif')
    if export.snapshot_enabled:
        visualizer.save_snapshot(final_state, export.out_dir / 'final_state.png')

    if not export.quiet:
        print(f"\nSimulation finished after {final_state.turn} turns")
        renderer(final_state)
        print(reporter.generate_summary(
            final_state,
            engine.outcome,
            export.out_dir,
            export.csv_enabled,
            export.snapshot_enabled,
            export.gif_enabled,
        ))

    return 0


if __name__ == '__main__':
    sys.exit(main())
