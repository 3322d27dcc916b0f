"""Configuration dataclasses and YAML loader for the pursuit simulation."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple
from pathlib import Path
import yaml

MIN_CHASERS = 1
MAX_CHASERS = 7


@dataclass
class EngineConfig:
    grid_size: int = 12
    chaser_count: int = 3
    seeker_start: Optional[Tuple[int, int]] = None  # defaults to top-right corner
    obstacle_divisor: int = 6   # obstacles = grid_size**2 // obstacle_divisor
    adjacency_penalty: int = -100
    seed: Optional[int] = None
    layout: Optional[List[str]] = None  # scripted symbol rows, overrides random layout

    def __post_init__(self):
        if self.layout is not None:
            self.layout = [row.strip() for row in self.layout if row.strip()]
            self.grid_size = len(self.layout)
        if self.grid_size < 2:
            raise ValueError(f"grid_size must be at least 2, got {self.grid_size}")
        if self.obstacle_divisor < 1:
            raise ValueError("obstacle_divisor must be positive")
        self.chaser_count = clamp_chaser_count(self.chaser_count)
        if self.seeker_start is None:
            self.seeker_start = (0, self.grid_size - 1)
        self.seeker_start = tuple(self.seeker_start)
        row, col = self.seeker_start
        if not (0 <= row < self.grid_size and 0 <= col < self.grid_size):
            raise ValueError(f"seeker_start {self.seeker_start} outside the grid")


@dataclass
class RunConfig:
    max_turns: Optional[int] = None
    turn_delay: float = 0.0  # seconds between turns
    color: bool = True
    listen_for_stop: bool = True


@dataclass
class ExportConfig:
    csv_enabled: bool = False
    snapshot_enabled: bool = False
    gif_enabled: bool = False
    quiet: bool = False
    out_dir: Path = field(default_factory=lambda: Path("./output"))


@dataclass
class SimulationConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    run: RunConfig = field(default_factory=RunConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def clamp_chaser_count(count: int) -> int:
    """Chaser count is always kept within [MIN_CHASERS, MAX_CHASERS]."""
    return min(MAX_CHASERS, max(MIN_CHASERS, int(count)))


def _parse_engine(raw: Dict[str, Any]) -> EngineConfig:
    """Parse the engine section from raw YAML data."""
    layout = raw.get('layout')
    if layout is not None:
        if isinstance(layout, str):
            layout = layout.split()
        layout = [str(row) for row in layout]
    start = raw.get('seeker_start')
    return EngineConfig(
        grid_size=raw.get('grid_size', 12),
        chaser_count=raw.get('chaser_count', 3),
        seeker_start=tuple(start) if start is not None else None,
        obstacle_divisor=raw.get('obstacle_divisor', 6),
        adjacency_penalty=raw.get('adjacency_penalty', -100),
        seed=raw.get('seed'),
        layout=layout,
    )


def _parse_run(raw: Dict[str, Any]) -> RunConfig:
    """Parse the run section from raw YAML data."""
    return RunConfig(
        max_turns=raw.get('max_turns'),
        turn_delay=float(raw.get('turn_delay', 0.0)),
        color=raw.get('color', True),
        listen_for_stop=raw.get('listen_for_stop', True),
    )


def _parse_export(raw: Dict[str, Any]) -> ExportConfig:
    """Parse the export section from raw YAML data."""
    return ExportConfig(
        csv_enabled=raw.get('csv', False),
        snapshot_enabled=raw.get('snapshot', False),
        gif_enabled=raw.get('gif', False),
        out_dir=Path(raw.get('out_dir', './output')),
    )


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    return SimulationConfig(
        engine=_parse_engine(raw.get('engine', {})),
        run=_parse_run(raw.get('run', {})),
        export=_parse_export(raw.get('export', {})),
    )
