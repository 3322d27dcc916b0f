from pathlib import Path

from grid_pursuit.export.reporter import Reporter
from grid_pursuit.main import build_config, main, parse_args

ROOT = Path(__file__).resolve().parent.parent


def test_cli_overrides_defaults():
    args = parse_args(["--size", "8", "--chasers", "5", "--seed", "9",
                       "--max-turns", "10", "--no-color", "--no-input"])
    config = build_config(args)
    assert config.engine.grid_size == 8
    assert config.engine.seeker_start == (0, 7)
    assert config.engine.chaser_count == 5
    assert config.engine.seed == 9
    assert config.run.max_turns == 10
    assert not config.run.color
    assert not config.run.listen_for_stop


def test_quiet_run_exits_cleanly(capsys):
    assert main(["--seed", "3", "--max-turns", "40", "--no-input", "--quiet"]) == 0


def test_scripted_run_writes_exports(tmp_path, capsys):
    code = main(["--config", str(ROOT / "configs" / "scripted.yaml"),
                 "--out-dir", str(tmp_path), "--gif", "--no-input",
                 "--delay", "0"])
    assert code == 0
    assert (tmp_path / "pursuit_log.csv").exists()
    assert (tmp_path / "final_state.png").exists()
    assert (tmp_path / "pursuit.gif").exists()
    out = capsys.readouterr().out
    assert "GRID PURSUIT SIMULATION REPORT" in out
    assert "***" in out


def test_report_includes_the_final_turn(tmp_path, monkeypatch, capsys):
    seen = []
    original = Reporter.update

    def recording(self, state):
        seen.append(state)
        original(self, state)

    monkeypatch.setattr(Reporter, "update", recording)
    assert main(["--config", str(ROOT / "configs" / "scripted.yaml"),
                 "--out-dir", str(tmp_path), "--no-input", "--delay", "0",
                 "--quiet"]) == 0
    assert seen[-1].status.is_terminal
    assert not any(s.status.is_terminal for s in seen[:-1])
    capsys.readouterr()


def test_missing_config_returns_error(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "nope.yaml"), "--no-input"]) == 1
    assert "not found" in capsys.readouterr().err
