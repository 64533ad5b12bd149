import pandas as pd
import pytest

from movr.cli import build_parser, main


def test_sessions_and_flows_commands(make_trace, tmp_path):
    obs_csv = tmp_path / "obs.csv"
    sessions_csv = tmp_path / "sessions.csv"
    flows_csv = tmp_path / "flows.csv"
    make_trace().to_csv(obs_csv, index=False)

    assert main(["sessions", str(obs_csv), "--gap", "120", "-o", str(sessions_csv)]) == 0
    sessions = pd.read_csv(sessions_csv)
    assert len(sessions) == 4

    assert main(["flows", str(sessions_csv), "--gap", "600", "-o", str(flows_csv)]) == 0
    flows = pd.read_csv(flows_csv)
    assert flows["flow"].sum() == 3


def test_gyration_command(tmp_path, capsys):
    points_csv = tmp_path / "points.csv"
    pd.DataFrame({"lat": [0.0, 0.0], "lon": [0.0, 90.0], "w": [1.0, 1.0]}).to_csv(points_csv, index=False)
    assert main(["gyration", str(points_csv), "--weight-col", "w"]) == 0
    assert float(capsys.readouterr().out.strip()) == pytest.approx(5003.7717, abs=1e-3)


def test_run_command(make_trace, tmp_path, capsys):
    obs_csv = tmp_path / "obs.csv"
    make_trace().to_csv(obs_csv, index=False)
    out_dir = tmp_path / "out"
    code = main([
        "run", str(obs_csv), "--session-gap", "120", "--flow-gap", "600",
        "--out-dir", str(out_dir), "--no-png",
    ])
    assert code == 0
    assert "sessions_csv" in capsys.readouterr().out
    assert len(list(out_dir.glob("sessions-*.csv"))) == 1


def test_spec_error_exit_code(tmp_path, capsys):
    bad_csv = tmp_path / "bad.csv"
    pd.DataFrame({"location": [1]}).to_csv(bad_csv, index=False)
    assert main(["sessions", str(bad_csv), "--gap", "10"]) == 2
    assert "-2102" in capsys.readouterr().err


def test_run_command_uses_gap_env(make_trace, tmp_path, monkeypatch):
    """--session-gap / --flow-gap 未指定なら MOVR_SESSION_GAP / MOVR_FLOW_GAP が効く。"""
    monkeypatch.setenv("MOVR_SESSION_GAP", "30")
    monkeypatch.setenv("MOVR_FLOW_GAP", "10")
    obs_csv = tmp_path / "obs.csv"
    make_trace().to_csv(obs_csv, index=False)
    out_dir = tmp_path / "out"
    assert main(["run", str(obs_csv), "--out-dir", str(out_dir), "--no-png"]) == 0

    # 観測間隔60秒 > 30秒なので全観測が別セッションになり、移動300秒 > 10秒で遷移も数えない
    sessions = pd.read_csv(next(out_dir.glob("sessions-*.csv")))
    assert len(sessions) == 16
    flows = pd.read_csv(next(out_dir.glob("flows-*.csv")))
    assert flows.empty


def test_run_command_flags_override_gap_env(make_trace, tmp_path, monkeypatch):
    monkeypatch.setenv("MOVR_SESSION_GAP", "30")
    obs_csv = tmp_path / "obs.csv"
    make_trace().to_csv(obs_csv, index=False)
    out_dir = tmp_path / "out"
    assert main(["run", str(obs_csv), "--session-gap", "120", "--out-dir", str(out_dir), "--no-png"]) == 0
    assert len(pd.read_csv(next(out_dir.glob("sessions-*.csv")))) == 4


def test_parser_gap_defaults_are_unset():
    args = build_parser().parse_args(["run", "x.csv"])
    assert args.session_gap is None
    assert args.flow_gap is None
