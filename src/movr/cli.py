# -*- coding: utf-8 -*-
"""
movr コマンドライン
- sessions: 観測CSV → セッションCSV
- flows:    セッションCSV → フローCSV
- gyration: 地理点CSV → 回転半径(km)を標準出力
- run:      観測CSV（+地理点CSV）→ エンジンで全成果物を出力
"""
from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import pandas as pd

from movr.core.config import AnalysisParams, IOParams
from movr.core.engine import EngineConfig, MobilityEngine
from movr.core.flows import flow_stat
from movr.core.gyration import gyration_from_frame
from movr.core.sessions import compress_movement
from movr.core.spec_errors import SpecError


def _write(df: pd.DataFrame, out: Optional[str]) -> None:
    if out:
        df.to_csv(out, index=False, encoding="utf-8")
        print(f"[OK] {len(df)} rows -> {out}")
    else:
        df.to_csv(sys.stdout, index=False)


def _cmd_sessions(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.input)
    out = compress_movement(df, args.gap, loc_col=args.loc_col, time_col=args.time_col)
    _write(out, args.output)
    return 0


def _cmd_flows(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.input)
    out = flow_stat(df, args.gap)
    _write(out, args.output)
    return 0


def _cmd_gyration(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.input)
    radius = gyration_from_frame(df, lat_col=args.lat_col, lon_col=args.lon_col, weight_col=args.weight_col)
    print(f"{radius:.6f}")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    df_obs = pd.read_csv(args.input)
    df_points = pd.read_csv(args.points) if args.points else None
    # 未指定のギャップは MOVR_SESSION_GAP / MOVR_FLOW_GAP か既定値に任せる
    gaps = {"session_gap": args.session_gap, "flow_gap": args.flow_gap}
    config = EngineConfig(
        analysis=AnalysisParams(**{k: v for k, v in gaps.items() if v is not None}),
        io=IOParams(out_dir=args.out_dir, output_filename=args.name, render_png=not args.no_png),
        loc_col=args.loc_col,
        time_col=args.time_col,
        weight_col=args.weight_col,
    )
    results = MobilityEngine(config).run(df_obs, df_points)
    for key in ("sessions_csv", "flows_csv", "stats_txt", "flow_png"):
        if results[key]:
            print(f"[OK] {key} -> {results[key]}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="movr", description="movement trace analysis")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("sessions", help="observations CSV -> sessions CSV")
    p.add_argument("input")
    p.add_argument("--gap", type=float, required=True, help="max same-session gap (seconds)")
    p.add_argument("--loc-col", default="location")
    p.add_argument("--time-col", default="timestamp")
    p.add_argument("-o", "--output", default=None)
    p.set_defaults(func=_cmd_sessions)

    p = sub.add_parser("flows", help="sessions CSV -> flows CSV")
    p.add_argument("input")
    p.add_argument("--gap", type=float, required=True, help="max gap between sessions (seconds)")
    p.add_argument("-o", "--output", default=None)
    p.set_defaults(func=_cmd_flows)

    p = sub.add_parser("gyration", help="points CSV -> radius of gyration (km)")
    p.add_argument("input")
    p.add_argument("--lat-col", default="lat")
    p.add_argument("--lon-col", default="lon")
    p.add_argument("--weight-col", default=None)
    p.set_defaults(func=_cmd_gyration)

    p = sub.add_parser("run", help="full analysis with artefacts under the result root")
    p.add_argument("input")
    p.add_argument("--points", default=None, help="points CSV for radius of gyration")
    p.add_argument("--session-gap", type=float, default=None, help="default: MOVR_SESSION_GAP or 600")
    p.add_argument("--flow-gap", type=float, default=None, help="default: MOVR_FLOW_GAP or 3600")
    p.add_argument("--loc-col", default="location")
    p.add_argument("--time-col", default="timestamp")
    p.add_argument("--weight-col", default=None)
    p.add_argument("--out-dir", default=None)
    p.add_argument("--name", default="movr")
    p.add_argument("--no-png", action="store_true")
    p.set_defaults(func=_cmd_run)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except SpecError as exc:
        print(f"[ERROR] {exc.code}: {exc.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
