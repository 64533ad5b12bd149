"""観測ログからセッション・フロー・回転半径をまとめて生成する解析エンジン。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import pandas as pd

from . import naming
from .config import AnalysisParams, IOParams
from .flows import aggregate_session_flows, flows_to_frame
from .gyration import gyration_from_frame
from .logging_util import close_logger, get_logger, log_summary
from .plotting import FlowMatrixPlotter
from .sessions import compress_movement, frame_to_sessions
from .spec_errors import EC_STORAGE_IO, SpecError
from .stats_basic import compute_trace_stats, save_stats_txt
from .validation import validate_df_obs


@dataclass
class EngineConfig:
    """解析エンジンの挙動を制御する設定値群。"""

    analysis: AnalysisParams = field(default_factory=AnalysisParams)
    io: IOParams = field(default_factory=IOParams)
    plot_style: Dict[str, object] = field(default_factory=dict)
    dt: Optional[str] = None
    loc_col: str = "location"
    time_col: str = "timestamp"
    lat_col: str = "lat"
    lon_col: str = "lon"
    weight_col: Optional[str] = None


class MobilityEngine:
    """セッション表・フロー表・統計TXT・フロー行列PNGを生成する実行エントリーポイント。"""

    def __init__(self, config: Optional[EngineConfig] = None):
        """設定を受け取り命名を初期化する。ロガーは `run` 毎に開閉する。

        Args:
            config: 各種設定を束ねた `EngineConfig`。`None` なら既定値。
        """
        self.config = config or EngineConfig()
        self.dt = self.config.dt or naming.now_stamp()
        self.basename = naming.build_basename(self.config.io.output_filename, self.dt)
        self.logger = logging.getLogger(f"movr.{self.dt}")

    def _save_table(self, df: pd.DataFrame, kind: str) -> str:
        path = naming.result_path(kind, self.basename, self.config.io.out_dir)
        try:
            df.to_csv(path, index=False, encoding=self.config.io.csv_encoding)
        except OSError as exc:
            raise SpecError(EC_STORAGE_IO, f"failed to save {kind} table: {exc}")
        return path

    def run(
        self,
        df_obs: pd.DataFrame,
        df_points: Optional[pd.DataFrame] = None,
    ) -> Dict[str, object]:
        """セッション・フロー・統計を生成し、保存パスと要約を返す。

        Args:
            df_obs: 観測DataFrame（地点列・時刻列）。
            df_points: 回転半径用の地理点DataFrame（任意）。

        Returns:
            `sessions_csv` / `flows_csv` / `stats_txt` / `flow_png` のパスと `stats` を持つ辞書。
            任意工程（回転半径・PNG）が失敗した場合は該当値が `None`。

        Raises:
            SpecError: 入力検証やテーブル保存で致命的エラーが発生した場合。
        """
        self.logger = get_logger(self.dt)
        try:
            return self._run(df_obs, df_points)
        finally:
            close_logger(self.logger)

    def _run(self, df_obs: pd.DataFrame, df_points: Optional[pd.DataFrame]) -> Dict[str, object]:
        cfg = self.config
        results: Dict[str, object] = {
            "sessions_csv": None,
            "flows_csv": None,
            "stats_txt": None,
            "flow_png": None,
            "stats": None,
        }
        try:
            validate_df_obs(df_obs, cfg.loc_col, cfg.time_col)
            df_sessions = compress_movement(
                df_obs, cfg.analysis.session_gap, loc_col=cfg.loc_col, time_col=cfg.time_col
            )
            flows = aggregate_session_flows(frame_to_sessions(df_sessions), cfg.analysis.flow_gap)
        except SpecError as exc:
            self.logger.error("%s input validation failed: %s", exc.code, exc.message)
            raise
        df_flows = flows_to_frame(flows)
        self.logger.info(
            "compressed %d observations into %d sessions, %d edges",
            len(df_obs), len(df_sessions), len(df_flows),
        )

        radius_km: Optional[float] = None
        if df_points is not None:
            try:
                radius_km = gyration_from_frame(
                    df_points,
                    lat_col=cfg.lat_col,
                    lon_col=cfg.lon_col,
                    weight_col=cfg.weight_col,
                    earth_radius_km=cfg.analysis.earth_radius_km,
                )
                self.logger.info("radius of gyration: %.3f km", radius_km)
            except SpecError as exc:
                self.logger.warning("%s radius of gyration failed: %s", exc.code, exc.message)

        try:
            results["sessions_csv"] = self._save_table(df_sessions, "sessions")
            results["flows_csv"] = self._save_table(df_flows, "flows")
        except SpecError as exc:
            self.logger.error("%s save tables failed: %s", exc.code, exc.message)
            raise

        stats = compute_trace_stats(df_sessions, df_flows, len(df_obs), radius_km)
        results["stats"] = stats
        try:
            path = naming.result_path("stats", self.basename, cfg.io.out_dir)
            results["stats_txt"] = save_stats_txt(stats, path)
        except SpecError as exc:
            self.logger.error("%s save stats failed: %s", exc.code, exc.message)

        if cfg.io.render_png and flows:
            plotter = FlowMatrixPlotter({"dpi": cfg.io.png_dpi} | cfg.plot_style)
            try:
                fig = plotter.plot(flows)
                path = naming.result_path("image", self.basename, cfg.io.out_dir)
                results["flow_png"] = plotter.save_png(fig, path)
            except SpecError as exc:
                self.logger.error("%s flow matrix render failed: %s", exc.code, exc.message)

        log_summary(self.logger, {k: v for k, v in results.items() if v and k != "stats"} | stats)
        return results


def run_analysis(
    df_obs: pd.DataFrame,
    df_points: Optional[pd.DataFrame] = None,
    *,
    session_gap: Optional[float] = None,
    flow_gap: Optional[float] = None,
    out_dir: Optional[str] = None,
    render_png: bool = True,
) -> Dict[str, object]:
    """`MobilityEngine` を既定設定で1回実行する簡易API。"""
    gaps = {"session_gap": session_gap, "flow_gap": flow_gap}
    analysis = AnalysisParams(**{k: v for k, v in gaps.items() if v is not None})
    config = EngineConfig(analysis=analysis, io=IOParams(out_dir=out_dir, render_png=render_png))
    return MobilityEngine(config).run(df_obs, df_points)


__all__ = ["EngineConfig", "MobilityEngine", "run_analysis"]
