"""解析パラメータと入出力設定。環境変数で既定値を差し替えられる。"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from .gyration import EARTH_RADIUS_KM
from .validation import check_gap


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return check_gap(raw, name=name)


@dataclass
class AnalysisParams:
    # ギャップはいずれも秒。MOVR_SESSION_GAP / MOVR_FLOW_GAP で既定値を上書き
    session_gap: float = field(default_factory=lambda: _env_float("MOVR_SESSION_GAP", 600.0))
    flow_gap: float = field(default_factory=lambda: _env_float("MOVR_FLOW_GAP", 3600.0))
    earth_radius_km: float = EARTH_RADIUS_KM

    def __post_init__(self) -> None:
        self.session_gap = check_gap(self.session_gap, name="session_gap")
        self.flow_gap = check_gap(self.flow_gap, name="flow_gap")


@dataclass
class IOParams:
    # out_dir 未指定(None)なら <MOVR_RESULT_ROOT>/tables 等を使う
    out_dir: Optional[str] = None
    output_filename: str = "movr"
    csv_encoding: str = "utf-8"
    render_png: bool = True
    png_dpi: int = 144


__all__ = ["AnalysisParams", "IOParams"]
