"""セッション・フロー集計の要約統計とテキスト出力を扱うモジュール。"""

from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from .spec_errors import EC_STORAGE_IO, SpecError


def compute_trace_stats(
    df_sessions: pd.DataFrame,
    df_flows: pd.DataFrame,
    n_observations: int,
    radius_km: Optional[float] = None,
) -> Dict[str, object]:
    """セッション表・フロー表から要約統計を計算して返す。

    Args:
        df_sessions: `compress_movement` が返したセッション表。
        df_flows: `flows_to_frame` が返したフロー表。
        n_observations: 圧縮前の観測数。
        radius_km: 回転半径（未計算なら `None`）。

    Returns:
        observations/sessions/locations/edges/transitions/平均・最大滞在秒/回転半径 の辞書。
    """
    durations = pd.to_numeric(df_sessions["duration"], errors="coerce")
    stats: Dict[str, object] = {
        "observations": int(n_observations),
        "sessions": int(len(df_sessions)),
        "locations": int(df_sessions["location"].nunique()),
        "edges": int(len(df_flows)),
        "transitions": int(df_flows["flow"].sum()) if len(df_flows) else 0,
        "mean_duration_s": float(durations.mean()) if len(durations) else 0.0,
        "max_duration_s": float(durations.max()) if len(durations) else 0.0,
        "radius_of_gyration_km": radius_km,
    }
    return stats


def save_stats_txt(stats: Dict[str, object], path: str) -> str:
    """統計情報を `key: value` 形式でテキスト出力する。

    Raises:
        SpecError: ファイルI/Oに失敗した場合。
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    lines = []
    for key, value in stats.items():
        if value is None:
            lines.append(f"{key}: n/a\n")
        elif isinstance(value, float):
            lines.append(f"{key}: {value:.3f}\n")
        else:
            lines.append(f"{key}: {value}\n")
    try:
        out_path.write_text("".join(lines), encoding="utf-8")
        return str(out_path)
    except OSError as exc:  # noqa: BLE001
        raise SpecError(EC_STORAGE_IO, f"failed to save stats: {exc}")
