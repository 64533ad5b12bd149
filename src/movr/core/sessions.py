"""位置観測列を同一地点の滞在セッションへ圧縮するモジュール。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Hashable, List, Sequence

import numpy as np
import pandas as pd

from .order import order
from .validation import check_gap, check_same_length, validate_df_obs


logger = logging.getLogger(__name__)

SESSION_COLUMNS = ["location", "start_time", "end_time", "duration"]


@dataclass(frozen=True)
class Session:
    """同一地点に連続して滞在した時間区間。"""

    location: Hashable
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


def compress_sessions(
    locations: Sequence[Hashable],
    timestamps: Sequence[float],
    gap: float,
) -> List[Session]:
    """観測列を時刻順に走査し、同一地点の連続観測を1セッションへまとめる。

    次の観測が現在セッションと同じ地点で、かつ現在セッションの終了時刻からの
    差が `gap` 以下なら終了時刻を延長し、そうでなければ新しいセッションを開く。
    比較対象は常に延長中のセッション終了時刻なので、`gap` 以内の刻みが続く限り
    セッション長そのものは `gap` を超えて伸び続ける。

    Args:
        locations: 地点コード（ハッシュ可能な値）。
        timestamps: 観測時刻（秒）。`locations` と同じ長さ。任意順。
        gap: 同一セッションとみなす最大時間差（秒、0以上）。

    Returns:
        時刻順のセッションリスト。入力が空なら空リスト。

    Raises:
        ShapeMismatch: 配列長が一致しない場合。
        InvalidThreshold: `gap` が負などの場合。
    """
    n = check_same_length(locations=locations, timestamps=timestamps)
    gap = check_gap(gap)
    if n == 0:
        return []

    times = np.asarray(timestamps, dtype=float)
    # pandas Series もラベルではなく位置で参照する
    locs = [loc.item() if isinstance(loc, np.generic) else loc for loc in locations]
    sessions: List[Session] = []
    cur_loc: Any = None
    cur_start = cur_end = 0.0
    for i, idx in enumerate(order(times)):
        loc = locs[idx]
        t = float(times[idx])
        if i > 0 and loc == cur_loc and t - cur_end <= gap:
            cur_end = t
            continue
        if i > 0:
            sessions.append(Session(cur_loc, cur_start, cur_end))
        cur_loc, cur_start, cur_end = loc, t, t
    sessions.append(Session(cur_loc, cur_start, cur_end))

    logger.debug("compressed %d observations into %d sessions", n, len(sessions))
    return sessions


def sessions_to_frame(sessions: Sequence[Session]) -> pd.DataFrame:
    """セッションリストを `location/start_time/end_time/duration` 列のDataFrameにする。"""
    df = pd.DataFrame(
        {
            "location": [s.location for s in sessions],
            "start_time": pd.Series([s.start_time for s in sessions], dtype=float),
            "end_time": pd.Series([s.end_time for s in sessions], dtype=float),
        }
    )
    df["duration"] = df["end_time"] - df["start_time"]
    return df[SESSION_COLUMNS]


def frame_to_sessions(df_sessions: pd.DataFrame) -> List[Session]:
    return [
        Session(loc, float(st), float(et))
        for loc, st, et in zip(df_sessions["location"], df_sessions["start_time"], df_sessions["end_time"])
    ]


def to_epoch_seconds(values: pd.Series) -> pd.Series:
    """数値列はそのまま、日時列はUTCのエポック秒に変換する。"""
    if pd.api.types.is_numeric_dtype(values):
        return values.astype(float)
    ts = pd.to_datetime(values, errors="coerce", utc=True)
    seconds = (ts - pd.Timestamp(0, tz="UTC")).dt.total_seconds()
    return seconds


def compress_movement(
    df_obs: pd.DataFrame,
    gap: float,
    *,
    loc_col: str = "location",
    time_col: str = "timestamp",
) -> pd.DataFrame:
    """観測DataFrameからセッションDataFrameを作る。

    `time_col` は秒の数値列でも日時列でもよい。時刻に変換できない行は除外する。
    """
    validate_df_obs(df_obs, loc_col, time_col)
    seconds = to_epoch_seconds(df_obs[time_col])
    valid = seconds.notna()
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("dropped %d observations with unparsable %s", dropped, time_col)
    sessions = compress_sessions(
        df_obs.loc[valid, loc_col].tolist(),
        seconds[valid].to_numpy(),
        gap,
    )
    return sessions_to_frame(sessions)


__all__ = [
    "Session",
    "SESSION_COLUMNS",
    "compress_sessions",
    "sessions_to_frame",
    "frame_to_sessions",
    "to_epoch_seconds",
    "compress_movement",
]
