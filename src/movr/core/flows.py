"""連続するセッション間の有向遷移（フロー）を集計するモジュール。"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from .sessions import Session, frame_to_sessions
from .validation import check_gap, check_same_length, validate_df_sessions


logger = logging.getLogger(__name__)

Edge = Tuple[Hashable, Hashable]
FLOW_COLUMNS = ["origin", "destination", "edge", "flow"]


def format_edge(edge: Edge) -> str:
    """表示用の `"origin->destination"` ラベル。集計キーには使わない。"""
    origin, destination = edge
    return f"{origin}->{destination}"


def aggregate_flows(
    session_locations: Sequence[Hashable],
    starts: Sequence[float],
    ends: Sequence[float],
    gap: float,
) -> Dict[Edge, int]:
    """時刻順のセッション列から、地点ペアごとの遷移回数を数える。

    隣接セッション `i-1 → i` について `starts[i] - ends[i-1] <= gap` のときだけ
    `(loc[i-1], loc[i])` を1回数える。条件を満たさない場合も次の比較の基準は
    直前のセッションになる。入力は並べ替えない。

    Args:
        session_locations: セッションの地点コード。
        starts: セッション開始時刻（秒）。
        ends: セッション終了時刻（秒）。
        gap: 遷移とみなす最大の空白時間（秒、0以上）。

    Returns:
        `(origin, destination)` → 回数 の辞書。順序は規定しない。
        セッションが2件未満なら空辞書。

    Raises:
        ShapeMismatch: 配列長が一致しない場合。
        InvalidThreshold: `gap` が負などの場合。
    """
    m = check_same_length(session_locations=session_locations, starts=starts, ends=ends)
    gap = check_gap(gap)
    counts: Dict[Edge, int] = {}
    if m < 2:
        return counts

    start_arr = np.asarray(starts, dtype=float)
    end_arr = np.asarray(ends, dtype=float)
    locs = [loc.item() if isinstance(loc, np.generic) else loc for loc in session_locations]
    for i in range(1, m):
        if start_arr[i] - end_arr[i - 1] <= gap:
            edge = (locs[i - 1], locs[i])
            counts[edge] = counts.get(edge, 0) + 1

    logger.debug("aggregated %d sessions into %d edges", m, len(counts))
    return counts


def aggregate_session_flows(sessions: Sequence[Session], gap: float) -> Dict[Edge, int]:
    """`Session` リストを直接受け取る `aggregate_flows`。"""
    return aggregate_flows(
        [s.location for s in sessions],
        [s.start_time for s in sessions],
        [s.end_time for s in sessions],
        gap,
    )


def flows_to_frame(flows: Mapping[Edge, int]) -> pd.DataFrame:
    """集計結果を `origin/destination/edge/flow` 列のDataFrameにする。

    行は flow 降順、同数なら edge ラベル昇順に並べる（表示用）。
    """
    rows = [
        {"origin": o, "destination": d, "edge": format_edge((o, d)), "flow": int(n)}
        for (o, d), n in flows.items()
    ]
    df = pd.DataFrame(rows, columns=FLOW_COLUMNS)
    df = df.sort_values(["flow", "edge"], ascending=[False, True], kind="mergesort")
    return df.reset_index(drop=True)


def flow_stat(df_sessions: pd.DataFrame, gap: float) -> pd.DataFrame:
    """セッションDataFrameからフローDataFrameを作る。"""
    validate_df_sessions(df_sessions)
    flows = aggregate_session_flows(frame_to_sessions(df_sessions), gap)
    return flows_to_frame(flows)


__all__ = [
    "Edge",
    "FLOW_COLUMNS",
    "format_edge",
    "aggregate_flows",
    "aggregate_session_flows",
    "flows_to_frame",
    "flow_stat",
]
