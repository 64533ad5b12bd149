from __future__ import annotations

import math
from typing import Iterable, Sized

import pandas as pd

from .spec_errors import InvalidThreshold, MissingColumns, ShapeMismatch, SpecError


REQUIRED_SESSION_COLUMNS = ("location", "start_time", "end_time")


def check_same_length(**arrays: Sized) -> int:
    """並列配列の長さが揃っているかを確認し、その長さを返す。

    Args:
        **arrays: 名前→配列。名前はエラーメッセージにのみ使う。

    Returns:
        共通の長さ。

    Raises:
        ShapeMismatch: 長さが一致しない場合。
    """
    lengths = {name: len(values) for name, values in arrays.items()}
    if len(set(lengths.values())) > 1:
        detail = ", ".join(f"{name}={n}" for name, n in lengths.items())
        raise ShapeMismatch(f"parallel arrays differ in length ({detail})")
    return next(iter(lengths.values()), 0)


def check_gap(gap: float, *, name: str = "gap") -> float:
    """ギャップ閾値（秒）を検証して float で返す。

    Raises:
        InvalidThreshold: 数値でない・負・NaN/inf の場合。
    """
    try:
        value = float(gap)
    except (TypeError, ValueError):
        raise InvalidThreshold(f"{name} must be a number, got {gap!r}")
    if not math.isfinite(value) or value < 0:
        raise InvalidThreshold(f"{name} must be a finite non-negative number, got {gap!r}")
    return value


def _check_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    """要求列が揃っているかを確認する。

    Raises:
        SpecError: DataFrameでない場合。
        MissingColumns: 列不足の場合。
    """
    if df is None or not isinstance(df, pd.DataFrame):
        raise SpecError(-2100, "input is not a DataFrame")
    missing = set(required) - set(df.columns)
    if missing:
        raise MissingColumns(f"missing required columns: {sorted(missing)}")


def validate_df_obs(df_obs: pd.DataFrame, loc_col: str = "location", time_col: str = "timestamp") -> None:
    """観測テーブルの必須列を検証する。行順は問わない（内部で時刻順に並べ替える）。"""
    _check_columns(df_obs, (loc_col, time_col))


def validate_df_sessions(df_sessions: pd.DataFrame) -> None:
    """セッションテーブルの必須列と時系列昇順を検証する。

    Raises:
        MissingColumns: 列不足の場合。
        SpecError: 時刻が数値でない、`start_time` が昇順でない、または `start_time > end_time` の行がある場合。
    """
    _check_columns(df_sessions, REQUIRED_SESSION_COLUMNS)
    starts = pd.to_numeric(df_sessions["start_time"], errors="coerce")
    ends = pd.to_numeric(df_sessions["end_time"], errors="coerce")
    if starts.isna().any() or ends.isna().any():
        raise SpecError(-2104, "start_time and end_time must be numeric seconds")
    if not starts.is_monotonic_increasing:
        raise SpecError(-2104, "sessions must be sorted by start_time")
    if (starts > ends).any():
        raise SpecError(-2104, "session start_time must not exceed end_time")


def validate_df_points(
    df_points: pd.DataFrame,
    lat_col: str = "lat",
    lon_col: str = "lon",
    weight_col: str | None = None,
) -> None:
    """地理点テーブルの必須列と座標範囲を検証する。"""
    required = [lat_col, lon_col] + ([weight_col] if weight_col else [])
    _check_columns(df_points, required)
    lat = pd.to_numeric(df_points[lat_col], errors="coerce")
    if lat.isna().any() or (lat.abs() > 90).any():
        raise SpecError(-2105, "latitude must be numeric within [-90, 90]")
    if pd.to_numeric(df_points[lon_col], errors="coerce").isna().any():
        raise SpecError(-2105, "longitude must be numeric")
