"""球面地球モデルでの重み付き回転半径（radius of gyration）。"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .spec_errors import DegenerateCentroid, EmptyInput, InvalidWeight
from .validation import check_same_length, validate_df_points


EARTH_RADIUS_KM = 6371.0

# 重心ベクトルのノルムがこれ未満なら方向が定まらないとみなす
_CENTROID_EPS = 1e-12


def to_unit_vectors(lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """緯度経度（度）を単位球上の (N, 3) ベクトルに変換する。"""
    lat = np.radians(lats)
    lon = np.radians(lons)
    cos_lat = np.cos(lat)
    return np.column_stack((cos_lat * np.cos(lon), cos_lat * np.sin(lon), np.sin(lat)))


def radius_of_gyration(
    lats: Sequence[float],
    lons: Sequence[float],
    weights: Optional[Sequence[float]] = None,
    *,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> float:
    """重み付き球面重心からの大円距離の重み付き二乗平均平方根（km）を返す。

    Args:
        lats: 緯度（度）。
        lons: 経度（度）。
        weights: 非負の重み。`None` なら全点1。
        earth_radius_km: 地球半径（km）。

    Returns:
        回転半径（km、0以上）。

    Raises:
        ShapeMismatch: 配列長が一致しない場合。
        EmptyInput: 点が0件の場合。
        InvalidWeight: 負の重みがある、または総重みが0以下の場合。
        DegenerateCentroid: 重み付き重心ベクトルの長さが0の場合（対蹠点など）。
    """
    if weights is None:
        weights = np.ones(len(lats))
    n = check_same_length(lats=lats, lons=lons, weights=weights)
    if n == 0:
        raise EmptyInput("radius of gyration requires at least one point")

    w = np.asarray(weights, dtype=float)
    if np.isnan(w).any() or (w < 0).any():
        raise InvalidWeight("weights must be non-negative numbers")
    total_weight = float(w.sum())
    if not total_weight > 0:
        raise InvalidWeight(f"total weight must be positive, got {total_weight}")

    vectors = to_unit_vectors(np.asarray(lats, dtype=float), np.asarray(lons, dtype=float))
    center = w @ vectors
    norm = float(np.linalg.norm(center))
    if norm < _CENTROID_EPS * total_weight:
        raise DegenerateCentroid("weighted centroid direction is undefined")
    center /= norm

    # 丸め誤差で [-1, 1] をはみ出すと acos が NaN になる
    dots = np.clip(vectors @ center, -1.0, 1.0)
    dist_km = earth_radius_km * np.arccos(dots)
    return float(np.sqrt(np.sum(w * dist_km ** 2) / total_weight))


def gyration_from_frame(
    df_points: pd.DataFrame,
    *,
    lat_col: str = "lat",
    lon_col: str = "lon",
    weight_col: Optional[str] = None,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> float:
    """地理点DataFrameから回転半径を求める。`weight_col` 未指定なら等重み。"""
    validate_df_points(df_points, lat_col, lon_col, weight_col)
    weights = None
    if weight_col is not None:
        weights = pd.to_numeric(df_points[weight_col], errors="coerce").to_numpy()
    return radius_of_gyration(
        df_points[lat_col].to_numpy(dtype=float),
        df_points[lon_col].to_numpy(dtype=float),
        weights,
        earth_radius_km=earth_radius_km,
    )


__all__ = ["EARTH_RADIUS_KM", "to_unit_vectors", "radius_of_gyration", "gyration_from_frame"]
