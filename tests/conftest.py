# tests/conftest.py
import os
import sys

import numpy as np
import pandas as pd
import pytest

import matplotlib
matplotlib.use("Agg")  # ヘッドレス

# プロジェクトの src/ を import パスへ
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)


@pytest.fixture(autouse=True)
def patch_output_dirs(monkeypatch, tmp_path):
    """
    出力先をテスト毎の一時ディレクトリへ向け、ギャップの環境変数を無効化する。
    """
    monkeypatch.setenv("MOVR_RESULT_ROOT", str(tmp_path / "results"))
    monkeypatch.delenv("MOVR_SESSION_GAP", raising=False)
    monkeypatch.delenv("MOVR_FLOW_GAP", raising=False)


@pytest.fixture
def make_trace():
    """
    地点を巡回する観測ログのファクトリ。各地点で `pings` 回、`step` 秒間隔で観測し、
    地点間の移動に `travel` 秒かける。
    """
    def _make(route=("home", "work", "gym", "home"), pings: int = 4, step: float = 60.0,
              travel: float = 300.0) -> pd.DataFrame:
        rows = []
        t = 0.0
        for loc in route:
            for _ in range(pings):
                rows.append({"location": loc, "timestamp": t})
                t += step
            t += travel
        return pd.DataFrame(rows)
    return _make


@pytest.fixture
def shuffled():
    """DataFrameの行順を固定シードでシャッフルする。"""
    def _shuffle(df: pd.DataFrame, seed: int = 42) -> pd.DataFrame:
        rng = np.random.default_rng(seed)
        return df.iloc[rng.permutation(len(df))].reset_index(drop=True)
    return _shuffle
