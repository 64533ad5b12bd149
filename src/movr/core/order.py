"""キー配列を昇順に並べる添字列（順列）を返す間接ソート。"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Optional, Sequence

import numpy as np


Comparator = Callable[[Any, Any], int]


def cmp_int(a: Any, b: Any) -> int:
    """整数の三方比較。"""
    a, b = int(a), int(b)
    return (a > b) - (a < b)


def cmp_double(a: Any, b: Any) -> int:
    """倍精度浮動小数の三方比較。"""
    a, b = float(a), float(b)
    return (a > b) - (a < b)


def cmp_float(a: Any, b: Any) -> int:
    """単精度に丸めてから比較する。倍精度では異なる値が等しいと判定されうる。"""
    a, b = np.float32(a), np.float32(b)
    return int(a > b) - int(a < b)


def order(keys: Sequence[Any], comparator: Optional[Comparator] = None) -> np.ndarray:
    """`keys` を非減少順に並べる順列を返す。

    ソートは安定で、等しいキーは入力順を保つ。既に整列済みの入力に対しては
    恒等順列になる。

    Args:
        keys: 比較可能なキーの配列。
        comparator: 三方比較関数 `cmp(a, b)`（負/0/正）。`None` なら自然順序。

    Returns:
        長さ N の添字配列（`numpy.intp`）。N=0 なら空配列。
    """
    n = len(keys)
    if n == 0:
        return np.empty(0, dtype=np.intp)
    if comparator is None:
        return np.argsort(np.asarray(keys), kind="stable").astype(np.intp, copy=False)
    ranked = sorted(range(n), key=cmp_to_key(lambda i, j: comparator(keys[i], keys[j])))
    return np.asarray(ranked, dtype=np.intp)


__all__ = ["Comparator", "cmp_int", "cmp_double", "cmp_float", "order"]
