"""フロー集計を起点×終点の行列図としてPNG出力するユーティリティ。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .flows import Edge
from .spec_errors import EC_STORAGE_PERM, SpecError


@dataclass(frozen=True)
class FlowMatrixPlotter:
    """フロー辞書から行列ヒートマップを描くプロッタ。"""

    style: Dict[str, object]

    def __post_init__(self) -> None:
        defaults = {
            "dpi": 144,
            "width_px": 960,
            "height_px": 960,
            "cmap": "Blues",
            "annotate": True,
            "max_labels": 40,
        }
        style = dict(defaults | self.style)
        object.__setattr__(self, "style", style)

    @staticmethod
    def build_matrix(flows: Mapping[Edge, int]) -> tuple[List[str], np.ndarray]:
        """地点ラベル（文字列順）と、行=起点・列=終点のカウント行列を返す。

        Raises:
            SpecError: フローが空の場合。
        """
        if not flows:
            raise SpecError(-2301, "no flows to plot")
        labels = sorted({str(loc) for edge in flows for loc in edge})
        index = {label: i for i, label in enumerate(labels)}
        matrix = np.zeros((len(labels), len(labels)), dtype=int)
        for (origin, destination), count in flows.items():
            matrix[index[str(origin)], index[str(destination)]] += int(count)
        return labels, matrix

    def plot(self, flows: Mapping[Edge, int]) -> plt.Figure:
        """行列図を描画し、Figureを返す。

        Raises:
            SpecError: 入力が空、または描画に失敗した場合。
        """
        labels, matrix = self.build_matrix(flows)
        dpi = self.style["dpi"]
        fig, ax = plt.subplots(
            figsize=(self.style["width_px"] / dpi, self.style["height_px"] / dpi),
            dpi=dpi,
        )
        try:
            image = ax.imshow(matrix, cmap=self.style["cmap"], origin="upper")
            fig.colorbar(image, ax=ax, label="transitions [count]")
            if len(labels) <= int(self.style["max_labels"]):
                ticks = np.arange(len(labels))
                ax.set_xticks(ticks)
                ax.set_yticks(ticks)
                ax.set_xticklabels(labels, rotation=90)
                ax.set_yticklabels(labels)
                if self.style["annotate"]:
                    for (i, j), value in np.ndenumerate(matrix):
                        if value:
                            ax.text(j, i, str(value), ha="center", va="center", fontsize=7)
            ax.set_title("Location flows")
            ax.set_xlabel("destination")
            ax.set_ylabel("origin")
            fig.tight_layout()
            return fig
        except Exception as exc:  # noqa: BLE001
            plt.close(fig)
            raise SpecError(-2302, f"failed to render flow matrix: {exc}")

    def save_png(self, fig: plt.Figure, path: str) -> str:
        """描画結果をPNGとして保存する。

        Raises:
            SpecError: ファイル保存に失敗した場合。
        """
        out_path = Path(path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fig.savefig(out_path, dpi=self.style["dpi"], bbox_inches="tight")
            return str(out_path)
        except OSError as exc:
            raise SpecError(EC_STORAGE_PERM, f"failed to save flow matrix png: {exc}")
        finally:
            plt.close(fig)


__all__ = ["FlowMatrixPlotter"]
