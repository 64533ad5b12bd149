import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

# ルートは環境変数で差し替え可
DEFAULT_RESULT_ROOT = str((Path.cwd() / "movr_data/output").resolve())


def result_root() -> Path:
    return Path(os.getenv("MOVR_RESULT_ROOT") or DEFAULT_RESULT_ROOT)


def now_stamp() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def _sanitize(text: str) -> str:
    sanitized = re.sub(r"[^0-9A-Za-z._-]+", "-", text.strip())
    sanitized = re.sub(r"-+", "-", sanitized).strip("-")
    return sanitized or "untitled"


def build_basename(filename: str, dt: str) -> str:
    return f"{_sanitize(filename)}-{_sanitize(dt)}"


def result_path(kind: str, basename: str, out_dir: Optional[str] = None) -> str:
    """
    出力ファイルの絶対パスを生成。
    優先: out_dir > MOVR_RESULT_ROOT > DEFAULT_RESULT_ROOT
    """
    subdir_map = {"sessions": "tables", "flows": "tables", "stats": "stats", "image": "images"}
    ext_map = {"sessions": "csv", "flows": "csv", "stats": "txt", "image": "png"}

    if kind not in subdir_map:
        raise ValueError(f"unknown artefact kind: {kind}")

    out = Path(out_dir) if out_dir else result_root() / subdir_map[kind]
    out.mkdir(parents=True, exist_ok=True)
    return str(out / f"{kind}-{basename}.{ext_map[kind]}")


def log_path(stem: str) -> str:
    """ログの出力先: <result_root>/meta/logs/<stem>.log"""
    log_dir = result_root() / "meta" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir / f"{_sanitize(stem)}.log")
