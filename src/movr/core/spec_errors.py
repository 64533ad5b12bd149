class SpecError(Exception):
    """エラーコード付き例外。"""

    code = -2000

    def __init__(self, code: int, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class _CodedError(SpecError):
    """クラス毎に固定コードを持つ `SpecError`。"""

    def __init__(self, message: str):
        super().__init__(type(self).code, message)


class ShapeMismatch(_CodedError):
    """並列配列の長さが一致しない。"""

    code = -2101


class MissingColumns(_CodedError):
    """DataFrameに必須列が無い。"""

    code = -2102


class EmptyInput(_CodedError):
    """1件以上を要求する入力が空。"""

    code = -2103


class InvalidThreshold(_CodedError):
    """ギャップ閾値が負、または有限でない。"""

    code = -2201


class InvalidWeight(_CodedError):
    """重みが負、または総重みが0以下。"""

    code = -2202


class DegenerateCentroid(_CodedError):
    """重み付き重心の方向が定まらない。"""

    code = -2203


EC_STORAGE_PERM = -2702
EC_STORAGE_IO = -2704


__all__ = [
    "SpecError",
    "ShapeMismatch",
    "MissingColumns",
    "EmptyInput",
    "InvalidThreshold",
    "InvalidWeight",
    "DegenerateCentroid",
    "EC_STORAGE_PERM",
    "EC_STORAGE_IO",
]
