from __future__ import annotations

import numpy as np

__all__ = [
    "triangular_size",
    "packed_index",
    "pack_symmetric",
    "unpack_symmetric",
]


def triangular_size(n: int) -> tuple[int, bool]:
    r"""计算 :math:`n\times n` 对称矩阵下三角（含对角）的压缩长度。

    .. math::
        T = \frac{n(n+1)}{2}

    Parameters
    ----------
    n : int
        矩阵维数（基函数个数）。

    Returns
    -------
    size : int
        压缩长度 :math:`T`；若奇偶校验 :math:`2T = n(n+1)` 失败，则返回 :math:`T+1`。
    ok : bool
        奇偶校验是否通过。对任意非负整数均应为 ``True``。
    """
    n = int(n)
    size = n * (n + 1) // 2
    if 2 * size != n * (n + 1):
        return size + 1, False
    return size, True


def packed_index(row: int, col: int) -> int:
    r"""下三角压缩存储的一维下标 :math:`row(row+1)/2 + col`（自动交换使 ``col <= row``）。"""
    if col > row:
        row, col = col, row
    return row * (row + 1) // 2 + col


def pack_symmetric(matrix: np.ndarray) -> np.ndarray:
    r"""将对称矩阵按行优先的下三角（含对角）压缩为一维数组。

    顺序为 :math:`(0,0), (1,0), (1,1), (2,0), \dots`，与 :func:`packed_index` 一致。
    """
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"需要方阵，实际形状: {a.shape}")
    rows, cols = np.tril_indices(a.shape[0])
    return a[rows, cols].copy()


def unpack_symmetric(packed: np.ndarray, n: int) -> np.ndarray:
    """将下三角压缩数组还原为 :math:`n\\times n` 对称矩阵。"""
    p = np.asarray(packed, dtype=float)
    size, _ = triangular_size(n)
    if p.size < size:
        raise ValueError(f"压缩数组长度 {p.size} 小于 n(n+1)/2 = {size}")
    out = np.zeros((n, n), dtype=float)
    rows, cols = np.tril_indices(n)
    out[rows, cols] = p[:rows.size]
    out[cols, rows] = p[:rows.size]
    return out
