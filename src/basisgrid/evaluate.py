r"""网格点求值引擎

给定空间点，在壳层序列上计算：

- 全部基函数值向量 :math:`\chi_\mu(\mathbf{r})`；
- 基函数对乘积的下三角压缩（遗留接口）；
- 每个绑定密度矩阵的电子密度；
- 所需分子轨道的振幅。

显著性筛选
==========

壳层在不显著的点上返回 ``None``。三种求值对其处理方式不同，且须保持：

- :func:`shell_values` 将不显著壳层对应的位置**填零**，保持与 :math:`n` 的下标对齐；
- :func:`density_values` **压缩**掉不显著壳层，仅保留显著基函数值及其全局下标，
  再按全局下标查下三角压缩密度矩阵；
- :func:`orbital_values` 跳过不显著壳层，但不压缩，系数列始终按全局偏移取。

密度约定
========

对下三角压缩的对称密度矩阵 :math:`D`，

.. math::
    \rho(\mathbf{r}) = \sum_{i} \chi_i^2 D_{ii} + \sum_{j<i} 2\,(2\chi_i\chi_j)\,D_{ij}

其中求和只遍历显著基函数。非对角项在标准压缩因子 2 之外再乘 2，对应非对角基函数对被重复计数的
密度矩阵约定。

所有函数原地覆盖工作区缓冲区并返回其引用。
"""

from __future__ import annotations

import warnings
from typing import Sequence

import numpy as np

from .shell import Shell
from .workspace import EvaluationWorkspace

__all__ = [
    "shell_values_at",
    "shell_values",
    "shell_pair_values",
    "density_values",
    "orbital_values",
]


def shell_values_at(shells: Sequence[Shell], point, ws: EvaluationWorkspace) -> np.ndarray:
    """在点 ``point`` 处求全部基函数值（假定所有壳层均显著，不做补零）。

    壳层返回 ``None`` 时抛出 :class:`ValueError`，需要筛选时请用 :func:`shell_values`。
    """
    x, y, z = (float(c) for c in point)
    offset = 0
    for k, shell in enumerate(shells):
        n = shell.n_basis
        values = shell.evaluate(x, y, z)
        if values is None:
            raise ValueError(f"壳层 {k} 在点 ({x}, {y}, {z}) 处不显著，点形式求值要求所有壳层显著")
        ws.basis_values[offset:offset + n] = values
        offset += n
    return ws.basis_values


def shell_values(shells: Sequence[Shell], x: float, y: float, z: float, ws: EvaluationWorkspace) -> np.ndarray:
    """在 :math:`(x,y,z)` 处求全部基函数值；不显著壳层对应位置填零。"""
    offset = 0
    for shell in shells:
        n = shell.n_basis
        values = shell.evaluate(x, y, z)
        if values is not None:
            ws.basis_values[offset:offset + n] = values
        else:
            ws.basis_values[offset:offset + n] = 0.0
        offset += n
    return ws.basis_values


def shell_pair_values(shells: Sequence[Shell], point, ws: EvaluationWorkspace) -> np.ndarray:
    r"""基函数对乘积的下三角压缩：非对角 :math:`2\chi_i\chi_j`，对角 :math:`\chi_i^2`。

    .. deprecated::
        遗留接口，仅为兼容保留；密度请使用 :func:`density_values`。
    """
    warnings.warn(
        "shell_pair_values 为遗留接口，计划在未来版本中移除，请改用 density_values。",
        DeprecationWarning,
        stacklevel=2,
    )
    x = shell_values_at(shells, point, ws)
    rows, cols, scale = ws.tril()
    ws.pair_values[:rows.size] = scale * x[rows] * x[cols]
    return ws.pair_values


def _significant_basis(shells: Sequence[Shell], x: float, y: float, z: float, ws: EvaluationWorkspace) -> int:
    """压缩显著壳层的基函数值与全局下标，返回显著基函数个数。"""
    n_sig = 0
    basoff = 0
    for shell in shells:
        n = shell.n_basis
        values = shell.evaluate(x, y, z)
        if values is not None:
            ws.basis_values[n_sig:n_sig + n] = values
            ws.sig_basis[n_sig:n_sig + n] = np.arange(basoff, basoff + n)
            n_sig += n
        basoff += n
    return n_sig


def density_values(shells: Sequence[Shell], x: float, y: float, z: float, ws: EvaluationWorkspace) -> np.ndarray:
    """对每个绑定的密度矩阵在 :math:`(x,y,z)` 处求电子密度（一次遍历摊销基函数求值）。"""
    n_sig = _significant_basis(shells, x, y, z, ws)
    ws.density_values[:] = 0.0
    if n_sig == 0 or len(ws.density) == 0:
        return ws.density_values

    xs = ws.basis_values[:n_sig]
    ii = ws.sig_basis[:n_sig]
    ti = ii * (ii + 1) // 2
    diag = ti + ii

    # 显著基函数内 j < i 的对；全局下标单调递增，故 ii[i] > ii[j]
    a, b = np.tril_indices(n_sig, -1)
    off = ti[a] + ii[b]
    xij = 2.0 * xs[a] * xs[b]
    xx = xs * xs

    for k, dens in enumerate(ws.density.matrices):
        ws.density_values[k] = np.dot(xx, dens[diag]) + np.dot(2.0 * xij, dens[off])
    return ws.density_values


def orbital_values(shells: Sequence[Shell], x: float, y: float, z: float, ws: EvaluationWorkspace) -> np.ndarray:
    """在 :math:`(x,y,z)` 处求所需分子轨道的振幅。"""
    ws.orbital_values[:] = 0.0
    coefficients = ws.orbitals.coefficients
    rows = ws.orbitals.indices
    if coefficients is None or rows.size == 0:
        return ws.orbital_values

    basoff = 0
    for shell in shells:
        n = shell.n_basis
        values = shell.evaluate(x, y, z)
        if values is not None:
            ws.orbital_values += coefficients[rows, basoff:basoff + n] @ np.asarray(values, dtype=float)
        basoff += n
    return ws.orbital_values
