r"""求值工作区与外部矩阵绑定

网格求值在每个点上都要复用若干缓冲区。为避免共享容器上的可变暂存区带来的重入问题，
这些缓冲区集中在调用方持有的 :class:`EvaluationWorkspace` 中：

- ``basis_values``：长度 :math:`n` 的基函数值（密度求值时存放紧凑的显著基函数值）；
- ``sig_basis``：长度 :math:`n` 的显著基函数全局下标；
- ``pair_values``：长度 :math:`T = n(n+1)/2` 的基函数对乘积（遗留接口）；
- ``density_values`` / ``orbital_values``：与当前绑定长度一致的输出。

每次求值都原地覆盖这些缓冲区并返回其引用，引用仅在下一次对同一工作区求值前有效。
多线程时每个工作线程应持有自己的工作区（见 :meth:`basisgrid.shell_list.ShellList.new_workspace`）。

绑定
====

:class:`DensityBinding` 与 :class:`OrbitalBinding` 只持有调用方数组的**引用**（不复制）。
被引用的数组由调用方拥有，其生命周期必须覆盖绑定的使用期。
借用要求传入 ``float64`` 的 :class:`numpy.ndarray`（其他输入会被拒绝，以免静默复制）。
:meth:`EvaluationWorkspace.resize` 会清空两类绑定，基组变化后需重新绑定。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

from .utils import triangular_size

__all__ = [
    "DensityBinding",
    "OrbitalBinding",
    "EvaluationWorkspace",
]


def _require_float_array(a, name: str) -> None:
    """借用要求调用方传入 float64 ndarray，否则 np.asarray 会产生副本。"""
    if not isinstance(a, np.ndarray) or a.dtype != np.float64:
        raise ValueError(f"{name} 须为 float64 的 numpy.ndarray（绑定只借用引用，不复制）")


@dataclass(frozen=True)
class DensityBinding:
    """借用的下三角压缩密度矩阵列表。"""

    matrices: Tuple[np.ndarray, ...] = ()

    @classmethod
    def borrow(cls, matrices: Sequence[np.ndarray], n_basis: int) -> "DensityBinding":
        size, _ = triangular_size(n_basis)
        borrowed = []
        for k, a in enumerate(matrices):
            _require_float_array(a, f"密度矩阵 {k}")
            if a.ndim != 1:
                raise ValueError(f"密度矩阵 {k} 须为一维下三角压缩数组，实际维数: {a.ndim}")
            if a.size < size:
                raise ValueError(f"密度矩阵 {k} 长度 {a.size} 小于 n(n+1)/2 = {size}")
            borrowed.append(a)
        return cls(matrices=tuple(borrowed))

    def __len__(self) -> int:
        return len(self.matrices)


@dataclass(frozen=True)
class OrbitalBinding:
    """借用的轨道系数矩阵（行：轨道，列：全局基函数）及所需轨道行号。"""

    coefficients: np.ndarray | None = None
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.intp))

    @classmethod
    def borrow(cls, coefficients: np.ndarray, indices: Sequence[int], n_basis: int) -> "OrbitalBinding":
        c = coefficients
        _require_float_array(c, "轨道系数矩阵")
        if c.ndim != 2:
            raise ValueError(f"轨道系数矩阵须为二维，实际维数: {c.ndim}")
        if c.shape[1] < n_basis:
            raise ValueError(f"轨道系数矩阵列数 {c.shape[1]} 小于基函数个数 {n_basis}")
        idx = np.asarray(list(indices), dtype=np.intp)
        bad = idx[(idx < 0) | (idx >= c.shape[0])]
        if bad.size:
            raise ValueError(f"轨道行号 {bad.tolist()} 超出范围 [0, {c.shape[0]})")
        return cls(coefficients=c, indices=idx)

    def __len__(self) -> int:
        return int(self.indices.size)


class EvaluationWorkspace:
    """单点求值的暂存缓冲区集合（调用方持有，非线程共享）。

    Parameters
    ----------
    n_basis : int
        基函数个数。
    """

    def __init__(self, n_basis: int = 0):
        self.parity_ok = True
        self.resize(n_basis)

    def resize(self, n_basis: int) -> bool:
        """按基函数个数重新分配缓冲区，返回三角长度奇偶校验是否通过。"""
        self.n_basis = int(n_basis)
        self.basis_values = np.zeros(self.n_basis, dtype=float)
        self.sig_basis = np.zeros(self.n_basis, dtype=np.intp)
        size, self.parity_ok = triangular_size(self.n_basis)
        self.pair_values = np.zeros(size, dtype=float)
        self._tril = None
        # 旧绑定按原基组大小校验，基组变化后失效
        self.density = DensityBinding()
        self.orbitals = OrbitalBinding()
        self.density_values = np.zeros(0, dtype=float)
        self.orbital_values = np.zeros(0, dtype=float)
        return self.parity_ok

    @property
    def triangular_size(self) -> int:
        return int(self.pair_values.size)

    def tril(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """行优先下三角（含对角）下标及对应系数（非对角 2，对角 1），惰性缓存。"""
        if self._tril is None:
            rows, cols = np.tril_indices(self.n_basis)
            scale = np.where(rows == cols, 1.0, 2.0)
            self._tril = (rows, cols, scale)
        return self._tril

    def bind_density(self, matrices: Sequence[np.ndarray]) -> None:
        self.density = DensityBinding.borrow(matrices, self.n_basis)
        self.density_values = np.zeros(len(self.density), dtype=float)

    def bind_orbitals(self, coefficients: np.ndarray, indices: Sequence[int]) -> None:
        self.orbitals = OrbitalBinding.borrow(coefficients, indices, self.n_basis)
        self.orbital_values = np.zeros(len(self.orbitals), dtype=float)
