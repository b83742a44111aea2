from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

__all__ = [
    "ShellData",
    "atom_position",
]


@dataclass
class ShellData:
    r"""原始壳层记录（量子化学格式化检查点约定）。

    Attributes
    ----------
    shell_types : list[int]
        每个壳层的类型码（见 :data:`basisgrid.shell.SHELL_TYPE_CODES`）。
    shell_to_atom : list[int]
        每个壳层所属原子索引，**1 起**。
    shell_primitives : list[int]
        每个壳层的原始高斯个数。
    exponents : list[float]
        所有壳层按记录顺序拼接的原始指数（单位 :math:`\text{bohr}^{-2}`）。
    contraction_coefficients : list[float]
        与 ``exponents`` 一一对应的收缩系数。
    contraction_coefficients_sp : list[float]
        SP 合并壳的 P 部分收缩系数；无 SP 壳时为空。
    overlap_matrix : list[float]
        可选的下三角压缩重叠矩阵；长度不等于 :math:`n(n+1)/2` 时被忽略。
    """

    shell_types: List[int]
    shell_to_atom: List[int]
    shell_primitives: List[int]
    exponents: List[float]
    contraction_coefficients: List[float]
    contraction_coefficients_sp: List[float] = field(default_factory=list)
    overlap_matrix: List[float] = field(default_factory=list)

    @property
    def n_shells(self) -> int:
        return len(self.shell_types)


def atom_position(geometry, atom: int) -> np.ndarray:
    """从几何对象中取出第 ``atom`` 个原子（0 起）的坐标。

    ``geometry`` 可以是形如 ``(n_atoms, 3)`` 的数组，也可以是任何提供
    ``position(atom)`` 方法的对象。
    """
    if hasattr(geometry, "position"):
        pos = geometry.position(atom)
    else:
        pos = geometry[atom]
    pos = np.asarray(pos, dtype=float)
    if pos.shape != (3,):
        raise ValueError(f"原子 {atom} 的坐标形状应为 (3,)，实际: {pos.shape}")
    return pos
