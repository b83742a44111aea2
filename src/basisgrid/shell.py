r"""壳层（shell）类型与外部求值能力接口

本模块定义基组容器所消费的“壳层”抽象：

- :class:`ShellKind`：封闭的角动量类型集合（S, P, D5, D6, F7, F10, G9, G15），
  后缀数字即该类型贡献的基函数个数；
- :data:`SHELL_N_BASIS`：类型到基函数个数的查找表；
- :data:`SHELL_TYPE_CODES`：格式化检查点约定下的整型类型码到壳层类型的映射；
- :class:`Shell`：单个壳层的求值协议（原始高斯的数学求值由外部实现提供）。

类型码约定
==========

- ``0`` → S；``-1`` → S 与 P（SP 合并壳，共享指数）；``1`` → P
- ``-2`` / ``2`` → D5 / D6
- ``-3`` / ``3`` → F7 / F10
- ``-4`` / ``4`` → G9 / G15

负号表示球谐（纯）形式，正号表示笛卡尔形式。
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol, Sequence

import numpy as np

__all__ = [
    "ShellKind",
    "SHELL_N_BASIS",
    "SHELL_TYPE_CODES",
    "Shell",
    "ShellFactory",
    "kinds_for_type_code",
]


class ShellKind(Enum):
    """壳层角动量类型。"""

    S = "S"
    P = "P"
    D5 = "D5"
    D6 = "D6"
    F7 = "F7"
    F10 = "F10"
    G9 = "G9"
    G15 = "G15"

    @property
    def n_basis(self) -> int:
        """该类型贡献的基函数个数。"""
        return SHELL_N_BASIS[self]


SHELL_N_BASIS: dict[ShellKind, int] = {
    ShellKind.S: 1,
    ShellKind.P: 3,
    ShellKind.D5: 5,
    ShellKind.D6: 6,
    ShellKind.F7: 7,
    ShellKind.F10: 10,
    ShellKind.G9: 9,
    ShellKind.G15: 15,
}

SHELL_TYPE_CODES: dict[int, tuple[ShellKind, ...]] = {
    0: (ShellKind.S,),
    -1: (ShellKind.S, ShellKind.P),
    1: (ShellKind.P,),
    -2: (ShellKind.D5,),
    2: (ShellKind.D6,),
    -3: (ShellKind.F7,),
    3: (ShellKind.F10,),
    -4: (ShellKind.G9,),
    4: (ShellKind.G15,),
}


def kinds_for_type_code(code: int) -> tuple[ShellKind, ...]:
    """返回类型码对应的壳层类型元组；未识别的类型码返回空元组。"""
    return SHELL_TYPE_CODES.get(int(code), ())


class Shell(Protocol):
    r"""单个壳层的求值协议。

    Attributes
    ----------
    kind : ShellKind
        角动量类型。
    atom_index : int
        所属原子索引（0 起）。
    n_basis : int
        基函数个数，构造后固定，等于 ``kind.n_basis``。

    Notes
    -----
    - :meth:`evaluate` 在该点不显著时返回 ``None``，否则返回长度为 ``n_basis`` 的数组；
    - :meth:`bounding_box` 给出最大模原始高斯衰减到阈值以下的空间范围。
    """

    kind: ShellKind
    atom_index: int
    n_basis: int

    def evaluate(self, x: float, y: float, z: float) -> np.ndarray | None:
        ...

    def bounding_box(self, threshold: float) -> tuple[np.ndarray, np.ndarray]:
        ...


# 工厂签名：(kind, atom_index, position, exponents, coefficients) -> Shell
ShellFactory = Callable[
    [ShellKind, int, np.ndarray, Sequence[float], Sequence[float]],
    Shell,
]
