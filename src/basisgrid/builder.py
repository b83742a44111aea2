r"""由原始壳层记录构造壳层序列

算法
====

对原始记录中的每个壳层：

1. 按运行中的原始高斯计数器切出其指数与收缩系数（SP 合并壳另取第二组系数）；
2. 指数做单位换算 :math:`\alpha \leftarrow \alpha \cdot f^{-2}`，其中 :math:`f` 为长度换算因子
   （默认 bohr→Å）；收缩系数的单位换算由壳层实现负责；
3. 按类型码表插入一个或两个壳层；未识别的类型码记录诊断并跳过，构造继续。

所属原子索引在记录中为 1 起，此处转换为 0 起。
"""

from __future__ import annotations

from typing import List, Tuple

from .constants import BOHR_TO_ANGSTROM
from .diagnostics import Diagnostic, emit
from .records import ShellData, atom_position
from .shell import Shell, ShellFactory, ShellKind, kinds_for_type_code

__all__ = [
    "build_shells",
]


def build_shells(
    shell_data: ShellData,
    geometry,
    shell_factory: ShellFactory,
    length_conversion: float = BOHR_TO_ANGSTROM,
) -> Tuple[List[Shell], List[Diagnostic]]:
    """按原始记录构造壳层序列。

    Parameters
    ----------
    shell_data : ShellData
        原始壳层记录。
    geometry
        原子坐标查找：``(n_atoms, 3)`` 数组或提供 ``position(atom)`` 的对象。
    shell_factory : callable
        ``factory(kind, atom_index, position, exponents, coefficients) -> Shell``。
    length_conversion : float, optional
        长度换算因子 :math:`f`，指数乘以 :math:`f^{-2}`。

    Returns
    -------
    shells : list[Shell]
        按记录顺序构造的壳层（决定全局基函数编号）。
    diagnostics : list[Diagnostic]
        未识别类型码等非致命情况。
    """
    conv_exponents = float(length_conversion) ** -2.0
    has_sp = len(shell_data.contraction_coefficients_sp) > 0

    shells: List[Shell] = []
    diagnostics: List[Diagnostic] = []
    cnt = 0

    for position, code in enumerate(shell_data.shell_types):
        atom = int(shell_data.shell_to_atom[position]) - 1
        pos = atom_position(geometry, atom)
        n_prim = int(shell_data.shell_primitives[position])

        expts = [float(shell_data.exponents[i]) * conv_exponents for i in range(cnt, cnt + n_prim)]
        coefs = [float(shell_data.contraction_coefficients[i]) for i in range(cnt, cnt + n_prim)]
        coefs_sp: List[float] = []
        if has_sp:
            coefs_sp = [float(shell_data.contraction_coefficients_sp[i]) for i in range(cnt, cnt + n_prim)]
        cnt += n_prim

        kinds = kinds_for_type_code(code)
        if not kinds:
            diagnostics.append(emit(Diagnostic(
                kind="unknown_shell_type",
                message=f"位置 {position} 处发现未知壳层类型，类型码: {int(code)}",
                shell_position=position,
                type_code=int(code),
            ), stacklevel=3))
            continue

        for kind in kinds:
            # SP 合并壳的 P 部分使用第二组系数
            use_sp = int(code) == -1 and kind is ShellKind.P
            shells.append(shell_factory(kind, atom, pos, expts, coefs_sp if use_sp else coefs))

    return shells, diagnostics
