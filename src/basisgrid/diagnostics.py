"""基组容器的诊断记录与报告

数值核心不直接打印，而是返回结构化结果：

- :class:`Diagnostic`：构造/缓冲区分配阶段的非致命异常情况；
- :class:`ShellListReport`：壳层类型计数与基函数个数一致性检查（``dump`` 结果）。

非致命情况同时以 :class:`ShellListWarning` 经 :mod:`warnings` 发出。
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Dict, Literal

from .shell import SHELL_N_BASIS, ShellKind

__all__ = [
    "ShellListWarning",
    "Diagnostic",
    "ShellListReport",
    "emit",
    "tally_shells",
]

DiagnosticKind = Literal["unknown_shell_type", "triangular_parity"]


class ShellListWarning(UserWarning):
    """基组容器的非致命诊断警告。"""


@dataclass(frozen=True)
class Diagnostic:
    """单条诊断记录。

    Attributes
    ----------
    kind : {"unknown_shell_type", "triangular_parity"}
        诊断类别。
    message : str
        人类可读的说明。
    shell_position : int | None
        原始记录中的壳层位置（仅 ``unknown_shell_type``）。
    type_code : int | None
        未识别的类型码（仅 ``unknown_shell_type``）。
    """

    kind: DiagnosticKind
    message: str
    shell_position: int | None = None
    type_code: int | None = None


def emit(diag: Diagnostic, stacklevel: int = 3) -> Diagnostic:
    """以 :class:`ShellListWarning` 发出诊断并原样返回，便于调用方收集。"""
    warnings.warn(diag.message, ShellListWarning, stacklevel=stacklevel)
    return diag


@dataclass
class ShellListReport:
    r"""壳层类型计数报告。

    Attributes
    ----------
    tallies : dict[ShellKind, int]
        各类型壳层个数（所有类型均出现，缺省为 0）。
    tallied_n_basis : int
        按类型查表累加得到的基函数总数。
    n_basis : int
        容器按各壳层 ``n_basis`` 求和得到的基函数总数。
    """

    tallies: Dict[ShellKind, int] = field(default_factory=dict)
    tallied_n_basis: int = 0
    n_basis: int = 0

    @property
    def ok(self) -> bool:
        """两种计数方式是否一致。"""
        return self.tallied_n_basis == self.n_basis

    def format(self) -> str:
        """渲染为文本表格（类型计数与一致性检查）。"""
        check = "OK" if self.ok else "NOT OK"
        header = "".join(f"{kind.value:>5}" for kind in ShellKind)
        counts = "".join(f"{self.tallies.get(kind, 0):>5}" for kind in ShellKind)
        return "\n".join([
            f"Basis function check:      {check}",
            f"Shell types:              {header}",
            f"                          {counts}",
        ])

    def to_dict(self) -> dict:
        return {
            "tallies": {kind.value: int(self.tallies.get(kind, 0)) for kind in ShellKind},
            "tallied_n_basis": int(self.tallied_n_basis),
            "n_basis": int(self.n_basis),
            "ok": bool(self.ok),
        }


def tally_shells(shells, n_basis: int) -> ShellListReport:
    """统计壳层类型并与 ``n_basis`` 对照。"""
    tallies = {kind: 0 for kind in ShellKind}
    n = 0
    for shell in shells:
        tallies[shell.kind] += 1
        n += SHELL_N_BASIS[shell.kind]
    return ShellListReport(tallies=tallies, tallied_n_basis=n, n_basis=int(n_basis))
