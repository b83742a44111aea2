"""basisgrid 包
=================

在任意三维空间点上计算分子基组的基函数值，并由此得到电子密度与分子轨道振幅，
供可视化管线（如等值面绘制）使用。

本包提供：

- 由格式化检查点约定的原始壳层记录构造有序壳层序列（S/P/D5/D6/F7/F10/G9/G15 与 SP 合并壳）
- 基函数个数、原子偏移、下三角压缩存储的簿记
- 带显著性筛选的单点求值：基函数值、电子密度、分子轨道振幅

单个壳层的原始高斯求值、文件解析、几何存储与渲染均由外部协作者提供。

注：本项目所有文档与注释均使用中文，Docstring 采用 Sphinx + NumPy 风格，公式使用 ``:math:`` 标记。
"""

from basisgrid.shell import SHELL_N_BASIS, SHELL_TYPE_CODES, Shell, ShellKind
from basisgrid.records import ShellData
from basisgrid.diagnostics import Diagnostic, ShellListReport, ShellListWarning
from basisgrid.workspace import EvaluationWorkspace
from basisgrid.shell_list import ShellList, ShellListConfig
from basisgrid.utils import pack_symmetric, unpack_symmetric, triangular_size

__all__ = [
    "SHELL_N_BASIS",
    "SHELL_TYPE_CODES",
    "Shell",
    "ShellKind",
    "ShellData",
    "Diagnostic",
    "ShellListReport",
    "ShellListWarning",
    "EvaluationWorkspace",
    "ShellList",
    "ShellListConfig",
    "pack_symmetric",
    "unpack_symmetric",
    "triangular_size",
]

__version__ = "0.1.0"
