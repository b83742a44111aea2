"""基组求值常量集中维护
========================

集中维护单位换算与默认阈值，便于统一管理。

参考来源：
- CODATA 2018：Bohr 半径 :math:`a_0 = 0.529177210903` Å

注意：原始记录（如格式化检查点文件）中的指数以 :math:`\\text{bohr}^{-2}` 为单位，
可视化层使用 Å，因此指数需乘以 :math:`(a_0/\\text{Å})^{-2}`。
"""

from __future__ import annotations

__all__ = [
    "BOHR_TO_ANGSTROM",
    "DEFAULT_BOUNDING_BOX_THRESHOLD",
]

# 1 bohr 对应的 Å 数
BOHR_TO_ANGSTROM = 0.529177210903

# 包围盒默认显著性阈值
DEFAULT_BOUNDING_BOX_THRESHOLD = 1e-3
