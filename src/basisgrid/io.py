from __future__ import annotations

import json
from pathlib import Path
from typing import List

import numpy as np

from .diagnostics import ShellListReport

__all__ = [
    "export_report_json",
    "export_point_values_csv",
]


def export_report_json(out_path: str | Path, report: ShellListReport, extra: dict | None = None) -> None:
    """导出壳层类型计数报告为 JSON。

    ``extra`` 中的键值（如原子偏移）会并入顶层。
    """
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = report.to_dict()
    if extra:
        data.update(extra)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_point_values_csv(
    out_path: str | Path,
    points: np.ndarray,
    values: np.ndarray,
    labels: List[str] | None = None,
) -> None:
    """导出采样点及其取值为 CSV：列为 `x,y,z,<labels...>`。

    ``values`` 形状为 ``(N,)`` 或 ``(N, M)``；若未提供 ``labels`` 则命名为 ``v0, v1, ...``。
    """
    pts = np.asarray(points, dtype=float)
    vals = np.asarray(values, dtype=float)
    if vals.ndim == 1:
        vals = vals[:, None]
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"points 形状应为 (N, 3)，实际: {pts.shape}")
    if vals.shape[0] != pts.shape[0]:
        raise ValueError("points 与 values 的行数必须一致")
    if labels is None:
        labels = [f"v{k}" for k in range(vals.shape[1])]
    if len(labels) != vals.shape[1]:
        raise ValueError(f"labels 个数 ({len(labels)}) 与 values 列数 ({vals.shape[1]}) 不匹配")

    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = np.column_stack([pts, vals])
    np.savetxt(p, data, delimiter=",", header=",".join(["x", "y", "z", *labels]))
