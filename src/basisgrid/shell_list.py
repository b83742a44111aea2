from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence

import numpy as np

from . import evaluate
from .builder import build_shells
from .constants import BOHR_TO_ANGSTROM, DEFAULT_BOUNDING_BOX_THRESHOLD
from .diagnostics import Diagnostic, ShellListReport, emit, tally_shells
from .records import ShellData
from .shell import Shell, ShellFactory
from .utils import triangular_size, unpack_symmetric
from .workspace import EvaluationWorkspace

__all__ = [
    "ShellListConfig",
    "ShellList",
]


@dataclass
class ShellListConfig:
    r"""基组容器配置。

    Attributes
    ----------
    length_conversion : float
        长度换算因子 :math:`f`；构造时原始指数乘以 :math:`f^{-2}`（默认 bohr→Å）。
    bounding_box_threshold : float
        :meth:`ShellList.bounding_box` 未给出阈值时使用的显著性阈值。
    verbose : bool
        为 ``True`` 时 :meth:`ShellList.resize` 打印原子偏移，:meth:`ShellList.dump` 打印报告。
    """

    length_conversion: float = BOHR_TO_ANGSTROM
    bounding_box_threshold: float = DEFAULT_BOUNDING_BOX_THRESHOLD
    verbose: bool = False


class ShellList:
    r"""有序壳层序列及其网格求值。

    壳层顺序决定全局基函数编号；假定壳层按所属原子索引非递减且连续分组，
    :meth:`shell_atom_offsets` 与 :meth:`basis_atom_offsets` 依赖这一点（不做防御）。

    Parameters
    ----------
    shells : sequence of Shell, optional
        已构造的壳层。
    overlap_matrix : array_like, optional
        下三角压缩重叠矩阵；长度不等于 :math:`n(n+1)/2` 时静默丢弃。
    config : ShellListConfig, optional
        配置；缺省使用默认值。

    Notes
    -----
    求值方法默认使用容器自带的工作区 :attr:`workspace`，返回其缓冲区引用，下一次求值即被覆盖。
    该默认工作区不可重入；并发求值时每个工作线程应通过 :meth:`new_workspace` 取得独立工作区，
    并以 ``workspace=`` 参数传入。

    Examples
    --------
    >>> shells = ShellList.from_shell_data(data, positions, shell_factory)
    >>> shells.set_density_vectors([P_alpha, P_beta])
    >>> rho_a, rho_b = shells.density_values(0.0, 0.0, 0.5)
    """

    def __init__(
        self,
        shells: Sequence[Shell] | None = None,
        overlap_matrix=None,
        config: ShellListConfig | None = None,
    ):
        self.config = config or ShellListConfig()
        self.shells: List[Shell] = list(shells or [])
        self.diagnostics: List[Diagnostic] = []
        self.overlap_matrix: np.ndarray | None = None
        if overlap_matrix is not None:
            self.set_overlap_matrix(overlap_matrix)
        self.workspace = EvaluationWorkspace()
        self.resize()

    @classmethod
    def from_shell_data(
        cls,
        shell_data: ShellData,
        geometry,
        shell_factory: ShellFactory,
        config: ShellListConfig | None = None,
    ) -> "ShellList":
        """由原始壳层记录与原子坐标构造容器（见 :func:`basisgrid.builder.build_shells`）。"""
        config = config or ShellListConfig()
        shells, diagnostics = build_shells(
            shell_data, geometry, shell_factory, length_conversion=config.length_conversion
        )
        overlap = shell_data.overlap_matrix if len(shell_data.overlap_matrix) > 0 else None
        obj = cls(shells, overlap_matrix=overlap, config=config)
        obj.diagnostics[:0] = diagnostics
        return obj

    # ---- 序列接口 ----
    def __len__(self) -> int:
        return len(self.shells)

    def __iter__(self) -> Iterator[Shell]:
        return iter(self.shells)

    def __getitem__(self, i: int) -> Shell:
        return self.shells[i]

    def append(self, shell: Shell) -> None:
        """追加壳层；之后需调用 :meth:`resize` 以重新分配缓冲区。"""
        self.shells.append(shell)

    # ---- 聚合查询 ----
    def n_basis(self) -> int:
        """基函数总数（按需重算，:math:`O(N_{shell})`）。"""
        return sum(shell.n_basis for shell in self.shells)

    @property
    def triangular_size(self) -> int:
        """基函数对缓冲区长度 :math:`n(n+1)/2`。"""
        return self.workspace.triangular_size

    def bounding_box(self, threshold: float | None = None) -> tuple[np.ndarray, np.ndarray]:
        """各壳层包围盒的并集；空容器返回原点处的退化盒。"""
        if threshold is None:
            threshold = self.config.bounding_box_threshold
        if not self.shells:
            return np.zeros(3), np.zeros(3)
        bmin, bmax = self.shells[0].bounding_box(threshold)
        bmin = np.array(bmin, dtype=float)
        bmax = np.array(bmax, dtype=float)
        for shell in self.shells[1:]:
            tmin, tmax = shell.bounding_box(threshold)
            bmin = np.minimum(bmin, tmin)
            bmax = np.maximum(bmax, tmax)
        return bmin, bmax

    def set_overlap_matrix(self, packed) -> bool:
        """附加下三角压缩重叠矩阵；长度与 :math:`n(n+1)/2` 不符时丢弃并返回 ``False``。"""
        a = np.asarray(packed, dtype=float).ravel()
        size, _ = triangular_size(self.n_basis())
        if a.size != size:
            self.overlap_matrix = None
            return False
        self.overlap_matrix = a
        return True

    def overlap_matrix_full(self) -> np.ndarray | None:
        """将重叠矩阵还原为稠密对称矩阵；未附加时返回 ``None``。"""
        if self.overlap_matrix is None:
            return None
        return unpack_symmetric(self.overlap_matrix, self.n_basis())

    # ---- 缓冲区 ----
    def resize(self) -> None:
        """按当前壳层序列重新分配默认工作区的缓冲区（壳层序列变化后调用）。"""
        if not self.workspace.resize(self.n_basis()):
            self.diagnostics.append(emit(Diagnostic(
                kind="triangular_parity",
                message="ShellList.resize() 中三角长度出现舍入误差，长度已加一",
            )))
        if self.config.verbose:
            print(f"[ShellList] shell atom offsets: {self.shell_atom_offsets()}")
            print(f"[ShellList] basis atom offsets: {self.basis_atom_offsets()}")

    def new_workspace(self) -> EvaluationWorkspace:
        """创建与当前基组大小一致的独立工作区（供并发的工作线程各自持有）。"""
        return EvaluationWorkspace(self.n_basis())

    def _ws(self, workspace: EvaluationWorkspace | None) -> EvaluationWorkspace:
        ws = self.workspace if workspace is None else workspace
        n = self.n_basis()
        if ws.n_basis != n:
            raise ValueError(
                f"工作区基函数个数 {ws.n_basis} 与容器 {n} 不一致，请调用 resize() 或重新创建工作区"
            )
        return ws

    # ---- 原子偏移 ----
    def shell_atom_offsets(self) -> list[int]:
        """每个原子首个壳层在序列中的位置（以 0 开头）。"""
        offsets = [0]
        atom_index = 0
        for k, shell in enumerate(self.shells):
            if shell.atom_index != atom_index:
                offsets.append(k)
                atom_index += 1
        return offsets

    def basis_atom_offsets(self) -> list[int]:
        """每个原子首个基函数的全局下标（以 0 开头）。"""
        offsets = [0]
        k = 0
        atom_index = 0
        for shell in self.shells:
            if shell.atom_index != atom_index:
                offsets.append(k)
                atom_index += 1
            k += shell.n_basis
        return offsets

    # ---- 求值 ----
    def shell_values_at(self, point, workspace: EvaluationWorkspace | None = None) -> np.ndarray:
        """点形式的基函数值（假定全部壳层显著）。"""
        return evaluate.shell_values_at(self.shells, point, self._ws(workspace))

    def shell_values(self, x: float, y: float, z: float, workspace: EvaluationWorkspace | None = None) -> np.ndarray:
        """基函数值；不显著壳层对应位置填零。"""
        return evaluate.shell_values(self.shells, x, y, z, self._ws(workspace))

    def shell_pair_values(self, point, workspace: EvaluationWorkspace | None = None) -> np.ndarray:
        """遗留接口：基函数对乘积的下三角压缩。"""
        return evaluate.shell_pair_values(self.shells, point, self._ws(workspace))

    def set_density_vectors(self, matrices: Sequence[np.ndarray], workspace: EvaluationWorkspace | None = None) -> None:
        """重新绑定借用的密度矩阵列表（不重算基函数）。

        每个矩阵须为长度不小于 :math:`n(n+1)/2` 的一维 ``float64`` ndarray；只保存引用，
        调用方在绑定期间负责其生命周期。:meth:`resize` 后绑定被清空。
        """
        self._ws(workspace).bind_density(matrices)

    def density_values(self, x: float, y: float, z: float, workspace: EvaluationWorkspace | None = None) -> np.ndarray:
        """每个绑定密度矩阵在该点的电子密度。"""
        return evaluate.density_values(self.shells, x, y, z, self._ws(workspace))

    def set_orbital_vectors(
        self,
        coefficients: np.ndarray,
        indices: Sequence[int],
        workspace: EvaluationWorkspace | None = None,
    ) -> None:
        """重新绑定借用的轨道系数矩阵（二维 ``float64`` ndarray）与所需轨道行号。

        行号须落在 ``[0, coefficients.shape[0])`` 内；:meth:`resize` 后绑定被清空。
        """
        self._ws(workspace).bind_orbitals(coefficients, indices)

    def orbital_values(self, x: float, y: float, z: float, workspace: EvaluationWorkspace | None = None) -> np.ndarray:
        """所需分子轨道在该点的振幅。"""
        return evaluate.orbital_values(self.shells, x, y, z, self._ws(workspace))

    # ---- 诊断 ----
    def dump(self) -> ShellListReport:
        """壳层类型计数与基函数个数一致性检查；``verbose`` 时打印报告。"""
        report = tally_shells(self.shells, self.n_basis())
        if self.config.verbose:
            print(report.format())
        return report
