"""测试公用夹具：高斯壳层桩实现与示例原始记录。

真实的壳层求值由外部提供；此处的桩只需满足 :class:`basisgrid.shell.Shell` 协议，
并在远离中心处返回 ``None`` 以模拟显著性筛选。
"""

import numpy as np
import pytest

from basisgrid.records import ShellData


class GaussianStubShell:
    """各基函数取径向收缩高斯乘以固定权重 ``1 + 0.25 k`` 的桩壳层。"""

    def __init__(self, kind, atom_index, position, exponents, coefficients, cutoff=25.0):
        self.kind = kind
        self.atom_index = atom_index
        self.position = np.asarray(position, dtype=float)
        self.exponents = list(exponents)
        self.coefficients = list(coefficients)
        self.n_basis = kind.n_basis
        self.cutoff = cutoff

    def _radial(self, r2):
        return sum(c * np.exp(-a * r2) for a, c in zip(self.exponents, self.coefficients))

    def evaluate(self, x, y, z):
        d = np.array([x, y, z]) - self.position
        r2 = float(d @ d)
        if min(self.exponents) * r2 > self.cutoff:
            return None
        return self._radial(r2) * (1.0 + 0.25 * np.arange(self.n_basis))

    def bounding_box(self, threshold):
        cmax = max([abs(c) for c in self.coefficients] or [1.0])
        radius = np.sqrt(max(np.log(cmax / threshold), 0.0) / min(self.exponents))
        return self.position - radius, self.position + radius


def stub_factory(kind, atom_index, position, exponents, coefficients):
    return GaussianStubShell(kind, atom_index, position, exponents, coefficients)


@pytest.fixture
def factory():
    return stub_factory


@pytest.fixture
def positions():
    """两个相距 10 Å 的原子。"""
    return np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 10.0]])


@pytest.fixture
def shell_data():
    """原子 1：S(3 原始) + SP(2 原始) + D6(1 原始)；原子 2：S(1) + P(1)。

    基函数共 1 + (1+3) + 6 + 1 + 3 = 14 个，壳层共 6 个。
    """
    return ShellData(
        shell_types=[0, -1, 2, 0, 1],
        shell_to_atom=[1, 1, 1, 2, 2],
        shell_primitives=[3, 2, 1, 1, 1],
        exponents=[3.42, 0.62, 0.17, 2.9, 0.5, 0.8, 1.24, 0.9],
        contraction_coefficients=[0.15, 0.54, 0.44, -0.1, 1.0, 1.0, 1.0, 1.0],
        contraction_coefficients_sp=[0.0, 0.0, 0.0, 0.16, 0.9, 0.0, 0.0, 0.0],
    )


@pytest.fixture
def stub_shell():
    """桩壳层类本身，便于直接构造单个壳层。"""
    return GaussianStubShell
