#!/usr/bin/env python3
"""H2 / STO-3G：沿键轴计算成键轨道振幅与电子密度。

壳层求值由调用方提供，此处给出仅支持 S 壳的最小实现。
"""

import numpy as np

from basisgrid import ShellData, ShellKind, ShellList, pack_symmetric
from basisgrid.io import export_point_values_csv


class SGaussianShell:
    """仅支持 S 类型的收缩高斯壳层（指数单位 Å^-2）。"""

    def __init__(self, kind, atom_index, position, exponents, coefficients, cutoff=30.0):
        if kind is not ShellKind.S:
            raise NotImplementedError(f"示例仅支持 S 壳，收到: {kind.value}")
        self.kind = kind
        self.atom_index = atom_index
        self.n_basis = kind.n_basis
        self.position = np.asarray(position, dtype=float)
        self.exponents = np.asarray(exponents, dtype=float)
        # 原始高斯归一化 (2a/pi)^(3/4)
        self.coefficients = np.asarray(coefficients, dtype=float) * (2.0 * self.exponents / np.pi) ** 0.75
        self.r2_max = cutoff / self.exponents.min()

    def evaluate(self, x, y, z):
        d = np.array([x, y, z]) - self.position
        r2 = float(d @ d)
        if r2 > self.r2_max:
            return None
        return np.array([np.sum(self.coefficients * np.exp(-self.exponents * r2))])

    def bounding_box(self, threshold):
        i = np.argmax(np.abs(self.coefficients))
        a, c = self.exponents[i], abs(self.coefficients[i])
        radius = np.sqrt(max(np.log(c / threshold), 0.0) / a)
        return self.position - radius, self.position + radius


def main():
    bond = 0.7408  # Å
    positions = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, bond]])
    sto3g_exp = [3.42525091, 0.62391373, 0.16885540]
    sto3g_coef = [0.15432897, 0.53532814, 0.44463454]
    data = ShellData(
        shell_types=[0, 0],
        shell_to_atom=[1, 2],
        shell_primitives=[3, 3],
        exponents=sto3g_exp * 2,
        contraction_coefficients=sto3g_coef * 2,
    )
    shells = ShellList.from_shell_data(data, positions, SGaussianShell)
    print(shells.dump().format())
    print("bounding box:", shells.bounding_box(1e-4))

    s12 = 0.6593
    c = np.full(2, 1.0 / np.sqrt(2.0 * (1.0 + s12)))
    coefficients = np.vstack([c, [c[0], -c[1]]])
    # 密度求值约定下非对角元按一半存储
    density = 2.0 * np.outer(c, c)
    density[0, 1] = density[1, 0] = 0.5 * density[0, 1]
    shells.set_density_vectors([pack_symmetric(density)])
    shells.set_orbital_vectors(coefficients, [0])

    zs = np.linspace(-2.0, bond + 2.0, 41)
    points = np.column_stack([np.zeros_like(zs), np.zeros_like(zs), zs])
    values = np.empty((zs.size, 2))
    for g, (x, y, z) in enumerate(points):
        values[g, 0] = shells.density_values(x, y, z)[0]
        values[g, 1] = shells.orbital_values(x, y, z)[0]
        print(f"z={z:+.3f}  rho={values[g, 0]:.6e}  psi={values[g, 1]:+.6e}")

    export_point_values_csv("h2_axis.csv", points, values, labels=["rho", "psi_bonding"])


if __name__ == "__main__":
    main()
