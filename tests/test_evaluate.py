"""网格点求值测试：基函数值、基函数对、电子密度、分子轨道"""

import numpy as np
import pytest

from basisgrid.shell import ShellKind
from basisgrid.shell_list import ShellList, ShellListConfig
from basisgrid.utils import pack_symmetric

# 靠近第二个原子的点：第一个原子只有最弥散的 S 壳显著
NEAR_ATOM2 = (0.1, -0.2, 9.8)
FAR_AWAY = (1000.0, 0.0, 0.0)


@pytest.fixture
def shells(shell_data, positions, factory):
    return ShellList.from_shell_data(shell_data, positions, factory, ShellListConfig(length_conversion=1.0))


@pytest.fixture
def one_atom(stub_shell):
    origin = [0.0, 0.0, 0.0]
    return ShellList([
        stub_shell(ShellKind.S, 0, origin, [1.3, 0.4], [0.6, 0.5]),
        stub_shell(ShellKind.P, 0, origin, [0.9], [1.0]),
        stub_shell(ShellKind.D5, 0, origin, [0.7], [1.0]),
    ])


def _reference_density(x, dense):
    """按 对角 x_i^2 D_ii + 非对角 4 x_i x_j D_ij 的约定计算。"""
    diag = np.sum(x * x * np.diag(dense))
    off = np.sum(np.tril(np.outer(x, x) * dense, -1))
    return diag + 4.0 * off


def _random_symmetric(n, seed):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(n, n))
    return 0.5 * (a + a.T)


@pytest.mark.quick
def test_shell_values_far_point_all_zero(shells):
    shells.shell_values(0.0, 0.0, 0.0)
    x = shells.shell_values(*FAR_AWAY)
    assert x.shape == (shells.n_basis(),)
    assert np.all(x == 0.0)


def test_shell_values_zero_fill_keeps_alignment(shells):
    x = shells.shell_values(*NEAR_ATOM2)
    # 原子 1：S(0) 显著；SP(1..4) 与 D6(5..10) 不显著
    assert x[0] != 0.0
    assert np.all(x[1:11] == 0.0)
    # 原子 2：S(11) 与 P(12..14)
    assert np.all(x[11:] != 0.0)
    expected_p = shells[5].evaluate(*NEAR_ATOM2)
    assert np.allclose(x[12:15], expected_p)


def test_shell_values_returns_workspace_buffer(shells):
    x = shells.shell_values(*NEAR_ATOM2)
    assert x is shells.workspace.basis_values
    y = shells.shell_values(0.0, 0.0, 0.3)
    assert y is x


def test_shell_values_at_matches_xyz_form_when_all_significant(one_atom):
    pt = (0.3, -0.1, 0.2)
    a = one_atom.shell_values_at(pt).copy()
    b = one_atom.shell_values(*pt)
    assert np.allclose(a, b)
    assert np.all(a != 0.0)


def test_shell_pair_values_packing(one_atom):
    pt = (0.3, -0.1, 0.2)
    with pytest.warns(DeprecationWarning):
        pairs = one_atom.shell_pair_values(pt)
    x = one_atom.shell_values_at(pt)
    outer = 2.0 * np.outer(x, x)
    np.fill_diagonal(outer, x * x)
    assert pairs.size == one_atom.triangular_size == 45
    assert np.allclose(pairs, pack_symmetric(outer))


@pytest.mark.density
@pytest.mark.quick
def test_density_single_basis_function(stub_shell):
    shells = ShellList([stub_shell(ShellKind.S, 0, [0.0, 0.0, 0.0], [0.8], [1.2])])
    dens = np.array([1.0])
    shells.set_density_vectors([dens])
    for pt in [(0.0, 0.0, 0.0), (0.5, 0.1, -0.4), (1.5, 2.0, 0.0)]:
        value = shells.shell_values(*pt)[0]
        rho = shells.density_values(*pt)
        assert rho.shape == (1,)
        assert np.isclose(rho[0], value ** 2, rtol=1e-12, atol=0)


@pytest.mark.density
def test_density_matches_dense_reference_with_partial_significance(shells):
    n = shells.n_basis()
    d1 = _random_symmetric(n, 1)
    d2 = _random_symmetric(n, 2)
    shells.set_density_vectors([pack_symmetric(d1), pack_symmetric(d2)])

    for pt in [NEAR_ATOM2, (0.2, 0.1, 0.3), (0.0, 0.5, 5.0)]:
        x = shells.shell_values(*pt).copy()
        rho = shells.density_values(*pt)
        assert rho.shape == (2,)
        assert np.isclose(rho[0], _reference_density(x, d1), rtol=1e-10, atol=1e-14)
        assert np.isclose(rho[1], _reference_density(x, d2), rtol=1e-10, atol=1e-14)


@pytest.mark.density
def test_density_compacts_significant_basis(shells):
    shells.set_density_vectors([pack_symmetric(np.eye(shells.n_basis()))])
    shells.density_values(*NEAR_ATOM2)
    ws = shells.workspace
    # 显著基函数：全局下标 0 与 11..14
    assert list(ws.sig_basis[:5]) == [0, 11, 12, 13, 14]


@pytest.mark.density
def test_density_far_point_is_zero(shells):
    shells.set_density_vectors([pack_symmetric(np.ones((14, 14)))])
    rho = shells.density_values(*FAR_AWAY)
    assert np.all(rho == 0.0)


@pytest.mark.density
def test_density_binding_is_borrowed(stub_shell):
    shells = ShellList([stub_shell(ShellKind.S, 0, [0.0, 0.0, 0.0], [0.8], [1.0])])
    dens = np.array([1.0])
    shells.set_density_vectors([dens])
    before = shells.density_values(0.1, 0.0, 0.0)[0]
    dens[0] = 3.0
    after = shells.density_values(0.1, 0.0, 0.0)[0]
    assert np.isclose(after, 3.0 * before)


@pytest.mark.density
def test_density_rebinding_resizes_output(shells):
    n = shells.n_basis()
    packed = pack_symmetric(np.eye(n))
    shells.set_density_vectors([packed, packed, packed])
    assert shells.density_values(*NEAR_ATOM2).shape == (3,)
    shells.set_density_vectors([packed])
    assert shells.density_values(*NEAR_ATOM2).shape == (1,)
    shells.set_density_vectors([])
    assert shells.density_values(*NEAR_ATOM2).shape == (0,)


@pytest.mark.density
def test_density_binding_rejects_short_matrix(shells):
    with pytest.raises(ValueError, match="小于"):
        shells.set_density_vectors([np.zeros(10)])


@pytest.mark.orbital
@pytest.mark.quick
def test_orbital_identity_coefficients(shells):
    n = shells.n_basis()
    indices = [3, 0, 11, 13]
    shells.set_orbital_vectors(np.eye(n), indices)
    for pt in [NEAR_ATOM2, (0.2, 0.1, 0.3)]:
        x = shells.shell_values(*pt).copy()
        psi = shells.orbital_values(*pt)
        assert psi.shape == (len(indices),)
        assert np.allclose(psi, x[indices], rtol=1e-12, atol=0)


@pytest.mark.orbital
def test_orbital_matches_dense_reference(shells):
    n = shells.n_basis()
    rng = np.random.default_rng(3)
    coefficients = rng.normal(size=(n, n))
    indices = [5, 6, 7]
    shells.set_orbital_vectors(coefficients, indices)
    x = shells.shell_values(*NEAR_ATOM2).copy()
    psi = shells.orbital_values(*NEAR_ATOM2)
    assert np.allclose(psi, coefficients[indices] @ x, rtol=1e-10, atol=1e-14)


@pytest.mark.orbital
def test_orbital_output_zeroed_between_calls(shells):
    n = shells.n_basis()
    shells.set_orbital_vectors(np.ones((2, n)), [0, 1])
    shells.orbital_values(*NEAR_ATOM2)
    psi = shells.orbital_values(*FAR_AWAY)
    assert np.all(psi == 0.0)


@pytest.mark.orbital
def test_orbital_binding_validation(shells):
    with pytest.raises(ValueError, match="二维"):
        shells.set_orbital_vectors(np.ones(14), [0])
    with pytest.raises(ValueError, match="列数"):
        shells.set_orbital_vectors(np.ones((2, 5)), [0])


def test_independent_workspaces(shells):
    ws1 = shells.new_workspace()
    ws2 = shells.new_workspace()
    a = shells.shell_values(*NEAR_ATOM2, workspace=ws1)
    a_copy = a.copy()
    b = shells.shell_values(0.2, 0.1, 0.3, workspace=ws2)
    assert a is ws1.basis_values and b is ws2.basis_values
    assert np.array_equal(a, a_copy)
    assert not np.allclose(a, b)
    # 默认工作区未被触及
    assert np.all(shells.workspace.basis_values == 0.0)


def test_workspace_bindings_are_per_workspace(shells):
    n = shells.n_basis()
    ws = shells.new_workspace()
    shells.set_density_vectors([pack_symmetric(np.eye(n))], workspace=ws)
    assert shells.density_values(*NEAR_ATOM2, workspace=ws).shape == (1,)
    assert shells.density_values(*NEAR_ATOM2).shape == (0,)


def test_stale_workspace_rejected(shells, stub_shell):
    ws = shells.new_workspace()
    shells.append(stub_shell(ShellKind.S, 1, [0.0, 0.0, 10.0], [1.0], [1.0]))
    shells.resize()
    with pytest.raises(ValueError, match="工作区"):
        shells.shell_values(0.0, 0.0, 0.0, workspace=ws)


@pytest.mark.density
def test_resize_clears_stale_bindings(stub_shell):
    shells = ShellList([stub_shell(ShellKind.S, 0, [0.0, 0.0, 0.0], [0.8], [1.0])])
    shells.set_density_vectors([np.array([1.0])])
    shells.set_orbital_vectors(np.ones((1, 1)), [0])
    shells.append(stub_shell(ShellKind.P, 0, [0.0, 0.0, 0.0], [0.8], [1.0]))
    shells.resize()

    # 旧绑定按 n=1 校验，扩展后已失效
    assert shells.density_values(0.1, 0.0, 0.0).shape == (0,)
    assert shells.orbital_values(0.1, 0.0, 0.0).shape == (0,)
    with pytest.raises(ValueError, match="小于"):
        shells.set_density_vectors([np.array([1.0])])

    shells.set_density_vectors([pack_symmetric(np.eye(4))])
    rho = shells.density_values(0.1, 0.0, 0.0)
    x = shells.shell_values(0.1, 0.0, 0.0)
    assert np.isclose(rho[0], np.sum(x * x), rtol=1e-12, atol=0)


@pytest.mark.density
def test_density_binding_requires_float_ndarray(one_atom):
    with pytest.raises(ValueError, match="float64"):
        one_atom.set_density_vectors([[1.0] * 45])
    with pytest.raises(ValueError, match="float64"):
        one_atom.set_density_vectors([np.ones(45, dtype=np.float32)])


@pytest.mark.orbital
def test_orbital_binding_rejects_out_of_range_rows(shells):
    n = shells.n_basis()
    coefficients = np.eye(n)[:3]
    with pytest.raises(ValueError, match="超出范围"):
        shells.set_orbital_vectors(coefficients, [-1])
    with pytest.raises(ValueError, match="超出范围"):
        shells.set_orbital_vectors(coefficients, [0, 3])
    with pytest.raises(ValueError, match="float64"):
        shells.set_orbital_vectors(np.eye(n, dtype=int), [0])


def test_shell_values_at_rejects_insignificant_shell(shells):
    # 第二个原子的壳层在原点处不显著
    with pytest.raises(ValueError, match="不显著"):
        shells.shell_values_at((0.0, 0.0, 0.0))


def test_fresh_workspace_accepted_before_default_resize(stub_shell):
    shells = ShellList([stub_shell(ShellKind.S, 0, [0.0, 0.0, 0.0], [0.8], [1.0])])
    shells.append(stub_shell(ShellKind.P, 0, [0.0, 0.0, 0.0], [0.8], [1.0]))
    ws = shells.new_workspace()
    x = shells.shell_values(0.1, 0.0, 0.0, workspace=ws)
    assert x.shape == (4,)
    # 默认工作区尚未 resize，应被拒绝
    with pytest.raises(ValueError, match="resize"):
        shells.shell_values(0.1, 0.0, 0.0)
