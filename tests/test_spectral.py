"""谱求解器测试"""

import sys
from pathlib import Path
from unittest.mock import patch

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
import pytest

from dynimp.adapters.graph_builder import build_graph
from dynimp.core import graph_ops
from dynimp.core.errors import (
    IllConditionedWarning,
    InvalidGraphSizeError,
    InvalidMatrixError,
    MatrixNotPerronApplicableError,
)
from dynimp.core.spectral import PowerIterationOracle, SpectralOracle, make_oracle


def _adjacency(description, directed=False):
    return graph_ops.adjacency_matrix(build_graph(description, directed=directed))


def test_cycle_leading_eigenpair():
    """测试 4-环的主特征对: λ1 = 2，特征向量均匀"""
    pair = SpectralOracle().decompose(_adjacency("cycle:4"), nodes=[1, 2, 3, 4])

    assert pair.eigenvalue == pytest.approx(2.0)
    assert np.allclose(pair.right, 0.5)
    assert np.allclose(pair.left, 0.5)
    assert pair.overlap == pytest.approx(1.0)
    assert pair.nodes == [1, 2, 3, 4]
    # 特征值为 2, 0, 0, -2
    assert pair.spectral_gap == pytest.approx(2.0)
    print(f"[OK] Cycle eigenpair test passed: λ1={pair.eigenvalue:.4f}")


def test_eigenvector_equations():
    """测试 A v = λ v 且 A^T u = λ u"""
    A = _adjacency("edges:1-2,2-3,3-1,3-4,4-2", directed=True)
    pair = SpectralOracle().decompose(A)

    assert np.allclose(A @ pair.right, pair.eigenvalue * pair.right)
    assert np.allclose(A.T @ pair.left, pair.eigenvalue * pair.left)
    assert np.all(pair.right >= -1e-12) and np.all(pair.left >= -1e-12)


def test_path_graph_eigenvalue():
    """测试路径图 P3: λ1 = √2"""
    pair = SpectralOracle().decompose(_adjacency("path:3"))
    assert pair.eigenvalue == pytest.approx(np.sqrt(2))


def test_directed_cycle_has_real_perron_root():
    """有向 3-环的特征值为三次单位根，实部最大者为实数 1"""
    pair = SpectralOracle().decompose(_adjacency("cycle:3", directed=True))
    assert pair.eigenvalue == pytest.approx(1.0)


def test_empty_graph_warns_ill_conditioned():
    """空图的特征值全为 0，应发出病态警告而不是报错"""
    with pytest.warns(IllConditionedWarning):
        pair = SpectralOracle().decompose(np.zeros((3, 3)))
    assert pair.eigenvalue == pytest.approx(0.0)
    assert pair.overlap != 0


TWO_TRIANGLES = "edges:1-2,2-3,3-1,4-5,5-6,6-4"


@pytest.mark.parametrize("oracle", [SpectralOracle(), PowerIterationOracle()])
def test_repeated_leading_eigenvalue_rejected(oracle):
    """两个不相交的三角形: λ1 = 2 出现两次，主特征向量不唯一，必须报错"""
    with pytest.raises(MatrixNotPerronApplicableError):
        oracle.decompose(_adjacency(TWO_TRIANGLES))


@pytest.mark.parametrize("oracle", [SpectralOracle(), PowerIterationOracle()])
def test_disjoint_edges_rejected(oracle):
    """两条不相交的边: λ1 = 1 重复"""
    with pytest.raises(MatrixNotPerronApplicableError):
        oracle.decompose(_adjacency("edges:1-2,3-4"))


@pytest.mark.parametrize("oracle", [SpectralOracle(), PowerIterationOracle()])
def test_acyclic_digraph_rejected(oracle):
    """有向无环图的特征值全为 0 且重复，两种求解器都拒绝"""
    with pytest.raises(MatrixNotPerronApplicableError):
        oracle.decompose(_adjacency("edges:1-2,1-3,2-3", directed=True))


@pytest.mark.parametrize("description, directed, nodes", [
    ("edges:1-2,2-3,3-1,4-5", False, None),
    ("edges:1-2,2-3", False, 4),
    ("edges:1-2,2-3,3-1,3-4", True, None),
])
def test_disconnected_simple_leading_eigenvalue_agrees(description, directed, nodes):
    """不连通（或不强连通）但主特征值为单特征值时，两种求解器结果一致"""
    G = build_graph(description, directed=directed, nodes=nodes)
    A = graph_ops.adjacency_matrix(G)
    dense = SpectralOracle().decompose(A)
    power = PowerIterationOracle().decompose(A)

    assert power.eigenvalue == pytest.approx(dense.eigenvalue, abs=1e-8)
    assert np.allclose(power.right / power.right.sum(), dense.right / dense.right.sum(), atol=1e-8)
    assert np.allclose(power.left / power.left.sum(), dense.left / dense.left.sum(), atol=1e-8)
    assert power.spectral_gap > 0


def test_power_iteration_empty_graph():
    """空图: 幂迭代同样只发出警告，并与稠密分解取同一个向量"""
    with pytest.warns(IllConditionedWarning):
        dense = SpectralOracle().decompose(np.zeros((3, 3)))
    with pytest.warns(IllConditionedWarning):
        power = PowerIterationOracle().decompose(np.zeros((3, 3)))
    assert power.eigenvalue == 0.0
    assert np.allclose(power.right, dense.right)
    assert np.allclose(power.left, dense.left)


def test_power_iteration_gap_unknown_when_connected():
    """强连通图上幂迭代不估计谱间隔"""
    pair = PowerIterationOracle().decompose(_adjacency("cycle:5"))
    assert np.isnan(pair.spectral_gap)


def test_nilpotent_matrix_rejected():
    """有向无环图的左右主特征向量正交，一阶公式不适用"""
    A = np.array([[0.0, 1.0], [0.0, 0.0]])
    with pytest.raises(MatrixNotPerronApplicableError):
        SpectralOracle().decompose(A)


def test_complex_leading_eigenvalue_rejected():
    """主特征值带虚部时必须报错，不能截断为实部"""
    A = _adjacency("cycle:3", directed=True)
    values = np.array([1.0 + 0.5j, 0.2 + 0j, -1.2 + 0j])
    vectors = np.eye(3, dtype=complex)
    with patch("dynimp.core.spectral.np.linalg.eig", return_value=(values, vectors)):
        with pytest.raises(MatrixNotPerronApplicableError):
            SpectralOracle().decompose(A)


@pytest.mark.parametrize("matrix, error", [
    (np.zeros((2, 3)), InvalidMatrixError),
    (np.zeros((1, 1)), InvalidGraphSizeError),
    (np.array([[0.0, -1.0], [-1.0, 0.0]]), InvalidMatrixError),
    (np.array([[1.0, 1.0], [1.0, 0.0]]), InvalidMatrixError),
    (np.array([[0.0, np.nan], [1.0, 0.0]]), InvalidMatrixError),
])
def test_invalid_matrix(matrix, error):
    """测试非法邻接矩阵"""
    with pytest.raises(error):
        SpectralOracle().decompose(matrix)


@pytest.mark.parametrize("description, directed", [
    ("path:5", False),
    ("wheel:6", False),
    ("cycle:4", False),
    ("edges:1-2,2-3,3-1,1-3,3-4,4-1", True),
])
def test_power_iteration_matches_dense(description, directed):
    """测试移位幂迭代与稠密分解一致"""
    A = _adjacency(description, directed=directed)
    dense = SpectralOracle().decompose(A)
    power = PowerIterationOracle().decompose(A)

    assert power.eigenvalue == pytest.approx(dense.eigenvalue, abs=1e-8)
    # 向量缩放不同，比较归一化后的结果
    assert np.allclose(power.right / power.right.sum(), dense.right / dense.right.sum(), atol=1e-8)
    assert np.allclose(power.left / power.left.sum(), dense.left / dense.left.sum(), atol=1e-8)


def test_power_iteration_warm_start():
    """测试热启动：从上一步的特征对出发得到相同结果"""
    oracle = PowerIterationOracle()
    before = oracle.decompose(_adjacency("path:5"))

    G = build_graph("path:5")
    G.add_edge(1, 5)
    A = graph_ops.adjacency_matrix(G)
    cold = oracle.decompose(A)
    warm = oracle.decompose(A, previous=before)

    assert warm.eigenvalue == pytest.approx(cold.eigenvalue, abs=1e-10)
    assert warm.eigenvalue == pytest.approx(2.0)


def test_make_oracle():
    """测试按名称创建求解器"""
    assert isinstance(make_oracle("dense"), SpectralOracle)
    oracle = make_oracle("power", tol=1e-10, max_iter=50, gap_tol=1e-6)
    assert isinstance(oracle, PowerIterationOracle)
    assert oracle.max_iter == 50
    assert oracle.gap_tol == 1e-6
    with pytest.raises(ValueError):
        make_oracle("lanczos")
