"""谱求解器 - 提取邻接矩阵的主特征值及左右特征向量"""

import logging
import warnings
from typing import Hashable, List, Optional

import networkx as nx
import numpy as np

from dynimp.core.errors import (
    ConvergenceError,
    IllConditionedWarning,
    InvalidGraphSizeError,
    InvalidMatrixError,
    MatrixNotPerronApplicableError,
)
from dynimp.models.spectral import Eigenpair

logger = logging.getLogger(__name__)


def _validate_adjacency(A) -> np.ndarray:
    """检查邻接矩阵：方阵、有限、非负、对角线为零"""
    A = np.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise InvalidMatrixError(f"邻接矩阵必须是方阵，实际形状: {A.shape}")
    if A.shape[0] < 2:
        raise InvalidGraphSizeError(f"至少需要 2 个顶点，实际: {A.shape[0]}")
    if not np.all(np.isfinite(A)):
        raise InvalidMatrixError("邻接矩阵包含非有限值")
    if np.any(A < 0):
        raise InvalidMatrixError("邻接矩阵包含负值")
    if np.any(np.diag(A) != 0):
        raise InvalidMatrixError("邻接矩阵对角线非零（存在自环）")
    return A


def _orient(x: np.ndarray) -> np.ndarray:
    """翻转符号使分量和非负（Perron 向量为非负向量）"""
    return -x if x.sum() < 0 else x


def _check_degenerate(lam: float, gap: float, A: np.ndarray, gap_tol: float):
    """
    主特征值重复时，特征向量只确定到一个子空间，得分没有意义

    唯一的例外是没有边的图：λ1 = 0，只发出警告，
    以便从空图开始加边。
    """
    scale = max(1.0, abs(lam))
    if gap >= gap_tol * scale:
        return
    if np.any(A):
        raise MatrixNotPerronApplicableError(
            f"主特征值 {lam:.6g} 不是单特征值 (gap={gap:.3e})，图可能不连通"
        )
    logger.debug(f"空图: λ1={lam:.6g}, gap={gap:.3e}")
    warnings.warn(
        f"图中没有边，主特征值 {lam:.6g} 简并 (gap={gap:.3e})",
        IllConditionedWarning,
        stacklevel=3,
    )


def _check_overlap(v: np.ndarray, u: np.ndarray, overlap_tol: float):
    scale = np.linalg.norm(u) * np.linalg.norm(v)
    if scale == 0 or abs(u @ v) < overlap_tol * scale:
        raise MatrixNotPerronApplicableError(
            f"左右主特征向量近似正交 (u^T v = {u @ v:.3e})，一阶扰动公式不适用"
        )


class SpectralOracle:
    """
    稠密特征分解求解器

    对 A 和 A^T 各做一次完整特征分解，选取实部最大的特征值作为主特征值。
    对于连通的非负不可约矩阵，Perron-Frobenius 定理保证它是实的单特征值；
    主特征值重复（如两个相同的连通分量）时拒绝，没有边的图只发出警告。
    """

    name = "dense"

    def __init__(self, imag_tol: float = 1e-9, gap_tol: float = 1e-8,
                 overlap_tol: float = 1e-12):
        """
        Args:
            imag_tol: 主特征值虚部的相对容差，超过即视为复特征值
            gap_tol: 主特征值与次特征值实部间隔的相对阈值，低于则视为重复特征值
            overlap_tol: |u^T v| / (|u| |v|) 的下限
        """
        self.imag_tol = imag_tol
        self.gap_tol = gap_tol
        self.overlap_tol = overlap_tol

    def decompose(self, A, nodes: Optional[List[Hashable]] = None,
                  previous: Optional[Eigenpair] = None) -> Eigenpair:
        """
        计算主特征对 (λ1, v, u)

        Args:
            A: N×N 非负邻接矩阵
            nodes: 向量分量对应的顶点顺序（仅记录在结果中）
            previous: 忽略；与迭代求解器保持相同的调用接口

        Returns:
            Eigenpair，left 与 right 来自同一次调用

        Raises:
            MatrixNotPerronApplicableError: 主特征值为复数或重复，或 u^T v 近似为零
        """
        A = _validate_adjacency(A)
        symmetric = np.array_equal(A, A.T)
        if symmetric:
            # 对称矩阵特征值为实数，A^T = A，左特征向量即右特征向量
            values, vectors = np.linalg.eigh(A)
        else:
            values, vectors = np.linalg.eig(A)

        top = int(np.argmax(values.real))
        lam = values[top]
        scale = max(1.0, abs(lam.real))
        if abs(lam.imag) > self.imag_tol * scale:
            raise MatrixNotPerronApplicableError(
                f"主特征值不是实数: {lam.real:.6g}{lam.imag:+.6g}j"
            )

        v = _orient(vectors[:, top].real)
        if symmetric:
            u = v.copy()
        else:
            left_values, left_vectors = np.linalg.eig(A.T)
            left_top = int(np.argmin(np.abs(left_values - lam)))
            u = _orient(left_vectors[:, left_top].real)
        _check_overlap(v, u, self.overlap_tol)

        real_parts = np.sort(values.real)[::-1]
        gap = float(real_parts[0] - real_parts[1])
        _check_degenerate(float(lam.real), gap, A, self.gap_tol)

        return Eigenpair(
            eigenvalue=float(lam.real),
            right=v,
            left=u,
            nodes=list(nodes) if nodes is not None else [],
            spectral_gap=gap,
        )


class PowerIterationOracle:
    """
    移位幂迭代求解器

    在 A + I 上做幂迭代，移位保证 Perron 根在模意义下严格占优（含二部图）。
    可以用上一步的特征对热启动，适合加边过程中每步只改动一条边的场景。

    幂迭代本身看不到次特征值。可约矩阵的谱是各强连通分量对角块谱的并，
    因此图不强连通时逐个分量求 Perron 根：最大的根出现两次即主特征值重复，
    与 SpectralOracle 一样拒绝。强连通图的 Perron 根必为单特征值，
    spectral_gap 记为 nan（未估计）。
    """

    name = "power"

    def __init__(self, tol: float = 1e-12, max_iter: int = 100000,
                 overlap_tol: float = 1e-12, gap_tol: float = 1e-8):
        self.tol = tol
        self.max_iter = max_iter
        self.overlap_tol = overlap_tol
        self.gap_tol = gap_tol

    def _iterate(self, A: np.ndarray, x0: Optional[np.ndarray]) -> np.ndarray:
        n = A.shape[0]
        if x0 is None or x0.shape != (n,) or not np.any(x0):
            x = np.ones(n)
        else:
            # 热启动向量可能在主分量上为零，加一个正的底数
            x = np.abs(x0) + 1e-6
        x = x / np.linalg.norm(x)

        M = A + np.eye(n)
        for step in range(1, self.max_iter + 1):
            y = M @ x
            y = y / np.linalg.norm(y)
            if np.linalg.norm(y - x) < self.tol:
                logger.debug(f"幂迭代在第 {step} 步收敛")
                return y
            x = y
        raise ConvergenceError(f"幂迭代在 {self.max_iter} 步内未收敛 (tol={self.tol})")

    def _component_roots(self, A: np.ndarray) -> List[float]:
        """各强连通分量的 Perron 根，降序；图强连通时返回空列表"""
        D = nx.from_numpy_array(A, create_using=nx.DiGraph)
        components = [sorted(c) for c in nx.strongly_connected_components(D)]
        if len(components) < 2:
            return []
        roots = []
        for idx in components:
            if len(idx) == 1:
                roots.append(0.0)
                continue
            S = A[np.ix_(idx, idx)]
            x = self._iterate(S, None)
            roots.append(float(x @ S @ x))
        logger.debug(f"{len(components)} 个强连通分量, Perron 根: {roots}")
        return sorted(roots, reverse=True)

    def decompose(self, A, nodes: Optional[List[Hashable]] = None,
                  previous: Optional[Eigenpair] = None) -> Eigenpair:
        """
        计算主特征对，previous 非空时用其向量热启动

        Raises:
            MatrixNotPerronApplicableError: 主特征值重复，或 u^T v 近似为零
            ConvergenceError: max_iter 步内未收敛
        """
        A = _validate_adjacency(A)
        nodes = list(nodes) if nodes is not None else []
        n = A.shape[0]

        if not np.any(A):
            # 零矩阵的任意向量都是特征向量，取第一个顶点，与稠密分解一致
            _check_degenerate(0.0, 0.0, A, self.gap_tol)
            e1 = np.zeros(n)
            e1[0] = 1.0
            return Eigenpair(eigenvalue=0.0, right=e1, left=e1.copy(),
                             nodes=nodes, spectral_gap=0.0)

        gap = float("nan")
        roots = self._component_roots(A)
        if roots:
            gap = roots[0] - roots[1]
            _check_degenerate(roots[0], gap, A, self.gap_tol)

        right0 = previous.right if previous is not None else None
        left0 = previous.left if previous is not None else None
        v = self._iterate(A, right0)
        if np.array_equal(A, A.T):
            u = v.copy()
        else:
            u = self._iterate(A.T, left0)
        _check_overlap(v, u, self.overlap_tol)

        # v 已归一化，Rayleigh 商即特征值
        lam = float(v @ A @ v)
        return Eigenpair(
            eigenvalue=lam,
            right=v,
            left=u,
            nodes=nodes,
            spectral_gap=gap,
        )


_ORACLES = {
    SpectralOracle.name: SpectralOracle,
    PowerIterationOracle.name: PowerIterationOracle,
}


def make_oracle(name: str = "dense", **params):
    """按名称创建求解器，params 透传给构造函数"""
    try:
        oracle_cls = _ORACLES[name]
    except KeyError:
        raise ValueError(f"未知的谱求解器: {name}，可选: {sorted(_ORACLES)}") from None
    return oracle_cls(**params)
