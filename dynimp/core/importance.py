"""重要性评分器 - 一阶动力学重要性 (FoEDI)

对单条边的扰动 ΔA，主特征值的一阶变化为

    Δλ1 ≈ (u^T ΔA v) / (u^T v)

删边时 ΔA 去掉 A[i, j]（无向图同时去掉 A[j, i]），加边时 ΔA 加上补图的
对应元素。得分取这一变化的绝对量，符号由 predicted_shift 给出。
"""

import logging
from typing import List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from dynimp.core import graph_ops
from dynimp.core.errors import (
    EmptyCandidateSetError,
    InvalidGraphSizeError,
    MatrixNotPerronApplicableError,
)
from dynimp.core.spectral import SpectralOracle
from dynimp.models.spectral import EdgeScore, Eigenpair, ScoreMode

logger = logging.getLogger(__name__)


class ImportanceScorer:
    """一阶动力学重要性评分器"""

    def __init__(self, oracle=None, tie_tol: float = 1e-9):
        """
        Args:
            oracle: 谱求解器，默认 SpectralOracle
            tie_tol: 选取最大得分时的相对容差，差值在容差内的得分视为并列
        """
        self.oracle = oracle if oracle is not None else SpectralOracle()
        self.tie_tol = tie_tol

    @staticmethod
    def score_with(eigenpair: Eigenpair, weights: np.ndarray,
                   edges: Sequence[Tuple], index: dict,
                   directed: bool = False, normalized: bool = False) -> np.ndarray:
        """
        在固定特征对下计算一组边的得分

        所有候选边共享同一份只读的 (A, v, u)，一次向量化计算完成。

        Args:
            eigenpair: 主特征对
            weights: 提供 A[i, j] 的矩阵（删边用原图，加边用补图）
            edges: 待评分的边
            index: 顶点到矩阵下标的映射
            directed: 为 False 时得分乘 2（无向边对应两个方向）
            normalized: 是否再除以 λ1

        Returns:
            与 edges 等长的得分数组
        """
        if not edges:
            return np.zeros(0)

        rows = np.fromiter((index[i] for i, _ in edges), dtype=int, count=len(edges))
        cols = np.fromiter((index[j] for _, j in edges), dtype=int, count=len(edges))
        v, u = eigenpair.right, eigenpair.left

        raw = weights[rows, cols] * v[cols] * u[rows]
        if not directed:
            raw = 2.0 * raw
        scores = raw / eigenpair.overlap

        if normalized:
            if eigenpair.eigenvalue == 0:
                raise MatrixNotPerronApplicableError("λ1 = 0，无法按 λ1 归一化得分")
            scores = scores / eigenpair.eigenvalue
        # 零分统一为 +0.0，避免输出 -0.0
        return np.where(scores == 0, 0.0, scores)

    @staticmethod
    def predicted_shift(score: float, mode: ScoreMode) -> float:
        """一阶预测的特征值变化：加边为正，删边为负"""
        return score if ScoreMode(mode) is ScoreMode.ADDITION else -score

    def eigenpair(self, G: nx.Graph, previous: Optional[Eigenpair] = None) -> Eigenpair:
        """计算图 G 的主特征对"""
        if G.number_of_nodes() < 2:
            raise InvalidGraphSizeError(f"至少需要 2 个顶点，实际: {G.number_of_nodes()}")
        A = graph_ops.adjacency_matrix(G)
        return self.oracle.decompose(A, nodes=list(G.nodes()), previous=previous)

    def compute_scores(self, G: nx.Graph, mode: ScoreMode = ScoreMode.REMOVAL,
                       directed: bool = False, normalized: bool = False,
                       complement: Optional[nx.Graph] = None,
                       eigenpair: Optional[Eigenpair] = None) -> List[EdgeScore]:
        """
        计算删边或加边重要性

        Args:
            G: 当前图
            mode: REMOVAL 对 G 的边评分，ADDITION 对补图的边（即 G 的非边）评分
            directed: 是否按有向边计分
            normalized: 是否除以 λ1
            complement: 已维护的补图，为 None 时现算
            eigenpair: G 的主特征对，为 None 时现算

        Returns:
            按规范边枚举顺序排列的 EdgeScore 列表

        Raises:
            InvalidGraphSizeError: 顶点数少于 2
            EmptyCandidateSetError: 没有可评分的边
        """
        mode = ScoreMode(mode)
        if G.number_of_nodes() < 2:
            raise InvalidGraphSizeError(f"至少需要 2 个顶点，实际: {G.number_of_nodes()}")

        if mode is ScoreMode.ADDITION:
            source = complement if complement is not None else graph_ops.complement(G)
        else:
            source = G

        index = graph_ops.node_index(G)
        edges = graph_ops.edge_list(source, index)
        if not edges:
            what = "图已是完全图，没有可添加的边" if mode is ScoreMode.ADDITION else "图中没有边"
            raise EmptyCandidateSetError(what)

        if eigenpair is None:
            eigenpair = self.eigenpair(G)
        # 补图的顶点顺序可能与 G 不同，按 G 的顺序取矩阵
        weights = graph_ops.adjacency_matrix(source, nodelist=list(G.nodes()))

        scores = self.score_with(eigenpair, weights, edges, index, directed, normalized)
        logger.debug(f"{mode.value} 模式: {len(edges)} 条边, λ1={eigenpair.eigenvalue:.6g}")
        return [EdgeScore(edge=e, score=float(s)) for e, s in zip(edges, scores)]

    def select_best(self, G: nx.Graph, directed: bool = False, normalized: bool = False,
                    complement: Optional[nx.Graph] = None,
                    eigenpair: Optional[Eigenpair] = None) -> EdgeScore:
        """
        返回加边重要性最大的非边

        并列时取规范枚举顺序中的第一个。
        """
        scored = self.compute_scores(
            G, ScoreMode.ADDITION, directed, normalized,
            complement=complement, eigenpair=eigenpair,
        )
        values = np.array([s.score for s in scored])
        best = float(values.max())
        # 容差至少为 tie_tol 的绝对量，浮点噪声级别的得分与 0 视为并列
        threshold = best - self.tie_tol * max(abs(best), 1.0)
        first = int(np.argmax(values >= threshold))
        return scored[first]
