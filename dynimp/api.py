"""对外接口"""

from typing import Dict, List, Optional, Tuple

import networkx as nx

from dynimp.core.importance import ImportanceScorer
from dynimp.models.spectral import EdgeScore, ScoreMode
from dynimp.models.trajectory import Trajectory
from dynimp.services.accretion import GreedyAccretionEngine


def score_edges(graph: nx.Graph, mode: ScoreMode = ScoreMode.REMOVAL,
                directed: bool = False, normalized: bool = False) -> List[EdgeScore]:
    """对图的边（removal）或非边（addition）计算一阶动力学重要性"""
    return ImportanceScorer().compute_scores(graph, ScoreMode(mode), directed, normalized)


def best_candidate_edge(graph: nx.Graph, directed: bool = False,
                        normalized: bool = False) -> Tuple:
    """加边重要性最大的非边，并列时取规范顺序中的第一个"""
    return ImportanceScorer().select_best(graph, directed, normalized).edge


def grow_graph(graph: nx.Graph, directed: bool = False, normalized: bool = False,
               record_trajectory: bool = True, max_edges: Optional[int] = None,
               config: Optional[Dict] = None) -> Tuple[nx.Graph, Optional[Trajectory]]:
    """贪心加边，返回 (最终图, 轨迹)；不记录轨迹时轨迹为 None"""
    engine = GreedyAccretionEngine(config=config or {})
    result = engine.run(
        graph,
        directed=directed,
        normalized=normalized,
        record_trajectory=record_trajectory,
        max_edges=max_edges,
    )
    return result.graph, result.trajectory
