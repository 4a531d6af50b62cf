"""贪心加边引擎 - 反复插入加边重要性最大的非边"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

import networkx as nx
import numpy as np
import yaml

from dynimp.core import graph_ops
from dynimp.core.errors import (
    AccretionAbortedError,
    DomainError,
    InvalidGraphSizeError,
    MatrixNotPerronApplicableError,
)
from dynimp.core.importance import ImportanceScorer
from dynimp.core.spectral import make_oracle
from dynimp.models.spectral import EdgeScore, Eigenpair
from dynimp.models.trajectory import Trajectory

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "conf" / "config.yaml"


def get_default_config() -> Dict:
    """获取默认配置"""
    return {
        "scoring": {"directed": False, "normalized": False, "tie_tol": 1e-9},
        "spectral": {
            "oracle": "dense",
            "imag_tol": 1e-9,
            "gap_tol": 1e-8,
            "overlap_tol": 1e-12,
            "power": {"tol": 1e-12, "max_iter": 100000},
        },
        "accretion": {
            "record_trajectory": True,
            "max_edges": None,
            "insert_weight": 1.0,
            "degree_ddof": 0,
        },
    }


def _merge(base: Dict, override: Dict) -> Dict:
    """递归合并配置，override 中的值覆盖 base"""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict:
    """加载 YAML 配置文件并与默认配置合并"""
    path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        logger.info(f"配置文件加载成功: {path}")
    except FileNotFoundError:
        logger.warning(f"配置文件不存在: {path}，使用默认配置")
        loaded = {}
    return _merge(get_default_config(), loaded)


class EngineState(str, Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class AccretionResult:
    """一次加边运行的结果"""
    graph: nx.Graph
    trajectory: Optional[Trajectory]
    added: List[EdgeScore] = field(default_factory=list)
    state: EngineState = EngineState.COMPLETED

    @property
    def added_edges(self) -> List[tuple]:
        return [s.edge for s in self.added]

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "state": self.state.value,
            "nodes": list(self.graph.nodes()),
            "edge_count": self.graph.number_of_edges(),
            "added": [s.to_dict() for s in self.added],
            "trajectory": self.trajectory.to_dict() if self.trajectory is not None else None,
        }


class GreedyAccretionEngine:
    """
    贪心加边引擎

    每一步重新计算当前图的主特征对，对全部非边计算加边重要性，插入得分最大者，
    并同步从补图中删除该边。特征对不跨步缓存：插入一条边后 A、v、u 都会改变。
    """

    def __init__(self, config: Optional[Dict] = None, config_path: Optional[str] = None):
        """
        初始化引擎

        Args:
            config: 配置字典，与默认配置合并；给出时不读取配置文件
            config_path: 配置文件路径，如果为 None 则使用默认路径
        """
        if config is not None:
            self.config = _merge(get_default_config(), config)
        else:
            self.config = load_config(config_path)

        spectral = self.config["spectral"]
        if spectral["oracle"] == "power":
            oracle = make_oracle(
                "power",
                overlap_tol=spectral["overlap_tol"],
                gap_tol=spectral["gap_tol"],
                **spectral["power"],
            )
        else:
            oracle = make_oracle(
                spectral["oracle"],
                imag_tol=spectral["imag_tol"],
                gap_tol=spectral["gap_tol"],
                overlap_tol=spectral["overlap_tol"],
            )
        self.scorer = ImportanceScorer(oracle, tie_tol=self.config["scoring"]["tie_tol"])
        self.state = EngineState.INITIALIZED

    def _record(self, trajectory: Trajectory, edges_added: int,
                G: nx.Graph, eigenpair: Eigenpair):
        degrees = np.asarray(graph_ops.degree_sequence(G), dtype=float)
        ddof = self.config["accretion"]["degree_ddof"]
        trajectory.record(
            edges_added,
            eigenpair.eigenvalue,
            float(np.mean(degrees)),
            float(np.std(degrees, ddof=ddof)),
        )

    @staticmethod
    def _verify(best: EdgeScore, G: nx.Graph, Gc: nx.Graph):
        """插入前检查选中的边"""
        i, j = best.edge
        if not np.isfinite(best.score):
            raise MatrixNotPerronApplicableError(f"边 ({i}, {j}) 的得分不是有限值: {best.score}")
        if G.has_edge(i, j) or not Gc.has_edge(i, j):
            raise RuntimeError(f"图与补图不一致: 边 ({i}, {j})")

    def run(self, G: nx.Graph, directed: Optional[bool] = None,
            normalized: Optional[bool] = None,
            record_trajectory: Optional[bool] = None,
            max_edges: Optional[int] = None,
            should_stop: Optional[Callable[[], bool]] = None) -> AccretionResult:
        """
        执行贪心加边

        Args:
            G: 初始图，不会被修改
            directed: 是否按有向边计分，None 取配置值
            normalized: 是否除以 λ1，None 取配置值
            record_trajectory: 是否记录轨迹，None 取配置值
            max_edges: 最多添加的边数，None 取配置值（配置为空则加到完全图）
            should_stop: 每步开始前调用，返回 True 时提前结束

        Returns:
            AccretionResult

        Raises:
            InvalidGraphSizeError: 顶点数少于 2
            AccretionAbortedError: 某一步出现 DomainError，携带已完成部分的结果
        """
        scoring = self.config["scoring"]
        accretion = self.config["accretion"]
        directed = scoring["directed"] if directed is None else directed
        normalized = scoring["normalized"] if normalized is None else normalized
        record = accretion["record_trajectory"] if record_trajectory is None else record_trajectory
        max_edges = accretion["max_edges"] if max_edges is None else max_edges
        if max_edges is not None and max_edges < 0:
            raise ValueError(f"max_edges 不能为负数: {max_edges}")
        if G.number_of_nodes() < 2:
            raise InvalidGraphSizeError(f"至少需要 2 个顶点，实际: {G.number_of_nodes()}")

        G = G.copy()
        Gc = graph_ops.complement(G)
        trajectory = Trajectory() if record else None
        added: List[EdgeScore] = []
        insert_weight = accretion["insert_weight"]

        logger.info(
            f"开始加边: {G.number_of_nodes()} 个顶点, {G.number_of_edges()} 条边, "
            f"候选 {Gc.number_of_edges()} 条"
        )
        self.state = EngineState.RUNNING
        eigenpair = None
        previous = None
        try:
            if record:
                eigenpair = self.scorer.eigenpair(G)
                self._record(trajectory, 0, G, eigenpair)

            while Gc.number_of_edges() > 0:
                if max_edges is not None and len(added) >= max_edges:
                    logger.info(f"达到最大加边数 {max_edges}")
                    break
                if should_stop is not None and should_stop():
                    logger.info("收到停止请求")
                    break

                if eigenpair is None:
                    eigenpair = self.scorer.eigenpair(G, previous=previous)
                best = self.scorer.select_best(
                    G, directed, normalized, complement=Gc, eigenpair=eigenpair
                )
                self._verify(best, G, Gc)

                i, j = best.edge
                graph_ops.insert_edge(G, i, j, weight=insert_weight)
                graph_ops.remove_edge(Gc, i, j)
                added.append(best)
                previous, eigenpair = eigenpair, None
                logger.debug(f"第 {len(added)} 步: 插入 ({i}, {j}), 得分 {best.score:.6g}")

                if record:
                    eigenpair = self.scorer.eigenpair(G, previous=previous)
                    self._record(trajectory, len(added), G, eigenpair)
        except DomainError as e:
            self.state = EngineState.FAILED
            logger.error(f"加边在第 {len(added) + 1} 步失败: {e}")
            raise AccretionAbortedError(
                e, graph=G, trajectory=trajectory, added_edges=[s.edge for s in added]
            ) from e

        self.state = EngineState.COMPLETED
        logger.info(f"加边完成: 共添加 {len(added)} 条边, 当前 {G.number_of_edges()} 条边")
        return AccretionResult(graph=G, trajectory=trajectory, added=added, state=self.state)
