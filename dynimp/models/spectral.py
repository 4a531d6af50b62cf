"""谱分析数据模型"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, List, Tuple

import numpy as np


class ScoreMode(str, Enum):
    """评分模式：对已有边（删边）或缺失边（加边）评分"""
    REMOVAL = "removal"
    ADDITION = "addition"


@dataclass(frozen=True)
class Eigenpair:
    """邻接矩阵的主特征对

    right 满足 A v = λ v，left 是 A^T 对应同一特征值的右特征向量。
    两个向量必须来自同一次分解，缩放和符号由求解器决定。
    """
    eigenvalue: float
    right: np.ndarray
    left: np.ndarray
    nodes: List[Hashable] = field(default_factory=list)
    spectral_gap: float = float("inf")  # 与次大实部特征值的间隔，nan 表示未估计

    @property
    def overlap(self) -> float:
        """u^T v"""
        return float(self.left @ self.right)


@dataclass(frozen=True)
class EdgeScore:
    """单条边（或非边）的一阶动力学重要性得分"""
    edge: Tuple[Hashable, Hashable]
    score: float

    def to_dict(self) -> dict:
        return {"edge": list(self.edge), "score": self.score}
