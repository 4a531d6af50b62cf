"""加边轨迹数据模型"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class EigenvaluePoint:
    edges_added: int
    eigenvalue: float


@dataclass(frozen=True)
class DegreePoint:
    edges_added: int
    mean: float
    std: float


@dataclass
class Trajectory:
    """主特征值与度统计随加边数变化的轨迹

    第 0 个点是加边前的初始图，之后每插入一条边追加一个点。
    """
    eigenvalues: List[EigenvaluePoint] = field(default_factory=list)
    degrees: List[DegreePoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.eigenvalues)

    def record(self, edges_added: int, eigenvalue: float,
               mean_degree: float, std_degree: float):
        """追加一个采样点"""
        self.eigenvalues.append(EigenvaluePoint(edges_added, eigenvalue))
        self.degrees.append(DegreePoint(edges_added, mean_degree, std_degree))

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "eigenvalues": [
                {"edges_added": p.edges_added, "eigenvalue": p.eigenvalue}
                for p in self.eigenvalues
            ],
            "degrees": [
                {"edges_added": p.edges_added, "mean": p.mean, "std": p.std}
                for p in self.degrees
            ],
        }
