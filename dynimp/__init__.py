"""dynimp - 网络边的一阶动力学重要性 (FoEDI) 与贪心加边"""

from .api import score_edges, best_candidate_edge, grow_graph
from .core.errors import DomainError
from .models.spectral import EdgeScore, Eigenpair, ScoreMode
from .models.trajectory import Trajectory

__version__ = "1.0.0"

__all__ = [
    "score_edges",
    "best_candidate_edge",
    "grow_graph",
    "DomainError",
    "EdgeScore",
    "Eigenpair",
    "ScoreMode",
    "Trajectory",
]
