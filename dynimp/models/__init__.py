"""数据模型层"""

from .spectral import EdgeScore, Eigenpair, ScoreMode
from .trajectory import DegreePoint, EigenvaluePoint, Trajectory

__all__ = ["EdgeScore", "Eigenpair", "ScoreMode",
           "DegreePoint", "EigenvaluePoint", "Trajectory"]
