"""错误与警告类型"""

from typing import List, Optional, Tuple


class DomainError(Exception):
    """输入超出一阶扰动公式适用范围时抛出的错误基类"""


class MatrixNotPerronApplicableError(DomainError):
    """主特征值不是实的单特征值，或左右特征向量近似正交"""


class EmptyCandidateSetError(DomainError):
    """没有可评分的边（加边模式下为完全图，删边模式下为空图）"""


class InvalidGraphSizeError(DomainError):
    """顶点数少于 2"""


class InvalidMatrixError(DomainError):
    """邻接矩阵非方阵、含负值/非有限值或对角线非零"""


class ConvergenceError(DomainError):
    """迭代特征求解器未在给定步数内收敛"""


class AccretionAbortedError(DomainError):
    """加边过程中某一步失败

    保留失败前已经计算出的图、轨迹和已添加的边，调用方可以据此决定是否重跑。
    """

    def __init__(self, cause: DomainError, graph=None, trajectory=None,
                 added_edges: Optional[List[Tuple]] = None):
        self.cause = cause
        self.graph = graph
        self.trajectory = trajectory
        self.added_edges = list(added_edges or [])
        super().__init__(
            f"加边过程在添加 {len(self.added_edges)} 条边后中止: {cause}"
        )


class NumericalWarning(UserWarning):
    """数值诊断警告（非致命）"""


class IllConditionedWarning(NumericalWarning):
    """主特征值与次特征值间隔过小"""
