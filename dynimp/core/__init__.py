"""核心算法层"""

from .errors import (
    AccretionAbortedError,
    ConvergenceError,
    DomainError,
    EmptyCandidateSetError,
    IllConditionedWarning,
    InvalidGraphSizeError,
    InvalidMatrixError,
    MatrixNotPerronApplicableError,
    NumericalWarning,
)
from .importance import ImportanceScorer
from .spectral import PowerIterationOracle, SpectralOracle, make_oracle

__all__ = [
    "AccretionAbortedError",
    "ConvergenceError",
    "DomainError",
    "EmptyCandidateSetError",
    "IllConditionedWarning",
    "InvalidGraphSizeError",
    "InvalidMatrixError",
    "MatrixNotPerronApplicableError",
    "NumericalWarning",
    "ImportanceScorer",
    "PowerIterationOracle",
    "SpectralOracle",
    "make_oracle",
]
