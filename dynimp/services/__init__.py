"""服务层"""

from .accretion import AccretionResult, EngineState, GreedyAccretionEngine, load_config

__all__ = ["AccretionResult", "EngineState", "GreedyAccretionEngine", "load_config"]
