"""适配层"""

from .graph_builder import build_graph

__all__ = ["build_graph"]
