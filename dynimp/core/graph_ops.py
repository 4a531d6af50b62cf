"""图基础操作 - 基于 networkx 的邻接矩阵、补图、边枚举和度序列"""

from typing import Dict, Hashable, List, Optional, Tuple

import networkx as nx
import numpy as np

Edge = Tuple[Hashable, Hashable]


def node_index(G: nx.Graph) -> Dict[Hashable, int]:
    """规范顶点顺序（节点插入顺序）到矩阵下标的映射"""
    return {node: k for k, node in enumerate(G.nodes())}


def adjacency_matrix(G: nx.Graph, weight: str = "weight",
                     nodelist: Optional[List[Hashable]] = None) -> np.ndarray:
    """
    按规范顶点顺序（或给定的 nodelist 顺序）构建稠密邻接矩阵

    无向图两个方向都写入，缺少权重属性的边记为 1。
    """
    if nodelist is None:
        nodelist = list(G.nodes())
    return nx.to_numpy_array(G, nodelist=nodelist, weight=weight, dtype=float)


def complement(G: nx.Graph) -> nx.Graph:
    """补图：相同顶点集，边集取反，不含自环"""
    Gc = nx.complement(G)
    # nx.complement 按邻接表顺序添加节点，这里保持与原图一致
    ordered = G.__class__()
    ordered.add_nodes_from(G.nodes())
    ordered.add_edges_from(Gc.edges())
    return ordered


def edge_list(G: nx.Graph, index: Optional[Dict[Hashable, int]] = None) -> List[Edge]:
    """
    按规范顺序枚举边，结果稳定

    无向图每条边只出现一次，且端点按顶点下标从小到大排列；
    所有边按 (下标 i, 下标 j) 字典序排序。index 为空时使用 G 自身的顶点顺序。
    """
    if index is None:
        index = node_index(G)
    edges = []
    for u, v in G.edges():
        if u == v:
            continue
        if not G.is_directed() and index[u] > index[v]:
            u, v = v, u
        edges.append((u, v))
    edges.sort(key=lambda e: (index[e[0]], index[e[1]]))
    return edges


def degree_sequence(G: nx.Graph) -> List[int]:
    """按规范顶点顺序返回度序列（不计自环；有向图为入度+出度）"""
    degrees = dict(G.degree())
    for node in nx.nodes_with_selfloops(G):
        degrees[node] -= 2
    return [degrees[node] for node in G.nodes()]


def insert_edge(G: nx.Graph, i: Hashable, j: Hashable, weight: float = 1.0) -> nx.Graph:
    """原地插入边 (i, j) 并返回 G"""
    if i == j:
        raise ValueError(f"不允许自环: ({i}, {j})")
    if i not in G or j not in G:
        raise ValueError(f"边 ({i}, {j}) 的端点不在图中")
    G.add_edge(i, j, weight=weight)
    return G


def remove_edge(G: nx.Graph, i: Hashable, j: Hashable) -> nx.Graph:
    """原地删除边 (i, j) 并返回 G"""
    G.remove_edge(i, j)
    return G
