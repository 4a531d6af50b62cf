"""图构建器 - 把命令行中的图描述转换为 networkx 图"""

import logging
from typing import Hashable, Optional

import networkx as nx

logger = logging.getLogger(__name__)

# 确定性生成器，顶点编号为 1..n
GENERATORS = {
    "cycle": nx.cycle_graph,
    "path": nx.path_graph,
    "complete": nx.complete_graph,
    "empty": nx.empty_graph,
    "star": lambda n, create_using=None: nx.star_graph(n - 1, create_using=create_using),
    "wheel": nx.wheel_graph,
}


def _parse_node(token: str) -> Hashable:
    token = token.strip()
    return int(token) if token.lstrip("-").isdigit() else token


def build_graph(description: str, directed: bool = False,
                nodes: Optional[int] = None) -> nx.Graph:
    """
    根据描述构建图

    支持两种格式：
        "<生成器>:<n>"，如 "cycle:4"、"empty:3"，顶点为 1..n
        "edges:<i>-<j>,<i>-<j>,..."，如 "edges:1-2,2-3,3-1"

    Args:
        description: 图描述
        directed: 是否构建有向图
        nodes: 额外加入顶点 1..nodes（用于边列表中没有出现的孤立点）

    Returns:
        networkx 图

    Raises:
        ValueError: 描述格式错误
    """
    kind, sep, body = description.partition(":")
    kind = kind.strip().lower()
    if not sep or not body.strip():
        raise ValueError(f"图描述格式错误: {description!r}")

    create_using = nx.DiGraph if directed else nx.Graph
    if kind == "edges":
        G = create_using()
        if nodes:
            G.add_nodes_from(range(1, nodes + 1))
        for pair in body.split(","):
            source, dash, target = pair.partition("-")
            if not dash:
                raise ValueError(f"边格式错误: {pair!r}，应为 i-j")
            u, v = _parse_node(source), _parse_node(target)
            if u == v:
                raise ValueError(f"不允许自环: {pair!r}")
            G.add_edge(u, v)
    elif kind in GENERATORS:
        try:
            n = int(body)
        except ValueError:
            raise ValueError(f"顶点数必须是整数: {body!r}") from None
        # 有向时 cycle/path 为单向，complete 含全部有序顶点对
        generated = GENERATORS[kind](n, create_using=create_using)
        G = nx.convert_node_labels_to_integers(generated, first_label=1)
        if nodes:
            G.add_nodes_from(range(1, nodes + 1))
    else:
        raise ValueError(f"未知的图类型: {kind}，可选: edges, {', '.join(sorted(GENERATORS))}")

    logger.debug(f"构建图 {description}: {G.number_of_nodes()} 个顶点, {G.number_of_edges()} 条边")
    return G
