"""主入口 - CLI 命令行接口"""

import json
import logging
import sys

import click
from click.core import ParameterSource

from dynimp.adapters.graph_builder import build_graph
from dynimp.core.errors import AccretionAbortedError, DomainError
from dynimp.models.spectral import ScoreMode
from dynimp.services.accretion import GreedyAccretionEngine


def setup_logging(level: str = "INFO"):
    """设置日志"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="[%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


logger = logging.getLogger(__name__)


def _graph_options(func):
    func = click.option("--normalized/--no-normalized", default=False,
                        help="得分除以主特征值 λ1（默认取配置 scoring.normalized）")(func)
    func = click.option("--directed/--no-directed", default=False,
                        help="按有向边计分，无向边不乘 2（默认取配置 scoring.directed）")(func)
    func = click.option("--nodes", "-n", type=int, help="额外加入顶点 1..N")(func)
    func = click.option("--digraph", is_flag=True, help="把输入构建为有向图")(func)
    func = click.argument("graph")(func)
    return func


def _scoring_flags(ctx, engine, directed, normalized):
    """命令行未给出的计分开关取配置文件中的值"""
    scoring = engine.config["scoring"]
    if ctx.get_parameter_source("directed") is ParameterSource.DEFAULT:
        directed = scoring["directed"]
    if ctx.get_parameter_source("normalized") is ParameterSource.DEFAULT:
        normalized = scoring["normalized"]
    return directed, normalized


def _run(ctx, action):
    """执行子命令并统一处理错误和退出码"""
    verbose = ctx.obj["verbose"]
    try:
        action()
    except KeyboardInterrupt:
        logger.info("\n用户中断操作")
        sys.exit(130)
    except AccretionAbortedError as e:
        logger.error(f"{e}")
        if e.trajectory is not None:
            _echo_trajectory(e.trajectory)
        sys.exit(2)
    except (DomainError, ValueError) as e:
        logger.error(f"输入不适用: {e}", exc_info=verbose)
        sys.exit(2)
    except Exception as e:
        logger.error(f"计算过程中发生错误: {e}", exc_info=verbose)
        sys.exit(1)


def _echo_trajectory(trajectory):
    click.echo("\n加边轨迹:")
    click.echo("-" * 60)
    click.echo(f"{'edges_added':>12} {'lambda_1':>14} {'mean_deg':>10} {'std_deg':>10}")
    for ev, deg in zip(trajectory.eigenvalues, trajectory.degrees):
        click.echo(f"{ev.edges_added:>12d} {ev.eigenvalue:>14.6f} {deg.mean:>10.4f} {deg.std:>10.4f}")


@click.group()
@click.option("--config", "-c", help="配置文件路径（默认: conf/config.yaml）")
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text", help="输出格式")
@click.pass_context
def main(ctx, config, verbose, output):
    """
    网络边的一阶动力学重要性 (FoEDI) 工具

    对边或非边评分，或按加边重要性贪心地把图加到完全图。
    """
    setup_logging("DEBUG" if verbose else "INFO")
    ctx.ensure_object(dict)
    ctx.obj.update(config=config, verbose=verbose, output=output)


@main.command()
@_graph_options
@click.option("--mode", "-m", type=click.Choice([m.value for m in ScoreMode]),
              default=ScoreMode.REMOVAL.value, help="removal: 已有边; addition: 非边")
@click.pass_context
def score(ctx, graph, digraph, nodes, directed, normalized, mode):
    """计算 GRAPH 中每条边（或非边）的重要性"""
    def action():
        engine = GreedyAccretionEngine(config_path=ctx.obj["config"])
        use_directed, use_normalized = _scoring_flags(ctx, engine, directed, normalized)
        G = build_graph(graph, directed=digraph, nodes=nodes)
        scores = engine.scorer.compute_scores(G, ScoreMode(mode), use_directed, use_normalized)
        if ctx.obj["output"] == "json":
            click.echo(json.dumps([s.to_dict() for s in scores], indent=2, ensure_ascii=False))
            return
        click.echo(f"{mode} 重要性 ({len(scores)} 条边):")
        click.echo("-" * 60)
        for s in sorted(scores, key=lambda s: s.score, reverse=True):
            click.echo(f"  {s.edge[0]} - {s.edge[1]}: {s.score:.6f}")

    _run(ctx, action)


@main.command()
@_graph_options
@click.pass_context
def best(ctx, graph, digraph, nodes, directed, normalized):
    """输出 GRAPH 中加边重要性最大的非边"""
    def action():
        engine = GreedyAccretionEngine(config_path=ctx.obj["config"])
        use_directed, use_normalized = _scoring_flags(ctx, engine, directed, normalized)
        G = build_graph(graph, directed=digraph, nodes=nodes)
        result = engine.scorer.select_best(G, use_directed, use_normalized)
        if ctx.obj["output"] == "json":
            click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            click.echo(f"最佳候选边: {result.edge[0]} - {result.edge[1]} (得分 {result.score:.6f})")

    _run(ctx, action)


@main.command()
@_graph_options
@click.option("--max-edges", type=int, help="最多添加的边数（默认加到完全图）")
@click.option("--no-trajectory", is_flag=True, help="不记录主特征值和度统计轨迹")
@click.pass_context
def grow(ctx, graph, digraph, nodes, directed, normalized, max_edges, no_trajectory):
    """从 GRAPH 出发贪心加边"""
    def action():
        engine = GreedyAccretionEngine(config_path=ctx.obj["config"])
        use_directed, use_normalized = _scoring_flags(ctx, engine, directed, normalized)
        G = build_graph(graph, directed=digraph, nodes=nodes)
        result = engine.run(
            G,
            directed=use_directed,
            normalized=use_normalized,
            record_trajectory=False if no_trajectory else None,
            max_edges=max_edges,
        )
        if ctx.obj["output"] == "json":
            click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
            return
        click.echo("\n" + "=" * 60)
        click.echo(f"加边完成: 添加 {len(result.added)} 条边, 最终 {result.graph.number_of_edges()} 条边")
        click.echo("=" * 60)
        for step, s in enumerate(result.added, start=1):
            click.echo(f"  {step:>4}: {s.edge[0]} - {s.edge[1]} (得分 {s.score:.6f})")
        if result.trajectory is not None:
            _echo_trajectory(result.trajectory)

    _run(ctx, action)


if __name__ == "__main__":
    main()
