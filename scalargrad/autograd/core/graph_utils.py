"""
Graph utilities
Printing and analysis of computational graph structure.

Every function accepts either a Tape (all recorded nodes) or a Value
(only the nodes reachable from it, in topological order).
"""

from typing import Dict, List, Union
from collections import Counter

import numpy as np

from .tape import Tape
from .value import Value
from .engine import topological_order


def _select(graph: Union[Tape, Value]):
    """Return (tape, indices) for the part of the graph to report on."""
    if isinstance(graph, Value):
        return graph.tape, topological_order(graph)
    return graph, list(range(len(graph.nodes)))


def get_graph_stats(graph: Union[Tape, Value]) -> Dict:
    """
    Compute graph statistics (no printing).

    Returns:
        dict with node/edge/leaf counts, fan-in/fan-out figures and a
        per-op breakdown
    """
    tape, indices = _select(graph)
    if not indices:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    nodes = [tape.nodes[i] for i in indices]
    n_nodes = len(nodes)

    # fan-in: operands per node
    fan_ins = [len(node.operands) for node in nodes]

    # fan-out: consumers per node, counted within the selection only
    selected = set(indices)
    fan_out_counter = Counter(
        p for node in nodes for p in node.operands if p in selected
    )
    fan_outs = [fan_out_counter.get(i, 0) for i in indices]

    op_counter = Counter(node.op_tag.value for node in nodes)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': op_counter.get('leaf', 0),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def shared_nodes(root: Value) -> List[int]:
    """
    Indices of nodes with more than one consumer edge below `root`
    (diamond dependencies; `x * x` counts too).
    """
    tape, indices = _select(root)
    counts = Counter(p for i in indices for p in tape.nodes[i].operands)
    return [i for i in indices if counts.get(i, 0) > 1]


def print_graph_summary(graph: Union[Tape, Value], detailed: bool = False) -> Dict:
    """
    Print a summary of the computational graph.

    Args:
        graph: Tape or root Value
        detailed: also list every node (graphs of at most 100 nodes)

    Returns:
        The statistics dict from get_graph_stats
    """
    stats = get_graph_stats(graph)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common():
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= 100:
        print()
        print_computation_graph(graph, max_nodes=100)
    else:
        print("="*70 + "\n")

    return stats


def print_computation_graph(graph: Union[Tape, Value], max_nodes: int = 20) -> None:
    """
    Print one line per node: index, op, data, grad and operand indices.

    Args:
        graph: Tape or root Value
        max_nodes: maximum number of nodes to print
    """
    tape, indices = _select(graph)
    print("\n" + "="*70)
    print("COMPUTATION GRAPH STRUCTURE")
    print("="*70)

    if not indices:
        print("Empty graph")
        return

    for i in indices[:max_nodes]:
        node = tape.nodes[i]
        head = f"Node {i:4d}: {node.op_tag.value:6s} (data={float(node.data):12.6g}, grad={float(node.grad):12.6g})"
        if node.operands:
            operand_info = ", ".join(f"Node{p}" for p in node.operands)
            extra = f" k={node.exponent}" if node.exponent is not None else ""
            print(f"{head} <- [{operand_info}]{extra}")
        else:
            label = f" {node.name}" if node.name else ""
            print(f"{head} [leaf{label}]")

    if len(indices) > max_nodes:
        print(f"... ({len(indices) - max_nodes} more nodes)")

    print("="*70 + "\n")
