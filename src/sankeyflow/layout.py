"""
Layout module using networkx for the Sankey column layout.

Uses networkx for:
- Graph representation (a MultiDiGraph, since two links may join the same
  pair of nodes)
- Source detection (in-degree zero)
- Predecessor/successor queries during column ranking
- Cycle detection (reported, never broken)

The layout is a fixed greedy heuristic:
1. value aggregation - node value = max(outflow, inflow)
2. column ranking - breadth first, a node waits for all its predecessors
3. horizontal positioning - columns evenly spread across the bounds
4. vertical positioning - nodes stacked per column, scaled to fit
5. link geometry - width normalised against the largest node value

Known limitations: cyclic graphs do not get a layered layout (nodes that
can never be admitted are appended to the last column), and every link
leaving or entering a node is anchored at the node's top edge, so links
sharing a node overlap.
"""

import logging
import math
from typing import Dict, List, Optional

import networkx as nx

from .models import (
    Graph,
    LayoutConfig,
    PositionedGraph,
    PositionedLink,
    PositionedNode,
)
from .parser import ErrorKind
from .tracer import LayoutTrace

logger = logging.getLogger(__name__)


class LayoutError(ValueError):
    """Raised when the layout engine receives a malformed graph or config."""

    kind = ErrorKind.LAYOUT_ERROR


class SankeyLayout:
    """
    Sankey layout using networkx.

    Each call to compute() builds its own working graph, so one instance can
    be reused for any number of independent graphs.
    """

    def compute(
        self,
        graph: Graph,
        config: LayoutConfig,
        trace: Optional[LayoutTrace] = None,
    ) -> PositionedGraph:
        """
        Compute the layout for a parsed graph.

        Args:
            graph: Graph produced by the parser (or built by hand)
            config: Node thickness, node gap and bounds
            trace: Optional LayoutTrace that receives a stage per step

        Returns:
            PositionedGraph with node rectangles and link geometry

        Raises:
            LayoutError: If the config is invalid or a link references an
                unknown node
        """
        self._validate_config(config)
        digraph = self._build_graph(graph)

        nodes = [
            PositionedNode(id=node.id, color=node.color) for node in graph.nodes
        ]
        links = [
            PositionedLink(
                source=link.source,
                target=link.target,
                value=link.value,
                label=link.label,
            )
            for link in graph.links
        ]
        node_map = {node.id: node for node in nodes}

        self._aggregate_values(node_map, links)
        if trace is not None:
            trace.add_stage("values", {n.id: n.value for n in nodes})

        has_cycles = not nx.is_directed_acyclic_graph(digraph)
        if has_cycles:
            logger.warning(
                "Graph contains cycles; unreachable nodes go to the last column"
            )

        columns = self._assign_columns(digraph, graph.node_ids())
        if trace is not None:
            trace.add_stage(
                "columns", {"columns": columns, "has_cycles": has_cycles}
            )

        self._position_nodes(columns, node_map, config)
        if trace is not None:
            trace.add_stage(
                "positions",
                {n.id: (n.x0, n.y0, n.x1, n.y1) for n in nodes},
            )

        self._position_links(nodes, links, node_map, config)
        if trace is not None:
            trace.add_stage(
                "links",
                {
                    f"{link.source}->{link.target}": (link.y0, link.y1, link.width)
                    for link in links
                },
            )

        logger.debug(
            "Laid out %d nodes in %d columns", len(nodes), len(columns)
        )
        return PositionedGraph(
            nodes=nodes,
            links=links,
            columns=columns,
            options=dict(graph.options),
            styles={k: dict(v) for k, v in graph.styles.items()},
            bounds=config.bounds,
            has_cycles=has_cycles,
        )

    def _validate_config(self, config: LayoutConfig) -> None:
        """Reject configs the positioning formulas cannot work with."""
        if not config.node_thickness > 0:
            raise LayoutError(
                f"node_thickness must be > 0, got {config.node_thickness}"
            )
        if not config.node_gap >= 0:
            raise LayoutError(f"node_gap must be >= 0, got {config.node_gap}")
        bounds = config.bounds
        if bounds.x1 < bounds.x0 or bounds.y1 < bounds.y0:
            raise LayoutError(f"Bounds are inverted: {bounds}")

    def _build_graph(self, graph: Graph) -> nx.MultiDiGraph:
        """
        Build a networkx MultiDiGraph, checking every link resolves.

        Node insertion order follows the graph's first-seen order, and each
        edge key is the link's index in graph.links.
        """
        digraph = nx.MultiDiGraph()
        for node in graph.nodes:
            if node.id in digraph:
                raise LayoutError(f"Duplicate node id: {node.id!r}")
            digraph.add_node(node.id)

        for i, link in enumerate(graph.links):
            for end in (link.source, link.target):
                if end not in digraph:
                    raise LayoutError(
                        f"Link {i} ({link.source!r} -> {link.target!r}) "
                        f"references unknown node {end!r}"
                    )
            if not math.isfinite(link.value) or link.value < 0:
                raise LayoutError(
                    f"Link {i} has invalid value {link.value!r}"
                )
            digraph.add_edge(link.source, link.target, key=i, value=link.value)

        return digraph

    def _aggregate_values(
        self,
        node_map: Dict[str, PositionedNode],
        links: List[PositionedLink],
    ) -> None:
        """Record link indices per node and set value = max(out, in)."""
        for i, link in enumerate(links):
            node_map[link.source].source_links.append(i)
            node_map[link.target].target_links.append(i)

        for node in node_map.values():
            outflow = sum(links[i].value for i in node.source_links)
            inflow = sum(links[i].value for i in node.target_links)
            node.value = max(outflow, inflow)

    def _assign_columns(
        self, digraph: nx.MultiDiGraph, order: List[str]
    ) -> List[List[str]]:
        """
        Rank nodes into columns, breadth first.

        Column 0 holds nodes without incoming links. A node joins the next
        column once a node of the current column links to it and all of its
        predecessors have been visited. Nodes never visited (cycles) are
        appended to the last column.
        """
        columns: List[List[str]] = []
        visited = set()

        current = [node for node in order if digraph.in_degree(node) == 0]
        while current:
            columns.append(list(current))
            visited.update(current)

            next_column: List[str] = []
            for node in current:
                for successor in digraph.successors(node):
                    if successor in visited or successor in next_column:
                        continue
                    if all(p in visited for p in digraph.predecessors(successor)):
                        next_column.append(successor)
            current = next_column

        remaining = [node for node in order if node not in visited]
        if remaining:
            if not columns:
                columns.append([])
            columns[-1].extend(remaining)

        return columns

    def _position_nodes(
        self,
        columns: List[List[str]],
        node_map: Dict[str, PositionedNode],
        config: LayoutConfig,
    ) -> None:
        """Spread columns horizontally and stack nodes within each column."""
        bounds = config.bounds
        thickness = config.node_thickness
        gap = config.node_gap
        dx = (bounds.x1 - bounds.x0 - thickness) / max(1, len(columns) - 1)

        for col_idx, column in enumerate(columns):
            x = bounds.x0 + col_idx * dx
            total = sum(node_map[node_id].value for node_id in column)
            available = bounds.y1 - bounds.y0 - gap * (len(column) - 1)
            scale = available / max(1, total)

            y = bounds.y0
            for node_id in column:
                node = node_map[node_id]
                node.column = col_idx
                node.x0 = x
                node.x1 = x + thickness
                node.y0 = y
                node.y1 = y + node.value * scale
                y = node.y1 + gap

    def _position_links(
        self,
        nodes: List[PositionedNode],
        links: List[PositionedLink],
        node_map: Dict[str, PositionedNode],
        config: LayoutConfig,
    ) -> None:
        """Set link width and anchor both ends at the node tops."""
        height = config.bounds.y1 - config.bounds.y0
        max_value = max((node.value for node in nodes), default=0)
        denominator = max(1, max_value)

        for link in links:
            link.width = link.value * height / denominator
            link.y0 = node_map[link.source].y0
            link.y1 = node_map[link.target].y0


def compute_layout(
    graph: Graph,
    config: Optional[LayoutConfig] = None,
    trace: Optional[LayoutTrace] = None,
) -> PositionedGraph:
    """
    Convenience function to lay out a parsed graph.

    Args:
        graph: Parsed Graph
        config: Layout parameters (defaults to LayoutConfig())
        trace: Optional LayoutTrace to record stages into

    Returns:
        The PositionedGraph
    """
    return SankeyLayout().compute(graph, config or LayoutConfig(), trace)
