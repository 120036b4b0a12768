"""
Data models for Sankey diagram generation.

This module contains the dataclasses shared by the parser, the layout engine
and the renderers. The parser produces a Graph; the layout engine turns it
into a PositionedGraph without mutating the parsed graph.

Classes:
    Node: A named flow stage, created the first time a link references it.
    Link: One weighted hop between two nodes.
    Graph: Parsed result (nodes, links, global options, style overrides).
    Bounds: Rectangle the layout is fitted into.
    LayoutConfig: Layout parameters (node thickness, gap, bounds).
    PositionedNode: A node with its computed value and rectangle.
    PositionedLink: A link with its computed width and vertical anchors.
    PositionedGraph: Layout output consumed by the renderers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Node:
    """
    A node of the flow graph.

    The id doubles as the display label and the join key for links and
    class directives.

    Attributes:
        id: Unique node name (unquoted, trimmed).
        color: Optional colour override set by a class directive.
    """

    id: str
    color: Optional[str] = None


@dataclass(frozen=True)
class Link:
    """
    One hop of a chain directive.

    Attributes:
        source: Id of the source node.
        target: Id of the target node.
        value: Non-negative finite flow magnitude.
        label: Optional label, only set on the final hop of a chain.
    """

    source: str
    target: str
    value: float
    label: Optional[str] = None


@dataclass
class Graph:
    """
    Result of parsing a Sankey document.

    Node order is the first-seen order and is relied upon by the layout
    (source detection) and the renderers (default colouring).
    """

    nodes: List[Node] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)
    styles: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def node_ids(self) -> List[str]:
        """Return node ids in first-seen order."""
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Optional[Node]:
        """Look up a node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


@dataclass(frozen=True)
class Bounds:
    """Rectangle given by its top-left (x0, y0) and bottom-right (x1, y1)."""

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0


@dataclass(frozen=True)
class LayoutConfig:
    """
    Parameters of the Sankey layout.

    Attributes:
        node_thickness: Horizontal width of every node rectangle (> 0).
        node_gap: Vertical gap between stacked nodes in a column (>= 0).
        bounds: Extent the diagram is fitted into.
    """

    node_thickness: float = 20.0
    node_gap: float = 30.0
    bounds: Bounds = field(default_factory=lambda: Bounds(0.0, 0.0, 1.0, 1.0))


@dataclass
class PositionedNode:
    """
    A node after layout.

    Attributes:
        id: Node id.
        color: Colour override carried over from the parsed node.
        value: max(sum of outgoing values, sum of incoming values).
        x0, x1, y0, y1: Rectangle bounds.
        column: Index of the column (rank) the node was placed in.
        source_links: Indices of outgoing links in PositionedGraph.links.
        target_links: Indices of incoming links in PositionedGraph.links.
    """

    id: str
    color: Optional[str] = None
    value: float = 0.0
    x0: float = 0.0
    x1: float = 0.0
    y0: float = 0.0
    y1: float = 0.0
    column: int = 0
    source_links: List[int] = field(default_factory=list)
    target_links: List[int] = field(default_factory=list)

    @property
    def height(self) -> float:
        return self.y1 - self.y0


@dataclass
class PositionedLink:
    """
    A link after layout.

    Attributes:
        source: Id of the source node.
        target: Id of the target node.
        value: Flow magnitude copied from the parsed link.
        label: Optional label copied from the parsed link.
        width: Visual thickness, normalised against the largest node value.
        y0: Vertical anchor at the source (top of the source node).
        y1: Vertical anchor at the target (top of the target node).
    """

    source: str
    target: str
    value: float
    label: Optional[str] = None
    width: float = 0.0
    y0: float = 0.0
    y1: float = 0.0


@dataclass
class PositionedGraph:
    """Layout result: positioned nodes and links plus the column structure."""

    nodes: List[PositionedNode] = field(default_factory=list)
    links: List[PositionedLink] = field(default_factory=list)
    columns: List[List[str]] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)
    styles: Dict[str, Dict[str, str]] = field(default_factory=dict)
    bounds: Optional[Bounds] = None
    has_cycles: bool = False

    def get_node(self, node_id: str) -> Optional[PositionedNode]:
        """Look up a positioned node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_map(self) -> Dict[str, PositionedNode]:
        """Return a dict of node id to positioned node."""
        return {node.id: node for node in self.nodes}
