"""
sankeyflow - Sankey diagrams from plain text

A Python library for turning a line-oriented flow description into a Sankey
diagram layout, rendered as SVG or PNG.

Example:
    >>> from sankeyflow import SankeyGenerator
    >>> generator = SankeyGenerator()
    >>> svg = generator.generate_svg('''
    ...     Coal --> Power: 100
    ...     Power --> Homes: 80
    ...     Power --> Loss: 20
    ... ''')

Lower-level Example:
    >>> from sankeyflow import LayoutConfig, Bounds, compute_layout, parse_sankey
    >>> graph = parse_sankey("A --> B --> C: 10")
    >>> config = LayoutConfig(node_thickness=20, node_gap=10,
    ...                       bounds=Bounds(0, 0, 600, 400))
    >>> positioned = compute_layout(graph, config)
    >>> positioned.columns
    [['A'], ['B'], ['C']]
"""

from .curves import LinkCurve, link_curve, link_path
from .diagnostics import (
    Diagnostic,
    DiagnosticCollection,
    Severity,
    validate_text,
)
from .export import ExportError, SankeyExporter
from .generator import SankeyGenerator
from .layout import LayoutError, SankeyLayout, compute_layout
from .models import (
    Bounds,
    Graph,
    LayoutConfig,
    Link,
    Node,
    PositionedGraph,
    PositionedLink,
    PositionedNode,
)
from .palette import DEFAULT_COLORS, node_color
from .parser import ErrorKind, ParseError, Parser, parse_sankey
from .png_renderer import PNGRenderer, render_to_png
from .svg_renderer import SVGRenderer, render_to_svg
from .tracer import LayoutTrace, PipelineStage

__version__ = "0.1.0"

__all__ = [
    # Main API
    "SankeyGenerator",
    # Parser
    "Parser",
    "ParseError",
    "ErrorKind",
    "parse_sankey",
    # Models
    "Node",
    "Link",
    "Graph",
    "Bounds",
    "LayoutConfig",
    "PositionedNode",
    "PositionedLink",
    "PositionedGraph",
    # Layout
    "SankeyLayout",
    "LayoutError",
    "compute_layout",
    "LinkCurve",
    "link_curve",
    "link_path",
    # Rendering and export
    "DEFAULT_COLORS",
    "node_color",
    "SVGRenderer",
    "render_to_svg",
    "PNGRenderer",
    "render_to_png",
    "SankeyExporter",
    "ExportError",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCollection",
    "Severity",
    "validate_text",
    # Debug/Tracing
    "LayoutTrace",
    "PipelineStage",
]
