"""
Main Sankey generator module.

Combines parsing, layout, and rendering to produce Sankey diagrams as SVG
markup or PNG images.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image

from .export import SankeyExporter, format_for_path
from .layout import SankeyLayout
from .models import Bounds, Graph, LayoutConfig, PositionedGraph
from .parser import Parser
from .png_renderer import PNGRenderer
from .svg_renderer import SVGRenderer
from .tracer import LayoutTrace

logger = logging.getLogger(__name__)


class SankeyGenerator:
    """
    Generate Sankey diagrams from simple text descriptions.

    Example:
        >>> generator = SankeyGenerator()
        >>> svg = generator.generate_svg('''
        ...     Coal --> Power: 100
        ...     Power --> Homes: 80
        ...     Power --> Loss: 20
        ... ''')
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        margin: Tuple[int, int, int, int] = (50, 150, 50, 150),
        node_width: float = 20,
        node_padding: float = 30,
        scale: int = 2,
        font: Optional[str] = None,
        max_export_bytes: Optional[int] = None,
        parser: Optional[Parser] = None,
        debug: bool = False,
    ):
        """
        Initialize the Sankey generator.

        Args:
            width: Diagram width in pixels
            height: Diagram height in pixels
            margin: (top, right, bottom, left) space kept free for labels
            node_width: Horizontal thickness of node rectangles
            node_padding: Vertical gap between nodes in a column
            scale: Resolution multiplier for PNG output
            font: Path to a TrueType font for PNG labels
            max_export_bytes: Size limit for saved files (default 10 MB)
            parser: Parser to use (e.g. one with custom limits)
            debug: Record a LayoutTrace for every run
        """
        self.width = width
        self.height = height
        self.margin = margin
        self.node_width = node_width
        self.node_padding = node_padding
        self.debug = debug

        top, right, bottom, left = margin
        if width - left - right <= 0 or height - top - bottom <= 0:
            raise ValueError("margin leaves no room for the diagram")

        self.parser = parser or Parser()
        self.layout_engine = SankeyLayout()
        self.svg_renderer = SVGRenderer()
        self.png_renderer = PNGRenderer(scale=scale, font_path=font)
        if max_export_bytes is None:
            self.exporter = SankeyExporter()
        else:
            self.exporter = SankeyExporter(max_bytes=max_export_bytes)

        self._trace: Optional[LayoutTrace] = None

    @property
    def config(self) -> LayoutConfig:
        """Layout configuration derived from size, margin and node settings."""
        top, right, bottom, left = self.margin
        return LayoutConfig(
            node_thickness=self.node_width,
            node_gap=self.node_padding,
            bounds=Bounds(left, top, self.width - right, self.height - bottom),
        )

    def parse(self, input_text: str) -> Graph:
        """Parse input text into a Graph."""
        return self.parser.parse(input_text)

    def layout(self, source: Union[str, Graph]) -> PositionedGraph:
        """
        Parse (if given text) and lay out a diagram.

        Args:
            source: Sankey document text or an already parsed Graph

        Returns:
            The PositionedGraph
        """
        trace = None
        if self.debug:
            trace = LayoutTrace(input_text=source if isinstance(source, str) else "")
            self._trace = trace

        if isinstance(source, Graph):
            graph = source
        else:
            graph = self.parse(source)

        if trace is not None:
            trace.add_stage(
                "parse",
                {
                    "nodes": graph.node_ids(),
                    "links": len(graph.links),
                    "options": graph.options,
                },
            )

        positioned = self.layout_engine.compute(graph, self.config, trace)
        logger.debug(
            "Generated layout: %d nodes, %d links, %d columns",
            len(positioned.nodes),
            len(positioned.links),
            len(positioned.columns),
        )
        return positioned

    def generate_svg(self, source: Union[str, Graph]) -> str:
        """Generate SVG markup for a diagram."""
        return self.svg_renderer.render(self.layout(source), self.width, self.height)

    def generate_png(self, source: Union[str, Graph]) -> Image.Image:
        """Generate a PNG-ready Pillow image for a diagram."""
        return self.png_renderer.render_image(
            self.layout(source), self.width, self.height
        )

    def save_svg(self, source: Union[str, Graph], filename: Union[str, Path]) -> Path:
        """Generate a diagram and save it as an SVG file."""
        return self.exporter.save_svg(self.generate_svg(source), filename)

    def save_png(self, source: Union[str, Graph], filename: Union[str, Path]) -> Path:
        """
        Generate a diagram and save it as a high-resolution PNG image.

        Example:
            >>> generator = SankeyGenerator(scale=3)
            >>> generator.save_png("A --> B: 10", "sankey.png")
        """
        return self.exporter.save_png(self.generate_png(source), filename)

    def save(self, source: Union[str, Graph], filename: Union[str, Path]) -> Path:
        """Save a diagram, choosing SVG or PNG from the file suffix."""
        if format_for_path(filename) == "png":
            return self.save_png(source, filename)
        return self.save_svg(source, filename)

    def get_trace(self) -> Optional[LayoutTrace]:
        """Return the trace of the last run (only recorded when debug=True)."""
        return self._trace
