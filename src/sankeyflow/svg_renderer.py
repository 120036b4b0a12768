"""
SVG Renderer module for Sankey diagrams.

Turns a PositionedGraph into standalone SVG markup: one gradient per link,
one path per link, one rectangle per node and a text label beside each node.
"""

import xml.etree.ElementTree as ET
from typing import Dict

from .curves import format_number, link_path
from .models import PositionedGraph, PositionedLink, PositionedNode
from .palette import FALLBACK_COLOR, node_color

SVG_NS = "http://www.w3.org/2000/svg"


class SVGRenderer:
    """Renders positioned Sankey graphs as SVG documents."""

    def __init__(
        self,
        font_family: str = "-apple-system, BlinkMacSystemFont, 'Segoe UI', "
        "Roboto, sans-serif",
        font_size: int = 14,
        background: str = "#ffffff",
        text_color: str = "#2c3e50",
        link_opacity: float = 0.7,
        gradient_opacity: float = 0.6,
        min_link_width: float = 3,
        label_offset: float = 8,
    ):
        self.font_family = font_family
        self.font_size = font_size
        self.background = background
        self.text_color = text_color
        self.link_opacity = link_opacity
        self.gradient_opacity = gradient_opacity
        self.min_link_width = min_link_width
        self.label_offset = label_offset

    def render(self, graph: PositionedGraph, width: int, height: int) -> str:
        """
        Render the graph as an SVG document.

        Args:
            graph: Layout output
            width: Document width in pixels
            height: Document height in pixels

        Returns:
            The SVG markup as a string
        """
        svg = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(width),
                "height": str(height),
                "viewBox": f"0 0 {width} {height}",
            },
        )
        ET.SubElement(
            svg,
            "rect",
            {
                "class": "background",
                "width": "100%",
                "height": "100%",
                "fill": self.background,
            },
        )

        colors = {
            node.id: node_color(node.color, i) for i, node in enumerate(graph.nodes)
        }
        node_map = graph.node_map()

        defs = ET.SubElement(svg, "defs")
        for i, link in enumerate(graph.links):
            self._add_gradient(defs, i, link, node_map, colors)

        links_group = ET.SubElement(svg, "g", {"class": "links", "fill": "none"})
        for i, link in enumerate(graph.links):
            path = ET.SubElement(
                links_group,
                "path",
                {
                    "d": link_path(link, node_map),
                    "stroke": f"url(#linkGradient{i})",
                    "stroke-width": format_number(
                        max(self.min_link_width, link.width)
                    ),
                    "opacity": format_number(self.link_opacity),
                },
            )
            tooltip = f"{link.source} → {link.target}\n{format_number(link.value)}"
            if link.label:
                tooltip += f"\n{link.label}"
            ET.SubElement(path, "title").text = tooltip

        nodes_group = ET.SubElement(svg, "g", {"class": "nodes"})
        for node in graph.nodes:
            rect = ET.SubElement(
                nodes_group,
                "rect",
                {
                    "x": format_number(node.x0),
                    "y": format_number(node.y0),
                    "width": format_number(node.x1 - node.x0),
                    "height": format_number(node.y1 - node.y0),
                    "rx": "2",
                    "ry": "2",
                    "fill": colors[node.id],
                    "stroke": "#fff",
                    "stroke-width": "1",
                },
            )
            title = ET.SubElement(rect, "title")
            title.text = f"{node.id}\n{format_number(node.value)}"

        self._add_labels(svg, graph)

        return ET.tostring(svg, encoding="unicode")

    def _add_gradient(
        self,
        defs: ET.Element,
        index: int,
        link: PositionedLink,
        node_map: Dict[str, PositionedNode],
        colors: Dict[str, str],
    ) -> None:
        """Add a source-to-target colour gradient for one link."""
        source = node_map[link.source]
        target = node_map[link.target]
        gradient = ET.SubElement(
            defs,
            "linearGradient",
            {
                "id": f"linkGradient{index}",
                "gradientUnits": "userSpaceOnUse",
                "x1": format_number(source.x1),
                "x2": format_number(target.x0),
            },
        )
        for offset, node_id in (("0%", link.source), ("100%", link.target)):
            ET.SubElement(
                gradient,
                "stop",
                {
                    "offset": offset,
                    "stop-color": colors.get(node_id, FALLBACK_COLOR),
                    "stop-opacity": format_number(self.gradient_opacity),
                },
            )

    def _add_labels(self, svg: ET.Element, graph: PositionedGraph) -> None:
        """Label nodes on their right in the left half, on their left otherwise."""
        if graph.bounds is not None:
            midpoint = (graph.bounds.x0 + graph.bounds.x1) / 2
        else:
            midpoint = max((node.x1 for node in graph.nodes), default=0) / 2

        labels = ET.SubElement(
            svg,
            "g",
            {
                "class": "labels",
                "font-family": self.font_family,
                "font-size": f"{self.font_size}px",
                "font-weight": "600",
                "fill": self.text_color,
            },
        )
        for node in graph.nodes:
            left_half = node.x0 < midpoint
            text = ET.SubElement(
                labels,
                "text",
                {
                    "x": format_number(
                        node.x1 + self.label_offset
                        if left_half
                        else node.x0 - self.label_offset
                    ),
                    "y": format_number((node.y0 + node.y1) / 2),
                    "dy": "0.35em",
                    "text-anchor": "start" if left_half else "end",
                },
            )
            text.text = node.id


def render_to_svg(graph: PositionedGraph, width: int, height: int, **kwargs) -> str:
    """
    Convenience function to render a positioned graph to SVG markup.

    Args:
        graph: Layout output
        width: Document width in pixels
        height: Document height in pixels
        **kwargs: Additional parameters for SVGRenderer

    Returns:
        The SVG markup
    """
    return SVGRenderer(**kwargs).render(graph, width, height)

