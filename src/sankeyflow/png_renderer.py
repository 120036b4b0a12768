"""
PNG Renderer module for Sankey diagrams.

Rasterises a PositionedGraph with Pillow. Links are drawn as translucent
bands that follow the link curve and fade from the source colour to the
target colour; nodes are solid rectangles with a label beside them.
"""

import os
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .curves import LinkCurve, link_curve
from .models import PositionedGraph
from .palette import hex_to_rgb, node_color

RGB = Tuple[int, int, int]


class PNGRenderer:
    """Renders positioned Sankey graphs as PNG images."""

    def __init__(
        self,
        scale: int = 2,  # For high-resolution output
        font_size: int = 14,
        font_path: Optional[str] = None,  # Custom font path
        bg_color: RGB = (255, 255, 255),
        text_color: RGB = (44, 62, 80),
        link_opacity: float = 0.5,
        min_link_width: float = 3,
        label_offset: int = 8,
        curve_segments: int = 32,
    ):
        self.scale = scale
        self.font_size = font_size
        self.font_path = font_path
        self.bg_color = bg_color
        self.text_color = text_color
        self.link_opacity = link_opacity
        self.min_link_width = min_link_width
        self.label_offset = label_offset
        self.curve_segments = curve_segments

        self.font = None

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a font for rendering labels."""
        if self.font is not None:
            return self.font

        font_size = self.font_size * self.scale

        # Use custom font if provided
        if self.font_path and os.path.exists(self.font_path):
            try:
                self.font = ImageFont.truetype(self.font_path, font_size)
                return self.font
            except OSError:
                pass  # Fall through to system fonts

        font_options = [
            "DejaVuSans.ttf",
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/System/Library/Fonts/Helvetica.ttc",
            "Arial.ttf",
            "C:/Windows/Fonts/arial.ttf",
        ]
        for font in font_options:
            try:
                self.font = ImageFont.truetype(font, font_size)
                return self.font
            except OSError:
                continue

        # Fall back to Pillow's default font
        try:
            self.font = ImageFont.load_default(size=font_size)
        except TypeError:
            # Older Pillow versions don't support size parameter
            self.font = ImageFont.load_default()
        return self.font

    def render_image(
        self, graph: PositionedGraph, width: int, height: int
    ) -> Image.Image:
        """
        Render the graph to an in-memory RGB image.

        Args:
            graph: Layout output
            width: Diagram width in layout units
            height: Diagram height in layout units

        Returns:
            A Pillow image of size (width * scale, height * scale)
        """
        size = (max(1, int(width * self.scale)), max(1, int(height * self.scale)))
        img = Image.new("RGBA", size, self.bg_color + (255,))

        colors = {
            node.id: hex_to_rgb(node_color(node.color, i))
            for i, node in enumerate(graph.nodes)
        }

        # Links go on a separate layer so overlapping bands blend
        overlay = Image.new("RGBA", size, (0, 0, 0, 0))
        overlay_draw = ImageDraw.Draw(overlay)
        node_map = graph.node_map()
        for link in graph.links:
            self._draw_link(
                overlay_draw,
                link_curve(link, node_map),
                colors[link.source],
                colors[link.target],
            )
        img = Image.alpha_composite(img, overlay)

        draw = ImageDraw.Draw(img)
        for node in graph.nodes:
            # Overcrowded columns can produce inverted rectangles
            top, bottom = sorted((node.y0 * self.scale, node.y1 * self.scale))
            draw.rectangle(
                [node.x0 * self.scale, top, node.x1 * self.scale, bottom],
                fill=colors[node.id] + (255,),
                outline=(255, 255, 255, 255),
                width=max(1, self.scale // 2),
            )

        self._draw_labels(draw, graph)
        return img.convert("RGB")

    def render(
        self,
        graph: PositionedGraph,
        width: int,
        height: int,
        output_path: str = "sankey.png",
    ) -> str:
        """
        Render the graph and save it as a PNG file.

        Returns:
            Path to the saved PNG file
        """
        img = self.render_image(graph, width, height)
        img.save(output_path, "PNG")
        return output_path

    def _draw_link(
        self,
        draw: ImageDraw.ImageDraw,
        curve: LinkCurve,
        source_color: RGB,
        target_color: RGB,
    ) -> None:
        """Draw a link band as quads along the sampled curve."""
        half = max(self.min_link_width, curve.width) / 2 * self.scale
        points = [
            (x * self.scale, y * self.scale)
            for x, y in curve.sample(self.curve_segments)
        ]
        alpha = int(round(255 * self.link_opacity))

        for i in range(len(points) - 1):
            (xa, ya), (xb, yb) = points[i], points[i + 1]
            t = (i + 0.5) / (len(points) - 1)
            fill = tuple(
                int(round(s + (e - s) * t)) for s, e in zip(source_color, target_color)
            ) + (alpha,)
            draw.polygon(
                [(xa, ya - half), (xb, yb - half), (xb, yb + half), (xa, ya + half)],
                fill=fill,
            )

    def _draw_labels(
        self, draw: ImageDraw.ImageDraw, graph: PositionedGraph
    ) -> None:
        """Draw node ids beside their rectangles."""
        if not graph.nodes:
            return

        font = self._get_font()
        if graph.bounds is not None:
            midpoint = (graph.bounds.x0 + graph.bounds.x1) / 2
        else:
            midpoint = max(node.x1 for node in graph.nodes) / 2
        offset = self.label_offset * self.scale

        for node in graph.nodes:
            bbox = draw.textbbox((0, 0), node.id, font=font)
            text_w = bbox[2] - bbox[0]
            text_h = bbox[3] - bbox[1]
            center_y = (node.y0 + node.y1) / 2 * self.scale

            if node.x0 < midpoint:
                x = node.x1 * self.scale + offset
            else:
                x = node.x0 * self.scale - offset - text_w
            draw.text(
                (x, center_y - text_h / 2 - bbox[1]),
                node.id,
                fill=self.text_color + (255,),
                font=font,
            )


def render_to_png(
    graph: PositionedGraph,
    width: int,
    height: int,
    output_path: str = "sankey.png",
    **kwargs,
) -> str:
    """
    Convenience function to render a positioned graph to PNG.

    Args:
        graph: Layout output
        width: Diagram width
        height: Diagram height
        output_path: Path to save the PNG file
        **kwargs: Additional parameters for PNGRenderer

    Returns:
        Path to the saved PNG file
    """
    renderer = PNGRenderer(**kwargs)
    return renderer.render(graph, width, height, output_path)
