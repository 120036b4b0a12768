"""
Link curve geometry.

A link runs from the right edge of its source node to the left edge of its
target node as a cubic Bezier whose two control points share the horizontal
midpoint, which gives the usual Sankey S-curve.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .models import PositionedLink, PositionedNode

Point = Tuple[float, float]


@dataclass(frozen=True)
class LinkCurve:
    """Cubic Bezier of a link's centreline."""

    start: Point
    control1: Point
    control2: Point
    end: Point
    width: float

    def point_at(self, t: float) -> Point:
        """Evaluate the curve at parameter t in [0, 1]."""
        u = 1 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        points = (self.start, self.control1, self.control2, self.end)
        x = sum(w * p[0] for w, p in zip((a, b, c, d), points))
        y = sum(w * p[1] for w, p in zip((a, b, c, d), points))
        return x, y

    def sample(self, segments: int = 32) -> List[Point]:
        """Return segments + 1 points along the curve, endpoints included."""
        segments = max(1, segments)
        return [self.point_at(i / segments) for i in range(segments + 1)]

    def to_svg_path(self) -> str:
        (x0, y0), (c1x, c1y), (c2x, c2y), (x1, y1) = (
            self.start,
            self.control1,
            self.control2,
            self.end,
        )
        coords = [format_number(v) for v in (x0, y0, c1x, c1y, c2x, c2y, x1, y1)]
        return "M{},{}C{},{} {},{} {},{}".format(*coords)


def link_curve(link: PositionedLink, nodes: Dict[str, PositionedNode]) -> LinkCurve:
    """
    Build the curve for a positioned link.

    The stroke centreline sits half a width below the link anchors, so the
    top edge of the band lines up with the top of both nodes.
    """
    source = nodes.get(link.source)
    target = nodes.get(link.target)
    if source is None or target is None:
        raise KeyError(
            f"Link {link.source!r} -> {link.target!r} references an unknown node"
        )

    x0 = source.x1
    x1 = target.x0
    y0 = link.y0 + link.width / 2
    y1 = link.y1 + link.width / 2
    xi = (x0 + x1) / 2
    return LinkCurve(
        start=(x0, y0),
        control1=(xi, y0),
        control2=(xi, y1),
        end=(x1, y1),
        width=link.width,
    )


def link_path(link: PositionedLink, nodes: Dict[str, PositionedNode]) -> str:
    """Return the SVG path data ("M..C..") for a positioned link."""
    return link_curve(link, nodes).to_svg_path()


def format_number(value: float) -> str:
    """Format a coordinate with at most three decimals, no exponent."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
