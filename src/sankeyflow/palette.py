"""
Default node colours.

The palette is read-only and indexed purely by a node's first-seen position,
so repeated renders of the same document always colour it the same way.
"""

from typing import Optional, Tuple

DEFAULT_COLORS: Tuple[str, ...] = (
    "#3498db",
    "#2ecc71",
    "#e74c3c",
    "#f39c12",
    "#9b59b6",
    "#1abc9c",
    "#34495e",
    "#e67e22",
    "#8e44ad",
    "#27ae60",
    "#2980b9",
    "#c0392b",
    "#d35400",
    "#7f8c8d",
    "#16a085",
)

FALLBACK_COLOR = "#888888"


def node_color(color: Optional[str], index: int) -> str:
    """Return the node's override colour, or the palette colour for its index."""
    if color:
        return color
    return DEFAULT_COLORS[index % len(DEFAULT_COLORS)]


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """
    Convert #RGB, #RGBA, #RRGGBB or #RRGGBBAA to an (r, g, b) tuple.

    Alpha digits are ignored. Unparseable colours map to FALLBACK_COLOR.
    """
    digits = color.lstrip("#")
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits[:3])
    elif len(digits) in (6, 8):
        digits = digits[:6]
    else:
        digits = FALLBACK_COLOR[1:]

    try:
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    except ValueError:
        return hex_to_rgb(FALLBACK_COLOR)
