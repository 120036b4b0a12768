"""
File export functionality for Sankey diagrams.

This module handles writing rendered diagrams to disk:
- SVG files (.svg) - the markup produced by SVGRenderer, verbatim
- PNG images (.png) - rasterised output produced by PNGRenderer

Every payload is size-checked before anything is written, so a runaway
diagram cannot fill the disk.
"""

import io
import logging
from pathlib import Path
from typing import Union

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024

SUPPORTED_FORMATS = ("svg", "png")


class ExportError(ValueError):
    """Raised when an export request is invalid or too large."""

    pass


def format_for_path(filename: Union[str, Path]) -> str:
    """
    Derive the export format from a file name's suffix.

    Raises:
        ExportError: If the suffix is not .svg or .png.
    """
    fmt = Path(filename).suffix.lower().lstrip(".")
    if fmt not in SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported export format {fmt!r} "
            f"(expected one of: {', '.join(SUPPORTED_FORMATS)})"
        )
    return fmt


class SankeyExporter:
    """
    Exports rendered Sankey diagrams to files.

    Attributes:
        max_bytes: Largest payload, in bytes, that will be written.
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self.max_bytes = max_bytes

    def save_svg(self, svg: str, filename: Union[str, Path]) -> Path:
        """
        Save SVG markup to a file.

        Args:
            svg: SVG document text.
            filename: Output filename (should end in .svg).

        Returns:
            The path written.
        """
        return self._write(svg.encode("utf-8"), filename, "svg")

    def save_png(self, image: Image.Image, filename: Union[str, Path]) -> Path:
        """
        Save a rendered image as PNG.

        Args:
            image: Pillow image, as returned by PNGRenderer.render_image().
            filename: Output filename (should end in .png).

        Returns:
            The path written.
        """
        buffer = io.BytesIO()
        image.save(buffer, "PNG")
        return self._write(buffer.getvalue(), filename, "png")

    def _write(self, data: bytes, filename: Union[str, Path], fmt: str) -> Path:
        if len(data) > self.max_bytes:
            raise ExportError(
                f"Export data too large ({len(data)} bytes, "
                f"maximum {self.max_bytes})"
            )
        output_path = Path(filename)
        output_path.write_bytes(data)
        logger.info("Exported %s (%s, %d bytes)", output_path, fmt, len(data))
        return output_path
