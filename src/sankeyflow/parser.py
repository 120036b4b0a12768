"""
Parser module for Sankey diagrams.

Handles parsing of the line-oriented Sankey DSL into a Graph:

    // comment
    %% comment
    title: Energy flows
    class Coal color:#333333
    class "Natural Gas" color:#ff8800
    Coal --> Power: 100
    Power --> Homes --> Lights: 20 "lighting"

Each physical line is classified on its own, in order, and the first rule
that matches wins: blank/comment, class directive, global option, chain link.
"""

import logging
import math
import re
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import Graph, Link, Node

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_SIZE = 100_000
DEFAULT_MAX_NODES = 1000
DEFAULT_MAX_LINKS = 5000
DEFAULT_MAX_NAME_LENGTH = 100

ARROW = "-->"
COMMENT_PREFIXES = ("//", "%%")


class ErrorKind(Enum):
    """Error categories reported by the parser and the layout engine."""

    INVALID_INPUT = "InvalidInput"
    TOO_LARGE = "TooLarge"
    RESOURCE_LIMIT_EXCEEDED = "ResourceLimitExceeded"
    INVALID_NODE_NAME = "InvalidNodeName"
    INVALID_VALUE = "InvalidValue"
    SYNTAX_ERROR = "SyntaxError"
    LAYOUT_ERROR = "LayoutError"


class ParseError(ValueError):
    """
    Raised when input parsing fails.

    The message follows the "Line N: ..." convention when a line is known,
    and the line number is also available as the ``line`` attribute.

    Attributes:
        kind: The ErrorKind category of the failure.
        line: 1-based line number of the offending line, if any.
    """

    def __init__(self, message: str, kind: ErrorKind, line: Optional[int] = None):
        if line is not None:
            message = f"Line {line}: {message}"
        super().__init__(message)
        self.kind = kind
        self.line = line

    @property
    def message(self) -> str:
        return str(self)


class Parser:
    """
    Parses Sankey DSL text into a Graph.

    A Parser holds only read-only limits, so one instance can be shared and
    called repeatedly (or from several threads) on independent inputs.
    """

    # class Name color:#RRGGBB  /  class "Multi Word" color:#RGB
    CLASS_QUOTED_PATTERN = re.compile(r'^class\s+"([^"]+)"\s+(.+)$')
    CLASS_UNQUOTED_PATTERN = re.compile(r"^class\s+(\S+)\s+(.+)$")
    COLOR_PATTERN = re.compile(r"color\s*:\s*(#[0-9a-f]{3,8})\b", re.IGNORECASE)

    # path: value ["label"]
    LINK_PATTERN = re.compile(
        r'^(?P<path>.+?):\s*(?P<value>[-+]?[\d.]+(?:[eE][-+]?\d+)?)'
        r'(?:\s+"(?P<label>.+?)")?$'
    )

    # C0 and C1 control characters are not allowed in node names
    CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")

    def __init__(
        self,
        max_input_size: int = DEFAULT_MAX_INPUT_SIZE,
        max_nodes: int = DEFAULT_MAX_NODES,
        max_links: int = DEFAULT_MAX_LINKS,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ):
        """
        Initialize the parser.

        Args:
            max_input_size: Maximum accepted input length in characters.
            max_nodes: Maximum number of distinct nodes per document.
            max_links: Maximum number of links (hops) per document.
            max_name_length: Maximum node name length after unquoting.
        """
        self.max_input_size = max_input_size
        self.max_nodes = max_nodes
        self.max_links = max_links
        self.max_name_length = max_name_length

    def parse(self, input_text: str) -> Graph:
        """
        Parse input text into a Graph.

        Args:
            input_text: Sankey document text.

        Returns:
            Graph with nodes in first-seen order, links in document order,
            global options and the collected class styles.

        Raises:
            ParseError: On the first offending line; no partial result.
        """
        if not isinstance(input_text, str):
            raise ParseError(
                f"Input must be a string, got {type(input_text).__name__}",
                ErrorKind.INVALID_INPUT,
            )
        if len(input_text) > self.max_input_size:
            raise ParseError(
                f"Input too large ({len(input_text)} characters, "
                f"maximum {self.max_input_size})",
                ErrorKind.TOO_LARGE,
            )
        if not input_text.strip():
            raise ParseError("No text provided", ErrorKind.INVALID_INPUT)

        nodes: List[Node] = []
        index: Dict[str, Node] = {}
        links: List[Link] = []
        styles: Dict[str, Dict[str, str]] = {}
        options: Dict[str, str] = {}

        def get_node(name: str, line_num: int) -> str:
            if name not in index:
                if len(nodes) >= self.max_nodes:
                    raise ParseError(
                        f"Too many nodes (maximum {self.max_nodes})",
                        ErrorKind.RESOURCE_LIMIT_EXCEEDED,
                        line_num,
                    )
                node = Node(id=name)
                index[name] = node
                nodes.append(node)
            return name

        for line_num, raw in enumerate(re.split(r"\r?\n", input_text), 1):
            line = raw.strip()

            if not line or line.startswith(COMMENT_PREFIXES):
                continue

            if line.startswith("class "):
                style = self._parse_class(line)
                if style is not None:
                    name, color = style
                    styles[name] = {"color": color}
                continue

            if ARROW not in line and ":" in line:
                key, value = line.split(":", 1)
                options[key.strip()] = value.strip()
                continue

            match = self.LINK_PATTERN.match(line)
            if not match:
                raise ParseError(
                    f"Syntax error: {line}", ErrorKind.SYNTAX_ERROR, line_num
                )

            path = [part.strip() for part in match.group("path").split(ARROW)]
            if len(path) < 2:
                raise ParseError(
                    f"Path must have at least 2 nodes: {line}",
                    ErrorKind.SYNTAX_ERROR,
                    line_num,
                )

            value = self._parse_value(match.group("value"), line_num)
            label = match.group("label")
            names = [self._parse_name(part, line_num) for part in path]

            for i in range(len(names) - 1):
                if len(links) >= self.max_links:
                    raise ParseError(
                        f"Too many links (maximum {self.max_links})",
                        ErrorKind.RESOURCE_LIMIT_EXCEEDED,
                        line_num,
                    )
                source = get_node(names[i], line_num)
                target = get_node(names[i + 1], line_num)
                links.append(
                    Link(
                        source=source,
                        target=target,
                        value=value,
                        label=label if i == len(names) - 2 else None,
                    )
                )

        # Apply styles; directive order does not matter
        for node in nodes:
            style = styles.get(node.id)
            if style:
                node.color = style.get("color", node.color)

        logger.debug(
            "Parsed %d nodes, %d links, %d options",
            len(nodes),
            len(links),
            len(options),
        )
        return Graph(nodes=nodes, links=links, options=options, styles=styles)

    def _parse_class(self, line: str) -> Optional[Tuple[str, str]]:
        """
        Parse a class directive into (node name, colour).

        Returns None when the directive has no resolvable name and colour;
        such lines are ignored rather than rejected.
        """
        match = self.CLASS_QUOTED_PATTERN.match(line)
        if not match:
            match = self.CLASS_UNQUOTED_PATTERN.match(line)
        if not match:
            return None
        name, rest = match.group(1), match.group(2)
        color_match = self.COLOR_PATTERN.search(rest)
        if not color_match:
            return None
        return name, color_match.group(1)

    def _parse_name(self, raw: str, line_num: int) -> str:
        """Unquote and validate a node name taken from a chain path."""
        name = raw.strip()
        if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
            name = name[1:-1]

        if not name or len(name) > self.max_name_length:
            raise ParseError(
                f"Invalid node name: '{name}' "
                f"(must be 1-{self.max_name_length} characters)",
                ErrorKind.INVALID_NODE_NAME,
                line_num,
            )
        if '"' in name or self.CONTROL_CHARS.search(name):
            raise ParseError(
                f"Invalid node name: {name!r} "
                "(quotes and control characters are not allowed)",
                ErrorKind.INVALID_NODE_NAME,
                line_num,
            )
        return name

    def _parse_value(self, token: str, line_num: int) -> float:
        """Convert a value token to a finite, non-negative float."""
        try:
            value = float(token)
        except ValueError:
            value = math.nan
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise ParseError(
                f"Invalid value: {token} (must be a non-negative finite number)",
                ErrorKind.INVALID_VALUE,
                line_num,
            )
        return value


def parse_sankey(input_text: str, **limits) -> Graph:
    """
    Convenience function to parse Sankey input.

    Args:
        input_text: Sankey document text.
        **limits: Optional Parser limits (max_nodes, max_links, ...).

    Returns:
        The parsed Graph.
    """
    parser = Parser(**limits)
    return parser.parse(input_text)
