"""
Debug tracing infrastructure for sankeyflow.

This module provides data structures for capturing a trace of the Sankey
pipeline. When debug mode is enabled, the generator records the state after
each stage of processing.

This is primarily useful for:
1. Debugging layout issues (why a node landed in a given column)
2. Understanding the pipeline flow (seeing intermediate values)
3. Writing targeted tests (verifying specific layout decisions)

Usage:
    >>> generator = SankeyGenerator(debug=True)
    >>> svg = generator.generate_svg("A --> B: 10")
    >>> trace = generator.get_trace()
    >>> print(trace.summary())
    >>> trace.dump_to_file("debug_trace.txt")

The trace captures:
- parse: node, link and option counts
- values: aggregated node values
- columns: column assignment and the cycle flag
- positions: node rectangles
- links: link anchors and widths
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class LayoutTrace:
    """
    Complete trace of a parse and layout run.

    Attributes:
        stages: List of pipeline stages with their data
        input_text: The original input text
    """

    stages: List[PipelineStage] = field(default_factory=list)
    input_text: str = ""

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "columns")
            data: Dictionary of relevant data at this stage
        """
        self.stages.append(PipelineStage(name, dict(data)))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def summary(self) -> str:
        """Generate a human-readable summary of the trace."""
        lines = [
            "=" * 60,
            "LAYOUT TRACE SUMMARY",
            "=" * 60,
            "",
            f"Input: {repr(self.input_text[:100])}"
            f"{'...' if len(self.input_text) > 100 else ''}",
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            lines.append(f"  {stage.name} ({len(stage.data)} entries)")
        return "\n".join(lines)

    def dump(self) -> str:
        """Generate a complete dump of the trace with all stage data."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
