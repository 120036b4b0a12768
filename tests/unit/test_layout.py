"""Unit tests for the layout module."""

import copy

import pytest

from sankeyflow.layout import LayoutError, compute_layout
from sankeyflow.models import Bounds, Graph, LayoutConfig, Link, Node
from sankeyflow.parser import ErrorKind, parse_sankey
from sankeyflow.tracer import LayoutTrace


class TestValueAggregation:
    """Tests for node value aggregation."""

    def test_value_is_max_of_in_and_out(self, layout_engine, config):
        """Test that a node's value is the larger of inflow and outflow."""
        graph = parse_sankey("A --> B: 10\nB --> C: 4\nD --> B: 3")
        result = layout_engine.compute(graph, config)
        assert result.get_node("A").value == 10
        assert result.get_node("B").value == 13
        assert result.get_node("C").value == 4

    def test_link_indices_recorded(self, layout_engine, config, energy_graph):
        """Test that nodes record their outgoing and incoming link indices."""
        result = layout_engine.compute(energy_graph, config)
        power = result.get_node("Power")
        assert power.target_links == [0]
        assert power.source_links == [1, 2]
        assert result.get_node("Coal").target_links == []

    def test_parallel_links_are_kept(self, layout_engine, config):
        """Test that two links between the same pair both count."""
        graph = parse_sankey("A --> B: 2\nA --> B: 3")
        result = layout_engine.compute(graph, config)
        assert len(result.links) == 2
        assert result.get_node("B").value == 5


class TestColumnAssignment:
    """Tests for breadth-first column ranking."""

    def test_energy_columns(self, layout_engine, config, energy_graph):
        """Test a source, hub and two sinks."""
        result = layout_engine.compute(energy_graph, config)
        assert result.columns == [["Coal"], ["Power"], ["Homes", "Loss"]]
        assert [n.column for n in result.nodes] == [0, 1, 2, 2]

    def test_diamond_columns(self, layout_engine, config, diamond_input):
        """Test that a merge node lands after both branches."""
        result = layout_engine.compute(parse_sankey(diamond_input), config)
        assert result.columns == [["A"], ["B", "C"], ["D"]]

    def test_node_waits_for_all_predecessors(self, layout_engine, config):
        """Test that a node is not placed until every predecessor is placed."""
        graph = parse_sankey(
            "A --> B: 1\nA --> X: 1\nX --> Y: 1\nB --> D: 1\nY --> D: 1"
        )
        result = layout_engine.compute(graph, config)
        assert result.columns == [["A"], ["B", "X"], ["Y"], ["D"]]

    def test_multiple_sources_in_first_seen_order(self, layout_engine, config):
        """Test that column 0 keeps first-seen order of sources."""
        graph = parse_sankey("Y --> Z: 1\nX --> Z: 1")
        result = layout_engine.compute(graph, config)
        assert result.columns == [["Y", "X"], ["Z"]]

    def test_cycle_only_graph(self, layout_engine, config, cyclic_input):
        """Test that a pure cycle ends up in a single column."""
        result = layout_engine.compute(parse_sankey(cyclic_input), config)
        assert result.columns == [["A", "B"]]
        assert result.has_cycles is True

    def test_cycle_nodes_join_last_column(self, layout_engine, config):
        """Test that nodes never admitted are appended to the last column."""
        graph = parse_sankey("S --> A: 1\nA --> B: 1\nB --> A: 1")
        result = layout_engine.compute(graph, config)
        assert result.columns == [["S", "A", "B"]]
        assert result.has_cycles is True

    def test_cycle_is_logged(self, layout_engine, config, cyclic_input, caplog):
        """Test that a cyclic graph produces a warning."""
        with caplog.at_level("WARNING", logger="sankeyflow.layout"):
            layout_engine.compute(parse_sankey(cyclic_input), config)
        assert "cycles" in caplog.text

    def test_acyclic_graph_not_flagged(self, layout_engine, config, energy_graph):
        """Test has_cycles is False for a DAG."""
        assert layout_engine.compute(energy_graph, config).has_cycles is False

    def test_every_node_in_exactly_one_column(self, layout_engine, config):
        """Test that the columns partition the node set."""
        graph = parse_sankey(
            "A --> B: 1\nB --> C: 1\nC --> B: 1\nA --> D: 2\nE --> D: 1"
        )
        result = layout_engine.compute(graph, config)
        placed = [node_id for column in result.columns for node_id in column]
        assert sorted(placed) == sorted(graph.node_ids())
        assert len(placed) == len(set(placed))


class TestPositioning:
    """Tests for node rectangles and link geometry."""

    def test_energy_node_positions(self, layout_engine, config, energy_graph):
        """Test column spacing and per-column stacking."""
        result = layout_engine.compute(energy_graph, config)
        coal = result.get_node("Coal")
        power = result.get_node("Power")
        homes = result.get_node("Homes")
        loss = result.get_node("Loss")

        assert (coal.x0, coal.x1) == (0, 20)
        assert (power.x0, power.x1) == (290, 310)
        assert (homes.x0, loss.x0) == (580, 580)
        assert (coal.y0, coal.y1) == (0, 400)
        assert homes.y0 == 0
        assert homes.y1 == pytest.approx(312)
        assert loss.y0 == pytest.approx(322)
        assert loss.y1 == pytest.approx(400)

    def test_energy_link_widths(self, layout_engine, config, energy_graph):
        """Test that widths scale against the largest node value."""
        result = layout_engine.compute(energy_graph, config)
        widths = [link.width for link in result.links]
        assert widths == pytest.approx([400, 320, 80])

    def test_link_anchors_at_node_tops(self, layout_engine, config, energy_graph):
        """Test that every link is anchored at the tops of its nodes."""
        result = layout_engine.compute(energy_graph, config)
        nodes = result.node_map()
        for link in result.links:
            assert link.y0 == nodes[link.source].y0
            assert link.y1 == nodes[link.target].y0

    def test_chain_fills_height(self, layout_engine, config, chain_input):
        """Test that single-node columns span the whole height."""
        result = layout_engine.compute(parse_sankey(chain_input), config)
        assert [n.height for n in result.nodes] == [400, 400, 400]
        assert [link.width for link in result.links] == [400, 400]
        assert result.links[1].label == "final"

    def test_small_values_are_not_scaled_up(self, layout_engine, config):
        """Test that totals below 1 are divided by 1, not by the total."""
        result = layout_engine.compute(parse_sankey("A --> B: 0.5"), config)
        assert result.get_node("A").height == pytest.approx(200)
        assert result.links[0].width == pytest.approx(200)

    def test_cycle_column_stacking(self, layout_engine, config, cyclic_input):
        """Test stacking of two nodes in one column with a gap."""
        result = layout_engine.compute(parse_sankey(cyclic_input), config)
        a = result.get_node("A")
        b = result.get_node("B")
        assert (a.y0, a.y1) == pytest.approx((0, 195))
        assert (b.y0, b.y1) == pytest.approx((205, 400))

    def test_single_column_starts_at_left_bound(self, layout_engine):
        """Test that a lone column is placed at bounds.x0."""
        config = LayoutConfig(20, 10, Bounds(50, 10, 250, 110))
        graph = Graph(nodes=[Node("Only")])
        result = layout_engine.compute(graph, config)
        only = result.get_node("Only")
        assert (only.x0, only.x1) == (50, 70)
        assert only.y0 == 10
        assert only.value == 0

    def test_offset_bounds(self, layout_engine):
        """Test that positions are relative to the bounds origin."""
        config = LayoutConfig(10, 0, Bounds(100, 50, 310, 150))
        result = layout_engine.compute(parse_sankey("A --> B: 1"), config)
        a = result.get_node("A")
        b = result.get_node("B")
        assert (a.x0, a.y0, a.y1) == (100, 50, 150)
        assert (b.x0, b.x1) == (300, 310)

    def test_zero_value_links(self, layout_engine, config):
        """Test that zero flows produce zero-height nodes without errors."""
        result = layout_engine.compute(parse_sankey("A --> B: 0"), config)
        assert result.get_node("A").height == 0
        assert result.links[0].width == 0


class TestLayoutContract:
    """Tests for input handling and output shape."""

    def test_empty_graph(self, layout_engine, config):
        """Test that an empty graph lays out to an empty result."""
        result = layout_engine.compute(Graph(), config)
        assert result.nodes == []
        assert result.links == []
        assert result.columns == []

    def test_input_graph_not_mutated(self, layout_engine, config, energy_graph):
        """Test that compute() works on copies."""
        before = copy.deepcopy(energy_graph)
        layout_engine.compute(energy_graph, config)
        assert energy_graph == before

    def test_output_carries_options_and_styles(self, layout_engine, config):
        """Test that options, styles, colours and bounds are passed through."""
        graph = parse_sankey("title: T\nclass A color:#abc\nA --> B: 1")
        result = layout_engine.compute(graph, config)
        assert result.options == {"title": "T"}
        assert result.styles == {"A": {"color": "#abc"}}
        assert result.get_node("A").color == "#abc"
        assert result.bounds == config.bounds

    def test_engine_is_reusable(self, layout_engine, config):
        """Test that independent graphs do not leak into each other."""
        layout_engine.compute(parse_sankey("A --> B: 1"), config)
        result = layout_engine.compute(parse_sankey("X --> Y: 1"), config)
        assert [n.id for n in result.nodes] == ["X", "Y"]

    def test_unknown_node_rejected(self, layout_engine, config):
        """Test that a link to an unknown node is a LayoutError."""
        graph = Graph(nodes=[Node("A")], links=[Link("A", "Ghost", 1)])
        with pytest.raises(LayoutError, match="Ghost"):
            layout_engine.compute(graph, config)

    def test_duplicate_node_rejected(self, layout_engine, config):
        """Test that duplicate node ids are rejected."""
        graph = Graph(nodes=[Node("A"), Node("A")])
        with pytest.raises(LayoutError):
            layout_engine.compute(graph, config)

    @pytest.mark.parametrize("value", [-1.0, float("inf"), float("nan")])
    def test_invalid_link_value_rejected(self, layout_engine, config, value):
        """Test that hand-built graphs with bad values are rejected."""
        graph = Graph(nodes=[Node("A"), Node("B")], links=[Link("A", "B", value)])
        with pytest.raises(LayoutError):
            layout_engine.compute(graph, config)

    @pytest.mark.parametrize(
        "bad_config",
        [
            LayoutConfig(0, 10, Bounds(0, 0, 100, 100)),
            LayoutConfig(20, -1, Bounds(0, 0, 100, 100)),
            LayoutConfig(20, 10, Bounds(100, 0, 0, 100)),
            LayoutConfig(20, 10, Bounds(0, 100, 100, 0)),
        ],
    )
    def test_invalid_config_rejected(self, layout_engine, bad_config):
        """Test that unusable configs are rejected."""
        with pytest.raises(LayoutError):
            layout_engine.compute(parse_sankey("A --> B: 1"), bad_config)

    def test_layout_error_kind(self):
        """Test that LayoutError is a ValueError with the layout error kind."""
        assert issubclass(LayoutError, ValueError)
        assert LayoutError.kind is ErrorKind.LAYOUT_ERROR


class TestLayoutTraceStages:
    """Tests for trace recording during layout."""

    def test_stages_recorded(self, layout_engine, config, energy_graph):
        """Test that compute() records each step when given a trace."""
        trace = LayoutTrace()
        layout_engine.compute(energy_graph, config, trace)
        assert [s.name for s in trace.stages] == [
            "values",
            "columns",
            "positions",
            "links",
        ]
        assert trace.get_stage("values").data["Power"] == 100
        assert trace.get_stage("columns").data["has_cycles"] is False


class TestComputeLayoutFunction:
    """Tests for compute_layout convenience function."""

    def test_compute_layout_with_config(self, config, energy_graph):
        """Test the convenience function."""
        result = compute_layout(energy_graph, config)
        assert result.columns == [["Coal"], ["Power"], ["Homes", "Loss"]]

    def test_compute_layout_default_config(self):
        """Test that the default config lays out into the unit square."""
        result = compute_layout(parse_sankey("A --> B: 1"))
        assert result.bounds == Bounds(0, 0, 1, 1)
