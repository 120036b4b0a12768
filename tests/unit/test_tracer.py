"""Unit tests for the layout trace."""

from sankeyflow.tracer import LayoutTrace, PipelineStage


class TestPipelineStage:
    """Tests for PipelineStage."""

    def test_str_lists_entries(self):
        """Test the stage rendering."""
        stage = PipelineStage("values", {"A": 10, "B": 5})
        text = str(stage)
        assert text.splitlines()[0] == "=== Stage: values ==="
        assert "  A: 10" in text
        assert "  B: 5" in text

    def test_str_truncates_long_values(self):
        """Test that long values are cut at 100 characters."""
        stage = PipelineStage("columns", {"columns": "x" * 150})
        line = str(stage).splitlines()[1]
        assert line == "  columns: " + "x" * 100 + "..."


class TestLayoutTrace:
    """Tests for LayoutTrace."""

    def test_add_and_get_stage(self):
        """Test stage lookup by name."""
        trace = LayoutTrace()
        trace.add_stage("values", {"A": 1})
        trace.add_stage("columns", {"columns": [["A"]]})
        assert trace.get_stage("columns").data == {"columns": [["A"]]}
        assert trace.get_stage("missing") is None

    def test_add_stage_copies_data(self):
        """Test that later changes to the dict do not leak into the trace."""
        trace = LayoutTrace()
        data = {"A": 1}
        trace.add_stage("values", data)
        data["B"] = 2
        assert trace.get_stage("values").data == {"A": 1}

    def test_summary(self):
        """Test the summary header and stage list."""
        trace = LayoutTrace(input_text="A --> B: 1")
        trace.add_stage("values", {"A": 1, "B": 1})
        summary = trace.summary()
        assert "LAYOUT TRACE SUMMARY" in summary
        assert "Input: 'A --> B: 1'" in summary
        assert "Pipeline stages: 1" in summary
        assert "values (2 entries)" in summary

    def test_summary_truncates_input(self):
        """Test that long input is abbreviated."""
        trace = LayoutTrace(input_text="A --> B: 1\n" * 20)
        assert "'..." in trace.summary()

    def test_dump_contains_stage_details(self):
        """Test that the dump includes each stage's data."""
        trace = LayoutTrace()
        trace.add_stage("links", {"A->B": (0, 0, 400)})
        dump = trace.dump()
        assert "DETAILED TRACE" in dump
        assert "=== Stage: links ===" in dump
        assert "A->B: (0, 0, 400)" in dump

    def test_dump_to_file(self, tmp_path):
        """Test writing the dump to disk."""
        trace = LayoutTrace(input_text="A --> B: 1")
        trace.add_stage("values", {"A": 1})
        output = tmp_path / "trace.txt"
        trace.dump_to_file(str(output))
        assert output.read_text(encoding="utf-8") == trace.dump()
