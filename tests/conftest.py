"""Pytest configuration and shared fixtures for sankeyflow tests."""

import pytest

from sankeyflow import (
    Bounds,
    LayoutConfig,
    Parser,
    SankeyGenerator,
    SankeyLayout,
    parse_sankey,
)


@pytest.fixture
def energy_input():
    """Small energy flow: one source, one hub, two sinks."""
    return "Coal --> Power: 100\nPower --> Homes: 80\nPower --> Loss: 20\n"


@pytest.fixture
def chain_input():
    """Linear three-node chain with a label on the last hop."""
    return 'A --> B --> C: 10 "final"'


@pytest.fixture
def diamond_input():
    """Diamond: A splits into B and C, which merge into D."""
    return """
    A --> B: 5
    A --> C: 5
    B --> D: 5
    C --> D: 5
    """


@pytest.fixture
def cyclic_input():
    """Two nodes feeding each other."""
    return """
    A --> B: 1
    B --> A: 1
    """


@pytest.fixture
def parser():
    """Default Parser instance."""
    return Parser()


@pytest.fixture
def layout_engine():
    """Default SankeyLayout instance."""
    return SankeyLayout()


@pytest.fixture
def config():
    """Layout config with a 600x400 drawing area."""
    return LayoutConfig(node_thickness=20, node_gap=10, bounds=Bounds(0, 0, 600, 400))


@pytest.fixture
def energy_graph(energy_input):
    """Pre-parsed energy graph."""
    return parse_sankey(energy_input)


@pytest.fixture
def generator():
    """Default SankeyGenerator instance."""
    return SankeyGenerator()
