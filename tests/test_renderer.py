"""Tests for the renderer's drawing helpers (no display needed)."""

import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from agent import AgentKind
from renderer import (
    PREDATOR_HIGH, PREDATOR_LOW, PREY_HIGH, PREY_LOW,
    energy_color, lerp_color, population_graph_points
)
from stats_collector import StatisticsSample


def test_lerp_color_endpoints_and_clamping():
    assert lerp_color((0, 0, 0), (200, 100, 50), 0.0) == (0, 0, 0)
    assert lerp_color((0, 0, 0), (200, 100, 50), 1.0) == (200, 100, 50)
    assert lerp_color((0, 0, 0), (200, 100, 50), 0.5) == (100, 50, 25)
    assert lerp_color((0, 0, 0), (200, 100, 50), 3.0) == (200, 100, 50)
    assert lerp_color((0, 0, 0), (200, 100, 50), -1.0) == (0, 0, 0)


def test_energy_color_by_kind():
    assert energy_color(0.0, AgentKind.PREDATOR) == PREDATOR_LOW
    assert energy_color(1.0, AgentKind.PREDATOR) == PREDATOR_HIGH
    assert energy_color(0.0, AgentKind.PREY) == PREY_LOW
    assert energy_color(2.0, AgentKind.PREY) == PREY_HIGH


def test_population_graph_points():
    samples = [
        StatisticsSample(1, 5, 20, 100.0, 80.0),
        StatisticsSample(2, 10, 40, 100.0, 80.0),
        StatisticsSample(3, 0, 10, 0.0, 80.0),
    ]
    predator_points, prey_points = population_graph_points(samples, (100, 50, 200, 80))

    assert len(predator_points) == 3 and len(prey_points) == 3
    assert [x for x, _ in prey_points] == [100.0, 200.0, 300.0]
    # Largest count touches the top, zero sits on the bottom
    assert prey_points[1] == (200.0, 50.0)
    assert predator_points[2] == (300.0, 130.0)


def test_population_graph_edge_cases():
    assert population_graph_points([], (0, 0, 100, 100)) == ([], [])

    predator_points, prey_points = population_graph_points(
        [StatisticsSample(1, 0, 0, 0.0, 0.0)], (10, 10, 100, 100)
    )
    assert predator_points == [(10.0, 110.0)]
    assert prey_points == [(10.0, 110.0)]
