"""Tests for the agent record."""

import sys
import os
import dataclasses

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from agent import Agent, AgentKind
from utils import Vector2


def test_new_agent_defaults():
    agent = Agent(id=1, kind=AgentKind.PREY, position=Vector2(10.0, 20.0), energy=80.0)
    assert agent.velocity == Vector2(0.0, 0.0)
    assert agent.age == 0
    assert agent.is_alive
    assert not agent.is_predator
    assert agent.is_finite()


def test_alive_means_positive_energy():
    agent = Agent(id=2, kind=AgentKind.PREDATOR, position=Vector2(0.0, 0.0), energy=0.0)
    assert agent.is_predator
    assert not agent.is_alive

    agent.energy = 1e-9
    assert agent.is_alive


def test_non_finite_state_detected():
    agent = Agent(id=3, kind=AgentKind.PREY, position=Vector2(float('nan'), 0.0), energy=10.0)
    assert not agent.is_finite()

    agent = Agent(id=4, kind=AgentKind.PREY, position=Vector2(0.0, 0.0), energy=float('inf'))
    assert not agent.is_finite()


def test_view_is_read_only_snapshot():
    """Views copy the agent state and cannot be mutated."""
    agent = Agent(id=5, kind=AgentKind.PREY, position=Vector2(1.0, 2.0), energy=50.0, age=7)
    view = agent.view()

    assert view.id == 5 and view.kind is AgentKind.PREY
    assert view.position == Vector2(1.0, 2.0)
    assert view.energy == 50.0 and view.age == 7

    with pytest.raises(dataclasses.FrozenInstanceError):
        view.energy = 0.0

    agent.energy = 10.0
    assert view.energy == 50.0
