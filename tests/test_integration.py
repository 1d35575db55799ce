"""
Integration tests for the full simulation system.
Tests that the engine, host loop and analysis tools work together.
"""

import sys
import os

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import analyze_stats
import main as host
from agent import AgentKind
from config import WorldParameters
from world import World


def test_simulation_basic():
    """Test that a simulation runs without errors."""
    print("Testing basic simulation...")

    world = World(seed=42)
    for _ in range(100):
        world.advance_tick()

    assert world.tick_count() == 100
    assert world.total_agents() <= world.parameters.max_agents
    print(f"  After 100 steps: {world.prey_count()} prey, {world.predator_count()} predators")
    print("✓ test_simulation_basic passed\n")


def test_predation_occurs():
    """Test that predators catch prey in a crowded world."""
    print("Testing predation...")

    params = WorldParameters(width=150, height=150, enable_reproduction=False)
    params.predator.initial_count = 10
    params.prey.initial_count = 60
    params.predator.max_speed = 4.0  # Faster than fleeing prey
    world = World(params, seed=7)

    for _ in range(300):
        world.advance_tick()

    # Without reproduction, prey can only disappear by being eaten
    assert world.prey_count() < 60
    print(f"  Prey remaining: {world.prey_count()}/60")
    print("✓ test_predation_occurs passed\n")


def test_reproduction_occurs():
    """Test that well-fed prey reproduce."""
    params = WorldParameters(width=400, height=400)
    params.predator.initial_count = 0
    params.prey.initial_count = 20
    world = World(params, seed=3)

    for _ in range(200):
        world.advance_tick()

    # 80 energy + 0.3/tick crosses the 120 threshold after ~134 ticks
    assert world.prey_count() > 20
    assert max(a.id for a in world.agents()) > 20


def test_statistics_collection(tmp_path):
    """Test that statistics are recorded and survive save/analyze."""
    world = World(seed=11)
    for _ in range(50):
        world.advance_tick()

    arrays = world.collector.to_arrays()
    assert arrays['tick'].tolist() == list(range(1, 51))
    assert arrays['prey_count'][-1] == world.prey_count()

    stats_file = tmp_path / "stats.npz"
    world.collector.save(str(stats_file))

    stats = analyze_stats.load_stats(str(stats_file))
    summary = analyze_stats.summarize(stats)
    assert summary['data_points'] == 50
    assert summary['first_tick'] == 1 and summary['last_tick'] == 50
    assert summary['final_prey'] == world.prey_count()

    fig = analyze_stats.plot_stats(stats)
    image = tmp_path / "stats.png"
    fig.savefig(str(image))
    assert image.exists()


def test_analyze_stats_main(tmp_path):
    world = World(seed=12)
    for _ in range(20):
        world.advance_tick()
    stats_file = tmp_path / "stats.npz"
    world.collector.save(str(stats_file))
    output = tmp_path / "plot.png"

    assert analyze_stats.main([str(stats_file), '--output', str(output)]) == 0
    assert output.exists()
    assert analyze_stats.load_stats(str(tmp_path / "missing.npz")) is None


def test_run_headless_stops_on_collapse():
    params = WorldParameters(width=200, height=200)
    params.predator.initial_count = 3
    params.prey.initial_count = 0
    world = World(params, seed=0)

    ticks = host.run_headless(world, max_timesteps=100, print_interval=0)
    assert ticks == 1
    assert world.tick_count() == 1


def test_headless_main(tmp_path):
    """Test the command line entry point end to end."""
    stats_file = tmp_path / "run.npz"
    code = host.main([
        '--headless', '--max-timesteps', '30', '--seed', '5',
        '--width', '300', '--height', '200', '--print-interval', '0',
        '--stats-file', str(stats_file),
    ])
    assert code == 0
    with np.load(stats_file) as data:
        assert 1 <= len(data['tick']) <= 30


def test_main_with_preset(tmp_path):
    preset = tmp_path / "preset.json"
    params = WorldParameters(width=250, height=250, max_agents=100)
    params.prey.initial_count = 30
    params.save(preset)

    args = host.build_parser().parse_args(['--config', str(preset), '--predators', '4', '--bounded'])
    params = host.build_parameters(args)
    assert params.width == 250
    assert params.prey.initial_count == 30
    assert params.predator.initial_count == 4
    assert params.boundary_mode.value == 'bounded'


def test_main_rejects_bad_configuration(tmp_path):
    code = host.main(['--headless', '--width', '-5', '--stats-file', str(tmp_path / "x.npz")])
    assert code == 2


def test_main_rejects_wrongly_typed_preset(tmp_path):
    preset = tmp_path / "preset.json"
    preset.write_text('{"max_agents": "1000"}')
    code = host.main([
        '--config', str(preset), '--headless', '--max-timesteps', '5',
        '--stats-file', str(tmp_path / "x.npz"),
    ])
    assert code == 2


def test_log_level_choices():
    parser = host.build_parser()
    assert parser.parse_args(['--log-level', 'debug']).log_level == 'DEBUG'
    with pytest.raises(SystemExit):
        parser.parse_args(['--log-level', 'bogus'])


def test_long_simulation_stability():
    """Test that long runs stay finite and within bounds."""
    params = WorldParameters(width=400, height=300, max_agents=300)
    params.predator.initial_count = 15
    params.prey.initial_count = 120
    world = World(params, seed=21)

    for _ in range(500):
        world.advance_tick()
        if world.total_agents() == 0:
            break

    for agent in world.agents():
        assert agent.energy > 0
        assert np.isfinite(agent.position.x) and np.isfinite(agent.position.y)
        if agent.kind is AgentKind.PREY:
            assert agent.energy <= params.prey.max_energy
    assert len(world.collector) == world.tick_count()


if __name__ == "__main__":
    print("Running integration tests...\n")
    test_simulation_basic()
    test_predation_occurs()
    test_reproduction_occurs()
    test_run_headless_stops_on_collapse()
    test_long_simulation_stability()
    print("✅ All integration tests passed!")
