"""Per-agent, per-tick interaction rules.

Decisions are computed against the frozen pre-tick world and returned as
Intent records; nothing here mutates an agent. The World commits all
intents together once every agent has decided.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from agent import Agent, AgentKind
from utils import Vector2, apply_boundary, displacement, random_unit, spawn_offset, wrap_position

if TYPE_CHECKING:
    from config import PredatorParameters, PreyParameters, WorldParameters
    from world import World

OFFSPRING_SPAWN_RADIUS = 20.0  # Offspring land within this distance of the parent
WANDER_DAMPING = 0.95          # Velocity retained per tick while wandering
CAUTIOUS_DAMPING = 0.9         # Prey slowdown when a predator is detected but not close


@dataclass
class Intent:
    """What one agent wants to do this tick."""
    agent_id: int
    position: Vector2
    velocity: Vector2
    energy: float                     # After metabolism, before any capture gain
    target_id: Optional[int] = None   # Prey the predator is consuming


def nearest_agent(
    agent: Agent,
    candidate_ids: List[int],
    world: 'World'
) -> Optional[Tuple[int, Vector2, float]]:
    """Pick the nearest candidate by torus-aware distance.

    Ties break on the lowest id so runs are deterministic.

    Returns:
        (id, displacement from agent to candidate, distance) or None
    """
    params = world.parameters
    best = None
    for other_id in candidate_ids:
        if other_id == agent.id:
            continue
        other = world.get_agent(other_id)
        offset = displacement(agent.position, other.position, params.width, params.height, params.boundary_mode)
        dist = offset.magnitude()
        if best is None or (dist, other_id) < (best[2], best[0]):
            best = (other_id, offset, dist)
    return best


def wander(velocity: Vector2, max_speed: float, strength: float, rng: np.random.Generator) -> Vector2:
    """Damped random walk so agents keep moving with nothing in sight."""
    jitter = random_unit(rng) * (strength * max_speed)
    return (velocity * WANDER_DAMPING + jitter).limit(max_speed)


def decide_predator(
    agent: Agent,
    world: 'World',
    params: 'PredatorParameters',
    dt: float,
    rng: np.random.Generator
) -> Intent:
    """Hunt: chase the nearest prey in perception range, eat it when close."""
    energy = agent.energy - params.energy_per_tick * dt

    prey_ids = world.nearby(agent.position, params.perception_radius, AgentKind.PREY)
    target = nearest_agent(agent, prey_ids, world)

    if target is not None:
        target_id, offset, dist = target
        if dist <= params.capture_distance:
            # Eating: the predator holds still this tick.
            return Intent(agent.id, agent.position, Vector2.zero(), energy, target_id=target_id)
        velocity = offset.normalize() * params.max_speed
    else:
        velocity = wander(agent.velocity, params.max_speed, params.wander_strength, rng)

    position, velocity = _move(agent.position, velocity, dt, world.parameters)
    return Intent(agent.id, position, velocity, energy)


def decide_prey(
    agent: Agent,
    world: 'World',
    params: 'PreyParameters',
    dt: float,
    rng: np.random.Generator
) -> Intent:
    """Graze and regenerate energy; run from the nearest predator if it is close."""
    energy = agent.energy
    if energy < params.max_energy:
        energy = min(energy + params.energy_regeneration * dt, params.max_energy)

    predator_ids = world.nearby(agent.position, params.detection_radius, AgentKind.PREDATOR)
    threat = nearest_agent(agent, predator_ids, world)

    if threat is not None and threat[2] <= params.flee_distance:
        away = -threat[1]
        if away.magnitude_squared() > 0.0:
            velocity = away.normalize() * params.max_speed
        else:
            velocity = random_unit(rng) * params.max_speed
        energy -= params.energy_loss_fleeing * dt
    elif threat is not None:
        velocity = (agent.velocity * CAUTIOUS_DAMPING).limit(params.max_speed)
    else:
        velocity = wander(agent.velocity, params.max_speed, params.wander_strength, rng)

    position, velocity = _move(agent.position, velocity, dt, world.parameters)
    return Intent(agent.id, position, velocity, energy)


def decide(agent: Agent, world: 'World', dt: float, rng: np.random.Generator) -> Intent:
    """Compute one agent's intent for this tick."""
    params = world.parameters
    if agent.kind is AgentKind.PREDATOR:
        return decide_predator(agent, world, params.predator, dt, rng)
    return decide_prey(agent, world, params.prey, dt, rng)


def offspring_position(
    agent: Agent,
    params: 'WorldParameters',
    rng: np.random.Generator
) -> Optional[Vector2]:
    """Where this agent's offspring goes, or None if it cannot reproduce."""
    if not params.enable_reproduction:
        return None
    if agent.energy <= params.params_for(agent.kind).reproduction_threshold:
        return None
    spot = agent.position + spawn_offset(rng, OFFSPRING_SPAWN_RADIUS)
    return wrap_position(spot, params.width, params.height, params.boundary_mode)


def _move(position: Vector2, velocity: Vector2, dt: float, params: 'WorldParameters') -> Tuple[Vector2, Vector2]:
    return apply_boundary(position + velocity * dt, velocity, params.width, params.height, params.boundary_mode)
