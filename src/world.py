"""
The ecosystem world: owns the agent population and advances it tick by tick.

A tick runs in two phases. Every live agent first decides what to do
against the frozen pre-tick state (rules.decide); the resulting intents
are then committed together, with captures, births and deaths applied
in one pass at the end.
"""

import logging
import math
from typing import Dict, List, Optional

import numpy as np

import rules
from agent import Agent, AgentKind, AgentView
from config import WorldParameters
from exceptions import ConfigurationError
from spatial_grid import SpatialGrid
from stats_collector import StatisticsCollector, StatisticsSample
from utils import BoundaryMode, Vector2, distance_numpy, wrap_position

logger = logging.getLogger(__name__)


class World:
    """The ecosystem where predators hunt and prey flee."""

    def __init__(
        self,
        parameters: Optional[WorldParameters] = None,
        collector: Optional[StatisticsCollector] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the world and spawn the initial population.

        Args:
            parameters: World configuration (defaults if omitted)
            collector: Statistics sink; one of statistics_capacity is created if omitted
            seed: Seed for the random source (None = unseeded)

        Raises:
            ConfigurationError: if the parameters are invalid
        """
        parameters = parameters if parameters is not None else WorldParameters()
        parameters.validate()

        self._rng = np.random.default_rng(seed)
        self.collector = collector if collector is not None else StatisticsCollector(parameters.statistics_capacity)
        self._initialize(parameters)

    def _initialize(self, parameters: WorldParameters):
        self._params = parameters
        self._agents: Dict[int, Agent] = {}
        self._next_id = 1
        self._tick = 0
        self._invalidate_index()

        for _ in range(parameters.predator.initial_count):
            self._add_agent(AgentKind.PREDATOR, self._random_position(), parameters.predator.initial_energy)
        for _ in range(parameters.prey.initial_count):
            self._add_agent(AgentKind.PREY, self._random_position(), parameters.prey.initial_energy)

        logger.info("World %gx%g (%s): %d predators, %d prey",
                    parameters.width, parameters.height, parameters.boundary_mode.value,
                    self.predator_count(), self.prey_count())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> WorldParameters:
        return self._params

    def reset(self, parameters: Optional[WorldParameters] = None):
        """Clear everything and reinitialize as a fresh world.

        The new parameters are validated first; on ConfigurationError the
        current world is left untouched.
        """
        parameters = parameters if parameters is not None else self._params
        parameters.validate()

        self.collector.clear()
        if parameters.statistics_capacity != self.collector.capacity:
            self.collector.resize(parameters.statistics_capacity)
        self._initialize(parameters)

    def update_parameters(self, parameters: WorldParameters):
        """Apply new behavior parameters to the running world.

        Existing agents pick up the new per-kind parameters on the next
        tick. Changing the world's dimensions or topology requires reset().
        """
        parameters.validate()
        if not parameters.same_topology(self._params):
            raise ConfigurationError("world dimensions and boundary mode can only change on reset")
        if self.total_agents() > parameters.max_agents:
            raise ConfigurationError(
                f"current population {self.total_agents()} exceeds new max_agents {parameters.max_agents}"
            )
        self._params = parameters
        self._invalidate_index()

    def clear_all(self):
        """Remove every agent (tick counter and statistics are kept)."""
        self._agents.clear()
        self._invalidate_index()

    def spawn(self, kind: AgentKind, count: int) -> int:
        """Add up to count agents of kind at random positions.

        Spawning stops silently at max_agents.

        Returns:
            Number of agents actually added
        """
        initial_energy = self._params.params_for(kind).initial_energy
        room = max(0, self._params.max_agents - self.total_agents())
        spawned = min(max(0, count), room)

        for _ in range(spawned):
            self._add_agent(kind, self._random_position(), initial_energy)
        if spawned < count:
            logger.debug("Spawn of %d %s capped at %d (max_agents=%d)",
                         count, kind.value, spawned, self._params.max_agents)
        return spawned

    def spawn_at(self, kind: AgentKind, position: Vector2, energy: Optional[float] = None) -> Optional[int]:
        """Add one agent of kind at a given position (e.g. a click in the viewer).

        Returns:
            The new agent's id, or None if the world is at max_agents
        """
        if self.total_agents() >= self._params.max_agents:
            return None
        if energy is None:
            energy = self._params.params_for(kind).initial_energy
        if energy <= 0:
            raise ValueError(f"energy must be positive, got {energy}")
        params = self._params
        position = wrap_position(position, params.width, params.height, params.boundary_mode)
        return self._add_agent(kind, position, energy).id

    def _add_agent(self, kind: AgentKind, position: Vector2, energy: float) -> Agent:
        agent = Agent(id=self._next_id, kind=kind, position=position, energy=energy)
        self._agents[agent.id] = agent
        self._next_id += 1
        self._invalidate_index()
        return agent

    def _random_position(self) -> Vector2:
        x = self._rng.uniform(0.0, self._params.width)
        y = self._rng.uniform(0.0, self._params.height)
        return wrap_position(Vector2(float(x), float(y)), self._params.width, self._params.height,
                             self._params.boundary_mode)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def advance_tick(self, dt: Optional[float] = None):
        """
        Simulate one tick of the ecosystem.

        Args:
            dt: Tick duration (defaults to parameters.dt)
        """
        dt = self._params.dt if dt is None else dt
        if not (math.isfinite(dt) and dt > 0):
            raise ValueError(f"dt must be positive and finite, got {dt}")

        # 1. Every agent decides against the pre-tick state
        self._ensure_index()
        agent_ids = sorted(self._agents)
        intents = [rules.decide(self._agents[agent_id], self, dt, self._rng) for agent_id in agent_ids]

        # 2. Commit all intents at once
        self._commit(intents)
        self._tick += 1
        self._invalidate_index()

        # 3. Record statistics
        self.collector.record(self.sample())

    def _commit(self, intents: List[rules.Intent]):
        params = self._params

        # Captures, lowest predator id first; a prey can only be eaten once
        consumed = set()
        gains: Dict[int, float] = {}
        for intent in intents:
            target_id = intent.target_id
            if target_id is None or target_id in consumed or target_id not in self._agents:
                continue
            consumed.add(target_id)
            gains[intent.agent_id] = params.predator.energy_gain_from_prey

        # Movement, energy, aging
        for intent in intents:
            if intent.agent_id in consumed:
                continue
            agent = self._agents[intent.agent_id]
            agent.position = intent.position
            agent.velocity = intent.velocity
            agent.energy = intent.energy + gains.get(intent.agent_id, 0.0)
            agent.age += 1

        for agent_id in consumed:
            del self._agents[agent_id]

        # Starvation frees its slots before births are counted
        dead = [agent_id for agent_id, agent in self._agents.items() if not agent.is_alive]
        for agent_id in dead:
            del self._agents[agent_id]

        # Reproduction, lowest parent id first, while there is room
        births = []
        dropped = 0
        for intent in intents:
            agent = self._agents.get(intent.agent_id)
            if agent is None or not agent.is_alive:
                continue
            spot = rules.offspring_position(agent, params, self._rng)
            if spot is None:
                continue
            if len(self._agents) + len(births) >= params.max_agents:
                dropped += 1
                continue
            agent.energy -= params.params_for(agent.kind).reproduction_cost
            births.append((agent.kind, spot))

        # Parents that spent their last energy on offspring
        spent = [agent_id for agent_id, agent in self._agents.items() if not agent.is_alive]
        for agent_id in spent:
            del self._agents[agent_id]
        dead.extend(spent)

        for kind, spot in births:
            self._add_agent(kind, spot, params.params_for(kind).initial_energy)

        if consumed or births or dead:
            logger.debug("Tick %d: %d captured, %d starved, %d born",
                         self._tick + 1, len(consumed), len(dead), len(births))
        if dropped:
            logger.debug("Tick %d: %d births dropped at max_agents=%d", self._tick + 1, dropped, params.max_agents)

        assert len(self._agents) <= params.max_agents, "population exceeds max_agents"
        assert all(agent.is_alive and agent.is_finite() for agent in self._agents.values()), \
            "dead or non-finite agent left in the world"

    # ------------------------------------------------------------------
    # Spatial queries
    # ------------------------------------------------------------------

    def _invalidate_index(self):
        self._index_dirty = True

    def _ensure_index(self):
        """Rebuild the position arrays (and grid) if the population changed."""
        if not self._index_dirty:
            return

        agents = [self._agents[agent_id] for agent_id in sorted(self._agents)]
        self._index_ids = np.array([a.id for a in agents], dtype=np.int64)
        self._index_predator = np.array([a.is_predator for a in agents], dtype=bool)
        self._index_positions = (np.array([[a.position.x, a.position.y] for a in agents], dtype=np.float64)
                                 if agents else np.empty((0, 2)))

        self._grid = None
        if self._params.use_spatial_index:
            cell_size = self._params.max_sense_radius
            if cell_size <= 0:
                cell_size = max(self._params.width, self._params.height)
            self._grid = SpatialGrid(cell_size, self._params.width, self._params.height,
                                     self._params.boundary_mode)
            self._grid.build(self._index_positions)

        self._index_dirty = False

    def nearby(
        self,
        position: Vector2,
        radius: float,
        kind_filter: Optional[AgentKind] = None,
        exclude_id: Optional[int] = None
    ) -> List[int]:
        """
        Ids of agents within radius of position (torus-aware), ascending.

        Args:
            position: Query point
            radius: Inclusive search radius
            kind_filter: Only return agents of this kind
            exclude_id: Leave this id out (typically the asking agent)
        """
        self._ensure_index()
        if radius < 0 or len(self._index_ids) == 0:
            return []

        params = self._params
        if params.boundary_mode is BoundaryMode.TOROIDAL:
            position = wrap_position(position, params.width, params.height, params.boundary_mode)

        if self._grid is not None:
            rows = np.array(sorted(self._grid.candidates(position, radius)), dtype=np.int64)
        else:
            rows = np.arange(len(self._index_ids))
        if kind_filter is not None and len(rows) > 0:
            rows = rows[self._index_predator[rows] == (kind_filter is AgentKind.PREDATOR)]
        if len(rows) == 0:
            return []

        # Vectorized distance from the query point to every candidate
        distances, _ = distance_numpy(np.array([position.x, position.y]), self._index_positions[rows],
                                      params.width, params.height, params.boundary_mode)
        ids = self._index_ids[rows[distances <= radius]]
        return [int(agent_id) for agent_id in ids if int(agent_id) != exclude_id]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def agents(self) -> List[AgentView]:
        """All live agents ordered by id."""
        return [self._agents[agent_id].view() for agent_id in sorted(self._agents)]

    def get_agent(self, agent_id: int) -> Optional[AgentView]:
        agent = self._agents.get(agent_id)
        return agent.view() if agent is not None else None

    def tick_count(self) -> int:
        return self._tick

    def total_agents(self) -> int:
        return len(self._agents)

    def predator_count(self) -> int:
        return sum(1 for a in self._agents.values() if a.kind is AgentKind.PREDATOR)

    def prey_count(self) -> int:
        return sum(1 for a in self._agents.values() if a.kind is AgentKind.PREY)

    def average_energy(self, kind: AgentKind) -> float:
        energies = [a.energy for a in self._agents.values() if a.kind is kind]
        return float(np.mean(energies)) if energies else 0.0

    def sample(self) -> StatisticsSample:
        """Aggregate the current population into one statistics sample."""
        return StatisticsSample(
            tick=self._tick,
            predator_count=self.predator_count(),
            prey_count=self.prey_count(),
            average_predator_energy=self.average_energy(AgentKind.PREDATOR),
            average_prey_energy=self.average_energy(AgentKind.PREY),
        )

    def get_state(self) -> dict:
        """Get current state for visualization."""
        views = self.agents()
        predators = [a for a in views if a.kind is AgentKind.PREDATOR]
        prey = [a for a in views if a.kind is AgentKind.PREY]
        return {
            'timestep': self._tick,
            'predator_positions': np.array([[a.position.x, a.position.y] for a in predators]).reshape(-1, 2),
            'prey_positions': np.array([[a.position.x, a.position.y] for a in prey]).reshape(-1, 2),
            'predator_energy': np.array([a.energy for a in predators], dtype=np.float64),
            'prey_energy': np.array([a.energy for a in prey], dtype=np.float64),
            'predator_count': len(predators),
            'prey_count': len(prey),
        }

    def print_stats(self):
        """Print current statistics."""
        print(f"\n=== Timestep {self._tick} ===")
        print(f"Prey: {self.prey_count()} | Predators: {self.predator_count()}")
        if self.prey_count() > 0:
            print(f"Prey avg energy: {self.average_energy(AgentKind.PREY):.1f}")
        if self.predator_count() > 0:
            print(f"Predator avg energy: {self.average_energy(AgentKind.PREDATOR):.1f}")
