"""
Agent model shared by predators and prey.

Agents are plain state records owned by the World. They never hold
references to other agents; anything involving another agent goes through
the World's query interface by id.
"""

import math
from dataclasses import dataclass
from enum import Enum

from utils import Vector2


class AgentKind(Enum):
    """The two agent variants."""
    PREDATOR = "predator"
    PREY = "prey"


@dataclass(frozen=True)
class AgentView:
    """Read-only snapshot of an agent handed out to rendering and tests."""
    id: int
    kind: AgentKind
    position: Vector2
    velocity: Vector2
    energy: float
    age: int


@dataclass
class Agent:
    """One living predator or prey."""
    id: int
    kind: AgentKind
    position: Vector2
    energy: float
    velocity: Vector2 = Vector2(0.0, 0.0)
    age: int = 0

    @property
    def is_alive(self) -> bool:
        return self.energy > 0.0

    @property
    def is_predator(self) -> bool:
        return self.kind is AgentKind.PREDATOR

    def is_finite(self) -> bool:
        return self.position.is_finite() and self.velocity.is_finite() and math.isfinite(self.energy)

    def view(self) -> AgentView:
        return AgentView(
            id=self.id,
            kind=self.kind,
            position=self.position,
            velocity=self.velocity,
            energy=self.energy,
            age=self.age
        )
