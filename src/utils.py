"""Shared geometry utilities for the predator/prey engine.

Everything spatial goes through here: the Vector2 value type, the
minimum-image displacement used for perception and capture, and the
boundary policies for the two topologies.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class BoundaryMode(Enum):
    """World boundary behavior."""
    TOROIDAL = "toroidal"  # Wrap-around (default)
    BOUNDED = "bounded"    # Walls at edges


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D vector for positions and velocities."""
    x: float
    y: float

    @staticmethod
    def zero() -> 'Vector2':
        return Vector2(0.0, 0.0)

    @staticmethod
    def from_angle(angle: float, magnitude: float = 1.0) -> 'Vector2':
        """Create a vector from an angle (radians) and a length."""
        return Vector2(math.cos(angle) * magnitude, math.sin(angle) * magnitude)

    def __add__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Vector2':
        return Vector2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> 'Vector2':
        return Vector2(-self.x, -self.y)

    def magnitude_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def magnitude(self) -> float:
        return math.sqrt(self.magnitude_squared())

    def normalize(self) -> 'Vector2':
        """Unit vector in the same direction (zero stays zero)."""
        mag = self.magnitude()
        if mag > 0.0:
            return Vector2(self.x / mag, self.y / mag)
        return Vector2.zero()

    def limit(self, max_length: float) -> 'Vector2':
        """Clamp the magnitude to max_length."""
        if self.magnitude_squared() > max_length * max_length:
            return self.normalize() * max_length
        return self

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


def _minimum_image(offset: float, extent: float) -> float:
    # Shift by one extent toward zero when the wrapped path is shorter.
    if abs(offset) > extent / 2:
        return offset - math.copysign(extent, offset)
    return offset


def displacement(
    a: Vector2,
    b: Vector2,
    width: float,
    height: float,
    mode: BoundaryMode = BoundaryMode.TOROIDAL
) -> Vector2:
    """Shortest vector pointing from a to b.

    Under TOROIDAL mode each axis independently picks the direct or
    wrapped offset, whichever is shorter (minimum-image convention).
    Under BOUNDED mode this is the plain offset.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    if mode is BoundaryMode.TOROIDAL:
        dx = _minimum_image(dx, width)
        dy = _minimum_image(dy, height)
    return Vector2(dx, dy)


def distance(
    a: Vector2,
    b: Vector2,
    width: float,
    height: float,
    mode: BoundaryMode = BoundaryMode.TOROIDAL
) -> float:
    """Magnitude of displacement(a, b)."""
    return displacement(a, b, width, height, mode).magnitude()


def _wrap_axis(value: float, extent: float) -> float:
    wrapped = value % extent
    # -1e-17 % 100.0 == 100.0 in floating point
    if wrapped >= extent:
        return 0.0
    return wrapped


def wrap_position(
    position: Vector2,
    width: float,
    height: float,
    mode: BoundaryMode = BoundaryMode.TOROIDAL
) -> Vector2:
    """Normalize a position to the configured topology.

    TOROIDAL reduces each coordinate into [0, extent); BOUNDED clamps
    into [0, extent].
    """
    if mode is BoundaryMode.TOROIDAL:
        return Vector2(_wrap_axis(position.x, width), _wrap_axis(position.y, height))
    return Vector2(
        min(max(position.x, 0.0), width),
        min(max(position.y, 0.0), height)
    )


def apply_boundary(
    position: Vector2,
    velocity: Vector2,
    width: float,
    height: float,
    mode: BoundaryMode = BoundaryMode.TOROIDAL
) -> Tuple[Vector2, Vector2]:
    """Normalize position and adjust velocity for the topology.

    Walls stop agents: the velocity component along any axis where the
    position had to be clamped is zeroed.
    """
    if mode is BoundaryMode.TOROIDAL:
        return wrap_position(position, width, height, mode), velocity

    vx, vy = velocity.x, velocity.y
    if position.x < 0.0 or position.x > width:
        vx = 0.0
    if position.y < 0.0 or position.y > height:
        vy = 0.0
    return wrap_position(position, width, height, mode), Vector2(vx, vy)


def toroidal_distance_numpy(
    pos1: np.ndarray,
    pos2: np.ndarray,
    world_width: float,
    world_height: float
) -> Tuple[np.ndarray, np.ndarray]:
    """Compute toroidal (wrap-around) distances using NumPy.

    Args:
        pos1: Reference position (2,) or batch (N, 2)
        pos2: Target positions (M, 2)
        world_width: World width for wrapping
        world_height: World height for wrapping

    Returns:
        distances: (M,) or (N, M) array of distances
        vectors: Displacement vectors from pos1 to pos2
    """
    if pos1.ndim == 1:
        pos1 = pos1.reshape(1, 2)
        squeeze = True
    else:
        squeeze = False

    # Compute raw differences
    dx = pos2[:, 0] - pos1[:, 0:1]  # (N, M) or (1, M)
    dy = pos2[:, 1] - pos1[:, 1:2]

    # Apply toroidal wrapping
    dx = np.where(np.abs(dx) > world_width / 2,
                  dx - np.sign(dx) * world_width, dx)
    dy = np.where(np.abs(dy) > world_height / 2,
                  dy - np.sign(dy) * world_height, dy)

    distances = np.sqrt(dx**2 + dy**2)
    vectors = np.stack([dx, dy], axis=-1)

    if squeeze:
        distances = distances.squeeze(0)
        vectors = vectors.squeeze(0)

    return distances, vectors


def bounded_distance_numpy(
    pos1: np.ndarray,
    pos2: np.ndarray,
    world_width: float,
    world_height: float
) -> Tuple[np.ndarray, np.ndarray]:
    """Compute distances in bounded (walled) world using NumPy.

    Same interface as toroidal_distance_numpy but without wrapping.
    """
    if pos1.ndim == 1:
        pos1 = pos1.reshape(1, 2)
        squeeze = True
    else:
        squeeze = False

    dx = pos2[:, 0] - pos1[:, 0:1]
    dy = pos2[:, 1] - pos1[:, 1:2]

    distances = np.sqrt(dx**2 + dy**2)
    vectors = np.stack([dx, dy], axis=-1)

    if squeeze:
        distances = distances.squeeze(0)
        vectors = vectors.squeeze(0)

    return distances, vectors


def distance_numpy(
    pos1: np.ndarray,
    pos2: np.ndarray,
    world_width: float,
    world_height: float,
    mode: BoundaryMode = BoundaryMode.TOROIDAL
) -> Tuple[np.ndarray, np.ndarray]:
    """Dispatch to the toroidal or bounded batch distance."""
    if mode is BoundaryMode.TOROIDAL:
        return toroidal_distance_numpy(pos1, pos2, world_width, world_height)
    return bounded_distance_numpy(pos1, pos2, world_width, world_height)


def spawn_offset(rng: np.random.Generator, max_distance: float = 20.0) -> Vector2:
    """Random offset of length in [0, max_distance) for placing offspring."""
    angle = rng.uniform(0.0, 2 * np.pi)
    length = rng.uniform(0.0, max_distance)
    return Vector2.from_angle(float(angle), float(length))


def random_unit(rng: np.random.Generator) -> Vector2:
    """Random unit-length direction."""
    return Vector2.from_angle(float(rng.uniform(0.0, 2 * np.pi)))
