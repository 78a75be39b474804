from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def random(self) -> float:
        return self._rng.random()

    def weighted_choice(self, pairs: Sequence[tuple[T, float]]) -> T:
        """Roulette pick over ``(value, weight)`` pairs, in table order."""

        if not pairs:
            raise ValueError("weighted_choice needs at least one entry")
        total = sum(float(w) for _, w in pairs)
        if total <= 0.0:
            raise ValueError("weights must sum to > 0")

        r = self._rng.random() * total
        for value, weight in pairs:
            r -= float(weight)
            if r <= 0.0:
                return value
        # Float rounding can leave a sliver of r behind.
        return pairs[0][0]


def clamp(x: float, lo: float, hi: float) -> float:
    if x != x:  # NaN
        return float(lo)
    return lo if x <= lo else hi if x >= hi else float(x)


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)


def wrap_angle(a: float) -> float:
    """Wrap radians into (-pi, pi]."""

    a = math.fmod(a + math.pi, 2.0 * math.pi)
    if a <= 0.0:
        a += 2.0 * math.pi
    return a - math.pi


@dataclass(frozen=True, slots=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, k: float) -> Vec3:
        return self.scaled(k)

    def scaled(self, k: float) -> Vec3:
        return Vec3(self.x * k, self.y * k, self.z * k)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Vec3:
        n = self.length()
        if n == 0.0:
            return self
        return Vec3(self.x / n, self.y / n, self.z / n)

    def with_length(self, n: float) -> Vec3:
        return self.normalized().scaled(n)

    def rotated_y(self, angle: float) -> Vec3:
        """Rotate about the vertical axis (right-handed, Y up)."""

        c = math.cos(angle)
        s = math.sin(angle)
        return Vec3(self.x * c + self.z * s, self.y, -self.x * s + self.z * c)

    def with_y(self, y: float) -> Vec3:
        return Vec3(self.x, float(y), self.z)
