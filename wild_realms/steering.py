from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from .core import SeededRng, Vec3, clamp, wrap_angle

logger = logging.getLogger(__name__)


class EntryDirection(StrEnum):
    DEEP_TO_SURFACE = "deep_to_surface"
    LEFT_TO_RIGHT = "left_to_right"
    RIGHT_TO_LEFT = "right_to_left"
    DIAGONAL_UP = "diagonal_up"
    DIAGONAL_DOWN = "diagonal_down"
    DIAGONAL = "diagonal"
    RANDOM_EDGE = "random_edge"


class MotionClass(StrEnum):
    SWIM = "swim"
    WALK = "walk"
    GLIDE = "glide"


class AgentPhase(StrEnum):
    PENDING_START = "pending_start"
    ACTIVE = "active"
    OFFSCREEN_WAITING = "offscreen_waiting"


class EdgeRule(StrEnum):
    FOUR_FACES = "four_faces"  # any side of the square, heading inward
    FAR_EDGE = "far_edge"  # the -z edge, heading +z


@dataclass(frozen=True, slots=True)
class WorldBounds:
    x: float
    z: float
    y_top: float
    y_bottom: float
    despawn_margin: float
    vertical_margin: float = 2.0
    entry_spread: float = 0.7  # fraction of the half extent used for in-world spawns
    vertical_entry: bool = True
    respawn_delay_s: tuple[float, float] = (1.0, 3.0)
    edge_rule: EdgeRule = EdgeRule.FOUR_FACES

    def __post_init__(self) -> None:
        if self.x <= 0.0 or self.z <= 0.0:
            raise ValueError("horizontal extents must be > 0")
        if self.y_bottom >= self.y_top:
            raise ValueError("y_bottom must be < y_top")
        if self.despawn_margin < 0.0 or self.vertical_margin < 0.0:
            raise ValueError("margins must be >= 0")
        if not (0.0 <= self.entry_spread <= 1.0):
            raise ValueError("entry_spread must be in [0.0, 1.0]")
        lo, hi = self.respawn_delay_s
        if lo < 0.0 or hi < lo:
            raise ValueError("respawn_delay_s must be a non-negative (lo, hi) range")

    @property
    def edge_radius(self) -> float:
        return self.x + self.despawn_margin

    def out_of_bounds(self, p: Vec3, *, vertical: bool = True) -> bool:
        """Horizontal despawn ring, plus the vertical band unless ``vertical`` is False."""
        if abs(p.x) > self.x + self.despawn_margin or abs(p.z) > self.z + self.despawn_margin:
            return True
        if not vertical:
            return False
        return p.y > self.y_top + self.vertical_margin or p.y < self.y_bottom - self.vertical_margin


@dataclass(frozen=True, slots=True)
class SpeciesMotion:
    """Per-species wander tuning. Validated once at construction."""

    species_id: str
    motion: MotionClass
    base_y: float
    min_speed: float
    max_speed: float
    entry_weights: tuple[tuple[EntryDirection, float], ...]
    turn_jitter: float = 0.2
    bob_amp: float = 0.1
    bob_freq: float = 1.0
    spawn_delay_s: float | None = None  # None: sampled in [0, 5)
    bank: float = 0.0
    scale: float = 1.0
    heading_freqs: tuple[float, float, float] = (0.8, 1.1, 1.7)
    respawn_delay_s: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        if not self.species_id:
            raise ValueError("species_id must be non-empty")
        if self.min_speed < 0.0:
            raise ValueError("min_speed must be >= 0")
        if self.min_speed > self.max_speed:
            raise ValueError("min_speed must be <= max_speed")
        if not self.entry_weights:
            raise ValueError("entry_weights must be non-empty")
        if any(w <= 0.0 for _, w in self.entry_weights):
            raise ValueError("entry weights must be > 0")
        if self.turn_jitter < 0.0 or self.bob_amp < 0.0 or self.bob_freq < 0.0:
            raise ValueError("turn_jitter, bob_amp and bob_freq must be >= 0")
        if self.spawn_delay_s is not None and self.spawn_delay_s < 0.0:
            raise ValueError("spawn_delay_s must be >= 0")
        if self.bank < 0.0:
            raise ValueError("bank must be >= 0")
        if self.scale <= 0.0:
            raise ValueError("scale must be > 0")
        if self.respawn_delay_s is not None:
            lo, hi = self.respawn_delay_s
            if lo < 0.0 or hi < lo:
                raise ValueError("respawn_delay_s must be a non-negative (lo, hi) range")


@dataclass(slots=True)
class Agent:
    config: SpeciesMotion
    activate_at_s: float
    position: Vec3 = Vec3()
    velocity: Vec3 = Vec3(1.0, 0.0, 0.0)
    phase: AgentPhase = AgentPhase.PENDING_START
    resume_at_s: float = 0.0
    visible: bool = False
    yaw: float = 0.0
    pitch: float = 0.0
    bank: float = 0.0

    @property
    def species_id(self) -> str:
        return self.config.species_id


@dataclass(frozen=True, slots=True)
class AgentSnapshot:
    species_id: str
    phase: AgentPhase
    visible: bool
    x: float
    y: float
    z: float
    yaw: float
    pitch: float
    bank: float
    speed: float
    scale: float


def choose_entry(
    weights: tuple[tuple[EntryDirection, float], ...], rng: SeededRng
) -> EntryDirection:
    return rng.weighted_choice(weights)


def spawn_from(
    direction: EntryDirection,
    bounds: WorldBounds,
    *,
    base_y: float,
    rng: SeededRng,
) -> tuple[Vec3, Vec3]:
    """Spawn position and unit heading for an entry direction.

    Edge entries start on the despawn ring (``extent + despawn_margin`` on the
    entry axis) heading inward.
    """

    r = bounds.edge_radius
    rz = bounds.z + bounds.despawn_margin
    vertical = bounds.vertical_entry
    y = base_y + rng.uniform(-2.0, 2.0) if vertical else base_y

    def tilt(lo: float, hi: float) -> float:
        return rng.uniform(lo, hi) if vertical else 0.0

    if direction is EntryDirection.DEEP_TO_SURFACE:
        sx = bounds.x * bounds.entry_spread
        sz = bounds.z * bounds.entry_spread
        x = rng.uniform(-sx, sx)
        z = rng.uniform(-sz, sz)
        heading = Vec3(rng.uniform(-0.2, 0.2), 1.0 if vertical else 0.0, rng.uniform(-0.2, 0.2))
    elif direction is EntryDirection.LEFT_TO_RIGHT:
        x, z = -r, rng.uniform(-bounds.z, bounds.z)
        heading = Vec3(1.0, tilt(-0.08, 0.08), _lateral(rng, vertical))
    elif direction is EntryDirection.RIGHT_TO_LEFT:
        x, z = r, rng.uniform(-bounds.z, bounds.z)
        heading = Vec3(-1.0, tilt(-0.08, 0.08), _lateral(rng, vertical))
    elif direction is EntryDirection.DIAGONAL_UP:
        x, z = -r, -rz
        heading = Vec3(1.0, tilt(0.05, 0.25), 1.0)
    elif direction is EntryDirection.DIAGONAL_DOWN:
        x, z = -r, rz
        heading = Vec3(1.0, tilt(-0.25, -0.05), -1.0)
    elif direction is EntryDirection.DIAGONAL:
        x, z = -r, -rz
        heading = Vec3(1.0, 0.0, 1.0)
    else:
        x, z, heading = _random_edge(bounds, rng)

    heading = heading.normalized()
    if heading.length() == 0.0:
        heading = Vec3(0.0, 0.0, 1.0)
    return Vec3(x, y, z), heading


def _lateral(rng: SeededRng, vertical: bool) -> float:
    # Ocean crossings drift less sideways than forest ones.
    return rng.uniform(-0.15, 0.15) if vertical else rng.uniform(-0.2, 0.2)


def _random_edge(bounds: WorldBounds, rng: SeededRng) -> tuple[float, float, Vec3]:
    r = bounds.edge_radius
    rz = bounds.z + bounds.despawn_margin
    if bounds.edge_rule is EdgeRule.FAR_EDGE:
        return rng.uniform(-bounds.x, bounds.x), -rz, Vec3(rng.uniform(-0.3, 0.3), 0.0, 1.0)
    face = rng.randint(0, 3)
    if face == 0:
        return r, rng.uniform(-bounds.z, bounds.z), Vec3(-1.0, 0.0, rng.uniform(-0.3, 0.3))
    if face == 1:
        return -r, rng.uniform(-bounds.z, bounds.z), Vec3(1.0, 0.0, rng.uniform(-0.3, 0.3))
    if face == 2:
        return rng.uniform(-bounds.x, bounds.x), rz, Vec3(rng.uniform(-0.3, 0.3), 0.0, -1.0)
    return rng.uniform(-bounds.x, bounds.x), -rz, Vec3(rng.uniform(-0.3, 0.3), 0.0, 1.0)


class WanderEngine:
    """Frame-driven wander/steering for a fixed set of agents.

    Each agent walks the lifecycle pending_start -> active <-> offscreen_waiting.
    Agents never read each other's state.
    """

    _FACING_SMOOTHING = 0.18
    _BANK_GAIN = 12.0

    def __init__(
        self,
        *,
        bounds: WorldBounds,
        species: tuple[SpeciesMotion, ...],
        rng: SeededRng,
        on_found: Callable[[str], None] | None = None,
    ) -> None:
        ids = [s.species_id for s in species]
        if len(set(ids)) != len(ids):
            raise ValueError("species ids must be unique")

        self._bounds = bounds
        self._rng = rng
        self._on_found = on_found
        self._agents: list[Agent] = []
        for cfg in species:
            delay = cfg.spawn_delay_s if cfg.spawn_delay_s is not None else rng.uniform(0.0, 5.0)
            self._agents.append(Agent(config=cfg, activate_at_s=float(delay)))

    @property
    def bounds(self) -> WorldBounds:
        return self._bounds

    def agents(self) -> tuple[Agent, ...]:
        return tuple(self._agents)

    def agent(self, species_id: str) -> Agent | None:
        for a in self._agents:
            if a.species_id == species_id:
                return a
        return None

    def set_on_found(self, callback: Callable[[str], None] | None) -> None:
        self._on_found = callback

    def tick(self, t: float, dt: float) -> None:
        for agent in self._agents:
            self._tick_agent(agent, float(t), max(0.0, float(dt)))

    def select(self, species_id: str) -> bool:
        agent = self.agent(species_id)
        if agent is None or agent.phase is not AgentPhase.ACTIVE or not agent.visible:
            return False
        if self._on_found is not None:
            self._on_found(species_id)
        return True

    def pick(self, x: float, z: float, *, radius: float) -> str | None:
        best: str | None = None
        best_d = float(radius)
        for a in self._agents:
            if a.phase is not AgentPhase.ACTIVE or not a.visible:
                continue
            d = math.hypot(a.position.x - x, a.position.z - z)
            if d <= best_d:
                best, best_d = a.species_id, d
        return best

    def snapshots(self) -> tuple[AgentSnapshot, ...]:
        return tuple(
            AgentSnapshot(
                species_id=a.species_id,
                phase=a.phase,
                visible=a.visible,
                x=a.position.x,
                y=a.position.y,
                z=a.position.z,
                yaw=a.yaw,
                pitch=a.pitch,
                bank=a.bank,
                speed=a.velocity.length(),
                scale=a.config.scale,
            )
            for a in self._agents
        )

    def _tick_agent(self, agent: Agent, t: float, dt: float) -> None:
        cfg = agent.config

        if agent.phase is AgentPhase.PENDING_START:
            if t < agent.activate_at_s:
                agent.visible = False
                return
            agent.visible = True
            self._spawn(agent)
        elif agent.phase is AgentPhase.OFFSCREEN_WAITING:
            if t < agent.resume_at_s:
                return
            self._spawn(agent)

        f1, f2, offset = cfg.heading_freqs
        noise = (math.sin(t * f1) + math.sin(t * f2 + offset)) * 0.5 * cfg.turn_jitter
        yaw_delta = noise * dt
        vel = agent.velocity.rotated_y(yaw_delta)
        speed = clamp(vel.length(), cfg.min_speed, cfg.max_speed)
        agent.velocity = vel.with_length(speed)

        b = self._bounds
        p = agent.position
        if cfg.motion is MotionClass.SWIM:
            bob = math.sin(t * cfg.bob_freq) * cfg.bob_amp * dt
            p = p.with_y(clamp(p.y + bob, b.y_bottom, b.y_top))
            p = p + agent.velocity.scaled(dt)
        elif cfg.motion is MotionClass.GLIDE:
            p = p.with_y(clamp(cfg.base_y + math.sin(t * cfg.bob_freq) * cfg.bob_amp, b.y_bottom, b.y_top))
            p = p + agent.velocity.scaled(dt)
        else:
            p = p + agent.velocity.scaled(dt)
            p = p.with_y(cfg.base_y + math.sin(t * cfg.bob_freq) * cfg.bob_amp)
        agent.position = p

        self._face(agent, yaw_delta)

        # Walkers are pinned to their ground height; only the ring applies to them.
        if b.out_of_bounds(p, vertical=cfg.motion is not MotionClass.WALK):
            lo, hi = cfg.respawn_delay_s or b.respawn_delay_s
            agent.phase = AgentPhase.OFFSCREEN_WAITING
            agent.resume_at_s = t + self._rng.uniform(lo, hi)
            logger.debug(
                "%s left the world at (%.1f, %.1f, %.1f); back at t=%.2f",
                agent.species_id,
                p.x,
                p.y,
                p.z,
                agent.resume_at_s,
            )

    def _spawn(self, agent: Agent) -> None:
        cfg = agent.config
        entry = choose_entry(cfg.entry_weights, self._rng)
        position, heading = spawn_from(entry, self._bounds, base_y=cfg.base_y, rng=self._rng)
        agent.position = position
        agent.velocity = heading.scaled(self._rng.uniform(cfg.min_speed, cfg.max_speed))
        agent.phase = AgentPhase.ACTIVE
        agent.yaw = math.atan2(heading.x, heading.z)
        agent.pitch = 0.0
        agent.bank = 0.0
        logger.debug("%s spawned via %s", agent.species_id, entry.value)

    def _face(self, agent: Agent, yaw_delta: float) -> None:
        cfg = agent.config
        v = agent.velocity
        if v.length() == 0.0:
            return
        target_yaw = math.atan2(v.x, v.z)

        if cfg.motion is MotionClass.SWIM:
            # Free swimmers ease toward the full 3-axis heading.
            target_pitch = -math.asin(clamp(v.y / v.length(), -1.0, 1.0))
            k = self._FACING_SMOOTHING
            agent.yaw = wrap_angle(agent.yaw + wrap_angle(target_yaw - agent.yaw) * k)
            agent.pitch = agent.pitch + (target_pitch - agent.pitch) * k
            agent.bank = 0.0
            return

        agent.yaw = target_yaw
        agent.pitch = 0.0
        if cfg.motion is MotionClass.GLIDE:
            agent.bank = clamp(-yaw_delta * self._BANK_GAIN, -cfg.bank, cfg.bank)
        else:
            agent.bank = 0.0
