# src/hop/level.py
from __future__ import annotations
import random
import math
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional
import pygame
from .config import (
    WIDTH, HEIGHT, PLATFORM_W, PLATFORM_H, PLATFORM_MIN_GAP, PLATFORM_MAX_GAP,
    GROUND_Y, MIN_PLATFORM_COUNT, SPAWN_CEILING_Y, RECYCLE_CUTOFF_Y,
    MOVING_PLATFORM_PROB, DEAD_PLATFORM_PROB, BREAKABLE_PLATFORM_PROB,
    MAX_CONSECUTIVE_DEAD, MOVING_SPEED_MIN, MOVING_SPEED_MAX, PLATFORM_MOTION_SCALE,
    BREAK_DELAY, REACH_SAFETY, GRAVITY, JUMP_VELOCITY, MOTION_SCALE,
    MONSTER_W, MONSTER_H, MONSTER_BASE_PROB, MONSTER_MAX_PROB, MONSTER_SCORE_RAMP,
    MONSTER_MIN_PLATFORM_W, MONSTER_BOTTOM_MARGIN, MONSTER_INITIAL_MAX_Y,
    MONSTER_SPEEDS, MONSTER_SPRINTER_CHANCE,
    POWERUP_PROB, POWERUP_SIZE, POWERUP_KINDS, PULSE_SPEED, SEED_DEFAULT,
)

logger = logging.getLogger(__name__)

STATIC = "static"
MOVING = "moving"
DEAD = "dead"
BREAKABLE = "breakable"


def max_jump_height(jump_velocity: float = JUMP_VELOCITY, gravity: float = GRAVITY,
                    scale: float = MOTION_SCALE) -> float:
    """Apex of a full bounce, integrated the same way Player.update_physics does."""
    vy, height = jump_velocity, 0.0
    while True:
        vy += gravity
        if vy >= 0.0:
            return height
        height += -vy * scale


MAX_REACHABLE_ASCENT = max_jump_height() * REACH_SAFETY


@dataclass
class PowerUp:
    """Pickup sitting on a platform. Position is re-anchored from the host every tick."""
    kind: str
    platform_id: int = -1
    offset_x: float = 0.0
    size: int = POWERUP_SIZE
    x: float = 0.0
    y: float = 0.0
    active: bool = True
    pulse: float = 0.0

    def anchor(self, platform: "Platform"):
        self.platform_id = platform.id
        self.x = platform.x + self.offset_x
        self.y = platform.y - self.size - 4

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(math.floor(self.x), math.floor(self.y), self.size, self.size)


@dataclass
class Platform:
    id: int = -1
    x: float = 0.0
    y: float = 0.0
    width: int = PLATFORM_W
    height: int = PLATFORM_H
    variant: str = STATIC
    dx: float = 0.0
    power_up: Optional[PowerUp] = None
    breaking: bool = False
    break_timer: float = 0.0
    pending_removal: bool = False

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(math.floor(self.x), math.floor(self.y), self.width, self.height)

    @property
    def landable(self) -> bool:
        return self.variant != DEAD and not self.breaking and not self.pending_removal

    @property
    def break_progress(self) -> float:
        if not self.breaking:
            return 0.0
        return min(1.0, self.break_timer / BREAK_DELAY)

    def start_break(self):
        """One-way: breaking -> pending removal. Never landable again."""
        self.breaking = True
        self.break_timer = 0.0

    def update_movement(self, delta: float):
        if self.variant == MOVING:
            self.x += self.dx * delta * PLATFORM_MOTION_SCALE
            if self.x < 0 or self.x + self.width > WIDTH:
                self.dx *= -1
                self.x = max(0.0, min(self.x, float(WIDTH - self.width)))
        if self.breaking and not self.pending_removal:
            self.break_timer += delta
            if self.break_timer >= BREAK_DELAY:
                self.pending_removal = True
        if self.power_up is not None:
            self.power_up.anchor(self)


@dataclass
class Monster:
    """Walks along the top of a static host platform; never simulated vertically."""
    kind: str
    platform_id: int
    x: float
    vx: float
    id: int = -1
    y: float = 0.0
    width: int = MONSTER_W
    height: int = MONSTER_H

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(math.floor(self.x), math.floor(self.y), self.width, self.height)

    def pin_to(self, platform: Platform):
        self.y = platform.y - self.height

    def update_movement(self, delta: float, platform: Platform):
        lo = platform.x
        hi = platform.x + platform.width - self.width
        self.x += self.vx * delta
        if self.x < lo or self.x > hi:
            self.vx *= -1
            self.x = max(lo, min(self.x, hi))
        self.pin_to(platform)


@dataclass(frozen=True)
class SpawnHistory:
    consecutive_dead: int = 0
    last_landable_y: Optional[float] = None


class SpawnPolicy:
    """
    Decides where the next platform goes and what it carries.
    All draws come from the injected rng so a seed replays the same stream.
    """
    def __init__(self, rng: random.Random, max_reach: float = MAX_REACHABLE_ASCENT):
        self.rng = rng
        self.max_reach = max_reach

    def choose_variant(self, history: SpawnHistory) -> str:
        if self.rng.random() < MOVING_PLATFORM_PROB:
            return MOVING
        roll = self.rng.random()
        if roll < DEAD_PLATFORM_PROB:
            # Cap reached: downgrade the dead roll
            if history.consecutive_dead >= MAX_CONSECUTIVE_DEAD:
                return STATIC
            return DEAD
        if roll < DEAD_PLATFORM_PROB + BREAKABLE_PLATFORM_PROB:
            return BREAKABLE
        return STATIC

    def generate_next(self, previous_y: float, history: SpawnHistory) -> Platform:
        variant = self.choose_variant(history)
        gap = self.rng.uniform(PLATFORM_MIN_GAP, PLATFORM_MAX_GAP)
        y = previous_y - gap

        anchor_y = previous_y if history.last_landable_y is None else history.last_landable_y
        ceiling_y = anchor_y - self.max_reach
        if y < ceiling_y:
            y = ceiling_y

        plat = Platform(
            x=self.rng.uniform(0, WIDTH - PLATFORM_W),
            y=y,
            variant=variant,
        )
        if variant == MOVING:
            direction = -1 if self.rng.random() < 0.5 else 1
            plat.dx = direction * self.rng.uniform(MOVING_SPEED_MIN, MOVING_SPEED_MAX)
        return plat

    def monster_chance(self, score: float) -> float:
        ramp = min(1.0, max(0.0, score) / MONSTER_SCORE_RAMP)
        return MONSTER_BASE_PROB + (MONSTER_MAX_PROB - MONSTER_BASE_PROB) * ramp

    def can_host_monster(self, plat: Platform, initial: bool) -> bool:
        if plat.variant != STATIC or plat.power_up is not None:
            return False
        if plat.width < MONSTER_MIN_PLATFORM_W:
            return False
        if plat.y > HEIGHT - MONSTER_BOTTOM_MARGIN:
            return False
        if initial and plat.y > MONSTER_INITIAL_MAX_Y:
            return False
        return True

    def decorate(self, plat: Platform, score: float = 0.0, initial: bool = False) -> Optional[Monster]:
        """Roll a pickup and then a monster for a freshly registered platform."""
        if plat.variant != STATIC:
            return None

        if self.rng.random() < POWERUP_PROB:
            kind = self.rng.choice(POWERUP_KINDS)
            offset = self.rng.uniform(0, plat.width - POWERUP_SIZE)
            plat.power_up = PowerUp(kind=kind, offset_x=offset)
            plat.power_up.anchor(plat)
            return None

        if not self.can_host_monster(plat, initial):
            return None
        if self.rng.random() >= self.monster_chance(score):
            return None

        kind = "sprinter" if self.rng.random() < MONSTER_SPRINTER_CHANCE else "walker"
        lo, hi = MONSTER_SPEEDS[kind]
        speed = self.rng.uniform(lo, hi)
        direction = -1 if self.rng.random() < 0.5 else 1
        monster = Monster(
            kind=kind,
            platform_id=plat.id,
            x=plat.x + self.rng.uniform(0, plat.width - MONSTER_W),
            vx=direction * speed,
        )
        monster.pin_to(plat)
        return monster


class PlatformRegistry:
    """Arena of live platforms and monsters keyed by stable integer ids."""
    def __init__(self):
        self._platforms: Dict[int, Platform] = {}
        self._monsters: Dict[int, Monster] = {}
        self._next_id = 1
        self._next_monster_id = 1

    def __len__(self) -> int:
        return len(self._platforms)

    def __iter__(self) -> Iterator[Platform]:
        return iter(list(self._platforms.values()))

    def __contains__(self, platform_id: int) -> bool:
        return platform_id in self._platforms

    @property
    def platforms(self) -> List[Platform]:
        return list(self._platforms.values())

    @property
    def monsters(self) -> List[Monster]:
        return list(self._monsters.values())

    def clear(self):
        self._platforms.clear()
        self._monsters.clear()

    def add(self, plat: Platform) -> Platform:
        plat.id = self._next_id
        self._next_id += 1
        self._platforms[plat.id] = plat
        if plat.power_up is not None:
            plat.power_up.anchor(plat)
        return plat

    def add_monster(self, monster: Monster) -> Monster:
        monster.id = self._next_monster_id
        self._next_monster_id += 1
        self._monsters[monster.id] = monster
        return monster

    def get(self, platform_id: int) -> Optional[Platform]:
        return self._platforms.get(platform_id)

    def host_of(self, monster: Monster) -> Optional[Platform]:
        """Host platform if it can still carry the monster, else None."""
        plat = self._platforms.get(monster.platform_id)
        if plat is None or plat.variant != STATIC or plat.pending_removal:
            return None
        return plat

    def remove(self, platform_id: int) -> Optional[Platform]:
        plat = self._platforms.pop(platform_id, None)
        if plat is not None:
            if plat.power_up is not None:
                plat.power_up.active = False
                plat.power_up = None
            for m in [m for m in self._monsters.values() if m.platform_id == platform_id]:
                del self._monsters[m.id]
        return plat

    def remove_monster(self, monster_id: int) -> Optional[Monster]:
        return self._monsters.pop(monster_id, None)

    def purge_orphans(self) -> int:
        """Drop monsters whose host vanished or changed; treated as already removed."""
        orphans = [m.id for m in self._monsters.values() if self.host_of(m) is None]
        for mid in orphans:
            del self._monsters[mid]
        return len(orphans)

    def newest(self) -> Optional[Platform]:
        if not self._platforms:
            return None
        return next(reversed(self._platforms.values()))

    def highest_y(self) -> float:
        return min((p.y for p in self._platforms.values()), default=float(HEIGHT))

    def history(self) -> SpawnHistory:
        """Trailing dead run and last landable y, newest first."""
        dead = 0
        last_landable = None
        for plat in reversed(self._platforms.values()):
            if plat.variant == DEAD:
                dead += 1
                continue
            last_landable = plat.y
            break
        return SpawnHistory(consecutive_dead=dead, last_landable_y=last_landable)


class Level:
    """
    Endless column of platforms. The world moves down under the player;
    anything scrolled past the bottom is recycled and refilled at the top.
    """
    def __init__(self, seed: int | None = SEED_DEFAULT):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.policy = SpawnPolicy(self.rng)
        self.registry = PlatformRegistry()

    @property
    def platforms(self) -> List[Platform]:
        return self.registry.platforms

    @property
    def monsters(self) -> List[Monster]:
        return self.registry.monsters

    def populate(self):
        """Fresh layout for a new run: centred static ground, then content above the screen."""
        self.registry.clear()
        ground = Platform(x=WIDTH / 2 - PLATFORM_W / 2, y=float(GROUND_Y), variant=STATIC)
        self.registry.add(ground)
        self.refill(score=0.0, initial=True)

    def _spawn(self, score: float, initial: bool) -> Platform:
        newest = self.registry.newest()
        previous_y = newest.y if newest is not None else float(GROUND_Y)
        plat = self.policy.generate_next(previous_y, self.registry.history())
        self.registry.add(plat)
        monster = self.policy.decorate(plat, score=score, initial=initial)
        if monster is not None:
            self.registry.add_monster(monster)
        return plat

    def refill(self, score: float = 0.0, initial: bool = False):
        while len(self.registry) < MIN_PLATFORM_COUNT or self.registry.highest_y() > SPAWN_CEILING_Y:
            self._spawn(score, initial)

    def update(self, delta: float) -> List[Platform]:
        """Move platforms and monsters, tick pickups. Returns platforms whose break finished."""
        broken: List[Platform] = []
        for plat in self.registry:
            plat.update_movement(delta)
            if plat.pending_removal:
                broken.append(plat)
            elif plat.power_up is not None:
                plat.power_up.pulse = (plat.power_up.pulse + PULSE_SPEED * delta) % (2 * math.pi)
        for plat in broken:
            self.registry.remove(plat.id)

        for monster in self.registry.monsters:
            host = self.registry.host_of(monster)
            if host is None:
                self.registry.remove_monster(monster.id)
                continue
            monster.update_movement(delta, host)
        return broken

    def shift(self, dy: float):
        for plat in self.registry:
            plat.y += dy
            if plat.power_up is not None:
                plat.power_up.anchor(plat)
        for monster in self.registry.monsters:
            host = self.registry.host_of(monster)
            if host is not None:
                monster.pin_to(host)

    def recycle(self, score: float = 0.0) -> int:
        """Drop everything below the cutoff, then refill to the target window."""
        gone = [p.id for p in self.registry if p.y >= RECYCLE_CUTOFF_Y]
        for pid in gone:
            self.registry.remove(pid)
        self.registry.purge_orphans()
        self.refill(score=score)
        return len(gone)
