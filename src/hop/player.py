# src/hop/player.py
from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Optional
import pygame
from .config import (
    WIDTH, HEIGHT, PLAYER_W, PLAYER_H, PLAYER_START_Y, PLAYER_START_VY,
    GRAVITY, MOVE_ACCEL, MOVE_FRICTION, MAX_HORIZONTAL_SPEED, MOTION_SCALE,
    FACING_DEADZONE, FRAME_MS, POWERUP_PROFILES,
    DEATH_ANIMATION_FRAMES, DEATH_SPIN_DEG,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PowerUpProfile:
    """Physics multipliers applied while a power-up is active."""
    duration_ms: float = 0.0
    gravity: float = 1.0
    horizontal: float = 1.0
    jump: float = 1.0
    max_fall_speed: Optional[float] = None   # glide: cap on downward vy
    lift_cap: Optional[float] = None         # rocket: cap on how negative vy gets


IDENTITY_PROFILE = PowerUpProfile()


def profile_for(kind: str) -> PowerUpProfile:
    return PowerUpProfile(**POWERUP_PROFILES[kind])


@dataclass
class ActivePowerUp:
    kind: str
    remaining_ms: float
    elapsed_ms: float = 0.0

    @property
    def profile(self) -> PowerUpProfile:
        return profile_for(self.kind)


@dataclass
class DeathAnimation:
    active: bool = False
    timer: float = 0.0
    rotation: float = 0.0

    @property
    def progress(self) -> float:
        return min(1.0, self.timer / DEATH_ANIMATION_FRAMES)

    @property
    def done(self) -> bool:
        return self.active and self.timer >= DEATH_ANIMATION_FRAMES


@dataclass
class Player:
    """
    Bouncing player. World pixels, y grows downward.
    - vx/vy are in px per nominal 60 fps frame
    - positions advance by velocity * delta * MOTION_SCALE
    """
    x: float = WIDTH / 2 - PLAYER_W / 2
    y: float = float(PLAYER_START_Y)
    vx: float = 0.0
    vy: float = PLAYER_START_VY
    facing: int = 1
    width: int = PLAYER_W
    height: int = PLAYER_H
    power_up: Optional[ActivePowerUp] = None
    death: DeathAnimation = field(default_factory=DeathAnimation)

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(math.floor(self.x), math.floor(self.y), self.width, self.height)

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def profile(self) -> PowerUpProfile:
        if self.power_up is None:
            return IDENTITY_PROFILE
        return self.power_up.profile

    def reset(self):
        self.x = WIDTH / 2 - self.width / 2
        self.y = float(PLAYER_START_Y)
        self.vx = 0.0
        self.vy = PLAYER_START_VY
        self.facing = 1
        self.power_up = None
        self.death = DeathAnimation()

    # --- horizontal ---

    def apply_input(self, left: bool, right: bool, delta: float):
        """Accelerate from held direction, then friction and clamp."""
        prof = self.profile
        accel = MOVE_ACCEL * delta * prof.horizontal
        if left and not right:
            self.vx -= accel
        elif right and not left:
            self.vx += accel

        self.vx *= MOVE_FRICTION
        max_speed = MAX_HORIZONTAL_SPEED * prof.horizontal
        self.vx = max(-max_speed, min(self.vx, max_speed))

        if abs(self.vx) > FACING_DEADZONE:
            self.facing = 1 if self.vx > 0 else -1

    def wrap_horizontally(self):
        if self.x + self.width < 0:
            self.x = float(WIDTH)
        elif self.x > WIDTH:
            self.x = float(-self.width)

    # --- vertical ---

    def apply_gravity(self, delta: float):
        prof = self.profile
        self.vy += GRAVITY * prof.gravity * delta
        if prof.max_fall_speed is not None and self.vy > prof.max_fall_speed:
            self.vy = prof.max_fall_speed
        if prof.lift_cap is not None and self.vy < prof.lift_cap:
            self.vy = prof.lift_cap

    def update_physics(self, delta: float, left: bool = False, right: bool = False) -> float:
        """Integrate one step. Returns the y before moving (for swept tests)."""
        previous_y = self.y
        self.apply_input(left, right, delta)
        self.x += self.vx * delta * MOTION_SCALE
        self.wrap_horizontally()

        self.apply_gravity(delta)
        self.y += self.vy * delta * MOTION_SCALE
        return previous_y

    def bounce(self, velocity: float, scale: float = 1.0):
        self.vy = velocity * self.profile.jump * scale

    def fell_out(self) -> bool:
        return self.y > HEIGHT + self.height

    # --- power-up timer ---

    def activate_power_up(self, kind: str):
        """Replace (never stack) the active effect with a fresh one."""
        self.power_up = ActivePowerUp(kind=kind, remaining_ms=profile_for(kind).duration_ms)

    def tick_power_up(self, delta: float) -> Optional[str]:
        """Advance the timer. Returns the kind that just expired, if any."""
        if self.power_up is None:
            return None
        ms = delta * FRAME_MS
        self.power_up.elapsed_ms += ms
        self.power_up.remaining_ms -= ms
        if self.power_up.remaining_ms <= 0.0:
            expired = self.power_up.kind
            self.power_up = None
            logger.debug("power-up %s expired", expired)
            return expired
        return None

    # --- death animation ---

    def begin_falling(self):
        self.death = DeathAnimation(active=True)
        self.vx = 0.0

    def update_death(self, delta: float):
        self.death.timer += delta
        self.death.rotation = (self.death.rotation + DEATH_SPIN_DEG * delta * self.facing) % 360.0
