# src/hop/collisions.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from .config import JUMP_VELOCITY, STOMP_TOLERANCE, STOMP_BOUNCE_SCALE
from .level import BREAKABLE, Monster, Platform, PlatformRegistry, PowerUp
from .player import Player

logger = logging.getLogger(__name__)

STOMP = "stomp"
HIT = "hit"


@dataclass(frozen=True)
class MonsterContact:
    outcome: str       # STOMP or HIT
    monster: Monster


def resolve_platform_landing(player: Player, previous_y: float,
                             platforms: Iterable[Platform]) -> Optional[Platform]:
    """
    Swept landing test, only while falling:
      - bottom edge crossed the platform top between previous and current tick,
      - horizontal spans overlap now.
    First qualifying platform in collection order wins. Returns it, or None.
    """
    if player.vy <= 0:
        return None
    prev_bottom = previous_y + player.height
    curr_bottom = player.y + player.height

    for plat in platforms:
        if not plat.landable:
            continue
        top = plat.y
        horizontal_overlap = player.x + player.width > plat.x and player.x < plat.x + plat.width
        if horizontal_overlap and prev_bottom <= top and curr_bottom >= top:
            player.y = top - player.height
            player.bounce(JUMP_VELOCITY)
            if plat.variant == BREAKABLE:
                plat.start_break()
            logger.debug("landed on platform %d (%s)", plat.id, plat.variant)
            return plat
    return None


def resolve_monster_contacts(player: Player, previous_y: float, was_falling: bool,
                             registry: PlatformRegistry) -> Optional[MonsterContact]:
    """
    First overlapping monster decides the outcome:
      - stomp if falling and the previous bottom was above its top (with tolerance),
      - anything else is a hit.
    """
    me = player.rect
    prev_bottom = previous_y + player.height
    for monster in registry.monsters:
        if registry.host_of(monster) is None:
            registry.remove_monster(monster.id)
            continue
        if not me.colliderect(monster.rect):
            continue
        if was_falling and prev_bottom <= monster.y + STOMP_TOLERANCE:
            registry.remove_monster(monster.id)
            player.bounce(JUMP_VELOCITY, STOMP_BOUNCE_SCALE)
            logger.debug("stomped %s monster %d", monster.kind, monster.id)
            return MonsterContact(STOMP, monster)
        return MonsterContact(HIT, monster)
    return None


def collect_power_up(player: Player, platforms: Iterable[Platform]) -> Optional[PowerUp]:
    """Current-frame overlap against attached pickups. Replaces any active effect."""
    me = player.rect
    for plat in platforms:
        pu = plat.power_up
        if pu is None or not pu.active:
            continue
        if me.colliderect(pu.rect):
            pu.active = False
            plat.power_up = None
            player.activate_power_up(pu.kind)
            logger.debug("collected %s from platform %d", pu.kind, plat.id)
            return pu
    return None
