# src/tests/test_collisions.py
"""
Collision & resolution: swept landing, breakables, stomp vs hit, pickups.
"""
from __future__ import annotations
import pytest

from src.hop.config import (
    BREAK_DELAY, JUMP_VELOCITY, STOMP_BONUS, STOMP_BOUNCE_SCALE, POWERUP_PROFILES,
)
from src.hop.collisions import (
    HIT, STOMP, collect_power_up, resolve_monster_contacts, resolve_platform_landing,
)
from src.hop.events import EventType, RunState
from src.hop.level import BREAKABLE, DEAD, STATIC, Level, Monster, Platform, PlatformRegistry, PowerUp
from src.hop.player import Player
from src.hop.simulation import Simulation


def falling_player(x=110.0, prev_bottom=390.0, curr_bottom=430.0, vy=20.0):
    p = Player(x=x, y=curr_bottom - 54, vy=vy)
    return p, prev_bottom - p.height


def arena(seed=3):
    """Running simulation with an empty registry to place things by hand."""
    sim = Simulation(seed=seed)
    sim.start()
    sim.drain_events()
    sim.level.registry.clear()
    return sim, sim.level.registry


def event_types(result):
    return [e.type for e in result.events]


# -------------------- platform landing --------------------

def test_swept_landing_catches_tunneling():
    plat = Platform(id=1, x=100.0, y=400.0)
    player, prev_y = falling_player()
    # current frame already fully below the top: overlap-only test would miss it
    assert player.y > plat.y - player.height
    landed = resolve_platform_landing(player, prev_y, [plat])
    assert landed is plat
    assert player.y == plat.y - player.height
    assert player.vy == JUMP_VELOCITY


def test_no_landing_while_rising():
    plat = Platform(id=1, x=100.0, y=400.0)
    player, prev_y = falling_player(vy=-1.0)
    assert resolve_platform_landing(player, prev_y, [plat]) is None


def test_no_landing_without_horizontal_overlap():
    plat = Platform(id=1, x=100.0, y=400.0)
    player, prev_y = falling_player(x=100.0 + plat.width)
    assert resolve_platform_landing(player, prev_y, [plat]) is None


def test_dead_and_breaking_platforms_are_skipped():
    dead = Platform(id=1, x=100.0, y=400.0, variant=DEAD)
    breaking = Platform(id=2, x=100.0, y=400.0, variant=BREAKABLE)
    breaking.start_break()
    good = Platform(id=3, x=100.0, y=405.0)
    player, prev_y = falling_player()
    assert resolve_platform_landing(player, prev_y, [dead, breaking, good]) is good


def test_first_in_collection_order_wins():
    lower = Platform(id=1, x=100.0, y=410.0)
    upper = Platform(id=2, x=100.0, y=400.0)
    player, prev_y = falling_player(curr_bottom=420.0)
    assert resolve_platform_landing(player, prev_y, [lower, upper]) is lower
    assert player.y == 410.0 - player.height


def test_jump_scaled_by_power_up():
    plat = Platform(id=1, x=100.0, y=400.0)
    player, prev_y = falling_player()
    player.activate_power_up("glider")
    resolve_platform_landing(player, prev_y, [plat])
    assert player.vy == pytest.approx(JUMP_VELOCITY * POWERUP_PROFILES["glider"]["jump"])


def test_breakable_disables_then_disappears_after_delay():
    level = Level(seed=1)
    level.registry.clear()
    plat = level.registry.add(Platform(x=100.0, y=400.0, variant=BREAKABLE))
    player, prev_y = falling_player()
    assert resolve_platform_landing(player, prev_y, level.platforms) is plat
    assert plat.breaking and not plat.landable

    # a second fall through the same platform does not land
    player, prev_y = falling_player()
    assert resolve_platform_landing(player, prev_y, level.platforms) is None

    for _ in range(int(BREAK_DELAY) - 1):
        level.update(1.0)
    assert plat.id in level.registry
    broken = level.update(1.0)
    assert broken == [plat]
    assert plat.id not in level.registry


def test_simulation_landing_emits_rotating_sound_variant():
    sim, reg = arena()
    plat = reg.add(Platform(x=100.0, y=400.0, variant=BREAKABLE))
    sim.player.x, sim.player.y, sim.player.vy, sim.player.vx = 110.0, 336.0, 10.0, 0.0
    result = sim.step(1.0)
    landed = [e for e in result.events if e.type is EventType.LANDED]
    assert len(landed) == 1 and landed[0].data["variant"] == 0
    assert not plat.landable
    assert sim.player.vy == JUMP_VELOCITY
    assert sim.state is RunState.RUNNING


# -------------------- monsters --------------------

def place_monster(reg: PlatformRegistry):
    host = reg.add(Platform(x=100.0, y=400.0, variant=STATIC))
    m = reg.add_monster(Monster(kind="walker", platform_id=host.id, x=110.0, vx=0.5))
    m.pin_to(host)
    return host, m


def test_stomp_unit():
    reg = PlatformRegistry()
    _, m = place_monster(reg)
    player = Player(x=105.0, y=320.0, vy=6.0)
    contact = resolve_monster_contacts(player, previous_y=310.0, was_falling=True, registry=reg)
    assert contact.outcome == STOMP and contact.monster is m
    assert reg.monsters == []
    assert player.vy == pytest.approx(JUMP_VELOCITY * STOMP_BOUNCE_SCALE)


def test_side_contact_is_a_hit():
    reg = PlatformRegistry()
    _, m = place_monster(reg)
    player = Player(x=105.0, y=336.0, vy=-3.0)
    contact = resolve_monster_contacts(player, previous_y=340.0, was_falling=False, registry=reg)
    assert contact.outcome == HIT
    assert reg.monsters == [m]


def test_falling_from_below_top_is_a_hit():
    reg = PlatformRegistry()
    place_monster(reg)
    player = Player(x=105.0, y=330.0, vy=3.0)
    # previous bottom well inside the monster
    contact = resolve_monster_contacts(player, previous_y=335.0, was_falling=True, registry=reg)
    assert contact.outcome == HIT


def test_monster_with_missing_host_is_ignored():
    reg = PlatformRegistry()
    host, m = place_monster(reg)
    del reg._platforms[host.id]
    player = Player(x=105.0, y=336.0, vy=-3.0)
    assert resolve_monster_contacts(player, 340.0, False, reg) is None
    assert reg.monsters == []


def test_simulation_stomp_scores_and_keeps_running():
    sim, reg = arena()
    host, m = place_monster(reg)
    sim.player.x, sim.player.y, sim.player.vy, sim.player.vx = 105.0, 310.0, 6.0, 0.0
    result = sim.step(1.0)
    stomped = [e for e in result.events if e.type is EventType.MONSTER_STOMPED]
    assert [e.data["kind"] for e in stomped] == ["walker"]
    assert sim.state is RunState.RUNNING and sim.running
    assert sim.score == STOMP_BONUS
    assert m.id not in [x.id for x in sim.level.monsters]
    assert all(x.platform_id != host.id for x in sim.level.monsters)


def test_simulation_hit_ends_run_immediately():
    sim, reg = arena()
    host, _ = place_monster(reg)
    # a pickup right under the player must not be collected after the hit
    host.power_up = PowerUp(kind="rocket", offset_x=10.0)
    host.power_up.anchor(host)
    sim.score = 321.7
    sim.player.x, sim.player.y, sim.player.vy, sim.player.vx = 105.0, 340.0, -3.0, 0.0
    result = sim.step(1.0)
    types = event_types(result)
    assert EventType.MONSTER_HIT in types and EventType.RUN_ENDED in types
    assert types.index(EventType.MONSTER_HIT) < types.index(EventType.RUN_ENDED)
    assert result.events[types.index(EventType.MONSTER_HIT)].data["kind"] == "walker"
    assert not sim.running and sim.state is RunState.ENDED
    assert sim.best == 321
    assert sim.player.power_up is None and host.power_up.active


# -------------------- pickups --------------------

def test_pickup_collected_and_detached():
    plat = Platform(id=1, x=100.0, y=400.0, power_up=PowerUp(kind="glider", offset_x=10.0))
    plat.power_up.anchor(plat)
    pu = plat.power_up
    player = Player(x=100.0, y=340.0)
    assert collect_power_up(player, [plat]) is pu
    assert not pu.active and plat.power_up is None
    assert player.power_up.kind == "glider"
    assert collect_power_up(player, [plat]) is None


def test_pickup_replaces_active_effect():
    plat = Platform(id=1, x=100.0, y=400.0, power_up=PowerUp(kind="glider", offset_x=10.0))
    plat.power_up.anchor(plat)
    player = Player(x=100.0, y=340.0)
    player.activate_power_up("rocket")
    for _ in range(20):
        player.tick_power_up(1.0)
    collect_power_up(player, [plat])
    assert player.power_up.kind == "glider"
    assert player.power_up.remaining_ms == POWERUP_PROFILES["glider"]["duration_ms"]


def test_pickup_needs_overlap():
    plat = Platform(id=1, x=300.0, y=400.0, power_up=PowerUp(kind="rocket", offset_x=10.0))
    plat.power_up.anchor(plat)
    player = Player(x=0.0, y=340.0)
    assert collect_power_up(player, [plat]) is None
    assert plat.power_up.active
