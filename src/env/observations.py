# src/env/observations.py
from __future__ import annotations
from typing import List, Tuple
import numpy as np

from src.hop.config import WIDTH, HEIGHT, MAX_HORIZONTAL_SPEED, POWERUP_PROFILES
from src.hop.events import Snapshot

# How many platforms around the player are described
NEAREST_PLATFORMS: int = 5
VY_SCALE: float = 16.0

OBS_SIZE: int = 7 + 3 * NEAREST_PLATFORMS + 3


def _clip1(x: float) -> float:
    return -1.0 if x < -1.0 else (1.0 if x > 1.0 else x)


def _nearest_platforms(snap: Snapshot, cx: float, cy: float, k: int) -> List[Tuple[float, float, float]]:
    """(dx, dy, landable) of the k platforms closest to the player's feet, by vertical distance."""
    feats = []
    for plat in snap.platforms:
        px = plat.x + plat.width / 2
        dy = plat.y - cy
        landable = 0.0 if plat.variant == "dead" or plat.break_progress > 0.0 else 1.0
        feats.append((abs(dy), (px - cx) / WIDTH, dy / HEIGHT, landable))
    feats.sort(key=lambda f: f[0])
    out = [(_clip1(dx), _clip1(dy), flag) for _, dx, dy, flag in feats[:k]]
    while len(out) < k:
        out.append((0.0, 1.0, 0.0))   # "nothing there" sentinel
    return out


def build_observation(snap: Snapshot, k: int = NEAREST_PLATFORMS) -> np.ndarray:
    """
    Fixed float32 vector in [-1, 1]:
      [ x, y, vx, vy, rocket, glider, power_up_left,
        (dx, dy, landable) * k nearest platforms,
        monster_dx, monster_dy, monster_present ]
    """
    p = snap.player
    cx = p.x + p.width / 2
    feet = p.y + p.height

    feats: List[float] = [
        _clip1(cx / WIDTH * 2.0 - 1.0),
        _clip1(p.y / HEIGHT * 2.0 - 1.0),
        _clip1(p.vx / (MAX_HORIZONTAL_SPEED * 1.5)),
        _clip1(p.vy / VY_SCALE),
        1.0 if snap.power_up == "rocket" else 0.0,
        1.0 if snap.power_up == "glider" else 0.0,
    ]
    if snap.power_up:
        full = POWERUP_PROFILES[snap.power_up]["duration_ms"]
        feats.append(_clip1(snap.power_up_remaining_ms / full))
    else:
        feats.append(0.0)

    for dx, dy, flag in _nearest_platforms(snap, cx, feet, k):
        feats.extend([dx, dy, flag])

    best = None
    for m in snap.monsters:
        dx = (m.x + m.width / 2 - cx) / WIDTH
        dy = (m.y + m.height / 2 - (p.y + p.height / 2)) / HEIGHT
        dist = dx * dx + dy * dy
        if best is None or dist < best[0]:
            best = (dist, dx, dy)
    if best is None:
        feats.extend([0.0, 0.0, 0.0])
    else:
        feats.extend([_clip1(best[1]), _clip1(best[2]), 1.0])

    return np.asarray(feats, dtype=np.float32)
