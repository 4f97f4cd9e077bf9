# src/hop/render.py
from __future__ import annotations
import math
from typing import Optional, Tuple
import pygame
from .config import (
    COLOR_BG, COLOR_FG, COLOR_ACCENT, COLOR_PLATFORM, COLOR_MONSTER, COLOR_POWERUP,
)
from .events import Snapshot


def _fade(color: Tuple[int, int, int], amount: float) -> Tuple[int, int, int]:
    """Blend a colour toward the background (amount 0..1)."""
    return tuple(int(c + (b - c) * amount) for c, b in zip(color, COLOR_BG))


def draw_snapshot(surf: pygame.Surface, snap: Snapshot, font: Optional[pygame.font.Font] = None):
    surf.fill(COLOR_BG)

    for plat in snap.platforms:
        color = COLOR_PLATFORM[plat.variant]
        if plat.break_progress > 0.0:
            color = _fade(color, plat.break_progress)
        rect = pygame.Rect(int(plat.x), int(plat.y), plat.width, plat.height)
        pygame.draw.rect(surf, color, rect)
        pygame.draw.rect(surf, COLOR_BG, (rect.x, rect.y, 6, rect.height))

    for pu in snap.pickups:
        grow = int(3 * math.sin(pu.pulse))
        rect = pygame.Rect(int(pu.x), int(pu.y), pu.size, pu.size).inflate(grow, grow)
        pygame.draw.ellipse(surf, COLOR_POWERUP[pu.kind], rect)

    for m in snap.monsters:
        rect = pygame.Rect(int(m.x), int(m.y), m.width, m.height)
        pygame.draw.rect(surf, COLOR_MONSTER[m.kind], rect, border_radius=6)

    p = snap.player
    body = pygame.Surface((p.width, p.height), pygame.SRCALPHA)
    body.fill(COLOR_ACCENT)
    eye_x = p.width - 12 if p.facing > 0 else 6
    pygame.draw.rect(body, COLOR_FG, (eye_x, 10, 6, 6))
    if p.rotation:
        body = pygame.transform.rotate(body, p.rotation)
    body.set_alpha(int(255 * max(0.0, min(1.0, p.alpha))))
    center = (int(p.x + p.width / 2), int(p.y + p.height / 2))
    surf.blit(body, body.get_rect(center=center))

    if font is not None:
        hud = f"Score: {snap.display_score}   Best: {snap.best}"
        if snap.power_up:
            hud += f"   {snap.power_up} {snap.power_up_remaining_ms / 1000.0:.1f}s"
        surf.blit(font.render(hud, True, COLOR_FG), (10, 8))
