# src/hop/simulation.py
from __future__ import annotations
import logging
from typing import List, Optional
from .config import (
    FRAME_MS, MAX_DELTA, SEED_DEFAULT, ASCENT_THRESHOLD, STOMP_BONUS,
    LANDING_SOUND_VARIANTS,
)
from .collisions import (
    HIT, STOMP, collect_power_up, resolve_monster_contacts, resolve_platform_landing,
)
from .events import (
    EventType, GameEvent, Intent, MonsterView, PickupView, PlatformView,
    PlayerPose, RunState, Snapshot, StepResult,
)
from .level import Level
from .player import Player

logger = logging.getLogger(__name__)


def frame_delta(elapsed_ms: float) -> float:
    """Wall-clock elapsed time as a multiple of the nominal frame, clamped."""
    return max(0.0, min(elapsed_ms / FRAME_MS, MAX_DELTA))


class Simulation:
    """
    One game session: player, level, score and run lifecycle.

    Per step, in order: entity update -> collisions -> camera/score -> snapshot.
    Nothing here calls into rendering or audio; callers consume the events
    returned with every step.
    """
    def __init__(self, seed: int | None = SEED_DEFAULT, best: int = 0):
        self.level = Level(seed)
        self.seed = self.level.seed
        self.player = Player()
        self.state = RunState.IDLE
        self.score = 0.0
        self.best = max(0, int(best))
        self.camera_offset = 0.0
        self.left = False
        self.right = False
        self.sfx_muted = False
        self.music_muted = False
        self._events: List[GameEvent] = []
        self._landing_sound = 0
        self._last_timestamp: Optional[float] = None
        self.level.populate()

    # -------------------- Lifecycle --------------------

    @property
    def running(self) -> bool:
        return self.state in (RunState.RUNNING, RunState.PAUSED, RunState.FALLING)

    @property
    def paused(self) -> bool:
        return self.state is RunState.PAUSED

    def start(self, seed: int | None = None) -> bool:
        """Start (or restart after the end) a run. Same seed replays the same layout."""
        if self.state not in (RunState.IDLE, RunState.ENDED):
            return False
        self.level = Level(self.seed if seed is None else seed)
        self.seed = self.level.seed
        self.level.populate()
        self.player.reset()
        self.score = 0.0
        self.camera_offset = 0.0
        self.clear_input()
        self._last_timestamp = None
        self.state = RunState.RUNNING
        logger.info("run started (seed=%s, best=%d)", self.seed, self.best)
        self._emit(EventType.RUN_STARTED, seed=self.seed)
        self._emit(EventType.MUSIC_PLAY)
        return True

    def pause(self) -> bool:
        if self.state is not RunState.RUNNING:
            return False
        self.state = RunState.PAUSED
        self.clear_input()
        self._emit(EventType.RUN_PAUSED)
        self._emit(EventType.MUSIC_PAUSE)
        return True

    def resume(self) -> bool:
        if self.state is not RunState.PAUSED:
            return False
        self.state = RunState.RUNNING
        # fresh baseline so the first delta after resume is zero
        self._last_timestamp = None
        self._emit(EventType.RUN_RESUMED)
        self._emit(EventType.MUSIC_PLAY)
        return True

    def toggle_pause(self, force: Optional[bool] = None) -> bool:
        want = (not self.paused) if force is None else force
        return self.pause() if want else self.resume()

    def end(self):
        final = int(self.score)
        new_best = final > self.best
        if new_best:
            self.best = final
        self.state = RunState.ENDED
        self.clear_input()
        logger.info("run ended (score=%d, best=%d)", final, self.best)
        self._emit(EventType.RUN_ENDED, score=final, best=self.best, new_best=new_best)

    def handle_intent(self, intent: Intent) -> bool:
        if intent is Intent.START:
            return self.start()
        if intent is Intent.TOGGLE_PAUSE:
            return self.toggle_pause()
        if intent is Intent.PAUSE:
            return self.pause()
        if intent is Intent.RESUME:
            return self.resume()
        if intent is Intent.TOGGLE_SFX_MUTE:
            self.sfx_muted = not self.sfx_muted
            self._emit(EventType.SFX_MUTED, muted=self.sfx_muted)
            return True
        if intent is Intent.TOGGLE_MUSIC_MUTE:
            self.music_muted = not self.music_muted
            self._emit(EventType.MUSIC_MUTED, muted=self.music_muted)
            return True
        return False

    # -------------------- Input --------------------

    def set_input(self, left: bool, right: bool):
        """Held directions, already OR'd across keyboard/touch. Ignored unless running."""
        if self.state is RunState.RUNNING:
            self.left, self.right = bool(left), bool(right)
        else:
            self.clear_input()

    def clear_input(self):
        self.left = False
        self.right = False

    def set_focus(self, focused: bool):
        if not focused:
            self.clear_input()
            self.pause()

    # -------------------- Stepping --------------------

    def tick(self, timestamp_ms: float) -> StepResult:
        """Advance from a wall-clock timestamp (e.g. pygame.time.get_ticks())."""
        if self._last_timestamp is None:
            self._last_timestamp = timestamp_ms
        delta = frame_delta(timestamp_ms - self._last_timestamp)
        self._last_timestamp = timestamp_ms
        return self.step(delta)

    def step(self, delta: float) -> StepResult:
        delta = max(0.0, min(delta, MAX_DELTA))
        if self.state is RunState.RUNNING:
            self._update_running(delta)
        elif self.state is RunState.FALLING:
            self._update_falling(delta)
        return StepResult(snapshot=self.snapshot(), events=tuple(self.drain_events()))

    def _update_running(self, delta: float):
        player = self.player

        # 1) entities
        previous_y = player.update_physics(delta, self.left, self.right)
        expired = player.tick_power_up(delta)
        if expired is not None:
            self._emit(EventType.POWERUP_EXPIRED, kind=expired)
        for plat in self.level.update(delta):
            self._emit(EventType.PLATFORM_BROKEN, platform_id=plat.id)

        # 2) collisions
        was_falling = player.vy > 0
        landed = resolve_platform_landing(player, previous_y, self.level.platforms)
        if landed is not None:
            self._emit(EventType.LANDED, variant=self._landing_sound,
                       platform_id=landed.id, platform_variant=landed.variant)
            self._landing_sound = (self._landing_sound + 1) % LANDING_SOUND_VARIANTS

        contact = resolve_monster_contacts(player, previous_y, was_falling, self.level.registry)
        if contact is not None and contact.outcome == HIT:
            self._emit(EventType.MONSTER_HIT, kind=contact.monster.kind)
            self.end()
            return
        if contact is not None and contact.outcome == STOMP:
            self.score += STOMP_BONUS
            self._emit(EventType.MONSTER_STOMPED, kind=contact.monster.kind)

        pickup = collect_power_up(player, self.level.platforms)
        if pickup is not None:
            self._emit(EventType.POWERUP_COLLECTED, kind=pickup.kind)

        # 3) camera / score
        self._scroll()

        if player.fell_out():
            self.state = RunState.FALLING
            self.clear_input()
            player.begin_falling()

    def _scroll(self):
        if self.player.y < ASCENT_THRESHOLD:
            shift = ASCENT_THRESHOLD - self.player.y
            self.player.y += shift
            self.level.shift(shift)
            self.score += shift
            self.camera_offset += shift
        self.level.recycle(self.score)

    def _update_falling(self, delta: float):
        self.player.update_death(delta)
        for plat in self.level.update(delta):
            self._emit(EventType.PLATFORM_BROKEN, platform_id=plat.id)
        if self.player.death.done:
            self.end()

    # -------------------- Events / snapshot --------------------

    def _emit(self, event_type: EventType, **data):
        self._events.append(GameEvent(event_type, data))

    def drain_events(self) -> List[GameEvent]:
        out, self._events = self._events, []
        return out

    def snapshot(self) -> Snapshot:
        p = self.player
        alpha = 1.0 - p.death.progress if p.death.active else 1.0
        pose = PlayerPose(
            x=p.x, y=p.y, width=p.width, height=p.height, facing=p.facing,
            vx=p.vx, vy=p.vy, rotation=p.death.rotation, alpha=alpha,
        )
        platforms = tuple(
            PlatformView(id=pl.id, x=pl.x, y=pl.y, width=pl.width, height=pl.height,
                         variant=pl.variant, break_progress=pl.break_progress)
            for pl in self.level.platforms
        )
        monsters = tuple(
            MonsterView(id=m.id, x=m.x, y=m.y, width=m.width, height=m.height, kind=m.kind)
            for m in self.level.monsters
        )
        pickups = tuple(
            PickupView(platform_id=pl.id, x=pl.power_up.x, y=pl.power_up.y,
                       size=pl.power_up.size, kind=pl.power_up.kind, pulse=pl.power_up.pulse)
            for pl in self.level.platforms
            if pl.power_up is not None and pl.power_up.active
        )
        return Snapshot(
            player=pose,
            platforms=platforms,
            monsters=monsters,
            pickups=pickups,
            camera_offset=self.camera_offset,
            score=self.score,
            best=self.best,
            state=self.state,
            power_up=p.power_up.kind if p.power_up else None,
            power_up_remaining_ms=p.power_up.remaining_ms if p.power_up else 0.0,
        )
