# src/hop/events.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class EventType(Enum):
    LANDED = "landed"                    # data: variant (landing sound index)
    MONSTER_STOMPED = "monster_stomped"
    MONSTER_HIT = "monster_hit"
    POWERUP_COLLECTED = "powerup_collected"
    POWERUP_EXPIRED = "powerup_expired"
    PLATFORM_BROKEN = "platform_broken"
    RUN_STARTED = "run_started"
    RUN_PAUSED = "run_paused"
    RUN_RESUMED = "run_resumed"
    RUN_ENDED = "run_ended"
    MUSIC_PLAY = "music_play"
    MUSIC_PAUSE = "music_pause"
    SFX_MUTED = "sfx_muted"
    MUSIC_MUTED = "music_muted"


@dataclass(frozen=True)
class GameEvent:
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)


class Intent(Enum):
    START = "start"
    TOGGLE_PAUSE = "toggle_pause"
    PAUSE = "pause"
    RESUME = "resume"
    TOGGLE_SFX_MUTE = "toggle_sfx_mute"
    TOGGLE_MUSIC_MUTE = "toggle_music_mute"


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FALLING = "falling"
    ENDED = "ended"


# --- Render snapshot (read-only view handed to presentation) ---

@dataclass(frozen=True)
class PlayerPose:
    x: float
    y: float
    width: int
    height: int
    facing: int
    vx: float
    vy: float
    rotation: float = 0.0
    alpha: float = 1.0


@dataclass(frozen=True)
class PlatformView:
    id: int
    x: float
    y: float
    width: int
    height: int
    variant: str
    break_progress: float = 0.0


@dataclass(frozen=True)
class MonsterView:
    id: int
    x: float
    y: float
    width: int
    height: int
    kind: str


@dataclass(frozen=True)
class PickupView:
    platform_id: int
    x: float
    y: float
    size: int
    kind: str
    pulse: float


@dataclass(frozen=True)
class Snapshot:
    player: PlayerPose
    platforms: Tuple[PlatformView, ...]
    monsters: Tuple[MonsterView, ...]
    pickups: Tuple[PickupView, ...]
    camera_offset: float
    score: float
    best: int
    state: RunState
    power_up: Optional[str] = None
    power_up_remaining_ms: float = 0.0

    @property
    def display_score(self) -> int:
        return int(self.score)

    @property
    def running(self) -> bool:
        return self.state in (RunState.RUNNING, RunState.PAUSED, RunState.FALLING)

    @property
    def paused(self) -> bool:
        return self.state is RunState.PAUSED

    @property
    def falling(self) -> bool:
        return self.state is RunState.FALLING


@dataclass(frozen=True)
class StepResult:
    snapshot: Snapshot
    events: Tuple[GameEvent, ...] = ()
