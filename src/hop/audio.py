# src/hop/audio.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union
import pygame
from .config import SFX_VOLUME, MUSIC_VOLUME
from .events import EventType, GameEvent

logger = logging.getLogger(__name__)

EFFECT_FOR_EVENT = {
    EventType.MONSTER_STOMPED: "stomp",
    EventType.MONSTER_HIT: "hit",
    EventType.POWERUP_COLLECTED: "pickup",
    EventType.PLATFORM_BROKEN: "break",
}

MEDIA_ERRORS = (pygame.error, OSError)


class MixerMusic:
    """Looping background track on pygame.mixer.music. Never raises."""
    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        self._loaded = False
        self._playing = False

    def play(self):
        try:
            if not self._loaded:
                pygame.mixer.music.load(self.path)
                pygame.mixer.music.set_volume(MUSIC_VOLUME)
                pygame.mixer.music.play(loops=-1)
                self._loaded = True
            elif not self._playing:
                pygame.mixer.music.unpause()
            self._playing = True
        except MEDIA_ERRORS as e:
            logger.warning("music playback failed: %s", e)
            self._playing = False

    def pause(self):
        try:
            if self._playing:
                pygame.mixer.music.pause()
        except MEDIA_ERRORS as e:
            logger.warning("music pause failed: %s", e)
        self._playing = False

    def set_volume(self, volume: float):
        try:
            pygame.mixer.music.set_volume(volume)
        except MEDIA_ERRORS as e:
            logger.warning("music volume failed: %s", e)


class AudioMixer:
    """
    Consumes simulation events and plays them. Fire-and-forget:
    failed playback is logged and dropped, the game never waits on audio.
    """
    def __init__(self,
                 landing_sounds: Sequence[Union[str, Path]] = (),
                 effects: Optional[Dict[str, Union[str, Path]]] = None,
                 music=None,
                 sound_factory: Optional[Callable] = None):
        factory = sound_factory if sound_factory is not None else pygame.mixer.Sound
        self.landing_pool: List = [s for s in (self._load(factory, p) for p in landing_sounds) if s is not None]
        self.effects: Dict[str, object] = {}
        for name, path in (effects or {}).items():
            sound = self._load(factory, path)
            if sound is not None:
                self.effects[name] = sound
        self.music = music
        self.sfx_muted = False
        self.music_muted = False
        self._music_wanted = False

    @classmethod
    def from_directory(cls, root: Union[str, Path], sound_factory: Optional[Callable] = None) -> "AudioMixer":
        """Layout: fx/land_*.ogg, fx/<effect>.ogg, music/theme.ogg. Missing files are skipped."""
        root = Path(root)
        landing = sorted((root / "fx").glob("land_*.ogg"))
        effects = {name: root / "fx" / f"{name}.ogg" for name in EFFECT_FOR_EVENT.values()}
        effects = {name: p for name, p in effects.items() if p.exists()}
        theme = root / "music" / "theme.ogg"
        music = MixerMusic(theme) if theme.exists() else None
        return cls(landing, effects, music=music, sound_factory=sound_factory)

    @staticmethod
    def _load(factory: Callable, path):
        try:
            sound = factory(str(path))
            sound.set_volume(SFX_VOLUME)
            return sound
        except MEDIA_ERRORS as e:
            logger.warning("could not load sound %s: %s", path, e)
            return None

    @property
    def pool(self) -> List:
        return self.landing_pool + list(self.effects.values())

    # -------------------- Mute --------------------

    def set_sfx_muted(self, muted: bool):
        self.sfx_muted = bool(muted)
        for sound in self.pool:
            try:
                sound.set_volume(0.0 if self.sfx_muted else SFX_VOLUME)
            except MEDIA_ERRORS as e:
                logger.warning("volume change failed: %s", e)

    def set_music_muted(self, muted: bool):
        self.music_muted = bool(muted)
        if self.music is None:
            return
        self.music.set_volume(0.0 if self.music_muted else MUSIC_VOLUME)
        if self.music_muted:
            self.music.pause()
        elif self._music_wanted:
            self.music.play()

    # -------------------- Playback --------------------

    def _play(self, sound):
        if sound is None or self.sfx_muted:
            return
        try:
            sound.play()
        except MEDIA_ERRORS as e:
            logger.warning("sound playback failed: %s", e)

    def dispatch(self, events: Iterable[GameEvent]):
        for ev in events:
            if ev.type is EventType.LANDED:
                if self.landing_pool:
                    self._play(self.landing_pool[ev.data.get("variant", 0) % len(self.landing_pool)])
            elif ev.type in EFFECT_FOR_EVENT:
                self._play(self.effects.get(EFFECT_FOR_EVENT[ev.type]))
            elif ev.type is EventType.MUSIC_PLAY:
                self._music_wanted = True
                if self.music is not None and not self.music_muted:
                    self.music.play()
            elif ev.type is EventType.MUSIC_PAUSE:
                self._music_wanted = False
                if self.music is not None:
                    self.music.pause()
            elif ev.type is EventType.SFX_MUTED:
                self.set_sfx_muted(ev.data.get("muted", not self.sfx_muted))
            elif ev.type is EventType.MUSIC_MUTED:
                self.set_music_muted(ev.data.get("muted", not self.music_muted))
