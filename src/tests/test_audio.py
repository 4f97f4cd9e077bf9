# src/tests/test_audio.py
"""
Audio dispatcher with fake sounds: no mixer device needed.
"""
from __future__ import annotations
import pygame

from src.hop.audio import AudioMixer
from src.hop.config import SFX_VOLUME
from src.hop.events import EventType, GameEvent, Intent
from src.hop.simulation import Simulation


class FakeSound:
    def __init__(self, path, fail=False):
        self.path = path
        self.volume = 1.0
        self.plays = 0
        self.fail = fail

    def set_volume(self, v):
        self.volume = v

    def play(self):
        if self.fail:
            raise pygame.error("device busy")
        self.plays += 1


class FakeMusic:
    def __init__(self):
        self.calls = []

    def play(self):
        self.calls.append("play")

    def pause(self):
        self.calls.append("pause")

    def set_volume(self, v):
        self.calls.append(("volume", v))


def make_mixer():
    music = FakeMusic()
    mixer = AudioMixer(["l0", "l1", "l2"], {"stomp": "s", "hit": "h", "pickup": "p"},
                       music=music, sound_factory=FakeSound)
    return mixer, music


def test_landing_variant_picks_from_pool():
    mixer, _ = make_mixer()
    mixer.dispatch([GameEvent(EventType.LANDED, {"variant": 4})])
    assert [s.plays for s in mixer.landing_pool] == [0, 1, 0]
    assert all(s.volume == SFX_VOLUME for s in mixer.pool)


def test_effects_map_to_sounds():
    mixer, _ = make_mixer()
    mixer.dispatch([GameEvent(EventType.MONSTER_STOMPED), GameEvent(EventType.MONSTER_HIT),
                    GameEvent(EventType.POWERUP_COLLECTED), GameEvent(EventType.PLATFORM_BROKEN)])
    assert mixer.effects["stomp"].plays == 1
    assert mixer.effects["hit"].plays == 1
    assert mixer.effects["pickup"].plays == 1


def test_sfx_mute_silences_pool_and_future_effects():
    mixer, _ = make_mixer()
    mixer.dispatch([GameEvent(EventType.SFX_MUTED, {"muted": True})])
    assert mixer.sfx_muted
    assert all(s.volume == 0.0 for s in mixer.pool)
    mixer.dispatch([GameEvent(EventType.LANDED, {"variant": 0}), GameEvent(EventType.MONSTER_HIT)])
    assert sum(s.plays for s in mixer.pool) == 0
    mixer.dispatch([GameEvent(EventType.SFX_MUTED, {"muted": False})])
    assert all(s.volume == SFX_VOLUME for s in mixer.pool)


def test_music_follows_run_and_mute():
    mixer, music = make_mixer()
    mixer.dispatch([GameEvent(EventType.MUSIC_PLAY)])
    assert music.calls == ["play"]
    mixer.dispatch([GameEvent(EventType.MUSIC_MUTED, {"muted": True})])
    assert music.calls[-1] == "pause"
    mixer.dispatch([GameEvent(EventType.MUSIC_PLAY)])
    assert music.calls[-1] == "pause", "muted music stays paused"
    mixer.dispatch([GameEvent(EventType.MUSIC_MUTED, {"muted": False})])
    assert music.calls[-1] == "play"


def test_playback_failures_are_swallowed():
    mixer = AudioMixer(["a"], sound_factory=lambda p: FakeSound(p, fail=True))
    mixer.dispatch([GameEvent(EventType.LANDED, {"variant": 0})])


def test_unloadable_sounds_are_skipped():
    def factory(path):
        if path == "missing":
            raise FileNotFoundError(path)
        return FakeSound(path)

    mixer = AudioMixer(["missing", "ok"], {"hit": "missing"}, sound_factory=factory)
    assert [s.path for s in mixer.landing_pool] == ["ok"]
    assert mixer.effects == {}
    mixer.dispatch([GameEvent(EventType.MONSTER_HIT)])


def test_mute_toggle_end_to_end():
    sim = Simulation(seed=5)
    sim.start()
    mixer, _ = make_mixer()
    mixer.dispatch(sim.drain_events())
    before = sim.snapshot()
    sim.handle_intent(Intent.TOGGLE_SFX_MUTE)
    mixer.dispatch(sim.drain_events())
    assert all(s.volume == 0.0 for s in mixer.pool)
    assert sim.snapshot() == before
