# src/tests/test_hop_env.py
"""
Tests for HopEnv (Gymnasium environment): API contract, smoke rollout, determinism.
"""
from __future__ import annotations
import os
from typing import List, Tuple

import numpy as np
import pytest
from gymnasium.utils.env_checker import check_env

from src.env.hop_env import HopEnv
from src.env.observations import OBS_SIZE, build_observation
from src.hop.config import WIDTH, HEIGHT
from src.hop.simulation import Simulation

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")


def test_api_check():
    env = HopEnv(frame_skip=4)
    try:
        check_env(env, skip_render_check=True)
    finally:
        env.close()


@pytest.mark.parametrize("frame_skip", [1, 4])
def test_smoke_rollout(frame_skip):
    env = HopEnv(frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=123)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        env.action_space.seed(0)
        for t in range(400):
            obs, r, term, trunc, info = env.step(env.action_space.sample())
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            if term or trunc:
                if term:
                    assert r == -1.0
                    assert info["death_cause"] in ("fall", "monster")
                break
    finally:
        env.close()


def test_determinism():
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = HopEnv(frame_skip=4)
        traj = []
        try:
            env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 3)) for _ in range(300)]
    t1, t2 = rollout(7, action_seq), rollout(7, action_seq)
    assert len(t1) == len(t2)
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        assert np.array_equal(o1, o2), f"obs mismatch at step {i}"
        assert (r1, te1, tr1) == (r2, te2, tr2), f"transition mismatch at step {i}"


def test_truncation_by_time_limit():
    env = HopEnv(frame_skip=4, time_limit_seconds=0.2)
    env.reset(seed=1)
    trunc = term = False
    for _ in range(10):
        _, _, term, trunc, _ = env.step(0)
        if term or trunc:
            break
    assert trunc or term


def test_rgb_render():
    env = HopEnv(render_mode="rgb_array")
    env.reset(seed=3)
    frame = env.render()
    assert frame.shape == (HEIGHT, WIDTH, 3) and frame.dtype == np.uint8
    env.close()


def test_observation_layout():
    sim = Simulation(seed=12)
    sim.start()
    obs = build_observation(sim.snapshot())
    assert obs.shape == (OBS_SIZE,) and obs.dtype == np.float32
    assert np.all(obs >= -1.0) and np.all(obs <= 1.0)
    assert obs[4] == 0.0 and obs[5] == 0.0 and obs[6] == 0.0
    sim.player.activate_power_up("glider")
    obs = build_observation(sim.snapshot())
    assert obs[5] == 1.0 and obs[6] == pytest.approx(1.0)
