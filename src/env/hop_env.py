# src/env/hop_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from src.hop.config import WIDTH, HEIGHT, FPS
from src.hop.events import EventType, RunState
from src.hop.render import draw_snapshot
from src.hop.simulation import Simulation
from src.env.observations import OBS_SIZE, build_observation

REWARD_SCALE = 100.0


class HopEnv(gym.Env):
    """
    Doodle Hop Gymnasium environment (vector observations).
    - One internal frame = delta 1.0 (nominal 60 fps step).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Actions: 0 = NOOP, 1 = LEFT, 2 = RIGHT.
    """
    metadata = {"render_modes": ["rgb_array"], "render_fps": FPS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.delta = 1.0

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(FPS * time_limit_seconds / self.frame_skip)

        self.action_space = gym.spaces.Discrete(3)
        self.observation_space = gym.spaces.Box(low=-1.0, high=1.0, shape=(OBS_SIZE,), dtype=np.float32)

        self.sim: Optional[Simulation] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None
        self.death_cause: Optional[str] = None   # "monster" | "fall" | None
        self.landings: int = 0

        self._surface: Optional[pygame.Surface] = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # Level seed always comes from np_random so reset(seed=s) is reproducible
        level_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.sim = Simulation(seed=level_seed)
        self.sim.start()
        self.sim.drain_events()

        self.timestep = 0
        self.current_seed = level_seed
        self.death_cause = None
        self.landings = 0

        obs = build_observation(self.sim.snapshot())
        info = {"seed": self.current_seed, "score": 0.0}
        return obs, info

    def step(self, action):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.sim is not None, "call reset() first"

        left, right = action == 1, action == 2
        score_before = self.sim.score
        snap = None

        for _ in range(self.frame_skip):
            self.sim.set_input(left, right)
            result = self.sim.step(self.delta)
            snap = result.snapshot
            for ev in result.events:
                if ev.type is EventType.LANDED:
                    self.landings += 1
                elif ev.type is EventType.MONSTER_HIT:
                    self.death_cause = "monster"
            if self.sim.state is not RunState.RUNNING:
                if self.death_cause is None:
                    self.death_cause = "fall"
                break

        terminated = self.sim.state in (RunState.FALLING, RunState.ENDED)
        if terminated:
            reward = -1.0
        else:
            reward = float((self.sim.score - score_before) / REWARD_SCALE)

        self.timestep += 1
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = build_observation(snap)
        info = {
            "score": self.sim.score,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "landings": self.landings,
            "death_cause": self.death_cause,
        }
        return obs, reward, terminated, truncated, info

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.sim is None:
            return None
        if self._surface is None:
            self._surface = pygame.Surface((WIDTH, HEIGHT))
        draw_snapshot(self._surface, self.sim.snapshot())
        arr = pygame.surfarray.array3d(self._surface)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        self._surface = None
