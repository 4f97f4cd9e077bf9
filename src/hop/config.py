# --- Display ---
WIDTH = 400
HEIGHT = 640
FPS = 60
FRAME_MS = 1000.0 / FPS     # nominal frame length (ms), delta = elapsed / FRAME_MS
MAX_DELTA = 1.6             # clamp stalls (backgrounded window, slow frame)
SEED_DEFAULT = 12345

# --- Player ---
PLAYER_W = 42
PLAYER_H = 54
PLAYER_START_Y = HEIGHT - 140
PLAYER_START_VY = -8.0
FACING_DEADZONE = 0.15

# --- World / Physics (px per nominal frame) ---
GRAVITY = 0.35
JUMP_VELOCITY = -11.2
MOVE_ACCEL = 0.55
MOVE_FRICTION = 0.92
MAX_HORIZONTAL_SPEED = 6.0
MOTION_SCALE = 1.6          # position integration factor for the player
PLATFORM_MOTION_SCALE = 1.2

# --- Camera / Score ---
ASCENT_THRESHOLD = HEIGHT * 0.35
RECYCLE_CUTOFF_Y = HEIGHT + 14 * 2
SPAWN_CEILING_Y = -HEIGHT * 0.5   # keep content generated up to here

# --- Level generation ---
PLATFORM_W = 68
PLATFORM_H = 14
PLATFORM_MIN_GAP = 55
PLATFORM_MAX_GAP = 95
GROUND_Y = HEIGHT - 20
MIN_PLATFORM_COUNT = 12
MOVING_PLATFORM_PROB = 0.18
DEAD_PLATFORM_PROB = 0.22
BREAKABLE_PLATFORM_PROB = 0.12
MAX_CONSECUTIVE_DEAD = 1
MOVING_SPEED_MIN = 1.0
MOVING_SPEED_MAX = 1.6
BREAK_DELAY = 18.0          # frames between landing and removal
REACH_SAFETY = 0.85         # fraction of the physical jump apex we trust

# --- Monsters ---
MONSTER_W = 36
MONSTER_H = 30
MONSTER_BASE_PROB = 0.04
MONSTER_MAX_PROB = 0.16
MONSTER_SCORE_RAMP = 6000.0         # score at which spawn rate peaks
MONSTER_MIN_PLATFORM_W = 60
MONSTER_BOTTOM_MARGIN = 160         # no spawns this close to the bottom edge
MONSTER_INITIAL_MAX_Y = HEIGHT * 0.5  # first population: upper half only
MONSTER_SPEEDS = {
    "walker": (0.4, 0.8),
    "sprinter": (1.1, 1.7),
}
MONSTER_SPRINTER_CHANCE = 0.3
STOMP_TOLERANCE = 6.0
STOMP_BONUS = 150.0
STOMP_BOUNCE_SCALE = 0.85

# --- Power-ups ---
POWERUP_PROB = 0.06
POWERUP_SIZE = 26
POWERUP_KINDS = ("rocket", "glider")
# duration_ms, gravity, horizontal, jump, max_fall_speed, lift_cap
POWERUP_PROFILES = {
    "rocket": dict(duration_ms=2200.0, gravity=-1.4, horizontal=1.2, jump=1.0,
                   max_fall_speed=None, lift_cap=-15.0),
    "glider": dict(duration_ms=4500.0, gravity=0.45, horizontal=1.35, jump=1.1,
                   max_fall_speed=2.5, lift_cap=None),
}
PULSE_SPEED = 0.12          # radians per frame

# --- Death animation ---
DEATH_ANIMATION_FRAMES = 45.0
DEATH_SPIN_DEG = 8.0        # degrees per frame

# --- Audio ---
LANDING_SOUND_VARIANTS = 6
SFX_VOLUME = 0.55
MUSIC_VOLUME = 0.25

# --- Colors (RGB) ---
COLOR_BG = (255, 247, 214)
COLOR_FG = (17, 17, 17)
COLOR_ACCENT = (255, 203, 5)
COLOR_PLATFORM = {
    "static": (17, 17, 17),
    "moving": (44, 109, 242),
    "dead": (255, 27, 75),
    "breakable": (150, 98, 40),
}
COLOR_MONSTER = {
    "walker": (92, 168, 70),
    "sprinter": (168, 70, 160),
}
COLOR_POWERUP = {
    "rocket": (240, 120, 30),
    "glider": (80, 200, 220),
}
