# src/hop/game.py
import sys, argparse, logging
from pathlib import Path
import pygame
from pygame import K_SPACE, K_ESCAPE, K_LEFT, K_RIGHT, K_a, K_d, K_p, K_m, K_n
from .config import WIDTH, HEIGHT, FPS, COLOR_FG, SEED_DEFAULT
from .audio import AudioMixer
from .events import EventType, Intent, RunState
from .highscore import DEFAULT_BEST_FILE, load_best, save_best
from .render import draw_snapshot
from .simulation import Simulation

logger = logging.getLogger(__name__)

LEFT_KEYS = (K_LEFT, K_a)
RIGHT_KEYS = (K_RIGHT, K_d)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Doodle Hop: endless vertical platformer")
    p.add_argument("--seed", type=int, default=None,
                   help="Level seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--best-file", type=Path, default=DEFAULT_BEST_FILE,
                   help="Where the best score is kept")
    p.add_argument("--assets", type=Path, default=Path("assets"),
                   help="Folder holding fx/ and music/")
    p.add_argument("--mute", action="store_true", help="Start with sound effects muted")
    p.add_argument("--no-music", action="store_true", help="Start with music muted")
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def resolve_seed(seed):
    # None -> SEED_DEFAULT; -1 -> random (Level picks one)
    if seed is None:
        return SEED_DEFAULT
    if seed == -1:
        return None
    return seed


def make_mixer(assets: Path) -> AudioMixer:
    try:
        pygame.mixer.init()
    except pygame.error as e:
        logger.warning("no audio device, running silent: %s", e)
        return AudioMixer()
    return AudioMixer.from_directory(assets)


def draw_overlay(screen, font, lines):
    panel = pygame.Surface((WIDTH - 60, 26 * len(lines) + 24), pygame.SRCALPHA)
    panel.fill((255, 255, 255, 210))
    rect = panel.get_rect(center=(WIDTH // 2, HEIGHT // 2))
    screen.blit(panel, rect)
    for i, msg in enumerate(lines):
        txt = font.render(msg, True, COLOR_FG)
        screen.blit(txt, (rect.centerx - txt.get_width() // 2, rect.top + 12 + 26 * i))


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    pygame.display.set_caption("Doodle Hop")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)

    sim = Simulation(seed=resolve_seed(args.seed), best=load_best(args.best_file))
    mixer = make_mixer(args.assets)
    if args.mute:
        sim.handle_intent(Intent.TOGGLE_SFX_MUTE)
    if args.no_music:
        sim.handle_intent(Intent.TOGGLE_MUSIC_MUTE)
    held = set()

    while True:
        clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.WINDOWFOCUSLOST:
                held.clear()
                sim.set_focus(False)
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                elif event.key == K_m:
                    sim.handle_intent(Intent.TOGGLE_SFX_MUTE)
                elif event.key == K_n:
                    sim.handle_intent(Intent.TOGGLE_MUSIC_MUTE)
                elif event.key == K_p:
                    sim.handle_intent(Intent.TOGGLE_PAUSE)
                    held.clear()
                elif event.key == K_SPACE and not sim.running:
                    sim.handle_intent(Intent.START)
                else:
                    held.add(event.key)
            if event.type == pygame.KEYUP:
                held.discard(event.key)

        sim.set_input(left=any(k in held for k in LEFT_KEYS),
                      right=any(k in held for k in RIGHT_KEYS))
        result = sim.tick(pygame.time.get_ticks())
        mixer.dispatch(result.events)
        for ev in result.events:
            if ev.type is EventType.RUN_ENDED and ev.data.get("new_best"):
                save_best(ev.data["best"], args.best_file)

        # --- Render ---
        snap = result.snapshot
        draw_snapshot(screen, snap, font)
        if snap.state is RunState.IDLE:
            draw_overlay(screen, font, ["Doodle Hop", "SPACE to start", "←/→ move  P pause  M/N mute"])
        elif snap.state is RunState.PAUSED:
            draw_overlay(screen, font, ["Paused", "P to resume"])
        elif snap.state is RunState.ENDED:
            draw_overlay(screen, font, [f"Final score: {snap.display_score}",
                                        f"Best: {snap.best}", "SPACE to restart"])

        pygame.display.flip()


if __name__ == "__main__":
    run()
