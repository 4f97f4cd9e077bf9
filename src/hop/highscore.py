# src/hop/highscore.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_BEST_FILE = Path.home() / ".doodle_hop_best"


def load_best(path: Union[str, Path] = DEFAULT_BEST_FILE) -> int:
    """Stored best score; anything missing or malformed counts as 0."""
    p = Path(path)
    if not p.exists():
        return 0
    try:
        value = int(p.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        logger.warning("ignoring unreadable best score file %s", p)
        return 0
    return value if value >= 0 else 0


def save_best(value: int, path: Union[str, Path] = DEFAULT_BEST_FILE) -> bool:
    p = Path(path)
    try:
        p.write_text(str(max(0, int(value))), encoding="utf-8")
    except OSError as e:
        logger.warning("could not write best score to %s: %s", p, e)
        return False
    logger.info("best score %d written to %s", value, p)
    return True
