# Key symbol -> heading table shared by the Tkinter window and tests.
from __future__ import annotations


# Headings as (dx, dy); y grows downward like canvas coordinates.
ARROW_KEYS = {
    "Up": (0, -1),
    "Down": (0, 1),
    "Left": (-1, 0),
    "Right": (1, 0),
    # Browser-style names, accepted so recorded key logs replay unchanged.
    "ArrowUp": (0, -1),
    "ArrowDown": (0, 1),
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
}
LETTER_KEYS = {
    "w": (0, -1),
    "s": (0, 1),
    "a": (-1, 0),
    "d": (1, 0),
}

RESTART_KEYS = ("r", "R")
THEME_KEYS = ("t", "T")


def heading_for_key(key: str) -> tuple[int, int] | None:
    """Translate a key symbol to a heading; None for keys that do not steer."""
    if key in ARROW_KEYS:
        return ARROW_KEYS[key]
    if len(key) == 1:
        return LETTER_KEYS.get(key.lower())
    return None
