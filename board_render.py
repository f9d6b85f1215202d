# Board presentation: snapshot -> scene description -> canvas items or an RGB frame.
from __future__ import annotations

from dataclasses import dataclass
import os

import matplotlib.image as mpimg
import numpy as np

try:
    from .game_logic import GameState, Snapshot
except ImportError:
    from game_logic import GameState, Snapshot


@dataclass(frozen=True)
class Theme:
    name: str
    background: str
    surface: str
    grid: str
    snake: str
    snake_head: str
    food: str
    text: str
    text_muted: str
    danger: str
    accent: str


LIGHT = Theme(
    name="light",
    background="#f9fafb",
    surface="#ffffff",
    grid="#e5e7eb",
    snake="#3b82f6",
    snake_head="#1d4ed8",
    food="#06b6d4",
    text="#111827",
    text_muted="#6b7280",
    danger="#ef4444",
    accent="#3b82f6",
)
DARK = Theme(
    name="dark",
    background="#101418",
    surface="#1c2229",
    grid="#293340",
    snake="#1fb86b",
    snake_head="#45d483",
    food="#ff5c74",
    text="#e6eef7",
    text_muted="#95a4b8",
    danger="#ff6b6b",
    accent="#42c4ff",
)
THEMES = {theme.name: theme for theme in (LIGHT, DARK)}

READY_TITLE = "Press Arrow Keys or WASD to Start"
READY_HINT = "Eat the food, avoid walls and yourself."
GAME_OVER_TITLE = "Game Over"


@dataclass(frozen=True)
class Shape:
    """One drawing primitive in board pixel coordinates."""
    kind: str                           # rect | oval | line | text
    coords: tuple[float, ...]
    fill: str
    alpha: float = 1.0
    text: str = ""
    font_size: int = 12
    bold: bool = False


def toggle_theme(name: str) -> str:
    return "dark" if name == "light" else "light"


def get_theme(name: str) -> Theme:
    try:
        return THEMES[name]
    except KeyError:
        raise ValueError(f"Unknown theme {name!r}; choose from {sorted(THEMES)}.")


def build_scene(snapshot: Snapshot, theme: Theme = LIGHT, cell_size: int = 20) -> tuple[Shape, ...]:
    """Describe the board for one snapshot. Same input, same scene."""
    size = snapshot.grid_size
    side = size * cell_size
    shapes: list[Shape] = [Shape("rect", (0, 0, side, side), theme.surface)]

    for i in range(size + 1):
        pos = i * cell_size
        shapes.append(Shape("line", (0, pos, side, pos), theme.grid))
        shapes.append(Shape("line", (pos, 0, pos, side), theme.grid))

    fx, fy = snapshot.food
    cx, cy = fx * cell_size + cell_size / 2, fy * cell_size + cell_size / 2
    radius = cell_size * 0.35
    shapes.append(Shape("oval", (cx - radius, cy - radius, cx + radius, cy + radius), theme.food))

    for idx, (x, y) in enumerate(snapshot.snake):
        color = theme.snake_head if idx == 0 else theme.snake
        shapes.append(
            Shape(
                "rect",
                (x * cell_size + 2, y * cell_size + 2, (x + 1) * cell_size - 2, (y + 1) * cell_size - 2),
                color,
            )
        )

    mid = side / 2
    if snapshot.state is GameState.READY:
        shapes.append(Shape("rect", (0, 0, side, side), theme.background, alpha=0.6))
        shapes.append(Shape("text", (mid, mid - 12), theme.text, text=READY_TITLE, font_size=14, bold=True))
        shapes.append(Shape("text", (mid, mid + 14), theme.text_muted, text=READY_HINT, font_size=11))
    elif snapshot.state is GameState.GAME_OVER:
        shapes.append(Shape("rect", (0, 0, side, side), theme.danger, alpha=0.08))
        shapes.append(Shape("text", (mid, mid - 12), theme.danger, text=GAME_OVER_TITLE, font_size=22, bold=True))
        shapes.append(
            Shape("text", (mid, mid + 20), theme.text_muted, text=f"Final Score: {snapshot.score}", font_size=12)
        )

    return tuple(shapes)


def hex_to_rgb(color: str) -> np.ndarray:
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb color, got {color!r}")
    return np.array([int(value[i : i + 2], 16) for i in (0, 2, 4)], dtype=np.float32)


def _paint(frame: np.ndarray, mask: tuple | np.ndarray, color: np.ndarray, alpha: float) -> None:
    if alpha >= 1.0:
        frame[mask] = color.astype(np.uint8)
        return
    region = frame[mask].astype(np.float32)
    frame[mask] = np.rint(region * (1.0 - alpha) + color * alpha).astype(np.uint8)


def rasterize(scene: tuple[Shape, ...], width: int, height: int) -> np.ndarray:
    """
    Paint a scene into an HxWx3 uint8 array.

    Text is left to the canvas painter; glyphs are not rasterized here.
    """
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    ys, xs = np.ogrid[0:height, 0:width]

    for shape in scene:
        color = hex_to_rgb(shape.fill)
        if shape.kind == "rect":
            x1, y1, x2, y2 = (int(round(v)) for v in shape.coords)
            x1, x2 = max(0, x1), min(width, x2)
            y1, y2 = max(0, y1), min(height, y2)
            if x1 < x2 and y1 < y2:
                _paint(frame, (slice(y1, y2), slice(x1, x2)), color, shape.alpha)
        elif shape.kind == "oval":
            x1, y1, x2, y2 = shape.coords
            cx, cy = (x1 + x2) / 2, (y1 + y2) / 2
            rx, ry = (x2 - x1) / 2, (y2 - y1) / 2
            mask = ((xs + 0.5 - cx) / rx) ** 2 + ((ys + 0.5 - cy) / ry) ** 2 <= 1.0
            _paint(frame, mask, color, shape.alpha)
        elif shape.kind == "line":
            x1, y1, x2, y2 = (int(round(v)) for v in shape.coords)
            if y1 == y2:
                row = min(max(y1, 0), height - 1)
                _paint(frame, (slice(row, row + 1), slice(max(0, x1), min(width, x2))), color, shape.alpha)
            elif x1 == x2:
                col = min(max(x1, 0), width - 1)
                _paint(frame, (slice(max(0, y1), min(height, y2)), slice(col, col + 1)), color, shape.alpha)
            else:
                raise ValueError("Only horizontal and vertical lines are supported.")
        elif shape.kind != "text":
            raise ValueError(f"Unknown shape kind: {shape.kind}")

    return frame


def render_frame(snapshot: Snapshot, theme: Theme = LIGHT, cell_size: int = 20) -> np.ndarray:
    side = snapshot.grid_size * cell_size
    return rasterize(build_scene(snapshot, theme, cell_size), side, side)


def save_frame(snapshot: Snapshot, path: str, theme: Theme = LIGHT, cell_size: int = 20) -> str:
    """Write the board for one snapshot as a PNG and return the absolute path."""
    frame = render_frame(snapshot, theme, cell_size)
    path = os.path.abspath(path)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    mpimg.imsave(path, frame)
    return path
