# Core Snake game state and rules, independent from GUI/network code.
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
import random
from typing import Callable, Protocol

try:
    from .controls import heading_for_key
except ImportError:
    from controls import heading_for_key


logger = logging.getLogger(__name__)

Cell = tuple[int, int]
Heading = tuple[int, int]

GRID_SIZE = 20

UP: Heading = (0, -1)
DOWN: Heading = (0, 1)
LEFT: Heading = (-1, 0)
RIGHT: Heading = (1, 0)
HEADINGS = (UP, DOWN, LEFT, RIGHT)

INITIAL_SNAKE: tuple[Cell, ...] = ((8, 10), (7, 10), (6, 10))
INITIAL_HEADING = RIGHT
INITIAL_FOOD: Cell = (12, 10)

# Bounds used when validating settings from the CLI.
MIN_GRID_SIZE = 8
MAX_GRID_SIZE = 60
MIN_CELL_SIZE = 8
MAX_CELL_SIZE = 48
MIN_TICK_MS = 40
MAX_TICK_MS = 500
MIN_INITIAL_LENGTH = 3


class GameState(Enum):
    READY = "ready"
    RUNNING = "running"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class SnakeConfig:
    """Runtime settings shared between the logic layer and GUI."""
    grid_size: int = GRID_SIZE
    cell_size: int = 20
    tick_ms: int = 120
    initial_snake: tuple[Cell, ...] = INITIAL_SNAKE
    initial_heading: Heading = INITIAL_HEADING
    initial_food: Cell = INITIAL_FOOD

    def __post_init__(self) -> None:
        if not (MIN_GRID_SIZE <= self.grid_size <= MAX_GRID_SIZE):
            raise ValueError(f"Grid size must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}.")
        if not (MIN_CELL_SIZE <= self.cell_size <= MAX_CELL_SIZE):
            raise ValueError(f"Cell size must be between {MIN_CELL_SIZE} and {MAX_CELL_SIZE}.")
        if not (MIN_TICK_MS <= self.tick_ms <= MAX_TICK_MS):
            raise ValueError(f"Tick interval must be between {MIN_TICK_MS} and {MAX_TICK_MS} ms.")
        if self.initial_heading not in HEADINGS:
            raise ValueError(f"Unknown heading: {self.initial_heading}")
        if len(self.initial_snake) < MIN_INITIAL_LENGTH:
            raise ValueError(f"Initial snake needs at least {MIN_INITIAL_LENGTH} cells.")
        if len(set(self.initial_snake)) != len(self.initial_snake):
            raise ValueError("Initial snake cells must be unique.")
        for cell in (*self.initial_snake, self.initial_food):
            if not in_bounds(cell, self.grid_size):
                raise ValueError(f"Cell {cell} is outside the {self.grid_size}x{self.grid_size} grid.")
        if self.initial_food in self.initial_snake:
            raise ValueError("Initial food cannot overlap the snake.")


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of one game at one tick; the renderer only ever sees this."""
    snake: tuple[Cell, ...]
    heading: Heading                    # heading applied on the last tick
    food: Cell
    score: int = 0
    state: GameState = GameState.READY
    pending: Heading | None = None      # queued from input; applied next tick
    grid_size: int = GRID_SIZE

    @property
    def head(self) -> Cell:
        return self.snake[0]


def in_bounds(cell: Cell, grid_size: int = GRID_SIZE) -> bool:
    x, y = cell
    return 0 <= x < grid_size and 0 <= y < grid_size


def is_reversal(candidate: Heading, current: Heading) -> bool:
    return candidate[0] + current[0] == 0 and candidate[1] + current[1] == 0


def spawn_food(occupied: set[Cell], rng: random.Random | None = None, grid_size: int = GRID_SIZE) -> Cell:
    """Pick a uniformly random free cell by rejection sampling.

    Never returns if ``occupied`` covers the whole grid; the board is far larger
    than any snake reached in practice.
    """
    rng = rng or random
    while True:
        cell = (rng.randrange(grid_size), rng.randrange(grid_size))
        if cell not in occupied:
            return cell


def initial_snapshot(config: SnakeConfig | None = None) -> Snapshot:
    config = config or SnakeConfig()
    return Snapshot(
        snake=tuple(config.initial_snake),
        heading=config.initial_heading,
        food=config.initial_food,
        grid_size=config.grid_size,
    )


def advance(snapshot: Snapshot, rng: random.Random | None = None) -> Snapshot:
    """Advance one tick. Anything other than a running game is returned as-is."""
    if snapshot.state is not GameState.RUNNING:
        return snapshot

    heading = snapshot.heading
    if snapshot.pending is not None and not is_reversal(snapshot.pending, heading):
        heading = snapshot.pending

    head_x, head_y = snapshot.head
    new_head = (head_x + heading[0], head_y + heading[1])

    if not in_bounds(new_head, snapshot.grid_size):
        return replace(snapshot, state=GameState.GAME_OVER, pending=None)

    # The pre-move body still includes the tail, so chasing the tail is fatal.
    if new_head in snapshot.snake:
        return replace(snapshot, state=GameState.GAME_OVER, pending=None)

    body = (new_head, *snapshot.snake)
    if new_head == snapshot.food:
        return replace(
            snapshot,
            snake=body,
            heading=heading,
            pending=None,
            score=snapshot.score + 1,
            food=spawn_food(set(body), rng, snapshot.grid_size),
        )
    return replace(snapshot, snake=body[:-1], heading=heading, pending=None)


class TickTimer(Protocol):
    def start(self, callback: Callable[[], object]) -> None: ...

    def stop(self) -> None: ...


class ScoreSink(Protocol):
    def report(self, score: int) -> None: ...


class SnakeGame:
    """One game session: owns the snapshot, the tick timer and the score sink."""
    def __init__(
        self,
        config: SnakeConfig | None = None,
        timer: TickTimer | None = None,
        score_sink: ScoreSink | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or SnakeConfig()
        self.timer = timer
        self.score_sink = score_sink
        self.rng = rng or random.Random()
        self.snapshot = initial_snapshot(self.config)
        self.best_score = 0                 # survives restarts

    def __repr__(self) -> str:
        snap = self.snapshot
        return (
            f"<SnakeGame state={snap.state.value} score={snap.score} "
            f"length={len(snap.snake)} best={self.best_score}>"
        )

    @property
    def state(self) -> GameState:
        return self.snapshot.state

    def on_direction(self, key: str) -> bool:
        """Handle a key symbol; unmapped keys are ignored."""
        heading = heading_for_key(key)
        if heading is None:
            return False
        return self.queue_heading(heading)

    def queue_heading(self, heading: Heading) -> bool:
        """Queue an input heading; reject instant 180-degree turns."""
        snap = self.snapshot
        if snap.state is GameState.GAME_OVER:
            return False
        current = snap.pending if snap.pending is not None else snap.heading
        if is_reversal(heading, current):
            return False

        if snap.state is GameState.READY:
            self.snapshot = replace(snap, pending=heading, state=GameState.RUNNING)
            logger.debug("Game started heading %s", heading)
            self._start_timer()
        else:
            self.snapshot = replace(snap, pending=heading)
        return True

    def step(self) -> Snapshot:
        """Single tick of the game loop, driven by the timer."""
        previous = self.snapshot
        self.snapshot = advance(previous, self.rng)

        if previous.state is GameState.RUNNING and self.snapshot.state is GameState.GAME_OVER:
            self._stop_timer()
            self._finish(self.snapshot.score)
        return self.snapshot

    def restart(self) -> None:
        """Reset state using current config values."""
        self._stop_timer()
        self.snapshot = initial_snapshot(self.config)
        logger.debug("Game restarted")

    def close(self) -> None:
        self._stop_timer()

    def _finish(self, score: int) -> None:
        self.best_score = max(self.best_score, score)
        logger.info("Game over with score %d (best %d)", score, self.best_score)
        if score > 0 and self.score_sink is not None:
            self.score_sink.report(score)

    def _start_timer(self) -> None:
        if self.timer is None:
            return
        self.timer.stop()
        self.timer.start(self.step)

    def _stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.stop()
