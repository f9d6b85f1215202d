"""
Tests for the tick transition and the SnakeGame session.
"""

from dataclasses import replace
import random

import pytest

from game_logic import (
    DOWN,
    GRID_SIZE,
    INITIAL_FOOD,
    INITIAL_HEADING,
    INITIAL_SNAKE,
    LEFT,
    RIGHT,
    UP,
    GameState,
    SnakeConfig,
    SnakeGame,
    Snapshot,
    advance,
    in_bounds,
    initial_snapshot,
    spawn_food,
)


class FakeTimer:
    """Records start/stop calls instead of scheduling anything."""

    def __init__(self):
        self.starts = 0
        self.stops = 0
        self.callback = None

    @property
    def active(self):
        return self.callback is not None

    def start(self, callback):
        self.starts += 1
        self.callback = callback

    def stop(self):
        self.stops += 1
        self.callback = None


class RecordingSink:
    def __init__(self):
        self.reported = []

    def report(self, score):
        self.reported.append(score)


def running(**overrides):
    snap = replace(initial_snapshot(), state=GameState.RUNNING)
    return replace(snap, **overrides)


@pytest.fixture
def game():
    return SnakeGame(timer=FakeTimer(), score_sink=RecordingSink(), rng=random.Random(7))


def test_in_bounds_edges():
    assert in_bounds((0, 0))
    assert in_bounds((GRID_SIZE - 1, GRID_SIZE - 1))
    assert not in_bounds((-1, 5))
    assert not in_bounds((5, GRID_SIZE))
    assert not in_bounds((GRID_SIZE, 0))


def test_spawn_food_only_returns_free_cell():
    free = (13, 4)
    occupied = {(x, y) for x in range(GRID_SIZE) for y in range(GRID_SIZE)} - {free}
    assert spawn_food(occupied, random.Random(1)) == free


def test_initial_snapshot_values():
    snap = initial_snapshot()
    assert snap.snake == INITIAL_SNAKE == ((8, 10), (7, 10), (6, 10))
    assert snap.heading == INITIAL_HEADING == RIGHT
    assert snap.food == INITIAL_FOOD == (12, 10)
    assert snap.score == 0
    assert snap.pending is None
    assert snap.state is GameState.READY


def test_advance_ignores_non_running_states():
    ready = initial_snapshot()
    assert advance(ready) is ready
    over = replace(ready, state=GameState.GAME_OVER)
    assert advance(over) is over


def test_four_ticks_reach_and_eat_food():
    snap = running()
    rng = random.Random(3)
    for expected_x in (9, 10, 11):
        snap = advance(snap, rng)
        assert snap.head == (expected_x, 10)
        assert len(snap.snake) == 3
        assert snap.score == 0

    snap = advance(snap, rng)
    assert snap.head == (12, 10)
    assert snap.score == 1
    assert len(snap.snake) == 4
    assert snap.food not in snap.snake
    assert snap.state is GameState.RUNNING


def test_wall_collision_freezes_snapshot():
    snap = running(snake=((0, 5), (1, 5), (2, 5)), heading=LEFT, food=(10, 10), score=2)
    over = advance(snap)
    assert over.state is GameState.GAME_OVER
    assert over.snake == snap.snake
    assert over.food == snap.food
    assert over.score == 2
    assert advance(over) is over


def test_moving_into_vacating_tail_is_fatal():
    # Head at (5,5) moving up-to-right; the tail sits at (6,5) and would leave this tick.
    snake = ((5, 5), (5, 6), (6, 6), (6, 5))
    snap = running(snake=snake, heading=UP, pending=RIGHT, food=(15, 15))
    over = advance(snap)
    assert over.state is GameState.GAME_OVER
    assert over.snake == snake


def test_pending_reversal_is_not_applied():
    snap = running(pending=LEFT)
    moved = advance(snap)
    assert moved.head == (9, 10)
    assert moved.heading == RIGHT
    assert moved.pending is None


def test_last_heading_is_kept_without_input():
    snap = running(pending=DOWN)
    snap = advance(snap)
    assert snap.heading == DOWN
    snap = advance(snap)
    assert snap.head == (8, 12)


def test_config_rejects_food_on_snake():
    with pytest.raises(ValueError):
        SnakeConfig(initial_food=(7, 10))


def test_config_rejects_out_of_range_tick():
    with pytest.raises(ValueError):
        SnakeConfig(tick_ms=5)


def test_first_input_starts_game_and_timer(game):
    assert game.state is GameState.READY
    assert game.on_direction("Up")
    assert game.state is GameState.RUNNING
    assert game.timer.starts == 1
    assert game.timer.active


def test_unmapped_key_is_ignored(game):
    assert not game.on_direction("space")
    assert not game.on_direction("q")
    assert game.state is GameState.READY
    assert game.timer.starts == 0


def test_opposite_inputs_in_one_tick_keep_direction(game):
    assert game.on_direction("Right")
    assert not game.on_direction("Left")
    snap = game.step()
    assert snap.head == (9, 10)
    assert snap.heading == RIGHT


def test_reversal_sneaking_through_pending_is_blocked(game):
    game.on_direction("d")
    game.step()
    # Up then Left passes the input check but Left still reverses the applied heading.
    assert game.on_direction("w")
    assert game.on_direction("a")
    snap = game.step()
    assert snap.heading == RIGHT
    assert snap.head == (10, 10)


def test_last_input_wins_within_tick(game):
    game.on_direction("d")
    game.step()
    # Up is queued, then overwritten by Right before the tick fires.
    assert game.on_direction("w")
    assert game.on_direction("d")
    snap = game.step()
    assert snap.heading == RIGHT
    assert snap.head == (10, 10)


def test_reverse_of_pending_input_is_dropped(game):
    game.on_direction("d")
    game.step()
    assert game.on_direction("w")
    assert not game.on_direction("s")
    snap = game.step()
    assert snap.heading == UP
    assert snap.head == (9, 9)


def test_game_over_stops_timer_and_reports(game):
    game.on_direction("Up")
    game.snapshot = running(snake=((0, 3), (1, 3), (2, 3)), heading=LEFT, food=(9, 9), score=4)
    stops_before = game.timer.stops

    snap = game.step()

    assert snap.state is GameState.GAME_OVER
    assert game.timer.stops == stops_before + 1
    assert not game.timer.active
    assert game.score_sink.reported == [4]
    assert game.best_score == 4

    # Further ticks neither move nor report again.
    assert game.step() == snap
    assert game.score_sink.reported == [4]


def test_zero_score_is_not_reported(game):
    game.on_direction("Up")
    game.snapshot = running(snake=((0, 3), (1, 3), (2, 3)), heading=LEFT, food=(9, 9))
    game.step()
    assert game.state is GameState.GAME_OVER
    assert game.score_sink.reported == []


def test_input_after_game_over_is_ignored(game):
    game.snapshot = replace(initial_snapshot(), state=GameState.GAME_OVER)
    assert not game.on_direction("Down")
    assert game.state is GameState.GAME_OVER


def test_restart_restores_initial_values_and_new_timer(game):
    game.on_direction("Up")
    game.snapshot = running(snake=((0, 3), (1, 3), (2, 3)), heading=LEFT, food=(9, 9), score=6)
    game.step()

    game.restart()
    assert game.snapshot == initial_snapshot(game.config)
    assert game.best_score == 6
    assert not game.timer.active

    game.on_direction("Down")
    assert game.timer.starts == 2
    assert game.timer.active


def test_close_stops_timer(game):
    game.on_direction("Up")
    game.close()
    assert not game.timer.active


def test_session_without_timer_or_sink():
    game = SnakeGame(rng=random.Random(0))
    game.on_direction("Right")
    game.snapshot = running(snake=((19, 1), (18, 1), (17, 1)), food=(0, 0), score=1)
    assert game.step().state is GameState.GAME_OVER


def test_random_play_keeps_invariants():
    rng = random.Random(1234)
    game = SnakeGame(timer=FakeTimer(), score_sink=RecordingSink(), rng=random.Random(99))
    keys = ["Up", "Down", "Left", "Right", "w", "a", "s", "d", "x"]

    for _ in range(2000):
        if game.state is GameState.GAME_OVER:
            game.restart()
        game.on_direction(rng.choice(keys))
        if game.state is not GameState.RUNNING:
            continue

        before = game.snapshot
        after = game.step()
        if after.state is not GameState.RUNNING:
            assert after.snake == before.snake
            continue

        assert all(in_bounds(cell) for cell in after.snake)
        assert len(set(after.snake)) == len(after.snake)
        assert after.food not in after.snake
        assert after.heading[0] + before.heading[0] != 0 or after.heading[1] + before.heading[1] != 0
        if after.head == before.food:
            assert after.score == before.score + 1
            assert len(after.snake) == len(before.snake) + 1
        else:
            assert after.score == before.score
            assert len(after.snake) == len(before.snake)


def test_snapshot_is_immutable():
    snap = Snapshot(snake=INITIAL_SNAKE, heading=RIGHT, food=INITIAL_FOOD)
    with pytest.raises(AttributeError):
        snap.score = 3


def test_repr_reflects_live_session(game):
    game.on_direction("Up")
    game.snapshot = running(snake=((0, 3), (1, 3), (2, 3)), heading=LEFT, food=(9, 9), score=2)
    game.step()
    game.restart()
    text = repr(game)
    assert "state=ready" in text
    assert "score=0" in text
    assert "best=2" in text
