# Tkinter presentation layer: board canvas, score panel, tick timer.
from __future__ import annotations

import logging
import tkinter as tk
from typing import Callable

# Support both package imports and running this file directly.
try:
    from .board_render import Shape, Theme, build_scene, get_theme, toggle_theme
    from .controls import RESTART_KEYS, THEME_KEYS
    from .game_logic import GameState, SnakeConfig, SnakeGame
    from .score_client import ScoreReporter
except ImportError:
    from board_render import Shape, Theme, build_scene, get_theme, toggle_theme
    from controls import RESTART_KEYS, THEME_KEYS
    from game_logic import GameState, SnakeConfig, SnakeGame
    from score_client import ScoreReporter


logger = logging.getLogger(__name__)

POLL_MS = 80
FONT = "Helvetica"


class TkTickTimer:
    """Fixed-period timer on the Tk event loop; at most one pending callback."""

    def __init__(self, root: tk.Misc, interval_ms: int, after_tick: Callable[[], None] | None = None) -> None:
        self.root = root
        self.interval_ms = interval_ms
        self.after_tick = after_tick
        self.after_id: str | None = None  # Tkinter timer id for the game loop
        self._callback: Callable[[], object] | None = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], object]) -> None:
        self.stop()
        self._callback = callback
        self.after_id = self.root.after(self.interval_ms, self._fire)

    def stop(self) -> None:
        """Cancel scheduled tick callback if one exists."""
        self._callback = None
        if self.after_id is not None:
            self.root.after_cancel(self.after_id)
            self.after_id = None

    def _fire(self) -> None:
        self.after_id = None
        callback = self._callback
        if callback is None:
            return
        callback()
        if self.after_tick is not None:
            self.after_tick()
        # The callback may have stopped (or restarted) the timer.
        if self._callback is callback and self.after_id is None:
            self.after_id = self.root.after(self.interval_ms, self._fire)


def paint_scene(canvas: tk.Canvas, scene: tuple[Shape, ...]) -> None:
    """Replace everything on the canvas with the given scene."""
    canvas.delete("all")
    for shape in scene:
        if shape.kind == "rect":
            options = {"fill": shape.fill, "outline": ""}
            if shape.alpha < 1.0:
                # Tk has no alpha; a stipple approximates the translucent overlay.
                options["stipple"] = "gray50" if shape.alpha >= 0.5 else "gray12"
            canvas.create_rectangle(*shape.coords, **options)
        elif shape.kind == "oval":
            canvas.create_oval(*shape.coords, fill=shape.fill, outline="")
        elif shape.kind == "line":
            canvas.create_line(*shape.coords, fill=shape.fill)
        elif shape.kind == "text":
            weight = "bold" if shape.bold else "normal"
            canvas.create_text(*shape.coords, text=shape.text, fill=shape.fill, font=(FONT, shape.font_size, weight))


class SnakeApp:
    """Tkinter window around one SnakeGame session."""

    def __init__(
        self,
        root: tk.Tk,
        config: SnakeConfig | None = None,
        reporter: ScoreReporter | None = None,
        theme: str = "light",
    ) -> None:
        self.root = root
        self.root.title("Snake")
        self.config = config or SnakeConfig()
        self.reporter = reporter
        self.theme_name = theme
        self.theme: Theme = get_theme(theme)

        self.timer = TkTickTimer(root, self.config.tick_ms, after_tick=self.draw)
        self.game = SnakeGame(self.config, timer=self.timer, score_sink=reporter)
        self.poll_id: str | None = None

        self._build_layout()
        self._bind_keys()
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.apply_theme()

        if self.reporter is not None:
            self.reporter.refresh()
            self.poll_id = self.root.after(POLL_MS, self._poll_scores)

    def _build_layout(self) -> None:
        """Score line on top, board in the middle, controls and top scores below."""
        side = self.config.grid_size * self.config.cell_size

        self.container = tk.Frame(self.root, padx=24, pady=24)
        self.container.pack(fill="both", expand=True)

        self.header = tk.Frame(self.container)
        self.header.pack(fill="x")
        self.title_label = tk.Label(self.header, text="Snake", font=(FONT, 22, "bold"))
        self.title_label.pack(side="left")
        self.theme_btn = tk.Button(self.header, command=self.toggle_theme, bd=0, relief="flat", padx=10, pady=4)
        self.theme_btn.pack(side="right")

        self.score_var = tk.StringVar()
        self.score_label = tk.Label(self.container, textvariable=self.score_var, font=(FONT, 13))
        self.score_label.pack(anchor="w", pady=(6, 10))

        self.canvas = tk.Canvas(self.container, width=side, height=side, highlightthickness=0, bd=0)
        self.canvas.pack()

        self.restart_btn = tk.Button(
            self.container,
            text="Restart",
            command=self.restart,
            bd=0,
            relief="flat",
            font=(FONT, 12, "bold"),
            padx=16,
            pady=8,
            cursor="hand2",
        )
        self.restart_btn.pack(pady=(14, 8))

        self.scores_frame = tk.Frame(self.container)
        self.scores_title = tk.Label(self.scores_frame, text="Top Scores", font=(FONT, 12, "bold"))
        self.scores_title.pack(anchor="w")
        self.scores_list = tk.Label(self.scores_frame, justify="left", font=(FONT, 11))
        self.scores_list.pack(anchor="w")

    def _bind_keys(self) -> None:
        """Movement on arrows/WASD; restart and theme shortcuts."""
        self.root.bind("<Key>", self._on_key)

    def _on_key(self, event: tk.Event) -> None:
        if event.keysym in RESTART_KEYS:
            self.restart()
            return
        if event.keysym in THEME_KEYS:
            self.toggle_theme()
            return
        was_ready = self.game.state is GameState.READY
        if self.game.on_direction(event.keysym) and was_ready:
            self.draw()

    def restart(self) -> None:
        self.game.restart()
        self.draw()

    def toggle_theme(self) -> None:
        self.theme_name = toggle_theme(self.theme_name)
        self.theme = get_theme(self.theme_name)
        self.apply_theme()

    def apply_theme(self) -> None:
        """Recolor widgets for the active theme, then redraw the board."""
        t = self.theme
        for widget in (self.root, self.container, self.header, self.scores_frame):
            widget.configure(bg=t.background)
        for label in (self.title_label, self.score_label, self.scores_title, self.scores_list):
            label.configure(bg=t.background, fg=t.text)
        self.canvas.configure(bg=t.surface)
        self.restart_btn.configure(bg=t.accent, fg="#ffffff", activebackground=t.snake_head, activeforeground="#ffffff")
        next_name = toggle_theme(self.theme_name).capitalize()
        self.theme_btn.configure(text=f"{next_name} mode", bg=t.surface, fg=t.text, activebackground=t.grid)
        self.draw()

    def draw(self) -> None:
        """Render board and status labels from the current snapshot."""
        snap = self.game.snapshot
        paint_scene(self.canvas, build_scene(snap, self.theme, self.config.cell_size))
        self.score_var.set(f"Score: {snap.score}    Best: {self.game.best_score}")

    def _render_scores(self) -> None:
        top = self.reporter.top() if self.reporter is not None else []
        if not top:
            self.scores_frame.pack_forget()
            return
        lines = [f"{rank}. {entry.name:<16} {entry.score}" for rank, entry in enumerate(top, start=1)]
        self.scores_list.configure(text="\n".join(lines))
        self.scores_frame.pack(fill="x", pady=(6, 0))

    def _poll_scores(self) -> None:
        if self.reporter.poll():
            self._render_scores()
        self.poll_id = self.root.after(POLL_MS, self._poll_scores)

    def _on_close(self) -> None:
        logger.debug("Closing window (best score %d)", self.game.best_score)
        self.game.close()
        if self.poll_id is not None:
            self.root.after_cancel(self.poll_id)
            self.poll_id = None
        self.root.destroy()


def run_player_gui(
    config: SnakeConfig | None = None,
    reporter: ScoreReporter | None = None,
    theme: str = "light",
) -> None:
    """Launch the Snake window and block in the Tk main loop."""
    root = tk.Tk()
    SnakeApp(root, config=config, reporter=reporter, theme=theme)
    root.mainloop()
