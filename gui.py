# Command-line launcher for the Snake window.
from __future__ import annotations

import argparse
import logging
import os

from dotenv import load_dotenv

try:
    from .board_render import THEMES, get_theme, save_frame
    from .game_logic import SnakeConfig, initial_snapshot
    from .score_client import DEFAULT_PLAYER_NAME, ScoreClient, ScoreReporter, resolve_api_base
except ImportError:
    from board_render import THEMES, get_theme, save_frame
    from game_logic import SnakeConfig, initial_snapshot
    from score_client import DEFAULT_PLAYER_NAME, ScoreClient, ScoreReporter, resolve_api_base


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = SnakeConfig()

    parser = argparse.ArgumentParser(description="Play Snake with an optional remote scoreboard")
    parser.add_argument("--api-base", default=None, help="Scoreboard base URL (env: SNAKE_API_BASE)")
    parser.add_argument(
        "--player-name",
        default=None,
        help=f"Name submitted with scores (env: SNAKE_PLAYER_NAME, default: {DEFAULT_PLAYER_NAME})",
    )
    parser.add_argument("--tick-ms", type=int, default=defaults.tick_ms, help="Milliseconds per tick")
    parser.add_argument("--cell-size", type=int, default=defaults.cell_size, help="Pixels per grid cell")
    parser.add_argument("--theme", default="light", choices=sorted(THEMES))
    parser.add_argument("--offline", action="store_true", help="Do not talk to the scoreboard")
    parser.add_argument(
        "--snapshot",
        metavar="PATH",
        default=None,
        help="Write the starting board as a PNG and exit",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_reporter(api_base: str | None, player_name: str | None) -> ScoreReporter:
    base = resolve_api_base(api_base)
    name = player_name or os.getenv("SNAKE_PLAYER_NAME") or DEFAULT_PLAYER_NAME
    logger.info("Scoreboard at %s as %s", base, name)
    return ScoreReporter(ScoreClient(base), player_name=name)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SnakeConfig(tick_ms=args.tick_ms, cell_size=args.cell_size)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    if args.snapshot:
        path = save_frame(initial_snapshot(config), args.snapshot, get_theme(args.theme), config.cell_size)
        logger.info("Wrote %s", path)
        return 0

    reporter = None if args.offline else build_reporter(args.api_base, args.player_name)

    # Tkinter is only needed for the interactive window.
    try:
        from .snake_gui import run_player_gui
    except ImportError:
        from snake_gui import run_player_gui

    run_player_gui(config=config, reporter=reporter, theme=args.theme)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
