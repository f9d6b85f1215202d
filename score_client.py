"""
Best-effort client for the remote scoreboard.

The game never waits on the network: submissions and fetches run on daemon
threads and hand their results back through a queue that the UI thread drains.
Every failure is logged and otherwise ignored.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import queue
import threading
from typing import Any, Callable

import requests


logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:3001"
API_BASE_ENV_VARS = ("SNAKE_API_BASE", "SNAKE_BACKEND_URL")
DEFAULT_PLAYER_NAME = "Player"
TOP_SCORES = 5


@dataclass(frozen=True)
class ScoreEntry:
    name: str
    score: int


def resolve_api_base(explicit: str | None = None) -> str:
    """
    Pick the scoreboard base URL.

    Order: explicit value, then SNAKE_API_BASE, then SNAKE_BACKEND_URL, then the
    default. Surrounding whitespace and trailing slashes are removed.
    """
    candidates = [explicit] + [os.getenv(name) for name in API_BASE_ENV_VARS]
    for raw in candidates:
        if raw and raw.strip():
            return raw.strip().rstrip("/")
    return DEFAULT_API_BASE


def parse_scores(payload: Any) -> list[ScoreEntry] | None:
    """
    Read a ``{"scores": [{"name": ..., "score": ...}, ...]}`` body.

    Returns None when the body does not have that shape. Individual entries
    without an integer score are skipped; a missing name shows as "Player".
    """
    if not isinstance(payload, dict):
        return None
    rows = payload.get("scores")
    if not isinstance(rows, list):
        return None

    entries: list[ScoreEntry] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        score = row.get("score")
        if isinstance(score, bool) or not isinstance(score, int):
            continue
        name = row.get("name")
        if not isinstance(name, str) or not name.strip():
            name = DEFAULT_PLAYER_NAME
        entries.append(ScoreEntry(name=name, score=score))
    return entries


class ScoreClient:
    """Blocking HTTP calls against ``{base}/scores``."""

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def scores_url(self) -> str:
        return f"{self.base_url}/scores"

    def submit(self, name: str, score: int) -> bool:
        """
        POST one score.

        Returns:
            True if the server answered with a success status, False otherwise
        """
        try:
            response = self.session.post(
                self.scores_url,
                json={"name": name, "score": score},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Failed to submit score to %s: %s", self.scores_url, e)
            return False

        logger.info("Submitted score %d for %s", score, name)
        return True

    def fetch_scores(self) -> list[ScoreEntry] | None:
        """GET the ranked list; None on any failure or unexpected body."""
        try:
            response = self.session.get(self.scores_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("Failed to fetch scores from %s: %s", self.scores_url, e)
            return None

        entries = parse_scores(payload)
        if entries is None:
            logger.warning("Unexpected scores payload from %s", self.scores_url)
        return entries


class ScoreReporter:
    """Fire-and-forget score sink; the UI thread calls poll() to pick up results."""

    def __init__(self, client: ScoreClient, player_name: str = DEFAULT_PLAYER_NAME) -> None:
        self.client = client
        self.player_name = player_name or DEFAULT_PLAYER_NAME
        self.scores: list[ScoreEntry] = []
        self.results: queue.Queue[list[ScoreEntry]] = queue.Queue()
        self._workers: list[threading.Thread] = []
        self._workers_lock = threading.Lock()

    def report(self, score: int) -> None:
        self._launch(lambda: self._submit_then_refresh(score))

    def refresh(self) -> None:
        self._launch(self._fetch)

    def poll(self) -> bool:
        """Apply fetched lists queued by workers. Returns True if the list changed."""
        changed = False
        try:
            while True:
                entries = self.results.get_nowait()
                if entries != self.scores:
                    self.scores = entries
                    changed = True
        except queue.Empty:
            pass
        return changed

    def top(self, n: int = TOP_SCORES) -> list[ScoreEntry]:
        return self.scores[:n]

    def join(self, timeout: float | None = None) -> None:
        """Wait for outstanding workers (teardown and tests)."""
        with self._workers_lock:
            workers = list(self._workers)
        for worker in workers:
            worker.join(timeout)

    def _submit_then_refresh(self, score: int) -> None:
        if self.client.submit(self.player_name, score):
            self._fetch()

    def _fetch(self) -> None:
        entries = self.client.fetch_scores()
        if entries is not None:
            self.results.put(entries)

    def _launch(self, fn: Callable[[], None]) -> None:
        worker = threading.Thread(target=fn, daemon=True)
        with self._workers_lock:
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(worker)
        worker.start()
