from __future__ import annotations

import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from matchengine.game_config import GameConfig
from matchengine.models import League
from matchengine.sim_game import GameSimulation

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class RunResult:
    game_id: int
    home_id: int
    away_id: int
    home_score: int
    away_score: int
    winner_id: Optional[int]
    thread_name: str
    thread_id: int
    duration_ms: float


class GameRunner:
    """Runs one GameSimulation to completion on the calling thread.

    Running an already finished game returns the first result without simulating again.
    """

    def __init__(self, game: GameSimulation) -> None:
        self.game = game
        self._result: Optional[RunResult] = None

    @property
    def result(self) -> Optional[RunResult]:
        return self._result

    def run(self) -> RunResult:
        if self._result is not None:
            return self._result

        game = self.game
        started = time.perf_counter()
        try:
            while not game.is_over():
                game.step()
        except Exception as exc:
            logger.exception(
                "[GAME_FAILED] game_id=%s home=%s away=%s: %s",
                game.game_id,
                game.home_id,
                game.away_id,
                str(exc),
            )
            raise
        duration_ms = (time.perf_counter() - started) * 1000.0

        home, away = game.home_score(), game.away_score()
        winner_id = None if home == away else (game.home_id if home > away else game.away_id)
        current = threading.current_thread()
        self._result = RunResult(
            game_id=game.game_id,
            home_id=game.home_id,
            away_id=game.away_id,
            home_score=home,
            away_score=away,
            winner_id=winner_id,
            thread_name=current.name,
            thread_id=threading.get_ident(),
            duration_ms=round(duration_ms, 3),
        )
        logger.debug(
            "game %s finished on %s in %.1f ms", game.game_id, current.name, duration_ms
        )
        return self._result


def _assert_disjoint_teams(games: Sequence[GameSimulation]) -> None:
    seen: Dict[int, int] = {}
    for g in games:
        for tid in (g.home_id, g.away_id):
            if tid in seen:
                raise ValueError(
                    f"team {tid} is scheduled in both game {seen[tid]} and game {g.game_id} on the same day"
                )
            seen[tid] = g.game_id


def simulate_day(
    games: Sequence[GameSimulation],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[RunResult]:
    """Run a batch of games concurrently; results are returned in input order.

    Games in one batch must not share a team (the engine itself does no locking).
    This check runs on games that are already built, so their energy has been reset;
    build the batch with build_day to reject double-booking before construction.
    """
    games = list(games)
    if not games:
        return []
    _assert_disjoint_teams(games)

    runners = [GameRunner(g) for g in games]
    workers = max(1, min(int(max_workers), len(runners)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="game") as pool:
        futures = [pool.submit(r.run) for r in runners]
        return [f.result() for f in futures]


def build_day(
    league: League,
    matchups: Iterable[Tuple[int, int]],
    *,
    config: Optional[GameConfig] = None,
    seed: Optional[int] = None,
    day_index: Optional[int] = None,
) -> List[GameSimulation]:
    """Create GameSimulations for (home_id, away_id) pairs, one RNG per game.

    Double-booked teams are rejected before any game is built.
    """
    matchups = list(matchups)
    _check_matchups_disjoint(matchups, day_index)
    seeder = random.Random(seed)
    games: List[GameSimulation] = []
    for home_id, away_id in matchups:
        rng = random.Random(seeder.getrandbits(64))
        games.append(GameSimulation(league, home_id, away_id, config=config, rng=rng))
    return games


def simulate_schedule(
    league: League,
    days: Iterable[Iterable[Tuple[int, int]]],
    *,
    config: Optional[GameConfig] = None,
    seed: Optional[int] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[List[RunResult]]:
    """Simulate day after day; games within a day run in parallel."""
    seeder = random.Random(seed)
    out: List[List[RunResult]] = []
    for day_index, matchups in enumerate(days):
        games = build_day(league, matchups, config=config, seed=seeder.getrandbits(64), day_index=day_index)
        out.append(simulate_day(games, max_workers=max_workers))
    return out


def _check_matchups_disjoint(matchups: Sequence[Tuple[int, int]], day_index: Optional[int] = None) -> None:
    # Runs before any GameSimulation is built: construction resets energy.
    where = "in one day" if day_index is None else f"on day {day_index}"
    seen = set()
    for home_id, away_id in matchups:
        for tid in (home_id, away_id):
            if tid in seen:
                raise ValueError(f"team {tid} is scheduled twice {where}")
            seen.add(tid)
