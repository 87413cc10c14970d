from __future__ import annotations

"""Game orchestration (tip-off, possession loop, overtime, reporting)."""

import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from schema import SCHEMA_VERSION, StatKey, normalize_id

from .box_score import GameStatBook, Participant, summarize_team
from .core import ENGINE_VERSION
from .errors import MatchEngineError, UnknownTeamError
from .game_config import GameConfig
from .models import GameState, GameStatus, League, Player, Team
from .resolve import ResolveContext
from .sim_clock import advance_clock, format_game_clock, period_of
from .sim_fatigue import apply_energy_change
from .sim_possession import PossessionResult, simulate_possession
from .sim_rotation import perform_rotation, set_starting_lineup
from .validation import ValidationConfig, ValidationReport, check_on_court, validate_matchup

logger = logging.getLogger(__name__)


class GameSimulation:
    """One game between two arena teams, simulated possession by possession.

    Construction validates the matchup, resets energy, opens the per-game stat
    lines, puts the five best-ranked players of each team on court and performs
    the tip-off. The instance is not thread-safe; the scheduler must not run two
    games that share a team at the same time.
    """

    def __init__(
        self,
        league: League,
        home_id: int,
        away_id: int,
        game_id: Optional[int] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        validation: Optional[ValidationConfig] = None,
    ) -> None:
        self.league = league
        self.cfg = config if config is not None else GameConfig()
        self.rng = rng if rng is not None else random.Random()

        home_id = normalize_id(home_id, label="home_team_id")
        away_id = normalize_id(away_id, label="away_team_id")
        self.report = ValidationReport()
        validate_matchup(league, home_id, away_id, validation or ValidationConfig(), self.report)

        game_id = league.next_game_id() if game_id is None else normalize_id(game_id, label="game_id")
        for tid in (home_id, away_id):
            if game_id in league.get_team(tid).game_stats:
                raise ValueError(f"team {tid} already has stats for game_id {game_id}")

        self.status = GameStatus.NOT_STARTED
        self.state = GameState(
            game_id=game_id,
            home_id=home_id,
            away_id=away_id,
            scheduled_length_sec=self.cfg.regulation_seconds,
        )
        # Lineups before any per-game state (energy, stat lines) is touched.
        for tid in (home_id, away_id):
            set_starting_lineup(league, self.state, tid, self.cfg)
        for tid in (home_id, away_id):
            league.reset_energy(tid)
        self.book = GameStatBook(league, game_id, (home_id, away_id))

        self._ctx = ResolveContext(rng=self.rng, league=league, state=self.state, book=self.book, cfg=self.cfg)
        self._winner_id: Optional[int] = None
        self.tip_off()

    # -------------------------
    # State machine
    # -------------------------
    @property
    def game_id(self) -> int:
        return self.state.game_id

    @property
    def home_id(self) -> int:
        return self.state.home_id

    @property
    def away_id(self) -> int:
        return self.state.away_id

    def tip_off(self) -> int:
        if self.status is not GameStatus.NOT_STARTED:
            raise MatchEngineError(f"game {self.game_id} has already tipped off")
        winner = self.home_id if self.rng.random() < 0.5 else self.away_id
        self.state.offense_id = winner
        self.state.log(f"Tip-off: {self.league.get_team(winner).name} wins the opening tip.")
        self.status = GameStatus.IN_PROGRESS
        logger.debug("game %s tip-off: offense=%s", self.game_id, winner)
        return winner

    def step(self) -> PossessionResult:
        """Simulate exactly one possession and advance the clock once."""
        if self.status is not GameStatus.IN_PROGRESS:
            raise MatchEngineError(f"game {self.game_id} is not in progress ({self.status.value})")

        state = self.state
        result = simulate_possession(self._ctx)
        period_before = period_of(state.elapsed_sec, self.cfg)
        advance_clock(state, result.length_sec)

        team_ids = (self.home_id, self.away_id)
        apply_energy_change(self.league, state, team_ids, result.length_sec, self.cfg)
        for tid in team_ids:
            perform_rotation(self.league, state, tid, self.cfg)
            check_on_court(self.league, state, tid, self.cfg.foul_limit)

        state.offense_id = state.defense_id
        self._after_clock_advance(period_before)
        return result

    def _after_clock_advance(self, period_before: int) -> None:
        state = self.state
        if state.elapsed_sec < state.scheduled_length_sec:
            period_now = period_of(state.elapsed_sec, self.cfg)
            if period_now > period_before:
                state.period = period_now
                state.log(f"End of period {period_before}: {self._score_line()}")
            return

        if self.home_score() == self.away_score() and self.cfg.overtime_enabled:
            state.overtime_periods += 1
            state.scheduled_length_sec += int(self.cfg.overtime_seconds)
            state.period = int(self.cfg.quarters) + state.overtime_periods
            state.log(f"Tied at {self.home_score()}: overtime period {state.overtime_periods}.")
            return
        self._finish()

    def _finish(self) -> None:
        state = self.state
        self.status = GameStatus.OVER
        self.book.close()
        home, away = self.home_score(), self.away_score()
        if home != away:
            self._winner_id = self.home_id if home > away else self.away_id
        state.log(f"Final: {self._score_line()}")

        for tid in (self.home_id, self.away_id):
            team = self.league.get_team(tid)
            team.stat_history.update_many({k: v for k, v in self.book.team_line(tid).items()})
            for pid in state.appeared.get(tid, []):
                player = self.league.get_player(pid)
                player.stat_history.update_many({k: v for k, v in self.book.player_line(pid).items()})

        logger.debug(
            "game %s over after %d possessions (%d OT): %s",
            self.game_id,
            state.possessions,
            state.overtime_periods,
            self._score_line(),
        )

    def simulate(self) -> Team:
        """Run possessions until the game is over and return the winner."""
        while self.status is GameStatus.IN_PROGRESS:
            self.step()
        return self.get_winner()

    # -------------------------
    # Queries
    # -------------------------
    def is_over(self) -> bool:
        return self.status is GameStatus.OVER

    def regulation_is_over(self) -> bool:
        return self.state.elapsed_sec >= self.cfg.regulation_seconds

    def overtime_required(self) -> bool:
        """True once regulation has ended tied and at least one overtime period was scheduled."""
        return self.state.overtime_periods > 0

    def elapsed_seconds(self) -> int:
        return self.state.elapsed_sec

    def home_score(self) -> int:
        return self.book.team_stat(self.home_id, StatKey.PTS)

    def away_score(self) -> int:
        return self.book.team_stat(self.away_id, StatKey.PTS)

    def score(self, team_id: int) -> int:
        return self.book.team_stat(team_id, StatKey.PTS)

    def get_winner(self) -> Team:
        if not self.is_over():
            raise MatchEngineError(f"game {self.game_id} is not over")
        if self._winner_id is None:
            raise MatchEngineError(f"game {self.game_id} ended tied")
        return self.league.get_team(self._winner_id)

    def get_loser(self) -> Team:
        winner = self.get_winner()
        return self.league.get_team(self.state.opponent_of(winner.team_id))

    def players_on_court(self, team_id: int) -> List[Player]:
        if team_id not in (self.home_id, self.away_id):
            raise UnknownTeamError(f"team {team_id!r} is not part of game {self.game_id}")
        return [self.league.get_player(pid) for pid in self.state.on_court[team_id]]

    def team_stat(self, team_id: int, key: StatKey) -> int:
        return self.book.team_stat(team_id, key)

    def player_stat(self, pid: int, key: StatKey) -> int:
        return self.book.player_stat(pid, key)

    def get_game_stat(self, participant: Participant, key: StatKey) -> int:
        return self.book.get_game_stat(participant, key)

    def team_stats(self, team_id: int) -> Dict[str, int]:
        return self.book.team_totals(team_id)

    def player_stats(self, team_id: int) -> Dict[int, Dict[str, int]]:
        """Per-player totals for everyone on the team's roster in this game."""
        if team_id not in (self.home_id, self.away_id):
            raise UnknownTeamError(f"team {team_id!r} is not part of game {self.game_id}")
        team = self.league.get_team(team_id)
        return {pid: self.book.player_totals(pid) for pid in team.player_ids}

    # -------------------------
    # Play log
    # -------------------------
    @property
    def play_log(self) -> Tuple[str, ...]:
        return tuple(self.state.play_log)

    def full_game_log(self) -> str:
        return "\n".join(self.state.play_log)

    @staticmethod
    def reconstruct_game_log(text: str) -> List[str]:
        """Inverse of full_game_log(): split a stored log back into entries."""
        if not text:
            return []
        return text.split("\n")

    def _score_line(self) -> str:
        home = self.league.get_team(self.home_id)
        away = self.league.get_team(self.away_id)
        return f"{home.name} {self.home_score()} - {away.name} {self.away_score()}"

    # -------------------------
    # Reporting
    # -------------------------
    def box_score(self) -> Dict[str, Any]:
        state = self.state
        teams = {}
        for tid in (self.home_id, self.away_id):
            teams[tid] = summarize_team(self.league, self.book, tid, list(state.appeared.get(tid, [])))
        return {
            "meta": {
                "engine_version": ENGINE_VERSION,
                "schema_version": SCHEMA_VERSION,
                "game_id": self.game_id,
                "home_team_id": self.home_id,
                "away_team_id": self.away_id,
                "status": self.status.value,
                "elapsed_sec": state.elapsed_sec,
                "clock": format_game_clock(state.elapsed_sec, self.cfg),
                "possessions": state.possessions,
                "overtime_periods": state.overtime_periods,
                "rotation_fallbacks": state.rotation_fallbacks,
                "validation": self.report.to_dict(),
            },
            "final": {self.home_id: self.home_score(), self.away_id: self.away_score()},
            "teams": teams,
        }


def simulate_game(
    rng: random.Random,
    league: League,
    home_id: int,
    away_id: int,
    config: Optional[GameConfig] = None,
    game_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Simulate a full game and return its box score dict."""
    game = GameSimulation(league, home_id, away_id, game_id=game_id, config=config, rng=rng)
    while not game.is_over():
        game.step()
    return game.box_score()
