from __future__ import annotations

"""Per-game stat surface (team + player counters) and box score builders."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Union

from schema import (
    BOX_NAME,
    BOX_PLAYER_ID,
    BOX_TEAM_ID,
    DERIVED_3P_PCT,
    DERIVED_FG_PCT,
    DERIVED_FT_PCT,
    DERIVED_REB,
    StatKey,
)

from .errors import MatchEngineError, UnknownPlayerError, UnknownTeamError
from .models import League, StatLine


@dataclass(frozen=True)
class TeamRef:
    team_id: int


@dataclass(frozen=True)
class PlayerRef:
    player_id: int


Participant = Union[TeamRef, PlayerRef]


class GameStatBook:
    """Team and player stat lines for a single game.

    Lines are shared with Team.game_stats / Player.game_stats so the arena sees the
    same counters; the book refuses writes once closed.
    """

    def __init__(self, league: League, game_id: int, team_ids: Iterable[int]) -> None:
        self.game_id = game_id
        self._team_lines: Dict[int, StatLine] = {}
        self._player_lines: Dict[int, StatLine] = {}
        self._player_team: Dict[int, int] = {}
        self._closed = False

        for tid in team_ids:
            team = league.get_team(tid)
            line = team.game_stats[game_id] = StatLine()
            self._team_lines[tid] = line
            for p in league.roster(tid):
                pline = p.game_stats[game_id] = StatLine()
                self._player_lines[p.pid] = pline
                self._player_team[p.pid] = tid

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _team_line(self, team_id: int) -> StatLine:
        line = self._team_lines.get(team_id)
        if line is None:
            raise UnknownTeamError(f"team {team_id!r} is not part of game {self.game_id}")
        return line

    def _player_line(self, pid: int) -> StatLine:
        line = self._player_lines.get(pid)
        if line is None:
            raise UnknownPlayerError(f"player {pid!r} is not part of game {self.game_id}")
        return line

    def _check_open(self) -> None:
        if self._closed:
            raise MatchEngineError(f"game {self.game_id} is over; stats are read-only")

    # -------------------------
    # Writes
    # -------------------------
    def increment_team(self, team_id: int, key: StatKey, delta: int = 1) -> None:
        self._check_open()
        self._team_line(team_id).increment(key, delta)

    def increment_player(self, pid: int, key: StatKey, delta: int = 1) -> None:
        self._check_open()
        self._player_line(pid).increment(key, delta)

    def credit(self, team_id: int, pid: int, key: StatKey, delta: int = 1) -> None:
        """Increment the same stat on a player and on their team."""
        if self._player_team.get(pid) != team_id:
            raise UnknownPlayerError(f"player {pid!r} does not play for team {team_id!r} in game {self.game_id}")
        self.increment_team(team_id, key, delta)
        self.increment_player(pid, key, delta)

    # -------------------------
    # Reads
    # -------------------------
    def team_stat(self, team_id: int, key: StatKey) -> int:
        return self._team_line(team_id).get(key)

    def player_stat(self, pid: int, key: StatKey) -> int:
        return self._player_line(pid).get(key)

    def team_totals(self, team_id: int) -> Dict[str, int]:
        return self._team_line(team_id).to_dict()

    def player_totals(self, pid: int) -> Dict[str, int]:
        return self._player_line(pid).to_dict()

    def player_team(self, pid: int) -> int:
        try:
            return self._player_team[pid]
        except KeyError:
            raise UnknownPlayerError(f"player {pid!r} is not part of game {self.game_id}") from None

    def get_game_stat(self, participant: Participant, key: StatKey) -> int:
        if isinstance(participant, TeamRef):
            return self.team_stat(participant.team_id, key)
        if isinstance(participant, PlayerRef):
            return self.player_stat(participant.player_id, key)
        raise TypeError(f"unsupported participant: {participant!r}")

    def team_line(self, team_id: int) -> StatLine:
        return self._team_line(team_id)

    def player_line(self, pid: int) -> StatLine:
        return self._player_line(pid)


# -------------------------
# Box score dicts
# -------------------------

def _safe_pct(made: int, att: int) -> float:
    return round((float(made) / float(att)) * 100.0, 2) if att else 0.0


def _derived(totals: Dict[str, int]) -> Dict[str, float]:
    fgm = totals[StatKey.TWO_PM.value] + totals[StatKey.THREE_PM.value]
    fga = totals[StatKey.TWO_PA.value] + totals[StatKey.THREE_PA.value]
    return {
        DERIVED_FG_PCT: _safe_pct(fgm, fga),
        DERIVED_3P_PCT: _safe_pct(totals[StatKey.THREE_PM.value], totals[StatKey.THREE_PA.value]),
        DERIVED_FT_PCT: _safe_pct(totals[StatKey.FTM.value], totals[StatKey.FTA.value]),
        DERIVED_REB: totals[StatKey.ORB.value] + totals[StatKey.DRB.value],
    }


def build_player_box(league: League, book: GameStatBook, team_id: int, pids: List[int]) -> Dict[int, Dict[str, Any]]:
    """Return per-player box rows for the given players (derived values nested under "derived")."""
    out: Dict[int, Dict[str, Any]] = {}
    for pid in pids:
        totals = book.player_totals(pid)
        row: Dict[str, Any] = {
            BOX_PLAYER_ID: pid,
            BOX_TEAM_ID: team_id,
            BOX_NAME: league.get_player(pid).name,
        }
        row.update(totals)
        row["derived"] = _derived(totals)
        out[pid] = row
    return out


def summarize_team(league: League, book: GameStatBook, team_id: int, pids: List[int]) -> Dict[str, Any]:
    totals = book.team_totals(team_id)
    return {
        BOX_TEAM_ID: team_id,
        "name": league.get_team(team_id).name,
        "totals": totals,
        "derived": _derived(totals),
        "players": build_player_box(league, book, team_id, pids),
    }
