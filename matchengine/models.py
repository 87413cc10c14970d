from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from schema import PLAYER_ATTRIBUTES, StatKey, empty_stat_line, normalize_id

from .core import clamp
from .errors import UnknownPlayerError, UnknownTeamError
from .stat_container import StatContainer

# -------------------------
# Core Data Models
# -------------------------

FULL_ENERGY = 1.0


class GameStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    OVER = "over"


class StatLine:
    """Per-game counters for one participant. Counters only ever go up."""

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: Dict[StatKey, int] = empty_stat_line()

    def increment(self, key: StatKey, delta: int = 1) -> None:
        key = StatKey(key)
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise TypeError(f"stat delta must be an int, got {type(delta).__name__}")
        if delta < 0:
            raise ValueError(f"stat counters cannot decrease ({key.value} delta={delta})")
        self._values[key] += delta

    def get(self, key: StatKey) -> int:
        return self._values[StatKey(key)]

    def to_dict(self) -> Dict[str, int]:
        return {k.value: v for k, v in self._values.items()}

    def items(self):
        return self._values.items()

    def __repr__(self) -> str:
        nonzero = {k.value: v for k, v in self._values.items() if v}
        return f"StatLine({nonzero})"


@dataclass
class Player:
    pid: int
    name: str
    attributes: Mapping[str, float] = field(default_factory=dict)
    energy: float = FULL_ENERGY  # 1.0 fresh -> 0.0 exhausted
    team_id: Optional[int] = None
    game_stats: Dict[int, StatLine] = field(default_factory=dict)
    stat_history: StatContainer = field(default_factory=StatContainer)

    def __post_init__(self) -> None:
        self.pid = normalize_id(self.pid, label="player_id")
        attrs: Dict[str, float] = {}
        for key in PLAYER_ATTRIBUTES:
            if key not in self.attributes:
                raise ValueError(f"player {self.pid}: missing attribute {key!r}")
            v = float(self.attributes[key])
            if not (0.0 <= v <= 1.0):
                raise ValueError(f"player {self.pid}: attribute {key}={v!r} outside [0, 1]")
            attrs[key] = v
        self.attributes = MappingProxyType(attrs)
        self.set_energy(self.energy)

    def get(self, key: str) -> float:
        return self.attributes[key]

    def set_energy(self, value: float) -> None:
        self.energy = round(clamp(float(value), 0.0, FULL_ENERGY), 4)

    def overall_rating(self) -> int:
        return int(round(sum(self.attributes.values()) / len(self.attributes) * 100))

    def fouls_in(self, game_id: int) -> int:
        line = self.game_stats.get(game_id)
        return line.get(StatKey.PF) if line else 0


@dataclass
class Team:
    team_id: int
    name: str
    player_ids: List[int] = field(default_factory=list)
    game_stats: Dict[int, StatLine] = field(default_factory=dict)
    stat_history: StatContainer = field(default_factory=StatContainer)

    def __post_init__(self) -> None:
        self.team_id = normalize_id(self.team_id, label="team_id")


@dataclass
class GameState:
    game_id: int
    home_id: int
    away_id: int
    scheduled_length_sec: int
    elapsed_sec: int = 0
    offense_id: Optional[int] = None
    period: int = 1
    overtime_periods: int = 0
    possessions: int = 0
    rotation_fallbacks: int = 0
    on_court: Dict[int, List[int]] = field(default_factory=dict)
    appeared: Dict[int, List[int]] = field(default_factory=dict)
    play_log: List[str] = field(default_factory=list)

    @property
    def defense_id(self) -> int:
        if self.offense_id is None:
            raise ValueError("offense not set before tip-off")
        return self.away_id if self.offense_id == self.home_id else self.home_id

    def opponent_of(self, team_id: int) -> int:
        if team_id == self.home_id:
            return self.away_id
        if team_id == self.away_id:
            return self.home_id
        raise UnknownTeamError(f"team {team_id} is not in game {self.game_id}")

    def log(self, line: str) -> None:
        self.play_log.append(line)

    def mark_appeared(self, team_id: int, pids: Iterable[int]) -> None:
        seen = self.appeared.setdefault(team_id, [])
        for pid in pids:
            if pid not in seen:
                seen.append(pid)


# -------------------------
# League arena (players/teams addressed by int id)
# -------------------------

class League:
    def __init__(self, name: str = "League") -> None:
        self.name = name
        self.players: Dict[int, Player] = {}
        self.teams: Dict[int, Team] = {}
        self._next_game_id = 1

    def add_team(self, team: Team) -> Team:
        if team.team_id in self.teams:
            raise ValueError(f"duplicate team_id {team.team_id}")
        self.teams[team.team_id] = team
        return team

    def add_player(self, player: Player, team_id: Optional[int] = None) -> Player:
        if player.pid in self.players:
            raise ValueError(f"duplicate player_id {player.pid}")
        self.players[player.pid] = player
        target = team_id if team_id is not None else player.team_id
        player.team_id = None
        if target is not None:
            self.assign(player.pid, target)
        return player

    def assign(self, pid: int, team_id: int) -> None:
        player = self.get_player(pid)
        team = self.get_team(team_id)
        if player.team_id is not None and player.team_id != team.team_id:
            self.teams[player.team_id].player_ids.remove(pid)
        if pid not in team.player_ids:
            team.player_ids.append(pid)
        player.team_id = team.team_id

    def get_team(self, team_id: int) -> Team:
        try:
            return self.teams[team_id]
        except KeyError:
            raise UnknownTeamError(f"unknown team_id {team_id!r}") from None

    def get_player(self, pid: int) -> Player:
        try:
            return self.players[pid]
        except KeyError:
            raise UnknownPlayerError(f"unknown player_id {pid!r}") from None

    def roster(self, team_id: int) -> List[Player]:
        return [self.players[pid] for pid in self.get_team(team_id).player_ids]

    def ranked_roster(self, team_id: int) -> List[Player]:
        """Roster sorted by overall rating, best first (ties keep roster order)."""
        return sorted(self.roster(team_id), key=lambda p: p.overall_rating(), reverse=True)

    def sorted_by_attribute(self, pids: Iterable[int], attr: str) -> List[Player]:
        return sorted((self.players[pid] for pid in pids), key=lambda p: p.get(attr), reverse=True)

    def team_overall_rating(self, team_id: int) -> int:
        roster = self.roster(team_id)
        if not roster:
            return 0
        per_attr = [sum(p.get(a) for p in roster) / len(roster) for a in PLAYER_ATTRIBUTES]
        return int(round(sum(per_attr) / len(per_attr) * 100))

    def reset_energy(self, team_id: int) -> None:
        for p in self.roster(team_id):
            p.set_energy(FULL_ENERGY)

    def next_game_id(self) -> int:
        gid = self._next_game_id
        self._next_game_id += 1
        return gid
