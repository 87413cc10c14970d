from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import PreconditionError
from .models import GameState, League

ON_COURT_SIZE = 5

# -------------------------
# Validation (pre-game roster checks / in-game on-court checks)
# -------------------------

@dataclass
class ValidationConfig:
    """Controls how strictly pre-game input is checked."""
    strict: bool = True  # True: raise on errors instead of only reporting them
    min_roster_size: int = ON_COURT_SIZE


@dataclass
class ValidationReport:
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    def error(self, msg: str) -> None:
        self.errors.append(msg)

    def to_dict(self) -> Dict[str, Any]:
        return {"warnings": list(self.warnings), "errors": list(self.errors), "ok": (len(self.errors) == 0)}

    def raise_if_errors(self, title: str) -> None:
        if not self.errors:
            return
        head = "\n".join(self.errors[:6])
        more = f"\n... (+{len(self.errors)-6} more)" if len(self.errors) > 6 else ""
        raise PreconditionError(f"{title}:\n{head}{more}")


def validate_matchup(
    league: League,
    home_id: int,
    away_id: int,
    cfg: ValidationConfig,
    report: ValidationReport,
) -> None:
    """Check that two arena teams can play each other.

    Unknown team ids raise UnknownTeamError directly (invalid argument, not a
    roster problem).
    """
    home = league.get_team(home_id)
    away = league.get_team(away_id)

    if home.team_id == away.team_id:
        report.error(f"invalid matchup: home_team_id == away_team_id ({home.team_id})")

    for team in (home, away):
        pids = team.player_ids
        if len(set(pids)) != len(pids):
            report.error(f"duplicate player_id within team {team.team_id}")
        if len(set(pids)) < cfg.min_roster_size:
            report.error(
                f"team {team.team_id} has fewer than {cfg.min_roster_size} players (got {len(set(pids))})"
            )
        elif len(set(pids)) < 2 * ON_COURT_SIZE:
            report.warn(f"team {team.team_id} has a short bench ({len(set(pids))} players)")
        for pid in pids:
            if pid not in league.players:
                report.error(f"team {team.team_id} lists unknown player_id {pid}")

    if home.team_id != away.team_id:
        overlap = set(home.player_ids) & set(away.player_ids)
        if overlap:
            report.error(f"player_id appears on both teams in a single game: {sorted(overlap)!r}")

    if cfg.strict:
        report.raise_if_errors("match engine input validation failed")


def check_on_court(league: League, state: GameState, team_id: int, foul_limit: int) -> None:
    """Post-substitution invariant: exactly five distinct, non-disqualified players on court."""
    on_court = state.on_court.get(team_id, [])
    if len(on_court) != ON_COURT_SIZE or len(set(on_court)) != ON_COURT_SIZE:
        raise PreconditionError(
            f"team {team_id} has {len(set(on_court))} players on court (expected {ON_COURT_SIZE})"
        )
    roster = set(league.get_team(team_id).player_ids)
    for pid in on_court:
        if pid not in roster:
            raise PreconditionError(f"player {pid} on court for team {team_id} is not on its roster")
        if league.get_player(pid).fouls_in(state.game_id) >= foul_limit:
            raise PreconditionError(f"player {pid} on court for team {team_id} has fouled out")
