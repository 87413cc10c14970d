from __future__ import annotations

"""Rotation utilities (starting five, tired / fouled-out substitutions).

Substitution pass per team:
1) remove on-court players at or below the energy threshold or at the foul limit
2) refill in ranked-roster order with fully rested, non-disqualified bench players
3) if still short, take the most rested non-disqualified players (rank breaks ties);
   counted in GameState.rotation_fallbacks and logged at INFO
"""

import logging
from typing import List, Tuple

from .errors import PreconditionError
from .game_config import GameConfig
from .models import FULL_ENERGY, GameState, League, Player
from .validation import ON_COURT_SIZE

logger = logging.getLogger(__name__)


def _eligible(p: Player, game_id: int, cfg: GameConfig) -> bool:
    return p.fouls_in(game_id) < cfg.foul_limit


def set_starting_lineup(league: League, state: GameState, team_id: int, cfg: GameConfig) -> List[int]:
    ranked = [p for p in league.ranked_roster(team_id) if _eligible(p, state.game_id, cfg)]
    if len(ranked) < ON_COURT_SIZE:
        raise PreconditionError(f"team {team_id} cannot field {ON_COURT_SIZE} players (got {len(ranked)})")
    starters = [p.pid for p in ranked[:ON_COURT_SIZE]]
    state.on_court[team_id] = starters
    state.mark_appeared(team_id, starters)
    return starters


def perform_rotation(league: League, state: GameState, team_id: int, cfg: GameConfig) -> List[Tuple[int, int]]:
    """Run one substitution pass; returns (out_pid, in_pid) pairs in order."""
    gid = state.game_id
    on_court = list(state.on_court.get(team_id, []))

    removed: List[int] = []
    for pid in on_court:
        p = league.get_player(pid)
        if p.energy <= cfg.sub_energy_threshold or not _eligible(p, gid, cfg):
            removed.append(pid)
    if not removed:
        return []
    staying = [pid for pid in on_court if pid not in removed]

    ranked = league.ranked_roster(team_id)
    incoming: List[int] = []
    for p in ranked:
        if len(staying) + len(incoming) >= ON_COURT_SIZE:
            break
        if p.pid in on_court or p.pid in incoming:
            continue
        if _eligible(p, gid, cfg) and p.energy >= FULL_ENERGY:
            incoming.append(p.pid)

    if len(staying) + len(incoming) < ON_COURT_SIZE:
        # Not enough fully rested players: fall back to the most rested ones,
        # which may include players just taken out for fatigue.
        rank_index = {p.pid: i for i, p in enumerate(ranked)}
        fallback = sorted(
            (p for p in ranked if p.pid not in staying and p.pid not in incoming and _eligible(p, gid, cfg)),
            key=lambda p: (-p.energy, rank_index[p.pid]),
        )
        need = ON_COURT_SIZE - len(staying) - len(incoming)
        picked = [p.pid for p in fallback[:need]]
        if len(picked) < need:
            raise PreconditionError(
                f"team {team_id} cannot field {ON_COURT_SIZE} eligible players in game {gid}"
            )
        state.rotation_fallbacks += 1
        logger.info(
            "[ROTATION_FALLBACK] game=%s team=%s filled %s with players below full energy", gid, team_id, picked
        )
        incoming.extend(picked)

    # Players kept through the fallback are not substitutions.
    subs_out = [pid for pid in removed if pid not in incoming]
    subs_in = [pid for pid in incoming if pid not in removed]

    state.on_court[team_id] = staying + incoming
    state.mark_appeared(team_id, subs_in)

    team_name = league.get_team(team_id).name
    pairs = list(zip(subs_out, subs_in))
    for out_pid, in_pid in pairs:
        state.log(
            f"{team_name}: {league.get_player(in_pid).name} checks in for {league.get_player(out_pid).name}."
        )
    return pairs
