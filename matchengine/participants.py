from __future__ import annotations

import random
from typing import List

from schema import ATTR_ASSIST, ATTR_HEIGHT

from .core import banded_pick, pick_uniform
from .errors import PreconditionError
from .models import GameState, League, Player

# -------------------------
# Participant selection (on-court five only)
# -------------------------
#
# Shooters, defenders, foulers and turnover players are drawn uniformly.
# Assisters and rebounders use the 1..15 band table over a best-first ranking.


def _on_court_pids(state: GameState, team_id: int) -> List[int]:
    pids = state.on_court.get(team_id) or []
    if not pids:
        raise PreconditionError(f"team {team_id} has nobody on court")
    return list(pids)


def choose_uniform_player(rng: random.Random, league: League, state: GameState, team_id: int) -> Player:
    return league.get_player(pick_uniform(rng, _on_court_pids(state, team_id)))


def choose_shooter(rng: random.Random, league: League, state: GameState, team_id: int) -> Player:
    return choose_uniform_player(rng, league, state, team_id)


def choose_defender(rng: random.Random, league: League, state: GameState, team_id: int) -> Player:
    return choose_uniform_player(rng, league, state, team_id)


def choose_fouler(rng: random.Random, league: League, state: GameState, team_id: int) -> Player:
    return choose_uniform_player(rng, league, state, team_id)


def choose_assister(rng: random.Random, league: League, state: GameState, team_id: int) -> Player:
    ranked = league.sorted_by_attribute(_on_court_pids(state, team_id), ATTR_ASSIST)
    return banded_pick(rng, ranked)


def choose_rebounder(rng: random.Random, league: League, state: GameState, team_id: int) -> Player:
    ranked = league.sorted_by_attribute(_on_court_pids(state, team_id), ATTR_HEIGHT)
    return banded_pick(rng, ranked)
