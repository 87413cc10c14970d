from __future__ import annotations

from typing import Any, Dict, List, Sequence

import pandas as pd

from matchengine.models import League
from schema import BOX_COLUMN_ORDER, BOX_NAME, BOX_PLAYER_ID, BOX_TEAM_ID, DERIVED_REB, StatKey

TRACKED_STATS = ["PTS", "AST", "REB", "3PM"]


def _per_game(history, stat_name: str) -> float:
    if stat_name == DERIVED_REB:
        return history.get_average(StatKey.ORB) + history.get_average(StatKey.DRB)
    return history.get_average(StatKey(stat_name))


def compute_league_leaders(
    league: League,
    stats: Sequence[str] = TRACKED_STATS,
    top_n: int = 5,
) -> Dict[str, List[Dict[str, Any]]]:
    """Per-game league leaders from each player's stat history (top_n per stat)."""
    leaders: Dict[str, List[Dict[str, Any]]] = {s: [] for s in stats}

    for stat_name in stats:
        rows: List[Dict[str, Any]] = []
        for player in league.players.values():
            games = player.stat_history.count(StatKey.PTS)
            if games <= 0:
                continue
            per_game = round(_per_game(player.stat_history, stat_name), 2)
            rows.append(
                {
                    "player_id": player.pid,
                    "name": player.name,
                    "team_id": player.team_id,
                    "games": games,
                    "per_game": per_game,
                    stat_name: per_game,
                }
            )

        rows_sorted = sorted(rows, key=lambda r: r.get("per_game", 0), reverse=True)
        leaders[stat_name] = rows_sorted[:top_n]
    return leaders


def player_box_frame(box_score: Dict[str, Any]) -> pd.DataFrame:
    """Flatten GameSimulation.box_score() player rows into one DataFrame."""
    rows: List[Dict[str, Any]] = []
    for team in (box_score.get("teams") or {}).values():
        for row in (team.get("players") or {}).values():
            flat = {k: v for k, v in row.items() if k != "derived"}
            flat.update(row.get("derived") or {})
            rows.append(flat)
    columns = [BOX_PLAYER_ID, BOX_TEAM_ID, *BOX_COLUMN_ORDER]
    frame = pd.DataFrame(rows)
    if frame.empty:
        return pd.DataFrame(columns=columns)
    ordered = columns + [c for c in frame.columns if c not in columns]
    return frame[ordered]


def team_history_frame(league: League) -> pd.DataFrame:
    """Per-team games played plus per-game averages for every stat key."""
    rows = []
    for team in league.teams.values():
        row: Dict[str, Any] = {
            BOX_TEAM_ID: team.team_id,
            BOX_NAME: team.name,
            "games": team.stat_history.count(StatKey.PTS),
        }
        for key in StatKey:
            row[key.value] = round(team.stat_history.get_average(key), 2)
        rows.append(row)
    return pd.DataFrame(rows)
