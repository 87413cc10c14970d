from __future__ import annotations

import logging
import os
from typing import Dict, Optional

import pandas as pd

from derived_formulas import compute_attributes, has_attribute_columns, normalize_attribute_frame
from matchengine.models import League, Player, Team
from schema import (
    PLAYER_ATTRIBUTES,
    ROSTER_COL_NAME,
    ROSTER_COL_PLAYER_ID,
    ROSTER_COL_TEAM_ID,
    ROSTER_COL_TEAM_NAME,
    normalize_id,
)
from matchengine.validation import ON_COURT_SIZE

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}


def _warn_limited(code: str, msg: str, *, limit: int = 3) -> None:
    """Log warning, but cap repeats per code."""
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s %s", code, msg)
    _WARN_COUNTS[code] = n + 1


def _row_attributes(row: pd.Series, use_attr_columns: bool) -> Dict[str, float]:
    if use_attr_columns:
        return {a: float(row[a]) for a in PLAYER_ATTRIBUTES}
    return compute_attributes(row)


def build_league_from_frame(
    frame: pd.DataFrame,
    *,
    league: Optional[League] = None,
    min_roster_size: int = ON_COURT_SIZE,
) -> League:
    """Load players/teams from a roster DataFrame into a League arena.

    Required columns: player_id, team_id. Optional: name, team_name.
    Attributes come from the ATTR_* columns when all are present (0-1 or 0-100),
    otherwise from raw scouting columns via derived_formulas.compute_attributes.
    """
    missing = [c for c in (ROSTER_COL_PLAYER_ID, ROSTER_COL_TEAM_ID) if c not in frame.columns]
    if missing:
        raise ValueError(f"roster frame missing required columns: {missing}")

    league = league if league is not None else League()
    use_attr_columns = has_attribute_columns(frame)
    if use_attr_columns:
        frame = normalize_attribute_frame(frame)
    else:
        _warn_limited("ROSTER_RAW_RATINGS", "attribute columns missing; deriving from scouting columns")

    for _, row in frame.iterrows():
        team_id = normalize_id(row[ROSTER_COL_TEAM_ID], label="team_id")
        if team_id not in league.teams:
            team_name = row.get(ROSTER_COL_TEAM_NAME) if ROSTER_COL_TEAM_NAME in frame.columns else None
            name = str(team_name) if team_name is not None and pd.notna(team_name) else f"Team {team_id}"
            league.add_team(Team(team_id=team_id, name=name))

        pid = normalize_id(row[ROSTER_COL_PLAYER_ID], label="player_id")
        raw_name = row.get(ROSTER_COL_NAME) if ROSTER_COL_NAME in frame.columns else None
        name = str(raw_name) if raw_name is not None and pd.notna(raw_name) else f"Player {pid}"
        league.add_player(
            Player(pid=pid, name=name, attributes=_row_attributes(row, use_attr_columns)),
            team_id=team_id,
        )

    for team in league.teams.values():
        if len(team.player_ids) < min_roster_size:
            raise ValueError(
                f"team {team.team_id} has fewer than {min_roster_size} players (got {len(team.player_ids)})"
            )
    logger.debug("loaded %d players across %d teams", len(league.players), len(league.teams))
    return league


def load_league_from_csv(path: str, **kwargs) -> League:
    if not os.path.exists(path):
        raise FileNotFoundError(f"roster csv not found: {path}")
    frame = pd.read_csv(path)
    return build_league_from_frame(frame, **kwargs)


def league_to_frame(league: League) -> pd.DataFrame:
    """Flatten the arena back into roster rows (one per rostered player)."""
    rows = []
    for team in league.teams.values():
        for pid in team.player_ids:
            p = league.get_player(pid)
            row = {
                ROSTER_COL_PLAYER_ID: p.pid,
                ROSTER_COL_TEAM_ID: team.team_id,
                ROSTER_COL_TEAM_NAME: team.name,
                ROSTER_COL_NAME: p.name,
            }
            row.update(p.attributes)
            rows.append(row)
    columns = [ROSTER_COL_PLAYER_ID, ROSTER_COL_TEAM_ID, ROSTER_COL_TEAM_NAME, ROSTER_COL_NAME, *PLAYER_ATTRIBUTES]
    return pd.DataFrame(rows, columns=columns)
