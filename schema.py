# schema.py
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

# ============================================================================
# 0) Single Source of Truth: IDs / Versions
# ============================================================================

SCHEMA_VERSION: str = "1.0"

# IMPORTANT:
# - Players and teams live in a League arena and are addressed by int ids.
# - Games are addressed by int ids as well (unique per League).


def normalize_id(value: object, *, label: str = "id") -> int:
    """Coerce a raw id (int, numeric str, numpy int) into a non-negative int."""
    if isinstance(value, bool):
        raise ValueError(f"{label} must be an integer, got bool")
    try:
        out = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be an integer, got {value!r}") from exc
    if isinstance(value, float) and value != out:
        raise ValueError(f"{label} must be an integer, got {value!r}")
    if out < 0:
        raise ValueError(f"{label} must be non-negative, got {out}")
    return out


# ============================================================================
# 1) Player attributes (normalised to [0, 1])
# ============================================================================

ATTR_HEIGHT = "height"
ATTR_STRENGTH = "strength"
ATTR_SPEED = "speed"
ATTR_INSIDE_SCORING = "inside_scoring"
ATTR_MID_SCORING = "mid_scoring"
ATTR_THREE_SCORING = "three_scoring"
ATTR_DUNK = "dunk"
ATTR_FREE_THROW = "free_throw"
ATTR_OFFENSIVE_REBOUND = "offensive_rebound"
ATTR_DEFENSIVE_REBOUND = "defensive_rebound"
ATTR_INSIDE_DEFENSE = "inside_defense"
ATTR_PERIMETER_DEFENSE = "perimeter_defense"
ATTR_ASSIST = "assist"
ATTR_TURNOVER = "turnover"

PLAYER_ATTRIBUTES: Tuple[str, ...] = (
    ATTR_HEIGHT, ATTR_STRENGTH, ATTR_SPEED,
    ATTR_INSIDE_SCORING, ATTR_MID_SCORING, ATTR_THREE_SCORING, ATTR_DUNK, ATTR_FREE_THROW,
    ATTR_OFFENSIVE_REBOUND, ATTR_DEFENSIVE_REBOUND,
    ATTR_INSIDE_DEFENSE, ATTR_PERIMETER_DEFENSE,
    ATTR_ASSIST, ATTR_TURNOVER,
)


# ============================================================================
# 2) Roster / Data Columns (DataFrame / CSV)
# ============================================================================

ROSTER_COL_PLAYER_ID = "player_id"   # REQUIRED
ROSTER_COL_TEAM_ID = "team_id"       # REQUIRED
ROSTER_COL_NAME = "name"
ROSTER_COL_TEAM_NAME = "team_name"

# Attribute columns use the ATTR_* names verbatim. If none of them are present the
# adapter falls back to raw 0-100 scouting columns (see derived_formulas.COL).


# ============================================================================
# 3) Boxscore / Stats Key Standards
# ============================================================================

class StatKey(str, Enum):
    """Countable stats tracked per team and per player (safe to sum across games)."""

    PTS = "PTS"
    TWO_PM = "2PM"
    TWO_PA = "2PA"
    THREE_PM = "3PM"
    THREE_PA = "3PA"
    AST = "AST"
    STL = "STL"
    BLK = "BLK"
    DRB = "DRB"
    ORB = "ORB"
    FTM = "FTM"
    FTA = "FTA"
    TOV = "TOV"
    PF = "PF"

    def __str__(self) -> str:
        return self.value


ALL_STAT_KEYS: Tuple[StatKey, ...] = tuple(StatKey)

# Player boxscore identifiers
BOX_PLAYER_ID = "PlayerID"
BOX_TEAM_ID = "TeamID"
BOX_NAME = "Name"

# Derived values live in a nested dict so that summing totals never picks them up.
DERIVED_FG_PCT = "FG%"
DERIVED_3P_PCT = "3P%"
DERIVED_FT_PCT = "FT%"
DERIVED_REB = "REB"

BOX_COLUMN_ORDER: Tuple[str, ...] = (
    BOX_NAME,
    StatKey.PTS.value,
    StatKey.TWO_PM.value, StatKey.TWO_PA.value,
    StatKey.THREE_PM.value, StatKey.THREE_PA.value,
    StatKey.FTM.value, StatKey.FTA.value,
    StatKey.ORB.value, StatKey.DRB.value,
    StatKey.AST.value, StatKey.STL.value, StatKey.BLK.value,
    StatKey.TOV.value, StatKey.PF.value,
)


def empty_stat_line() -> Dict[StatKey, int]:
    return {k: 0 for k in ALL_STAT_KEYS}
