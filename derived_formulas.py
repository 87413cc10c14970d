"""derived_formulas.py

Rating normalisation used by sim.roster_adapter.

- Input: a pandas Series (a row from the roster dataframe) with 0-100 scouting columns
- Output: dict[str, float] of engine attributes clamped to [0, 1]
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

from schema import (
    ATTR_ASSIST,
    ATTR_DEFENSIVE_REBOUND,
    ATTR_DUNK,
    ATTR_FREE_THROW,
    ATTR_HEIGHT,
    ATTR_INSIDE_DEFENSE,
    ATTR_INSIDE_SCORING,
    ATTR_MID_SCORING,
    ATTR_OFFENSIVE_REBOUND,
    ATTR_PERIMETER_DEFENSE,
    ATTR_SPEED,
    ATTR_STRENGTH,
    ATTR_THREE_SCORING,
    ATTR_TURNOVER,
    PLAYER_ATTRIBUTES,
)

COL = {
    "Height": "Height",
    "CloseShot": "Close Shot",
    "MidRange": "Mid-Range Shot",
    "ThreePoint": "Three-Point Shot",
    "FreeThrow": "Free Throw",
    "ShotIQ": "Shot IQ",
    "Layup": "Layup",
    "StandingDunk": "Standing Dunk",
    "DrivingDunk": "Driving Dunk",
    "Hands": "Hands",
    "PassAccuracy": "Pass Accuracy",
    "BallHandle": "Ball Handle",
    "PassIQ": "Pass IQ",
    "PassVision": "Pass Vision",
    "InteriorDef": "Interior Defense",
    "PerimeterDef": "Perimeter Defense",
    "Steal": "Steal",
    "Block": "Block",
    "OffReb": "Offensive Rebound",
    "DefReb": "Defensive Rebound",
    "Speed": "Speed",
    "Strength": "Strength",
    "Vertical": "Vertical",
}

# Height in inches mapped onto 0-100 (6'0" -> 0, 7'4" -> 100).
HEIGHT_IN_LO = 72.0
HEIGHT_IN_HI = 88.0


def _get(row, key: str, default: float = 50.0) -> float:
    c = COL.get(key)
    if c and c in row and pd.notna(row[c]):
        try:
            return float(row[c])
        except (TypeError, ValueError):
            return default
    return default


def _height_rating(row) -> float:
    if "height_in" in row and pd.notna(row["height_in"]):
        inches = float(row["height_in"])
        return (inches - HEIGHT_IN_LO) / (HEIGHT_IN_HI - HEIGHT_IN_LO) * 100.0
    return _get(row, "Height")


def _unit(x: float) -> float:
    return float(np.clip(x / 100.0, 0.0, 1.0))


def has_attribute_columns(frame: pd.DataFrame) -> bool:
    return all(a in frame.columns for a in PLAYER_ATTRIBUTES)


def compute_attributes(row) -> Dict[str, float]:
    INSIDE = 0.45*_get(row,"Layup")+0.35*_get(row,"CloseShot")+0.10*_get(row,"ShotIQ")+0.10*_get(row,"Hands")
    MID = 0.70*_get(row,"MidRange")+0.20*_get(row,"ShotIQ")+0.10*_get(row,"CloseShot")
    THREE = 0.80*_get(row,"ThreePoint")+0.20*_get(row,"ShotIQ")
    DUNK = 0.45*_get(row,"DrivingDunk")+0.35*_get(row,"StandingDunk")+0.20*_get(row,"Vertical")
    FT = _get(row,"FreeThrow")

    OREB = 0.70*_get(row,"OffReb")+0.15*_get(row,"Vertical")+0.15*_get(row,"Strength")
    DREB = 0.70*_get(row,"DefReb")+0.15*_get(row,"Vertical")+0.15*_get(row,"Strength")
    IDEF = 0.55*_get(row,"InteriorDef")+0.30*_get(row,"Block")+0.15*_get(row,"Vertical")
    PDEF = 0.60*_get(row,"PerimeterDef")+0.25*_get(row,"Steal")+0.15*_get(row,"Speed")

    AST = 0.35*_get(row,"PassAccuracy")+0.35*_get(row,"PassVision")+0.30*_get(row,"PassIQ")
    # Ball security: higher is better, same direction as every other attribute.
    TOV = 0.50*_get(row,"BallHandle")+0.30*_get(row,"Hands")+0.20*_get(row,"PassIQ")

    out = {
        ATTR_HEIGHT: _height_rating(row),
        ATTR_STRENGTH: _get(row, "Strength"),
        ATTR_SPEED: _get(row, "Speed"),
        ATTR_INSIDE_SCORING: INSIDE,
        ATTR_MID_SCORING: MID,
        ATTR_THREE_SCORING: THREE,
        ATTR_DUNK: DUNK,
        ATTR_FREE_THROW: FT,
        ATTR_OFFENSIVE_REBOUND: OREB,
        ATTR_DEFENSIVE_REBOUND: DREB,
        ATTR_INSIDE_DEFENSE: IDEF,
        ATTR_PERIMETER_DEFENSE: PDEF,
        ATTR_ASSIST: AST,
        ATTR_TURNOVER: TOV,
    }
    return {k: _unit(v) for k, v in out.items()}


def normalize_attribute_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Return a copy whose ATTR_* columns are clipped to [0, 1] (rescaled from 0-100 if needed)."""
    out = frame.copy()
    cols = list(PLAYER_ATTRIBUTES)
    values = out[cols].astype(float).to_numpy()
    if np.nanmax(values) > 1.0:
        values = values / 100.0
    out[cols] = np.clip(values, 0.0, 1.0)
    return out
