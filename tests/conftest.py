from pathlib import Path
import sys
from typing import Dict, Optional, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from matchengine.models import League, Player, Team  # noqa: E402
from schema import PLAYER_ATTRIBUTES  # noqa: E402

HOME_ID = 1
AWAY_ID = 2


def uniform_attrs(value: float, **overrides: float) -> Dict[str, float]:
    attrs = {a: value for a in PLAYER_ATTRIBUTES}
    attrs.update(overrides)
    return attrs


def add_team(
    league: League,
    team_id: int,
    values: Sequence[float],
    *,
    name: Optional[str] = None,
    overrides: Optional[Dict[str, float]] = None,
) -> Team:
    """Add a team whose i-th player has every attribute equal to values[i] (plus overrides)."""
    team = league.add_team(Team(team_id=team_id, name=name or f"T{team_id}"))
    for i, v in enumerate(values):
        pid = team_id * 100 + i
        league.add_player(
            Player(pid=pid, name=f"T{team_id}P{i}", attributes=uniform_attrs(v, **(overrides or {}))),
            team_id=team_id,
        )
    return team


def make_league(
    home_value: float = 0.5,
    away_value: float = 0.5,
    roster_size: int = 12,
    *,
    home_overrides: Optional[Dict[str, float]] = None,
    away_overrides: Optional[Dict[str, float]] = None,
) -> League:
    league = League()
    add_team(league, HOME_ID, [home_value] * roster_size, name="Home", overrides=home_overrides)
    add_team(league, AWAY_ID, [away_value] * roster_size, name="Away", overrides=away_overrides)
    return league


@pytest.fixture
def league() -> League:
    return make_league()
