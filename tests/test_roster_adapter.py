import pandas as pd
import pytest

from derived_formulas import compute_attributes
from schema import PLAYER_ATTRIBUTES
from sim.roster_adapter import build_league_from_frame, league_to_frame, load_league_from_csv


def _attribute_frame(scale: float = 1.0, players_per_team: int = 5) -> pd.DataFrame:
    rows = []
    for tid in (10, 20):
        for i in range(players_per_team):
            row = {"player_id": tid * 100 + i, "team_id": tid, "name": f"P{tid}-{i}", "team_name": f"Club {tid}"}
            row.update({a: 0.5 * scale for a in PLAYER_ATTRIBUTES})
            rows.append(row)
    return pd.DataFrame(rows)


def test_build_league_from_attribute_columns() -> None:
    league = build_league_from_frame(_attribute_frame())
    assert sorted(league.teams) == [10, 20]
    assert league.get_team(10).name == "Club 10"
    assert league.get_team(20).player_ids == [2000, 2001, 2002, 2003, 2004]
    assert league.get_player(1003).name == "P10-3"
    assert league.get_player(1003).get("dunk") == pytest.approx(0.5)


def test_hundred_point_scale_is_rescaled() -> None:
    league = build_league_from_frame(_attribute_frame(scale=100.0))
    assert all(v == pytest.approx(0.5) for v in league.get_player(1000).attributes.values())


def test_raw_scouting_columns_are_derived() -> None:
    frame = pd.DataFrame(
        [
            {"player_id": i, "team_id": 1 if i < 5 else 2, "Three-Point Shot": 90, "Shot IQ": 80, "height_in": 80}
            for i in range(10)
        ]
    )
    league = build_league_from_frame(frame)
    p = league.get_player(0)
    assert p.get("three_scoring") == pytest.approx((0.8 * 90 + 0.2 * 80) / 100)
    assert p.get("height") == pytest.approx(0.5)
    assert p.get("speed") == pytest.approx(0.5)
    assert p.name == "Player 0"
    assert league.get_team(2).name == "Team 2"


def test_compute_attributes_stays_in_unit_range() -> None:
    attrs = compute_attributes(pd.Series({"Three-Point Shot": 250, "Free Throw": -40}))
    assert set(attrs) == set(PLAYER_ATTRIBUTES)
    assert attrs["free_throw"] == 0.0
    assert all(0.0 <= v <= 1.0 for v in attrs.values())


def test_missing_columns_and_short_rosters_raise(tmp_path) -> None:
    with pytest.raises(ValueError, match="missing required columns"):
        build_league_from_frame(pd.DataFrame([{"player_id": 1}]))
    with pytest.raises(ValueError, match="fewer than 5"):
        build_league_from_frame(_attribute_frame(players_per_team=4))
    with pytest.raises(FileNotFoundError):
        load_league_from_csv(str(tmp_path / "nope.csv"))


def test_csv_round_trip_through_league_frame(tmp_path) -> None:
    league = build_league_from_frame(_attribute_frame())
    frame = league_to_frame(league)
    assert list(frame.columns[:4]) == ["player_id", "team_id", "team_name", "name"]
    assert len(frame) == 10

    path = tmp_path / "rosters.csv"
    frame.to_csv(path, index=False)
    reloaded = load_league_from_csv(str(path))
    assert sorted(reloaded.players) == sorted(league.players)
    assert reloaded.get_team(10).name == "Club 10"
