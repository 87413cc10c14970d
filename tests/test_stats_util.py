import random

from conftest import AWAY_ID, HOME_ID, make_league
from matchengine.sim_game import GameSimulation
from schema import BOX_COLUMN_ORDER, StatKey
from stats_util import compute_league_leaders, player_box_frame, team_history_frame


def _played_league(games: int = 2):
    league = make_league(0.6, 0.5)
    for i in range(games):
        home, away = (HOME_ID, AWAY_ID) if i % 2 == 0 else (AWAY_ID, HOME_ID)
        GameSimulation(league, home, away, rng=random.Random(i)).simulate()
    return league


def test_league_leaders_sorted_by_per_game_value() -> None:
    league = _played_league()
    leaders = compute_league_leaders(league, top_n=3)

    assert set(leaders) == {"PTS", "AST", "REB", "3PM"}
    pts = leaders["PTS"]
    assert len(pts) == 3
    assert [r["per_game"] for r in pts] == sorted((r["per_game"] for r in pts), reverse=True)
    top = league.get_player(pts[0]["player_id"])
    assert pts[0]["PTS"] == round(top.stat_history.get_average(StatKey.PTS), 2)


def test_players_without_games_are_not_leaders() -> None:
    league = make_league()
    assert compute_league_leaders(league) == {"PTS": [], "AST": [], "REB": [], "3PM": []}


def test_player_box_frame_columns() -> None:
    league = make_league()
    game = GameSimulation(league, HOME_ID, AWAY_ID, rng=random.Random(31))
    game.simulate()

    frame = player_box_frame(game.box_score())
    assert list(frame.columns[: 2 + len(BOX_COLUMN_ORDER)]) == ["PlayerID", "TeamID", *BOX_COLUMN_ORDER]
    assert "FG%" in frame.columns
    assert frame.loc[frame["TeamID"] == HOME_ID, "PTS"].sum() == game.home_score()

    empty = player_box_frame({})
    assert empty.empty
    assert list(empty.columns) == ["PlayerID", "TeamID", *BOX_COLUMN_ORDER]


def test_team_history_frame() -> None:
    league = _played_league(games=2)
    frame = team_history_frame(league)
    assert list(frame["games"]) == [2, 2]
    home = frame[frame["TeamID"] == HOME_ID].iloc[0]
    history = league.get_team(HOME_ID).stat_history
    assert home["PTS"] == round(history.get_average(StatKey.PTS), 2)
