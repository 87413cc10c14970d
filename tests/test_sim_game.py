import random

import pytest

from conftest import AWAY_ID, HOME_ID, add_team, make_league
from matchengine.box_score import PlayerRef, TeamRef
from matchengine.errors import MatchEngineError, PreconditionError, UnknownTeamError
from matchengine.game_config import build_game_config
from matchengine.models import FULL_ENERGY, GameStatus, League
from matchengine.sim_game import GameSimulation, simulate_game
from matchengine.validation import ValidationConfig
from schema import StatKey


def _assert_accounting(game: GameSimulation) -> None:
    for tid in (HOME_ID, AWAY_ID):
        totals = game.team_stats(tid)
        expected_pts = 2 * totals["2PM"] + 3 * totals["3PM"] + totals["FTM"]
        assert totals["PTS"] == expected_pts
        assert totals["2PM"] <= totals["2PA"]
        assert totals["3PM"] <= totals["3PA"]
        assert totals["FTM"] <= totals["FTA"]

        players = game.player_stats(tid)
        for key in StatKey:
            assert sum(row[key.value] for row in players.values()) == totals[key.value], key


def test_every_step_keeps_game_invariants() -> None:
    league = make_league(0.6, 0.55)
    game = GameSimulation(league, HOME_ID, AWAY_ID, rng=random.Random(17))
    assert game.status is GameStatus.IN_PROGRESS

    last_offense = None
    while not game.is_over():
        before = game.elapsed_seconds()
        result = game.step()

        assert 4 <= result.length_sec <= 24
        assert game.elapsed_seconds() - before == result.length_sec
        assert result.offense_id != last_offense
        last_offense = result.offense_id

        _assert_accounting(game)
        for tid in (HOME_ID, AWAY_ID):
            on_court = game.players_on_court(tid)
            assert len({p.pid for p in on_court}) == 5
            assert all(p.fouls_in(game.game_id) < game.cfg.foul_limit for p in on_court)
            for p in league.roster(tid):
                assert 0.0 <= p.energy <= FULL_ENERGY
                assert p.energy == round(p.energy, 4)

    assert game.elapsed_seconds() >= game.cfg.regulation_seconds
    assert game.home_score() != game.away_score()


def test_stronger_team_wins_by_a_lot() -> None:
    league = make_league(0.9, 0.1)
    game = GameSimulation(league, HOME_ID, AWAY_ID, rng=random.Random(42))
    winner = game.simulate()

    assert winner.team_id == HOME_ID
    assert game.get_loser().team_id == AWAY_ID
    assert game.home_score() - game.away_score() > 30


def test_fixed_length_possessions_fill_regulation_exactly() -> None:
    league = make_league()
    cfg = build_game_config({"shot_clock_seconds": 4, "min_possession_seconds": 4})
    game = GameSimulation(league, HOME_ID, AWAY_ID, config=cfg, rng=random.Random(8))

    for _ in range(719):
        game.step()
    assert game.elapsed_seconds() == 2876
    assert not game.is_over()

    game.step()
    assert game.elapsed_seconds() == 2880
    assert game.state.possessions == 720
    assert game.regulation_is_over()
    assert game.is_over() or game.overtime_required()


def test_same_seed_same_game() -> None:
    a = simulate_game(random.Random(99), make_league(), HOME_ID, AWAY_ID)
    b = simulate_game(random.Random(99), make_league(), HOME_ID, AWAY_ID)
    assert a["final"] == b["final"]
    assert a["teams"][HOME_ID]["totals"] == b["teams"][HOME_ID]["totals"]


def test_winner_is_stable_once_over() -> None:
    game = GameSimulation(make_league(0.7, 0.4), HOME_ID, AWAY_ID, rng=random.Random(5))
    with pytest.raises(MatchEngineError, match="not over"):
        game.get_winner()

    winner = game.simulate()
    assert game.get_winner() is winner
    assert game.get_winner() is winner

    with pytest.raises(MatchEngineError):
        game.step()
    with pytest.raises(MatchEngineError, match="read-only"):
        game.book.credit(HOME_ID, 100, StatKey.PTS, 2)


def test_invalid_matchups_are_rejected() -> None:
    league = make_league()
    with pytest.raises(UnknownTeamError):
        GameSimulation(league, HOME_ID, 99)
    with pytest.raises(ValueError):
        GameSimulation(league, 99, AWAY_ID)
    with pytest.raises(PreconditionError, match="home_team_id == away_team_id"):
        GameSimulation(league, HOME_ID, HOME_ID)

    short = League()
    add_team(short, HOME_ID, [0.5] * 4)
    add_team(short, AWAY_ID, [0.5] * 8)
    with pytest.raises(PreconditionError, match="fewer than 5"):
        GameSimulation(short, HOME_ID, AWAY_ID)


def test_history_is_committed_when_game_ends() -> None:
    league = make_league(0.6, 0.5)
    game = GameSimulation(league, HOME_ID, AWAY_ID, rng=random.Random(21))
    game.simulate()

    for tid in (HOME_ID, AWAY_ID):
        history = league.get_team(tid).stat_history
        assert history.count(StatKey.PTS) == 1
        assert history.get_sum(StatKey.PTS) == game.score(tid)

    starter = league.get_player(100)
    assert starter.stat_history.count(StatKey.PTS) == 1
    assert starter.stat_history.get_sum(StatKey.PTS) == game.player_stat(100, StatKey.PTS)


def test_turnover_rate_reads_history_in_next_game() -> None:
    league = make_league()
    first = GameSimulation(league, HOME_ID, AWAY_ID, rng=random.Random(2))
    first.simulate()
    second = GameSimulation(league, AWAY_ID, HOME_ID, rng=random.Random(3))
    second.simulate()

    assert first.game_id != second.game_id
    assert league.get_team(HOME_ID).stat_history.count(StatKey.TOV) == 2
    assert league.get_player(100).game_stats.keys() >= {first.game_id, second.game_id}


def test_game_stat_lookup_by_participant() -> None:
    game = GameSimulation(make_league(), HOME_ID, AWAY_ID, rng=random.Random(4))
    game.simulate()

    assert game.get_game_stat(TeamRef(HOME_ID), StatKey.PTS) == game.home_score()
    assert game.get_game_stat(PlayerRef(100), StatKey.AST) == game.player_stat(100, StatKey.AST)
    assert game.book.player_team(205) == AWAY_ID
    with pytest.raises(UnknownTeamError):
        game.team_stat(99, StatKey.PTS)
    with pytest.raises(TypeError):
        game.get_game_stat(HOME_ID, StatKey.PTS)  # type: ignore[arg-type]


def test_play_log_round_trips_and_box_score_shape() -> None:
    game = GameSimulation(make_league(), HOME_ID, AWAY_ID, rng=random.Random(12))
    game.simulate()

    log = game.play_log
    assert log[0].startswith("Tip-off:")
    assert log[-1].startswith("Final:")
    assert any("End of period 1" in line for line in log)
    assert GameSimulation.reconstruct_game_log(game.full_game_log()) == list(log)
    assert GameSimulation.reconstruct_game_log("") == []

    box = game.box_score()
    assert box["meta"]["status"] == "over"
    assert box["meta"]["game_id"] == game.game_id
    assert box["meta"]["validation"]["ok"] is True
    assert box["final"] == {HOME_ID: game.home_score(), AWAY_ID: game.away_score()}

    home = box["teams"][HOME_ID]
    assert home["name"] == "Home"
    assert home["totals"]["PTS"] == game.home_score()
    assert home["derived"]["REB"] == home["totals"]["ORB"] + home["totals"]["DRB"]
    row = home["players"][100]
    assert row["PlayerID"] == 100
    assert row["TeamID"] == HOME_ID
    assert 0.0 <= row["derived"]["FG%"] <= 100.0


def test_scoreless_tie_goes_to_overtime() -> None:
    league = make_league(0.0, 0.0)
    cfg = build_game_config({"quarter_minutes": 1, "overtime_seconds": 60, "foul_limit": 100})
    game = GameSimulation(league, HOME_ID, AWAY_ID, config=cfg, rng=random.Random(6))

    for _ in range(60):
        game.step()

    assert not game.is_over()
    assert game.home_score() == game.away_score() == 0
    assert game.overtime_required()
    assert game.state.scheduled_length_sec == 240 + 60 * game.state.overtime_periods
    assert game.state.period == 4 + game.state.overtime_periods
    assert any("overtime period 1" in line for line in game.play_log)


def test_tie_without_overtime_has_no_winner() -> None:
    league = make_league(0.0, 0.0)
    cfg = build_game_config({"quarter_minutes": 1, "foul_limit": 100, "overtime_enabled": False})
    box = simulate_game(random.Random(6), league, HOME_ID, AWAY_ID, config=cfg)

    assert box["meta"]["status"] == "over"
    assert box["final"] == {HOME_ID: 0, AWAY_ID: 0}

    game = GameSimulation(make_league(0.0, 0.0), HOME_ID, AWAY_ID, config=cfg, rng=random.Random(6))
    with pytest.raises(MatchEngineError, match="tied"):
        game.simulate()


def test_failed_lineup_leaves_no_game_state_behind() -> None:
    league = League()
    add_team(league, HOME_ID, [0.5] * 4)
    add_team(league, AWAY_ID, [0.5] * 8)
    league.get_player(200).set_energy(0.3)

    with pytest.raises(PreconditionError, match="cannot field"):
        GameSimulation(league, HOME_ID, AWAY_ID, validation=ValidationConfig(strict=False))

    assert not league.get_team(HOME_ID).game_stats
    assert not league.get_team(AWAY_ID).game_stats
    assert all(not p.game_stats for p in league.players.values())
    assert league.get_player(200).energy == 0.3
