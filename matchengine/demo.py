from __future__ import annotations

import argparse
import logging
import random
import sys

from config import load_simulation_settings
from schema import PLAYER_ATTRIBUTES
from stats_util import player_box_frame

from .core import clamp
from .game_config import build_game_config
from .models import League, Player, Team
from .sim_game import GameSimulation

# -------------------------
# Sample rosters
# -------------------------

def make_sample_player(rng: random.Random, pid: int, name: str, base: float, spread: float = 0.12) -> Player:
    attrs = {a: clamp(base + rng.uniform(-spread, spread), 0.0, 1.0) for a in PLAYER_ATTRIBUTES}
    return Player(pid=pid, name=name, attributes=attrs)


def build_sample_league(rng: random.Random, home_base: float, away_base: float, roster_size: int = 12) -> League:
    league = League(name="Demo")
    for team_id, label, base in ((1, "Home", home_base), (2, "Away", away_base)):
        league.add_team(Team(team_id=team_id, name=label))
        for i in range(roster_size):
            pid = team_id * 100 + i
            league.add_player(make_sample_player(rng, pid, f"{label[0]}{i + 1:02d}", base), team_id=team_id)
    return league


def print_box(game: GameSimulation) -> None:
    frame = player_box_frame(game.box_score())
    for team_id in (game.home_id, game.away_id):
        team = game.league.get_team(team_id)
        rows = frame[frame["TeamID"] == team_id].drop(columns=["PlayerID", "TeamID"])
        print(f"\n--- {team.name} ({game.score(team_id)}) ---")
        print(rows.to_string(index=False))


# -------------------------
# CLI entrypoint
# -------------------------

def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    ap = argparse.ArgumentParser(description="possession engine demo")
    ap.add_argument("--seed", type=int, default=123, help="RNG seed for reproducibility.")
    ap.add_argument("--home-rating", type=float, default=0.55, help="Mean attribute of the home roster (0-1).")
    ap.add_argument("--away-rating", type=float, default=0.50, help="Mean attribute of the away roster (0-1).")
    ap.add_argument("--roster-size", type=int, default=12, help="Players per team.")
    ap.add_argument("--config", default=None, help="Optional simulation_config.json override file.")
    ap.add_argument("--show-log", action="store_true", help="Print the play-by-play log.")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    cfg = build_game_config(load_simulation_settings(args.config))
    rng = random.Random(args.seed)
    league = build_sample_league(rng, args.home_rating, args.away_rating, args.roster_size)
    game = GameSimulation(league, 1, 2, config=cfg, rng=rng)
    while not game.is_over():
        game.step()

    if args.show_log:
        print(game.full_game_log())
    print(f"\nFinal Score: Home {game.home_score()} - Away {game.away_score()}"
          f" | possessions={game.state.possessions} OT={game.state.overtime_periods}")
    print_box(game)
    return 0


if __name__ == "__main__":
    sys.exit(main())
