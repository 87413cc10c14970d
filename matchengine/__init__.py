"""Match engine package.

Possession-by-possession game simulation over a League arena of players and
teams. Roster ingestion and multi-game dispatch live in the `sim` package.
"""
from matchengine.box_score import GameStatBook, PlayerRef, TeamRef
from matchengine.errors import MatchEngineError, PreconditionError, UnknownPlayerError, UnknownTeamError
from matchengine.game_config import GameConfig, ShotProfile, build_game_config
from matchengine.models import GameStatus, League, Player, StatLine, Team
from matchengine.sim_game import GameSimulation, simulate_game
from matchengine.stat_container import StatContainer

__all__ = [
    "GameSimulation",
    "simulate_game",
    "GameConfig",
    "ShotProfile",
    "build_game_config",
    "League",
    "Player",
    "Team",
    "StatLine",
    "GameStatus",
    "GameStatBook",
    "TeamRef",
    "PlayerRef",
    "StatContainer",
    "MatchEngineError",
    "PreconditionError",
    "UnknownTeamError",
    "UnknownPlayerError",
]
