from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from schema import (
    ATTR_DUNK,
    ATTR_FREE_THROW,
    ATTR_INSIDE_DEFENSE,
    ATTR_INSIDE_SCORING,
    ATTR_MID_SCORING,
    ATTR_PERIMETER_DEFENSE,
    ATTR_THREE_SCORING,
    StatKey,
)

from .box_score import GameStatBook
from .core import chance
from .game_config import (
    BLOCK_INSIDE,
    SHOT_DUNK,
    SHOT_LAYUP,
    SHOT_MID,
    SHOT_THREE,
    GameConfig,
    ShotProfile,
)
from .models import GameState, League, Player
from .participants import (
    choose_assister,
    choose_defender,
    choose_fouler,
    choose_rebounder,
    choose_shooter,
    choose_uniform_player,
)

SHOT_ATTRIBUTE = {
    SHOT_THREE: ATTR_THREE_SCORING,
    SHOT_MID: ATTR_MID_SCORING,
    SHOT_DUNK: ATTR_DUNK,
    SHOT_LAYUP: ATTR_INSIDE_SCORING,
}

SHOT_LABEL = {
    SHOT_THREE: "three pointer",
    SHOT_MID: "mid-range jumper",
    SHOT_DUNK: "dunk",
    SHOT_LAYUP: "layup",
}

# Possession end reasons
END_GARBAGE_TIME = "GARBAGE_TIME"
END_TURNOVER = "TURNOVER"
END_FOUL = "FOUL"
END_STEAL = "STEAL"
END_SHOOTING_FOUL = "SHOOTING_FOUL"
END_MADE_SHOT = "MADE_SHOT"
END_DEFENSIVE_REBOUND = "DRB"
END_ORB_LIMIT = "ORB_LIMIT"


@dataclass
class ResolveContext:
    rng: random.Random
    league: League
    state: GameState
    book: GameStatBook
    cfg: GameConfig
    clock_label: str = ""

    def log(self, text: str) -> None:
        self.state.log(f"{self.clock_label} {text}" if self.clock_label else text)

    def team_name(self, team_id: int) -> str:
        return self.league.get_team(team_id).name


# -------------------------
# Turnover
# -------------------------

def turnover_probability(league: League, team_id: int, cfg: GameConfig) -> float:
    """Historical TOV per game spread over game minutes; default rate without history."""
    history = league.get_team(team_id).stat_history
    if history.stat_is_empty(StatKey.TOV):
        return cfg.default_turnover_rate
    avg = history.get_average(StatKey.TOV)
    if avg <= 0:
        return cfg.default_turnover_rate
    return avg / cfg.game_minutes


def resolve_turnover(ctx: ResolveContext, offense_id: int) -> bool:
    p = turnover_probability(ctx.league, offense_id, ctx.cfg)
    if p < ctx.rng.random():
        return False
    player = choose_uniform_player(ctx.rng, ctx.league, ctx.state, offense_id)
    ctx.book.credit(offense_id, player.pid, StatKey.TOV)
    ctx.log(f"{ctx.team_name(offense_id)}: {player.name} turns the ball over.")
    return True


# -------------------------
# Free throws / fouls
# -------------------------

def resolve_free_throws(
    ctx: ResolveContext,
    fouling_team_id: int,
    shooter: Optional[Player],
    attempts: int,
) -> int:
    """Charge a foul to a uniform player of the fouling team and shoot `attempts` free throws.

    Shots are only taken when the fouling team is the defense; returns points scored.
    """
    state = ctx.state
    fouler = choose_fouler(ctx.rng, ctx.league, state, fouling_team_id)
    ctx.book.credit(fouling_team_id, fouler.pid, StatKey.PF)
    fouls = ctx.book.player_stat(fouler.pid, StatKey.PF)
    ctx.log(f"{ctx.team_name(fouling_team_id)}: foul on {fouler.name} ({fouls} PF).")
    if fouls >= ctx.cfg.foul_limit:
        ctx.log(f"{ctx.team_name(fouling_team_id)}: {fouler.name} has fouled out.")

    if attempts <= 0 or fouling_team_id != state.defense_id:
        return 0

    shooting_team_id = state.offense_id
    if shooter is None:
        shooter = choose_uniform_player(ctx.rng, ctx.league, state, shooting_team_id)

    points = 0
    for i in range(attempts):
        ctx.book.credit(shooting_team_id, shooter.pid, StatKey.FTA)
        if chance(ctx.rng, shooter.get(ATTR_FREE_THROW)):
            ctx.book.credit(shooting_team_id, shooter.pid, StatKey.FTM)
            ctx.book.credit(shooting_team_id, shooter.pid, StatKey.PTS)
            points += 1
            ctx.log(f"{ctx.team_name(shooting_team_id)}: {shooter.name} makes free throw {i + 1} of {attempts}.")
        else:
            ctx.log(f"{ctx.team_name(shooting_team_id)}: {shooter.name} misses free throw {i + 1} of {attempts}.")
    return points


def resolve_non_shooting_foul(ctx: ResolveContext, offense_id: int, defense_id: int) -> bool:
    if not chance(ctx.rng, ctx.cfg.foul_rate):
        return False
    if chance(ctx.rng, ctx.cfg.defensive_foul_share):
        resolve_free_throws(ctx, defense_id, None, 2)
    else:
        resolve_free_throws(ctx, offense_id, None, 0)
    return True


# -------------------------
# Shot sub-resolutions
# -------------------------

def select_shot_profile(shooter: Player, cfg: GameConfig) -> ShotProfile:
    if shooter.get(ATTR_THREE_SCORING) > cfg.three_point_cutoff:
        return cfg.shot_profile(SHOT_THREE)
    inside = shooter.get(ATTR_INSIDE_SCORING)
    if shooter.get(ATTR_MID_SCORING) > inside:
        return cfg.shot_profile(SHOT_MID)
    if shooter.get(ATTR_DUNK) > inside:
        return cfg.shot_profile(SHOT_DUNK)
    return cfg.shot_profile(SHOT_LAYUP)


def resolve_steal(ctx: ResolveContext, offense_id: int, defense_id: int, shooter: Player) -> bool:
    if not chance(ctx.rng, ctx.cfg.steal_rate):
        return False
    defender = choose_defender(ctx.rng, ctx.league, ctx.state, defense_id)
    if defender.get(ATTR_PERIMETER_DEFENSE) < ctx.rng.random():
        return False
    ctx.book.credit(defense_id, defender.pid, StatKey.STL)
    ctx.book.credit(offense_id, shooter.pid, StatKey.TOV)
    ctx.log(f"{ctx.team_name(defense_id)}: {defender.name} steals the ball from {shooter.name}.")
    return True


def resolve_block(ctx: ResolveContext, defense_id: int, shooter: Player, profile: ShotProfile) -> Optional[Player]:
    if not chance(ctx.rng, ctx.cfg.block_rate(profile.block_class)):
        return None
    defender = choose_defender(ctx.rng, ctx.league, ctx.state, defense_id)
    attr = ATTR_INSIDE_DEFENSE if profile.block_class == BLOCK_INSIDE else ATTR_PERIMETER_DEFENSE
    if defender.get(attr) < ctx.rng.random():
        return None
    ctx.book.credit(defense_id, defender.pid, StatKey.BLK)
    ctx.log(f"{ctx.team_name(defense_id)}: {defender.name} blocks {shooter.name}'s {SHOT_LABEL[profile.kind]}.")
    return defender


def resolve_assist(ctx: ResolveContext, offense_id: int) -> Optional[Player]:
    if not chance(ctx.rng, ctx.cfg.assist_rate):
        return None
    assister = choose_assister(ctx.rng, ctx.league, ctx.state, offense_id)
    ctx.book.credit(offense_id, assister.pid, StatKey.AST)
    return assister


def resolve_rebound(ctx: ResolveContext, offense_id: int, defense_id: int) -> bool:
    """Return True when the offense keeps the ball."""
    if chance(ctx.rng, ctx.cfg.defensive_rebound_rate):
        rebounder = choose_rebounder(ctx.rng, ctx.league, ctx.state, defense_id)
        ctx.book.credit(defense_id, rebounder.pid, StatKey.DRB)
        ctx.log(f"{ctx.team_name(defense_id)}: {rebounder.name} grabs the defensive rebound.")
        return False
    rebounder = choose_rebounder(ctx.rng, ctx.league, ctx.state, offense_id)
    ctx.book.credit(offense_id, rebounder.pid, StatKey.ORB)
    ctx.log(f"{ctx.team_name(offense_id)}: {rebounder.name} grabs the offensive rebound.")
    return True


def _record_attempt(ctx: ResolveContext, offense_id: int, shooter: Player, profile: ShotProfile) -> None:
    key = StatKey.THREE_PA if profile.kind == SHOT_THREE else StatKey.TWO_PA
    ctx.book.credit(offense_id, shooter.pid, key)


def _record_make(ctx: ResolveContext, offense_id: int, shooter: Player, profile: ShotProfile) -> None:
    key = StatKey.THREE_PM if profile.kind == SHOT_THREE else StatKey.TWO_PM
    ctx.book.credit(offense_id, shooter.pid, key)
    ctx.book.credit(offense_id, shooter.pid, StatKey.PTS, profile.points)


def resolve_shot(ctx: ResolveContext, offense_id: int, defense_id: int) -> str:
    """Shot sub-tree. Offensive rebounds loop back into a new shot without clock cost."""
    offensive_rebounds = 0
    while True:
        shooter = choose_shooter(ctx.rng, ctx.league, ctx.state, offense_id)
        if resolve_steal(ctx, offense_id, defense_id, shooter):
            return END_STEAL

        profile = select_shot_profile(shooter, ctx.cfg)
        label = SHOT_LABEL[profile.kind]
        team_name = ctx.team_name(offense_id)

        if chance(ctx.rng, profile.foul_rate):
            ctx.log(f"{team_name}: {shooter.name} is fouled on a {label}.")
            resolve_free_throws(ctx, defense_id, shooter, profile.free_throws)
            return END_SHOOTING_FOUL

        _record_attempt(ctx, offense_id, shooter, profile)
        blocker = resolve_block(ctx, defense_id, shooter, profile)
        made = blocker is None and chance(ctx.rng, shooter.get(SHOT_ATTRIBUTE[profile.kind]) * profile.make_scale)

        if made:
            _record_make(ctx, offense_id, shooter, profile)
            assister = resolve_assist(ctx, offense_id)
            if assister is not None:
                ctx.log(f"{team_name}: {shooter.name} makes a {label} (assist {assister.name}).")
            else:
                ctx.log(f"{team_name}: {shooter.name} makes a {label}.")
            if chance(ctx.rng, profile.and_one_rate):
                ctx.log(f"{team_name}: and one for {shooter.name}.")
                resolve_free_throws(ctx, defense_id, shooter, 1)
            return END_MADE_SHOT

        if blocker is None:
            ctx.log(f"{team_name}: {shooter.name} misses a {label}.")
        if not resolve_rebound(ctx, offense_id, defense_id):
            return END_DEFENSIVE_REBOUND
        offensive_rebounds += 1
        if offensive_rebounds >= ctx.cfg.max_offensive_rebounds:
            ctx.log(f"{team_name}: shot clock runs out after {offensive_rebounds} offensive rebounds.")
            return END_ORB_LIMIT
