from __future__ import annotations

from dataclasses import dataclass

from schema import StatKey

from .resolve import (
    END_FOUL,
    END_GARBAGE_TIME,
    END_TURNOVER,
    ResolveContext,
    resolve_non_shooting_foul,
    resolve_shot,
    resolve_turnover,
)
from .sim_clock import draw_possession_length, format_game_clock, is_garbage_time


@dataclass(frozen=True)
class PossessionResult:
    offense_id: int
    length_sec: int
    end_reason: str
    points: int


def simulate_possession(ctx: ResolveContext) -> PossessionResult:
    """Resolve one possession for ctx.state.offense_id; the caller advances the clock.

    Order (first applicable branch wins): garbage time, turnover, non-shooting foul, shot.
    """
    state = ctx.state
    offense_id = state.offense_id
    defense_id = state.defense_id
    book = ctx.book

    length = draw_possession_length(ctx.rng, ctx.cfg)
    ctx.clock_label = format_game_clock(state.elapsed_sec, ctx.cfg)
    pts_before = book.team_stat(offense_id, StatKey.PTS)

    lead = pts_before - book.team_stat(defense_id, StatKey.PTS)
    if is_garbage_time(state, ctx.cfg, length, lead):
        ctx.log(f"{ctx.team_name(offense_id)} runs out the clock.")
        end_reason = END_GARBAGE_TIME
    elif resolve_turnover(ctx, offense_id):
        end_reason = END_TURNOVER
    elif resolve_non_shooting_foul(ctx, offense_id, defense_id):
        end_reason = END_FOUL
    else:
        end_reason = resolve_shot(ctx, offense_id, defense_id)

    return PossessionResult(
        offense_id=offense_id,
        length_sec=length,
        end_reason=end_reason,
        points=book.team_stat(offense_id, StatKey.PTS) - pts_before,
    )
