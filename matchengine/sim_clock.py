from __future__ import annotations

"""Clock utilities (possession length, period labels, garbage-time check)."""

import random

from .game_config import GameConfig
from .models import GameState


def draw_possession_length(rng: random.Random, cfg: GameConfig) -> int:
    """Uniform integer seconds in [min_possession_seconds, shot_clock_seconds]."""
    return rng.randint(int(cfg.min_possession_seconds), int(cfg.shot_clock_seconds))


def advance_clock(state: GameState, seconds: int) -> None:
    if seconds <= 0:
        raise ValueError(f"clock must advance by a positive amount, got {seconds}")
    state.elapsed_sec += int(seconds)
    state.possessions += 1


def period_of(elapsed_sec: int, cfg: GameConfig) -> int:
    """1-based period index; overtime periods follow the regulation quarters."""
    quarter_sec = int(cfg.quarter_minutes) * 60
    if elapsed_sec < cfg.regulation_seconds:
        return elapsed_sec // quarter_sec + 1
    return int(cfg.quarters) + (elapsed_sec - cfg.regulation_seconds) // int(cfg.overtime_seconds) + 1


def format_game_clock(elapsed_sec: int, cfg: GameConfig) -> str:
    """Label like 'Q2 07:14' (time remaining in the period) or 'OT1 03:00'."""
    quarter_sec = int(cfg.quarter_minutes) * 60
    if elapsed_sec < cfg.regulation_seconds:
        q = elapsed_sec // quarter_sec
        remaining = quarter_sec - (elapsed_sec - q * quarter_sec)
        label = f"Q{q + 1}"
    else:
        ot_sec = int(cfg.overtime_seconds)
        ot = (elapsed_sec - cfg.regulation_seconds) // ot_sec
        remaining = ot_sec - (elapsed_sec - cfg.regulation_seconds - ot * ot_sec)
        label = f"OT{ot + 1}"
    return f"{label} {remaining // 60:02d}:{remaining % 60:02d}"


def is_garbage_time(state: GameState, cfg: GameConfig, length: int, offense_lead: int) -> bool:
    """Offense is up by the blowout margin and this possession reaches the end of the game."""
    return state.elapsed_sec + length >= state.scheduled_length_sec and offense_lead >= cfg.blowout_margin
