from __future__ import annotations

"""Energy model: on-court drain and bench recovery, both proportional to possession length."""

from typing import Iterable

from .game_config import GameConfig
from .models import FULL_ENERGY, GameState, League


def energy_delta(length_sec: int, cfg: GameConfig) -> float:
    return round(float(length_sec) / float(cfg.energy_rate_divisor), 4)


def apply_energy_change(league: League, state: GameState, team_ids: Iterable[int], length_sec: int, cfg: GameConfig) -> None:
    """On-court players lose the delta (floored at 0), everyone else on the roster gains it (capped at full)."""
    amount = energy_delta(length_sec, cfg)
    for tid in team_ids:
        on_court = set(state.on_court.get(tid, []))
        for p in league.roster(tid):
            if p.pid in on_court:
                p.set_energy(p.energy - amount)
            elif p.energy < FULL_ENERGY:
                p.set_energy(p.energy + amount)
