from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Dict, Optional

import config as settings

logger = logging.getLogger(__name__)

SHOT_THREE = "three"
SHOT_MID = "mid"
SHOT_DUNK = "dunk"
SHOT_LAYUP = "layup"
SHOT_TYPES = (SHOT_THREE, SHOT_MID, SHOT_DUNK, SHOT_LAYUP)

BLOCK_PERIMETER = "perimeter"
BLOCK_INSIDE = "inside"


def _freeze_mapping(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze_mapping(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze_mapping(v) for v in value)
    return value


@dataclass(frozen=True)
class ShotProfile:
    kind: str
    points: int
    foul_rate: float
    free_throws: int
    block_class: str
    and_one_rate: float
    make_scale: float = 1.0


@dataclass(frozen=True)
class GameConfig:
    quarter_minutes: int = settings.QUARTER_MINUTES
    quarters: int = settings.QUARTERS
    shot_clock_seconds: int = settings.SHOT_CLOCK_SECONDS
    min_possession_seconds: int = settings.MIN_POSSESSION_SECONDS
    foul_limit: int = settings.FOUL_LIMIT
    blowout_margin: int = settings.BLOWOUT_MARGIN
    foul_rate: float = settings.FOUL_RATE
    defensive_foul_share: float = settings.DEFENSIVE_FOUL_SHARE
    steal_rate: float = settings.STEAL_RATE
    perimeter_block_rate: float = settings.PERIMETER_BLOCK_RATE
    inside_block_rate: float = settings.INSIDE_BLOCK_RATE
    defensive_rebound_rate: float = settings.DEFENSIVE_REBOUND_RATE
    default_turnover_rate: float = settings.DEFAULT_TURNOVER_RATE
    assist_rate: float = settings.ASSIST_RATE
    three_point_cutoff: float = settings.THREE_POINT_CUTOFF
    sub_energy_threshold: float = settings.SUB_ENERGY_THRESHOLD
    energy_rate_divisor: int = settings.ENERGY_RATE_DIVISOR
    max_offensive_rebounds: int = settings.MAX_OFFENSIVE_REBOUNDS
    overtime_enabled: bool = True
    overtime_seconds: int = settings.OVERTIME_SECONDS
    shot_profiles: Optional[Mapping[str, ShotProfile]] = None

    def __post_init__(self) -> None:
        if not self.shot_profiles:
            object.__setattr__(self, "shot_profiles", _build_shot_profiles(settings.SHOT_PROFILES))
        _validate(self)

    @property
    def game_minutes(self) -> int:
        return int(self.quarter_minutes) * int(self.quarters)

    @property
    def regulation_seconds(self) -> int:
        return self.game_minutes * 60

    def shot_profile(self, kind: str) -> ShotProfile:
        try:
            return self.shot_profiles[kind]
        except KeyError:
            raise ValueError(f"unknown shot type: {kind!r}") from None

    def block_rate(self, block_class: str) -> float:
        if block_class == BLOCK_PERIMETER:
            return self.perimeter_block_rate
        if block_class == BLOCK_INSIDE:
            return self.inside_block_rate
        raise ValueError(f"unknown block class: {block_class!r}")


_PROBABILITY_FIELDS = (
    "foul_rate",
    "defensive_foul_share",
    "steal_rate",
    "perimeter_block_rate",
    "inside_block_rate",
    "defensive_rebound_rate",
    "default_turnover_rate",
    "assist_rate",
    "three_point_cutoff",
    "sub_energy_threshold",
)

_POSITIVE_INT_FIELDS = (
    "quarter_minutes",
    "quarters",
    "shot_clock_seconds",
    "min_possession_seconds",
    "foul_limit",
    "energy_rate_divisor",
    "overtime_seconds",
)


def _validate(cfg: GameConfig) -> None:
    for name in _PROBABILITY_FIELDS:
        v = getattr(cfg, name)
        if not (0.0 <= float(v) <= 1.0):
            raise ValueError(f"GameConfig.{name} must be within [0, 1], got {v!r}")
    for name in _POSITIVE_INT_FIELDS:
        v = getattr(cfg, name)
        if int(v) <= 0:
            raise ValueError(f"GameConfig.{name} must be positive, got {v!r}")
    if cfg.min_possession_seconds > cfg.shot_clock_seconds:
        raise ValueError(
            f"min_possession_seconds ({cfg.min_possession_seconds}) exceeds shot_clock_seconds ({cfg.shot_clock_seconds})"
        )
    if cfg.blowout_margin < 0:
        raise ValueError(f"GameConfig.blowout_margin must be >= 0, got {cfg.blowout_margin!r}")
    if cfg.max_offensive_rebounds < 0:
        raise ValueError(f"GameConfig.max_offensive_rebounds must be >= 0, got {cfg.max_offensive_rebounds!r}")
    missing = [k for k in SHOT_TYPES if k not in cfg.shot_profiles]
    if missing:
        raise ValueError(f"GameConfig.shot_profiles missing shot types: {missing}")


def _build_shot_profiles(raw: Mapping[str, Any]) -> Mapping[str, ShotProfile]:
    merged: Dict[str, Dict[str, Any]] = {k: dict(v) for k, v in settings.SHOT_PROFILES.items()}
    for kind, overrides in raw.items():
        if kind not in merged:
            logger.warning("[CONFIG_UNKNOWN_SHOT] ignoring unknown shot profile %r", kind)
            continue
        if not isinstance(overrides, Mapping):
            raise ValueError(f"shot profile {kind!r} must be a mapping")
        merged[kind].update(overrides)

    out: Dict[str, ShotProfile] = {}
    for kind, values in merged.items():
        prof = ShotProfile(
            kind=kind,
            points=int(values["points"]),
            foul_rate=float(values["foul_rate"]),
            free_throws=int(values["free_throws"]),
            block_class=str(values["block_class"]),
            and_one_rate=float(values["and_one_rate"]),
            make_scale=float(values.get("make_scale", 1.0)),
        )
        for name in ("foul_rate", "and_one_rate", "make_scale"):
            v = getattr(prof, name)
            if not (0.0 <= v <= 1.0):
                raise ValueError(f"shot profile {kind}.{name} must be within [0, 1], got {v!r}")
        if prof.block_class not in (BLOCK_PERIMETER, BLOCK_INSIDE):
            raise ValueError(f"shot profile {kind}.block_class invalid: {prof.block_class!r}")
        out[kind] = prof
    return MappingProxyType(out)


def build_game_config(overrides: Optional[Mapping[str, Any]] = None) -> GameConfig:
    """Build a frozen GameConfig from a settings mapping (see config.load_simulation_settings).

    Unknown keys are logged and ignored; out-of-range values raise ValueError.
    """
    if overrides is None:
        return GameConfig()
    if not isinstance(overrides, Mapping):
        raise TypeError(f"build_game_config expected Mapping, got {type(overrides).__name__}")

    frozen = _freeze_mapping(copy.deepcopy(dict(overrides)))
    known = {f.name for f in fields(GameConfig)}
    kwargs: Dict[str, Any] = {}
    for key, value in frozen.items():
        if key not in known:
            logger.warning("[CONFIG_UNKNOWN_KEY] ignoring unknown simulation setting %r", key)
            continue
        kwargs[key] = value

    if "shot_profiles" in kwargs:
        kwargs["shot_profiles"] = _build_shot_profiles(kwargs["shot_profiles"] or {})
    return GameConfig(**kwargs)
