"""
Tunable engine configuration.

The defaults come from chessbot.constants. A TOML file can override any of
them; piece-keyed tables use lowercase piece names:

    [search]
    base_depth = 2

    [eval]
    opponent_weight = 1.0
    move_costs = { queen = 250 }

load_config() reads the file named by CHESSBOT_CONFIG_TOML (default
"chessbot.toml" in the working directory, silently skipped when absent) and
then applies CHESSBOT_SEARCH_DEPTH if set.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import chess

from chessbot import constants as C

_log = logging.getLogger(__name__)


@dataclass
class SearchConfig:
    base_depth: int = C.BASE_DEPTH
    extension_time_threshold_ms: int = C.EXTENSION_TIME_THRESHOLD_MS
    interest_bonus: dict[str, int] = field(default_factory=lambda: dict(C.INTEREST_BONUS))
    # Own plies are divided by the ply number and opponent plies multiplied by it.
    depth_scaling: bool = True
    moves_to_go: int = C.MOVES_TO_GO
    time_usage_fraction: float = C.TIME_USAGE_FRACTION
    time_check_nodes: int = C.TIME_CHECK_NODES


@dataclass
class EvalConfig:
    piece_values: dict[int, int] = field(default_factory=lambda: dict(C.PIECE_VALUES))
    move_costs: dict[int, int] = field(default_factory=lambda: dict(C.MOVE_COSTS))
    own_capture_multiplier: float = C.OWN_CAPTURE_MULTIPLIER
    opponent_capture_multiplier: float = C.OPPONENT_CAPTURE_MULTIPLIER
    opponent_weight: float = C.OPPONENT_WEIGHT
    check_value: int = C.CHECK_VALUE
    checkmate_value: int = C.CHECKMATE_VALUE
    draw_value: int = C.DRAW_VALUE
    draw_repetition_count: int = C.DRAW_REPETITION_COUNT
    promotion_bonus: int = C.PROMOTION_BONUS
    en_passant_bonus: int = C.EN_PASSANT_BONUS
    castle_bonus: int = C.CASTLE_BONUS
    centre_bonus: int = C.CENTRE_BONUS
    edge_penalty: int = C.EDGE_PENALTY
    pawn_advance_bonus: int = C.PAWN_ADVANCE_BONUS
    pawn_advance_rank: int = C.PAWN_ADVANCE_RANK


_PIECE_TABLES = ("piece_values", "move_costs")


def _piece_table(raw: dict[str, Any], base: dict[int, int]) -> dict[int, int]:
    """Merge a {piece name: value} table from TOML into a piece-type keyed dict."""
    merged = dict(base)
    for name, value in raw.items():
        try:
            piece_type = chess.PIECE_NAMES.index(name.lower())
        except ValueError:
            raise ValueError(f"unknown piece name in config: {name!r}") from None
        merged[piece_type] = int(value)
    return merged


def _merge(section: Any, raw: dict[str, Any]) -> None:
    for key, value in raw.items():
        if not hasattr(section, key):
            _log.warning("ignoring unknown config key: %s", key)
            continue
        if key in _PIECE_TABLES:
            value = _piece_table(value, getattr(section, key))
        elif key == "interest_bonus":
            value = {**section.interest_bonus, **{k.upper(): int(v) for k, v in value.items()}}
        setattr(section, key, value)


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    log_level: str = "INFO"

    def validate(self) -> "Config":
        """Raise ValueError for settings the search cannot run with."""
        if self.search.base_depth < 1:
            raise ValueError(f"base_depth must be >= 1, got {self.search.base_depth}")
        if self.search.moves_to_go < 1:
            raise ValueError(f"moves_to_go must be >= 1, got {self.search.moves_to_go}")
        if not 0.0 < self.search.time_usage_fraction <= 1.0:
            raise ValueError("time_usage_fraction must be in (0, 1]")
        if self.search.time_check_nodes < 1:
            raise ValueError("time_check_nodes must be >= 1")
        if any(v < 0 for v in self.search.interest_bonus.values()):
            raise ValueError("interest_bonus values must be >= 0")
        missing = set(chess.PIECE_TYPES) - set(self.eval.piece_values)
        missing |= set(chess.PIECE_TYPES) - set(self.eval.move_costs)
        if missing:
            raise ValueError(f"piece tables are missing piece types: {sorted(missing)}")
        if any(v <= 0 for v in self.eval.piece_values.values()):
            raise ValueError("piece_values must all be > 0")
        if self.eval.draw_repetition_count < 2:
            raise ValueError("draw_repetition_count must be >= 2")
        return self

    @staticmethod
    def load_from_toml(path: str) -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        if "search" in raw:
            _merge(cfg.search, raw["search"])
        if "eval" in raw:
            _merge(cfg.eval, raw["eval"])
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"]).upper()
        return cfg.validate()


def load_config() -> Config:
    """Build the configuration from the TOML file and environment overrides."""
    cfg = Config.load_from_toml(os.environ.get("CHESSBOT_CONFIG_TOML", "chessbot.toml"))
    override_depth = os.environ.get("CHESSBOT_SEARCH_DEPTH")
    if override_depth:
        try:
            cfg.search.base_depth = int(override_depth)
        except ValueError:
            _log.warning("ignoring non-integer CHESSBOT_SEARCH_DEPTH=%r", override_depth)
    return cfg.validate()
