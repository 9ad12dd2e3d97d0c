"""
Taiwanese Mahjong Rules Engine
16-tile Taiwanese Mahjong: winning hand detection and 台 scoring
"""

from .tiles import Wind, Dragon, Flower, TileSuit, tile_name, parse_tiles, tiles_to_counts
from .melds import OpenMeld, OpenMeldKind, MeldInHand, MeldType, HandShape, WinningDecomposition
from .decomposition import decompose, is_winning, is_thirteen_orphans
from .waits import waiting_tiles, is_single_wait
from .rules import RulesConfig, DEFAULT_RULES, FLOWERS_AND_HONORS_RULES
from .scoring import TaiwanScorer, Scenario, ScoreResult, FanResult, FanPattern, FAN_PATTERNS, calculate_score

__version__ = "0.1.0"
__all__ = [
    "Wind",
    "Dragon",
    "Flower",
    "TileSuit",
    "tile_name",
    "parse_tiles",
    "tiles_to_counts",
    "OpenMeld",
    "OpenMeldKind",
    "MeldInHand",
    "MeldType",
    "HandShape",
    "WinningDecomposition",
    "decompose",
    "is_winning",
    "is_thirteen_orphans",
    "waiting_tiles",
    "is_single_wait",
    "RulesConfig",
    "DEFAULT_RULES",
    "FLOWERS_AND_HONORS_RULES",
    "TaiwanScorer",
    "Scenario",
    "ScoreResult",
    "FanResult",
    "FanPattern",
    "FAN_PATTERNS",
    "calculate_score",
]
