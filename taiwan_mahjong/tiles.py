"""
Taiwanese Mahjong Tiles

Tiles are plain integers identifying one of the 34 tile kinds:
- 0-8:   Characters (萬) 1-9
- 9-17:  Dots (筒) 1-9
- 18-26: Bamboos (條) 1-9
- 27-30: Winds (東南西北)
- 31-33: Dragons (中發白)

Flower tiles (春夏秋冬梅蘭竹菊) live in their own 0-7 space and never
take part in melds.
"""

from enum import IntEnum
from typing import Iterable, List, Sequence
import numpy as np


# Total number of unique tile types
NUM_TILE_TYPES = 34
# Copies of each tile type
COPIES_PER_TYPE = 4
# Numbered tiles occupy the first 27 identities
NUM_NUMBERED = 27


class TileSuit(IntEnum):
    """Tile suits, in identity order"""
    CHARACTERS = 0  # 萬
    DOTS = 1        # 筒
    BAMBOOS = 2     # 條
    HONORS = 3      # 字


class Wind(IntEnum):
    """Wind tiles, valued by their tile identity"""
    EAST = 27   # 東
    SOUTH = 28  # 南
    WEST = 29   # 西
    NORTH = 30  # 北


class Dragon(IntEnum):
    """Dragon tiles, valued by their tile identity"""
    RED = 31    # 中
    GREEN = 32  # 發
    WHITE = 33  # 白


class Flower(IntEnum):
    """Bonus tiles. Seasons are 0-3, plants are 4-7."""
    SPRING = 0        # 春
    SUMMER = 1        # 夏
    AUTUMN = 2        # 秋
    WINTER = 3        # 冬
    PLUM = 4          # 梅
    ORCHID = 5        # 蘭
    BAMBOO = 6        # 竹
    CHRYSANTHEMUM = 7  # 菊


SEASON_FLOWERS = (Flower.SPRING, Flower.SUMMER, Flower.AUTUMN, Flower.WINTER)
PLANT_FLOWERS = (Flower.PLUM, Flower.ORCHID, Flower.BAMBOO, Flower.CHRYSANTHEMUM)

# 1 and 9 of each suit plus every honor
TERMINALS_AND_HONORS = (0, 8, 9, 17, 18, 26, 27, 28, 29, 30, 31, 32, 33)

_SUIT_CHARS = ("萬", "筒", "條")
_HONOR_NAMES = ("東", "南", "西", "北", "中", "發", "白")
_FLOWER_NAMES = ("春", "夏", "秋", "冬", "梅", "蘭", "竹", "菊")

# Compact notation suffixes: m=萬, p=筒, s=條, z=honors (1-7 = 東南西北中發白)
_COMPACT_SUITS = {"m": 0, "p": 9, "s": 18}


def is_valid_tile(tile: int) -> bool:
    return 0 <= tile < NUM_TILE_TYPES


def is_honor(tile: int) -> bool:
    """Check if tile is a wind or dragon"""
    return NUM_NUMBERED <= tile < NUM_TILE_TYPES


def is_numbered(tile: int) -> bool:
    return 0 <= tile < NUM_NUMBERED


def is_wind(tile: int) -> bool:
    return Wind.EAST <= tile <= Wind.NORTH


def is_dragon(tile: int) -> bool:
    return Dragon.RED <= tile <= Dragon.WHITE


def is_terminal_or_honor(tile: int) -> bool:
    """Check if tile is a 1, a 9 or an honor"""
    return tile in TERMINALS_AND_HONORS


def suit_of(tile: int) -> TileSuit:
    """Get the suit of a tile"""
    if is_honor(tile):
        return TileSuit.HONORS
    return TileSuit(tile // 9)


def rank_of(tile: int) -> int:
    """Get the rank (1-9) of a numbered tile, 0 for honors"""
    if is_honor(tile):
        return 0
    return tile % 9 + 1


def tile_name(tile: int) -> str:
    """
    Human-readable name of a tile.

    Examples: 0 -> "1萬", 13 -> "5筒", 27 -> "東", 33 -> "白"
    """
    if not is_valid_tile(tile):
        raise ValueError(f"Tile identity must be 0-33, got {tile}")
    if is_honor(tile):
        return _HONOR_NAMES[tile - NUM_NUMBERED]
    return f"{rank_of(tile)}{_SUIT_CHARS[tile // 9]}"


def flower_name(flower: int) -> str:
    if not 0 <= flower < len(_FLOWER_NAMES):
        raise ValueError(f"Flower must be 0-7, got {flower}")
    return _FLOWER_NAMES[flower]


def tile_from_string(s: str) -> int:
    """
    Parse a single tile.

    Accepts the Chinese names produced by tile_name() ("1萬", "9條", "東",
    "中") and compact tokens ("1m", "5p", "9s", "1z"-"7z").
    """
    s = s.strip()

    if s in _HONOR_NAMES:
        return NUM_NUMBERED + _HONOR_NAMES.index(s)

    if len(s) == 2 and s[0].isdigit():
        value = int(s[0])
        suffix = s[1]
        if suffix in _SUIT_CHARS and 1 <= value <= 9:
            return _SUIT_CHARS.index(suffix) * 9 + value - 1
        if suffix in _COMPACT_SUITS and 1 <= value <= 9:
            return _COMPACT_SUITS[suffix] + value - 1
        if suffix == "z" and 1 <= value <= 7:
            return NUM_NUMBERED + value - 1

    raise ValueError(f"Cannot parse tile string: {s!r}")


def parse_tiles(text: str) -> List[int]:
    """
    Parse a whitespace separated list of tiles.

    Compact groups share one suffix, so "123m 55z" is
    [1萬, 2萬, 3萬, 中, 中]. Chinese names may be mixed in: "1萬 東 東".
    """
    tiles: List[int] = []
    for token in text.split():
        suffix = token[-1]
        digits = token[:-1]
        if suffix in _COMPACT_SUITS or suffix == "z":
            if not digits.isdigit():
                raise ValueError(f"Cannot parse tile group: {token!r}")
            tiles.extend(tile_from_string(d + suffix) for d in digits)
        else:
            tiles.append(tile_from_string(token))
    return tiles


def tiles_to_counts(tiles: Iterable[int]) -> np.ndarray:
    """Convert a list of tiles to a 34-element count array"""
    counts = np.zeros(NUM_TILE_TYPES, dtype=np.int8)
    for tile in tiles:
        if not is_valid_tile(tile):
            raise ValueError(f"Tile identity must be 0-33, got {tile}")
        counts[tile] += 1
    return counts


def counts_to_tiles(counts: Sequence[int]) -> List[int]:
    """Expand a count array into a sorted list of tiles"""
    tiles = []
    for tile, count in enumerate(counts):
        tiles.extend([tile] * int(count))
    return tiles


def total_count(counts: Sequence[int]) -> int:
    return int(np.sum(counts))


def as_counts(counts: Sequence[int]) -> np.ndarray:
    """
    Take a private int8 copy of a caller's count vector.

    Callers may pass lists, tuples or arrays; the result is always safe
    to modify in place.
    """
    array = np.array(counts, dtype=np.int8)
    if array.shape != (NUM_TILE_TYPES,):
        raise ValueError(f"Count vector must have 34 entries, got shape {array.shape}")
    return array


def format_counts(counts: Sequence[int]) -> str:
    """Format a count array as tile names (for display and debugging)"""
    return " ".join(tile_name(t) for t in counts_to_tiles(counts))
