"""
Winning Hand Decomposition

Decides whether concealed tiles, declared melds and a completing tile
form a winning 17-tile hand (five melds and a pair), and returns one
decomposition when they do.

Shapes are tried in this order:
1. Seven pairs (no declared melds, 14 tiles)
2. Standard five melds and a pair, by ordered backtracking
3. Thirteen orphans (no declared melds, 14 tiles)

The backtracking always works on the lowest remaining tile and tries a
triplet before a sequence, so the decomposition returned for a given
input is deterministic.
"""

from typing import List, Optional, Sequence
import numpy as np

from .tiles import NUM_TILE_TYPES, NUM_NUMBERED, TERMINALS_AND_HONORS, as_counts, is_valid_tile
from .melds import (
    OpenMeld, MeldInHand, MeldType, HandShape, WinningDecomposition,
)


# Melds in a complete 16-tile hand
MELDS_PER_HAND = 5


def decompose(
    concealed_counts: Sequence[int],
    open_melds: Sequence[OpenMeld],
    winning_tile: int,
) -> Optional[WinningDecomposition]:
    """
    Find a winning decomposition.

    Args:
        concealed_counts: 34-element count array of concealed tiles,
            not including the winning tile
        open_melds: Declared melds (Chi, Pon, Kong, concealed Kong)
        winning_tile: The tile that completes the hand

    Returns:
        The decomposition, or None if the hand does not win
    """
    if not is_valid_tile(winning_tile):
        return None

    counts = as_counts(concealed_counts)
    counts[winning_tile] += 1

    if not open_melds:
        seven_pairs = _find_seven_pairs(counts)
        if seven_pairs is not None:
            return seven_pairs

    melds_needed = MELDS_PER_HAND - len(open_melds)
    if melds_needed >= 0:
        found = _find_standard(counts, melds_needed)
        if found is not None:
            pair, melds = found
            declared = [m.to_meld_in_hand() for m in open_melds]
            return WinningDecomposition(
                pair=pair,
                melds=tuple(declared + melds),
                shape=HandShape.STANDARD,
            )

    if not open_melds and is_thirteen_orphans(counts):
        pair = next(t for t in TERMINALS_AND_HONORS if counts[t] == 2)
        return WinningDecomposition(pair=pair, shape=HandShape.THIRTEEN_ORPHANS)

    return None


def is_winning(
    concealed_counts: Sequence[int],
    open_melds: Sequence[OpenMeld],
    winning_tile: int,
) -> bool:
    return decompose(concealed_counts, open_melds, winning_tile) is not None


def is_thirteen_orphans(counts: Sequence[int]) -> bool:
    """
    One of each terminal and honor plus a pair of one of them.

    Args:
        counts: Full 34-element count array (winning tile included)
    """
    pair_count = 0
    for tile in TERMINALS_AND_HONORS:
        if counts[tile] == 0 or counts[tile] > 2:
            return False
        if counts[tile] == 2:
            pair_count += 1

    # Check only these tiles exist
    for tile in range(NUM_TILE_TYPES):
        if tile not in TERMINALS_AND_HONORS and counts[tile] > 0:
            return False

    return pair_count == 1 and int(np.sum(counts)) == 14


def _find_seven_pairs(counts: np.ndarray) -> Optional[WinningDecomposition]:
    """
    Seven distinct pairs.

    The first pair becomes the pair of the decomposition and the other
    six are written as concealed triplets.
    """
    if int(np.sum(counts)) != 14:
        return None

    pairs = []
    for tile in range(NUM_TILE_TYPES):
        if counts[tile] == 2:
            pairs.append(tile)
        elif counts[tile] != 0:
            return None

    if len(pairs) != 7:
        return None

    melds = tuple(
        MeldInHand(MeldType.KE, (tile, tile, tile), is_open=False)
        for tile in pairs[1:]
    )
    return WinningDecomposition(pair=pairs[0], melds=melds, shape=HandShape.SEVEN_PAIRS)


def _find_standard(counts: np.ndarray, melds_needed: int):
    """
    Try every pair candidate, lowest first, and partition the rest.

    Returns (pair tile, melds) or None. `counts` is restored before
    returning.
    """
    if int(np.sum(counts)) != melds_needed * 3 + 2:
        return None

    for pair_tile in range(NUM_TILE_TYPES):
        if counts[pair_tile] < 2:
            continue

        counts[pair_tile] -= 2
        melds: List[MeldInHand] = []
        found = _extract_melds(counts, melds_needed, melds)
        counts[pair_tile] += 2

        if found:
            return pair_tile, melds

    return None


def _extract_melds(counts: np.ndarray, melds_needed: int, melds: List[MeldInHand]) -> bool:
    """
    Partition counts into exactly melds_needed concealed melds.

    Found melds are appended to `melds`. Counts are consumed in place and
    restored before returning.
    """
    if melds_needed == 0:
        return not counts.any()

    # Find first non-zero
    first = -1
    for tile in range(NUM_TILE_TYPES):
        if counts[tile] > 0:
            first = tile
            break

    if first == -1:
        return False

    # Try pong
    if counts[first] >= 3:
        counts[first] -= 3
        melds.append(MeldInHand(MeldType.KE, (first, first, first), is_open=False))
        if _extract_melds(counts, melds_needed - 1, melds):
            counts[first] += 3
            return True
        melds.pop()
        counts[first] += 3

    # Try chow (numbered suits only)
    if first < NUM_NUMBERED and first % 9 <= 6:
        second, third = first + 1, first + 2
        if counts[second] > 0 and counts[third] > 0:
            counts[first] -= 1
            counts[second] -= 1
            counts[third] -= 1
            melds.append(MeldInHand(MeldType.SHUN, (first, second, third), is_open=False))
            found = _extract_melds(counts, melds_needed - 1, melds)
            counts[first] += 1
            counts[second] += 1
            counts[third] += 1
            if found:
                return True
            melds.pop()

    return False
