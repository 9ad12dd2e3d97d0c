"""
Waiting tiles (聽牌) of a hand one tile short of winning.
"""

from typing import FrozenSet, Sequence

from .tiles import NUM_TILE_TYPES, COPIES_PER_TYPE, as_counts
from .melds import OpenMeld
from .decomposition import decompose


def waiting_tiles(
    concealed_counts: Sequence[int],
    open_melds: Sequence[OpenMeld],
) -> FrozenSet[int]:
    """
    Get every tile that would complete the hand.

    Tiles already held four times in the concealed hand are skipped.
    """
    counts = as_counts(concealed_counts)
    waits = set()
    for tile in range(NUM_TILE_TYPES):
        if counts[tile] >= COPIES_PER_TYPE:
            continue
        if decompose(counts, open_melds, tile) is not None:
            waits.add(tile)
    return frozenset(waits)


def is_single_wait(
    concealed_counts: Sequence[int],
    open_melds: Sequence[OpenMeld],
) -> bool:
    """Exactly one tile completes the hand (獨聽)"""
    return len(waiting_tiles(concealed_counts, open_melds)) == 1
