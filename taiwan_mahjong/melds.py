"""
Melds and Winning Decompositions

Open melds are what a player has declared on the table. Melds-in-hand
are the result side: every group of a winning hand after decomposition,
open or concealed.
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import Iterable, Sequence, Tuple

from .tiles import is_numbered, is_valid_tile, rank_of, tile_name


class OpenMeldKind(IntEnum):
    """Types of declared melds"""
    CHI = 0        # 吃 - Sequence claimed from a discard
    PON = 1        # 碰 - Triplet claimed from a discard
    MING_KONG = 2  # 明槓 - Quad, at least one tile claimed
    AN_KONG = 3    # 暗槓 - Quad formed entirely from own draws


class MeldType(IntEnum):
    """Types of melds inside a winning hand"""
    SHUN = 0  # 順子 - Sequence
    KE = 1    # 刻子 - Triplet
    GANG = 2  # 槓 - Quad


class HandShape(IntEnum):
    """Legal winning shapes"""
    STANDARD = 0          # Five melds and a pair
    SEVEN_PAIRS = 1       # 七對子
    THIRTEEN_ORPHANS = 2  # 國士無雙


@dataclass(frozen=True)
class OpenMeld:
    """
    A declared meld.

    Attributes:
        kind: Chi, Pon, open Kong or concealed Kong
        tiles: Tile identities in the meld (3 or 4)
    """
    kind: OpenMeldKind
    tiles: Tuple[int, ...]

    def __post_init__(self):
        """Validate meld"""
        object.__setattr__(self, "tiles", tuple(int(t) for t in self.tiles))
        if not all(is_valid_tile(t) for t in self.tiles):
            raise ValueError(f"Invalid tile in meld: {self.tiles}")

        if self.kind == OpenMeldKind.CHI:
            if len(self.tiles) != 3:
                raise ValueError("Chi must have exactly 3 tiles")
            if not is_sequence(self.tiles):
                raise ValueError("Invalid Chi sequence")
        elif self.kind == OpenMeldKind.PON:
            if len(self.tiles) != 3:
                raise ValueError("Pon must have exactly 3 tiles")
            if len(set(self.tiles)) != 1:
                raise ValueError("Pon tiles must be identical")
        else:
            if len(self.tiles) != 4:
                raise ValueError("Kong must have exactly 4 tiles")
            if len(set(self.tiles)) != 1:
                raise ValueError("Kong tiles must be identical")

    @classmethod
    def chi(cls, first: int) -> "OpenMeld":
        """Create a Chi starting at the given tile"""
        return cls(OpenMeldKind.CHI, (first, first + 1, first + 2))

    @classmethod
    def pon(cls, tile: int) -> "OpenMeld":
        return cls(OpenMeldKind.PON, (tile,) * 3)

    @classmethod
    def ming_kong(cls, tile: int) -> "OpenMeld":
        return cls(OpenMeldKind.MING_KONG, (tile,) * 4)

    @classmethod
    def an_kong(cls, tile: int) -> "OpenMeld":
        return cls(OpenMeldKind.AN_KONG, (tile,) * 4)

    def to_meld_in_hand(self) -> "MeldInHand":
        """
        Convert to its result-side form.

        A concealed kong stays concealed: it is visible on the table but
        does not break a concealed hand.
        """
        if self.kind == OpenMeldKind.CHI:
            return MeldInHand(MeldType.SHUN, self.tiles, is_open=True)
        if self.kind == OpenMeldKind.PON:
            return MeldInHand(MeldType.KE, self.tiles, is_open=True)
        if self.kind == OpenMeldKind.MING_KONG:
            return MeldInHand(MeldType.GANG, self.tiles, is_open=True)
        return MeldInHand(MeldType.GANG, self.tiles, is_open=False)

    def __str__(self) -> str:
        return f"{self.kind.name}({' '.join(tile_name(t) for t in self.tiles)})"


@dataclass(frozen=True)
class MeldInHand:
    """A group of a winning hand"""
    meld_type: MeldType
    tiles: Tuple[int, ...]
    is_open: bool = False

    @property
    def base_tile(self) -> int:
        """Lowest tile of a sequence, or the repeated tile"""
        return self.tiles[0]

    @property
    def is_pung(self) -> bool:
        """Triplet or quad"""
        return self.meld_type in (MeldType.KE, MeldType.GANG)

    def __str__(self) -> str:
        state = "open" if self.is_open else "concealed"
        return f"{self.meld_type.name}[{state}]({' '.join(tile_name(t) for t in self.tiles)})"


@dataclass(frozen=True)
class WinningDecomposition:
    """
    A winning hand split into a pair and melds.

    For SEVEN_PAIRS the melds are six of the pairs written as concealed
    triplets so generic code can walk them; anything that cares about
    real triplets must check `shape` first. THIRTEEN_ORPHANS has no melds.
    """
    pair: int
    melds: Tuple[MeldInHand, ...] = field(default_factory=tuple)
    shape: HandShape = HandShape.STANDARD

    @property
    def is_standard(self) -> bool:
        return self.shape == HandShape.STANDARD

    def __str__(self) -> str:
        parts = [str(m) for m in self.melds]
        parts.append(f"PAIR({tile_name(self.pair)} {tile_name(self.pair)})")
        return " ".join(parts)


def is_sequence(tiles: Sequence[int]) -> bool:
    """Three consecutive numbered tiles of the same suit"""
    if len(tiles) != 3 or not all(is_numbered(t) for t in tiles):
        return False
    low, mid, high = sorted(tiles)
    if low // 9 != high // 9:
        return False
    return mid == low + 1 and high == mid + 1 and rank_of(low) <= 7


def is_menqing(open_melds: Iterable[OpenMeld]) -> bool:
    """No claimed melds. Concealed kongs do not break it."""
    return all(m.kind == OpenMeldKind.AN_KONG for m in open_melds)


def count_concealed_triplets(decomposition: WinningDecomposition) -> int:
    """
    Count concealed triplets and quads of a standard decomposition.

    Seven pairs and thirteen orphans have no real triplets.
    """
    if not decomposition.is_standard:
        return 0
    return sum(1 for m in decomposition.melds if m.is_pung and not m.is_open)
