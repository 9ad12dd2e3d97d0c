"""
Taiwanese Mahjong Scoring System

Counts 台 (fan) for a winning 16-tile hand according to the Republic of
China Mahjong Association rules, with every category switchable through
RulesConfig.

Categories are evaluated in four groups:
1. Exclusive patterns (天胡, 地胡, 大四喜, 國士無雙)
2. High-value composition patterns (8 台)
3. Mid-value composition patterns (5, 4 and 2 台)
4. Flat bonuses (1 台 each, flowers, dealer and situational wins)

Higher patterns suppress the bonuses they already imply: 天胡/地胡 drop
自摸, 門清 and 不求; 大四喜 drops the wind pung bonuses; 國士無雙 stands
alone. Lower tiers are skipped once a higher tier of the same family
was added (五暗刻 > 四暗刻 > 三暗刻, 清一色/字一色 > 混一色).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np

from .tiles import (
    Wind, Flower, NUM_TILE_TYPES, SEASON_FLOWERS, PLANT_FLOWERS,
    as_counts, is_honor, is_numbered, is_wind, is_dragon, total_count,
)
from .melds import (
    OpenMeld, OpenMeldKind, MeldInHand, MeldType, HandShape,
    WinningDecomposition, is_menqing, count_concealed_triplets,
)
from .decomposition import decompose
from .waits import is_single_wait
from .rules import RulesConfig, DEFAULT_RULES


logger = logging.getLogger(__name__)

# 底 - points per 台
BASE_POINTS = 10


@dataclass(frozen=True)
class Scenario:
    """
    Situation of the win.

    Attributes:
        is_self_draw: Won on own draw (自摸) rather than a discard
        is_dealer: Winner is the dealer (莊家)
        dealer_streak: Consecutive dealer wins so far (連莊)
        round_wind: Prevalent wind (圈風)
        seat_wind: Winner's seat wind (門風)
        is_last_tile: Won on the last tile of the wall (海底)
        is_kong_replacement: Won on the replacement tile after a kong (槓上開花)
        is_robbing_kong: Won on a tile another player added to a kong (搶槓)
        is_heavenly_hand: Dealer complete on the initial deal (天胡)
        is_earthly_hand: Non-dealer complete on the first draw (地胡)
        flowers: Flower tiles held, 0-7 (春夏秋冬梅蘭竹菊)
    """
    is_self_draw: bool = False
    is_dealer: bool = False
    dealer_streak: int = 0
    round_wind: Wind = Wind.EAST
    seat_wind: Wind = Wind.EAST
    is_last_tile: bool = False
    is_kong_replacement: bool = False
    is_robbing_kong: bool = False
    is_heavenly_hand: bool = False
    is_earthly_hand: bool = False
    flowers: Tuple[int, ...] = ()

    def __post_init__(self):
        """Validate scenario"""
        object.__setattr__(self, "round_wind", Wind(self.round_wind))
        object.__setattr__(self, "seat_wind", Wind(self.seat_wind))
        object.__setattr__(self, "flowers", tuple(sorted(self.flowers)))
        if self.dealer_streak < 0:
            raise ValueError(f"Dealer streak must be >= 0, got {self.dealer_streak}")
        if len(set(self.flowers)) != len(self.flowers):
            raise ValueError(f"Duplicate flower tiles: {self.flowers}")
        for flower in self.flowers:
            Flower(flower)

    @property
    def seat_index(self) -> int:
        """0=East ... 3=North, the position matched by seat flowers"""
        return self.seat_wind - Wind.EAST


@dataclass(frozen=True)
class FanPattern:
    """
    A scoring category.

    Attributes:
        key: Identity of this category
        rule: RulesConfig toggle that gates it
        name: English name
        chinese_name: Name as written on the rule sheet
        points: 台 per occurrence
    """
    key: str
    rule: str
    name: str
    chinese_name: str
    points: int


def _pattern(key: str, name: str, chinese_name: str, points: int, rule: Optional[str] = None) -> FanPattern:
    return FanPattern(key, rule or key, name, chinese_name, points)


# ========== 16 台 ==========
HEAVENLY_HAND = _pattern("heavenly_hand", "Heavenly Hand", "天胡", 16)
EARTHLY_HAND = _pattern("earthly_hand", "Earthly Hand", "地胡", 16)
BIG_FOUR_WINDS = _pattern("big_four_winds", "Big Four Winds", "大四喜", 16)

# ========== 8 台 ==========
THIRTEEN_ORPHANS = _pattern("thirteen_orphans", "Thirteen Orphans", "國士無雙", 8)
BIG_THREE_DRAGONS = _pattern("big_three_dragons", "Big Three Dragons", "大三元", 8)
LITTLE_FOUR_WINDS = _pattern("little_four_winds", "Little Four Winds", "小四喜", 8)
ALL_HONORS = _pattern("all_honors", "All Honors", "字一色", 8)
FULL_FLUSH = _pattern("full_flush", "Full Flush", "清一色", 8)
FIVE_CONCEALED_PUNGS = _pattern("five_concealed_pungs", "Five Concealed Pungs", "五暗刻", 8)
EIGHT_FLOWERS = _pattern("eight_flowers", "Eight Immortals Crossing the Sea", "八仙過海", 8)

# ========== 5 台 ==========
FOUR_CONCEALED_PUNGS = _pattern("four_concealed_pungs", "Four Concealed Pungs", "四暗刻", 5)

# ========== 4 台 ==========
HALF_FLUSH = _pattern("half_flush", "Half Flush", "混一色", 4)
ALL_PUNGS = _pattern("all_pungs", "All Pungs", "碰碰胡", 4)
LITTLE_THREE_DRAGONS = _pattern("little_three_dragons", "Little Three Dragons", "小三元", 4)
SEVEN_PAIRS = _pattern("seven_pairs", "Seven Pairs", "七對子", 4)

# ========== 2 台 ==========
ALL_CHOWS = _pattern("all_chows", "All Chows", "平胡", 2)
MELDED_HAND = _pattern("melded_hand", "Melded Hand", "全求人", 2)
THREE_CONCEALED_PUNGS = _pattern("three_concealed_pungs", "Three Concealed Pungs", "三暗刻", 2)
SEASONS_FLOWER_KONG = _pattern("seasons_flower_kong", "Flower Kong (Seasons)", "花槓（春夏秋冬）", 2, rule="flower_kong")
PLANTS_FLOWER_KONG = _pattern("plants_flower_kong", "Flower Kong (Plants)", "花槓（梅蘭竹菊）", 2, rule="flower_kong")

# ========== 1 台 ==========
CONCEALED_HAND = _pattern("concealed_hand", "Concealed Hand", "門清", 1)
FULLY_CONCEALED_SELF_DRAWN = _pattern("fully_concealed_self_drawn", "Fully Concealed Self-Drawn", "不求", 1)
RED_DRAGON_PUNG = _pattern("red_dragon_pung", "Red Dragon Pung", "中", 1, rule="dragon_pung")
GREEN_DRAGON_PUNG = _pattern("green_dragon_pung", "Green Dragon Pung", "發", 1, rule="dragon_pung")
WHITE_DRAGON_PUNG = _pattern("white_dragon_pung", "White Dragon Pung", "白", 1, rule="dragon_pung")
PREVALENT_WIND = _pattern("prevalent_wind", "Prevalent Wind", "圈風", 1)
SEAT_WIND = _pattern("seat_wind", "Seat Wind", "門風", 1)
WIND_PUNG = _pattern("wind_pung", "Wind Pung", "風刻", 1, rule="flowers_and_honors")
FLOWER_TILES = _pattern("flower_tiles", "Flower Tiles", "花牌", 1)
DEALER = _pattern("dealer", "Dealer", "莊家", 1)
DEALER_STREAK = _pattern("dealer_streak", "Dealer Streak", "連莊", 1)
STREAK_BONUS = _pattern("streak_bonus", "Streak Bonus", "拉莊", 1)
SELF_DRAWN = _pattern("self_drawn", "Self-Drawn", "自摸", 1)
LAST_TILE_DRAW = _pattern("last_tile_draw", "Last Tile Draw", "海底撈月", 1, rule="last_tile")
LAST_TILE_CLAIM = _pattern("last_tile_claim", "Last Tile Claim", "河底撈魚", 1, rule="last_tile")
KONG_REPLACEMENT = _pattern("kong_replacement", "Out with Replacement Tile", "槓上開花", 1)
ROBBING_KONG = _pattern("robbing_kong", "Robbing the Kong", "搶槓", 1)
SINGLE_WAIT = _pattern("single_wait", "Single Wait", "獨聽", 1)

FAN_PATTERNS: Dict[str, FanPattern] = {
    p.key: p for p in (
        HEAVENLY_HAND, EARTHLY_HAND, BIG_FOUR_WINDS,
        THIRTEEN_ORPHANS, BIG_THREE_DRAGONS, LITTLE_FOUR_WINDS, ALL_HONORS,
        FULL_FLUSH, FIVE_CONCEALED_PUNGS, EIGHT_FLOWERS,
        FOUR_CONCEALED_PUNGS,
        HALF_FLUSH, ALL_PUNGS, LITTLE_THREE_DRAGONS, SEVEN_PAIRS,
        ALL_CHOWS, MELDED_HAND, THREE_CONCEALED_PUNGS,
        SEASONS_FLOWER_KONG, PLANTS_FLOWER_KONG,
        CONCEALED_HAND, FULLY_CONCEALED_SELF_DRAWN,
        RED_DRAGON_PUNG, GREEN_DRAGON_PUNG, WHITE_DRAGON_PUNG,
        PREVALENT_WIND, SEAT_WIND, WIND_PUNG, FLOWER_TILES,
        DEALER, DEALER_STREAK, STREAK_BONUS, SELF_DRAWN,
        LAST_TILE_DRAW, LAST_TILE_CLAIM, KONG_REPLACEMENT, ROBBING_KONG,
        SINGLE_WAIT,
    )
}

_DRAGON_PUNGS = {31: RED_DRAGON_PUNG, 32: GREEN_DRAGON_PUNG, 33: WHITE_DRAGON_PUNG}


@dataclass(frozen=True)
class FanResult:
    """One scored category"""
    key: str
    name: str
    chinese_name: str
    fan: int


@dataclass
class ScoreResult:
    """Result of scoring calculation"""
    fans: List[FanResult] = field(default_factory=list)
    total_fan: int = 0
    is_winning: bool = False
    decomposition: Optional[WinningDecomposition] = None
    base_points: int = BASE_POINTS

    @property
    def total_points(self) -> int:
        return self.total_fan * self.base_points

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fans]

    def has(self, *keys: str) -> bool:
        """Check if any of the given categories was added"""
        return any(f.key in keys for f in self.fans)

    def add_fan(self, pattern: FanPattern, fan: Optional[int] = None) -> None:
        """Add a category to the result"""
        value = pattern.points if fan is None else fan
        self.fans.append(FanResult(pattern.key, pattern.name, pattern.chinese_name, value))
        self.total_fan += value


@dataclass
class ScoringContext:
    """Winning hand analysed for scoring"""
    concealed_counts: np.ndarray   # Concealed tiles, winning tile excluded
    open_melds: Sequence[OpenMeld]
    winning_tile: int
    scenario: Scenario
    decomposition: WinningDecomposition

    # Computed fields (set during analysis)
    all_counts: np.ndarray = field(default_factory=lambda: np.zeros(NUM_TILE_TYPES, dtype=np.int8))
    pungs: List[MeldInHand] = field(default_factory=list)
    is_concealed: bool = False
    concealed_pungs: int = 0

    def __post_init__(self):
        self._analyze()

    def _analyze(self):
        """Analyze the hand structure"""
        # Every tile of the hand: concealed, winning tile and declared melds
        self.all_counts = self.concealed_counts.copy()
        self.all_counts[self.winning_tile] += 1
        for meld in self.open_melds:
            for tile in meld.tiles:
                self.all_counts[tile] += 1

        # Only a standard hand has real triplets
        if self.decomposition.is_standard:
            self.pungs = [m for m in self.decomposition.melds if m.is_pung]
        else:
            self.pungs = []

        self.is_concealed = is_menqing(self.open_melds)
        self.concealed_pungs = self._count_concealed_pungs()

    def _count_concealed_pungs(self) -> int:
        """
        Concealed triplets the player formed from their own draws.

        On a discard win, a concealed triplet of the winning tile was
        completed by someone else's tile and does not count, unless the
        triplet was already held before the win.
        """
        count = count_concealed_triplets(self.decomposition)
        if count and not self.scenario.is_self_draw and self.concealed_counts[self.winning_tile] < 3:
            for meld in self.decomposition.melds:
                if meld.meld_type == MeldType.KE and not meld.is_open and meld.base_tile == self.winning_tile:
                    count -= 1
                    break
        return count

    @property
    def tiles_present(self) -> List[int]:
        return [t for t in range(NUM_TILE_TYPES) if self.all_counts[t] > 0]

    @property
    def wind_pungs(self) -> List[MeldInHand]:
        return [m for m in self.pungs if is_wind(m.base_tile)]

    @property
    def dragon_pungs(self) -> List[MeldInHand]:
        return [m for m in self.pungs if is_dragon(m.base_tile)]


class TaiwanScorer:
    """
    Taiwanese 16-tile Mahjong scorer.

    Holds a default RulesConfig; each call may pass its own.
    """

    def __init__(self, rules: Optional[RulesConfig] = None):
        self.rules = rules or DEFAULT_RULES

    def calculate_score(
        self,
        concealed_counts: Sequence[int],
        open_melds: Sequence[OpenMeld],
        winning_tile: int,
        scenario: Scenario,
        rules: Optional[RulesConfig] = None,
    ) -> ScoreResult:
        """
        Score a hand.

        Args:
            concealed_counts: 34-element count array of concealed tiles,
                not including the winning tile
            open_melds: Declared melds
            winning_tile: The tile that completed the hand
            scenario: Situation of the win
            rules: Rule set to use (defaults to the scorer's)

        Returns:
            ScoreResult; is_winning is False and nothing is scored when
            the tiles do not form a winning hand
        """
        rules = rules or self.rules
        counts = as_counts(concealed_counts)

        decomposition = decompose(counts, open_melds, winning_tile)
        if decomposition is None:
            logger.debug(f"Not a winning hand (winning tile {winning_tile})")
            return ScoreResult()

        ctx = ScoringContext(
            concealed_counts=counts,
            open_melds=list(open_melds),
            winning_tile=winning_tile,
            scenario=scenario,
            decomposition=decomposition,
        )
        result = ScoreResult(is_winning=True, decomposition=decomposition)
        logger.debug(f"Decomposition: {decomposition}")

        # 國士無雙 stands alone
        if decomposition.shape == HandShape.THIRTEEN_ORPHANS and rules.is_enabled(THIRTEEN_ORPHANS.rule):
            result.add_fan(THIRTEEN_ORPHANS)
            logger.debug(f"Scored {result.keys}, total {result.total_fan}")
            return result

        self._check_exclusive_patterns(ctx, rules, result)
        self._check_high_patterns(ctx, rules, result)
        self._check_mid_patterns(ctx, rules, result)
        self._check_basic_patterns(ctx, rules, result)
        self._check_flowers(ctx, rules, result)
        self._check_situational(ctx, rules, result)

        logger.debug(f"Scored {result.keys}, total {result.total_fan}")
        return result

    @staticmethod
    def _add(result: ScoreResult, rules: RulesConfig, pattern: FanPattern, fan: Optional[int] = None) -> None:
        if rules.is_enabled(pattern.rule):
            result.add_fan(pattern, fan)

    # ========== Group 1: exclusive patterns ==========

    def _check_exclusive_patterns(self, ctx: ScoringContext, rules: RulesConfig, result: ScoreResult) -> None:
        if ctx.scenario.is_heavenly_hand:
            self._add(result, rules, HEAVENLY_HAND)

        if ctx.scenario.is_earthly_hand:
            self._add(result, rules, EARTHLY_HAND)

        if len(ctx.wind_pungs) == 4:
            self._add(result, rules, BIG_FOUR_WINDS)

    # ========== Group 2: 8 台 ==========

    def _check_high_patterns(self, ctx: ScoringContext, rules: RulesConfig, result: ScoreResult) -> None:
        pair = ctx.decomposition.pair

        if len(ctx.dragon_pungs) == 3:
            self._add(result, rules, BIG_THREE_DRAGONS)

        if len(ctx.wind_pungs) == 3 and is_wind(pair):
            self._add(result, rules, LITTLE_FOUR_WINDS)

        if self._is_all_honors(ctx):
            self._add(result, rules, ALL_HONORS)

        if self._is_full_flush(ctx):
            self._add(result, rules, FULL_FLUSH)

        if ctx.concealed_pungs == 5:
            self._add(result, rules, FIVE_CONCEALED_PUNGS)

    @staticmethod
    def _is_all_honors(ctx: ScoringContext) -> bool:
        return all(is_honor(t) for t in ctx.tiles_present)

    @staticmethod
    def _is_full_flush(ctx: ScoringContext) -> bool:
        """All tiles numbered and in one suit"""
        tiles = ctx.tiles_present
        if not all(is_numbered(t) for t in tiles):
            return False
        return len({t // 9 for t in tiles}) == 1

    @staticmethod
    def _is_half_flush(ctx: ScoringContext) -> bool:
        """One numbered suit plus honors"""
        tiles = ctx.tiles_present
        suits = {t // 9 for t in tiles if is_numbered(t)}
        return len(suits) == 1 and any(is_honor(t) for t in tiles)

    # ========== Group 3: 5, 4 and 2 台 ==========

    def _check_mid_patterns(self, ctx: ScoringContext, rules: RulesConfig, result: ScoreResult) -> None:
        decomposition = ctx.decomposition
        scenario = ctx.scenario

        if ctx.concealed_pungs == 4 and not result.has(FIVE_CONCEALED_PUNGS.key):
            self._add(result, rules, FOUR_CONCEALED_PUNGS)

        if not result.has(FULL_FLUSH.key, ALL_HONORS.key) and self._is_half_flush(ctx):
            self._add(result, rules, HALF_FLUSH)

        if decomposition.is_standard and all(m.is_pung for m in decomposition.melds):
            self._add(result, rules, ALL_PUNGS)

        if len(ctx.dragon_pungs) == 2 and is_dragon(decomposition.pair):
            self._add(result, rules, LITTLE_THREE_DRAGONS)

        if self._is_seven_pairs(ctx):
            self._add(result, rules, SEVEN_PAIRS)

        if (decomposition.is_standard
                and all(m.meld_type == MeldType.SHUN for m in decomposition.melds)
                and not is_honor(decomposition.pair)
                and not scenario.is_self_draw
                and not scenario.flowers):
            self._add(result, rules, ALL_CHOWS)

        if (ctx.open_melds
                and all(m.kind != OpenMeldKind.AN_KONG for m in ctx.open_melds)
                and not scenario.is_self_draw
                and total_count(ctx.concealed_counts) == 1):
            self._add(result, rules, MELDED_HAND)

        if ctx.concealed_pungs == 3 and not result.has(FOUR_CONCEALED_PUNGS.key, FIVE_CONCEALED_PUNGS.key):
            self._add(result, rules, THREE_CONCEALED_PUNGS)

    @staticmethod
    def _is_seven_pairs(ctx: ScoringContext) -> bool:
        """Seven distinct pairs, read from the raw counts"""
        if ctx.open_melds:
            return False
        counts = ctx.concealed_counts.copy()
        counts[ctx.winning_tile] += 1
        if total_count(counts) != 14:
            return False
        return all(c in (0, 2) for c in counts) and int(np.count_nonzero(counts == 2)) == 7

    # ========== Group 4: flat bonuses ==========

    def _check_basic_patterns(self, ctx: ScoringContext, rules: RulesConfig, result: ScoreResult) -> None:
        scenario = ctx.scenario
        # 天胡/地胡 already imply a concealed, self-drawn hand
        first_turn_win = scenario.is_heavenly_hand or scenario.is_earthly_hand

        if ctx.is_concealed and not first_turn_win:
            self._add(result, rules, CONCEALED_HAND)

        if ctx.is_concealed and scenario.is_self_draw and not first_turn_win:
            self._add(result, rules, FULLY_CONCEALED_SELF_DRAWN)

        # Each dragon pung scores, also inside 大三元/小三元
        for meld in ctx.dragon_pungs:
            self._add(result, rules, _DRAGON_PUNGS[meld.base_tile])

        # 大四喜 already contains every wind pung
        if result.has(BIG_FOUR_WINDS.key):
            return

        for meld in ctx.wind_pungs:
            if rules.flowers_and_honors:
                self._add(result, rules, WIND_PUNG)
                continue
            if meld.base_tile == scenario.round_wind:
                self._add(result, rules, PREVALENT_WIND)
            if meld.base_tile == scenario.seat_wind:
                self._add(result, rules, SEAT_WIND)

    def _check_flowers(self, ctx: ScoringContext, rules: RulesConfig, result: ScoreResult) -> None:
        flowers = ctx.scenario.flowers

        # 八仙過海 replaces every other flower category
        if len(flowers) == 8 and rules.is_enabled(EIGHT_FLOWERS.rule):
            result.add_fan(EIGHT_FLOWERS)
            return

        if all(f in flowers for f in SEASON_FLOWERS):
            self._add(result, rules, SEASONS_FLOWER_KONG)
        if all(f in flowers for f in PLANT_FLOWERS):
            self._add(result, rules, PLANTS_FLOWER_KONG)

        if rules.flowers_and_honors:
            flower_fan = len(flowers)
        else:
            # 春夏秋冬 and 梅蘭竹菊 each map to 東南西北
            flower_fan = sum(1 for f in flowers if f % 4 == ctx.scenario.seat_index)

        if flower_fan > 0:
            self._add(result, rules, FLOWER_TILES, flower_fan)

    def _check_situational(self, ctx: ScoringContext, rules: RulesConfig, result: ScoreResult) -> None:
        scenario = ctx.scenario
        first_turn_win = scenario.is_heavenly_hand or scenario.is_earthly_hand

        if scenario.is_self_draw and not first_turn_win:
            self._add(result, rules, SELF_DRAWN)

        if scenario.is_dealer:
            self._add(result, rules, DEALER)

        # 連N拉N
        if scenario.is_dealer and scenario.dealer_streak > 0:
            self._add(result, rules, DEALER_STREAK, scenario.dealer_streak)
            self._add(result, rules, STREAK_BONUS, scenario.dealer_streak)

        if scenario.is_last_tile:
            self._add(result, rules, LAST_TILE_DRAW if scenario.is_self_draw else LAST_TILE_CLAIM)

        if scenario.is_kong_replacement:
            self._add(result, rules, KONG_REPLACEMENT)

        if scenario.is_robbing_kong:
            self._add(result, rules, ROBBING_KONG)

        if rules.is_enabled(SINGLE_WAIT.rule) and not result.has(SINGLE_WAIT.key):
            if is_single_wait(ctx.concealed_counts, ctx.open_melds):
                result.add_fan(SINGLE_WAIT)


_default_scorer = TaiwanScorer()


def calculate_score(
    concealed_counts: Sequence[int],
    open_melds: Sequence[OpenMeld],
    winning_tile: int,
    scenario: Scenario,
    rules: Optional[RulesConfig] = None,
) -> ScoreResult:
    """Score a hand with the default scorer"""
    return _default_scorer.calculate_score(concealed_counts, open_melds, winning_tile, scenario, rules)
