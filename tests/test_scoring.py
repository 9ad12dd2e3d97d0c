"""
Tests for 台 scoring
"""

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from taiwan_mahjong.tiles import TERMINALS_AND_HONORS, Wind, parse_tiles, tiles_to_counts
from taiwan_mahjong.melds import OpenMeld, HandShape
from taiwan_mahjong.rules import RulesConfig, DEFAULT_RULES, FLOWERS_AND_HONORS_RULES
from taiwan_mahjong.scoring import (
    Scenario, TaiwanScorer, ScoreResult, BASE_POINTS, FAN_PATTERNS, ALL_PUNGS,
    calculate_score,
)


def hand(text: str) -> np.ndarray:
    """Count array from compact notation"""
    return tiles_to_counts(parse_tiles(text))


def fan_of(result: ScoreResult, key: str) -> int:
    return next(f.fan for f in result.fans if f.key == key)


# 111m 123p 456p 789p 111s 9s, waiting on 9s
MIXED = "111m 123456789p 111s 9s"
MIXED_WIN = 26

# 111m 444m 777m 111p 444p 7p, waiting on 7p
ALL_PUNG_HAND = "111444777m 1114447p"
ALL_PUNG_WIN = 15

FIVE_OPEN = [
    OpenMeld.chi(0), OpenMeld.pon(13), OpenMeld.chi(18),
    OpenMeld.pon(27), OpenMeld.ming_kong(22),
]


@pytest.fixture
def scorer():
    return TaiwanScorer()


class TestScenario:
    """Test scenario validation"""

    def test_defaults(self):
        scenario = Scenario()
        assert not scenario.is_self_draw
        assert scenario.round_wind == Wind.EAST
        assert scenario.seat_index == 0
        assert Scenario(seat_wind=Wind.NORTH).seat_index == 3

    def test_winds_coerced(self):
        assert Scenario(seat_wind=28).seat_wind is Wind.SOUTH

    def test_flowers_sorted(self):
        assert Scenario(flowers=(4, 0, 2)).flowers == (0, 2, 4)

    def test_invalid(self):
        with pytest.raises(ValueError):
            Scenario(dealer_streak=-1)
        with pytest.raises(ValueError):
            Scenario(flowers=(1, 1))
        with pytest.raises(ValueError):
            Scenario(flowers=(8,))
        with pytest.raises(ValueError):
            Scenario(seat_wind=31)


class TestBasicScoring:
    """Test ordinary hands"""

    def test_not_winning(self, scorer):
        """Non-winning hands score nothing"""
        counts = np.zeros(34, dtype=np.int8)
        counts[0] = 1
        counts[5] = 2
        counts[10] = 3
        counts[20] = 4
        counts[27] = 3

        result = scorer.calculate_score(counts, [], 28, Scenario())
        assert not result.is_winning
        assert result.fans == []
        assert result.total_fan == 0
        assert result.decomposition is None

    def test_concealed_self_draw(self, scorer):
        """門清 + 不求 + 自摸 + 獨聽"""
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(is_self_draw=True))

        assert result.is_winning
        assert result.keys == ["concealed_hand", "fully_concealed_self_drawn", "self_drawn", "single_wait"]
        assert result.total_fan == 4
        assert result.total_points == 4 * BASE_POINTS

    def test_concealed_discard(self, scorer):
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario())
        assert result.keys == ["concealed_hand", "single_wait"]
        assert result.total_fan == 2

    def test_module_level_calculate_score(self):
        result = calculate_score(hand(MIXED), [], MIXED_WIN, Scenario())
        assert result.total_fan == 2

    def test_input_not_mutated(self, scorer):
        counts = hand(MIXED)
        snapshot = counts.copy()
        scorer.calculate_score(counts, [], MIXED_WIN, Scenario(is_self_draw=True))
        assert np.array_equal(counts, snapshot)

    def test_fan_entries_carry_names(self, scorer):
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario())
        concealed = result.fans[0]
        assert concealed.name == "Concealed Hand"
        assert concealed.chinese_name == "門清"
        assert concealed.fan == 1

    def test_pattern_keys_unique(self):
        assert all(key == pattern.key for key, pattern in FAN_PATTERNS.items())
        assert FAN_PATTERNS["all_pungs"] is ALL_PUNGS


class TestFirstTurnWins:
    """Test 天胡 and 地胡 suppression"""

    def test_heavenly_hand(self, scorer):
        """天胡 replaces 門清, 不求 and 自摸"""
        scenario = Scenario(is_self_draw=True, is_dealer=True, is_heavenly_hand=True)
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, scenario)

        assert result.keys == ["heavenly_hand", "dealer", "single_wait"]
        assert result.total_fan == 18

    def test_heavenly_hand_disabled_still_suppresses(self, scorer):
        scenario = Scenario(is_self_draw=True, is_dealer=True, is_heavenly_hand=True)
        rules = DEFAULT_RULES.with_overrides(heavenly_hand=False)
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, scenario, rules)

        assert result.keys == ["dealer", "single_wait"]
        assert result.total_fan == 2

    def test_earthly_hand(self, scorer):
        scenario = Scenario(is_self_draw=True, is_earthly_hand=True, seat_wind=Wind.SOUTH)
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, scenario)

        assert result.has("earthly_hand")
        assert not result.has("self_drawn", "concealed_hand", "fully_concealed_self_drawn")
        assert result.total_fan == 17


class TestCompositionPatterns:
    """Test hand composition categories"""

    def test_five_concealed_pungs(self, scorer):
        """五暗刻 + 碰碰胡, 四暗刻 and 三暗刻 suppressed"""
        result = scorer.calculate_score(hand(ALL_PUNG_HAND), [], ALL_PUNG_WIN, Scenario())

        assert result.keys == ["five_concealed_pungs", "all_pungs", "concealed_hand", "single_wait"]
        assert result.total_fan == 14

    def test_discard_completes_pung(self, scorer):
        """A pung completed by a discard is not concealed"""
        counts = hand("111444777m 111p 44p 77p")

        discard = scorer.calculate_score(counts, [], 12, Scenario())
        assert discard.has("four_concealed_pungs")
        assert discard.has("all_pungs")
        assert not discard.has("five_concealed_pungs")

        self_draw = scorer.calculate_score(counts, [], 12, Scenario(is_self_draw=True))
        assert self_draw.has("five_concealed_pungs")
        assert not self_draw.has("four_concealed_pungs")

    def test_four_concealed_pungs(self, scorer):
        counts = hand("11m 567m 99m 222p 333s 444z")

        discard = scorer.calculate_score(counts, [], 0, Scenario())
        assert discard.has("three_concealed_pungs")
        assert not discard.has("four_concealed_pungs")

        self_draw = scorer.calculate_score(counts, [], 0, Scenario(is_self_draw=True))
        assert fan_of(self_draw, "four_concealed_pungs") == 5
        assert not self_draw.has("three_concealed_pungs")

    def test_three_concealed_pungs(self, scorer):
        """Winning tile completes the pair, every pung stays concealed"""
        result = scorer.calculate_score(hand("1m 222333m 456789m 111p"), [], 0, Scenario())
        assert fan_of(result, "three_concealed_pungs") == 2

    def test_three_concealed_pungs_demoted(self, scorer):
        counts = hand("11m 222m 333m 456789m 11p")

        assert not scorer.calculate_score(counts, [], 9, Scenario()).has("three_concealed_pungs")
        assert scorer.calculate_score(counts, [], 9, Scenario(is_self_draw=True)).has("three_concealed_pungs")

    def test_held_pung_not_demoted(self, scorer):
        """555p was held before the win; the discarded 5p completes 456p"""
        result = scorer.calculate_score(hand("111m 222m 333m 555p 46p 99s"), [], 13, Scenario())

        assert fan_of(result, "four_concealed_pungs") == 5
        assert not result.has("three_concealed_pungs")

    def test_full_flush(self, scorer):
        result = scorer.calculate_score(hand("111222333444555m 6m"), [], 5, Scenario())

        assert fan_of(result, "full_flush") == 8
        assert not result.has("half_flush")

    def test_half_flush_with_honors(self, scorer):
        """混一色 + 三暗刻 + 門清 + 中 + 圈風 + 門風"""
        result = scorer.calculate_score(hand("111456789m 9m 111z 555z"), [], 8, Scenario())

        assert result.keys == [
            "half_flush", "three_concealed_pungs", "concealed_hand",
            "red_dragon_pung", "prevalent_wind", "seat_wind",
        ]
        assert result.total_fan == 10

    def test_seat_wind_mismatch(self, scorer):
        scenario = Scenario(seat_wind=Wind.SOUTH)
        result = scorer.calculate_score(hand("111456789m 9m 111z 555z"), [], 8, scenario)

        assert result.has("prevalent_wind")
        assert not result.has("seat_wind")
        assert result.total_fan == 9

    def test_seven_pairs(self, scorer):
        """七對子 is not 碰碰胡 and its pairs are not dragon pungs"""
        result = scorer.calculate_score(hand("11m 22m 33p 44p 55s 66z 7z"), [], 33, Scenario())

        assert result.decomposition.shape == HandShape.SEVEN_PAIRS
        assert result.keys == ["seven_pairs", "concealed_hand", "single_wait"]
        assert result.total_fan == 6

    def test_big_four_winds(self, scorer):
        """大四喜 drops the wind pung bonuses"""
        scenario = Scenario(seat_wind=Wind.SOUTH)
        result = scorer.calculate_score(hand("111222333444z 123m 9m"), [], 8, scenario)

        assert result.keys == [
            "big_four_winds", "four_concealed_pungs", "half_flush",
            "concealed_hand", "single_wait",
        ]
        assert result.total_fan == 27

    def test_big_four_winds_disabled(self, scorer):
        """Wind pungs score normally when 大四喜 is off"""
        scenario = Scenario(seat_wind=Wind.SOUTH)
        rules = DEFAULT_RULES.with_overrides(big_four_winds=False)
        result = scorer.calculate_score(hand("111222333444z 123m 9m"), [], 8, scenario, rules)

        assert result.keys == [
            "four_concealed_pungs", "half_flush", "concealed_hand",
            "prevalent_wind", "seat_wind", "single_wait",
        ]
        assert result.total_fan == 13

    def test_big_three_dragons(self, scorer):
        """大三元 still counts each dragon pung"""
        result = scorer.calculate_score(hand("555666777z 123456m 9m"), [], 8, Scenario())

        assert result.keys == [
            "big_three_dragons", "half_flush", "three_concealed_pungs", "concealed_hand",
            "red_dragon_pung", "green_dragon_pung", "white_dragon_pung", "single_wait",
        ]
        assert result.total_fan == 19

    def test_little_three_dragons(self, scorer):
        result = scorer.calculate_score(hand("555666z 7z 123456m 111p"), [], 33, Scenario())

        assert result.keys == [
            "little_three_dragons", "three_concealed_pungs", "concealed_hand",
            "red_dragon_pung", "green_dragon_pung", "single_wait",
        ]
        assert result.total_fan == 10

    def test_little_four_winds(self, scorer):
        result = scorer.calculate_score(hand("111222333z 4z 123456m"), [], 30, Scenario())

        assert result.keys == [
            "little_four_winds", "half_flush", "three_concealed_pungs", "concealed_hand",
            "prevalent_wind", "seat_wind", "single_wait",
        ]
        assert result.total_fan == 18

    def test_all_honors(self, scorer):
        """字一色 suppresses 混一色"""
        result = scorer.calculate_score(hand("111222333z 555666z 7z"), [], 33, Scenario())

        assert result.keys == [
            "all_honors", "five_concealed_pungs", "all_pungs", "little_three_dragons",
            "concealed_hand", "red_dragon_pung", "green_dragon_pung",
            "prevalent_wind", "seat_wind", "single_wait",
        ]
        assert result.total_fan == 30

    def test_all_chows(self, scorer):
        result = scorer.calculate_score(hand("123456789m 123456p 9s"), [], 26, Scenario())

        assert result.keys == ["all_chows", "concealed_hand", "single_wait"]
        assert result.total_fan == 4

    def test_all_chows_needs_discard_and_no_flowers(self, scorer):
        counts = hand("123456789m 123456p 9s")

        assert not scorer.calculate_score(counts, [], 26, Scenario(flowers=(1,))).has("all_chows")
        assert not scorer.calculate_score(counts, [], 26, Scenario(is_self_draw=True)).has("all_chows")

    def test_all_chows_with_declared_chow(self, scorer):
        """平胡 does not need a concealed hand"""
        result = scorer.calculate_score(hand("456789m 123456p 9s"), [OpenMeld.chi(0)], 26, Scenario())

        assert result.keys == ["all_chows", "single_wait"]
        assert result.total_fan == 3

    def test_melded_hand(self, scorer):
        """全求人: five declared melds, won on a discard"""
        scenario = Scenario(seat_wind=Wind.SOUTH)
        result = scorer.calculate_score(hand("9m"), FIVE_OPEN, 8, scenario)

        assert result.keys == ["melded_hand", "prevalent_wind", "single_wait"]
        assert result.total_fan == 4

    def test_melded_hand_self_drawn(self, scorer):
        scenario = Scenario(seat_wind=Wind.SOUTH, is_self_draw=True)
        result = scorer.calculate_score(hand("9m"), FIVE_OPEN, 8, scenario)

        assert not result.has("melded_hand")
        assert not result.has("concealed_hand", "fully_concealed_self_drawn")
        assert result.has("self_drawn")


class TestThirteenOrphans:
    """Test 國士無雙"""

    @pytest.fixture
    def orphans(self):
        counts = np.zeros(34, dtype=np.int8)
        for t in TERMINALS_AND_HONORS:
            counts[t] = 1
        return counts

    def test_stands_alone(self, scorer, orphans):
        scenario = Scenario(is_self_draw=True, is_dealer=True, is_heavenly_hand=True, flowers=(0, 4))
        result = scorer.calculate_score(orphans, [], 0, scenario)

        assert result.keys == ["thirteen_orphans"]
        assert result.total_fan == 8

    def test_disabled(self, scorer, orphans):
        """Still a winning hand, scored by the other categories"""
        rules = DEFAULT_RULES.with_overrides(thirteen_orphans=False)
        result = scorer.calculate_score(orphans, [], 0, Scenario(), rules)

        assert result.is_winning
        assert result.has("concealed_hand")
        assert not result.has("thirteen_orphans", "all_pungs", "single_wait")


class TestFlowers:
    """Test flower scoring"""

    def test_seat_flowers(self, scorer):
        """春 and 梅 both belong to East"""
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(flowers=(0, 4)))
        assert fan_of(result, "flower_tiles") == 2

    def test_other_seat_flowers(self, scorer):
        scenario = Scenario(seat_wind=Wind.SOUTH, flowers=(0, 4))
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, scenario)
        assert not result.has("flower_tiles")

    def test_special_mode_counts_every_flower(self, scorer):
        scenario = Scenario(seat_wind=Wind.SOUTH, flowers=(0, 4))
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, scenario, FLOWERS_AND_HONORS_RULES)
        assert fan_of(result, "flower_tiles") == 2

    def test_flower_kong(self, scorer):
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(flowers=(0, 1, 2, 3)))

        assert fan_of(result, "seasons_flower_kong") == 2
        assert not result.has("plants_flower_kong")
        assert fan_of(result, "flower_tiles") == 1

    def test_eight_flowers(self, scorer):
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(flowers=tuple(range(8))))

        assert fan_of(result, "eight_flowers") == 8
        assert not result.has("seasons_flower_kong", "plants_flower_kong", "flower_tiles")

    def test_eight_flowers_disabled(self, scorer):
        rules = DEFAULT_RULES.with_overrides(eight_flowers=False)
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(flowers=tuple(range(8))), rules)

        assert not result.has("eight_flowers")
        assert result.has("seasons_flower_kong")
        assert result.has("plants_flower_kong")
        assert fan_of(result, "flower_tiles") == 2


class TestSpecialMode:
    """Test 見花見字"""

    def test_wind_pungs(self, scorer):
        """Every wind pung scores 風刻, 圈風 and 門風 are off"""
        result = scorer.calculate_score(
            hand("111456789m 9m 111z 555z"), [], 8, Scenario(), FLOWERS_AND_HONORS_RULES,
        )

        assert result.has("wind_pung")
        assert not result.has("prevalent_wind", "seat_wind")
        assert result.total_fan == 9

    def test_scorer_default_rules(self):
        scorer = TaiwanScorer(FLOWERS_AND_HONORS_RULES)
        result = scorer.calculate_score(hand("111456789m 9m 111z 555z"), [], 8, Scenario())
        assert result.has("wind_pung")


class TestSituational:
    """Test dealer and win situation bonuses"""

    def test_dealer_streak(self, scorer):
        """連二拉二"""
        scenario = Scenario(is_dealer=True, dealer_streak=2)
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, scenario)

        assert fan_of(result, "dealer") == 1
        assert fan_of(result, "dealer_streak") == 2
        assert fan_of(result, "streak_bonus") == 2

    def test_streak_needs_dealer(self, scorer):
        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(dealer_streak=2))
        assert not result.has("dealer", "dealer_streak", "streak_bonus")

    def test_last_tile(self, scorer):
        drawn = scorer.calculate_score(
            hand(MIXED), [], MIXED_WIN, Scenario(is_last_tile=True, is_self_draw=True),
        )
        assert drawn.has("last_tile_draw")
        assert not drawn.has("last_tile_claim")

        claimed = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(is_last_tile=True))
        assert claimed.has("last_tile_claim")
        assert not claimed.has("last_tile_draw")

    def test_kong_replacement_and_robbing(self, scorer):
        result = scorer.calculate_score(
            hand(MIXED), [], MIXED_WIN, Scenario(is_self_draw=True, is_kong_replacement=True),
        )
        assert result.has("kong_replacement")

        result = scorer.calculate_score(hand(MIXED), [], MIXED_WIN, Scenario(is_robbing_kong=True))
        assert result.has("robbing_kong")

    def test_multiple_waits_not_single(self, scorer):
        """111m 345m 678m 99m also completes from 3m and 6m"""
        result = scorer.calculate_score(hand("111456789m 9m 111z 555z"), [], 8, Scenario())
        assert not result.has("single_wait")


class TestRuleToggles:
    """Test disabling categories"""

    @pytest.mark.parametrize("key", ["all_pungs", "concealed_hand", "single_wait"])
    def test_disabled_category_not_scored(self, scorer, key):
        rules = RulesConfig().with_overrides(**{key: False})
        result = scorer.calculate_score(hand(ALL_PUNG_HAND), [], ALL_PUNG_WIN, Scenario(), rules)

        assert not result.has(key)
        assert result.total_fan == 14 - FAN_PATTERNS[key].points

    def test_dragon_pung_toggle(self, scorer):
        rules = DEFAULT_RULES.with_overrides(dragon_pung=False)
        result = scorer.calculate_score(hand("555666777z 123456m 9m"), [], 8, Scenario(), rules)

        assert result.has("big_three_dragons")
        assert not result.has("red_dragon_pung", "green_dragon_pung", "white_dragon_pung")
