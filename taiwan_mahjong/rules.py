"""
Taiwanese Mahjong Rule Configuration

Every scoring category can be switched on or off. One extra flag,
見花見字 (flowers_and_honors), changes how flowers and wind pungs are
counted:
- every flower scores, not only the seat flower
- every wind pung scores, not only the prevalent/seat wind
- the prevalent wind and seat wind categories are disabled
"""

from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class RulesConfig:
    """
    Rule toggles for the scorer.

    Field names are the category keys used by scoring.FAN_PATTERNS.
    Defaults follow the Republic of China Mahjong Association rules,
    with every category enabled.
    """

    # === Special mode ===
    flowers_and_honors: bool = False   # 見花見字

    # === 16 台 ===
    heavenly_hand: bool = True         # 天胡
    earthly_hand: bool = True          # 地胡
    big_four_winds: bool = True        # 大四喜

    # === 8 台 ===
    thirteen_orphans: bool = True      # 國士無雙
    big_three_dragons: bool = True     # 大三元
    little_four_winds: bool = True     # 小四喜
    all_honors: bool = True            # 字一色
    full_flush: bool = True            # 清一色
    five_concealed_pungs: bool = True  # 五暗刻
    eight_flowers: bool = True         # 八仙過海

    # === 5 台 ===
    four_concealed_pungs: bool = True  # 四暗刻

    # === 4 台 ===
    half_flush: bool = True            # 混一色
    all_pungs: bool = True             # 碰碰胡
    little_three_dragons: bool = True  # 小三元
    seven_pairs: bool = True           # 七對子

    # === 2 台 ===
    all_chows: bool = True             # 平胡
    melded_hand: bool = True           # 全求人
    three_concealed_pungs: bool = True  # 三暗刻

    # === 1 台 ===
    concealed_hand: bool = True        # 門清
    fully_concealed_self_drawn: bool = True  # 不求
    self_drawn: bool = True            # 自摸
    dealer: bool = True                # 莊家
    prevalent_wind: bool = True        # 圈風
    seat_wind: bool = True             # 門風
    dragon_pung: bool = True           # 三元牌
    flower_tiles: bool = True          # 花牌
    single_wait: bool = True           # 獨聽
    last_tile: bool = True             # 海底撈月 / 河底撈魚
    kong_replacement: bool = True      # 槓上開花
    robbing_kong: bool = True          # 搶槓
    dealer_streak: bool = True         # 連莊
    streak_bonus: bool = True          # 拉莊
    flower_kong: bool = True           # 花槓

    def is_enabled(self, key: str) -> bool:
        """
        Check whether a category is enabled.

        The special mode replaces the wind categories, so they report
        disabled while it is on.
        """
        if self.flowers_and_honors and key in ("prevalent_wind", "seat_wind"):
            return False
        return bool(getattr(self, key))

    def with_overrides(self, **toggles: bool) -> "RulesConfig":
        """Copy with some toggles changed"""
        unknown = set(toggles) - _FIELD_NAMES
        if unknown:
            raise ValueError(f"Unknown rule keys: {sorted(unknown)}")
        return replace(self, **toggles)

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RulesConfig":
        """
        Build a config from a mapping, as loaded by a settings store.

        Missing keys keep their defaults; unknown keys and non-bool
        values are an error.
        """
        unknown = set(data) - _FIELD_NAMES
        if unknown:
            raise ValueError(f"Unknown rule keys: {sorted(unknown)}")
        for key, value in data.items():
            if not isinstance(value, bool):
                raise ValueError(f"Rule {key} must be a bool, got {value!r}")
        return cls(**dict(data))

    def __repr__(self) -> str:
        disabled = [f.name for f in fields(self) if f.name != "flowers_and_honors" and not getattr(self, f.name)]
        mode = ", flowers_and_honors" if self.flowers_and_honors else ""
        return f"RulesConfig(disabled={disabled}{mode})"


_FIELD_NAMES = frozenset(f.name for f in fields(RulesConfig))


# Everything enabled, special mode off
DEFAULT_RULES = RulesConfig()

# 見花見字
FLOWERS_AND_HONORS_RULES = RulesConfig(flowers_and_honors=True)
