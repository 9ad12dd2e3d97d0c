#!/usr/bin/env python3
"""
Score a Taiwanese Mahjong hand from the command line.

Tiles use compact notation (m=萬, p=筒, s=條, z=東南西北中發白) or the
Chinese tile names.

Usage:
    # 111m 444m 777m 111p 444p 7p, waiting on 7p, won by discard
    python score_hand.py "111444777m 1114447p" --win 7p

    # Declared pon of 中 and a concealed kong of 東, self-drawn as dealer
    python score_hand.py "123456789m 5p" --pon 5z --an-kong 1z --win 5p --self-draw --dealer

    # Waiting tiles only
    python score_hand.py "111444777m 1114447p" --waits
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from taiwan_mahjong.tiles import Wind, parse_tiles, tile_from_string, tile_name, tiles_to_counts
from taiwan_mahjong.melds import OpenMeld
from taiwan_mahjong.rules import RulesConfig
from taiwan_mahjong.scoring import Scenario, TaiwanScorer
from taiwan_mahjong.waits import waiting_tiles

logger = logging.getLogger(__name__)

_WINDS = {
    "E": Wind.EAST, "S": Wind.SOUTH, "W": Wind.WEST, "N": Wind.NORTH,
    "東": Wind.EAST, "南": Wind.SOUTH, "西": Wind.WEST, "北": Wind.NORTH,
}


def parse_wind(text: str) -> Wind:
    """Parse E/S/W/N or 東南西北."""
    try:
        return _WINDS[text.strip().upper()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"Unknown wind: {text}")


def parse_tile(text: str) -> int:
    try:
        return tile_from_string(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score a Taiwanese 16-tile Mahjong hand")
    parser.add_argument("hand", type=str, help="Concealed tiles, winning tile excluded")
    parser.add_argument("--win", type=parse_tile, help="Winning tile")
    parser.add_argument("--waits", action="store_true", help="Only list the waiting tiles")

    melds = parser.add_argument_group("declared melds")
    melds.add_argument("--chi", type=parse_tile, action="append", default=[],
                       help="Chi starting at this tile (repeatable)")
    melds.add_argument("--pon", type=parse_tile, action="append", default=[],
                       help="Pon of this tile (repeatable)")
    melds.add_argument("--kong", type=parse_tile, action="append", default=[],
                       help="Open kong of this tile (repeatable)")
    melds.add_argument("--an-kong", type=parse_tile, action="append", default=[],
                       help="Concealed kong of this tile (repeatable)")

    situation = parser.add_argument_group("situation")
    situation.add_argument("--self-draw", action="store_true", help="Self-drawn win (自摸)")
    situation.add_argument("--dealer", action="store_true", help="Winner is the dealer (莊家)")
    situation.add_argument("--streak", type=int, default=0, help="Dealer streak (連莊)")
    situation.add_argument("--round", type=parse_wind, default=Wind.EAST, help="Prevalent wind")
    situation.add_argument("--seat", type=parse_wind, default=Wind.EAST, help="Seat wind")
    situation.add_argument("--last-tile", action="store_true", help="Last tile of the wall (海底)")
    situation.add_argument("--kong-replacement", action="store_true", help="Won on kong replacement (槓上開花)")
    situation.add_argument("--robbing-kong", action="store_true", help="Robbed a kong (搶槓)")
    situation.add_argument("--heavenly", action="store_true", help="Heavenly hand (天胡)")
    situation.add_argument("--earthly", action="store_true", help="Earthly hand (地胡)")
    situation.add_argument("--flower", type=int, action="append", default=[],
                           help="Flower tile held, 0-7 = 春夏秋冬梅蘭竹菊 (repeatable)")

    rules = parser.add_argument_group("rules")
    rules.add_argument("--special-mode", action="store_true", help="見花見字 scoring")
    rules.add_argument("--disable", type=str, action="append", default=[],
                       help="Disable a category by key, e.g. single_wait (repeatable)")

    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        counts = tiles_to_counts(parse_tiles(args.hand))
        open_melds = (
            [OpenMeld.chi(t) for t in args.chi]
            + [OpenMeld.pon(t) for t in args.pon]
            + [OpenMeld.ming_kong(t) for t in args.kong]
            + [OpenMeld.an_kong(t) for t in args.an_kong]
        )
        rules = RulesConfig(flowers_and_honors=args.special_mode).with_overrides(
            **{key: False for key in args.disable}
        )
        scenario = Scenario(
            is_self_draw=args.self_draw,
            is_dealer=args.dealer,
            dealer_streak=args.streak,
            round_wind=args.round,
            seat_wind=args.seat,
            is_last_tile=args.last_tile,
            is_kong_replacement=args.kong_replacement,
            is_robbing_kong=args.robbing_kong,
            is_heavenly_hand=args.heavenly,
            is_earthly_hand=args.earthly,
            flowers=tuple(args.flower),
        )
    except ValueError as e:
        parser.error(str(e))

    if args.waits:
        waits = sorted(waiting_tiles(counts, open_melds))
        if waits:
            print("Waiting on: " + " ".join(tile_name(t) for t in waits))
        else:
            print("Not ready (no waiting tiles)")
        return

    if args.win is None:
        parser.error("--win is required unless --waits is given")

    logger.debug(f"Hand {args.hand!r}, melds {[str(m) for m in open_melds]}, win {tile_name(args.win)}")
    result = TaiwanScorer(rules).calculate_score(counts, open_melds, args.win, scenario)

    if not result.is_winning:
        print("Not a winning hand")
        sys.exit(1)

    print("=" * 50)
    print(f"Hand: {result.decomposition}")
    print("-" * 50)
    for fan in result.fans:
        print(f"  {fan.chinese_name:<12} {fan.name:<34} {fan.fan:>3} 台")
    print("-" * 50)
    print(f"Total: {result.total_fan} 台 ({result.total_points} points at {result.base_points} per 台)")
    print("=" * 50)


if __name__ == "__main__":
    main()
