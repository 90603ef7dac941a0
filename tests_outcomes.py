#!/usr/bin/env python3
"""
COINHYPE — Outcome Calculator Test Suite

Run: python tests_outcomes.py
     pytest tests_outcomes.py

Test categories:
  TestDice / TestCrash / TestMines / TestPlinko / TestSlots
  TestRoulette / TestCoinFlip / TestPoker / TestBlackjack / TestRps
  TestCrossroads / TestScratchOff
  TestJackpot       — trigger window, minimum pool, floor payout
  TestRegistry      — lookup, unknown games, house edge plumbing
  TestInvariants    — payout == floor(bet × m) across every game
  TestSimulation    — Monte Carlo RTP lands near the nominal edge
"""

import sys
import unittest
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

from pydantic import ValidationError

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.errors import InvalidBetAmountError, InvalidGameParameterError
from config.game_schema import (
    BlackjackParams, CoinFlipParams, CrashParams, CrossroadsParams, DiceParams, MinesParams,
    PlinkoParams, PlinkoRisk, PokerParams, RouletteParams, RpsParams, ScratchOffParams,
    SlotsParams, parse_params,
)
from outcome_engine import CALCULATORS, GAME_TYPES, get_calculator
from outcome_engine.blackjack import BlackjackCalculator, hand_value
from outcome_engine.coinflip import CoinFlipCalculator
from outcome_engine.crash import CrashCalculator, crash_point
from outcome_engine.crossroads import CrossroadsCalculator
from outcome_engine.dice import DiceCalculator
from outcome_engine.jackpot import check_jackpot, minimum_pool
from outcome_engine.mines import MinesCalculator, generate_mine_positions
from outcome_engine.plinko import LANES, MULTIPLIER_TABLES, PlinkoCalculator, landing_lane
from outcome_engine.poker import RANKS, SUITS, PokerCalculator, deal, rank_hand
from outcome_engine.roulette import RED_NUMBERS, RouletteCalculator, color
from outcome_engine.rps import RpsCalculator
from outcome_engine.scratchoff import (
    MAX_TABLE_PAYOUT, ScratchOffCalculator, symbol_counts, table_payout, table_return,
)
from outcome_engine.slots import SlotsCalculator
from tools.fair_rng import FairStream, GameSeed, SeededSource
from tools.money import Currency

HR = Fraction(99, 100)


class FixedSource:
    """Stream stand-in that replays fixed values."""

    def __init__(self, *values):
        self.values = list(values)

    def next_int(self, limit):
        return self.values.pop(0)

    def next_roll(self):
        return self.values.pop(0)


def card(label: str) -> int:
    return RANKS.index(label[0]) + 13 * SUITS.index(label[1])


def hand(labels: str) -> list:
    return [card(x) for x in labels.split()]


# ============================================================
# Dice
# ============================================================

class TestDice(unittest.TestCase):

    def setUp(self):
        self.calc = DiceCalculator()

    def test_documented_round(self):
        """target 50, bet 100, roll 49.99 → win 1.98x, payout 198."""
        result = self.calc.resolve(100, DiceParams(target=50), Fraction("49.99"))
        self.assertTrue(result.win)
        self.assertEqual(result.multiplier, Fraction(99, 50))
        self.assertEqual(result.payout, 198)

    def test_roll_equal_to_target_loses(self):
        result = self.calc.resolve(100, DiceParams(target=50), Fraction(50))
        self.assertFalse(result.win)
        self.assertEqual(result.payout, 0)
        self.assertEqual(result.multiplier, 0)
        self.assertEqual(result.details["target_multiplier"], 1.98)
        self.assertEqual(result.details["win_chance"], 0.5)

    def test_multiplier_strictly_decreasing(self):
        targets = ["1.01", "2", "10", "49.5", "50", "98.99", "99"]
        mults = [self.calc.multiplier(Decimal(t)) for t in targets]
        for a, b in zip(mults, mults[1:]):
            self.assertGreater(a, b)
        self.assertEqual(self.calc.multiplier(99), Fraction(1))

    def test_win_chance(self):
        self.assertEqual(self.calc.win_chance(Decimal("49.5")), Fraction(99, 200))
        result = self.calc.resolve(100, DiceParams(target=Decimal("1.01")), 1)
        self.assertEqual(result.details["win_chance"], 0.0101)

    def test_target_bounds(self):
        with self.assertRaises(InvalidGameParameterError):
            self.calc.multiplier(1)
        with self.assertRaises(ValidationError):
            DiceParams(target=100)
        with self.assertRaises(InvalidGameParameterError):
            parse_params("dice", {"target": "0.5"})

    def test_roll_out_of_range(self):
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, DiceParams(target=50), 100)

    def test_play_uses_stream_roll(self):
        result = self.calc.play(100, DiceParams(target=50), FixedSource(12_345_678))
        self.assertEqual(result.details["roll"], 12.35)
        self.assertTrue(result.win)


# ============================================================
# Crash
# ============================================================

class TestCrash(unittest.TestCase):

    def setUp(self):
        self.calc = CrashCalculator()

    def test_floor_at_zero_roll(self):
        self.assertEqual(crash_point(0), Fraction("1.01"))

    def test_roll_at_or_above_100_is_capped(self):
        # 0.01 + 99.99 / 0.01 is far above the ceiling
        self.assertEqual(crash_point(100), Fraction(1000))
        self.assertEqual(crash_point(150), Fraction(1000))

    def test_negative_roll_rejected(self):
        with self.assertRaises(InvalidGameParameterError):
            crash_point(-1)
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, CrashParams(cashout_multiplier=2), Fraction(-1, 100))

    def test_curve(self):
        self.assertEqual(crash_point(50), Fraction("2.0098"))
        self.assertEqual(crash_point(90), Fraction("10.009"))

    def test_cashout_below_crash_wins(self):
        result = self.calc.resolve(100, CrashParams(cashout_multiplier=2), 50)
        self.assertTrue(result.win)
        self.assertEqual(result.payout, 200)
        self.assertEqual(result.details["crash_multiplier"], 2.01)

    def test_cashout_at_crash_loses(self):
        result = self.calc.resolve(100, CrashParams(cashout_multiplier=Decimal("2.0098")), 50)
        self.assertFalse(result.win)
        self.assertEqual(result.payout, 0)

    def test_no_cashout_loses(self):
        result = self.calc.resolve(100, CrashParams(), 99)
        self.assertFalse(result.win)
        self.assertIsNone(result.details["cashout_multiplier"])

    def test_cashout_bounds(self):
        with self.assertRaises(ValidationError):
            CrashParams(cashout_multiplier=1)
        with self.assertRaises(ValidationError):
            CrashParams(cashout_multiplier=1001)


# ============================================================
# Mines
# ============================================================

class TestMines(unittest.TestCase):

    def setUp(self):
        self.calc = MinesCalculator()

    def test_positions_unique_sorted_on_board(self):
        source = SeededSource(1)
        for k in range(1, 25):
            mines = generate_mine_positions(k, source)
            self.assertEqual(len(mines), k)
            self.assertEqual(len(set(mines)), k)
            self.assertEqual(mines, sorted(mines))
            self.assertTrue(all(0 <= m <= 24 for m in mines))

    def test_positions_deterministic_from_stream(self):
        seed = GameSeed("server", "client", 9)
        self.assertEqual(generate_mine_positions(5, FairStream(seed)),
                         generate_mine_positions(5, FairStream(seed)))

    def test_positions_without_source(self):
        self.assertEqual(len(generate_mine_positions(3)), 3)

    def test_mine_count_bounds(self):
        for bad in (0, 25, -1):
            with self.assertRaises(InvalidGameParameterError):
                generate_mine_positions(bad)
        with self.assertRaises(ValidationError):
            MinesParams(mine_count=25, picks=[0])

    def test_params_validation(self):
        with self.assertRaises(ValidationError):
            MinesParams(mine_count=3, picks=[1, 1])
        with self.assertRaises(ValidationError):
            MinesParams(mine_count=3, picks=[25])
        with self.assertRaises(ValidationError):
            MinesParams(mine_count=24, picks=[0, 1])
        with self.assertRaises(ValidationError):
            MinesParams(mine_count=3, picks=[])

    def test_safe_picks_pay_per_gem(self):
        params = MinesParams(mine_count=3, picks=[0, 1, 2])
        result = self.calc.resolve(1000, params, [10, 20, 24])
        self.assertTrue(result.win)
        self.assertEqual(result.multiplier, Fraction("1.15") ** 3 * HR)
        self.assertEqual(result.payout, 1505)
        self.assertEqual(result.details["gems_revealed"], 3)

    def test_hitting_mine_loses(self):
        params = MinesParams(mine_count=3, picks=[0, 10, 1])
        result = self.calc.resolve(1000, params, [10, 20, 24])
        self.assertFalse(result.win)
        self.assertEqual(result.payout, 0)
        self.assertEqual(result.details["gems_revealed"], 1)
        self.assertEqual(result.details["mine_hit_at"], 10)

    def test_settle(self):
        self.assertFalse(self.calc.settle(1000, 0, False).win)
        self.assertEqual(self.calc.settle(1000, 0, False).payout, 0)
        self.assertEqual(self.calc.settle(1000, 2, False).payout, 1309)
        self.assertEqual(self.calc.settle(1000, 2, True).payout, 0)

    def test_board_must_match_mine_count(self):
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, MinesParams(mine_count=3, picks=[0]), [5, 6])


# ============================================================
# Plinko
# ============================================================

class TestPlinko(unittest.TestCase):

    def setUp(self):
        self.calc = PlinkoCalculator()

    def test_tables_preserved(self):
        for table in MULTIPLIER_TABLES.values():
            self.assertEqual(len(table), LANES)
            self.assertEqual(list(table), list(reversed(table)))
        self.assertEqual(MULTIPLIER_TABLES[PlinkoRisk.HIGH][0], 1000)
        self.assertEqual(MULTIPLIER_TABLES[PlinkoRisk.MEDIUM][7], Fraction(1, 2))
        self.assertEqual(MULTIPLIER_TABLES[PlinkoRisk.LOW][3], Fraction(7, 5))

    def test_lane_mapping(self):
        self.assertEqual(landing_lane(0), 0)
        self.assertEqual(landing_lane(50), 7)
        self.assertEqual(landing_lane(Fraction(99_999_999, 1_000_000)), 14)

    def test_edge_lane_high_risk(self):
        result = self.calc.resolve(100, PlinkoParams(risk=PlinkoRisk.HIGH), 0)
        self.assertTrue(result.win)
        self.assertEqual(result.payout, 99_000)

    def test_sub_one_landing_still_pays(self):
        result = self.calc.resolve(100, PlinkoParams(risk=PlinkoRisk.MEDIUM), 50)
        self.assertFalse(result.win)
        self.assertEqual(result.multiplier, Fraction("0.495"))
        self.assertEqual(result.payout, 49)

    def test_one_x_after_edge_is_not_a_win(self):
        result = self.calc.resolve(100, PlinkoParams(risk=PlinkoRisk.LOW), 50)
        self.assertFalse(result.win)
        self.assertEqual(result.payout, 99)

    def test_risk_from_int(self):
        self.assertIs(parse_params("plinko", {"risk": 2}).risk, PlinkoRisk.LOW)
        self.assertIs(PlinkoParams().risk, PlinkoRisk.MEDIUM)


# ============================================================
# Slots
# ============================================================

class TestSlots(unittest.TestCase):

    def setUp(self):
        self.calc = SlotsCalculator()

    def test_three_of_a_kind(self):
        result = self.calc.resolve(100, SlotsParams(), (9, 9, 9))
        self.assertTrue(result.win)
        self.assertEqual(result.payout, 49_500)

    def test_high_pair_pays_thirty_percent(self):
        self.assertEqual(self.calc.resolve(100, SlotsParams(), (5, 5, 1)).payout, 445)
        self.assertEqual(self.calc.resolve(100, SlotsParams(), (6, 1, 6)).payout, 742)
        self.assertEqual(self.calc.resolve(100, SlotsParams(), (0, 4, 4)).payout, 297)

    def test_low_pair_pays_nothing(self):
        result = self.calc.resolve(100, SlotsParams(), (2, 2, 7))
        self.assertFalse(result.win)
        self.assertEqual(result.payout, 0)

    def test_no_match(self):
        self.assertFalse(self.calc.resolve(100, SlotsParams(), (0, 1, 2)).win)

    def test_reels_drawn_independently(self):
        reels = self.calc.draw(SeededSource(3), SlotsParams())
        self.assertEqual(len(reels), 3)
        self.assertTrue(all(0 <= r < 10 for r in reels))
        seen = {self.calc.draw(SeededSource(s), SlotsParams())[1] for s in range(50)}
        self.assertGreater(len(seen), 1)

    def test_bad_reels(self):
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, SlotsParams(), (1, 2))
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, SlotsParams(), (1, 2, 10))


# ============================================================
# Roulette
# ============================================================

class TestRoulette(unittest.TestCase):

    def setUp(self):
        self.calc = RouletteCalculator()

    def test_colours(self):
        self.assertEqual(color(0), "green")
        self.assertEqual(len(RED_NUMBERS), 18)
        for n in range(1, 37):
            self.assertIn(color(n), ("red", "black"))
        self.assertEqual(sum(color(n) == "black" for n in range(1, 37)), 18)

    def test_straight(self):
        params = RouletteParams(bet_type="straight", numbers=[17])
        self.assertEqual(self.calc.resolve(100, params, 17).payout, 3465)
        self.assertEqual(self.calc.resolve(100, params, 16).payout, 0)
        zero = RouletteParams(bet_type="straight", numbers=[0])
        self.assertTrue(self.calc.resolve(100, zero, 0).win)

    def test_zero_loses_outside_bets(self):
        for bet in ("red", "black", "even", "odd", "high", "low"):
            self.assertFalse(self.calc.resolve(100, RouletteParams(bet_type=bet), 0).win, bet)

    def test_even_money(self):
        self.assertEqual(self.calc.resolve(100, RouletteParams(bet_type="red"), 1).payout, 198)
        self.assertTrue(self.calc.resolve(100, RouletteParams(bet_type="black"), 2).win)
        self.assertTrue(self.calc.resolve(100, RouletteParams(bet_type="even"), 36).win)
        self.assertTrue(self.calc.resolve(100, RouletteParams(bet_type="odd"), 35).win)
        self.assertTrue(self.calc.resolve(100, RouletteParams(bet_type="high"), 19).win)
        self.assertFalse(self.calc.resolve(100, RouletteParams(bet_type="high"), 18).win)
        self.assertTrue(self.calc.resolve(100, RouletteParams(bet_type="low"), 18).win)

    def test_dozen_and_column(self):
        dozen3 = RouletteParams(bet_type="dozen", selection=3)
        self.assertEqual(self.calc.resolve(100, dozen3, 25).payout, 297)
        self.assertFalse(self.calc.resolve(100, dozen3, 24).win)
        col1 = RouletteParams(bet_type="column", selection=1)
        for n in (1, 4, 34):
            self.assertTrue(self.calc.resolve(100, col1, n).win)
        self.assertFalse(self.calc.resolve(100, col1, 2).win)

    def test_params_validation(self):
        with self.assertRaises(ValidationError):
            RouletteParams(bet_type="straight", numbers=[1, 2])
        with self.assertRaises(ValidationError):
            RouletteParams(bet_type="straight", numbers=[37])
        with self.assertRaises(ValidationError):
            RouletteParams(bet_type="dozen")
        with self.assertRaises(ValidationError):
            RouletteParams(bet_type="split")

    def test_number_range(self):
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, RouletteParams(bet_type="red"), 37)


# ============================================================
# Coin flip
# ============================================================

class TestCoinFlip(unittest.TestCase):

    def setUp(self):
        self.calc = CoinFlipCalculator()

    def test_heads_below_fifty(self):
        result = self.calc.resolve(100, CoinFlipParams(choice="heads"), Fraction("49.99"))
        self.assertTrue(result.win)
        self.assertEqual(result.details["result"], "heads")
        self.assertEqual(result.payout, 198)

    def test_tails_from_fifty(self):
        result = self.calc.resolve(100, CoinFlipParams(choice="heads"), 50)
        self.assertFalse(result.win)
        self.assertEqual(result.details["result"], "tails")
        self.assertTrue(self.calc.resolve(100, CoinFlipParams(choice="tails"), 50).win)


# ============================================================
# Poker / Blackjack / RPS
# ============================================================

class TestPoker(unittest.TestCase):

    def test_hand_ranks(self):
        cases = {
            "TS JS QS KS AS": "royal_flush",
            "9H TH JH QH KH": "straight_flush",
            "AS 2S 3S 4S 5S": "straight_flush",
            "9S 9H 9D 9C 2S": "four_of_a_kind",
            "KS KH KD 2C 2S": "full_house",
            "2S 5S 9S JS KS": "flush",
            "AS 2H 3D 4C 5S": "straight",
            "TS JH QD KC AS": "straight",
            "7S 7H 7D 2C 9S": "three_of_a_kind",
            "7S 7H 2D 2C 9S": "two_pair",
            "JS JH 2D 5C 9S": "jacks_or_better",
            "AS AH 2D 5C 9S": "jacks_or_better",
            "TS TH 2D 5C 9S": "high_card",
            "2S 4H 6D 8C TS": "high_card",
        }
        for labels, expected in cases.items():
            self.assertEqual(rank_hand(hand(labels)), expected, labels)

    def test_royal_payout(self):
        result = PokerCalculator().resolve(100, PokerParams(), hand("TS JS QS KS AS"))
        self.assertTrue(result.win)
        self.assertEqual(result.payout, 24_750)
        self.assertEqual(result.details["cards"], ["TS", "JS", "QS", "KS", "AS"])

    def test_deal_is_distinct(self):
        cards = deal(FairStream(GameSeed("server", "client", 1)))
        self.assertEqual(len(set(cards)), 5)

    def test_bad_hand(self):
        with self.assertRaises(InvalidGameParameterError):
            PokerCalculator().resolve(100, PokerParams(), [0, 0, 1, 2, 3])


class TestBlackjack(unittest.TestCase):

    def setUp(self):
        self.calc = BlackjackCalculator()

    def settle(self, player, dealer):
        params = BlackjackParams(player_cards=player.split(), dealer_cards=dealer.split())
        return self.calc.play(100, params, FixedSource())

    def test_soft_aces(self):
        self.assertEqual(hand_value(["A", "A", "9"]).total, 21)
        self.assertTrue(hand_value(["A", "6"]).soft)
        natural = hand_value(["A", "K"])
        self.assertTrue(natural.is_blackjack)
        hard = hand_value(["A", "5", "K"])
        self.assertEqual(hard.total, 16)
        self.assertFalse(hard.soft)
        self.assertFalse(hand_value(["7", "7", "7"]).is_blackjack)
        self.assertTrue(hand_value(["K", "Q", "2"]).is_bust)

    def test_outcomes_from_cards(self):
        expected = {
            ("A J", "10 9"): ("blackjack", True, 247),
            ("10 9", "10 8"): ("win", True, 198),
            ("10 8", "10 6 K"): ("win", True, 198),
            ("10 8", "9 9"): ("push", False, 100),
            ("10 7", "10 8"): ("lose", False, 0),
        }
        for (player, dealer), (outcome, win, payout) in expected.items():
            result = self.settle(player, dealer)
            self.assertEqual((result.details["outcome"], result.win, result.payout),
                             (outcome, win, payout), (player, dealer))

    def test_player_bust_beats_dealer_bust(self):
        result = self.settle("10 6 K", "10 6 Q")
        self.assertEqual(result.details["outcome"], "lose")
        self.assertEqual(result.details["player_total"], 26)
        self.assertEqual(result.payout, 0)

    def test_naturals(self):
        both = self.settle("A K", "Q A")
        self.assertEqual((both.details["outcome"], both.payout), ("push", 100))
        three_card_21 = self.settle("7 7 7", "A Q")
        self.assertEqual(three_card_21.details["outcome"], "lose")
        self.assertEqual(self.settle("A Q", "7 7 7").details["outcome"], "blackjack")

    def test_card_validation(self):
        self.assertEqual(BlackjackParams(player_cards=["a", 10], dealer_cards=["k"]).player_cards,
                         ["A", "10"])
        with self.assertRaises(ValidationError):
            BlackjackParams(player_cards=["A"], dealer_cards=["K"])
        with self.assertRaises(ValidationError):
            BlackjackParams(player_cards=["A", "1"], dealer_cards=["K"])
        with self.assertRaises(InvalidGameParameterError):
            parse_params("blackjack", {"outcome": "win"})


class TestRps(unittest.TestCase):

    def test_outcomes(self):
        calc = RpsCalculator()
        rock = RpsParams(choice="rock")
        self.assertEqual(calc.resolve(100, rock, 2).payout, 297)
        tie = calc.resolve(100, rock, 0)
        self.assertEqual((tie.win, tie.payout, tie.details["outcome"]), (False, 100, "tie"))
        self.assertEqual(calc.resolve(100, rock, 1).payout, 0)
        with self.assertRaises(InvalidGameParameterError):
            calc.resolve(100, rock, 3)


# ============================================================
# Crossroads / Scratch-off
# ============================================================

class TestCrossroads(unittest.TestCase):

    def setUp(self):
        self.calc = CrossroadsCalculator()

    def test_road_weights(self):
        self.assertEqual(self.calc.road(Fraction("44.99")), "north")
        self.assertEqual(self.calc.road(45), "south")
        self.assertEqual(self.calc.road(Fraction("89.99")), "south")
        self.assertEqual(self.calc.road(90), "east")
        self.assertEqual(self.calc.road(95), "west")
        self.assertEqual(self.calc.road(Fraction("99.99")), "west")

    def test_payouts(self):
        north = self.calc.resolve(100, CrossroadsParams(direction="north"), 10)
        self.assertTrue(north.win)
        self.assertEqual(north.payout, 198)
        west = self.calc.resolve(100, CrossroadsParams(direction="west"), 97)
        self.assertEqual((west.win, west.payout, west.details["result"]), (True, 297, "west"))
        miss = self.calc.resolve(100, CrossroadsParams(direction="east"), 50)
        self.assertEqual((miss.win, miss.payout, miss.details["result"]), (False, 0, "south"))

    def test_bad_input(self):
        with self.assertRaises(ValidationError):
            CrossroadsParams(direction="up")
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, CrossroadsParams(direction="north"), -1)


class TestScratchOff(unittest.TestCase):

    def setUp(self):
        self.calc = ScratchOffCalculator()

    def test_table_payout(self):
        # diamond 2x, cherry 3x, bell 5x, moneybag 500x
        self.assertEqual(table_payout(symbol_counts([0, 0, 0, 1, 2, 3, 4, 5, 6])), (0, 2))
        self.assertEqual(table_payout(symbol_counts([1, 1, 1, 1, 0, 2, 3, 4, 5])), (1, 6))
        self.assertEqual(table_payout(symbol_counts([0, 0, 0, 0, 0, 1, 2, 3, 4])), (0, 8))
        self.assertEqual(table_payout(symbol_counts([0, 1, 2, 3, 4, 5, 6, 7, 0])), (None, 0))

    def test_best_symbol_wins_and_cap(self):
        self.assertEqual(table_payout(symbol_counts([0, 0, 0, 2, 2, 2, 1, 3, 4])), (2, 5))
        self.assertEqual(table_payout(symbol_counts([7, 7, 7, 0, 0, 0, 1, 2, 3])),
                         (7, MAX_TABLE_PAYOUT))

    def test_scaled_to_house_edge(self):
        self.assertGreater(table_return(), 1)
        self.assertEqual(self.calc.scale * table_return(), HR)
        result = self.calc.resolve(1_000_000, ScratchOffParams(), [2, 2, 2, 0, 1, 3, 4, 5, 6])
        self.assertTrue(result.win)
        self.assertEqual(result.multiplier, 5 * self.calc.scale)
        self.assertEqual(result.details["winning_symbol"], "bell")
        self.assertEqual(result.details["matches"], 3)

    def test_losing_card(self):
        result = self.calc.resolve(100, ScratchOffParams(), [0, 1, 2, 3, 4, 5, 6, 7, 0])
        self.assertFalse(result.win)
        self.assertEqual(result.payout, 0)
        self.assertIsNone(result.details["winning_symbol"])

    def test_play_draws_nine_cells(self):
        result = self.calc.play(100, ScratchOffParams(), FixedSource(*[4] * 9))
        self.assertEqual(result.details["cells"], ["crown"] * 9)
        self.assertEqual(result.multiplier, MAX_TABLE_PAYOUT * self.calc.scale)

    def test_bad_card(self):
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, ScratchOffParams(), [0] * 8)
        with self.assertRaises(InvalidGameParameterError):
            self.calc.resolve(100, ScratchOffParams(), [8] * 9)


# ============================================================
# Jackpot
# ============================================================

class TestJackpot(unittest.TestCase):

    def test_minimum_pool(self):
        self.assertEqual(minimum_pool(Currency.USD), 10_000)
        self.assertEqual(minimum_pool(Currency.SOL), 100_000_000_000)

    def test_hit_inside_window(self):
        check = check_jackpot(10_001, FixedSource(19_999))
        self.assertTrue(check.hit)
        self.assertEqual(check.payout, 7000)

    def test_miss_outside_window(self):
        check = check_jackpot(50_000, FixedSource(20_000))
        self.assertFalse(check.hit)
        self.assertEqual(check.payout, 0)

    def test_small_pool_never_hits(self):
        check = check_jackpot(9_999, FixedSource(0))
        self.assertFalse(check.hit)
        self.assertFalse(check.eligible)

    def test_bad_pool(self):
        with self.assertRaises(ValueError):
            check_jackpot(-1, FixedSource(0))


# ============================================================
# Registry
# ============================================================

class TestRegistry(unittest.TestCase):

    def test_all_games_registered(self):
        self.assertEqual(len(GAME_TYPES), 12)
        self.assertIsInstance(get_calculator("DICE"), DiceCalculator)

    def test_metadata(self):
        meta = get_calculator("plinko").get_metadata()
        self.assertEqual(meta, {"game_type": "plinko", "display_name": "Plinko",
                                "house_edge": 0.01})

    def test_unknown_game(self):
        with self.assertRaises(InvalidGameParameterError):
            get_calculator("baccarat")

    def test_house_edge_plumbing(self):
        calc = get_calculator("coinflip", house_edge=Fraction(2, 100))
        self.assertEqual(calc.payout_multiplier, Fraction(49, 25))
        with self.assertRaises(ValueError):
            get_calculator("dice", house_edge=1)

    def test_wrong_params_model(self):
        with self.assertRaises(InvalidGameParameterError):
            get_calculator("dice").play(100, CoinFlipParams(choice="heads"), FixedSource(0))

    def test_bet_must_be_positive_int(self):
        with self.assertRaises(InvalidBetAmountError) as ctx:
            get_calculator("dice").play(0, DiceParams(target=50), FixedSource(0))
        self.assertEqual(ctx.exception.code, "BET_NOT_POSITIVE")


# ============================================================
# Invariants across games
# ============================================================

SAMPLE_PARAMS = {
    "dice": DiceParams(target=Decimal("33.3")),
    "crash": CrashParams(cashout_multiplier=Decimal("1.7")),
    "mines": MinesParams(mine_count=5, picks=[3, 7, 11]),
    "plinko": PlinkoParams(risk=PlinkoRisk.HIGH),
    "slots": SlotsParams(),
    "roulette": RouletteParams(bet_type="column", selection=2),
    "coinflip": CoinFlipParams(choice="tails"),
    "poker": PokerParams(),
    "blackjack": BlackjackParams(player_cards=["A", "K"], dealer_cards=["10", "9"]),
    "rps": RpsParams(choice="paper"),
    "crossroads": CrossroadsParams(direction="east"),
    "scratchoff": ScratchOffParams(),
}


class TestInvariants(unittest.TestCase):

    def test_sample_params_cover_registry(self):
        self.assertEqual(set(SAMPLE_PARAMS), set(CALCULATORS))

    def test_payout_is_floor_of_product(self):
        source = SeededSource(2024)
        for game, params in SAMPLE_PARAMS.items():
            calc = get_calculator(game)
            for bet in (1, 333, 1_000_007):
                for _ in range(100):
                    result = calc.play(bet, params, source)
                    exact = bet * result.multiplier
                    self.assertLessEqual(result.payout, exact, game)
                    self.assertGreater(result.payout + 1, exact, game)

    def test_same_seed_same_outcome(self):
        seed = GameSeed("server", "client", 42)
        for game, params in SAMPLE_PARAMS.items():
            calc = get_calculator(game)
            a = calc.play(1000, params, FairStream(seed))
            b = calc.play(1000, params, FairStream(seed))
            self.assertEqual(a, b, game)

    def test_result_serialises(self):
        result = get_calculator("dice").resolve(100, DiceParams(target=50), 10)
        data = result.to_dict()
        self.assertEqual(data["multiplier"], 1.98)
        self.assertEqual(data["multiplier_exact"], "99/50")
        self.assertEqual(result.payout_display(Currency.USD), Decimal("1.98"))


# ============================================================
# Simulation
# ============================================================

class TestSimulation(unittest.TestCase):

    def test_dice_rtp_near_nominal(self):
        sim = DiceCalculator().simulate(DiceParams(target=50), rounds=20_000, seed=7)
        self.assertAlmostEqual(sim.rtp, 0.99, delta=0.04)
        self.assertAlmostEqual(sim.hit_rate, 0.5, delta=0.03)
        self.assertEqual(sim.total_wagered, 20_000 * 1_000_000)
        self.assertEqual(sim.to_dict()["rounds"], 20_000)

    def test_coinflip_distribution(self):
        sim = CoinFlipCalculator().simulate(CoinFlipParams(choice="heads"), rounds=5_000, seed=1)
        self.assertEqual(set(sim.distribution), {"0x", "1-2x"})
        self.assertAlmostEqual(sum(sim.distribution.values()), 1.0, places=3)

    def test_scratchoff_rtp_near_nominal(self):
        sim = ScratchOffCalculator().simulate(ScratchOffParams(), rounds=20_000, seed=11)
        self.assertAlmostEqual(sim.rtp, 0.99, delta=0.05)

    def test_simulation_reproducible(self):
        calc = RouletteCalculator()
        params = RouletteParams(bet_type="red")
        a = calc.simulate(params, rounds=2_000, seed=5)
        b = calc.simulate(params, rounds=2_000, seed=5)
        self.assertEqual(a.total_returned, b.total_returned)

    def test_bad_rounds(self):
        with self.assertRaises(ValueError):
            DiceCalculator().simulate(DiceParams(target=50), rounds=0)


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    import logging
    logging.disable(logging.WARNING)

    unittest.main(verbosity=2)
