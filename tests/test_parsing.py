from __future__ import annotations

import unittest

from models import MatchPhase, Outcome, ScoreReading
from parsing import normalize_tip, parse_score


class ScoreParsingTests(unittest.TestCase):
    def test_plain_score(self) -> None:
        self.assertEqual(parse_score("2-1"), ScoreReading(2, 1))
        self.assertEqual(parse_score("2:1"), ScoreReading(2, 1))
        self.assertEqual(parse_score("10 - 0"), ScoreReading(10, 0))

    def test_score_with_halftime(self) -> None:
        self.assertEqual(parse_score("2-1 (1-0)"), ScoreReading(2, 1, 1, 0))
        self.assertEqual(parse_score("3:2(1:1)"), ScoreReading(3, 2, 1, 1))
        self.assertEqual(parse_score("2 - 1 ( 1 - 0 )"), ScoreReading(2, 1, 1, 0))

    def test_score_inside_text(self) -> None:
        self.assertEqual(parse_score("FT 2-1"), ScoreReading(2, 1))

    def test_no_score(self) -> None:
        self.assertIsNone(parse_score("abc"))
        self.assertIsNone(parse_score(""))
        self.assertIsNone(parse_score(None))
        self.assertIsNone(parse_score("2 1"))

    def test_implausible_or_foreign_digits(self) -> None:
        self.assertIsNone(parse_score("9" * 5000 + "-0"))
        self.assertIsNone(parse_score("1-0 (" + "9" * 5000 + "-0)"))
        self.assertIsNone(parse_score("٢-١"))
        self.assertEqual(parse_score("120-0"), ScoreReading(120, 0))

    def test_unclosed_halftime_group(self) -> None:
        self.assertEqual(parse_score("2-1 (1-"), ScoreReading(2, 1))

    def test_halftime_absent_is_not_zero(self) -> None:
        absent = parse_score("1-0")
        scoreless = parse_score("1-0 (0-0)")
        self.assertFalse(absent.has_halftime)
        self.assertIsNone(absent.half_total)
        self.assertIsNone(absent.second_half_total)
        self.assertTrue(scoreless.has_halftime)
        self.assertEqual(scoreless.half_total, 0)
        self.assertEqual(scoreless.second_half_total, 1)

    def test_totals(self) -> None:
        sc = parse_score("3-1 (1-1)")
        self.assertEqual(sc.full_total, 4)
        self.assertEqual(sc.half_total, 2)
        self.assertEqual(sc.second_half_total, 2)
        self.assertTrue(sc.both_scored)


class TipNormalizationTests(unittest.TestCase):
    def test_forms(self) -> None:
        tip = normalize_tip("  Over 2.5 ")
        self.assertEqual(tip.lowered, "over 2.5")
        self.assertEqual(tip.collapsed, "over2.5")
        self.assertEqual(tip.alnum, "over25")

    def test_double_chance_spellings_share_alnum(self) -> None:
        self.assertEqual(normalize_tip("1X").alnum, "1x")
        self.assertEqual(normalize_tip("1 X").alnum, "1x")
        self.assertEqual(normalize_tip("1-x").alnum, "1x")

    def test_empty(self) -> None:
        self.assertIsNone(normalize_tip(""))
        self.assertIsNone(normalize_tip("   "))
        self.assertIsNone(normalize_tip(None))


class MatchPhaseTests(unittest.TestCase):
    def test_from_status(self) -> None:
        self.assertEqual(MatchPhase.from_status("ft"), MatchPhase.FULL_TIME)
        self.assertEqual(MatchPhase.from_status(" 1h "), MatchPhase.FIRST_HALF)
        self.assertEqual(MatchPhase.from_status("2H"), MatchPhase.SECOND_HALF)
        self.assertEqual(MatchPhase.from_status(None), MatchPhase.FULL_TIME)
        self.assertEqual(MatchPhase.from_status(""), MatchPhase.FULL_TIME)
        self.assertIsNone(MatchPhase.from_status("LIVE"))
        self.assertIsNone(MatchPhase.from_status(2))

    def test_first_half_window(self) -> None:
        self.assertTrue(MatchPhase.HALF_TIME.in_first_half)
        self.assertTrue(MatchPhase.FIRST_HALF.in_first_half)
        self.assertFalse(MatchPhase.SECOND_HALF.in_first_half)


class OutcomeLabelTests(unittest.TestCase):
    def test_labels(self) -> None:
        self.assertEqual(Outcome.WON.label, "Vinto")
        self.assertEqual(Outcome.LOST.label, "Perso")
        self.assertEqual(Outcome.CASHOUT.label, "Cash-out")
        self.assertEqual(Outcome.LIVE_GREEN.label, "Live (Green)")
        self.assertIsNone(Outcome.UNKNOWN.label)


if __name__ == "__main__":
    unittest.main()
