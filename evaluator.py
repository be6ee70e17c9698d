from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from models import (
    DEFAULT_FINISHED,
    DEFAULT_STATUS,
    MatchPhase,
    MatchState,
    NormalizedTip,
    Outcome,
    TipEvaluation,
    TipRecord,
)
from parsing import normalize_tip, parse_score

logger = logging.getLogger(__name__)

Verdict = Tuple[Outcome, str]

W = Outcome.WON
L = Outcome.LOST
CO = Outcome.CASHOUT
LG = Outcome.LIVE_GREEN
U = Outcome.UNKNOWN


@dataclass(frozen=True)
class Rule:
    name: str
    matches: Callable[[NormalizedTip], bool]
    settle: Callable[[MatchState], Verdict]


# ═══════════════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _goals_needed(line: float) -> int:
    """Goals that beat a half line: 2.5 -> 3."""
    return int(line) + 1


def _score_text(state: MatchState) -> str:
    sc = state.score
    return f"{sc.home_goals}:{sc.away_goals}"


def _open_position(state: MatchState, reason: str) -> Verdict:
    # Still green: the position only becomes a win once the match is over.
    if state.finished:
        return W, reason
    return LG, f"{reason} (match in progress)"


def _lowered_contains(*needles: str) -> Callable[[NormalizedTip], bool]:
    return lambda tip: any(n in tip.lowered for n in needles)


def _lowered_equals_or_contains(exact: Iterable[str], contained: Iterable[str]) -> Callable[[NormalizedTip], bool]:
    exact = frozenset(exact)
    contained = tuple(contained)
    return lambda tip: tip.lowered in exact or any(n in tip.lowered for n in contained)


def _alnum_in(*picks: str) -> Callable[[NormalizedTip], bool]:
    picks_set = frozenset(picks)
    return lambda tip: tip.alnum in picks_set


# ═══════════════════════════════════════════════════════════════════════════════
#  Half-specific: Over 0.5 HT / ST
# ═══════════════════════════════════════════════════════════════════════════════


def _settle_first_half_over(state: MatchState) -> Verdict:
    sc = state.score
    if sc.has_halftime:
        ht = f"HT score={sc.halftime_home}:{sc.halftime_away}"
        if sc.half_total >= 1:
            return W, ht
        if state.finished:
            return L, ht
        return U, f"{ht}, match not finished"
    # Any goal seen while still in the first-half window belongs to the first half.
    if sc.full_total >= 1 and state.phase is not None and state.phase.in_first_half:
        return W, f"Goal during first half (status={state.phase.value}, score={_score_text(state)})"
    if state.finished and sc.full_total == 0:
        return L, "Finished 0:0"
    return U, "Missing HT score data"


def _settle_second_half_over(state: MatchState) -> Verdict:
    sc = state.score
    if sc.has_halftime:
        reason = f"2nd-half goals={sc.second_half_total}"
        if sc.second_half_total >= 1:
            return W, reason
        if state.finished:
            return L, reason
        return U, f"{reason}, match not finished"
    if state.finished and sc.full_total == 0:
        return L, "Finished 0:0"
    return U, "Missing HT score data"


# ═══════════════════════════════════════════════════════════════════════════════
#  Trading positions
# ═══════════════════════════════════════════════════════════════════════════════


def _settle_back_under(line: float) -> Callable[[MatchState], Verdict]:
    needed = _goals_needed(line)

    def settle(state: MatchState) -> Verdict:
        total = state.score.full_total
        if total >= needed:
            return L, f"total={total} broke line={line}"
        return _open_position(state, f"total={total} under line={line}")

    return settle


def _settle_back_over(line: float) -> Callable[[MatchState], Verdict]:
    needed = _goals_needed(line)

    def settle(state: MatchState) -> Verdict:
        total = state.score.full_total
        if total >= needed:
            return W, f"total={total} over line={line}"
        if total > 0:
            return CO, f"total={total} short of line={line}, exit on goal"
        return L, f"No goals, line={line}"

    return settle


def _settle_lay_the_draw(state: MatchState) -> Verdict:
    sc = state.score
    if sc.home_goals != sc.away_goals:
        return W, f"Not a draw ({_score_text(state)})"
    if sc.full_total >= 2:
        return CO, f"Scoring draw ({_score_text(state)})"
    return L, "Draw 0:0"


def _trading_rules() -> List[Rule]:
    rules = []
    for line in (3.5, 2.5, 1.5):
        rules.append(Rule(
            name=f"back_under_{line}",
            matches=_lowered_contains(f"back under {line}", f"lay over {line}"),
            settle=_settle_back_under(line),
        ))
    for line in (2.5, 3.5):
        rules.append(Rule(
            name=f"back_over_{line}",
            matches=_lowered_contains(f"back over {line}", f"lay under {line}"),
            settle=_settle_back_over(line),
        ))
    rules.append(Rule(
        name="lay_the_draw",
        matches=_lowered_contains("lay the draw", "lay draw", "laythedraw"),
        settle=_settle_lay_the_draw,
    ))
    return rules


# ═══════════════════════════════════════════════════════════════════════════════
#  Generic Over / Under N.5
# ═══════════════════════════════════════════════════════════════════════════════

_GOAL_LINES = (0.5, 1.5, 2.5, 3.5)


def _collapsed_line_matcher(sign: str, word: str, letter: str, line: float) -> Callable[[NormalizedTip], bool]:
    text = str(line)
    short_re = re.compile(rf"\b{letter}{re.escape(text)}")

    def matches(tip: NormalizedTip) -> bool:
        c = tip.collapsed
        return f"{sign}{text}" in c or f"{word}{text}" in c or short_re.search(c) is not None

    return matches


def _settle_over(line: float) -> Callable[[MatchState], Verdict]:
    needed = _goals_needed(line)

    def settle(state: MatchState) -> Verdict:
        total = state.score.full_total
        return (W if total >= needed else L), f"total={total}, line={line}"

    return settle


def _settle_under(line: float) -> Callable[[MatchState], Verdict]:
    needed = _goals_needed(line)

    def settle(state: MatchState) -> Verdict:
        total = state.score.full_total
        if total >= needed:
            return L, f"total={total}, line={line}"
        return _open_position(state, f"total={total}, line={line}")

    return settle


def _goal_line_rules() -> List[Rule]:
    rules = [
        Rule(f"over_{line}", _collapsed_line_matcher("+", "over", "o", line), _settle_over(line))
        for line in _GOAL_LINES
    ]
    rules += [
        Rule(f"under_{line}", _collapsed_line_matcher("-", "under", "u", line), _settle_under(line))
        for line in _GOAL_LINES
    ]
    return rules


# ═══════════════════════════════════════════════════════════════════════════════
#  BTTS / No Goal
# ═══════════════════════════════════════════════════════════════════════════════


def _settle_btts(state: MatchState) -> Verdict:
    return (W if state.score.both_scored else L), f"goals={_score_text(state)}"


def _settle_no_goal(state: MatchState) -> Verdict:
    if state.score.both_scored:
        return L, f"Both teams scored ({_score_text(state)})"
    return _open_position(state, f"goals={_score_text(state)}")


# ═══════════════════════════════════════════════════════════════════════════════
#  1X2 / Double chance
# ═══════════════════════════════════════════════════════════════════════════════

_RESULT_PICKS: List[Tuple[str, Tuple[str, ...], Callable[[int, int], bool]]] = [
    ("result_1", ("1",), lambda h, a: h > a),
    ("result_2", ("2",), lambda h, a: a > h),
    ("result_x", ("x",), lambda h, a: h == a),
    ("double_chance_1x", ("1x", "x1"), lambda h, a: h >= a),
    ("double_chance_x2", ("x2", "2x"), lambda h, a: a >= h),
    ("double_chance_12", ("12", "21"), lambda h, a: h != a),
]


def _settle_result(won_if: Callable[[int, int], bool]) -> Callable[[MatchState], Verdict]:
    def settle(state: MatchState) -> Verdict:
        sc = state.score
        return (W if won_if(sc.home_goals, sc.away_goals) else L), f"score={_score_text(state)}"

    return settle


# ═══════════════════════════════════════════════════════════════════════════════
#  Registry (priority order matters: first match wins)
# ═══════════════════════════════════════════════════════════════════════════════

RULES: Tuple[Rule, ...] = tuple(
    [
        Rule(
            "over_0.5_first_half",
            _lowered_contains("05 ht", "0.5 ht", "over 0.5 ht", "+0.5 ht"),
            _settle_first_half_over,
        ),
        Rule(
            "over_0.5_second_half",
            _lowered_contains("0.5 st", "0.5 second half", "+0.5 st"),
            _settle_second_half_over,
        ),
    ]
    + _trading_rules()
    + _goal_line_rules()
    + [
        Rule("btts", _lowered_equals_or_contains({"gg", "gol", "goal"}, ["btts"]), _settle_btts),
        Rule(
            "no_goal",
            _lowered_equals_or_contains({"ng", "no gol", "no goal"}, ["no goal"]),
            _settle_no_goal,
        ),
    ]
    + [Rule(name, _alnum_in(*picks), _settle_result(won_if)) for name, picks, won_if in _RESULT_PICKS]
)


def rule_names() -> List[str]:
    return [rule.name for rule in RULES]


def match_rule(tip: NormalizedTip) -> Optional[Rule]:
    for rule in RULES:
        if rule.matches(tip):
            return rule
    return None


# ═══════════════════════════════════════════════════════════════════════════════
#  Orchestration
# ═══════════════════════════════════════════════════════════════════════════════


def evaluate_tip_detailed(
    tip: Optional[str],
    final_score: Optional[str],
    is_finished: bool = DEFAULT_FINISHED,
    status: Optional[str] = DEFAULT_STATUS,
) -> TipEvaluation:
    """
    Settle a free-text tip from a score string alone.

    Used when the live feed has no verdict for the tip. Never raises on bad
    input: missing text, an unreadable score, an unknown market or a live
    match without enough data all come back as Outcome.UNKNOWN.
    """
    if not tip or not final_score:
        logger.debug("Missing tip or score (tip=%r, score=%r)", tip, final_score)
        return TipEvaluation(U, None, "Missing tip or score")

    normalized = normalize_tip(tip)
    if normalized is None:
        return TipEvaluation(U, None, "Empty tip")

    score = parse_score(final_score)
    if score is None:
        logger.debug("Unparseable score %r for tip %r", final_score, tip)
        return TipEvaluation(U, None, f"Unparseable score '{final_score}'")

    rule = match_rule(normalized)
    if rule is None:
        logger.debug("No rule for tip %r", tip)
        return TipEvaluation(U, None, f"No rule for tip '{tip}'")

    state = MatchState(score=score, phase=MatchPhase.from_status(status), finished=bool(is_finished))
    outcome, reason = rule.settle(state)
    logger.debug("Tip %r settled by %s: %s (%s)", tip, rule.name, outcome.value, reason)
    return TipEvaluation(outcome, rule.name, reason)


def evaluate_tip(
    tip: Optional[str],
    final_score: Optional[str],
    is_finished: bool = DEFAULT_FINISHED,
    status: Optional[str] = DEFAULT_STATUS,
) -> Outcome:
    return evaluate_tip_detailed(tip, final_score, is_finished, status).outcome


def evaluate_record(record: TipRecord) -> TipEvaluation:
    return evaluate_tip_detailed(record.tip, record.final_score, record.is_finished, record.status)


def summarize_outcomes(outcomes: Iterable[Outcome]) -> dict:
    counts: Dict[str, int] = {o.value: 0 for o in Outcome}
    total = 0
    for outcome in outcomes:
        counts[outcome.value] += 1
        total += 1
    settled = total - counts[U.value]
    win_rate = round(counts[W.value] / settled * 100, 1) if settled else 0.0
    return {"total": total, "settled": settled, "counts": counts, "win_rate": win_rate}


def evaluate_tips(records: Iterable[TipRecord]) -> dict:
    rows = []
    for record in records:
        ev = evaluate_record(record)
        rows.append((record, ev))

    return {
        "checked_at": datetime.now(timezone.utc).isoformat(),
        "summary": summarize_outcomes(ev.outcome for _, ev in rows),
        "results": [
            {"tip": r.tip, "final_score": r.final_score, "outcome": ev.outcome.value,
             "label": ev.outcome.label, "rule": ev.rule, "reason": ev.reason,
             "league": r.league, "match": r.match}
            for r, ev in rows
        ],
    }


# ═══════════════════════════════════════════════════════════════════════════════
#  League win rate
# ═══════════════════════════════════════════════════════════════════════════════

_LEAGUE_SPACES_RE = re.compile(r"\s+")


def normalize_league(name: str) -> str:
    return _LEAGUE_SPACES_RE.sub(" ", name).strip()


def league_stats(records: Iterable[TipRecord]) -> Dict[str, dict]:
    stats: Dict[str, dict] = {}
    for record in records:
        if not record.final_score or not record.league:
            continue
        league = normalize_league(record.league)
        if not league:
            continue
        entry = stats.setdefault(league, {"total": 0, "wins": 0})
        entry["total"] += 1
        if evaluate_record(record).outcome == W:
            entry["wins"] += 1
    return stats


def high_winrate_leagues(
    records: Iterable[TipRecord],
    threshold: float = 80.0,
    min_samples: int = 5,
) -> List[dict]:
    """Leagues where stored tips have won at least ``threshold`` percent of the time."""
    selected = []
    for league, entry in sorted(league_stats(records).items()):
        rate = entry["wins"] / entry["total"] * 100 if entry["total"] else 0.0
        if rate >= threshold and entry["total"] >= min_samples:
            selected.append({"league": league, "total": entry["total"],
                             "wins": entry["wins"], "win_rate": round(rate, 1)})
    logger.debug("%d leagues above %.1f%% win rate", len(selected), threshold)
    return selected
