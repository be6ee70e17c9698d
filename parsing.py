from __future__ import annotations

import re
from typing import Optional

from models import NormalizedTip, ScoreReading

# ═══════════════════════════════════════════════════════════════════════════════
#  Score parsing: "2-1", "2:1", "2 - 1 (1-0)"
# ═══════════════════════════════════════════════════════════════════════════════

_SCORE_RE = re.compile(
    r"(\d+)\s*[-:]\s*(\d+)"
    r"(?:\s*\(\s*(\d+)\s*[-:]\s*(\d+)\s*\))?",
    re.ASCII,
)


_MAX_GOAL_DIGITS = 3


def _goals(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    if len(text) > _MAX_GOAL_DIGITS:
        raise ValueError(f"Goal count too long ({len(text)} digits)")
    return int(text)


def parse_score(raw: Optional[str]) -> Optional[ScoreReading]:
    """
    Read full-time (or current) goals and optional half-time goals.

    The first "H-A" pair found is the current score; a parenthesised pair right
    after it is the half-time score. Without that group the half-time fields
    stay None, which is not the same as a known 0-0 at the break.

    Returns None when the text holds no score.
    """
    if not raw:
        return None
    m = _SCORE_RE.search(str(raw))
    if m is None:
        return None
    try:
        return ScoreReading(
            home_goals=_goals(m.group(1)),
            away_goals=_goals(m.group(2)),
            halftime_home=_goals(m.group(3)),
            halftime_away=_goals(m.group(4)),
        )
    except ValueError:
        # Not a plausible score, e.g. a long digit run.
        return None


# ═══════════════════════════════════════════════════════════════════════════════
#  Tip normalization
# ═══════════════════════════════════════════════════════════════════════════════

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_tip(raw: Optional[str]) -> Optional[NormalizedTip]:
    if raw is None:
        return None
    lowered = str(raw).lower().strip()
    if not lowered:
        return None
    return NormalizedTip(
        lowered=lowered,
        collapsed=_WHITESPACE_RE.sub("", lowered),
        alnum=_NON_ALNUM_RE.sub("", lowered),
    )
