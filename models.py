from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


DEFAULT_STATUS = "FT"
DEFAULT_FINISHED = True


class Outcome(str, Enum):
    WON = "won"
    LOST = "lost"
    CASHOUT = "cashout"
    LIVE_GREEN = "live_green"
    UNKNOWN = "unknown"

    @property
    def label(self) -> Optional[str]:
        """Display string used by the tips UI; UNKNOWN has none."""
        return _OUTCOME_LABELS.get(self)


_OUTCOME_LABELS = {
    Outcome.WON: "Vinto",
    Outcome.LOST: "Perso",
    Outcome.CASHOUT: "Cash-out",
    Outcome.LIVE_GREEN: "Live (Green)",
}


class MatchPhase(str, Enum):
    FIRST_HALF = "1H"
    HALF_TIME = "HT"
    SECOND_HALF = "2H"
    FULL_TIME = "FT"

    @classmethod
    def from_status(cls, status: Optional[str]) -> Optional["MatchPhase"]:
        # Missing status counts as full time.
        key = str(status or DEFAULT_STATUS).strip().upper()
        for phase in cls:
            if phase.value == key:
                return phase
        return None

    @property
    def in_first_half(self) -> bool:
        return self in {MatchPhase.FIRST_HALF, MatchPhase.HALF_TIME}


@dataclass(frozen=True)
class ScoreReading:
    home_goals: int
    away_goals: int
    halftime_home: Optional[int] = None
    halftime_away: Optional[int] = None

    @property
    def full_total(self) -> int:
        return self.home_goals + self.away_goals

    @property
    def has_halftime(self) -> bool:
        return self.halftime_home is not None and self.halftime_away is not None

    @property
    def half_total(self) -> Optional[int]:
        if not self.has_halftime:
            return None
        return self.halftime_home + self.halftime_away

    @property
    def second_half_total(self) -> Optional[int]:
        half = self.half_total
        if half is None:
            return None
        return self.full_total - half

    @property
    def both_scored(self) -> bool:
        return self.home_goals > 0 and self.away_goals > 0


@dataclass(frozen=True)
class NormalizedTip:
    lowered: str
    collapsed: str
    alnum: str


@dataclass(frozen=True)
class MatchState:
    """Everything a rule may look at besides the tip itself."""
    score: ScoreReading
    phase: Optional[MatchPhase]
    finished: bool


@dataclass(frozen=True)
class TipEvaluation:
    outcome: Outcome
    rule: Optional[str]
    reason: str


@dataclass
class TipRecord:
    tip: Optional[str]
    final_score: Optional[str]
    is_finished: bool = DEFAULT_FINISHED
    status: Optional[str] = DEFAULT_STATUS
    league: Optional[str] = None
    match: Optional[str] = None
