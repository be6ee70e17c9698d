from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from evaluator import (
    evaluate_record,
    evaluate_tips,
    high_winrate_leagues,
    rule_names,
)
from models import DEFAULT_FINISHED, DEFAULT_STATUS, Outcome, TipRecord
from parsing import parse_score

logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())
logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
#  Pydantic models
# ═══════════════════════════════════════════════════════════════════════════════


class TipRecordIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tip: Optional[str] = None
    final_score: Optional[str] = Field(default=None, alias="finalScore")
    is_finished: bool = Field(default=DEFAULT_FINISHED, alias="isFinished")
    status: Optional[str] = DEFAULT_STATUS
    league: Optional[str] = None
    match: Optional[str] = None

    @field_validator("status")
    @classmethod
    def normalize_status(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip().upper()

    def to_record(self) -> TipRecord:
        return TipRecord(
            tip=self.tip,
            final_score=self.final_score,
            is_finished=self.is_finished,
            status=self.status,
            league=self.league,
            match=self.match,
        )


class BatchEvaluationRequest(BaseModel):
    records: List[TipRecordIn] = Field(min_length=1)


class ScoreParseRequest(BaseModel):
    score: str = Field(min_length=1)


class WinrateRequest(BaseModel):
    records: List[TipRecordIn] = Field(min_length=1)

    @model_validator(mode="after")
    def require_some_league(self) -> "WinrateRequest":
        if not any((r.league or "").strip() for r in self.records):
            raise ValueError("At least one record must carry a league")
        return self


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


# ═══════════════════════════════════════════════════════════════════════════════
#  App
# ═══════════════════════════════════════════════════════════════════════════════

app = FastAPI(title="Tip Evaluator API", version="1.0.0")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/outcomes")
def outcomes() -> dict:
    return {"outcomes": [{"value": o.value, "label": o.label} for o in Outcome]}


@app.get("/rules")
def rules() -> dict:
    names = rule_names()
    return {"count": len(names), "rules": names}


@app.post("/evaluate")
def evaluate(payload: TipRecordIn) -> dict:
    ev = evaluate_record(payload.to_record())
    return {
        "tip": payload.tip,
        "final_score": payload.final_score,
        "outcome": ev.outcome.value,
        "label": ev.outcome.label,
        "rule": ev.rule,
        "reason": ev.reason,
    }


@app.post("/evaluate/batch")
def evaluate_batch(payload: BatchEvaluationRequest) -> dict:
    return evaluate_tips(r.to_record() for r in payload.records)


@app.post("/leagues/winrate")
def leagues_winrate(
    payload: WinrateRequest,
    threshold: Optional[float] = None,
    min_samples: Optional[int] = None,
) -> dict:
    threshold = threshold if threshold is not None else _env_float("WINRATE_THRESHOLD", 80.0)
    min_samples = min_samples if min_samples is not None else _env_int("WINRATE_MIN_SAMPLES", 5)
    if not 0 <= threshold <= 100:
        raise HTTPException(status_code=400, detail="threshold must be between 0 and 100")
    if min_samples < 1:
        raise HTTPException(status_code=400, detail="min_samples must be at least 1")

    records = [r.to_record() for r in payload.records]
    leagues = high_winrate_leagues(records, threshold=threshold, min_samples=min_samples)
    logger.info("Win-rate report over %d records: %d leagues selected", len(records), len(leagues))
    return {"threshold": threshold, "min_samples": min_samples, "leagues": leagues}


@app.post("/score/parse")
def score_parse(payload: ScoreParseRequest) -> dict:
    sc = parse_score(payload.score)
    if sc is None:
        raise HTTPException(status_code=422, detail=f"No score found in '{payload.score}'")
    return {
        "home_goals": sc.home_goals,
        "away_goals": sc.away_goals,
        "halftime_home": sc.halftime_home,
        "halftime_away": sc.halftime_away,
        "full_total": sc.full_total,
        "half_total": sc.half_total,
        "second_half_total": sc.second_half_total,
    }
