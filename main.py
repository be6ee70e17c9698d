from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from evaluator import evaluate_tips, high_winrate_leagues
from models import DEFAULT_FINISHED, DEFAULT_STATUS, TipRecord


_TRUE_STRINGS = {"true", "1", "yes", "y"}
_FALSE_STRINGS = {"false", "0", "no", "n", ""}


def _parse_finished(value: object) -> bool:
    if value is None:
        return DEFAULT_FINISHED
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _TRUE_STRINGS:
            return True
        if key in _FALSE_STRINGS:
            return False
        raise ValueError(f"Unsupported is_finished value '{value}'")
    return bool(value)


def load_input(path: Path) -> list[TipRecord]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    items = payload["records"] if isinstance(payload, dict) else payload

    records = []
    for item in items:
        finished = item.get("is_finished", item.get("isFinished", DEFAULT_FINISHED))
        records.append(
            TipRecord(
                tip=item.get("tip"),
                final_score=item.get("final_score", item.get("finalScore")),
                is_finished=_parse_finished(finished),
                status=item.get("status") or DEFAULT_STATUS,
                league=item.get("league"),
                match=item.get("match"),
            )
        )

    return records


def main() -> None:
    parser = argparse.ArgumentParser(description="Settle stored tips from their scores without the live feed")
    parser.add_argument("--input", required=True, help="Path to tips JSON")
    parser.add_argument("--winrate", action="store_true", help="Also report leagues above the win-rate threshold")
    parser.add_argument("--threshold", type=float, default=float(os.getenv("WINRATE_THRESHOLD", "80")))
    parser.add_argument("--min-samples", type=int, default=int(os.getenv("WINRATE_MIN_SAMPLES", "5")))
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "WARNING"))
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    records = load_input(Path(args.input))
    result = evaluate_tips(records)
    if args.winrate:
        result["winrate_leagues"] = high_winrate_leagues(
            records, threshold=args.threshold, min_samples=args.min_samples
        )

    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
