"""
Result Parser
File: result_parser.py

Purpose: Interpret fetched justification bytes as an evaluation result
object or as plain justification text.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from core.schemas.evaluation import EvaluationResult

logger = logging.getLogger(__name__)


class ResultParser:
    """
    Parses justification content.

    Accepted shapes:
    - JSON object `{scores?: [{outcome, score}], justification?, timestamp?}`
    - anything else that is valid JSON (rendered back as pretty JSON)
    - plain text (returned verbatim, no scores)
    """

    def parse(self, data: bytes | str) -> EvaluationResult:
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Justification is plain text (%d chars)", len(text))
            return EvaluationResult(justification_text=text)

        if not isinstance(decoded, dict):
            return EvaluationResult(justification_text=json.dumps(decoded, indent=2))

        scores: tuple[Any, ...] = ()
        labels: tuple[str, ...] = ()
        raw_scores = decoded.get("scores")
        if isinstance(raw_scores, list):
            pairs = [
                item for item in raw_scores
                if isinstance(item, dict) and isinstance(item.get("score"), (int, float))
            ]
            if len(pairs) != len(raw_scores):
                logger.warning("Ignored %d malformed score entries", len(raw_scores) - len(pairs))
            scores = tuple(item.get("score") for item in pairs)
            labels = tuple(str(item.get("outcome", "")) for item in pairs)

        timestamp = decoded.get("timestamp")
        justification = decoded.get("justification")
        if not justification:
            justification = json.dumps(decoded, indent=2)
        elif not isinstance(justification, str):
            justification = json.dumps(justification, indent=2)

        return EvaluationResult(
            outcome_scores=scores,
            outcome_labels=labels,
            justification_text=justification,
            timestamp=str(timestamp) if timestamp else None,
        )


__all__ = ["ResultParser"]
