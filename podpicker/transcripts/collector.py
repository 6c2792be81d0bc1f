# podpicker/transcripts/collector.py
"""
Attempt aggregation for one strategy chain run.

Collects StrategyResult objects in the order they were attempted and
synthesizes a diagnostics dict for logs and error responses.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

from podpicker.transcripts.schema import ExtractionFailure, StrategyResult


class AttemptCollector:
    """
    Accumulates StrategyResult objects for a single video.

    Several strategies may share an id (e.g. two third-party providers), so
    attempts are kept as an ordered list rather than keyed by strategy.
    Thread-safe not required (the chain is sequential).
    """

    def __init__(self, run_id: UUID | str) -> None:
        self.run_id = str(run_id)
        self._results: List[StrategyResult] = []

    def add(self, result: StrategyResult) -> None:
        self._results.append(result)

    @property
    def results(self) -> List[StrategyResult]:
        return list(self._results)

    def failures(self) -> List[ExtractionFailure]:
        return [result.failure for result in self._results if result.failure is not None]

    def winner(self) -> Optional[StrategyResult]:
        for result in self._results:
            if result.success:
                return result
        return None

    def build_diagnostics(self) -> Dict[str, Any]:
        suggested: List[str] = []
        for failure in self.failures():
            for fix in failure.suggested_fixes:
                if fix not in suggested:
                    suggested.append(fix)

        winner = self.winner()
        return {
            "run_id": self.run_id,
            "attempts": [
                result.model_dump(mode="json", exclude={"segments"}, exclude_none=True)
                for result in self._results
            ],
            "winner": winner.strategy_id if winner else None,
            "suggested_fixes": suggested,
        }
