"""Read-only detection result and the report handed to reporters."""
from __future__ import annotations

import dataclasses
import typing as t

from . import __version__

SCHEMA_VERSION = "detection/v1"
GENERATED_BY = f"osprobe-{__version__}"


@dataclasses.dataclass(frozen=True)
class DetectionResult:
    hypothesis: str
    confidence: int

    def to_dict(self) -> dict:
        return {"hypothesis": self.hypothesis, "confidence": self.confidence}


@dataclasses.dataclass(frozen=True)
class DetectionReport:
    result: DetectionResult
    scores: t.Mapping[str, float]
    ranking: tuple
    trace: tuple
    failures: tuple

    @property
    def hypothesis(self) -> str:
        return self.result.hypothesis

    @property
    def confidence(self) -> int:
        return self.result.confidence

    def summary(self) -> str:
        # deterministic wording built from known tokens only
        if self.result.confidence == 0:
            return "no evidence collected; OS family unknown"
        fired = [s for s in self.trace if s.fired and self.result.hypothesis in s.hypotheses]
        labels = sorted({s.label for s in fired})
        return f"{self.result.hypothesis} ranked highest ({self.result.confidence}%) due to {', '.join(labels)}"

    def to_dict(self) -> dict:
        return {
            "schema_version": SCHEMA_VERSION,
            "generated_by": GENERATED_BY,
            "result": self.result.to_dict(),
            "scores": dict(self.scores),
            "ranking": [dict(r) for r in self.ranking],
            "summary": self.summary(),
            "trace": [s.to_dict() for s in self.trace],
            "failures": [dict(f) for f in self.failures],
        }
