"""Evidence ledger: per-hypothesis additive score accumulator.

The ledger is created fresh for every detection run. ``apply`` is the only
mutation and it never lowers a score, so the final totals do not depend on
the order observations arrive in.
"""
from __future__ import annotations

import fractions
import math
import numbers
import types
import typing as t

from .errors import ConfigurationError, InvalidObservationError
from .hypotheses import UNKNOWN
from .observation import Observation
from .result import DetectionResult


def percent(part: float, total: float) -> int:
    """Share of ``total`` as an integer percentage, rounding half up."""
    if total <= 0:
        return 0
    # exact rational arithmetic: no float overflow and no drift across the .5 boundary
    share = fractions.Fraction(part) / fractions.Fraction(total) * 100
    return math.floor(share + fractions.Fraction(1, 2))


class EvidenceLedger:
    def __init__(self, hypotheses: t.Iterable[str]):
        names = tuple(hypotheses or ())
        if not names:
            raise ConfigurationError("hypothesis set must not be empty")
        if len(set(names)) != len(names):
            raise ConfigurationError(f"duplicate hypotheses in {list(names)}")
        if UNKNOWN in names:
            raise ConfigurationError(f"{UNKNOWN!r} is reserved and cannot be a hypothesis")
        self._order = names
        self._scores = {h: 0 for h in names}

    @property
    def hypotheses(self) -> tuple:
        return self._order

    def apply(self, obs: Observation) -> None:
        """Credit ``obs.weight`` to each hypothesis the observation supports."""
        weight = obs.weight
        if isinstance(weight, bool) or not isinstance(weight, numbers.Real):
            raise InvalidObservationError(f"weight must be a number, got {weight!r}")
        if not math.isfinite(weight) or weight <= 0:
            raise InvalidObservationError(f"weight must be positive and finite, got {weight!r}")
        bad = [h for h in obs.hypotheses if not isinstance(h, str)]
        if bad:
            raise InvalidObservationError(f"hypothesis names must be strings, got {bad!r} in observation {obs.label!r}")
        unknown = [h for h in obs.hypotheses if h not in self._scores]
        if unknown:
            raise InvalidObservationError(f"unknown hypotheses {unknown} in observation {obs.label!r}")
        updated = {}
        for h in obs.hypotheses:
            updated[h] = updated.get(h, self._scores[h]) + weight
        if not all(math.isfinite(s) for s in updated.values()) or not math.isfinite(self.total() + weight * len(obs.hypotheses)):
            raise InvalidObservationError(f"observation {obs.label!r} would overflow the ledger")
        # validated up front so a rejected observation leaves no partial write
        self._scores.update(updated)

    def score(self, hypothesis: str):
        if hypothesis == UNKNOWN:
            return 0
        return self._scores[hypothesis]

    def total(self):
        return sum(self._scores.values())

    def snapshot(self) -> t.Mapping[str, float]:
        return types.MappingProxyType(dict(self._scores))

    def ranking(self) -> list:
        """(hypothesis, score) pairs, best first; ties keep enumeration order."""
        pos = {h: i for i, h in enumerate(self._order)}
        return sorted(self._scores.items(), key=lambda kv: (-kv[1], pos[kv[0]]))

    def top_hypothesis(self) -> str:
        """Strictly highest score; first declared wins a tie; UNKNOWN when empty."""
        best = None
        best_score = 0
        for h in self._order:
            s = self._scores[h]
            if s > best_score:
                best, best_score = h, s
        return best if best is not None else UNKNOWN

    def confidence_of(self, hypothesis: str) -> int:
        return percent(self.score(hypothesis), self.total())

    def result(self) -> DetectionResult:
        top = self.top_hypothesis()
        return DetectionResult(hypothesis=top, confidence=self.confidence_of(top))

    def __repr__(self):
        inner = ", ".join(f"{h}={s}" for h, s in self._scores.items())
        return f"EvidenceLedger({inner})"
