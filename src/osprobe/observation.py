"""Observation and trace-step records plus deterministic evidence ids.

An observation is one fired signal: a fixed weight credited to every
hypothesis it supports. Signals that do not fire produce nothing.
"""
from __future__ import annotations

import dataclasses
import hashlib
import json
import numbers
import typing as t


def _canonical(obj: t.Any) -> t.Any:
    """Normalize a scoring key so equal observations hash to the same id.

    Key order never matters, sequences keep their order and a whole-number
    float weight hashes like the integer it equals.
    """
    if isinstance(obj, dict):
        return {str(k): _canonical(obj[k]) for k in sorted(obj.keys(), key=str)}
    if isinstance(obj, (list, tuple)):
        return [_canonical(v) for v in obj]
    if isinstance(obj, float) and obj.is_integer():
        return int(obj)
    return obj


def canonical_json(obj: t.Any) -> str:
    return json.dumps(_canonical(obj), separators=(",", ":"), ensure_ascii=False)


def evidence_sha1(obj: t.Any) -> str:
    """Return a deterministic SHA1 hex string for a JSON-like object."""
    h = hashlib.sha1()
    h.update(canonical_json(obj).encode("utf-8"))
    return h.hexdigest()


@dataclasses.dataclass(frozen=True)
class Observation:
    hypotheses: tuple
    weight: float
    label: str
    detail: str | None = None
    source: str | None = None
    condition: str | None = None

    def __post_init__(self):
        # accept any iterable of names but store a tuple so the record stays hashable
        if isinstance(self.hypotheses, str):
            object.__setattr__(self, "hypotheses", (self.hypotheses,))
        elif not isinstance(self.hypotheses, tuple):
            object.__setattr__(self, "hypotheses", tuple(self.hypotheses))
        # Fraction and other non-builtin reals are stored as float so ids serialize
        w = self.weight
        if isinstance(w, numbers.Real) and not isinstance(w, (bool, int, float)):
            object.__setattr__(self, "weight", float(w))

    def scoring_key(self) -> dict:
        # only the fields that affect scoring and identity; detail is free text
        return {
            "source": self.source,
            "condition": self.condition,
            "hypotheses": list(self.hypotheses),
            "weight": self.weight,
        }

    @property
    def evidence_id(self) -> str:
        return evidence_sha1(self.scoring_key())


@dataclasses.dataclass(frozen=True)
class TraceStep:
    fired: bool
    label: str
    weight: float
    hypotheses: tuple
    detail: str | None = None
    source: str | None = None
    evidence_id: str | None = None

    @classmethod
    def from_observation(cls, obs: Observation) -> "TraceStep":
        return cls(
            fired=True,
            label=obs.label,
            weight=obs.weight,
            hypotheses=tuple(obs.hypotheses),
            detail=obs.detail,
            source=obs.source,
            evidence_id=obs.evidence_id,
        )

    @classmethod
    def from_failure(cls, source: str, message: str) -> "TraceStep":
        return cls(fired=False, label=source, weight=0, hypotheses=(), detail=message, source=source)

    def to_dict(self) -> dict:
        return {
            "ok": self.fired,
            "title": self.label,
            "detail": self.detail,
            "weight": self.weight,
            "targets": list(self.hypotheses),
            "source": self.source,
            "evidence_id": self.evidence_id,
        }
