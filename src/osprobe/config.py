"""Static engine configuration and rule-table loading.

A rule table maps each source name to ``{condition: rule}`` where a rule is
``{"weight": float > 0, "hypotheses": [...], "label": str}``. The embedded
default lives in ``signatures/v1.json``. Everything is validated once at
construction; nothing here is re-checked mid-run.
"""
from __future__ import annotations

import dataclasses
import json
import math
import numbers
import os
import typing as t

from .errors import ConfigurationError
from .hypotheses import DEFAULT_HYPOTHESES, UNKNOWN

DEFAULT_PROBE_TIMEOUT = 2.0


@dataclasses.dataclass(frozen=True)
class Rule:
    weight: float
    hypotheses: tuple
    label: str


def default_rule_table_path() -> str:
    return os.path.join(os.path.dirname(__file__), "signatures", "v1.json")


def load_rule_table(path: str | None = None) -> dict:
    """Read and validate a rule table; ``path=None`` loads the embedded default."""
    if path is None:
        path = default_rule_table_path()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            table = json.load(fh)
    except OSError as e:
        raise ConfigurationError(f"cannot read rule table {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"rule table {path} is not valid JSON: {e}") from e
    validate_rule_table(table)
    return table


def _check_hypotheses(hyps, where: str) -> tuple:
    if isinstance(hyps, str) or not isinstance(hyps, (list, tuple)):
        raise ConfigurationError(f"{where}: hypotheses must be a list")
    hyps = tuple(hyps)
    if not hyps:
        raise ConfigurationError(f"{where}: hypotheses must not be empty")
    for h in hyps:
        if not isinstance(h, str) or not h:
            raise ConfigurationError(f"{where}: hypothesis names must be non-empty strings, got {h!r}")
    return hyps


def _parse_rule(raw, known: set, where: str) -> Rule:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: rule must be an object")
    weight = raw.get("weight")
    if isinstance(weight, bool) or not isinstance(weight, numbers.Real) or not math.isfinite(weight) or weight <= 0:
        raise ConfigurationError(f"{where}: weight must be a positive number, got {weight!r}")
    hyps = _check_hypotheses(raw.get("hypotheses"), where)
    unknown = sorted(set(hyps) - known)
    if unknown:
        raise ConfigurationError(f"{where}: unknown hypotheses {unknown}")
    label = raw.get("label")
    if not isinstance(label, str) or not label.strip():
        raise ConfigurationError(f"{where}: label must be a non-empty string")
    return Rule(weight=weight, hypotheses=hyps, label=label)


def validate_rule_table(table) -> None:
    if not isinstance(table, dict):
        raise ConfigurationError("rule table must be a JSON object")
    hyps = _check_hypotheses(table.get("hypotheses", list(DEFAULT_HYPOTHESES)), "rule table")
    if len(set(hyps)) != len(hyps) or UNKNOWN in hyps:
        raise ConfigurationError(f"rule table hypotheses must be unique and not {UNKNOWN!r}")
    sources = table.get("sources")
    if not isinstance(sources, dict):
        raise ConfigurationError("rule table: 'sources' must be an object")
    known = set(hyps)
    for src_name, rules in sources.items():
        if not isinstance(rules, dict):
            raise ConfigurationError(f"rule table: source {src_name!r} must map conditions to rules")
        for cond, raw in rules.items():
            _parse_rule(raw, known, f"{src_name}.{cond}")


def table_hypotheses(table: dict) -> tuple:
    return tuple(table.get("hypotheses") or DEFAULT_HYPOTHESES)


def rules_for(table: dict, source: str) -> dict:
    """Return ``{condition: Rule}`` for one source of a validated table."""
    known = set(table_hypotheses(table))
    raw = (table.get("sources") or {}).get(source)
    if raw is None:
        raise ConfigurationError(f"rule table has no entry for source {source!r}")
    return {cond: _parse_rule(r, known, f"{source}.{cond}") for cond, r in raw.items()}


@dataclasses.dataclass
class EngineConfig:
    hypotheses: tuple = DEFAULT_HYPOTHESES
    sources: list = dataclasses.field(default_factory=list)
    run_concurrently: bool = True
    probe_timeout: float | None = DEFAULT_PROBE_TIMEOUT
    trace_failures: bool = False

    def validate(self) -> None:
        hyps = tuple(self.hypotheses or ())
        if not hyps:
            raise ConfigurationError("hypothesis set must not be empty")
        if len(set(hyps)) != len(hyps):
            raise ConfigurationError(f"duplicate hypotheses in {list(hyps)}")
        self.hypotheses = hyps
        if self.probe_timeout is not None:
            if isinstance(self.probe_timeout, bool) or not isinstance(self.probe_timeout, numbers.Real) or self.probe_timeout <= 0:
                raise ConfigurationError(f"probe_timeout must be a positive number or None, got {self.probe_timeout!r}")
        for src in self.sources:
            if not (callable(src) or callable(getattr(src, "probe", None))):
                raise ConfigurationError(f"source {src!r} is neither callable nor has a probe() method")
