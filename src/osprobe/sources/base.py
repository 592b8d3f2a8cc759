"""Rule-table driven observation source.

Each adapter declares the conditions it can detect and looks up the static
``(weight, hypotheses, label)`` for each in its rule table. Adapters only
produce observations; they never see the ledger.
"""
from __future__ import annotations

import typing as t

from ..config import Rule, load_rule_table, rules_for
from ..errors import ConfigurationError
from ..observation import Observation


class RuleSource:
    name: str = "rules"
    CONDITIONS: tuple = ()

    def __init__(self, env=None, rules: dict | None = None, table: dict | None = None):
        self.env = env
        if rules is None:
            rules = rules_for(table if table is not None else load_rule_table(), self.name)
        missing = [c for c in self.CONDITIONS if c not in rules]
        if missing:
            raise ConfigurationError(f"source {self.name!r} has no rule for {missing}")
        for cond, rule in rules.items():
            if not isinstance(rule, Rule):
                raise ConfigurationError(f"{self.name}.{cond}: expected Rule, got {type(rule).__name__}")
        self.rules = dict(rules)

    def observe(self, condition: str, detail: str | None = None) -> Observation:
        rule = self.rules[condition]
        return Observation(
            hypotheses=rule.hypotheses,
            weight=rule.weight,
            label=rule.label,
            detail=detail,
            source=self.name,
            condition=condition,
        )

    def probe(self):  # pragma: no cover - overridden
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"
