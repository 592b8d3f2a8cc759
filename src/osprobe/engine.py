"""Fusion engine: run observation sources and fuse what they report.

Sources run on a single asyncio event loop. With ``run_concurrently`` every
source is started up front and its observations are applied as it
completes, so the trace follows completion order; otherwise sources are
awaited one at a time in submission order. Either way ``apply`` runs only
on the loop thread and the final scores are identical.

A source that raises or exceeds ``probe_timeout`` contributes nothing. An
observation the ledger rejects is logged and dropped. Neither aborts the run.
"""
from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
import typing as t

from .config import EngineConfig
from .errors import AlreadyRunningError, InvalidObservationError, SourceProbeFailure
from .ledger import EvidenceLedger, percent
from .observation import Observation, TraceStep
from .result import DetectionReport

log = logging.getLogger("osprobe.engine")


def source_name(source) -> str:
    name = getattr(source, "name", None)
    if isinstance(name, str) and name:
        return name
    return getattr(source, "__name__", None) or type(source).__name__


def _normalize(produced, name: str) -> list:
    if produced is None:
        return []
    if isinstance(produced, Observation):
        return [produced]
    try:
        items = list(produced)
    except TypeError:
        raise SourceProbeFailure(name, message=f"returned {type(produced).__name__}, expected observations")
    return items


class FusionEngine:
    def __init__(self, config: EngineConfig | None = None, on_step: t.Callable[[TraceStep], None] | None = None):
        self.config = config if config is not None else EngineConfig()
        self.config.validate()
        self.on_step = on_step
        self._running = False
        self._ledger = EvidenceLedger(self.config.hypotheses)
        self._trace: list = []
        self._failures: list = []
        self.last_report: DetectionReport | None = None

    # -- pull-based snapshot API -------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def ledger(self) -> EvidenceLedger:
        return self._ledger

    def snapshot(self):
        return self._ledger.snapshot()

    def trace(self) -> tuple:
        return tuple(self._trace)

    # -- running -----------------------------------------------------------

    async def _invoke(self, source) -> list:
        name = source_name(source)
        probe = getattr(source, "probe", None)
        fn = probe if callable(probe) else source
        try:
            produced = fn()
            if inspect.isawaitable(produced):
                if self.config.probe_timeout is None:
                    produced = await produced
                else:
                    produced = await asyncio.wait_for(produced, self.config.probe_timeout)
            return _normalize(produced, name)
        except SourceProbeFailure:
            raise
        except asyncio.TimeoutError as e:
            raise SourceProbeFailure(name, e, f"timed out after {self.config.probe_timeout}s") from e
        except Exception as e:
            raise SourceProbeFailure(name, e) from e

    def _record_failure(self, failure: SourceProbeFailure) -> None:
        log.warning("source %s contributed no evidence: %s", failure.source, failure.message)
        self._failures.append({"source": failure.source, "error": failure.message})
        if self.config.trace_failures:
            self._emit(TraceStep.from_failure(failure.source, failure.message))

    def _emit(self, step: TraceStep) -> None:
        self._trace.append(step)
        if self.on_step is None:
            return
        try:
            self.on_step(step)
        except Exception:
            log.exception("trace callback failed")

    def _absorb(self, name: str, observations: list) -> None:
        for obs in observations:
            if not isinstance(obs, Observation):
                log.warning("source %s produced a non-observation %r; dropped", name, obs)
                continue
            if obs.source is None:
                obs = dataclasses.replace(obs, source=name)
            try:
                # the step is built first so an unserializable record never reaches the ledger
                step = TraceStep.from_observation(obs)
                self._ledger.apply(obs)
            except (InvalidObservationError, TypeError, ValueError) as e:
                log.warning("dropping invalid observation from %s: %s", name, e)
                continue
            log.debug("applied %s (+%s -> %s)", obs.label, obs.weight, ",".join(obs.hypotheses))
            self._emit(step)

    async def _collect(self, source):
        name = source_name(source)
        try:
            return name, await self._invoke(source), None
        except SourceProbeFailure as failure:
            return name, [], failure

    async def run(self, sources: t.Sequence | None = None) -> DetectionReport:
        """Run every source once against a fresh ledger and return the report."""
        if self._running:
            raise AlreadyRunningError("a detection run is already in flight on this engine")
        self._running = True
        try:
            srcs = list(self.config.sources if sources is None else sources)
            self._ledger = EvidenceLedger(self.config.hypotheses)
            self._trace = []
            self._failures = []
            log.info("detection run started with %d sources (%s)", len(srcs),
                     "concurrent" if self.config.run_concurrently else "sequential")

            if self.config.run_concurrently:
                pending = [asyncio.ensure_future(self._collect(s)) for s in srcs]
                try:
                    for fut in asyncio.as_completed(pending):
                        self._settle(*(await fut))
                finally:
                    for p in pending:
                        if not p.done():
                            p.cancel()
            else:
                for s in srcs:
                    self._settle(*(await self._collect(s)))

            report = self._build_report()
            self.last_report = report
            log.info("detection run finished: %s (%d%%)", report.hypothesis, report.confidence)
            return report
        finally:
            self._running = False

    def _settle(self, name: str, observations: list, failure: SourceProbeFailure | None) -> None:
        if failure is not None:
            self._record_failure(failure)
            return
        self._absorb(name, observations)

    def run_sync(self, sources: t.Sequence | None = None) -> DetectionReport:
        return asyncio.run(self.run(sources))

    def _build_report(self) -> DetectionReport:
        ledger = self._ledger
        total = ledger.total()
        ranking = tuple(
            {"name": h, "score": s, "confidence": percent(s, total)}
            for h, s in ledger.ranking()
        )
        return DetectionReport(
            result=ledger.result(),
            scores=ledger.snapshot(),
            ranking=ranking,
            trace=tuple(self._trace),
            failures=tuple(self._failures),
        )
