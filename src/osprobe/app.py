"""Composition root: wires an environment, a rule table and the engine.

The debug handle is only built on request and only holds references that
the caller passes around explicitly; nothing is published globally.
"""
from __future__ import annotations

import dataclasses
import datetime
import logging
import typing as t

from . import __version__
from .config import EngineConfig, load_rule_table, table_hypotheses
from .engine import FusionEngine
from .environment import ClientEnvironment
from .result import DetectionReport
from .sources import default_sources

log = logging.getLogger("osprobe.app")


def _iso_now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class DetectorApp:
    def __init__(self, engine: FusionEngine, environment: ClientEnvironment | None = None):
        self.engine = engine
        self.environment = environment
        self._last_export: dict | None = None

    def detect(self) -> DetectionReport:
        report = self.engine.run_sync()
        self._last_export = {
            "timestamp": _iso_now(),
            "user_agent": self.environment.user_agent if self.environment else None,
            "report": report.to_dict(),
        }
        return report

    def restart(self) -> DetectionReport:
        log.info("restarting detection")
        return self.detect()

    def export(self) -> dict | None:
        return dict(self._last_export) if self._last_export is not None else None


@dataclasses.dataclass
class DebugHandle:
    app: DetectorApp
    engine: FusionEngine
    version: str = __version__

    def restart(self) -> DetectionReport:
        return self.app.restart()

    def export(self) -> dict | None:
        return self.app.export()

    def signals(self) -> dict | None:
        env = self.app.environment
        return env.to_dict() if env is not None else None

    def to_dict(self) -> dict:
        return {"version": self.version, "signals": self.signals(), "export": self.export()}


def build_app(
    environment: ClientEnvironment,
    table: dict | None = None,
    pcap_path: str | None = None,
    client_ip: str | None = None,
    run_concurrently: bool = True,
    probe_timeout: float | None = None,
    trace_failures: bool = False,
    on_step=None,
    debug: bool = False,
) -> tuple:
    """Return ``(DetectorApp, DebugHandle | None)`` for one client environment."""
    if table is None:
        table = load_rule_table()
    cfg = EngineConfig(
        hypotheses=table_hypotheses(table),
        sources=default_sources(environment, table=table, pcap_path=pcap_path, client_ip=client_ip),
        run_concurrently=run_concurrently,
        trace_failures=trace_failures,
    )
    if probe_timeout is not None:
        cfg.probe_timeout = probe_timeout
    engine = FusionEngine(cfg, on_step=on_step)
    app = DetectorApp(engine, environment)
    handle = DebugHandle(app=app, engine=engine) if debug else None
    return app, handle
