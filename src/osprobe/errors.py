"""Exception taxonomy for osprobe.

Only ``ConfigurationError`` is meant to reach a top-level caller; the engine
absorbs the per-source failures and degrades to zero contribution.
"""
from __future__ import annotations


class OsprobeError(Exception):
    """Base class for all osprobe errors."""


class ConfigurationError(OsprobeError):
    """Empty hypothesis set, malformed rule table or invalid engine option."""


class InvalidObservationError(OsprobeError):
    """An observation violates the ledger contract (bad weight, unknown hypothesis)."""


class SourceProbeFailure(OsprobeError):
    """A single observation source raised or timed out."""

    def __init__(self, source: str, cause: BaseException | None = None, message: str | None = None):
        self.source = source
        self.cause = cause
        if message is None:
            if cause is None:
                message = "probe failed"
            else:
                message = f"{type(cause).__name__}: {cause}" if str(cause) else type(cause).__name__
        self.message = message
        super().__init__(f"source {source!r}: {message}")


class AlreadyRunningError(OsprobeError):
    """``run()`` was called on an engine that already has a run in flight."""
