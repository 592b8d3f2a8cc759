"""Observation source adapters.

``default_sources`` builds the standard ordered source list for one client
environment; the order here is the trace order of a sequential run.
"""
from __future__ import annotations

from ..config import load_rule_table
from .base import RuleSource
from .capabilities import AndroidSource, AppleSource, DesktopSource, DisplaySource, TouchSource
from .media import MediaSource
from .nfc import NFCSource
from .tcp_stack import TcpStackSource
from .user_agent import UserAgentSource
from .webgl import WebGLSource

ENVIRONMENT_SOURCES = (
    TouchSource,
    AppleSource,
    AndroidSource,
    DesktopSource,
    DisplaySource,
    WebGLSource,
    NFCSource,
    MediaSource,
    UserAgentSource,
)


def default_sources(env, table: dict | None = None, pcap_path: str | None = None, client_ip: str | None = None) -> list:
    if table is None:
        table = load_rule_table()
    sources = [cls(env, table=table) for cls in ENVIRONMENT_SOURCES]
    if pcap_path:
        sources.append(TcpStackSource(pcap_path, client_ip=client_ip, table=table))
    return sources


__all__ = [
    "RuleSource",
    "TouchSource",
    "AppleSource",
    "AndroidSource",
    "DesktopSource",
    "DisplaySource",
    "WebGLSource",
    "NFCSource",
    "MediaSource",
    "UserAgentSource",
    "TcpStackSource",
    "ENVIRONMENT_SOURCES",
    "default_sources",
]
