"""Closed enumeration of OS-family hypotheses.

Order is significant: ties in the ledger resolve to the hypothesis declared
first here.
"""
from __future__ import annotations

MACOS = "macOS"
WINDOWS = "Windows"
LINUX = "Linux"
IOS = "iOS"
IPADOS = "iPadOS"
ANDROID = "Android"

DEFAULT_HYPOTHESES = (MACOS, WINDOWS, LINUX, IOS, IPADOS, ANDROID)

# reported when no hypothesis accumulated any score
UNKNOWN = "unknown"
