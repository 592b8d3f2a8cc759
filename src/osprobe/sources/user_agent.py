"""Declared platform-string checks against the user agent."""
from __future__ import annotations

from .base import RuleSource


class UserAgentSource(RuleSource):
    name = "user_agent"
    CONDITIONS = ("ua_macos", "ua_windows", "ua_linux", "ua_iphone", "ua_ipad", "ua_android")

    def probe(self):
        ua = self.env.ua
        if not ua:
            return []
        out = []
        if "mac os x" in ua or "macos" in ua:
            out.append(self.observe("ua_macos", "user agent declares macOS"))
        if "windows nt" in ua:
            out.append(self.observe("ua_windows", "user agent declares Windows NT"))
        if "linux" in ua and "android" not in ua:
            out.append(self.observe("ua_linux", "user agent declares Linux"))
        if "iphone" in ua or "ipod" in ua:
            out.append(self.observe("ua_iphone", "user agent declares iPhone/iPod"))
        if "ipad" in ua:
            out.append(self.observe("ua_ipad", "user agent declares iPad"))
        if "android" in ua:
            out.append(self.observe("ua_android", "user agent declares Android"))
        return out
