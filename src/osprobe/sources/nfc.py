"""Near-field communication capability checks."""
from __future__ import annotations

import re

from .base import RuleSource

_IOS_VERSION_RE = re.compile(r"os (\d+)_")

# Core NFC reading is available from iOS 11
_MIN_IOS_NFC = 11


def nfc_api_type(env) -> str | None:
    if env.has_window_api("NDEFReader"):
        return "NDEFReader"
    if env.has_navigator_api("nfc"):
        return "navigator.nfc"
    return None


def has_nfc_support(env) -> bool:
    """Best-effort guess from the platform string and exposed APIs."""
    ua = env.ua
    if "android" in ua:
        return True
    if "iphone" in ua or "ipad" in ua:
        m = _IOS_VERSION_RE.search(ua)
        if m:
            return int(m.group(1)) >= _MIN_IOS_NFC
    return nfc_api_type(env) is not None


class NFCSource(RuleSource):
    name = "nfc"
    CONDITIONS = ("nfc_api", "nfc_android", "nfc_iphone")

    async def probe(self):
        env = self.env
        out = []
        api = nfc_api_type(env)
        if api is not None:
            detail = f"API type: {api}"
            if api == "NDEFReader":
                can_scan = await env.nfc_scan_permission()
                detail = f"{detail}, scan permitted: {can_scan}"
            out.append(self.observe("nfc_api", detail))
        if has_nfc_support(env):
            if "android" in env.ua:
                out.append(self.observe("nfc_android", "Android device with NFC"))
            elif "iphone" in env.ua:
                out.append(self.observe("nfc_iphone", "iPhone with Core NFC reading"))
        return out
