"""Hardware and platform-API presence checks.

Presence of an API object is the signal; absence produces nothing.
"""
from __future__ import annotations

from .base import RuleSource


class TouchSource(RuleSource):
    name = "touch"
    CONDITIONS = ("touch_input",)

    def probe(self):
        env = self.env
        coarse = env.matches_media("pointer: coarse")
        if env.max_touch_points > 0 or coarse:
            return [self.observe("touch_input", f"touch points: {env.max_touch_points}, coarse pointer: {coarse}")]
        return []


class AppleSource(RuleSource):
    name = "apple"
    CONDITIONS = ("apple_pay", "webkit_touch_css", "safari_push")

    def probe(self):
        env = self.env
        out = []
        if env.has_window_api("ApplePaySession"):
            out.append(self.observe("apple_pay", "ApplePaySession is available"))
        if env.supports_css("webkitTouchCallout") or env.supports_css("webkitOverflowScrolling"):
            out.append(self.observe("webkit_touch_css", "webkitTouchCallout or webkitOverflowScrolling supported"))
        if env.has_window_api("safari.pushNotification"):
            out.append(self.observe("safari_push", "safari.pushNotification is available"))
        return out


class AndroidSource(RuleSource):
    name = "android"
    CONDITIONS = ("related_apps",)

    def probe(self):
        if self.env.has_navigator_api("getInstalledRelatedApps"):
            return [self.observe("related_apps", "getInstalledRelatedApps is available")]
        return []


class DesktopSource(RuleSource):
    name = "desktop"
    CONDITIONS = ("web_serial", "web_hid", "web_usb")

    _APIS = (("serial", "web_serial"), ("hid", "web_hid"), ("usb", "web_usb"))

    def probe(self):
        # one observation per API so each carries its own static weight
        return [
            self.observe(cond, f"navigator.{api} is available")
            for api, cond in self._APIS
            if self.env.has_navigator_api(api)
        ]


class DisplaySource(RuleSource):
    name = "display"
    CONDITIONS = ("high_dpr",)

    HIGH_DPR = 2.0

    def probe(self):
        dpr = self.env.device_pixel_ratio
        if dpr >= self.HIGH_DPR:
            return [self.observe("high_dpr", f"device pixel ratio: {dpr:g}")]
        return []
