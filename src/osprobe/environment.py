"""Captured client platform state.

A ``ClientEnvironment`` is the read-only view a set of observation sources
probes. It is usually loaded from a JSON document collected on the client:

    {
      "user_agent": "...",
      "max_touch_points": 0,
      "media_queries": {"pointer: coarse": false, "display-mode: standalone": false},
      "window": ["ApplePaySession", "safari.pushNotification"],
      "navigator": ["serial", "hid", "usb", "mediaCapabilities"],
      "css_properties": ["webkitTouchCallout"],
      "device_pixel_ratio": 2,
      "screen": {"width": 1512, "height": 982, "color_depth": 30},
      "webgl": {"vendor": "Apple Inc.", "renderer": "Apple M1"},
      "decoding": {"video/webm; codecs=\\"vp9\\"": true},
      "nfc_scan": null,
      "query_latency": 0.0
    }

Capability queries that the real client answers asynchronously
(``decoding_info``, ``nfc_scan_permission``) are coroutines here. A recorded
answer of ``null`` never settles, like a permission prompt that is never
accepted; callers are expected to bound them with a timeout.
"""
from __future__ import annotations

import asyncio
import copy
import dataclasses
import json
import typing as t

from .errors import ConfigurationError


def _names(val) -> frozenset:
    if not val:
        return frozenset()
    if isinstance(val, dict):
        return frozenset(k for k, v in val.items() if v)
    return frozenset(str(x) for x in val)


@dataclasses.dataclass(frozen=True)
class WebGLInfo:
    vendor: str
    renderer: str

    @property
    def combined(self) -> str:
        return f"{self.vendor} {self.renderer}".lower()


@dataclasses.dataclass
class ClientEnvironment:
    user_agent: str = ""
    max_touch_points: int = 0
    media_queries: dict = dataclasses.field(default_factory=dict)
    window: frozenset = frozenset()
    navigator: frozenset = frozenset()
    css_properties: frozenset = frozenset()
    device_pixel_ratio: float = 1.0
    screen: dict = dataclasses.field(default_factory=dict)
    webgl: WebGLInfo | None = None
    decoding: dict = dataclasses.field(default_factory=dict)
    nfc_scan: bool | None = False
    query_latency: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "ClientEnvironment":
        if not isinstance(data, dict):
            raise ConfigurationError("client environment must be a JSON object")
        webgl = data.get("webgl")
        gl = None
        if isinstance(webgl, dict):
            gl = WebGLInfo(vendor=str(webgl.get("vendor") or ""), renderer=str(webgl.get("renderer") or ""))
        try:
            return cls(
                user_agent=str(data.get("user_agent") or ""),
                max_touch_points=int(data.get("max_touch_points") or 0),
                media_queries={str(k): bool(v) for k, v in (data.get("media_queries") or {}).items()},
                window=_names(data.get("window")),
                navigator=_names(data.get("navigator")),
                css_properties=_names(data.get("css_properties")),
                device_pixel_ratio=float(data.get("device_pixel_ratio") or 1.0),
                screen=dict(data.get("screen") or {}),
                webgl=gl,
                decoding=dict(data.get("decoding") or {}),
                nfc_scan=data.get("nfc_scan", False),
                query_latency=float(data.get("query_latency") or 0.0),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"malformed client environment: {e}") from e

    @classmethod
    def from_json_file(cls, path: str) -> "ClientEnvironment":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as e:
            raise ConfigurationError(f"cannot read environment {path}: {e}") from e
        except ValueError as e:
            raise ConfigurationError(f"environment {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)

    # -- synchronous reads -------------------------------------------------

    @property
    def ua(self) -> str:
        return self.user_agent.lower()

    def matches_media(self, query: str) -> bool:
        return bool(self.media_queries.get(query, False))

    def has_window_api(self, name: str) -> bool:
        return name in self.window

    def has_navigator_api(self, name: str) -> bool:
        return name in self.navigator

    def supports_css(self, prop: str) -> bool:
        return prop in self.css_properties

    # -- asynchronous capability queries -----------------------------------

    async def _settle(self, answer):
        if self.query_latency:
            await asyncio.sleep(self.query_latency)
        if answer is None:
            # never settles; the engine's probe timeout ends the wait
            await asyncio.Event().wait()
        return answer

    async def decoding_info(self, content_type: str) -> dict:
        """Mirror of ``navigator.mediaCapabilities.decodingInfo``."""
        if not self.has_navigator_api("mediaCapabilities"):
            raise LookupError("mediaCapabilities is not exposed")
        answer = self.decoding.get(content_type, False)
        supported = await self._settle(answer)
        return {"supported": bool(supported)}

    async def nfc_scan_permission(self) -> bool:
        """Whether an NDEFReader scan may start; gated on a user gesture."""
        return bool(await self._settle(self.nfc_scan))

    def to_dict(self) -> dict:
        """Raw signal snapshot, JSON-safe and key-sorted."""
        d = {
            "user_agent": self.user_agent,
            "max_touch_points": self.max_touch_points,
            "media_queries": {k: self.media_queries[k] for k in sorted(self.media_queries)},
            "window": sorted(self.window),
            "navigator": sorted(self.navigator),
            "css_properties": sorted(self.css_properties),
            "device_pixel_ratio": self.device_pixel_ratio,
            "screen": copy.deepcopy(self.screen),
            "webgl": dataclasses.asdict(self.webgl) if self.webgl else None,
            "decoding": {k: self.decoding[k] for k in sorted(self.decoding)},
            "nfc_scan": self.nfc_scan,
        }
        return d
