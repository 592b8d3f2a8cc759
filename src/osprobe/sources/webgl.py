"""Render-backend identity checks from the unmasked WebGL vendor/renderer."""
from __future__ import annotations

from .base import RuleSource

# first match wins, in this order
_GPU_VENDORS = (
    ("nvidia", ("nvidia", "geforce")),
    ("amd", ("amd", "radeon")),
    ("intel", ("intel",)),
    ("apple", ("apple", "metal")),
)


def contains_apple(info) -> bool:
    if info is None:
        return False
    c = info.combined
    return "apple" in c or "metal" in c


def is_angle_metal(info) -> bool:
    if info is None:
        return False
    r = info.renderer.lower()
    return "angle" in r and "metal" in r


def gpu_vendor(info) -> str:
    if info is None:
        return "unknown"
    c = info.combined
    for vendor, needles in _GPU_VENDORS:
        if any(n in c for n in needles):
            return vendor
    return "unknown"


class WebGLSource(RuleSource):
    name = "webgl"
    CONDITIONS = ("apple_renderer", "angle_metal", "gpu_apple", "gpu_intel", "gpu_nvidia", "gpu_amd")

    def probe(self):
        info = self.env.webgl
        if info is None:
            return []
        detail = f'vendor="{info.vendor}" renderer="{info.renderer}"'
        out = []
        if contains_apple(info):
            out.append(self.observe("apple_renderer", detail))
        if is_angle_metal(info):
            out.append(self.observe("angle_metal", detail))
        vendor = gpu_vendor(info)
        if vendor != "unknown":
            out.append(self.observe(f"gpu_{vendor}", f"{vendor} graphics detected"))
        return out
