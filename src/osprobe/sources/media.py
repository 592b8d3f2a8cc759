"""Codec decode-support checks through the asynchronous media capability query."""
from __future__ import annotations

import asyncio

from .base import RuleSource

HEVC_TYPE = 'video/mp4; codecs="hev1.1.6.L93.B0"'
VP9_TYPE = 'video/webm; codecs="vp9"'


class MediaSource(RuleSource):
    name = "media"
    CONDITIONS = ("hevc", "vp9")

    _QUERIES = (("hevc", HEVC_TYPE, "hardware HEVC/H.265 decoding"), ("vp9", VP9_TYPE, "VP9 video decoding"))

    async def probe(self):
        env = self.env
        if not env.has_navigator_api("mediaCapabilities"):
            return []
        answers = await asyncio.gather(*(env.decoding_info(ctype) for _, ctype, _ in self._QUERIES))
        out = []
        for (cond, ctype, detail), info in zip(self._QUERIES, answers):
            if info.get("supported") is True:
                out.append(self.observe(cond, f"{detail} ({ctype})"))
        return out
