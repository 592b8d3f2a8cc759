"""PCAP and PCAPNG streaming ingestion.

Yields ``(timestamp, raw_bytes)`` per captured frame without loading the
whole file. The container format is picked by extension first and by
trying the other dpkt reader when the header does not match.
"""
from __future__ import annotations

import os
import typing as t

import dpkt
import dpkt.pcapng


def _open_reader(fh, prefer_pcapng: bool):
    kinds = (dpkt.pcapng.Reader, dpkt.pcap.Reader) if prefer_pcapng else (dpkt.pcap.Reader, dpkt.pcapng.Reader)
    errors = []
    for kind in kinds:
        fh.seek(0)
        try:
            return kind(fh)
        except (ValueError, dpkt.UnpackError) as e:
            errors.append(f"{kind.__module__}: {e}")
    raise ValueError("not a pcap or pcapng capture (" + "; ".join(errors) + ")")


def iter_packets(path: str) -> t.Iterator[tuple]:
    """Yield (ts, raw_bytes) for packets in a pcap or pcapng file."""
    _, ext = os.path.splitext(path)
    with open(path, "rb") as fh:
        reader = _open_reader(fh, prefer_pcapng=ext.lower() == ".pcapng")
        for ts, buf in reader:
            yield ts, buf
