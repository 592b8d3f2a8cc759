"""TCP SYN trait extraction with dpkt."""
from __future__ import annotations

import dataclasses
import socket
import typing as t

import dpkt

from .ingest import iter_packets


@dataclasses.dataclass(frozen=True)
class SynTraits:
    ts: float
    src_ip: str
    dst_ip: str
    ttl: int
    window: int
    options: tuple
    timestamp_option: bool

    @property
    def initial_ttl(self) -> int:
        return bin_ttl(self.ttl)


def bin_ttl(val: int) -> int:
    """Map an observed TTL to the nearest common initial TTL at or above it."""
    if val <= 32:
        return 32
    if val <= 64:
        return 64
    if val <= 128:
        return 128
    return 255


def _addr(ip) -> tuple:
    if isinstance(ip, dpkt.ip.IP):
        return socket.inet_ntoa(ip.src), socket.inet_ntoa(ip.dst), ip.ttl
    return socket.inet_ntop(socket.AF_INET6, ip.src), socket.inet_ntop(socket.AF_INET6, ip.dst), ip.hlim


def parse_syn(ts: float, raw: bytes) -> SynTraits | None:
    """Return SYN traits for an Ethernet frame carrying a client SYN, else None.

    SYN-ACKs are server responses and are skipped.
    """
    try:
        eth = dpkt.ethernet.Ethernet(raw)
    except (dpkt.UnpackError, ValueError):
        return None
    ip = eth.data
    if not isinstance(ip, (dpkt.ip.IP, dpkt.ip6.IP6)):
        return None
    tcp = ip.data
    if not isinstance(tcp, dpkt.tcp.TCP):
        return None
    flags = tcp.flags
    if not (flags & dpkt.tcp.TH_SYN) or (flags & dpkt.tcp.TH_ACK):
        return None
    try:
        opts = dpkt.tcp.parse_opts(tcp.opts or b"")
    except (dpkt.UnpackError, ValueError, IndexError):
        opts = []
    kinds = tuple(k for k, _ in opts)
    src, dst, ttl = _addr(ip)
    return SynTraits(
        ts=ts,
        src_ip=src,
        dst_ip=dst,
        ttl=int(ttl),
        window=int(tcp.win),
        options=kinds,
        timestamp_option=dpkt.tcp.TCP_OPT_TIMESTAMP in kinds,
    )


def first_client_syn(path: str, client_ip: str | None = None) -> SynTraits | None:
    for ts, raw in iter_packets(path):
        syn = parse_syn(ts, raw)
        if syn is None:
            continue
        if client_ip is not None and syn.src_ip != client_ip:
            continue
        return syn
    return None
