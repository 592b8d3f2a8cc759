"""Passive TCP/IP stack traits from the client's first SYN in a capture."""
from __future__ import annotations

from ..packet import first_client_syn
from .base import RuleSource


class TcpStackSource(RuleSource):
    name = "tcp_stack"
    CONDITIONS = ("ttl_128", "ttl_64", "syn_no_timestamp", "syn_timestamp")

    def __init__(self, pcap_path: str, client_ip: str | None = None, rules: dict | None = None, table: dict | None = None):
        super().__init__(env=None, rules=rules, table=table)
        self.pcap_path = pcap_path
        self.client_ip = client_ip

    def probe(self):
        syn = first_client_syn(self.pcap_path, self.client_ip)
        if syn is None:
            return []
        out = []
        initial = syn.initial_ttl
        if initial in (64, 128):
            out.append(self.observe(f"ttl_{initial}", f"{syn.src_ip} SYN ttl={syn.ttl} (initial {initial})"))
        opts = ",".join(str(k) for k in syn.options) or "none"
        if syn.timestamp_option:
            out.append(self.observe("syn_timestamp", f"window={syn.window} options={opts}"))
        else:
            out.append(self.observe("syn_no_timestamp", f"window={syn.window} options={opts}"))
        return out
