"""Command-line reporter for osprobe."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from . import __version__
from .app import build_app
from .config import default_rule_table_path, load_rule_table
from .environment import ClientEnvironment
from .errors import ConfigurationError
from .logging_config import setup_logging

EXIT_OK = 0
EXIT_CONFIG = 2


def build_parser():
    p = argparse.ArgumentParser(prog="osprobe", description="Infer a client's OS family from captured platform signals")
    p.add_argument("--version", action="version", version=f"osprobe {__version__}")
    p.add_argument("--log", default="WARNING", help="Log level")
    sub = p.add_subparsers(dest="cmd")

    d = sub.add_parser("detect", help="Run detection against a captured client environment")
    d.add_argument("environment", help="Path to the client environment JSON")
    d.add_argument("--pcap", help="Optional pcap/pcapng with the client's TCP handshake", metavar="FILE")
    d.add_argument("--client-ip", help="Only consider SYNs sent from this address")
    d.add_argument("--rules", help="Rule table JSON (defaults to the embedded table)", metavar="FILE")
    d.add_argument("--sequential", action="store_true", help="Await sources one by one for a deterministic trace order")
    d.add_argument("--timeout", type=float, help="Seconds before an asynchronous probe counts as failed")
    d.add_argument("--trace-failures", action="store_true", help="Record failed sources as non-firing trace steps")
    d.add_argument("--out", help="Write the JSON report to FILE", metavar="FILE")
    d.add_argument("--json", action="store_true", help="Emit the JSON report on stdout")
    d.add_argument("--debug", action="store_true", help="Include the debug handle export (version, raw signals)")

    c = sub.add_parser("check-rules", help="Validate a rule table")
    c.add_argument("--rules", help="Rule table JSON (defaults to the embedded table)", metavar="FILE")
    c.add_argument("--json", action="store_true", help="Emit the validated table as JSON")
    return p


def _dump(obj) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _print_human(report) -> None:
    print(f"Detected: {report.hypothesis} ({report.confidence}%)")
    print(report.summary())
    print("Scores:")
    for r in report.ranking:
        print(f"  {r['name']:<8} {r['score']:>5}  {r['confidence']:>3}%")
    if report.trace:
        print("Steps:")
        for s in report.trace:
            mark = "+" if s.fired else "x"
            targets = ",".join(s.hypotheses)
            print(f"  [{mark}] {s.label} (+{s.weight} {targets}) {s.detail or ''}".rstrip())
    for f in report.failures:
        print(f"  ! {f['source']}: {f['error']}")


def _cmd_detect(args, log) -> int:
    env = ClientEnvironment.from_json_file(args.environment)
    table = load_rule_table(args.rules)
    app, handle = build_app(
        env,
        table=table,
        pcap_path=args.pcap,
        client_ip=args.client_ip,
        run_concurrently=not args.sequential,
        probe_timeout=args.timeout,
        trace_failures=args.trace_failures,
        debug=args.debug,
    )
    report = app.detect()
    out_obj = report.to_dict()
    if handle is not None:
        out_obj["debug"] = {"version": handle.version, "signals": handle.signals()}

    if args.out:
        out_dir = os.path.dirname(args.out)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(args.out, "w", encoding="utf-8") as fh:
            fh.write(json.dumps(out_obj, sort_keys=True, indent=2, ensure_ascii=False))
        log.info("wrote report to %s", args.out)

    if args.json:
        print(_dump(out_obj))
    else:
        _print_human(report)
    return EXIT_OK


def _cmd_check_rules(args) -> int:
    path = args.rules or default_rule_table_path()
    table = load_rule_table(path)
    if args.json:
        print(_dump(table))
    else:
        n = sum(len(r) for r in table["sources"].values())
        print(f"{path}: {table.get('version', 'unversioned')} ok, {len(table['sources'])} sources, {n} rules")
    return EXIT_OK


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log)
    log = logging.getLogger("osprobe.cli")
    if args.cmd is None:
        parser.print_help()
        return EXIT_CONFIG
    try:
        if args.cmd == "detect":
            return _cmd_detect(args, log)
        return _cmd_check_rules(args)
    except ConfigurationError as e:
        log.error("%s", e)
        print(f"osprobe: {e}", file=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":
    sys.exit(main())
