import argparse
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from .core.config import settings
from .exceptions import PacketeerError
from .pipeline import run_capture
from .storage import (
    DNSStore,
    get_most_queried_domains,
    get_queries_over_time,
    get_unique_domains,
)


def _print_rows(title, rows):
    print(title)
    print(pd.DataFrame([asdict(r) for r in rows]).to_string(index=False) if rows else "(no rows)")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Packet and DNS transaction recorder")
    parser.add_argument("--db", dest="db_path", default=settings.db_path, help="path of the DNS store")
    sub = parser.add_subparsers(dest="cmd", required=True)

    read_cmd = sub.add_parser("read", help="classify a capture file and store its DNS transactions")
    read_cmd.add_argument("pcap")
    read_cmd.add_argument("--strict", action="store_true", default=settings.strict, help="halt on the first bad packet")
    read_cmd.add_argument("--max-packets", type=int, default=settings.max_packets)
    read_cmd.add_argument("--quiet", action="store_true", help="do not print packet records")

    stats_cmd = sub.add_parser("dns-stats", help="report on stored DNS transactions")
    stats_cmd.add_argument("-m", "--most-queried", action="store_true", help="most queried domains")
    stats_cmd.add_argument("-t", "--over-time", action="store_true", help="queries over time")
    stats_cmd.add_argument("-u", "--unique", action="store_true", help="unique domains per source IP")
    args = parser.parse_args(argv)

    try:
        with DNSStore.open(args.db_path, read_only=args.cmd == "dns-stats") as store:
            if args.cmd == "read":
                on_record = None if args.quiet else (lambda rec, n: print(f"{n}: {rec}"))
                stats = run_capture(
                    Path(args.pcap),
                    store,
                    strict=args.strict,
                    on_record=on_record,
                    max_packets=args.max_packets,
                )
                print(f"Processed {stats.packets} packets, stored {stats.transactions} DNS transactions")
            elif args.cmd == "dns-stats":
                if args.most_queried:
                    _print_rows("Most queried domains", get_most_queried_domains(store))
                if args.over_time:
                    _print_rows("Queries over time", get_queries_over_time(store))
                if args.unique:
                    _print_rows("Unique domains", get_unique_domains(store))
    except PacketeerError as exc:
        parser.exit(1, f"error: {exc}\n")
    return 0


if __name__ == "__main__":
    main()
