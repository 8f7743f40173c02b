"""Command-line entry point.

Usage:
    cachesim -c 8 -b 16 -a 4 < trace.txt
    cachesim -c 8 -b 16 -a 4 trace.txt --memory-window 0x3f7e00 256
"""
import argparse
import io
import logging
import sys

from .core.config import MEMORY_SIZE_BYTES, CacheConfig
from .core.errors import ConfigurationError
from .simulation import Simulation

logger = logging.getLogger(__name__)


def _hex_int(text: str) -> int:
    return int(text, 16)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="cachesim", description="Set-associative write-back cache simulator")
    p.add_argument("-c", "--capacity", required=True, help="cache capacity in KiB")
    p.add_argument("-b", "--block-size", required=True, help="block size in bytes")
    p.add_argument("-a", "--associativity", required=True, help="blocks per set")
    p.add_argument("trace", nargs="?", default="-", help="trace file (default: stdin)")
    p.add_argument("--flush", action=argparse.BooleanOptionalAction, default=True,
                   help="write back all dirty blocks after the last record")
    p.add_argument("--memory-window", nargs=2, metavar=("START", "COUNT"),
                   help="dump COUNT words of main memory from hex byte address START")
    p.add_argument("--export-csv", metavar="PATH", help="write statistics as CSV")
    p.add_argument("--export-json", metavar="PATH", help="write statistics and miss-rate history as JSON")
    p.add_argument("--chart", metavar="PATH", help="plot the miss-rate history to a PDF")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(format="%(levelname)s - %(name)s - %(message)s", level=level)

    try:
        config = CacheConfig.from_strings(args.capacity, args.block_size, args.associativity)
    except ConfigurationError as exc:
        parser.exit(2, f"cachesim: configuration error: {exc}\n")

    window = None
    if args.memory_window:
        try:
            window = (_hex_int(args.memory_window[0]), int(args.memory_window[1], 10))
        except ValueError:
            parser.error("--memory-window takes a hex address and a decimal word count")
        if not 0 <= window[0] < MEMORY_SIZE_BYTES:
            parser.error(f"--memory-window start {window[0]:#x} is outside main memory")

    logger.info("%d sets x %d ways x %d bytes", config.num_sets, config.associativity, config.block_size)
    sim = Simulation(config, flush_at_end=args.flush,
                     record_history=bool(args.export_json or args.chart))
    # undecodable bytes become U+FFFD so the line is skipped as malformed
    if args.trace == "-":
        stdin = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="replace")
        sim.run(stdin)
        stdin.detach()
    else:
        try:
            with open(args.trace, encoding="utf-8", errors="replace") as fh:
                sim.run(fh)
        except OSError as exc:
            parser.exit(1, f"cachesim: cannot read trace: {exc}\n")

    print(sim.report(window), end="")
    try:
        sim.export(args.export_csv, args.export_json, args.chart)
    except OSError as exc:
        parser.exit(1, f"cachesim: cannot write export: {exc}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
