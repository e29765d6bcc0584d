#!/usr/bin/env python3
import argparse
import codecs
import json
import logging
import sys
from contextlib import nullcontext
from pathlib import Path

from .config import ParserConfig
from .errors import PerfScriptError
from .parser import Failure, PerfScriptParser
from .stats import hot_frames, interval_stats


def build_arg_parser() -> argparse.ArgumentParser:
    env = ParserConfig.from_env()
    ap = argparse.ArgumentParser(
        prog='perfscript',
        description='Aggregate a `perf script` dump into a call tree'
    )
    ap.add_argument('input', help="perf script output, '-' for stdin")
    ap.add_argument('--format', choices=['folded', 'csv', 'json'], default='folded',
                    help='folded stacks, or the nested set rows as CSV/JSON (default: folded)')
    ap.add_argument('--output', '-o', type=Path, default=None,
                    help='Output file (default: stdout)')
    ap.add_argument('--no-thread', action='store_true',
                    help='Do not prefix folded stacks with the thread')
    ap.add_argument('--stats', action='store_true',
                    help='Print sampling intervals and hot frames to stderr')
    ap.add_argument('--top', type=int, default=20,
                    help='Number of hot frames shown with --stats')
    ap.add_argument('--unknown-prefix', default=env.unknown_frame_prefix,
                    help='Symbol prefix of unmapped interpreter frames')
    ap.add_argument('--map-suffix', default=env.address_map_suffix,
                    help='Suffix of JIT address map files')
    ap.add_argument('--encoding', default=env.encoding)
    ap.add_argument('--verbose', '-v', action='store_true')
    return ap


def run(args) -> PerfScriptParser:
    try:
        codecs.lookup(args.encoding)
    except LookupError:
        raise PerfScriptError(f'Unknown encoding: {args.encoding}') from None
    cfg = ParserConfig(
        unknown_frame_prefix=args.unknown_prefix,
        address_map_suffix=args.map_suffix,
        encoding=args.encoding,
    )
    parser = PerfScriptParser(cfg)
    outcome = parser.parse_file(args.input)
    if isinstance(outcome, Failure):
        raise PerfScriptError(outcome.message)
    return parser


def write_tree(parser: PerfScriptParser, args, out):
    tree = parser.tree
    if args.format == 'folded':
        for stack, count in tree.folded(include_thread=not args.no_thread):
            print(f'{stack} {count}', file=out)
    elif args.format == 'csv':
        tree.to_dataframe().to_csv(out, index=False)
    else:
        json.dump(tree.nested_set(), out, indent=2)
        print(file=out)


def print_stats(parser: PerfScriptParser, top: int, out=None):
    out = out if out is not None else sys.stderr
    print(f'samples={parser.samples} threads={len(parser.headers.threads)} '
          f'bad_lines={parser.bad_lines}', file=out)
    for name, stats in interval_stats(parser.timeline).items():
        print(f"   - {name}: {stats['samples']:,} samples, interval median={stats['median_us']:.0f}us "
              f"p90={stats['p90_us']:.0f}us p99={stats['p99_us']:.0f}us", file=out)
    frames = hot_frames(parser.tree, top)
    if not frames.empty:
        print(frames.to_string(index=False, float_format='%.2f'), file=out)


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        parser = run(args)
    except PerfScriptError as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    if parser.bad_lines:
        print(f'⚠️  Skipped {parser.bad_lines} malformed lines', file=sys.stderr)

    with (open(args.output, 'w') if args.output else nullcontext(sys.stdout)) as out:
        write_tree(parser, args, out)
    if args.stats:
        print_stats(parser, args.top)
    return 0


if __name__ == '__main__':
    sys.exit(main())
