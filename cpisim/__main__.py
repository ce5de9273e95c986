#!/usr/bin/env python3
"""Estimate CPI of synthetic address streams for a range of L1 line sizes."""
import argparse
import logging
import sys
from collections import OrderedDict

from cpisim.config import load_config
from cpisim.driver import sweep
from cpisim.generators import default_generators
from cpisim.cache import ConfigurationError
from cpisim.prng import PseudoRandomStream

log = logging.getLogger('cpisim')


def create_parser():
    parser = argparse.ArgumentParser(
        prog='cpisim', description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('-c', '--config', metavar='FILE',
                        help='YAML file overriding machine and simulation defaults')
    parser.add_argument('-n', '--iterations', type=int,
                        help='instructions simulated per run (default: from configuration)')
    parser.add_argument('-l', '--line-sizes', type=int, nargs='+', metavar='BYTES',
                        help='L1 line sizes to sweep (default: from configuration)')
    parser.add_argument('-g', '--generators', nargs='+', metavar='NAME',
                        help='address generators to run (default: all)')
    seeding = parser.add_mutually_exclusive_group()
    seeding.add_argument('--seed', type=int, nargs=2, metavar=('W', 'Z'),
                         help='seed words of the pseudo-random stream')
    seeding.add_argument('--time-seed', action='store_true',
                         help='seed the pseudo-random stream from the clock')
    parser.add_argument('--stats', action='store_true',
                        help='print per-level statistics after every run')
    parser.add_argument('-o', '--output', metavar='FILE',
                        help='save results, as CSV if FILE ends in .csv, pickled otherwise')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='increase output verbosity (-v info, -vv debug)')
    return parser


def print_cpi_table(df, line_sizes, generators, file=sys.stdout):
    """Print CPI table, one row per generator and one column per line size."""
    print("{:<12} |".format("generator"), end='', file=file)
    for line_size in line_sizes:
        print(" {:>10}".format("{}B".format(line_size)), end='', file=file)
    print(file=file)
    print("-" * 12 + "-+" + "-" * 11 * len(line_sizes), file=file)
    table = df.set_index(['generator', 'line_size'])['cpi']
    for name in generators:
        print("{:<12} |".format(name), end='', file=file)
        for line_size in line_sizes:
            print(" {:>10.4f}".format(table[(name, line_size)]), end='', file=file)
        print(file=file)


def run(args, file=sys.stdout):
    config = load_config(args.config)
    sim = config['simulation']
    iterations = args.iterations if args.iterations is not None else sim['iterations']
    # duplicates dropped, order kept
    line_sizes = list(OrderedDict.fromkeys(args.line_sizes or sim['line_sizes']))

    if args.time_seed:
        rng = PseudoRandomStream.from_time()
    elif args.seed:
        rng = PseudoRandomStream(*args.seed)
    else:
        rng = PseudoRandomStream()
    log.info("using %r", rng)

    generators = default_generators(rng, config['DRAM']['size'])
    if args.generators:
        unknown = [g for g in args.generators if g not in generators]
        if unknown:
            raise ConfigurationError("unknown generator(s) {}, available: {}".format(
                ', '.join(unknown), ', '.join(generators)))
        generators = [(g, generators[g]) for g in OrderedDict.fromkeys(args.generators)]
    else:
        generators = list(generators.items())

    callback = None
    if args.stats:
        def callback(name, line_size, result):
            print("{} with {}B L1 lines: CPI {:.4f}".format(name, line_size, result.cpi),
                  file=file)
            result.hierarchy.print_stats(file=file)
            print(file=file)

    df = sweep(generators, line_sizes, rng, iterations=iterations, config=config,
               callback=callback)
    print_cpi_table(df, line_sizes, [name for name, _ in generators], file=file)

    if args.output:
        if args.output.endswith('.csv'):
            df.to_csv(args.output, index=False)
        else:
            df.to_pickle(args.output)
        log.info("saved results to %s", args.output)
    return df


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.iterations is not None and args.iterations <= 0:
        parser.error("--iterations must be positive")

    level = [logging.WARNING, logging.INFO, logging.DEBUG][min(args.verbose, 2)]
    logging.basicConfig(level=level, format='%(levelname)s: %(name)s: %(message)s')

    try:
        run(args)
    except ConfigurationError as e:
        print("cpisim: error: {}".format(e), file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
