#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Prune a prioritized list of SNPs by linkage disequilibrium.

SNPs are processed in order of p-value. Each SNP not already tagged by a more
significant SNP is picked as an index SNP, optionally along with a number of
surrogates (backup tags in high LD with it), and every SNP above the
r-squared threshold within max_distance of it is marked as tagged.

Genotypes are read from transposed PLINK files, LD is estimated from the
kept founders with a two-locus EM.

Output files
------------
<out>.results
    One row per SNP: whether it was tagged and selected, and its best tag
<out>.ld
    r-squared and D-prime of every evaluated pair, only with --ld
<out>.log
    Everything written to STDERR
"""
import sys as _sys
import argparse as _argparse
from datetime import datetime as _dt

from . import __version__
from . import tplink as _tplink
from . import output as _output
from ._run import Log, PriorityPrunerError, format_duration
from .options import Options, DEFAULT_PREFIX
from .snp_table import SNP_Table
from .pruner import Pruner, calculate_stats

__all__ = ['prune_snps', 'argument_parser', 'main']

WELCOME = """\
Welcome to Priority_Pruner version {}

Prune SNPs by LD, keeping the most significant SNP of each LD block.
-------------------------------------------------------------------------------
""".format(__version__)


###############################################################################
#                              Primary Function                               #
###############################################################################


def prune_snps(options, log=None):
    """Run a full pruning with options and write all output files.

    Parameters
    ----------
    options : Options
    log : Log, optional
        Defaults to STDERR only

    Raises
    ------
    PriorityPrunerError
        Any problem with the input or the options

    Returns
    -------
    SNP_Table
        The pruned table, with selection state on every SNP_Info
    """
    if log is None:
        log = Log(verbose=options.verbose)
    options.check_inputs()

    snp_table = SNP_Table.from_file(
        options.snp_table, metric_names=options.metric_names,
        chrom=options.chrom, log=log
    )
    snp_table.sort(forced_first=options.sort_by_forced_first)

    ld_file = _output.LD_File(options.out) if options.ld_output else None
    try:
        founders = _tplink.read_genotypes(
            options.tped, options.tfam, snp_table, keep=options.keep,
            remove=options.remove, keep_random=options.keep_random,
            seed=options.seed, chrom=options.chrom, log=log
        )
        calculate_stats(snp_table, founders, options, log=log)
        pruner = Pruner(snp_table, founders, options, ld_file=ld_file,
                        log=log)
        pruner.run()
    finally:
        if ld_file is not None:
            ld_file.close()
            log.info('{} LD rows written to [ {} ]'.format(ld_file.rows,
                                                           ld_file.path))

    _output.write_results(snp_table, options.out, log=log)
    return snp_table


###############################################################################
#                               Run From Script                               #
###############################################################################


def argument_parser():
    """Create an argument parser."""
    parser = _argparse.ArgumentParser(
        description=__doc__,
        formatter_class=_argparse.RawDescriptionHelpFormatter)

    inputs = parser.add_argument_group('inputs', 'Input files')
    inputs.add_argument('--snp_table',
                        help='SNP table: name chr pos a1 a2 p forceSelect ' +
                        'designScore [metrics...]')
    inputs.add_argument('--tfile',
                        help='Prefix of a .tped and .tfam pair')
    inputs.add_argument('--tped', help='Transposed PLINK genotypes')
    inputs.add_argument('--tfam', help='Transposed PLINK pedigree')

    samples = inputs.add_mutually_exclusive_group()
    samples.add_argument('--keep',
                         help='Only use individuals in this sample list')
    samples.add_argument('--remove',
                         help='Do not use individuals in this sample list')
    samples.add_argument('--keep_random', metavar='FRACTION',
                         help='Use a random fraction of individuals')
    inputs.add_argument('--seed', help='Random seed for --keep_random')

    thresholds = parser.add_argument_group('thresholds',
                                           'Pruning thresholds')
    r2 = thresholds.add_mutually_exclusive_group()
    r2.add_argument('--r2', metavar='R2',
                    help='Fixed r-squared threshold for all p-values')
    r2.add_argument('--r2t', nargs=2, action='append', metavar=('P', 'R2'),
                    help='r-squared threshold for SNPs with p-value <= P, ' +
                    'can be repeated')
    thresholds.add_argument('--st', nargs=2, action='append',
                            metavar=('P', 'N'),
                            help='Pick N surrogates for index SNPs with ' +
                            'p-value < P, can be repeated')
    thresholds.add_argument('--max_distance', default='500000',
                            help='Max distance to consider LD, e.g. 250kb ' +
                            '(500000)')
    thresholds.add_argument('--metric', nargs=2, action='append',
                            metavar=('NAME', 'WEIGHT'),
                            help='SNP table column used to rank surrogates, ' +
                            'can be repeated')

    filters = parser.add_argument_group('filter', 'Filtration options')
    filters.add_argument('--min_maf', default='0',
                         help='Minimum minor allele frequency (0)')
    filters.add_argument('--min_snp_callrate', default='0.1',
                         help='Minimum SNP call rate (0.1)')
    filters.add_argument('--min_design_score', default='0',
                         help='Minimum design score (0)')
    filters.add_argument('--chr',
                         help='Only prune SNPs on this chromosome')

    flags = parser.add_argument_group('flags', 'Other options')
    flags.add_argument('--out', default=DEFAULT_PREFIX,
                       help='Prefix of output files ({})'
                       .format(DEFAULT_PREFIX))
    flags.add_argument('--ld', action='store_true',
                       help='Write all pairwise LD to <out>.ld')
    flags.add_argument('--do_not_pick_force_included_first',
                       action='store_true',
                       help='Sort force-included SNPs by p-value like ' +
                       'everything else')
    flags.add_argument('--no_surrogates_for_force_included_snps',
                       action='store_true',
                       help='Do not pick surrogates for force-included SNPs')
    flags.add_argument('-v', '--verbose', action='store_true',
                       help='Write debug messages and a progress bar')

    return parser


def main(argv=None):
    """Run as a script."""
    if argv is None:
        argv = _sys.argv[1:]

    parser = argument_parser()
    args = parser.parse_args(argv)

    start = _dt.now()
    try:
        options = Options.from_args(args)
    except PriorityPrunerError as err:
        with Log(DEFAULT_PREFIX + '.log') as log:
            log.info(WELCOME)
            log.error(err)
        return 1

    with Log(options.out + '.log', verbose=options.verbose) as log:
        log.info(WELCOME)
        log.info('Writing this text to log file [ {}.log ]'
                 .format(options.out))
        log.info('Analysis started: {}\n'.format(start.ctime()))
        log.info(options.options_in_effect())
        try:
            prune_snps(options, log=log)
        except PriorityPrunerError as err:
            log.error(err)
            return 1
        except OSError as err:
            log.error('{}\nPlease check that correct file path is provided.'
                      .format(err))
            return 1
        end = _dt.now()
        log.info('\nAnalysis finished: {}'.format(end.ctime()))
        log.info(format_duration((end - start).total_seconds() * 1000))
    return 0


if __name__ == '__main__' and '__file__' in globals():
    _sys.exit(main())
