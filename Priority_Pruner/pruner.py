# -*- coding: utf-8 -*-
"""
Greedy LD pruning of a priority sorted SNP list.

SNPs are visited in priority order. Each SNP that is not yet tagged (or is
force-included) becomes an index SNP: it is picked, LD is calculated against
every valid SNP within max_distance, surrogates are picked from the partners
above the r-squared threshold, and every partner above the threshold is marked
as tagged so it is skipped later.
"""
import math as _math

from tqdm import tqdm as pb

from .ld import estimate_ld
from .snp_table import find_window
from ._run import InternalError

__all__ = ['Pruner', 'calculate_stats', 'score_candidates']


###############################################################################
#                              Helper Functions                               #
###############################################################################


def calculate_stats(snp_table, founders, options, log=None):
    """Compute MAF and missingness for every SNP and set validity.

    Returns
    -------
    int
        Number of valid SNPs
    """
    low_maf = low_callrate = 0
    for snp in snp_table:
        genos = snp.genotypes
        if genos is None:
            continue
        genos.calculate_stats(founders)
        # NaN fails both checks
        if not genos.maf >= options.min_maf:
            low_maf += 1
        if not (1 - genos.missing) >= options.min_snp_callrate:
            low_callrate += 1
        genos.passes_filters(options.min_maf, options.min_snp_callrate)
    num_valid = sum(1 for snp in snp_table if snp.valid)
    if log:
        log.info('{} SNPs with MAF < {}'.format(low_maf, options.min_maf))
        log.info('{} SNPs with call rate < {}'.format(
            low_callrate, options.min_snp_callrate))
        log.info('After filtering, there are {} SNPs'.format(num_valid))
    return num_valid


def score_candidates(candidates, metrics):
    """Score partner SNPs by min-max normalized, weighted metrics.

    Parameters
    ----------
    candidates : list_of_tuple
        (SNP_Info, LD_Result) pairs
    metrics : list_of_Metric
        In the same order as SNP_Info.metrics

    Returns
    -------
    dict
        {id(SNP_Info): score}
    """
    scores = {id(snp): 0.0 for snp, _ in candidates}
    for i, metric in enumerate(metrics):
        values = [snp.metrics[i] for snp, _ in candidates]
        if not values:
            break
        low, high = min(values), max(values)
        for snp, _ in candidates:
            if high == low:
                scores[id(snp)] += metric.weight
            else:
                scores[id(snp)] += metric.weight * (
                    (snp.metrics[i] - low) / (high - low))
    return scores


###############################################################################
#                                 The Pruner                                  #
###############################################################################


class Pruner(object):

    """Run the greedy pruning over one SNP table.

    Attributes
    ----------
    snp_table : SNP_Table
        Sorted, with genotypes attached and statistics calculated
    founders : list_of_Individual
    options : Options
    ld_file : LD_File
        Every evaluated pair is written here if not None
    log : Log
    pick_order : int
        Next pick order to assign
    """

    def __init__(self, snp_table, founders, options, ld_file=None, log=None):
        self.snp_table = snp_table
        self.founders = founders
        self.options = options
        self.ld_file = ld_file
        self.log = log
        self.pick_order = 1

    def _debug(self, message):
        if self.log:
            self.log.debug(message)

    def run(self, progress=None):
        """Prune every SNP in priority order.

        Parameters
        ----------
        progress : bool, optional
            Show a progress bar on STDERR, defaults to options.verbose
        """
        if progress is None:
            progress = self.options.verbose
        if self.log:
            self.log.info('Pruning {} SNPs'.format(len(self.snp_table)))
        for snp in pb(self.snp_table.snps, unit='snps', disable=not progress):
            if not snp.picked and (not snp.tagged or snp.force_include):
                self.prune(snp)
            else:
                self._debug('Skipping {}, already tagged or picked'
                            .format(snp.name))
        if self.log:
            self.log.info('{} SNPs picked'.format(self.pick_order - 1))

    def pick(self, snp):
        """Mark snp as picked and tagged, give it the next pick order."""
        snp.picked = True
        snp.tagged = True
        snp.pick_order = self.pick_order
        self.pick_order += 1

    def window(self, index_snp):
        """Return the SNPs to evaluate against index_snp.

        These are all valid SNPs within max_distance plus the index itself,
        in position order.

        Raises
        ------
        InternalError
            If a SNP has no genotypes or index_snp is not in its own window
        """
        snps_by_pos = self.snp_table.snps_by_pos
        start, end = find_window(index_snp, self.options.max_distance,
                                 snps_by_pos)
        partners = []
        found = False
        for snp in snps_by_pos[start:end + 1]:
            if snp.genotypes is None:
                raise InternalError('No genotypes stored for {}'
                                    .format(snp.name))
            if snp is index_snp:
                found = True
                partners.append(snp)
            elif snp.valid:
                partners.append(snp)
        if not found:
            raise InternalError('Index SNP {} not found in its own window'
                                .format(index_snp.name))
        return partners

    def calculate_ld(self, index_snp, partners):
        """Return (partner, LD_Result) for all informative partners.

        r-squared above 1 is clamped to 1 and NaN results are dropped.
        """
        results = []
        for partner in partners:
            result = estimate_ld(index_snp.genotypes, partner.genotypes,
                                 self.founders)
            if result is None or _math.isnan(result.r2):
                continue
            if result.r2 > 1:
                result.r2 = 1.0
            results.append((partner, result))
        return results

    def prune(self, index_snp):
        """Make index_snp an index SNP, pick surrogates and tag partners.

        Returns
        -------
        bool
            False if the SNP failed the design score or validity gate
        """
        opts = self.options
        if (index_snp.design_score < opts.min_design_score
                and not index_snp.force_include):
            self._debug('Skipping {}, design score {} below {}'.format(
                index_snp.name, index_snp.design_score,
                opts.min_design_score))
            return False
        if not index_snp.valid and not index_snp.force_include:
            self._debug('Skipping {}, failed MAF or call rate filter'
                        .format(index_snp.name))
            return False

        results = self.calculate_ld(index_snp, self.window(index_snp))
        threshold = opts.r2_threshold(index_snp)

        self.pick(index_snp)
        self._debug('Picked {} as index SNP {}'.format(index_snp.name,
                                                       index_snp.pick_order))
        self.pick_surrogates(index_snp, results, threshold)

        for partner, result in results:
            if self.ld_file is not None:
                self.ld_file.write(index_snp, partner, result)
            if result.r2 >= threshold:
                partner.tagged = True
                partner.add_tagged_by(index_snp, result.r2)
        return True

    def pick_surrogates(self, index_snp, results, threshold):
        """Pick surrogates for index_snp from the partners in results.

        Already picked partners above threshold count towards the number of
        surrogates wanted.

        Returns
        -------
        list_of_SNP_Info
            The newly picked surrogates
        """
        opts = self.options
        wanted = opts.num_surrogates(index_snp)
        if wanted == 0:
            return []

        already = []
        candidates = []
        for partner, result in results:
            if partner is index_snp or result.r2 < threshold:
                continue
            if partner.picked:
                already.append(partner)
            elif (partner.design_score >= opts.min_design_score
                  or partner.force_include):
                candidates.append((partner, result))

        if opts.metrics:
            scores = score_candidates(candidates, opts.metrics)
            key = lambda x: scores[id(x[0])]
        else:
            key = lambda x: x[1].r2
        candidates.sort(
            key=lambda x: (x[0].force_include, key(x), x[0].name),
            reverse=True
        )

        picked = []
        for partner, _ in candidates:
            if len(already) + len(picked) >= wanted:
                break
            self.pick(partner)
            picked.append(partner)
            self._debug('Picked {} as surrogate for {}'.format(
                partner.name, index_snp.name))
        return picked
