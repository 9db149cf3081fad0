# -*- coding: utf-8 -*-
"""
Two-locus linkage disequilibrium from unphased genotypes.

The haplotype table is built from the kept founders, then the frequencies of
the four haplotypes are estimated with an EM that resolves the phase of
double heterozygotes. r-squared and D-prime are derived from the estimate.

Functions
---------
count_haplotypes
    Build the 3x3 haplotype count table and the double heterozygote count
em_ld
    The EM itself, works on four counts and the double heterozygote count
estimate_ld
    Full estimate for two SNP_Genotypes objects
"""
import math as _math

import numpy as _np

from .genotypes import MISSING, HET

__all__ = ['LD_Result', 'count_haplotypes', 'em_ld', 'estimate_ld']

# EM tuning
SEED_PSEUDOCOUNT = 0.1
MAX_ROUNDS = 1000
CONVERGENCE = 1e-8
MIN_PROB = 1e-10
START_LIKELIHOOD = -999999999.0

_LN10 = _math.log(10.0)

# First and second allele of each genotype code, as allele codes
_FIRST_ALLELE = _np.array([0, 1, 2, 1])
_SECOND_ALLELE = _np.array([0, 1, 2, 2])


class LD_Result(object):

    """r-squared and D-prime for one pair of loci."""

    __slots__ = ['r2', 'dprime']

    def __init__(self, r2, dprime):
        self.r2 = r2
        self.dprime = dprime

    def __eq__(self, other):
        if not isinstance(other, LD_Result):
            return NotImplemented
        return self.r2 == other.r2 and self.dprime == other.dprime

    def __repr__(self):
        return '<LD_Result r2={} dprime={}>'.format(self.r2, self.dprime)


###############################################################################
#                              Haplotype Counting                             #
###############################################################################


def _allele_map(genos):
    """Map allele codes 1 and 2 to 1 for major, 2 for minor."""
    allele_map = _np.zeros(3, dtype=_np.intp)
    allele_map[genos.major_allele] = 1
    allele_map[genos.minor_allele] = 2
    return allele_map


def count_haplotypes(geno1, geno2, founders):
    """Count known haplotypes between two loci.

    Rows are locus one, columns locus two, index 1 is the major allele and 2
    the minor allele, row and column 0 collect nothing. Hemizygous founders
    (males, when locus one is on X) add one haplotype. Diploid founders
    missing at either locus are skipped, double heterozygotes are only
    counted, a single heterozygote adds one haplotype of each phase and a
    double homozygote adds two copies of one haplotype.

    Parameters
    ----------
    geno1, geno2 : SNP_Genotypes
        Both must have had calculate_stats() run
    founders : list_of_Individual

    Returns
    -------
    table : numpy.ndarray
        3x3 integer array
    doublehet : int
    """
    codes1 = geno1.decode().astype(_np.intp)
    codes2 = geno2.decode().astype(_np.intp)
    rows = _allele_map(geno1)
    cols = _allele_map(geno2)
    table = _np.zeros((3, 3), dtype=_np.int64)

    row1 = rows[_FIRST_ALLELE[codes1]]
    col1 = cols[_FIRST_ALLELE[codes2]]
    row2 = rows[_SECOND_ALLELE[codes1]]
    col2 = cols[_SECOND_ALLELE[codes2]]

    called = (codes1 != MISSING) & (codes2 != MISSING)
    haploid = geno1.haploid_mask(founders)
    het1 = codes1 == HET
    het2 = codes2 == HET

    hemi = haploid & called
    _np.add.at(table, (row1[hemi], col1[hemi]), 1)

    diploid = ~haploid & called
    doublehet = int(_np.sum(diploid & het1 & het2))

    only1 = diploid & het1 & ~het2
    _np.add.at(table, (1, col1[only1]), 1)
    _np.add.at(table, (2, col1[only1]), 1)

    only2 = diploid & het2 & ~het1
    _np.add.at(table, (row1[only2], 1), 1)
    _np.add.at(table, (row1[only2], 2), 1)

    homs = diploid & ~het1 & ~het2
    _np.add.at(table, (row1[homs], col1[homs]), 1)
    _np.add.at(table, (row2[homs], col2[homs]), 1)

    return table, doublehet


###############################################################################
#                                 The EM Core                                 #
###############################################################################


def _divide(numerator, denominator):
    """Float division with IEEE results for a zero denominator."""
    if denominator:
        return numerator / denominator
    if numerator == 0 or _math.isnan(numerator):
        return float('nan')
    return _math.copysign(float('inf'), numerator) * _math.copysign(
        1.0, denominator)


def _count_haps(known, probs, doublehet, em_round):
    """Expected haplotype counts, double hets are apportioned after round 0."""
    num_haps = list(known)
    if em_round > 0:
        aa, ab, ba, bb = probs
        cis = aa * bb
        trans = ab * ba
        total = cis + trans
        num_haps[0] += doublehet * cis / total
        num_haps[3] += doublehet * cis / total
        num_haps[1] += doublehet * trans / total
        num_haps[2] += doublehet * trans / total
    return num_haps


def _estimate_p(num_haps, const_prob):
    """New haplotype probabilities from expected counts."""
    total = sum(num_haps) + 4.0 * const_prob
    probs = []
    for count in num_haps:
        prob = (count + const_prob) / total
        probs.append(prob if prob >= MIN_PROB else MIN_PROB)
    return probs


def em_ld(aa, ab, ba, bb, doublehet):
    """Estimate r-squared and D-prime from phased counts and double hets.

    Haplotypes are named by their alleles at locus one then locus two, A is
    the major and B the minor allele.

    Parameters
    ----------
    aa, ab, ba, bb : int
        Known haplotype counts
    doublehet : int
        Number of double heterozygous founders, each carries two haplotypes
        of unknown phase

    Returns
    -------
    r2 : float
        May be NaN or above 1 in degenerate tables, callers clamp and filter
    dprime : float
    """
    known = [float(aa), float(ab), float(ba), float(bb)]
    total_chroms = aa + ab + ba + bb + 2 * doublehet

    p_a1 = _divide(known[0] + known[1] + doublehet, total_chroms)
    p_b1 = 1.0 - p_a1
    p_a2 = _divide(known[0] + known[2] + doublehet, total_chroms)
    p_b2 = 1.0 - p_a2

    # Seed round
    const_prob = SEED_PSEUDOCOUNT
    probs = [SEED_PSEUDOCOUNT] * 4
    num_haps = _count_haps(known, probs, doublehet, 0)
    probs = _estimate_p(num_haps, const_prob)

    const_prob = 0.0
    count = 1
    loglike = START_LIKELIHOOD
    while count < MAX_ROUNDS:
        old_loglike = loglike
        num_haps = _count_haps(known, probs, doublehet, count)
        loglike = sum(known[i] * _math.log(probs[i]) for i in range(4)) / _LN10
        loglike += (doublehet * _math.log(probs[0] * probs[3] +
                                          probs[1] * probs[2])) / _LN10
        if abs(loglike - old_loglike) < CONVERGENCE:
            break
        probs = _estimate_p(num_haps, const_prob)
        count += 1

    num = probs[0] * probs[3] - probs[1] * probs[2]
    if num < 0:
        # Flip locus two so D is positive
        probs = [probs[1], probs[0], probs[3], probs[2]]
        p_a2, p_b2 = p_b2, p_a2
        num = probs[0] * probs[3] - probs[1] * probs[2]

    aa_p, ab_p, ba_p, bb_p = probs
    denom1 = (aa_p + ba_p) * (ba_p + bb_p)
    denom2 = (aa_p + ab_p) * (ab_p + bb_p)
    dprime = _divide(num, min(denom1, denom2))
    r2 = _divide(num * num, p_a1 * p_b1 * p_a2 * p_b2)
    return r2, dprime


###############################################################################
#                               Public Estimate                               #
###############################################################################


def estimate_ld(geno1, geno2, founders):
    """Return an LD_Result for two loci, or None if there is no information.

    The same object passed twice is in perfect LD with itself. If either
    locus is monomorphic in the known haplotypes and there are no double
    heterozygotes nothing can be estimated. Whether founders are hemizygous
    is decided by geno1. Statistics are calculated first if not already done.

    Parameters
    ----------
    geno1, geno2 : SNP_Genotypes
    founders : list_of_Individual

    Returns
    -------
    LD_Result or None
    """
    geno1.calculate_stats(founders)
    geno2.calculate_stats(founders)
    if geno1 is geno2:
        return LD_Result(1.0, 1.0)
    table, doublehet = count_haplotypes(geno1, geno2, founders)
    aa, ab = int(table[1, 1]), int(table[1, 2])
    ba, bb = int(table[2, 1]), int(table[2, 2])
    margins = [aa + ab, ba + bb, aa + ba, ab + bb]
    if 0 in margins and doublehet == 0:
        return None
    r2, dprime = em_ld(aa, ab, ba, bb, doublehet)
    return LD_Result(r2, dprime)
