# -*- coding: utf-8 -*-
"""
Compressed per-locus genotype storage and single locus statistics.

Each call is stored in two bits, four samples to a byte, first sample in the
high bits:

    0   missing
    1   homozygous for allele 1
    2   homozygous for allele 2
    3   heterozygous

Statistics (MAF, missingness, minor allele) are computed once over the kept
founders, males on chromosome X are treated as hemizygous.
"""
from enum import Enum as _Enum

import numpy as _np

from ._run import InvalidGenotype

__all__ = ['MISSING', 'HOM1', 'HOM2', 'HET', 'Sex', 'Individual',
           'SNP_Genotypes', 'encode_genotypes', 'decode_genotypes']

MISSING = 0
HOM1 = 1
HOM2 = 2
HET = 3

# The missing allele in PLINK files
MISSING_ALLELE = '0'


class Sex(_Enum):

    """Sex of an individual, decides haploid treatment on X."""

    MALE = 1
    FEMALE = 2
    UNKNOWN = 0

    @classmethod
    def from_code(cls, code):
        """Convert a PLINK sex code (1 male, 2 female) to a Sex."""
        code = str(code).strip()
        if code == '1':
            return cls.MALE
        if code == '2':
            return cls.FEMALE
        return cls.UNKNOWN


class Individual(object):

    """A single founder from a pedigree file.

    Attributes
    ----------
    family_id : str
    individual_id : str
    sex : Sex
    keep : bool
        False if removed by the keep, remove or keep_random options
    """

    keep = True

    def __init__(self, family_id, individual_id, sex=Sex.UNKNOWN,
                 father='0', mother='0'):
        self.family_id = family_id
        self.individual_id = individual_id
        self.father = father
        self.mother = mother
        if not isinstance(sex, Sex):
            sex = Sex.from_code(sex)
        self.sex = sex

    @property
    def key(self):
        """Family and individual ID joined with a space."""
        return '{} {}'.format(self.family_id, self.individual_id)

    @property
    def is_male(self):
        return self.sex is Sex.MALE

    def __repr__(self):
        return '<Individual {} ({})>'.format(self.key, self.sex.name.lower())


###############################################################################
#                              Encoding Functions                             #
###############################################################################


def encode_genotypes(raw_calls, allele1, allele2):
    """Pack allele pairs into a two bit per sample byte array.

    Parameters
    ----------
    raw_calls : list_of_tuple
        One (allele, allele) pair per sample, '0' is a missing allele
    allele1, allele2 : str
        The two alleles of this locus, allele2 may be '0' if monomorphic

    Raises
    ------
    InvalidGenotype
        If a call is half missing or contains a third allele

    Returns
    -------
    numpy.ndarray
        uint8 array of length ceil(n/4), unused trailing bits are zero
    """
    codes = _np.zeros(len(raw_calls), dtype=_np.uint8)
    for i, (first, second) in enumerate(raw_calls):
        codes[i] = _call_to_code(first, second, allele1, allele2)
    return pack_codes(codes)


def _call_to_code(first, second, allele1, allele2):
    """Return the two bit code for one diploid call."""
    if first == MISSING_ALLELE and second == MISSING_ALLELE:
        return MISSING
    if first == MISSING_ALLELE or second == MISSING_ALLELE:
        raise InvalidGenotype(
            'Invalid genotype [ {} {} ], only one allele is missing'
            .format(first, second)
        )
    for allele in (first, second):
        if allele not in (allele1, allele2):
            raise InvalidGenotype(
                'Invalid genotype [ {} {} ], allele {} is neither {} nor {}'
                .format(first, second, allele, allele1, allele2)
            )
    if first != second:
        return HET
    return HOM1 if first == allele1 else HOM2


def pack_codes(codes):
    """Pack an array of two bit codes, four to a byte, high bits first."""
    codes = _np.asarray(codes, dtype=_np.uint8)
    padded = _np.zeros(((len(codes) + 3) // 4) * 4, dtype=_np.uint8)
    padded[:len(codes)] = codes
    quads = padded.reshape(-1, 4)
    return ((quads[:, 0] << 6) | (quads[:, 1] << 4) |
            (quads[:, 2] << 2) | quads[:, 3]).astype(_np.uint8)


def decode_genotypes(packed, count):
    """Unpack the first count two bit codes from a packed byte array."""
    packed = _np.asarray(packed, dtype=_np.uint8)
    codes = _np.stack(
        [(packed >> 6) & 3, (packed >> 4) & 3, (packed >> 2) & 3, packed & 3],
        axis=1
    ).ravel()
    return codes[:count]


###############################################################################
#                               Genotype Class                                #
###############################################################################


class SNP_Genotypes(object):

    """Compressed genotypes of one locus across the kept founders.

    Attributes
    ----------
    name : str
    snp_info : SNP_Info
        The SNP table row these genotypes belong to, or None
    allele1, allele2 : str
        Alleles as discovered in the genotype file
    size : int
        Number of samples
    maf : float
    missing : float
        Fraction of missing chromosomes
    minor_allele, major_allele : int
        1 or 2, the allele codes of the minor and major allele
    a1_freq : float
        Frequency of allele 1
    valid : bool
        Passes the MAF and call rate filters
    calculation_done : bool
        Statistics have been computed, they are never recomputed
    """

    maf = None
    missing = None
    a1_freq = None
    minor_allele = None
    major_allele = None
    valid = True
    calculation_done = False

    def __init__(self, name, raw_calls, allele1, allele2, snp_info=None,
                 chrom_x=None):
        """Encode raw_calls, see encode_genotypes().

        Parameters
        ----------
        name : str
        raw_calls : list_of_tuple
        allele1, allele2 : str
        snp_info : SNP_Info, optional
            If given its chromosome decides haploid treatment of males
        chrom_x : bool, optional
            Override the chromosome X status
        """
        self.name = name
        self.allele1 = allele1
        self.allele2 = allele2
        self.snp_info = snp_info
        self.size = len(raw_calls)
        if chrom_x is None:
            chrom_x = snp_info.is_chrom_x if snp_info is not None else False
        self.chrom_x = chrom_x
        try:
            self.packed = encode_genotypes(raw_calls, allele1, allele2)
        except InvalidGenotype as err:
            raise InvalidGenotype('Locus {}: {}'.format(name, err))
        self.packed.flags.writeable = False

    def genotype(self, index):
        """Return the two bit code of sample index."""
        if index < 0 or index >= self.size:
            raise IndexError('Sample {} out of range for {} samples'
                             .format(index, self.size))
        return (int(self.packed[index // 4]) >> ((3 - index % 4) * 2)) & 3

    def decode(self):
        """Return all codes as a numpy uint8 array."""
        return decode_genotypes(self.packed, self.size)

    def haploid_mask(self, founders):
        """Return a boolean array, True where a founder is hemizygous here."""
        if not self.chrom_x:
            return _np.zeros(len(founders), dtype=bool)
        return _np.fromiter((f.sex is Sex.MALE for f in founders), dtype=bool,
                            count=len(founders))

    def calculate_stats(self, founders):
        """Compute MAF, missingness and the minor allele once.

        Males on chromosome X contribute one chromosome, a heterozygous call
        in a male counts no allele but is not missing either.

        Parameters
        ----------
        founders : list_of_Individual
            Kept founders, in the order genotypes were stored

        Returns
        -------
        self
        """
        if self.calculation_done:
            return self
        if len(founders) != self.size:
            raise ValueError('{} founders given for {} genotypes of {}'
                             .format(len(founders), self.size, self.name))
        codes = self.decode()
        haploid = self.haploid_mask(founders)
        diploid = ~haploid

        num_allele1 = (2 * _np.sum(diploid & (codes == HOM1)) +
                       _np.sum(diploid & (codes == HET)) +
                       _np.sum(haploid & (codes == HOM1)))
        num_allele2 = (2 * _np.sum(diploid & (codes == HOM2)) +
                       _np.sum(diploid & (codes == HET)) +
                       _np.sum(haploid & (codes == HOM2)))
        num_missing = (2 * _np.sum(diploid & (codes == MISSING)) +
                       _np.sum(haploid & (codes == MISSING)))
        num_chromosomes = 2 * int(_np.sum(diploid)) + int(_np.sum(haploid))

        num_allele1 = int(num_allele1)
        num_allele2 = int(num_allele2)
        called = num_allele1 + num_allele2

        if num_allele1 >= num_allele2:
            self.minor_allele, self.major_allele = 2, 1
            minor_count = num_allele2
        else:
            self.minor_allele, self.major_allele = 1, 2
            minor_count = num_allele1

        nan = float('nan')
        self.maf = minor_count / called if called else nan
        self.a1_freq = num_allele1 / called if called else nan
        self.missing = (int(num_missing) / num_chromosomes
                        if num_chromosomes else nan)
        self.calculation_done = True
        return self

    def passes_filters(self, min_maf, min_callrate):
        """Set and return validity, NaN statistics always fail."""
        if not self.calculation_done:
            raise ValueError('Statistics for {} have not been calculated'
                             .format(self.name))
        self.valid = bool(self.maf >= min_maf and
                          (1 - self.missing) >= min_callrate)
        return self.valid

    def __len__(self):
        return self.size

    def __repr__(self):
        return '<SNP_Genotypes {} ({} samples, maf={})>'.format(
            self.name, self.size, self.maf
        )
