# -*- coding: utf-8 -*-
"""
Read genotypes from transposed PLINK files (.tped and .tfam).

Only founders are supported: every individual in the tfam must have both
parents set to 0 and a sex of 1 (male) or 2 (female). Individuals can be
restricted with a PLINK style sample list (--keep or --remove) or a random
fraction (--keep_random).

Only the rows of the tped that match a row in the SNP table are kept, and
their calls are stored compressed in SNP_Genotypes objects.
"""
import math as _math

import numpy as _np

from . import _run
from ._run import ParseError, InvalidGenotype
from .genotypes import Individual, Sex, SNP_Genotypes, MISSING_ALLELE

__all__ = ['parse_tfam', 'parse_sample_list', 'select_founders',
           'parse_tped', 'check_snps_in_genotypes', 'read_genotypes']


def _split(line, path, line_no):
    """Split a line on single spaces or tabs, empty fields are an error."""
    fields = line.rstrip('\r\n').replace('\t', ' ').split(' ')
    if '' in fields:
        raise ParseError(
            'Problem with line {} in [ {} ]: ensure values are separated by a '
            'single space or tab character.'.format(line_no, path)
        )
    return fields


###############################################################################
#                               Sample Parsing                                #
###############################################################################


def parse_tfam(path, log=None):
    """Read founders from a tfam file.

    Parameters
    ----------
    path : str
    log : Log, optional

    Raises
    ------
    ParseError
        On a malformed row, a non-founder, a bad sex code or a duplicate

    Returns
    -------
    list_of_Individual
    """
    if log:
        log.info('Reading pedigree information from [ {} ]'.format(path))
    individuals = []
    seen = set()
    with _run.open_zipped(path) as fin:
        for line_no, line in enumerate(fin, 1):
            if not line.strip():
                continue
            fields = _split(line, path, line_no)
            if len(fields) != 6:
                raise ParseError(
                    'Problem with line {} in [ {} ]: expecting 6 columns, '
                    'but found {}'.format(line_no, path, len(fields))
                )
            fam, ind, father, mother, sex = fields[:5]
            if sex not in ('1', '2'):
                raise ParseError(
                    'Problem with line {} in [ {} ]: individual {} {} has '
                    'invalid sex code {}. Must be either 1 for male or 2 for '
                    'female.'.format(line_no, path, fam, ind, sex)
                )
            if father != '0' or mother != '0':
                raise ParseError(
                    'Problem with line {} in [ {} ]: individual {} {} is a '
                    'non-founder but only founders are allowed.'
                    .format(line_no, path, fam, ind)
                )
            individual = Individual(fam, ind, Sex.from_code(sex), father,
                                    mother)
            if individual.key in seen:
                raise ParseError('Duplicate individual found: [ {} ]'
                                 .format(individual.key))
            seen.add(individual.key)
            individuals.append(individual)
    if log:
        males = sum(1 for i in individuals if i.sex is Sex.MALE)
        females = sum(1 for i in individuals if i.sex is Sex.FEMALE)
        log.info('{} individuals read from [ {} ]'.format(len(individuals),
                                                          path))
        log.info('{} males, {} females, and 0 of unspecified sex'
                 .format(males, females))
    return individuals


def parse_sample_list(path):
    """Return a set of 'family individual' keys from a PLINK sample list.

    Raises
    ------
    ParseError
        If a row has fewer than two columns
    """
    samples = set()
    with _run.open_zipped(path) as fin:
        for line_no, line in enumerate(fin, 1):
            fields = line.split()
            if not fields:
                continue
            if len(fields) < 2:
                raise ParseError(
                    'Problem with line {} in [ {} ]: expected a family ID and '
                    'an individual ID'.format(line_no, path)
                )
            samples.add('{} {}'.format(fields[0], fields[1]))
    return samples


def select_founders(individuals, keep=None, remove=None, keep_random=None,
                    seed=None, log=None):
    """Set the keep flag on each individual and return the kept ones.

    Parameters
    ----------
    individuals : list_of_Individual
    keep, remove : set_of_str, optional
        Keys from parse_sample_list(), at most one may be given
    keep_random : float, optional
        Fraction of individuals to keep, chosen at random
    seed : int, optional
        Seed for keep_random
    log : Log, optional

    Returns
    -------
    list_of_Individual
        Kept individuals in their original order
    """
    if keep is not None:
        for individual in individuals:
            individual.keep = individual.key in keep
        if log:
            log.info('Keeping {} individuals from the keep list'.format(
                sum(1 for i in individuals if i.keep)))
    elif remove is not None:
        for individual in individuals:
            individual.keep = individual.key not in remove
        if log:
            log.info('Removing {} individuals from the remove list'.format(
                sum(1 for i in individuals if not i.keep)))
    elif keep_random is not None:
        rng = _np.random.default_rng(seed)
        if log and seed is not None:
            log.info('Using {} as seed for randomly selecting individuals'
                     .format(seed))
        order = rng.permutation(len(individuals))
        num_keep = int(_math.floor(keep_random * len(individuals) + 0.5))
        chosen = set(order[:num_keep].tolist())
        for index, individual in enumerate(individuals):
            individual.keep = index in chosen
        if log:
            log.info('Selecting {} random individuals to keep'
                     .format(num_keep))
    else:
        for individual in individuals:
            individual.keep = True
    return [i for i in individuals if i.keep]


###############################################################################
#                              Genotype Parsing                               #
###############################################################################


def _discover_alleles(calls, snp_name, founders):
    """Return the first two distinct non-missing alleles of the calls."""
    allele1 = allele2 = MISSING_ALLELE
    for individual, call in zip(founders, calls):
        for allele in call:
            if allele == MISSING_ALLELE:
                continue
            if allele1 == MISSING_ALLELE:
                allele1 = allele
            elif allele2 == MISSING_ALLELE and allele != allele1:
                allele2 = allele
            elif allele not in (allele1, allele2):
                raise InvalidGenotype(
                    'Locus {} has >2 alleles: individual {} has genotype '
                    '[ {} {} ] but we have already seen [ {} ] and [ {} ]'
                    .format(snp_name, individual.key, call[0], call[1],
                            allele1, allele2)
                )
    return allele1, allele2


def parse_tped(path, individuals, snp_table, chrom=None, log=None):
    """Attach genotypes from a tped file to the matching SNP table rows.

    Parameters
    ----------
    path : str
    individuals : list_of_Individual
        Every individual of the tfam, in order, with keep flags set
    snp_table : SNP_Table
    chrom : str, optional
        Only read this (normalized) chromosome
    log : Log, optional

    Raises
    ------
    ParseError
        On malformed rows or a locus matched twice
    InvalidGenotype
        On a call that cannot be encoded

    Returns
    -------
    list_of_SNP_Genotypes
    """
    if log:
        log.info('Reading genotypes from [ {} ]'.format(path))
        if chrom:
            log.info('Extracting SNPs from chromosome {}'.format(chrom))
    kept = [i for i, ind in enumerate(individuals) if ind.keep]
    founders = [individuals[i] for i in kept]
    expected = 4 + 2 * len(individuals)
    genotypes = []
    not_in_table = 0
    rows = 0
    with _run.open_zipped(path) as fin:
        for line_no, line in enumerate(fin, 1):
            if not line.strip():
                continue
            rows += 1
            fields = _split(line, path, line_no)
            if len(fields) != expected:
                raise ParseError(
                    'Problem with line {} in [ {} ]: expecting 4 + 2 * {} = {} '
                    'columns, but found {}'.format(
                        line_no, path, len(individuals), expected,
                        len(fields))
                )
            try:
                snp_chrom = _run.normalize_chrom(fields[0])
            except ValueError:
                # Unsupported chromosomes cannot be in the SNP table
                not_in_table += 1
                continue
            if chrom and snp_chrom != chrom:
                continue
            name = fields[1]
            try:
                pos = int(fields[3])
            except ValueError:
                pos = 0
            if pos < 1:
                raise ParseError(
                    'Problem with line {} in [ {} ]: invalid value "{}" '
                    'specified for position in column 4.'.format(
                        line_no, path, fields[3])
                )
            calls = [(fields[4 + 2 * i].upper(), fields[5 + 2 * i].upper())
                     for i in kept]
            allele1, allele2 = _discover_alleles(calls, name, founders)
            snp_info = snp_table.get_snp_info(name, snp_chrom, pos, allele1,
                                              allele2)
            if snp_info is None:
                not_in_table += 1
                continue
            if snp_info.genotypes is not None:
                raise ParseError(
                    'Duplicated SNP "{}" at line {} in [ {} ]. The combination '
                    'of snpname, chr, pos, allele1/allele2 must be unique.'
                    .format(name, line_no, path)
                )
            snp_info.genotypes = SNP_Genotypes(name, calls, allele1, allele2,
                                               snp_info=snp_info)
            genotypes.append(snp_info.genotypes)
    if log:
        log.info('Excluding {} SNPs missing from [ {} ]'.format(
            not_in_table, snp_table.path))
        log.info('{} (of {}) SNPs to be included from [ {} ]'.format(
            len(genotypes), rows, path))
    return genotypes


def check_snps_in_genotypes(snp_table):
    """Raise ParseError for the first table SNP without genotypes."""
    for snp in snp_table:
        if snp.genotypes is None:
            raise ParseError(
                '{} at chromosome {}:{} with alleles: {} {}, not found in '
                'genotype dataset.'.format(snp.name, snp.chrom, snp.pos,
                                           snp.allele1, snp.allele2)
            )


def read_genotypes(tped, tfam, snp_table, keep=None, remove=None,
                   keep_random=None, seed=None, chrom=None, log=None):
    """Read the tfam and tped and return the kept founders.

    keep and remove are paths to sample lists, see select_founders() for the
    rest. Genotypes are attached to the rows of snp_table.
    """
    individuals = parse_tfam(tfam, log=log)
    keep_set = remove_set = None
    if keep:
        keep_set = parse_sample_list(keep)
        if log:
            log.info('Reading individuals to keep [ {} ]'.format(keep))
    elif remove:
        remove_set = parse_sample_list(remove)
        if log:
            log.info('Reading individuals to remove [ {} ]'.format(remove))
    founders = select_founders(individuals, keep=keep_set, remove=remove_set,
                               keep_random=keep_random, seed=seed, log=log)
    parse_tped(tped, individuals, snp_table, chrom=chrom, log=log)
    check_snps_in_genotypes(snp_table)
    return founders
