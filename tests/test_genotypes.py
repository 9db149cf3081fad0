"""Tests for two bit genotype storage and locus statistics."""
import math

import numpy as np
import pytest

from Priority_Pruner.genotypes import (
    encode_genotypes, decode_genotypes, SNP_Genotypes, Individual, Sex,
    MISSING, HOM1, HOM2, HET
)
from Priority_Pruner._run import InvalidGenotype


class TestEncoding:
    """Packing of calls four to a byte."""

    def test_packs_high_bits_first(self):
        calls = [('A', 'A'), ('G', 'G'), ('A', 'G'), ('0', '0'), ('A', 'A')]
        packed = encode_genotypes(calls, 'A', 'G')
        assert packed.dtype == np.uint8
        assert packed.tolist() == [0b01101100, 0b01000000]

    def test_decode_matches_input(self):
        codes = [HOM1, HOM2, HET, MISSING, HOM1, HET, HET]
        calls = [{0: ('0', '0'), 1: ('T', 'T'), 2: ('C', 'C'),
                  3: ('C', 'T')}[i] for i in codes]
        genos = SNP_Genotypes('rs1', calls, 'T', 'C')
        assert genos.decode().tolist() == codes
        assert [genos.genotype(i) for i in range(len(codes))] == codes
        assert len(genos) == 7

    def test_trailing_bits_are_zero(self):
        packed = encode_genotypes([('G', 'A')] * 5, 'A', 'G')
        assert packed[-1] == 0b11000000
        assert decode_genotypes(packed, 8).tolist() == [3, 3, 3, 3, 3, 0, 0, 0]

    def test_empty(self):
        assert len(encode_genotypes([], 'A', 'G')) == 0

    def test_half_missing_is_invalid(self):
        with pytest.raises(InvalidGenotype):
            encode_genotypes([('A', 'A'), ('A', '0')], 'A', 'G')

    def test_third_allele_is_invalid(self):
        with pytest.raises(InvalidGenotype):
            encode_genotypes([('A', 'T')], 'A', 'G')

    def test_error_names_locus(self):
        with pytest.raises(InvalidGenotype, match='rs99'):
            SNP_Genotypes('rs99', [('0', 'G')], 'A', 'G')

    def test_monomorphic_locus(self):
        genos = SNP_Genotypes('rs1', [('A', 'A'), ('0', '0')], 'A', '0')
        assert genos.decode().tolist() == [HOM1, MISSING]

    def test_out_of_range(self, make_genotypes):
        genos = make_genotypes([1, 2])
        with pytest.raises(IndexError):
            genos.genotype(2)

    def test_packed_is_read_only(self, make_genotypes):
        genos = make_genotypes([1, 2, 3])
        with pytest.raises(ValueError):
            genos.packed[0] = 0


class TestStatistics:
    """MAF, missingness and minor allele."""

    def test_diploid(self, make_genotypes, make_founders):
        genos = make_genotypes([HOM1, HOM1, HET, MISSING])
        genos.calculate_stats(make_founders('MFMF'))
        assert genos.maf == pytest.approx(1 / 6)
        assert genos.missing == pytest.approx(0.25)
        assert genos.minor_allele == 2
        assert genos.major_allele == 1
        assert genos.a1_freq == pytest.approx(5 / 6)

    def test_minor_is_allele1(self, make_genotypes, make_founders):
        genos = make_genotypes([HOM2, HOM2, HET])
        genos.calculate_stats(make_founders('FFF'))
        assert genos.minor_allele == 1
        assert genos.major_allele == 2
        assert genos.maf == pytest.approx(1 / 6)

    def test_tie_makes_allele1_major(self, make_genotypes, make_founders):
        genos = make_genotypes([HOM1, HOM2])
        genos.calculate_stats(make_founders('FF'))
        assert genos.major_allele == 1
        assert genos.minor_allele == 2
        assert genos.maf == 0.5

    def test_hemizygous_males(self, make_genotypes, make_founders):
        genos = make_genotypes([HOM1, HOM2, MISSING, HET], chrom_x=True)
        genos.calculate_stats(make_founders('MMMM'))
        # One chromosome per male, the het call counts no allele
        assert genos.missing == pytest.approx(1 / 4)
        assert genos.maf == 0.5

    def test_x_females_are_diploid(self, make_genotypes, make_founders):
        genos = make_genotypes([MISSING, HOM1, HOM1], chrom_x=True)
        genos.calculate_stats(make_founders('FMM'))
        assert genos.missing == pytest.approx(2 / 4)
        assert genos.maf == 0.0

    def test_autosome_males_are_diploid(self, make_genotypes, make_founders):
        genos = make_genotypes([MISSING, HOM1], chrom_x=False)
        genos.calculate_stats(make_founders('MM'))
        assert genos.missing == 0.5

    def test_all_missing(self, make_genotypes, make_founders):
        genos = make_genotypes([MISSING, MISSING])
        genos.calculate_stats(make_founders('FF'))
        assert math.isnan(genos.maf)
        assert genos.missing == 1.0
        assert genos.passes_filters(0, 0) is False

    def test_calculated_once(self, make_genotypes, make_founders):
        genos = make_genotypes([HOM1, HET])
        genos.calculate_stats(make_founders('FF'))
        maf = genos.maf
        genos.calculate_stats(make_founders('MM'))
        assert genos.calculation_done
        assert genos.maf == maf

    def test_founder_count_must_match(self, make_genotypes, make_founders):
        with pytest.raises(ValueError):
            make_genotypes([HOM1, HET]).calculate_stats(make_founders('F'))

    def test_filters(self, make_genotypes, make_founders):
        genos = make_genotypes([HOM1, HOM1, HET, MISSING])
        genos.calculate_stats(make_founders('FFFF'))
        assert genos.passes_filters(0.1, 0.75)
        assert not genos.passes_filters(0.2, 0.75)
        assert not genos.passes_filters(0.1, 0.8)
        assert genos.valid is False

    def test_filters_need_stats(self, make_genotypes):
        with pytest.raises(ValueError):
            make_genotypes([HOM1]).passes_filters(0, 0)

    def test_monomorphic_concordant_loci_fail_maf(self, make_genotypes,
                                                  make_founders):
        founders = make_founders('MMFF')
        for name in ('a', 'b'):
            genos = make_genotypes([HOM1] * 4, name=name)
            genos.calculate_stats(founders)
            assert genos.maf == 0.0
            assert not genos.passes_filters(0.01, 0.1)


class TestIndividual:

    def test_sex_codes(self):
        assert Sex.from_code('1') is Sex.MALE
        assert Sex.from_code(2) is Sex.FEMALE
        assert Sex.from_code('-9') is Sex.UNKNOWN

    def test_key(self):
        ind = Individual('F1', 'I1', '1')
        assert ind.key == 'F1 I1'
        assert ind.is_male
        assert ind.keep
