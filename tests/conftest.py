"""Shared fixtures for the Priority_Pruner tests."""
import pytest

from Priority_Pruner.genotypes import SNP_Genotypes, Individual, Sex
from Priority_Pruner.ld import LD_Result
from Priority_Pruner.snp_table import SNP_Info, SNP_Table

CODE_TO_CALL = {0: ('0', '0'), 1: ('A', 'A'), 2: ('G', 'G'), 3: ('A', 'G')}


@pytest.fixture
def make_genotypes():
    """Build SNP_Genotypes (alleles A and G) from a list of two bit codes."""
    def _make(codes, name='snp', chrom_x=False):
        calls = [CODE_TO_CALL[i] for i in codes]
        return SNP_Genotypes(name, calls, 'A', 'G', chrom_x=chrom_x)
    return _make


@pytest.fixture
def make_founders():
    """Build founders from a string of sexes, e.g. 'MMFF'."""
    def _make(sexes):
        lookup = {'M': Sex.MALE, 'F': Sex.FEMALE, 'U': Sex.UNKNOWN}
        return [Individual('FAM{}'.format(i), 'IND{}'.format(i),
                           lookup[sex]) for i, sex in enumerate(sexes)]
    return _make


class FakeGenotypes(object):

    """Stands in for SNP_Genotypes when LD values are fixed by the test."""

    def __init__(self, name, valid=True):
        self.name = name
        self.valid = valid


@pytest.fixture
def make_snp():
    """Build an SNP_Info with fake genotypes attached."""
    def _make(name, pos, p_value=0.5, chrom='1', force=False, design=1.0,
              metrics=None, valid=True):
        snp = SNP_Info(name, chrom, pos, 'A', 'G', p_value,
                       force_include=force, design_score=design,
                       metrics=metrics)
        snp.genotypes = FakeGenotypes(name, valid)
        return snp
    return _make


@pytest.fixture
def make_table():
    """Build and sort an SNP_Table from SNP_Info objects."""
    def _make(snps, chrom=None, forced_first=True):
        return SNP_Table(snps, chrom=chrom).sort(forced_first=forced_first)
    return _make


@pytest.fixture
def fixed_ld(monkeypatch):
    """Replace the LD estimate used by the pruner with fixed r-squared values.

    Call the fixture with {(name1, name2): r2}, pairs are symmetric and any
    missing pair has an r-squared of 0.
    """
    def _install(r2s):
        def estimate(geno1, geno2, founders):
            if geno1 is geno2:
                return LD_Result(1.0, 1.0)
            r2 = r2s.get((geno1.name, geno2.name),
                         r2s.get((geno2.name, geno1.name), 0.0))
            return LD_Result(r2, 1.0)
        monkeypatch.setattr('Priority_Pruner.pruner.estimate_ld', estimate)
    return _install


###############################################################################
#                                 Input Files                                 #
###############################################################################

# Eight female founders
TFAM = ''.join('F{0} I{0} 0 0 2 -9\n'.format(i) for i in range(8))

SNP1 = [1, 1, 2, 2, 1, 1, 2, 2]
SNP2 = [1, 2, 1, 2, 1, 2, 1, 2]


def tped_row(chrom, name, pos, codes, alleles=('A', 'G')):
    """One tped line, codes map to genotypes of the two alleles."""
    a, b = alleles
    calls = {0: '0 0', 1: '{0} {0}'.format(a), 2: '{0} {0}'.format(b),
             3: '{} {}'.format(a, b)}
    return '{} {} 0 {} {}\n'.format(chrom, name, pos,
                                    ' '.join(calls[i] for i in codes))


TPED = (
    tped_row('1', 'snp1', 1000, SNP1) +
    tped_row('1', 'snp2', 2000, SNP2, ('C', 'T')) +
    tped_row('1', 'snp3', 3000, SNP1) +
    tped_row('1', 'snp5', 4000, [1] * 8) +
    tped_row('1', 'snp4', 900000, SNP1, ('C', 'T')) +
    tped_row('1', 'other', 5000, SNP2)
)

SNP_TABLE = """\
name chr pos a1 a2 p forceSelect designScore metric1
snp1 1 1000 A G 0.00001 0 1 5
snp2 1 2000 C T 0.01 0 1 4
snp3 1 3000 A G 0.0001 0 1 3
snp4 1 900000 C T 0.02 0 1 2
snp5 1 4000 A C 0.001 0 1 1
"""


@pytest.fixture
def input_files(tmp_path):
    """Write a small tped, tfam and SNP table, return their paths."""
    (tmp_path / 'data.tfam').write_text(TFAM)
    (tmp_path / 'data.tped').write_text(TPED)
    (tmp_path / 'snps.txt').write_text(SNP_TABLE)
    return {
        'tfile': str(tmp_path / 'data'),
        'tped': str(tmp_path / 'data.tped'),
        'tfam': str(tmp_path / 'data.tfam'),
        'snp_table': str(tmp_path / 'snps.txt'),
        'out': str(tmp_path / 'run'),
    }
