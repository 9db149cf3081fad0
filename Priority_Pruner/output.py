# -*- coding: utf-8 -*-
"""
Write pruning results and pairwise LD to tab delimited files.

Results are built as a pandas DataFrame with one row per SNP that was valid
or force-included, LD rows are streamed to disk as they are calculated since
there can be a great many of them.
"""
import pandas as _pd

from ._run import open_zipped

__all__ = ['results_to_dataframe', 'write_results', 'LD_File']

RESULTS_COLUMNS = ['name', 'chr', 'pos', 'a1', 'a2', 'tagged', 'selected',
                   'best_tag', 'r^2']

LD_COLUMNS = ['index_snp_name', 'index_snp_chr', 'index_snp_pos',
              'index_snp_a1', 'index_snp_a2', 'partner_snp_name',
              'partner_snp_chr', 'partner_snp_pos', 'partner_snp_a1',
              'partner_snp_a2', 'r^2', "D'"]


def results_to_dataframe(snp_table):
    """Convert the pruned SNP table into a DataFrame of results.

    Rows follow the priority order of the table, SNPs that failed the
    filters and are not force-included are left out.

    Parameters
    ----------
    snp_table : SNP_Table

    Returns
    -------
    pandas.DataFrame
    """
    rows = []
    for snp in snp_table:
        if not (snp.valid or snp.force_include):
            continue
        best, best_r2 = snp.best_tag()
        rows.append([
            snp.name, snp.chrom, snp.pos, snp.allele1, snp.allele2,
            int(snp.tagged), int(snp.picked),
            best.name if best is not None else 'NA',
            str(best_r2) if best is not None else 'NA',
        ])
    return _pd.DataFrame(rows, columns=RESULTS_COLUMNS)


def write_results(snp_table, out, log=None):
    """Write <out>.results and return the path."""
    path = out + '.results'
    if log:
        log.info('Writing results to [ {} ]'.format(path))
    results_to_dataframe(snp_table).to_csv(path, sep='\t', index=False)
    return path


class LD_File(object):

    """Stream (index, partner) LD results to <out>.ld.

    Attributes
    ----------
    path : str
    rows : int
        Number of rows written so far
    """

    def __init__(self, out):
        self.path = out + '.ld'
        self.rows = 0
        self._fout = open_zipped(self.path, 'w')
        self._fout.write('\t'.join(LD_COLUMNS) + '\n')

    def write(self, index_snp, partner, result):
        """Write one row for index_snp, partner and their LD_Result."""
        self._fout.write('\t'.join([
            index_snp.name, index_snp.chrom, str(index_snp.pos),
            index_snp.allele1, index_snp.allele2,
            partner.name, partner.chrom, str(partner.pos),
            partner.allele1, partner.allele2,
            str(result.r2), str(result.dprime),
        ]) + '\n')
        self.rows += 1

    def close(self):
        if not self._fout.closed:
            self._fout.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return '<LD_File {} ({} rows)>'.format(self.path, self.rows)
