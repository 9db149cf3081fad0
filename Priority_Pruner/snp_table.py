# -*- coding: utf-8 -*-
"""
The SNP input table: candidate loci, their priority, and selection state.

The table is whitespace delimited with a header. The first eight columns are
fixed, any further columns may hold metric values used to rank surrogates:

    name chr pos a1 a2 p forceSelect designScore [metric ...]

Once parsed and sorted the table holds the loci in priority order (the order
they are pruned in) and in position order (used to find the loci within a
window of an index SNP).
"""
from ._run import open_zipped, normalize_chrom, chrom_sort_key, ParseError

__all__ = ['SNP_Info', 'SNP_Table', 'find_window']

REQUIRED_COLUMNS = ['name', 'chr', 'pos', 'a1', 'a2', 'p', 'forceselect',
                    'designscore']

# r-squared of a tag whose LD with the tagged SNP is not known
UNKNOWN_R2 = -1.0


class SNP_Info(object):

    """One row of the SNP table plus its selection state.

    Attributes
    ----------
    name : str
    chrom : str
        Normalized chromosome label, X for the X chromosome
    pos : int
    allele1, allele2 : str
    p_value : float
    force_include : bool
    design_score : float
    metrics : list_of_float
        Values of the configured metrics, in the configured order
    picked : bool
        Selected as a tag
    tagged : bool
        Covered by some tag, picked SNPs are always tagged
    pick_order : int
        Order in which the SNP was picked, -1 until picked
    tagged_by : list_of_tuple
        (SNP_Info, r2) for every index SNP that tagged this one
    sorted_by_pos_index : int
        Rank in the position sorted list
    genotypes : SNP_Genotypes
    """

    picked = False
    tagged = False
    pick_order = -1
    sorted_by_pos_index = None
    genotypes = None

    def __init__(self, name, chrom, pos, allele1, allele2, p_value,
                 force_include=False, design_score=0.0, metrics=None):
        self.name = name
        self.chrom = chrom
        self.pos = int(pos)
        self.allele1 = allele1
        self.allele2 = allele2
        self.p_value = float(p_value)
        self.force_include = bool(force_include)
        self.design_score = float(design_score)
        self.metrics = list(metrics) if metrics else []
        self.tagged_by = []

    @property
    def is_chrom_x(self):
        return self.chrom == 'X'

    @property
    def valid(self):
        """True if genotypes exist and pass the MAF and call rate filters."""
        return self.genotypes is not None and self.genotypes.valid

    def add_tagged_by(self, snp, r2):
        """Record that snp tags this SNP with r2."""
        self.tagged_by.append((snp, r2))

    def best_tag(self):
        """Return (SNP_Info, r2) with the highest r2, or (None, None)."""
        best, best_r2 = None, UNKNOWN_R2
        for snp, r2 in self.tagged_by:
            if r2 > best_r2:
                best, best_r2 = snp, r2
        if best is None:
            return None, None
        return best, best_r2

    def matches_alleles(self, allele1, allele2):
        """Check genotype file alleles, allowing one to be missing ('0')."""
        ours = (self.allele1, self.allele2)
        if allele1 != '0' and allele2 == '0':
            return allele1 in ours
        if allele2 != '0' and allele1 == '0':
            return allele2 in ours
        return ours == (allele1, allele2) or ours == (allele2, allele1)

    def __repr__(self):
        return '<SNP_Info {} {}:{} p={} picked={} tagged={}>'.format(
            self.name, self.chrom, self.pos, self.p_value, self.picked,
            self.tagged
        )


###############################################################################
#                                 Table Class                                 #
###############################################################################


class SNP_Table(object):

    """All candidate SNPs of one run.

    Attributes
    ----------
    path : str
    snps : list_of_SNP_Info
        In priority order after sort()
    snps_by_pos : list_of_SNP_Info
        Sorted by chromosome and position
    metric_names : list_of_str
    chrom : str
        The only chromosome used, None for all
    """

    path = None

    def __init__(self, snps=None, metric_names=None, chrom=None):
        self.snps = list(snps) if snps else []
        self.metric_names = list(metric_names) if metric_names else []
        self.chrom = chrom
        self.snps_by_pos = []
        self._by_name = {}
        for snp in self.snps:
            self._by_name.setdefault(snp.name, []).append(snp)

    @classmethod
    def from_file(cls, path, metric_names=None, chrom=None, log=None):
        """Parse a SNP table file.

        Parameters
        ----------
        path : str
        metric_names : list_of_str, optional
            Columns to read metric values from
        chrom : str, optional
            Only keep rows on this (normalized) chromosome
        log : Log, optional

        Raises
        ------
        ParseError
        """
        table = cls(metric_names=metric_names, chrom=chrom)
        table.path = path
        if log:
            log.info('Reading SNP input table [ {} ]'.format(path))
        seen = set()
        with open_zipped(path) as fin:
            header = fin.readline().split()
            metric_cols = table._parse_header(header)
            for line_no, line in enumerate(fin, 2):
                fields = line.split()
                if not fields:
                    continue
                snp = table._parse_row(fields, header, metric_cols, line_no)
                if snp is None:
                    continue
                key = (snp.name, snp.chrom, snp.pos,
                       frozenset((snp.allele1, snp.allele2)))
                if key in seen:
                    raise ParseError(
                        'Duplicate SNP {} at line {} of [ {} ]. The '
                        'combination of name, chr, pos and alleles must be '
                        'unique.'.format(snp.name, line_no, path)
                    )
                seen.add(key)
                table.add(snp)
        if chrom and not table.snps:
            raise ParseError('Chromosome {} not found in [ {} ]'
                             .format(chrom, path))
        if log:
            log.info('{} SNPs read from [ {} ]'.format(len(table.snps), path))
        return table

    def _parse_header(self, header):
        """Check the header and return metric column indices."""
        if not header:
            raise ParseError('SNP table [ {} ] is empty'.format(self.path))
        lowered = [i.lower() for i in header]
        if lowered[:len(REQUIRED_COLUMNS)] != REQUIRED_COLUMNS:
            raise ParseError(
                'Invalid header in [ {} ], the first columns must be: {}'
                .format(self.path, ' '.join(
                    ['name', 'chr', 'pos', 'a1', 'a2', 'p', 'forceSelect',
                     'designScore']))
            )
        if len(set(header)) != len(header):
            dups = sorted({i for i in header if header.count(i) > 1})
            raise ParseError('Duplicate column names in [ {} ]: {}'
                             .format(self.path, ', '.join(dups)))
        metric_cols = []
        # Metric names must match their column exactly, case included
        for metric in self.metric_names:
            if metric not in header:
                raise ParseError(
                    'Metric column {} not found in [ {} ], column names are '
                    'case-sensitive'.format(metric, self.path)
                )
            metric_cols.append(header.index(metric))
        return metric_cols

    def _parse_row(self, fields, header, metric_cols, line_no):
        """Return an SNP_Info or None if not on the chosen chromosome."""
        def fail(message):
            raise ParseError('Problem with line {} in [ {} ]: {}'
                             .format(line_no, self.path, message))

        if len(fields) != len(header):
            fail('expected {} columns, found {}'.format(len(header),
                                                         len(fields)))
        name, chrom, pos, allele1, allele2, p_value, force, design = \
            fields[:8]
        try:
            chrom = normalize_chrom(chrom)
        except ValueError as err:
            fail(str(err))
        if self.chrom and chrom != self.chrom:
            return None
        try:
            pos = int(pos)
        except ValueError:
            fail('invalid position {}'.format(pos))
        if pos < 1:
            fail('invalid position {}'.format(pos))
        allele1, allele2 = allele1.upper(), allele2.upper()
        try:
            p_value = float(p_value)
        except ValueError:
            fail('invalid p-value {}'.format(p_value))
        if force not in ('0', '1'):
            fail('forceSelect must be 0 or 1, found {}'.format(force))
        try:
            design = float(design)
        except ValueError:
            fail('invalid design score {}'.format(design))
        metrics = []
        for col in metric_cols:
            try:
                metrics.append(float(fields[col]))
            except ValueError:
                fail('invalid value {} for metric {}'.format(fields[col],
                                                             header[col]))
        return SNP_Info(name, chrom, pos, allele1, allele2, p_value,
                        force_include=force == '1', design_score=design,
                        metrics=metrics)

    def add(self, snp):
        """Add an SNP_Info, sort() must be called again afterwards."""
        self.snps.append(snp)
        self._by_name.setdefault(snp.name, []).append(snp)

    def get_snp_info(self, name, chrom, pos, allele1, allele2):
        """Return the SNP_Info matching a genotype file record, or None."""
        for snp in self._by_name.get(name, []):
            if snp.chrom == chrom and snp.pos == pos:
                if snp.matches_alleles(allele1, allele2):
                    return snp
        return None

    def sort(self, forced_first=True):
        """Sort into priority order and build the position index.

        Priority is p-value then name, grouped by chromosome unless a single
        chromosome was chosen. With forced_first force-included SNPs come
        before everything else.
        """
        def priority(snp):
            key = (snp.p_value, snp.name)
            if not self.chrom:
                key = (chrom_sort_key(snp.chrom),) + key
            if forced_first:
                key = (not snp.force_include,) + key
            return key

        self.snps.sort(key=priority)
        self.snps_by_pos = sorted(
            self.snps, key=lambda x: (chrom_sort_key(x.chrom), x.pos)
        )
        for index, snp in enumerate(self.snps_by_pos):
            snp.sorted_by_pos_index = index
        return self

    def __iter__(self):
        return iter(self.snps)

    def __len__(self):
        return len(self.snps)

    def __repr__(self):
        return '<SNP_Table {} SNPs from {}>'.format(len(self.snps), self.path)


###############################################################################
#                                Window Search                                #
###############################################################################


def find_window(snp, max_distance, snps_by_pos):
    """Return the first and last index of the loci near snp.

    Walks outward from snp in the position sorted list while the neighbour is
    on the same chromosome and within max_distance, the lower bound is
    clamped to position 1.

    Parameters
    ----------
    snp : SNP_Info
        Must have sorted_by_pos_index set
    max_distance : int
    snps_by_pos : list_of_SNP_Info

    Returns
    -------
    start, end : int
        Inclusive, snps_by_pos[start:end + 1] contains snp
    """
    lower = max(snp.pos - max_distance, 1)
    upper = snp.pos + max_distance
    start = end = snp.sorted_by_pos_index
    while start > 0:
        prev = snps_by_pos[start - 1]
        if prev.chrom != snp.chrom or prev.pos < lower:
            break
        start -= 1
    while end < len(snps_by_pos) - 1:
        nxt = snps_by_pos[end + 1]
        if nxt.chrom != snp.chrom or nxt.pos > upper:
            break
        end += 1
    return start, end
