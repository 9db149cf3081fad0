# -*- coding: utf-8 -*-
"""
Prune and prioritize SNPs by linkage disequilibrium for genotyping panels.

Given a list of candidate SNPs ranked by p-value and genotypes for a set of
founders, greedily pick a small set of tag SNPs so that every candidate is in
high LD with a picked tag. Index SNPs may get surrogates, backup tags that
are picked in case the assay for the index SNP fails.

Info
----
License: MIT License
Version: 0.1.0

Modules
-------
prune_snps
    Run a whole pruning from an Options object or the command line
pruner
    The greedy pruning itself
ld
    Two-locus EM estimate of r-squared and D-prime
genotypes
    Two bit genotype storage, MAF and missingness
snp_table
    Parse and sort the SNP input table, find SNPs within a window
tplink
    Read transposed PLINK genotypes and sample lists
options
    Run configuration and thresholds
output
    Results and LD tables

Citations
---------
Chang, Christopher C and Chow, Carson C and Tellier, Laurent C A M and
    Vattikuti, Shashaank and Purcell, Shaun M and Lee, James J. Second-
    generation {PLINK}: {R}ising to the challenge of larger and richer
    datasets. GigaScience. 2015. DOI 10.1186/s13742-015-0047-8
Barrett JC, Fry B, Maller J, Daly MJ. Haploview: analysis and visualization
    of LD and haplotype maps. Bioinformatics. 2005. PMID: 15297300.
"""
__version__ = '0.1.0'

__all__ = ['prune_snps', 'pruner', 'ld', 'genotypes', 'snp_table', 'tplink',
           'options', 'output', 'Options']

# Make core functions easily available
from . import genotypes
from . import ld
from . import snp_table
from . import options
from . import tplink
from . import pruner
from . import output
from . import prune_snps
from .options import Options
