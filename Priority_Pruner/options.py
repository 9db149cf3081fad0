# -*- coding: utf-8 -*-
"""
Run configuration: thresholds, filters, inputs and outputs.

An Options object is built once, either directly or from parsed command line
arguments with Options.from_args(), validated, and then handed to every part
of the run that needs it.
"""
import os as _os

from ._run import get_length, normalize_chrom, ConfigurationError

__all__ = ['Options', 'R2_Threshold', 'Surrogate_Threshold', 'Metric']

DEFAULT_PREFIX = 'prioritypruner'


class R2_Threshold(object):

    """r-squared needed to tag, for SNPs with a p-value up to p_value."""

    __slots__ = ['p_value', 'r2']

    def __init__(self, p_value, r2):
        self.p_value = p_value
        self.r2 = r2

    def __repr__(self):
        return '<R2_Threshold p<={} r2={}>'.format(self.p_value, self.r2)


class Surrogate_Threshold(object):

    """Number of surrogates for index SNPs with a p-value below p_value."""

    __slots__ = ['p_value', 'num_surrogates']

    def __init__(self, p_value, num_surrogates):
        self.p_value = p_value
        self.num_surrogates = num_surrogates

    def __repr__(self):
        return '<Surrogate_Threshold p<{} n={}>'.format(self.p_value,
                                                       self.num_surrogates)


class Metric(object):

    """A named SNP table column and its weight in surrogate scoring."""

    __slots__ = ['name', 'weight']

    def __init__(self, name, weight):
        self.name = name
        self.weight = weight

    def __repr__(self):
        return '<Metric {} weight={}>'.format(self.name, self.weight)


###############################################################################
#                              Argument Parsing                               #
###############################################################################


def _get_float(option, value, minimum, maximum):
    """Convert value to a float in [minimum, maximum]."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            'Invalid value {} for option --{}, a number is required'
            .format(value, option)
        )
    if not minimum <= value <= maximum:
        raise ConfigurationError(
            'Invalid value {} for option --{}, must be between {} and {}'
            .format(value, option, minimum, maximum)
        )
    return value


def _get_int(option, value, minimum):
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            'Invalid value {} for option --{}, an integer is required'
            .format(value, option)
        )
    if value < minimum:
        raise ConfigurationError(
            'Invalid value {} for option --{}, must be at least {}'
            .format(value, option, minimum)
        )
    return value


class Options(object):

    """All settings for one pruning run.

    Attributes
    ----------
    max_distance : int
        Half width of the LD window in base pairs
    min_maf : float
    min_snp_callrate : float
    min_design_score : float
    metrics : list_of_Metric
    r2_thresholds : list_of_R2_Threshold
        Sorted by p-value
    surrogate_thresholds : list_of_Surrogate_Threshold
        Sorted by p-value
    chrom : str
        Only prune this chromosome, None for all
    out : str
        Prefix of all output files
    sort_by_forced_first : bool
        Prune force-included SNPs before all others
    surrogates_for_force_included : bool
        Pick surrogates for force-included index SNPs
    snp_table, tped, tfam : str
        Input files
    keep, remove : str
        Sample list files, at most one
    keep_random : float
        Fraction of individuals to keep at random
    seed : int
    verbose : bool
    ld_output : bool
        Write every evaluated pair to <out>.ld
    """

    def __init__(self, r2_thresholds=None, surrogate_thresholds=None,
                 metrics=None, max_distance=500000, min_maf=0.0,
                 min_snp_callrate=0.1, min_design_score=0.0, chrom=None,
                 out=DEFAULT_PREFIX, sort_by_forced_first=True,
                 surrogates_for_force_included=True, snp_table=None,
                 tped=None, tfam=None, keep=None, remove=None,
                 keep_random=None, seed=None, verbose=False,
                 ld_output=False):
        """Store and validate settings.

        Parameters
        ----------
        r2_thresholds : list_of_tuple
            (p_value, r2) pairs
        surrogate_thresholds : list_of_tuple
            (p_value, num_surrogates) pairs
        metrics : list_of_tuple
            (name, weight) pairs
        All others as in the class Attributes.

        Raises
        ------
        ConfigurationError
        """
        self.max_distance = max_distance
        self.min_maf = min_maf
        self.min_snp_callrate = min_snp_callrate
        self.min_design_score = min_design_score
        self.sort_by_forced_first = sort_by_forced_first
        self.surrogates_for_force_included = surrogates_for_force_included
        self.snp_table = snp_table
        self.tped = tped
        self.tfam = tfam
        self.keep = keep
        self.remove = remove
        self.keep_random = keep_random
        self.seed = seed
        self.verbose = verbose
        self.ld_output = ld_output
        self.options_in_effect_list = []

        if chrom is not None:
            try:
                chrom = normalize_chrom(str(chrom))
            except ValueError as err:
                raise ConfigurationError(str(err))
        self.chrom = chrom

        out = out if out else DEFAULT_PREFIX
        if out.endswith('/') or out.endswith(_os.sep):
            out += DEFAULT_PREFIX
        self.out = out

        self.metrics = []
        for name, weight in metrics or []:
            self.add_metric(name, weight)
        self.r2_thresholds = []
        for p_value, r2 in r2_thresholds or []:
            self.add_r2_threshold(p_value, r2)
        self.surrogate_thresholds = []
        for p_value, num in surrogate_thresholds or []:
            self.add_surrogate_threshold(p_value, num)

        self._check_ranges()

    def _check_ranges(self):
        _get_int('max_distance', self.max_distance, 0)
        _get_float('min_maf', self.min_maf, 0, 0.5)
        _get_float('min_snp_callrate', self.min_snp_callrate, 0, 1)
        _get_float('min_design_score', self.min_design_score, 0,
                   float('inf'))
        if self.keep_random is not None:
            _get_float('keep_random', self.keep_random, 0, 1)
        given = [i for i in ('keep', 'remove', 'keep_random')
                 if getattr(self, i) is not None]
        if len(given) > 1:
            raise ConfigurationError(
                'Options --{} cannot be used together'.format(
                    ' and --'.join(given))
            )

    def add_metric(self, name, weight):
        """Add a surrogate scoring metric."""
        weight = _get_float('metric', weight, 0, float('inf'))
        if name.lower() in ('design_score', 'designscore'):
            raise ConfigurationError(
                'The design score cannot be used as a metric, use '
                '--min_design_score instead'
            )
        if name in self.metric_names:
            raise ConfigurationError('Metric {} given more than once'
                                     .format(name))
        self.metrics.append(Metric(name, weight))

    def add_r2_threshold(self, p_value, r2):
        """Add an r-squared threshold, the list stays sorted by p-value."""
        self.r2_thresholds.append(
            R2_Threshold(_get_float('r2t', p_value, 0, 1),
                         _get_float('r2t', r2, 0, 1))
        )
        self.r2_thresholds.sort(key=lambda x: x.p_value)

    def add_surrogate_threshold(self, p_value, num_surrogates):
        """Add a surrogate count, the list stays sorted by p-value."""
        self.surrogate_thresholds.append(
            Surrogate_Threshold(_get_float('st', p_value, 0, 1),
                                _get_int('st', num_surrogates, 0))
        )
        self.surrogate_thresholds.sort(key=lambda x: x.p_value)

    @property
    def metric_names(self):
        return [i.name for i in self.metrics]

    def check_inputs(self):
        """Make sure everything needed for a run was given."""
        missing = []
        if not self.snp_table:
            missing.append('--snp_table')
        if not self.tped or not self.tfam:
            missing.append('--tfile, or --tped and --tfam')
        if not self.r2_thresholds:
            missing.append('--r2 or --r2t')
        if missing:
            raise ConfigurationError(
                'Missing required option(s): {}'.format('; '.join(missing))
            )

    def r2_threshold(self, snp):
        """Return the r-squared threshold for an index SNP.

        Raises
        ------
        ConfigurationError
            If no threshold covers the p-value of snp
        """
        for threshold in self.r2_thresholds:
            if snp.p_value <= threshold.p_value:
                return threshold.r2
        raise ConfigurationError(
            'No r-squared threshold defined for p-value of {}: {}'
            .format(snp.name, snp.p_value)
        )

    def num_surrogates(self, snp):
        """Return the number of surrogates to pick for an index SNP."""
        if snp.force_include and not self.surrogates_for_force_included:
            return 0
        for threshold in self.surrogate_thresholds:
            if snp.p_value < threshold.p_value:
                return threshold.num_surrogates
        return 0

    def options_in_effect(self):
        """Return a printable description of the options used."""
        if self.options_in_effect_list:
            lines = self.options_in_effect_list
        else:
            lines = ['--{} {}'.format(k, v) for k, v in sorted(
                self.__dict__.items()) if k != 'options_in_effect_list']
        return 'Options in effect:\n\t' + '\n\t'.join(lines) + '\n'

    @classmethod
    def from_args(cls, args):
        """Build Options from an argparse namespace.

        Raises
        ------
        ConfigurationError
        """
        if args.r2 is not None and args.r2t:
            raise ConfigurationError('Options --r2 and --r2t cannot be used '
                                     'together')
        tped, tfam = args.tped, args.tfam
        if args.tfile:
            if tped or tfam:
                raise ConfigurationError('Option --tfile cannot be used with '
                                         '--tped or --tfam')
            tped, tfam = args.tfile + '.tped', args.tfile + '.tfam'

        r2_thresholds = list(args.r2t or [])
        if args.r2 is not None:
            r2_thresholds = [(1, args.r2)]

        if args.max_distance is None:
            max_distance = 500000
        else:
            try:
                max_distance = get_length(args.max_distance)
            except ValueError as err:
                raise ConfigurationError(
                    'Invalid value for option --max_distance: {}'.format(err)
                )

        seed = None
        if args.seed is not None:
            seed = _get_int('seed', args.seed, 0)

        opts = cls(
            r2_thresholds=r2_thresholds,
            surrogate_thresholds=args.st or [],
            metrics=args.metric or [],
            max_distance=max_distance,
            min_maf=_get_float('min_maf', args.min_maf, 0, 0.5),
            min_snp_callrate=_get_float('min_snp_callrate',
                                        args.min_snp_callrate, 0, 1),
            min_design_score=_get_float('min_design_score',
                                        args.min_design_score, 0,
                                        float('inf')),
            chrom=args.chr,
            out=args.out,
            sort_by_forced_first=not args.do_not_pick_force_included_first,
            surrogates_for_force_included=(
                not args.no_surrogates_for_force_included_snps
            ),
            snp_table=args.snp_table, tped=tped, tfam=tfam,
            keep=args.keep, remove=args.remove,
            keep_random=(None if args.keep_random is None else
                         _get_float('keep_random', args.keep_random, 0, 1)),
            seed=seed, verbose=args.verbose, ld_output=args.ld,
        )
        opts.options_in_effect_list = _describe_args(args)
        return opts

    def __repr__(self):
        return '<Options out={} r2_thresholds={} surrogates={}>'.format(
            self.out, self.r2_thresholds, self.surrogate_thresholds
        )


def _describe_args(args):
    """List the options given on the command line, one string each."""
    lines = []
    for key, value in sorted(vars(args).items()):
        if value is None or value is False or value == []:
            continue
        if value is True:
            lines.append('--{}'.format(key))
        elif isinstance(value, list):
            for item in value:
                lines.append('--{} {}'.format(key, ' '.join(
                    str(i) for i in item)))
        else:
            lines.append('--{} {}'.format(key, value))
    return lines
