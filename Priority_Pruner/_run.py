#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Simple functions and classes used by the rest of the module.

Functions
---------
open_zipped
    Open a regular, gzipped, bz2zipped, or open filehandle agnostically
get_length
    Convert kb and mb lengths into integers
normalize_chrom
    Return a canonical upper case chromosome label, reject Y and MT
chrom_sort_key
    For use with sorted(), allows correct ordering of chromosomes.
format_duration
    Describe a number of milliseconds in days, hours, minutes and seconds

Classes
-------
Log
    Write messages to STDERR and to a log file at the same time

Exceptions
----------
PriorityPrunerError
    Base class, everything below is fatal to a run
ParseError
ConfigurationError
InvalidGenotype
InternalError
"""
import re as _re
import sys as _sys
import bz2 as _bz2
import gzip as _gzip

__all__ = ["open_zipped", "get_length", "normalize_chrom", "chrom_sort_key",
           "format_duration", "Log", "PriorityPrunerError", "ParseError",
           "ConfigurationError", "InvalidGenotype", "InternalError"]

# Chromosomes we refuse to work with, after normalization
UNSUPPORTED_CHROMS = ['Y', 'M', 'MT', '24', 'XY', '25', '26']


###############################################################################
#                                 Exceptions                                  #
###############################################################################


class PriorityPrunerError(Exception):

    """Any error that should abort a run."""

    pass


class ParseError(PriorityPrunerError):

    """An input file has a malformed row, column, or value."""

    pass


class ConfigurationError(PriorityPrunerError):

    """Options are invalid, conflicting, or do not cover the data."""

    pass


class InvalidGenotype(PriorityPrunerError):

    """A genotype call cannot be encoded against the locus alleles."""

    pass


class InternalError(PriorityPrunerError):

    """An internal invariant was violated, this is a bug."""

    pass


###############################################################################
#                              Helper Functions                               #
###############################################################################


def open_zipped(infile, mode='r'):
    """Return file handle of file regardless of compressed or not.

    Also returns already opened files unchanged, text mode automatic.
    """
    # Return already open files
    if hasattr(infile, 'write') or hasattr(infile, 'readline'):
        return infile
    # Make text mode automatic
    if len(mode) == 1:
        mode = mode + 't'
    infile = str(infile)
    if infile.endswith('.gz'):
        return _gzip.open(infile, mode)
    if infile.endswith('.bz2'):
        return _bz2.open(infile, mode)
    return open(infile, mode)


def get_length(length_string):
    """Convert a string length like 50kb to an integer length.

    Raises
    ------
    ValueError
        If the string cannot be parsed or the suffix is not kb or mb
    """
    if isinstance(length_string, int):
        return length_string
    if not isinstance(length_string, str):
        raise ValueError('length_string must be either a string or an integer, '
                         'is {}'.format(type(length_string)))
    length_string = length_string.strip()
    if length_string.isdigit():
        return int(length_string)
    match = _re.match(r'^(\d+)(\D+)$', length_string)
    if not match:
        raise ValueError('Cannot parse {} as a length'.format(length_string))
    dist, mod = match.groups()
    dist = int(dist)
    mod = mod.lower()
    if mod not in ['kb', 'mb']:
        raise ValueError('Cannot parse {}, must be in kb or mb only'
                         .format(length_string))
    if mod == 'kb':
        dist = dist * 1000
    elif mod == 'mb':
        dist = dist * 1000000
    return dist


def normalize_chrom(chrom):
    """Return an upper case chromosome label with chr stripped, 23 becomes X.

    Raises
    ------
    ValueError
        If the chromosome is empty, Y, or mitochondrial
    """
    chrom = chrom.strip().upper()
    if chrom.startswith('CHR'):
        chrom = chrom[3:]
    if not chrom:
        raise ValueError('Empty chromosome label')
    if chrom == '23':
        chrom = 'X'
    if chrom in UNSUPPORTED_CHROMS:
        raise ValueError('Chromosome {} is not supported, only autosomes and '
                         'X can be used'.format(chrom))
    return chrom


def chrom_sort_key(x):
    """Return a tuple for sorting from a chromosome, integers come first."""
    if x.isdigit():
        return (0, int(x), x)
    return (1, 0, x)


def format_duration(millis):
    """Describe a duration in milliseconds the way the log reports it."""
    millis = int(millis)
    if millis < 0:
        return 'Duration time not available.'
    days, millis = divmod(millis, 86400000)
    hours, millis = divmod(millis, 3600000)
    minutes, millis = divmod(millis, 60000)
    seconds, millis = divmod(millis, 1000)
    parts = []
    for count, name, shown in [(days, 'day', days),
                               (hours, 'hour', days or hours),
                               (minutes, 'minute', days or hours or minutes),
                               (seconds, 'second',
                                days or hours or minutes or seconds)]:
        if shown:
            parts.append('{} {}(s)'.format(count, name))
    parts.append('{} millisecond(s)'.format(millis))
    return 'Duration: ' + ', '.join(parts)


###############################################################################
#                                   Logging                                   #
###############################################################################


class Log(object):

    """Write messages to several open file handles at once.

    Attributes
    ----------
    handles : list
        Open file handles, STDERR by default
    verbose : bool
        Write debug messages too
    """

    def __init__(self, logfile=None, verbose=False, stream=_sys.stderr):
        """Open logfile for writing if it is a path.

        Parameters
        ----------
        logfile : str or file, optional
            A path or an open handle to copy all messages to
        verbose : bool, optional
            Write messages passed to debug()
        stream : file, optional
            Defaults to STDERR, None disables it
        """
        self.verbose = verbose
        self.handles = []
        self._opened = []
        if stream is not None:
            self.handles.append(stream)
        if logfile is not None:
            handle = open_zipped(logfile, 'w')
            if handle is not logfile:
                self._opened.append(handle)
            self.handles.append(handle)

    def info(self, message):
        """Write a message to every handle."""
        for handle in self.handles:
            handle.write(str(message) + '\n')
            handle.flush()

    def debug(self, message):
        """Write a message only if verbose."""
        if self.verbose:
            self.info(message)

    def error(self, message):
        """Write 'ERROR: message'."""
        self.info('ERROR: {}'.format(message))

    def close(self):
        """Close any handle this object opened itself."""
        for handle in self._opened:
            handle.close()
        self.handles = [i for i in self.handles if i not in self._opened]
        self._opened = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return '<Log verbose={} handles={}>'.format(self.verbose,
                                                    len(self.handles))
