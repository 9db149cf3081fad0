"""Tests for the shared helpers in _run."""
import io
import gzip
import bz2

import pytest

from Priority_Pruner import _run


@pytest.mark.parametrize('text,expected', [
    ('500000', 500000), ('50kb', 50000), ('50KB', 50000), ('2mb', 2000000),
    (' 10kb ', 10000), (1200, 1200),
])
def test_get_length(text, expected):
    assert _run.get_length(text) == expected


@pytest.mark.parametrize('text', ['5gb', 'kb', '1.5kb', ''])
def test_get_length_errors(text):
    with pytest.raises(ValueError):
        _run.get_length(text)


@pytest.mark.parametrize('chrom,expected', [
    ('1', '1'), ('chr1', '1'), ('CHR22', '22'), ('23', 'X'), ('chrx', 'X'),
    ('X', 'X'),
])
def test_normalize_chrom(chrom, expected):
    assert _run.normalize_chrom(chrom) == expected


@pytest.mark.parametrize('chrom', ['Y', 'chrY', 'M', 'MT', '24', '25', '26',
                                   'XY', 'chr'])
def test_normalize_chrom_rejects(chrom):
    with pytest.raises(ValueError):
        _run.normalize_chrom(chrom)


def test_chrom_sort_key():
    chroms = ['X', '10', '2', '1']
    assert sorted(chroms, key=_run.chrom_sort_key) == ['1', '2', '10', 'X']


@pytest.mark.parametrize('millis,expected', [
    (5, 'Duration: 5 millisecond(s)'),
    (3004, 'Duration: 3 second(s), 4 millisecond(s)'),
    (3723004, 'Duration: 1 hour(s), 2 minute(s), 3 second(s), '
              '4 millisecond(s)'),
    (86400000 + 1, 'Duration: 1 day(s), 0 hour(s), 0 minute(s), '
                   '0 second(s), 1 millisecond(s)'),
    (-1, 'Duration time not available.'),
])
def test_format_duration(millis, expected):
    assert _run.format_duration(millis) == expected


class TestOpenZipped:

    def test_gzip(self, tmp_path):
        path = str(tmp_path / 'a.txt.gz')
        with gzip.open(path, 'wt') as fout:
            fout.write('hello\n')
        with _run.open_zipped(path) as fin:
            assert fin.read() == 'hello\n'

    def test_bz2(self, tmp_path):
        path = str(tmp_path / 'a.txt.bz2')
        with bz2.open(path, 'wt') as fout:
            fout.write('hello\n')
        with _run.open_zipped(path) as fin:
            assert fin.read() == 'hello\n'

    def test_open_handle(self):
        handle = io.StringIO('text')
        assert _run.open_zipped(handle) is handle


class TestLog:

    def test_writes_everywhere(self, tmp_path):
        stream = io.StringIO()
        path = str(tmp_path / 'run.log')
        with _run.Log(path, stream=stream) as log:
            log.info('first')
            log.debug('hidden')
            log.error('broken')
        assert stream.getvalue() == 'first\nERROR: broken\n'
        with open(path) as fin:
            assert fin.read() == 'first\nERROR: broken\n'

    def test_verbose(self):
        stream = io.StringIO()
        log = _run.Log(stream=stream, verbose=True)
        log.debug('shown')
        assert stream.getvalue() == 'shown\n'

    def test_does_not_close_stream(self, tmp_path):
        stream = io.StringIO()
        log = _run.Log(str(tmp_path / 'run.log'), stream=stream)
        log.close()
        assert not stream.closed
        assert log.handles == [stream]


def test_errors_share_a_base():
    for error in (_run.ParseError, _run.ConfigurationError,
                  _run.InvalidGenotype, _run.InternalError):
        assert issubclass(error, _run.PriorityPrunerError)
