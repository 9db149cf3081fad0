"""End to end runs of the command line interface."""
import os

import pytest

from Priority_Pruner.prune_snps import main, prune_snps, argument_parser
from Priority_Pruner.options import Options


def _read_rows(path):
    with open(path) as fin:
        lines = fin.read().splitlines()
    header = lines[0].split('\t')
    return [dict(zip(header, line.split('\t'))) for line in lines[1:]]


def _argv(files, *extra):
    return ['--tfile', files['tfile'], '--snp_table', files['snp_table'],
            '--out', files['out'], '--r2', '0.8', '--min_maf', '0.05'] + \
        list(extra)


class TestMain:

    def test_results(self, input_files):
        assert main(_argv(input_files)) == 0
        rows = _read_rows(input_files['out'] + '.results')
        # snp5 is monomorphic so it fails the MAF filter and is left out
        assert [i['name'] for i in rows] == ['snp1', 'snp3', 'snp2', 'snp4']
        results = {i['name']: i for i in rows}
        assert results['snp1']['selected'] == '1'
        assert results['snp1']['best_tag'] == 'snp1'
        assert results['snp1']['r^2'] == '1.0'
        assert results['snp3']['tagged'] == '1'
        assert results['snp3']['selected'] == '0'
        assert results['snp3']['best_tag'] == 'snp1'
        assert float(results['snp3']['r^2']) == pytest.approx(1.0)
        for name in ('snp2', 'snp4'):
            assert results[name]['selected'] == '1'
            assert results[name]['best_tag'] == name

    def test_log_file(self, input_files):
        assert main(_argv(input_files)) == 0
        with open(input_files['out'] + '.log') as fin:
            text = fin.read()
        assert 'Options in effect:' in text
        assert '8 individuals read' in text
        assert 'Analysis finished' in text
        assert 'Duration' in text

    def test_ld_output(self, input_files):
        assert main(_argv(input_files, '--ld')) == 0
        rows = _read_rows(input_files['out'] + '.ld')
        # Three pairs each for snp1 and snp2, snp4 is alone in its window
        assert len(rows) == 7
        assert [i['index_snp_name'] for i in rows].count('snp1') == 3
        assert [i['index_snp_name'] for i in rows].count('snp4') == 1
        pairs = {(i['index_snp_name'], i['partner_snp_name']): i
                 for i in rows}
        assert ('snp1', 'snp5') not in pairs
        assert float(pairs[('snp1', 'snp2')]['r^2']) == pytest.approx(
            0.0, abs=1e-9)

    def test_no_ld_file_by_default(self, input_files):
        assert main(_argv(input_files)) == 0
        assert not os.path.exists(input_files['out'] + '.ld')

    def test_surrogates(self, input_files):
        args = argument_parser().parse_args(
            _argv(input_files, '--st', '1', '1'))
        options = Options.from_args(args)
        table = prune_snps(options)
        snps = {i.name: i for i in table}
        assert snps['snp1'].pick_order == 1
        assert snps['snp3'].pick_order == 2
        assert snps['snp2'].pick_order == 3
        assert snps['snp4'].pick_order == 4
        assert snps['snp5'].pick_order == -1
        rows = {i['name']: i for i in
                _read_rows(input_files['out'] + '.results')}
        assert rows['snp3']['selected'] == '1'
        assert rows['snp3']['best_tag'] == 'snp1'

    def test_chromosome_not_in_table(self, input_files):
        assert main(_argv(input_files, '--chr', '2')) == 1
        with open(input_files['out'] + '.log') as fin:
            assert 'ERROR: Chromosome 2 not found' in fin.read()

    def test_missing_snp_table(self, input_files, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        argv = ['--tfile', input_files['tfile'], '--r2', '0.8']
        assert main(argv) == 1
        with open(str(tmp_path / 'prioritypruner.log')) as fin:
            assert 'Missing required option(s): --snp_table' in fin.read()

    def test_bad_option_is_logged(self, input_files, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main(_argv(input_files, '--min_maf', '0.9')) == 1
        with open(str(tmp_path / 'prioritypruner.log')) as fin:
            text = fin.read()
        assert 'ERROR: Invalid value 0.9 for option --min_maf' in text
        assert not os.path.exists(input_files['out'] + '.results')

    def test_missing_file(self, input_files):
        argv = _argv(input_files)
        argv[1] = input_files['tfile'] + '_missing'
        assert main(argv) == 1
        with open(input_files['out'] + '.log') as fin:
            assert 'check that correct file path' in fin.read()
