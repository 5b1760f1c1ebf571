"""
Tests for the svgnormalize command line.
"""
import io
import json

from svgnormalize.cli import build_parser, config_from_args, main


def test_writes_output_file(tmp_path, offset_svg):
    source = tmp_path / 'in.svg'
    target = tmp_path / 'out.svg'
    source.write_text(offset_svg, encoding='utf-8')

    assert main([str(source), '-o', str(target)]) == 0
    assert 'viewBox="0 0 80 80"' in target.read_text(encoding='utf-8')


def test_reads_stdin_writes_stdout(monkeypatch, capsys, offset_svg):
    monkeypatch.setattr('sys.stdin', io.StringIO(offset_svg))

    assert main(['--minify']) == 0
    out = capsys.readouterr().out
    assert out.startswith('<svg')
    assert 'd="M0 0 L80 80"' in out
    assert '\n' not in out


def test_failure_returns_nonzero(tmp_path, capsys):
    source = tmp_path / 'bad.svg'
    source.write_text('not an svg', encoding='utf-8')

    assert main([str(source)]) == 1
    assert capsys.readouterr().out == ''


def test_report_printed_to_stderr(tmp_path, capsys, offset_svg):
    source = tmp_path / 'in.svg'
    source.write_text(offset_svg, encoding='utf-8')

    assert main([str(source), '--report']) == 0
    err = capsys.readouterr().err
    report = json.loads(err[err.index('{'):err.rindex('}') + 1])
    assert report['succeeded'] is True
    assert report['stats']['viewBoxAfter']['width'] == 80


def test_flags_map_to_config():
    args = build_parser().parse_args(['--no-crop', '--no-optimize', '--minify'])
    config = config_from_args(args)
    assert not config.crop_whitespace
    assert not config.optimize
    assert config.minify
    assert config.preprocess_shapes and config.normalize_coordinates and config.normalize_viewport
