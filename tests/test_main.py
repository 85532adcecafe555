import logging
from collections import OrderedDict

import pytest

from bencoding import encode
from main import build_parser, main
from torrent import Torrent

TRACKER = b'http://tracker.example/announce'


@pytest.fixture
def torrent_file(tmp_path):
    meta = OrderedDict([
        (b'announce', TRACKER),
        (b'comment', b'test upload'),
        (b'info', OrderedDict([(b'name', b'x.iso'), (b'length', 2048), (b'piece length', 512)])),
    ])
    path = tmp_path / 'x.torrent'
    path.write_bytes(encode(meta))
    return path


def test_parser_defaults():
    args = build_parser().parse_args(['a.torrent'])
    assert args.torrent_files == ['a.torrent']
    assert args.trackers is False
    assert args.magnet_only is False
    assert args.verbose is False

def test_parser_requires_a_file():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])

def test_magnet_only(torrent_file, capsys):
    torrent = Torrent.from_file(str(torrent_file))
    assert main(['--magnet-only', str(torrent_file)]) == 0
    out = capsys.readouterr().out
    assert out.strip() == torrent.magnet_link()

def test_magnet_only_with_trackers(torrent_file, capsys):
    torrent = Torrent.from_file(str(torrent_file))
    assert main(['-m', '-t', str(torrent_file)]) == 0
    out = capsys.readouterr().out
    assert out.strip() == torrent.magnet_link(include_trackers=True)
    assert out.strip().endswith('&tr=' + TRACKER.decode())

def test_full_summary(torrent_file, capsys):
    torrent = Torrent.from_file(str(torrent_file))
    assert main([str(torrent_file)]) == 0
    out = capsys.readouterr().out
    assert torrent.info_hash in out
    assert 'test upload' in out
    assert torrent.magnet_link() in out

def test_malformed_file(tmp_path, capsys):
    path = tmp_path / 'bad.torrent'
    path.write_bytes(b'd4:info')
    assert main(['-m', str(path)]) == 1
    out = capsys.readouterr().out
    assert 'ERROR' in out
    assert 'bad.torrent' in out

def test_missing_file(tmp_path, capsys):
    assert main(['-m', str(tmp_path / 'missing.torrent')]) == 1
    assert 'ERROR' in capsys.readouterr().out

def test_one_failure_fails_the_run(torrent_file, tmp_path, capsys):
    assert main(['-m', str(torrent_file), str(tmp_path / 'missing.torrent')]) == 1

def test_warns_about_extension(tmp_path, caplog, capsys):
    path = tmp_path / 'x.bin'
    path.write_bytes(encode(OrderedDict([
        (b'info', OrderedDict([(b'name', b'x'), (b'length', 1), (b'piece length', 1)])),
    ])))
    with caplog.at_level(logging.WARNING, logger='tor2mag'):
        assert main(['-m', str(path)]) == 0
    assert 'does not have a .torrent extension' in caplog.text
