import logging

import pytest

from prefstore_lib import cli
from prefstore_lib.namespace import namespace_prefix
from prefstore_lib.registry import NamespaceRegistry
from prefstore_lib.storage import FileBackingAdapter


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    # configure_logging replaces root handlers; put them back afterwards
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


def run(tmp_path, *args):
    return cli.main(['--backend', 'file', '--data-dir', str(tmp_path / 'prefs'), *args])


def test_set_then_get(tmp_path, capsys):
    assert run(tmp_path, 'set', 'profile', 'level', '5', '--type', 'int') == 0
    assert run(tmp_path, 'get', 'profile', 'level') == 0
    assert capsys.readouterr().out.strip() == '5'

    store = NamespaceRegistry(FileBackingAdapter(tmp_path / 'prefs')).get('profile')
    assert store.get_int('level') == 5


def test_string_is_default_type(tmp_path, capsys):
    assert run(tmp_path, 'set', 'profile', 'name', 'A,B\\C') == 0
    store = NamespaceRegistry(FileBackingAdapter(tmp_path / 'prefs')).get('profile')
    assert store.get_string('name') == 'A,B\\C'


def test_list(tmp_path, capsys):
    run(tmp_path, 'set', 'p', 'a', 'true', '--type', 'bool')
    run(tmp_path, 'set', 'p', 'b', '2.5', '--type', 'double')
    capsys.readouterr()
    assert run(tmp_path, 'list', 'p') == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ['a\tbool\tTrue', 'b\tdouble\t2.5']


def test_missing_key(tmp_path, capsys):
    assert run(tmp_path, 'get', 'p', 'nope') == 1
    assert 'not found' in capsys.readouterr().err
    assert run(tmp_path, 'remove', 'p', 'nope') == 1


def test_malformed_value_is_an_error(tmp_path, capsys):
    assert run(tmp_path, 'set', 'p', 'n', 'abc', '--type', 'int') == 2
    assert 'error:' in capsys.readouterr().err


def test_remove_and_clear(tmp_path, capsys):
    run(tmp_path, 'set', 'p', 'a', '1', '--type', 'long')
    run(tmp_path, 'set', 'p', 'b', '2', '--type', 'long')
    assert run(tmp_path, 'remove', 'p', 'a') == 0
    store = NamespaceRegistry(FileBackingAdapter(tmp_path / 'prefs')).get('p')
    assert store.keys() == ['b']

    assert run(tmp_path, 'clear', 'p') == 0
    store = NamespaceRegistry(FileBackingAdapter(tmp_path / 'prefs')).get('p')
    assert store.keys() == []


def test_config_file_selects_backend(tmp_path, capsys):
    cfg = tmp_path / 'cfg.yml'
    cfg.write_text(f'backend: single_file\nfile_path: {tmp_path / "one.yml"}\n', encoding='utf-8')
    assert cli.main(['--config', str(cfg), 'set', 'p', 'k', 'v']) == 0
    assert (tmp_path / 'one.yml').exists()
    assert cli.main(['--config', str(cfg), 'get', 'p', 'k']) == 0
    assert capsys.readouterr().out.strip() == 'v'


def test_invalid_config_is_an_error(tmp_path, capsys):
    cfg = tmp_path / 'cfg.yml'
    cfg.write_text('backend: redis\n', encoding='utf-8')
    assert cli.main(['--config', str(cfg), 'get', 'p', 'k']) == 2
    assert 'error:' in capsys.readouterr().err


@pytest.mark.parametrize('content', [
    'serializer: bogus\n',
    'backend: single_file\nserializer: text\n',
])
def test_bad_serializer_is_an_error(tmp_path, capsys, content):
    cfg = tmp_path / 'cfg.yml'
    cfg.write_text(content + f'data_dir: {tmp_path / "prefs"}\n', encoding='utf-8')
    assert cli.main(['--config', str(cfg), 'set', 'p', 'k', 'v']) == 2
    assert 'error:' in capsys.readouterr().err


def test_list_reads_values_once(tmp_path, capsys, monkeypatch):
    for i in range(20):
        run(tmp_path, 'set', 'p', f'k{i}', str(i), '--type', 'int')
    capsys.readouterr()

    reads = []
    original = FileBackingAdapter.get_saved_string

    def counting(self, name):
        reads.append(name)
        return original(self, name)

    monkeypatch.setattr(FileBackingAdapter, 'get_saved_string', counting)
    assert run(tmp_path, 'list', 'p') == 0
    # One read for the keys when the namespace loads, then values and types
    assert len(reads) == 3
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == 'k0\tint\t0'
    assert len(lines) == 20


def test_fields_and_drop(tmp_path, capsys):
    run(tmp_path, 'set', 'p', 'a', '1', '--type', 'int')
    run(tmp_path, 'set', 'q', 'b', '2', '--type', 'int')
    capsys.readouterr()

    assert run(tmp_path, 'fields') == 0
    names = capsys.readouterr().out.splitlines()
    assert len(names) == 6

    assert run(tmp_path, 'drop', 'p') == 0
    assert run(tmp_path, 'fields') == 0
    remaining = capsys.readouterr().out.splitlines()
    assert len(remaining) == 3
    assert all(n.startswith(namespace_prefix('q')) for n in remaining)
    assert run(tmp_path, 'get', 'p', 'a') == 1
