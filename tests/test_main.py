"""Tests for the connstring command line"""

import io
import json
import logging

import pytest

from connstring import main as cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('DB_STRING_SECRET_KEY', 'DB_STRING_SECRET_ENV', 'DB_STRING_LOG_DIR',
                 'DB_STRING_STRICT_DECRYPT', 'DB_STRING_ALGORITHM', 'DB_STRING_HASH_ALGORITHM'):
        monkeypatch.delenv(name, raising=False)

    # main() reconfigures the root logger
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_parse_prints_record(capsys):
    assert cli.main(['parse', 'host1:6379,host2:6380']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['dbType'] == 'redis'
    assert data['params']['isCluster'] is True


def test_parse_and_reconstruct_with_secret(tmp_path, capsys):
    value = "Server=localhost\\SQLEXPRESS;Database=mydb;User Id=sa;Password=p@ss"
    assert cli.main(['parse', value, '--secret', 's3cret']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['encrypted'] is True
    assert data['password'] != 'p@ss'

    record_file = tmp_path / 'record.json'
    record_file.write_text(json.dumps(data), encoding='utf-8')

    assert cli.main(['reconstruct', str(record_file), '--secret', 's3cret']) == 0
    assert capsys.readouterr().out.strip() == value


def test_secret_from_environment(monkeypatch, capsys):
    monkeypatch.setenv('DB_STRING_SECRET_KEY', 'env-secret')
    assert cli.main(['parse', 'redis://:pw@cache:6379']) == 0
    assert json.loads(capsys.readouterr().out)['encrypted'] is True


def test_no_encrypt(monkeypatch, capsys):
    monkeypatch.setenv('DB_STRING_SECRET_KEY', 'env-secret')
    assert cli.main(['parse', 'redis://:pw@cache:6379', '--no-encrypt']) == 0
    assert json.loads(capsys.readouterr().out)['password'] == 'pw'


def test_reconstruct_from_stdin(monkeypatch, capsys):
    record = {'dbType': 'mysql', 'protocol': 'mysql', 'host': 'db', 'port': '3306', 'dbName': 'shop'}
    monkeypatch.setattr('sys.stdin', io.StringIO(json.dumps(record)))
    assert cli.main(['reconstruct']) == 0
    assert capsys.readouterr().out.strip() == 'mysql://db:3306/shop'


def test_sqlalchemy_command(capsys):
    assert cli.main(['sqlalchemy', 'postgresql://app:pw@db:5432/appdb']) == 0
    assert capsys.readouterr().out.strip() == 'postgresql+psycopg2://app:pw@db:5432/appdb'


def test_invalid_input_exits_with_error(capsys):
    assert cli.main(['parse', 'localhost']) == 1
    assert 'Error: Invalid connection string provided' in capsys.readouterr().err


def test_unsupported_reconstruct(tmp_path, capsys):
    record_file = tmp_path / 'record.json'
    record_file.write_text(json.dumps({'dbType': 'unknown'}), encoding='utf-8')
    assert cli.main(['reconstruct', str(record_file)]) == 1
    assert 'Unsupported database type' in capsys.readouterr().err


def test_secret_before_connection_string(capsys):
    assert cli.main(['parse', '--secret', 's3cret', 'redis://:pw@cache:6379']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['encrypted'] is True
    assert data['password'] != 'pw'


def test_secret_option_overrides_environment(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv('DB_STRING_SECRET_KEY', 'env-secret')
    assert cli.main(['parse', 'redis://:pw@cache:6379', '--secret', 's3cret']) == 0
    record_file = tmp_path / 'record.json'
    record_file.write_text(capsys.readouterr().out, encoding='utf-8')

    assert cli.main(['reconstruct', str(record_file), '--secret', 's3cret', '--strict']) == 0
    assert capsys.readouterr().out.strip() == 'redis://:pw@cache:6379'
