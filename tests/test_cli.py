import io
import json
from pathlib import Path

import pytest

from zkkodb.cli import main

@pytest.fixture
def message_file(tmp_path: Path) -> Path:
	path = tmp_path / 'read.json'
	path.write_text(json.dumps({'command': 'read', 'table': 'products', 'limit': 5}))
	return path

@pytest.fixture
def bad_file(tmp_path: Path) -> Path:
	path = tmp_path / 'insert.json'
	path.write_text(json.dumps({'command': 'insert', 'table': 'products'}))
	return path

def test_decode_prints_wire_form(message_file: Path, capsys: pytest.CaptureFixture) -> None:
	assert main(['decode', str(message_file)]) == 0

	out = json.loads(capsys.readouterr().out)
	assert out == {'command': 'read', 'table': 'products', 'filter': {}, 'limit': 5}

def test_decode_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
	monkeypatch.setattr('sys.stdin', io.TextIOWrapper(io.BytesIO(b'{"command": "delete", "type": "table", "table": "products"}')))

	assert main(['decode']) == 0
	assert json.loads(capsys.readouterr().out) == {'command': 'delete', 'type': 'table', 'table': 'products'}

def test_decode_reports_error(bad_file: Path, capsys: pytest.CaptureFixture) -> None:
	assert main(['decode', str(bad_file)]) == 1

	captured = capsys.readouterr()
	assert captured.out == ''
	assert captured.err.strip() == "error: insert: missing field 'rows'"

def test_check(message_file: Path, bad_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
	missing = tmp_path / 'missing.json'

	assert main(['check', str(message_file), str(bad_file), str(missing)]) == 1

	lines = capsys.readouterr().out.splitlines()
	assert lines[0] == f'{message_file}: ok (ReadCommand)'
	assert lines[1].startswith(f'{bad_file}: error:')
	assert lines[2].startswith(f'{missing}: error:')

def test_check_all_ok(message_file: Path) -> None:
	assert main(['check', str(message_file)]) == 0

def test_decode_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
	missing = tmp_path / 'nope.json'

	assert main(['decode', str(missing)]) == 1

	captured = capsys.readouterr()
	assert captured.out == ''
	assert captured.err.splitlines()[-1] == f'error: No such file or directory: {missing}'

def test_invalid_utf8_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
	path = tmp_path / 'bad.json'
	path.write_bytes(b'{"command": "read", "table": "\xff"}')

	assert main(['check', str(path)]) == 1
	assert capsys.readouterr().out.startswith(f'{path}: error: invalid json:')

	assert main(['decode', str(path)]) == 1
	assert capsys.readouterr().err.splitlines()[-1].startswith('error: invalid json:')

def test_log_level_is_validated(message_file: Path) -> None:
	with pytest.raises(SystemExit) as e:
		main(['--log-level', 'bogus', 'decode', str(message_file)])

	assert e.value.code == 2

def test_log_level_is_case_insensitive(message_file: Path) -> None:
	assert main(['--log-level', 'debug', 'decode', str(message_file)]) == 0
