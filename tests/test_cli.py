import json
from pathlib import Path

import pytest
from hiccup_compiler.cli import cli
from hiccup_compiler.config import ENV_HICCUP_CREATE_ELEMENT
from typer.testing import CliRunner

CE = "daiquiri.core/create-element"

runner = CliRunner()


def test_compile_stdin():
	result = runner.invoke(cli, ["compile"], input='[:span "hi"]\n(if t [:br] x)')
	assert result.exit_code == 0, result.output
	assert result.output.splitlines() == [
		f'({CE} "span" nil #js ["hi"])',
		f"(if t ({CE} \"br\" nil nil) (daiquiri.interpreter/interpret x))",
	]


def test_compile_file(tmp_path: Path):
	source = tmp_path / "view.edn"
	source.write_text("[:* [:b]]", encoding="utf-8")
	result = runner.invoke(cli, ["compile", str(source)])
	assert result.exit_code == 0, result.output
	assert result.output.strip() == (
		f"({CE} daiquiri.core/fragment nil #js [({CE} \"b\" nil nil)])"
	)


def test_compile_json():
	result = runner.invoke(cli, ["compile", "-", "--format", "json"], input="[x]")
	assert result.exit_code == 0, result.output
	payload = json.loads(result.output)
	assert payload == {
		"t": "call",
		"callee": {"t": "id", "name": "daiquiri.interpreter/interpret"},
		"args": [{"t": "vector", "items": [{"t": "source", "code": "x"}]}],
	}


def test_compile_type_seeds_oracle():
	result = runner.invoke(cli, ["compile", "--type", "n=number"], input="[:p {} n]")
	assert result.exit_code == 0, result.output
	assert result.output.strip() == f'({CE} "p" nil #js [n])'


def test_compile_reads_runtime_names_from_env(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setenv(ENV_HICCUP_CREATE_ELEMENT, "h")
	result = runner.invoke(cli, ["compile"], input="[:br]")
	assert result.exit_code == 0, result.output
	assert result.output.strip() == '(h "br" nil nil)'


def test_compile_verbose():
	result = runner.invoke(cli, ["compile", "--verbose"], input="[:br]")
	assert result.exit_code == 0, result.output


def test_compile_reader_error():
	result = runner.invoke(cli, ["compile"], input="[:span")
	assert result.exit_code == 1
	assert "Unclosed" in result.output


def test_compile_shape_fault():
	result = runner.invoke(cli, ["compile"], input="[]")
	assert result.exit_code == 1
	assert "Element vector is empty" in result.output


def test_compile_missing_file(tmp_path: Path):
	result = runner.invoke(cli, ["compile", str(tmp_path / "missing.edn")])
	assert result.exit_code == 1


def test_compile_bad_format():
	result = runner.invoke(cli, ["compile", "--format", "xml"], input="[:br]")
	assert result.exit_code == 2


def test_compile_bad_type():
	result = runner.invoke(cli, ["compile", "--type", "oops"], input="[:br]")
	assert result.exit_code == 2


def test_classify():
	result = runner.invoke(cli, ["classify"], input='[:span "a"] [:span x] (f) [x]')
	assert result.exit_code == 0, result.output
	assert result.output.splitlines() == [
		'all-literal\t[:span "a"]',
		"literal-tag\t[:span x]",
		"default\t[x]",
	]


def test_classify_with_types():
	result = runner.invoke(cli, ["classify", "--type", "m=IMap"], input="[:div m]")
	assert result.exit_code == 0, result.output
	assert result.output.strip() == "literal-tag-and-hinted-attributes\t[:div m]"
