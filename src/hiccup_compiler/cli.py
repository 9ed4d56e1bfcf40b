"""
Command-line interface for the hiccup compiler.
Reads markup source, compiles every top-level form and prints the result.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import json
import logging
import sys

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from hiccup_compiler.classify import classify
from hiccup_compiler.config import CompilerConfig
from hiccup_compiler.compiler import compile_markup
from hiccup_compiler.errors import HiccupError
from hiccup_compiler.nodes import emit
from hiccup_compiler.oracle import Env, SyntacticOracle
from hiccup_compiler.reader import read_all
from hiccup_compiler.syntax import is_vector, pr_str

cli = typer.Typer(
	name="hiccup-compile",
	help="Compile hiccup markup into element-constructor calls",
	no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
	if not verbose:
		return
	logging.basicConfig(
		level=logging.DEBUG,
		format="%(message)s",
		handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
	)


def _read_source(file: str | None) -> str:
	if file is None or file == "-":
		return sys.stdin.read()
	with open(file, encoding="utf-8") as f:
		return f.read()


def _parse_types(types: list[str]) -> dict[str, list[str]]:
	"""NAME=TYPE[,TYPE...] pairs into oracle globals."""
	globals_: dict[str, list[str]] = {}
	for entry in types:
		name, sep, value = entry.partition("=")
		if not sep or not name or not value:
			raise typer.BadParameter(
				f"Expected NAME=TYPE, got '{entry}'", param_hint="--type"
			)
		globals_.setdefault(name, []).extend(t for t in value.split(",") if t)
	return globals_


def _fail(exc: Exception) -> typer.Exit:
	Console(stderr=True).print(f"[red]error:[/red] {escape(str(exc))}", highlight=False)
	return typer.Exit(1)


@cli.command("compile")
def compile_cmd(
	file: str | None = typer.Argument(None, help="Source file, '-' or omitted for stdin"),
	output_format: str = typer.Option(
		"sexpr", "--format", "-f", help="Output format: sexpr or json"
	),
	types: list[str] = typer.Option(
		[], "--type", "-t", help="Seed a global type: NAME=TYPE (repeatable)"
	),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Log compiler decisions"),
):
	"""Compile every top-level form and print one result per line."""
	_configure_logging(verbose)
	if output_format not in ("sexpr", "json"):
		raise typer.BadParameter("Expected 'sexpr' or 'json'", param_hint="--format")
	oracle = SyntacticOracle(_parse_types(types))
	config = CompilerConfig.from_env()
	try:
		forms = read_all(_read_source(file))
		compiled = [compile_markup(form, config=config, oracle=oracle) for form in forms]
	except (HiccupError, OSError) as exc:
		raise _fail(exc) from None
	for node in compiled:
		if output_format == "json":
			typer.echo(json.dumps(node.render()))
		else:
			typer.echo(emit(node))


@cli.command("classify")
def classify_cmd(
	file: str | None = typer.Argument(None, help="Source file, '-' or omitted for stdin"),
	types: list[str] = typer.Option(
		[], "--type", "-t", help="Seed a global type: NAME=TYPE (repeatable)"
	),
):
	"""Print the compile strategy of each top-level vector."""
	oracle = SyntacticOracle(_parse_types(types))
	try:
		forms = read_all(_read_source(file))
		for form in forms:
			if is_vector(form):
				typer.echo(f"{classify(form, oracle, Env())}\t{pr_str(form)}")
	except (HiccupError, OSError) as exc:
		raise _fail(exc) from None


def main():
	"""Main CLI entry point."""
	cli()


if __name__ == "__main__":
	main()
