"""Exception hierarchy for hiccup_compiler."""

from __future__ import annotations

from typing import Any

from hiccup_compiler.syntax import pr_str


class HiccupError(Exception):
	"""Base exception for all compiler errors."""


class ReaderError(HiccupError):
	"""Raised when markup source text cannot be read.

	Attributes:
	    line: Line number where the error occurred (1-based).
	    column: Column number where the error occurred (1-based).
	"""

	line: int | None
	column: int | None

	def __init__(
		self, message: str, *, line: int | None = None, column: int | None = None
	) -> None:
		self.line = line
		self.column = column
		if line is not None and column is not None:
			message = f"{message} at line {line}, column {column}"
		super().__init__(message)


class CompileError(HiccupError):
	"""A node violates a shape the compiler relies on.

	Aborts compilation of the enclosing top-level expression.
	"""

	node: Any

	def __init__(self, message: str, node: Any = None) -> None:
		self.node = node
		if node is not None:
			message = f"{message}: {pr_str(node)}"
		super().__init__(message)


class OracleError(HiccupError):
	"""The static type oracle could not analyze an expression.

	Never fatal: the compiler treats the expression's type as unknown.
	"""
