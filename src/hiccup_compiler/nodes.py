from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

from typing_extensions import override

from hiccup_compiler.syntax import Keyword, Symbol, escape_string, pr_str
from hiccup_compiler.wire import (
	ArrayExpr,
	CallExpr,
	FormExpr,
	IdentifierExpr,
	LetExpr,
	LiteralExpr,
	ObjectExpr,
	SourceExpr,
	TernaryExpr,
	VectorExpr,
	WireExpr,
)

Primitive: TypeAlias = bool | int | float | str | None


# =============================================================================
# Base classes
# =============================================================================
class Node(ABC):
	"""Base class for all output nodes."""

	__slots__: tuple[str, ...] = ()

	@abstractmethod
	def emit(self, out: list[str]) -> None:
		"""Emit this node as source code into the output buffer."""


class ExprNode(Node, ABC):
	"""Base class for compiled expressions.

	Every compiler operation produces an ExprNode. Two renderings exist:
	- emit: s-expression source text for the host compiler
	- render: JSON-serializable tagged union (see `hiccup_compiler.wire`)
	"""

	__slots__: tuple[str, ...] = ()

	@abstractmethod
	def render(self) -> WireExpr:
		"""Serialize this node to its wire format."""

	@staticmethod
	def of(value: Any) -> ExprNode:
		"""Lift a markup value into an ExprNode without compiling it.

		Resolution order:
		1. Already an ExprNode: returned as-is
		2. Primitives: str/int/float/bool/None -> Literal
		3. Anything else (symbols, forms, collections) -> Source
		"""
		if isinstance(value, ExprNode):
			return value
		if value is None or isinstance(value, (bool, int, float, str)):
			return Literal(value)
		return Source(value)


# =============================================================================
# Expression nodes
# =============================================================================


@dataclass(slots=True)
class Literal(ExprNode):
	"""Literal: "hello", 42, true, nil"""

	value: Primitive

	@override
	def emit(self, out: list[str]) -> None:
		out.append(pr_str(self.value))

	@override
	def render(self) -> LiteralExpr:
		return {"t": "lit", "value": self.value}


@dataclass(slots=True)
class Identifier(ExprNode):
	"""Reference to a runtime name or a generated local: attrs1, daiquiri.core/fragment"""

	name: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.name)

	@override
	def render(self) -> IdentifierExpr:
		return {"t": "id", "name": self.name}


@dataclass(slots=True)
class Call(ExprNode):
	"""Function call: (f a b)"""

	callee: ExprNode
	args: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("(")
		self.callee.emit(out)
		for a in self.args:
			out.append(" ")
			a.emit(out)
		out.append(")")

	@override
	def render(self) -> CallExpr:
		return {
			"t": "call",
			"callee": self.callee.render(),
			"args": [a.render() for a in self.args],
		}


@dataclass(slots=True)
class Array(ExprNode):
	"""Constructor-level array literal: #js [a b c]"""

	elements: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("#js [")
		for i, e in enumerate(self.elements):
			if i > 0:
				out.append(" ")
			e.emit(out)
		out.append("]")

	@override
	def render(self) -> ArrayExpr:
		return {"t": "array", "items": [e.render() for e in self.elements]}


@dataclass(slots=True)
class Object(ExprNode):
	"""Constructor-level object literal: #js {"key" value}"""

	props: Sequence[tuple[str, ExprNode]]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("#js {")
		for i, (k, v) in enumerate(self.props):
			if i > 0:
				out.append(", ")
			out.append('"')
			out.append(escape_string(k))
			out.append('" ')
			v.emit(out)
		out.append("}")

	@override
	def render(self) -> ObjectExpr:
		return {"t": "object", "props": {k: v.render() for k, v in self.props}}

	def get(self, key: str) -> ExprNode | None:
		for k, v in self.props:
			if k == key:
				return v
		return None


@dataclass(slots=True)
class Ternary(ExprNode):
	"""Conditional expression: (if cond a b)"""

	cond: ExprNode
	then: ExprNode
	else_: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		out.append("(if ")
		self.cond.emit(out)
		out.append(" ")
		self.then.emit(out)
		out.append(" ")
		self.else_.emit(out)
		out.append(")")

	@override
	def render(self) -> TernaryExpr:
		return {
			"t": "ternary",
			"cond": self.cond.render(),
			"then": self.then.render(),
			"else_": self.else_.render(),
		}


@dataclass(slots=True)
class Let(ExprNode):
	"""Binding block evaluating `value` once: (let [name value] body)"""

	name: str
	value: ExprNode
	body: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		out.append("(let [")
		out.append(self.name)
		out.append(" ")
		self.value.emit(out)
		out.append("] ")
		self.body.emit(out)
		out.append(")")

	@override
	def render(self) -> LetExpr:
		return {
			"t": "let",
			"name": self.name,
			"value": self.value.render(),
			"body": self.body.render(),
		}


@dataclass(slots=True)
class Vector(ExprNode):
	"""Hiccup vector handed to the runtime interpreter: [tag a b]"""

	items: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("[")
		for i, item in enumerate(self.items):
			if i > 0:
				out.append(" ")
			item.emit(out)
		out.append("]")

	@override
	def render(self) -> VectorExpr:
		return {"t": "vector", "items": [i.render() for i in self.items]}


@dataclass(slots=True)
class FormNode(ExprNode):
	"""Control form rebuilt around recompiled tail positions: (if test a' b')

	`head` keeps the symbol as written so qualified heads survive.
	"""

	head: Symbol
	parts: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("(")
		out.append(str(self.head))
		for p in self.parts:
			out.append(" ")
			p.emit(out)
		out.append(")")

	@override
	def render(self) -> FormExpr:
		return {
			"t": "form",
			"head": str(self.head),
			"parts": [p.render() for p in self.parts],
		}


@dataclass(slots=True)
class Source(ExprNode):
	"""Source syntax left untouched: tests, bindings, opaque expressions."""

	value: Any

	@override
	def emit(self, out: list[str]) -> None:
		out.append(pr_str(self.value))

	@override
	def render(self) -> SourceExpr:
		return {"t": "source", "code": pr_str(self.value)}


NIL = Literal(None)


def lit_name(x: Keyword | Symbol | str) -> Literal:
	"""String literal holding the name of a keyword, symbol or string."""
	return Literal(x if isinstance(x, str) else x.name)


# =============================================================================
# Emit logic
# =============================================================================


def emit(node: Node) -> str:
	"""Emit a node as source code."""
	out: list[str] = []
	node.emit(out)
	return "".join(out)
