"""Typed JSON format for compiled expressions.

This module defines the JSON-serializable shape produced by `ExprNode.render()`.
It mirrors the node classes in `hiccup_compiler.nodes` one to one. Source
syntax that the compiler leaves untouched travels as printed source text.
"""

from __future__ import annotations

from typing import Literal, TypeAlias, TypedDict

# =============================================================================
# JSON atoms
# =============================================================================

JsonPrimitive: TypeAlias = str | int | float | bool | None


# =============================================================================
# Expression tree
# =============================================================================


class LiteralExpr(TypedDict):
	t: Literal["lit"]
	value: JsonPrimitive


class IdentifierExpr(TypedDict):
	t: Literal["id"]
	name: str


class CallExpr(TypedDict):
	t: Literal["call"]
	callee: WireExpr
	args: list[WireExpr]


class ArrayExpr(TypedDict):
	t: Literal["array"]
	items: list[WireExpr]


class ObjectExpr(TypedDict):
	t: Literal["object"]
	props: dict[str, WireExpr]


class TernaryExpr(TypedDict):
	t: Literal["ternary"]
	cond: WireExpr
	then: WireExpr
	else_: WireExpr


class LetExpr(TypedDict):
	"""Binding block: `value` is evaluated once and bound to `name` in `body`."""

	t: Literal["let"]
	name: str
	value: WireExpr
	body: WireExpr


class VectorExpr(TypedDict):
	"""Raw hiccup vector handed to the runtime interpreter."""

	t: Literal["vector"]
	items: list[WireExpr]


class FormExpr(TypedDict):
	"""Control form with recompiled tail positions."""

	t: Literal["form"]
	head: str
	parts: list[WireExpr]


class SourceExpr(TypedDict):
	"""Untouched source syntax, printed."""

	t: Literal["source"]
	code: str


WireExpr: TypeAlias = (
	LiteralExpr
	| IdentifierExpr
	| CallExpr
	| ArrayExpr
	| ObjectExpr
	| TernaryExpr
	| LetExpr
	| VectorExpr
	| FormExpr
	| SourceExpr
)
