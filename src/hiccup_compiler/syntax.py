"""Data model for hiccup markup and the expressions embedded in it.

Vectors are Python lists, maps are dicts and sets are frozensets. Keywords,
symbols and seq forms get their own small types so the compiler can tell
literal data from unevaluated code by shape alone.

Hints ride along in an explicit `Hinted` wrapper instead of metadata. Every
shape predicate in this module looks through the wrapper.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Keyword:
	"""Keyword atom: :span, :div#id.foo, :on/click"""

	name: str
	ns: str | None = None

	def __str__(self) -> str:
		if self.ns:
			return f":{self.ns}/{self.name}"
		return f":{self.name}"


@dataclass(frozen=True, slots=True)
class Symbol:
	"""Identifier: x, attrs, clojure.core/let"""

	name: str
	ns: str | None = None

	def __str__(self) -> str:
		if self.ns:
			return f"{self.ns}/{self.name}"
		return self.name


@dataclass(frozen=True, slots=True)
class Form:
	"""Seq form: (head arg ...). Unevaluated unless its head is `quote`."""

	items: tuple[Any, ...]

	@staticmethod
	def of(*items: Any) -> Form:
		return Form(tuple(items))

	@property
	def head(self) -> Any:
		return self.items[0] if self.items else None

	@property
	def args(self) -> tuple[Any, ...]:
		return self.items[1:]

	def __iter__(self) -> Iterator[Any]:
		return iter(self.items)

	def __len__(self) -> int:
		return len(self.items)


@dataclass(frozen=True, slots=True)
class Hinted:
	"""An expression with caller-supplied compile-time hints.

	- tag: static type hint, a type name ("String") or a Python type
	- attrs: the value is an attribute map even though its syntax is not
	- inline: the value is already renderable content, never an attribute map

	Hints are trusted. A wrong hint surfaces at runtime, not here.
	"""

	expr: Any
	tag: str | type | None = None
	attrs: bool = False
	inline: bool = False


def hinted(
	expr: Any,
	*,
	tag: str | type | None = None,
	attrs: bool = False,
	inline: bool = False,
) -> Hinted:
	"""Attach hints to `expr`, merging with hints it already carries."""
	if isinstance(expr, Hinted):
		return Hinted(
			expr.expr,
			tag=tag if tag is not None else expr.tag,
			attrs=attrs or expr.attrs,
			inline=inline or expr.inline,
		)
	return Hinted(expr, tag=tag, attrs=attrs, inline=inline)


QUOTE = Symbol("quote")


# =============================================================================
# Shape predicates
# =============================================================================


def unwrap(x: Any) -> Any:
	"""Strip hint wrappers."""
	while isinstance(x, Hinted):
		x = x.expr
	return x


def hints_of(x: Any) -> Hinted | None:
	return x if isinstance(x, Hinted) else None


def is_vector(x: Any) -> bool:
	return isinstance(unwrap(x), list)


def is_map(x: Any) -> bool:
	return isinstance(unwrap(x), dict)


def name_of(x: Any) -> str:
	"""Name of a keyword, symbol or string."""
	x = unwrap(x)
	if isinstance(x, (Keyword, Symbol)):
		return x.name
	if isinstance(x, str):
		return x
	raise TypeError(f"{type(x).__name__} has no name")


def form_name(x: Any) -> str | None:
	"""Unqualified head name of a symbol-headed seq form, else None."""
	x = unwrap(x)
	if isinstance(x, Form) and isinstance(x.head, Symbol):
		return x.head.name
	return None


def is_unevaluated(x: Any) -> bool:
	"""True if x is code: a symbol or any seq form except a quote."""
	x = unwrap(x)
	if isinstance(x, Symbol):
		return True
	return isinstance(x, Form) and x.head != QUOTE


def is_literal(x: Any) -> bool:
	"""True if x is a value fully known at compile time."""
	if is_unevaluated(x):
		return False
	x = unwrap(x)
	if isinstance(x, list):
		return all(is_literal(item) for item in x)
	if isinstance(x, dict):
		return all(is_literal(k) and is_literal(v) for k, v in x.items())
	if isinstance(x, (set, frozenset)):
		return all(is_literal(item) for item in x)
	return True


def is_element(x: Any) -> bool:
	"""True if x is a vector headed by a keyword tag."""
	x = unwrap(x)
	return isinstance(x, list) and bool(x) and isinstance(unwrap(x[0]), Keyword)


def eval_literal(x: Any) -> Any:
	"""Evaluate a literal value: drop hints and unquote quote forms.

	Only meaningful when `is_literal(x)` holds.
	"""
	x = unwrap(x)
	if isinstance(x, list):
		return [eval_literal(item) for item in x]
	if isinstance(x, dict):
		return {eval_literal(k): eval_literal(v) for k, v in x.items()}
	if isinstance(x, (set, frozenset)):
		return frozenset(eval_literal(item) for item in x)
	if isinstance(x, Form) and x.head == QUOTE:
		return x.items[1] if len(x.items) > 1 else None
	return x


# =============================================================================
# Printing
# =============================================================================


def pr_str(x: Any) -> str:
	"""Print syntax back to source text."""
	out: list[str] = []
	_pr(x, out)
	return "".join(out)


def _pr(x: Any, out: list[str]) -> None:
	if x is None:
		out.append("nil")
	elif isinstance(x, bool):
		out.append("true" if x else "false")
	elif isinstance(x, str):
		out.append('"')
		out.append(escape_string(x))
		out.append('"')
	elif isinstance(x, (int, float)):
		out.append(repr(x))
	elif isinstance(x, (Keyword, Symbol)):
		out.append(str(x))
	elif isinstance(x, Hinted):
		if x.tag is not None:
			out.append("^")
			out.append(x.tag if isinstance(x.tag, str) else x.tag.__name__)
			out.append(" ")
		if x.attrs:
			out.append("^:attrs ")
		if x.inline:
			out.append("^:inline ")
		_pr(x.expr, out)
	elif isinstance(x, list):
		out.append("[")
		_pr_seq(x, out)
		out.append("]")
	elif isinstance(x, Form):
		out.append("(")
		_pr_seq(x.items, out)
		out.append(")")
	elif isinstance(x, dict):
		out.append("{")
		for i, (k, v) in enumerate(x.items()):
			if i > 0:
				out.append(", ")
			_pr(k, out)
			out.append(" ")
			_pr(v, out)
		out.append("}")
	elif isinstance(x, (set, frozenset)):
		out.append("#{")
		_pr_seq(sorted(x, key=pr_str), out)
		out.append("}")
	else:
		raise TypeError(f"Cannot print {type(x).__name__} as markup syntax")


def _pr_seq(items: Any, out: list[str]) -> None:
	for i, item in enumerate(items):
		if i > 0:
			out.append(" ")
		_pr(item, out)


def escape_string(s: str) -> str:
	"""Escape for double-quoted string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
	)
