"""Static type oracle.

The oracle answers one question: what types can this expression evaluate to?
An empty answer means "unknown", never "no type". The compiler only uses the
answer to elide a runtime `interpret` call or to prove that an attribute
position holds a map, so a weak oracle costs performance, never correctness.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from hiccup_compiler.errors import OracleError
from hiccup_compiler.hints import hint_oracle_type
from hiccup_compiler.syntax import Form, Keyword, Symbol, form_name, unwrap

logger = logging.getLogger(__name__)

Types = frozenset[str]

UNKNOWN: Types = frozenset()

# Mapping capability: an expression inferring exactly this is an attribute map
MAP_TYPE = "IMap"

# Types the renderer accepts directly, without runtime interpretation
PRIMITIVE_TYPES: Types = frozenset(
	{
		"js",
		"clj-nil",
		"element",
		"number",
		"string",
		"boolean",
		"symbol",
		"array",
		"object",
		"function",
	}
)


def is_primitive_renderable(types: Iterable[str]) -> bool:
	"""True if `types` is known and every member is directly renderable."""
	types = frozenset(types)
	return bool(types) and types <= PRIMITIVE_TYPES


@dataclass(frozen=True, slots=True)
class Env:
	"""Immutable lexical environment: local name -> inferred types.

	A local bound to UNKNOWN still shadows any outer binding or global.
	"""

	locals: Mapping[str, Types] = field(default_factory=dict)

	def bind(self, name: str, types: Iterable[str] = UNKNOWN) -> Env:
		return Env({**self.locals, name: frozenset(types)})

	def bind_all(self, names: Iterable[str], types: Iterable[str] = UNKNOWN) -> Env:
		bound = frozenset(types)
		return Env({**self.locals, **{n: bound for n in names}})

	def lookup(self, name: str) -> Types | None:
		return self.locals.get(name)

	def __contains__(self, name: object) -> bool:
		return name in self.locals


class TypeOracle(Protocol):
	def infer_types(self, expr: Any, env: Env) -> Iterable[str]:
		"""Return the statically inferable result types of `expr`.

		Return an empty set for unknown. May raise OracleError.
		"""
		...


class NullOracle:
	"""Oracle that knows nothing. Every expression gets runtime interpretation."""

	def infer_types(self, expr: Any, env: Env) -> Types:
		return UNKNOWN


def infer_types(oracle: TypeOracle, expr: Any, env: Env) -> Types:
	"""Query `oracle`, mapping OracleError to unknown."""
	try:
		return frozenset(oracle.infer_types(expr, env))
	except OracleError as exc:
		logger.debug("Type oracle unavailable for %r: %s", expr, exc)
		return UNKNOWN


def _types(*names: str) -> Types:
	return frozenset(names)


# Return types of well-known core functions, by unqualified name
RETURN_TYPES: dict[str, Types] = {
	**dict.fromkeys(
		("str", "name", "subs", "pr-str", "join", "upper-case", "lower-case"),
		_types("string"),
	),
	**dict.fromkeys(
		("count", "inc", "dec", "+", "-", "*", "/", "mod", "quot", "rem", "max", "min"),
		_types("number"),
	),
	**dict.fromkeys(
		(
			"=",
			"not=",
			"not",
			"<",
			">",
			"<=",
			">=",
			"nil?",
			"some?",
			"empty?",
			"contains?",
			"true?",
			"false?",
		),
		_types("boolean"),
	),
	**dict.fromkeys(
		(
			"hash-map",
			"array-map",
			"sorted-map",
			"assoc",
			"dissoc",
			"merge",
			"select-keys",
			"zipmap",
		),
		_types(MAP_TYPE),
	),
	**dict.fromkeys(("vector", "vec", "mapv", "filterv"), _types("IVector")),
	**dict.fromkeys(("fn", "fn*", "partial", "comp"), _types("function")),
	**dict.fromkeys(("array", "into-array", "to-array"), _types("array")),
	**dict.fromkeys(("js-obj", "clj->js"), _types("object")),
	"create-element": _types("element"),
}


class SyntacticOracle:
	"""Best-effort oracle working from syntax alone.

	- Hinted expressions infer their hint's type
	- Literals infer their own type
	- Symbols infer their local binding, else an entry in `globals`
	- Calls infer `returns` for their head (defaults to RETURN_TYPES)
	- if/when/do infer from their result positions
	"""

	globals: dict[str, Types]
	returns: dict[str, Types]

	def __init__(
		self,
		globals: Mapping[str, Iterable[str]] | None = None,
		returns: Mapping[str, Iterable[str]] | None = None,
	) -> None:
		self.globals = {k: frozenset(v) for k, v in (globals or {}).items()}
		self.returns = dict(RETURN_TYPES)
		if returns:
			self.returns.update({k: frozenset(v) for k, v in returns.items()})

	def infer_types(self, expr: Any, env: Env) -> Types:
		hinted = hint_oracle_type(expr)
		if hinted is not None:
			return _types(hinted)
		expr = unwrap(expr)
		if expr is None:
			return _types("clj-nil")
		if isinstance(expr, bool):
			return _types("boolean")
		if isinstance(expr, (int, float)):
			return _types("number")
		if isinstance(expr, str):
			return _types("string")
		if isinstance(expr, Keyword):
			return _types("keyword")
		if isinstance(expr, dict):
			return _types(MAP_TYPE)
		if isinstance(expr, list):
			return _types("IVector")
		if isinstance(expr, (set, frozenset)):
			return _types("ISet")
		if isinstance(expr, Symbol):
			if expr.ns is None:
				bound = env.lookup(expr.name)
				if bound is not None:
					return bound
			return self.globals.get(str(expr), UNKNOWN)
		if isinstance(expr, Form):
			return self._infer_form(expr, env)
		return UNKNOWN

	def _infer_form(self, form: Form, env: Env) -> Types:
		name = form_name(form)
		if name is None:
			return UNKNOWN
		head = form.head
		if head.ns is None and head.name in env:
			# Shadowed by a local
			return UNKNOWN
		args = form.args
		if name in ("if", "if-not"):
			branches = list(args[1:3])
			if len(branches) < 2:
				branches.append(None)
			return self._union(branches, env)
		if name in ("when", "when-not"):
			if len(args) < 2:
				return _types("clj-nil")
			return self._union([args[-1], None], env)
		if name == "do":
			return self.infer_types(args[-1], env) if args else _types("clj-nil")
		return self.returns.get(name, UNKNOWN)

	def _union(self, exprs: list[Any], env: Env) -> Types:
		result: set[str] = set()
		for e in exprs:
			types = self.infer_types(e, env)
			if not types:
				return UNKNOWN
			result |= types
		return frozenset(result)
