"""Static-type hint resolution.

A type hint names a host type ("String", "Map", ...). The registry maps each
name to a Python type, used for subtype checks, and to the oracle's type
vocabulary, used when a hinted expression is asked for its inferred type.
"""

from __future__ import annotations

import numbers
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from hiccup_compiler.errors import CompileError
from hiccup_compiler.syntax import Keyword, Symbol, hints_of


class Element:
	"""Marker type for an already-constructed element."""


class Js:
	"""Marker type for a raw host value the renderer accepts as is."""


@dataclass(frozen=True, slots=True)
class HintType:
	py_type: type
	oracle_type: str | None = None


# Hint name -> HintType
HINT_REGISTRY: dict[str, HintType] = {}


def register_hint(name: str, py_type: type, oracle_type: str | None = None) -> None:
	"""Register a type hint name.

	Args:
		name: The name as written in source, e.g. "String" or "java.util.Map".
		py_type: Python type used for subtype checks against other hints.
		oracle_type: Matching type in the oracle vocabulary, if any.
	"""
	HINT_REGISTRY[name] = HintType(py_type, oracle_type)


for _names, _py_type, _oracle_type in (
	(("String", "string", "str", "java.lang.String"), str, "string"),
	(("Number", "number", "java.lang.Number"), numbers.Number, "number"),
	(("Long", "long", "int"), int, "number"),
	(("Double", "double", "float"), float, "number"),
	(("Boolean", "boolean", "bool", "java.lang.Boolean"), bool, "boolean"),
	(("Keyword", "cljs.core/Keyword"), Keyword, None),
	(("Symbol", "cljs.core/Symbol"), Symbol, "symbol"),
	(("Map", "IMap", "cljs.core/IMap", "java.util.Map", "dict"), Mapping, "IMap"),
	(("Vector", "IVector", "cljs.core/IVector", "list"), list, "IVector"),
	(("Seq", "ISeq", "cljs.core/ISeq"), Sequence, None),
	(("Array", "array"), list, "array"),
	(("Object", "object"), object, "object"),
	(("Function", "function", "fn"), Callable, "function"),  # pyright: ignore[reportArgumentType]
	(("Element", "js/React.Element", "element"), Element, "element"),
	(("js",), Js, "js"),
):
	for _name in _names:
		register_hint(_name, _py_type, _oracle_type)


def resolve_hint(x: Any) -> HintType | None:
	"""Resolve the type hint carried by x, or None when x has no type hint.

	Raises CompileError for a hint name that is not registered.
	"""
	h = hints_of(x)
	if h is None or h.tag is None:
		return None
	if isinstance(h.tag, type):
		return HintType(h.tag)
	resolved = HINT_REGISTRY.get(h.tag)
	if resolved is None:
		raise CompileError(f"Unknown type hint '{h.tag}'", x)
	return resolved


_NUMERIC_TYPES = (int, numbers.Number, numbers.Complex, numbers.Real, numbers.Integral)


def _is_subtype(sub: type, sup: type) -> bool:
	# Host booleans are not numbers, although Python's bool subclasses int
	if sub is bool and sup in _NUMERIC_TYPES:
		return False
	try:
		return issubclass(sub, sup)
	except TypeError:
		# Generic aliases and protocols without runtime support
		return False


def hint_is(x: Any, sup: type) -> bool:
	"""True if x is hinted to be a subtype of `sup`."""
	resolved = resolve_hint(x)
	return resolved is not None and _is_subtype(resolved.py_type, sup)


def hint_is_not(x: Any, sup: type) -> bool:
	"""True if x carries a type hint that is not a subtype of `sup`."""
	resolved = resolve_hint(x)
	return resolved is not None and not _is_subtype(resolved.py_type, sup)


def hint_oracle_type(x: Any) -> str | None:
	"""Oracle type named by x's type hint, if it has one."""
	resolved = resolve_hint(x)
	return resolved.oracle_type if resolved is not None else None
