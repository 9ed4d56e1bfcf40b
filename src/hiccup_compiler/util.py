from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from hiccup_compiler.syntax import Keyword, Symbol, unwrap


def camel_case(key: Any) -> Any:
	"""Convert a kebab-case key to camelCase, keeping its type.

	`data-*` and `aria-*` keys are left alone. Non-name keys pass through.
	"""
	key = unwrap(key)
	if not isinstance(key, (Keyword, Symbol, str)):
		return key
	name = key if isinstance(key, str) else key.name
	first, *words = name.split("-")
	if not words or first in ("aria", "data"):
		return key
	converted = first + "".join(w.capitalize() for w in words)
	if isinstance(key, Keyword):
		return Keyword(converted)
	if isinstance(key, Symbol):
		return Symbol(converted)
	return converted


def camel_case_keys(m: Any) -> Any:
	"""camel_case every key of a map. Other values pass through."""
	if not isinstance(unwrap(m), dict):
		return m
	return {camel_case(k): v for k, v in unwrap(m).items()}


def join_classes(classes: Iterable[Any]) -> str:
	"""Join static class tokens with spaces, skipping nil."""
	return " ".join(
		c if isinstance(c, str) else c.name
		for c in (unwrap(c) for c in classes)
		if c is not None
	)
