"""Default normalizer: tag shorthand, class-aware merging and attribute names.

The compiler talks to this module through the `Normalizer` protocol so that a
host can plug in its own rules. The runtime side of `merge_with_class` must
follow the exact same class-union rule as `DefaultNormalizer.merge_with_class`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from hiccup_compiler.errors import CompileError
from hiccup_compiler.syntax import (
	Keyword,
	is_element,
	is_map,
	name_of,
	pr_str,
	unwrap,
)
from hiccup_compiler.util import camel_case

CLASS = Keyword("class")
ID = Keyword("id")

_TAG_RE = re.compile(r"([^\s.#]*)(?:#([^\s.#]+))?(?:\.([^\s#]+))?")

# Attribute names the renderer spells differently
ATTRIBUTE_RENAMES: dict[str, str] = {
	"for": "htmlFor",
}


class Normalizer(Protocol):
	def element(self, node: Sequence[Any]) -> tuple[str, dict[Any, Any], list[Any]]:
		"""Split a node into (tag name, merged attributes, flattened content)."""
		...

	def merge_with_class(self, *maps: Mapping[Any, Any] | None) -> dict[Any, Any]:
		"""Right-biased merge where class tokens are concatenated."""
		...

	def html_to_dom_attrs(self, attrs: Mapping[Any, Any]) -> dict[Any, Any]:
		"""Translate markup attribute names to the renderer's names."""
		...


def parse_tag(tag: Any) -> tuple[str, dict[Any, Any]]:
	"""Split `div#id.a.b` into ("div", {:id "id", :class ["a" "b"]}).

	An empty tag name defaults to "div".
	"""
	try:
		raw = name_of(tag)
	except TypeError:
		raise CompileError("Element tag must be a keyword, symbol or string", tag) from None
	m = _TAG_RE.fullmatch(raw)
	if m is None:
		raise CompileError("Invalid tag shorthand", tag)
	name, id_, classes = m.groups()
	attrs: dict[Any, Any] = {}
	if id_:
		attrs[ID] = id_
	if classes:
		attrs[CLASS] = [c for c in classes.split(".") if c]
	return name or "div", attrs


def is_class_key(key: Any) -> bool:
	key = unwrap(key)
	return key == CLASS or key == "class"


def class_tokens(value: Any) -> list[Any]:
	"""Normalize a class value into a list of tokens.

	Strings and keywords become one token, static collections their items,
	nil nothing. A dynamic expression stays a single opaque item.
	"""
	value = unwrap(value)
	if value is None:
		return []
	if isinstance(value, Keyword):
		return [value.name]
	if isinstance(value, str):
		return [value]
	if isinstance(value, list):
		return [v.name if isinstance(v, Keyword) else v for v in value]
	if isinstance(value, (set, frozenset)):
		return [v.name if isinstance(v, Keyword) else v for v in sorted(value, key=pr_str)]
	return [value]


def children(content: Sequence[Any]) -> list[Any]:
	"""Flatten nested non-element vectors into one content list."""
	out: list[Any] = []
	for item in content:
		u = unwrap(item)
		if isinstance(u, list) and not is_element(u):
			out.extend(children(u))
		else:
			out.append(item)
	return out


class DefaultNormalizer:
	"""Hiccup normalization rules used when no normalizer is supplied."""

	def element(self, node: Sequence[Any]) -> tuple[str, dict[Any, Any], list[Any]]:
		node = unwrap(node)
		if not node:
			raise CompileError("Element vector is empty", node)
		tag, *rest = node
		name, tag_attrs = parse_tag(tag)
		map_attrs: Mapping[Any, Any] | None = None
		if rest and is_map(rest[0]):
			map_attrs = unwrap(rest[0])
			rest = rest[1:]
		return name, self.merge_with_class(tag_attrs, map_attrs), children(rest)

	def merge_with_class(self, *maps: Mapping[Any, Any] | None) -> dict[Any, Any]:
		result: dict[Any, Any] = {}
		classes: list[Any] = []
		for m in maps:
			for key, value in (unwrap(m) or {}).items():
				if is_class_key(key):
					classes.extend(class_tokens(value))
					result.setdefault(CLASS, classes)
				else:
					result[key] = value
		if not classes:
			result.pop(CLASS, None)
		return result

	def html_to_dom_attrs(self, attrs: Mapping[Any, Any]) -> dict[Any, Any]:
		result: dict[Any, Any] = {}
		for key, value in attrs.items():
			k = unwrap(key)
			if isinstance(k, (Keyword, str)):
				name = name_of(k)
				k = ATTRIBUTE_RENAMES.get(name) or camel_case(name)
			result[k] = value
		return result
