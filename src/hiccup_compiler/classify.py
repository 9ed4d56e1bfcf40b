"""Element classification.

Picks the lowering strategy for one hiccup vector from its shape and hints.
The checks run in priority order; the first match wins.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal, TypeAlias, get_args

from hiccup_compiler.errors import CompileError
from hiccup_compiler.hints import hint_is_not
from hiccup_compiler.oracle import MAP_TYPE, Env, TypeOracle, infer_types
from hiccup_compiler.syntax import (
	form_name,
	hints_of,
	is_literal,
	is_map,
	is_unevaluated,
	unwrap,
)

Strategy: TypeAlias = Literal[
	"all-literal",  # [:span "foo"]
	"literal-tag-and-attributes",  # [:span {} x]
	"literal-tag-and-no-attributes",  # [:span ^String x]
	"literal-tag-and-hinted-attributes",  # [:span ^:attrs y], [:span (attrs)]
	"literal-tag-and-inline-content",  # [:span ^:inline (y)]
	"literal-tag",  # [:span x]
	"default",  # [x]
]

STRATEGIES: tuple[Strategy, ...] = get_args(Strategy)


def is_not_implicit_map(x: Any) -> bool:
	"""True if x provably does not evaluate to a map."""
	return form_name(x) == "for" or not is_unevaluated(x) or hint_is_not(x, Mapping)


def has_attrs_hint(x: Any) -> bool:
	h = hints_of(x)
	return h is not None and h.attrs


def has_inline_hint(x: Any) -> bool:
	h = hints_of(x)
	return h is not None and h.inline


def classify(node: Sequence[Any], oracle: TypeOracle, env: Env) -> Strategy:
	"""Return the compile strategy for a hiccup vector."""
	node = unwrap(node)
	if not node:
		raise CompileError("Element vector is empty", node)
	tag = node[0]
	attrs = node[1] if len(node) > 1 else None

	if all(is_literal(x) for x in node):
		return "all-literal"
	if not is_literal(tag):
		return "default"
	if is_map(attrs):
		return "literal-tag-and-attributes"
	if is_not_implicit_map(attrs):
		return "literal-tag-and-no-attributes"
	if has_attrs_hint(attrs) or infer_types(oracle, attrs, env) == {MAP_TYPE}:
		return "literal-tag-and-hinted-attributes"
	if has_inline_hint(attrs):
		return "literal-tag-and-inline-content"
	return "literal-tag"
