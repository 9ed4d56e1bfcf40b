"""Attribute compilation and merging.

Lowers attribute maps into object literals where their shape is static and
into runtime `attributes` calls where it is not.
"""

from __future__ import annotations

from typing import Any

from hiccup_compiler.config import CompilerConfig
from hiccup_compiler.errors import CompileError
from hiccup_compiler.nodes import Array, Call, ExprNode, Identifier, Literal, Object
from hiccup_compiler.normalize import Normalizer
from hiccup_compiler.syntax import Keyword, is_literal, is_map, pr_str, unwrap
from hiccup_compiler.util import camel_case_keys, join_classes


def is_empty_attrs(x: Any) -> bool:
	"""nil or an empty static map."""
	if isinstance(x, ExprNode):
		return False
	x = unwrap(x)
	return x is None or (isinstance(x, dict) and not x)


def _attr_name(key: Any) -> str | None:
	key = unwrap(key)
	if isinstance(key, Keyword):
		return key.name
	if isinstance(key, str):
		return key
	return None


def _object_key(key: Any) -> str:
	key = unwrap(key)
	if isinstance(key, Keyword):
		return key.name
	if isinstance(key, str):
		return key
	return pr_str(key)


class AttributeCompiler:
	"""Compiles attribute maps into constructor-level expressions."""

	config: CompilerConfig
	normalizer: Normalizer

	def __init__(self, config: CompilerConfig, normalizer: Normalizer) -> None:
		self.config = config
		self.normalizer = normalizer

	def runtime_attributes(self, value: Any) -> Call:
		"""(attributes value)"""
		return Call(Identifier(self.config.attributes), [ExprNode.of(unwrap(value))])

	# --- Value lowering ------------------------------------------------------

	def to_js(self, x: Any) -> ExprNode:
		"""Lower a value into a constructor-level literal where possible."""
		if isinstance(x, ExprNode):
			return x
		x = unwrap(x)
		if isinstance(x, Keyword):
			return Literal(x.name)
		if isinstance(x, dict):
			return self.to_js_map(x)
		if isinstance(x, list):
			return self.to_js_array(x)
		return ExprNode.of(x)

	def to_js_map(self, m: dict[Any, Any]) -> ExprNode:
		"""Object literal when every key is static, else a runtime conversion."""
		m = unwrap(m)
		if all(is_literal(k) for k in m):
			return Object([(_object_key(k), self.to_js(v)) for k, v in m.items()])
		return self.runtime_attributes(m)

	def to_js_array(self, items: list[Any]) -> Array:
		return Array([self.to_js(x) for x in items])

	# --- Attributes ----------------------------------------------------------

	def compile_attr(self, name: Any, value: Any) -> ExprNode:
		attr = _attr_name(name)
		if attr == "class":
			return self._compile_class(value)
		if attr == "style":
			return self._compile_style(value)
		return self.to_js(value)

	def _compile_class(self, value: Any) -> ExprNode:
		value = unwrap(value)
		if value is None or isinstance(value, (Keyword, str)):
			return self.to_js(value)
		if isinstance(value, (list, set, frozenset)) and all(
			c is None or isinstance(unwrap(c), (str, Keyword)) for c in value
		):
			tokens = sorted(value, key=pr_str) if not isinstance(value, list) else value
			return Literal(join_classes(tokens))
		return Call(Identifier(self.config.join_classes), [ExprNode.of(value)])

	def _compile_style(self, value: Any) -> ExprNode:
		value = camel_case_keys(value)
		if is_map(value):
			return self.to_js_map(value)
		return self.runtime_attributes(value)

	def compile_attributes(self, attrs: Any) -> ExprNode | None:
		"""Compile an attribute map. None when there is nothing to compile."""
		if is_empty_attrs(attrs):
			return None
		attrs = unwrap(attrs)
		if not isinstance(attrs, dict):
			raise CompileError("Attributes must be a map", attrs)
		if not all(is_literal(k) for k in attrs):
			return self.runtime_attributes(attrs)
		compiled = {k: self.compile_attr(k, v) for k, v in attrs.items()}
		return self.to_js_map(self.normalizer.html_to_dom_attrs(compiled))

	def merge_attributes(self, a: Any, b: Any) -> ExprNode | None:
		"""Merge two attribute sources with class-union semantics.

		Static maps merge now; anything dynamic merges at runtime.
		"""
		a_empty = is_empty_attrs(a)
		b_empty = is_empty_attrs(b)
		if a_empty and b_empty:
			return None
		if a_empty:
			return self.runtime_attributes(b)
		if b_empty:
			return self.runtime_attributes(a)
		if is_map(a) and is_map(b):
			return self.compile_attributes(
				self.normalizer.merge_with_class(unwrap(a), unwrap(b))
			)
		merged = Call(
			Identifier(self.config.merge_with_class),
			[ExprNode.of(unwrap(a)), ExprNode.of(unwrap(b))],
		)
		return self.runtime_attributes(merged)
