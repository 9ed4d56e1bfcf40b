"""Hiccup to element-constructor compiler.

Every hiccup vector is classified (see `hiccup_compiler.classify`) and lowered
by the matching strategy. Whatever cannot be resolved statically is handed to
the runtime interpreter.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Callable, Sequence
from typing import Any

from hiccup_compiler.attributes import AttributeCompiler
from hiccup_compiler.classify import Strategy, classify
from hiccup_compiler.config import CompilerConfig
from hiccup_compiler.forms import compile_form
from hiccup_compiler.hints import hint_is
from hiccup_compiler.nodes import (
	NIL,
	Array,
	Call,
	ExprNode,
	Identifier,
	Let,
	Ternary,
	Vector,
	lit_name,
)
from hiccup_compiler.normalize import DefaultNormalizer, Normalizer
from hiccup_compiler.oracle import (
	Env,
	NullOracle,
	TypeOracle,
	infer_types,
	is_primitive_renderable,
)
from hiccup_compiler.reader import read_all
from hiccup_compiler.syntax import (
	Form,
	Hinted,
	Symbol,
	eval_literal,
	is_element,
	is_literal,
	is_vector,
	pr_str,
	unwrap,
)

logger = logging.getLogger(__name__)

FRAGMENT_TAGS = frozenset({"*", "<>"})

ElementCompiler = Callable[[list[Any], Env], ExprNode]


def symbol_names(x: Any) -> set[str]:
	"""Every symbol name appearing anywhere in x, qualified and unqualified."""
	names: set[str] = set()
	stack = [x]
	while stack:
		item = stack.pop()
		if isinstance(item, Hinted):
			stack.append(item.expr)
		elif isinstance(item, Symbol):
			names.add(item.name)
			names.add(str(item))
		elif isinstance(item, Form):
			stack.extend(item.items)
		elif isinstance(item, dict):
			stack.extend(item.keys())
			stack.extend(item.values())
		elif isinstance(item, (list, set, frozenset)):
			stack.extend(item)
	return names


class Compiler:
	"""Compile hiccup markup into an output expression tree.

	One instance compiles one top-level expression. Fresh local names are
	drawn from `config.temp_prefix` and never collide with a symbol of the
	input.
	"""

	config: CompilerConfig
	oracle: TypeOracle
	normalizer: Normalizer
	attrs: AttributeCompiler
	reserved: set[str]
	_temp_counter: int
	_element_compilers: dict[Strategy, ElementCompiler]

	def __init__(
		self,
		config: CompilerConfig | None = None,
		oracle: TypeOracle | None = None,
		normalizer: Normalizer | None = None,
	) -> None:
		self.config = config or CompilerConfig()
		self.oracle = oracle or NullOracle()
		self.normalizer = normalizer or DefaultNormalizer()
		self.attrs = AttributeCompiler(self.config, self.normalizer)
		self.reserved = set()
		self._temp_counter = 0
		self._element_compilers = {
			"all-literal": self._compile_all_literal,
			"literal-tag-and-attributes": self._compile_literal_tag_and_attributes,
			"literal-tag-and-no-attributes": self._compile_without_attributes,
			"literal-tag-and-hinted-attributes": self._compile_hinted_attributes,
			"literal-tag-and-inline-content": self._compile_without_attributes,
			"literal-tag": self._compile_literal_tag,
			"default": self._compile_default,
		}

	def init_temp_counter(self, content: Any) -> None:
		"""Reserve every symbol name of `content` for fresh-name generation."""
		self.reserved |= symbol_names(content)
		counter = self._temp_counter
		while f"{self.config.temp_prefix}{counter}" in self.reserved:
			counter += 1
		self._temp_counter = counter

	def _fresh_temp(self) -> str:
		"""Generate a fresh local name."""
		while True:
			name = f"{self.config.temp_prefix}{self._temp_counter}"
			self._temp_counter += 1
			if name not in self.reserved:
				self.reserved.add(name)
				return name

	# --- Entrypoint ---------------------------------------------------------

	def compile(self, content: Any, env: Env | None = None) -> ExprNode:
		"""Compile one top-level markup expression."""
		self.init_temp_counter(content)
		return self.compile_markup(content, env or Env())

	def compile_markup(self, content: Any, env: Env) -> ExprNode:
		"""Top-level dispatch.

		Vectors are elements, literals and String/Number hinted values pass
		through, everything else is a control form or an opaque expression.
		"""
		if is_vector(content):
			return self.compile_element(content, env)
		if is_literal(content):
			return ExprNode.of(unwrap(content))
		if hint_is(content, str) or hint_is(content, numbers.Number):
			return ExprNode.of(unwrap(content))
		return compile_form(content, env, self)

	def interpret_maybe(self, expr: ExprNode, source: Any, env: Env) -> ExprNode:
		"""Wrap `expr` in the runtime interpreter unless `source` is known to render."""
		if is_primitive_renderable(infer_types(self.oracle, source, env)):
			return expr
		return Call(Identifier(self.config.interpret), [expr])

	# --- Elements -----------------------------------------------------------

	def compile_element(self, node: Any, env: Env) -> ExprNode:
		strategy = classify(node, self.oracle, env)
		logger.debug("Compiling %s as %s", pr_str(node), strategy)
		return self._element_compilers[strategy](unwrap(node), env)

	def compile_tag(self, tag: str) -> ExprNode:
		if tag in FRAGMENT_TAGS:
			return Identifier(self.config.fragment)
		return lit_name(tag)

	def create_element(
		self,
		tag: ExprNode,
		attrs: ExprNode | None,
		children: Sequence[ExprNode],
	) -> Call:
		"""(create-element tag attrs children), nil for empty parts."""
		return Call(
			Identifier(self.config.create_element),
			[tag, attrs or NIL, self.content_array(children)],
		)

	def content_array(self, children: Sequence[ExprNode]) -> ExprNode:
		return Array(list(children)) if children else NIL

	def _compile_content(self, content: Sequence[Any], env: Env) -> list[ExprNode]:
		return [self.compile_markup(c, env) for c in content]

	def compile_react_element(self, element: Any) -> Call:
		"""Lower an evaluated literal element."""
		tag, attrs, content = self.normalizer.element(element)
		return self.create_element(
			self.compile_tag(tag),
			self.attrs.compile_attributes(attrs),
			self.compile_react(content),
		)

	def compile_react(self, content: Sequence[Any]) -> list[ExprNode]:
		"""Lower literal content, splicing nested non-element sequences."""
		out: list[ExprNode] = []
		for x in content:
			if is_element(x):
				out.append(self.compile_react_element(x))
			elif is_vector(x):
				out.extend(self.compile_react(unwrap(x)))
			else:
				out.append(ExprNode.of(x))
		return out

	def _compile_all_literal(self, node: list[Any], env: Env) -> ExprNode:
		value = eval_literal(node)
		logger.debug("Evaluated literal element at compile time: %s", pr_str(value))
		return self.compile_react_element(value)

	def _compile_literal_tag_and_attributes(self, node: list[Any], env: Env) -> ExprNode:
		tag, attrs, *content = node
		name, merged, _ = self.normalizer.element([tag, attrs])
		return self.create_element(
			self.compile_tag(name),
			self.attrs.compile_attributes(merged),
			self._compile_content(content, env),
		)

	def _compile_without_attributes(self, node: list[Any], env: Env) -> ExprNode:
		tag, *content = node
		return self.compile_element([tag, {}, *content], env)

	def _compile_hinted_attributes(self, node: list[Any], env: Env) -> ExprNode:
		tag, attrs, *content = node
		name, tag_attrs, _ = self.normalizer.element([tag])
		temp = self._fresh_temp()
		return Let(
			temp,
			ExprNode.of(unwrap(attrs)),
			self.create_element(
				self.compile_tag(name),
				self.attrs.merge_attributes(tag_attrs, Identifier(temp)),
				self._compile_content(content, env),
			),
		)

	def _compile_literal_tag(self, node: list[Any], env: Env) -> ExprNode:
		"""Second position unknown: decide between attributes and content at runtime."""
		tag, attrs, *content = node
		name, tag_attrs, _ = self.normalizer.element([tag])
		temp = self._fresh_temp()
		ref = Identifier(temp)
		is_map = Call(Identifier(self.config.is_map), [ref])
		compiled = self._compile_content(content, env)
		attrs_if_map = self.attrs.merge_attributes(tag_attrs, ref) or NIL
		attrs_else = self.attrs.compile_attributes(tag_attrs) or NIL
		children_else = Array([self.interpret_maybe(ref, attrs, env), *compiled])
		return Let(
			temp,
			ExprNode.of(unwrap(attrs)),
			Call(
				Identifier(self.config.create_element),
				[
					self.compile_tag(name),
					Ternary(is_map, attrs_if_map, attrs_else),
					Ternary(is_map, self.content_array(compiled), children_else),
				],
			),
		)

	def _compile_default(self, node: list[Any], env: Env) -> ExprNode:
		head, *rest = node
		items = [ExprNode.of(unwrap(head))]
		for x in rest:
			if is_vector(x):
				items.append(self.compile_element(x, env))
			else:
				items.append(ExprNode.of(unwrap(x)))
		return Call(Identifier(self.config.interpret), [Vector(items)])


def compile_markup(
	content: Any,
	*,
	config: CompilerConfig | None = None,
	oracle: TypeOracle | None = None,
	normalizer: Normalizer | None = None,
	env: Env | None = None,
) -> ExprNode:
	"""Compile one markup value with a fresh compiler."""
	return Compiler(config, oracle, normalizer).compile(content, env)


def compile_source(
	text: str,
	*,
	config: CompilerConfig | None = None,
	oracle: TypeOracle | None = None,
	normalizer: Normalizer | None = None,
) -> list[ExprNode]:
	"""Read `text` and compile each top-level form independently."""
	return [
		compile_markup(form, config=config, oracle=oracle, normalizer=normalizer)
		for form in read_all(text)
	]
