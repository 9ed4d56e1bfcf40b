"""
End-to-end tests for element lowering: markup source in, emitted code out.
"""

import logging
import numbers
from typing import Any

import pytest
from hiccup_compiler.compiler import Compiler, compile_markup, compile_source
from hiccup_compiler.config import CompilerConfig
from hiccup_compiler.errors import CompileError
from hiccup_compiler.hints import hint_is
from hiccup_compiler.nodes import (
	NIL,
	Array,
	Call,
	ExprNode,
	Identifier,
	Let,
	Literal,
	Object,
	Source,
	emit,
)
from hiccup_compiler.oracle import Env, SyntacticOracle
from hiccup_compiler.reader import read
from hiccup_compiler.syntax import Symbol

CE = "daiquiri.core/create-element"
INTERPRET = "daiquiri.interpreter/interpret"
ATTRIBUTES = "daiquiri.interpreter/attributes"


def compile_str(source: str, **kwargs: Any) -> str:
	return emit(compile_markup(read(source), **kwargs))


def evaluate(node: ExprNode) -> Any:
	"""Evaluate fully static constructor calls into plain data."""
	if isinstance(node, Literal):
		return node.value
	if isinstance(node, Identifier):
		return node.name
	if isinstance(node, Array):
		return [evaluate(e) for e in node.elements]
	if isinstance(node, Object):
		return {k: evaluate(v) for k, v in node.props}
	if isinstance(node, Call) and node.callee == Identifier(CE):
		tag, attrs, content = node.args
		return {
			"tag": evaluate(tag),
			"attrs": evaluate(attrs) or {},
			"children": evaluate(content) or [],
		}
	raise AssertionError(f"Not a static node: {node!r}")


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
	def test_literal_element(self):
		node = compile_markup(read('[:span {:class "a"} "hi"]'))
		assert node == Call(
			Identifier(CE),
			[
				Literal("span"),
				Object([("class", Literal("a"))]),
				Array([Literal("hi")]),
			],
		)
		assert emit(node) == f'({CE} "span" #js {{"class" "a"}} #js ["hi"])'

	def test_shorthand_merged_with_map_and_dynamic_child(self):
		out = compile_str('[:div#id.foo {:class "bar"} child]')
		assert out == f'({CE} "div" #js {{"id" "id", "class" "foo bar"}} #js [({INTERPRET} child)])'

	def test_fragment(self):
		out = compile_str('[:* "a" "b"]')
		assert out == f'({CE} daiquiri.core/fragment nil #js ["a" "b"])'
		assert compile_str("[:<>]") == f"({CE} daiquiri.core/fragment nil nil)"

	def test_if_branches_lowered(self):
		out = compile_str('(if test [:span "yes"] [:span "no"])')
		assert out == (
			f'(if test ({CE} "span" nil #js ["yes"]) ({CE} "span" nil #js ["no"]))'
		)

	def test_dynamic_tag_defers_to_interpreter(self):
		node = compile_markup(read("[x]"))
		assert emit(node) == f"({INTERPRET} [x])"
		assert node.render() == {
			"t": "call",
			"callee": {"t": "id", "name": INTERPRET},
			"args": [{"t": "vector", "items": [{"t": "source", "code": "x"}]}],
		}


# =============================================================================
# Strategies
# =============================================================================


class TestAllLiteral:
	def test_empty_content_and_attrs(self):
		assert compile_str("[:br]") == f"({CE} \"br\" nil nil)"

	def test_nested_sequences_are_spliced(self):
		out = compile_str('[:ul [[:li "a"] [:li "b"]] "c"]')
		assert out == (
			f'({CE} "ul" nil #js [({CE} "li" nil #js ["a"]) ({CE} "li" nil #js ["b"]) "c"])'
		)

	def test_evaluates_like_the_source(self):
		node = compile_markup(read('[:div#app.main {:title "t"} [:p.lead "x"] "y"]'))
		assert evaluate(node) == {
			"tag": "div",
			"attrs": {"id": "app", "class": "main", "title": "t"},
			"children": [
				{"tag": "p", "attrs": {"class": "lead"}, "children": ["x"]},
				"y",
			],
		}

	def test_logs_compile_time_evaluation(self, caplog: pytest.LogCaptureFixture):
		caplog.set_level(logging.DEBUG, logger="hiccup_compiler.compiler")
		compile_str('[:span "a"]')
		messages = [r.getMessage() for r in caplog.records]
		assert any("as all-literal" in m for m in messages)
		assert any("Evaluated literal element" in m for m in messages)


class TestLiteralTagAndAttributes:
	def test_dynamic_attribute_value(self):
		out = compile_str("[:input {:value v :on-change f}]")
		assert out == f'({CE} "input" #js {{"value" v, "onChange" f}} nil)'

	def test_empty_map(self):
		assert compile_str("[:span {} x]") == f'({CE} "span" nil #js [({INTERPRET} x)])'

	def test_form_keyed_map_merged_at_runtime(self):
		out = compile_str("[:div {(keyword k) 1} x]")
		assert out == (
			f"({CE} \"div\" ({ATTRIBUTES} {{(keyword k) 1}}) #js [({INTERPRET} x)])"
		)

	def test_class_set_with_dynamic_member(self):
		out = compile_str('[:div {:class #{(f) "a"}} x]')
		assert out.startswith(
			f'({CE} "div" #js {{"class" (daiquiri.util/join-classes ["a" (f)])}}'
		)

	def test_static_class_vector_with_nil(self):
		out = compile_str('[:div {:class ["a" nil]} x]')
		assert out.startswith(f'({CE} "div" #js {{"class" "a"}}')


class TestLiteralTagAndNoAttributes:
	def test_string_hint(self):
		assert compile_str("[:span ^String x]") == f'({CE} "span" nil #js [x])'

	def test_literal_second_position(self):
		assert compile_str('[:span "a" ^String c]') == f'({CE} "span" nil #js ["a" c])'

	def test_for_form_is_materialized(self):
		out = compile_str("[:ul (for [i (range 3)] [:li {} i])]")
		assert out == (
			f'({CE} "ul" nil #js [(cljs.core/into-array (for [i (range 3)]'
			f' ({CE} "li" nil #js [({INTERPRET} i)])))])'
		)


class TestLiteralTagAndHintedAttributes:
	def test_attrs_hint(self):
		node = compile_markup(read('[:span ^:attrs y "t"]'))
		assert node == Let(
			"attrs0",
			Source(Symbol("y")),
			Call(
				Identifier(CE),
				[
					Literal("span"),
					Call(Identifier(ATTRIBUTES), [Identifier("attrs0")]),
					Array([Literal("t")]),
				],
			),
		)

	def test_shorthand_merged_at_runtime(self):
		out = compile_str("[:div.a ^:attrs y]")
		assert out == (
			f"(let [attrs0 y] ({CE} \"div\" ({ATTRIBUTES}"
			' (daiquiri.normalize/merge-with-class {:class ["a"]} attrs0)) nil))'
		)

	def test_oracle_proven_map(self):
		oracle = SyntacticOracle()
		out = compile_str("[:span (assoc m :a 1)]", oracle=oracle)
		assert out == f'(let [attrs0 (assoc m :a 1)] ({CE} "span" ({ATTRIBUTES} attrs0) nil))'


class TestLiteralTagAndInlineContent:
	def test_inline_form_passes_through(self):
		assert compile_str("[:span ^:inline (f x)]") == f'({CE} "span" nil #js [(f x)])'


class TestLiteralTag:
	def test_runtime_map_check(self):
		out = compile_str('[:span x "y"]')
		assert out == (
			f'(let [attrs0 x] ({CE} "span"'
			f" (if (cljs.core/map? attrs0) ({ATTRIBUTES} attrs0) nil)"
			f' (if (cljs.core/map? attrs0) #js ["y"] #js [({INTERPRET} attrs0) "y"])))'
		)

	def test_shorthand_attrs_in_both_branches(self):
		node = compile_markup(read("[:div.a x]"))
		assert isinstance(node, Let)
		create = node.body
		assert isinstance(create, Call)
		attrs_branch = create.args[1]
		assert emit(attrs_branch) == (
			f"(if (cljs.core/map? attrs0) ({ATTRIBUTES}"
			' (daiquiri.normalize/merge-with-class {:class ["a"]} attrs0))'
			' #js {"class" "a"})'
		)

	def test_content_splices_without_shorthand_attrs(self):
		node = compile_markup(read("[:span x]"))
		assert isinstance(node, Let)
		children = node.body.args[2]  # pyright: ignore[reportAttributeAccessIssue]
		assert emit(children) == (
			f"(if (cljs.core/map? attrs0) nil #js [({INTERPRET} attrs0)])"
		)

	def test_renderable_value_is_not_interpreted(self):
		oracle = SyntacticOracle({"title": ["string"]})
		out = compile_str("[:h1 title]", oracle=oracle)
		assert "#js [attrs0]" in out
		assert INTERPRET not in out

	def test_fresh_names_avoid_input_symbols(self):
		out = compile_str("[:span attrs0 (f attrs1)]")
		assert out.startswith("(let [attrs2 attrs0]")

	def test_fresh_names_are_unique(self):
		out = compile_str("[:div [:span x] [:span y]]")
		assert "(let [attrs0 x]" in out
		assert "(let [attrs1 y]" in out


class TestDefault:
	def test_vector_children_compiled(self):
		out = compile_str('[x [:b "y"] z]')
		assert out == f'({INTERPRET} [x ({CE} "b" nil #js ["y"]) z])'

	def test_symbol_tag_with_attrs(self):
		assert compile_str("[my-comp {:a 1}]") == f"({INTERPRET} [my-comp {{:a 1}}])"


# =============================================================================
# Dispatch
# =============================================================================


class TestCompileMarkup:
	def test_literals_unchanged(self):
		assert compile_markup("hi") == Literal("hi")
		assert compile_markup(None) == NIL
		assert compile_markup(read(":k")) == Source(read(":k"))

	def test_string_and_number_hints_unchanged(self):
		assert compile_str("^String x") == "x"
		assert compile_str("^Number (count xs)") == "(count xs)"

	def test_boolean_hint_is_not_a_number(self):
		assert not hint_is(read("^Boolean b"), numbers.Number)
		assert compile_str("^Boolean b") == f"({INTERPRET} b)"
		assert compile_str("[:p {} ^Boolean b]") == f'({CE} "p" nil #js [({INTERPRET} b)])'

	def test_unknown_expression_interpreted(self):
		assert compile_str("x") == f"({INTERPRET} x)"

	def test_oracle_skips_interpretation(self):
		oracle = SyntacticOracle({"n": ["number"]})
		assert compile_str("[:p {} n]", oracle=oracle) == f'({CE} "p" nil #js [n])'

	def test_env_shadows_oracle_global(self):
		oracle = SyntacticOracle({"n": ["number"]})
		out = compile_str("[:p {} n]", oracle=oracle, env=Env().bind("n"))
		assert out == f'({CE} "p" nil #js [({INTERPRET} n)])'

	def test_custom_runtime_names(self):
		config = CompilerConfig(create_element="h", interpret="i")
		assert compile_str("[:br]", config=config) == '(h "br" nil nil)'
		assert compile_str("[x]", config=config) == "(i [x])"

	def test_compile_source(self):
		nodes = compile_source("[:br]\nx")
		assert [emit(n) for n in nodes] == [f'({CE} "br" nil nil)', f"({INTERPRET} x)"]

	def test_each_top_level_form_is_independent(self):
		nodes = compile_source("[:i x] [:b y]")
		assert [n.name for n in nodes] == ["attrs0", "attrs0"]  # pyright: ignore[reportAttributeAccessIssue]

	def test_compiler_instance(self):
		compiler = Compiler()
		assert emit(compiler.compile(read("[:br]"))) == f'({CE} "br" nil nil)'


class TestShapeFaults:
	def test_empty_vector(self):
		with pytest.raises(CompileError, match=r"Element vector is empty: \[\]"):
			compile_str("[]")

	def test_nested_empty_vector(self):
		with pytest.raises(CompileError):
			compile_str("[:div {} (if x [] [:b])]")

	def test_bad_literal_tag(self):
		with pytest.raises(CompileError, match="Element tag must be"):
			compile_str('[1 "x"]')

	def test_unknown_hint(self):
		with pytest.raises(CompileError, match="Unknown type hint"):
			compile_str("[:span ^Bogus x]")
