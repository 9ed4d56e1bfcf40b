"""
Tests for the default normalizer and the attribute-name utilities.
"""

import pytest
from hiccup_compiler.errors import CompileError
from hiccup_compiler.normalize import (
	CLASS,
	ID,
	DefaultNormalizer,
	children,
	class_tokens,
	parse_tag,
)
from hiccup_compiler.syntax import Form, Keyword, Symbol
from hiccup_compiler.util import camel_case, camel_case_keys, join_classes

K = Keyword
S = Symbol

normalizer = DefaultNormalizer()


class TestParseTag:
	def test_plain(self):
		assert parse_tag(K("span")) == ("span", {})

	def test_id_and_classes(self):
		assert parse_tag(K("div#main.a.b")) == ("div", {ID: "main", CLASS: ["a", "b"]})

	def test_class_only(self):
		assert parse_tag(K("p.lead")) == ("p", {CLASS: ["lead"]})

	def test_empty_name_defaults_to_div(self):
		assert parse_tag(K("#app")) == ("div", {ID: "app"})
		assert parse_tag(K(".x")) == ("div", {CLASS: ["x"]})

	def test_string_tag(self):
		assert parse_tag("li") == ("li", {})

	def test_fragment_tags(self):
		assert parse_tag(K("*")) == ("*", {})
		assert parse_tag(K("<>")) == ("<>", {})

	def test_invalid_tag(self):
		with pytest.raises(CompileError, match="Element tag must be"):
			parse_tag(1)

	def test_malformed_shorthand(self):
		with pytest.raises(CompileError, match="Invalid tag shorthand"):
			parse_tag(K("div#a#b"))


class TestClassTokens:
	def test_values(self):
		assert class_tokens(None) == []
		assert class_tokens("a") == ["a"]
		assert class_tokens(K("a")) == ["a"]
		assert class_tokens(["a", K("b")]) == ["a", "b"]
		assert class_tokens(frozenset({"b", "a"})) == ["a", "b"]

	def test_dynamic_value_is_one_item(self):
		expr = Form.of(S("f"))
		assert class_tokens(expr) == [expr]

	def test_set_with_dynamic_member(self):
		expr = Form.of(S("f"))
		assert class_tokens(frozenset({expr, K("a")})) == ["a", expr]


class TestChildren:
	def test_flattens_non_element_vectors(self):
		assert children(["a", ["b", ["c"]], [K("i"), "d"]]) == ["a", "b", "c", [K("i"), "d"]]


class TestElement:
	def test_merges_shorthand_and_map(self):
		node = [K("div#id.foo"), {K("class"): "bar", K("title"): "t"}, "x"]
		assert normalizer.element(node) == (
			"div",
			{ID: "id", CLASS: ["foo", "bar"], K("title"): "t"},
			["x"],
		)

	def test_without_map(self):
		assert normalizer.element([K("span"), "a", ["b"]]) == ("span", {}, ["a", "b"])

	def test_empty_node(self):
		with pytest.raises(CompileError, match="Element vector is empty"):
			normalizer.element([])


class TestMergeWithClass:
	def test_class_union_in_argument_order(self):
		merged = normalizer.merge_with_class({K("class"): "a"}, {K("class"): "b"})
		assert merged == {CLASS: ["a", "b"]}
		assert join_classes(merged[CLASS]) == "a b"

	def test_other_keys_are_right_biased(self):
		merged = normalizer.merge_with_class({K("id"): "a"}, {K("id"): "b"})
		assert merged == {K("id"): "b"}

	def test_nil_class_is_dropped(self):
		assert normalizer.merge_with_class({K("class"): None}, None) == {}

	def test_string_class_key(self):
		merged = normalizer.merge_with_class({"class": "a"}, {K("class"): K("b")})
		assert merged == {CLASS: ["a", "b"]}


class TestHtmlToDomAttrs:
	def test_renames(self):
		attrs = {
			K("for"): "x",
			K("on-click"): S("f"),
			K("data-id"): 1,
			K("aria-label"): "l",
			K("class"): "c",
		}
		assert normalizer.html_to_dom_attrs(attrs) == {
			"htmlFor": "x",
			"onClick": S("f"),
			"data-id": 1,
			"aria-label": "l",
			"class": "c",
		}

	def test_non_name_keys_are_kept(self):
		assert normalizer.html_to_dom_attrs({1: "a"}) == {1: "a"}


class TestUtil:
	def test_camel_case_keeps_type(self):
		assert camel_case(K("font-size")) == K("fontSize")
		assert camel_case("tab-index") == "tabIndex"
		assert camel_case(S("on-key-down")) == S("onKeyDown")
		assert camel_case("color") == "color"

	def test_camel_case_keys(self):
		assert camel_case_keys({K("font-size"): 1}) == {K("fontSize"): 1}
		assert camel_case_keys(S("m")) == S("m")

	def test_join_classes_skips_nil(self):
		assert join_classes(["a", None, K("b")]) == "a b"
