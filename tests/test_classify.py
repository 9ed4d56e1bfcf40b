"""
Tests for element classification.

The type oracle is stubbed with fixed answers keyed by printed source.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import pytest
from hiccup_compiler.classify import STRATEGIES, classify
from hiccup_compiler.errors import CompileError, OracleError
from hiccup_compiler.oracle import UNKNOWN, Env, NullOracle, SyntacticOracle
from hiccup_compiler.reader import read
from hiccup_compiler.syntax import pr_str, unwrap


class StubOracle:
	"""Answers from a fixed table keyed by the printed expression."""

	answers: dict[str, frozenset[str]]
	calls: list[str]

	def __init__(self, answers: Mapping[str, Iterable[str]] | None = None) -> None:
		self.answers = {k: frozenset(v) for k, v in (answers or {}).items()}
		self.calls = []

	def infer_types(self, expr: Any, env: Env) -> frozenset[str]:
		key = pr_str(unwrap(expr))
		self.calls.append(key)
		return self.answers.get(key, UNKNOWN)


class FailingOracle:
	def infer_types(self, expr: Any, env: Env) -> frozenset[str]:
		raise OracleError("no analyzer")


def strategy(source: str, oracle: Any = None, env: Env | None = None) -> str:
	return classify(read(source), oracle or NullOracle(), env or Env())


CASES = [
	('[:span "foo"]', "all-literal"),
	("[:span]", "all-literal"),
	('[:div#a.b {:class "c"} [:i "x"]]', "all-literal"),
	("[:span 'x]", "all-literal"),
	("[:span {} x]", "literal-tag-and-attributes"),
	("[:span {:id x}]", "literal-tag-and-attributes"),
	("[:span ^String x]", "literal-tag-and-no-attributes"),
	('[:span "a" x]', "literal-tag-and-no-attributes"),
	("[:ul (for [x xs] [:li x])]", "literal-tag-and-no-attributes"),
	("[:span [:b x]]", "literal-tag-and-no-attributes"),
	("[:span ^:attrs y]", "literal-tag-and-hinted-attributes"),
	("[:span ^:inline (y)]", "literal-tag-and-inline-content"),
	("[:span x]", "literal-tag"),
	("[:span (f) 1]", "literal-tag"),
	("[x]", "default"),
	("[x {:a 1} y]", "default"),
	("[(comp) y]", "default"),
]


class TestClassify:
	@pytest.mark.parametrize("source, expected", CASES)
	def test_cases(self, source: str, expected: str):
		assert strategy(source) == expected

	def test_oracle_proves_map(self):
		oracle = StubOracle({"(attrs-for x)": ["IMap"]})
		assert strategy("[:span (attrs-for x)]", oracle) == "literal-tag-and-hinted-attributes"

	def test_map_type_hint_through_oracle(self):
		assert strategy("[:span ^Map y]", SyntacticOracle()) == "literal-tag-and-hinted-attributes"
		assert strategy("[:span ^Map y]") == "literal-tag"

	def test_oracle_must_answer_exactly_map(self):
		oracle = StubOracle({"(attrs-for x)": ["IMap", "clj-nil"]})
		assert strategy("[:span (attrs-for x)]", oracle) == "literal-tag"

	def test_oracle_failure_is_unknown(self):
		assert strategy("[:span x]", FailingOracle()) == "literal-tag"

	def test_oracle_not_asked_for_literal_nodes(self):
		oracle = StubOracle()
		strategy('[:span {:a 1} "x"]', oracle)
		assert oracle.calls == []

	def test_attrs_hint_beats_inline_hint(self):
		assert strategy("[:span ^:attrs ^:inline y]") == "literal-tag-and-hinted-attributes"

	def test_empty_vector_is_a_shape_fault(self):
		with pytest.raises(CompileError, match="Element vector is empty"):
			strategy("[]")

	def test_unknown_hint_is_a_shape_fault(self):
		with pytest.raises(CompileError, match="Unknown type hint 'Nope'"):
			strategy("[:span ^Nope x]")


class TestClassifyProperties:
	@pytest.mark.parametrize("source, expected", CASES)
	def test_deterministic(self, source: str, expected: str):
		node = read(source)
		oracle = StubOracle()
		results = {classify(node, oracle, Env()) for _ in range(3)}
		assert results == {expected}

	def test_cases_cover_every_strategy(self):
		assert {expected for _, expected in CASES} == set(STRATEGIES)

	def test_strategies_are_distinct(self):
		assert len(STRATEGIES) == len(set(STRATEGIES)) == 7

	@pytest.mark.parametrize("source, expected", CASES)
	def test_result_is_a_known_strategy(self, source: str, expected: str):
		assert strategy(source) in STRATEGIES
