"""Control-form descent.

Recompiles the result positions of known control forms so that markup nested
in branches and bodies is compiled too. Tests, bindings and dispatch values
are kept as written. Binding forms extend the lexical environment for the
positions they scope over.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from hiccup_compiler.errors import CompileError
from hiccup_compiler.nodes import Call, ExprNode, FormNode, Identifier
from hiccup_compiler.oracle import Env, infer_types
from hiccup_compiler.syntax import (
	Form,
	Keyword,
	Symbol,
	form_name,
	hints_of,
	unwrap,
)

if TYPE_CHECKING:
	from hiccup_compiler.compiler import Compiler

FormCompiler = Callable[[Form, Env, "Compiler"], ExprNode]

FORM_COMPILERS: dict[str, FormCompiler] = {}

AMPERSAND = Symbol("&")
CONDP_PIPE = Keyword(">>")
FOR_MODIFIERS = frozenset({Keyword("let"), Keyword("when"), Keyword("while")})


def form_compiler(*names: str) -> Callable[[FormCompiler], FormCompiler]:
	"""Register a handler for the given form heads."""

	def decorator(fn: FormCompiler) -> FormCompiler:
		for name in names:
			FORM_COMPILERS[name] = fn
		return fn

	return decorator


def compile_form(expr: Any, env: Env, ctx: Compiler) -> ExprNode:
	"""Compile a non-vector, non-literal expression."""
	name = form_name(expr)
	handler = FORM_COMPILERS.get(name) if name is not None else None
	if handler is not None:
		return handler(unwrap(expr), env, ctx)
	h = hints_of(expr)
	if h is not None and h.inline:
		return ExprNode.of(unwrap(expr))
	return ctx.interpret_maybe(ExprNode.of(unwrap(expr)), expr, env)


# =============================================================================
# Bindings
# =============================================================================


def pattern_names(pattern: Any) -> list[str]:
	"""Local names bound by a binding pattern, destructuring included.

	Over-approximates: any unqualified symbol inside the pattern counts.
	"""
	names: list[str] = []
	stack = [pattern]
	while stack:
		item = unwrap(stack.pop())
		if isinstance(item, Symbol):
			if item.ns is None and item != AMPERSAND:
				names.append(item.name)
		elif isinstance(item, dict):
			stack.extend(item.keys())
			stack.extend(item.values())
		elif isinstance(item, list):
			stack.extend(item)
	return names


def binding_pairs(bindings: Any, form: Form) -> list[tuple[Any, Any]]:
	b = unwrap(bindings)
	if not isinstance(b, list) or len(b) % 2:
		raise CompileError(
			f"{form_name(form)} requires a vector with an even number of forms", form
		)
	return list(zip(b[::2], b[1::2]))


def bind(pattern: Any, init: Any, env: Env, ctx: Compiler) -> Env:
	p = unwrap(pattern)
	if isinstance(p, Symbol) and p.ns is None:
		return env.bind(p.name, infer_types(ctx.oracle, init, env))
	return env.bind_all(pattern_names(pattern))


def bind_let(bindings: Any, env: Env, ctx: Compiler, form: Form) -> Env:
	"""Sequentially bind let-style pairs; each init sees the earlier names."""
	for pattern, init in binding_pairs(bindings, form):
		env = bind(pattern, init, env, ctx)
	return env


def bind_for(bindings: Any, env: Env, ctx: Compiler, form: Form) -> Env:
	"""Bind `for` sequence names (unknown types) and `:let` clauses."""
	for pattern, init in binding_pairs(bindings, form):
		key = unwrap(pattern)
		if key == Keyword("let"):
			env = bind_let(init, env, ctx, form)
		elif isinstance(key, Keyword) and key in FOR_MODIFIERS:
			continue
		else:
			env = env.bind_all(pattern_names(pattern))
	return env


def bind_single(bindings: Any, env: Env, ctx: Compiler, form: Form) -> Env:
	"""Bindings of `if-some` and `when-some`: exactly one pair."""
	pairs = binding_pairs(bindings, form)
	if len(pairs) != 1:
		raise CompileError(
			f"{form_name(form)} requires exactly one binding pair", form
		)
	pattern, init = pairs[0]
	return bind(pattern, init, env, ctx)


# =============================================================================
# Handlers
# =============================================================================


def _rebuild(form: Form, parts: list[ExprNode]) -> FormNode:
	return FormNode(form.head, parts)


def _keep(xs: list[Any]) -> list[ExprNode]:
	return [ExprNode.of(x) for x in xs]


def _compile_tail(
	form: Form, lead: list[Any], body: list[Any], env: Env, ctx: Compiler
) -> FormNode:
	"""Keep `lead` and all but the last body form, recompile the last."""
	*init, last = body or [None]
	return _rebuild(form, [*_keep(lead), *_keep(init), ctx.compile_markup(last, env)])


@form_compiler("if", "if-not")
def compile_if(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if len(args) not in (2, 3):
		raise CompileError(
			f"{form_name(form)} takes a test, a then and an optional else", form
		)
	test, *branches = args
	compiled = [ctx.compile_markup(b, env) for b in branches]
	return _rebuild(form, [ExprNode.of(test), *compiled])


@form_compiler("when", "when-not")
def compile_when(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if not args:
		raise CompileError(f"{form_name(form)} requires a test", form)
	test, *body = args
	compiled = [ctx.compile_markup(b, env) for b in body]
	return _rebuild(form, [ExprNode.of(test), *compiled])


@form_compiler("if-some")
def compile_if_some(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if len(args) not in (2, 3):
		raise CompileError("if-some takes bindings, a then and an optional else", form)
	bindings, then, *else_ = args
	then_env = bind_single(bindings, env, ctx, form)
	return _rebuild(
		form,
		[
			ExprNode.of(bindings),
			ctx.compile_markup(then, then_env),
			*(ctx.compile_markup(e, env) for e in else_),
		],
	)


@form_compiler("cond")
def compile_cond(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	clauses = form.args
	if len(clauses) % 2:
		raise CompileError("cond requires an even number of forms", form)
	parts: list[ExprNode] = []
	for test, result in zip(clauses[::2], clauses[1::2]):
		parts.append(ExprNode.of(test))
		parts.append(ctx.compile_markup(result, env))
	return _rebuild(form, parts)


@form_compiler("condp")
def compile_condp(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if len(args) < 2:
		raise CompileError("condp requires a predicate and an expression", form)
	pred, expr, *clauses = args
	parts = _keep([pred, expr])
	i = 0
	while i < len(clauses):
		if i + 2 < len(clauses) and unwrap(clauses[i + 1]) == CONDP_PIPE:
			parts.extend(_keep(clauses[i : i + 3]))
			i += 3
		elif i + 1 < len(clauses):
			parts.append(ExprNode.of(clauses[i]))
			parts.append(ctx.compile_markup(clauses[i + 1], env))
			i += 2
		else:
			parts.append(ctx.compile_markup(clauses[i], env))
			i += 1
	return _rebuild(form, parts)


@form_compiler("case")
def compile_case(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if not args:
		raise CompileError("case requires an expression", form)
	value, *clauses = args
	parts = [ExprNode.of(value)]
	for i in range(0, len(clauses) - 1, 2):
		parts.append(ExprNode.of(clauses[i]))
		parts.append(ctx.compile_markup(clauses[i + 1], env))
	if len(clauses) % 2:
		parts.append(ctx.compile_markup(clauses[-1], env))
	return _rebuild(form, parts)


@form_compiler("do")
def compile_do(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	return _compile_tail(form, [], list(form.args), env, ctx)


@form_compiler("let", "let*", "letfn*")
def compile_let(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if not args:
		raise CompileError(f"{form_name(form)} requires a binding vector", form)
	bindings, *body = args
	body_env = bind_let(bindings, env, ctx, form)
	return _compile_tail(form, [bindings], body, body_env, ctx)


@form_compiler("when-some")
def compile_when_some(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	args = form.args
	if not args:
		raise CompileError("when-some requires a binding vector", form)
	bindings, *body = args
	body_env = bind_single(bindings, env, ctx, form)
	return _compile_tail(form, [bindings], body, body_env, ctx)


@form_compiler("for")
def compile_for(form: Form, env: Env, ctx: Compiler) -> ExprNode:
	"""(for [x xs] body) -> (into-array (for [x xs] body'))"""
	args = form.args
	if len(args) != 2:
		raise CompileError("for requires a binding vector and exactly one body", form)
	bindings, body = args
	body_env = bind_for(bindings, env, ctx, form)
	seq = _rebuild(form, [ExprNode.of(bindings), ctx.compile_markup(body, body_env)])
	return Call(Identifier(ctx.config.into_array), [seq])
