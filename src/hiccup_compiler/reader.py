"""Reader for hiccup markup source.

Converts source text into the data model in `hiccup_compiler.syntax`:

	[:div#main {:class "a"} (if x [:b "yes"] ^:inline (render y))]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from hiccup_compiler.errors import ReaderError
from hiccup_compiler.syntax import QUOTE, Form, Keyword, Symbol, hinted


class TokenType(Enum):
	"""Types of tokens produced by the tokenizer."""

	OPEN_LIST = auto()  # (
	CLOSE_LIST = auto()  # )
	OPEN_VECTOR = auto()  # [
	CLOSE_VECTOR = auto()  # ]
	OPEN_MAP = auto()  # {
	CLOSE_MAP = auto()  # }
	OPEN_SET = auto()  # #{
	META = auto()  # ^
	QUOTE = auto()  # '
	STRING = auto()  # "..."
	ATOM = auto()  # numbers, keywords, symbols, nil, true, false
	EOF = auto()


@dataclass(slots=True)
class Token:
	"""A single token.

	Attributes:
	    type: The type of token.
	    value: The raw source text of the token.
	    line: Line number (1-based).
	    column: Column number (1-based).
	"""

	type: TokenType
	value: str
	line: int
	column: int


_TOKEN_RE = re.compile(
	r"""
	(?P<ws>[\s,]+|;[^\n]*)
	|(?P<open_set>\#\{)
	|(?P<delim>[()\[\]{}])
	|(?P<meta>\^)
	|(?P<quote>')
	|(?P<string>"(?:\\.|[^"\\])*")
	|(?P<unterminated>")
	|(?P<atom>[^\s,()\[\]{}"';^]+)
	""",
	re.VERBOSE,
)

_DELIMS: dict[str, TokenType] = {
	"(": TokenType.OPEN_LIST,
	")": TokenType.CLOSE_LIST,
	"[": TokenType.OPEN_VECTOR,
	"]": TokenType.CLOSE_VECTOR,
	"{": TokenType.OPEN_MAP,
	"}": TokenType.CLOSE_MAP,
}

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?")

_ESCAPES: dict[str, str] = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	'"': '"',
	"\\": "\\",
	"b": "\b",
	"f": "\f",
}


def tokenize(text: str) -> list[Token]:
	"""Split source text into tokens, ending with an EOF token."""
	tokens: list[Token] = []
	pos = 0
	line = 1
	line_start = 0
	while pos < len(text):
		m = _TOKEN_RE.match(text, pos)
		if m is None:
			raise ReaderError(
				f"Unexpected character {text[pos]!r}",
				line=line,
				column=pos - line_start + 1,
			)
		kind = m.lastgroup
		value = m.group()
		column = pos - line_start + 1
		if kind == "unterminated":
			raise ReaderError("Unterminated string", line=line, column=column)
		if kind == "open_set":
			tokens.append(Token(TokenType.OPEN_SET, value, line, column))
		elif kind == "delim":
			tokens.append(Token(_DELIMS[value], value, line, column))
		elif kind == "meta":
			tokens.append(Token(TokenType.META, value, line, column))
		elif kind == "quote":
			tokens.append(Token(TokenType.QUOTE, value, line, column))
		elif kind == "string":
			tokens.append(Token(TokenType.STRING, value, line, column))
		elif kind == "atom":
			tokens.append(Token(TokenType.ATOM, value, line, column))
		# Track line numbers across whitespace and multi-line strings
		newlines = value.count("\n")
		if newlines:
			line += newlines
			line_start = pos + value.rindex("\n") + 1
		pos = m.end()
	tokens.append(Token(TokenType.EOF, "", line, pos - line_start + 1))
	return tokens


class Reader:
	"""Recursive-descent reader over a token list."""

	tokens: list[Token]
	pos: int

	def __init__(self, text: str) -> None:
		self.tokens = tokenize(text)
		self.pos = 0

	def peek(self) -> Token:
		return self.tokens[self.pos]

	def advance(self) -> Token:
		tok = self.tokens[self.pos]
		if tok.type is not TokenType.EOF:
			self.pos += 1
		return tok

	def at_eof(self) -> bool:
		return self.peek().type is TokenType.EOF

	def error(self, message: str, tok: Token) -> ReaderError:
		return ReaderError(message, line=tok.line, column=tok.column)

	# --- Entrypoints ---------------------------------------------------------

	def read_all(self) -> list[Any]:
		forms: list[Any] = []
		while not self.at_eof():
			forms.append(self.read_form())
		return forms

	def read_form(self) -> Any:
		tok = self.advance()
		kind = tok.type
		if kind is TokenType.EOF:
			raise self.error("Unexpected end of input", tok)
		if kind is TokenType.OPEN_LIST:
			return Form(tuple(self._read_until(TokenType.CLOSE_LIST, tok)))
		if kind is TokenType.OPEN_VECTOR:
			return self._read_until(TokenType.CLOSE_VECTOR, tok)
		if kind is TokenType.OPEN_MAP:
			return self._read_map(tok)
		if kind is TokenType.OPEN_SET:
			items = self._read_until(TokenType.CLOSE_MAP, tok)
			try:
				return frozenset(items)
			except TypeError:
				raise self.error("Set elements must be hashable", tok) from None
		if kind is TokenType.QUOTE:
			return Form.of(QUOTE, self.read_form())
		if kind is TokenType.META:
			return self._read_meta(tok)
		if kind is TokenType.STRING:
			return self._read_string(tok)
		if kind is TokenType.ATOM:
			return self._read_atom(tok)
		raise self.error(f"Unexpected {tok.value!r}", tok)

	# --- Collections ---------------------------------------------------------

	def _read_until(self, close: TokenType, open_tok: Token) -> list[Any]:
		items: list[Any] = []
		while True:
			tok = self.peek()
			if tok.type is close:
				self.advance()
				return items
			if tok.type is TokenType.EOF:
				raise self.error(f"Unclosed {open_tok.value!r}", open_tok)
			if tok.type in (
				TokenType.CLOSE_LIST,
				TokenType.CLOSE_VECTOR,
				TokenType.CLOSE_MAP,
			):
				raise self.error(f"Unmatched {tok.value!r}", tok)
			items.append(self.read_form())

	def _read_map(self, open_tok: Token) -> dict[Any, Any]:
		items = self._read_until(TokenType.CLOSE_MAP, open_tok)
		if len(items) % 2:
			raise self.error("Map literal must contain an even number of forms", open_tok)
		result: dict[Any, Any] = {}
		for k, v in zip(items[::2], items[1::2], strict=True):
			try:
				result[k] = v
			except TypeError:
				raise self.error("Map keys must be hashable", open_tok) from None
		return result

	# --- Metadata ------------------------------------------------------------

	def _read_meta(self, meta_tok: Token) -> Any:
		meta = self.read_form()
		target = self.read_form()
		if isinstance(meta, Symbol):
			return hinted(target, tag=str(meta))
		if isinstance(meta, str):
			return hinted(target, tag=meta)
		if isinstance(meta, Keyword):
			return hinted(target, **self._meta_flag(meta, meta_tok))
		if isinstance(meta, dict):
			kwargs: dict[str, Any] = {}
			for key, value in meta.items():
				if key == Keyword("tag"):
					if not isinstance(value, (Symbol, str)):
						raise self.error(":tag metadata must be a symbol or string", meta_tok)
					kwargs["tag"] = str(value)
				elif isinstance(key, Keyword):
					if value not in (True, False):
						raise self.error(f"{key} metadata must be a boolean", meta_tok)
					if value:
						kwargs.update(self._meta_flag(key, meta_tok))
				else:
					raise self.error("Metadata keys must be keywords", meta_tok)
			return hinted(target, **kwargs)
		raise self.error("Metadata must be a symbol, string, keyword or map", meta_tok)

	def _meta_flag(self, key: Keyword, meta_tok: Token) -> dict[str, bool]:
		if key == Keyword("attrs"):
			return {"attrs": True}
		if key == Keyword("inline"):
			return {"inline": True}
		raise self.error(f"Unsupported metadata {key}", meta_tok)

	# --- Atoms ---------------------------------------------------------------

	def _read_string(self, tok: Token) -> str:
		body = tok.value[1:-1]
		out: list[str] = []
		i = 0
		while i < len(body):
			c = body[i]
			if c != "\\":
				out.append(c)
				i += 1
				continue
			esc = body[i + 1]
			if esc == "u":
				code = body[i + 2 : i + 6]
				if len(code) != 4 or not all(ch in "0123456789abcdefABCDEF" for ch in code):
					raise self.error("Invalid unicode escape", tok)
				out.append(chr(int(code, 16)))
				i += 6
				continue
			if esc not in _ESCAPES:
				raise self.error(f"Unsupported escape character \\{esc}", tok)
			out.append(_ESCAPES[esc])
			i += 2
		return "".join(out)

	def _read_atom(self, tok: Token) -> Any:
		value = tok.value
		if value == "nil":
			return None
		if value == "true":
			return True
		if value == "false":
			return False
		if _INT_RE.fullmatch(value):
			return int(value)
		if _FLOAT_RE.fullmatch(value):
			return float(value)
		if value.startswith(":"):
			name = value[1:]
			if not name:
				raise self.error("Empty keyword", tok)
			ns, name = _split_ns(name)
			return Keyword(name, ns)
		ns, name = _split_ns(value)
		return Symbol(name, ns)


def _split_ns(value: str) -> tuple[str | None, str]:
	if value != "/" and "/" in value[1:]:
		ns, _, name = value.partition("/")
		if ns and name:
			return ns, name
	return None, value


def read(text: str) -> Any:
	"""Read exactly one form from `text`."""
	reader = Reader(text)
	form = reader.read_form()
	if not reader.at_eof():
		tok = reader.peek()
		raise ReaderError(
			"Unexpected input after form", line=tok.line, column=tok.column
		)
	return form


def read_all(text: str) -> list[Any]:
	"""Read every top-level form in `text`."""
	return Reader(text).read_all()
