from __future__ import annotations

import os
from dataclasses import dataclass, fields

ENV_HICCUP_CREATE_ELEMENT = "HICCUP_CREATE_ELEMENT"
ENV_HICCUP_FRAGMENT = "HICCUP_FRAGMENT"
ENV_HICCUP_INTERPRET = "HICCUP_INTERPRET"
ENV_HICCUP_ATTRIBUTES = "HICCUP_ATTRIBUTES"
ENV_HICCUP_MERGE_WITH_CLASS = "HICCUP_MERGE_WITH_CLASS"
ENV_HICCUP_JOIN_CLASSES = "HICCUP_JOIN_CLASSES"
ENV_HICCUP_IS_MAP = "HICCUP_IS_MAP"
ENV_HICCUP_INTO_ARRAY = "HICCUP_INTO_ARRAY"

_ENV_VARS: dict[str, str] = {
	"create_element": ENV_HICCUP_CREATE_ELEMENT,
	"fragment": ENV_HICCUP_FRAGMENT,
	"interpret": ENV_HICCUP_INTERPRET,
	"attributes": ENV_HICCUP_ATTRIBUTES,
	"merge_with_class": ENV_HICCUP_MERGE_WITH_CLASS,
	"join_classes": ENV_HICCUP_JOIN_CLASSES,
	"is_map": ENV_HICCUP_IS_MAP,
	"into_array": ENV_HICCUP_INTO_ARRAY,
}


@dataclass(frozen=True, slots=True)
class CompilerConfig:
	"""
	Names of the runtime collaborators that compiled code calls.

	The compiler never resolves these names; it only writes them into the
	emitted code.
	"""

	create_element: str = "daiquiri.core/create-element"
	"""Element constructor: (create-element tag attrs children)."""

	fragment: str = "daiquiri.core/fragment"
	"""Tag constant standing in for `:*` and `:<>`."""

	interpret: str = "daiquiri.interpreter/interpret"
	"""Runtime interpreter for anything not resolved at compile time."""

	attributes: str = "daiquiri.interpreter/attributes"
	"""Coerces a runtime value to an attribute object."""

	merge_with_class: str = "daiquiri.normalize/merge-with-class"
	"""Runtime class-aware merge of two attribute maps."""

	join_classes: str = "daiquiri.util/join-classes"
	"""Runtime class-list join."""

	is_map: str = "cljs.core/map?"
	"""Runtime map predicate used by the ambiguous-attributes branch."""

	into_array: str = "cljs.core/into-array"
	"""Materializes a `for` sequence into a concrete array."""

	temp_prefix: str = "attrs"
	"""Prefix for generated locals."""

	@classmethod
	def from_env(cls) -> CompilerConfig:
		"""Build a config, overriding runtime names from HICCUP_* variables."""
		overrides = {
			f.name: value
			for f in fields(cls)
			if f.name in _ENV_VARS and (value := os.environ.get(_ENV_VARS[f.name]))
		}
		return cls(**overrides)
