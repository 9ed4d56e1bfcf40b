"""Compile hiccup markup into element-constructor calls."""

# Attributes
from hiccup_compiler.attributes import AttributeCompiler as AttributeCompiler

# Classification
from hiccup_compiler.classify import STRATEGIES as STRATEGIES
from hiccup_compiler.classify import Strategy as Strategy
from hiccup_compiler.classify import classify as classify

# Compiler
from hiccup_compiler.compiler import Compiler as Compiler
from hiccup_compiler.compiler import compile_markup as compile_markup
from hiccup_compiler.compiler import compile_source as compile_source

# Config
from hiccup_compiler.config import CompilerConfig as CompilerConfig

# Errors
from hiccup_compiler.errors import CompileError as CompileError
from hiccup_compiler.errors import HiccupError as HiccupError
from hiccup_compiler.errors import OracleError as OracleError
from hiccup_compiler.errors import ReaderError as ReaderError

# Control forms
from hiccup_compiler.forms import FORM_COMPILERS as FORM_COMPILERS
from hiccup_compiler.forms import form_compiler as form_compiler

# Hints
from hiccup_compiler.hints import register_hint as register_hint

# Output nodes
from hiccup_compiler.nodes import Array as Array
from hiccup_compiler.nodes import Call as Call
from hiccup_compiler.nodes import ExprNode as ExprNode
from hiccup_compiler.nodes import FormNode as FormNode
from hiccup_compiler.nodes import Identifier as Identifier
from hiccup_compiler.nodes import Let as Let
from hiccup_compiler.nodes import Literal as Literal
from hiccup_compiler.nodes import Object as Object
from hiccup_compiler.nodes import Source as Source
from hiccup_compiler.nodes import Ternary as Ternary
from hiccup_compiler.nodes import Vector as Vector
from hiccup_compiler.nodes import emit as emit

# Normalization
from hiccup_compiler.normalize import DefaultNormalizer as DefaultNormalizer
from hiccup_compiler.normalize import Normalizer as Normalizer

# Type oracle
from hiccup_compiler.oracle import Env as Env
from hiccup_compiler.oracle import NullOracle as NullOracle
from hiccup_compiler.oracle import SyntacticOracle as SyntacticOracle
from hiccup_compiler.oracle import TypeOracle as TypeOracle

# Reader
from hiccup_compiler.reader import read as read
from hiccup_compiler.reader import read_all as read_all

# Syntax
from hiccup_compiler.syntax import Form as Form
from hiccup_compiler.syntax import Hinted as Hinted
from hiccup_compiler.syntax import Keyword as Keyword
from hiccup_compiler.syntax import Symbol as Symbol
from hiccup_compiler.syntax import hinted as hinted
from hiccup_compiler.syntax import pr_str as pr_str
