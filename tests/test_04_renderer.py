"""
Renderer Test Suite
===================
Tests for:
  - format_expression (printed form) and re-reading it
  - Renderer output for atoms, strings, plain lists
  - Renderer macro handling: symbol-macros, function-macros with their
    actual arguments, macro calls produced by a transformer

Run with:  pytest tests/test_04_renderer.py -v
"""

from __future__ import annotations

import io

import pytest

from sxpp.core.errors import MacroExpansionError
from sxpp.services.expressions import Atom, List, Str, make_list
from sxpp.services.macros import Renderer, format_expression, render, render_to_string
from sxpp.services.reader import CharStream, read_expression, read_from_string


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. Printer
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestFormatExpression:
    def test_atom(self):
        assert format_expression(Atom("FOO")) == "FOO"

    def test_string_quoted_and_escaped(self):
        assert format_expression(Str('a "b" \\c')) == '"a \\"b\\" \\\\c"'

    def test_list(self):
        assert format_expression(List((Atom("3"), Atom("3")))) == "(3 3)"

    def test_empty_list(self):
        assert format_expression(List()) == "()"

    def test_whitespace_normalised(self):
        expr = read_from_string('(  a\n\t"b"   ( c  ) )')
        assert format_expression(expr) == '(A "b" (C))'

    def test_reread_gives_equal_expression(self):
        expr = read_from_string('(defs (x "quoted \\" text") () (nested (deep 1.5)))')
        assert read_from_string(format_expression(expr)) == expr


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. Plain rendering
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestRenderPlain:
    def test_atom_by_name(self, registry):
        assert render_to_string(Atom("hello"), registry) == "hello"

    def test_string_quoted(self, registry):
        assert render_to_string(Str('say "hi"'), registry) == '"say \\"hi\\""'

    def test_list_joined_without_parens(self, registry):
        expr = read_from_string('(a "b" (c d))', preserve_case=True)
        assert render_to_string(expr, registry) == 'a "b" c d'

    def test_empty_list_renders_nothing(self, registry):
        assert render_to_string(List(), registry) == ""

    def test_render_writes_to_stream(self, registry):
        out = io.StringIO()
        render(out, make_list(Atom("x"), Atom("y")), registry)
        assert out.getvalue() == "x y"

    def test_rendered_elements_read_back_in_order(self, registry):
        expr = make_list(Atom("ALPHA"), Str("beta gamma"), Atom("3"))
        stream = CharStream(io.StringIO(render_to_string(expr, registry)))
        assert [read_expression(stream) for _ in range(3)] == list(expr.items)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 3. Rendering with macros
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestRenderMacros:
    def test_symbol_macro_rendered(self, registry):
        registry.define_symbol_macro("pi", Atom("3.14159"))
        assert render_to_string(Atom("pi"), registry) == "3.14159"

    def test_symbol_macro_chain_rendered_recursively(self, registry):
        registry.define_symbol_macro("a", Atom("b"))
        registry.define_symbol_macro("b", Str("end"))
        assert render_to_string(Atom("a"), registry) == '"end"'

    def test_function_macro_gets_actual_arguments(self, registry):
        seen = []

        def twice(args):
            seen.append(list(args))
            return List((args[0], args[0]))

        registry.define_function_macro("twice", twice)
        expr = read_from_string("(twice word)", preserve_case=True)
        assert render_to_string(expr, registry) == "word word"
        assert seen == [[Atom("word")]]

    def test_arguments_passed_raw(self, registry):
        seen = []
        registry.define_symbol_macro("pi", Atom("3.14"))
        registry.define_function_macro("spy", lambda args: seen.extend(args) or List(args))
        assert render_to_string(read_from_string("(spy pi)", preserve_case=True), registry) == "3.14"
        assert seen == [Atom("pi")]

    def test_macro_calls_in_output_rendered(self, registry):
        registry.define_function_macro("twice", lambda args: List((args[0], args[0])))
        registry.define_function_macro(
            "quad", lambda args: List((Atom("twice"), args[0]))
        )
        # (quad x) -> (twice x) -> (x x)
        assert render_to_string(read_from_string("(quad x)", preserve_case=True), registry) == "x x"

    def test_nested_call_inside_plain_list(self, registry):
        registry.define_function_macro("greet", lambda args: Str("hello"))
        expr = read_from_string("(say (greet))", preserve_case=True)
        assert Renderer(registry).render_to_string(expr) == 'say "hello"'

    def test_transformer_must_return_expression(self, registry):
        registry.define_function_macro("name", lambda args: "plain")
        with pytest.raises(MacroExpansionError, match="non-expression"):
            render_to_string(read_from_string("(name)", preserve_case=True), registry)
