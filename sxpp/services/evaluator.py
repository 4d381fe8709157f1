"""
Default host evaluator
======================
A small Lisp-flavoured evaluator over the expression model.  It is the
collaborator behind the evaluate-silently and render-evaluated directives
and the place where macro definition forms live.

Any object with an ``evaluate(expr) -> Expression`` method can stand in
for it; the dispatcher only relies on that one method.

Forms
-----
  (quote x)  'x                     x, unevaluated
  (progn a b ...)                   value of the last form
  (if test then [else])             false is () or nil
  (setq name value)                 assign a variable
  (define-symbol-macro name expr)   global symbol-macro
  (defmacro name (params) body...)  global function-macro; &rest supported
  (symbol-macrolet ((n e) ...) body...)
  (macrolet ((n (params) body...) ...) body...)
  (macroexpand-1 x) (macroexpand x)

Functions: + - * / = list first rest cons concat string

Operator names match regardless of case, so forms work whichever reading
mode produced them.  Numbers are atoms whose name parses as int or float.
"""

from __future__ import annotations

import logging
from collections import ChainMap
from typing import Callable, Sequence

from sxpp.core.errors import HostEvaluationError
from .expressions import NIL, Atom, Expression, List, Str, checked_expansion
from .macros.expander import MacroExpander
from .macros.registry import MacroRegistry, MacroTransformer, macro_registry
from .macros.renderer import format_expression

logger = logging.getLogger(__name__)

T = Atom("T")
Env = ChainMap


# ---------------------------------------------------------------------------
# Numbers and truth
# ---------------------------------------------------------------------------

def to_number(expr: Expression) -> int | float:
    if isinstance(expr, Atom):
        try:
            return int(expr.name)
        except ValueError:
            pass
        try:
            return float(expr.name)
        except ValueError:
            pass
    raise HostEvaluationError(f"Not a number: {format_expression(expr)}")


def from_number(value: int | float) -> Atom:
    return Atom(str(value))


def is_number(expr: Expression) -> bool:
    try:
        to_number(expr)
    except HostEvaluationError:
        return False
    return True


def is_false(expr: Expression) -> bool:
    return expr == NIL or (isinstance(expr, Atom) and expr.name.upper() == "NIL")


def _text(expr: Expression) -> str:
    if isinstance(expr, Str):
        return expr.value
    if isinstance(expr, Atom):
        return expr.name
    return format_expression(expr)


# ---------------------------------------------------------------------------
# Built-in functions (arguments already evaluated)
# ---------------------------------------------------------------------------

def _add(*args):
    return from_number(sum(to_number(a) for a in args))


def _mul(*args):
    result = 1
    for a in args:
        result *= to_number(a)
    return from_number(result)


def _sub(first, *rest):
    if not rest:
        return from_number(-to_number(first))
    result = to_number(first)
    for a in rest:
        result -= to_number(a)
    return from_number(result)


def _div(first, *rest):
    result = to_number(first)
    for a in rest:
        divisor = to_number(a)
        if divisor == 0:
            raise HostEvaluationError("Division by zero")
        if isinstance(result, int) and isinstance(divisor, int) and result % divisor == 0:
            result //= divisor
        else:
            result /= divisor
    return from_number(result)


def _equal(a, b):
    if is_number(a) and is_number(b):
        return T if to_number(a) == to_number(b) else NIL
    return T if a == b else NIL


def _first(seq):
    if not isinstance(seq, List):
        raise HostEvaluationError(f"FIRST of a non-list: {format_expression(seq)}")
    return seq.items[0] if seq.items else NIL


def _rest(seq):
    if not isinstance(seq, List):
        raise HostEvaluationError(f"REST of a non-list: {format_expression(seq)}")
    return List(seq.items[1:])


def _cons(item, seq):
    if not isinstance(seq, List):
        raise HostEvaluationError(f"CONS onto a non-list: {format_expression(seq)}")
    return List((item,) + seq.items)


_FUNCTIONS: dict[str, Callable[..., Expression]] = {
    "+":      _add,
    "-":      _sub,
    "*":      _mul,
    "/":      _div,
    "=":      _equal,
    "LIST":   lambda *args: List(args),
    "FIRST":  _first,
    "REST":   _rest,
    "CONS":   _cons,
    "CONCAT": lambda *args: Str("".join(_text(a) for a in args)),
    "STRING": lambda a: Str(_text(a)),
}


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class Evaluator:
    """
    Evaluate expressions against a macro registry and a global variable table.

    Usage::

        ev = Evaluator(registry)
        ev.evaluate(read_from_string("(defmacro double (x) (list x x))"))
    """

    def __init__(self, registry: MacroRegistry | None = None) -> None:
        self._registry = registry or macro_registry
        self._expander = MacroExpander(self._registry)
        self.variables: dict[Atom, Expression] = {}
        self._special_forms: dict[str, Callable[[Sequence[Expression], Env], Expression]] = {
            "QUOTE":               self._quote,
            "PROGN":               self._progn,
            "IF":                  self._if,
            "SETQ":                self._setq,
            "DEFINE-SYMBOL-MACRO": self._define_symbol_macro,
            "DEFMACRO":            self._defmacro,
            "SYMBOL-MACROLET":     self._symbol_macrolet,
            "MACROLET":            self._macrolet,
            "MACROEXPAND-1":       self._macroexpand_1,
            "MACROEXPAND":         self._macroexpand,
        }

    # ----------------------------------------------------------------- public

    def evaluate(self, expr: Expression) -> Expression:
        return self._eval(expr, ChainMap(self.variables))

    # ----------------------------------------------------------------- private

    def _eval(self, expr: Expression, env: Env) -> Expression:
        if isinstance(expr, Str):
            return expr

        if isinstance(expr, Atom):
            return self._eval_atom(expr, env)

        if not expr.items:
            return NIL

        head = expr.items[0]
        if not isinstance(head, Atom):
            raise HostEvaluationError(f"Not an operator: {format_expression(head)}")
        args = expr.args

        special = self._special_forms.get(head.name.upper())
        if special is not None:
            return special(args, env)

        transformer = self._registry.lookup_function_macro(head)
        if transformer is not None:
            return self._eval(self._call_transformer(head, transformer, args), env)

        fn = _FUNCTIONS.get(head.name.upper())
        if fn is None:
            raise HostEvaluationError(f"Undefined function: {head}")
        values = [self._eval(a, env) for a in args]
        try:
            return fn(*values)
        except TypeError as exc:
            raise HostEvaluationError(f"Bad arguments to {head}: {exc}") from exc

    def _eval_atom(self, atom: Atom, env: Env) -> Expression:
        if atom.name.upper() in ("NIL", "T"):
            return NIL if atom.name.upper() == "NIL" else T
        if atom in env:
            return env[atom]
        substitute = self._registry.lookup_symbol_macro(atom)
        if substitute is not None:
            return self._eval(substitute, env)
        if is_number(atom):
            return atom
        raise HostEvaluationError(f"Unbound variable: {atom}")

    def _call_transformer(self, head: Atom, transformer: MacroTransformer, args) -> Expression:
        return checked_expansion(head, transformer(list(args)))

    # ---------------------------------------------------------- special forms

    def _quote(self, args, env):
        _arity("QUOTE", args, 1)
        return args[0]

    def _progn(self, args, env):
        result: Expression = NIL
        for form in args:
            result = self._eval(form, env)
        return result

    def _if(self, args, env):
        if len(args) not in (2, 3):
            raise HostEvaluationError("IF takes a test, a then form and an optional else form")
        if not is_false(self._eval(args[0], env)):
            return self._eval(args[1], env)
        return self._eval(args[2], env) if len(args) == 3 else NIL

    def _setq(self, args, env):
        _arity("SETQ", args, 2)
        name = _name(args[0], "SETQ")
        value = self._eval(args[1], env)
        env[name] = value
        return value

    def _define_symbol_macro(self, args, env):
        _arity("DEFINE-SYMBOL-MACRO", args, 2)
        name = _name(args[0], "DEFINE-SYMBOL-MACRO")
        self._registry.define_symbol_macro(name, args[1])
        return name

    def _defmacro(self, args, env):
        if len(args) < 2:
            raise HostEvaluationError("DEFMACRO needs a name and a parameter list")
        name = _name(args[0], "DEFMACRO")
        self._registry.define_function_macro(name, self._make_transformer(name, args[1], args[2:]))
        return name

    def _symbol_macrolet(self, args, env):
        if not args or not isinstance(args[0], List):
            raise HostEvaluationError("SYMBOL-MACROLET needs a binding list")
        bindings = []
        for binding in args[0].items:
            if not isinstance(binding, List) or len(binding) != 2:
                raise HostEvaluationError(
                    f"SYMBOL-MACROLET binding must be (name expansion): {format_expression(binding)}"
                )
            bindings.append((_name(binding.items[0], "SYMBOL-MACROLET"), binding.items[1]))
        return self._registry.with_scoped_symbol_macros(
            bindings, lambda: self._progn(args[1:], env)
        )

    def _macrolet(self, args, env):
        if not args or not isinstance(args[0], List):
            raise HostEvaluationError("MACROLET needs a definition list")
        bindings = []
        for definition in args[0].items:
            if not isinstance(definition, List) or len(definition) < 2:
                raise HostEvaluationError(
                    f"MACROLET definition must be (name params body...): {format_expression(definition)}"
                )
            name = _name(definition.items[0], "MACROLET")
            params, body = definition.items[1], definition.items[2:]
            bindings.append((name, self._make_transformer(name, params, body)))
        return self._registry.with_scoped_function_macros(
            bindings, lambda: self._progn(args[1:], env)
        )

    def _macroexpand_1(self, args, env):
        _arity("MACROEXPAND-1", args, 1)
        return self._expander.expand(self._eval(args[0], env), recursive=False)

    def _macroexpand(self, args, env):
        _arity("MACROEXPAND", args, 1)
        return self._expander.expand(self._eval(args[0], env), recursive=True)

    # ------------------------------------------------------------ macro bodies

    def _make_transformer(self, name: Atom, params: Expression, body) -> MacroTransformer:
        required, rest = _parse_params(params, name)
        body = tuple(body)

        def transformer(args: Sequence[Expression]) -> Expression:
            args = list(args)
            if len(args) < len(required) or (rest is None and len(args) > len(required)):
                raise HostEvaluationError(
                    f"Macro {name} expects {len(required)} argument(s), got {len(args)}"
                )
            local: dict[Atom, Expression] = dict(zip(required, args))
            if rest is not None:
                local[rest] = List(args[len(required):])
            return self._progn(body, ChainMap(local, self.variables))

        transformer.__name__ = f"macro_{name.name}"
        return transformer


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _arity(form: str, args, n: int) -> None:
    if len(args) != n:
        raise HostEvaluationError(f"{form} takes {n} argument(s), got {len(args)}")


def _name(expr: Expression, form: str) -> Atom:
    if not isinstance(expr, Atom):
        raise HostEvaluationError(f"{form}: expected a name, got {format_expression(expr)}")
    return expr


def _parse_params(params: Expression, name: Atom) -> tuple[list[Atom], Atom | None]:
    if not isinstance(params, List):
        raise HostEvaluationError(f"Macro {name}: parameter list must be a list")
    required: list[Atom] = []
    rest: Atom | None = None
    items = list(params.items)
    while items:
        param = _name(items.pop(0), f"Macro {name}")
        if param.name.upper() == "&REST":
            if len(items) != 1:
                raise HostEvaluationError(f"Macro {name}: &rest must be followed by one name")
            rest = _name(items.pop(0), f"Macro {name}")
        else:
            required.append(param)
    return required, rest
