# src/kaprekar/expreval.py
"""
Natural-number input: literals, grouped digits and safe integer expressions.

    parse_natural("6174")        -> 6174
    parse_natural("1 000 000")   -> 1000000
    parse_natural("10**30 + 1")  -> 10**30 + 1
    parse_natural("2e5")         -> 200000
"""

import ast
import operator as op
import re

from kaprekar.utility import UserInputError, dec_digits, effective_digit_limit

# ---- simple number parsing helpers ----
_THIN_SPACES = ("\u2009", "\u202F", "\u00A0")  # thin, narrow no-break, no-break
_SEP_CLASS = r"[ ,._\u00A0\u2009\u202F]"      # spaces/commas/dots/underscores & NBSP variants
_GROUPED_RE = re.compile(rf"^[+-]?\d{{1,3}}(?:{_SEP_CLASS}\d{{3}})+$")

# ---- allowed operators (safe subset) ----
_ALLOWED_BINOPS = {
    ast.Add:      op.add,
    ast.Sub:      op.sub,
    ast.Mult:     op.mul,
    ast.FloorDiv: op.floordiv,
    ast.Mod:      op.mod,
    ast.LShift:   op.lshift,
    ast.RShift:   op.rshift,
}
_ALLOWED_UNARYOPS = {
    ast.UAdd: op.pos,
    ast.USub: op.neg,
}

_MAX_NODES = 256  # sanity guard


class _IntExprError(Exception):
    pass


_SCI_NOTATION_TOKEN = re.compile(
    r"""
    (?<![\w.])          # not immediately after a word char or dot
    ([+\-]?)            # optional sign
    (\d+)               # mantissa (digits)
    [eE]
    ([+\-]?\d+)         # exponent (optional sign + digits)
    (?![\w.])           # not immediately before a word char or dot
    """,
    re.VERBOSE,
)


def _too_many_digits(limit: int | None) -> UserInputError:
    return UserInputError(
        f"number has more than {limit} decimal digits. "
        "Increase BEHAVIOUR.MAX_DIGITS in the profile or pass a smaller value."
    )


def _would_exceed_digit_limit_for_pow(base: int, exp: int, limit: int | None) -> bool:
    """
    Cheap lower bound on the decimal digits of base**exp, using
    base**exp >= 2**exp for |base| >= 2 and log10(2) ~ 30103/100000.
    """
    if limit is None or exp <= 0 or abs(base) <= 1:
        return False
    return 1 + (exp * 30103) // 100000 > limit


def _rewrite_scientific_notation(expr: str) -> str:
    """
    Rewrite base-10 scientific notation tokens into exact integer expressions:

        1e3   -> 10**(3)
        2e5   -> (2)*10**(5)

    Negative exponents are not integers and are rejected.
    """

    def repl(m: re.Match) -> str:
        sign, mant, exp_str = m.group(1), m.group(2), m.group(3)
        exp = int(exp_str)
        if exp < 0:
            raise _IntExprError("scientific notation with negative exponent is not an integer")
        if int(mant) == 0:
            return "0"
        full_mant = (sign or "") + mant
        if full_mant == "1":
            return f"10**({exp})"
        return f"({full_mant})*10**({exp})"

    return _SCI_NOTATION_TOKEN.sub(repl, expr)


def _eval_int_expr(expr: str) -> int:
    """
    Evaluate a *safe* integer expression.

    Allowed: integers (incl. underscores), parentheses,
             + - * // % **, << >>, unary +/-, scientific notation.
    Disallowed: names, calls, attributes, subscripts, floats,
                negative exponents.
    BEHAVIOUR.MAX_DIGITS is enforced on literals, powers and the result.
    """
    limit = effective_digit_limit()
    expr = _rewrite_scientific_notation(expr)

    try:
        tree = ast.parse(expr.strip(), mode="eval")
    except SyntaxError as e:
        raise _IntExprError("invalid integer expression") from e

    if sum(1 for _ in ast.walk(tree)) > _MAX_NODES:
        raise _IntExprError("expression too large")

    def _eval(node) -> int:
        if isinstance(node, ast.Expression):
            return _eval(node.body)

        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, int):
                raise _IntExprError("non-integer values are not allowed in integer expressions")
            return node.value

        if isinstance(node, ast.UnaryOp) and type(node.op) in _ALLOWED_UNARYOPS:
            return _ALLOWED_UNARYOPS[type(node.op)](_eval(node.operand))

        if isinstance(node, ast.BinOp):
            op_type = type(node.op)

            if op_type is ast.Pow:
                base = _eval(node.left)
                exp = _eval(node.right)
                if exp < 0:
                    raise _IntExprError("negative exponents are not allowed")
                if _would_exceed_digit_limit_for_pow(base, exp, limit):
                    raise _too_many_digits(limit)
                return pow(base, exp)

            if op_type in (ast.FloorDiv, ast.Mod):
                left, right = _eval(node.left), _eval(node.right)
                if right == 0:
                    raise _IntExprError("division by zero")
                return _ALLOWED_BINOPS[op_type](left, right)

            if op_type in _ALLOWED_BINOPS:
                return _ALLOWED_BINOPS[op_type](_eval(node.left), _eval(node.right))

        if isinstance(node, ast.Call):
            raise _IntExprError("function calls are not allowed")

        raise _IntExprError(f"unsupported syntax: {type(node).__name__}")

    value = _eval(tree)

    if limit is not None and dec_digits(value) > limit:
        raise _too_many_digits(limit)
    return value


def _parse_int_literal(text: str) -> int | None:
    """Accepts: 42  1_000_000  0xFF  0b1010  123.456.789  123 456 789
       Rejects: 3.14  1,23  12.34.56  0xG1"""

    if text is None:
        return None

    s = text.strip()
    if not s:
        return None

    for ch in _THIN_SPACES:
        s = s.replace(ch, " ")

    if s.lower().startswith(("0x", "0b", "0o")):
        try:
            return int(s.replace("_", ""), 0)
        except ValueError:
            return None

    if re.fullmatch(r"[+-]?\d[\d_]*", s):
        compact = s.replace("_", "")
    elif _GROUPED_RE.match(s):
        compact = re.sub(_SEP_CLASS, "", s)
    else:
        return None

    limit = effective_digit_limit()
    if limit is not None and len(compact.lstrip("+-")) > limit:
        raise _too_many_digits(limit)
    return int(compact)


# ---- public entry point ----
def parse_natural(s: str, label: str = "number") -> int:
    """Parse a non-negative integer from CLI text; UserInputError otherwise."""
    n = _parse_int_literal(s)
    if n is None:
        try:
            n = _eval_int_expr(s)
        except _IntExprError as e:
            raise UserInputError(f"Invalid input: {label} {s!r} is not an integer ({e}).") from None
    if n < 0:
        raise UserInputError(f"Invalid input: {label} must be a natural number (>= 0), got {n}.")
    return n
