"""Parse and evaluate arithmetic and boolean expressions safely."""
import ast
from decimal import Decimal
import math
import operator
import re
import reprlib
from typing import Callable, Dict, List, Tuple, Type, Union

from calculation_api.common.errors import InvalidExpressionError


# Every number is evaluated as a float, comparisons and logical operators yield booleans
Value = Union[float, bool]

BINARY_OPERATORS: Dict[Type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: math.fmod,
    ast.Pow: math.pow,
}

UNARY_OPERATORS: Dict[Type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

COMPARISON_OPERATORS: Dict[Type[ast.cmpop], Callable[[Value, Value], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

BOOLEAN_LITERALS: Dict[str, bool] = {
    "true": True,
    "false": False,
    "True": True,
    "False": False,
}

# C-style logical operators and their Python spelling
LOGICAL_ALIASES: List[Tuple["re.Pattern[str]", str]] = [
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
]

# Decimal exponents outside [MIN_FIXED_EXPONENT, MAX_FIXED_EXPONENT) are written in exponent form
MIN_FIXED_EXPONENT = -4
MAX_FIXED_EXPONENT = 6


class ExpressionEvaluator:
    """
    Evaluate infix arithmetic and boolean expressions without eval().

    Design constraints:
        - No eval(), no dynamic code execution
        - No variables: an expression holds only literals and operators
        - Safe, deterministic computation

    Algorithm:
        1. Rewrite C-style logical operators (&&, ||, !) to Python keywords
        2. Parse the text into a Python AST in "eval" mode
        3. Walk the tree, accepting only whitelisted node types

    Examples:
        - "2 + 2" -> "4"
        - "10 / 4" -> "2.5"
        - "3 > 2 && !false" -> "true"
    """

    @staticmethod
    def normalize(expr: str) -> str:
        """
        Rewrite C-style logical operators to their Python spelling.

        :param str expr: Raw expression

        :return: Expression using "and", "or" and "not"
        :rtype: str
        """
        for pattern, replacement in LOGICAL_ALIASES:
            expr = pattern.sub(replacement, expr)
        return expr.strip()

    @staticmethod
    def parse(expr: str) -> ast.expr:
        """
        Parse a normalized expression into the body of an AST.

        :param str expr: Normalized expression

        :return: Root node of the expression
        :rtype: ast.expr
        :raises SyntaxError: If the expression is malformed
        """
        return ast.parse(expr, mode="eval").body

    @staticmethod
    def _number(value: Value) -> float:
        """Ensure an operand is numeric."""
        if isinstance(value, bool):
            raise InvalidExpressionError(f"expected a number, got {str(value).lower()}")
        return value

    @staticmethod
    def _boolean(value: Value) -> bool:
        """Ensure an operand is boolean."""
        if not isinstance(value, bool):
            raise InvalidExpressionError(f"expected a boolean, got {value!r}")
        return value

    @classmethod
    def _compare(cls, op: ast.cmpop, left: Value, right: Value) -> bool:
        """Apply one comparison operator."""
        if isinstance(op, (ast.Eq, ast.NotEq)):
            # A boolean never equals a number, even though True == 1.0 in Python
            if isinstance(left, bool) != isinstance(right, bool):
                return isinstance(op, ast.NotEq)
            return COMPARISON_OPERATORS[type(op)](left, right)
        return COMPARISON_OPERATORS[type(op)](cls._number(left), cls._number(right))

    @classmethod
    def _eval_node(cls, node: ast.AST) -> Value:
        """
        Recursively evaluate a whitelisted AST node.

        :param ast.AST node: Node to evaluate

        :return: Numeric or boolean value
        :rtype: Value
        :raises InvalidExpressionError: If the node or its operands are not supported
        """
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool):
                return node.value
            if isinstance(node.value, (int, float)):
                return float(node.value)
            raise InvalidExpressionError(f"unsupported literal: {node.value!r}")

        if isinstance(node, ast.Name):
            if node.id in BOOLEAN_LITERALS:
                return BOOLEAN_LITERALS[node.id]
            raise InvalidExpressionError(f"undefined variable: {node.id}")

        if isinstance(node, ast.BinOp) and type(node.op) in BINARY_OPERATORS:
            left = cls._number(cls._eval_node(node.left))
            right = cls._number(cls._eval_node(node.right))
            return BINARY_OPERATORS[type(node.op)](left, right)

        if isinstance(node, ast.UnaryOp):
            operand = cls._eval_node(node.operand)
            if isinstance(node.op, ast.Not):
                return not cls._boolean(operand)
            if type(node.op) in UNARY_OPERATORS:
                return UNARY_OPERATORS[type(node.op)](cls._number(operand))

        if isinstance(node, ast.Compare):
            unsupported = [op for op in node.ops if type(op) not in COMPARISON_OPERATORS]
            if unsupported:
                raise InvalidExpressionError(f"unsupported comparison: {type(unsupported[0]).__name__}")
            left = cls._eval_node(node.left)
            for op, comparator in zip(node.ops, node.comparators):
                right = cls._eval_node(comparator)
                if not cls._compare(op, left, right):
                    return False
                left = right
            return True

        if isinstance(node, ast.BoolOp):
            values = [cls._boolean(cls._eval_node(value)) for value in node.values]
            return all(values) if isinstance(node.op, ast.And) else any(values)

        raise InvalidExpressionError(f"unsupported syntax: {type(node).__name__}")

    @staticmethod
    def format_result(value: Value) -> str:
        """
        Convert an evaluated value into its canonical text.

        Booleans become "true"/"false". Numbers use the shortest digits that
        round-trip, in fixed notation unless the decimal exponent is below -4
        or at least 6, where exponent notation with a signed two-digit
        exponent is used: 100000 -> "100000", 1e6 -> "1e+06", 1e-05 -> "1e-05".

        :param Value value: Evaluated value

        :return: Canonical result text
        :rtype: str
        :raises InvalidExpressionError: If the value is infinite or NaN
        """
        if isinstance(value, bool):
            return "true" if value else "false"
        if not math.isfinite(value):
            raise InvalidExpressionError("result is not a finite number")

        sign = "-" if math.copysign(1.0, value) < 0 else ""
        if value == 0:
            return f"{sign}0"

        # repr() gives the shortest round-trip digits
        parsed = Decimal(repr(abs(value))).normalize().as_tuple()
        digits = "".join(str(d) for d in parsed.digits)
        point = len(digits) + parsed.exponent
        exponent = point - 1

        if exponent < MIN_FIXED_EXPONENT or exponent >= MAX_FIXED_EXPONENT:
            mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
            return f"{sign}{mantissa}e{'-' if exponent < 0 else '+'}{abs(exponent):02d}"
        if parsed.exponent >= 0:
            return sign + digits + "0" * parsed.exponent
        if point > 0:
            return f"{sign}{digits[:point]}.{digits[point:]}"
        return f"{sign}0.{'0' * -point}{digits}"

    @classmethod
    def evaluate(cls, expr: str) -> str:
        """
        Evaluate an expression and return its canonical result text.

        :param str expr: Expression string

        :return: Result text, e.g. "4" or "true"
        :rtype: str
        :raises InvalidExpressionError: If the expression is empty, malformed or cannot be evaluated
        """
        normalized: str = cls.normalize(expr)
        if not normalized:
            raise InvalidExpressionError("Empty expression")

        try:
            value: Value = cls._eval_node(cls.parse(normalized))
        except (
            SyntaxError, ValueError, ZeroDivisionError, OverflowError, RecursionError, MemoryError
        ) as exc:
            # The parser raises MemoryError on very deeply nested input
            raise InvalidExpressionError(f"invalid expression {reprlib.repr(expr)}: {exc}") from exc

        return cls.format_result(value)
