"""Test class ExpressionEvaluator."""

import pytest

from calculation_api.common.errors import InvalidExpressionError
from calculation_api.common.evaluator import ExpressionEvaluator


@pytest.mark.parametrize("expr,expected", [
    ("2+2", "4"),
    ("10/2", "5"),
    ("3 * 4", "12"),
    ("10 / 4", "2.5"),
    ("3 + 4 * 2", "11"),  # tests precedence
    ("(3 + 4) * 2", "14"),
    ("7 + 3 * 2 - 4 / 2", "11"),
    ("-8 + 3", "-5"),
    ("2 ** 10", "1024"),
    ("7 % 3", "1"),
    ("-7 % 3", "-1"),  # sign follows the dividend
    ("1.5 + 1.5", "3"),
    ("1 / 3", "0.3333333333333333"),
    ("1e3", "1000"),
    ("100000", "100000"),
    ("999999", "999999"),
    ("1000 * 1000", "1e+06"),
    ("1234567.5", "1.2345675e+06"),
    ("-2 * 1e6", "-2e+06"),
    ("1 / 10000", "0.0001"),
    ("1 / 100000", "1e-05"),
    ("1.5e-7", "1.5e-07"),
])
def test_evaluate_arithmetic(expr, expected):
    """Evaluate returns the canonical text of arithmetic results."""
    assert ExpressionEvaluator.evaluate(expr) == expected


@pytest.mark.parametrize("expr,expected", [
    ("3 > 2", "true"),
    ("3 < 2", "false"),
    ("2 + 2 == 4", "true"),
    ("1 != 1", "false"),
    ("1 < 2 < 3", "true"),
    ("3 > 2 && 1 > 2", "false"),
    ("3 > 2 || 1 > 2", "true"),
    ("!false", "true"),
    ("!(1 == 1)", "false"),
    ("true and not false", "true"),
    ("True == true", "true"),
    ("true == 1", "false"),  # booleans never equal numbers
])
def test_evaluate_boolean(expr, expected):
    """Comparisons and logical operators produce "true" or "false"."""
    assert ExpressionEvaluator.evaluate(expr) == expected


@pytest.mark.parametrize("expr", [
    "2+",             # Trailing operator
    "foo(",           # Unbalanced call
    "",               # Empty expression
    "   ",            # Blank expression
    "x + 1",          # Undefined variable
    "abs(-1)",        # Function call
    "__import__('os')",
    "'a' + 'b'",      # String literals
    "(1).real",       # Attribute access
    "[1, 2][0]",      # Subscript
    "1 / 0",          # Division by zero
    "1 % 0",          # Modulo by zero
    "10 ** 400",      # Overflow
    "1e308 * 10",     # Infinite result
    "true + 1",       # Boolean in arithmetic
    "1 && true",      # Number in logical operator
    "!3",             # Number negated logically
    "true < false",   # Ordering booleans
    "1 is 1",         # Unsupported comparison
    "~1",             # Unsupported unary operator
    "1 & 1",          # Unsupported binary operator
    "(-8) ** 0.5",    # Complex result
    "2 < 1 in 3",     # Unsupported comparison after a false link
    "1 < 2 is 2",     # Unsupported comparison after a true link
    "-" * 200_000 + "1",  # Parser stack exhausted by stacked unary operators
    "1j",             # Complex literal
])
def test_evaluate_invalid_expression(expr):
    """Evaluate raises InvalidExpressionError for malformed or unsupported input."""
    with pytest.raises(InvalidExpressionError):
        ExpressionEvaluator.evaluate(expr)


def test_evaluate_deeply_nested_expression():
    """Pathologically nested input is rejected instead of crashing."""
    with pytest.raises(InvalidExpressionError):
        ExpressionEvaluator.evaluate("(" * 500 + "1" + ")" * 500)


@pytest.mark.parametrize("expr,expected", [
    ("a && b", "a  and  b"),
    ("a || b", "a  or  b"),
    ("!a", "not a"),
    ("a != b", "a != b"),
])
def test_normalize_rewrites_logical_operators(expr, expected):
    """normalize maps C-style logical operators to Python keywords."""
    assert ExpressionEvaluator.normalize(expr) == expected


@pytest.mark.parametrize("value,expected", [
    (True, "true"),
    (False, "false"),
    (4.0, "4"),
    (-0.5, "-0.5"),
    (1e21, "1e+21"),
    (0.0, "0"),
    (0.5, "0.5"),
    (123450.0, "123450"),
    (1e6, "1e+06"),
    (1e100, "1e+100"),
    (0.00012, "0.00012"),
    (0.000012, "1.2e-05"),
    (123456.789, "123456.789"),
])
def test_format_result(value, expected):
    """format_result produces canonical result text."""
    assert ExpressionEvaluator.format_result(value) == expected
