"""
RPN evaluation and rendering for the IQ180 puzzle.

Expressions are lists of tokens: ints are numbers, strings are operators.
Every value the evaluator produces is a non-negative integer; any step that
would leave the integers (or go negative) makes the whole expression
inapplicable and the evaluator returns None.
"""

import math
import operator
from typing import List, Optional, Sequence, Union

Token = Union[int, str]

UNBOUNDED = math.inf

UNARY_OPERATORS = ('sqrt', '!')
BINARY_OPERATORS = ('+', '-', '*', '/', '^', 'root')

PRECEDENCE = {
    '+': 1,
    '-': 1,
    '*': 2,
    '/': 2,
    '^': 3,
    'root': 3,
}
ATOM_PRECEDENCE = 4

POWER_CEILING = 10000
FACTORIAL_LIMIT = 10
ROOT_TOLERANCE = 1e-5


def factorial(n: int, limit: int = FACTORIAL_LIMIT) -> Union[int, float]:
    """n! for 0 <= n <= limit, UNBOUNDED otherwise."""
    if n < 0 or n > limit:
        return UNBOUNDED
    return math.factorial(n)


def _power(a: int, b: int, ceiling: int) -> Optional[int]:
    if a in (0, 1):
        return 1 if b == 0 else a
    # a >= 2 here, so 2**b already bounds the result from below
    if b > ceiling.bit_length():
        return None
    result = a ** b
    if result > ceiling:
        return None
    return result


def _root(a: int, b: int, tolerance: float) -> Optional[int]:
    if b < 2 or a < 0:
        return None
    try:
        res = a ** (1.0 / b)
    except OverflowError:
        # radicand too large for a float
        return None
    if abs(res - round(res)) > tolerance:
        return None
    return int(round(res))


def _divide(a: int, b: int) -> Optional[int]:
    if b == 0 or a % b != 0:
        return None
    return a // b


def _subtract(a: int, b: int) -> Optional[int]:
    if a < b:
        return None
    return a - b


SAFE_OPERATORS = {
    '+': operator.add,
    '-': _subtract,
    '*': operator.mul,
    '/': _divide,
}


def evaluate_rpn(rpn: Sequence[Token],
                 power_ceiling: int = POWER_CEILING,
                 root_tolerance: float = ROOT_TOLERANCE,
                 factorial_limit: int = FACTORIAL_LIMIT) -> Optional[int]:
    """
    Evaluate an RPN token sequence under the puzzle's integer rules.

    Args:
        rpn: Numbers and operator tokens, left to right.
        power_ceiling: Largest result '^' may produce.
        root_tolerance: How close a real root must be to an integer.
        factorial_limit: Largest operand '!' accepts.

    Returns:
        The single resulting integer, or None when any operator is
        inapplicable or the sequence is malformed.
    """
    stack: List[int] = []
    for token in rpn:
        if isinstance(token, int):
            stack.append(token)
            continue

        if token in UNARY_OPERATORS:
            if not stack:
                return None
            a = stack.pop()
            if a < 0:
                return None
            if token == '!':
                res = factorial(a, factorial_limit)
                if res is UNBOUNDED:
                    return None
            else:
                res = math.isqrt(a)
                if res * res != a:
                    return None
            stack.append(res)
            continue

        if len(stack) < 2:
            return None
        b = stack.pop()
        a = stack.pop()
        if token in SAFE_OPERATORS:
            res = SAFE_OPERATORS[token](a, b)
        elif token == '^':
            res = _power(a, b, power_ceiling)
        elif token == 'root':
            res = _root(a, b, root_tolerance)
        else:
            return None
        if res is None:
            return None
        stack.append(res)

    if len(stack) != 1:
        return None
    return stack[0]


def rpn_to_infix(rpn: Sequence[Token]) -> str:
    """
    Render a valid RPN sequence as an infix string with minimal parentheses.

    The operand written to the left of an operator is wrapped when it binds
    looser than the operator, the one written to the right when it binds
    looser or equally, so every operator reads left-associatively. Degree
    comes first for root: [8, 3, 'root'] renders as "3 root 8".
    """
    stack = []
    for token in rpn:
        if isinstance(token, int):
            stack.append((str(token), ATOM_PRECEDENCE))
        elif token in UNARY_OPERATORS:
            text, prec = stack.pop()
            if token == '!':
                operand = text if prec == ATOM_PRECEDENCE else f"({text})"
                stack.append((f"{operand}!", ATOM_PRECEDENCE))
            else:
                stack.append((f"sqrt({text})", ATOM_PRECEDENCE))
        else:
            b = stack.pop()
            a = stack.pop()
            op_prec = PRECEDENCE[token]
            left, right = (b, a) if token == 'root' else (a, b)
            left_text = f"({left[0]})" if left[1] < op_prec else left[0]
            right_text = f"({right[0]})" if right[1] <= op_prec else right[0]
            if token == 'root':
                text = f"{left_text} root {right_text}"
            else:
                text = f"{left_text}{token}{right_text}"
            stack.append((text, op_prec))

    if not stack:
        return ''
    return stack[0][0]
