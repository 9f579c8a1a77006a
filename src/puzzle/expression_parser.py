"""
Infix expression parser for IQ180 expressions.

Reads the strings produced by rpn_to_infix (and typed answers written the
same way), turns them back into RPN and evaluates them with the same
integer rules the solver uses.
"""

import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from .rpn import PRECEDENCE, Token, evaluate_rpn


class ExpressionParser:
    """
    Parses infix expressions over integers with + - * / ^ root sqrt() and !.
    Every binary operator is left-associative; "a root b" is the a-th root of b.
    """

    TOKEN_PATTERN = re.compile(r'\s*(?:(\d+)|(root|sqrt)|([-+*/^()!]))')

    def tokenize(self, expression: str) -> List[str]:
        """
        Split an expression into number, word and symbol tokens.

        Raises:
            ValueError: If the expression contains anything else
        """
        tokens = []
        pos = 0
        expression = expression.rstrip()
        while pos < len(expression):
            match = self.TOKEN_PATTERN.match(expression, pos)
            if not match:
                raise ValueError(f"Unexpected character at position {pos}: {expression[pos]!r}")
            tokens.append(match.group(match.lastindex))
            pos = match.end()
        return tokens

    def extract_numbers(self, expression: str) -> List[int]:
        """All integer literals in the expression, in order."""
        return [int(n) for n in re.findall(r'\d+', expression)]

    def validate_numbers(self, expression: str, available: List[int]) -> Tuple[bool, Optional[str]]:
        """
        Check the expression uses exactly the available numbers, each once.

        Returns:
            Tuple of (is_valid, error_message or None)
        """
        used_counter = Counter(self.extract_numbers(expression))
        available_counter = Counter(available)

        for num, count in used_counter.items():
            if num not in available_counter:
                return False, f"Number {num} is not available"
            if count > available_counter[num]:
                return False, f"Number {num} used more times than available"

        missing = available_counter - used_counter
        if missing:
            return False, f"Unused numbers: {', '.join(str(n) for n in sorted(missing.elements()))}"

        return True, None

    def to_rpn(self, expression: str) -> List[Token]:
        """
        Convert an infix expression to RPN (shunting-yard).

        Raises:
            ValueError: On unbalanced parentheses or a misplaced operator
        """
        output: List[Token] = []
        stack: List[str] = []
        expect_operand = True

        for token in self.tokenize(expression):
            if token.isdigit():
                if not expect_operand:
                    raise ValueError(f"Missing operator before {token}")
                output.append(int(token))
                expect_operand = False
            elif token == 'sqrt':
                if not expect_operand:
                    raise ValueError("Missing operator before sqrt")
                stack.append(token)
            elif token == '(':
                if not expect_operand:
                    raise ValueError("Missing operator before '('")
                stack.append(token)
            elif token == ')':
                if expect_operand:
                    raise ValueError("Empty parentheses")
                while stack and stack[-1] != '(':
                    output.append(stack.pop())
                if not stack:
                    raise ValueError("Unbalanced parentheses")
                stack.pop()
                if stack and stack[-1] == 'sqrt':
                    output.append(stack.pop())
            elif token == '!':
                if expect_operand:
                    raise ValueError("'!' needs an operand")
                output.append(token)
            else:
                if expect_operand:
                    raise ValueError(f"'{token}' needs a left operand")
                prec = PRECEDENCE[token]
                while stack and stack[-1] in PRECEDENCE and PRECEDENCE[stack[-1]] >= prec:
                    output.append(stack.pop())
                stack.append(token)
                expect_operand = True

        if expect_operand:
            raise ValueError("Expression ends with an operator")
        while stack:
            op = stack.pop()
            if op in ('(', 'sqrt'):
                raise ValueError("Unbalanced parentheses")
            output.append(op)

        return self._reorder_roots(output)

    @staticmethod
    def _reorder_roots(rpn: List[Token]) -> List[Token]:
        # Written "degree root radicand", evaluated as [radicand, degree, 'root'].
        stack: List[List[Token]] = []
        for token in rpn:
            if isinstance(token, int):
                stack.append([token])
            elif token in ('sqrt', '!'):
                stack.append(stack.pop() + [token])
            else:
                b = stack.pop()
                a = stack.pop()
                stack.append(b + a + [token] if token == 'root' else a + b + [token])
        return stack[0]

    def evaluate(self, expression: str) -> Tuple[bool, Optional[int], Optional[str]]:
        """
        Evaluate an infix expression under the puzzle's integer rules.

        Returns:
            Tuple of (success, result or None, error_message or None)
        """
        if not expression.strip():
            return False, None, "Empty expression"

        try:
            rpn = self.to_rpn(expression)
        except ValueError as e:
            return False, None, f"Invalid syntax: {e}"

        result = evaluate_rpn(rpn)
        if result is None:
            return False, None, "Expression leaves the non-negative integers"
        return True, result, None

    def parse_and_validate(self, expression: str, available_numbers: List[int]) -> Dict:
        """
        Complete validation and evaluation of a player's expression.

        Returns:
            Dictionary with:
            - valid: bool
            - result: int or None
            - error: str or None
            - numbers_used: list of numbers used
        """
        result = {
            'valid': False,
            'result': None,
            'error': None,
            'numbers_used': self.extract_numbers(expression),
        }

        is_valid, error = self.validate_numbers(expression, available_numbers)
        if not is_valid:
            result['error'] = error
            return result

        success, value, error = self.evaluate(expression)
        if not success:
            result['error'] = error
            return result

        result['valid'] = True
        result['result'] = value
        return result
