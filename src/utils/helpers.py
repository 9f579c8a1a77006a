from typing import Optional

from puzzle.tracker import SIGMA, SearchResult, Solution

DISPLAY_SYMBOLS = (
    ('*', ' × '),
    ('/', ' ÷ '),
    ('+', ' + '),
    ('-', ' - '),
    ('sqrt', '√'),
)


def format_expression(expression: Optional[str]) -> str:
    """
    Cosmetic rendering of a solver expression for display
    """
    if not isinstance(expression, str):
        return ''
    for symbol, replacement in DISPLAY_SYMBOLS:
        expression = expression.replace(symbol, replacement)
    return expression


def format_solution(solution: Optional[Solution]) -> str:
    """
    One-line display of a solution, ending in "= value"
    """
    if solution is None:
        return ''

    if solution.type == SIGMA and solution.sigma:
        sigma = solution.sigma
        text = f"Σ(i={sigma['start']}..{sigma['end']}) ({format_expression(sigma['body'])})"
        if solution.expression:
            total = (sigma['start'] + sigma['end']) * (sigma['end'] - sigma['start'] + 1) // 2
            text += f" → {total}; {format_expression(solution.expression)}"
    else:
        text = format_expression(solution.expression)

    return f"{text} = {solution.value}"


def format_result(result: SearchResult, target: int) -> str:
    lines = []
    if result.exact_solutions:
        lines.append(f"Solutions for {target}:")
        for rank, solution in enumerate(result.exact_solutions, 1):
            lines.append(f"  {rank}. {format_solution(solution)}  (score {solution.score})")
    else:
        lines.append(f"No exact solution for {target}.")

    if result.closest is None:
        lines.append("No expression could be evaluated.")
    elif result.closest.distance > 0:
        lines.append(f"Closest: {format_solution(result.closest)}  (off by {result.closest.distance})")

    return '\n'.join(lines)
