# IQ180 number puzzle solver
from .expression_parser import ExpressionParser
from .rpn import evaluate_rpn, factorial, rpn_to_infix
from .search import PuzzleSolver, find_solutions, permutations
from .tracker import Closest, SearchResult, Solution, SolutionTracker, calculate_score

__all__ = [
    'ExpressionParser',
    'PuzzleSolver',
    'find_solutions',
    'permutations',
    'evaluate_rpn',
    'factorial',
    'rpn_to_infix',
    'Closest',
    'SearchResult',
    'Solution',
    'SolutionTracker',
    'calculate_score',
]
