"""
Search engine for the IQ180 puzzle: reach a target from a set of numbers.

For every ordering of the numbers and every operator assignment the engine
builds a handful of fixed expression shapes, evaluates them, and feeds the
results to a SolutionTracker. Higher levels add two extensions that rerun
the whole search on a modified number set: pre-reducing one number with
sqrt or !, and replacing two numbers with the sum of the integers between
them.
"""

import logging
from functools import lru_cache
from itertools import product
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from config.config import LEVEL_ORDER, SolverSettings, level_rank
from .rpn import Token, UNBOUNDED, evaluate_rpn, factorial
from .tracker import SIGMA, SearchResult, SolutionTracker

logger = logging.getLogger(__name__)

UNARY_RANK = 2
SLOW_SEARCH_SIZE = 5


def permutations(numbers: Sequence[int]) -> List[Tuple[int, ...]]:
    """
    All distinct orderings of `numbers`.

    Built by inserting the first element at every position of each ordering
    of the rest; orderings equal as sequences are kept once, in the order
    they were first produced.
    """
    def _insertions(items):
        if not items:
            return [()]
        first, rest = items[0], items[1:]
        perms = []
        for perm in _insertions(rest):
            for i in range(len(perm) + 1):
                perms.append(perm[:i] + (first,) + perm[i:])
        return perms

    return list(dict.fromkeys(_insertions(tuple(numbers))))


def operator_combinations(operators: Sequence[str], length: int) -> Iterator[Tuple[str, ...]]:
    """Every ordered assignment of `length` operators, repetition allowed."""
    return product(operators, repeat=length)


def fixed_shapes(p: Sequence[int], ops: Sequence[str]) -> Iterator[List[Token]]:
    """
    The restricted set of shapes tried for one ordering and assignment:
      left fold       ((a op b) op c) ...
      balanced pair   (a op b) op (c op d)                 4 numbers
      grouped triple  ((a op b) op (c op d)) op e          5 numbers
    """
    rpn: List[Token] = [p[0]]
    for num, op in zip(p[1:], ops):
        rpn += [num, op]
    yield rpn

    if len(p) == 4 and len(ops) >= 3:
        yield [p[0], p[1], ops[0], p[2], p[3], ops[1], ops[2]]
    if len(p) == 5 and len(ops) >= 4:
        yield [p[0], p[1], ops[0], p[2], p[3], ops[1], ops[2], p[4], ops[3]]


@lru_cache(maxsize=None)
def tree_templates(n: int) -> Tuple[Tuple[str, ...], ...]:
    """
    Postfix templates of every full binary tree with n leaves.

    'n' marks a leaf and 'o' an operator slot; leaves and slots are filled
    left to right. There are Catalan(n - 1) templates.
    """
    if n == 1:
        return (('n',),)
    templates = []
    for left in range(1, n):
        for lhs in tree_templates(left):
            for rhs in tree_templates(n - left):
                templates.append(lhs + rhs + ('o',))
    return tuple(templates)


def tree_shapes(p: Sequence[int], ops: Sequence[str]) -> Iterator[List[Token]]:
    for template in tree_templates(len(p)):
        nums = iter(p)
        slots = iter(ops)
        yield [next(nums) if slot == 'n' else next(slots) for slot in template]


class PuzzleSolver:
    """
    Finds expressions over a number set that reach a target.

    One solve() call is a pure function of (numbers, target, level). Nested
    searches started by the extensions get their own tracker; only their
    exact solutions flow back into the caller's tracker.
    """

    def __init__(self, settings: Optional[SolverSettings] = None):
        self.settings = settings or SolverSettings()
        self._shapes = tree_shapes if self.settings.shapes == 'trees' else fixed_shapes
        self._nested: Dict[Tuple[Tuple[int, ...], int, str], SearchResult] = {}

    def solve(self, numbers: Sequence[int], target: int, level: str = 'B') -> SearchResult:
        """
        Search for expressions over `numbers` equal to (or near) `target`.

        Args:
            numbers: Non-negative integers, each used exactly once.
            target: The number to reach.
            level: 'B', '1', '2' or '3'; selects the operator set.

        Returns:
            SearchResult with up to max_exact_solutions exact matches ranked
            by score, and the closest candidate seen.
        """
        self._nested = {}
        if level_rank(level) >= UNARY_RANK and len(numbers) >= SLOW_SEARCH_SIZE:
            logger.info("Searching %d numbers at level %s; this can take several minutes",
                        len(numbers), level)
        result = self._search(tuple(numbers), target, level)
        logger.debug("Solved %s -> %s at level %s: %d exact, %d nested searches",
                     list(numbers), target, level, len(result.exact_solutions), len(self._nested))
        return result

    def _evaluate(self, rpn: Sequence[Token]) -> Optional[int]:
        s = self.settings
        return evaluate_rpn(rpn, s.power_ceiling, s.root_tolerance, s.factorial_limit)

    def _nested_search(self, numbers: Sequence[int], target: int, level: str) -> SearchResult:
        # Nested results depend only on the multiset, so search it in ascending order.
        key = (tuple(sorted(numbers)), target, level)
        if key not in self._nested:
            self._nested[key] = self._search(key[0], target, level)
        return self._nested[key]

    def _search(self, numbers: Tuple[int, ...], target: int, level: str) -> SearchResult:
        s = self.settings
        tracker = SolutionTracker(target, s.operator_weights, s.default_weight, s.max_exact_solutions)
        if not numbers:
            return tracker.result()

        operators = s.operators_for(level)
        perms = permutations(numbers)
        logger.debug("Searching %s -> %s at level %s over %d orderings",
                     list(numbers), target, level, len(perms))

        for p in perms:
            for ops in operator_combinations(operators, len(p) - 1):
                for rpn in self._shapes(p, ops):
                    value = self._evaluate(rpn)
                    if value is not None:
                        tracker.update(value, rpn)

            if level_rank(level) >= UNARY_RANK:
                self._unary_pass(p, target, level, operators, tracker)

        if level == s.top_level and level in s.levels:
            self._summation_pass(perms, target, tracker)

        return tracker.result()

    def _unary_substitutions(self, n: int, operators: Sequence[str]) -> Iterator[int]:
        if 'sqrt' in operators:
            root = evaluate_rpn([n, 'sqrt'])
            if root is not None and root != n:
                yield root
        if '!' in operators:
            fact = factorial(n, self.settings.factorial_limit)
            if fact is not UNBOUNDED and fact != n:
                yield fact

    def _unary_pass(self, p: Tuple[int, ...], target: int, level: str,
                    operators: Sequence[str], tracker: SolutionTracker) -> None:
        """
        Pre-reduce one number with sqrt or ! and search again.

        The reduced value enters the nested search as a plain number, so the
        expressions it returns show e.g. 3 where sqrt(9) was used.
        """
        for i, n in enumerate(p):
            for reduced in self._unary_substitutions(n, operators):
                substituted = p[:i] + (reduced,) + p[i + 1:]
                for solution in self._nested_search(substituted, target, level).exact_solutions:
                    tracker.merge(solution)

    def _summation_pass(self, perms: Sequence[Tuple[int, ...]], target: int,
                        tracker: SolutionTracker) -> None:
        """Replace two numbers start < end with start + (start + 1) + ... + end."""
        s = self.settings
        sub_level = LEVEL_ORDER[-2]
        for p in perms:
            for i, start in enumerate(p):
                for j, end in enumerate(p):
                    if i == j or start >= end or end - start > s.sigma_max_span:
                        continue

                    total = (start + end) * (end - start + 1) // 2
                    rest = [n for k, n in enumerate(p) if k != i and k != j]
                    sub = self._nested_search(rest + [total], target, sub_level)

                    if s.merge_sigma_subsolutions:
                        sigma = {'start': start, 'end': end, 'body': 'i'}
                        for solution in sub.exact_solutions:
                            tracker.update(solution.value, solution.rpn, SIGMA, sigma,
                                           solution.score + s.sigma_score)

                    if total == target:
                        logger.debug("Sum of %d..%d hits target %d", start, end, target)
                        tracker.record_sigma(start, end, total, s.sigma_score)


def find_solutions(numbers: Sequence[int], target: int, level: str = 'B',
                   settings: Optional[SolverSettings] = None) -> SearchResult:
    """Convenience wrapper around PuzzleSolver(settings).solve()."""
    return PuzzleSolver(settings).solve(numbers, target, level)
