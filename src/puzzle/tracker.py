"""
Solution records and the per-search tracker that collects them.
"""

import json
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .rpn import Token, rpn_to_infix

NORMAL = 'normal'
SIGMA = 'sigma'

DEFAULT_WEIGHTS = {'^': 5, 'sqrt': 6, 'root': 7, '!': 8}


def calculate_score(rpn: Sequence[Token],
                    weights: Mapping[str, int] = DEFAULT_WEIGHTS,
                    default: int = 1) -> int:
    """Complexity of an expression: every token costs `default` unless weighted."""
    score = 0
    for token in rpn:
        if isinstance(token, str):
            score += weights.get(token, default)
        else:
            score += default
    return score


@dataclass
class Solution:
    """An expression reaching some value. `rpn` is empty for a pure sigma sum."""
    value: int
    expression: str
    rpn: List[Token]
    type: str = NORMAL
    sigma: Optional[Dict[str, Any]] = None
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())


@dataclass
class Closest(Solution):
    """Best candidate seen so far, with its distance to the target."""
    distance: float = float('inf')


@dataclass
class SearchResult:
    exact_solutions: List[Solution] = field(default_factory=list)
    closest: Optional[Closest] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exactSolutions': [s.to_dict() for s in self.exact_solutions],
            'closest': self.closest.to_dict() if self.closest else None,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())


class SolutionTracker:
    """
    Mutable state of one search: exact matches keyed by value plus the
    closest candidate. Exact matches are only ever added.
    """

    def __init__(self, target: int, weights: Mapping[str, int] = DEFAULT_WEIGHTS,
                 default_weight: int = 1, max_exact: int = 3):
        self.target = target
        self.weights = weights
        self.default_weight = default_weight
        self.max_exact = max_exact
        self.solutions: Dict[int, Solution] = {}
        self.closest: Optional[Closest] = None

    def score(self, rpn: Sequence[Token]) -> int:
        return calculate_score(rpn, self.weights, self.default_weight)

    def update(self, value: int, rpn: Sequence[Token], type: str = NORMAL,
               sigma: Optional[Dict[str, Any]] = None, score: Optional[int] = None) -> None:
        """
        Feed one successfully evaluated candidate.

        The closest record only moves on a strictly smaller distance, and an
        exact record is only inserted when none exists for that value yet.
        """
        distance = abs(value - self.target)
        closer = self.closest is None or distance < self.closest.distance
        exact = value == self.target and value not in self.solutions
        if not (closer or exact):
            return

        rpn = list(rpn)
        if score is None:
            score = self.score(rpn)
        expression = rpn_to_infix(rpn)
        if closer:
            self.closest = Closest(value=value, expression=expression, rpn=rpn, type=type,
                                   sigma=sigma, score=score, distance=distance)
        if exact:
            self.solutions[value] = Solution(value=value, expression=expression, rpn=rpn,
                                             type=type, sigma=sigma, score=score)

    def merge(self, solution: Solution) -> None:
        """Take over an exact solution found by a nested search."""
        self.update(solution.value, solution.rpn, solution.type, solution.sigma, solution.score)

    def record_sigma(self, start: int, end: int, total: int, score: int) -> None:
        """Store a pure summation hit, replacing whatever exact record the value had."""
        self.solutions[total] = Solution(
            value=total,
            expression='',
            rpn=[],
            type=SIGMA,
            sigma={'start': start, 'end': end, 'body': 'i'},
            score=score,
        )

    def result(self) -> SearchResult:
        exact = sorted(
            (s for s in self.solutions.values() if s.value == self.target),
            key=lambda s: s.score,
        )
        return SearchResult(exact_solutions=exact[:self.max_exact], closest=self.closest)
