import unittest

from config.config import SolverSettings
from puzzle.rpn import evaluate_rpn
from puzzle.search import (PuzzleSolver, find_solutions, fixed_shapes, operator_combinations,
                           permutations, tree_shapes, tree_templates)


class TestPermutations(unittest.TestCase):

    def test_distinct_values(self):
        perms = permutations([1, 2, 3])
        self.assertEqual(len(perms), 6)
        self.assertEqual(len(set(perms)), 6)
        self.assertEqual(perms[0], (1, 2, 3))

    def test_repeated_values_collapse(self):
        perms = permutations([2, 2, 3])
        self.assertEqual(sorted(perms), [(2, 2, 3), (2, 3, 2), (3, 2, 2)])

    def test_all_equal(self):
        self.assertEqual(permutations([5, 5, 5]), [(5, 5, 5)])

    def test_single_and_empty(self):
        self.assertEqual(permutations([7]), [(7,)])
        self.assertEqual(permutations([]), [()])

    def test_count_with_two_pairs(self):
        self.assertEqual(len(permutations([1, 5, 9, 9])), 12)


class TestShapes(unittest.TestCase):

    def test_operator_combinations_repeat_and_order(self):
        combos = list(operator_combinations(['+', '-'], 2))
        self.assertEqual(combos, [('+', '+'), ('+', '-'), ('-', '+'), ('-', '-')])
        self.assertEqual(list(operator_combinations(['+'], 0)), [()])
        self.assertEqual(len(list(operator_combinations(['+', '-', '*', '/'], 3))), 64)

    def test_left_fold_only_for_three(self):
        shapes = list(fixed_shapes((1, 2, 3), ('+', '*')))
        self.assertEqual(shapes, [[1, 2, '+', 3, '*']])

    def test_four_numbers_add_balanced_pair(self):
        shapes = list(fixed_shapes((1, 2, 3, 4), ('+', '-', '*')))
        self.assertEqual(shapes, [
            [1, 2, '+', 3, '-', 4, '*'],
            [1, 2, '+', 3, 4, '-', '*'],
        ])

    def test_five_numbers_add_grouped_triple(self):
        shapes = list(fixed_shapes((1, 2, 3, 4, 5), ('+', '-', '*', '/')))
        self.assertEqual(len(shapes), 2)
        self.assertEqual(shapes[1], [1, 2, '+', 3, 4, '-', '*', 5, '/'])

    def test_single_number(self):
        self.assertEqual(list(fixed_shapes((4,), ())), [[4]])

    def test_tree_templates_follow_catalan(self):
        self.assertEqual([len(tree_templates(n)) for n in range(1, 6)], [1, 1, 2, 5, 14])

    def test_tree_shapes_include_right_nesting(self):
        shapes = list(tree_shapes((1, 2, 3), ('-', '-')))
        self.assertIn([1, 2, '-', 3, '-'], shapes)
        self.assertIn([1, 2, 3, '-', '-'], shapes)


class TestFindSolutions(unittest.TestCase):

    def test_left_fold_sum(self):
        result = find_solutions([1, 2, 3, 4], 10, 'B')
        self.assertEqual(len(result.exact_solutions), 1)
        best = result.exact_solutions[0]
        self.assertEqual(best.rpn, [1, 2, '+', 3, '+', 4, '+'])
        self.assertEqual(best.expression, '1+2+3+4')
        self.assertEqual(best.value, 10)
        # seven tokens at weight 1
        self.assertEqual(best.score, 7)
        self.assertEqual(best.type, 'normal')
        self.assertEqual(result.closest.distance, 0)

    def test_single_number(self):
        result = find_solutions([4], 4, 'B')
        self.assertEqual(len(result.exact_solutions), 1)
        solution = result.exact_solutions[0]
        self.assertEqual(solution.rpn, [4])
        self.assertEqual(solution.score, 1)
        self.assertEqual(result.closest.rpn, [4])
        self.assertEqual(result.closest.value, 4)
        self.assertEqual(result.closest.distance, 0)

    def test_two_numbers(self):
        result = find_solutions([3, 5], 8, 'B')
        solution = result.exact_solutions[0]
        self.assertEqual(solution.rpn, [3, 5, '+'])
        self.assertEqual(solution.expression, '3+5')
        self.assertEqual(solution.score, 3)

    def test_root_rejected_division_found(self):
        self.assertIsNone(evaluate_rpn([8, 2, 'root']))
        result = find_solutions([2, 8], 4, '2')
        self.assertEqual(result.exact_solutions[0].rpn, [8, 2, '/'])

    def test_closest_when_unreachable(self):
        result = find_solutions([2, 3], 100, 'B')
        self.assertEqual(result.exact_solutions, [])
        self.assertEqual(result.closest.value, 6)
        self.assertEqual(result.closest.expression, '2*3')
        self.assertEqual(result.closest.distance, 94)

    def test_empty_numbers(self):
        result = find_solutions([], 5, 'B')
        self.assertEqual(result.exact_solutions, [])
        self.assertIsNone(result.closest)

    def test_level_gates_power(self):
        self.assertEqual(find_solutions([2, 3], 8, 'B').exact_solutions, [])
        solution = find_solutions([2, 3], 8, '1').exact_solutions[0]
        self.assertEqual(solution.rpn, [2, 3, '^'])
        self.assertEqual(solution.score, 7)

    def test_unknown_level_falls_back_to_basic(self):
        with self.assertLogs('config.config', level='WARNING'):
            result = find_solutions([3, 5], 8, 'X')
        self.assertEqual(result.exact_solutions[0].rpn, [3, 5, '+'])

    def test_unary_pass_shows_reduced_literal(self):
        # 9 -> 3 by sqrt, then 3 * 4; the nested search only sees 3
        result = find_solutions([9, 4], 12, '2')
        solution = result.exact_solutions[0]
        self.assertEqual(solution.value, 12)
        self.assertEqual(evaluate_rpn(solution.rpn), 12)
        self.assertNotIn('sqrt', solution.rpn)
        self.assertIn(3, solution.rpn)

    def test_factorial_substitution_at_top_level(self):
        result = find_solutions([3, 1], 7, '3')
        solution = result.exact_solutions[0]
        self.assertEqual(evaluate_rpn(solution.rpn), 7)
        self.assertIn(6, solution.rpn)

    def test_pure_sum_hits_target(self):
        result = find_solutions([1, 5], 15, '3')
        self.assertEqual(len(result.exact_solutions), 1)
        solution = result.exact_solutions[0]
        self.assertEqual(solution.type, 'sigma')
        self.assertEqual(solution.sigma, {'start': 1, 'end': 5, 'body': 'i'})
        self.assertEqual(solution.score, 100)
        self.assertEqual(solution.rpn, [])

    def test_sum_overrides_earlier_normal_solution(self):
        result = find_solutions([1, 5, 9, 9], 15, '3')
        solution = result.exact_solutions[0]
        self.assertEqual(solution.type, 'sigma')
        self.assertEqual(solution.value, 15)
        self.assertEqual(solution.sigma, {'start': 1, 'end': 5, 'body': 'i'})
        self.assertEqual(solution.score, 100)
        self.assertEqual(result.closest.distance, 0)

    def test_sum_combined_with_remaining_numbers(self):
        result = find_solutions([1, 10, 100], 155, '3')
        solution = result.exact_solutions[0]
        self.assertEqual(solution.type, 'sigma')
        self.assertEqual(solution.sigma, {'start': 1, 'end': 10, 'body': 'i'})
        self.assertEqual(solution.rpn, [55, 100, '+'])
        self.assertEqual(solution.expression, '55+100')
        self.assertEqual(solution.score, 103)

    def test_sum_merge_can_be_disabled(self):
        settings = SolverSettings(merge_sigma_subsolutions=False)
        result = find_solutions([1, 10, 100], 155, '3', settings)
        self.assertEqual(result.exact_solutions, [])

    def test_sum_only_at_top_level(self):
        result = find_solutions([1, 5], 15, '2')
        self.assertEqual(result.exact_solutions, [])

    def test_exact_solutions_bounded_and_sorted(self):
        for numbers, target, level in [([1, 2, 3, 4], 10, 'B'), ([2, 8], 4, '2'), ([1, 5], 15, '3')]:
            exact = find_solutions(numbers, target, level).exact_solutions
            self.assertLessEqual(len(exact), 3)
            scores = [s.score for s in exact]
            self.assertEqual(scores, sorted(scores))

    def test_every_candidate_is_non_negative_integer(self):
        result = find_solutions([7, 2, 3], 1, '1')
        for solution in result.exact_solutions + [result.closest]:
            value = evaluate_rpn(solution.rpn)
            self.assertIsInstance(value, int)
            self.assertGreaterEqual(value, 0)

    def test_huge_numbers_do_not_raise(self):
        result = find_solutions([10 ** 400, 2], 5, '2')
        self.assertEqual(result.exact_solutions, [])
        self.assertIsNotNone(result.closest)

    def test_large_search_announces_itself(self):
        # empty operator table keeps the search itself trivial
        solver = PuzzleSolver(SolverSettings(levels={'B': [], '1': [], '2': [], '3': []}))
        with self.assertLogs('puzzle.search', level='INFO') as logs:
            solver.solve([1, 2, 3, 4, 5], 15, '3')
        self.assertIn('several minutes', logs.output[0])

    def test_tree_shapes_mode(self):
        solver = PuzzleSolver(SolverSettings(shapes='trees'))
        result = solver.solve([10, 6, 3], 7, 'B')
        self.assertEqual(result.exact_solutions[0].value, 7)

    def test_solver_is_reusable(self):
        solver = PuzzleSolver()
        first = solver.solve([3, 5], 8, 'B')
        second = solver.solve([3, 5], 8, 'B')
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_result_to_dict(self):
        data = find_solutions([3, 5], 8, 'B').to_dict()
        self.assertEqual(set(data), {'exactSolutions', 'closest'})
        self.assertEqual(data['exactSolutions'][0]['rpn'], [3, 5, '+'])
        self.assertEqual(data['closest']['distance'], 0)


if __name__ == '__main__':
    unittest.main()
