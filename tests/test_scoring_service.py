import itertools
import unittest

from roshdino.services.scoring_service import ScoringRules, ScoringService
from tests.factories import make_quiz


class NormalizeAnswersTests(unittest.TestCase):
	def setUp(self) -> None:
		self.scoring = ScoringService()

	def test_short_answers_are_padded_with_zero(self) -> None:
		self.assertEqual(self.scoring.normalize_answers([2], 3), [2, 0, 0])

	def test_extra_answers_are_dropped(self) -> None:
		self.assertEqual(self.scoring.normalize_answers([1, 2, 3, 1], 3), [1, 2, 3])

	def test_matching_length_is_untouched(self) -> None:
		self.assertEqual(self.scoring.normalize_answers([1, 2, 3], 3), [1, 2, 3])

	def test_custom_padding_answer(self) -> None:
		scoring = ScoringService(ScoringRules(padding_answer=-1))
		self.assertEqual(scoring.normalize_answers([], 2), [-1, -1])


class CalculateScoreTests(unittest.TestCase):
	def setUp(self) -> None:
		self.scoring = ScoringService()
		self.quiz = make_quiz()

	def test_all_correct_scores_100(self) -> None:
		result = self.scoring.calculate_score(self.quiz.questions, [1, 2, 3])
		self.assertEqual(result.score, 100)
		self.assertEqual(result.correct_points, 30)
		self.assertEqual(result.total_points, 30)
		self.assertEqual(result.correct_count, 3)
		self.assertEqual(result.correct_flags, (True, True, True))

	def test_single_answer_is_normalized_before_scoring(self) -> None:
		short = self.scoring.calculate_score(self.quiz.questions, [1])
		explicit = self.scoring.calculate_score(self.quiz.questions, [1, 0, 0])
		self.assertEqual(short, explicit)
		self.assertEqual(short.score, 33)
		self.assertEqual(short.correct_flags, (True, False, False))

	def test_extra_answers_do_not_change_the_score(self) -> None:
		result = self.scoring.calculate_score(self.quiz.questions, [1, 2, 3, 0, 0])
		self.assertEqual(result.score, 100)

	def test_points_are_weighted_per_question(self) -> None:
		quiz = make_quiz(points=(46, 46, 8))
		result = self.scoring.calculate_score(quiz.questions, [1, 2, 0])
		self.assertEqual(result.score, 92)
		self.assertEqual(result.correct_points, 92)
		self.assertEqual(result.total_points, 100)

	def test_halves_round_up(self) -> None:
		quiz = make_quiz(points=(10,) * 8, correct=(1,) * 8)
		result = self.scoring.calculate_score(quiz.questions, [1])
		self.assertEqual(result.score, 13)

	def test_unanswered_question_is_incorrect(self) -> None:
		result = self.scoring.calculate_score(self.quiz.questions, [None, 2, 3])
		self.assertEqual(result.correct_flags, (False, True, True))
		self.assertEqual(result.score, 67)

	def test_empty_quiz_scores_zero(self) -> None:
		quiz = make_quiz(points=(), correct=())
		result = self.scoring.calculate_score(quiz.questions, [1, 2])
		self.assertEqual(result.score, 0)
		self.assertEqual(result.total_points, 0)

	def test_zero_point_quiz_scores_zero_and_warns(self) -> None:
		quiz = make_quiz(points=(0, 0), correct=(1, 2))
		with self.assertLogs("roshdino.services.scoring_service", level="WARNING"):
			result = self.scoring.calculate_score(quiz.questions, [1, 2])
		self.assertEqual(result.score, 0)

	def test_scoring_is_deterministic(self) -> None:
		answers = [1, 0, 3]
		first = self.scoring.calculate_score(self.quiz.questions, answers)
		for _ in range(5):
			self.assertEqual(self.scoring.calculate_score(self.quiz.questions, answers), first)

	def test_score_stays_within_bounds(self) -> None:
		quiz = make_quiz(points=(5, 10, 15))
		for answers in itertools.product(range(4), repeat=3):
			score = self.scoring.calculate_score(quiz.questions, list(answers)).score
			self.assertGreaterEqual(score, 0)
			self.assertLessEqual(score, 100)


if __name__ == "__main__":
	unittest.main()
