from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from roshdino.models import Question
from roshdino.utils.helpers import round_half_up


logger = logging.getLogger(__name__)


@dataclass
class ScoringRules:

	# Stands in for every missing answer; counts as incorrect unless a
	# question's correct option happens to be 0
	padding_answer: int = 0
	max_score: int = 100


@dataclass(frozen=True)
class ScoreBreakdown:

	score: int
	correct_points: int
	total_points: int
	correct_count: int
	correct_flags: tuple

	def to_dict(self) -> dict:
		return {
			"score": self.score,
			"correctPoints": self.correct_points,
			"totalPoints": self.total_points,
			"correctAnswers": self.correct_count,
			"correct": list(self.correct_flags),
		}


class ScoringService:

	def __init__(self, rules: ScoringRules | None = None):
		self.rules = rules or ScoringRules()

	def normalize_answers(self, answers: Sequence[int], question_count: int) -> List[int]:
		"""Align a submitted answer list with the quiz's questions.

		Missing tail entries are padded with ``rules.padding_answer`` and extra
		entries are dropped. A length mismatch is never an error.
		"""
		normalized = list(answers[:question_count])
		if len(normalized) < question_count:
			normalized.extend([self.rules.padding_answer] * (question_count - len(normalized)))
		if len(answers) != question_count:
			logger.debug(
				"Normalized %d answers to %d questions", len(answers), question_count
			)
		return normalized

	def calculate_score(self, questions: Sequence[Question], answers: Sequence[int]) -> ScoreBreakdown:
		answers = self.normalize_answers(answers, len(questions))
		correct_points = 0
		total_points = 0
		correct_count = 0
		correct_flags: List[bool] = []
		for question, selected in zip(questions, answers):
			total_points += question.points
			correct = selected == question.correct_answer
			correct_flags.append(correct)
			if correct:
				correct_points += question.points
				correct_count += 1
		if total_points <= 0:
			if questions:
				logger.warning("Quiz has %d questions but no points; scoring 0", len(questions))
			score = 0
		else:
			score = round_half_up(self.rules.max_score * correct_points / total_points)
			score = max(0, min(self.rules.max_score, score))
		return ScoreBreakdown(
			score=score,
			correct_points=correct_points,
			total_points=total_points,
			correct_count=correct_count,
			correct_flags=tuple(correct_flags),
		)


scoring_service = ScoringService()
