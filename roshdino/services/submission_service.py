from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from roshdino.models import AnswerRecord, Certificate, GameMode, Quiz, QuizResult, Role, User
from roshdino.services.notification_service import Events, NotificationService
from roshdino.services.progression_service import ProgressionService, progression_service
from roshdino.services.reward_service import RewardService, reward_service
from roshdino.services.scoring_service import ScoringService, scoring_service
from roshdino.services.store import Store, SubmissionCommit
from roshdino.utils.errors import ValidationError
from roshdino.utils.helpers import parse_enum, round_half_up, utc_now


logger = logging.getLogger(__name__)


def _option_index(value):
	# None marks an unanswered question; 2.0 is the same choice as 2
	if value is None:
		return None
	if isinstance(value, float) and value.is_integer():
		return int(value)
	if isinstance(value, bool) or not isinstance(value, int):
		raise ValidationError("Answers must be option indices")
	return value


@dataclass(frozen=True)
class SubmissionRequest:

	quiz_id: str
	answers: tuple
	game_mode: GameMode
	role: Role
	time_spent: float

	@classmethod
	def from_payload(cls, body: dict, quiz_id: str | None = None) -> "SubmissionRequest":
		if not isinstance(body, dict):
			raise ValidationError("Request body must be a JSON object")
		quiz_id = quiz_id or body.get("quizId")
		if not quiz_id or not isinstance(quiz_id, str):
			raise ValidationError("Quiz ID is required")

		answers = body.get("answers")
		if not isinstance(answers, list):
			raise ValidationError("Answers must be an array")
		answers = [_option_index(a) for a in answers]

		game_mode = parse_enum(GameMode, body.get("gameMode"), "gameMode")
		role = parse_enum(Role, body.get("role"), "role")

		time_spent = body.get("timeSpent")
		if isinstance(time_spent, bool):
			raise ValidationError("Time spent must be a number")
		try:
			time_spent = float(time_spent)
		except (TypeError, ValueError):
			raise ValidationError("Time spent must be a number")
		if not math.isfinite(time_spent) or time_spent < 0:
			raise ValidationError("Time spent must be a non-negative number")

		return cls(
			quiz_id=quiz_id,
			answers=tuple(answers),
			game_mode=game_mode,
			role=role,
			time_spent=time_spent,
		)


@dataclass
class SubmissionOutcome:

	result: QuizResult
	user: User
	quiz: Quiz
	correct_count: int
	correct_points: int
	total_points: int
	points_credited: int
	progress_gained: float
	training_completed: bool
	points_withheld: bool
	badges_awarded: List[str] = field(default_factory=list)
	certificate: Optional[Certificate] = None

	@property
	def points_earned(self) -> int:
		# Practice points drive progress, contest points drive the leaderboard
		if self.result.game_mode is GameMode.PRACTICE:
			return self.result.points_earned
		return self.points_credited

	def to_dict(self) -> dict:
		return {
			"resultId": self.result.result_id,
			"score": self.result.score,
			"passed": self.result.passed,
			"pointsEarned": self.points_earned,
			"pointsRecorded": self.result.points_earned,
			"pointsWithheld": self.points_withheld,
			"certificateEligible": self.result.certificate_eligible,
			"correctAnswers": self.correct_count,
			"correctPoints": self.correct_points,
			"totalPoints": self.total_points,
			"totalQuestions": self.quiz.question_count,
			"timeSpentMinutes": round_half_up(self.result.time_spent / 60),
			"progressGained": self.progress_gained,
			"trainingCompleted": self.training_completed,
			"badgesAwarded": list(self.badges_awarded),
			"certificate": self.certificate.to_dict() if self.certificate else None,
			"user": self.user.to_dict(),
		}


class SubmissionService:

	def __init__(
		self,
		store: Store,
		scoring: ScoringService | None = None,
		progression: ProgressionService | None = None,
		rewards: RewardService | None = None,
		notifications: NotificationService | None = None,
	):
		self.store = store
		self.scoring = scoring or scoring_service
		self.progression = progression or progression_service
		self.rewards = rewards or reward_service
		self.notifications = notifications or NotificationService()

	def submit(self, user_id: str, request: SubmissionRequest) -> SubmissionOutcome:
		commit = self.store.run_submission(
			request.quiz_id,
			user_id,
			lambda quiz, user: self._evaluate(quiz, user, request),
		)
		outcome: SubmissionOutcome = commit.outcome
		logger.info(
			"User %s submitted quiz %s (%s): score=%d recorded=%d credited=%d",
			user_id,
			request.quiz_id,
			request.game_mode.value,
			outcome.result.score,
			outcome.result.points_earned,
			outcome.points_credited,
		)
		self._publish(outcome)
		return outcome

	def _evaluate(self, quiz: Quiz, user: User, request: SubmissionRequest) -> SubmissionCommit:
		# Runs inside the store's unit of work and may be repeated on conflict,
		# so it only touches the snapshots it is given.
		answers = self.scoring.normalize_answers(request.answers, quiz.question_count)
		breakdown = self.scoring.calculate_score(quiz.questions, answers)
		score = breakdown.score
		passed = score >= quiz.passing_score
		points_raw = self.progression.points_earned(score, request.game_mode)
		decision = self.rewards.decide(score, request.game_mode)
		now = utc_now()

		per_question = round_half_up(request.time_spent / len(answers)) if answers else 0
		result = QuizResult(
			result_id=uuid.uuid4().hex,
			user_id=user.user_id,
			quiz_id=quiz.quiz_id,
			score=score,
			points_earned=points_raw,
			answers=tuple(
				AnswerRecord(
					question_index=i,
					selected_answer=selected,
					is_correct=breakdown.correct_flags[i],
					time_spent=per_question,
				)
				for i, selected in enumerate(answers)
			),
			game_mode=request.game_mode,
			role=request.role,
			time_spent=request.time_spent,
			passed=passed,
			certificate_eligible=decision.certificate_eligible,
			completed_at=now,
		)

		progression = self.progression.apply(user, request.game_mode, points_raw)
		user.training_progress = progression.training_progress
		user.training_complete = user.training_complete or progression.training_complete
		user.points = progression.points

		badges_awarded = []
		if decision.badge is not None:
			badge = self.rewards.award_badge(user.badges, decision.badge, now, result.result_id)
			if badge is not None:
				badges_awarded.append(badge.name)

		certificate = None
		if decision.certificate_eligible:
			certificate = self.rewards.certificate_for(quiz, request.role, score, now, result.result_id)
			user.certificates.append(certificate)

		quiz.average_score = (quiz.average_score * quiz.attempts + score) / (quiz.attempts + 1)
		quiz.attempts += 1

		outcome = SubmissionOutcome(
			result=result,
			user=user,
			quiz=quiz,
			correct_count=breakdown.correct_count,
			correct_points=breakdown.correct_points,
			total_points=breakdown.total_points,
			points_credited=progression.points_credited,
			progress_gained=progression.progress_gained,
			training_completed=progression.completed_now,
			points_withheld=progression.gated,
			badges_awarded=badges_awarded,
			certificate=certificate,
		)
		return SubmissionCommit(result=result, user=user, quiz=quiz, outcome=outcome)

	def _publish(self, outcome: SubmissionOutcome) -> None:
		result = outcome.result
		base = {"userId": result.user_id, "quizId": result.quiz_id, "resultId": result.result_id}
		self.notifications.publish(Events.QUIZ_COMPLETED, {
			**base,
			"score": result.score,
			"passed": result.passed,
			"gameMode": result.game_mode.value,
			"pointsEarned": outcome.points_earned,
		})
		for name in outcome.badges_awarded:
			self.notifications.publish(Events.BADGE_AWARDED, {**base, "badge": name})
		if outcome.training_completed:
			self.notifications.publish(Events.TRAINING_COMPLETED, base)
		if outcome.certificate is not None:
			self.notifications.publish(Events.CERTIFICATE_ELIGIBLE, {
				**base,
				"name": outcome.certificate.name,
				"score": outcome.certificate.score,
			})
