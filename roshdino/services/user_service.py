from __future__ import annotations

import logging

from roshdino.models import AccountRole, User
from roshdino.services.leaderboard_service import LeaderboardService
from roshdino.services.reward_service import RewardService, reward_service
from roshdino.utils.errors import ForbiddenError, NotFoundError, ValidationError


logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = (AccountRole.MANAGER, AccountRole.ADMIN)


class UserService:

	def __init__(self, store, leaderboard: LeaderboardService, rewards: RewardService | None = None):
		self.store = store
		self.leaderboard = leaderboard
		self.rewards = rewards or reward_service

	def get_profile(self, user_id: str) -> dict:
		return self.store.get_user(user_id).to_dict()

	def get_rewards(self, user_id: str) -> dict:
		user = self.store.get_user(user_id)
		return {
			"badges": [b.to_dict() for b in user.badges],
			"certificates": [c.to_dict() for c in user.certificates],
		}

	def get_stats(self, user_id: str) -> dict:
		user = self.store.get_user(user_id)
		results = self.store.list_results(user_id=user_id)
		rank = self.leaderboard.get_user_rank(user_id)
		total = len(results)
		return {
			"points": user.points,
			"trainingProgress": user.training_progress,
			"trainingComplete": user.training_complete,
			"rank": rank["rank"],
			"badges": len(user.badges),
			"certificates": len(user.certificates),
			"quizStats": {
				"totalQuizzes": total,
				"averageScore": round(sum(r.score for r in results) / total, 2) if total else 0,
				"totalPoints": sum(r.points_earned for r in results),
				"passedQuizzes": sum(1 for r in results if r.passed),
				"totalTimeSpent": sum(r.time_spent for r in results),
			},
		}

	def provision(self, user_id: str, claims: dict) -> User:
		"""Create the profile for a verified account seen for the first time."""
		name = (claims.get("name") or "").strip()
		email = claims.get("email") or ""
		first_name, _, last_name = name.partition(" ")
		user = User(
			user_id=user_id,
			username=name or email.split("@", 1)[0] or user_id,
			first_name=first_name,
			last_name=last_name.strip(),
		)
		user = self.store.create_user(user)
		logger.info("Provisioned profile for user %s", user_id)
		return user

	# ---------- Administration ----------
	def set_active(self, user_id: str, active: bool) -> dict:
		def _apply(user: User) -> User:
			user.is_active = active
			return user

		user = self.store.update_user_atomically(user_id, _apply)
		logger.info("User %s %s", user_id, "reactivated" if active else "deactivated")
		return user.to_dict()

	def adjust_points(self, user_id: str, delta) -> dict:
		if isinstance(delta, bool):
			raise ValidationError("Points must be a number")
		try:
			delta = int(delta)
		except (TypeError, ValueError):
			raise ValidationError("Points must be a number")

		def _apply(user: User) -> User:
			user.points = max(0, user.points + delta)
			return user

		user = self.store.update_user_atomically(user_id, _apply)
		logger.info("Points for user %s adjusted by %d to %d", user_id, delta, user.points)
		return {"userId": user.user_id, "username": user.username, "points": user.points}

	# ---------- Certificates ----------
	def get_certificate(self, result_id: str, caller: User) -> dict:
		result = self.store.get_result(result_id)
		if result.user_id != caller.user_id and caller.role not in PRIVILEGED_ROLES:
			raise ForbiddenError("Access denied")
		if not result.certificate_eligible:
			raise ValidationError("Certificate not eligible for this result")

		owner = caller if result.user_id == caller.user_id else self.store.get_user(result.user_id)
		certificate = next((c for c in owner.certificates if c.result_id == result_id), None)
		if certificate is None:
			try:
				quiz = self.store.get_quiz(result.quiz_id, include_inactive=True)
			except NotFoundError:
				raise NotFoundError("Quiz for this result no longer exists")
			certificate = self.rewards.certificate_for(quiz, result.role, result.score, result.completed_at, result.result_id)
		return {
			**certificate.to_dict(),
			"recipient": owner.full_name or owner.username,
			"completedAt": result.completed_at,
		}
