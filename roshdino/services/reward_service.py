from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from roshdino.models import Badge, Certificate, GameMode, Quiz, Role


class BadgePolicy(str, Enum):

	APPEND = "append"
	DEDUPE = "dedupe"


@dataclass(frozen=True)
class BadgeTier:

	min_score: int
	name: str
	description: str


@dataclass
class RewardRules:

	certificate_threshold: int = 85
	# Highest tier first; the first match wins
	badge_tiers: Tuple[BadgeTier, ...] = field(default_factory=lambda: (
		BadgeTier(90, "Quiz Master", "Achieved 90% or higher in a contest quiz"),
		BadgeTier(85, "High Achiever", "Achieved 85% or higher in a contest quiz"),
	))
	certificate_url_template: str = "/certificates/{result_id}"


@dataclass(frozen=True)
class RewardDecision:

	certificate_eligible: bool
	badge: Optional[BadgeTier]


class RewardService:

	def __init__(self, rules: RewardRules | None = None, policy: BadgePolicy = BadgePolicy.APPEND):
		self.rules = rules or RewardRules()
		self.policy = policy

	def is_certificate_eligible(self, score: int) -> bool:
		return score >= self.rules.certificate_threshold

	def badge_for(self, score: int, game_mode: GameMode) -> Optional[BadgeTier]:
		if game_mode is not GameMode.CONTEST:
			return None
		for tier in self.rules.badge_tiers:
			if score >= tier.min_score:
				return tier
		return None

	def decide(self, score: int, game_mode: GameMode) -> RewardDecision:
		return RewardDecision(
			certificate_eligible=self.is_certificate_eligible(score),
			badge=self.badge_for(score, game_mode),
		)

	def award_badge(
		self,
		badges: List[Badge],
		tier: BadgeTier,
		earned_at: datetime,
		result_id: str | None = None,
	) -> Optional[Badge]:
		"""Append ``tier`` to ``badges`` in place and return the new entry.

		Under ``BadgePolicy.DEDUPE`` nothing is appended when a badge of the
		same name is already held, and None is returned.
		"""
		if self.policy is BadgePolicy.DEDUPE and any(b.name == tier.name for b in badges):
			return None
		badge = Badge(name=tier.name, description=tier.description, earned_at=earned_at, result_id=result_id)
		badges.append(badge)
		return badge

	def certificate_title(self, quiz: Quiz, role: Role) -> str:
		return f"{quiz.title} - {role.value.capitalize()}"

	def certificate_for(self, quiz: Quiz, role: Role, score: int, issued_at: datetime, result_id: str) -> Certificate:
		return Certificate(
			name=self.certificate_title(quiz, role),
			score=score,
			issued_at=issued_at,
			result_id=result_id,
			certificate_url=self.rules.certificate_url_template.format(result_id=result_id),
		)


reward_service = RewardService()
