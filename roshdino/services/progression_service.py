from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from roshdino.models import GameMode, User
from roshdino.utils.helpers import round_half_up


logger = logging.getLogger(__name__)


class TrainingState(str, Enum):

	TRAINING = "training"
	COMPLETE = "complete"

	@classmethod
	def of(cls, user: User) -> "TrainingState":
		return cls.COMPLETE if user.training_complete else cls.TRAINING


@dataclass
class ProgressionRules:

	contest_points_per_percent: int = 10
	practice_points_per_percent: int = 5
	# Ten raw practice points move training progress by one percentage point
	points_per_progress_point: int = 10
	max_progress: int = 100


@dataclass(frozen=True)
class ProgressionOutcome:
	"""Result of one transition. ``points_recorded`` goes on the attempt,
	``points_credited`` onto the leaderboard total."""

	game_mode: GameMode
	state: TrainingState
	training_progress: float
	training_complete: bool
	points: int
	points_recorded: int
	points_credited: int
	progress_gained: float
	completed_now: bool

	@property
	def gated(self) -> bool:
		return self.game_mode is GameMode.CONTEST and self.state is TrainingState.TRAINING


class ProgressionService:

	def __init__(self, rules: ProgressionRules | None = None):
		self.rules = rules or ProgressionRules()

	def points_earned(self, score: int, game_mode: GameMode) -> int:
		if game_mode is GameMode.CONTEST:
			return round_half_up(score * self.rules.contest_points_per_percent)
		return round_half_up(score * self.rules.practice_points_per_percent)

	def apply(self, user: User, game_mode: GameMode, points_raw: int) -> ProgressionOutcome:
		state = TrainingState.of(user)
		progress = user.training_progress
		points = user.points
		credited = 0
		completed_now = False

		if game_mode is GameMode.PRACTICE:
			if state is TrainingState.TRAINING:
				progress = min(self.rules.max_progress, progress + points_raw / self.rules.points_per_progress_point)
				if progress >= self.rules.max_progress:
					progress = self.rules.max_progress
					state = TrainingState.COMPLETE
					completed_now = True
		elif game_mode is GameMode.CONTEST:
			if state is TrainingState.COMPLETE:
				credited = points_raw
				points += credited
			else:
				logger.info(
					"Contest points withheld for user %s: training incomplete (%s%%)",
					user.user_id,
					progress,
				)
		else:
			raise ValueError(f"Unhandled game mode: {game_mode!r}")

		return ProgressionOutcome(
			game_mode=game_mode,
			state=state,
			training_progress=progress,
			training_complete=state is TrainingState.COMPLETE,
			points=points,
			points_recorded=points_raw,
			points_credited=credited,
			progress_gained=progress - user.training_progress,
			completed_now=completed_now,
		)


progression_service = ProgressionService()
