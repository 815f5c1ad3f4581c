from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from roshdino.models import AccountRole, Category, Difficulty, GameMode, Quiz, QuizResult, Role, User


@dataclass
class SubmissionCommit:
	"""Everything one submission writes, committed together or not at all."""

	result: QuizResult
	user: User
	quiz: Quiz
	outcome: Any = None


SubmissionWork = Callable[[Quiz, User], SubmissionCommit]


class Store(Protocol):

	def get_quiz(self, quiz_id: str, include_inactive: bool = False) -> Quiz: ...

	def list_quizzes(
		self,
		role: Role,
		difficulty: Optional[Difficulty] = None,
		category: Optional[Category] = None,
		limit: int = 10,
	) -> List[Quiz]: ...

	def save_quiz(self, quiz: Quiz) -> Quiz: ...

	def update_quiz_atomically(self, quiz_id: str, work: Callable[[Quiz], Quiz]) -> Quiz: ...

	def get_user(self, user_id: str) -> User: ...

	def save_user(self, user: User) -> User: ...

	def create_user(self, user: User) -> User:
		"""Insert ``user`` unless the id is taken; returns the stored document."""
		...

	def list_users(self, active_only: bool = True, role: Optional[AccountRole] = None) -> List[User]: ...

	def update_user_atomically(self, user_id: str, work: Callable[[User], User]) -> User: ...

	def get_result(self, result_id: str) -> QuizResult: ...

	def list_results(
		self,
		user_id: Optional[str] = None,
		quiz_id: Optional[str] = None,
		game_mode: Optional[GameMode] = None,
		role: Optional[Role] = None,
		limit: Optional[int] = None,
	) -> List[QuizResult]: ...

	def run_submission(self, quiz_id: str, user_id: str, work: SubmissionWork) -> SubmissionCommit: ...


def create_store(config) -> Store:
	max_attempts = config.get("MAX_TRANSACTION_ATTEMPTS", 5)
	if config.get("DEMO_MODE"):
		from roshdino.services.demo_store import DemoStore

		return DemoStore(max_attempts=max_attempts, seed=True)
	from roshdino.services.firebase_service import FirebaseService

	return FirebaseService(max_attempts=max_attempts)
