"""In-memory store used in demo mode and by the test suite.

Documents are kept as plain dicts and copied on every read, so callers
always work on snapshots. Writes to users and quizzes are compare-and-swap
on their ``version`` field; a unit of work that loses a race is re-run
against fresh snapshots up to ``max_attempts`` times.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from typing import Callable, Dict, List, Optional

from roshdino.models import AccountRole, Category, Difficulty, GameMode, Quiz, QuizResult, Role, User
from roshdino.services.store import SubmissionCommit, SubmissionWork
from roshdino.utils.demo_data import DEMO_QUIZZES, DEMO_USERS
from roshdino.utils.errors import ConcurrencyConflict, NotFoundError, TransientError
from roshdino.utils.helpers import utc_now


logger = logging.getLogger(__name__)


class DemoStore:

	def __init__(self, max_attempts: int = 5, seed: bool = False):
		self.max_attempts = max(1, max_attempts)
		self._lock = threading.Lock()
		self._users: Dict[str, dict] = {}
		self._quizzes: Dict[str, dict] = {}
		self._results: Dict[str, dict] = {}
		if seed:
			self.seed()

	def seed(self) -> None:
		for doc in DEMO_USERS:
			self.save_user(User.from_dict(doc))
		for doc in DEMO_QUIZZES:
			self.save_quiz(Quiz.from_dict(doc))

	# ---------- Quizzes ----------
	def get_quiz(self, quiz_id: str, include_inactive: bool = False) -> Quiz:
		with self._lock:
			doc = copy.deepcopy(self._quizzes.get(quiz_id))
		if doc is None or (not include_inactive and not doc.get("isActive", True)):
			raise NotFoundError("Quiz not found")
		return Quiz.from_dict(doc)

	def list_quizzes(
		self,
		role: Role,
		difficulty: Optional[Difficulty] = None,
		category: Optional[Category] = None,
		limit: int = 10,
	) -> List[Quiz]:
		with self._lock:
			docs = copy.deepcopy(list(self._quizzes.values()))
		quizzes = [Quiz.from_dict(d) for d in docs]
		quizzes = [
			q for q in quizzes
			if q.is_active and q.role is role
			and (difficulty is None or q.difficulty is difficulty)
			and (category is None or q.category is category)
		]
		quizzes.sort(key=lambda q: q.created_at or utc_now(), reverse=True)
		return quizzes[:limit]

	def save_quiz(self, quiz: Quiz) -> Quiz:
		quiz.validate()
		if not quiz.quiz_id:
			quiz.quiz_id = uuid.uuid4().hex
		if quiz.created_at is None:
			quiz.created_at = utc_now()
		with self._lock:
			self._quizzes[quiz.quiz_id] = quiz.to_dict()
		return quiz

	def update_quiz_atomically(self, quiz_id: str, work: Callable[[Quiz], Quiz]) -> Quiz:
		def attempt() -> Quiz:
			quiz = self.get_quiz(quiz_id, include_inactive=True)
			expected = quiz.version
			quiz = work(quiz)
			with self._lock:
				self._check_version(self._quizzes, quiz_id, expected)
				quiz.version = expected + 1
				self._quizzes[quiz_id] = quiz.to_dict()
			return quiz

		return self._with_retries(f"quiz {quiz_id}", attempt)

	# ---------- Users ----------
	def get_user(self, user_id: str) -> User:
		with self._lock:
			doc = copy.deepcopy(self._users.get(user_id))
		if doc is None:
			raise NotFoundError("User not found")
		return User.from_dict(doc)

	def save_user(self, user: User) -> User:
		if not user.user_id:
			user.user_id = uuid.uuid4().hex
		with self._lock:
			self._users[user.user_id] = user.to_dict()
		return user

	def create_user(self, user: User) -> User:
		with self._lock:
			existing = copy.deepcopy(self._users.get(user.user_id))
			if existing is None:
				self._users[user.user_id] = user.to_dict()
		return User.from_dict(existing) if existing is not None else user

	def list_users(self, active_only: bool = True, role: Optional[AccountRole] = None) -> List[User]:
		with self._lock:
			docs = copy.deepcopy(list(self._users.values()))
		users = [User.from_dict(d) for d in docs]
		return [
			u for u in users
			if (not active_only or u.is_active) and (role is None or u.role is role)
		]

	def update_user_atomically(self, user_id: str, work: Callable[[User], User]) -> User:
		def attempt() -> User:
			user = self.get_user(user_id)
			expected = user.version
			user = work(user)
			with self._lock:
				self._check_version(self._users, user_id, expected)
				user.version = expected + 1
				self._users[user_id] = user.to_dict()
			return user

		return self._with_retries(f"user {user_id}", attempt)

	# ---------- Results ----------
	def get_result(self, result_id: str) -> QuizResult:
		with self._lock:
			doc = copy.deepcopy(self._results.get(result_id))
		if doc is None:
			raise NotFoundError("Quiz result not found")
		return QuizResult.from_dict(doc)

	def list_results(
		self,
		user_id: Optional[str] = None,
		quiz_id: Optional[str] = None,
		game_mode: Optional[GameMode] = None,
		role: Optional[Role] = None,
		limit: Optional[int] = None,
	) -> List[QuizResult]:
		with self._lock:
			docs = copy.deepcopy(list(self._results.values()))
		results = [
			QuizResult.from_dict(d) for d in docs
			if (user_id is None or d["userId"] == user_id)
			and (quiz_id is None or d["quizId"] == quiz_id)
			and (game_mode is None or d["gameMode"] == game_mode.value)
			and (role is None or d["role"] == role.value)
		]
		results.sort(key=lambda r: r.completed_at, reverse=True)
		return results[:limit] if limit is not None else results

	# ---------- Submissions ----------
	def run_submission(self, quiz_id: str, user_id: str, work: SubmissionWork) -> SubmissionCommit:
		def attempt() -> SubmissionCommit:
			quiz = self.get_quiz(quiz_id)
			user = self.get_user(user_id)
			quiz_version, user_version = quiz.version, user.version
			commit = work(quiz, user)
			self._commit_submission(commit, quiz_version, user_version)
			return commit

		return self._with_retries(f"submission {user_id}/{quiz_id}", attempt)

	def _commit_submission(self, commit: SubmissionCommit, quiz_version: int, user_version: int) -> None:
		with self._lock:
			self._check_version(self._quizzes, commit.quiz.quiz_id, quiz_version)
			self._check_version(self._users, commit.user.user_id, user_version)
			commit.quiz.version = quiz_version + 1
			commit.user.version = user_version + 1
			self._results[commit.result.result_id] = commit.result.to_dict()
			self._users[commit.user.user_id] = commit.user.to_dict()
			self._quizzes[commit.quiz.quiz_id] = commit.quiz.to_dict()

	# ---------- Concurrency ----------
	@staticmethod
	def _check_version(collection: Dict[str, dict], key: str, expected: int) -> None:
		# Caller holds the lock
		doc = collection.get(key)
		if doc is None:
			raise NotFoundError("Document was removed")
		actual = doc.get("version", 0)
		if actual != expected:
			raise ConcurrencyConflict(key, expected, actual)

	def _with_retries(self, label: str, attempt):
		for n in range(1, self.max_attempts + 1):
			try:
				return attempt()
			except ConcurrencyConflict as e:
				logger.warning("Write conflict on %s (attempt %d/%d): %s", label, n, self.max_attempts, e)
		raise TransientError("The update could not be committed, please retry")
