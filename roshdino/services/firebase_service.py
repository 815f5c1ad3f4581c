from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter

from roshdino.models import AccountRole, Category, Difficulty, GameMode, Quiz, QuizResult, Role, User
from roshdino.services.store import SubmissionCommit, SubmissionWork
from roshdino.utils.errors import APIError, NotFoundError, TransientError
from roshdino.utils.helpers import utc_now


logger = logging.getLogger(__name__)


@dataclass
class _Collections:
	USERS: str = "users"
	QUIZZES: str = "quizzes"
	RESULTS: str = "quiz_results"


class FirebaseService:
	"""Firestore-backed store.

	Every read-modify-write runs inside a Firestore transaction, which retries
	on contention up to ``max_attempts`` times before giving up.

	Queries on ``quiz_results`` need composite indexes on
	(userId, completedAt desc) and (quizId, gameMode, completedAt desc).
	"""

	def __init__(self, max_attempts: int = 5, db=None):
		# A ready client skips firebase_admin initialization
		self.db = db
		self._initialized = db is not None
		self.max_attempts = max(1, max_attempts)

	def _init_admin(self):
		if not firebase_admin._apps:  # type: ignore[attr-defined]
			cred_path = os.getenv("FIREBASE_CREDENTIALS_PATH", "./firebase-credentials.json")
			try:
				cred = credentials.Certificate(cred_path)
				firebase_admin.initialize_app(cred)
			except Exception as e:
				raise APIError("Firebase credentials missing or invalid", 500) from e

	def _ensure_init(self):
		if not self._initialized:
			self._init_admin()
			self.db = firestore.client()
			self._initialized = True

	def _collection(self, name: str):
		self._ensure_init()
		return self.db.collection(name)

	def _run_transaction(self, label: str, fn):
		transactional = firestore.transactional(fn)
		try:
			return transactional(self.db.transaction(max_attempts=self.max_attempts))
		except APIError:
			raise
		except Exception as e:
			logger.exception("Transaction for %s failed", label)
			raise TransientError("The update could not be committed, please retry") from e

	# ---------- Quizzes ----------
	def get_quiz(self, quiz_id: str, include_inactive: bool = False) -> Quiz:
		doc = self._collection(_Collections.QUIZZES).document(quiz_id).get()
		return self._quiz_from_snapshot(doc, include_inactive)

	@staticmethod
	def _quiz_from_snapshot(doc, include_inactive: bool = False) -> Quiz:
		if not doc.exists:
			raise NotFoundError("Quiz not found")
		quiz = Quiz.from_dict({**(doc.to_dict() or {}), "quizId": doc.id})
		if not include_inactive and not quiz.is_active:
			raise NotFoundError("Quiz not found")
		return quiz

	def list_quizzes(
		self,
		role: Role,
		difficulty: Optional[Difficulty] = None,
		category: Optional[Category] = None,
		limit: int = 10,
	) -> List[Quiz]:
		query = (
			self._collection(_Collections.QUIZZES)
			.where(filter=FieldFilter("role", "==", role.value))
			.where(filter=FieldFilter("isActive", "==", True))
		)
		if difficulty is not None:
			query = query.where(filter=FieldFilter("difficulty", "==", difficulty.value))
		if category is not None:
			query = query.where(filter=FieldFilter("category", "==", category.value))
		snaps = query.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit).get()
		return [self._quiz_from_snapshot(s) for s in snaps]

	def save_quiz(self, quiz: Quiz) -> Quiz:
		quiz.validate()
		if quiz.created_at is None:
			quiz.created_at = utc_now()
		if quiz.quiz_id:
			doc_ref = self._collection(_Collections.QUIZZES).document(quiz.quiz_id)
		else:
			doc_ref = self._collection(_Collections.QUIZZES).document()
			quiz.quiz_id = doc_ref.id
		doc_ref.set(quiz.to_dict())
		return quiz

	def update_quiz_atomically(self, quiz_id: str, work: Callable[[Quiz], Quiz]) -> Quiz:
		quiz_ref = self._collection(_Collections.QUIZZES).document(quiz_id)

		def _update(transaction):
			quiz = self._quiz_from_snapshot(quiz_ref.get(transaction=transaction), include_inactive=True)
			quiz = work(quiz)
			quiz.version += 1
			transaction.set(quiz_ref, quiz.to_dict())
			return quiz

		return self._run_transaction(f"quiz {quiz_id}", _update)

	# ---------- Users ----------
	def get_user(self, user_id: str) -> User:
		doc = self._collection(_Collections.USERS).document(user_id).get()
		return self._user_from_snapshot(doc)

	@staticmethod
	def _user_from_snapshot(doc) -> User:
		if not doc.exists:
			raise NotFoundError("User not found")
		return User.from_dict({**(doc.to_dict() or {}), "userId": doc.id})

	def save_user(self, user: User) -> User:
		if user.user_id:
			doc_ref = self._collection(_Collections.USERS).document(user.user_id)
		else:
			doc_ref = self._collection(_Collections.USERS).document()
			user.user_id = doc_ref.id
		doc_ref.set(user.to_dict())
		return user

	def create_user(self, user: User) -> User:
		doc_ref = self._collection(_Collections.USERS).document(user.user_id)
		try:
			doc_ref.create(user.to_dict())
		except AlreadyExists:
			# Another request provisioned the same account first
			return self._user_from_snapshot(doc_ref.get())
		return user

	def list_users(self, active_only: bool = True, role: Optional[AccountRole] = None) -> List[User]:
		query = self._collection(_Collections.USERS)
		if active_only:
			query = query.where(filter=FieldFilter("isActive", "==", True))
		if role is not None:
			query = query.where(filter=FieldFilter("role", "==", role.value))
		return [self._user_from_snapshot(s) for s in query.stream()]

	def update_user_atomically(self, user_id: str, work: Callable[[User], User]) -> User:
		user_ref = self._collection(_Collections.USERS).document(user_id)

		def _update(transaction):
			user = self._user_from_snapshot(user_ref.get(transaction=transaction))
			user = work(user)
			user.version += 1
			transaction.set(user_ref, user.to_dict())
			return user

		return self._run_transaction(f"user {user_id}", _update)

	# ---------- Results ----------
	def get_result(self, result_id: str) -> QuizResult:
		doc = self._collection(_Collections.RESULTS).document(result_id).get()
		if not doc.exists:
			raise NotFoundError("Quiz result not found")
		return QuizResult.from_dict({**(doc.to_dict() or {}), "resultId": doc.id})

	def list_results(
		self,
		user_id: Optional[str] = None,
		quiz_id: Optional[str] = None,
		game_mode: Optional[GameMode] = None,
		role: Optional[Role] = None,
		limit: Optional[int] = None,
	) -> List[QuizResult]:
		query = self._collection(_Collections.RESULTS)
		if user_id is not None:
			query = query.where(filter=FieldFilter("userId", "==", user_id))
		if quiz_id is not None:
			query = query.where(filter=FieldFilter("quizId", "==", quiz_id))
		if game_mode is not None:
			query = query.where(filter=FieldFilter("gameMode", "==", game_mode.value))
		if role is not None:
			query = query.where(filter=FieldFilter("role", "==", role.value))
		query = query.order_by("completedAt", direction=firestore.Query.DESCENDING)
		if limit is not None:
			query = query.limit(limit)
		return [
			QuizResult.from_dict({**(s.to_dict() or {}), "resultId": s.id})
			for s in query.stream()
		]

	# ---------- Submissions ----------
	def run_submission(self, quiz_id: str, user_id: str, work: SubmissionWork) -> SubmissionCommit:
		quiz_ref = self._collection(_Collections.QUIZZES).document(quiz_id)
		user_ref = self._collection(_Collections.USERS).document(user_id)

		def _submit(transaction):
			# Firestore requires every read before the first write
			quiz = self._quiz_from_snapshot(quiz_ref.get(transaction=transaction))
			user = self._user_from_snapshot(user_ref.get(transaction=transaction))
			commit = work(quiz, user)
			result_ref = self._collection(_Collections.RESULTS).document(commit.result.result_id)
			commit.user.version += 1
			commit.quiz.version += 1
			transaction.create(result_ref, commit.result.to_dict())
			transaction.set(user_ref, commit.user.to_dict())
			transaction.set(quiz_ref, commit.quiz.to_dict())
			return commit

		return self._run_transaction(f"submission {user_id}/{quiz_id}", _submit)
