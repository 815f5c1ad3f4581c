from __future__ import annotations

import logging
from typing import List, Optional

from roshdino.models import Category, Difficulty, GameMode, Quiz, Role
from roshdino.utils.errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)

# Usage statistics, authorship and the version are owned by the server
EDITABLE_FIELDS = (
	"title",
	"description",
	"role",
	"difficulty",
	"category",
	"questions",
	"tags",
	"timeLimit",
	"passingScore",
	"isActive",
)


def _editable(body: dict) -> dict:
	data = {k: body[k] for k in EDITABLE_FIELDS if k in body}
	if "questions" in data:
		questions = data["questions"]
		if not isinstance(questions, list) or not all(isinstance(q, dict) for q in questions):
			raise ValidationError("questions must be a list of objects")
		for i, q in enumerate(questions):
			if not isinstance(q.get("options"), list):
				raise ValidationError(f"Question {i + 1} is invalid")
	if "tags" in data and not isinstance(data["tags"], list):
		raise ValidationError("tags must be a list of strings")
	return data


class QuizService:

	def __init__(self, store):
		self.store = store

	def create(self, body: dict, created_by: str) -> dict:
		data = _editable(body)
		data.pop("isActive", None)
		quiz = Quiz.from_dict({**data, "createdBy": created_by})
		quiz = self.store.save_quiz(quiz)
		logger.info("Quiz %s created by %s with %d questions", quiz.quiz_id, created_by, quiz.question_count)
		return {
			"quizId": quiz.quiz_id,
			"title": quiz.title,
			"role": quiz.role.value,
			"difficulty": quiz.difficulty.value,
			"questionCount": quiz.question_count,
		}

	def update(self, quiz_id: str, body: dict) -> dict:
		changes = _editable(body)

		def _apply(quiz: Quiz) -> Quiz:
			updated = Quiz.from_dict({**quiz.to_dict(), **changes})
			updated.validate()
			return updated

		quiz = self.store.update_quiz_atomically(quiz_id, _apply)
		logger.info("Quiz %s updated: %s", quiz_id, ", ".join(sorted(changes)) or "no changes")
		return quiz.to_dict()

	def get_quiz_for_client(self, quiz_id: str) -> dict:
		return self.store.get_quiz(quiz_id).to_client_dict()

	def list_for_role(
		self,
		role: Role,
		difficulty: Optional[Difficulty] = None,
		category: Optional[Category] = None,
		limit: int = 10,
	) -> List[dict]:
		quizzes = self.store.list_quizzes(role, difficulty=difficulty, category=category, limit=limit)
		return [
			{
				"quizId": q.quiz_id,
				"title": q.title,
				"description": q.description,
				"difficulty": q.difficulty.value,
				"category": q.category.value,
				"questionCount": q.question_count,
				"tags": list(q.tags),
			}
			for q in quizzes
		]

	def history(
		self,
		user_id: str,
		game_mode: Optional[GameMode] = None,
		role: Optional[Role] = None,
		limit: int = 20,
	) -> List[dict]:
		results = self.store.list_results(user_id=user_id, game_mode=game_mode, role=role, limit=limit)
		quizzes = {}
		items = []
		for result in results:
			if result.quiz_id not in quizzes:
				try:
					quizzes[result.quiz_id] = self.store.get_quiz(result.quiz_id, include_inactive=True)
				except NotFoundError:
					quizzes[result.quiz_id] = None
			quiz: Quiz | None = quizzes[result.quiz_id]
			item = result.to_dict()
			item["quiz"] = {
				"quizId": quiz.quiz_id,
				"title": quiz.title,
				"role": quiz.role.value,
				"difficulty": quiz.difficulty.value,
				"category": quiz.category.value,
			} if quiz else None
			items.append(item)
		return items

	def deactivate(self, quiz_id: str) -> dict:
		def _apply(quiz: Quiz) -> Quiz:
			quiz.is_active = False
			return quiz

		quiz = self.store.update_quiz_atomically(quiz_id, _apply)
		logger.info("Quiz %s deactivated after %d attempts", quiz_id, quiz.attempts)
		return {"quizId": quiz.quiz_id, "isActive": quiz.is_active}
